"""Port (interface) for chat-completion gateways.

This port defines the contract that language-model backends
(e.g., OpenAI chat completions) must implement to be used by the
analysis orchestrator.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Union

# Plain text, or multi-part content (text segment + inline image reference)
UserContent = Union[str, List[Dict[str, Any]]]


@dataclass(frozen=True)
class CompletionOptions:
    """
    Per-call sampling options.

    Attributes:
        model: Backend model variant to target
        max_tokens: Caps response length
        temperature: 0.0 deterministic .. 1.0 creative. Analysis calls use
            low values (<= 0.2), suggestion calls use ~0.8 for variety.
    """

    model: str = "gpt-4o-mini"
    max_tokens: int = 700
    temperature: float = 0.2

    def __post_init__(self) -> None:
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(
                f"temperature must be between 0.0 and 2.0, got {self.temperature}"
            )


class ILLMGateway(Protocol):
    """
    Interface for chat-completion gateways.

    Implementations can be:
    - OpenAI chat completions (production)
    - Stub gateway (local development, tests)
    """

    async def complete(
        self,
        system_prompt: Optional[str],
        content: UserContent,
        options: CompletionOptions,
    ) -> str:
        """
        Perform one request/response cycle and return the assistant's text.

        Args:
            system_prompt: System instruction, omitted from the request if None
            content: User message content
            options: Model, token budget and temperature for this call

        Returns:
            Raw assistant message content

        Raises:
            GatewayError: On missing credentials, bad endpoint, transport
                failures or malformed responses. Never retried.
        """
        ...
