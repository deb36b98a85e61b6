"""Stub LLM gateway for local development and tests.

Returns canned responses without calling external APIs.
"""

import json
from typing import Any, Optional

from inside.domain.analysis.ports.llm_gateway import CompletionOptions, UserContent

STUB_ANALYSIS = {
    "name": "Garden Salad",
    "ingredients": "lettuce, tomato, cucumber, olive oil",
    "safetyScore": 8,
    "reason": "Stub analysis: no declared allergen detected.",
    "suggestions": "Ask for the dressing on the side.",
}

STUB_SUGGESTION = "Try a Vietnamese summer roll with rice paper, herbs and shrimp."


class StubLLMGateway:
    """
    Stub implementation of ILLMGateway.

    JSON-schema prompts get a fenced analysis object (so fence stripping is
    exercised end to end); suggestion prompts get plain text.
    """

    def __init__(self) -> None:
        self.calls = 0

    async def __aenter__(self) -> "StubLLMGateway":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        return None

    async def complete(
        self,
        system_prompt: Optional[str],
        content: UserContent,
        options: CompletionOptions,
    ) -> str:
        self.calls += 1
        if system_prompt and "STRICT JSON" in system_prompt:
            payload = dict(STUB_ANALYSIS)
            if "verifiedClaims" in system_prompt:
                payload.update({"labels": "", "verifiedClaims": ""})
            return "```json\n" + json.dumps(payload) + "\n```"
        return STUB_SUGGESTION
