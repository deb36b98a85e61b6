"""OpenAI chat-completion gateway - Implements ILLMGateway port.

Key Features:
- Credential resolved per call from the local secret store
- Single POST per call, 60s timeout, no automatic retry
- Raw envelope parsing: missing fields surface as MALFORMED_ENVELOPE
- All SDK / transport exceptions translated to GatewayError
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional

import httpx
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    OpenAIError,
)

from inside.domain.analysis.exceptions.domain_errors import (
    GatewayError,
    GatewayErrorKind,
)
from inside.domain.analysis.ports.llm_gateway import CompletionOptions, UserContent
from inside.infrastructure.config import DEFAULT_OPENAI_BASE_URL
from inside.infrastructure.secrets import SecretStore

logger = logging.getLogger(__name__)


def extract_message_content(body: bytes) -> str:
    """
    Walk a chat-completion envelope to choices[0].message.content.

    Args:
        body: Raw HTTP response body

    Returns:
        Assistant message text

    Raises:
        GatewayError: NO_RESPONSE_BODY if empty, MALFORMED_ENVELOPE if any
            level is missing or has the wrong type

    Example:
        >>> extract_message_content(b'{"choices":[{"message":{"content":"hi"}}]}')
        'hi'
    """
    if not body or not body.strip():
        raise GatewayError(GatewayErrorKind.NO_RESPONSE_BODY, "Empty response body")

    try:
        envelope = json.loads(body)
    except ValueError as exc:
        raise GatewayError(
            GatewayErrorKind.MALFORMED_ENVELOPE, f"Response is not JSON: {exc}"
        ) from exc

    if not isinstance(envelope, dict):
        raise GatewayError(GatewayErrorKind.MALFORMED_ENVELOPE, "Envelope is not an object")

    choices = envelope.get("choices")
    if not isinstance(choices, list) or not choices:
        raise GatewayError(GatewayErrorKind.MALFORMED_ENVELOPE, "No completion choices")

    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        raise GatewayError(GatewayErrorKind.MALFORMED_ENVELOPE, "Choice has no message")

    content = message.get("content")
    if not isinstance(content, str):
        raise GatewayError(GatewayErrorKind.MALFORMED_ENVELOPE, "Message has no text content")

    return content


def validate_endpoint(base_url: str) -> str:
    """
    Check the endpoint is an absolute http(s) URL.

    Raises:
        GatewayError: INVALID_ENDPOINT
    """
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise GatewayError(GatewayErrorKind.INVALID_ENDPOINT, str(exc)) from exc

    if url.scheme not in ("http", "https") or not url.host:
        raise GatewayError(
            GatewayErrorKind.INVALID_ENDPOINT,
            f"Not an absolute http(s) URL: {base_url!r}",
        )
    return base_url.rstrip("/")


class OpenAIChatGateway:
    """
    OpenAI chat-completion client implementing ILLMGateway port.

    The gateway is the single point where network failures, rate limits and
    auth errors are caught. It never retries: the caller decides.

    Example:
        >>> async with OpenAIChatGateway(SecretStore("secrets.env")) as gateway:
        ...     text = await gateway.complete(
        ...         "Reply in JSON", "grilled chicken salad", CompletionOptions()
        ...     )
    """

    def __init__(
        self,
        secret_store: SecretStore,
        base_url: str = DEFAULT_OPENAI_BASE_URL,
        timeout_s: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize gateway.

        Args:
            secret_store: Source of the API key, queried on every call
            base_url: Chat-completion API root (".../v1")
            timeout_s: Upper bound on one call
            http_client: Optional pre-configured httpx client (for testing).
                Not closed by the gateway when injected.
        """
        self._secrets = secret_store
        self._base_url = base_url
        self._timeout_s = timeout_s
        self._http_client = http_client
        self._owns_http_client = http_client is None

    async def __aenter__(self) -> "OpenAIChatGateway":
        """Async context manager entry."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout_s))
            self._owns_http_client = True
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None

    @staticmethod
    def build_messages(
        system_prompt: Optional[str], content: UserContent
    ) -> List[Dict[str, Any]]:
        messages: List[Dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": content})
        return messages

    async def complete(
        self,
        system_prompt: Optional[str],
        content: UserContent,
        options: CompletionOptions,
    ) -> str:
        """
        Send one chat completion and return the assistant's raw text.

        Implements ILLMGateway.complete() port.

        Args:
            system_prompt: System instruction (omitted if None)
            content: User content, text or multi-part
            options: Model, max_tokens, temperature

        Returns:
            choices[0].message.content

        Raises:
            GatewayError: MISSING_CREDENTIAL, INVALID_ENDPOINT (both before any
                network I/O), TRANSPORT_FAILURE, NO_RESPONSE_BODY,
                MALFORMED_ENVELOPE
        """
        api_key = self._secrets.resolve_api_key()
        if not api_key:
            logger.warning("OpenAI API key missing, skipping request")
            raise GatewayError(
                GatewayErrorKind.MISSING_CREDENTIAL,
                "No OPENAI_API_KEY in the secrets file or app metadata",
            )

        base_url = validate_endpoint(self._base_url)

        if self._http_client is None:
            await self.__aenter__()

        client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=self._timeout_s,
            max_retries=0,
            http_client=self._http_client,
        )

        messages = self.build_messages(system_prompt, content)
        start_time = time.time()

        logger.info(
            "Calling chat completion",
            extra={
                "model": options.model,
                "max_tokens": options.max_tokens,
                "temperature": options.temperature,
                "multipart": isinstance(content, list),
            },
        )

        try:
            raw = await client.chat.completions.with_raw_response.create(
                model=options.model,
                messages=messages,  # type: ignore[arg-type]
                max_tokens=options.max_tokens,
                temperature=options.temperature,
            )
        except APITimeoutError as exc:
            logger.error(
                "Chat completion timed out",
                extra={"timeout_s": self._timeout_s},
            )
            raise GatewayError(
                GatewayErrorKind.TRANSPORT_FAILURE,
                f"Request timed out after {self._timeout_s:g}s",
            ) from exc
        except APIStatusError as exc:
            logger.error(
                "Chat completion rejected",
                extra={"status": exc.status_code, "error": str(exc)},
            )
            raise GatewayError(
                GatewayErrorKind.TRANSPORT_FAILURE,
                f"HTTP {exc.status_code}: {exc.message}",
            ) from exc
        except APIConnectionError as exc:
            logger.error("Chat completion connection failed", extra={"error": str(exc)})
            raise GatewayError(GatewayErrorKind.TRANSPORT_FAILURE, str(exc)) from exc
        except OpenAIError as exc:
            logger.error("Chat completion failed", extra={"error": str(exc)})
            raise GatewayError(GatewayErrorKind.TRANSPORT_FAILURE, str(exc)) from exc

        body = raw.http_response.content
        try:
            text = extract_message_content(body)
        except GatewayError as exc:
            logger.error(
                "Unexpected chat completion response",
                extra={"kind": exc.kind.value, "body_length": len(body)},
            )
            logger.debug(
                "Chat completion body",
                extra={"body": body[:500].decode("utf-8", "replace")},
            )
            raise

        processing_time_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "Chat completion received",
            extra={
                "model": options.model,
                "text_length": len(text),
                "processing_time_ms": processing_time_ms,
            },
        )
        logger.debug("Chat completion text", extra={"text": text})
        return text
