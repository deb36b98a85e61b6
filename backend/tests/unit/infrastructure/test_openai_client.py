"""Unit tests for the OpenAI chat-completion gateway.

Tests focus on:
- Request shape (model, sampling options, messages, auth header)
- Envelope parsing (NO_RESPONSE_BODY, MALFORMED_ENVELOPE)
- Transport failures mapped to TRANSPORT_FAILURE, never retried
- Credential and endpoint checks before any network I/O

Note: The real SDK runs against an httpx.MockTransport, so no request
leaves the process.
"""

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from inside.domain.analysis.exceptions.domain_errors import (
    GatewayError,
    GatewayErrorKind,
)
from inside.domain.analysis.ports.llm_gateway import CompletionOptions
from inside.infrastructure.ai.openai.client import (
    OpenAIChatGateway,
    extract_message_content,
    validate_endpoint,
)
from inside.infrastructure.secrets import SecretStore

TEST_KEY = "sk-test-1234567890"
BASE_URL = "https://llm.example.test/v1"


def _envelope(content: Any) -> Dict[str, Any]:
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "model": "gpt-4o-mini",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


class RecordingHandler:
    """MockTransport handler that counts and records requests."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self._respond = respond
        self.requests: List[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)


@pytest.fixture
def key_store() -> SecretStore:
    return SecretStore(secrets_file=None, metadata={"OPENAI_API_KEY": TEST_KEY})


@pytest.fixture
def options() -> CompletionOptions:
    return CompletionOptions(model="gpt-4o-mini", max_tokens=700, temperature=0.2)


def _gateway(
    handler: RecordingHandler, store: SecretStore, base_url: str = BASE_URL
) -> OpenAIChatGateway:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenAIChatGateway(store, base_url=base_url, timeout_s=5.0, http_client=http_client)


class TestComplete:
    """Test successful completions."""

    @pytest.mark.asyncio
    async def test_returns_message_content(
        self, key_store: SecretStore, options: CompletionOptions
    ) -> None:
        handler = RecordingHandler(lambda r: httpx.Response(200, json=_envelope('{"a": 1}')))
        gateway = _gateway(handler, key_store)

        text = await gateway.complete("Output STRICT JSON only.", "grilled chicken salad", options)

        assert text == '{"a": 1}'
        assert handler.calls == 1

    @pytest.mark.asyncio
    async def test_request_shape(self, key_store: SecretStore, options: CompletionOptions) -> None:
        handler = RecordingHandler(lambda r: httpx.Response(200, json=_envelope("ok")))
        gateway = _gateway(handler, key_store)

        await gateway.complete("system text", "user text", options)

        request = handler.requests[0]
        body = json.loads(request.content)
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/chat/completions"
        assert request.headers["Authorization"] == f"Bearer {TEST_KEY}"
        assert body["model"] == "gpt-4o-mini"
        assert body["max_tokens"] == 700
        assert body["temperature"] == 0.2
        assert body["messages"] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]

    @pytest.mark.asyncio
    async def test_system_prompt_omitted_when_none(
        self, key_store: SecretStore, options: CompletionOptions
    ) -> None:
        handler = RecordingHandler(lambda r: httpx.Response(200, json=_envelope("ok")))
        gateway = _gateway(handler, key_store)

        await gateway.complete(None, "user text", options)

        body = json.loads(handler.requests[0].content)
        assert body["messages"] == [{"role": "user", "content": "user text"}]

    @pytest.mark.asyncio
    async def test_multipart_content_passed_through(
        self, key_store: SecretStore, options: CompletionOptions
    ) -> None:
        handler = RecordingHandler(lambda r: httpx.Response(200, json=_envelope("ok")))
        gateway = _gateway(handler, key_store)
        content = [
            {"type": "text", "text": "What is this?"},
            {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,AAAA"}},
        ]

        await gateway.complete("system", content, options)

        body = json.loads(handler.requests[0].content)
        assert body["messages"][1]["content"] == content


class TestEnvelopeErrors:
    """Test malformed responses."""

    @pytest.mark.asyncio
    async def test_empty_choices(self, key_store: SecretStore, options: CompletionOptions) -> None:
        handler = RecordingHandler(lambda r: httpx.Response(200, json={"choices": []}))
        gateway = _gateway(handler, key_store)

        with pytest.raises(GatewayError) as exc_info:
            await gateway.complete("system", "text", options)

        assert exc_info.value.kind is GatewayErrorKind.MALFORMED_ENVELOPE

    @pytest.mark.asyncio
    async def test_empty_body(self, key_store: SecretStore, options: CompletionOptions) -> None:
        handler = RecordingHandler(lambda r: httpx.Response(200, content=b""))
        gateway = _gateway(handler, key_store)

        with pytest.raises(GatewayError) as exc_info:
            await gateway.complete("system", "text", options)

        assert exc_info.value.kind is GatewayErrorKind.NO_RESPONSE_BODY

    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b"[1, 2]",
            b'{"choices": [{"index": 0}]}',
            json.dumps(_envelope(None)).encode(),
        ],
    )
    def test_extract_malformed(self, body: bytes) -> None:
        with pytest.raises(GatewayError) as exc_info:
            extract_message_content(body)

        assert exc_info.value.kind is GatewayErrorKind.MALFORMED_ENVELOPE

    def test_extract_content(self) -> None:
        assert extract_message_content(json.dumps(_envelope("hi")).encode()) == "hi"


class TestTransportErrors:
    """Test transport failures (never retried)."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 429, 500])
    async def test_http_error_status(
        self, status: int, key_store: SecretStore, options: CompletionOptions
    ) -> None:
        handler = RecordingHandler(
            lambda r: httpx.Response(status, json={"error": {"message": "nope"}})
        )
        gateway = _gateway(handler, key_store)

        with pytest.raises(GatewayError) as exc_info:
            await gateway.complete("system", "text", options)

        assert exc_info.value.kind is GatewayErrorKind.TRANSPORT_FAILURE
        assert str(status) in exc_info.value.detail
        assert handler.calls == 1

    @pytest.mark.asyncio
    async def test_timeout(self, key_store: SecretStore, options: CompletionOptions) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        handler = RecordingHandler(respond)
        gateway = _gateway(handler, key_store)

        with pytest.raises(GatewayError) as exc_info:
            await gateway.complete("system", "text", options)

        assert exc_info.value.kind is GatewayErrorKind.TRANSPORT_FAILURE
        assert handler.calls == 1

    @pytest.mark.asyncio
    async def test_connection_error(
        self, key_store: SecretStore, options: CompletionOptions
    ) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        handler = RecordingHandler(respond)
        gateway = _gateway(handler, key_store)

        with pytest.raises(GatewayError) as exc_info:
            await gateway.complete("system", "text", options)

        assert exc_info.value.kind is GatewayErrorKind.TRANSPORT_FAILURE


class TestPreflight:
    """Test checks that run before any network I/O."""

    @pytest.mark.asyncio
    async def test_missing_credential_makes_no_request(self, options: CompletionOptions) -> None:
        handler = RecordingHandler(lambda r: httpx.Response(200, json=_envelope("ok")))
        gateway = _gateway(handler, SecretStore(secrets_file=None, metadata={}))

        with pytest.raises(GatewayError) as exc_info:
            await gateway.complete("system", "text", options)

        assert exc_info.value.kind is GatewayErrorKind.MISSING_CREDENTIAL
        assert handler.calls == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("base_url", ["not a url", "ftp://llm.example.test/v1", ""])
    async def test_invalid_endpoint_makes_no_request(
        self, base_url: str, key_store: SecretStore, options: CompletionOptions
    ) -> None:
        handler = RecordingHandler(lambda r: httpx.Response(200, json=_envelope("ok")))
        gateway = _gateway(handler, key_store, base_url=base_url)

        with pytest.raises(GatewayError) as exc_info:
            await gateway.complete("system", "text", options)

        assert exc_info.value.kind is GatewayErrorKind.INVALID_ENDPOINT
        assert handler.calls == 0

    def test_validate_endpoint_strips_trailing_slash(self) -> None:
        assert validate_endpoint("https://api.openai.com/v1/") == "https://api.openai.com/v1"


class TestLifecycle:
    """Test async context manager behavior."""

    @pytest.mark.asyncio
    async def test_owned_client_closed_on_exit(self, key_store: SecretStore) -> None:
        gateway = OpenAIChatGateway(key_store, base_url=BASE_URL)

        async with gateway:
            assert gateway._http_client is not None

        assert gateway._http_client is None

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self, key_store: SecretStore) -> None:
        http_client = httpx.AsyncClient()
        gateway = OpenAIChatGateway(key_store, base_url=BASE_URL, http_client=http_client)

        async with gateway:
            pass

        assert not http_client.is_closed
        await http_client.aclose()
