"""Shared test fixtures.

Tests never reach the network: HTTP adapters get an httpx.MockTransport,
the orchestrator gets AsyncMock or stub providers.
"""

import io

import pytest
from PIL import Image

from inside.domain.analysis.entities.dietary_profile import DietaryProfile


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials and provider settings out of tests."""
    for name in (
        "OPENAI_API_KEY",
        "OpenAIAPIKey",
        "LLM_PROVIDER",
        "PRODUCT_PROVIDER",
        "OPENAI_BASE_URL",
        "INSIDE_LLM_MODEL",
        "INSIDE_SECRETS_FILE",
        "LLM_TIMEOUT_S",
        "OFF_BASE_URL",
        "OFF_TIMEOUT_S",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def peanut_profile() -> DietaryProfile:
    """Profile allergic to peanuts, no diets."""
    return DietaryProfile(name="Sam", allergens=("Peanuts",))


@pytest.fixture
def empty_profile() -> DietaryProfile:
    return DietaryProfile()


@pytest.fixture
def png_with_alpha() -> bytes:
    """Small semi-transparent PNG."""
    img = Image.new("RGBA", (8, 8), (255, 0, 0, 128))
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
