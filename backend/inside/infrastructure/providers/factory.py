"""Provider factory for the analysis pipeline.

Environment-based provider selection.
Strategy:
- .env (runtime): LLM_PROVIDER=openai, PRODUCT_PROVIDER=openfoodfacts
- tests / offline development: LLM_PROVIDER=stub, PRODUCT_PROVIDER=stub

Unlike a key check at startup, a missing OpenAI key does not stop the
service: each analysis call reports MISSING_CREDENTIAL on its own.

Usage:
    from inside.infrastructure.providers.factory import (
        create_llm_gateway,
        create_product_lookup,
    )

    gateway = create_llm_gateway()
    lookup = create_product_lookup()
"""

from typing import Union

from inside.infrastructure.ai.openai.client import OpenAIChatGateway
from inside.infrastructure.config import (
    get_llm_provider,
    get_llm_timeout_s,
    get_off_base_url,
    get_off_timeout_s,
    get_openai_base_url,
    get_product_provider,
    get_secrets_file,
)
from inside.infrastructure.external_apis.openfoodfacts.client import OpenFoodFactsClient
from inside.infrastructure.providers.stub_llm_gateway import StubLLMGateway
from inside.infrastructure.providers.stub_product_lookup import StubProductLookup
from inside.infrastructure.secrets import SecretStore


def create_llm_gateway() -> Union[OpenAIChatGateway, StubLLMGateway]:
    """Create LLM gateway based on LLM_PROVIDER env var.

    Environment variable: LLM_PROVIDER
    Values:
        - "openai": OpenAI chat completions (default)
        - "stub": Stub gateway

    Raises:
        ValueError: On an unknown provider name
    """
    mode = get_llm_provider()

    if mode == "openai":
        return OpenAIChatGateway(
            secret_store=SecretStore(get_secrets_file()),
            base_url=get_openai_base_url(),
            timeout_s=get_llm_timeout_s(),
        )
    if mode == "stub":
        return StubLLMGateway()

    raise ValueError(f"Unknown LLM_PROVIDER {mode!r}, expected 'openai' or 'stub'")


def create_product_lookup() -> Union[OpenFoodFactsClient, StubProductLookup]:
    """Create product lookup based on PRODUCT_PROVIDER env var.

    Environment variable: PRODUCT_PROVIDER
    Values:
        - "openfoodfacts": Open Food Facts API (default, no key required)
        - "stub": Stub lookup

    Raises:
        ValueError: On an unknown provider name
    """
    mode = get_product_provider()

    if mode == "openfoodfacts":
        return OpenFoodFactsClient(base_url=get_off_base_url(), timeout_s=get_off_timeout_s())
    if mode == "stub":
        return StubProductLookup()

    raise ValueError(
        f"Unknown PRODUCT_PROVIDER {mode!r}, expected 'openfoodfacts' or 'stub'"
    )
