"""Configuration utilities for infrastructure layer.

All settings come from environment variables. A `.env` file in the working
directory is loaded once by `load_environment()` (application startup).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from inside.domain.analysis.ports.llm_gateway import CompletionOptions

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_OFF_BASE_URL = "https://world.openfoodfacts.org/api/v0/product"


def load_environment(env_file: Optional[Path] = None) -> bool:
    """
    Load variables from a .env file without overriding the process env.

    Returns:
        True if a file was found and loaded
    """
    path = env_file or Path.cwd() / ".env"
    if not path.exists():
        return False
    return load_dotenv(path, override=False)


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def get_llm_provider() -> str:
    """LLM_PROVIDER: "openai" (default) or "stub"."""
    return os.getenv("LLM_PROVIDER", "openai").lower()


def get_product_provider() -> str:
    """PRODUCT_PROVIDER: "openfoodfacts" (default) or "stub"."""
    return os.getenv("PRODUCT_PROVIDER", "openfoodfacts").lower()


def get_openai_base_url() -> str:
    return os.getenv("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL)


def get_llm_model() -> str:
    return os.getenv("INSIDE_LLM_MODEL", DEFAULT_MODEL)


def get_llm_timeout_s() -> float:
    """Upper bound on one chat completion call (default 60s)."""
    return _get_float("LLM_TIMEOUT_S", 60.0)


def get_secrets_file() -> Path:
    return Path(os.getenv("INSIDE_SECRETS_FILE", "secrets.env"))


def get_off_base_url() -> str:
    return os.getenv("OFF_BASE_URL", DEFAULT_OFF_BASE_URL)


def get_off_timeout_s() -> float:
    return _get_float("OFF_TIMEOUT_S", 8.0)


@dataclass(frozen=True)
class AnalysisOptions:
    """
    Sampling options for each orchestrator operation.

    Analysis calls run cold for determinism; suggestions run warm for variety.
    """

    describe: CompletionOptions
    image: CompletionOptions
    product: CompletionOptions
    suggestion: CompletionOptions

    @classmethod
    def defaults(cls, model: str = DEFAULT_MODEL) -> "AnalysisOptions":
        return cls(
            describe=CompletionOptions(model=model, max_tokens=700, temperature=0.2),
            image=CompletionOptions(model=model, max_tokens=900, temperature=0.15),
            product=CompletionOptions(model=model, max_tokens=600, temperature=0.15),
            suggestion=CompletionOptions(model=model, max_tokens=60, temperature=0.8),
        )

    @classmethod
    def from_env(cls) -> "AnalysisOptions":
        return cls.defaults(model=get_llm_model())
