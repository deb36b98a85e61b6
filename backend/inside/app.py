"""FastAPI application for the Inside analysis backend."""

from __future__ import annotations

import logging as _logging
import os
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from inside import __version__
from inside.api.analysis import router as analysis_router
from inside.application.analysis.orchestrator import SafetyAnalysisOrchestrator
from inside.infrastructure.config import (
    AnalysisOptions,
    get_llm_model,
    get_llm_provider,
    get_product_provider,
    get_secrets_file,
    load_environment,
)
from inside.infrastructure.providers.factory import (
    create_llm_gateway,
    create_product_lookup,
)
from inside.infrastructure.secrets import SecretStore, mask_secret

load_environment()

# --- Basic logging configuration (minimal) ---
_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_logging.basicConfig(
    level=getattr(_logging, _LOG_LEVEL, _logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

APP_VERSION = os.getenv("APP_VERSION", __version__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Build providers, enter their async contexts, and expose the orchestrator.

    Startup:
        - log config (key masked; a missing key is not fatal, each call
          reports missing_credential instead)
        - create gateway + product lookup via the provider factory
        - `async with` both so HTTP sessions live as long as the server
    Shutdown:
        - context managers close the sessions
    """
    logger = _logging.getLogger("startup")

    api_key = None
    if get_llm_provider() == "openai":
        api_key = SecretStore(get_secrets_file()).resolve_api_key()

    logger.info(
        "startup.config",
        extra={
            "llm_provider": get_llm_provider(),
            "product_provider": get_product_provider(),
            "model": get_llm_model(),
            "openai_key_present": bool(api_key),
            "openai_key_masked": mask_secret(api_key),
        },
    )

    gateway = create_llm_gateway()
    product_lookup = create_product_lookup()

    async with (
        gateway as initialized_gateway,  # type: ignore[attr-defined]
        product_lookup as initialized_lookup,  # type: ignore[attr-defined]
    ):
        app.state.orchestrator = SafetyAnalysisOrchestrator(
            gateway=initialized_gateway,
            product_lookup=initialized_lookup,
            options=AnalysisOptions.from_env(),
        )

        logger.info(
            "lifespan.clients_ready",
            extra={
                "gateway": type(initialized_gateway).__name__,
                "product_lookup": type(initialized_lookup).__name__,
            },
        )
        yield

        logger.info("lifespan.shutdown", extra={"status": "cleanup"})
        app.state.orchestrator = None


app = FastAPI(
    title="Inside Analysis Backend",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/version")
async def version() -> dict[str, str]:
    return {"version": APP_VERSION}


app.include_router(analysis_router)


def main() -> None:  # pragma: no cover
    import uvicorn

    uvicorn.run(
        "inside.app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
    )
