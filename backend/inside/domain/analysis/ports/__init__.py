"""Ports (interfaces) for the safety analysis bounded context."""

from inside.domain.analysis.ports.llm_gateway import (
    CompletionOptions,
    ILLMGateway,
    UserContent,
)
from inside.domain.analysis.ports.product_lookup import IProductLookup

__all__ = ["CompletionOptions", "ILLMGateway", "IProductLookup", "UserContent"]
