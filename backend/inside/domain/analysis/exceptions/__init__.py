"""Domain exceptions for the safety analysis bounded context."""

from inside.domain.analysis.exceptions.domain_errors import (
    AnalysisDomainError,
    GatewayError,
    GatewayErrorKind,
    ProductNotFoundError,
)

__all__ = [
    "AnalysisDomainError",
    "GatewayError",
    "GatewayErrorKind",
    "ProductNotFoundError",
]
