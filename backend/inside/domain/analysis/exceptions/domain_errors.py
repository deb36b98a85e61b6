"""Domain exceptions for the safety analysis bounded context.

This module defines the exception hierarchy for analysis errors.
All domain exceptions inherit from AnalysisDomainError.
"""

from enum import Enum
from typing import Optional


class GatewayErrorKind(str, Enum):
    """Failure kinds surfaced by the analysis pipeline.

    Every kind is terminal for the call that produced it: nothing is
    retried internally.
    """

    MISSING_CREDENTIAL = "missing_credential"
    INVALID_ENDPOINT = "invalid_endpoint"
    NO_RESPONSE_BODY = "no_response_body"
    MALFORMED_ENVELOPE = "malformed_envelope"
    SCHEMA_MISMATCH = "schema_mismatch"
    TRANSPORT_FAILURE = "transport_failure"
    IMAGE_ENCODING_FAILURE = "image_encoding_failure"


class AnalysisDomainError(Exception):
    """Base exception for the analysis domain.

    Lets the API layer catch and translate every analysis failure uniformly.
    """

    pass


class GatewayError(AnalysisDomainError):
    """Raised when a single analysis call fails.

    Attributes:
        kind: Which step failed (see GatewayErrorKind)
        detail: Human readable diagnostic
        raw_text: Cleaned model output, only set for SCHEMA_MISMATCH so
            callers can fall back to showing it unstructured
        subject: Name of the analyzed item when it was known before the
            model answered (a looked-up product), else None

    Example:
        >>> try:
        ...     await orchestrator.analyze_description("pad thai", profile)
        ... except GatewayError as e:
        ...     if e.kind is GatewayErrorKind.SCHEMA_MISMATCH:
        ...         show_raw(e.raw_text)
    """

    def __init__(
        self,
        kind: GatewayErrorKind,
        detail: str = "",
        raw_text: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.detail = detail
        self.raw_text = raw_text
        self.subject = subject
        message = kind.value if not detail else f"{kind.value}: {detail}"
        super().__init__(message)


class ProductNotFoundError(AnalysisDomainError):
    """Raised when a barcode is unknown to the product database."""

    def __init__(self, barcode: str) -> None:
        self.barcode = barcode
        super().__init__(f"No product found for barcode {barcode}")
