"""Response normalization: raw model text -> typed analysis result.

Steps:
1. Strip markdown code fences the model may wrap around its JSON
2. Decode the cleaned text against the (product) analysis schema
3. Apply the shared defaulting policy (missing name, score, lists)
"""

import json
import logging
from typing import Any, Dict

from pydantic import ValidationError

from inside.domain.analysis.entities.analysis_result import (
    AnalysisResult,
    ProductAnalysisResult,
)
from inside.domain.analysis.entities.scanned_product import UNKNOWN_PRODUCT_NAME
from inside.domain.analysis.exceptions.domain_errors import (
    GatewayError,
    GatewayErrorKind,
)
from inside.infrastructure.ai.openai.models import (
    MealAnalysisPayload,
    ProductAnalysisPayload,
    split_ingredients,
)

logger = logging.getLogger(__name__)

UNKNOWN_MEAL_NAME = "Unknown Meal"

_FENCE = "```"


def _strip_fence_once(text: str) -> str:
    cleaned = text
    if cleaned.startswith(_FENCE):
        newline = cleaned.find("\n")
        # Fence line carries an optional tag ("json", " json", "json title=x").
        cleaned = cleaned[newline + 1 :] if newline != -1 else cleaned[len(_FENCE) :]
    if cleaned.endswith(_FENCE):
        cleaned = cleaned[: -len(_FENCE)]
    return cleaned.strip()


def strip_code_fences(text: str) -> str:
    """
    Remove markdown code fences wrapped around the text.

    The opening fence line and the trailing fence are removed independently,
    so an answer cut off before its closing fence is still unwrapped.
    Unwrapped text is only trimmed. Wrappers are peeled until none remain,
    so applying the function twice is the same as applying it once.

    Example:
        >>> strip_code_fences('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
        >>> strip_code_fences('```json\\n{"a": 1}')
        '{"a": 1}'
        >>> strip_code_fences("plain text")
        'plain text'
    """
    cleaned = (text or "").strip()
    while True:
        peeled = _strip_fence_once(cleaned)
        if peeled == cleaned:
            return cleaned
        cleaned = peeled


def _decode_object(raw_text: str) -> tuple[str, Dict[str, Any]]:
    cleaned = strip_code_fences(raw_text)
    try:
        data = json.loads(cleaned)
    except ValueError as exc:
        logger.warning(
            "Model output is not JSON",
            extra={"error": str(exc), "text_length": len(cleaned)},
        )
        raise GatewayError(
            GatewayErrorKind.SCHEMA_MISMATCH,
            f"Invalid JSON: {exc}",
            raw_text=cleaned,
        ) from exc

    if not isinstance(data, dict):
        logger.warning(
            "Model output root is not an object",
            extra={"root_type": type(data).__name__},
        )
        raise GatewayError(
            GatewayErrorKind.SCHEMA_MISMATCH,
            "JSON root is not an object",
            raw_text=cleaned,
        )
    return cleaned, data


def normalize_analysis(raw_text: str, default_name: str = UNKNOWN_MEAL_NAME) -> AnalysisResult:
    """
    Convert raw model text into an AnalysisResult.

    Args:
        raw_text: Assistant message content, possibly fenced
        default_name: Name used when the model omits one

    Returns:
        AnalysisResult with defaults applied (score 0 when unusable)

    Raises:
        GatewayError: SCHEMA_MISMATCH with the cleaned text attached
    """
    cleaned, data = _decode_object(raw_text)
    try:
        payload = MealAnalysisPayload.model_validate(data)
    except ValidationError as exc:
        raise GatewayError(
            GatewayErrorKind.SCHEMA_MISMATCH, str(exc), raw_text=cleaned
        ) from exc

    return AnalysisResult(
        name=payload.name or default_name,
        ingredients=tuple(payload.ingredients),
        safety_score=payload.safety_score,
        reason=payload.reason,
        suggestions=payload.suggestions,
    )


def normalize_product_analysis(
    raw_text: str, default_name: str = UNKNOWN_PRODUCT_NAME
) -> ProductAnalysisResult:
    """Convert raw model text into a ProductAnalysisResult.

    Same contract as normalize_analysis, with labels and verified claims.
    """
    cleaned, data = _decode_object(raw_text)
    try:
        payload = ProductAnalysisPayload.model_validate(data)
    except ValidationError as exc:
        raise GatewayError(
            GatewayErrorKind.SCHEMA_MISMATCH, str(exc), raw_text=cleaned
        ) from exc

    return ProductAnalysisResult(
        name=payload.name or default_name,
        ingredients=tuple(payload.ingredients),
        safety_score=payload.safety_score,
        reason=payload.reason,
        suggestions=payload.suggestions,
        labels=payload.labels,
        verified_claims=payload.verified_claims,
    )


def fallback_result(raw_text: str, name: str = UNKNOWN_MEAL_NAME) -> AnalysisResult:
    """
    Treat unstructured model output as a comma separated ingredient list.

    Used when decoding failed so the response is shown rather than lost.
    """
    return AnalysisResult(
        name=name,
        ingredients=tuple(split_ingredients(strip_code_fences(raw_text))),
    )
