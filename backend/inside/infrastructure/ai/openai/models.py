"""Pydantic models for the JSON the model is asked to return.

Every field is optional on decode. Validators coerce sloppy model output
(comma separated strings, numeric strings, nulls) into one shape so that all
call sites see the same defaulting behavior.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from inside.domain.analysis.entities.analysis_result import (
    MAX_SAFETY_SCORE,
    MIN_SAFETY_SCORE,
    UNSCORED,
)


def split_ingredients(value: Any) -> List[str]:
    """
    Split a comma separated ingredient string into a clean list.

    Elements are trimmed, empties dropped, order preserved. A list input is
    cleaned the same way.

    Example:
        >>> split_ingredients("chicken, lettuce,, olive oil ")
        ['chicken', 'lettuce', 'olive oil']
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts: List[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        parts = list(value)
    else:
        parts = [value]
    cleaned = []
    for part in parts:
        if part is None:
            continue
        text = str(part).strip()
        if text:
            cleaned.append(text)
    return cleaned


def coerce_safety_score(value: Any) -> int:
    """
    Map a raw model score to the [1, 10] rubric, or 0 when unusable.

    Example:
        >>> coerce_safety_score("8"), coerce_safety_score(11), coerce_safety_score(None)
        (8, 0, 0)
    """
    if value is None or isinstance(value, bool):
        return UNSCORED
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return UNSCORED
    if isinstance(value, float):
        if not value.is_integer():
            return UNSCORED
        value = int(value)
    if not isinstance(value, int):
        return UNSCORED
    if MIN_SAFETY_SCORE <= value <= MAX_SAFETY_SCORE:
        return value
    return UNSCORED


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v).strip() for v in value if v is not None and str(v).strip())
    return str(value).strip()


class MealAnalysisPayload(BaseModel):
    """
    Base analysis schema.

    Maps to domain entity AnalysisResult.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = Field(default=None, description="Meal name")
    ingredients: List[str] = Field(
        default_factory=list,
        description="Ingredients, comma separated string or list",
    )
    safety_score: int = Field(default=UNSCORED, alias="safetyScore")
    reason: str = ""
    suggestions: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _clean_name(cls, value: Any) -> Optional[str]:
        text = _as_text(value)
        return text or None

    @field_validator("ingredients", mode="before")
    @classmethod
    def _split_ingredients(cls, value: Any) -> List[str]:
        return split_ingredients(value)

    @field_validator("safety_score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> int:
        return coerce_safety_score(value)

    @field_validator("reason", "suggestions", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> str:
        return _as_text(value)


class ProductAnalysisPayload(MealAnalysisPayload):
    """
    Product analysis schema (superset of the base schema).

    Maps to domain entity ProductAnalysisResult.
    """

    labels: str = ""
    verified_claims: str = Field(default="", alias="verifiedClaims")

    @field_validator("labels", "verified_claims", mode="before")
    @classmethod
    def _clean_claims(cls, value: Any) -> str:
        return _as_text(value)
