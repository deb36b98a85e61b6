"""AnalysisResult entities - typed output of a safety analysis."""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

MIN_SAFETY_SCORE = 1
MAX_SAFETY_SCORE = 10
UNSCORED = 0  # upstream score missing or out of range


@dataclass(frozen=True)
class AnalysisResult:
    """
    Entity: Safety assessment of a meal for a given dietary profile.

    A safety_score of 0 means the model gave no usable score. The record
    is still valid, just low confidence.

    Example:
        >>> result = AnalysisResult(
        ...     name="Grilled Chicken Salad",
        ...     ingredients=("chicken", "lettuce", "olive oil"),
        ...     safety_score=9,
        ...     reason="No peanut content detected.",
        ... )
        >>> result.is_scored()
        True
    """

    name: str
    ingredients: Tuple[str, ...] = field(default_factory=tuple)
    safety_score: int = UNSCORED
    reason: str = ""
    suggestions: str = ""

    def __post_init__(self) -> None:
        """Validate invariants after initialization."""
        object.__setattr__(self, "ingredients", tuple(self.ingredients))
        score = self.safety_score
        if score != UNSCORED and not MIN_SAFETY_SCORE <= score <= MAX_SAFETY_SCORE:
            raise ValueError(
                f"Safety score must be 0 or between {MIN_SAFETY_SCORE} and "
                f"{MAX_SAFETY_SCORE}, got {score}"
            )

    def is_scored(self) -> bool:
        """True if the model returned a usable score."""
        return self.safety_score != UNSCORED

    def to_payload(self) -> Dict[str, Any]:
        """Encode to the wire schema used by the model and the API."""
        return {
            "name": self.name,
            "ingredients": list(self.ingredients),
            "safetyScore": self.safety_score,
            "reason": self.reason,
            "suggestions": self.suggestions,
        }


@dataclass(frozen=True)
class ProductAnalysisResult(AnalysisResult):
    """Safety assessment of a packaged product, with its label claims."""

    labels: str = ""
    verified_claims: str = ""

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["labels"] = self.labels
        payload["verifiedClaims"] = self.verified_claims
        return payload
