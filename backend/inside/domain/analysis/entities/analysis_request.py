"""AnalysisRequest variants - one per input modality.

Requests are built per user action and never persisted.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Literal, Optional, Union


class SuggestionCategory(str, Enum):
    """Fixed set of home-screen suggestion cards."""

    CULTURAL_SPOTLIGHT = "Cultural Spotlight"
    SAFE_MEALS = "Safe Meals"
    PRODUCT_SUGGESTIONS = "Product Suggestions"
    MEAL_FACTS = "Meal Facts"

    @classmethod
    def parse(cls, value: Union[str, "SuggestionCategory"]) -> "SuggestionCategory":
        """
        Resolve a category from its display name or enum name.

        Raises:
            ValueError: If value is not one of the known categories

        Example:
            >>> SuggestionCategory.parse("Safe Meals")
            <SuggestionCategory.SAFE_MEALS: 'Safe Meals'>
            >>> SuggestionCategory.parse("meal_facts")
            <SuggestionCategory.MEAL_FACTS: 'Meal Facts'>
        """
        if isinstance(value, cls):
            return value
        raw = (value or "").strip()
        for category in cls:
            if raw == category.value or raw.upper() == category.name:
                return category
        raise ValueError(f"Unknown suggestion category: {value!r}")


@dataclass(frozen=True)
class TextAnalysisRequest:
    """Free-text meal description."""

    kind: ClassVar[Literal["text"]] = "text"

    description: str
    meal_name: Optional[str] = None


@dataclass(frozen=True)
class ImageAnalysisRequest:
    """Meal photo, already encoded as JPEG bytes."""

    kind: ClassVar[Literal["image"]] = "image"

    image_bytes: bytes
    notes: str = ""

    def __repr__(self) -> str:
        return f"ImageAnalysisRequest(image_bytes=<{len(self.image_bytes)} bytes>, notes={self.notes!r})"


@dataclass(frozen=True)
class ProductAnalysisRequest:
    """Packaged product, typically resolved from a barcode."""

    kind: ClassVar[Literal["product"]] = "product"

    name: str
    ingredients_text: str
    labels: str = ""


@dataclass(frozen=True)
class SuggestionRequest:
    """Short personalized suggestion for a home-screen card."""

    kind: ClassVar[Literal["suggestion"]] = "suggestion"

    category: SuggestionCategory


AnalysisRequest = Union[
    TextAnalysisRequest,
    ImageAnalysisRequest,
    ProductAnalysisRequest,
    SuggestionRequest,
]
