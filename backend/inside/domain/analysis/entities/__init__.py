"""Entities for the safety analysis bounded context."""

from inside.domain.analysis.entities.analysis_request import (
    AnalysisRequest,
    ImageAnalysisRequest,
    ProductAnalysisRequest,
    SuggestionCategory,
    SuggestionRequest,
    TextAnalysisRequest,
)
from inside.domain.analysis.entities.analysis_result import (
    AnalysisResult,
    ProductAnalysisResult,
)
from inside.domain.analysis.entities.dietary_profile import DietaryProfile
from inside.domain.analysis.entities.scanned_product import ScannedProduct

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "DietaryProfile",
    "ImageAnalysisRequest",
    "ProductAnalysisRequest",
    "ProductAnalysisResult",
    "ScannedProduct",
    "SuggestionCategory",
    "SuggestionRequest",
    "TextAnalysisRequest",
]
