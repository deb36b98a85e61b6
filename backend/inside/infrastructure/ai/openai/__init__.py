"""OpenAI gateway, response schemas and normalization."""

from inside.infrastructure.ai.openai.client import OpenAIChatGateway
from inside.infrastructure.ai.openai.models import (
    MealAnalysisPayload,
    ProductAnalysisPayload,
)
from inside.infrastructure.ai.openai.normalizer import (
    fallback_result,
    normalize_analysis,
    normalize_product_analysis,
    strip_code_fences,
)

__all__ = [
    "OpenAIChatGateway",
    "MealAnalysisPayload",
    "ProductAnalysisPayload",
    "fallback_result",
    "normalize_analysis",
    "normalize_product_analysis",
    "strip_code_fences",
]
