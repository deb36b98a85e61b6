"""Safety analysis orchestrator.

Coordinates prompt building, the LLM gateway and response normalization for
each input modality (description, photo, product, barcode, suggestion).
"""

import dataclasses
import logging
from typing import Optional, Tuple, Union

from inside.domain.analysis.entities.analysis_request import (
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
from inside.domain.analysis.entities.scanned_product import UNKNOWN_PRODUCT_NAME
from inside.domain.analysis.exceptions.domain_errors import (
    GatewayError,
    ProductNotFoundError,
)
from inside.domain.analysis.ports.llm_gateway import CompletionOptions, ILLMGateway
from inside.domain.analysis.ports.product_lookup import IProductLookup
from inside.infrastructure.ai.openai.normalizer import (
    UNKNOWN_MEAL_NAME,
    normalize_analysis,
    normalize_product_analysis,
    strip_code_fences,
)
from inside.infrastructure.ai.prompts.safety_analysis import Prompt, build_prompt
from inside.infrastructure.config import AnalysisOptions
from inside.infrastructure.imaging import encode_jpeg

logger = logging.getLogger(__name__)


def clean_barcode(barcode: str) -> str:
    """
    Strip spaces and dashes from a scanned code.

    Raises:
        ValueError: If barcode is empty or not alphanumeric
    """
    if not barcode or not barcode.strip():
        raise ValueError("Barcode cannot be empty")

    cleaned = barcode.strip().replace(" ", "").replace("-", "")
    if not cleaned.isalnum():
        raise ValueError("Barcode must be alphanumeric")
    return cleaned


class SafetyAnalysisOrchestrator:
    """
    Orchestrate dietary-safety analysis for every input modality.

    Flow (per call):
    1. Build prompt from request + dietary profile
    2. One chat completion through the gateway (never retried)
    3. Normalize the raw text into a typed result

    Stateless: concurrent calls share nothing mutable, and nothing here
    persists results or touches the profile.

    Example:
        >>> orchestrator = SafetyAnalysisOrchestrator(gateway, product_lookup)
        >>> result = await orchestrator.analyze_description(
        ...     "grilled chicken salad",
        ...     DietaryProfile(allergens=["Peanuts"]),
        ... )
        >>> result.safety_score
        9
    """

    def __init__(
        self,
        gateway: ILLMGateway,
        product_lookup: Optional[IProductLookup] = None,
        options: Optional[AnalysisOptions] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            gateway: Chat-completion gateway
            product_lookup: Barcode lookup, required only by analyze_barcode
            options: Per-operation sampling options (default: built-in values)
        """
        self._gateway = gateway
        self._products = product_lookup
        self._options = options or AnalysisOptions.defaults()

    async def _complete(self, prompt: Prompt, options: CompletionOptions, operation: str) -> str:
        try:
            return await self._gateway.complete(prompt.system, prompt.content, options)
        except GatewayError as e:
            logger.error(
                "Analysis call failed",
                extra={"operation": operation, "kind": e.kind.value, "error": e.detail},
            )
            raise

    async def analyze_description(
        self,
        description: str,
        profile: DietaryProfile,
        meal_name: Optional[str] = None,
    ) -> AnalysisResult:
        """
        Analyze a free-text meal description.

        Args:
            description: What the user ate
            profile: Dietary constraints
            meal_name: Optional user-given name; wins over the model's name

        Returns:
            AnalysisResult

        Raises:
            ValueError: If description is empty
            GatewayError: On any pipeline failure
        """
        if not description or not description.strip():
            raise ValueError("Description cannot be empty")

        request = TextAnalysisRequest(description=description, meal_name=meal_name)
        user_name = (meal_name or "").strip()

        logger.info(
            "Analyzing description",
            extra={"text_length": len(description), "has_meal_name": bool(user_name)},
        )

        raw = await self._complete(
            build_prompt(request, profile), self._options.describe, "describe"
        )
        result = normalize_analysis(raw, default_name=user_name or UNKNOWN_MEAL_NAME)
        if user_name:
            result = dataclasses.replace(result, name=user_name)

        logger.info(
            "Description analysis complete",
            extra={
                "safety_score": result.safety_score,
                "ingredient_count": len(result.ingredients),
            },
        )
        return result

    async def analyze_image(
        self,
        image_bytes: bytes,
        notes: str,
        profile: DietaryProfile,
    ) -> Tuple[str, AnalysisResult]:
        """
        Analyze a meal photo.

        Args:
            image_bytes: Photo in any format Pillow can read
            notes: Optional user notes ("no dressing")
            profile: Dietary constraints

        Returns:
            (meal_name, AnalysisResult)

        Raises:
            GatewayError: IMAGE_ENCODING_FAILURE before any network call if
                the image is unreadable, otherwise any pipeline failure
        """
        jpeg = encode_jpeg(image_bytes)
        request = ImageAnalysisRequest(image_bytes=jpeg, notes=notes or "")

        logger.info(
            "Analyzing image",
            extra={"size_bytes": len(jpeg), "has_notes": bool((notes or "").strip())},
        )

        raw = await self._complete(build_prompt(request, profile), self._options.image, "image")
        result = normalize_analysis(raw, default_name=UNKNOWN_MEAL_NAME)

        logger.info(
            "Image analysis complete",
            extra={
                "meal_name": result.name,
                "safety_score": result.safety_score,
                "ingredient_count": len(result.ingredients),
            },
        )
        return result.name, result

    async def analyze_product(
        self,
        name: str,
        ingredients_text: str,
        labels: str,
        profile: DietaryProfile,
    ) -> ProductAnalysisResult:
        """
        Analyze a packaged product.

        Labels/claims are passed to the model as authoritative; the generated
        reason is asked not to contradict them (not enforced here).

        Returns:
            ProductAnalysisResult named after the given product name, or the
            model's name when none was given

        Raises:
            GatewayError: On any pipeline failure. SCHEMA_MISMATCH carries
                the given product name as subject.
        """
        given_name = (name or "").strip()
        if given_name == UNKNOWN_PRODUCT_NAME:
            given_name = ""
        product_name = given_name or UNKNOWN_PRODUCT_NAME
        request = ProductAnalysisRequest(
            name=product_name,
            ingredients_text=ingredients_text or "",
            labels=labels or "",
        )

        logger.info(
            "Analyzing product",
            extra={"product_name": product_name, "has_labels": bool(request.labels.strip())},
        )

        raw = await self._complete(
            build_prompt(request, profile), self._options.product, "product"
        )
        try:
            result = normalize_product_analysis(raw, default_name=product_name)
        except GatewayError as e:
            raise GatewayError(
                e.kind, e.detail, raw_text=e.raw_text, subject=given_name or None
            ) from e
        if given_name:
            result = dataclasses.replace(result, name=given_name)

        logger.info(
            "Product analysis complete",
            extra={"product_name": result.name, "safety_score": result.safety_score},
        )
        return result

    async def analyze_barcode(
        self, barcode: str, profile: DietaryProfile
    ) -> ProductAnalysisResult:
        """
        Look up a scanned barcode and analyze the product.

        Raises:
            ValueError: If barcode is empty or invalid
            RuntimeError: If no product lookup is configured
            ProductNotFoundError: If the barcode is unknown
            GatewayError: On lookup or analysis failure
        """
        code = clean_barcode(barcode)
        if self._products is None:
            raise RuntimeError("No product lookup configured")

        try:
            product = await self._products.lookup_barcode(code)
        except GatewayError as e:
            logger.error(
                "Barcode lookup failed",
                extra={"barcode": code, "kind": e.kind.value, "error": e.detail},
            )
            raise

        if product is None:
            raise ProductNotFoundError(code)

        return await self.analyze_product(
            product.name, product.ingredients_text, product.labels, profile
        )

    async def fetch_suggestion(
        self,
        category: Union[str, SuggestionCategory],
        profile: DietaryProfile,
    ) -> str:
        """
        Fetch a short personalized suggestion for a home-screen card.

        Raises:
            ValueError: If category is not one of SuggestionCategory
            GatewayError: On any pipeline failure
        """
        request = SuggestionRequest(category=SuggestionCategory.parse(category))

        logger.info("Fetching suggestion", extra={"category": request.category.value})

        raw = await self._complete(
            build_prompt(request, profile), self._options.suggestion, "suggestion"
        )
        return strip_code_fences(raw)
