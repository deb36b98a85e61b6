"""REST API endpoints for dietary-safety analysis.

Thin HTTP layer over SafetyAnalysisOrchestrator: request validation,
error translation into user-facing messages, and the raw-text fallback
when the model answers outside the JSON schema.
"""

import base64
import binascii
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from inside.application.analysis.orchestrator import SafetyAnalysisOrchestrator
from inside.domain.analysis.entities.analysis_result import (
    AnalysisResult,
    ProductAnalysisResult,
)
from inside.domain.analysis.entities.dietary_profile import DietaryProfile
from inside.domain.analysis.entities.scanned_product import UNKNOWN_PRODUCT_NAME
from inside.domain.analysis.exceptions.domain_errors import (
    GatewayError,
    GatewayErrorKind,
    ProductNotFoundError,
)
from inside.infrastructure.ai.openai.normalizer import UNKNOWN_MEAL_NAME, fallback_result

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/analysis", tags=["analysis"])

# (HTTP status, message) per failure kind
_ERROR_RESPONSES = {
    GatewayErrorKind.MISSING_CREDENTIAL: (503, "Missing API key."),
    GatewayErrorKind.INVALID_ENDPOINT: (503, "Could not reach AI service."),
    GatewayErrorKind.NO_RESPONSE_BODY: (502, "No data received."),
    GatewayErrorKind.MALFORMED_ENVELOPE: (502, "Unexpected AI response."),
    GatewayErrorKind.SCHEMA_MISMATCH: (502, "JSON error"),
    GatewayErrorKind.TRANSPORT_FAILURE: (502, "Network error"),
    GatewayErrorKind.IMAGE_ENCODING_FAILURE: (400, "Could not read image."),
}


class ProfileModel(BaseModel):
    """Dietary profile as sent by the client."""

    name: str = ""
    allergens: List[str] = Field(default_factory=list)
    diets: List[str] = Field(default_factory=list)
    struggles: List[str] = Field(default_factory=list)
    reason: str = ""

    def to_domain(self) -> DietaryProfile:
        return DietaryProfile(
            name=self.name,
            allergens=tuple(self.allergens),
            diets=tuple(self.diets),
            struggles=tuple(self.struggles),
            reason=self.reason,
        )


class DescribeRequest(BaseModel):
    description: str
    meal_name: Optional[str] = None
    profile: ProfileModel = Field(default_factory=ProfileModel)
    request_id: Optional[str] = None


class ImageRequest(BaseModel):
    """Photo upload; image_base64 may also be a data: URL."""

    image_base64: str
    notes: str = ""
    profile: ProfileModel = Field(default_factory=ProfileModel)
    request_id: Optional[str] = None


class ProductRequest(BaseModel):
    name: str
    ingredients_text: str
    labels: str = ""
    profile: ProfileModel = Field(default_factory=ProfileModel)
    request_id: Optional[str] = None


class BarcodeRequest(BaseModel):
    barcode: str
    profile: ProfileModel = Field(default_factory=ProfileModel)
    request_id: Optional[str] = None


class SuggestionRequestModel(BaseModel):
    category: str
    profile: ProfileModel = Field(default_factory=ProfileModel)
    request_id: Optional[str] = None


class AnalysisResponse(BaseModel):
    """Analysis outcome.

    structured is False when the model ignored the JSON schema and the
    result was rebuilt from its raw text.
    """

    request_id: Optional[str] = None
    structured: bool = True
    name: str
    ingredients: List[str]
    safety_score: int
    reason: str
    suggestions: str


class ProductAnalysisResponse(AnalysisResponse):
    labels: str = ""
    verified_claims: str = ""


class SuggestionResponse(BaseModel):
    request_id: Optional[str] = None
    category: str
    text: str


def friendly_error(error: GatewayError) -> str:
    """User-facing message for a pipeline failure."""
    _, message = _ERROR_RESPONSES[error.kind]
    if error.kind in (GatewayErrorKind.SCHEMA_MISMATCH, GatewayErrorKind.TRANSPORT_FAILURE):
        if error.detail:
            return f"{message}: {error.detail}"
    return message


def _raise_http(
    status_code: int, error: str, message: str, request_id: Optional[str]
) -> NoReturn:
    raise HTTPException(
        status_code=status_code,
        detail={"error": error, "message": message, "request_id": request_id},
    )


def _raise_gateway_error(error: GatewayError, request_id: Optional[str]) -> NoReturn:
    status_code, _ = _ERROR_RESPONSES[error.kind]
    logger.warning(
        "Analysis request failed",
        extra={"kind": error.kind.value, "status_code": status_code, "request_id": request_id},
    )
    _raise_http(status_code, error.kind.value, friendly_error(error), request_id)


def _to_response(
    result: AnalysisResult, request_id: Optional[str], structured: bool = True
) -> AnalysisResponse:
    return AnalysisResponse(
        request_id=request_id,
        structured=structured,
        name=result.name,
        ingredients=list(result.ingredients),
        safety_score=result.safety_score,
        reason=result.reason,
        suggestions=result.suggestions,
    )


def _to_product_response(
    result: AnalysisResult, request_id: Optional[str], structured: bool = True
) -> ProductAnalysisResponse:
    labels = verified_claims = ""
    if isinstance(result, ProductAnalysisResult):
        labels, verified_claims = result.labels, result.verified_claims
    return ProductAnalysisResponse(
        request_id=request_id,
        structured=structured,
        name=result.name,
        ingredients=list(result.ingredients),
        safety_score=result.safety_score,
        reason=result.reason,
        suggestions=result.suggestions,
        labels=labels,
        verified_claims=verified_claims,
    )


def _fallback(error: GatewayError, name: str) -> AnalysisResult:
    logger.info(
        "Using raw-text fallback",
        extra={"raw_length": len(error.raw_text or "")},
    )
    return fallback_result(error.raw_text or "", name=name)


def decode_image(image_base64: str) -> bytes:
    """
    Decode a base64 payload, accepting an optional data: URL prefix.

    Raises:
        GatewayError: IMAGE_ENCODING_FAILURE on invalid base64
    """
    payload = image_base64.strip()
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise GatewayError(
            GatewayErrorKind.IMAGE_ENCODING_FAILURE, "Invalid base64 image"
        ) from e


def get_orchestrator(request: Request) -> SafetyAnalysisOrchestrator:
    """FastAPI dependency: orchestrator built in the app lifespan."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Analysis service not ready")
    return orchestrator


@router.post("/describe", response_model=AnalysisResponse)
async def analyze_description(
    body: DescribeRequest,
    orchestrator: SafetyAnalysisOrchestrator = Depends(get_orchestrator),
) -> AnalysisResponse:
    """Analyze a free-text meal description."""
    try:
        result = await orchestrator.analyze_description(
            body.description, body.profile.to_domain(), meal_name=body.meal_name
        )
    except ValueError as e:
        _raise_http(422, "invalid_request", str(e), body.request_id)
    except GatewayError as e:
        if e.kind is GatewayErrorKind.SCHEMA_MISMATCH:
            name = (body.meal_name or "").strip() or UNKNOWN_MEAL_NAME
            return _to_response(_fallback(e, name), body.request_id, structured=False)
        _raise_gateway_error(e, body.request_id)
    return _to_response(result, body.request_id)


@router.post("/image", response_model=AnalysisResponse)
async def analyze_image(
    body: ImageRequest,
    orchestrator: SafetyAnalysisOrchestrator = Depends(get_orchestrator),
) -> AnalysisResponse:
    """Analyze a meal photo sent as base64."""
    try:
        image_bytes = decode_image(body.image_base64)
        _, result = await orchestrator.analyze_image(
            image_bytes, body.notes, body.profile.to_domain()
        )
    except GatewayError as e:
        if e.kind is GatewayErrorKind.SCHEMA_MISMATCH:
            return _to_response(
                _fallback(e, UNKNOWN_MEAL_NAME), body.request_id, structured=False
            )
        _raise_gateway_error(e, body.request_id)
    return _to_response(result, body.request_id)


@router.post("/product", response_model=ProductAnalysisResponse)
async def analyze_product(
    body: ProductRequest,
    orchestrator: SafetyAnalysisOrchestrator = Depends(get_orchestrator),
) -> ProductAnalysisResponse:
    """Analyze a packaged product from its name, ingredients and labels."""
    try:
        result = await orchestrator.analyze_product(
            body.name, body.ingredients_text, body.labels, body.profile.to_domain()
        )
    except GatewayError as e:
        if e.kind is GatewayErrorKind.SCHEMA_MISMATCH:
            name = e.subject or UNKNOWN_PRODUCT_NAME
            return _to_product_response(
                _fallback(e, name), body.request_id, structured=False
            )
        _raise_gateway_error(e, body.request_id)
    return _to_product_response(result, body.request_id)


@router.post("/barcode", response_model=ProductAnalysisResponse)
async def analyze_barcode(
    body: BarcodeRequest,
    orchestrator: SafetyAnalysisOrchestrator = Depends(get_orchestrator),
) -> ProductAnalysisResponse:
    """Look up a barcode on Open Food Facts and analyze the product."""
    try:
        result = await orchestrator.analyze_barcode(body.barcode, body.profile.to_domain())
    except ValueError as e:
        _raise_http(422, "invalid_request", str(e), body.request_id)
    except ProductNotFoundError as e:
        _raise_http(404, "product_not_found", str(e), body.request_id)
    except RuntimeError as e:
        _raise_http(503, "service_unavailable", str(e), body.request_id)
    except GatewayError as e:
        if e.kind is GatewayErrorKind.SCHEMA_MISMATCH:
            name = e.subject or UNKNOWN_PRODUCT_NAME
            return _to_product_response(
                _fallback(e, name), body.request_id, structured=False
            )
        _raise_gateway_error(e, body.request_id)
    return _to_product_response(result, body.request_id)


@router.post("/suggestion", response_model=SuggestionResponse)
async def fetch_suggestion(
    body: SuggestionRequestModel,
    orchestrator: SafetyAnalysisOrchestrator = Depends(get_orchestrator),
) -> SuggestionResponse:
    """Short personalized tip for one home-screen card."""
    try:
        text = await orchestrator.fetch_suggestion(body.category, body.profile.to_domain())
    except ValueError as e:
        _raise_http(422, "invalid_request", str(e), body.request_id)
    except GatewayError as e:
        _raise_gateway_error(e, body.request_id)
    return SuggestionResponse(request_id=body.request_id, category=body.category, text=text)
