"""Prompts for dietary-safety analysis.

Every variant embeds the same ten-point rubric so scores are comparable
across describe, photo, product and suggestion calls. Empty restriction
lists render as the literal "None" so the prompt shape never changes.
"""

import base64
from dataclasses import dataclass
from typing import Iterable, Optional

from inside.domain.analysis.entities.analysis_request import (
    AnalysisRequest,
    ImageAnalysisRequest,
    ProductAnalysisRequest,
    SuggestionCategory,
    SuggestionRequest,
    TextAnalysisRequest,
)
from inside.domain.analysis.entities.dietary_profile import DietaryProfile
from inside.domain.analysis.ports.llm_gateway import UserContent

NONE_TOKEN = "None"

SAFETY_SCORE_RUBRIC = """SAFETY SCORE REFERENCE:
1 - Definitely contains all of the user's allergens or conflicts with their dietary restrictions.
2 - Contains one of the user's allergens or conflicts with their dietary restrictions.
3-4 - Highly suggested not to eat because it is unclear if the food is safe.
5-6 - There is likely cross-contamination risk with the user's allergens or dietary restrictions.
7-8 - Low chance of cross-contamination with the user's allergens or dietary restrictions.
9 - Appears safe to eat based on the user's dietary restrictions and allergens.
10 - Meets #9 and is recommended because of additional benefits."""

MEAL_SCHEMA = """{
  "name": string,
  "ingredients": string,
  "safetyScore": int,
  "reason": string,
  "suggestions": string
}"""

PRODUCT_SCHEMA = """{
  "name": string,
  "ingredients": string,
  "labels": string,
  "verifiedClaims": string,
  "safetyScore": int,
  "reason": string,
  "suggestions": string
}"""

MEAL_SYSTEM_PROMPT = f"""You are a meticulous nutrition assistant. Output STRICT JSON only.
Schema:
{MEAL_SCHEMA}
RULES:
- "ingredients" is a comma separated list of the ingredients of the food in its \
traditional form, as they would appear on a nutrition label.
- Analyze the meal strictly based on its traditional, standard recipe unless the \
user explicitly states otherwise.
- "reason" explains the score ONLY in terms of allergens or dietary conflicts.
- "suggestions" gives practical advice to make the meal safer for these restrictions.
{SAFETY_SCORE_RUBRIC}"""

PRODUCT_SYSTEM_PROMPT = f"""You are a meticulous nutrition assistant. Output STRICT JSON only.
Schema (product):
{PRODUCT_SCHEMA}
SPECIAL RULES:
- Use provided labels/claims as authoritative.
- Verified claims must be reflected correctly; "reason" must never contradict them.
- Default to traditional preparation of ingredients.
{SAFETY_SCORE_RUBRIC}"""

SUGGESTION_SYSTEM_PROMPT = f"""You are a friendly dietary assistant. Reply in plain text, \
never JSON, and keep every answer under 35 words.
When judging whether a food is safe for the user, use this scale:
{SAFETY_SCORE_RUBRIC}"""

SUGGESTION_TEMPLATES = {
    SuggestionCategory.CULTURAL_SPOTLIGHT: (
        "Give one uncommon meal that is from another culture, country, or cuisine, "
        "that you suggest the user should try based on these dietary restrictions. "
        "(Under 35 words)"
    ),
    SuggestionCategory.SAFE_MEALS: (
        "Give one meal that you would suggest a person to try based on these "
        "dietary restrictions. (Under 35 words)"
    ),
    SuggestionCategory.PRODUCT_SUGGESTIONS: (
        "Give a list of products and companies in bullet points (Use this '•' "
        "symbol) that you suggest for the user based on these dietary restrictions. "
        "(Under 35 words)"
    ),
    SuggestionCategory.MEAL_FACTS: (
        "Give a fun fact about one of the user's dietary restrictions. It could be "
        "about a common food or product they can or shouldn't eat, or about a meal "
        "they can or shouldn't eat. (Under 35 words)"
    ),
}


@dataclass(frozen=True)
class Prompt:
    """System instruction plus user content for one chat completion."""

    system: str
    content: UserContent

    def is_multipart(self) -> bool:
        return isinstance(self.content, list)


def render_list(values: Iterable[str]) -> str:
    """Join values with ", ", or the literal "None" when empty."""
    joined = ", ".join(values)
    return joined or NONE_TOKEN


def restrictions_line(profile: DietaryProfile) -> str:
    """
    Render the profile constraints on one line.

    Example:
        >>> restrictions_line(DietaryProfile(allergens=["Peanuts"]))
        'Allergens: Peanuts; Diets: None'
    """
    return f"Allergens: {render_list(profile.allergens)}; Diets: {render_list(profile.diets)}"


def _or_none(text: Optional[str]) -> str:
    cleaned = (text or "").strip()
    return cleaned or NONE_TOKEN


def image_data_url(image_bytes: bytes) -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:image/jpeg;base64,{encoded}"


def build_text_prompt(request: TextAnalysisRequest, profile: DietaryProfile) -> Prompt:
    lines = [f"Consider the user's dietary restrictions. {restrictions_line(profile)}"]
    if request.meal_name and request.meal_name.strip():
        lines.append(f"Meal name: {request.meal_name.strip()}")
    lines.append(f"Meal description: {request.description.strip()}")
    lines.append("Produce JSON following the schema above.")
    return Prompt(system=MEAL_SYSTEM_PROMPT, content="\n".join(lines))


def build_image_prompt(request: ImageAnalysisRequest, profile: DietaryProfile) -> Prompt:
    text = "\n".join(
        [
            f"Consider the user's dietary restrictions. {restrictions_line(profile)}",
            "Identify the meal in the photo and assess it.",
            f"Notes: {_or_none(request.notes)}",
            "Return JSON following the schema.",
        ]
    )
    content = [
        {"type": "text", "text": text},
        {"type": "image_url", "image_url": {"url": image_data_url(request.image_bytes)}},
    ]
    return Prompt(system=MEAL_SYSTEM_PROMPT, content=content)


def build_product_prompt(request: ProductAnalysisRequest, profile: DietaryProfile) -> Prompt:
    text = "\n".join(
        [
            f"Consider the user's dietary restrictions. {restrictions_line(profile)}",
            f"Product: {request.name.strip()}",
            f"Ingredients: {_or_none(request.ingredients_text)}",
            f"Claims/Labels: {_or_none(request.labels)}",
            "Return JSON following the schema above.",
        ]
    )
    return Prompt(system=PRODUCT_SYSTEM_PROMPT, content=text)


def build_suggestion_prompt(request: SuggestionRequest, profile: DietaryProfile) -> Prompt:
    text = "\n".join(
        [
            SUGGESTION_TEMPLATES[request.category],
            restrictions_line(profile),
            "Output only the suggestion (no JSON or extra commentary).",
        ]
    )
    return Prompt(system=SUGGESTION_SYSTEM_PROMPT, content=text)


def build_prompt(request: AnalysisRequest, profile: DietaryProfile) -> Prompt:
    """
    Build the prompt for any request kind.

    Pure function of its inputs.

    Raises:
        TypeError: If request is not a known AnalysisRequest variant
    """
    if isinstance(request, TextAnalysisRequest):
        return build_text_prompt(request, profile)
    if isinstance(request, ImageAnalysisRequest):
        return build_image_prompt(request, profile)
    if isinstance(request, ProductAnalysisRequest):
        return build_product_prompt(request, profile)
    if isinstance(request, SuggestionRequest):
        return build_suggestion_prompt(request, profile)
    raise TypeError(f"Unsupported analysis request: {type(request).__name__}")
