"""Unit tests for safety analysis prompt building."""

import base64

import pytest

from inside.domain.analysis.entities.analysis_request import (
    ImageAnalysisRequest,
    ProductAnalysisRequest,
    SuggestionCategory,
    SuggestionRequest,
    TextAnalysisRequest,
)
from inside.domain.analysis.entities.dietary_profile import DietaryProfile
from inside.infrastructure.ai.prompts.safety_analysis import (
    MEAL_SYSTEM_PROMPT,
    PRODUCT_SYSTEM_PROMPT,
    SAFETY_SCORE_RUBRIC,
    SUGGESTION_SYSTEM_PROMPT,
    build_prompt,
    image_data_url,
    render_list,
    restrictions_line,
)


class TestRestrictionsLine:
    """Test rendering of the profile constraints."""

    def test_empty_lists_render_none(self, empty_profile: DietaryProfile) -> None:
        assert restrictions_line(empty_profile) == "Allergens: None; Diets: None"

    def test_peanut_profile(self, peanut_profile: DietaryProfile) -> None:
        assert restrictions_line(peanut_profile) == "Allergens: Peanuts; Diets: None"

    def test_preserves_order(self) -> None:
        profile = DietaryProfile(allergens=["Shellfish", "Eggs"], diets=["Halal"])

        assert restrictions_line(profile) == "Allergens: Shellfish, Eggs; Diets: Halal"

    def test_render_list(self) -> None:
        assert render_list([]) == "None"
        assert render_list(["Soy"]) == "Soy"


class TestTextPrompt:
    """Test free-text description prompts."""

    def test_grilled_chicken_salad(self, peanut_profile: DietaryProfile) -> None:
        prompt = build_prompt(
            TextAnalysisRequest(description="grilled chicken salad"), peanut_profile
        )

        assert prompt.system == MEAL_SYSTEM_PROMPT
        assert isinstance(prompt.content, str)
        assert "Allergens: Peanuts; Diets: None" in prompt.content
        assert "Meal description: grilled chicken salad" in prompt.content
        assert "Meal name" not in prompt.content

    def test_includes_meal_name(self, empty_profile: DietaryProfile) -> None:
        prompt = build_prompt(
            TextAnalysisRequest(description="noodles with broth", meal_name="Pho"),
            empty_profile,
        )

        assert "Meal name: Pho" in prompt.content

    def test_is_deterministic(self, peanut_profile: DietaryProfile) -> None:
        request = TextAnalysisRequest(description="pad thai")

        assert build_prompt(request, peanut_profile) == build_prompt(request, peanut_profile)

    def test_meal_prompt_asks_for_strict_json(self) -> None:
        assert "STRICT JSON" in MEAL_SYSTEM_PROMPT
        assert '"safetyScore": int' in MEAL_SYSTEM_PROMPT


class TestImagePrompt:
    """Test photo prompts."""

    def test_multipart_with_inline_jpeg(self, peanut_profile: DietaryProfile) -> None:
        prompt = build_prompt(
            ImageAnalysisRequest(image_bytes=b"\xff\xd8jpeg", notes="no dressing"),
            peanut_profile,
        )

        assert prompt.is_multipart()
        text_part, image_part = prompt.content
        assert text_part["type"] == "text"
        assert "Allergens: Peanuts; Diets: None" in text_part["text"]
        assert "Notes: no dressing" in text_part["text"]
        assert image_part["type"] == "image_url"
        assert image_part["image_url"]["url"] == image_data_url(b"\xff\xd8jpeg")

    def test_missing_notes_render_none(self, empty_profile: DietaryProfile) -> None:
        prompt = build_prompt(ImageAnalysisRequest(image_bytes=b"x"), empty_profile)

        assert "Notes: None" in prompt.content[0]["text"]

    def test_data_url(self) -> None:
        url = image_data_url(b"abc")

        assert url.startswith("data:image/jpeg;base64,")
        assert base64.b64decode(url.split(",", 1)[1]) == b"abc"


class TestProductPrompt:
    """Test packaged product prompts."""

    def test_labels_are_authoritative(self, peanut_profile: DietaryProfile) -> None:
        prompt = build_prompt(
            ProductAnalysisRequest(
                name="Oat Bar", ingredients_text="oats, honey", labels="Vegan, Peanut-free"
            ),
            peanut_profile,
        )

        assert prompt.system == PRODUCT_SYSTEM_PROMPT
        assert "Product: Oat Bar" in prompt.content
        assert "Ingredients: oats, honey" in prompt.content
        assert "Claims/Labels: Vegan, Peanut-free" in prompt.content
        assert "labels/claims as authoritative" in PRODUCT_SYSTEM_PROMPT
        assert '"verifiedClaims": string' in PRODUCT_SYSTEM_PROMPT

    def test_empty_labels_render_none(self, empty_profile: DietaryProfile) -> None:
        prompt = build_prompt(
            ProductAnalysisRequest(name="Crackers", ingredients_text="wheat"), empty_profile
        )

        assert "Claims/Labels: None" in prompt.content


class TestSuggestionPrompt:
    """Test home-screen suggestion prompts."""

    @pytest.mark.parametrize("category", list(SuggestionCategory))
    def test_every_category_has_template(
        self, category: SuggestionCategory, peanut_profile: DietaryProfile
    ) -> None:
        prompt = build_prompt(SuggestionRequest(category=category), peanut_profile)

        assert prompt.system == SUGGESTION_SYSTEM_PROMPT
        assert "Under 35 words" in prompt.content
        assert "Allergens: Peanuts; Diets: None" in prompt.content

    def test_product_suggestions_use_bullets(self, empty_profile: DietaryProfile) -> None:
        prompt = build_prompt(
            SuggestionRequest(category=SuggestionCategory.PRODUCT_SUGGESTIONS), empty_profile
        )

        assert "•" in prompt.content


class TestRubric:
    """The scoring rubric must be identical across variants."""

    @pytest.mark.parametrize(
        "system_prompt",
        [MEAL_SYSTEM_PROMPT, PRODUCT_SYSTEM_PROMPT, SUGGESTION_SYSTEM_PROMPT],
    )
    def test_rubric_embedded(self, system_prompt: str) -> None:
        assert SAFETY_SCORE_RUBRIC in system_prompt

    def test_rubric_levels(self) -> None:
        for level in ("1 -", "2 -", "3-4 -", "5-6 -", "7-8 -", "9 -", "10 -"):
            assert level in SAFETY_SCORE_RUBRIC

    def test_unknown_request_rejected(self, empty_profile: DietaryProfile) -> None:
        with pytest.raises(TypeError):
            build_prompt("not a request", empty_profile)  # type: ignore[arg-type]
