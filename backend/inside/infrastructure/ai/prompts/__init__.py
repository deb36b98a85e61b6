"""Safety analysis prompts for chat completions."""

from inside.infrastructure.ai.prompts.safety_analysis import (
    MEAL_SYSTEM_PROMPT,
    PRODUCT_SYSTEM_PROMPT,
    SAFETY_SCORE_RUBRIC,
    Prompt,
    build_prompt,
    restrictions_line,
)

__all__ = [
    "MEAL_SYSTEM_PROMPT",
    "PRODUCT_SYSTEM_PROMPT",
    "SAFETY_SCORE_RUBRIC",
    "Prompt",
    "build_prompt",
    "restrictions_line",
]
