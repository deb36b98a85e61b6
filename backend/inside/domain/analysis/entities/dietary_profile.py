"""DietaryProfile entity - the user's allergen and diet constraints."""

from dataclasses import dataclass, field
from typing import Iterable, Tuple


def _ordered_unique(values: Iterable[str]) -> Tuple[str, ...]:
    """Drop blanks and duplicates, keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values:
        cleaned = (value or "").strip()
        if cleaned and cleaned not in seen:
            seen[cleaned] = None
    return tuple(seen)


@dataclass(frozen=True)
class DietaryProfile:
    """
    Entity: Dietary profile used as read-only input to every analysis.

    Collections behave like ordered sets: insertion order is preserved and
    duplicates are collapsed on construction.

    Example:
        >>> profile = DietaryProfile(
        ...     name="Sam",
        ...     allergens=["Peanuts", "Shellfish", "Peanuts"],
        ...     diets=["Vegetarian"],
        ... )
        >>> profile.allergens
        ('Peanuts', 'Shellfish')
    """

    name: str = ""
    allergens: Tuple[str, ...] = field(default_factory=tuple)
    diets: Tuple[str, ...] = field(default_factory=tuple)
    struggles: Tuple[str, ...] = field(default_factory=tuple)
    reason: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "allergens", _ordered_unique(self.allergens))
        object.__setattr__(self, "diets", _ordered_unique(self.diets))
        object.__setattr__(self, "struggles", _ordered_unique(self.struggles))

    def has_restrictions(self) -> bool:
        """True if the profile declares at least one allergen or diet."""
        return bool(self.allergens or self.diets)
