"""ScannedProduct entity.

Represents a packaged product identified by barcode (EAN/UPC) in a public
product database such as Open Food Facts.
"""

from dataclasses import dataclass

UNKNOWN_PRODUCT_NAME = "Unknown Product"
UNLISTED_INGREDIENTS = "Ingredients not listed"


@dataclass(frozen=True)
class ScannedProduct:
    """
    Product identified by barcode scan.

    Attributes:
        barcode: EAN/UPC code (e.g., "3017620422003")
        name: Product name, English variant preferred
        ingredients_text: Ingredient list as printed on the label
        labels: Comma separated label claims (e.g., "Vegan, Gluten-free")
    """

    barcode: str
    name: str = UNKNOWN_PRODUCT_NAME
    ingredients_text: str = UNLISTED_INGREDIENTS
    labels: str = ""

    def __post_init__(self) -> None:
        """Validate scanned product invariants."""
        if not self.barcode or not self.barcode.strip():
            raise ValueError("Barcode cannot be empty")

    def has_ingredients(self) -> bool:
        return self.ingredients_text != UNLISTED_INGREDIENTS
