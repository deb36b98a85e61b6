"""Stub product lookup for local development and tests.

Returns fake products without calling Open Food Facts.
"""

from typing import Any, Optional

from inside.domain.analysis.entities.scanned_product import ScannedProduct

_PRODUCTS = {
    "3017620422003": ScannedProduct(
        barcode="3017620422003",
        name="Nutella",
        ingredients_text=(
            "Sugar, palm oil, hazelnuts 13%, skimmed milk powder 8.7%, "
            "fat-reduced cocoa 7.4%, emulsifier: lecithins (soya), vanillin"
        ),
        labels="",
    ),
    "123456789": ScannedProduct(
        barcode="123456789",
        name="Test Oat Bar",
        ingredients_text="oats, honey, almonds",
        labels="Vegetarian",
    ),
}


class StubProductLookup:
    """Stub implementation of IProductLookup with a fixed product table."""

    async def __aenter__(self) -> "StubProductLookup":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        return None

    async def lookup_barcode(self, barcode: str) -> Optional[ScannedProduct]:
        return _PRODUCTS.get(barcode)
