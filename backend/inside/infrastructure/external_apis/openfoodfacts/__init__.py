"""Open Food Facts product lookup."""

from inside.infrastructure.external_apis.openfoodfacts.client import (
    OpenFoodFactsClient,
    map_to_scanned_product,
)

__all__ = ["OpenFoodFactsClient", "map_to_scanned_product"]
