"""Product lookup port (interface).

Defines contract for barcode lookup services (e.g., Open Food Facts).
"""

from typing import Optional, Protocol

from inside.domain.analysis.entities.scanned_product import ScannedProduct


class IProductLookup(Protocol):
    """Interface for barcode lookup services."""

    async def lookup_barcode(self, barcode: str) -> Optional[ScannedProduct]:
        """
        Look up product by barcode.

        Args:
            barcode: EAN/UPC code (e.g., "3017620422003")

        Returns:
            ScannedProduct if found, None otherwise

        Raises:
            GatewayError: On network failure or unreadable response
        """
        ...
