"""Open Food Facts API client - Implements IProductLookup port.

Key Features:
- Product lookup by barcode (public API, no key required)
- English name/ingredients preferred, local variants as fallback
- Label claims extracted for the product safety prompt
- No retry: a failed lookup is reported once to the caller
"""

import logging
from typing import Any, Dict, Optional

import httpx

from inside.domain.analysis.entities.scanned_product import (
    UNKNOWN_PRODUCT_NAME,
    UNLISTED_INGREDIENTS,
    ScannedProduct,
)
from inside.domain.analysis.exceptions.domain_errors import (
    GatewayError,
    GatewayErrorKind,
)
from inside.infrastructure.config import DEFAULT_OFF_BASE_URL

logger = logging.getLogger(__name__)


def _first_text(product_data: Dict[str, Any], *keys: str) -> Optional[str]:
    """Return the first non-blank string value among keys."""
    for key in keys:
        value = product_data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def map_to_scanned_product(barcode: str, product_data: Dict[str, Any]) -> ScannedProduct:
    """
    Map Open Food Facts product data to ScannedProduct domain entity.

    - Name: product_name_en, fallback product_name
    - Ingredients: ingredients_text_en, fallback ingredients_text
    - Labels: labels (comma separated claims, e.g. "Organic, Vegan")

    Example:
        >>> map_to_scanned_product("123", {"product_name": "Biscotti"}).name
        'Biscotti'
    """
    return ScannedProduct(
        barcode=barcode,
        name=_first_text(product_data, "product_name_en", "product_name")
        or UNKNOWN_PRODUCT_NAME,
        ingredients_text=_first_text(
            product_data, "ingredients_text_en", "ingredients_text"
        )
        or UNLISTED_INGREDIENTS,
        labels=_first_text(product_data, "labels_en", "labels") or "",
    )


class OpenFoodFactsClient:
    """
    Open Food Facts API client implementing IProductLookup port.

    Example:
        >>> async with OpenFoodFactsClient() as client:
        ...     product = await client.lookup_barcode("3017620422003")
        ...     if product:
        ...         print(f"Found: {product.name}")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_OFF_BASE_URL,
        timeout_s: float = 8.0,
        session: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize Open Food Facts client.

        Args:
            base_url: Product endpoint root (".../api/v0/product")
            timeout_s: Request timeout
            session: Optional pre-configured httpx client (for testing)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._session = session

    async def __aenter__(self) -> "OpenFoodFactsClient":
        """Async context manager entry."""
        if self._session is None:
            self._session = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout_s))
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        if self._session:
            await self._session.aclose()
            self._session = None

    async def lookup_barcode(self, barcode: str) -> Optional[ScannedProduct]:
        """
        Look up product by barcode.

        Implements IProductLookup.lookup_barcode() port.

        Args:
            barcode: EAN/UPC code (e.g., "3017620422003")

        Returns:
            ScannedProduct if found, None if not found

        Raises:
            RuntimeError: If used outside the async context manager
            GatewayError: TRANSPORT_FAILURE on network/server errors,
                MALFORMED_ENVELOPE on unreadable responses
        """
        if not self._session:
            raise RuntimeError("Client not initialized. Use async context manager.")

        url = f"{self._base_url}/{barcode}.json"

        logger.debug("Looking up barcode", extra={"barcode": barcode})

        try:
            response = await self._session.get(url)
        except httpx.TimeoutException as exc:
            logger.error("Open Food Facts API timeout", extra={"barcode": barcode})
            raise GatewayError(
                GatewayErrorKind.TRANSPORT_FAILURE, "Product lookup timed out"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "Open Food Facts API error",
                extra={"barcode": barcode, "error": str(exc)},
            )
            raise GatewayError(GatewayErrorKind.TRANSPORT_FAILURE, str(exc)) from exc

        # Product not found - return None as per port contract
        if response.status_code == 404:
            logger.info("Barcode not found", extra={"barcode": barcode})
            return None

        if response.status_code != 200:
            logger.warning(
                "Open Food Facts unexpected status",
                extra={"barcode": barcode, "status": response.status_code},
            )
            raise GatewayError(
                GatewayErrorKind.TRANSPORT_FAILURE,
                f"Product lookup failed with HTTP {response.status_code}",
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise GatewayError(
                GatewayErrorKind.MALFORMED_ENVELOPE, "Product response is not JSON"
            ) from exc

        if not isinstance(data, dict):
            raise GatewayError(
                GatewayErrorKind.MALFORMED_ENVELOPE, "Product response is not an object"
            )

        # API returns status=0 for not found
        if data.get("status") != 1:
            logger.info("Product not found (status=0)", extra={"barcode": barcode})
            return None

        product_data = data.get("product")
        if not isinstance(product_data, dict) or not product_data:
            logger.warning("Empty product data", extra={"barcode": barcode})
            return None

        product = map_to_scanned_product(barcode, product_data)

        logger.info(
            "Barcode lookup successful",
            extra={
                "barcode": barcode,
                "product_name": product.name,
                "has_ingredients": product.has_ingredients(),
            },
        )
        return product
