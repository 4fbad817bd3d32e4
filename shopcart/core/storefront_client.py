import logging
import httpx
from typing import Optional

from pydantic import ValidationError

from shopcart.core.config import settings
from shopcart.schemas.cart import Product, Stock

logger = logging.getLogger(__name__)


class StorefrontAPIError(Exception):
    """A query against the storefront API did not succeed."""

    def __init__(self, product_id: int, reason: str):
        self.product_id = product_id
        self.reason = reason
        super().__init__(f"{reason} (product {product_id})")


class StockQueryError(StorefrontAPIError):
    pass


class ProductLookupError(StorefrontAPIError):
    pass


class StorefrontClient:
    """HTTP client for the storefront stock and product endpoints."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or settings.STOREFRONT_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.STOREFRONT_API_TIMEOUT
        self.transport = transport
        self.client = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.timeout, transport=self.transport)
        return self.client

    async def _get(self, path: str) -> httpx.Response:
        client = await self._get_client()
        return await client.get(f"{self.base_url}{path}")

    async def get_stock(self, product_id: int) -> Stock:
        """
        Get available stock for a product.

        GET /stock/{id}
        Returns: {"id": 1, "amount": 3}
        """
        try:
            response = await self._get(f"/stock/{product_id}")
        except httpx.HTTPError as e:
            logger.error(f"Stock query failed for product {product_id}: {str(e)}")
            raise StockQueryError(product_id, f"Stock query failed: {str(e)}")

        if response.status_code != 200:
            logger.warning(f"Stock query for product {product_id} returned status {response.status_code}")
            raise StockQueryError(product_id, f"Stock query returned status {response.status_code}")

        try:
            return Stock.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Malformed stock payload for product {product_id}: {str(e)}")
            raise StockQueryError(product_id, "Malformed stock payload")

    async def get_product(self, product_id: int) -> Product:
        """
        Get product details.

        GET /products/{id}
        Returns: {"id": 1, "title": "...", "price": 139.9, "image": "https://..."}
        """
        try:
            response = await self._get(f"/products/{product_id}")
        except httpx.HTTPError as e:
            logger.error(f"Product lookup failed for product {product_id}: {str(e)}")
            raise ProductLookupError(product_id, f"Product lookup failed: {str(e)}")

        if response.status_code != 200:
            logger.warning(f"Product lookup for product {product_id} returned status {response.status_code}")
            raise ProductLookupError(product_id, f"Product lookup returned status {response.status_code}")

        try:
            data = response.json()
            data.pop("amount", None)
            return Product.model_validate(data)
        except (ValueError, AttributeError, ValidationError) as e:
            logger.error(f"Malformed product payload for product {product_id}: {str(e)}")
            raise ProductLookupError(product_id, "Malformed product payload")

    async def close(self):
        """Close HTTP client."""
        if self.client:
            await self.client.aclose()
            self.client = None
