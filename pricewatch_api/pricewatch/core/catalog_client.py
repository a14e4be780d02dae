"""
Catalog API client (price-monitoring backend) with retry logic.
"""

import asyncio
import logging
import random
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import httpx

from pricewatch.core.category_tree import CategoryNode, parse_category_tree
from pricewatch.core.query_builder import ProductQuery, to_request_params

logger = logging.getLogger(__name__)


class CatalogAPIError(Exception):
    """Catalog API request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CatalogClient:
    """
    Async client for the Catalog API.

    Covers the category tree, the product listing and the basket hand-off
    used by the products view.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        separator: str = "/",
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize Catalog API client.

        Args:
            base_url: Catalog API base URL (e.g., http://catalog:8000)
            token: Optional bearer token
            timeout: Request timeout in seconds
            max_retries: Retry attempts for retryable failures
            separator: Category path separator
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip('/')
        self.max_retries = max_retries
        self.separator = separator

        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self.client = httpx.AsyncClient(
            timeout=timeout,
            headers=headers,
            follow_redirects=True,
            transport=transport
        )

    async def close(self):
        await self.client.aclose()

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Any] = None,
        json_data: Optional[Dict] = None,
        initial_delay: float = 0.5,
        backoff_factor: float = 2.0
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic.

        Args:
            method: HTTP method
            endpoint: API endpoint (relative to base_url)
            params: Query parameters (dict or list of pairs)
            json_data: JSON body
            initial_delay: Initial retry delay in seconds
            backoff_factor: Backoff multiplier

        Returns:
            httpx.Response

        Raises:
            CatalogAPIError: If request fails after retries
        """
        url = urljoin(self.base_url + '/', endpoint.lstrip('/'))
        max_retries = self.max_retries

        for attempt in range(max_retries + 1):
            delay = min(initial_delay * (backoff_factor ** attempt), 10.0)

            try:
                response = await self.client.request(
                    method=method,
                    url=url,
                    params=params,
                    json=json_data
                )
            except httpx.TimeoutException as e:
                if attempt < max_retries:
                    await asyncio.sleep(delay)
                    continue
                raise CatalogAPIError(f"Timeout after {max_retries} retries: {e}")
            except httpx.RequestError as e:
                if attempt < max_retries:
                    await asyncio.sleep(delay)
                    continue
                raise CatalogAPIError(f"Request error after {max_retries} retries: {e}")

            if response.status_code in (200, 201, 204):
                return response

            # Non-retryable errors
            if response.status_code in (400, 401, 403, 404, 422):
                raise CatalogAPIError(
                    f"HTTP {response.status_code} @ {endpoint}: {response.text[:200]}",
                    status_code=response.status_code
                )

            if response.status_code in (429, 500, 502, 503, 504) and attempt < max_retries:
                logger.warning(f"Catalog API {endpoint} returned {response.status_code}, retrying ({attempt + 1}/{max_retries})")
                await asyncio.sleep(delay + random.uniform(0, 0.2))
                continue

            raise CatalogAPIError(
                f"HTTP {response.status_code} @ {endpoint}: {response.text[:200]}",
                status_code=response.status_code
            )

        raise CatalogAPIError(f"Request failed after {max_retries} retries: {endpoint}")

    async def get_category_tree_raw(self) -> List[Dict]:
        """Fetch the nested category tree as returned by the Catalog API."""
        response = await self._request("GET", "/api/v1/categories/tree")
        if response.status_code == 204:
            return []
        data = response.json()
        return data if isinstance(data, list) else []

    async def fetch_category_tree(self) -> List[CategoryNode]:
        """
        Fetch and parse the category tree.

        Any failure is logged and yields an empty forest.
        """
        try:
            raw = await self.get_category_tree_raw()
        except (CatalogAPIError, ValueError) as e:
            logger.warning(f"Category tree unavailable, using empty tree: {e}")
            return []
        return parse_category_tree(raw, self.separator)

    async def fetch_products(
        self,
        query: ProductQuery,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Fetch the product listing for a query.

        Returns:
            Dict with 'items' list and 'total' count
        """
        params = to_request_params(query, limit=limit, offset=offset)
        response = await self._request("GET", "/api/v1/products", params=params)
        data = response.json() if response.status_code != 204 else {}
        items = (data.get("items") or []) if isinstance(data, dict) else []
        total = data.get("total") if isinstance(data, dict) else None
        return {
            "items": items,
            "total": total if isinstance(total, int) else len(items)
        }

    async def list_baskets(self) -> List[Dict]:
        response = await self._request("GET", "/api/v1/baskets")
        data = response.json() if response.status_code != 204 else {}
        return (data.get("items") or []) if isinstance(data, dict) else []

    async def add_products_to_basket(self, basket_id: int, product_ids: List[int]) -> bool:
        """
        Add products to an analysis basket.

        Returns:
            True on success
        """
        await self._request(
            "POST",
            f"/api/v1/baskets/{basket_id}/products",
            json_data={"productIds": product_ids}
        )
        return True
