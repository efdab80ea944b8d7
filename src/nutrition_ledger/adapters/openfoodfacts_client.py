"""OpenFoodFacts product catalog client."""

from dataclasses import dataclass
from http import HTTPStatus
from typing import Protocol

import httpx


class CatalogClient(Protocol):
    """Interface for product catalog lookups."""

    async def get_product(self, code: str) -> dict[str, object]:
        """Fetch a product by code and return raw API data."""


@dataclass
class HttpxOpenFoodFactsClient(CatalogClient):
    """HTTPX-backed OpenFoodFacts client."""

    base_url: str
    http_client: httpx.AsyncClient
    user_agent: str = "nutrition-ledger/0.1"

    @classmethod
    def create(cls, base_url: str) -> "HttpxOpenFoodFactsClient":
        """Create a catalog client with a managed httpx session."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    async def get_product(self, code: str) -> dict[str, object]:
        """Fetch a product by barcode.

        Unknown codes yield an empty payload instead of an error.
        """
        url = f"{self.base_url}/product/{code}.json"
        response = await self.http_client.get(
            url,
            headers={"User-Agent": self.user_agent},
            timeout=15,
        )
        if response.status_code == HTTPStatus.NOT_FOUND:
            return {}
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
