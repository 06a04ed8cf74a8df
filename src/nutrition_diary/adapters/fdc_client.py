"""USDA FoodData Central API client."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

_logger = logging.getLogger(__name__)


class FdcClient(Protocol):
    """Interface for FoodData Central API interactions."""

    async def search_foods(
        self, query: str, page_size: int = 20, page_number: int = 1
    ) -> dict[str, object]:
        """Search foods by query and return raw API data."""

    async def get_food(self, fdc_id: str) -> dict[str, object]:
        """Fetch a food by FDC id and return raw API data."""


@dataclass
class HttpxFdcClient(FdcClient):
    """HTTPX-backed FDC client.

    ``data_types`` narrows searches to FDC data types such as ``Foundation``
    or ``Branded``; empty means all types.
    """

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    data_types: tuple[str, ...] = field(default_factory=tuple)
    timeout_seconds: float = 15

    @classmethod
    def create(
        cls, api_key: str, base_url: str, data_types: tuple[str, ...] = ()
    ) -> "HttpxFdcClient":
        """Create an FDC client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            data_types=data_types,
        )

    async def search_foods(
        self, query: str, page_size: int = 20, page_number: int = 1
    ) -> dict[str, object]:
        """Search foods by query, one page at a time."""
        params: dict[str, str | int] = {
            "query": query,
            "pageSize": page_size,
            "pageNumber": page_number,
        }
        if self.data_types:
            params["dataType"] = ",".join(self.data_types)
        return await self._get("/foods/search", params)

    async def get_food(self, fdc_id: str) -> dict[str, object]:
        """Fetch a food by FDC id."""
        return await self._get(f"/food/{fdc_id}", {})

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _get(self, path: str, params: dict[str, str | int]) -> dict[str, object]:
        _logger.debug("FDC GET %s %s", path, params)
        response = await self.http_client.get(
            f"{self.base_url}{path}",
            params={"api_key": self.api_key, **params},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()
