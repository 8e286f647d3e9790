"""Open Food Facts product database client."""

import json
from dataclasses import dataclass
from typing import Protocol

import httpx

from caltrack.adapters.backend_client import build_url
from caltrack.domain.errors import (
    DecodeError,
    EmptyResponseError,
    HttpStatusError,
    LookupNotFoundError,
    NetworkError,
)


class ProductDbClient(Protocol):
    """Interface for product database lookups."""

    async def get_product(self, barcode: str) -> object:
        """Return the decoded JSON body for a barcode."""


@dataclass
class HttpxProductDbClient(ProductDbClient):
    """HTTPX-backed product database client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(
        cls, base_url: str, timeout_seconds: float, user_agent: str
    ) -> "HttpxProductDbClient":
        """Create a product database client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
            timeout_seconds=timeout_seconds,
        )

    async def get_product(self, barcode: str) -> object:
        """Fetch a product by barcode."""
        url = build_url(self.base_url, f"api/v0/product/{barcode}.json")
        try:
            response = await self.http_client.get(url, timeout=self.timeout_seconds)
        except httpx.HTTPError as exc:
            raise NetworkError(str(exc) or type(exc).__name__) from exc
        if response.status_code == httpx.codes.NOT_FOUND:
            raise LookupNotFoundError(barcode)
        if response.is_error:
            raise HttpStatusError(response.status_code)
        if not response.content.strip():
            raise EmptyResponseError
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodeError(str(exc)) from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
