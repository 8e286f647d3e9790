"""HTTP client for the user/meal backend."""

import json
import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from caltrack.domain.errors import (
    DecodeError,
    EmptyResponseError,
    HttpStatusError,
    InvalidURLError,
    NetworkError,
)

_logger = logging.getLogger(__name__)


class BackendClient(Protocol):
    """Interface for the remote user/meal service."""

    async def fetch_users(self) -> object:
        """Return the decoded JSON body of GET /users."""

    async def post_meal(self, user_id: str, meal: dict[str, object]) -> int:
        """POST a meal for a user and return the HTTP status code."""


@dataclass
class HttpxBackendClient(BackendClient):
    """HTTPX-backed backend client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(cls, base_url: str, timeout_seconds: float) -> "HttpxBackendClient":
        """Create a backend client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def fetch_users(self) -> object:
        """Fetch the full user list."""
        url = build_url(self.base_url, "users")
        _logger.info("Fetching users from %s", url)
        try:
            response = await self.http_client.get(url, timeout=self.timeout_seconds)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise HttpStatusError(exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(str(exc) or type(exc).__name__) from exc
        if not response.content.strip():
            raise EmptyResponseError
        _logger.debug("Received %s bytes of user data", len(response.content))
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodeError(str(exc)) from exc

    async def post_meal(self, user_id: str, meal: dict[str, object]) -> int:
        """Append a meal to a user's log."""
        url = build_url(self.base_url, "addMeal")
        payload = {"userID": user_id, "meal": meal}
        _logger.info("Adding meal for user %s", user_id)
        try:
            response = await self.http_client.post(
                url, json=payload, timeout=self.timeout_seconds
            )
        except httpx.HTTPError as exc:
            raise NetworkError(str(exc) or type(exc).__name__) from exc
        return response.status_code

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def build_url(base_url: str, path: str) -> str:
    """Join a base URL and path, rejecting anything that is not http(s)."""
    try:
        url = httpx.URL(f"{base_url.rstrip('/')}/{path.lstrip('/')}")
    except httpx.InvalidURL as exc:
        raise InvalidURLError(base_url) from exc
    if url.scheme not in {"http", "https"} or not url.host:
        raise InvalidURLError(base_url)
    return str(url)
