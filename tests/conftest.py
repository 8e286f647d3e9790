"""Shared test fixtures."""

import threading
from dataclasses import dataclass, field

import pytest

from caltrack.adapters.backend_client import BackendClient
from caltrack.adapters.product_db_client import ProductDbClient
from caltrack.config import Settings
from caltrack.domain.errors import CalTrackError, LookupNotFoundError


def user_payload(
    user_id: str = "u1",
    username: str = "gabriel",
    meals: list[dict[str, object]] | None = None,
) -> dict[str, object]:
    """Return a backend user record."""
    return {
        "_id": user_id,
        "username": username,
        "calorieGoal": 2000,
        "carbsGoal": 250,
        "fatGoal": 70,
        "proteinGoal": 150,
        "meals": meals if meals is not None else [],
    }


def meal_payload(  # noqa: PLR0913
    name: str = "Oatmeal",
    calories: int = 300,
    carbs: int = 54,
    fat: int = 5,
    protein: int = 10,
) -> dict[str, object]:
    """Return a backend meal record."""
    return {
        "name": name,
        "calories": calories,
        "carbs": carbs,
        "fat": fat,
        "protein": protein,
    }


def product_payload(  # noqa: PLR0913
    name: str | None = "Bar",
    calories: float = 250.4,
    carbs: float = 30.1,
    fat: float = 5.6,
    protein: float = 10.2,
) -> dict[str, object]:
    """Return a product database response for a found product."""
    product: dict[str, object] = {
        "nutriments": {
            "energy-kcal_100g": calories,
            "carbohydrates_100g": carbs,
            "proteins_100g": protein,
            "fat_100g": fat,
        }
    }
    if name is not None:
        product["product_name"] = name
    return {"status": 1, "product": product}


@dataclass
class FakeBackendClient(BackendClient):
    """Fake backend that serves queued responses and records writes."""

    users_responses: list[object] = field(
        default_factory=lambda: [[user_payload()]]
    )
    post_status: int = 200
    post_error: Exception | None = None
    fetch_calls: int = 0
    posted: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    events: list[str] = field(default_factory=list)

    async def fetch_users(self) -> object:
        self.fetch_calls += 1
        self.events.append("fetch")
        response = (
            self.users_responses.pop(0)
            if len(self.users_responses) > 1
            else self.users_responses[0]
        )
        if isinstance(response, CalTrackError):
            raise response
        return response

    async def post_meal(self, user_id: str, meal: dict[str, object]) -> int:
        self.events.append("post")
        if self.post_error is not None:
            raise self.post_error
        self.posted.append((user_id, meal))
        return self.post_status


@dataclass
class FakeProductDbClient(ProductDbClient):
    """Fake product database keyed by barcode."""

    products: dict[str, object] = field(default_factory=dict)
    error: Exception | None = None
    calls: list[str] = field(default_factory=list)

    async def get_product(self, barcode: str) -> object:
        self.calls.append(barcode)
        if self.error is not None:
            raise self.error
        if barcode not in self.products:
            raise LookupNotFoundError(barcode)
        return self.products[barcode]


@dataclass
class ScriptedCaptureDevice:
    """Capture device that replays decoded frames, then waits for release."""

    frames: list[str | None] = field(default_factory=list)
    failure: Exception | None = None
    open_calls: int = 0
    close_calls: int = 0
    reads: int = 0
    released: threading.Event = field(default_factory=threading.Event)

    def open(self) -> None:
        self.open_calls += 1

    def read_barcode(self) -> str | None:
        self.reads += 1
        if self.frames:
            return self.frames.pop(0)
        if self.failure is not None:
            raise self.failure
        self.released.wait(timeout=0.01)
        return None

    def close(self) -> None:
        self.close_calls += 1
        self.released.set()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        backend_base_url="http://backend.test",
        product_db_base_url="https://products.test",
        http_timeout_seconds=5,
    )
