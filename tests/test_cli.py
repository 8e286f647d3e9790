"""Tests for the command-line entry point."""

import io
import json
import logging
from collections.abc import Callable

import httpx

from caltrack.adapters.backend_client import HttpxBackendClient
from caltrack.adapters.keyboard_scanner import KeyboardWedgeDevice
from caltrack.adapters.product_db_client import HttpxProductDbClient
from caltrack.cli import main
from caltrack.config import Settings
from caltrack.containers import AppContainer
from caltrack.services.capture import BarcodeScanner
from caltrack.services.ingestion import MealIngestionPipeline
from caltrack.services.lookup import NutritionLookupService
from caltrack.services.store import MealStore
from tests.conftest import meal_payload, product_payload, user_payload


class FakeServer:
    """In-memory backend and product database behind httpx.MockTransport."""

    def __init__(self) -> None:
        self.meals: list[dict[str, object]] = [meal_payload()]
        self.posts: list[dict[str, object]] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "products.test":
            if request.url.path == "/api/v0/product/0123456789012.json":
                return httpx.Response(200, json=product_payload())
            return httpx.Response(200, json={"status": 0})
        if request.method == "GET" and request.url.path == "/users":
            return httpx.Response(200, json=[user_payload(meals=list(self.meals))])
        if request.method == "POST" and request.url.path == "/addMeal":
            body = json.loads(request.content.decode())
            self.posts.append(body)
            self.meals.append(body["meal"])
            return httpx.Response(200, json={"ok": True})
        return httpx.Response(404)


def _factory(server: FakeServer, stdin: str = "") -> Callable[[], AppContainer]:
    def build() -> AppContainer:
        transport = httpx.MockTransport(server.handle)
        backend = HttpxBackendClient(
            base_url="http://backend.test",
            http_client=httpx.AsyncClient(transport=transport),
        )
        products = HttpxProductDbClient(
            base_url="https://products.test",
            http_client=httpx.AsyncClient(transport=transport),
        )
        store = MealStore(backend)
        lookup_service = NutritionLookupService(products)
        scanner = BarcodeScanner(
            lambda: KeyboardWedgeDevice(stream=io.StringIO(stdin)),
            poll_interval_seconds=0,
        )

        async def close_resources() -> None:
            await backend.close()
            await products.close()

        return AppContainer(
            settings=Settings(),
            store=store,
            lookup_service=lookup_service,
            pipeline=MealIngestionPipeline(store=store, lookup_service=lookup_service),
            scanner=scanner,
            close_resources=close_resources,
        )

    return build


def test_users_command_prints_progress(capsys) -> None:
    exit_code = main(["users"], container_factory=_factory(FakeServer()))

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Welcome, gabriel" in out
    assert "You need 1700 more calories to reach your goal" in out
    assert "- Oatmeal: 300 kcal" in out


def test_lookup_command_prints_draft(capsys) -> None:
    exit_code = main(
        ["lookup", "0123456789012"], container_factory=_factory(FakeServer())
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Bar: calories=250 carbs=30 fat=6 protein=10" in out


def test_lookup_command_reports_not_found(capsys) -> None:
    exit_code = main(["lookup", "12345670"], container_factory=_factory(FakeServer()))

    assert exit_code == 1
    assert "No product found" in capsys.readouterr().out


def test_add_meal_command_commits_and_refreshes(capsys) -> None:
    server = FakeServer()

    exit_code = main(
        [
            "add-meal",
            "--name",
            "Salad",
            "--calories",
            "120",
            "--carbs",
            "10",
            "--fat",
            "7",
            "--protein",
            "3",
        ],
        container_factory=_factory(server),
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert server.posts == [
        {
            "userID": "u1",
            "meal": {
                "name": "Salad",
                "calories": 120,
                "protein": 3,
                "fat": 7,
                "carbs": 10,
            },
        }
    ]
    assert "- Salad: 120 kcal" in out


def test_add_meal_command_reports_invalid_fields(capsys) -> None:
    server = FakeServer()

    exit_code = main(
        [
            "add-meal",
            "--user-id",
            "u1",
            "--name",
            "Salad",
            "--calories",
            "lots",
            "--carbs",
            "10",
            "--fat",
            "7",
            "--protein",
            "x",
        ],
        container_factory=_factory(server),
    )

    out = capsys.readouterr().out
    assert exit_code == 1
    assert "! calories" in out
    assert "! protein" in out
    assert server.posts == []


def test_scan_command_adds_scanned_product(capsys) -> None:
    server = FakeServer()

    exit_code = main(
        ["scan", "--add", "--user-id", "u1"],
        container_factory=_factory(server, stdin="0123456789012\n"),
    )

    assert exit_code == 0
    assert server.posts[0]["meal"] == {
        "name": "Bar",
        "calories": 250,
        "protein": 10,
        "fat": 6,
        "carbs": 30,
    }
    assert "Last added: Bar" in capsys.readouterr().out


def test_scan_command_without_input_fails(capsys) -> None:
    exit_code = main(["scan"], container_factory=_factory(FakeServer()))

    assert exit_code == 1
    assert "[IDLE]" in capsys.readouterr().out


def test_verbose_flag_enables_debug_logging() -> None:
    logger = logging.getLogger("caltrack")

    main(["-v", "users"], container_factory=_factory(FakeServer()))

    assert logger.level == logging.DEBUG
    logger.setLevel(logging.INFO)
