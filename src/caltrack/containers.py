"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from caltrack.adapters.backend_client import HttpxBackendClient
from caltrack.adapters.keyboard_scanner import KeyboardWedgeDevice
from caltrack.adapters.product_db_client import HttpxProductDbClient
from caltrack.config import Settings
from caltrack.services.capture import BarcodeScanner, CaptureDevice
from caltrack.services.ingestion import MealIngestionPipeline
from caltrack.services.lookup import NutritionLookupService
from caltrack.services.store import MealStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: MealStore
    lookup_service: NutritionLookupService
    pipeline: MealIngestionPipeline
    scanner: BarcodeScanner
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None,
    device_factory: Callable[[], CaptureDevice] | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    backend_client = HttpxBackendClient.create(
        base_url=resolved_settings.backend_base_url,
        timeout_seconds=resolved_settings.http_timeout_seconds,
    )
    product_db_client = HttpxProductDbClient.create(
        base_url=resolved_settings.product_db_base_url,
        timeout_seconds=resolved_settings.http_timeout_seconds,
        user_agent=resolved_settings.user_agent,
    )
    store = MealStore(backend_client)
    lookup_service = NutritionLookupService(
        client=product_db_client,
        fallback_name=resolved_settings.fallback_product_name,
    )
    pipeline = MealIngestionPipeline(store=store, lookup_service=lookup_service)
    scanner = BarcodeScanner(device_factory or KeyboardWedgeDevice)

    async def close_resources() -> None:
        await backend_client.close()
        await product_db_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        lookup_service=lookup_service,
        pipeline=pipeline,
        scanner=scanner,
        close_resources=close_resources,
    )
