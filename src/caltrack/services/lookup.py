"""Barcode nutrition lookup against the product database."""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from pydantic import ValidationError

from caltrack.adapters.product_db_client import ProductDbClient
from caltrack.domain.drafts import MealDraft
from caltrack.domain.errors import CalTrackError, LookupNotFoundError
from caltrack.domain.wire import ProductPayload, ProductResponse

_logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_NAME = "Unknown Product"


@dataclass(frozen=True)
class LookupFound:
    """Product resolved into a prefilled draft."""

    barcode: str
    draft: MealDraft


@dataclass(frozen=True)
class LookupNotFound:
    """Product database has no usable entry for the barcode."""

    barcode: str


@dataclass(frozen=True)
class LookupFailed:
    """Lookup could not complete."""

    barcode: str
    reason: str


NutritionResult = LookupFound | LookupNotFound | LookupFailed


@dataclass
class NutritionLookupService:
    """Resolve barcodes to meal drafts via the product database."""

    client: ProductDbClient
    fallback_name: str = DEFAULT_FALLBACK_NAME

    async def lookup(self, barcode: str) -> NutritionResult:
        """Look up a barcode and normalize the product into a draft."""
        code = barcode.strip()
        if not code.isdigit() or not code.isascii():
            return LookupFailed(barcode=barcode, reason=f"Invalid barcode: {barcode!r}")
        try:
            raw = await self.client.get_product(code)
        except LookupNotFoundError:
            _logger.info("Product not found", extra={"barcode": code})
            return LookupNotFound(barcode=code)
        except CalTrackError as exc:
            _logger.warning("Product lookup failed for %s: %s", code, exc)
            return LookupFailed(barcode=code, reason=str(exc))

        try:
            response = ProductResponse.model_validate(raw)
        except ValidationError as exc:
            _logger.warning("Product payload for %s did not validate: %s", code, exc)
            return LookupFailed(barcode=code, reason=f"Data decoding error: {exc}")

        if not response.is_found() or response.product is None:
            _logger.info("Product not found", extra={"barcode": code})
            return LookupNotFound(barcode=code)

        try:
            draft = self._to_draft(response.product)
        except InvalidOperation:
            _logger.warning("Product %s has out-of-range nutriment values", code)
            return LookupFailed(
                barcode=code, reason="Data decoding error: nutriment value out of range"
            )
        _logger.info("Product found: barcode=%s name=%s", code, draft.name)
        return LookupFound(barcode=code, draft=draft)

    def _to_draft(self, product: ProductPayload) -> MealDraft:
        nutriments = product.nutriments
        name = product.product_name
        if name is None or not name.strip():
            name = self.fallback_name
        return MealDraft.from_values(
            name=name,
            calories=round_half_away(nutriments.energy_kcal_100g),
            carbs=round_half_away(nutriments.carbohydrates_100g),
            fat=round_half_away(nutriments.fat_100g),
            protein=round_half_away(nutriments.proteins_100g),
        )


def round_half_away(value: float | None) -> int:
    """Round to the nearest integer, halves away from zero; None counts as 0."""
    if value is None:
        return 0
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))
