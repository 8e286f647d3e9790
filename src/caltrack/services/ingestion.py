"""State machine turning scans and manual entries into logged meals."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from caltrack.domain.drafts import MealDraft, collect_errors
from caltrack.domain.errors import (
    AddMealError,
    CaptureCancelledError,
    FieldValidationError,
)
from caltrack.domain.models import Meal
from caltrack.services.capture import BarcodeCaptureSession
from caltrack.services.lookup import (
    LookupFound,
    LookupNotFound,
    NutritionLookupService,
)
from caltrack.services.store import MealStore

_logger = logging.getLogger(__name__)


class IngestionState(Enum):
    """Pipeline states."""

    IDLE = "IDLE"
    LOOKING_UP = "LOOKING_UP"
    DRAFTING = "DRAFTING"
    VALIDATING = "VALIDATING"
    COMMITTING = "COMMITTING"


PipelineListener = Callable[["MealIngestionPipeline"], None]


@dataclass
class MealIngestionPipeline:
    """Capture, lookup, edit and commit of a single meal at a time."""

    store: MealStore
    lookup_service: NutritionLookupService
    state: IngestionState = IngestionState.IDLE
    draft: MealDraft | None = None
    barcode: str | None = None
    error: str | None = None
    field_errors: list[FieldValidationError] = field(default_factory=list)
    last_meal: Meal | None = None
    _lookup_token: int = field(default=0, repr=False)
    _listeners: list[PipelineListener] = field(default_factory=list, repr=False)

    def subscribe(self, listener: PipelineListener) -> Callable[[], None]:
        """Register a listener called after each transition."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def scan(self, session: BarcodeCaptureSession) -> IngestionState:
        """Run a capture session and feed its barcode into a lookup."""
        if self.state is not IngestionState.IDLE:
            _logger.info("Ignoring scan request while %s", self.state.value)
            return self.state
        async with session:
            try:
                barcode = await session.result()
            except CaptureCancelledError:
                _logger.info("Scan cancelled before a barcode was captured")
                return self.state
        return await self.handle_barcode(barcode)

    async def handle_barcode(self, barcode: str) -> IngestionState:
        """Look up a captured barcode and present the prefilled draft."""
        if self.state is not IngestionState.IDLE:
            _logger.info(
                "Ignoring barcode %s while %s", barcode, self.state.value
            )
            return self.state
        self._lookup_token += 1
        token = self._lookup_token
        self._transition(
            IngestionState.LOOKING_UP,
            barcode=barcode,
            draft=None,
            error=None,
            field_errors=[],
        )
        try:
            result = await self.lookup_service.lookup(barcode)
        except Exception as exc:
            _logger.exception("Lookup crashed", extra={"barcode": barcode})
            if token == self._lookup_token:
                self._transition(IngestionState.IDLE, error=f"Lookup failed: {exc}")
            return self.state
        if token != self._lookup_token:
            _logger.info("Discarding lookup result for cancelled scan %s", barcode)
            return self.state

        if isinstance(result, LookupFound):
            self._transition(IngestionState.DRAFTING, draft=result.draft)
        elif isinstance(result, LookupNotFound):
            self._transition(
                IngestionState.IDLE,
                error=f"No product found for barcode {result.barcode}",
            )
        else:
            self._transition(IngestionState.IDLE, error=result.reason)
        return self.state

    def start_manual_entry(self) -> IngestionState:
        """Open an empty draft for manual entry."""
        if self.state is not IngestionState.IDLE:
            _logger.info("Ignoring manual entry while %s", self.state.value)
            return self.state
        self._transition(
            IngestionState.DRAFTING,
            draft=MealDraft.empty(),
            barcode=None,
            error=None,
            field_errors=[],
        )
        return self.state

    def update_draft(self, **changes: str) -> MealDraft:
        """Edit fields of the current draft."""
        if self.state is not IngestionState.DRAFTING or self.draft is None:
            raise RuntimeError("No draft is being edited")
        self._transition(
            IngestionState.DRAFTING, draft=self.draft.with_changes(**changes)
        )
        return self.draft

    async def confirm(self, user_id: str | None = None) -> IngestionState:
        """Validate the draft and commit it through the store.

        Invalid drafts return to DRAFTING with every failing field listed.
        The pipeline reaches IDLE only after the store's refresh settles.
        """
        if self.state is not IngestionState.DRAFTING or self.draft is None:
            raise RuntimeError("No draft to confirm")
        draft = self.draft
        self._transition(IngestionState.VALIDATING, error=None)
        errors = collect_errors(draft)
        if errors:
            self._transition(IngestionState.DRAFTING, field_errors=errors)
            return self.state

        target_user = user_id or _current_user_id(self.store)
        if target_user is None:
            self._transition(
                IngestionState.DRAFTING,
                field_errors=[],
                error="No user loaded to add the meal to",
            )
            return self.state

        self._transition(IngestionState.COMMITTING, field_errors=[])
        try:
            meal = await self.store.add_meal(target_user, draft)
        except AddMealError as exc:
            self._transition(IngestionState.IDLE, draft=None, error=str(exc))
            return self.state
        except Exception as exc:
            _logger.exception("Committing meal %r crashed", draft.name)
            self._transition(
                IngestionState.IDLE, draft=None, error=f"Failed to add meal: {exc}"
            )
            return self.state
        self._transition(IngestionState.IDLE, draft=None, last_meal=meal)
        return self.state

    def cancel(self) -> IngestionState:
        """Abandon the current draft or in-flight lookup."""
        if self.state in {IngestionState.DRAFTING, IngestionState.LOOKING_UP}:
            self._lookup_token += 1
            self._transition(
                IngestionState.IDLE, draft=None, error=None, field_errors=[]
            )
        elif self.state is not IngestionState.IDLE:
            _logger.info("Cannot cancel while %s", self.state.value)
        return self.state

    def _transition(self, state: IngestionState, **changes: object) -> None:
        for name, value in changes.items():
            setattr(self, name, value)
        self.state = state
        for listener in list(self._listeners):
            listener(self)


def _current_user_id(store: MealStore) -> str | None:
    user = store.current_user
    return user.id if user is not None else None
