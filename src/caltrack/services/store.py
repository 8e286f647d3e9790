"""Client-side store holding the synchronized user and meal snapshot."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from pydantic import TypeAdapter, ValidationError

from caltrack.adapters.backend_client import BackendClient
from caltrack.domain.drafts import MealDraft, validate_draft
from caltrack.domain.errors import AddMealError, CalTrackError, DecodeError
from caltrack.domain.loading import Loaded, LoadFailed, Loading, LoadingState
from caltrack.domain.models import Meal, User
from caltrack.domain.progress import DailyProgress, compute_progress
from caltrack.domain.wire import UserPayload

_logger = logging.getLogger(__name__)

_USER_LIST = TypeAdapter(list[UserPayload])

HTTP_OK = 200

StoreListener = Callable[["MealStore"], None]


@dataclass
class MealStore:
    """Authoritative in-memory view of users and meals.

    The backend is the single source of truth: writes are never applied
    locally, every successful add is followed by a full refetch. All state
    changes happen on the event loop that first used the store.
    """

    client: BackendClient
    loading_state: LoadingState = field(default_factory=Loading)
    users: tuple[User, ...] = ()
    _listeners: list[StoreListener] = field(default_factory=list, repr=False)
    _fetch_sequence: int = field(default=0, repr=False)
    _loop: asyncio.AbstractEventLoop | None = field(default=None, repr=False)

    @property
    def current_user(self) -> User | None:
        """Return the user shown on screen, if any is loaded."""
        return self.users[0] if self.users else None

    def progress(self) -> DailyProgress | None:
        """Return daily progress for the current user."""
        user = self.current_user
        if user is None:
            return None
        return compute_progress(user)

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a listener called after each state change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def fetch_users(self) -> LoadingState:
        """Reload the full user list, replacing the snapshot on success."""
        self._bind_loop()
        self._fetch_sequence += 1
        sequence = self._fetch_sequence
        self._publish(Loading())
        try:
            raw = await self.client.fetch_users()
            users = _decode_users(raw)
        except CalTrackError as exc:
            if sequence != self._fetch_sequence:
                _logger.info("Dropping stale failed fetch #%s", sequence)
                return self.loading_state
            _logger.warning("Fetching users failed: %s", exc)
            self._publish(LoadFailed(str(exc)))
            return self.loading_state

        if sequence != self._fetch_sequence:
            _logger.info("Dropping stale fetch #%s", sequence)
            return self.loading_state
        _logger.info("Loaded %s users", len(users))
        self._publish(Loaded(), users=users)
        return self.loading_state

    async def add_meal(self, user_id: str, draft: MealDraft) -> Meal:
        """Validate and persist a meal, then resynchronize from the backend.

        Raises DraftValidationError before any network call when the draft
        is invalid, and AddMealError when the backend does not acknowledge
        the write. Store state is untouched in both cases.
        """
        self._bind_loop()
        meal = validate_draft(draft)
        try:
            status_code = await self.client.post_meal(user_id, meal.to_payload())
        except CalTrackError as exc:
            _logger.warning("Adding meal %r failed: %s", meal.name, exc)
            raise AddMealError(str(exc)) from exc
        if status_code != HTTP_OK:
            _logger.warning(
                "Adding meal %r failed with status %s", meal.name, status_code
            )
            raise AddMealError(f"status code {status_code}")
        _logger.info("Meal %r added for user %s", meal.name, user_id)
        await self.fetch_users()
        return meal

    def _publish(
        self, state: LoadingState, users: tuple[User, ...] | None = None
    ) -> None:
        if users is not None:
            self.users = users
        self.loading_state = state
        for listener in list(self._listeners):
            listener(self)

    def _bind_loop(self) -> None:
        loop = asyncio.get_running_loop()
        if self._loop is None or self._loop.is_closed():
            self._loop = loop
        elif self._loop is not loop:
            raise RuntimeError("MealStore used from a different event loop")


def _decode_users(raw: object) -> tuple[User, ...]:
    try:
        payloads = _USER_LIST.validate_python(raw)
    except ValidationError as exc:
        raise DecodeError(str(exc)) from exc
    return tuple(payload.to_domain() for payload in payloads)
