"""Loading states exposed by the store."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Loading:
    """A fetch is in progress or none has completed yet."""


@dataclass(frozen=True)
class Loaded:
    """The last honoured fetch succeeded."""


@dataclass(frozen=True)
class LoadFailed:
    """The last honoured fetch failed."""

    message: str


LoadingState = Loading | Loaded | LoadFailed
