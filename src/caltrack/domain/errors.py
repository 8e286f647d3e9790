"""Error taxonomy for sync and ingestion failures."""


class CalTrackError(Exception):
    """Base class for all caltrack errors."""


class InvalidURLError(CalTrackError):
    """A configured endpoint could not be turned into a request URL."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid URL: {url}")
        self.url = url


class NetworkError(CalTrackError):
    """Transport-level failure talking to a remote service."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Network error: {detail}")
        self.detail = detail


class HttpStatusError(NetworkError):
    """Remote service answered with an unexpected HTTP status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"unexpected status code {status_code}")
        self.status_code = status_code


class EmptyResponseError(CalTrackError):
    """Remote service returned no body."""

    def __init__(self) -> None:
        super().__init__("No data received from server")


class DecodeError(CalTrackError):
    """Response body did not match the expected schema."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Data decoding error: {detail}")
        self.detail = detail


class LookupNotFoundError(CalTrackError):
    """Barcode is unknown to the product database."""

    def __init__(self, barcode: str) -> None:
        super().__init__(f"Product {barcode} not found")
        self.barcode = barcode


class FieldValidationError(CalTrackError):
    """A single draft field failed validation."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class DraftValidationError(CalTrackError):
    """One or more draft fields failed validation."""

    def __init__(self, errors: list[FieldValidationError]) -> None:
        fields = ", ".join(error.field for error in errors)
        super().__init__(f"Invalid meal fields: {fields}")
        self.errors = errors

    @property
    def fields(self) -> list[str]:
        """Names of the failing fields in check order."""
        return [error.field for error in self.errors]


class AddMealError(CalTrackError):
    """Backend rejected or never acknowledged a new meal."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Failed to add meal: {detail}")
        self.detail = detail


class CaptureCancelledError(CalTrackError):
    """Capture session ended without delivering a barcode."""

    def __init__(self) -> None:
        super().__init__("Barcode capture cancelled")
