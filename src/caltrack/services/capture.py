"""Single-shot barcode capture sessions over a capture device."""

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from caltrack.domain.errors import CaptureCancelledError

_logger = logging.getLogger(__name__)

# Decoded lengths for EAN-8 and 8-digit UPC-E, EAN-13, and compressed UPC-E.
SUPPORTED_BARCODE_LENGTHS = frozenset({6, 8, 13})

# Upper bound on teardown when a device read cannot be interrupted.
DEFAULT_CLOSE_TIMEOUT_SECONDS = 0.5


class CaptureDevice(Protocol):
    """Camera or scanner that decodes linear barcodes."""

    def open(self) -> None:
        """Acquire the underlying device."""

    def read_barcode(self) -> str | None:
        """Decode the next frame; None when no barcode is visible."""

    def close(self) -> None:
        """Release the underlying device."""


def is_supported_barcode(value: str) -> bool:
    """Return True for EAN-8, EAN-13 and UPC-E digit strings."""
    return (
        value.isascii()
        and value.isdigit()
        and len(value) in SUPPORTED_BARCODE_LENGTHS
    )


class BarcodeCaptureSession:
    """Owns a capture device and yields at most one barcode.

    Decoding runs on a worker thread. The first supported barcode is handed
    to the event loop that started the session, after which the session
    stops itself and releases the device. Sessions cannot be restarted.
    """

    def __init__(
        self,
        device: CaptureDevice,
        poll_interval_seconds: float = 0.05,
        close_timeout_seconds: float = DEFAULT_CLOSE_TIMEOUT_SECONDS,
    ) -> None:
        self._device = device
        self._poll_interval_seconds = poll_interval_seconds
        self._close_timeout_seconds = close_timeout_seconds
        self._stop_event = threading.Event()
        self._release_lock = threading.Lock()
        self._released = False
        self._started = False
        self._thread: threading.Thread | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._future: asyncio.Future[str | None] | None = None

    @property
    def is_running(self) -> bool:
        """True while the device is held and no barcode was delivered."""
        return self._started and not self._stop_event.is_set()

    def start(self) -> None:
        """Acquire the device and begin decoding."""
        if self._started:
            raise RuntimeError("Capture sessions are single-use")
        self._started = True
        self._loop = asyncio.get_running_loop()
        self._future = self._loop.create_future()
        try:
            self._device.open()
        except Exception:
            self._stop_event.set()
            self._released = True
            raise
        self._thread = threading.Thread(
            target=self._run, name="barcode-capture", daemon=True
        )
        self._thread.start()
        _logger.info("Barcode capture started")

    def stop(self) -> None:
        """Stop decoding, discard any undelivered barcode, release the device."""
        self._stop_event.set()
        if self._future is not None and not self._future.done():
            self._future.set_result(None)
        self._release()

    async def result(self) -> str:
        """Wait for the decoded barcode.

        Raises CaptureCancelledError if the session was stopped first.
        """
        if self._future is None:
            raise RuntimeError("Capture session was never started")
        try:
            value = await self._future
        except asyncio.CancelledError:
            self.stop()
            raise
        if value is None:
            raise CaptureCancelledError
        return value

    async def wait_closed(self, timeout: float | None = None) -> bool:
        """Wait for the worker thread to finish.

        Returns False when the worker is still blocked in a device read after
        ``timeout`` seconds. The device has already been released by then and
        the daemon worker exits on its own once the read returns.
        """
        thread = self._thread
        if thread is None:
            return True
        await asyncio.to_thread(thread.join, timeout)
        if thread.is_alive():
            _logger.warning(
                "Capture worker still blocked in a device read; not waiting"
            )
            return False
        return True

    async def __aenter__(self) -> "BarcodeCaptureSession":
        self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        self.stop()
        await self.wait_closed(self._close_timeout_seconds)

    def _run(self) -> None:
        try:
            while not self._stop_event.is_set():
                value = self._device.read_barcode()
                if value is None:
                    self._stop_event.wait(self._poll_interval_seconds)
                    continue
                code = value.strip()
                if not is_supported_barcode(code):
                    _logger.debug("Ignoring unsupported barcode %r", code)
                    continue
                if self._stop_event.is_set():
                    break
                self._stop_event.set()
                self._post(self._deliver, code)
        except CaptureCancelledError:
            _logger.info("Barcode capture ended by the device")
            self._stop_event.set()
            self._post(self._deliver, None)
        except Exception as exc:
            _logger.exception("Barcode capture device failed")
            self._post(self._fail, exc)
        finally:
            self._release()

    def _deliver(self, code: str | None) -> None:
        if self._future is not None and not self._future.done():
            if code is not None:
                _logger.info("Barcode captured: %s", code)
            self._future.set_result(code)

    def _fail(self, exc: BaseException) -> None:
        if self._future is not None and not self._future.done():
            self._future.set_exception(exc)

    def _post(self, callback: Callable[..., None], *args: object) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            _logger.warning("Capture result dropped; event loop is closed")
            return
        loop.call_soon_threadsafe(callback, *args)

    def _release(self) -> None:
        with self._release_lock:
            if self._released:
                return
            self._released = True
        self._device.close()
        _logger.info("Barcode capture device released")


@dataclass
class BarcodeScanner:
    """Creates a fresh capture session on every activation."""

    device_factory: Callable[[], CaptureDevice]
    poll_interval_seconds: float = 0.05
    close_timeout_seconds: float = DEFAULT_CLOSE_TIMEOUT_SECONDS

    def activate(self) -> BarcodeCaptureSession:
        """Return a new, not yet started capture session."""
        return BarcodeCaptureSession(
            self.device_factory(),
            poll_interval_seconds=self.poll_interval_seconds,
            close_timeout_seconds=self.close_timeout_seconds,
        )
