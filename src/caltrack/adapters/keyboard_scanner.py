"""Capture device for keyboard-wedge barcode scanners."""

import sys
from dataclasses import dataclass, field
from typing import TextIO

from caltrack.domain.errors import CaptureCancelledError


@dataclass
class KeyboardWedgeDevice:
    """Reads one decoded barcode per line from a text stream.

    Handheld USB scanners type the decoded digits followed by a newline,
    so standard input doubles as a capture device.
    """

    stream: TextIO = field(default_factory=lambda: sys.stdin)
    is_open: bool = False

    def open(self) -> None:
        """Mark the device as acquired."""
        self.is_open = True

    def read_barcode(self) -> str | None:
        """Return the next non-blank line; end of input cancels the capture."""
        line = self.stream.readline()
        if line == "":
            raise CaptureCancelledError
        return line.strip() or None

    def close(self) -> None:
        """Mark the device as released; the stream is owned by the caller."""
        self.is_open = False
