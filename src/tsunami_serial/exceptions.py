"""Exceptions raised by the Tsunami serial library."""

from __future__ import annotations


class TsunamiError(Exception):
    """Base exception for all library errors."""


class TransportError(TsunamiError):
    """The serial transport failed."""


class TransportOpenError(TransportError):
    """The serial port could not be opened."""


class TransportWriteError(TransportError):
    """A frame could not be written in full."""


class TransportReadError(TransportError):
    """Reading from the serial port failed.

    A drain treats this as the end of its read cycle, not as a fatal error.
    """


class BadFramingError(TsunamiError):
    """The inbound byte stream broke the frame layout."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
