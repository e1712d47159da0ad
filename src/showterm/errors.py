"""
Exception hierarchy for Showterm.

Library code raises these; only the command line entry point catches them.
"""

from typing import Optional


class ShowtermError(Exception):
    """Base class for all Showterm errors."""


class RecorderUnavailableError(ShowtermError):
    """No usable recorder executable could be launched."""


class FormatError(ShowtermError):
    """A ttyrecord stream is truncated or otherwise malformed."""


class TransportError(ShowtermError):
    """The showterm server could not be reached."""


class RemoteError(TransportError):
    """The showterm server answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
