"""
Recording interface for Showterm.

This module defines the canonical session representation and the interface
that every recording backend implements, so the backend chosen at runtime
can be swapped without touching its callers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from showterm.errors import FormatError

DEFAULT_COLUMNS = 80
DEFAULT_ROWS = 24


@dataclass
class TermSession:
    """A recorded terminal session in script/timing form."""

    script_text: bytes
    timing_text: str
    columns: int = DEFAULT_COLUMNS
    rows: int = DEFAULT_ROWS

    def timing_entries(self) -> List[Tuple[float, int]]:
        """
        Parse timing_text into (elapsed_seconds, byte_count) pairs.

        Raises:
            FormatError: If a line is not "<seconds> <count>"
        """
        entries = []
        for number, line in enumerate(self.timing_text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                elapsed, count = line.split()
                entries.append((float(elapsed), int(count)))
            except ValueError as e:
                raise FormatError(f"Invalid timing line {number}: {line!r}") from e
        return entries


class Recorder(ABC):
    """
    Abstract base class for recording backends.

    A recorder launches an external capture program and returns its result
    as a TermSession. Geometry is left at the defaults; the caller fills it in.
    """

    name: str = ""

    @abstractmethod
    def record(self, command: Optional[Sequence[str]] = None) -> TermSession:
        """
        Record a session.

        Args:
            command: Command to record; None records an interactive login shell

        Returns:
            The captured session

        Raises:
            RecorderUnavailableError: If the recorder cannot be launched
            FormatError: If the captured data cannot be converted
        """
        pass
