"""Scratch files for raw recorder output."""

import atexit
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Set

logger = logging.getLogger(__name__)

# Paths still on disk; removed at interpreter exit if their scope never closed.
_pending: Set[Path] = set()


def _remove(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("Failed to remove scratch file %s", path, exc_info=True)
    _pending.discard(path)


@atexit.register
def _remove_pending() -> None:
    for path in list(_pending):
        _remove(path)


class ScratchFiles:
    """
    Allocates empty scratch files and removes them when the scope exits.

    Files are also registered for removal at process exit, so nothing is
    left behind when the scope is never closed.

    Usage:
        with ScratchFiles() as scratch:
            script_path = scratch.create("showterm.script")
    """

    def __init__(self, directory: Optional[Path] = None) -> None:
        self._directory = directory
        self._paths: List[Path] = []

    def create(self, prefix: str = "showterm.") -> Path:
        """Create an empty file and return its path."""
        fd, name = tempfile.mkstemp(prefix=prefix, dir=self._directory)
        os.close(fd)
        path = Path(name)
        self._paths.append(path)
        _pending.add(path)
        logger.debug("Created scratch file %s", path)
        return path

    def cleanup(self) -> None:
        """Remove every file created by this scope. Safe to call twice."""
        while self._paths:
            _remove(self._paths.pop())

    def __enter__(self) -> "ScratchFiles":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()
