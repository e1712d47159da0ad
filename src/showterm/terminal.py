"""Terminal geometry discovery."""

import logging
import shutil
import subprocess
from typing import Callable, Optional, Tuple

from showterm.session.base import DEFAULT_COLUMNS, DEFAULT_ROWS

logger = logging.getLogger(__name__)


def _tput(capability: str, runner: Callable[..., subprocess.CompletedProcess]) -> Optional[int]:
    try:
        result = runner(
            ["tput", capability],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    if result.returncode != 0:
        return None
    try:
        value = int(result.stdout.strip())
    except ValueError:
        return None
    return value if value > 0 else None


def terminal_size(
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> Tuple[int, int]:
    """
    Return the (columns, rows) of the controlling terminal.

    Asks tput first and falls back to the size Python sees, then 80x24.
    """
    fallback = shutil.get_terminal_size((DEFAULT_COLUMNS, DEFAULT_ROWS))
    columns = _tput("cols", runner) or fallback.columns
    rows = _tput("lines", runner) or fallback.lines
    logger.debug("Terminal size: %dx%d", columns, rows)
    return columns, rows
