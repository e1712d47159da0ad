"""
Showterm entry point.

This module provides the main() function: record a session and upload it,
delete an uploaded session, or retry a failed upload.
"""

import argparse
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Optional, Tuple

from showterm import __version__
from showterm.client.secret import SecretStore
from showterm.client.transport import ShowtermClient
from showterm.config import Config
from showterm.errors import ShowtermError, TransportError
from showterm.session.base import TermSession
from showterm.session.recorder import record_session
from showterm.terminal import terminal_size

logger = logging.getLogger(__name__)


def setup_logging(level: str = "WARNING") -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="showterm",
        description="Record a terminal session and share it on showterm.",
        epilog=(
            "With no command an interactive shell is recorded; exit it to finish.\n"
            "Set SHOWTERM_SERVER to upload to another server."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"showterm {__version__}",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: environment only)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (default: WARNING)",
    )

    action = parser.add_mutually_exclusive_group()
    action.add_argument(
        "--delete",
        metavar="URL",
        help="Delete a session you uploaded earlier",
    )
    action.add_argument(
        "--retry",
        nargs=2,
        type=Path,
        metavar=("SCRIPT", "TIMING"),
        help="Upload a saved script/timing pair from a failed upload",
    )

    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Command to record (default: your shell)",
    )

    args = parser.parse_args()
    if args.command and (args.delete or args.retry):
        parser.error("a command to record cannot be combined with --delete or --retry")
    return args


def load_config(path: Optional[Path]) -> Config:
    """Load configuration from a YAML file, or from the environment alone."""
    if path is None:
        return Config()
    return Config.from_file(path)


def save_for_retry(session: TermSession) -> Tuple[Path, Path]:
    """
    Save a session outside the scratch area so it survives this process.

    Returns:
        (script_path, timing_path)
    """
    fd, script_name = tempfile.mkstemp(prefix="showterm.", suffix=".script")
    with os.fdopen(fd, "wb") as f:
        f.write(session.script_text)
    fd, timing_name = tempfile.mkstemp(prefix="showterm.", suffix=".timing")
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(session.timing_text)
    return Path(script_name), Path(timing_name)


def load_for_retry(script_path: Path, timing_path: Path) -> TermSession:
    """
    Load a saved script/timing pair, sized for the current terminal.

    Raises:
        FormatError: If the timing file is malformed
    """
    columns, rows = terminal_size()
    session = TermSession(
        script_text=script_path.read_bytes(),
        timing_text=timing_path.read_text(encoding="utf-8"),
        columns=columns,
        rows=rows,
    )
    entries = session.timing_entries()
    logger.debug(
        f"Loaded {len(entries)} timing entries covering "
        f"{sum(count for _, count in entries)} of {len(session.script_text)} bytes"
    )
    return session


def upload_session(client: ShowtermClient, session: TermSession, keep_on_failure: bool) -> str:
    """
    Upload a session, saving it for a later --retry if the upload fails.

    Raises:
        TransportError: If the upload failed
    """
    print("Uploading, please wait.", flush=True)
    try:
        return client.upload(session)
    except TransportError:
        if keep_on_failure:
            script_path, timing_path = save_for_retry(session)
            logger.info(f"Saved failed upload to {script_path} and {timing_path}")
            print(
                "Upload failed. To try again run:\n"
                f"    showterm --retry {script_path} {timing_path}",
                file=sys.stderr,
            )
        raise


def run(args: argparse.Namespace, config: Config) -> int:
    """
    Execute the requested action.

    Returns:
        Exit code (0 for success)

    Raises:
        ShowtermError: If recording, uploading or deleting failed
    """
    secret = SecretStore(config.secret.path).get_or_create()
    client = ShowtermClient(config, secret)
    try:
        if args.delete:
            print(client.delete(args.delete))
            return 0

        if args.retry:
            session = load_for_retry(*args.retry)
            print(upload_session(client, session, keep_on_failure=False))
            return 0

        session = record_session(config.recording, args.command or None)
        print(upload_session(client, session, keep_on_failure=True))
        return 0
    finally:
        client.close()


def main() -> int:
    """
    Main entry point for showterm.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    args = parse_args()

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        setup_logging(args.log_level or "WARNING")
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_logging(args.log_level or config.logging.level)
    logger.debug(f"showterm v{__version__}, server {config.server_url}")

    try:
        return run(args, config)
    except ShowtermError as e:
        logger.debug("Showterm failed", exc_info=True)
        print(f"showterm: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
