"""
Session recording backends for Showterm.

Two external programs can capture a terminal session:

- script(1), which natively writes the script/timing pair. Its timing data
  goes to stderr, so it is launched through a shell that redirects stderr
  to a file.
- ttyrec, which writes one binary ttyrecord file that is then converted.

Which one works varies by platform (BSD script has no timing output, some
builds fail silently). script is probed with a trivial command and its output
inspected; versions and exit codes are not consulted.
"""

import logging
import re
import shlex
import subprocess
import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TextIO, Tuple

from showterm.config import RecordingConfig
from showterm.errors import RecorderUnavailableError
from showterm.session.base import Recorder, TermSession
from showterm.session.converter import convert
from showterm.session.tempfiles import ScratchFiles
from showterm.terminal import terminal_size

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]

TTYREC_INSTALL_HINT = (
    "Could not run 'ttyrec', please install it "
    "(brew install ttyrec, apt-get install ttyrec or yum install ttyrec)"
)

START_NOTICE = "showterm recording. (Exit shell when done.)"
FINISH_NOTICE = "showterm recording finished."

_TIMING_START = re.compile(rb"\A\d")


def _announce(output: Optional[TextIO], message: str) -> None:
    print(message, file=output or sys.stdout, flush=True)


class ScriptRecorder(Recorder):
    """Records with script(1) in timing mode."""

    name = "script"

    def __init__(
        self,
        config: RecordingConfig,
        runner: Runner = subprocess.run,
        output: Optional[TextIO] = None,
    ) -> None:
        self.config = config
        self._runner = runner
        self._output = output

    def build_command(
        self,
        command: Optional[Sequence[str]],
        script_path: Path,
        timing_path: Path,
    ) -> str:
        """
        Build the shell command line for script(1).

        Every argument is shell-quoted; the timing stream (stderr) is
        redirected to timing_path.
        """
        args = [self.config.script_command, "-q", "-t"]
        if command:
            args += ["-c", shlex.join(command)]
        args.append(str(script_path))
        quoted = " ".join(shlex.quote(arg) for arg in args)
        return f"{quoted} 2>{shlex.quote(str(timing_path))}"

    def probe(self) -> bool:
        """
        Check whether script(1) produces usable output on this host.

        Returns:
            True if a trivial recording contains the probe output and a
            timing file starting with a number
        """
        with ScratchFiles() as scratch:
            script_path = scratch.create("showterm.probe.script.")
            timing_path = scratch.create("showterm.probe.timing.")
            cmdline = self.build_command(
                shlex.split(self.config.probe_command), script_path, timing_path
            )
            try:
                self._runner(
                    cmdline,
                    shell=True,
                    executable=self.config.shell,
                    stdout=subprocess.DEVNULL,
                    check=False,
                )
            except OSError as e:
                logger.debug("script probe could not launch: %s", e)
                return False

            script_data = script_path.read_bytes()
            timing_data = timing_path.read_bytes()

        usable = (
            self.config.probe_marker.encode() in script_data
            and _TIMING_START.match(timing_data) is not None
        )
        logger.debug(
            "script probe %s (script: %d bytes, timing: %r)",
            "succeeded" if usable else "failed",
            len(script_data),
            timing_data[:40],
        )
        return usable

    def record(self, command: Optional[Sequence[str]] = None) -> TermSession:
        with ScratchFiles() as scratch:
            script_path = scratch.create("showterm.script.")
            timing_path = scratch.create("showterm.timing.")
            cmdline = self.build_command(command, script_path, timing_path)

            _announce(self._output, START_NOTICE)
            logger.debug("Launching: %s", cmdline)
            try:
                result = self._runner(
                    cmdline, shell=True, executable=self.config.shell, check=False
                )
            except OSError as e:
                raise RecorderUnavailableError(
                    f"Could not run '{self.config.script_command}': {e}"
                ) from e
            _announce(self._output, FINISH_NOTICE)

            if result.returncode != 0:
                logger.warning("script exited with status %d", result.returncode)

            return TermSession(
                script_text=script_path.read_bytes(),
                timing_text=timing_path.read_text(encoding="utf-8", errors="replace"),
            )


class TtyrecRecorder(Recorder):
    """Records with ttyrec and converts the ttyrecord to script/timing form."""

    name = "ttyrec"

    def __init__(
        self,
        config: RecordingConfig,
        runner: Runner = subprocess.run,
        output: Optional[TextIO] = None,
    ) -> None:
        self.config = config
        self._runner = runner
        self._output = output

    def build_args(self, command: Optional[Sequence[str]], out_path: Path) -> List[str]:
        """Build the ttyrec argument vector (no shell involved)."""
        args = [self.config.ttyrec_command]
        if command:
            args.append("-e" + shlex.join(command))
        args.append(str(out_path))
        return args

    def record(self, command: Optional[Sequence[str]] = None) -> TermSession:
        with ScratchFiles() as scratch:
            out_path = scratch.create("showterm.ttyrec.")
            args = self.build_args(command, out_path)

            _announce(self._output, START_NOTICE)
            logger.debug("Launching: %s", args)
            try:
                result = self._runner(args, check=False)
            except OSError as e:
                raise RecorderUnavailableError(TTYREC_INSTALL_HINT) from e
            _announce(self._output, FINISH_NOTICE)

            if result.returncode != 0:
                # Whatever was captured is still converted.
                logger.warning("ttyrec exited with status %d", result.returncode)

            return convert(out_path.read_bytes())


def select_recorder(
    config: RecordingConfig,
    runner: Runner = subprocess.run,
    output: Optional[TextIO] = None,
) -> Recorder:
    """
    Pick the recorder to use on this host.

    script(1) is preferred when its probe succeeds; ttyrec otherwise.
    """
    script = ScriptRecorder(config, runner=runner, output=output)
    if script.probe():
        logger.info("Recording with script")
        return script

    logger.info("script is unusable on this host, falling back to ttyrec")
    return TtyrecRecorder(config, runner=runner, output=output)


def record_session(
    config: RecordingConfig,
    command: Optional[Sequence[str]] = None,
    recorder: Optional[Recorder] = None,
    geometry: Callable[[], Tuple[int, int]] = terminal_size,
    runner: Runner = subprocess.run,
    output: Optional[TextIO] = None,
) -> TermSession:
    """
    Record a terminal session with the best available backend.

    Args:
        config: Recording configuration
        command: Command to record; None records an interactive login shell
        recorder: Recorder to use instead of probing
        geometry: Supplier of (columns, rows)
        runner: subprocess.run compatible callable
        output: Stream for start and finish notices (default stdout)

    Returns:
        The recorded session with geometry filled in
    """
    if recorder is None:
        recorder = select_recorder(config, runner=runner, output=output)

    session = recorder.record(command)
    session.columns, session.rows = geometry()
    logger.info(
        "Recorded %d bytes with %s (%dx%d)",
        len(session.script_text),
        recorder.name,
        session.columns,
        session.rows,
    )
    return session
