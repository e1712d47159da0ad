"""
Shared fixtures and utilities for unit tests.

Provides a subprocess.run stand-in that plays the part of script(1), ttyrec
and tput, and a requests session mock.
"""

import shlex
import subprocess
from pathlib import Path
from typing import Iterable, List, Tuple
from unittest.mock import MagicMock

import pytest
import requests

from showterm.config import RecordingConfig


# ============================================================================
# Recorder Runner Fake
# ============================================================================

class FakeRunner:
    """
    Records calls and writes the files a real recorder would have written.

    script(1) is launched through a shell, so a missing script is reported
    the way a shell does it: an error on stderr (the timing file) and
    status 127. A missing ttyrec raises FileNotFoundError like subprocess.
    """

    def __init__(
        self,
        probe_script: bytes = b"Script started\r\nfoo\r\n",
        probe_timing: bytes = b"0.004 5\n",
        script: bytes = b"Script started\r\n$ ls\r\n",
        timing: bytes = b"0.1 16\n0.5 6\n",
        ttyrec: bytes = b"",
        returncode: int = 0,
        missing: Iterable[str] = (),
    ):
        self.probe_script = probe_script
        self.probe_timing = probe_timing
        self.script = script
        self.timing = timing
        self.ttyrec = ttyrec
        self.returncode = returncode
        self.missing = set(missing)
        self.calls: List[Tuple[object, dict]] = []
        self.touched: List[Path] = []

    def __call__(self, args, **kwargs):
        self.calls.append((args, kwargs))
        if kwargs.get("shell"):
            return self._run_script(args)
        return self._run_ttyrec(args)

    def _run_script(self, cmdline: str) -> subprocess.CompletedProcess:
        tokens = shlex.split(cmdline)
        script_path = Path(tokens[-2])
        timing_path = Path(tokens[-1][len("2>"):])
        self.touched += [script_path, timing_path]

        if tokens[0] in self.missing:
            timing_path.write_bytes(f"sh: 1: {tokens[0]}: not found\n".encode())
            return subprocess.CompletedProcess(cmdline, 127)

        is_probe = "-c" in tokens and tokens[tokens.index("-c") + 1] == "echo foo"
        script_path.write_bytes(self.probe_script if is_probe else self.script)
        timing_path.write_bytes(self.probe_timing if is_probe else self.timing)
        return subprocess.CompletedProcess(cmdline, 0 if is_probe else self.returncode)

    def _run_ttyrec(self, args: list) -> subprocess.CompletedProcess:
        if args[0] in self.missing:
            raise FileNotFoundError(2, "No such file or directory", args[0])
        out_path = Path(args[-1])
        self.touched.append(out_path)
        out_path.write_bytes(self.ttyrec)
        return subprocess.CompletedProcess(args, self.returncode)


@pytest.fixture
def recording_config() -> RecordingConfig:
    return RecordingConfig()


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Runner where script(1) works."""
    return FakeRunner()


@pytest.fixture
def runner_factory():
    """FakeRunner class, for tests that need a misbehaving recorder."""
    return FakeRunner


# ============================================================================
# HTTP Mocks
# ============================================================================

def _response(status_code: int = 200, text: str = "") -> MagicMock:
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    return response


@pytest.fixture
def make_response():
    """Factory for mock requests.Response objects."""
    return _response


@pytest.fixture
def mock_http_session():
    """Mock requests.Session answering every request with a showterm URL."""
    session = MagicMock(spec=requests.Session)
    session.request.return_value = _response(201, "http://showterm.io/7b0c1d2e3f\n")
    return session
