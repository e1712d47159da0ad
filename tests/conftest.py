"""
Pytest configuration and fixtures for Showterm tests.
"""

import struct
from pathlib import Path

import pytest

from showterm.config import Config


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the developer's SHOWTERM_* settings out of the tests."""
    monkeypatch.delenv("SHOWTERM_SERVER", raising=False)
    monkeypatch.delenv("SHOWTERM_SERVER_URL", raising=False)


@pytest.fixture
def make_frame():
    """Build one ttyrecord frame: (seconds, microseconds, payload) -> bytes."""

    def factory(sec: int, usec: int, payload: bytes = b"") -> bytes:
        return struct.pack("<III", sec, usec, len(payload)) + payload

    return factory


@pytest.fixture
def test_config_path(tmp_path: Path) -> Path:
    """Create a temporary config file for testing."""
    config_content = f"""
server_url: "http://localhost:3000/"

http:
  connect_timeout: 5
  read_timeout: 7

recording:
  ttyrec_command: "/usr/local/bin/ttyrec"

secret:
  path: "{tmp_path / 'showterm-secret'}"
"""
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content)
    return config_file


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Default configuration with the secret kept under tmp_path."""
    return Config(secret={"path": tmp_path / ".showterm"})
