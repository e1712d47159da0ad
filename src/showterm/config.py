"""
Configuration management for Showterm.

This module handles loading, validating, and accessing configuration from the
environment and optional YAML files. Configuration is resolved once per
process and passed explicitly to the recorder, secret store and client.
"""

from pathlib import Path
from typing import Any, Dict, Tuple, Type
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

DEFAULT_SERVER_URL = "https://showterm.herokuapp.com"


class HttpConfig(BaseModel):
    """Connection settings for the showterm server."""

    connect_timeout: float = Field(default=10, gt=0, description="Connect timeout in seconds")
    read_timeout: float = Field(default=10, gt=0, description="Read timeout in seconds")
    # Certificate validation is off by default to stay compatible with the
    # certificate posture of the deployed server.
    verify_ssl: bool = Field(default=False, description="Verify TLS certificates")
    upload_attempts: int = Field(default=2, ge=1, description="Attempts per upload")
    delete_attempts: int = Field(default=1, ge=1, description="Attempts per delete")
    upload_path: str = Field(default="/scripts", description="Path uploads are posted to")


class RecordingConfig(BaseModel):
    """Recorder executables and probe settings."""

    script_command: str = Field(default="script", description="script(1) executable")
    ttyrec_command: str = Field(default="ttyrec", description="ttyrec executable")
    probe_command: str = Field(default="echo foo", description="Command run by the probe")
    probe_marker: str = Field(default="foo", description="Output expected from the probe")
    shell: str = Field(default="/bin/sh", description="Shell used to launch script(1)")


class SecretConfig(BaseModel):
    """Location of the per-user shared secret."""

    path: Path = Field(
        default_factory=lambda: Path.home() / ".showterm",
        description="File holding the shared secret",
    )

    @field_validator("path")
    @classmethod
    def expand_home(cls, value: Path) -> Path:
        return Path(value).expanduser()


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="WARNING", description="Log level")


class Config(BaseSettings):
    """Main Showterm configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SHOWTERM_",
        env_nested_delimiter="__",
        populate_by_name=True,
        extra="ignore",
    )

    server_url: str = Field(
        default=DEFAULT_SERVER_URL,
        validation_alias="SHOWTERM_SERVER",
        description="Base URL of the showterm server",
    )
    http: HttpConfig = Field(default_factory=HttpConfig)
    recording: RecordingConfig = Field(default_factory=RecordingConfig)
    secret: SecretConfig = Field(default_factory=SecretConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # Environment overrides values loaded from a config file.
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @field_validator("server_url")
    @classmethod
    def validate_server_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(
                f"Invalid server URL: {value}. Expected http://host[:port] or https://host[:port]"
            )
        return value.rstrip("/")

    @property
    def use_ssl(self) -> bool:
        """True when the server is reached over HTTPS."""
        return urlparse(self.server_url).scheme == "https"

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """
        Load configuration from a YAML file.

        SHOWTERM_* environment variables take precedence over the file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {path}")

        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()
