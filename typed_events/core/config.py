"""Configuration management for typed-events."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

from typed_events.core.exceptions import ConfigurationError

ENV_PREFIX = "TYPED_EVENTS_"


class FloatConfig(BaseSettings):
    """
    Float Controller Configuration.

    Controls execution marker collection for event dispatch.
    """

    enabled: bool = Field(
        default=False, description="Enable float collection (True=tests/debug, False=production)"
    )
    max_events: int = Field(
        default=10000, ge=0, description="Max floats to keep in memory (0=unlimited)"
    )

    model_config = SettingsConfigDict(
        env_prefix=f"{ENV_PREFIX}FLOAT_",
        extra="ignore",
    )


class EventsConfig(BaseSettings):
    """
    Configuration for event channels.

    Can be loaded from:
    - Environment variables (prefix: TYPED_EVENTS_)
    - YAML file
    - Direct initialization

    Example:
        >>> config = EventsConfig(default_expect_timeout=5.0)
        >>> config = EventsConfig.from_yaml("events.yaml")
        >>> config = EventsConfig()
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )

    default_expect_timeout: float | None = Field(
        default=None,
        description="Timeout in seconds applied by expect() when none is given (None=wait forever)",
    )
    log_dispatch: bool = Field(
        default=False,
        description="Log a debug line for every emission",
    )
    enable_floats: bool = Field(
        default=True,
        description="Emit float markers for dispatch stages",
    )

    @field_validator("default_expect_timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        """Reject non-positive timeouts."""
        if v is not None and v <= 0:
            raise ValueError("default_expect_timeout must be positive")
        return v

    @classmethod
    def from_yaml(cls, path: Path | str) -> EventsConfig:
        """
        Load configuration from YAML file.

        Environment variables override keys present in the file.

        Args:
            path: Path to YAML configuration file

        Returns:
            EventsConfig instance

        Raises:
            ConfigurationError: If the file is missing or holds invalid values
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        if not isinstance(yaml_data, dict):
            raise ConfigurationError(f"Config file must hold a mapping: {path}")

        result_data = {}
        for key, value in yaml_data.items():
            if not isinstance(key, str):
                raise ConfigurationError(f"Config keys must be strings, got {key!r} in {path}")
            if f"{ENV_PREFIX}{key.upper()}" in os.environ:
                continue
            result_data[key] = value

        try:
            return cls(**result_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid config in {path}: {e}") from e

    def to_yaml(self, path: Path | str) -> None:
        """
        Save configuration to YAML file.

        Args:
            path: Path to save YAML configuration
        """
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

    def __repr__(self) -> str:
        return (
            f"EventsConfig(default_expect_timeout={self.default_expect_timeout!r}, "
            f"log_dispatch={self.log_dispatch}, enable_floats={self.enable_floats})"
        )


_global_config: EventsConfig | None = None


def get_config() -> EventsConfig:
    """
    Get the global EventsConfig instance.

    Created from the environment on first call.
    Can be overridden for testing via set_config().
    """
    global _global_config
    if _global_config is None:
        _global_config = EventsConfig()
    return _global_config


def set_config(config: EventsConfig | None) -> None:
    """
    Set the global EventsConfig instance.

    Passing None makes the next get_config() reload from the environment.
    """
    global _global_config
    _global_config = config
