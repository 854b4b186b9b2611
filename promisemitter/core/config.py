"""Configuration management for promisemitter emitters."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

from promisemitter.core.exceptions import ConfigurationError

ENV_PREFIX = "PROMISEMITTER_"


class EmitterConfig(BaseSettings):
    """
    Options for a single emitter.

    Can be loaded from:
    - Environment variables (prefix: PROMISEMITTER_)
    - YAML file
    - Direct initialization

    Example:
        >>> config = EmitterConfig(emit_timeout=250)
        >>> config = EmitterConfig.from_yaml("promisemitter.yaml")
        >>> config = EmitterConfig()
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="ignore",
        validate_default=True,
    )

    emit_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Milliseconds to wait for each listener before raising ListenerTimeoutError "
        "(None disables the timeout)",
    )
    enable_tracing: bool = Field(
        default=False,
        description="Record trace markers for subscribe/remove/emit/timeouts",
    )

    def without_timeout(self) -> EmitterConfig:
        """Copy of these options with the emit timeout disabled."""
        return self.model_copy(update={"emit_timeout": None})

    @classmethod
    def find_config_yaml(cls) -> Path | None:
        """
        Search for a config file in standard locations.

        Search order:
        1. ./promisemitter.yaml
        2. ~/.promisemitter/config.yaml
        """
        search_paths = [
            Path.cwd() / "promisemitter.yaml",
            Path.home() / ".promisemitter" / "config.yaml",
        ]

        for path in search_paths:
            if path.exists():
                return path

        return None

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> EmitterConfig:
        """
        Load options from a YAML file.

        Keys already set through PROMISEMITTER_* environment variables win
        over the file.

        Args:
            path: Path to the YAML file. If None, searches standard locations.

        Raises:
            FileNotFoundError: If no file is found
            ConfigurationError: If a value in the file is invalid
        """
        if path is None:
            path = cls.find_config_yaml()
            if path is None:
                raise FileNotFoundError(
                    "Config file not found. Searched:\n"
                    "  1. ./promisemitter.yaml\n"
                    "  2. ~/.promisemitter/config.yaml"
                )
        else:
            path = Path(path)
            if not path.exists():
                raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        result_data = {
            key: value
            for key, value in yaml_data.items()
            if f"{ENV_PREFIX}{key.upper()}" not in os.environ
        }

        try:
            return cls(**result_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid options in {path}: {e}") from e

    def to_yaml(self, path: Path | str) -> None:
        """Save options to a YAML file."""
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
            f"EmitterConfig(emit_timeout={self.emit_timeout!r}, "
            f"enable_tracing={self.enable_tracing!r})"
        )
