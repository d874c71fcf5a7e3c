"""Configuration management for chatorg."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import ChatorgConfig
from .resolver import ENV_PREFIX, flatten_for_env, overrides_from_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.chatorg/config.yaml")
TIMESTAMP_PREFIX = "# Last updated:"
_CONFIG_HEADER = (
    "# chatorg configuration file\n"
    "# Manage with `chatorg config set KEY --value VALUE` or `chatorg config edit`.\n"
)


class ConfigManager:
    """Read, validate and write the YAML configuration file."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            config_path: Location of the YAML file; defaults to `~/.chatorg/config.yaml`.
            env: Environment used for `CHATORG__*` overrides; defaults to `os.environ`.
        """
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> ChatorgConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted-key overrides with the highest precedence.
            include_env: Whether `CHATORG__*` variables are applied.
            ensure_file: Whether to seed the file with defaults when missing.
            env_overrides: Environment mapping used instead of the manager's own.

        Returns:
            ChatorgConfig: Validated configuration.

        Raises:
            ConfigError: If the file or any override is invalid.
        """
        if ensure_file:
            self.ensure_exists()

        env_data: dict[str, Any] | None = None
        if include_env:
            env_data = overrides_from_env(env_overrides if env_overrides is not None else self._env)

        return resolve_with_precedence(
            defaults=ChatorgConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_data or None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored in the configuration file."""
        if not self._config_path.exists():
            return {}
        return _parse_mapping(self._config_path.read_text(encoding="utf-8"))

    def ensure_exists(self) -> Path:
        """Write the default configuration if the file is missing."""
        if not self._config_path.exists():
            self.save(ChatorgConfig())
        return self._config_path

    def save(self, config: ChatorgConfig | Mapping[str, Any]) -> None:
        """Write ``config`` to disk with the standard header and a timestamp."""
        data = config.model_dump(mode="python") if isinstance(config, ChatorgConfig) else dict(config)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(
            f"{_CONFIG_HEADER}{TIMESTAMP_PREFIX} {stamp}\n{yaml.safe_dump(data, sort_keys=False)}",
            encoding="utf-8",
        )

    def read_text(self) -> str:
        """Return the current file contents, or an empty string when absent."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    def set_value(self, key: str, raw_value: str) -> None:
        """Assign a YAML-literal value to a dotted key and save the file.

        Args:
            key: Dotted path such as `engine.response_delay_ms`.
            raw_value: Value text, parsed as YAML.

        Raises:
            ConfigError: If the key or value is invalid; the file is left unchanged.
        """
        segments = [segment.strip() for segment in key.split(".") if segment.strip()]
        if not segments:
            raise ConfigError("KEY must specify a dotted path such as 'engine.response_delay_ms'.")
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Unable to parse value: {exc}") from exc

        data = self.load_file_overrides()
        node = data
        for segment in segments[:-1]:
            node = node.setdefault(segment, {})
            if not isinstance(node, dict):
                raise ConfigError(
                    f"Cannot assign into '{segment}' because it is not a mapping in the config file."
                )
        node[segments[-1]] = value

        resolve_with_precedence(defaults=ChatorgConfig(), file_overrides=data)
        self.save(data)

    def apply_text(self, text: str) -> None:
        """Validate edited YAML text and save it.

        Raises:
            ConfigError: If the text is not a valid configuration mapping.
        """
        data = _parse_mapping(text)
        resolve_with_precedence(defaults=ChatorgConfig(), file_overrides=data)
        self.save(data)


def _parse_mapping(text: str) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError("Configuration file must contain a mapping at the top level.")
    return raw


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "TIMESTAMP_PREFIX",
    "ChatorgConfig",
    "ENV_PREFIX",
    "resolve_with_precedence",
    "overrides_from_env",
    "flatten_for_env",
    "ConfigError",
]
