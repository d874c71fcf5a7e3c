"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import ChatorgConfig

ENV_PREFIX = "CHATORG__"


def resolve_with_precedence(
    *,
    defaults: ChatorgConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> ChatorgConfig:
    """Layer configuration sources on top of the defaults.

    Later sources win: defaults < file < environment < CLI. Keys in any source
    may be nested mappings or dotted paths such as ``engine.history_limit``.

    Args:
        defaults: Baseline configuration.
        file_overrides: Values read from the YAML file.
        env_overrides: Values parsed from `CHATORG__*` variables.
        cli_overrides: Values supplied on the command line.

    Returns:
        ChatorgConfig: Validated configuration.

    Raises:
        ConfigError: If a source is malformed or the merged values are invalid.
    """
    merged = defaults.model_dump(mode="python")
    for source_name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source is not None:
            _merge_into(merged, source, source_name=source_name)

    try:
        return ChatorgConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def overrides_from_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect `CHATORG__SECTION__KEY` variables into a nested mapping.

    Values are parsed as YAML scalars so `600`, `true` and `[a, b]` keep
    their types; unparsable text is kept verbatim.
    """
    overrides: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        path = [part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part]
        if not path:
            continue
        try:
            value = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        _merge_into(overrides, {".".join(path): value}, source_name="environment")
    return overrides


def flatten_for_env(config: ChatorgConfig) -> Dict[str, str]:
    """Render every leaf setting as a `CHATORG__SECTION__KEY` variable."""
    flat: Dict[str, str] = {}
    stack: list[tuple[list[str], Any]] = [([], config.model_dump(mode="python"))]
    while stack:
        path, value = stack.pop()
        if isinstance(value, dict):
            stack.extend((path + [str(key)], child) for key, child in value.items())
            continue
        if isinstance(value, list):
            rendered = yaml.safe_dump(value, default_flow_style=True).strip()
        else:
            rendered = "null" if value is None else str(value)
        flat[ENV_PREFIX + "__".join(part.upper() for part in path)] = rendered
    return flat


def _merge_into(target: dict[str, Any], source: Mapping[str, Any], *, source_name: str) -> None:
    """Merge ``source`` into ``target`` in place, expanding dotted keys."""
    label = source_name.capitalize()
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{label} overrides must be a mapping.")

    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label} override keys must be strings.")
        *parents, leaf = key.split(".")
        node = target
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(f"{label} override for {key} conflicts with existing value.")
            node = child

        if isinstance(value, MappingABC):
            existing = node.get(leaf)
            if not isinstance(existing, dict):
                existing = node[leaf] = {}
            _merge_into(existing, value, source_name=source_name)
        else:
            node[leaf] = deepcopy(value)


__all__ = ["resolve_with_precedence", "overrides_from_env", "flatten_for_env", "ENV_PREFIX"]
