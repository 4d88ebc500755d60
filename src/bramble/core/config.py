# src/bramble/core/config.py
"""Configuration loading for property runs.

Layers configuration with precedence handling and validates the result
through PropertyConfig.

Precedence (highest to lowest):
1. overrides - Direct overrides (CLI flags, test code)
2. environment - ``BRAMBLE_*`` variables
3. config_file - YAML file, either flat or under a top-level ``bramble:`` key
4. defaults - Built-in Pydantic defaults
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from bramble.contracts.config import PropertyConfig

ENV_PREFIX = "BRAMBLE_"

# Environment variables are strings; these fields accept "none" to clear a cap.
_NULLABLE_FIELDS = frozenset({"shrinks", "size", "seed"})


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dicts, with override taking precedence.

    Args:
        base: Base configuration dict.
        override: Override values (takes precedence).

    Returns:
        Merged configuration dict (new dict, does not mutate inputs).
    """
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config_file(config_file: Path) -> dict[str, Any]:
    """Read a YAML config file.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the YAML is malformed.
        ValueError: If the file is not a YAML mapping.
    """
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")
    with config_file.open() as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file '{config_file}' must be a YAML mapping, got {type(loaded).__name__}")
    if "bramble" in loaded:
        section = loaded["bramble"] or {}
        if not isinstance(section, dict):
            raise ValueError(f"'bramble' section of '{config_file}' must be a mapping, got {type(section).__name__}")
        return section
    return loaded


def config_from_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``BRAMBLE_<FIELD>`` variables naming PropertyConfig fields.

    Values are passed through as strings; Pydantic coerces them. Unknown
    ``BRAMBLE_*`` names are ignored so unrelated tooling can share the prefix.
    """
    fields = PropertyConfig.model_fields
    result: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        key = name.removeprefix(ENV_PREFIX).lower()
        if key not in fields:
            continue
        if key in _NULLABLE_FIELDS and raw.strip().lower() in ("", "none", "null"):
            result[key] = None
        else:
            result[key] = raw
    return result


def load_config(
    config_file: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    overrides: dict[str, Any] | None = None,
) -> PropertyConfig:
    """Load PropertyConfig with precedence handling.

    Args:
        config_file: Optional path to a YAML config file.
        env: Environment mapping; defaults to ``os.environ``.
        overrides: Highest-precedence values. ``None`` entries are dropped,
            so unset CLI options do not mask lower layers.

    Returns:
        Validated PropertyConfig.

    Raises:
        FileNotFoundError: If config_file is given but missing.
        yaml.YAMLError: If YAML is malformed.
        pydantic.ValidationError: If the final config fails validation.
    """
    config_dict: dict[str, Any] = {}

    if config_file is not None:
        config_dict = deep_merge(config_dict, load_config_file(config_file))

    config_dict = deep_merge(config_dict, config_from_env(os.environ if env is None else env))

    if overrides is not None:
        config_dict = deep_merge(config_dict, {k: v for k, v in overrides.items() if v is not None})

    return PropertyConfig.model_validate(config_dict)
