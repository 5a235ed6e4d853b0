"""Configuration loading utilities for goapfolio."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from goapfolio.core.models import Config


def load_config(
    *,
    path: Path | str | None = None,
    data: str | bytes | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Config:
    """Load and validate configuration from TOML data.

    Exactly one of ``path`` or ``data`` must be provided. ``overrides`` allows
    callers to patch specific sections before validation, which is useful for
    CLI flags or tests.
    """
    if (path is None and data is None) or (path is not None and data is not None):
        msg = "Provide exactly one of 'path' or 'data' when loading configuration."
        raise ValueError(msg)

    if path is not None:
        text = _read_config_file(Path(path))
        source = str(path)
    else:
        if data is None:
            msg = "Configuration data must be provided when path is omitted."
            raise ValueError(msg)
        text = data if isinstance(data, str) else data.decode()
        source = "<data>"

    try:
        raw_content: dict[str, Any] = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {source}: {exc}"
        raise ValueError(msg) from exc

    if overrides is not None:
        typed_overrides: dict[str, Any] = {str(key): value for key, value in overrides.items()}
        raw_content = _merge_dicts(dict(raw_content), typed_overrides)

    return Config.model_validate(_normalise(raw_content))


def _read_config_file(path: Path) -> str:
    if not path.exists():
        raise FileNotFoundError(path)
    if not path.is_file():
        msg = f"Configuration path is not a file: {path}"
        raise ValueError(msg)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Unable to read configuration file {path}: {exc}"
        raise ValueError(msg) from exc


def _merge_dicts(base: dict[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in updates.items():
        if (
            key in base
            and isinstance(base[key], Mapping)
            and isinstance(value, Mapping)
        ):
            nested_base = cast("dict[str, Any]", dict(base[key]))
            nested_updates = cast("Mapping[str, Any]", value)
            base[key] = _merge_dicts(nested_base, nested_updates)
        else:
            base[key] = value
    return base


def _normalise(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Map the TOML table layout onto the :class:`Config` schema."""
    goals = raw.get("goals", {})
    logging_table = raw.get("logging", {})

    config_dict: dict[str, Any] = {
        "planner": raw.get("planner", {}),
        "initial_state": raw.get("state", {}),
        "logging": {
            key: value
            for key, value in {
                "json_mode": logging_table.get("json"),
                "level": logging_table.get("level"),
            }.items()
            if value is not None
        },
    }
    if "targets" in goals:
        config_dict["targets"] = goals["targets"]

    unknown = sorted(set(raw) - {"planner", "state", "goals", "logging"})
    if unknown:
        # Unknown top-level tables are passed through so validation rejects them.
        config_dict.update({key: raw[key] for key in unknown})

    return config_dict


__all__ = ["load_config"]
