"""
Configuration loader.
"""

from __future__ import annotations

import copy
import tomllib
from pathlib import Path
from typing import Any

from loadwatch.config.defaults import DEFAULTS, LOADING_DEFAULTS


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two dictionaries without mutating the originals."""
    merged: dict[str, Any] = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path) -> dict[str, Any]:
    """
    Load a TOML config file and merge it over defaults.
    Missing files return defaults; malformed files or negative loading delays
    raise ValueError.
    """
    if path.is_dir():
        raise IsADirectoryError(f"Config path points to a directory: {path}")

    user_config: dict[str, Any] = {}
    if path.exists():
        try:
            with path.open("rb") as fh:
                user_config = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:  # pragma: no cover - exercised via tests
            raise ValueError(f"Invalid config file {path}: {exc}") from exc

    merged = _deep_merge(DEFAULTS, user_config)
    loading_delays(merged)
    return merged


def loading_delays(config: dict[str, Any]) -> tuple[float, float]:
    """Return `(start_delay, end_delay)` in seconds from the `[loading]` section."""
    section = config.get("loading", {}) if isinstance(config, dict) else {}
    start = float(section.get("start_delay", LOADING_DEFAULTS["start_delay"]))
    end = float(section.get("end_delay", LOADING_DEFAULTS["end_delay"]))
    if start < 0 or end < 0:
        raise ValueError(f"Loading delays must be non-negative, got start={start} end={end}")
    return start, end
