"""
Configuration for series resolution.

Settings are stored in ~/si_series/settings/config.json. Environment
variables override the file, and keyword arguments to `load_config`
override both.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

from si_series import log

logger = log.get("config")

ENV_ACQS_PER_LOOP_SUFFIX = "SI_SERIES_ACQS_PER_LOOP_SUFFIX"


@dataclass(frozen=True)
class SeriesConfig:
    """
    Options controlling how a ScanImage series is grouped.

    Attributes
    ----------
    tiff_suffixes : tuple[str, ...]
        Extensions accepted for pixel files.
    sidecar_suffixes : tuple[str, ...]
        Extensions searched for the optional sidecar metadata file.
    suffix_includes_acqs_per_loop : bool
        Multiply the expected filename suffix by ``acqsPerLoop``. This
        variant has not been verified against real acquisitions and is
        off by default.
    check_companions_exist : bool
        Drop synthesized sibling names that do not exist on disk.
    """

    tiff_suffixes: tuple[str, ...] = ("tif", "tiff")
    sidecar_suffixes: tuple[str, ...] = ("xml",)
    suffix_includes_acqs_per_loop: bool = False
    check_companions_exist: bool = True

    def to_dict(self) -> dict:
        return {k: list(v) if isinstance(v, tuple) else v for k, v in asdict(self).items()}


def _get_settings_dir() -> Path:
    """Get the settings directory (not created)."""
    return Path.home() / "si_series" / "settings"


def get_config_path() -> Path:
    """Get path to the config file."""
    return _get_settings_dir() / "config.json"


def _coerce(value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if isinstance(default, tuple):
        if isinstance(value, str):
            value = [value]
        return tuple(str(v).lower().lstrip(".") for v in value)
    return value


def _load_file() -> dict:
    path = get_config_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to load config {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {path}: expected a JSON object")
        return {}
    return data


def load_config(**overrides) -> SeriesConfig:
    """
    Build a `SeriesConfig` from defaults, the settings file, the
    environment and ``overrides`` (highest priority last).

    Unknown keys in the settings file are ignored with a warning.

    Examples
    --------
    >>> cfg = load_config(suffix_includes_acqs_per_loop=True)
    >>> cfg.suffix_includes_acqs_per_loop
    True
    """
    config = SeriesConfig()
    defaults = {f.name: getattr(config, f.name) for f in fields(SeriesConfig)}

    values: dict[str, Any] = {}
    for key, value in _load_file().items():
        if key not in defaults:
            logger.warning(f"Unknown config key {key!r} ignored")
            continue
        values[key] = value

    env = os.getenv(ENV_ACQS_PER_LOOP_SUFFIX)
    if env is not None:
        values["suffix_includes_acqs_per_loop"] = env

    for key, value in overrides.items():
        if key not in defaults:
            raise TypeError(f"Unknown config option {key!r}")
        if value is not None:
            values[key] = value

    coerced = {k: _coerce(v, defaults[k]) for k, v in values.items()}
    return replace(config, **coerced)


def save_config(config: SeriesConfig) -> Path:
    """Write ``config`` to the settings file and return its path."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_dict(), indent=2))
    logger.debug(f"Wrote config to {path}")
    return path
