"""Configuration helpers for the average route pipeline.

Provides YAML loading and small utilities for accessing nested configuration
values with defaults. A missing config file yields an empty mapping, so every
setting falls back to its built-in default.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import yaml


def load_config(path: str | Path | None) -> Dict[str, Any]:
    """Load a YAML configuration file."""

    if path is None:
        return {}
    path = Path(path)
    if not path.exists():
        logging.warning("Config file %s not found; using defaults.", path)
        return {}
    with path.open("r", encoding="utf-8") as fh:
        loaded = yaml.safe_load(fh) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level.")
    return loaded


def get_nested(config: Dict[str, Any], keys: list[str], default: Any) -> Any:
    """Retrieve a nested value from a config dict with a default."""

    current: Any = config
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return default if current is None else current
