"""YAML config loader with runtime get/set."""

import json
from pathlib import Path
from typing import Any

import yaml

from weatherwatch.config.defaults import DEFAULT_LOCATIONS
from weatherwatch.config.schema import MonitorConfig


def load_config(path: str | Path | None = None) -> MonitorConfig:
    """Load and validate config from a YAML file.

    A missing path gives the defaults. If no locations are specified,
    injects DEFAULT_LOCATIONS.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        with open(Path(path)) as f:
            raw = yaml.safe_load(f) or {}

    if "locations" not in raw or not raw["locations"]:
        raw["locations"] = list(DEFAULT_LOCATIONS)

    return MonitorConfig(**raw)


def get_config_value(config: MonitorConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'alerts.high_temp_ceiling_c'."""
    parts = dotted_key.split(".")
    obj: Any = config
    for part in parts:
        if isinstance(obj, list):
            obj = obj[int(part)]
        elif hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj


def set_config_value(config: MonitorConfig, dotted_key: str, value: Any) -> MonitorConfig:
    """Set a config value by dotted key path and re-validate.

    Returns a new MonitorConfig instance.
    """
    data = json.loads(config.model_dump_json())
    parts = dotted_key.split(".")
    target = data
    for part in parts[:-1]:
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Config key not found: {dotted_key}")
    old_value = target[parts[-1]]
    if isinstance(old_value, int) and isinstance(value, str):
        value = int(value)
    elif isinstance(old_value, float) and isinstance(value, str):
        value = float(value)
    target[parts[-1]] = value
    return MonitorConfig(**data)


def save_config(config: MonitorConfig, path: str | Path) -> None:
    """Write config back to a YAML file."""
    with open(Path(path), "w") as f:
        yaml.safe_dump(config.model_dump(mode="json"), f, sort_keys=False)
