"""Configuration loading for gridcalc (``gridcalc.yaml``)."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "gridcalc.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    # Divide formula results by 100 before applying a percent format.
    "percent_display_scaling": True,
    # Directory for events.ndjson; None discards events.
    "log_dir": None,
    "logging_fsync": False,
}


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file, with defaults.

    Args:
        path: A config file, or a directory containing ``gridcalc.yaml``.
            ``None`` returns the defaults.

    Returns:
        Merged configuration dict.

    Raises:
        ValueError: If the file does not contain a mapping.
    """
    config = dict(DEFAULT_CONFIG)
    if path is None:
        return config
    path = Path(path)
    if path.is_dir():
        path = path / CONFIG_FILENAME
    if path.exists():
        user_config = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"{path}: configuration must be a mapping")
        config.update(user_config)
    return config
