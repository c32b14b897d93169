from dataclasses import dataclass, fields, replace
from typing import Optional

from PyQt6 import QtCore

ORGANIZATION = "GridSheet"
APPLICATION = "GridSheet"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class GridConfig:
    default_rows: int = 25
    default_cols: int = 15
    add_rows_step: int = 10
    add_cols_step: int = 5
    export_filename: str = "spreadsheet-data.csv"
    theme: str = "light"
    log_level: str = "INFO"
    log_file: str = ""


def open_settings() -> QtCore.QSettings:
    return QtCore.QSettings(ORGANIZATION, APPLICATION)


def load_config(settings: Optional[QtCore.QSettings] = None) -> GridConfig:
    """Defaults overlaid with whatever valid values the settings store holds."""
    config = GridConfig()
    if settings is None:
        return config
    overrides = {}
    for item in fields(GridConfig):
        if not settings.contains(item.name):
            continue
        default = getattr(config, item.name)
        try:
            value = settings.value(item.name, default, type=type(default))
        except (TypeError, ValueError):
            continue
        if isinstance(default, int) and (not isinstance(value, int) or value < 0):
            continue
        if isinstance(default, str) and not value:
            continue
        overrides[item.name] = value
    if overrides.get("theme", config.theme) not in {"light", "dark"}:
        overrides.pop("theme")
    if overrides.get("log_level", config.log_level).upper() not in LOG_LEVELS:
        overrides.pop("log_level")
    elif "log_level" in overrides:
        overrides["log_level"] = overrides["log_level"].upper()
    return replace(config, **overrides)
