"""Application configuration."""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..core.annotations.models import FONT_FAMILIES, parse_hex_color
from .app_dirs import get_app_data_dir, get_config_dir

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"

# Environment variable -> config field
ENV_OVERRIDES = {
    "TRACKSHEET_STORAGE_URL": "storage_url",
    "TRACKSHEET_STORAGE_BUCKET": "storage_bucket",
    "TRACKSHEET_STORAGE_KEY": "storage_key",
    "TRACKSHEET_OWNER_ID": "owner_id",
    "TRACKSHEET_LOG_LEVEL": "log_level",
}


def _font_family(value: str) -> str:
    if value not in FONT_FAMILIES:
        raise ValueError(f"unknown font family {value!r}")
    return value


def _font_color(value: str) -> str:
    parse_hex_color(value)
    return value


# Checks applied after type conversion; a ValueError keeps the default
VALIDATORS = {
    "default_font_family": _font_family,
    "default_font_color": _font_color,
}


@dataclass
class AppConfig:
    """
    Settings read from config.json and the environment.

    An empty storage_url selects local filesystem storage under data_dir.
    """
    storage_url: str = ""
    storage_bucket: str = "file-bank"
    storage_key: str = ""
    owner_id: str = "local"
    request_timeout: float = 30.0
    log_level: str = "INFO"
    data_dir: str = ""

    default_font_size: int = 12
    default_font_family: str = "Helvetica"
    default_font_color: str = "#000000"
    background_padding: float = 2.0

    default_zoom: float = 1.5
    min_zoom: float = 0.5
    max_zoom: float = 3.0
    zoom_step: float = 0.25

    @property
    def uses_remote_storage(self) -> bool:
        return bool(self.storage_url)

    def resolved_data_dir(self) -> Path:
        path = Path(self.data_dir) if self.data_dir else get_app_data_dir()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def clamp_zoom(self, zoom: float) -> float:
        return max(self.min_zoom, min(self.max_zoom, zoom))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AppConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name: f for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown config key %r", key)
                continue
            default = known[key].default
            try:
                value = type(default)(value)
                if key in VALIDATORS:
                    value = VALIDATORS[key](value)
                values[key] = value
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid value for %s: %r", key, value)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def default_config_path() -> Path:
    return get_config_dir() / CONFIG_FILE_NAME


def load_config(path: Optional[Path] = None,
                environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Load configuration from a JSON file plus environment overrides.

    A missing file gives the defaults. A malformed file is logged and
    ignored.
    """
    path = path or default_config_path()
    environ = os.environ if environ is None else environ

    data: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                data.update(loaded)
            else:
                logger.warning("Config file %s does not contain an object, using defaults", path)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read config file %s: %s", path, e)

    for env_name, field_name in ENV_OVERRIDES.items():
        if environ.get(env_name):
            data[field_name] = environ[env_name]

    return AppConfig.from_mapping(data)


def save_config(config: AppConfig, path: Optional[Path] = None) -> Path:
    path = path or default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
    return path
