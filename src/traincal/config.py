"""Configuration management for traincal."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

TRAINCAL_HOME = Path(os.environ.get("TRAINCAL_HOME", Path.home() / "traincal"))
CONFIG_FILE = TRAINCAL_HOME / "config" / "traincal.conf"
DATA_DIR = TRAINCAL_HOME / "data"

DEFAULT_TIMEZONE = "Europe/Madrid"


@dataclass
class Config:
    """traincal configuration."""

    timezone: str = DEFAULT_TIMEZONE
    program_file: Path = field(default_factory=lambda: DATA_DIR / "program.json")
    prod_id: str = "-//CalendarioEntrenamiento//1.0//ES"
    # Pre-filled schedule when "schedule set" is given no times
    default_start_time: str = "16:30"
    default_end_time: str = "18:00"


def _unquote(value: str) -> str:
    """Strip surrounding quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _valid_timezone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def load_config(path: Path | None = None) -> Config:
    """Load configuration from traincal.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                if _valid_timezone(value):
                    config.timezone = value
                else:
                    logger.warning(f"Unknown TIMEZONE {value!r}, using {config.timezone}")
            case "program_file":
                if value:
                    config.program_file = Path(value).expanduser()
            case "prod_id":
                if value:
                    config.prod_id = value
            case "default_start_time":
                config.default_start_time = value
            case "default_end_time":
                config.default_end_time = value
            case _:
                logger.debug(f"Ignoring unknown config key {key!r}")

    return config
