from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from extractors.exceptions import ConfigurationError
from extractors.lockdown.container import DEFAULT_CONTAINER_PATH

OUTPUT_FORMATS = ("json", "html")


@dataclass(slots=True)
class LoggingConfig:
    """Logging configuration from config.yml."""

    level: str = "WARNING"
    log_dir: Optional[Path] = None
    max_mb: int = 5
    backup_count: int = 3

    @property
    def level_value(self) -> int:
        value = logging.getLevelName(self.level.upper())
        if not isinstance(value, int):
            raise ConfigurationError(f"Unknown logging level: {self.level!r}")
        return value


@dataclass(slots=True)
class AppConfig:
    """Top-level configuration resolved from disk."""

    container_path: Path = DEFAULT_CONTAINER_PATH
    include_archived: bool = False
    output_format: str = "json"
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"Unknown export format: {self.output_format!r} "
                f"(expected one of {', '.join(OUTPUT_FORMATS)})"
            )

    def resolved_container_path(self) -> Path:
        return Path(self.container_path).expanduser()


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            content = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Could not read config file {path}: {exc}") from exc
    if not isinstance(content, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping at the top level.")
    return content


def _read_bool(section: Dict[str, Any], key: str, default: bool, path: Path) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(f"'{key}' in {path} must be true or false, got {value!r}")
    return value


def _read_int(section: Dict[str, Any], key: str, default: int, path: Path) -> int:
    value = section.get(key, default)
    # bool is an int subclass; yes/no is never a size
    if isinstance(value, bool):
        raise ConfigurationError(f"'{key}' in {path} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"'{key}' in {path} must be an integer, got {value!r}") from exc


def default_config_path() -> Path:
    """``config/config.yml`` at the project root."""
    return Path(__file__).resolve().parents[2] / "config" / "config.yml"


def load_app_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load configuration from disk, providing sensible defaults for anything missing."""

    path = config_path if config_path is not None else default_config_path()
    overrides = _load_yaml(path)

    logging_cfg = overrides.get("logging") or {}
    if not isinstance(logging_cfg, dict):
        raise ConfigurationError(f"'logging' in {path} must be a mapping.")
    log_dir = logging_cfg.get("log_dir")
    logging_config = LoggingConfig(
        level=str(logging_cfg.get("level", "WARNING")),
        log_dir=Path(log_dir).expanduser() if log_dir else None,
        max_mb=_read_int(logging_cfg, "max_mb", 5, path),
        backup_count=_read_int(logging_cfg, "backup_count", 3, path),
    )

    container_path = overrides.get("container_path")
    return AppConfig(
        container_path=Path(container_path) if container_path else DEFAULT_CONTAINER_PATH,
        include_archived=_read_bool(overrides, "include_archived", False, path),
        output_format=str(overrides.get("output_format", "json")),
        logging=logging_config,
    )
