"""Configuration loading for buildbreakdown (.buildbreakdown.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .sources.logmine import DEFAULT_WINDOW, LOG_PATH_ENV, default_editor_log_path

CONFIG_FILENAME = ".buildbreakdown.yml"
DEFAULT_CACHE_DIRECTORY = "BuildReports"
DEFAULT_TOP_CONTRIBUTORS = 20


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class CacheConfig:
    """Where and whether the last successful breakdown is kept."""

    enabled: bool = True
    directory: str = DEFAULT_CACHE_DIRECTORY


@dataclass
class LogConfig:
    """Editor log mining settings."""

    enabled: bool = True
    path: Optional[Path] = None
    window: int = DEFAULT_WINDOW


@dataclass
class AnalysisConfig:
    """Classification and reporting knobs."""

    top_contributors: int = DEFAULT_TOP_CONTRIBUTORS
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class BuildBreakdownConfig:
    """Represents the settings defined in .buildbreakdown.yml."""

    root: Path
    cache: CacheConfig = field(default_factory=CacheConfig)
    log: LogConfig = field(default_factory=LogConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)

    @property
    def cache_directory(self) -> Path:
        directory = Path(self.cache.directory).expanduser()
        return directory if directory.is_absolute() else self.root / directory

    def resolve_log_path(self) -> Optional[Path]:
        """Environment override, then the configured path, then the host default."""
        override = os.environ.get(LOG_PATH_ENV)
        if override:
            return Path(override).expanduser()
        if self.log.path is not None:
            return self.log.path
        return default_editor_log_path()


def load_config(config_path: Path) -> BuildBreakdownConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return BuildBreakdownConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    cache = CacheConfig()
    cache_data = _as_dict(data.get("cache"))
    if cache_data:
        enabled = _as_bool(cache_data.get("enabled"))
        if enabled is not None:
            cache.enabled = enabled
        directory = _as_str(cache_data.get("directory"))
        if directory:
            cache.directory = directory

    log = LogConfig()
    log_data = _as_dict(data.get("log"))
    if log_data:
        enabled = _as_bool(log_data.get("enabled"))
        if enabled is not None:
            log.enabled = enabled
        path = _as_str(log_data.get("path"))
        if path:
            log_path = Path(path).expanduser()
            log.path = log_path if log_path.is_absolute() else root / log_path
        window = _as_int(log_data.get("window"))
        if window is not None:
            if window <= 0:
                raise ConfigError("log.window must be a positive number of lines")
            log.window = window

    analysis = AnalysisConfig()
    analysis_data = _as_dict(data.get("analysis"))
    if analysis_data:
        top = _as_int(analysis_data.get("top_contributors"))
        if top is not None:
            if top < 0:
                raise ConfigError("analysis.top_contributors cannot be negative")
            analysis.top_contributors = top
        analysis.exclude_paths = _as_str_list(analysis_data.get("exclude_paths"))

    return BuildBreakdownConfig(root=root, cache=cache, log=log, analysis=analysis)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = Path(config_path).expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "AnalysisConfig",
    "BuildBreakdownConfig",
    "CONFIG_FILENAME",
    "CacheConfig",
    "ConfigError",
    "LogConfig",
    "load_config",
]
