"""Settings loaded from an optional YAML file and POCKETBOOK_* environment variables."""
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from pocketbook.errors import ConfigError

ENV_PREFIX = "POCKETBOOK_"


@dataclass(frozen=True)
class Settings:
    # Storage
    storage_path: Optional[str] = None      # None keeps everything in memory
    storage_namespace: str = "expense-tracker"

    # Budgeting
    default_monthly_goal: float = 50000.0
    default_goal_ratio: float = 0.7

    # View model
    recent_limit: int = 3
    trend_months: int = 6

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None


def _coerce(name: str, raw: Any, target: type) -> Any:
    if raw is None:
        return None
    try:
        if target is float:
            return float(raw)
        if target is int:
            return int(raw)
        return str(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from e


_TYPES = {
    "storage_path": str,
    "storage_namespace": str,
    "default_monthly_goal": float,
    "default_goal_ratio": float,
    "recent_limit": int,
    "trend_months": int,
    "log_level": str,
    "log_file": str,
}


def settings_from_mapping(data: Mapping[str, Any], base: Optional[Settings] = None) -> Settings:
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown settings: {', '.join(unknown)}")

    values = {k: _coerce(k, v, _TYPES[k]) for k, v in data.items()}
    settings = replace(base or Settings(), **values)

    if settings.default_monthly_goal <= 0:
        raise ConfigError("default_monthly_goal must be positive")
    if not 0 < settings.default_goal_ratio <= 1:
        raise ConfigError("default_goal_ratio must be in (0, 1]")
    if settings.recent_limit < 0 or settings.trend_months < 1:
        raise ConfigError("recent_limit must be >= 0 and trend_months >= 1")
    return settings


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, str]:
    overrides = {}
    for f in fields(Settings):
        key = ENV_PREFIX + f.name.upper()
        if key in environ:
            overrides[f.name] = environ[key]
    return overrides


def load_settings(
    path: Union[str, Path, None] = None, environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """Build Settings from defaults, then the YAML file, then the environment."""
    environ = os.environ if environ is None else environ
    settings = Settings()

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Malformed config file {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        settings = settings_from_mapping(data, settings)

    return settings_from_mapping(_env_overrides(environ), settings)
