"""Configuration loader for structscrape.

Reads YAML configuration, applies environment variable overrides, and returns typed
dataclasses consumed by the extraction engine and the CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar, get_type_hints

import yaml

from .fields import DEFAULT_TAG_KEY

ENV_PREFIX = "STRUCTSCRAPE"

T = TypeVar("T")


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    return value


def _merge_dicts(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(config: Dict[str, Any], prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    """Override config using env vars like STRUCTSCRAPE_EXTRACTION__PARSER=html.parser."""
    overrides: Dict[str, Any] = {}
    for env_key, env_val in os.environ.items():
        if not env_key.startswith(prefix + "_"):
            continue
        trimmed = env_key[len(prefix) + 1 :]
        keys = trimmed.lower().split("__")
        cursor = overrides
        for key in keys[:-1]:
            cursor = cursor.setdefault(key, {})
        cursor[keys[-1]] = env_val
    return _merge_dicts(config, overrides)


TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(f"Expected a boolean, got {value!r}")


def _build_section(cls: Type[T], values: Dict[str, Any]) -> T:
    """Instantiate a settings dataclass, parsing env and YAML strings for bool fields."""
    hints = get_type_hints(cls)
    typed = {key: _parse_bool(value) if hints.get(key) is bool else value for key, value in values.items()}
    return cls(**typed)


@dataclass
class ExtractionSettings:
    parser: str = "lxml"  # any bs4 tree builder: lxml | html.parser | html5lib
    tag_key: str = DEFAULT_TAG_KEY
    weak_decode: bool = True
    strip_text: bool = False
    encoding: Optional[str] = None


@dataclass
class LoggingSettings:
    level: str = "INFO"
    format: str = "%(levelname)s %(name)s %(message)s"


@dataclass
class Config:
    extraction: ExtractionSettings = field(default_factory=ExtractionSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


def default_settings() -> ExtractionSettings:
    return ExtractionSettings()


def load_config(path: Optional[Path | str] = None, env_prefix: str = ENV_PREFIX) -> Config:
    """Load YAML config and merge env overrides."""
    config_path = Path(path) if path else Path("structscrape.yaml")
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as f:
            data = _expand_env(yaml.safe_load(f) or {})
    else:
        data = {}
    merged_dict = _apply_env_overrides(data, prefix=env_prefix)
    return map_dict_to_config(merged_dict)


def map_dict_to_config(data: Dict[str, Any]) -> Config:
    extraction = _build_section(ExtractionSettings, data.get("extraction", {}))
    logging_settings = _build_section(LoggingSettings, data.get("logging", {}))
    return Config(extraction=extraction, logging=logging_settings)


__all__ = [
    "ENV_PREFIX",
    "Config",
    "ExtractionSettings",
    "LoggingSettings",
    "default_settings",
    "load_config",
    "map_dict_to_config",
]
