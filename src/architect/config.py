"""YAML configuration loading and defaults for the architect CLI."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .models.gemini import DEFAULT_BASE_URL, DEFAULT_MODEL
from .prompts import DEFAULT_SOURCE_LANGUAGE, DEFAULT_WORKING_LANGUAGE

DEFAULT_CONFIG_NAME = "architect.yaml"

DEFAULT_CONFIG_TEMPLATE: Dict[str, Any] = {
    "model": {
        "name": DEFAULT_MODEL,
        "base_url": DEFAULT_BASE_URL,
        "timeout": 120,
        "api_key": "",
    },
    "languages": {
        "source": DEFAULT_SOURCE_LANGUAGE,
        "working": DEFAULT_WORKING_LANGUAGE,
    },
    "paths": {
        "session": "data/session.json",
        "logs": "data/logs",
    },
}


class ConfigError(ValueError):
    """Raised when the configuration file exists but cannot be used."""


@dataclass(slots=True)
class ArchitectSettings:
    """Resolved settings consumed by the CLI."""

    model_name: str
    base_url: str
    timeout: Optional[float]
    api_key: Optional[str]
    source_language: str
    working_language: str
    session_path: Path
    logs_root: Path


def copy_config_template() -> Dict[str, Any]:
    """Return a deep copy of the default configuration template."""
    return copy.deepcopy(DEFAULT_CONFIG_TEMPLATE)


def write_config(config_path: Path, config_data: Dict[str, Any]) -> None:
    """Persist configuration data to disk with stable formatting."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(config_data, handle, sort_keys=False, allow_unicode=True)


def load_config(config_path: Path) -> Dict[str, Any]:
    """Load YAML configuration from disk; a missing file yields the defaults."""
    if not config_path.exists():
        return copy_config_template()
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as error:
        raise ConfigError(f"Failed to parse config: {error}") from error
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping at the top level.")
    return data


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = config.get(name)
    return value if isinstance(value, dict) else {}


def _text(section: Dict[str, Any], key: str, default: str) -> str:
    value = section.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def resolve_settings(config: Dict[str, Any], config_path: Path) -> ArchitectSettings:
    """Resolve paths relative to the config file and apply defaults."""
    defaults = DEFAULT_CONFIG_TEMPLATE
    model_cfg = _section(config, "model")
    languages_cfg = _section(config, "languages")
    paths_cfg = _section(config, "paths")

    timeout_value = model_cfg.get("timeout", defaults["model"]["timeout"])
    timeout: Optional[float] = None
    if isinstance(timeout_value, (int, float)) and not isinstance(timeout_value, bool) and timeout_value > 0:
        timeout = float(timeout_value)

    api_key_value = model_cfg.get("api_key")
    api_key = api_key_value.strip() if isinstance(api_key_value, str) and api_key_value.strip() else None

    base_dir = config_path.resolve().parent

    def _path(key: str) -> Path:
        candidate = Path(_text(paths_cfg, key, defaults["paths"][key]))
        if not candidate.is_absolute():
            candidate = base_dir / candidate
        return candidate

    return ArchitectSettings(
        model_name=_text(model_cfg, "name", defaults["model"]["name"]),
        base_url=_text(model_cfg, "base_url", defaults["model"]["base_url"]),
        timeout=timeout,
        api_key=api_key,
        source_language=_text(languages_cfg, "source", defaults["languages"]["source"]),
        working_language=_text(languages_cfg, "working", defaults["languages"]["working"]),
        session_path=_path("session"),
        logs_root=_path("logs"),
    )


__all__ = [
    "ArchitectSettings",
    "ConfigError",
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_CONFIG_TEMPLATE",
    "copy_config_template",
    "load_config",
    "resolve_settings",
    "write_config",
]
