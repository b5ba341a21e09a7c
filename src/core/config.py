"""Utilities for loading application settings from YAML configuration files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass(slots=True)
class HintSettings:
    enabled: bool = True
    show_outcome: bool = True
    cache_max_entries: int = 100
    sql_suffix: str = ".sql"
    result_suffix: str = ".result"


@dataclass(slots=True)
class PathsSettings:
    event_logs_dir: str | None = None


@dataclass(slots=True)
class Settings:
    hints: HintSettings = field(default_factory=HintSettings)
    paths: PathsSettings | None = None


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _normalize_suffix(value: Any, default: str) -> str:
    text = str(value or "").strip()
    if not text:
        return default
    return text if text.startswith(".") else f".{text}"


def load_settings(path: str | Path) -> Settings:
    """Read configuration from *path* and return structured settings."""

    config_path = Path(path)
    raw = _load_yaml(config_path)

    hints_raw = raw.get("hints") or {}
    defaults = HintSettings()
    max_entries = int(hints_raw.get("cache_max_entries", defaults.cache_max_entries))
    if max_entries < 1:
        raise ValueError("hints.cache_max_entries must be at least 1")
    hints = HintSettings(
        enabled=bool(hints_raw.get("enabled", defaults.enabled)),
        show_outcome=bool(hints_raw.get("show_outcome", defaults.show_outcome)),
        cache_max_entries=max_entries,
        sql_suffix=_normalize_suffix(hints_raw.get("sql_suffix"), defaults.sql_suffix),
        result_suffix=_normalize_suffix(hints_raw.get("result_suffix"), defaults.result_suffix),
    )

    paths_raw: dict[str, Any] | None = raw.get("paths")
    paths = None
    if paths_raw:
        event_logs_dir = paths_raw.get("event_logs_dir")
        paths = PathsSettings(event_logs_dir=str(event_logs_dir) if event_logs_dir else None)

    return Settings(hints=hints, paths=paths)
