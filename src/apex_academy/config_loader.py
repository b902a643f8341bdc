from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Callable, Dict

import yaml

from apex_academy.settings import Settings

# Settings file suffix -> text parser.
PARSERS: Dict[str, Callable[[str], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".toml": tomllib.loads,
    ".json": json.loads,
}


def read_settings_file(path: Path) -> Dict[str, Any]:
    """Raw mapping from a YAML, TOML or JSON settings file; an empty file gives ``{}``."""

    parser = PARSERS.get(path.suffix.lower())
    if parser is None:
        raise ValueError(f"Unsupported settings format '{path.suffix}' for {path}; use one of {sorted(PARSERS)}")
    if not path.is_file():
        raise FileNotFoundError(f"Settings file not found: {path}")

    data = parser(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must hold a mapping at the top level")
    return data


def load_settings(path: Path) -> Settings:
    """Validate a config file into Settings; unset fields fall back to the environment."""

    path = Path(path)
    raw = read_settings_file(path)
    settings = Settings.model_validate(raw)
    if "content_root" in raw and not settings.content_root.is_absolute():
        settings = settings.model_copy(update={"content_root": (path.parent / settings.content_root).resolve()})
    return settings


__all__ = ["PARSERS", "load_settings", "read_settings_file"]
