# dumpcolor/config.py
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from .palette import COLOR_MODES
from .utils import get_logger

log = get_logger("config")


@dataclass(frozen=True)
class Settings:
    """
    Run configuration. representation is deliberately not validated here:
    an unknown value drops each rendered packet with a warning instead.
    """
    representation: str = "approximation"
    color: str = "auto"
    log_level: str = "WARNING"
    log_dir: Optional[str] = None

    def __post_init__(self) -> None:
        if self.color not in COLOR_MODES:
            raise ValueError(f"color must be one of {', '.join(COLOR_MODES)}, got {self.color!r}")

    def merged(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes)


_FIELDS = {f.name for f in dataclasses.fields(Settings)}


def _load_yaml(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Read settings from a YAML mapping, e.g.

        representation: hex
        color: never
        log_level: INFO

    Missing file path -> defaults. Unknown keys are ignored with a warning.
    """
    if path is None:
        return Settings()
    doc = _load_yaml(path)
    if doc is None:
        return Settings()
    if not isinstance(doc, dict):
        raise ValueError(f"{path}: expected a mapping at top level, got {type(doc).__name__}")

    values: Dict[str, Any] = {}
    for key, val in doc.items():
        name = str(key).replace("-", "_")
        if name not in _FIELDS:
            log.warning(f"{path}: ignoring unknown setting {key!r}")
            continue
        if val is None:
            continue
        values[name] = str(val)
    return Settings(**values)
