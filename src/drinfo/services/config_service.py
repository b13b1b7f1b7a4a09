from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigPaths:
    path: Path


@dataclass(frozen=True)
class Settings:
    max_drives: int = 100
    min_box_width: int = 40
    max_box_width: int = 120
    warn_percent: float = 90.0
    scan_gvfs: bool = True
    check_health: bool = True
    show_frame: bool = True

    @classmethod
    def from_dict(cls, cfg: dict[str, Any]) -> "Settings":
        defaults = cls()
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in cfg:
                continue
            value = cfg[f.name]
            default = getattr(defaults, f.name)
            # bool first: bool is an int subclass
            if isinstance(default, bool):
                ok = isinstance(value, bool)
            elif isinstance(default, int):
                ok = isinstance(value, int) and not isinstance(value, bool) and value > 0
            else:
                ok = isinstance(value, (int, float)) and not isinstance(value, bool)
            if ok:
                kwargs[f.name] = type(default)(value)
            else:
                logger.warning("ignoring invalid config value %s=%r", f.name, value)

        settings = cls(**kwargs)
        if settings.min_box_width > settings.max_box_width:
            logger.warning(
                "min_box_width %d > max_box_width %d, using defaults",
                settings.min_box_width,
                settings.max_box_width,
            )
            settings = cls(**{**asdict(settings), "min_box_width": 40, "max_box_width": 120})
        return settings


class ConfigService:
    def __init__(self, paths: ConfigPaths | None = None) -> None:
        self.paths = paths or ConfigPaths(path=self.default_path())

    @staticmethod
    def default_path() -> Path:
        xdg = os.environ.get("XDG_CONFIG_HOME")
        if xdg:
            base = Path(xdg)
        else:
            base = Path.home() / ".config"
        return base / "drinfo" / "config.json"

    def load(self) -> dict[str, Any]:
        p = self.paths.path
        if not p.exists():
            return {}
        try:
            with open(p, "r", encoding="utf-8") as f:
                obj = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("could not read config %s: %s", p, e)
            return {}
        return obj if isinstance(obj, dict) else {}

    def settings(self) -> Settings:
        return Settings.from_dict(self.load())
