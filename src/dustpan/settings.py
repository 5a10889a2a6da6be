"""JSON-backed settings store and scan configuration persistence."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from dustpan.models.config import DEFAULT_THRESHOLD_DAYS, ScanConfiguration
from dustpan.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "dustpan"
_SETTINGS_FILE = "settings.json"


class Settings:
    """Persistent settings backed by a JSON file.

    Uses dot-notation keys for nested access:
        settings.get("scan.threshold_days")  # reads data["scan"]["threshold_days"]
        settings.update({"scan.threshold_days": 30})  # writes + saves
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def update(self, values: dict[str, Any]) -> None:
        """Set several dot-notation keys and persist once."""
        for key, value in values.items():
            self._assign(key, value)
        self._save()

    def _assign(self, key: str, value: Any) -> None:
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            return
        if not isinstance(data, dict):
            log.warning("Ignoring malformed settings in %s", self._path)
            return
        self._data = data

    def _save(self) -> None:
        """Persist settings to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(self._data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self._path, e)


def load_configuration(settings: Settings | None = None) -> ScanConfiguration:
    """Build a ScanConfiguration from stored settings, falling back to defaults."""
    settings = settings or Settings()
    custom = settings.get("scan.custom_directories", [])
    if not isinstance(custom, list):
        custom = []
    try:
        return ScanConfiguration(
            threshold_days=int(settings.get("scan.threshold_days", DEFAULT_THRESHOLD_DAYS)),
            downloads=bool(settings.get("scan.downloads", True)),
            documents=bool(settings.get("scan.documents", True)),
            desktop=bool(settings.get("scan.desktop", True)),
            custom_directories=tuple(str(p) for p in custom),
            smart_filter=bool(settings.get("scan.smart_filter", True)),
        )
    except (TypeError, ValueError) as e:
        log.warning("Invalid scan settings in %s, using defaults: %s", settings.path, e)
        return ScanConfiguration()


def save_configuration(config: ScanConfiguration, settings: Settings | None = None) -> None:
    """Persist every field of *config* under the ``scan`` section."""
    settings = settings or Settings()
    settings.update(
        {
            "scan.threshold_days": config.threshold_days,
            "scan.downloads": config.downloads,
            "scan.documents": config.documents,
            "scan.desktop": config.desktop,
            "scan.custom_directories": list(config.custom_directories),
            "scan.smart_filter": config.smart_filter,
        }
    )
