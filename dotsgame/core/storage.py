from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from PySide6.QtCore import QSettings

logger = logging.getLogger(__name__)


def _as_text(value) -> str:
    # JSON true/false must read back as the "true"/"false" the settings layer writes
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class MemoryStorage:
    """Durable-store stand-in that lives only as long as the process."""

    def __init__(self, items: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()


class JsonFileStorage:
    """String key-value store persisted as a flat JSON object.

    Default file: ~/.dotsgame/settings.json. Every write rewrites the file. A
    missing, unreadable or corrupt file starts the store empty; failed writes
    are logged and the value is kept in memory.
    """

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = Path(file_path) if file_path else Path.home() / ".dotsgame" / "settings.json"
        self._items = self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)
        self._save()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._save()

    def clear(self) -> None:
        self._items = {}
        self._save()

    def _load(self) -> Dict[str, str]:
        if not self._file_path.exists():
            return {}
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load settings from %s: %s", self._file_path, e)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring settings file %s: expected a JSON object", self._file_path)
            return {}
        # values are always strings, whatever was written by hand
        return {str(key): _as_text(value) for key, value in payload.items() if value is not None}

    def _save(self) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(self._items, indent=2, sort_keys=True), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save settings to %s: %s", self._file_path, e)


class QSettingsStorage:
    """String store on top of Qt's QSettings, written as an INI file."""

    def __init__(self, file_path: Path) -> None:
        self._file_path = Path(file_path)
        self._settings = QSettings(str(self._file_path), QSettings.Format.IniFormat)

    @property
    def file_path(self) -> Path:
        return self._file_path

    def get_item(self, key: str) -> Optional[str]:
        value = self._settings.value(key)
        if value is None:
            return None
        return str(value)

    def set_item(self, key: str, value: str) -> None:
        self._settings.setValue(key, str(value))
        self._settings.sync()

    def remove_item(self, key: str) -> None:
        self._settings.remove(key)
        self._settings.sync()

    def clear(self) -> None:
        self._settings.clear()
        self._settings.sync()


def open_storage(file_path: Optional[Path] = None):
    """Pick the durable store for a settings file: ``.ini`` goes through QSettings, anything else is JSON."""
    if file_path is not None and Path(file_path).suffix.lower() == ".ini":
        return QSettingsStorage(Path(file_path))
    return JsonFileStorage(file_path)
