"""Shared in-memory blackboard read and written by the game's components."""

from __future__ import annotations

from typing import Any, Dict, Iterator

# Keys owned by the level-progression and settings layers.
CURRENT_LEVEL_SET = "currentLevelSet"
LEVEL_SET_ID = "levelSetId"
LOAD_NEXT_LEVEL = "loadNextLevel"
LEVEL_SET_DIRTY = "levelSetDirty"
SETTINGS_DIRTY = "settingsDirty"
SOUND_EFFECTS_ENABLED = "soundEffectsEnabled"
PLAYER_COLOR = "playerColor"


class Registry:
    """Plain key-value store; a missing key reads as ``None``."""

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def has(self, key: str) -> bool:
        return key in self._values

    def keys(self) -> Iterator[str]:
        return iter(list(self._values))

    def __contains__(self, key: object) -> bool:
        return key in self._values
