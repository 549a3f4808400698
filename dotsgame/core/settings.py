from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from dotsgame.core import registry as keys
from dotsgame.core.level_set import LevelSet
from dotsgame.core.registry import Registry
from dotsgame.core.signals import DirtyFlag, SettingsSignals

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "dotsGame_"


class PlayerColor(str, Enum):
    RED = "red"
    BLUE = "blue"


@dataclass
class GameSettings:
    sound_effects_enabled: bool = True
    player_color: PlayerColor = PlayerColor.RED
    level_set_id: str = "default"

    def __post_init__(self) -> None:
        self.player_color = PlayerColor(self.player_color)


class UnknownSettingError(KeyError):
    """Raised for a setting name outside the GameSettings schema."""


@dataclass(frozen=True)
class SettingField:
    """Where one GameSettings field lives in the registry and in storage."""

    name: str
    registry_key: str
    storage_key: str
    encode: Callable[[Any], str]
    decode: Callable[[str], Any]


def _encode_bool(value: bool) -> str:
    return "true" if value else "false"


def _decode_bool(raw: str) -> bool:
    return raw == "true"


def _decode_color(raw: str) -> Optional[PlayerColor]:
    try:
        return PlayerColor(raw)
    except ValueError:
        logger.warning("Ignoring stored player color %r", raw)
        return None


SETTING_FIELDS: Dict[str, SettingField] = {
    "sound_effects_enabled": SettingField(
        "sound_effects_enabled", keys.SOUND_EFFECTS_ENABLED, "soundEffects", _encode_bool, _decode_bool
    ),
    "player_color": SettingField(
        "player_color", keys.PLAYER_COLOR, "playerColor", lambda color: PlayerColor(color).value, _decode_color
    ),
    "level_set_id": SettingField("level_set_id", keys.LEVEL_SET_ID, "levelSetId", str, str),
}


def _setting_field(name: str) -> SettingField:
    try:
        return SETTING_FIELDS[name]
    except KeyError:
        raise UnknownSettingError(f"Unknown setting: {name!r}") from None


# ---------------------------------------------------------------------------
# Layered resolution: registry cache -> durable storage -> built-in defaults
# ---------------------------------------------------------------------------

class RegistryBackend:
    def __init__(self, registry: Registry) -> None:
        self._registry = registry

    def read(self, setting: SettingField) -> Any:
        return self._registry.get(setting.registry_key)


class StorageBackend:
    def __init__(self, storage, prefix: str = STORAGE_PREFIX) -> None:
        self._storage = storage
        self._prefix = prefix

    def key_for(self, setting: SettingField) -> str:
        return self._prefix + setting.storage_key

    def read(self, setting: SettingField) -> Any:
        raw = self._storage.get_item(self.key_for(setting))
        if raw is None:
            return None
        return setting.decode(raw)

    def write(self, setting: SettingField, value: Any) -> None:
        self._storage.set_item(self.key_for(setting), setting.encode(value))

    def write_raw(self, setting: SettingField, raw: str) -> None:
        self._storage.set_item(self.key_for(setting), raw)


class DefaultsBackend:
    def __init__(self, defaults: Optional[GameSettings] = None) -> None:
        self._defaults = defaults or GameSettings()

    def read(self, setting: SettingField) -> Any:
        return getattr(self._defaults, setting.name)


class LayeredResolver:
    """Resolve a setting from an ordered list of backends; first non-None wins."""

    def __init__(self, backends: List[Any]) -> None:
        self._backends = list(backends)

    @property
    def backends(self) -> List[Any]:
        return list(self._backends)

    def resolve(self, setting: SettingField) -> Any:
        for backend in self._backends:
            value = backend.read(setting)
            if value is not None:
                return value
        return None


class SettingsManager:
    """Player settings kept in the registry and persisted to a string store.

    Reads go registry -> storage -> defaults. Saving writes storage first, then
    the registry, then raises the dirty flags and emits the matching signals.
    """

    _DEFAULT_SETTINGS = GameSettings()

    def __init__(self, registry: Registry, storage, signals: Optional[SettingsSignals] = None) -> None:
        self._registry = registry
        self._storage_backend = StorageBackend(storage)
        self._resolver = LayeredResolver(
            [
                RegistryBackend(registry),
                self._storage_backend,
                DefaultsBackend(self.get_default_settings()),
            ]
        )
        self._signals = signals
        self._settings_dirty = DirtyFlag(registry, keys.SETTINGS_DIRTY)
        self._level_set_dirty = DirtyFlag(registry, keys.LEVEL_SET_DIRTY)
        self.load_settings()

    @staticmethod
    def get_default_settings() -> GameSettings:
        return replace(SettingsManager._DEFAULT_SETTINGS)

    @property
    def resolver(self) -> LayeredResolver:
        return self._resolver

    def load_settings(self) -> GameSettings:
        """Resolve every field and cache the result in the registry."""
        settings = self._build()
        self._sync_to_registry(settings)
        logger.debug("Loaded settings %s", settings)
        return settings

    def get_current_settings(self) -> GameSettings:
        return self._build()

    def get_setting(self, key: str) -> Any:
        setting = _setting_field(key)
        return getattr(self.get_current_settings(), setting.name)

    def update_setting(self, key: str, value: Any) -> None:
        setting = _setting_field(key)
        settings = self.get_current_settings()
        self.save_settings(replace(settings, **{setting.name: value}))

    def save_settings(self, settings: GameSettings) -> None:
        # encode everything before the first write so a bad field leaves storage untouched
        encoded = {setting: setting.encode(getattr(settings, setting.name)) for setting in SETTING_FIELDS.values()}
        for setting, raw in encoded.items():
            self._storage_backend.write_raw(setting, raw)
        self._sync_to_registry(settings)

        cached = self._registry.get(keys.CURRENT_LEVEL_SET)
        if isinstance(cached, LevelSet) and cached.id != settings.level_set_id:
            logger.info("Level set changed from '%s' to '%s'", cached.id, settings.level_set_id)
            # the cached handle no longer names the active set; the next
            # lookup resolves levelSetId instead
            self._registry.remove(keys.CURRENT_LEVEL_SET)
            self._level_set_dirty.raise_flag()
            if self._signals is not None:
                self._signals.level_set_changed.emit(settings.level_set_id)

        self._settings_dirty.raise_flag()
        if self._signals is not None:
            self._signals.settings_changed.emit(settings)
        logger.info("Saved settings %s", settings)

    def reset_to_defaults(self) -> None:
        self.save_settings(self.get_default_settings())

    def has_settings_changed(self) -> bool:
        return self._settings_dirty.consume()

    def _build(self) -> GameSettings:
        values = {f.name: self._resolver.resolve(SETTING_FIELDS[f.name]) for f in fields(GameSettings)}
        return GameSettings(**values)

    def _sync_to_registry(self, settings: GameSettings) -> None:
        for setting in SETTING_FIELDS.values():
            self._registry.set(setting.registry_key, getattr(settings, setting.name))
