from __future__ import annotations

from PySide6.QtCore import QObject, Signal

from dotsgame.core.registry import Registry


class DirtyFlag:
    """Consume-once boolean slot kept in the registry.

    Raising stores ``True`` under the key; consuming reads and clears it, so
    only the first reader after a raise sees the change. Anything other than
    ``True`` under the key reads as not raised.
    """

    def __init__(self, registry: Registry, key: str) -> None:
        self._registry = registry
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def raise_flag(self) -> None:
        self._registry.set(self._key, True)

    def is_raised(self) -> bool:
        return self._registry.get(self._key) is True

    def consume(self) -> bool:
        raised = self.is_raised()
        self._registry.remove(self._key)
        return raised


class SettingsSignals(QObject):
    """Broadcast counterpart of the dirty flags.

    Every connected slot receives every emission, so independent listeners do
    not race each other for a single consume-once flag.
    """

    settings_changed = Signal(object)
    level_set_changed = Signal(str)
