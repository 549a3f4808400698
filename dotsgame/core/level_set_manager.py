from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dotsgame.core import registry as keys
from dotsgame.core.level_set import Level, LevelSet
from dotsgame.core.levels import LevelCatalog
from dotsgame.core.registry import Registry
from dotsgame.core.signals import DirtyFlag

logger = logging.getLogger(__name__)

DEFAULT_LEVEL_SET_ID = "default"


@dataclass
class LevelSetStats:
    total_levels: int
    difficulties: Dict[str, int] = field(default_factory=dict)


class LevelSetManager:
    """Owns every LevelSet and decides which one, and which level, is current.

    The active set is cached in the registry under ``currentLevelSet``. When
    nothing is cached the manager falls back to the ``levelSetId`` chosen in
    settings and then to the default set, caching whatever it resolved.
    """

    def __init__(self, registry: Registry, catalog: LevelCatalog) -> None:
        self._registry = registry
        self._catalog = catalog
        self._level_sets: Dict[str, LevelSet] = {}
        self._load_next_level = DirtyFlag(registry, keys.LOAD_NEXT_LEVEL)
        self._level_set_dirty = DirtyFlag(registry, keys.LEVEL_SET_DIRTY)
        self._build_level_sets()

    def _build_level_sets(self) -> None:
        for definition in self._catalog.level_sets:
            self._level_sets[definition.id] = LevelSet(definition, self._catalog)
        logger.info("Built %d level sets: %s", len(self._level_sets), ", ".join(self._level_sets))

    # ------------------------------------------------------------------
    # Level to load
    # ------------------------------------------------------------------

    def request_next_level(self) -> None:
        """Ask the next get_level_to_load() call to advance instead of restarting."""
        self._load_next_level.raise_flag()

    def get_level_to_load(self) -> Optional[Level]:
        if self._load_next_level.consume():
            return self._next_level()
        return self.first_level_of_current_set()

    def first_level_of_current_set(self) -> Optional[Level]:
        level_set = self.current_level_set()
        if level_set is None or level_set.is_empty():
            logger.warning("No level available: current level set is missing or empty")
            return None
        first = level_set.first()
        level_set.set_current_level(first)
        return first

    def _next_level(self) -> Optional[Level]:
        level_set = self.current_level_set()
        following = level_set.next_level() if level_set is not None else None
        if following is not None:
            return following
        logger.warning("No next level available, returning first level of set")
        return self.first_level_of_current_set()

    def has_level_set_changed(self) -> bool:
        return self._level_set_dirty.consume()

    # ------------------------------------------------------------------
    # Current level
    # ------------------------------------------------------------------

    def current_level(self) -> Optional[Level]:
        level_set = self.current_level_set()
        if level_set is None:
            return None
        return level_set.current_level()

    def set_current_level(self, level: Level) -> bool:
        level_set = self.current_level_set()
        if level_set is None or level_set.get_level_by_id(level.id) is None:
            return False
        return level_set.set_current_level(level)

    # ------------------------------------------------------------------
    # Current level set
    # ------------------------------------------------------------------

    def current_level_set(self) -> Optional[LevelSet]:
        cached = self._registry.get(keys.CURRENT_LEVEL_SET)
        if isinstance(cached, LevelSet):
            return cached

        level_set_id = self._registry.get(keys.LEVEL_SET_ID)
        if level_set_id:
            level_set = self.get_level_set(level_set_id)
            if level_set is not None:
                logger.debug("Resolved level set '%s' from levelSetId", level_set_id)
                self._registry.set(keys.CURRENT_LEVEL_SET, level_set)
                return level_set
            logger.warning("Unknown level set id '%s', using the default set", level_set_id)

        level_set = self.default_level_set()
        if level_set is not None:
            self._registry.set(keys.CURRENT_LEVEL_SET, level_set)
        return level_set

    def set_current_level_set(self, level_set: Optional[LevelSet]) -> bool:
        if level_set is None or level_set.is_empty():
            return False
        self._registry.set(keys.CURRENT_LEVEL_SET, level_set)
        self._registry.set(keys.LEVEL_SET_ID, level_set.id)
        return True

    def set_current_level_set_by_id(self, level_set_id: str) -> bool:
        level_set = self.get_level_set(level_set_id)
        if level_set is None:
            level_set = self.default_level_set()
        return self.set_current_level_set(level_set)

    def default_level_set(self) -> Optional[LevelSet]:
        level_set = self.get_level_set(DEFAULT_LEVEL_SET_ID)
        if level_set is not None:
            return level_set
        return next(iter(self._level_sets.values()), None)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_level_set(self, level_set_id: str) -> Optional[LevelSet]:
        return self._level_sets.get(level_set_id)

    def all_level_sets(self) -> List[LevelSet]:
        return list(self._level_sets.values())

    def level_set_ids(self) -> List[str]:
        return list(self._level_sets)

    def has_level_set(self, level_set_id: str) -> bool:
        return level_set_id in self._level_sets

    def reload_level_sets(self) -> None:
        """Rebuild every set from the catalog. Earlier LevelSet and Level objects go stale."""
        self._level_sets = {}
        self._build_level_sets()

        cached = self._registry.get(keys.CURRENT_LEVEL_SET)
        if isinstance(cached, LevelSet):
            fresh = self.get_level_set(cached.id)
            if fresh is None:
                self._registry.remove(keys.CURRENT_LEVEL_SET)
            else:
                self._registry.set(keys.CURRENT_LEVEL_SET, fresh)

    def get_level_set_stats(self, level_set_id: str) -> Optional[LevelSetStats]:
        level_set = self.get_level_set(level_set_id)
        if level_set is None:
            return None
        stats = LevelSetStats(total_levels=len(level_set))
        for level in level_set.all_levels():
            stats.difficulties[level.ai_difficulty] = stats.difficulties.get(level.ai_difficulty, 0) + 1
        return stats
