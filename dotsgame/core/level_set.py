from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Tuple

from dotsgame.core.levels import LevelDefinition, LevelSetDefinition

logger = logging.getLogger(__name__)


class Level:
    """A level definition placed at a fixed position in a level set.

    The AI difficulty belongs to the position, not to the definition: the same
    definition can appear in two sets against different opponents.
    """

    def __init__(self, definition: LevelDefinition, ai_difficulty: str = "easy", index: int = 0) -> None:
        self._definition = definition
        self._ai_difficulty = ai_difficulty
        self._index = index
        self._next: Optional[Level] = None
        self._previous: Optional[Level] = None

    @property
    def definition(self) -> LevelDefinition:
        return self._definition

    @property
    def id(self) -> str:
        return self._definition.id

    @property
    def name(self) -> str:
        return self._definition.name

    @property
    def description(self) -> str:
        return self._definition.description

    @property
    def grid_size(self) -> int:
        return self._definition.grid_size

    @property
    def blocked_cells(self) -> Tuple[Tuple[int, int], ...]:
        return self._definition.blocked_cells

    @property
    def difficulty(self) -> int:
        return self._definition.difficulty

    @property
    def ai_difficulty(self) -> str:
        return self._ai_difficulty

    @property
    def index(self) -> int:
        """Position within the owning set (0-based)."""
        return self._index

    def next(self) -> Optional[Level]:
        return self._next

    def previous(self) -> Optional[Level]:
        return self._previous

    def is_first(self) -> bool:
        return self._previous is None

    def is_last(self) -> bool:
        return self._next is None

    def set_next(self, level: Optional[Level]) -> None:
        """Link the following level. Only the owning LevelSet calls this."""
        self._next = level

    def set_previous(self, level: Optional[Level]) -> None:
        """Link the preceding level. Only the owning LevelSet calls this."""
        self._previous = level

    def __repr__(self) -> str:
        return f"Level(id={self.id!r}, index={self._index}, ai={self._ai_difficulty!r})"


class LevelSet:
    """Ordered, doubly linked run of levels with a movable "current" cursor.

    Levels are built once from the definition. Entries whose level id is not
    in the catalog are skipped with a warning and do not consume an index, so
    indexes stay contiguous. Rebuilding a set means constructing a new one;
    levels are never relinked in place.
    """

    def __init__(self, definition: LevelSetDefinition, catalog) -> None:
        self._definition = definition
        self._levels: List[Level] = []
        self._first: Optional[Level] = None
        self._last: Optional[Level] = None
        self._current: Optional[Level] = None
        self._build_levels(catalog)

    def _build_levels(self, catalog) -> None:
        index = 0
        for entry in self._definition.entries:
            level_definition = catalog.get(entry.level_id)
            if level_definition is None:
                logger.warning(
                    "Level definition not found for ID '%s' in level set '%s'",
                    entry.level_id,
                    self._definition.id,
                )
                continue
            self._levels.append(Level(level_definition, entry.ai_difficulty, index))
            index += 1
        self._link_levels()

    def _link_levels(self) -> None:
        if not self._levels:
            return
        self._first = self._levels[0]
        self._last = self._levels[-1]
        self._current = self._first

        count = len(self._levels)
        for i, level in enumerate(self._levels):
            level.set_next(self._levels[i + 1] if i < count - 1 else None)
            level.set_previous(self._levels[i - 1] if i > 0 else None)

    @property
    def definition(self) -> LevelSetDefinition:
        return self._definition

    @property
    def id(self) -> str:
        return self._definition.id

    @property
    def name(self) -> str:
        return self._definition.name

    @property
    def description(self) -> str:
        return self._definition.description

    @property
    def length(self) -> int:
        return len(self._levels)

    def current_level(self) -> Optional[Level]:
        return self._current or self._first

    def set_current_level(self, level: Level) -> bool:
        """Make the level with ``level.id`` current.

        Matching is by id, so a level object from another set (or from before
        a reload) is accepted when this set has a level with the same id. The
        cursor always points at this set's own instance.
        """
        found = self.get_level_by_id(level.id)
        if found is None:
            return False
        self._current = found
        return True

    def set_current_level_strict(self, level: Level) -> bool:
        """Like :meth:`set_current_level` but only accepts this set's own objects."""
        if not any(candidate is level for candidate in self._levels):
            return False
        self._current = level
        return True

    def next_level(self) -> Optional[Level]:
        """Advance the cursor. Returns None and stays put at the last level."""
        current = self.current_level()
        if current is None:
            return None
        following = current.next()
        if following is None:
            return None
        self._current = following
        return following

    def first(self) -> Optional[Level]:
        return self._first

    def last(self) -> Optional[Level]:
        return self._last

    def get_level(self, index: int) -> Optional[Level]:
        if index < 0 or index >= len(self._levels):
            return None
        return self._levels[index]

    def get_level_by_id(self, level_id: str) -> Optional[Level]:
        for level in self._levels:
            if level.id == level_id:
                return level
        return None

    def get_level_index(self, level: Level) -> int:
        for i, candidate in enumerate(self._levels):
            if candidate.id == level.id:
                return i
        return -1

    def all_levels(self) -> List[Level]:
        return list(self._levels)

    def is_empty(self) -> bool:
        return not self._levels

    def has_level(self, level_id: str) -> bool:
        return self.get_level_by_id(level_id) is not None

    def __len__(self) -> int:
        return len(self._levels)

    def __iter__(self) -> Iterator[Level]:
        return iter(self.all_levels())

    def __repr__(self) -> str:
        return f"LevelSet(id={self.id!r}, levels={len(self._levels)})"
