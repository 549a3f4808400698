from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

AI_DIFFICULTIES: Tuple[str, ...] = ("easy", "medium", "hard", "expert")

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "levels.yaml"


@dataclass(frozen=True)
class LevelDefinition:
    id: str
    name: str
    description: str
    grid_size: int
    blocked_cells: Tuple[Tuple[int, int], ...] = ()
    difficulty: int = 1


@dataclass(frozen=True)
class LevelEntry:
    level_id: str
    ai_difficulty: str = "easy"


@dataclass(frozen=True)
class LevelSetDefinition:
    id: str
    name: str
    description: str
    entries: Tuple[LevelEntry, ...] = ()


class LevelCatalog:
    """Level and level-set definitions loaded from a YAML catalog.

    The file holds a ``levels`` mapping (id -> definition) and an ordered
    ``level_sets`` list. Only structure is checked here; whether blocked cells
    leave a playable grid is decided when the level is authored.
    """

    def __init__(
        self,
        levels: Dict[str, LevelDefinition],
        level_sets: List[LevelSetDefinition],
    ) -> None:
        self._levels = dict(levels)
        self._level_sets = list(level_sets)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "LevelCatalog":
        """Read the catalog from ``path`` (the bundled ``levels.yaml`` by default)."""
        catalog_path = Path(path) if path is not None else DEFAULT_CATALOG_PATH
        if not catalog_path.exists():
            raise FileNotFoundError(f"Level catalog not found: {catalog_path}")
        raw = yaml.safe_load(catalog_path.read_text(encoding="utf-8"))
        catalog = cls.from_dict(raw, source=catalog_path.name)
        logger.info(
            "Loaded %d levels and %d level sets from %s",
            len(catalog._levels),
            len(catalog._level_sets),
            catalog_path,
        )
        return catalog

    @classmethod
    def from_dict(cls, raw: object, source: str = "catalog") -> "LevelCatalog":
        if not raw or not isinstance(raw, dict):
            raise ValueError(f"{source}: expected a mapping with 'levels' and 'level_sets'")

        raw_levels = raw.get("levels") or {}
        if not isinstance(raw_levels, dict):
            raise ValueError(f"{source}: 'levels' must be a mapping of id to level")
        levels: Dict[str, LevelDefinition] = {}
        for level_id, data in raw_levels.items():
            levels[str(level_id)] = _parse_level(str(level_id), data, source)

        raw_sets = raw.get("level_sets") or []
        if not isinstance(raw_sets, list):
            raise ValueError(f"{source}: 'level_sets' must be a list")
        level_sets: List[LevelSetDefinition] = []
        seen = set()
        for data in raw_sets:
            level_set = _parse_level_set(data, source)
            if level_set.id in seen:
                raise ValueError(f"{source}: duplicate level set id '{level_set.id}'")
            seen.add(level_set.id)
            level_sets.append(level_set)

        return cls(levels, level_sets)

    @property
    def level_sets(self) -> List[LevelSetDefinition]:
        return list(self._level_sets)

    def all(self) -> List[LevelDefinition]:
        return list(self._levels.values())

    def get(self, level_id: str) -> Optional[LevelDefinition]:
        return self._levels.get(level_id)

    def __contains__(self, level_id: object) -> bool:
        return level_id in self._levels

    def __len__(self) -> int:
        return len(self._levels)


def _parse_level(level_id: str, data: object, source: str) -> LevelDefinition:
    if not isinstance(data, dict):
        raise ValueError(f"{source}: level '{level_id}' must be a mapping")
    name = data.get("name")
    if not name or not isinstance(name, str):
        raise ValueError(f"{source}: level '{level_id}' has missing or invalid 'name'")
    grid_size = data.get("grid_size")
    if not isinstance(grid_size, int) or isinstance(grid_size, bool) or grid_size <= 0:
        raise ValueError(f"{source}: level '{level_id}' needs a positive integer 'grid_size'")

    cells = []
    for cell in data.get("blocked_cells") or []:
        if isinstance(cell, dict):
            row, col = cell.get("row"), cell.get("col")
        elif isinstance(cell, (list, tuple)) and len(cell) == 2:
            row, col = cell
        else:
            raise ValueError(f"{source}: level '{level_id}' has malformed blocked cell {cell!r}")
        cells.append((int(row), int(col)))

    return LevelDefinition(
        id=level_id,
        name=name.strip(),
        description=str(data.get("description", "")).strip(),
        grid_size=grid_size,
        blocked_cells=tuple(cells),
        difficulty=int(data.get("difficulty", 1)),
    )


def _parse_level_set(data: object, source: str) -> LevelSetDefinition:
    if not isinstance(data, dict):
        raise ValueError(f"{source}: each level set must be a mapping")
    set_id = data.get("id")
    if not set_id or not isinstance(set_id, str):
        raise ValueError(f"{source}: level set has missing or invalid 'id'")
    name = data.get("name") or set_id

    entries = []
    for item in data.get("levels") or []:
        # plain strings are shorthand for an entry at the default difficulty
        if isinstance(item, str):
            entries.append(LevelEntry(level_id=item))
            continue
        if not isinstance(item, dict) or not item.get("level"):
            raise ValueError(f"{source}: level set '{set_id}' has malformed entry {item!r}")
        ai = item.get("ai", "easy")
        if ai not in AI_DIFFICULTIES:
            raise ValueError(
                f"{source}: level set '{set_id}' uses unknown AI difficulty '{ai}'"
            )
        entries.append(LevelEntry(level_id=str(item["level"]), ai_difficulty=ai))

    return LevelSetDefinition(
        id=set_id,
        name=str(name).strip(),
        description=str(data.get("description", "")).strip(),
        entries=tuple(entries),
    )
