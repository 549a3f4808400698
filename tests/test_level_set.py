"""Tests for dotsgame.core.level_set – Level links and LevelSet navigation."""

from __future__ import annotations

import logging

import pytest

from dotsgame.core.level_set import Level, LevelSet
from dotsgame.core.levels import LevelDefinition, LevelEntry, LevelSetDefinition


def _definition(level_id: str, grid_size: int = 5) -> LevelDefinition:
    return LevelDefinition(id=level_id, name=level_id.upper(), description="", grid_size=grid_size)


CATALOG = {level_id: _definition(level_id) for level_id in ("L1", "L2", "L3", "L4")}


def _level_set(*entries, set_id: str = "s") -> LevelSet:
    definition = LevelSetDefinition(
        id=set_id,
        name=set_id.title(),
        description="",
        entries=tuple(LevelEntry(level_id, ai) for level_id, ai in entries),
    )
    return LevelSet(definition, CATALOG)


@pytest.fixture()
def three() -> LevelSet:
    return _level_set(("L1", "easy"), ("L2", "medium"), ("L3", "hard"))


# ---------------------------------------------------------------------------
# Level
# ---------------------------------------------------------------------------

class TestLevel:
    def test_accessors(self):
        definition = LevelDefinition(
            id="x", name="X", description="desc", grid_size=6, blocked_cells=((1, 1),), difficulty=3
        )
        lv = Level(definition, "hard", 4)
        assert lv.definition is definition
        assert lv.id == "x"
        assert lv.name == "X"
        assert lv.description == "desc"
        assert lv.grid_size == 6
        assert lv.blocked_cells == ((1, 1),)
        assert lv.difficulty == 3
        assert lv.ai_difficulty == "hard"
        assert lv.index == 4

    def test_defaults(self):
        lv = Level(_definition("x"))
        assert lv.ai_difficulty == "easy"
        assert lv.index == 0

    def test_unlinked_is_first_and_last(self):
        lv = Level(_definition("x"))
        assert lv.next() is None
        assert lv.previous() is None
        assert lv.is_first() and lv.is_last()

    def test_links(self):
        a, b = Level(_definition("a")), Level(_definition("b"), index=1)
        a.set_next(b)
        b.set_previous(a)
        assert a.next() is b and b.previous() is a
        assert a.is_first() and not a.is_last()
        assert b.is_last() and not b.is_first()

    def test_repr(self):
        assert repr(Level(_definition("x"), "expert", 2)) == "Level(id='x', index=2, ai='expert')"


# ---------------------------------------------------------------------------
# LevelSet – construction and linking
# ---------------------------------------------------------------------------

class TestConstruction:
    def test_metadata(self, three: LevelSet):
        assert three.id == "s"
        assert three.name == "S"
        assert three.definition.entries[0] == LevelEntry("L1", "easy")

    def test_indexes_and_boundaries(self, three: LevelSet):
        assert len(three) == three.length == 3
        for i in range(3):
            assert three.get_level(i).index == i
        assert three.get_level(0) is three.first()
        assert three.get_level(2) is three.last()
        assert three.first().previous() is None
        assert three.last().next() is None

    def test_chain_links(self, three: LevelSet):
        for i in range(2):
            assert three.get_level(i).next() is three.get_level(i + 1)
            assert three.get_level(i + 1).previous() is three.get_level(i)

    def test_current_starts_at_first(self, three: LevelSet):
        assert three.current_level() is three.first()

    def test_unresolved_entry_skipped_with_contiguous_indexes(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger="dotsgame.core.level_set"):
            level_set = _level_set(("L1", "easy"), ("L2", "medium"), ("nope", "hard"), ("L3", "hard"))
        assert len(level_set) == 3
        assert [(lv.id, lv.index) for lv in level_set] == [("L1", 0), ("L2", 1), ("L3", 2)]
        assert level_set.get_level(2).ai_difficulty == "hard"
        warnings = [r for r in caplog.records if "nope" in r.getMessage()]
        assert len(warnings) == 1

    def test_single_level(self):
        level_set = _level_set(("L1", "easy"))
        only = level_set.first()
        assert only is level_set.last()
        assert only.next() is None and only.previous() is None
        assert level_set.next_level() is None

    def test_empty_set(self):
        level_set = _level_set()
        assert level_set.is_empty()
        assert len(level_set) == 0
        assert level_set.first() is None
        assert level_set.last() is None
        assert level_set.current_level() is None
        assert level_set.next_level() is None

    def test_ai_difficulty_is_per_position(self):
        level_set = _level_set(("L1", "easy"), ("L1", "expert"))
        assert [lv.ai_difficulty for lv in level_set] == ["easy", "expert"]

    def test_rebuild_creates_fresh_levels(self, three: LevelSet):
        again = LevelSet(three.definition, CATALOG)
        assert again.first() is not three.first()
        assert again.first().id == three.first().id


# ---------------------------------------------------------------------------
# LevelSet – navigation
# ---------------------------------------------------------------------------

class TestNavigation:
    def test_next_level_visits_each_once(self, three: LevelSet):
        visited = [three.current_level().id]
        while True:
            following = three.next_level()
            if following is None:
                break
            visited.append(following.id)
        assert visited == ["L1", "L2", "L3"]
        assert three.next_level() is None
        assert three.next_level() is None
        assert three.current_level() is three.last()

    def test_set_current_level_present(self, three: LevelSet):
        assert three.set_current_level(three.get_level(1)) is True
        assert three.current_level() is three.get_level(1)

    def test_set_current_level_absent(self, three: LevelSet):
        outsider = Level(_definition("L4"))
        assert three.set_current_level(outsider) is False
        assert three.current_level() is three.first()

    def test_set_current_level_accepts_foreign_level_with_same_id(self, three: LevelSet):
        other = _level_set(("L4", "easy"), ("L3", "easy"), set_id="other")
        foreign = other.get_level_by_id("L3")
        assert three.set_current_level(foreign) is True
        # the cursor points at this set's own instance
        assert three.current_level() is three.last()
        assert three.current_level() is not foreign

    def test_set_current_level_strict(self, three: LevelSet):
        stale = LevelSet(three.definition, CATALOG).get_level(1)
        assert three.set_current_level_strict(stale) is False
        assert three.current_level() is three.first()
        assert three.set_current_level_strict(three.get_level(1)) is True
        assert three.current_level().index == 1

    def test_next_level_after_set_current(self, three: LevelSet):
        three.set_current_level(three.get_level(1))
        assert three.next_level() is three.last()


# ---------------------------------------------------------------------------
# LevelSet – queries
# ---------------------------------------------------------------------------

class TestQueries:
    @pytest.mark.parametrize("index", [-1, 3, 100])
    def test_get_level_out_of_range(self, three: LevelSet, index: int):
        assert three.get_level(index) is None

    def test_get_level_by_id(self, three: LevelSet):
        assert three.get_level_by_id("L2").index == 1
        assert three.get_level_by_id("L4") is None

    def test_get_level_index(self, three: LevelSet):
        assert three.get_level_index(three.last()) == 2
        assert three.get_level_index(Level(_definition("L2"))) == 1
        assert three.get_level_index(Level(_definition("L4"))) == -1

    def test_has_level(self, three: LevelSet):
        assert three.has_level("L1")
        assert not three.has_level("L4")

    def test_all_levels_is_snapshot(self, three: LevelSet):
        first, second = three.all_levels(), three.all_levels()
        assert first is not second
        assert first == second
        first.clear()
        assert len(three) == 3

    def test_iteration_order(self, three: LevelSet):
        assert [lv.id for lv in three] == ["L1", "L2", "L3"]
