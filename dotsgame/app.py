"""Composition root for the dots game's progression and settings core."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotsgame.core.level_set_manager import LevelSetManager
from dotsgame.core.levels import LevelCatalog
from dotsgame.core.registry import Registry
from dotsgame.core.settings import SettingsManager
from dotsgame.core.signals import SettingsSignals
from dotsgame.core.storage import open_storage


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@dataclass
class GameContext:
    registry: Registry
    storage: object
    catalog: LevelCatalog
    signals: SettingsSignals
    settings: SettingsManager
    level_sets: LevelSetManager


def build_context(
    storage: Optional[object] = None,
    catalog_path: Optional[Path] = None,
    storage_path: Optional[Path] = None,
) -> GameContext:
    """Wire up the registry, stores and managers that the game scenes share."""
    registry = Registry()
    storage = storage if storage is not None else open_storage(storage_path)
    catalog = LevelCatalog.load(catalog_path)
    signals = SettingsSignals()
    settings = SettingsManager(registry, storage, signals)
    level_sets = LevelSetManager(registry, catalog)

    def _restart_level_set(level_set_id: str) -> None:
        level = level_sets.first_level_of_current_set()
        logging.info("Active level set is now '%s', restarting at %s", level_set_id, level)

    signals.level_set_changed.connect(_restart_level_set)
    return GameContext(
        registry=registry,
        storage=storage,
        catalog=catalog,
        signals=signals,
        settings=settings,
        level_sets=level_sets,
    )


def run() -> None:
    """Build the context and report which level the game would start on."""
    configure_logging()
    context = build_context()

    current = context.settings.get_current_settings()
    logging.info(
        "Settings: sound=%s, color=%s, level set=%s",
        current.sound_effects_enabled,
        current.player_color.value,
        current.level_set_id,
    )

    level_set = context.level_sets.current_level_set()
    level = context.level_sets.get_level_to_load()
    if level_set is None or level is None:
        logging.warning("No playable level sets found")
        return
    logging.info(
        "Level set '%s' (%d levels); loading '%s' against %s AI",
        level_set.name,
        len(level_set),
        level.name,
        level.ai_difficulty,
    )
