"""
Spell registry.

Loads spells from content/spells.json and indexes them by key, level and
class list.

Usage:
    registry = SpellRegistry()
    fireball = registry.get("fireball")
    wizard_cantrips = registry.get_for_class("wizard", max_level=0)

JSON File Format:
{
    "_metadata": {"content_type": "spells"},
    "items": [
        {
            "key": "fire_bolt",
            "name": "Fire Bolt",
            "level": 0,
            "school": "evocation",
            "classes": ["sorcerer", "wizard"],
            "effects": [
                {
                    "type": "damage",
                    "dice": "1d10",
                    "damage_type": "fire",
                    "resolution": "attack",
                    "scaling": {"type": "cantrip", "dice_at_levels": {"5": "2d10"}}
                }
            ]
        }
    ]
}
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from rpg_rules.magic.spell_data import SpellData

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_DIR = Path(__file__).resolve().parent.parent / "content"
SPELLS_FILE = "spells.json"


class SpellRegistry:
    """
    Centralized registry for spell data.

    Loads lazily on first lookup. Entries that fail to parse are logged and
    skipped.
    """

    def __init__(self, content_dir: Optional[Union[str, Path]] = None):
        self.content_dir = Path(content_dir) if content_dir else DEFAULT_CONTENT_DIR
        # Primary storage: key -> SpellData
        self._spells: dict[str, SpellData] = {}
        self._by_level: dict[int, list[SpellData]] = {}
        self._by_class: dict[str, list[SpellData]] = {}
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def spell_count(self) -> int:
        self._ensure_loaded()
        return len(self._spells)

    def load(self) -> int:
        """
        Load the spells file.

        Returns:
            Number of spells loaded
        """
        self._loaded = True
        spells_file = self.content_dir / SPELLS_FILE
        if not spells_file.exists():
            logger.warning(f"Spells file not found: {spells_file}")
            return 0

        try:
            with open(spells_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading {spells_file}: {e}")
            return 0

        failed = 0
        for entry in data.get("items", []):
            try:
                spell = SpellData.from_dict(entry)
            except (KeyError, TypeError, ValueError) as e:
                failed += 1
                logger.warning(f"Malformed spell {entry.get('key', '?')!r}: {e}; skipping")
                continue
            self.register(spell)

        logger.info(f"Loaded {len(self._spells)} spells into registry ({failed} failed)")
        return len(self._spells)

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def register(self, spell: SpellData) -> None:
        """
        Register a spell in the registry.

        Args:
            spell: SpellData to register
        """
        if spell.key in self._spells:
            logger.warning(f"Duplicate spell key '{spell.key}' - overwriting")
            self._unindex(self._spells[spell.key])
        self._spells[spell.key] = spell
        self._by_level.setdefault(spell.level, []).append(spell)
        for class_key in spell.classes:
            self._by_class.setdefault(class_key, []).append(spell)

    def _unindex(self, spell: SpellData) -> None:
        self._by_level[spell.level].remove(spell)
        for class_key in spell.classes:
            self._by_class[class_key].remove(spell)

    def get(self, key: str) -> Optional[SpellData]:
        self._ensure_loaded()
        return self._spells.get(key)

    def get_by_level(self, level: int) -> list[SpellData]:
        self._ensure_loaded()
        return list(self._by_level.get(level, []))

    def get_for_class(
        self,
        class_key: str,
        max_level: Optional[int] = None,
        min_level: int = 0,
    ) -> list[SpellData]:
        """
        Spells on a class's list, optionally bounded by level.

        Args:
            class_key: Class whose list to read
            max_level: Highest spell level to include (None for all)
            min_level: Lowest spell level to include (1 excludes cantrips)
        """
        self._ensure_loaded()
        return [
            spell
            for spell in self._by_class.get(class_key, [])
            if spell.level >= min_level and (max_level is None or spell.level <= max_level)
        ]

    def all_spells(self) -> list[SpellData]:
        self._ensure_loaded()
        return list(self._spells.values())

    def __contains__(self, key: str) -> bool:
        self._ensure_loaded()
        return key in self._spells

    def __len__(self) -> int:
        return self.spell_count
