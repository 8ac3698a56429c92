"""
Race manager.

Central registry for race and background definitions. The rules dataset
reads both tables from here.
"""

import logging
from typing import Optional

from rpg_rules.races.race_data import BackgroundDefinition, RaceDefinition, RaceTrait

logger = logging.getLogger(__name__)


class RaceManager:
    """
    Central registry and manager for race and background definitions.

    Provides access to race data by key and handles loading of the built-in
    definitions.
    """

    _instance: Optional["RaceManager"] = None
    _initialized: bool = False

    def __new__(cls) -> "RaceManager":
        """Singleton pattern to ensure one global registry."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the manager (only runs once due to singleton)."""
        if not RaceManager._initialized:
            self._races: dict[str, RaceDefinition] = {}
            self._backgrounds: dict[str, BackgroundDefinition] = {}
            self._load_all()
            RaceManager._initialized = True

    def _load_all(self) -> None:
        from rpg_rules.races.race_definitions import BACKGROUND_DEFINITIONS, RACE_DEFINITIONS

        for race in RACE_DEFINITIONS:
            self.register(race)
        for background in BACKGROUND_DEFINITIONS:
            self.register_background(background)
        logger.info(f"Loaded {len(self._races)} races and {len(self._backgrounds)} backgrounds")

    def register(self, race: RaceDefinition) -> None:
        """Register a race definition."""
        self._races[race.race_key.lower()] = race

    def register_background(self, background: BackgroundDefinition) -> None:
        self._backgrounds[background.background_key.lower()] = background

    def get(self, race_key: Optional[str]) -> Optional[RaceDefinition]:
        """
        Get a race definition by key.

        Args:
            race_key: The race identifier (case-insensitive)

        Returns:
            The RaceDefinition if found, None otherwise
        """
        if not race_key:
            return None
        return self._races.get(race_key.lower())

    def get_background(self, background_key: Optional[str]) -> Optional[BackgroundDefinition]:
        if not background_key:
            return None
        return self._backgrounds.get(background_key.lower())

    def get_all(self) -> list[RaceDefinition]:
        return list(self._races.values())

    def get_all_backgrounds(self) -> list[BackgroundDefinition]:
        return list(self._backgrounds.values())

    def get_all_keys(self) -> list[str]:
        return list(self._races.keys())

    def is_valid_race(self, race_key: str) -> bool:
        return self.get(race_key) is not None

    def get_trait(self, race_key: str, trait_key: str, subrace_key: Optional[str] = None) -> Optional[RaceTrait]:
        """Find one trait of a race (subrace traits included)."""
        race = self.get(race_key)
        if race is None:
            return None
        for trait in race.all_traits(subrace_key):
            if trait.trait_key == trait_key:
                return trait
        return None

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None
        cls._initialized = False


_manager: Optional[RaceManager] = None


def get_race_manager() -> RaceManager:
    """Get the global race manager instance."""
    global _manager
    if _manager is None:
        _manager = RaceManager()
    return _manager


def reset_race_manager() -> None:
    global _manager
    _manager = None
    RaceManager.reset()
