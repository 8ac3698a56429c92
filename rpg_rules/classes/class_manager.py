"""
Class manager for the twelve character classes.

Provides a singleton registry of class definitions. The rules dataset reads
its class table and the class-granted feature definitions from here.
"""

import logging
from typing import Optional

from rpg_rules.classes.class_data import ClassDefinition, ClassFeature
from rpg_rules.features.feature_data import FeatureDefinition

logger = logging.getLogger(__name__)


class ClassManager:
    """
    Singleton manager for character class definitions.

    Provides centralized access to all class definitions with lazy loading.
    """

    _instance: Optional["ClassManager"] = None
    _initialized: bool = False

    def __new__(cls) -> "ClassManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if ClassManager._initialized:
            return
        self._classes: dict[str, ClassDefinition] = {}
        self._load_classes()
        ClassManager._initialized = True

    def _load_classes(self) -> None:
        """Register the built-in class definitions."""
        from rpg_rules.classes.barbarian import BARBARIAN_DEFINITION
        from rpg_rules.classes.bard import BARD_DEFINITION
        from rpg_rules.classes.cleric import CLERIC_DEFINITION
        from rpg_rules.classes.druid import DRUID_DEFINITION
        from rpg_rules.classes.fighter import FIGHTER_DEFINITION
        from rpg_rules.classes.monk import MONK_DEFINITION
        from rpg_rules.classes.paladin import PALADIN_DEFINITION
        from rpg_rules.classes.ranger import RANGER_DEFINITION
        from rpg_rules.classes.rogue import ROGUE_DEFINITION
        from rpg_rules.classes.sorcerer import SORCERER_DEFINITION
        from rpg_rules.classes.warlock import WARLOCK_DEFINITION
        from rpg_rules.classes.wizard import WIZARD_DEFINITION

        for definition in (
            BARBARIAN_DEFINITION,
            BARD_DEFINITION,
            CLERIC_DEFINITION,
            DRUID_DEFINITION,
            FIGHTER_DEFINITION,
            MONK_DEFINITION,
            PALADIN_DEFINITION,
            RANGER_DEFINITION,
            ROGUE_DEFINITION,
            SORCERER_DEFINITION,
            WARLOCK_DEFINITION,
            WIZARD_DEFINITION,
        ):
            self.register(definition)
            logger.debug(f"Loaded class: {definition.name}")

        logger.info(f"Loaded {len(self._classes)} character classes")

    def register(self, class_def: ClassDefinition) -> None:
        """Register a class definition."""
        self._classes[class_def.class_key.lower()] = class_def

    def get(self, class_key: Optional[str]) -> Optional[ClassDefinition]:
        """Get a class definition by key."""
        if not class_key:
            return None
        return self._classes.get(class_key.lower())

    def get_all(self) -> list[ClassDefinition]:
        """Get all registered class definitions."""
        return list(self._classes.values())

    def get_all_keys(self) -> list[str]:
        return list(self._classes.keys())

    def get_spellcasting_classes(self) -> list[ClassDefinition]:
        """Classes whose base class casts spells (subclass casters excluded)."""
        return [c for c in self._classes.values() if c.spellcasting is not None]

    def get_subclass_owner(self, subclass_key: str) -> Optional[ClassDefinition]:
        """The class that offers a given subclass."""
        for class_def in self._classes.values():
            if class_def.get_subclass(subclass_key) is not None:
                return class_def
        return None

    def all_class_features(self) -> list[ClassFeature]:
        """Every class and subclass feature placement, across all classes."""
        features = []
        for class_def in self._classes.values():
            features.extend(class_def.all_features())
        return features

    def feature_definitions(self) -> list[FeatureDefinition]:
        """
        One definition per feature key granted by a class or subclass.

        A key placed at several levels or by several classes (Extra Attack,
        Ability Score Improvement) yields the first placement found.
        """
        seen: set[str] = set()
        definitions = []
        for feature in self.all_class_features():
            if feature.key.value in seen:
                continue
            seen.add(feature.key.value)
            definitions.append(feature.to_definition())
        return definitions

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None
        cls._initialized = False


# Module-level singleton accessor
_manager: Optional[ClassManager] = None


def get_class_manager() -> ClassManager:
    """Get the global class manager instance."""
    global _manager
    if _manager is None:
        _manager = ClassManager()
    return _manager


def reset_class_manager() -> None:
    """Drop the global class manager (for testing)."""
    global _manager
    _manager = None
    ClassManager.reset()
