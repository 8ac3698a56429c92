"""
The read-only rules dataset.

Aggregates every content source the engine reads: class definitions (and the
features they place), races and backgrounds, feats, the item catalog and the
spell registry. Cross references are checked once at load time so a typo in
a feature key or a spell's class list fails loudly instead of silently
granting nothing.

Usage:
    from rpg_rules.content_loader.rules_dataset import get_rules_dataset

    dataset = get_rules_dataset()
    fighter = dataset.require_class("fighter")
    fireball = dataset.get_spell("fireball")
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from rpg_rules.classes.class_data import ClassDefinition
from rpg_rules.classes.class_manager import get_class_manager
from rpg_rules.data_models import Item
from rpg_rules.errors import MissingReferenceError
from rpg_rules.features.feats import FEAT_DEFINITIONS
from rpg_rules.features.feature_data import FeatureDefinition, FeatureType
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.features.feature_registry import FeatureRegistry
from rpg_rules.items.item_catalog import ItemCatalog
from rpg_rules.magic.spell_data import SpellData
from rpg_rules.magic.spell_registry import SpellRegistry
from rpg_rules.races.race_data import BackgroundDefinition, RaceDefinition
from rpg_rules.races.race_manager import get_race_manager

logger = logging.getLogger(__name__)

__all__ = [
    "DatasetStats",
    "DatasetValidationError",
    "MissingReferenceError",
    "RulesDataset",
    "get_rules_dataset",
    "reset_rules_dataset",
]


class DatasetValidationError(Exception):
    """Content cross references did not resolve at load time."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(f"{len(self.errors)} dataset error(s): " + "; ".join(self.errors[:5]))


@dataclass
class DatasetStats:
    """Statistics about loaded content."""
    classes: int = 0
    races: int = 0
    backgrounds: int = 0
    features: int = 0
    feats: int = 0
    items: int = 0
    spells: int = 0


class RulesDataset:
    """
    Read-only rules content keyed by string identifiers.

    get_* lookups return None for an unknown key; require_* lookups raise
    MissingReferenceError.
    """

    def __init__(
        self,
        content_dir: Optional[Union[str, Path]] = None,
        strict: bool = True,
    ):
        """
        Load and cross-check all content.

        Args:
            content_dir: Directory holding items.json and spells.json
                (defaults to the bundled content)
            strict: Raise DatasetValidationError when validation fails;
                otherwise log the errors as warnings

        Raises:
            DatasetValidationError: In strict mode, on unresolved references
        """
        self.content_dir = Path(content_dir) if content_dir else None
        self._class_manager = get_class_manager()
        self._race_manager = get_race_manager()
        self.items = ItemCatalog(self.content_dir)
        self.spells = SpellRegistry(self.content_dir)

        self.features = FeatureRegistry()
        for definition in self._class_manager.feature_definitions():
            self.features.register(definition)
        for feat in FEAT_DEFINITIONS:
            self.features.register(feat)

        errors = self.validate()
        if errors:
            if strict:
                raise DatasetValidationError(errors)
            for error in errors:
                logger.warning(f"Dataset: {error}")

        stats = self.stats()
        logger.info(
            f"Rules dataset ready: {stats.classes} classes, {stats.races} races, "
            f"{stats.features} features, {stats.items} items, {stats.spells} spells"
        )

    # =========================================================================
    # CLASSES
    # =========================================================================

    def get_class(self, class_key: Optional[str]) -> Optional[ClassDefinition]:
        return self._class_manager.get(class_key)

    def require_class(self, class_key: Optional[str]) -> ClassDefinition:
        definition = self.get_class(class_key)
        if definition is None:
            raise MissingReferenceError("class", class_key)
        return definition

    def all_classes(self) -> list[ClassDefinition]:
        return self._class_manager.get_all()

    # =========================================================================
    # RACES AND BACKGROUNDS
    # =========================================================================

    def get_race(self, race_key: Optional[str]) -> Optional[RaceDefinition]:
        return self._race_manager.get(race_key)

    def require_race(self, race_key: Optional[str]) -> RaceDefinition:
        race = self.get_race(race_key)
        if race is None:
            raise MissingReferenceError("race", race_key)
        return race

    def all_races(self) -> list[RaceDefinition]:
        return self._race_manager.get_all()

    def get_background(self, background_key: Optional[str]) -> Optional[BackgroundDefinition]:
        return self._race_manager.get_background(background_key)

    def require_background(self, background_key: Optional[str]) -> BackgroundDefinition:
        background = self.get_background(background_key)
        if background is None:
            raise MissingReferenceError("background", background_key)
        return background

    def all_backgrounds(self) -> list[BackgroundDefinition]:
        return self._race_manager.get_all_backgrounds()

    # =========================================================================
    # FEATURES
    # =========================================================================

    def get_feature(self, key: Union[FeatureKey, str, None]) -> Optional[FeatureDefinition]:
        if key is None:
            return None
        return self.features.get(key)

    def require_feature(self, key: Union[FeatureKey, str]) -> FeatureDefinition:
        definition = self.get_feature(key)
        if definition is None:
            raise MissingReferenceError("feature", getattr(key, "value", key))
        return definition

    def feats(self) -> list[FeatureDefinition]:
        return self.features.get_feats()

    # =========================================================================
    # ITEMS AND SPELLS
    # =========================================================================

    def get_item(self, item_key: str) -> Optional[Item]:
        return self.items.get(item_key)

    def require_item(self, item_key: str) -> Item:
        item = self.get_item(item_key)
        if item is None:
            raise MissingReferenceError("item", item_key)
        return item

    def get_spell(self, spell_key: str) -> Optional[SpellData]:
        return self.spells.get(spell_key)

    def require_spell(self, spell_key: str) -> SpellData:
        spell = self.get_spell(spell_key)
        if spell is None:
            raise MissingReferenceError("spell", spell_key)
        return spell

    def spells_for_class(
        self,
        class_key: str,
        max_level: Optional[int] = None,
        min_level: int = 0,
    ) -> list[SpellData]:
        """Spells on a class list, bounded by spell level."""
        return self.spells.get_for_class(class_key, max_level=max_level, min_level=min_level)

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate(self) -> list[str]:
        """
        Check every cross reference in the loaded content.

        Returns:
            One message per problem; empty when the dataset is consistent
        """
        errors = list(self.features.validate())
        class_keys = set(self._class_manager.get_all_keys())

        for background in self.all_backgrounds():
            if background.feat is None:
                continue
            feat = self.features.get(background.feat)
            if feat is None or feat.feature_type != FeatureType.FEAT:
                errors.append(f"Background {background.background_key} grants unknown feat {background.feat.value}")

        for class_def in self.all_classes():
            progressions = [class_def.spellcasting] + [s.spellcasting for s in class_def.subclasses]
            for progression in progressions:
                if progression is not None and progression.spell_list not in class_keys:
                    errors.append(f"Class {class_def.class_key} draws spells from unknown list {progression.spell_list}")

        for spell in self.spells.all_spells():
            for class_key in spell.classes:
                if class_key not in class_keys:
                    errors.append(f"Spell {spell.key} lists unknown class {class_key}")

        for feat in self.features.get_feats():
            for spell_list in feat.mechanics.get("spell_lists", ()):
                if spell_list not in class_keys:
                    errors.append(f"Feat {feat.key.value} draws spells from unknown list {spell_list}")
        return errors

    def stats(self) -> DatasetStats:
        return DatasetStats(
            classes=len(self.all_classes()),
            races=len(self.all_races()),
            backgrounds=len(self.all_backgrounds()),
            features=len(self.features),
            feats=len(self.features.get_feats()),
            items=len(self.items),
            spells=len(self.spells),
        )


# Module-level singleton accessor
_dataset: Optional[RulesDataset] = None


def get_rules_dataset(content_dir: Optional[Union[str, Path]] = None) -> RulesDataset:
    """
    Get the global rules dataset, loading it on first use.

    A content_dir different from the loaded one reloads the dataset.
    """
    global _dataset
    requested = Path(content_dir) if content_dir else None
    if _dataset is None or (requested is not None and requested != _dataset.content_dir):
        _dataset = RulesDataset(requested)
    return _dataset


def reset_rules_dataset() -> None:
    """Drop the global dataset (for testing)."""
    global _dataset
    _dataset = None
