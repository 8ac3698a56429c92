"""
Core data structures for character classes.

Defines ClassDefinition, SubclassDefinition, ClassFeature and
SpellProgression, plus the level tables shared by every caster.
Each class module builds one ClassDefinition from these pieces.
"""

from dataclasses import dataclass, field
from enum import Enum
from math import ceil
from typing import Any, Optional, TypeVar

from rpg_rules.data_models import Ability, Skill, SpellQuantityModel
from rpg_rules.features.feature_data import FeatureDefinition, FeatureType
from rpg_rules.features.feature_keys import FeatureKey

T = TypeVar("T")


class HitDie(str, Enum):
    """Hit die types by class."""
    D6 = "d6"
    D8 = "d8"
    D10 = "d10"
    D12 = "d12"

    @property
    def size(self) -> int:
        return int(self.value[1:])


class CasterType(str, Enum):
    """How fast a class gains spell slots."""
    FULL = "full"       # Bard, Cleric, Druid, Sorcerer, Wizard
    HALF = "half"       # Paladin, Ranger
    THIRD = "third"     # Eldritch Knight, Arcane Trickster
    PACT = "pact"       # Warlock


# Full-caster spell slots by level: index 0 is level 1, entries are slots of spell level 1..9
FULL_CASTER_SLOTS: tuple[tuple[int, ...], ...] = (
    (2,),
    (3,),
    (4, 2),
    (4, 3),
    (4, 3, 2),
    (4, 3, 3),
    (4, 3, 3, 1),
    (4, 3, 3, 2),
    (4, 3, 3, 3, 1),
    (4, 3, 3, 3, 2),
    (4, 3, 3, 3, 2, 1),
    (4, 3, 3, 3, 2, 1),
    (4, 3, 3, 3, 2, 1, 1),
    (4, 3, 3, 3, 2, 1, 1),
    (4, 3, 3, 3, 2, 1, 1, 1),
    (4, 3, 3, 3, 2, 1, 1, 1),
    (4, 3, 3, 3, 2, 1, 1, 1, 1),
    (4, 3, 3, 3, 3, 1, 1, 1, 1),
    (4, 3, 3, 3, 3, 2, 1, 1, 1),
    (4, 3, 3, 3, 3, 2, 2, 1, 1),
)

# Pact magic: (min level, slot count) and (min level, slot level)
PACT_SLOT_COUNT: dict[int, int] = {1: 1, 2: 2, 11: 3, 17: 4}
PACT_SLOT_LEVEL: dict[int, int] = {1: 1, 3: 2, 5: 3, 7: 4, 9: 5}

STANDARD_ASI_LEVELS: tuple[int, ...] = (4, 8, 12, 16, 19)


def level_table_value(table: dict[int, T], level: int, default: T) -> T:
    """
    Look up a level-keyed step table.

    Returns the value at the highest key <= level, or default when every
    key is above the level.
    """
    applicable = [lvl for lvl in table if lvl <= level]
    if not applicable:
        return default
    return table[max(applicable)]


def effective_caster_level(caster_type: CasterType, level: int) -> int:
    """Class level converted to the full-caster slot table row."""
    if caster_type == CasterType.FULL:
        return level
    if caster_type == CasterType.HALF:
        return ceil(level / 2) if level >= 2 else 0
    if caster_type == CasterType.THIRD:
        return ceil(level / 3) if level >= 3 else 0
    return 0


def spell_slots_for(caster_type: CasterType, level: int) -> dict[int, int]:
    """Spell slots by spell level for a single-class character."""
    if caster_type == CasterType.PACT:
        return {
            level_table_value(PACT_SLOT_LEVEL, level, 1): level_table_value(PACT_SLOT_COUNT, level, 0)
        }
    row = effective_caster_level(caster_type, level)
    if row < 1:
        return {}
    return {i + 1: count for i, count in enumerate(FULL_CASTER_SLOTS[min(row, 20) - 1])}


@dataclass
class SpellProgression:
    """
    How a class (or a casting subclass) gains spells.

    Attributes:
        ability: Spellcasting ability
        quantity_model: Known / prepared / spellbook
        caster_type: Slot progression speed
        spell_list: Class key whose spell list is drawn from
        cantrips_by_level: Step table of cantrips known
        spells_known: Spells known at each level (index 0 = level 1); known model only
        spellbook_at_first_level: Spells in a new spellbook
        spellbook_per_level: Spells added to the spellbook per level gained
        swap_on_level_up: Whether a known spell may be exchanged on level-up
    """
    ability: Ability
    quantity_model: SpellQuantityModel
    caster_type: CasterType
    spell_list: str
    cantrips_by_level: dict[int, int] = field(default_factory=dict)
    spells_known: tuple[int, ...] = ()
    spellbook_at_first_level: int = 0
    spellbook_per_level: int = 0
    swap_on_level_up: bool = False

    def cantrips_known(self, level: int) -> int:
        return level_table_value(self.cantrips_by_level, level, 0)

    def spells_known_at(self, level: int) -> int:
        if not self.spells_known or level < 1:
            return 0
        return self.spells_known[min(level, len(self.spells_known)) - 1]

    def spell_slots(self, level: int) -> dict[int, int]:
        return spell_slots_for(self.caster_type, level)

    def max_spell_level(self, level: int) -> int:
        slots = self.spell_slots(level)
        return max(slots) if slots else 0


@dataclass
class ClassFeature:
    """
    A feature placed at a specific level of a class or subclass.

    The same key may appear at several levels (ability score improvements).
    """
    level: int
    key: FeatureKey
    name: str
    feature_type: FeatureType = FeatureType.CLASS_FEATURE
    mechanics: dict[str, Any] = field(default_factory=dict)
    description: str = ""

    def to_definition(self) -> FeatureDefinition:
        return FeatureDefinition(
            key=self.key,
            name=self.name,
            feature_type=self.feature_type,
            mechanics=dict(self.mechanics),
            description=self.description,
        )


def asi_features(levels: tuple[int, ...] = STANDARD_ASI_LEVELS) -> list[ClassFeature]:
    """Ability score improvement placements."""
    return [
        ClassFeature(
            level,
            FeatureKey.ABILITY_SCORE_IMPROVEMENT,
            "Ability Score Improvement",
            FeatureType.ABILITY_SCORE_IMPROVEMENT,
        )
        for level in levels
    ]


@dataclass
class SubclassDefinition:
    """
    A subclass (path, college, domain, archetype, ...).

    Attributes:
        subclass_key: Unique identifier
        name: Display name
        features: Level-placed features granted by the subclass
        spellcasting: Casting gained through the subclass, if any
        spellcasting_feature: Feature that switches the subclass casting on
        required_choice: Snapshot field the player must fill when picking it
        choice_options: Allowed values for required_choice
    """
    subclass_key: str
    name: str
    features: list[ClassFeature] = field(default_factory=list)
    description: str = ""
    spellcasting: Optional[SpellProgression] = None
    spellcasting_feature: Optional[FeatureKey] = None
    required_choice: Optional[str] = None
    choice_options: tuple[str, ...] = ()

    def features_at_level(self, level: int) -> list[ClassFeature]:
        return [f for f in self.features if f.level == level]


@dataclass
class ClassDefinition:
    """
    Complete definition of a character class.

    Attributes:
        class_key: Unique identifier (e.g., "fighter")
        name: Display name
        hit_die: Hit die rolled per level
        primary_ability: Main ability
        saving_throws: The two proficient saving throws
        features: Level-placed class features (subclass features excluded)
        subclasses: Available subclasses
        skill_options: Skills the class may choose proficiency in
        skill_choice_count: How many of skill_options are chosen
        spellcasting: Class spellcasting, if any
        weapon_mastery_by_level: Step table of weapon masteries known
        invocations: Invocations the class may learn; each entry's level is
            the lowest class level that can take it
        invocations_known_by_level: Step table of invocations known
        mystic_arcanum_levels: Class level -> spell level of the arcanum picked then
    """
    class_key: str
    name: str
    hit_die: HitDie
    primary_ability: Ability
    saving_throws: tuple[Ability, Ability]
    features: list[ClassFeature] = field(default_factory=list)
    subclasses: list[SubclassDefinition] = field(default_factory=list)
    skill_options: tuple[Skill, ...] = ()
    skill_choice_count: int = 2
    armor_proficiencies: tuple[str, ...] = ()
    weapon_proficiencies: tuple[str, ...] = ()
    spellcasting: Optional[SpellProgression] = None
    weapon_mastery_by_level: dict[int, int] = field(default_factory=dict)
    invocations: list[ClassFeature] = field(default_factory=list)
    invocations_known_by_level: dict[int, int] = field(default_factory=dict)
    mystic_arcanum_levels: dict[int, int] = field(default_factory=dict)
    description: str = ""

    def features_at_level(self, level: int) -> list[ClassFeature]:
        """Class features placed exactly at a level."""
        return [f for f in self.features if f.level == level]

    def features_up_to_level(self, level: int) -> list[ClassFeature]:
        return [f for f in self.features if f.level <= level]

    def get_subclass(self, subclass_key: Optional[str]) -> Optional[SubclassDefinition]:
        for subclass in self.subclasses:
            if subclass.subclass_key == subclass_key:
                return subclass
        return None

    def get_subclass_keys(self) -> list[str]:
        return [s.subclass_key for s in self.subclasses]

    @property
    def subclass_level(self) -> Optional[int]:
        """Level at which the subclass is chosen."""
        for feature in self.features:
            if feature.feature_type == FeatureType.SUBCLASS_SELECTION:
                return feature.level
        return None

    def weapon_mastery_count(self, level: int) -> int:
        return level_table_value(self.weapon_mastery_by_level, level, 0)

    def invocations_known(self, level: int) -> int:
        return level_table_value(self.invocations_known_by_level, level, 0)

    def get_invocation(self, key: str) -> Optional[ClassFeature]:
        for option in self.invocations:
            if option.key.value == key:
                return option
        return None

    def all_features(self) -> list[ClassFeature]:
        """Class, subclass and invocation features, in definition order."""
        features = list(self.features) + list(self.invocations)
        for subclass in self.subclasses:
            features.extend(subclass.features)
        return features
