"""
Ranger class definition and rules.

Wilderness warriors and half casters with a known-spells list drawn from
the ranger list (no spells at level 1).
"""

from typing import Any

from rpg_rules.classes.class_data import (
    CasterType,
    ClassDefinition,
    ClassFeature,
    HitDie,
    SpellProgression,
    SubclassDefinition,
    asi_features,
)
from rpg_rules.classes.class_strategy import ClassStrategy
from rpg_rules.data_models import NOT_APPLICABLE, Ability, Skill, SpellQuantityModel
from rpg_rules.features.feature_data import FeatureType
from rpg_rules.features.feature_keys import FeatureKey


COLOSSUS_SLAYER_DICE = "1d8"


RANGER_SPELLCASTING = SpellProgression(
    ability=Ability.WIS,
    quantity_model=SpellQuantityModel.KNOWN,
    caster_type=CasterType.HALF,
    spell_list="ranger",
    spells_known=(0, 2, 3, 3, 4, 4, 5, 5, 6, 6, 7, 7, 8, 8, 9, 9, 10, 10, 11, 11),
    swap_on_level_up=True,
)


# =============================================================================
# RANGER FEATURES
# =============================================================================

RANGER_FEATURES: list[ClassFeature] = [
    ClassFeature(1, FeatureKey.FAVORED_ENEMY, "Favored Enemy"),
    ClassFeature(1, FeatureKey.NATURAL_EXPLORER, "Natural Explorer"),
    ClassFeature(1, FeatureKey.WEAPON_MASTERY, "Weapon Mastery"),
    ClassFeature(2, FeatureKey.FIGHTING_STYLE, "Fighting Style"),
    ClassFeature(2, FeatureKey.SPELLCASTING, "Spellcasting"),
    ClassFeature(3, FeatureKey.RANGER_ARCHETYPE, "Ranger Archetype", FeatureType.SUBCLASS_SELECTION),
    ClassFeature(3, FeatureKey.PRIMEVAL_AWARENESS, "Primeval Awareness"),
    ClassFeature(5, FeatureKey.EXTRA_ATTACK, "Extra Attack"),
    ClassFeature(8, FeatureKey.LANDS_STRIDE, "Land's Stride"),
    ClassFeature(14, FeatureKey.VANISH, "Vanish"),
    ClassFeature(18, FeatureKey.FERAL_SENSES, "Feral Senses"),
    ClassFeature(20, FeatureKey.FOE_SLAYER, "Foe Slayer"),
] + asi_features()


HUNTER = SubclassDefinition(
    subclass_key="hunter",
    name="Hunter",
    features=[
        ClassFeature(
            3,
            FeatureKey.HUNTER_COLOSSUS_SLAYER,
            "Colossus Slayer",
            FeatureType.SUBCLASS_FEATURE,
            description="Once per turn, deal an extra 1d8 to a creature below its HP maximum.",
        ),
        ClassFeature(
            7, FeatureKey.HUNTER_DEFENSIVE_TACTICS, "Defensive Tactics", FeatureType.SUBCLASS_FEATURE
        ),
        ClassFeature(11, FeatureKey.HUNTER_MULTIATTACK, "Multiattack", FeatureType.SUBCLASS_FEATURE),
    ],
)

BEAST_MASTER = SubclassDefinition(
    subclass_key="beast_master",
    name="Beast Master",
    features=[
        ClassFeature(3, FeatureKey.BEAST_MASTER_COMPANION, "Ranger's Companion", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(
            7,
            FeatureKey.BEAST_MASTER_EXCEPTIONAL_TRAINING,
            "Exceptional Training",
            FeatureType.SUBCLASS_FEATURE,
        ),
        ClassFeature(11, FeatureKey.BEAST_MASTER_BESTIAL_FURY, "Bestial Fury", FeatureType.SUBCLASS_FEATURE),
    ],
)


RANGER_DEFINITION = ClassDefinition(
    class_key="ranger",
    name="Ranger",
    description="A warrior who uses martial prowess and nature magic against threats on the edges of civilization.",
    hit_die=HitDie.D10,
    primary_ability=Ability.DEX,
    saving_throws=(Ability.STR, Ability.DEX),
    features=RANGER_FEATURES,
    subclasses=[HUNTER, BEAST_MASTER],
    skill_options=(
        Skill.ANIMAL_HANDLING,
        Skill.ATHLETICS,
        Skill.INSIGHT,
        Skill.INVESTIGATION,
        Skill.NATURE,
        Skill.PERCEPTION,
        Skill.STEALTH,
        Skill.SURVIVAL,
    ),
    skill_choice_count=3,
    armor_proficiencies=("light", "medium", "shields"),
    weapon_proficiencies=("simple", "martial"),
    spellcasting=RANGER_SPELLCASTING,
    weapon_mastery_by_level={1: 2, 4: 3},
)


class RangerStrategy(ClassStrategy):
    """Hunter's prey damage and Foe Slayer."""

    def hunter_prey_damage(self, target_wounded: bool = True) -> Any:
        """Colossus Slayer dice against a creature below its HP maximum."""
        if not self.has_feature(FeatureKey.HUNTER_COLOSSUS_SLAYER) or not target_wounded:
            return NOT_APPLICABLE
        return COLOSSUS_SLAYER_DICE

    def foe_slayer_bonus(self) -> Any:
        if not self.has_feature(FeatureKey.FOE_SLAYER):
            return NOT_APPLICABLE
        return self.modifier(Ability.WIS)
