"""
Rogue class definition and rules.

Sneak Attack grows by one d6 every odd level. The Arcane Trickster casts
wizard spells as an INT third caster from level 3.
"""

from math import ceil
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
from rpg_rules.classes.fighter import THIRD_CASTER_CANTRIPS, THIRD_CASTER_SPELLS_KNOWN
from rpg_rules.data_models import Ability, RechargeRule, Skill, SpellQuantityModel
from rpg_rules.features.feature_data import FeatureType
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.resources.resource_pool import ResourcePool


ROGUE_ASI_LEVELS: tuple[int, ...] = (4, 8, 10, 12, 16, 19)


ARCANE_TRICKSTER_SPELLCASTING = SpellProgression(
    ability=Ability.INT,
    quantity_model=SpellQuantityModel.KNOWN,
    caster_type=CasterType.THIRD,
    spell_list="wizard",
    cantrips_by_level=THIRD_CASTER_CANTRIPS,
    spells_known=THIRD_CASTER_SPELLS_KNOWN,
    swap_on_level_up=True,
)


# =============================================================================
# ROGUE FEATURES
# =============================================================================

ROGUE_FEATURES: list[ClassFeature] = [
    ClassFeature(
        1,
        FeatureKey.SNEAK_ATTACK,
        "Sneak Attack",
        description="Once per turn, deal extra d6s with a finesse or ranged weapon.",
    ),
    ClassFeature(1, FeatureKey.EXPERTISE, "Expertise"),
    ClassFeature(1, FeatureKey.THIEVES_CANT, "Thieves' Cant"),
    ClassFeature(1, FeatureKey.WEAPON_MASTERY, "Weapon Mastery"),
    ClassFeature(2, FeatureKey.CUNNING_ACTION, "Cunning Action"),
    ClassFeature(3, FeatureKey.ROGUISH_ARCHETYPE, "Roguish Archetype", FeatureType.SUBCLASS_SELECTION),
    ClassFeature(5, FeatureKey.UNCANNY_DODGE, "Uncanny Dodge"),
    ClassFeature(7, FeatureKey.EVASION, "Evasion"),
    ClassFeature(11, FeatureKey.RELIABLE_TALENT, "Reliable Talent"),
    ClassFeature(15, FeatureKey.SLIPPERY_MIND, "Slippery Mind"),
    ClassFeature(20, FeatureKey.STROKE_OF_LUCK, "Stroke of Luck"),
] + asi_features(ROGUE_ASI_LEVELS)


THIEF = SubclassDefinition(
    subclass_key="thief",
    name="Thief",
    features=[
        ClassFeature(3, FeatureKey.THIEF_FAST_HANDS, "Fast Hands", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(9, FeatureKey.THIEF_SUPREME_SNEAK, "Supreme Sneak", FeatureType.SUBCLASS_FEATURE),
    ],
)

ASSASSIN = SubclassDefinition(
    subclass_key="assassin",
    name="Assassin",
    features=[
        ClassFeature(3, FeatureKey.ASSASSIN_ASSASSINATE, "Assassinate", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(17, FeatureKey.ASSASSIN_DEATH_STRIKE, "Death Strike", FeatureType.SUBCLASS_FEATURE),
    ],
)

ARCANE_TRICKSTER = SubclassDefinition(
    subclass_key="arcane_trickster",
    name="Arcane Trickster",
    features=[
        ClassFeature(
            3,
            FeatureKey.ARCANE_TRICKSTER_SPELLCASTING,
            "Spellcasting",
            FeatureType.SUBCLASS_FEATURE,
            description="Cast wizard spells using Intelligence.",
        ),
        ClassFeature(
            9, FeatureKey.ARCANE_TRICKSTER_MAGICAL_AMBUSH, "Magical Ambush", FeatureType.SUBCLASS_FEATURE
        ),
    ],
    spellcasting=ARCANE_TRICKSTER_SPELLCASTING,
    spellcasting_feature=FeatureKey.ARCANE_TRICKSTER_SPELLCASTING,
)


ROGUE_DEFINITION = ClassDefinition(
    class_key="rogue",
    name="Rogue",
    description="A scoundrel who uses stealth and trickery to overcome obstacles and enemies.",
    hit_die=HitDie.D8,
    primary_ability=Ability.DEX,
    saving_throws=(Ability.DEX, Ability.INT),
    features=ROGUE_FEATURES,
    subclasses=[THIEF, ASSASSIN, ARCANE_TRICKSTER],
    skill_options=(
        Skill.ACROBATICS,
        Skill.ATHLETICS,
        Skill.DECEPTION,
        Skill.INSIGHT,
        Skill.INTIMIDATION,
        Skill.INVESTIGATION,
        Skill.PERCEPTION,
        Skill.PERFORMANCE,
        Skill.PERSUASION,
        Skill.SLEIGHT_OF_HAND,
        Skill.STEALTH,
    ),
    skill_choice_count=4,
    armor_proficiencies=("light",),
    weapon_proficiencies=("simple", "hand_crossbow", "longsword", "rapier", "shortsword"),
    weapon_mastery_by_level={1: 2, 4: 3},
)


class RogueStrategy(ClassStrategy):
    """Sneak Attack and Stroke of Luck."""

    def resource_pools(self) -> dict[str, ResourcePool]:
        if not self.has_feature(FeatureKey.STROKE_OF_LUCK):
            return {}
        return {"stroke_of_luck": self._pool("stroke_of_luck", 1, RechargeRule.BOTH)}

    def sneak_attack_dice(self) -> Any:
        return f"{ceil(self.level / 2)}d6"
