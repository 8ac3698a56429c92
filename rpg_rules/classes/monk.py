"""
Monk class definition and rules.

Unarmored martial artists. The martial arts die replaces the 1 + STR of an
ordinary unarmed strike, and ki points (one per level from level 2) fuel
Flurry of Blows, Stunning Strike and tradition techniques.
"""

from typing import Any, Optional

from rpg_rules.classes.class_data import (
    ClassDefinition,
    ClassFeature,
    HitDie,
    SubclassDefinition,
    asi_features,
    level_table_value,
)
from rpg_rules.classes.class_strategy import ClassStrategy
from rpg_rules.data_models import NOT_APPLICABLE, Ability, ItemSlot, RechargeRule, Skill
from rpg_rules.features.feature_data import FeatureType
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.resources.resource_pool import ResourcePool


MARTIAL_ARTS_DIE_BY_LEVEL: dict[int, str] = {1: "1d4", 5: "1d6", 11: "1d8", 17: "1d10"}

# Ki cost of core techniques and of features that spend ki
KI_COSTS: dict[str, int] = {
    "flurry_of_blows": 1,
    "patient_defense": 1,
    "step_of_the_wind": 1,
    FeatureKey.STUNNING_STRIKE.value: 1,
    FeatureKey.DEFLECT_MISSILES.value: 1,
    FeatureKey.SHADOW_ARTS.value: 2,
    FeatureKey.OPEN_HAND_QUIVERING_PALM.value: 3,
}
FEATURE_TECHNIQUES = {key for key in KI_COSTS if key in {k.value for k in FeatureKey}}


# =============================================================================
# MONK FEATURES
# =============================================================================

MONK_FEATURES: list[ClassFeature] = [
    ClassFeature(
        1,
        FeatureKey.MARTIAL_ARTS,
        "Martial Arts",
        description="Unarmed strikes use DEX or STR and deal the martial arts die.",
    ),
    ClassFeature(
        1,
        FeatureKey.MONK_UNARMORED_DEFENSE,
        "Unarmored Defense",
        description="Without armor or shield, AC equals 10 + DEX modifier + WIS modifier.",
    ),
    ClassFeature(2, FeatureKey.KI, "Ki"),
    ClassFeature(2, FeatureKey.UNARMORED_MOVEMENT, "Unarmored Movement"),
    ClassFeature(3, FeatureKey.MONASTIC_TRADITION, "Monastic Tradition", FeatureType.SUBCLASS_SELECTION),
    ClassFeature(3, FeatureKey.DEFLECT_MISSILES, "Deflect Missiles"),
    ClassFeature(5, FeatureKey.EXTRA_ATTACK, "Extra Attack"),
    ClassFeature(5, FeatureKey.STUNNING_STRIKE, "Stunning Strike"),
    ClassFeature(6, FeatureKey.KI_EMPOWERED_STRIKES, "Ki-Empowered Strikes"),
    ClassFeature(7, FeatureKey.EVASION, "Evasion"),
    ClassFeature(14, FeatureKey.DIAMOND_SOUL, "Diamond Soul"),
    ClassFeature(20, FeatureKey.PERFECT_SELF, "Perfect Self"),
] + asi_features()


WAY_OF_THE_OPEN_HAND = SubclassDefinition(
    subclass_key="way_of_the_open_hand",
    name="Way of the Open Hand",
    features=[
        ClassFeature(3, FeatureKey.OPEN_HAND_TECHNIQUE, "Open Hand Technique", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(
            6, FeatureKey.OPEN_HAND_WHOLENESS_OF_BODY, "Wholeness of Body", FeatureType.SUBCLASS_FEATURE
        ),
        ClassFeature(
            17, FeatureKey.OPEN_HAND_QUIVERING_PALM, "Quivering Palm", FeatureType.SUBCLASS_FEATURE
        ),
    ],
)

WAY_OF_SHADOW = SubclassDefinition(
    subclass_key="way_of_shadow",
    name="Way of Shadow",
    features=[
        ClassFeature(3, FeatureKey.SHADOW_ARTS, "Shadow Arts", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(6, FeatureKey.SHADOW_STEP, "Shadow Step", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(17, FeatureKey.SHADOW_OPPORTUNIST, "Opportunist", FeatureType.SUBCLASS_FEATURE),
    ],
)


MONK_DEFINITION = ClassDefinition(
    class_key="monk",
    name="Monk",
    description="A master of martial arts, harnessing the power of the body in pursuit of perfection.",
    hit_die=HitDie.D8,
    primary_ability=Ability.DEX,
    saving_throws=(Ability.STR, Ability.DEX),
    features=MONK_FEATURES,
    subclasses=[WAY_OF_THE_OPEN_HAND, WAY_OF_SHADOW],
    skill_options=(
        Skill.ACROBATICS,
        Skill.ATHLETICS,
        Skill.HISTORY,
        Skill.INSIGHT,
        Skill.RELIGION,
        Skill.STEALTH,
    ),
    skill_choice_count=2,
    weapon_proficiencies=("simple", "shortsword"),
)


class MonkStrategy(ClassStrategy):
    """Martial arts die, ki and unarmored defense."""

    signature_resource = "ki"

    def resource_pools(self) -> dict[str, ResourcePool]:
        """Ki equals monk level, empty until level 2."""
        points = self.level if self.level >= 2 else 0
        return {"ki": self._pool("ki", points, RechargeRule.BOTH)}

    def unarmed_damage_die(self) -> Any:
        return level_table_value(MARTIAL_ARTS_DIE_BY_LEVEL, self.level, "1d4")

    def unarmored_defense(self) -> Any:
        off_hand = self.snapshot.equipped(ItemSlot.OFF_HAND)
        if off_hand is not None and off_hand.is_shield:
            return NOT_APPLICABLE
        return 10 + self.modifier(Ability.DEX) + self.modifier(Ability.WIS)

    def ki_save_dc(self) -> int:
        """8 + proficiency bonus + WIS modifier."""
        return 8 + self.proficiency_bonus + self.modifier(Ability.WIS)

    def ki_ability_cost(self, technique: str) -> Optional[int]:
        """
        Ki cost of a technique, or None when the monk cannot use it.

        Core techniques need only the Ki feature; feature techniques also
        need their own feature.
        """
        if not self.has_feature(FeatureKey.KI):
            return None
        cost = KI_COSTS.get(technique)
        if cost is None:
            return None
        if technique in FEATURE_TECHNIQUES and not self.has_feature(FeatureKey(technique)):
            return None
        return cost
