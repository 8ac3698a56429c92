"""
Barbarian class definition and rules.

Primal warriors who channel fury into rage. Rage uses grow by level tier and
become unlimited at level 20; rage damage rises at 9 and 16. Without armor a
barbarian adds CON to AC.
"""

from typing import Any

from rpg_rules.classes.class_data import (
    ClassDefinition,
    ClassFeature,
    HitDie,
    SubclassDefinition,
    asi_features,
    level_table_value,
)
from rpg_rules.classes.class_strategy import ClassStrategy
from rpg_rules.data_models import NOT_APPLICABLE, Ability, RechargeRule, Skill
from rpg_rules.features.feature_data import FeatureType
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.resources.resource_pool import UNLIMITED_USES, ResourcePool


# =============================================================================
# BARBARIAN TABLES
# =============================================================================

RAGE_USES_BY_LEVEL: dict[int, int] = {1: 2, 3: 3, 6: 4, 12: 5, 17: 6, 20: UNLIMITED_USES}
RAGE_DAMAGE_BY_LEVEL: dict[int, int] = {1: 2, 9: 3, 16: 4}
BRUTAL_CRITICAL_DICE_BY_LEVEL: dict[int, int] = {9: 1, 13: 2, 17: 3}


# =============================================================================
# BARBARIAN FEATURES
# =============================================================================

BARBARIAN_FEATURES: list[ClassFeature] = [
    ClassFeature(1, FeatureKey.RAGE, "Rage", description="Bonus melee damage and resistance while raging."),
    ClassFeature(
        1,
        FeatureKey.BARBARIAN_UNARMORED_DEFENSE,
        "Unarmored Defense",
        description="Without armor, AC equals 10 + DEX modifier + CON modifier.",
    ),
    ClassFeature(1, FeatureKey.WEAPON_MASTERY, "Weapon Mastery"),
    ClassFeature(2, FeatureKey.RECKLESS_ATTACK, "Reckless Attack"),
    ClassFeature(2, FeatureKey.DANGER_SENSE, "Danger Sense"),
    ClassFeature(3, FeatureKey.PRIMAL_PATH, "Primal Path", FeatureType.SUBCLASS_SELECTION),
    ClassFeature(3, FeatureKey.PRIMAL_KNOWLEDGE, "Primal Knowledge"),
    ClassFeature(5, FeatureKey.EXTRA_ATTACK, "Extra Attack"),
    ClassFeature(5, FeatureKey.FAST_MOVEMENT, "Fast Movement"),
    ClassFeature(7, FeatureKey.FERAL_INSTINCT, "Feral Instinct"),
    ClassFeature(9, FeatureKey.BRUTAL_CRITICAL, "Brutal Critical"),
    ClassFeature(11, FeatureKey.RELENTLESS_RAGE, "Relentless Rage"),
    ClassFeature(15, FeatureKey.PERSISTENT_RAGE, "Persistent Rage"),
    ClassFeature(18, FeatureKey.INDOMITABLE_MIGHT, "Indomitable Might"),
    ClassFeature(20, FeatureKey.PRIMAL_CHAMPION, "Primal Champion"),
] + asi_features()


PATH_OF_THE_BERSERKER = SubclassDefinition(
    subclass_key="path_of_the_berserker",
    name="Path of the Berserker",
    features=[
        ClassFeature(3, FeatureKey.BERSERKER_FRENZY, "Frenzy", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(6, FeatureKey.BERSERKER_MINDLESS_RAGE, "Mindless Rage", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(
            10, FeatureKey.BERSERKER_INTIMIDATING_PRESENCE, "Intimidating Presence", FeatureType.SUBCLASS_FEATURE
        ),
        ClassFeature(14, FeatureKey.BERSERKER_RETALIATION, "Retaliation", FeatureType.SUBCLASS_FEATURE),
    ],
)

PATH_OF_THE_ZEALOT = SubclassDefinition(
    subclass_key="path_of_the_zealot",
    name="Path of the Zealot",
    features=[
        ClassFeature(
            3,
            FeatureKey.ZEALOT_DIVINE_FURY,
            "Divine Fury",
            FeatureType.SUBCLASS_FEATURE,
            description="First hit each turn while raging deals 1d6 + half barbarian level extra damage.",
        ),
        ClassFeature(
            3, FeatureKey.ZEALOT_WARRIOR_OF_THE_GODS, "Warrior of the Gods", FeatureType.SUBCLASS_FEATURE
        ),
        ClassFeature(6, FeatureKey.ZEALOT_FANATICAL_FOCUS, "Fanatical Focus", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(
            14, FeatureKey.ZEALOT_RAGE_BEYOND_DEATH, "Rage Beyond Death", FeatureType.SUBCLASS_FEATURE
        ),
    ],
)


BARBARIAN_DEFINITION = ClassDefinition(
    class_key="barbarian",
    name="Barbarian",
    description="A fierce warrior who can enter a battle rage.",
    hit_die=HitDie.D12,
    primary_ability=Ability.STR,
    saving_throws=(Ability.STR, Ability.CON),
    features=BARBARIAN_FEATURES,
    subclasses=[PATH_OF_THE_BERSERKER, PATH_OF_THE_ZEALOT],
    skill_options=(
        Skill.ANIMAL_HANDLING,
        Skill.ATHLETICS,
        Skill.INTIMIDATION,
        Skill.NATURE,
        Skill.PERCEPTION,
        Skill.SURVIVAL,
    ),
    skill_choice_count=2,
    armor_proficiencies=("light", "medium", "shields"),
    weapon_proficiencies=("simple", "martial"),
    weapon_mastery_by_level={1: 2, 4: 3},
)


class BarbarianStrategy(ClassStrategy):
    """Rage, unarmored defense and the zealot's divine fury."""

    signature_resource = "rage"

    def resource_pools(self) -> dict[str, ResourcePool]:
        uses = level_table_value(RAGE_USES_BY_LEVEL, self.level, 2)
        return {"rage": self._pool("rage", uses, RechargeRule.BOTH)}

    def rage_damage_bonus(self) -> Any:
        return level_table_value(RAGE_DAMAGE_BY_LEVEL, self.level, 2)

    def unarmored_defense(self) -> Any:
        return 10 + self.modifier(Ability.DEX) + self.modifier(Ability.CON)

    def brutal_critical_dice(self) -> int:
        """Extra weapon dice rolled on a critical hit."""
        return level_table_value(BRUTAL_CRITICAL_DICE_BY_LEVEL, self.level, 0)

    def divine_fury_damage(self) -> Any:
        """Zealot bonus damage expression, e.g. '1d6+3'."""
        if not self.has_feature(FeatureKey.ZEALOT_DIVINE_FURY):
            return NOT_APPLICABLE
        return f"1d6+{self.level // 2}"
