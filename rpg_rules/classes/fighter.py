"""
Fighter class definition and rules.

Masters of martial combat. Fighters gain the most ability score
improvements and attacks of any class. The Champion widens the critical
range, the Battle Master fuels maneuvers with superiority dice and the
Eldritch Knight casts wizard spells as a third caster from level 3.
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
    level_table_value,
)
from rpg_rules.classes.class_strategy import ClassStrategy
from rpg_rules.data_models import Ability, RechargeRule, Skill, SpellQuantityModel
from rpg_rules.features.feature_data import FeatureType
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.resources.resource_pool import ResourcePool


# =============================================================================
# FIGHTER TABLES
# =============================================================================

FIGHTER_ASI_LEVELS: tuple[int, ...] = (4, 6, 8, 12, 14, 16, 19)
ATTACKS_BY_LEVEL: dict[int, int] = {1: 1, 5: 2, 11: 3, 20: 4}
ACTION_SURGE_BY_LEVEL: dict[int, int] = {2: 1, 17: 2}
INDOMITABLE_BY_LEVEL: dict[int, int] = {9: 1, 13: 2, 17: 3}
SUPERIORITY_DICE_BY_LEVEL: dict[int, int] = {3: 4, 7: 5, 15: 6}

# Eldritch Knight / Arcane Trickster known spells, index 0 = class level 1
THIRD_CASTER_SPELLS_KNOWN: tuple[int, ...] = (
    0, 0, 3, 4, 4, 4, 5, 6, 6, 7, 8, 8, 9, 10, 10, 11, 11, 11, 12, 13,
)
THIRD_CASTER_CANTRIPS: dict[int, int] = {3: 2, 10: 3}


ELDRITCH_KNIGHT_SPELLCASTING = SpellProgression(
    ability=Ability.INT,
    quantity_model=SpellQuantityModel.KNOWN,
    caster_type=CasterType.THIRD,
    spell_list="wizard",
    cantrips_by_level=THIRD_CASTER_CANTRIPS,
    spells_known=THIRD_CASTER_SPELLS_KNOWN,
    swap_on_level_up=True,
)


# =============================================================================
# FIGHTER FEATURES
# =============================================================================

FIGHTER_FEATURES: list[ClassFeature] = [
    ClassFeature(1, FeatureKey.FIGHTING_STYLE, "Fighting Style"),
    ClassFeature(
        1,
        FeatureKey.SECOND_WIND,
        "Second Wind",
        description="Regain 1d10 + fighter level HP as a bonus action.",
    ),
    ClassFeature(1, FeatureKey.WEAPON_MASTERY, "Weapon Mastery"),
    ClassFeature(2, FeatureKey.ACTION_SURGE, "Action Surge"),
    ClassFeature(3, FeatureKey.MARTIAL_ARCHETYPE, "Martial Archetype", FeatureType.SUBCLASS_SELECTION),
    ClassFeature(5, FeatureKey.EXTRA_ATTACK, "Extra Attack"),
    ClassFeature(9, FeatureKey.INDOMITABLE, "Indomitable"),
    ClassFeature(11, FeatureKey.EXTRA_ATTACK_2, "Extra Attack (2)"),
    ClassFeature(20, FeatureKey.EXTRA_ATTACK_3, "Extra Attack (3)"),
] + asi_features(FIGHTER_ASI_LEVELS)


CHAMPION = SubclassDefinition(
    subclass_key="champion",
    name="Champion",
    description="Raw physical power honed to deadly perfection.",
    features=[
        ClassFeature(
            3,
            FeatureKey.CHAMPION_IMPROVED_CRITICAL,
            "Improved Critical",
            FeatureType.SUBCLASS_FEATURE,
            description="Weapon attacks score a critical hit on a roll of 19 or 20.",
        ),
        ClassFeature(
            7, FeatureKey.CHAMPION_REMARKABLE_ATHLETE, "Remarkable Athlete", FeatureType.SUBCLASS_FEATURE
        ),
        ClassFeature(
            15,
            FeatureKey.CHAMPION_SUPERIOR_CRITICAL,
            "Superior Critical",
            FeatureType.SUBCLASS_FEATURE,
            description="Weapon attacks score a critical hit on a roll of 18-20.",
        ),
        ClassFeature(18, FeatureKey.CHAMPION_SURVIVOR, "Survivor", FeatureType.SUBCLASS_FEATURE),
    ],
)

BATTLE_MASTER = SubclassDefinition(
    subclass_key="battle_master",
    name="Battle Master",
    description="Martial techniques passed down through generations.",
    features=[
        ClassFeature(
            3,
            FeatureKey.BATTLE_MASTER_COMBAT_SUPERIORITY,
            "Combat Superiority",
            FeatureType.SUBCLASS_FEATURE,
            description="Four d8 superiority dice fuel maneuvers; regained on any rest.",
        ),
        ClassFeature(
            3, FeatureKey.BATTLE_MASTER_STUDENT_OF_WAR, "Student of War", FeatureType.SUBCLASS_FEATURE
        ),
        ClassFeature(
            10,
            FeatureKey.BATTLE_MASTER_IMPROVED_COMBAT_SUPERIORITY,
            "Improved Combat Superiority",
            FeatureType.SUBCLASS_FEATURE,
        ),
        ClassFeature(15, FeatureKey.BATTLE_MASTER_RELENTLESS, "Relentless", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(
            18,
            FeatureKey.BATTLE_MASTER_ULTIMATE_COMBAT_SUPERIORITY,
            "Ultimate Combat Superiority",
            FeatureType.SUBCLASS_FEATURE,
        ),
    ],
)

ELDRITCH_KNIGHT = SubclassDefinition(
    subclass_key="eldritch_knight",
    name="Eldritch Knight",
    description="Martial mastery combined with careful study of abjuration and evocation.",
    features=[
        ClassFeature(
            3,
            FeatureKey.ELDRITCH_KNIGHT_SPELLCASTING,
            "Spellcasting",
            FeatureType.SUBCLASS_FEATURE,
            description="Cast wizard spells using Intelligence.",
        ),
        ClassFeature(3, FeatureKey.ELDRITCH_KNIGHT_WEAPON_BOND, "Weapon Bond", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(7, FeatureKey.ELDRITCH_KNIGHT_WAR_MAGIC, "War Magic", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(
            10, FeatureKey.ELDRITCH_KNIGHT_ELDRITCH_STRIKE, "Eldritch Strike", FeatureType.SUBCLASS_FEATURE
        ),
    ],
    spellcasting=ELDRITCH_KNIGHT_SPELLCASTING,
    spellcasting_feature=FeatureKey.ELDRITCH_KNIGHT_SPELLCASTING,
)


FIGHTER_DEFINITION = ClassDefinition(
    class_key="fighter",
    name="Fighter",
    description="A master of martial combat, skilled with a variety of weapons and armor.",
    hit_die=HitDie.D10,
    primary_ability=Ability.STR,
    saving_throws=(Ability.STR, Ability.CON),
    features=FIGHTER_FEATURES,
    subclasses=[CHAMPION, BATTLE_MASTER, ELDRITCH_KNIGHT],
    skill_options=(
        Skill.ACROBATICS,
        Skill.ANIMAL_HANDLING,
        Skill.ATHLETICS,
        Skill.HISTORY,
        Skill.INSIGHT,
        Skill.INTIMIDATION,
        Skill.PERCEPTION,
        Skill.SURVIVAL,
    ),
    skill_choice_count=2,
    armor_proficiencies=("light", "medium", "heavy", "shields"),
    weapon_proficiencies=("simple", "martial"),
    weapon_mastery_by_level={1: 3, 4: 4, 10: 5, 16: 6},
)


class FighterStrategy(ClassStrategy):
    """Attacks, critical range and the fighter's per-rest resources."""

    signature_resource = "superiority_dice"

    def resource_pools(self) -> dict[str, ResourcePool]:
        pools = {"second_wind": self._pool("second_wind", 1, RechargeRule.BOTH)}
        surges = level_table_value(ACTION_SURGE_BY_LEVEL, self.level, 0)
        if surges:
            pools["action_surge"] = self._pool("action_surge", surges, RechargeRule.BOTH)
        indomitable = level_table_value(INDOMITABLE_BY_LEVEL, self.level, 0)
        if indomitable:
            pools["indomitable"] = self._pool("indomitable", indomitable, RechargeRule.LONG_REST)
        if self.has_feature(FeatureKey.BATTLE_MASTER_COMBAT_SUPERIORITY):
            dice = level_table_value(SUPERIORITY_DICE_BY_LEVEL, self.level, 4)
            pools["superiority_dice"] = self._pool(
                "superiority_dice", dice, RechargeRule.BOTH, die=self.superiority_die()
            )
        return pools

    def superiority_die(self) -> str:
        if self.has_feature(FeatureKey.BATTLE_MASTER_ULTIMATE_COMBAT_SUPERIORITY):
            return "d12"
        if self.has_feature(FeatureKey.BATTLE_MASTER_IMPROVED_COMBAT_SUPERIORITY):
            return "d10"
        return "d8"

    def second_wind_healing(self) -> str:
        return f"1d10+{self.level}"

    def critical_hit_range(self) -> int:
        if self.has_feature(FeatureKey.CHAMPION_SUPERIOR_CRITICAL):
            return 18
        if self.has_feature(FeatureKey.CHAMPION_IMPROVED_CRITICAL):
            return 19
        return 20

    def extra_attack_count(self) -> int:
        return level_table_value(ATTACKS_BY_LEVEL, self.level, 1)

    def describe(self) -> dict[str, Any]:
        summary = super().describe()
        if self.has_feature(FeatureKey.BATTLE_MASTER_COMBAT_SUPERIORITY):
            summary["superiority_die"] = self.superiority_die()
        return summary
