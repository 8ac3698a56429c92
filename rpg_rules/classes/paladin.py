"""
Paladin class definition and rules.

Holy warriors bound by a sacred oath. Paladins are half casters that
prepare spells (CHA modifier + half their level), spend slots on Divine
Smite and shield nearby allies with the Aura of Protection from level 6.
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
from rpg_rules.data_models import NOT_APPLICABLE, Ability, RechargeRule, Skill, SpellQuantityModel
from rpg_rules.features.feature_data import FeatureType
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.resources.resource_pool import ResourcePool


LAY_ON_HANDS_PER_LEVEL = 5
SMITE_MAX_DICE = 5
SMITE_MAX_DICE_VS_EXTRAPLANAR = 6
SMITE_BONUS_TARGETS: frozenset[str] = frozenset({"fiend", "undead"})


PALADIN_SPELLCASTING = SpellProgression(
    ability=Ability.CHA,
    quantity_model=SpellQuantityModel.PREPARED,
    caster_type=CasterType.HALF,
    spell_list="paladin",
)


# =============================================================================
# PALADIN FEATURES
# =============================================================================

PALADIN_FEATURES: list[ClassFeature] = [
    ClassFeature(1, FeatureKey.DIVINE_SENSE, "Divine Sense"),
    ClassFeature(
        1,
        FeatureKey.LAY_ON_HANDS,
        "Lay on Hands",
        description="A pool of healing equal to 5 x paladin level, restored on a long rest.",
    ),
    ClassFeature(1, FeatureKey.WEAPON_MASTERY, "Weapon Mastery"),
    ClassFeature(2, FeatureKey.FIGHTING_STYLE, "Fighting Style"),
    ClassFeature(2, FeatureKey.SPELLCASTING, "Spellcasting"),
    ClassFeature(
        2,
        FeatureKey.DIVINE_SMITE,
        "Divine Smite",
        description="Spend a spell slot on a melee hit for extra radiant damage.",
    ),
    ClassFeature(3, FeatureKey.SACRED_OATH, "Sacred Oath", FeatureType.SUBCLASS_SELECTION),
    ClassFeature(5, FeatureKey.EXTRA_ATTACK, "Extra Attack"),
    ClassFeature(
        6,
        FeatureKey.AURA_OF_PROTECTION,
        "Aura of Protection",
        description="Add CHA modifier (minimum +1) to saving throws.",
    ),
    ClassFeature(10, FeatureKey.AURA_OF_COURAGE, "Aura of Courage"),
    ClassFeature(11, FeatureKey.IMPROVED_DIVINE_SMITE, "Improved Divine Smite"),
] + asi_features()


OATH_OF_DEVOTION = SubclassDefinition(
    subclass_key="oath_of_devotion",
    name="Oath of Devotion",
    features=[
        ClassFeature(3, FeatureKey.DEVOTION_SACRED_WEAPON, "Sacred Weapon", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(
            7, FeatureKey.DEVOTION_AURA_OF_DEVOTION, "Aura of Devotion", FeatureType.SUBCLASS_FEATURE
        ),
        ClassFeature(20, FeatureKey.DEVOTION_HOLY_NIMBUS, "Holy Nimbus", FeatureType.SUBCLASS_FEATURE),
    ],
)

OATH_OF_VENGEANCE = SubclassDefinition(
    subclass_key="oath_of_vengeance",
    name="Oath of Vengeance",
    features=[
        ClassFeature(3, FeatureKey.VENGEANCE_VOW_OF_ENMITY, "Vow of Enmity", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(
            7, FeatureKey.VENGEANCE_RELENTLESS_AVENGER, "Relentless Avenger", FeatureType.SUBCLASS_FEATURE
        ),
        ClassFeature(
            20, FeatureKey.VENGEANCE_AVENGING_ANGEL, "Avenging Angel", FeatureType.SUBCLASS_FEATURE
        ),
    ],
)


PALADIN_DEFINITION = ClassDefinition(
    class_key="paladin",
    name="Paladin",
    description="A holy warrior bound to a sacred oath.",
    hit_die=HitDie.D10,
    primary_ability=Ability.STR,
    saving_throws=(Ability.WIS, Ability.CHA),
    features=PALADIN_FEATURES,
    subclasses=[OATH_OF_DEVOTION, OATH_OF_VENGEANCE],
    skill_options=(
        Skill.ATHLETICS,
        Skill.INSIGHT,
        Skill.INTIMIDATION,
        Skill.MEDICINE,
        Skill.PERSUASION,
        Skill.RELIGION,
    ),
    skill_choice_count=2,
    armor_proficiencies=("light", "medium", "heavy", "shields"),
    weapon_proficiencies=("simple", "martial"),
    spellcasting=PALADIN_SPELLCASTING,
    weapon_mastery_by_level={1: 2, 4: 3},
)


class PaladinStrategy(ClassStrategy):
    """Lay on Hands, Divine Smite and the Aura of Protection."""

    signature_resource = "lay_on_hands"

    def resource_pools(self) -> dict[str, ResourcePool]:
        return {
            "lay_on_hands": self._pool(
                "lay_on_hands", LAY_ON_HANDS_PER_LEVEL * self.level, RechargeRule.LONG_REST
            ),
            "divine_sense": self._pool(
                "divine_sense", 1 + max(0, self.modifier(Ability.CHA)), RechargeRule.LONG_REST
            ),
        }

    def divine_smite_dice(self, slot_level: int, target_type: str = "humanoid") -> Any:
        """
        Radiant dice for a smite.

        1 + slot level d8, at most 5d8; one more die against fiends and
        undead, at most 6d8.
        """
        if slot_level < 1:
            return NOT_APPLICABLE
        count = min(SMITE_MAX_DICE, 1 + slot_level)
        if target_type in SMITE_BONUS_TARGETS:
            count = min(SMITE_MAX_DICE_VS_EXTRAPLANAR, count + 1)
        return f"{count}d8"

    def aura_save_bonus(self) -> Any:
        if self.level < 6:
            return NOT_APPLICABLE
        return max(1, self.modifier(Ability.CHA))

    def aura_range(self) -> int:
        """Aura radius in feet."""
        return 30 if self.level >= 18 else 10
