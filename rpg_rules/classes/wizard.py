"""
Wizard class definition and rules.

Intelligence casters who copy spells into a spellbook (six at level 1, two
more each level) and prepare INT modifier + level of them each day.
"""

from math import ceil
from typing import Any, Optional, TYPE_CHECKING

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

if TYPE_CHECKING:
    from rpg_rules.magic.spell_data import SpellData


EVOCATION_SCHOOL = "evocation"


WIZARD_SPELLCASTING = SpellProgression(
    ability=Ability.INT,
    quantity_model=SpellQuantityModel.SPELLBOOK,
    caster_type=CasterType.FULL,
    spell_list="wizard",
    cantrips_by_level={1: 3, 4: 4, 10: 5},
    spellbook_at_first_level=6,
    spellbook_per_level=2,
)


# =============================================================================
# WIZARD FEATURES
# =============================================================================

WIZARD_FEATURES: list[ClassFeature] = [
    ClassFeature(1, FeatureKey.SPELLCASTING, "Spellcasting"),
    ClassFeature(
        1,
        FeatureKey.ARCANE_RECOVERY,
        "Arcane Recovery",
        description="Once per day, recover spell slots totaling half wizard level (rounded up).",
    ),
    ClassFeature(2, FeatureKey.ARCANE_TRADITION, "Arcane Tradition", FeatureType.SUBCLASS_SELECTION),
    ClassFeature(18, FeatureKey.SPELL_MASTERY, "Spell Mastery"),
    ClassFeature(20, FeatureKey.SIGNATURE_SPELLS, "Signature Spells"),
] + asi_features()


SCHOOL_OF_EVOCATION = SubclassDefinition(
    subclass_key="school_of_evocation",
    name="School of Evocation",
    features=[
        ClassFeature(2, FeatureKey.EVOCATION_SCULPT_SPELLS, "Sculpt Spells", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(6, FeatureKey.EVOCATION_POTENT_CANTRIP, "Potent Cantrip", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(
            10,
            FeatureKey.EMPOWERED_EVOCATION,
            "Empowered Evocation",
            FeatureType.SUBCLASS_FEATURE,
            description="Add INT modifier to one damage roll of a wizard evocation spell.",
        ),
        ClassFeature(14, FeatureKey.EVOCATION_OVERCHANNEL, "Overchannel", FeatureType.SUBCLASS_FEATURE),
    ],
)

SCHOOL_OF_ABJURATION = SubclassDefinition(
    subclass_key="school_of_abjuration",
    name="School of Abjuration",
    features=[
        ClassFeature(
            2,
            FeatureKey.ARCANE_WARD,
            "Arcane Ward",
            FeatureType.SUBCLASS_FEATURE,
            description="A ward with 2 x wizard level + INT modifier hit points.",
        ),
        ClassFeature(
            6, FeatureKey.ABJURATION_PROJECTED_WARD, "Projected Ward", FeatureType.SUBCLASS_FEATURE
        ),
        ClassFeature(
            14, FeatureKey.ABJURATION_SPELL_RESISTANCE, "Spell Resistance", FeatureType.SUBCLASS_FEATURE
        ),
    ],
)


WIZARD_DEFINITION = ClassDefinition(
    class_key="wizard",
    name="Wizard",
    description="A scholarly magic-user capable of manipulating the structures of reality.",
    hit_die=HitDie.D6,
    primary_ability=Ability.INT,
    saving_throws=(Ability.INT, Ability.WIS),
    features=WIZARD_FEATURES,
    subclasses=[SCHOOL_OF_EVOCATION, SCHOOL_OF_ABJURATION],
    skill_options=(
        Skill.ARCANA,
        Skill.HISTORY,
        Skill.INSIGHT,
        Skill.INVESTIGATION,
        Skill.MEDICINE,
        Skill.RELIGION,
    ),
    skill_choice_count=2,
    weapon_proficiencies=("dagger", "dart", "sling", "quarterstaff", "light_crossbow"),
    spellcasting=WIZARD_SPELLCASTING,
)


class WizardStrategy(ClassStrategy):
    """Arcane Recovery, Arcane Ward and Empowered Evocation."""

    signature_resource = "arcane_recovery"

    def resource_pools(self) -> dict[str, ResourcePool]:
        pools = {"arcane_recovery": self._pool("arcane_recovery", 1, RechargeRule.LONG_REST)}
        if self.has_feature(FeatureKey.ARCANE_WARD):
            ward = max(0, 2 * self.level + self.modifier(Ability.INT))
            pools["arcane_ward"] = self._pool("arcane_ward", ward, RechargeRule.LONG_REST)
        return pools

    def arcane_recovery_slot_levels(self) -> int:
        """Combined level of slots recovered by Arcane Recovery."""
        return ceil(self.level / 2)

    def empowered_evocation_bonus(self, spell: "SpellData") -> Any:
        if not self.has_feature(FeatureKey.EMPOWERED_EVOCATION):
            return NOT_APPLICABLE
        if spell.school.value != EVOCATION_SCHOOL:
            return NOT_APPLICABLE
        return self.modifier(Ability.INT)

    def spell_damage_bonuses(
        self, spell: "SpellData", damage_type: Optional[str] = None
    ) -> list[tuple[str, int]]:
        bonus = self.empowered_evocation_bonus(spell)
        if bonus is NOT_APPLICABLE:
            return []
        return [(FeatureKey.EMPOWERED_EVOCATION.value, bonus)]
