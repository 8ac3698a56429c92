"""
Sorcerer class definition and rules.

Charisma casters with a known-spells list. Sorcery points (one per level
from level 2) refill only on a long rest and pay for metamagic. Draconic
sorcerers pick an ancestry damage type when taking the subclass; Elemental
Affinity adds CHA to spells of that type.
"""

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
from rpg_rules.features.feature_data import FeatureType, MechanicType
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.resources.resource_pool import ResourcePool

if TYPE_CHECKING:
    from rpg_rules.magic.spell_data import SpellData


DRACONIC_ANCESTRY_TYPES: tuple[str, ...] = ("acid", "cold", "fire", "lightning", "poison")
DRACONIC_RESILIENCE_BASE_AC = 13


SORCERER_SPELLCASTING = SpellProgression(
    ability=Ability.CHA,
    quantity_model=SpellQuantityModel.KNOWN,
    caster_type=CasterType.FULL,
    spell_list="sorcerer",
    cantrips_by_level={1: 4, 4: 5, 10: 6},
    spells_known=(2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 12, 13, 13, 14, 14, 15, 15, 15, 15),
    swap_on_level_up=True,
)


def _metamagic(level: int, key: FeatureKey, name: str, cost: int, description: str = "") -> ClassFeature:
    return ClassFeature(
        level,
        key,
        name,
        FeatureType.METAMAGIC,
        mechanics={"type": MechanicType.METAMAGIC.value, "cost": cost},
        description=description,
    )


# =============================================================================
# SORCERER FEATURES
# =============================================================================

SORCERER_FEATURES: list[ClassFeature] = [
    ClassFeature(1, FeatureKey.SPELLCASTING, "Spellcasting"),
    ClassFeature(
        2,
        FeatureKey.FONT_OF_MAGIC,
        "Font of Magic",
        description="Sorcery points equal to sorcerer level, regained on a long rest.",
    ),
    ClassFeature(3, FeatureKey.SORCEROUS_ORIGIN, "Sorcerous Origin", FeatureType.SUBCLASS_SELECTION),
    _metamagic(
        3,
        FeatureKey.METAMAGIC_TWINNED_SPELL,
        "Twinned Spell",
        1,
        description="Target a second creature; costs the spell's level (1 for cantrips).",
    ),
    _metamagic(3, FeatureKey.METAMAGIC_QUICKENED_SPELL, "Quickened Spell", 2),
    _metamagic(10, FeatureKey.METAMAGIC_EMPOWERED_SPELL, "Empowered Spell", 1),
    _metamagic(17, FeatureKey.METAMAGIC_HEIGHTENED_SPELL, "Heightened Spell", 3),
    ClassFeature(20, FeatureKey.SORCEROUS_RESTORATION, "Sorcerous Restoration"),
] + asi_features()


DRACONIC_BLOODLINE = SubclassDefinition(
    subclass_key="draconic_bloodline",
    name="Draconic Bloodline",
    features=[
        ClassFeature(
            3,
            FeatureKey.DRACONIC_RESILIENCE,
            "Draconic Resilience",
            FeatureType.SUBCLASS_FEATURE,
            description="+1 HP per sorcerer level; unarmored AC 13 + DEX.",
        ),
        ClassFeature(
            6,
            FeatureKey.ELEMENTAL_AFFINITY,
            "Elemental Affinity",
            FeatureType.SUBCLASS_FEATURE,
            description="Add CHA to one damage roll of a spell matching the ancestry type.",
        ),
        ClassFeature(14, FeatureKey.DRAGON_WINGS, "Dragon Wings", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(18, FeatureKey.DRACONIC_PRESENCE, "Draconic Presence", FeatureType.SUBCLASS_FEATURE),
    ],
    required_choice="draconic_ancestry",
    choice_options=DRACONIC_ANCESTRY_TYPES,
)

WILD_MAGIC = SubclassDefinition(
    subclass_key="wild_magic",
    name="Wild Magic",
    features=[
        ClassFeature(3, FeatureKey.WILD_MAGIC_SURGE, "Wild Magic Surge", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(3, FeatureKey.TIDES_OF_CHAOS, "Tides of Chaos", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(6, FeatureKey.BEND_LUCK, "Bend Luck", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(14, FeatureKey.CONTROLLED_CHAOS, "Controlled Chaos", FeatureType.SUBCLASS_FEATURE),
    ],
)


SORCERER_DEFINITION = ClassDefinition(
    class_key="sorcerer",
    name="Sorcerer",
    description="A spellcaster who draws on inherent magic from a gift or bloodline.",
    hit_die=HitDie.D6,
    primary_ability=Ability.CHA,
    saving_throws=(Ability.CON, Ability.CHA),
    features=SORCERER_FEATURES,
    subclasses=[DRACONIC_BLOODLINE, WILD_MAGIC],
    skill_options=(
        Skill.ARCANA,
        Skill.DECEPTION,
        Skill.INSIGHT,
        Skill.INTIMIDATION,
        Skill.PERSUASION,
        Skill.RELIGION,
    ),
    skill_choice_count=2,
    weapon_proficiencies=("dagger", "dart", "sling", "quarterstaff", "light_crossbow"),
    spellcasting=SORCERER_SPELLCASTING,
)


class SorcererStrategy(ClassStrategy):
    """Sorcery points, metamagic and the draconic bloodline."""

    signature_resource = "sorcery_points"

    def resource_pools(self) -> dict[str, ResourcePool]:
        # Empty until Font of Magic at level 2
        points = self.level if self.level >= 2 else 0
        pools = {"sorcery_points": self._pool("sorcery_points", points, RechargeRule.LONG_REST)}
        if self.has_feature(FeatureKey.TIDES_OF_CHAOS):
            pools["tides_of_chaos"] = self._pool("tides_of_chaos", 1, RechargeRule.LONG_REST)
        return pools

    def known_metamagic(self) -> list[FeatureKey]:
        """Metamagic options the sorcerer has learned, in acquisition order."""
        known = []
        for key in self.snapshot.features:
            definition = self.dataset.get_feature(key)
            if definition is not None and definition.feature_type == FeatureType.METAMAGIC:
                known.append(definition.key)
        return known

    def metamagic_cost(self, metamagic: FeatureKey, spell: Optional["SpellData"] = None) -> Any:
        """
        Sorcery point cost of applying a metamagic option.

        Twinned Spell costs the spell's level (1 for cantrips); every other
        option costs what its feature mechanics state.
        """
        try:
            metamagic = FeatureKey(metamagic)
        except ValueError:
            return NOT_APPLICABLE
        if not self.has_feature(metamagic):
            return NOT_APPLICABLE
        if metamagic == FeatureKey.METAMAGIC_TWINNED_SPELL:
            return max(1, spell.level if spell is not None else 0)
        definition = self.dataset.get_feature(metamagic)
        if definition is None:
            return NOT_APPLICABLE
        return int(definition.mechanics.get("cost", 0))

    def unarmored_defense(self) -> Any:
        if not self.has_feature(FeatureKey.DRACONIC_RESILIENCE):
            return NOT_APPLICABLE
        return DRACONIC_RESILIENCE_BASE_AC + self.modifier(Ability.DEX)

    def flat_hp_bonus_per_level(self) -> Any:
        if not self.has_feature(FeatureKey.DRACONIC_RESILIENCE):
            return NOT_APPLICABLE
        return 1

    def elemental_affinity_bonus(self, spell: "SpellData", damage_type: Optional[str] = None) -> Any:
        """CHA modifier when the damage type matches the draconic ancestry."""
        if not self.has_feature(FeatureKey.ELEMENTAL_AFFINITY):
            return NOT_APPLICABLE
        ancestry = self.snapshot.draconic_ancestry
        if damage_type is None:
            damage_type = spell.primary_damage_type
        if ancestry is None or damage_type != ancestry:
            return NOT_APPLICABLE
        return self.modifier(Ability.CHA)

    def spell_damage_bonuses(
        self, spell: "SpellData", damage_type: Optional[str] = None
    ) -> list[tuple[str, int]]:
        bonus = self.elemental_affinity_bonus(spell, damage_type)
        if bonus is NOT_APPLICABLE:
            return []
        return [(FeatureKey.ELEMENTAL_AFFINITY.value, bonus)]

    def describe(self) -> dict[str, Any]:
        summary = super().describe()
        summary["metamagic"] = [key.value for key in self.known_metamagic()]
        if self.snapshot.draconic_ancestry:
            summary["draconic_ancestry"] = self.snapshot.draconic_ancestry
        return summary
