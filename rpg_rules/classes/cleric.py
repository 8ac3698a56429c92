"""
Cleric class definition and rules.

Wisdom casters that prepare from the whole cleric list. Domains add their
own mechanics: Life boosts healing, Light adds WIS to cantrip damage and
both Life and War gain Divine Strike at level 8.
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
    level_table_value,
)
from rpg_rules.classes.class_strategy import ClassStrategy
from rpg_rules.data_models import NOT_APPLICABLE, Ability, RechargeRule, Skill, SpellQuantityModel
from rpg_rules.features.feature_data import FeatureType, MechanicType
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.resources.resource_pool import ResourcePool

if TYPE_CHECKING:
    from rpg_rules.magic.spell_data import SpellData


CHANNEL_DIVINITY_BY_LEVEL: dict[int, int] = {2: 1, 6: 2, 18: 3}
DIVINE_STRIKE_FEATURES: tuple[FeatureKey, ...] = (FeatureKey.DIVINE_STRIKE_LIFE, FeatureKey.DIVINE_STRIKE_WAR)


# =============================================================================
# CLERIC SPELLCASTING
# =============================================================================

CLERIC_SPELLCASTING = SpellProgression(
    ability=Ability.WIS,
    quantity_model=SpellQuantityModel.PREPARED,
    caster_type=CasterType.FULL,
    spell_list="cleric",
    cantrips_by_level={1: 3, 4: 4, 10: 5},
)


# =============================================================================
# CLERIC FEATURES
# =============================================================================

CLERIC_FEATURES: list[ClassFeature] = [
    ClassFeature(1, FeatureKey.SPELLCASTING, "Spellcasting"),
    ClassFeature(2, FeatureKey.CHANNEL_DIVINITY, "Channel Divinity"),
    ClassFeature(3, FeatureKey.DIVINE_DOMAIN, "Divine Domain", FeatureType.SUBCLASS_SELECTION),
    ClassFeature(5, FeatureKey.DESTROY_UNDEAD, "Destroy Undead"),
    ClassFeature(10, FeatureKey.DIVINE_INTERVENTION, "Divine Intervention"),
] + asi_features()


def _divine_strike(level: int, key: FeatureKey, damage_type: str) -> ClassFeature:
    return ClassFeature(
        level,
        key,
        "Divine Strike",
        FeatureType.SUBCLASS_FEATURE,
        mechanics={
            "type": MechanicType.DIVINE_STRIKE.value,
            "dice": "1d8",
            "damage_type": damage_type,
            "scaling": {"14": "2d8"},
        },
        description="Once per turn, a weapon hit deals extra damage.",
    )


LIFE_DOMAIN = SubclassDefinition(
    subclass_key="life_domain",
    name="Life Domain",
    features=[
        ClassFeature(
            3,
            FeatureKey.DISCIPLE_OF_LIFE,
            "Disciple of Life",
            FeatureType.SUBCLASS_FEATURE,
            description="Healing spells of 1st level or higher restore 2 + spell level extra HP.",
        ),
        ClassFeature(6, FeatureKey.BLESSED_HEALER, "Blessed Healer", FeatureType.SUBCLASS_FEATURE),
        _divine_strike(8, FeatureKey.DIVINE_STRIKE_LIFE, "radiant"),
        ClassFeature(17, FeatureKey.SUPREME_HEALING, "Supreme Healing", FeatureType.SUBCLASS_FEATURE),
    ],
)

LIGHT_DOMAIN = SubclassDefinition(
    subclass_key="light_domain",
    name="Light Domain",
    features=[
        ClassFeature(3, FeatureKey.WARDING_FLARE, "Warding Flare", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(6, FeatureKey.RADIANCE_OF_THE_DAWN, "Radiance of the Dawn", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(
            8,
            FeatureKey.POTENT_SPELLCASTING,
            "Potent Spellcasting",
            FeatureType.SUBCLASS_FEATURE,
            description="Add WIS modifier to the damage of cleric cantrips.",
        ),
        ClassFeature(17, FeatureKey.CORONA_OF_LIGHT, "Corona of Light", FeatureType.SUBCLASS_FEATURE),
    ],
)

WAR_DOMAIN = SubclassDefinition(
    subclass_key="war_domain",
    name="War Domain",
    features=[
        ClassFeature(3, FeatureKey.WAR_PRIEST, "War Priest", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(6, FeatureKey.GUIDED_STRIKE, "Guided Strike", FeatureType.SUBCLASS_FEATURE),
        _divine_strike(8, FeatureKey.DIVINE_STRIKE_WAR, "weapon"),
        ClassFeature(17, FeatureKey.AVATAR_OF_BATTLE, "Avatar of Battle", FeatureType.SUBCLASS_FEATURE),
    ],
)


CLERIC_DEFINITION = ClassDefinition(
    class_key="cleric",
    name="Cleric",
    description="A priestly champion who wields divine magic in service of a higher power.",
    hit_die=HitDie.D8,
    primary_ability=Ability.WIS,
    saving_throws=(Ability.WIS, Ability.CHA),
    features=CLERIC_FEATURES,
    subclasses=[LIFE_DOMAIN, LIGHT_DOMAIN, WAR_DOMAIN],
    skill_options=(Skill.HISTORY, Skill.INSIGHT, Skill.MEDICINE, Skill.PERSUASION, Skill.RELIGION),
    skill_choice_count=2,
    armor_proficiencies=("light", "medium", "shields"),
    weapon_proficiencies=("simple",),
    spellcasting=CLERIC_SPELLCASTING,
)


class ClericStrategy(ClassStrategy):
    """Channel Divinity and the domain damage and healing hooks."""

    signature_resource = "channel_divinity"

    def resource_pools(self) -> dict[str, ResourcePool]:
        uses = level_table_value(CHANNEL_DIVINITY_BY_LEVEL, self.level, 0)
        if uses == 0:
            return {}
        return {"channel_divinity": self._pool("channel_divinity", uses, RechargeRule.BOTH)}

    def divine_strike_damage(self) -> Any:
        """
        Divine Strike dice and damage type.

        Returns:
            {"dice": "1d8" or "2d8", "damage_type": ...}, or NOT_APPLICABLE
            when no domain grants Divine Strike
        """
        for key in DIVINE_STRIKE_FEATURES:
            if not self.has_feature(key):
                continue
            definition = self.dataset.get_feature(key)
            mechanics = definition.mechanics if definition else {}
            dice = mechanics.get("dice", "1d8")
            if self.level >= 14:
                dice = mechanics.get("scaling", {}).get("14", "2d8")
            return {"dice": dice, "damage_type": mechanics.get("damage_type", "radiant")}
        return NOT_APPLICABLE

    def healing_bonus(self, spell: "SpellData") -> int:
        """Disciple of Life: 2 + spell level on leveled healing spells."""
        if self.has_feature(FeatureKey.DISCIPLE_OF_LIFE) and spell.level > 0 and spell.is_healing:
            return 2 + spell.level
        return 0

    def spell_damage_bonuses(
        self, spell: "SpellData", damage_type: Optional[str] = None
    ) -> list[tuple[str, int]]:
        if (
            self.has_feature(FeatureKey.POTENT_SPELLCASTING)
            and spell.is_cantrip
            and "cleric" in spell.classes
        ):
            return [(FeatureKey.POTENT_SPELLCASTING.value, self.modifier(Ability.WIS))]
        return []
