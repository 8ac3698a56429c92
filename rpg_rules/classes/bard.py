"""
Bard class definition and rules.

Charisma casters with a known-spells list and Bardic Inspiration. Inspiration
uses equal the CHA modifier (minimum 1) and recharge on a long rest, or on
any rest once Font of Inspiration is gained at level 5.
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


INSPIRATION_DIE_BY_LEVEL: dict[int, str] = {1: "d6", 5: "d8", 10: "d10", 15: "d12"}
MAGICAL_SECRETS_LEVELS: tuple[int, ...] = (10, 14, 18)


# =============================================================================
# BARD SPELLCASTING
# =============================================================================

BARD_SPELLCASTING = SpellProgression(
    ability=Ability.CHA,
    quantity_model=SpellQuantityModel.KNOWN,
    caster_type=CasterType.FULL,
    spell_list="bard",
    cantrips_by_level={1: 2, 4: 3, 10: 4},
    spells_known=(4, 5, 6, 7, 8, 9, 10, 11, 12, 14, 15, 15, 16, 18, 19, 19, 20, 22, 22, 22),
    swap_on_level_up=True,
)


# =============================================================================
# BARD FEATURES
# =============================================================================

BARD_FEATURES: list[ClassFeature] = [
    ClassFeature(1, FeatureKey.SPELLCASTING, "Spellcasting"),
    ClassFeature(
        1,
        FeatureKey.BARDIC_INSPIRATION,
        "Bardic Inspiration",
        description="Grant an ally an inspiration die; uses equal CHA modifier (minimum 1).",
    ),
    ClassFeature(2, FeatureKey.JACK_OF_ALL_TRADES, "Jack of All Trades"),
    ClassFeature(2, FeatureKey.SONG_OF_REST, "Song of Rest"),
    ClassFeature(3, FeatureKey.BARD_COLLEGE, "Bard College", FeatureType.SUBCLASS_SELECTION),
    ClassFeature(3, FeatureKey.EXPERTISE, "Expertise"),
    ClassFeature(
        5,
        FeatureKey.FONT_OF_INSPIRATION,
        "Font of Inspiration",
        description="Bardic Inspiration also recharges on a short rest.",
    ),
    ClassFeature(6, FeatureKey.COUNTERCHARM, "Countercharm"),
    ClassFeature(10, FeatureKey.MAGICAL_SECRETS, "Magical Secrets"),
    ClassFeature(20, FeatureKey.SUPERIOR_INSPIRATION, "Superior Inspiration"),
] + asi_features()


COLLEGE_OF_LORE = SubclassDefinition(
    subclass_key="college_of_lore",
    name="College of Lore",
    features=[
        ClassFeature(3, FeatureKey.LORE_CUTTING_WORDS, "Cutting Words", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(
            6,
            FeatureKey.LORE_ADDITIONAL_MAGICAL_SECRETS,
            "Additional Magical Secrets",
            FeatureType.SUBCLASS_FEATURE,
        ),
        ClassFeature(14, FeatureKey.LORE_PEERLESS_SKILL, "Peerless Skill", FeatureType.SUBCLASS_FEATURE),
    ],
)

COLLEGE_OF_VALOR = SubclassDefinition(
    subclass_key="college_of_valor",
    name="College of Valor",
    features=[
        ClassFeature(
            3, FeatureKey.VALOR_COMBAT_INSPIRATION, "Combat Inspiration", FeatureType.SUBCLASS_FEATURE
        ),
        ClassFeature(6, FeatureKey.VALOR_EXTRA_ATTACK, "Extra Attack", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(14, FeatureKey.VALOR_BATTLE_MAGIC, "Battle Magic", FeatureType.SUBCLASS_FEATURE),
    ],
)


BARD_DEFINITION = ClassDefinition(
    class_key="bard",
    name="Bard",
    description="An inspiring magician whose power echoes the music of creation.",
    hit_die=HitDie.D8,
    primary_ability=Ability.CHA,
    saving_throws=(Ability.DEX, Ability.CHA),
    features=BARD_FEATURES,
    subclasses=[COLLEGE_OF_LORE, COLLEGE_OF_VALOR],
    skill_options=tuple(Skill),
    skill_choice_count=3,
    armor_proficiencies=("light",),
    weapon_proficiencies=("simple", "hand_crossbow", "longsword", "rapier", "shortsword"),
    spellcasting=BARD_SPELLCASTING,
)


class BardStrategy(ClassStrategy):
    """Bardic Inspiration and Magical Secrets."""

    signature_resource = "bardic_inspiration"

    def inspiration_die(self) -> str:
        return level_table_value(INSPIRATION_DIE_BY_LEVEL, self.level, "d6")

    def resource_pools(self) -> dict[str, ResourcePool]:
        uses = max(1, self.modifier(Ability.CHA))
        rule = RechargeRule.BOTH if self.has_feature(FeatureKey.FONT_OF_INSPIRATION) else RechargeRule.LONG_REST
        return {
            "bardic_inspiration": self._pool("bardic_inspiration", uses, rule, die=self.inspiration_die()),
        }

    def magical_secrets_picks(self, level: int = 0) -> int:
        """Spells from any class list learned on reaching a level."""
        level = level or self.level
        picks = 2 if level in MAGICAL_SECRETS_LEVELS else 0
        if level == 6 and self.has_feature(FeatureKey.LORE_ADDITIONAL_MAGICAL_SECRETS):
            picks += 2
        return picks

    def describe(self) -> dict[str, Any]:
        summary = super().describe()
        summary["inspiration_die"] = self.inspiration_die()
        return summary
