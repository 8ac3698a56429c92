"""
Warlock class definition and rules.

Pact magic: a handful of slots, all of the same level, that come back on a
short rest. Eldritch invocations are chosen on level-up from the options
below, up to the count the level allows; one known invocation may be
exchanged each level. Mystic Arcanum adds one spell of 6th-9th level, cast
once per long rest without a slot.
"""

from typing import Any, Optional, TYPE_CHECKING

from rpg_rules.classes.class_data import (
    CasterType,
    ClassDefinition,
    ClassFeature,
    HitDie,
    PACT_SLOT_COUNT,
    PACT_SLOT_LEVEL,
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


ELDRITCH_BLAST = "eldritch_blast"
ELDRITCH_BLAST_BEAMS: dict[int, int] = {1: 1, 5: 2, 11: 3, 17: 4}
ARMOR_OF_SHADOWS_AC = 13

INVOCATIONS_KNOWN: dict[int, int] = {2: 2, 5: 3, 7: 4, 9: 5, 12: 6, 15: 7, 18: 8}
MYSTIC_ARCANUM_LEVELS: dict[int, int] = {11: 6, 13: 7, 15: 8, 17: 9}


WARLOCK_SPELLCASTING = SpellProgression(
    ability=Ability.CHA,
    quantity_model=SpellQuantityModel.KNOWN,
    caster_type=CasterType.PACT,
    spell_list="warlock",
    cantrips_by_level={1: 2, 4: 3, 10: 4},
    spells_known=(2, 3, 4, 5, 6, 7, 8, 9, 10, 10, 11, 11, 12, 12, 13, 13, 14, 14, 15, 15),
    swap_on_level_up=True,
)


def _invocation(
    level: int,
    key: FeatureKey,
    name: str,
    description: str,
    requires_spell: Optional[str] = None,
) -> ClassFeature:
    mechanics: dict[str, Any] = {"type": MechanicType.INVOCATION.value}
    if requires_spell:
        mechanics["requires_spell"] = requires_spell
    return ClassFeature(level, key, name, FeatureType.INVOCATION, mechanics=mechanics, description=description)


# =============================================================================
# WARLOCK FEATURES
# =============================================================================

WARLOCK_FEATURES: list[ClassFeature] = [
    ClassFeature(1, FeatureKey.PACT_MAGIC, "Pact Magic"),
    ClassFeature(3, FeatureKey.OTHERWORLDLY_PATRON, "Otherworldly Patron", FeatureType.SUBCLASS_SELECTION),
    ClassFeature(3, FeatureKey.PACT_BOON, "Pact Boon"),
    ClassFeature(11, FeatureKey.MYSTIC_ARCANUM, "Mystic Arcanum"),
    ClassFeature(20, FeatureKey.ELDRITCH_MASTER, "Eldritch Master"),
] + asi_features()


ELDRITCH_INVOCATIONS: list[ClassFeature] = [
    _invocation(
        2,
        FeatureKey.INVOCATION_AGONIZING_BLAST,
        "Agonizing Blast",
        "Add CHA modifier to the damage of each Eldritch Blast beam.",
        requires_spell=ELDRITCH_BLAST,
    ),
    _invocation(
        2,
        FeatureKey.INVOCATION_ARMOR_OF_SHADOWS,
        "Armor of Shadows",
        "Cast mage armor on yourself at will.",
    ),
    _invocation(
        2,
        FeatureKey.INVOCATION_REPELLING_BLAST,
        "Repelling Blast",
        "Eldritch Blast beams push the target 10 feet away.",
        requires_spell=ELDRITCH_BLAST,
    ),
    _invocation(
        2,
        FeatureKey.INVOCATION_ELDRITCH_SPEAR,
        "Eldritch Spear",
        "Eldritch Blast has a range of 300 feet.",
        requires_spell=ELDRITCH_BLAST,
    ),
    _invocation(
        2,
        FeatureKey.INVOCATION_DEVILS_SIGHT,
        "Devil's Sight",
        "See normally in magical and nonmagical darkness to 120 feet.",
    ),
    _invocation(
        2,
        FeatureKey.INVOCATION_MASK_OF_MANY_FACES,
        "Mask of Many Faces",
        "Cast disguise self at will.",
    ),
    _invocation(
        2,
        FeatureKey.INVOCATION_MISTY_VISIONS,
        "Misty Visions",
        "Cast silent image at will.",
    ),
    _invocation(
        2,
        FeatureKey.INVOCATION_BEAST_SPEECH,
        "Beast Speech",
        "Cast speak with animals at will.",
    ),
    _invocation(
        5,
        FeatureKey.INVOCATION_ONE_WITH_SHADOWS,
        "One with Shadows",
        "Become invisible while standing still in dim light or darkness.",
    ),
    _invocation(
        9,
        FeatureKey.INVOCATION_ASCENDANT_STEP,
        "Ascendant Step",
        "Cast levitate on yourself at will.",
    ),
    _invocation(
        15,
        FeatureKey.INVOCATION_WITCH_SIGHT,
        "Witch Sight",
        "See the true form of shapechangers and illusions within 30 feet.",
    ),
]

THE_FIEND = SubclassDefinition(
    subclass_key="the_fiend",
    name="The Fiend",
    features=[
        ClassFeature(
            3,
            FeatureKey.FIEND_DARK_ONES_BLESSING,
            "Dark One's Blessing",
            FeatureType.SUBCLASS_FEATURE,
            description="Gain CHA modifier + warlock level temporary HP on reducing a hostile creature to 0 HP.",
        ),
        ClassFeature(
            6, FeatureKey.FIEND_DARK_ONES_OWN_LUCK, "Dark One's Own Luck", FeatureType.SUBCLASS_FEATURE
        ),
        ClassFeature(
            14, FeatureKey.FIEND_HURL_THROUGH_HELL, "Hurl Through Hell", FeatureType.SUBCLASS_FEATURE
        ),
    ],
)

THE_ARCHFEY = SubclassDefinition(
    subclass_key="the_archfey",
    name="The Archfey",
    features=[
        ClassFeature(3, FeatureKey.ARCHFEY_FEY_PRESENCE, "Fey Presence", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(6, FeatureKey.ARCHFEY_MISTY_ESCAPE, "Misty Escape", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(14, FeatureKey.ARCHFEY_DARK_DELIRIUM, "Dark Delirium", FeatureType.SUBCLASS_FEATURE),
    ],
)


WARLOCK_DEFINITION = ClassDefinition(
    class_key="warlock",
    name="Warlock",
    description="A wielder of magic derived from a bargain with an extraplanar entity.",
    hit_die=HitDie.D8,
    primary_ability=Ability.CHA,
    saving_throws=(Ability.WIS, Ability.CHA),
    features=WARLOCK_FEATURES,
    subclasses=[THE_FIEND, THE_ARCHFEY],
    skill_options=(
        Skill.ARCANA,
        Skill.DECEPTION,
        Skill.HISTORY,
        Skill.INTIMIDATION,
        Skill.INVESTIGATION,
        Skill.NATURE,
        Skill.RELIGION,
    ),
    skill_choice_count=2,
    armor_proficiencies=("light",),
    weapon_proficiencies=("simple",),
    spellcasting=WARLOCK_SPELLCASTING,
    invocations=ELDRITCH_INVOCATIONS,
    invocations_known_by_level=INVOCATIONS_KNOWN,
    mystic_arcanum_levels=MYSTIC_ARCANUM_LEVELS,
)


class WarlockStrategy(ClassStrategy):
    """Pact slots, invocations and patron features."""

    signature_resource = "pact_slots"

    def pact_slot_count(self) -> int:
        return level_table_value(PACT_SLOT_COUNT, self.level, 1)

    def pact_slot_level(self) -> int:
        return level_table_value(PACT_SLOT_LEVEL, self.level, 1)

    def resource_pools(self) -> dict[str, ResourcePool]:
        pools = {
            "pact_slots": self._pool(
                "pact_slots",
                self.pact_slot_count(),
                RechargeRule.SHORT_REST,
                slot_level=self.pact_slot_level(),
            ),
        }
        if self.has_feature(FeatureKey.FIEND_DARK_ONES_OWN_LUCK):
            pools["dark_ones_own_luck"] = self._pool("dark_ones_own_luck", 1, RechargeRule.BOTH)
        for spell_level in self.mystic_arcanum_spell_levels():
            key = f"mystic_arcanum_{spell_level}"
            pools[key] = self._pool(key, 1, RechargeRule.LONG_REST, slot_level=spell_level)
        return pools

    def on_long_rest(self) -> dict[str, ResourcePool]:
        """A long rest includes the short rest that refills pact slots."""
        return {key: pool.restore() for key, pool in self.resource_pools().items()}

    def mystic_arcanum_spell_levels(self) -> list[int]:
        """Spell levels of the arcana this level has unlocked."""
        return [spell for lvl, spell in sorted(MYSTIC_ARCANUM_LEVELS.items()) if lvl <= self.level]

    def known_invocations(self) -> list[FeatureKey]:
        known = []
        for key in self.snapshot.features:
            definition = self.dataset.get_feature(key)
            if definition is not None and definition.feature_type == FeatureType.INVOCATION:
                known.append(definition.key)
        return known

    def unarmored_defense(self) -> Any:
        """Armor of Shadows: mage armor at will (13 + DEX)."""
        if not self.has_feature(FeatureKey.INVOCATION_ARMOR_OF_SHADOWS):
            return NOT_APPLICABLE
        return ARMOR_OF_SHADOWS_AC + self.modifier(Ability.DEX)

    def eldritch_blast_beams(self) -> int:
        return level_table_value(ELDRITCH_BLAST_BEAMS, self.level, 1)

    def spell_damage_bonuses(
        self, spell: "SpellData", damage_type: Optional[str] = None
    ) -> list[tuple[str, int]]:
        if spell.key != ELDRITCH_BLAST or not self.has_feature(FeatureKey.INVOCATION_AGONIZING_BLAST):
            return []
        per_beam = self.modifier(Ability.CHA)
        return [(FeatureKey.INVOCATION_AGONIZING_BLAST.value, per_beam * self.eldritch_blast_beams())]

    def dark_ones_blessing_temp_hp(self) -> Any:
        if not self.has_feature(FeatureKey.FIEND_DARK_ONES_BLESSING):
            return NOT_APPLICABLE
        return max(1, self.modifier(Ability.CHA) + self.level)

    def describe(self) -> dict[str, Any]:
        summary = super().describe()
        summary["pact_slot_level"] = self.pact_slot_level()
        summary["invocations"] = [key.value for key in self.known_invocations()]
        summary["mystic_arcanum"] = list(self.snapshot.mystic_arcanum)
        return summary
