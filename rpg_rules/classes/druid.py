"""
Druid class definition and rules.

Wisdom casters that prepare from the druid list and take beast forms with
Wild Shape. The circle is chosen at level 2.
"""

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
from rpg_rules.data_models import Ability, RechargeRule, Skill, SpellQuantityModel
from rpg_rules.features.feature_data import FeatureType
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.resources.resource_pool import UNLIMITED_USES, ResourcePool


WILD_SHAPE_USES = 2


DRUID_SPELLCASTING = SpellProgression(
    ability=Ability.WIS,
    quantity_model=SpellQuantityModel.PREPARED,
    caster_type=CasterType.FULL,
    spell_list="druid",
    cantrips_by_level={1: 2, 4: 3, 10: 4},
)


# =============================================================================
# DRUID FEATURES
# =============================================================================

DRUID_FEATURES: list[ClassFeature] = [
    ClassFeature(1, FeatureKey.DRUIDIC, "Druidic"),
    ClassFeature(1, FeatureKey.SPELLCASTING, "Spellcasting"),
    ClassFeature(
        2,
        FeatureKey.WILD_SHAPE,
        "Wild Shape",
        description="Assume the form of a beast twice per rest.",
    ),
    ClassFeature(2, FeatureKey.DRUID_CIRCLE, "Druid Circle", FeatureType.SUBCLASS_SELECTION),
    ClassFeature(18, FeatureKey.TIMELESS_BODY, "Timeless Body"),
    ClassFeature(20, FeatureKey.ARCHDRUID, "Archdruid"),
] + asi_features()


CIRCLE_OF_THE_LAND = SubclassDefinition(
    subclass_key="circle_of_the_land",
    name="Circle of the Land",
    features=[
        ClassFeature(2, FeatureKey.LAND_NATURAL_RECOVERY, "Natural Recovery", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(6, FeatureKey.LANDS_STRIDE, "Land's Stride", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(10, FeatureKey.LAND_NATURES_WARD, "Nature's Ward", FeatureType.SUBCLASS_FEATURE),
    ],
)

CIRCLE_OF_THE_MOON = SubclassDefinition(
    subclass_key="circle_of_the_moon",
    name="Circle of the Moon",
    features=[
        ClassFeature(
            2,
            FeatureKey.MOON_COMBAT_WILD_SHAPE,
            "Combat Wild Shape",
            FeatureType.SUBCLASS_FEATURE,
            description="Wild Shape as a bonus action; spend slots to heal while transformed.",
        ),
        ClassFeature(2, FeatureKey.MOON_CIRCLE_FORMS, "Circle Forms", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(6, FeatureKey.MOON_PRIMAL_STRIKE, "Primal Strike", FeatureType.SUBCLASS_FEATURE),
        ClassFeature(
            10, FeatureKey.MOON_ELEMENTAL_WILD_SHAPE, "Elemental Wild Shape", FeatureType.SUBCLASS_FEATURE
        ),
    ],
)


DRUID_DEFINITION = ClassDefinition(
    class_key="druid",
    name="Druid",
    description="A priest of the Old Faith, wielding the powers of nature.",
    hit_die=HitDie.D8,
    primary_ability=Ability.WIS,
    saving_throws=(Ability.INT, Ability.WIS),
    features=DRUID_FEATURES,
    subclasses=[CIRCLE_OF_THE_LAND, CIRCLE_OF_THE_MOON],
    skill_options=(
        Skill.ARCANA,
        Skill.ANIMAL_HANDLING,
        Skill.INSIGHT,
        Skill.MEDICINE,
        Skill.NATURE,
        Skill.PERCEPTION,
        Skill.RELIGION,
        Skill.SURVIVAL,
    ),
    skill_choice_count=2,
    armor_proficiencies=("light", "medium", "shields"),
    weapon_proficiencies=(
        "club", "dagger", "dart", "javelin", "mace", "quarterstaff", "scimitar", "sickle", "sling", "spear",
    ),
    spellcasting=DRUID_SPELLCASTING,
)


class DruidStrategy(ClassStrategy):
    """Wild Shape uses and beast form limits."""

    signature_resource = "wild_shape"

    def resource_pools(self) -> dict[str, ResourcePool]:
        if self.level < 2:
            return {}
        uses = UNLIMITED_USES if self.has_feature(FeatureKey.ARCHDRUID) else WILD_SHAPE_USES
        return {"wild_shape": self._pool("wild_shape", uses, RechargeRule.BOTH)}

    def wild_shape_cr_limit(self) -> float:
        """Highest challenge rating of a beast form."""
        if self.has_feature(FeatureKey.MOON_CIRCLE_FORMS):
            return max(1, self.level // 3)
        if self.level >= 8:
            return 1
        if self.level >= 4:
            return 0.5
        return 0.25

    def wild_shape_is_bonus_action(self) -> bool:
        return self.has_feature(FeatureKey.MOON_COMBAT_WILD_SHAPE)
