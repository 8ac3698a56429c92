"""
Feat definitions.

Feats are taken in place of an ability score improvement or granted by a
background. Their mechanics payloads are read by the StatCalculator (HP,
initiative, skills, unarmed damage) and by the level-up validators
(sub-choices).
"""

from rpg_rules.features.feature_data import FeatureDefinition, FeatureType, MechanicType
from rpg_rules.features.feature_keys import FeatureKey


FEAT_DEFINITIONS: list[FeatureDefinition] = [
    FeatureDefinition(
        key=FeatureKey.ALERT,
        name="Alert",
        feature_type=FeatureType.FEAT,
        mechanics={"type": MechanicType.INITIATIVE_BONUS.value, "value": "proficiency_bonus"},
        description="Add your proficiency bonus to initiative rolls.",
    ),
    FeatureDefinition(
        key=FeatureKey.TOUGH,
        name="Tough",
        feature_type=FeatureType.FEAT,
        mechanics={"type": MechanicType.HP_BONUS_PER_LEVEL.value, "value": 2},
        description="Your hit point maximum increases by 2 for every level you have.",
    ),
    FeatureDefinition(
        key=FeatureKey.MAGIC_INITIATE,
        name="Magic Initiate",
        feature_type=FeatureType.FEAT,
        mechanics={
            "type": MechanicType.MAGIC_INITIATE.value,
            "spell_lists": ["cleric", "druid", "wizard"],
            "cantrips": 2,
            "spells": 1,
        },
        description="Learn two cantrips and one 1st-level spell from the cleric, druid or wizard list.",
    ),
    FeatureDefinition(
        key=FeatureKey.SKILLED,
        name="Skilled",
        feature_type=FeatureType.FEAT,
        mechanics={"type": MechanicType.SKILL_CHOICE.value, "count": 3},
        description="Gain proficiency in any combination of three skills.",
    ),
    FeatureDefinition(
        key=FeatureKey.SAVAGE_ATTACKER,
        name="Savage Attacker",
        feature_type=FeatureType.FEAT,
        description="Once per turn, roll weapon damage dice twice and use either roll.",
    ),
    FeatureDefinition(
        key=FeatureKey.TAVERN_BRAWLER,
        name="Tavern Brawler",
        feature_type=FeatureType.FEAT,
        mechanics={"type": MechanicType.UNARMED_UPGRADE.value, "damage_dice": "1d4"},
        description="Your unarmed strikes deal 1d4 + Strength modifier damage.",
    ),
    FeatureDefinition(
        key=FeatureKey.LUCKY,
        name="Lucky",
        feature_type=FeatureType.FEAT,
        description="Spend luck points to gain advantage or impose disadvantage.",
    ),
    FeatureDefinition(
        key=FeatureKey.WAR_CASTER,
        name="War Caster",
        feature_type=FeatureType.FEAT,
        description="Advantage on concentration saves; cast a spell as an opportunity attack.",
        min_level=4,
    ),
    FeatureDefinition(
        key=FeatureKey.GREAT_WEAPON_MASTER,
        name="Great Weapon Master",
        feature_type=FeatureType.FEAT,
        description="Heavy weapon hits deal extra damage equal to your proficiency bonus.",
        min_level=4,
    ),
]
