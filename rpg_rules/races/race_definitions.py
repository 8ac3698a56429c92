"""
Built-in races and backgrounds.

Races carry fixed ability bonuses (by ability value) and, for races that let
the player place bonuses, a list of floating amounts. Traits with mechanics
are read by the StatCalculator: Dwarven Toughness adds HP per level, Keen
Senses grants Perception proficiency.
"""

from rpg_rules.data_models import Skill
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.races.race_data import (
    TRAIT_HP_BONUS_PER_LEVEL,
    TRAIT_SKILL_PROFICIENCY,
    BackgroundDefinition,
    RaceDefinition,
    RaceTrait,
    SubraceDefinition,
)


DARKVISION = RaceTrait("darkvision", "Darkvision", "See in dim light within 60 feet as if it were bright light.")


# =============================================================================
# RACES
# =============================================================================

HUMAN = RaceDefinition(
    race_key="human",
    name="Human",
    ability_bonuses={"str": 1, "dex": 1, "con": 1, "int": 1, "wis": 1, "cha": 1},
    languages=("common", "one_extra"),
)

DWARF = RaceDefinition(
    race_key="dwarf",
    name="Dwarf",
    ability_bonuses={"con": 2},
    speed=25,
    traits=[
        DARKVISION,
        RaceTrait("dwarven_resilience", "Dwarven Resilience", "Advantage on saves against poison."),
    ],
    subraces=[
        SubraceDefinition(
            subrace_key="hill_dwarf",
            name="Hill Dwarf",
            ability_bonuses={"wis": 1},
            traits=[
                RaceTrait(
                    "dwarven_toughness",
                    "Dwarven Toughness",
                    "Hit point maximum increases by 1 per level.",
                    mechanics={"type": TRAIT_HP_BONUS_PER_LEVEL, "value": 1},
                ),
            ],
        ),
        SubraceDefinition(
            subrace_key="mountain_dwarf",
            name="Mountain Dwarf",
            ability_bonuses={"str": 2},
        ),
    ],
    languages=("common", "dwarvish"),
)

ELF = RaceDefinition(
    race_key="elf",
    name="Elf",
    ability_bonuses={"dex": 2},
    traits=[
        DARKVISION,
        RaceTrait(
            "keen_senses",
            "Keen Senses",
            "Proficiency in Perception.",
            mechanics={"type": TRAIT_SKILL_PROFICIENCY, "skills": [Skill.PERCEPTION.value]},
        ),
        RaceTrait("fey_ancestry", "Fey Ancestry", "Advantage against being charmed; magic cannot put you to sleep."),
    ],
    subraces=[
        SubraceDefinition(subrace_key="high_elf", name="High Elf", ability_bonuses={"int": 1}),
        SubraceDefinition(subrace_key="wood_elf", name="Wood Elf", ability_bonuses={"wis": 1}),
    ],
    languages=("common", "elvish"),
)

HALFLING = RaceDefinition(
    race_key="halfling",
    name="Halfling",
    ability_bonuses={"dex": 2},
    speed=25,
    size="small",
    traits=[RaceTrait("lucky", "Lucky", "Reroll natural 1s on attacks, checks and saves.")],
    subraces=[
        SubraceDefinition(subrace_key="lightfoot", name="Lightfoot", ability_bonuses={"cha": 1}),
        SubraceDefinition(subrace_key="stout", name="Stout", ability_bonuses={"con": 1}),
    ],
    languages=("common", "halfling"),
)

DRAGONBORN = RaceDefinition(
    race_key="dragonborn",
    name="Dragonborn",
    ability_bonuses={"str": 2, "cha": 1},
    traits=[RaceTrait("breath_weapon", "Breath Weapon", "Exhale destructive energy of your ancestry's type.")],
    languages=("common", "draconic"),
)

TIEFLING = RaceDefinition(
    race_key="tiefling",
    name="Tiefling",
    ability_bonuses={"int": 1, "cha": 2},
    traits=[
        DARKVISION,
        RaceTrait("hellish_resistance", "Hellish Resistance", "Resistance to fire damage."),
    ],
    languages=("common", "infernal"),
)

HALF_ELF = RaceDefinition(
    race_key="half_elf",
    name="Half-Elf",
    ability_bonuses={"cha": 2},
    floating_bonuses=(1, 1),
    traits=[DARKVISION, RaceTrait("fey_ancestry", "Fey Ancestry", "Advantage against being charmed.")],
    languages=("common", "elvish"),
)

HALF_ORC = RaceDefinition(
    race_key="half_orc",
    name="Half-Orc",
    ability_bonuses={"str": 2, "con": 1},
    traits=[
        DARKVISION,
        RaceTrait(
            "menacing",
            "Menacing",
            "Proficiency in Intimidation.",
            mechanics={"type": TRAIT_SKILL_PROFICIENCY, "skills": [Skill.INTIMIDATION.value]},
        ),
        RaceTrait("relentless_endurance", "Relentless Endurance", "Drop to 1 HP instead of 0 once per long rest."),
    ],
    languages=("common", "orc"),
)

GNOME = RaceDefinition(
    race_key="gnome",
    name="Gnome",
    ability_bonuses={"int": 2},
    speed=25,
    size="small",
    traits=[DARKVISION],
    subraces=[
        SubraceDefinition(subrace_key="rock_gnome", name="Rock Gnome", ability_bonuses={"con": 1}),
        SubraceDefinition(subrace_key="forest_gnome", name="Forest Gnome", ability_bonuses={"dex": 1}),
    ],
    languages=("common", "gnomish"),
)

RACE_DEFINITIONS: list[RaceDefinition] = [
    HUMAN,
    DWARF,
    ELF,
    HALFLING,
    DRAGONBORN,
    TIEFLING,
    HALF_ELF,
    HALF_ORC,
    GNOME,
]


# =============================================================================
# BACKGROUNDS
# =============================================================================

BACKGROUND_DEFINITIONS: list[BackgroundDefinition] = [
    BackgroundDefinition(
        background_key="acolyte",
        name="Acolyte",
        skill_proficiencies=(Skill.INSIGHT, Skill.RELIGION),
        languages=2,
        feat=FeatureKey.MAGIC_INITIATE,
    ),
    BackgroundDefinition(
        background_key="criminal",
        name="Criminal",
        skill_proficiencies=(Skill.DECEPTION, Skill.STEALTH),
        tool_proficiencies=("thieves_tools", "gaming_set"),
        feat=FeatureKey.ALERT,
    ),
    BackgroundDefinition(
        background_key="sage",
        name="Sage",
        skill_proficiencies=(Skill.ARCANA, Skill.HISTORY),
        languages=2,
        feat=FeatureKey.MAGIC_INITIATE,
    ),
    BackgroundDefinition(
        background_key="soldier",
        name="Soldier",
        skill_proficiencies=(Skill.ATHLETICS, Skill.INTIMIDATION),
        tool_proficiencies=("gaming_set", "land_vehicles"),
        feat=FeatureKey.SAVAGE_ATTACKER,
    ),
    BackgroundDefinition(
        background_key="folk_hero",
        name="Folk Hero",
        skill_proficiencies=(Skill.ANIMAL_HANDLING, Skill.SURVIVAL),
        tool_proficiencies=("artisans_tools", "land_vehicles"),
        feat=FeatureKey.TOUGH,
    ),
    BackgroundDefinition(
        background_key="noble",
        name="Noble",
        skill_proficiencies=(Skill.HISTORY, Skill.PERSUASION),
        tool_proficiencies=("gaming_set",),
        languages=1,
        feat=FeatureKey.SKILLED,
    ),
    BackgroundDefinition(
        background_key="entertainer",
        name="Entertainer",
        skill_proficiencies=(Skill.ACROBATICS, Skill.PERFORMANCE),
        tool_proficiencies=("disguise_kit", "musical_instrument"),
        feat=FeatureKey.LUCKY,
    ),
    BackgroundDefinition(
        background_key="outlander",
        name="Outlander",
        skill_proficiencies=(Skill.ATHLETICS, Skill.SURVIVAL),
        tool_proficiencies=("musical_instrument",),
        languages=1,
        feat=FeatureKey.TAVERN_BRAWLER,
    ),
]
