"""
Race and background system.

This module provides:
- RaceDefinition / SubraceDefinition / RaceTrait: race data structures
- BackgroundDefinition: skill, tool and feat grants of a background
- RaceManager: Central registry for races and backgrounds

Available Races:
- Human, Dwarf (hill, mountain), Elf (high, wood), Halfling (lightfoot, stout)
- Dragonborn, Tiefling, Half-Elf (two floating +1s), Half-Orc, Gnome (rock, forest)
"""

from rpg_rules.races.race_data import (
    TRAIT_HP_BONUS_PER_LEVEL,
    TRAIT_SKILL_PROFICIENCY,
    BackgroundDefinition,
    RaceDefinition,
    RaceTrait,
    SubraceDefinition,
)
from rpg_rules.races.race_manager import RaceManager, get_race_manager, reset_race_manager

__all__ = [
    # Data structures
    "TRAIT_HP_BONUS_PER_LEVEL",
    "TRAIT_SKILL_PROFICIENCY",
    "BackgroundDefinition",
    "RaceDefinition",
    "RaceTrait",
    "SubraceDefinition",
    # Manager
    "RaceManager",
    "get_race_manager",
    "reset_race_manager",
]
