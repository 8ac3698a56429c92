"""Derived character statistics."""

from rpg_rules.stats.stat_calculator import (
    DEFAULT_SHIELD_BONUS,
    PROFICIENCY_BONUS_BY_LEVEL,
    StatCalculator,
    ability_modifier,
    format_damage,
    proficiency_bonus,
)

__all__ = [
    "DEFAULT_SHIELD_BONUS",
    "PROFICIENCY_BONUS_BY_LEVEL",
    "StatCalculator",
    "ability_modifier",
    "format_damage",
    "proficiency_bonus",
]
