"""
Core data structures for races and backgrounds.

A race grants fixed ability bonuses and may grant floating bonuses that the
player assigns to abilities of their choice. Traits carry a small mechanics
payload read by the StatCalculator.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from rpg_rules.data_models import Skill
from rpg_rules.features.feature_keys import FeatureKey

# Trait mechanics types
TRAIT_HP_BONUS_PER_LEVEL = "hp_bonus_per_level"
TRAIT_SKILL_PROFICIENCY = "skill_proficiency"


@dataclass
class RaceTrait:
    """A racial trait such as Darkvision or Dwarven Toughness."""
    trait_key: str
    name: str
    description: str = ""
    mechanics: dict[str, Any] = field(default_factory=dict)

    @property
    def mechanic_type(self) -> Optional[str]:
        return self.mechanics.get("type")


@dataclass
class SubraceDefinition:
    """A subrace adding bonuses and traits on top of its race."""
    subrace_key: str
    name: str
    ability_bonuses: dict[str, int] = field(default_factory=dict)
    traits: list[RaceTrait] = field(default_factory=list)


@dataclass
class RaceDefinition:
    """
    Complete definition of a race.

    Attributes:
        race_key: Unique identifier
        name: Display name
        ability_bonuses: Fixed bonuses, ability value -> amount
        floating_bonuses: Bonuses the player assigns; a snapshot stores
            ability -> index into this list
        speed: Walking speed in feet
        traits: Racial traits
        subraces: Available subraces
    """
    race_key: str
    name: str
    ability_bonuses: dict[str, int] = field(default_factory=dict)
    floating_bonuses: tuple[int, ...] = ()
    speed: int = 30
    size: str = "medium"
    traits: list[RaceTrait] = field(default_factory=list)
    subraces: list[SubraceDefinition] = field(default_factory=list)
    languages: tuple[str, ...] = ("common",)

    def get_subrace(self, subrace_key: Optional[str]) -> Optional[SubraceDefinition]:
        for subrace in self.subraces:
            if subrace.subrace_key == subrace_key:
                return subrace
        return None

    def all_traits(self, subrace_key: Optional[str] = None) -> list[RaceTrait]:
        traits = list(self.traits)
        subrace = self.get_subrace(subrace_key)
        if subrace:
            traits.extend(subrace.traits)
        return traits

    def bonus_choices_from_amounts(
        self,
        amounts: dict[str, int],
        subrace_key: Optional[str] = None,
    ) -> tuple[dict[str, int], dict[str, int]]:
        """
        Convert a flat ability -> bonus map into floating-bonus indices.

        Any part of an amount already covered by fixed race and subrace
        bonuses is dropped; each remainder claims the first unused floating
        bonus of the same size.

        Returns:
            (bonus_choices, unmatched) where unmatched holds remainders
            no floating bonus could take
        """
        subrace = self.get_subrace(subrace_key)
        fixed = dict(self.ability_bonuses)
        if subrace:
            for ability, bonus in subrace.ability_bonuses.items():
                fixed[ability] = fixed.get(ability, 0) + bonus

        choices: dict[str, int] = {}
        unmatched: dict[str, int] = {}
        used: set[int] = set()
        for ability, amount in amounts.items():
            remainder = amount - fixed.get(ability, 0)
            if remainder <= 0:
                continue
            index = next(
                (i for i, bonus in enumerate(self.floating_bonuses) if bonus == remainder and i not in used),
                None,
            )
            if index is None:
                unmatched[ability] = remainder
                continue
            used.add(index)
            choices[ability] = index
        return choices, unmatched


@dataclass
class BackgroundDefinition:
    """A background: skill, tool and language grants, plus an optional origin feat."""
    background_key: str
    name: str
    skill_proficiencies: tuple[Skill, ...] = ()
    tool_proficiencies: tuple[str, ...] = ()
    languages: int = 0
    feat: Optional[FeatureKey] = None
    description: str = ""
