"""
Closed dispatch from a snapshot's class key to its ClassStrategy.

A strategy is built per query and holds no state beyond the snapshot it
was built from, so callers may build as many as they like.
"""

from enum import Enum
from typing import Optional, TYPE_CHECKING

from rpg_rules.classes.barbarian import BarbarianStrategy
from rpg_rules.classes.bard import BardStrategy
from rpg_rules.classes.class_strategy import ClassStrategy
from rpg_rules.classes.cleric import ClericStrategy
from rpg_rules.classes.druid import DruidStrategy
from rpg_rules.classes.fighter import FighterStrategy
from rpg_rules.classes.monk import MonkStrategy
from rpg_rules.classes.paladin import PaladinStrategy
from rpg_rules.classes.ranger import RangerStrategy
from rpg_rules.classes.rogue import RogueStrategy
from rpg_rules.classes.sorcerer import SorcererStrategy
from rpg_rules.classes.warlock import WarlockStrategy
from rpg_rules.classes.wizard import WizardStrategy
from rpg_rules.data_models import CharacterSnapshot
from rpg_rules.errors import MissingReferenceError

if TYPE_CHECKING:
    from rpg_rules.content_loader.rules_dataset import RulesDataset
    from rpg_rules.stats.stat_calculator import StatCalculator


class CharacterClass(str, Enum):
    """The twelve playable classes."""
    BARBARIAN = "barbarian"
    BARD = "bard"
    CLERIC = "cleric"
    DRUID = "druid"
    FIGHTER = "fighter"
    MONK = "monk"
    PALADIN = "paladin"
    RANGER = "ranger"
    ROGUE = "rogue"
    SORCERER = "sorcerer"
    WARLOCK = "warlock"
    WIZARD = "wizard"


STRATEGY_CLASSES: dict[CharacterClass, type[ClassStrategy]] = {
    CharacterClass.BARBARIAN: BarbarianStrategy,
    CharacterClass.BARD: BardStrategy,
    CharacterClass.CLERIC: ClericStrategy,
    CharacterClass.DRUID: DruidStrategy,
    CharacterClass.FIGHTER: FighterStrategy,
    CharacterClass.MONK: MonkStrategy,
    CharacterClass.PALADIN: PaladinStrategy,
    CharacterClass.RANGER: RangerStrategy,
    CharacterClass.ROGUE: RogueStrategy,
    CharacterClass.SORCERER: SorcererStrategy,
    CharacterClass.WARLOCK: WarlockStrategy,
    CharacterClass.WIZARD: WizardStrategy,
}


def build_strategy(
    snapshot: CharacterSnapshot,
    dataset: Optional["RulesDataset"] = None,
    calculator: Optional["StatCalculator"] = None,
) -> ClassStrategy:
    """
    Build the class strategy for a snapshot.

    Args:
        snapshot: Character to answer queries for
        dataset: Rules dataset; the shared dataset when omitted
        calculator: Configured stat calculator to share with the strategy

    Raises:
        MissingReferenceError: If the class key is not one of the twelve
            classes or has no definition in the dataset
    """
    try:
        character_class = CharacterClass(snapshot.class_key)
    except ValueError:
        raise MissingReferenceError("class", snapshot.class_key) from None

    if dataset is None:
        from rpg_rules.content_loader.rules_dataset import get_rules_dataset

        dataset = get_rules_dataset()
    definition = dataset.require_class(character_class.value)
    return STRATEGY_CLASSES[character_class](snapshot, definition, dataset, calculator)
