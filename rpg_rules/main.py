"""
RPG Rules Engine - Main Entry Point

A data-driven character rules engine for a 5e-style tabletop game.

This module provides the RulesEngine facade that wires the rules dataset,
the stat calculator, the progression controller, the spell resolution
engine and the character builder together behind one query and transform
API. Every transform takes a CharacterSnapshot and returns a new one.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Union

from rpg_rules.advancement import (
    LevelUpChoices,
    LevelUpWizard,
    ProgressionController,
    XPAwardResult,
)
from rpg_rules.character import CharacterBuilder
from rpg_rules.classes.class_strategy import ClassStrategy
from rpg_rules.classes.dispatch import build_strategy
from rpg_rules.content_loader import RulesDataset, get_rules_dataset
from rpg_rules.data_models import CharacterSnapshot, DiceRoller, HpRoll, ItemSlot
from rpg_rules.items import (
    add_to_inventory,
    equip_item,
    remove_from_inventory,
    toggle_two_handed,
    unequip_item,
)
from rpg_rules.magic import SpellCastResult, SpellResolutionEngine, SpellTarget
from rpg_rules.observability.run_log import RunLog, get_run_log
from rpg_rules.resources import SpendResult, long_rest, recompute_resources, short_rest, spend_resource
from rpg_rules.stats import StatCalculator
from rpg_rules.stats.stat_calculator import DEFAULT_SHIELD_BONUS


# Configure logging
def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


logger = logging.getLogger(__name__)

# Key under which older saves stored racial bonuses as ability -> amount
LEGACY_BONUS_KEY = "ability_bonus_assignments"


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class RulesConfig:
    """Configuration for a rules engine instance."""

    # Content options
    content_dir: Optional[Path] = None   # Directory holding items.json / spells.json overrides

    # Dice
    dice_seed: Optional[int] = None

    # Rules options
    default_shield_bonus: int = DEFAULT_SHIELD_BONUS
    max_level: int = 20

    # Runtime options
    verbose: bool = False

    def __post_init__(self):
        """Ensure paths are Path objects and the level cap is sane."""
        if isinstance(self.content_dir, str):
            self.content_dir = Path(self.content_dir)
        if not 1 <= self.max_level <= 20:
            raise ValueError(f"max_level must be 1-20, got {self.max_level}")


# =============================================================================
# RULES ENGINE
# =============================================================================

class RulesEngine:
    """
    Facade over every rules subsystem.

    Holds no character state: callers pass snapshots in and keep the
    snapshots that come back.
    """

    def __init__(self, config: Optional[RulesConfig] = None):
        """
        Initialize the rules engine.

        Args:
            config: Engine configuration (defaults to bundled content)
        """
        self.config = config or RulesConfig()
        if self.config.verbose:
            setup_logging(verbose=True)
        logger.info("Initializing rules engine...")

        if self.config.dice_seed is not None:
            DiceRoller.set_seed(self.config.dice_seed)

        if self.config.content_dir is not None:
            self.dataset = RulesDataset(self.config.content_dir)
        else:
            self.dataset = get_rules_dataset()

        self.calculator = StatCalculator(self.dataset, default_shield_bonus=self.config.default_shield_bonus)
        self.progression = ProgressionController(self.dataset, self.config.max_level, self.calculator)
        self.spells = SpellResolutionEngine(self.dataset, self.calculator)
        self.builder = CharacterBuilder(self.dataset, self.calculator)

        stats = self.dataset.stats()
        logger.info(f"Rules engine ready ({stats.classes} classes, {stats.spells} spells)")

    # =========================================================================
    # QUERIES
    # =========================================================================

    def strategy(self, snapshot: CharacterSnapshot) -> ClassStrategy:
        """
        The class strategy for a snapshot.

        Raises:
            MissingReferenceError: If the class key does not resolve
        """
        return build_strategy(snapshot, self.dataset, self.calculator)

    def summary(self, snapshot: CharacterSnapshot) -> dict[str, Any]:
        """
        Every derived number a character sheet shows, plus class capabilities.

        "class" is None when the class key does not resolve.
        """
        summary = self.calculator.summary(snapshot)
        strategy = self.calculator.strategy_for(snapshot)
        summary["class"] = strategy.describe() if strategy is not None else None
        return summary

    def armor_class(self, snapshot: CharacterSnapshot) -> int:
        return self.calculator.armor_class(snapshot)

    def hit_points(self, snapshot: CharacterSnapshot) -> int:
        return self.calculator.hit_points(snapshot)

    def skill_bonus(self, snapshot: CharacterSnapshot, skill: str) -> int:
        return self.calculator.skill_bonus(snapshot, skill)

    def saving_throw_bonus(self, snapshot: CharacterSnapshot, ability: str) -> int:
        return self.calculator.saving_throw_bonus(snapshot, ability)

    def initiative_bonus(self, snapshot: CharacterSnapshot) -> int:
        return self.calculator.initiative_bonus(snapshot)

    # =========================================================================
    # CHARACTER CREATION
    # =========================================================================

    def create_character(self, name: str, class_key: str, race_key: str, abilities: dict[str, int], **options: Any) -> CharacterSnapshot:
        """
        Finalize a new level-1 character.

        See CharacterBuilder.build for the accepted options.
        """
        return self._cap_level(self.builder.build(name, class_key, race_key, abilities, **options))

    # =========================================================================
    # PROGRESSION
    # =========================================================================

    def _cap_level(self, snapshot: CharacterSnapshot) -> CharacterSnapshot:
        """Drop a pending level-up beyond the configured level cap."""
        pending = snapshot.pending_level_up
        if pending is not None and pending.target_level > self.config.max_level:
            logger.debug(f"{snapshot.name} is at the level cap ({self.config.max_level})")
            return snapshot.evolve(pending_level_up=None)
        return snapshot

    def grant_experience(self, snapshot: CharacterSnapshot, amount: int) -> CharacterSnapshot:
        return self._cap_level(self.progression.grant_experience(snapshot, amount))

    def grant_party_experience(
        self, party: list[CharacterSnapshot], total: int
    ) -> tuple[list[CharacterSnapshot], XPAwardResult]:
        updated, result = self.progression.grant_experience_to_party(party, total)
        return [self._cap_level(member) for member in updated], result

    def start_level_up(self, snapshot: CharacterSnapshot) -> LevelUpWizard:
        return self.progression.start_level_up(self._cap_level(snapshot))

    def apply_level_up(
        self,
        snapshot: CharacterSnapshot,
        roll: Optional[HpRoll],
        choices: LevelUpChoices,
    ) -> CharacterSnapshot:
        return self._cap_level(self.progression.apply_level_up(snapshot, roll, choices))

    def level_up_all(
        self,
        snapshot: CharacterSnapshot,
        choose: Callable[[LevelUpWizard], None],
    ) -> CharacterSnapshot:
        return self.progression.level_up_all(self._cap_level(snapshot), choose)

    # =========================================================================
    # RESOURCES AND RESTS
    # =========================================================================

    def recompute_resources(self, snapshot: CharacterSnapshot) -> CharacterSnapshot:
        return recompute_resources(snapshot, self.dataset)

    def short_rest(self, snapshot: CharacterSnapshot) -> CharacterSnapshot:
        return short_rest(snapshot, self.dataset)

    def long_rest(self, snapshot: CharacterSnapshot) -> CharacterSnapshot:
        return long_rest(snapshot, self.dataset)

    def spend_resource(
        self, snapshot: CharacterSnapshot, key: str, amount: int = 1
    ) -> tuple[CharacterSnapshot, SpendResult]:
        return spend_resource(snapshot, key, amount, self.dataset)

    # =========================================================================
    # EQUIPMENT
    # =========================================================================

    def add_item(self, snapshot: CharacterSnapshot, item_key: str, quantity: int = 1) -> CharacterSnapshot:
        """Add a catalog item to the inventory by key."""
        return add_to_inventory(snapshot, self.dataset.require_item(item_key), quantity)

    def remove_item(self, snapshot: CharacterSnapshot, inventory_index: int, quantity: int = 1) -> CharacterSnapshot:
        return remove_from_inventory(snapshot, inventory_index, quantity)

    def equip(self, snapshot: CharacterSnapshot, inventory_index: int, slot: Union[ItemSlot, str]) -> CharacterSnapshot:
        return equip_item(snapshot, inventory_index, slot)

    def unequip(self, snapshot: CharacterSnapshot, slot: Union[ItemSlot, str]) -> CharacterSnapshot:
        return unequip_item(snapshot, slot)

    def toggle_two_handed(self, snapshot: CharacterSnapshot) -> CharacterSnapshot:
        return toggle_two_handed(snapshot)

    # =========================================================================
    # SPELLS
    # =========================================================================

    def cast_spell(
        self,
        snapshot: CharacterSnapshot,
        spell_key: str,
        targets: list[SpellTarget],
        cast_level: Optional[int] = None,
    ) -> SpellCastResult:
        return self.spells.cast(snapshot, spell_key, targets, cast_level)

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def load_snapshot(self, data: dict[str, Any]) -> CharacterSnapshot:
        """
        Restore a snapshot from a dictionary.

        Accepts the legacy flat ability -> amount map of racial bonuses
        and converts it into floating-bonus indices.
        """
        data = dict(data)
        legacy = data.pop(LEGACY_BONUS_KEY, None)
        if legacy and not data.get("bonus_choices"):
            race = self.dataset.get_race(data.get("race_key"))
            if race is None:
                logger.warning(f"Cannot convert legacy racial bonuses for unknown race {data.get('race_key')!r}")
            else:
                choices, unmatched = race.bonus_choices_from_amounts(legacy, data.get("subrace_key"))
                if unmatched:
                    logger.warning(f"Legacy racial bonuses with no matching floating bonus: {unmatched}")
                data["bonus_choices"] = choices
        return CharacterSnapshot.from_dict(data)

    def save_snapshot(self, snapshot: CharacterSnapshot) -> dict[str, Any]:
        return snapshot.to_dict()

    def load_snapshot_json(self, text: str) -> CharacterSnapshot:
        return self.load_snapshot(json.loads(text))

    def save_snapshot_json(self, snapshot: CharacterSnapshot) -> str:
        return json.dumps(snapshot.to_dict(), indent=2)

    # =========================================================================
    # OBSERVABILITY
    # =========================================================================

    @property
    def run_log(self) -> RunLog:
        return get_run_log()

    def run_log_text(self, max_events: Optional[int] = None) -> str:
        """The run log as readable text, newest max_events only when given."""
        return get_run_log().format_log(max_events=max_events)

    def run_log_summary(self) -> dict[str, Any]:
        return get_run_log().get_summary()

    def export_run_log(self) -> str:
        """The run log as JSON, for attaching to a bug report or replay."""
        return get_run_log().to_json()

    def clear_logs(self) -> None:
        """
        Empty the run log and the dice roll log.

        Both are process-wide and bounded; long-running callers clear them
        between sessions.
        """
        get_run_log().reset()
        DiceRoller.clear_roll_log()

    def __repr__(self) -> str:
        return f"RulesEngine(content_dir={self.config.content_dir}, max_level={self.config.max_level})"
