"""
Level-up wizard state machine.

The wizard walks one PendingLevelUp through its decision steps. Its steps
and transitions are compiled once from the pending descriptor, so a level
without an ability score improvement simply has no ABILITY_OR_FEAT step.

Rules enforced here:
- Hit points may be re-rolled only while in ROLL_HP; once the wizard
  advances, the roll is frozen and going back never reaches ROLL_HP again.
- An invalid trigger raises InvalidTransitionError.
- An invalid selection returns a failed ValidationResult and leaves both the
  step and the previous selection unchanged.

All transitions are recorded in the run log.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional, TYPE_CHECKING

from rpg_rules.advancement.progression_controller import apply_level_up
from rpg_rules.advancement.xp_manager import MAX_LEVEL
from rpg_rules.advancement.validators import (
    LevelUpChoices,
    ValidationResult,
    validate_ability_or_feat,
    validate_choices,
    validate_hp_roll,
    validate_invocations,
    validate_mystic_arcanum,
    validate_spells,
    validate_subclass,
    validate_weapon_masteries,
)
from rpg_rules.data_models import Ability, CharacterSnapshot, DiceRoller, HpRoll, PendingLevelUp
from rpg_rules.observability.run_log import TransitionEvent, get_run_log
from rpg_rules.stats.stat_calculator import StatCalculator

if TYPE_CHECKING:
    from rpg_rules.content_loader.rules_dataset import RulesDataset

logger = logging.getLogger(__name__)


class LevelUpStep(str, Enum):
    """Wizard steps, in the order they are visited."""
    ROLL_HP = "roll_hp"
    ABILITY_OR_FEAT = "ability_or_feat"
    SUBCLASS = "subclass"
    SPELLS = "spells"
    INVOCATIONS = "invocations"
    MYSTIC_ARCANUM = "mystic_arcanum"
    WEAPON_MASTERY = "weapon_mastery"
    SUMMARY = "summary"
    APPLIED = "applied"


# Triggers
TRIGGER_ROLL = "roll"
TRIGGER_NEXT = "next"
TRIGGER_BACK = "back"
TRIGGER_COMMIT = "commit"


@dataclass(frozen=True)
class StepTransition:
    """One allowed move between wizard steps."""
    from_step: LevelUpStep
    to_step: LevelUpStep
    trigger: str


class InvalidTransitionError(Exception):
    """Raised when a trigger is not allowed from the current step."""

    pass


def compile_steps(pending: PendingLevelUp) -> list[LevelUpStep]:
    """The steps this level-up visits, ROLL_HP first and SUMMARY last."""
    steps = [LevelUpStep.ROLL_HP]
    if pending.ability_score_improvement:
        steps.append(LevelUpStep.ABILITY_OR_FEAT)
    if pending.subclass_choice:
        steps.append(LevelUpStep.SUBCLASS)
    if pending.has_spell_step:
        steps.append(LevelUpStep.SPELLS)
    if pending.has_invocation_step:
        steps.append(LevelUpStep.INVOCATIONS)
    if pending.mystic_arcanum_level:
        steps.append(LevelUpStep.MYSTIC_ARCANUM)
    if pending.new_weapon_masteries:
        steps.append(LevelUpStep.WEAPON_MASTERY)
    steps.append(LevelUpStep.SUMMARY)
    return steps


def compile_transitions(steps: list[LevelUpStep]) -> list[StepTransition]:
    """Transition table for an ordered list of steps."""
    transitions = [StepTransition(LevelUpStep.ROLL_HP, LevelUpStep.ROLL_HP, TRIGGER_ROLL)]
    for current, following in zip(steps, steps[1:]):
        transitions.append(StepTransition(current, following, TRIGGER_NEXT))
        if current != LevelUpStep.ROLL_HP:
            transitions.append(StepTransition(following, current, TRIGGER_BACK))
    transitions.append(StepTransition(LevelUpStep.SUMMARY, LevelUpStep.APPLIED, TRIGGER_COMMIT))
    return transitions


class LevelUpWizard:
    """
    Drives one level-up from hit points to commit.

    Attributes:
        snapshot: The character being advanced (never modified)
        pending: Its pending level-up
        steps: Steps this level-up visits
        hp_roll: The current hit-point roll, frozen after ROLL_HP
        choices: Selections accepted so far
        result: The advanced snapshot once committed
    """

    def __init__(
        self,
        snapshot: CharacterSnapshot,
        dataset: Optional["RulesDataset"] = None,
        max_level: int = MAX_LEVEL,
        calculator: Optional[StatCalculator] = None,
    ):
        """
        Compile the wizard for a snapshot's pending level-up.

        Args:
            snapshot: Character with a pending level-up
            dataset: Rules dataset; the shared dataset when omitted
            max_level: Level cap passed on to the commit
            calculator: Stat calculator used for the hit-point roll

        Raises:
            InvalidTransitionError: If no level-up is pending
        """
        if snapshot.pending_level_up is None:
            raise InvalidTransitionError(f"{snapshot.name} has no pending level-up")
        if dataset is None:
            from rpg_rules.content_loader.rules_dataset import get_rules_dataset

            dataset = get_rules_dataset()

        self.snapshot = snapshot
        self.pending = snapshot.pending_level_up
        self.dataset = dataset
        self.max_level = max_level
        self.calculator = calculator or StatCalculator(dataset)
        self.steps = compile_steps(self.pending)

        self._valid_transitions: dict[tuple[LevelUpStep, str], LevelUpStep] = {}
        for transition in compile_transitions(self.steps):
            self._valid_transitions[(transition.from_step, transition.trigger)] = transition.to_step

        self._current_step = LevelUpStep.ROLL_HP
        self._history: list[TransitionEvent] = []
        self.hp_roll: Optional[HpRoll] = None
        self.choices = LevelUpChoices()
        self.result: Optional[CharacterSnapshot] = None

    def __repr__(self) -> str:
        return (
            f"LevelUpWizard({self.snapshot.name!r}, level={self.pending.target_level}, "
            f"step={self._current_step.value})"
        )

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def current_step(self) -> LevelUpStep:
        return self._current_step

    @property
    def history(self) -> list[TransitionEvent]:
        return self._history.copy()

    def can_transition(self, trigger: str) -> bool:
        return (self._current_step, trigger) in self._valid_transitions

    def get_valid_triggers(self) -> list[str]:
        return [trigger for (step, trigger) in self._valid_transitions if step == self._current_step]

    def _transition(self, trigger: str, context: Optional[dict[str, Any]] = None) -> LevelUpStep:
        key = (self._current_step, trigger)
        if key not in self._valid_transitions:
            raise InvalidTransitionError(
                f"Invalid transition: Cannot trigger '{trigger}' from step "
                f"'{self._current_step.value}'. Valid triggers: {self.get_valid_triggers()}"
            )
        old_step = self._current_step
        self._current_step = self._valid_transitions[key]

        event = get_run_log().log_transition(
            from_state=old_step.value,
            to_state=self._current_step.value,
            trigger=trigger,
            context={"character_id": self.snapshot.character_id, **(context or {})},
        )
        self._history.append(event)
        logger.debug(f"Level-up {self.snapshot.name}: {old_step.value} -> {self._current_step.value}")
        return self._current_step

    def _require_step(self, step: LevelUpStep) -> None:
        if self._current_step != step:
            raise InvalidTransitionError(
                f"{step.value} selections are only accepted in that step, "
                f"current step is '{self._current_step.value}'"
            )

    def _accept(self, candidate: LevelUpChoices, validator) -> ValidationResult:
        result = validator(self.snapshot, self.pending, candidate, self.dataset)
        if result:
            self.choices = candidate
        return result

    # =========================================================================
    # STEPS
    # =========================================================================

    def roll_hp(self) -> HpRoll:
        """
        Roll (or re-roll) this level's hit die.

        The CON modifier and flat per-level bonus are captured now.
        """
        self._transition(TRIGGER_ROLL)
        dice = DiceRoller.roll(
            f"1d{self.pending.hit_die}",
            f"{self.snapshot.name} hit points for level {self.pending.target_level}",
        )
        self.hp_roll = HpRoll(
            die_size=self.pending.hit_die,
            dice=tuple(dice.rolls),
            con_modifier=self.calculator.ability_mod(self.snapshot, Ability.CON),
            flat_bonus=self.calculator.flat_hp_bonus_per_level(self.snapshot),
        )
        return self.hp_roll

    def select_ability_increases(self, increases: dict[str, int]) -> ValidationResult:
        """Assign the two improvement points (replaces any feat choice)."""
        self._require_step(LevelUpStep.ABILITY_OR_FEAT)
        candidate = replace(self.choices, ability_increases=dict(increases), feat=None, feat_choices={})
        return self._accept(candidate, validate_ability_or_feat)

    def select_feat(self, feat_key: str, sub_choices: Optional[dict[str, Any]] = None) -> ValidationResult:
        """Take a feat instead of ability increases."""
        self._require_step(LevelUpStep.ABILITY_OR_FEAT)
        candidate = replace(
            self.choices,
            ability_increases={},
            feat=feat_key,
            feat_choices=dict(sub_choices or {}),
        )
        return self._accept(candidate, validate_ability_or_feat)

    def select_subclass(self, subclass_key: str, option: Optional[str] = None) -> ValidationResult:
        self._require_step(LevelUpStep.SUBCLASS)
        candidate = replace(self.choices, subclass=subclass_key, subclass_option=option)
        return self._accept(candidate, validate_subclass)

    def select_spells(
        self,
        cantrips: tuple[str, ...] = (),
        spells: tuple[str, ...] = (),
        swap_out: Optional[str] = None,
        swap_in: Optional[str] = None,
    ) -> ValidationResult:
        self._require_step(LevelUpStep.SPELLS)
        candidate = replace(
            self.choices,
            cantrips=list(cantrips),
            spells=list(spells),
            swap_out=swap_out,
            swap_in=swap_in,
        )
        return self._accept(candidate, validate_spells)

    def select_invocations(
        self, invocation_keys: tuple[str, ...], swap_out: Optional[str] = None
    ) -> ValidationResult:
        """
        Learn new invocations, optionally giving up one already known.

        With swap_out the picks include its replacement.
        """
        self._require_step(LevelUpStep.INVOCATIONS)
        candidate = replace(self.choices, invocations=list(invocation_keys), invocation_swap_out=swap_out)
        return self._accept(candidate, validate_invocations)

    def select_mystic_arcanum(self, spell_key: str) -> ValidationResult:
        self._require_step(LevelUpStep.MYSTIC_ARCANUM)
        candidate = replace(self.choices, mystic_arcanum=spell_key)
        return self._accept(candidate, validate_mystic_arcanum)

    def select_weapon_masteries(self, weapon_keys: tuple[str, ...]) -> ValidationResult:
        self._require_step(LevelUpStep.WEAPON_MASTERY)
        candidate = replace(self.choices, weapon_masteries=list(weapon_keys))
        return self._accept(candidate, validate_weapon_masteries)

    def validate_current_step(self) -> ValidationResult:
        step = self._current_step
        if step == LevelUpStep.ROLL_HP:
            return validate_hp_roll(self.pending, self.hp_roll)
        if step == LevelUpStep.ABILITY_OR_FEAT:
            return validate_ability_or_feat(self.snapshot, self.pending, self.choices, self.dataset)
        if step == LevelUpStep.SUBCLASS:
            return validate_subclass(self.snapshot, self.pending, self.choices, self.dataset)
        if step == LevelUpStep.SPELLS:
            return validate_spells(self.snapshot, self.pending, self.choices, self.dataset)
        if step == LevelUpStep.INVOCATIONS:
            return validate_invocations(self.snapshot, self.pending, self.choices, self.dataset)
        if step == LevelUpStep.MYSTIC_ARCANUM:
            return validate_mystic_arcanum(self.snapshot, self.pending, self.choices, self.dataset)
        if step == LevelUpStep.WEAPON_MASTERY:
            return validate_weapon_masteries(self.snapshot, self.pending, self.choices, self.dataset)
        if step == LevelUpStep.SUMMARY:
            return validate_choices(self.snapshot, self.pending, self.hp_roll, self.choices, self.dataset)
        return ValidationResult()

    def advance(self) -> ValidationResult:
        """
        Move to the next step if the current one is complete.

        Returns:
            The current step's validation; the step only changes when it passes

        Raises:
            InvalidTransitionError: From SUMMARY or APPLIED
        """
        if not self.can_transition(TRIGGER_NEXT):
            self._transition(TRIGGER_NEXT)
        result = self.validate_current_step()
        if result:
            self._transition(TRIGGER_NEXT)
        return result

    def go_back(self) -> LevelUpStep:
        """
        Return to the previous decision step.

        Raises:
            InvalidTransitionError: From the first step after ROLL_HP, or
                from ROLL_HP and APPLIED
        """
        return self._transition(TRIGGER_BACK)

    def summary(self) -> dict[str, Any]:
        """Everything this level-up will apply."""
        return {
            "character_id": self.snapshot.character_id,
            "target_level": self.pending.target_level,
            "step": self._current_step.value,
            "hp_roll": self.hp_roll.to_dict() if self.hp_roll else None,
            "hp_gained": self.hp_roll.hp_gained if self.hp_roll else None,
            "features_gained": list(self.pending.features_gained),
            "choices": self.choices.to_dict(),
        }

    def commit(self) -> CharacterSnapshot:
        """
        Apply the level-up.

        Returns:
            The advanced snapshot (the wizard's own snapshot is untouched)

        Raises:
            InvalidTransitionError: Outside the SUMMARY step
            InvalidChoiceError: If the collected choices do not validate
        """
        if not self.can_transition(TRIGGER_COMMIT):
            self._transition(TRIGGER_COMMIT)
        advanced = apply_level_up(
            self.snapshot, self.hp_roll, self.choices, self.dataset, self.max_level, self.calculator
        )
        self._transition(TRIGGER_COMMIT, {"level": advanced.level})
        self.result = advanced
        return advanced
