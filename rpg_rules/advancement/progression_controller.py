"""
Progression controller: XP, level-up detection and commit.

apply_level_up is the only way a level is gained. It is pure: the same
snapshot, roll and choices always produce the same result, and nothing is
applied unless every choice validates.

Usage:
    controller = ProgressionController()
    snapshot = controller.grant_experience(snapshot, 300)
    if snapshot.pending_level_up:
        wizard = controller.start_level_up(snapshot)
        wizard.roll_hp()
        wizard.advance()
        ...
        snapshot = wizard.commit()
"""

import logging
from typing import Callable, Optional, TYPE_CHECKING

from rpg_rules.advancement.pending import (
    active_progression,
    build_pending_level_up,
    detect_level_up,
)
from rpg_rules.advancement.validators import LevelUpChoices, ValidationResult, validate_choices
from rpg_rules.advancement.xp_manager import (
    MAX_LEVEL,
    XPAwardResult,
    grant_experience,
    grant_experience_to_party,
)
from rpg_rules.data_models import CharacterSnapshot, HpRoll, PendingLevelUp, SpellQuantityModel
from rpg_rules.errors import InvalidChoiceError
from rpg_rules.observability.run_log import get_run_log
from rpg_rules.resources.rest import recompute_resources
from rpg_rules.stats.stat_calculator import StatCalculator

if TYPE_CHECKING:
    from rpg_rules.advancement.level_up_wizard import LevelUpWizard
    from rpg_rules.content_loader.rules_dataset import RulesDataset

logger = logging.getLogger(__name__)


def _dataset(dataset: Optional["RulesDataset"]) -> "RulesDataset":
    if dataset is None:
        from rpg_rules.content_loader.rules_dataset import get_rules_dataset

        dataset = get_rules_dataset()
    return dataset


def _append_unique(existing: tuple[str, ...], additions: list[str]) -> tuple[str, ...]:
    result = list(existing)
    for key in additions:
        if key not in result:
            result.append(key)
    return tuple(result)


# =============================================================================
# COMMIT
# =============================================================================


def apply_level_up(
    snapshot: CharacterSnapshot,
    roll: Optional[HpRoll],
    choices: LevelUpChoices,
    dataset: Optional["RulesDataset"] = None,
    max_level: int = MAX_LEVEL,
    calculator: Optional[StatCalculator] = None,
) -> CharacterSnapshot:
    """
    Advance a character one level.

    Args:
        snapshot: Character with a pending level-up
        roll: The frozen hit-point roll for this level
        choices: Every selection made in the wizard
        max_level: Level cap for detecting the next level-up

    Returns:
        The advanced snapshot. Detection runs again, so a character with
        enough XP for another level, up to max_level, comes back with a
        new pending level-up.

    Raises:
        InvalidChoiceError: If there is no pending level-up or any choice
            is invalid; nothing is applied in that case
    """
    dataset = _dataset(dataset)
    pending = snapshot.pending_level_up
    if pending is None:
        raise InvalidChoiceError([f"{snapshot.name} has no pending level-up"])

    validation = validate_choices(snapshot, pending, roll, choices, dataset)
    if not validation:
        raise InvalidChoiceError(validation.errors)

    target = pending.target_level
    updates: dict = {"level": target, "pending_level_up": None}

    abilities = dict(snapshot.abilities)
    for ability, points in choices.ability_increases.items():
        if points:
            abilities[ability] = snapshot.ability_score(ability) + points
    updates["abilities"] = abilities

    subclass_key = choices.subclass if pending.subclass_choice else snapshot.subclass_key
    updates["subclass_key"] = subclass_key

    gained: list[str] = []
    definition = dataset.get_class(snapshot.class_key)
    if definition is not None:
        gained.extend(f.key.value for f in definition.features_at_level(target))
        subclass = definition.get_subclass(subclass_key)
        if subclass is not None:
            gained.extend(f.key.value for f in subclass.features_at_level(target))
            if pending.subclass_choice and subclass.required_choice:
                updates[subclass.required_choice] = choices.subclass_option
    features = snapshot.features
    if choices.invocation_swap_out:
        features = tuple(key for key in features if key != choices.invocation_swap_out)
    updates["features"] = _append_unique(features, gained + list(choices.invocations))

    if choices.feat:
        updates["feats"] = snapshot.feats + (choices.feat,)
        feat_choices = dict(snapshot.feat_choices)
        feat_choices[choices.feat] = dict(choices.feat_choices)
        updates["feat_choices"] = feat_choices

    progression = active_progression(definition, subclass_key, target) if definition else None
    spells_known = list(snapshot.spells_known)
    spellbook = snapshot.spellbook
    if progression is not None and progression.quantity_model == SpellQuantityModel.SPELLBOOK:
        spellbook = spellbook + tuple(choices.spells)
    else:
        spells_known.extend(choices.spells)
    if choices.swap_out and choices.swap_in:
        spells_known = [choices.swap_in if key == choices.swap_out else key for key in spells_known]
    updates["cantrips_known"] = snapshot.cantrips_known + tuple(choices.cantrips)
    updates["spells_known"] = tuple(spells_known)
    updates["spellbook"] = spellbook
    updates["weapon_masteries"] = snapshot.weapon_masteries + tuple(choices.weapon_masteries)
    if choices.mystic_arcanum:
        updates["mystic_arcanum"] = snapshot.mystic_arcanum + (choices.mystic_arcanum,)

    advanced = snapshot.evolve(**updates)

    # Per-level HP bonuses acquired this level count for every level held
    flat_now = (calculator or StatCalculator(dataset)).flat_hp_bonus_per_level(advanced)
    retroactive = max(0, flat_now - roll.flat_bonus) * target
    hp_gained = roll.hp_gained + retroactive
    hp_max = snapshot.hp_max + hp_gained
    advanced = advanced.evolve(
        hp_max=hp_max,
        hp_current=min(hp_max, snapshot.hp_current + hp_gained),
    )
    advanced = recompute_resources(advanced, dataset)

    get_run_log().log_transform(
        "apply_level_up",
        snapshot.character_id,
        {
            "level": target,
            "hp_gained": hp_gained,
            "features_gained": gained,
            "choices": choices.to_dict(),
        },
    )
    logger.info(f"{snapshot.name} reaches level {target} (+{hp_gained} HP)")
    return detect_level_up(advanced, dataset, max_level)


def level_up_all(
    snapshot: CharacterSnapshot,
    choose: Callable[["LevelUpWizard"], None],
    dataset: Optional["RulesDataset"] = None,
    max_level: int = MAX_LEVEL,
    calculator: Optional[StatCalculator] = None,
) -> CharacterSnapshot:
    """
    Resolve chained level-ups one at a time.

    Args:
        snapshot: Character, possibly with a pending level-up
        choose: Drives one wizard to its summary step
        max_level: Level cap; the chain stops there

    Returns:
        Snapshot with no pending level-up left

    Raises:
        InvalidTransitionError: If choose leaves a wizard short of the summary
    """
    from rpg_rules.advancement.level_up_wizard import LevelUpWizard

    while snapshot.pending_level_up is not None:
        wizard = LevelUpWizard(snapshot, dataset, max_level, calculator)
        choose(wizard)
        snapshot = wizard.commit()
    return snapshot


# =============================================================================
# CONTROLLER
# =============================================================================


class ProgressionController:
    """
    Entry point for everything that changes a character's level.

    Holds only the rules dataset, the level cap and a stat calculator;
    every method takes and returns snapshots.
    """

    def __init__(
        self,
        dataset: Optional["RulesDataset"] = None,
        max_level: int = MAX_LEVEL,
        calculator: Optional[StatCalculator] = None,
    ):
        self.dataset = _dataset(dataset)
        self.max_level = max_level
        self.calculator = calculator or StatCalculator(self.dataset)

    def grant_experience(self, snapshot: CharacterSnapshot, amount: int) -> CharacterSnapshot:
        return grant_experience(snapshot, amount, self.dataset, self.max_level)

    def grant_experience_to_party(
        self, party: list[CharacterSnapshot], total: int
    ) -> tuple[list[CharacterSnapshot], XPAwardResult]:
        return grant_experience_to_party(party, total, self.dataset, self.max_level)

    def detect_level_up(self, snapshot: CharacterSnapshot) -> CharacterSnapshot:
        return detect_level_up(snapshot, self.dataset, self.max_level)

    def preview_level_up(self, snapshot: CharacterSnapshot) -> PendingLevelUp:
        """The pending descriptor for the next level, whether or not XP allows it."""
        return build_pending_level_up(snapshot, self.dataset)

    def start_level_up(self, snapshot: CharacterSnapshot) -> "LevelUpWizard":
        """
        Open a wizard over the snapshot's pending level-up.

        Raises:
            InvalidTransitionError: If no level-up is pending
        """
        from rpg_rules.advancement.level_up_wizard import LevelUpWizard

        return LevelUpWizard(snapshot, self.dataset, self.max_level, self.calculator)

    def validate(
        self,
        snapshot: CharacterSnapshot,
        roll: Optional[HpRoll],
        choices: LevelUpChoices,
    ) -> ValidationResult:
        if snapshot.pending_level_up is None:
            return ValidationResult.from_errors([f"{snapshot.name} has no pending level-up"])
        return validate_choices(snapshot, snapshot.pending_level_up, roll, choices, self.dataset)

    def apply_level_up(
        self,
        snapshot: CharacterSnapshot,
        roll: Optional[HpRoll],
        choices: LevelUpChoices,
    ) -> CharacterSnapshot:
        return apply_level_up(snapshot, roll, choices, self.dataset, self.max_level, self.calculator)

    def level_up_all(
        self,
        snapshot: CharacterSnapshot,
        choose: Callable[["LevelUpWizard"], None],
    ) -> CharacterSnapshot:
        return level_up_all(snapshot, choose, self.dataset, self.max_level, self.calculator)
