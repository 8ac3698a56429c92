"""
Level-up choice validation.

Each step of the level-up wizard has one validator. A validator never
raises for a bad selection: it returns a ValidationResult listing every
problem so a presentation layer can show them all at once. apply_level_up
runs validate_choices and raises InvalidChoiceError on failure.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, TYPE_CHECKING

from rpg_rules.advancement.pending import active_progression, known_invocations
from rpg_rules.data_models import (
    Ability,
    CharacterSnapshot,
    HpRoll,
    ItemType,
    PendingLevelUp,
    Skill,
)
from rpg_rules.errors import InvalidChoiceError
from rpg_rules.features.feature_data import MechanicType
from rpg_rules.stats.stat_calculator import StatCalculator

if TYPE_CHECKING:
    from rpg_rules.content_loader.rules_dataset import RulesDataset

logger = logging.getLogger(__name__)

__all__ = [
    "ASI_POINTS",
    "ASI_MAX_PER_ABILITY",
    "ABILITY_SCORE_CAP",
    "InvalidChoiceError",
    "LevelUpChoices",
    "ValidationResult",
    "validate_ability_or_feat",
    "validate_choices",
    "validate_feat_sub_choices",
    "validate_hp_roll",
    "validate_invocations",
    "validate_mystic_arcanum",
    "validate_spells",
    "validate_subclass",
    "validate_weapon_masteries",
]

ASI_POINTS = 2
ASI_MAX_PER_ABILITY = 2
ABILITY_SCORE_CAP = 20


# =============================================================================
# RESULT AND CHOICE DATACLASSES
# =============================================================================


@dataclass
class ValidationResult:
    """Outcome of validating one or more level-up selections."""
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str]) -> "ValidationResult":
        return cls(is_valid=not errors, errors=list(errors))

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult.from_errors(self.errors + other.errors)

    def __bool__(self) -> bool:
        return self.is_valid


@dataclass
class LevelUpChoices:
    """
    Every selection made for one level-up.

    Attributes:
        ability_increases: ability value -> points (ability score improvement)
        feat: Feat key taken instead of the ability increases
        feat_choices: Sub-choices the feat requires (spell list, skills, ...)
        subclass: Subclass picked this level
        subclass_option: Value for the subclass's required choice
        cantrips: New cantrips
        spells: New leveled spells (added to the spellbook for wizards)
        swap_out: Known spell exchanged away
        swap_in: Spell learned in its place
        weapon_masteries: New weapon masteries (weapon item keys)
        invocations: New eldritch invocations (feature keys)
        invocation_swap_out: Known invocation exchanged away
        mystic_arcanum: Spell taken as this level's mystic arcanum
    """
    ability_increases: dict[str, int] = field(default_factory=dict)
    feat: Optional[str] = None
    feat_choices: dict[str, Any] = field(default_factory=dict)
    subclass: Optional[str] = None
    subclass_option: Optional[str] = None
    cantrips: list[str] = field(default_factory=list)
    spells: list[str] = field(default_factory=list)
    swap_out: Optional[str] = None
    swap_in: Optional[str] = None
    weapon_masteries: list[str] = field(default_factory=list)
    invocations: list[str] = field(default_factory=list)
    invocation_swap_out: Optional[str] = None
    mystic_arcanum: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ability_increases": dict(self.ability_increases),
            "feat": self.feat,
            "feat_choices": dict(self.feat_choices),
            "subclass": self.subclass,
            "subclass_option": self.subclass_option,
            "cantrips": list(self.cantrips),
            "spells": list(self.spells),
            "swap_out": self.swap_out,
            "swap_in": self.swap_in,
            "weapon_masteries": list(self.weapon_masteries),
            "invocations": list(self.invocations),
            "invocation_swap_out": self.invocation_swap_out,
            "mystic_arcanum": self.mystic_arcanum,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LevelUpChoices":
        return cls(
            ability_increases=dict(data.get("ability_increases", {})),
            feat=data.get("feat"),
            feat_choices=dict(data.get("feat_choices", {})),
            subclass=data.get("subclass"),
            subclass_option=data.get("subclass_option"),
            cantrips=list(data.get("cantrips", [])),
            spells=list(data.get("spells", [])),
            swap_out=data.get("swap_out"),
            swap_in=data.get("swap_in"),
            weapon_masteries=list(data.get("weapon_masteries", [])),
            invocations=list(data.get("invocations", [])),
            invocation_swap_out=data.get("invocation_swap_out"),
            mystic_arcanum=data.get("mystic_arcanum"),
        )


# =============================================================================
# STEP VALIDATORS
# =============================================================================


def _duplicates(values: list[str]) -> set[str]:
    seen: set[str] = set()
    repeated: set[str] = set()
    for value in values:
        if value in seen:
            repeated.add(value)
        seen.add(value)
    return repeated


def validate_hp_roll(pending: PendingLevelUp, roll: Optional[HpRoll]) -> ValidationResult:
    """The roll exists, uses the class hit die, and every die is in range."""
    if roll is None:
        return ValidationResult.from_errors(["Hit points have not been rolled"])
    errors = []
    if roll.die_size != pending.hit_die:
        errors.append(f"Hit point roll uses d{roll.die_size}, expected d{pending.hit_die}")
    if len(roll.dice) != 1:
        errors.append(f"Hit point roll must be a single die, got {len(roll.dice)}")
    for value in roll.dice:
        if not 1 <= value <= roll.die_size:
            errors.append(f"Die result {value} is outside 1-{roll.die_size}")
    return ValidationResult.from_errors(errors)


def _validate_asi(
    snapshot: CharacterSnapshot,
    increases: dict[str, int],
    calculator: StatCalculator,
) -> list[str]:
    errors = []
    valid_abilities = {a.value for a in Ability}
    for ability, points in increases.items():
        if ability not in valid_abilities:
            errors.append(f"Unknown ability {ability!r}")
            continue
        if not isinstance(points, int) or points < 0:
            errors.append(f"Increase to {ability} must be a non-negative whole number")
            continue
        if points > ASI_MAX_PER_ABILITY:
            errors.append(f"Cannot raise {ability} by more than {ASI_MAX_PER_ABILITY}")
        if calculator.effective_score(snapshot, ability) + points > ABILITY_SCORE_CAP:
            errors.append(f"{ability} would exceed {ABILITY_SCORE_CAP}")
    total = sum(p for p in increases.values() if isinstance(p, int))
    if not errors and total != ASI_POINTS:
        errors.append(f"Ability score improvement must assign exactly {ASI_POINTS} points, got {total}")
    return errors


def validate_feat_sub_choices(feat, sub_choices: dict[str, Any], dataset: "RulesDataset") -> list[str]:
    """Problems with the sub-choices a feat requires (empty when they are complete)."""
    errors = []
    name = feat.name
    missing = [key for key in feat.required_sub_choices() if not sub_choices.get(key)]
    if missing:
        return [f"{name} requires choices for: {', '.join(missing)}"]

    mechanic = feat.mechanic_type
    if mechanic == MechanicType.MAGIC_INITIATE:
        spell_list = sub_choices["spell_list"]
        if spell_list not in feat.mechanics.get("spell_lists", ()):
            return [f"{name} cannot draw from the {spell_list} list"]
        picks = [v for k, v in sub_choices.items() if k.startswith(("cantrip_", "spell_")) and k != "spell_list"]
        for dup in sorted(_duplicates(picks)):
            errors.append(f"{dup} chosen more than once")
        for key, value in sub_choices.items():
            if not key.startswith(("cantrip_", "spell_")) or key == "spell_list":
                continue
            spell = dataset.get_spell(value)
            wants_cantrip = key.startswith("cantrip_")
            if spell is None:
                errors.append(f"Unknown spell {value!r}")
            elif not spell.available_to(spell_list):
                errors.append(f"{spell.name} is not on the {spell_list} list")
            elif wants_cantrip and not spell.is_cantrip:
                errors.append(f"{spell.name} is not a cantrip")
            elif not wants_cantrip and spell.level != 1:
                errors.append(f"{spell.name} is not a 1st-level spell")
    elif mechanic == MechanicType.SKILL_CHOICE:
        skills = list(sub_choices.values())
        valid = {s.value for s in Skill}
        for skill in skills:
            if skill not in valid:
                errors.append(f"Unknown skill {skill!r}")
        for dup in sorted(_duplicates(skills)):
            errors.append(f"{dup} chosen more than once")
    return errors


def validate_ability_or_feat(
    snapshot: CharacterSnapshot,
    pending: PendingLevelUp,
    choices: LevelUpChoices,
    dataset: "RulesDataset",
) -> ValidationResult:
    """
    Ability score improvement or feat.

    Exactly two points, at most two per ability, and no effective score
    above 20; or a single feat the character does not already have.
    """
    increases = {k: v for k, v in choices.ability_increases.items() if v}
    if not pending.ability_score_improvement:
        if increases or choices.feat:
            return ValidationResult.from_errors(
                [f"Level {pending.target_level} has no ability score improvement"]
            )
        return ValidationResult()

    if increases and choices.feat:
        return ValidationResult.from_errors(["Choose ability increases or a feat, not both"])
    if not increases and not choices.feat:
        return ValidationResult.from_errors(["Choose ability increases or a feat"])

    if increases:
        return ValidationResult.from_errors(_validate_asi(snapshot, increases, StatCalculator(dataset)))

    feat = dataset.get_feature(choices.feat)
    if feat is None or not feat.is_feat:
        return ValidationResult.from_errors([f"Unknown feat {choices.feat!r}"])
    if choices.feat in snapshot.feats:
        return ValidationResult.from_errors([f"{feat.name} has already been taken"])
    if feat.min_level > pending.target_level:
        return ValidationResult.from_errors([f"{feat.name} requires level {feat.min_level}"])
    return ValidationResult.from_errors(validate_feat_sub_choices(feat, choices.feat_choices, dataset))


def validate_subclass(
    snapshot: CharacterSnapshot,
    pending: PendingLevelUp,
    choices: LevelUpChoices,
    dataset: "RulesDataset",
) -> ValidationResult:
    """A subclass is picked exactly when the level calls for one, and never changed."""
    if not pending.subclass_choice:
        if choices.subclass and choices.subclass != snapshot.subclass_key:
            return ValidationResult.from_errors(["Subclass cannot be chosen or changed at this level"])
        return ValidationResult()

    if not choices.subclass:
        return ValidationResult.from_errors(["Choose a subclass"])
    definition = dataset.get_class(snapshot.class_key)
    subclass = definition.get_subclass(choices.subclass) if definition else None
    if subclass is None:
        return ValidationResult.from_errors([f"Unknown subclass {choices.subclass!r} for {snapshot.class_key}"])
    if subclass.required_choice:
        if not choices.subclass_option:
            return ValidationResult.from_errors([f"{subclass.name} requires a {subclass.required_choice}"])
        if choices.subclass_option not in subclass.choice_options:
            return ValidationResult.from_errors(
                [f"{choices.subclass_option!r} is not a valid {subclass.required_choice}"]
            )
    return ValidationResult()


def validate_spells(
    snapshot: CharacterSnapshot,
    pending: PendingLevelUp,
    choices: LevelUpChoices,
    dataset: "RulesDataset",
) -> ValidationResult:
    """
    New cantrips and spells, plus the optional one-for-one swap.

    Counts must match exactly; every pick must be on the class list, of an
    accessible level, and not already known.
    """
    subclass_key = choices.subclass or snapshot.subclass_key
    cantrip_count, spell_count = pending.spell_counts_for(choices.subclass if pending.subclass_choice else None)
    errors = []

    if len(choices.cantrips) != cantrip_count:
        errors.append(f"Choose exactly {cantrip_count} cantrip(s), got {len(choices.cantrips)}")
    if len(choices.spells) != spell_count:
        errors.append(f"Choose exactly {spell_count} spell(s), got {len(choices.spells)}")

    definition = dataset.get_class(snapshot.class_key)
    progression = active_progression(definition, subclass_key, pending.target_level) if definition else None
    if progression is None:
        if choices.cantrips or choices.spells or choices.swap_out or choices.swap_in:
            errors.append("This level grants no spell choices")
        return ValidationResult.from_errors(errors)

    spell_list = progression.spell_list
    known = snapshot.all_spells()
    picks = list(choices.cantrips) + list(choices.spells)
    if choices.swap_in:
        picks.append(choices.swap_in)
    for dup in sorted(_duplicates(picks)):
        errors.append(f"{dup} chosen more than once")

    def check(key: str, cantrip: bool) -> None:
        spell = dataset.get_spell(key)
        if spell is None:
            errors.append(f"Unknown spell {key!r}")
        elif key in known:
            errors.append(f"{spell.name} is already known")
        elif not spell.available_to(spell_list):
            errors.append(f"{spell.name} is not on the {spell_list} list")
        elif cantrip and not spell.is_cantrip:
            errors.append(f"{spell.name} is not a cantrip")
        elif not cantrip and (spell.is_cantrip or spell.level > pending.max_spell_level):
            errors.append(f"{spell.name} (level {spell.level}) is not an accessible spell level")

    for key in choices.cantrips:
        check(key, cantrip=True)
    for key in choices.spells:
        check(key, cantrip=False)

    if choices.swap_out or choices.swap_in:
        if not pending.spell_swap_allowed:
            errors.append("Spell swapping is not allowed at this level")
        elif not (choices.swap_out and choices.swap_in):
            errors.append("A spell swap needs both the spell to replace and its replacement")
        else:
            if choices.swap_out not in snapshot.spells_known:
                errors.append(f"{choices.swap_out!r} is not a known spell")
            check(choices.swap_in, cantrip=False)
    return ValidationResult.from_errors(errors)


def validate_invocations(
    snapshot: CharacterSnapshot,
    pending: PendingLevelUp,
    choices: LevelUpChoices,
    dataset: "RulesDataset",
) -> ValidationResult:
    """
    New eldritch invocations, plus the optional exchange of one known invocation.

    After the exchange the character knows exactly the level's invocation
    count. Each pick must be unknown, open at the new level, and have its
    prerequisite spell known or chosen this level.
    """
    picks = list(choices.invocations)
    if not pending.has_invocation_step:
        if picks or choices.invocation_swap_out:
            return ValidationResult.from_errors([f"Level {pending.target_level} grants no invocation choices"])
        return ValidationResult()

    definition = dataset.get_class(snapshot.class_key)
    known = known_invocations(snapshot, definition)
    errors = []

    expected = pending.new_invocations
    if choices.invocation_swap_out:
        if not pending.invocation_swap_allowed:
            errors.append("Invocations cannot be exchanged at this level")
        elif choices.invocation_swap_out not in known:
            errors.append(f"{choices.invocation_swap_out!r} is not a known invocation")
        expected += 1
    if len(picks) != expected:
        errors.append(f"Choose exactly {expected} invocation(s), got {len(picks)}")
    for dup in sorted(_duplicates(picks)):
        errors.append(f"{dup} chosen more than once")

    spells = snapshot.all_spells() | set(choices.cantrips) | set(choices.spells)
    if choices.swap_out and choices.swap_in:
        spells = (spells - {choices.swap_out}) | {choices.swap_in}
    for key in picks:
        option = definition.get_invocation(key) if definition else None
        if option is None:
            errors.append(f"Unknown invocation {key!r}")
        elif key in known:
            errors.append(f"{option.name} is already known")
        elif option.level > pending.target_level:
            errors.append(f"{option.name} requires level {option.level}")
        else:
            required = option.mechanics.get("requires_spell")
            if required and required not in spells:
                errors.append(f"{option.name} requires the {required} spell")
    return ValidationResult.from_errors(errors)


def validate_mystic_arcanum(
    snapshot: CharacterSnapshot,
    pending: PendingLevelUp,
    choices: LevelUpChoices,
    dataset: "RulesDataset",
) -> ValidationResult:
    """One unknown class spell of exactly the arcanum level, when the level grants one."""
    level = pending.mystic_arcanum_level
    if not level:
        if choices.mystic_arcanum:
            return ValidationResult.from_errors([f"Level {pending.target_level} grants no mystic arcanum"])
        return ValidationResult()
    if not choices.mystic_arcanum:
        return ValidationResult.from_errors([f"Choose a level {level} spell for the mystic arcanum"])

    definition = dataset.get_class(snapshot.class_key)
    spell_list = definition.spellcasting.spell_list if definition and definition.spellcasting else snapshot.class_key
    spell = dataset.get_spell(choices.mystic_arcanum)
    if spell is None:
        return ValidationResult.from_errors([f"Unknown spell {choices.mystic_arcanum!r}"])
    if spell.level != level:
        return ValidationResult.from_errors([f"{spell.name} (level {spell.level}) is not a level {level} spell"])
    if not spell.available_to(spell_list):
        return ValidationResult.from_errors([f"{spell.name} is not on the {spell_list} list"])
    if choices.mystic_arcanum in snapshot.all_spells():
        return ValidationResult.from_errors([f"{spell.name} is already known"])
    return ValidationResult()


def validate_weapon_masteries(
    snapshot: CharacterSnapshot,
    pending: PendingLevelUp,
    choices: LevelUpChoices,
    dataset: "RulesDataset",
) -> ValidationResult:
    """New masteries bring the total exactly to the level's mastery count."""
    picks = list(choices.weapon_masteries)
    errors = []
    if len(picks) != pending.new_weapon_masteries:
        errors.append(
            f"Choose exactly {pending.new_weapon_masteries} weapon mastery(ies), got {len(picks)}"
        )
    for dup in sorted(_duplicates(picks)):
        errors.append(f"{dup} chosen more than once")
    for key in picks:
        item = dataset.get_item(key)
        if item is None or item.item_type != ItemType.WEAPON or not item.mastery:
            errors.append(f"{key!r} is not a weapon with a mastery property")
        elif key in snapshot.weapon_masteries:
            errors.append(f"{item.name} mastery is already known")
    return ValidationResult.from_errors(errors)


def validate_choices(
    snapshot: CharacterSnapshot,
    pending: PendingLevelUp,
    roll: Optional[HpRoll],
    choices: LevelUpChoices,
    dataset: "RulesDataset",
) -> ValidationResult:
    """Run every step validator; the result lists all problems found."""
    result = validate_hp_roll(pending, roll)
    for validator in (
        validate_ability_or_feat,
        validate_subclass,
        validate_spells,
        validate_invocations,
        validate_mystic_arcanum,
        validate_weapon_masteries,
    ):
        result = result.merge(validator(snapshot, pending, choices, dataset))
    if not result:
        logger.debug(f"Level-up choices for {snapshot.name} rejected: {result.errors}")
    return result
