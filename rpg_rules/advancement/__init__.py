"""
Advancement system for the rules engine.

This module provides:
- XP table, thresholds and grants (single character and party split)
- Level-up detection and the PendingLevelUp descriptor
- Per-step choice validators
- LevelUpWizard: the level-up state machine
- ProgressionController / apply_level_up: the pure level-up commit
"""

from rpg_rules.advancement.xp_manager import (
    LEVEL_XP_TABLE,
    MAX_LEVEL,
    XPAwardResult,
    grant_experience,
    grant_experience_to_party,
    level_for_xp,
    xp_threshold,
    xp_to_next_level,
)
from rpg_rules.advancement.pending import (
    build_pending_level_up,
    detect_level_up,
    hp_roll_formula,
    known_invocations,
)
from rpg_rules.advancement.validators import (
    InvalidChoiceError,
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
from rpg_rules.advancement.progression_controller import (
    ProgressionController,
    apply_level_up,
    level_up_all,
)
from rpg_rules.advancement.level_up_wizard import (
    InvalidTransitionError,
    LevelUpStep,
    LevelUpWizard,
    StepTransition,
    compile_steps,
    compile_transitions,
)

__all__ = [
    # XP
    "LEVEL_XP_TABLE",
    "MAX_LEVEL",
    "XPAwardResult",
    "grant_experience",
    "grant_experience_to_party",
    "level_for_xp",
    "xp_threshold",
    "xp_to_next_level",
    # Detection
    "build_pending_level_up",
    "detect_level_up",
    "hp_roll_formula",
    "known_invocations",
    # Validation
    "InvalidChoiceError",
    "LevelUpChoices",
    "ValidationResult",
    "validate_ability_or_feat",
    "validate_choices",
    "validate_hp_roll",
    "validate_invocations",
    "validate_mystic_arcanum",
    "validate_spells",
    "validate_subclass",
    "validate_weapon_masteries",
    # Commit
    "ProgressionController",
    "apply_level_up",
    "level_up_all",
    # Wizard
    "InvalidTransitionError",
    "LevelUpStep",
    "LevelUpWizard",
    "StepTransition",
    "compile_steps",
    "compile_transitions",
]
