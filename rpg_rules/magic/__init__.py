"""
Spell data, registry and resolution.

This module provides:
- SpellData / SpellEffect / SpellScaling: spell definitions
- SpellRegistry: Loads spells from the JSON content files
- SpellResolutionEngine: Resolves damage effects against targets
"""

from rpg_rules.magic.spell_data import (
    EffectType,
    ResolutionType,
    SaveOutcome,
    ScalingType,
    SpellData,
    SpellEffect,
    SpellScaling,
    SpellSchool,
)
from rpg_rules.magic.spell_registry import SpellRegistry
from rpg_rules.magic.spell_resolver import (
    SpellCastResult,
    SpellResolutionEngine,
    SpellTarget,
    TargetResolution,
)

__all__ = [
    # Data structures
    "EffectType",
    "ResolutionType",
    "SaveOutcome",
    "ScalingType",
    "SpellData",
    "SpellEffect",
    "SpellScaling",
    "SpellSchool",
    # Registry
    "SpellRegistry",
    # Resolution
    "SpellCastResult",
    "SpellResolutionEngine",
    "SpellTarget",
    "TargetResolution",
]
