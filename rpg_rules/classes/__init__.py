"""
Character class system.

Provides definitions and rules strategies for the twelve classes:
- Barbarian: Rage-fuelled warrior
- Bard: Known-spell CHA caster with Bardic Inspiration
- Cleric: Prepared WIS caster; domains add Divine Strike and healing bonuses
- Druid: Prepared WIS caster with Wild Shape
- Fighter: Martial combatant (Champion, Battle Master, Eldritch Knight)
- Monk: Martial artist with ki
- Paladin: Prepared CHA half caster with Divine Smite
- Ranger: Known-spell WIS half caster
- Rogue: Sneak Attack specialist (Arcane Trickster casts)
- Sorcerer: Known-spell CHA caster with sorcery points and metamagic
- Warlock: Pact magic and invocations
- Wizard: Spellbook INT caster
"""

from rpg_rules.classes.class_data import (
    CasterType,
    ClassDefinition,
    ClassFeature,
    HitDie,
    SpellProgression,
    SubclassDefinition,
    level_table_value,
    spell_slots_for,
)
from rpg_rules.classes.class_manager import ClassManager, get_class_manager, reset_class_manager
from rpg_rules.classes.class_strategy import ClassStrategy
from rpg_rules.classes.dispatch import STRATEGY_CLASSES, CharacterClass, build_strategy

__all__ = [
    # Data structures
    "CasterType",
    "ClassDefinition",
    "ClassFeature",
    "HitDie",
    "SpellProgression",
    "SubclassDefinition",
    "level_table_value",
    "spell_slots_for",
    # Manager
    "ClassManager",
    "get_class_manager",
    "reset_class_manager",
    # Rules
    "ClassStrategy",
    "CharacterClass",
    "STRATEGY_CLASSES",
    "build_strategy",
]
