"""
rpg_rules - a tabletop-RPG character rules engine.

Derives numeric capabilities from a character snapshot, encapsulates the
per-class special rules behind one strategy contract, and drives level-up as
a validated state machine. See rpg_rules.main.RulesEngine for the facade.
"""

__version__ = "0.1.0"
