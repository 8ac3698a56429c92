"""Character finalization: turning creation selections into a level-1 snapshot."""

from rpg_rules.character.builder import CharacterBuilder

__all__ = ["CharacterBuilder"]
