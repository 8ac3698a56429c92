"""
Spell data structures.

A spell declares a list of effects. Damage effects name their dice, how they
land (attack roll, saving throw or automatically) and how they scale:
cantrips by character-level breakpoints, leveled spells by extra dice per
slot level above the spell's own.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


# =============================================================================
# ENUMS
# =============================================================================


class SpellSchool(str, Enum):
    """Schools of magic."""
    ABJURATION = "abjuration"
    CONJURATION = "conjuration"
    DIVINATION = "divination"
    ENCHANTMENT = "enchantment"
    EVOCATION = "evocation"
    ILLUSION = "illusion"
    NECROMANCY = "necromancy"
    TRANSMUTATION = "transmutation"


class EffectType(str, Enum):
    """What a spell effect does."""
    DAMAGE = "damage"
    HEALING = "healing"
    CONDITION = "condition"
    UTILITY = "utility"


class ResolutionType(str, Enum):
    """How an effect lands on a target."""
    ATTACK = "attack"   # Spell attack roll vs AC
    SAVE = "save"       # Target saving throw vs spell save DC
    AUTO = "auto"       # Always lands (magic missile)


class SaveOutcome(str, Enum):
    """Damage a target takes when it succeeds on its save."""
    HALF = "half"
    NONE = "none"


class ScalingType(str, Enum):
    """How an effect grows."""
    CANTRIP = "cantrip"                 # Dice replaced at character-level breakpoints
    PER_SLOT_LEVEL = "per_slot_level"   # Extra dice per slot level above the spell's


# =============================================================================
# SPELL DATA CLASSES
# =============================================================================


@dataclass
class SpellScaling:
    """
    Scaling rule of one effect.

    Examples:
    - Fire Bolt: CANTRIP, dice_at_levels={5: "2d10", 11: "3d10", 17: "4d10"}
    - Fireball: PER_SLOT_LEVEL, increase_dice="1d6"
    """
    scaling_type: ScalingType
    dice_at_levels: dict[int, str] = field(default_factory=dict)
    increase_dice: Optional[str] = None

    def dice_for_character_level(self, base_dice: str, character_level: int) -> str:
        """Cantrip dice at the highest breakpoint reached."""
        reached = [lvl for lvl in self.dice_at_levels if lvl <= character_level]
        if not reached:
            return base_dice
        return self.dice_at_levels[max(reached)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.scaling_type.value,
            "dice_at_levels": {str(k): v for k, v in self.dice_at_levels.items()},
            "increase_dice": self.increase_dice,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpellScaling":
        return cls(
            scaling_type=ScalingType(data["type"]),
            dice_at_levels={int(k): v for k, v in data.get("dice_at_levels", {}).items()},
            increase_dice=data.get("increase_dice"),
        )


@dataclass
class SpellEffect:
    """One declared effect of a spell."""
    effect_type: EffectType
    dice: Optional[str] = None
    damage_type: Optional[str] = None
    resolution: ResolutionType = ResolutionType.AUTO
    save_ability: Optional[str] = None
    on_save: SaveOutcome = SaveOutcome.HALF
    scaling: Optional[SpellScaling] = None
    condition: Optional[str] = None

    @property
    def is_damage(self) -> bool:
        return self.effect_type == EffectType.DAMAGE and bool(self.dice)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.effect_type.value,
            "dice": self.dice,
            "damage_type": self.damage_type,
            "resolution": self.resolution.value,
            "save_ability": self.save_ability,
            "on_save": self.on_save.value,
            "scaling": self.scaling.to_dict() if self.scaling else None,
            "condition": self.condition,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpellEffect":
        scaling = data.get("scaling")
        return cls(
            effect_type=EffectType(data["type"]),
            dice=data.get("dice"),
            damage_type=data.get("damage_type"),
            resolution=ResolutionType(data.get("resolution", ResolutionType.AUTO.value)),
            save_ability=data.get("save_ability"),
            on_save=SaveOutcome(data.get("on_save", SaveOutcome.HALF.value)),
            scaling=SpellScaling.from_dict(scaling) if scaling else None,
            condition=data.get("condition"),
        )


@dataclass
class SpellData:
    """
    A spell definition.

    Attributes:
        key: Unique identifier (e.g., "fireball")
        name: Display name
        level: 0 for cantrips, 1-9 otherwise
        school: School of magic
        classes: Class keys whose spell list includes this spell
        effects: Declared effects, resolved in order
        concentration: Whether the spell needs concentration
    """
    key: str
    name: str
    level: int
    school: SpellSchool
    classes: list[str] = field(default_factory=list)
    effects: list[SpellEffect] = field(default_factory=list)
    concentration: bool = False
    ritual: bool = False
    description: str = ""

    @property
    def is_cantrip(self) -> bool:
        return self.level == 0

    @property
    def is_healing(self) -> bool:
        return any(e.effect_type == EffectType.HEALING for e in self.effects)

    @property
    def damage_effects(self) -> list[SpellEffect]:
        return [e for e in self.effects if e.is_damage]

    @property
    def primary_damage_type(self) -> Optional[str]:
        """Damage type of the first damage effect."""
        for effect in self.damage_effects:
            if effect.damage_type:
                return effect.damage_type
        return None

    def available_to(self, class_key: str) -> bool:
        return class_key in self.classes

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "level": self.level,
            "school": self.school.value,
            "classes": list(self.classes),
            "effects": [e.to_dict() for e in self.effects],
            "concentration": self.concentration,
            "ritual": self.ritual,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpellData":
        """
        Create from a JSON entry.

        Raises:
            KeyError: If key, level or school is missing
            ValueError: If an enum value or the level is invalid
        """
        level = int(data["level"])
        if not 0 <= level <= 9:
            raise ValueError(f"Spell level must be 0-9, got {level}")
        return cls(
            key=data["key"],
            name=data.get("name", data["key"]),
            level=level,
            school=SpellSchool(data["school"]),
            classes=list(data.get("classes", [])),
            effects=[SpellEffect.from_dict(e) for e in data.get("effects", [])],
            concentration=bool(data.get("concentration", False)),
            ritual=bool(data.get("ritual", False)),
            description=data.get("description", ""),
        )
