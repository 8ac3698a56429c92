"""
Shared data structures for the rules engine.

Every structure here is a value: snapshot transforms build a new
CharacterSnapshot instead of mutating the old one, so a presentation layer can
hold any snapshot for as long as it likes.
"""

from collections import deque
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union, TYPE_CHECKING
import random
import re
import uuid

from rpg_rules.observability.run_log import MAX_EVENTS, get_run_log

if TYPE_CHECKING:
    from rpg_rules.resources.resource_pool import ResourcePool


# =============================================================================
# ENUMS
# =============================================================================


class Ability(str, Enum):
    """The six ability scores."""
    STR = "str"
    DEX = "dex"
    CON = "con"
    INT = "int"
    WIS = "wis"
    CHA = "cha"


class Skill(str, Enum):
    """Skills, each governed by one ability (see SKILL_ABILITIES)."""
    ACROBATICS = "acrobatics"
    ANIMAL_HANDLING = "animal_handling"
    ARCANA = "arcana"
    ATHLETICS = "athletics"
    DECEPTION = "deception"
    HISTORY = "history"
    INSIGHT = "insight"
    INTIMIDATION = "intimidation"
    INVESTIGATION = "investigation"
    MEDICINE = "medicine"
    NATURE = "nature"
    PERCEPTION = "perception"
    PERFORMANCE = "performance"
    PERSUASION = "persuasion"
    RELIGION = "religion"
    SLEIGHT_OF_HAND = "sleight_of_hand"
    STEALTH = "stealth"
    SURVIVAL = "survival"


SKILL_ABILITIES: dict[Skill, Ability] = {
    Skill.ACROBATICS: Ability.DEX,
    Skill.ANIMAL_HANDLING: Ability.WIS,
    Skill.ARCANA: Ability.INT,
    Skill.ATHLETICS: Ability.STR,
    Skill.DECEPTION: Ability.CHA,
    Skill.HISTORY: Ability.INT,
    Skill.INSIGHT: Ability.WIS,
    Skill.INTIMIDATION: Ability.CHA,
    Skill.INVESTIGATION: Ability.INT,
    Skill.MEDICINE: Ability.WIS,
    Skill.NATURE: Ability.INT,
    Skill.PERCEPTION: Ability.WIS,
    Skill.PERFORMANCE: Ability.CHA,
    Skill.PERSUASION: Ability.CHA,
    Skill.RELIGION: Ability.INT,
    Skill.SLEIGHT_OF_HAND: Ability.DEX,
    Skill.STEALTH: Ability.DEX,
    Skill.SURVIVAL: Ability.WIS,
}


class ItemSlot(str, Enum):
    """Equipment slots."""
    MAIN_HAND = "main_hand"
    OFF_HAND = "off_hand"
    ARMOR = "armor"
    HEAD = "head"
    HANDS = "hands"
    FEET = "feet"
    NECK = "neck"
    RING = "ring"
    CLOAK = "cloak"


class ItemType(str, Enum):
    """Broad item categories."""
    WEAPON = "weapon"
    ARMOR = "armor"
    SHIELD = "shield"
    ACCESSORY = "accessory"
    GEAR = "gear"


class ArmorCategory(str, Enum):
    """Body armor weight classes; governs how DEX applies to AC."""
    LIGHT = "light"     # base + DEX
    MEDIUM = "medium"   # base + min(DEX, 2)
    HEAVY = "heavy"     # base only


class RestType(str, Enum):
    """Kinds of rest."""
    SHORT = "short_rest"
    LONG = "long_rest"


class RechargeRule(str, Enum):
    """Which rests refill a resource pool."""
    SHORT_REST = "short_rest"
    LONG_REST = "long_rest"
    BOTH = "both"


class SpellQuantityModel(str, Enum):
    """How a caster's spell list size is determined."""
    KNOWN = "known"             # Flat per-level table (Bard, Sorcerer, Warlock, Ranger)
    PREPARED = "prepared"       # max(1, mod + level) from the whole class list
    SPELLBOOK = "spellbook"     # Wizard: prepared count, drawn from the spellbook


class _NotApplicable:
    """
    Sentinel returned when a class capability does not apply.

    Falsy, so `if strategy.spell_save_dc():` reads naturally, but distinct from
    0 and None so callers can tell "no such capability" from "zero".
    """

    _instance: Optional["_NotApplicable"] = None

    def __new__(cls) -> "_NotApplicable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_APPLICABLE"

    def __reduce__(self):
        return (_NotApplicable, ())


NOT_APPLICABLE = _NotApplicable()


# =============================================================================
# DICE
# =============================================================================


_DICE_PATTERN = re.compile(r"^\s*(\d*)\s*[dD]\s*(\d+)\s*(?:([+-])\s*(\d+))?\s*$")


@dataclass(frozen=True)
class DiceFormula:
    """
    A parsed dice expression such as '2d6+3'.

    Used wherever data declares dice (hit dice, weapon damage, spell damage).
    """
    num_dice: int
    die_size: int
    modifier: int = 0

    @classmethod
    def parse(cls, notation: str) -> "DiceFormula":
        """
        Parse standard notation ('1d8', 'd20', '2d6+1', '1d10-1').

        Raises:
            ValueError: If the notation is not a dice expression
        """
        match = _DICE_PATTERN.match(notation or "")
        if not match:
            raise ValueError(f"Invalid dice notation: {notation!r}")
        count, size, sign, mod = match.groups()
        modifier = int(mod) if mod else 0
        if sign == "-":
            modifier = -modifier
        return cls(num_dice=int(count) if count else 1, die_size=int(size), modifier=modifier)

    @property
    def dice(self) -> str:
        """The dice part alone, e.g. '2d6'."""
        return f"{self.num_dice}d{self.die_size}"

    def with_additional_dice(self, extra: int) -> "DiceFormula":
        """Return a formula with `extra` more dice of the same size."""
        return replace(self, num_dice=max(0, self.num_dice + extra))

    def with_modifier(self, modifier: int) -> "DiceFormula":
        return replace(self, modifier=modifier)

    def average(self) -> float:
        return self.num_dice * (self.die_size + 1) / 2 + self.modifier

    def __str__(self) -> str:
        if self.modifier > 0:
            return f"{self.dice}+{self.modifier}"
        if self.modifier < 0:
            return f"{self.dice}-{abs(self.modifier)}"
        return self.dice


class DiceRoller:
    """
    Centralized randomization interface.
    All dice rolls must go through this class for reproducibility and logging.
    """

    _instance = None
    _seed: Optional[int] = None
    _roll_log: deque = deque(maxlen=MAX_EVENTS)  # Oldest rolls drop off

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def set_seed(cls, seed: int) -> None:
        """Set random seed for reproducibility."""
        cls._seed = seed
        random.seed(seed)
        get_run_log().set_seed(seed)

    @classmethod
    def roll(cls, dice: str, reason: str = "") -> "DiceResult":
        """
        Roll dice using standard notation (e.g., '2d6', '1d20+5', '3d6-2').

        Args:
            dice: Dice notation string
            reason: Why this roll is being made (for logging)

        Returns:
            DiceResult with individual rolls and total
        """
        formula = DiceFormula.parse(dice)
        rolls = [random.randint(1, formula.die_size) for _ in range(formula.num_dice)]
        total = sum(rolls) + formula.modifier

        result = DiceResult(
            notation=dice,
            rolls=rolls,
            modifier=formula.modifier,
            total=total,
            reason=reason,
        )

        cls._roll_log.append(result)
        get_run_log().log_roll(
            notation=dice,
            rolls=rolls,
            modifier=formula.modifier,
            total=total,
            reason=reason,
        )
        return result

    @classmethod
    def roll_formula(cls, formula: DiceFormula, reason: str = "") -> "DiceResult":
        """Roll an already-parsed formula."""
        return cls.roll(str(formula), reason)

    @classmethod
    def roll_d20(cls, reason: str = "") -> "DiceResult":
        """Convenience method for d20 rolls."""
        return cls.roll("1d20", reason)

    @classmethod
    def get_roll_log(cls) -> list:
        """Get the rolls kept for the session, oldest first."""
        return list(cls._roll_log)

    @classmethod
    def clear_roll_log(cls) -> None:
        """Clear the roll log."""
        cls._roll_log.clear()


@dataclass
class DiceResult:
    """Result of a dice roll with full information."""
    notation: str
    rolls: list[int]
    modifier: int
    total: int
    reason: str
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def natural(self) -> int:
        """The first die as rolled; meaningful for single d20 rolls."""
        return self.rolls[0] if self.rolls else 0

    def __str__(self) -> str:
        if self.modifier > 0:
            return f"{self.notation}: {self.rolls} + {self.modifier} = {self.total}"
        elif self.modifier < 0:
            return f"{self.notation}: {self.rolls} - {abs(self.modifier)} = {self.total}"
        return f"{self.notation}: {self.rolls} = {self.total}"


# =============================================================================
# ITEMS
# =============================================================================


@dataclass(frozen=True)
class Item:
    """
    An item definition as carried by a character.

    Equipped items and inventory stacks hold full Item values (not keys), so
    the calculator can read damage and armor numbers without a dataset lookup.
    """
    item_key: str
    name: str
    item_type: ItemType = ItemType.GEAR
    slot: Optional[ItemSlot] = None     # Slot-compatibility tag for non-weapons
    weight: float = 0.0

    # Weapons
    damage_dice: Optional[str] = None
    versatile_dice: Optional[str] = None    # Two-handed dice for "versatile" weapons
    damage_type: Optional[str] = None
    mastery: Optional[str] = None           # Weapon-mastery property, e.g. "sap"

    # Armor and shields
    armor_category: Optional[ArmorCategory] = None
    armor_class: int = 0                    # Base AC for armor, flat bonus for shields

    properties: tuple[str, ...] = ()
    stackable: bool = False

    def has_property(self, tag: str) -> bool:
        return tag in self.properties

    @property
    def is_weapon(self) -> bool:
        return self.item_type == ItemType.WEAPON

    @property
    def is_shield(self) -> bool:
        return self.item_type == ItemType.SHIELD

    @property
    def is_two_handed(self) -> bool:
        return self.has_property("two-handed")

    @property
    def is_versatile(self) -> bool:
        return self.has_property("versatile") and bool(self.versatile_dice)

    def compatible_slots(self) -> tuple[ItemSlot, ...]:
        """Slots this item may be equipped into."""
        if self.is_weapon:
            if self.has_property("light"):
                return (ItemSlot.MAIN_HAND, ItemSlot.OFF_HAND)
            return (ItemSlot.MAIN_HAND,)
        if self.is_shield:
            return (ItemSlot.OFF_HAND,)
        if self.item_type == ItemType.ARMOR:
            return (ItemSlot.ARMOR,)
        return (self.slot,) if self.slot else ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "item_key": self.item_key,
            "name": self.name,
            "item_type": self.item_type.value,
            "slot": self.slot.value if self.slot else None,
            "weight": self.weight,
            "damage_dice": self.damage_dice,
            "versatile_dice": self.versatile_dice,
            "damage_type": self.damage_type,
            "mastery": self.mastery,
            "armor_category": self.armor_category.value if self.armor_category else None,
            "armor_class": self.armor_class,
            "properties": list(self.properties),
            "stackable": self.stackable,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        """Create from dictionary (also the catalog's JSON entry shape)."""
        slot = data.get("slot")
        category = data.get("armor_category")
        return cls(
            item_key=data["item_key"],
            name=data.get("name", data["item_key"]),
            item_type=ItemType(data.get("item_type", ItemType.GEAR.value)),
            slot=ItemSlot(slot) if slot else None,
            weight=float(data.get("weight", 0.0)),
            damage_dice=data.get("damage_dice"),
            versatile_dice=data.get("versatile_dice"),
            damage_type=data.get("damage_type"),
            mastery=data.get("mastery"),
            armor_category=ArmorCategory(category) if category else None,
            armor_class=int(data.get("armor_class", 0)),
            properties=tuple(data.get("properties", ())),
            stackable=bool(data.get("stackable", False)),
        )


@dataclass(frozen=True)
class InventoryStack:
    """A quantity of one item in the inventory."""
    item: Item
    quantity: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {"item": self.item.to_dict(), "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InventoryStack":
        return cls(item=Item.from_dict(data["item"]), quantity=data.get("quantity", 1))


# =============================================================================
# PROGRESSION VALUES
# =============================================================================


@dataclass(frozen=True)
class HpRoll:
    """
    A frozen hit-point roll for one level gained.

    The constant components (CON modifier, flat per-level bonus) are captured
    when the roll is made so a later ability change cannot alter it.
    """
    die_size: int
    dice: tuple[int, ...]
    con_modifier: int = 0
    flat_bonus: int = 0     # Racial/feat/class per-level HP bonus

    @property
    def total(self) -> int:
        """Die result plus CON modifier; a level never grants less than 1."""
        return max(1, sum(self.dice) + self.con_modifier)

    @property
    def hp_gained(self) -> int:
        return self.total + self.flat_bonus

    def to_dict(self) -> dict[str, Any]:
        return {
            "die_size": self.die_size,
            "dice": list(self.dice),
            "con_modifier": self.con_modifier,
            "flat_bonus": self.flat_bonus,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HpRoll":
        return cls(
            die_size=data["die_size"],
            dice=tuple(data.get("dice", ())),
            con_modifier=data.get("con_modifier", 0),
            flat_bonus=data.get("flat_bonus", 0),
        )


@dataclass(frozen=True)
class PendingLevelUp:
    """
    The decisions needed to advance one level.

    Computed when experience crosses the next threshold; cleared on commit.
    """
    target_level: int
    hit_die: int
    hp_roll_formula: str
    ability_score_improvement: bool = False
    subclass_choice: bool = False
    new_cantrips: int = 0
    new_spells: int = 0
    spell_swap_allowed: bool = False
    max_spell_level: int = 0
    # Subclasses that start casting at this level: key -> (cantrips, spells)
    subclass_spell_counts: dict[str, tuple[int, int]] = field(default_factory=dict)
    new_weapon_masteries: int = 0
    weapon_mastery_total: int = 0
    new_invocations: int = 0
    invocation_total: int = 0
    invocation_swap_allowed: bool = False
    mystic_arcanum_level: int = 0          # Spell level of the arcanum picked this level
    features_gained: tuple[str, ...] = ()

    @property
    def has_spell_step(self) -> bool:
        return bool(
            self.new_cantrips
            or self.new_spells
            or self.spell_swap_allowed
            or any(c or s for c, s in self.subclass_spell_counts.values())
        )

    @property
    def has_invocation_step(self) -> bool:
        return bool(self.new_invocations or self.invocation_swap_allowed)

    def spell_counts_for(self, subclass_key: Optional[str]) -> tuple[int, int]:
        """(cantrips, spells) to choose, given the subclass picked this level."""
        extra = self.subclass_spell_counts.get(subclass_key or "", (0, 0))
        return self.new_cantrips + extra[0], self.new_spells + extra[1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_level": self.target_level,
            "hit_die": self.hit_die,
            "hp_roll_formula": self.hp_roll_formula,
            "ability_score_improvement": self.ability_score_improvement,
            "subclass_choice": self.subclass_choice,
            "new_cantrips": self.new_cantrips,
            "new_spells": self.new_spells,
            "spell_swap_allowed": self.spell_swap_allowed,
            "max_spell_level": self.max_spell_level,
            "subclass_spell_counts": {k: list(v) for k, v in self.subclass_spell_counts.items()},
            "new_weapon_masteries": self.new_weapon_masteries,
            "weapon_mastery_total": self.weapon_mastery_total,
            "new_invocations": self.new_invocations,
            "invocation_total": self.invocation_total,
            "invocation_swap_allowed": self.invocation_swap_allowed,
            "mystic_arcanum_level": self.mystic_arcanum_level,
            "features_gained": list(self.features_gained),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PendingLevelUp":
        return cls(
            target_level=data["target_level"],
            hit_die=data["hit_die"],
            hp_roll_formula=data["hp_roll_formula"],
            ability_score_improvement=data.get("ability_score_improvement", False),
            subclass_choice=data.get("subclass_choice", False),
            new_cantrips=data.get("new_cantrips", 0),
            new_spells=data.get("new_spells", 0),
            spell_swap_allowed=data.get("spell_swap_allowed", False),
            max_spell_level=data.get("max_spell_level", 0),
            subclass_spell_counts={
                k: (v[0], v[1]) for k, v in data.get("subclass_spell_counts", {}).items()
            },
            new_weapon_masteries=data.get("new_weapon_masteries", 0),
            weapon_mastery_total=data.get("weapon_mastery_total", 0),
            new_invocations=data.get("new_invocations", 0),
            invocation_total=data.get("invocation_total", 0),
            invocation_swap_allowed=data.get("invocation_swap_allowed", False),
            mystic_arcanum_level=data.get("mystic_arcanum_level", 0),
            features_gained=tuple(data.get("features_gained", ())),
        )


# =============================================================================
# CHARACTER SNAPSHOT
# =============================================================================


def _new_character_id() -> str:
    return str(uuid.uuid4())[:8]


@dataclass(frozen=True)
class CharacterSnapshot:
    """
    Immutable description of one character at one moment.

    Ability scores are the BASE scores (including level-up improvements);
    racial bonuses are applied on read by the StatCalculator. Keyed collections
    use the plain string values of the enums so a snapshot serializes cleanly.
    """
    name: str
    class_key: str
    race_key: str
    abilities: dict[str, int]

    level: int = 1
    experience: int = 0

    subrace_key: Optional[str] = None
    bonus_choices: dict[str, int] = field(default_factory=dict)  # ability -> index into race floating list
    subclass_key: Optional[str] = None
    background_key: Optional[str] = None

    hp_max: int = 0
    hp_current: int = 0

    equipment: dict[str, Optional[Item]] = field(default_factory=dict)  # slot -> item
    main_hand_two_handed: bool = False  # Versatile weapon held in both hands
    inventory: tuple[InventoryStack, ...] = ()

    cantrips_known: tuple[str, ...] = ()
    spells_known: tuple[str, ...] = ()
    spells_prepared: tuple[str, ...] = ()
    spellbook: tuple[str, ...] = ()
    mystic_arcanum: tuple[str, ...] = ()    # One spell per arcanum level, cast without a slot

    features: tuple[str, ...] = ()     # Acquisition order
    feats: tuple[str, ...] = ()
    feat_choices: dict[str, dict[str, Any]] = field(default_factory=dict)
    skill_choices: tuple[str, ...] = ()
    expertise: tuple[str, ...] = ()
    weapon_masteries: tuple[str, ...] = ()
    draconic_ancestry: Optional[str] = None     # Damage type, e.g. "fire"

    resources: dict[str, "ResourcePool"] = field(default_factory=dict)
    pending_level_up: Optional[PendingLevelUp] = None

    character_id: str = field(default_factory=_new_character_id)

    def __post_init__(self):
        if not 1 <= self.level <= 20:
            raise ValueError(f"Level must be 1-20, got {self.level}")
        if self.experience < 0:
            raise ValueError(f"Experience cannot be negative, got {self.experience}")

    def ability_score(self, ability: Union[Ability, str]) -> int:
        """Base score for an ability (10 if absent)."""
        key = ability.value if isinstance(ability, Ability) else ability
        return self.abilities.get(key, 10)

    def has_feature(self, feature_key: Any) -> bool:
        """Whether a feature key (typed or plain string) has been acquired."""
        key = getattr(feature_key, "value", feature_key)
        return key in self.features or key in self.feats

    def equipped(self, slot: Union[ItemSlot, str]) -> Optional[Item]:
        key = slot.value if isinstance(slot, ItemSlot) else slot
        return self.equipment.get(key)

    def all_spells(self) -> set[str]:
        """Every spell the character has in any list."""
        return (
            set(self.cantrips_known)
            | set(self.spells_known)
            | set(self.spells_prepared)
            | set(self.spellbook)
            | set(self.mystic_arcanum)
        )

    def evolve(self, **changes: Any) -> "CharacterSnapshot":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "character_id": self.character_id,
            "name": self.name,
            "class_key": self.class_key,
            "race_key": self.race_key,
            "abilities": dict(self.abilities),
            "level": self.level,
            "experience": self.experience,
            "subrace_key": self.subrace_key,
            "bonus_choices": dict(self.bonus_choices),
            "subclass_key": self.subclass_key,
            "background_key": self.background_key,
            "hp_max": self.hp_max,
            "hp_current": self.hp_current,
            "equipment": {
                slot: item.to_dict() if item else None for slot, item in self.equipment.items()
            },
            "main_hand_two_handed": self.main_hand_two_handed,
            "inventory": [stack.to_dict() for stack in self.inventory],
            "cantrips_known": list(self.cantrips_known),
            "spells_known": list(self.spells_known),
            "spells_prepared": list(self.spells_prepared),
            "spellbook": list(self.spellbook),
            "mystic_arcanum": list(self.mystic_arcanum),
            "features": list(self.features),
            "feats": list(self.feats),
            "feat_choices": {k: dict(v) for k, v in self.feat_choices.items()},
            "skill_choices": list(self.skill_choices),
            "expertise": list(self.expertise),
            "weapon_masteries": list(self.weapon_masteries),
            "draconic_ancestry": self.draconic_ancestry,
            "resources": {key: pool.to_dict() for key, pool in self.resources.items()},
            "pending_level_up": (
                self.pending_level_up.to_dict() if self.pending_level_up else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CharacterSnapshot":
        """Create from dictionary."""
        from rpg_rules.resources.resource_pool import ResourcePool

        pending = data.get("pending_level_up")
        return cls(
            character_id=data.get("character_id") or _new_character_id(),
            name=data["name"],
            class_key=data["class_key"],
            race_key=data["race_key"],
            abilities=dict(data.get("abilities", {})),
            level=data.get("level", 1),
            experience=data.get("experience", 0),
            subrace_key=data.get("subrace_key"),
            bonus_choices=dict(data.get("bonus_choices", {})),
            subclass_key=data.get("subclass_key"),
            background_key=data.get("background_key"),
            hp_max=data.get("hp_max", 0),
            hp_current=data.get("hp_current", 0),
            equipment={
                slot: Item.from_dict(item) if item else None
                for slot, item in data.get("equipment", {}).items()
            },
            main_hand_two_handed=data.get("main_hand_two_handed", False),
            inventory=tuple(InventoryStack.from_dict(s) for s in data.get("inventory", [])),
            cantrips_known=tuple(data.get("cantrips_known", ())),
            spells_known=tuple(data.get("spells_known", ())),
            spells_prepared=tuple(data.get("spells_prepared", ())),
            spellbook=tuple(data.get("spellbook", ())),
            mystic_arcanum=tuple(data.get("mystic_arcanum", ())),
            features=tuple(data.get("features", ())),
            feats=tuple(data.get("feats", ())),
            feat_choices={k: dict(v) for k, v in data.get("feat_choices", {}).items()},
            skill_choices=tuple(data.get("skill_choices", ())),
            expertise=tuple(data.get("expertise", ())),
            weapon_masteries=tuple(data.get("weapon_masteries", ())),
            draconic_ancestry=data.get("draconic_ancestry"),
            resources={
                key: ResourcePool.from_dict(pool) for key, pool in data.get("resources", {}).items()
            },
            pending_level_up=PendingLevelUp.from_dict(pending) if pending else None,
        )
