"""
Derived statistics for a character snapshot.

Every method is a pure query: it reads the snapshot and the read-only rules
dataset and returns a number or expression. A lookup that fails (unknown
race, class or item data) degrades to a safe default and logs a warning; no
query here raises for missing data.
"""

import logging
from typing import Any, Optional, Union, TYPE_CHECKING

from rpg_rules.data_models import (
    NOT_APPLICABLE,
    SKILL_ABILITIES,
    Ability,
    ArmorCategory,
    CharacterSnapshot,
    Item,
    ItemSlot,
    Skill,
)
from rpg_rules.errors import MissingReferenceError
from rpg_rules.features.feature_data import MechanicType

if TYPE_CHECKING:
    from rpg_rules.classes.class_strategy import ClassStrategy
    from rpg_rules.content_loader.rules_dataset import RulesDataset

logger = logging.getLogger(__name__)

DEFAULT_SHIELD_BONUS = 2
UNARMORED_BASE_AC = 10
SAFE_DEFAULT_AC = 10

# Step table: level -> proficiency bonus
PROFICIENCY_BONUS_BY_LEVEL: dict[int, int] = {1: 2, 5: 3, 9: 4, 13: 5, 17: 6}


def ability_modifier(score: int) -> int:
    """floor((score - 10) / 2)."""
    return (score - 10) // 2


def proficiency_bonus(level: int) -> int:
    """Proficiency bonus for a character level (clamped to 1-20)."""
    level = max(1, min(level, 20))
    return max(v for lvl, v in PROFICIENCY_BONUS_BY_LEVEL.items() if lvl <= level)


def format_damage(dice: str, modifier: int) -> str:
    """Dice plus a signed modifier, e.g. '1d8+3', '2d6-1', '1d4'."""
    if modifier > 0:
        return f"{dice}+{modifier}"
    if modifier < 0:
        return f"{dice}-{abs(modifier)}"
    return dice


def _ability_key(ability: Union[Ability, str]) -> str:
    return ability.value if isinstance(ability, Ability) else ability


class StatCalculator:
    """
    Stateless calculator of derived character numbers.

    Holds only the read-only dataset and configuration; any snapshot may be
    passed to any method.
    """

    def __init__(
        self,
        dataset: Optional["RulesDataset"] = None,
        default_shield_bonus: int = DEFAULT_SHIELD_BONUS,
    ):
        if dataset is None:
            from rpg_rules.content_loader.rules_dataset import get_rules_dataset

            dataset = get_rules_dataset()
        self.dataset = dataset
        self.default_shield_bonus = default_shield_bonus

    # =========================================================================
    # ABILITIES
    # =========================================================================

    def racial_ability_bonus(self, snapshot: CharacterSnapshot, ability: Union[Ability, str]) -> int:
        """
        Racial bonus to one ability.

        Fixed race and subrace bonuses plus the floating bonus at the index
        the player assigned to this ability; 0 when nothing applies.
        """
        key = _ability_key(ability)
        race = self.dataset.get_race(snapshot.race_key)
        if race is None:
            return 0
        bonus = race.ability_bonuses.get(key, 0)
        subrace = race.get_subrace(snapshot.subrace_key)
        if subrace:
            bonus += subrace.ability_bonuses.get(key, 0)
        index = snapshot.bonus_choices.get(key)
        if index is not None and 0 <= index < len(race.floating_bonuses):
            bonus += race.floating_bonuses[index]
        return bonus

    def effective_score(self, snapshot: CharacterSnapshot, ability: Union[Ability, str]) -> int:
        """Base score plus racial bonuses."""
        return snapshot.ability_score(ability) + self.racial_ability_bonus(snapshot, ability)

    def ability_mod(self, snapshot: CharacterSnapshot, ability: Union[Ability, str]) -> int:
        """Modifier of the effective score."""
        return ability_modifier(self.effective_score(snapshot, ability))

    def ability_modifiers(self, snapshot: CharacterSnapshot) -> dict[str, int]:
        return {a.value: self.ability_mod(snapshot, a) for a in Ability}

    def proficiency_bonus(self, snapshot: CharacterSnapshot) -> int:
        return proficiency_bonus(snapshot.level)

    # =========================================================================
    # ARMOR CLASS
    # =========================================================================

    def shield_bonus(self, snapshot: CharacterSnapshot) -> int:
        """Flat bonus of an off-hand shield, or 0."""
        off_hand = snapshot.equipped(ItemSlot.OFF_HAND)
        if off_hand is None or not off_hand.is_shield:
            return 0
        return off_hand.armor_class or self.default_shield_bonus

    def armor_class(self, snapshot: CharacterSnapshot) -> int:
        """
        Armor class from body armor, DEX, unarmored defense and shield.

        Light armor: base + DEX. Medium: base + min(DEX, 2). Heavy: base.
        No armor: 10 + DEX, or the class's unarmored defense if higher.
        The shield bonus is added on top in every case.
        """
        try:
            dex = self.ability_mod(snapshot, Ability.DEX)
        except (TypeError, ValueError) as e:
            logger.warning(f"Cannot compute AC for {snapshot.name}: {e}")
            return SAFE_DEFAULT_AC

        armor = snapshot.equipped(ItemSlot.ARMOR)
        if armor is not None and armor.armor_category is not None:
            if armor.armor_category == ArmorCategory.LIGHT:
                ac = armor.armor_class + dex
            elif armor.armor_category == ArmorCategory.MEDIUM:
                ac = armor.armor_class + min(dex, 2)
            else:
                ac = armor.armor_class
        else:
            if armor is not None:
                logger.warning(f"Armor slot item {armor.item_key} has no armor category; treating as unarmored")
            ac = UNARMORED_BASE_AC + dex
            strategy = self.strategy_for(snapshot)
            if strategy is not None:
                unarmored = strategy.unarmored_defense()
                if unarmored is not NOT_APPLICABLE:
                    ac = max(ac, unarmored)

        return ac + self.shield_bonus(snapshot)

    # =========================================================================
    # HIT POINTS
    # =========================================================================

    def flat_hp_bonus_per_level(self, snapshot: CharacterSnapshot) -> int:
        """
        HP added per level on top of the hit die.

        Sums racial traits (Dwarven Toughness), feats (Tough) and class
        hooks (Draconic Resilience).
        """
        bonus = 0
        race = self.dataset.get_race(snapshot.race_key)
        if race is not None:
            for trait in race.all_traits(snapshot.subrace_key):
                if trait.mechanic_type == MechanicType.HP_BONUS_PER_LEVEL.value:
                    bonus += int(trait.mechanics.get("value", 0))
        for feat in self._feat_definitions(snapshot):
            if feat.mechanic_type == MechanicType.HP_BONUS_PER_LEVEL:
                bonus += int(feat.mechanics.get("value", 0))
        strategy = self.strategy_for(snapshot)
        if strategy is not None:
            class_bonus = strategy.flat_hp_bonus_per_level()
            if class_bonus is not NOT_APPLICABLE:
                bonus += class_bonus
        return bonus

    def initial_hit_points(self, snapshot: CharacterSnapshot) -> int:
        """Level-1 max HP: hit die size + CON mod + flat per-level bonuses."""
        definition = self.dataset.get_class(snapshot.class_key)
        if definition is None:
            logger.warning(f"Unknown class {snapshot.class_key!r}; hit points default to 0")
            return 0
        con = self.ability_mod(snapshot, Ability.CON)
        return max(1, definition.hit_die.size + con) + self.flat_hp_bonus_per_level(snapshot)

    def hit_points(self, snapshot: CharacterSnapshot) -> int:
        """
        Max HP.

        Level 1 is derived from the hit die; later levels are the accrued
        total of frozen level-up rolls stored on the snapshot.
        """
        if snapshot.level == 1:
            return self.initial_hit_points(snapshot)
        return snapshot.hp_max

    # =========================================================================
    # SKILLS, SAVES, INITIATIVE
    # =========================================================================

    def skill_proficiency_sources(self, snapshot: CharacterSnapshot, skill: Union[Skill, str]) -> set[str]:
        """Which grants make the character proficient in a skill."""
        key = skill.value if isinstance(skill, Skill) else skill
        sources: set[str] = set()

        background = self.dataset.get_background(snapshot.background_key)
        if background and key in {s.value for s in background.skill_proficiencies}:
            sources.add("background")

        race = self.dataset.get_race(snapshot.race_key)
        if race is not None:
            for trait in race.all_traits(snapshot.subrace_key):
                if key in trait.mechanics.get("skills", ()):
                    sources.add("race")

        if key in snapshot.skill_choices:
            sources.add("class")

        for feat in self._feat_definitions(snapshot):
            if feat.mechanic_type == MechanicType.SKILL_CHOICE:
                if key in snapshot.feat_choices.get(feat.key.value, {}).values():
                    sources.add("feat")
        return sources

    def is_proficient(self, snapshot: CharacterSnapshot, skill: Union[Skill, str]) -> bool:
        return bool(self.skill_proficiency_sources(snapshot, skill))

    def skill_bonus(self, snapshot: CharacterSnapshot, skill: Union[Skill, str]) -> int:
        """
        Governing ability modifier plus proficiency when proficient.

        Sources are OR-combined; expertise doubles the proficiency bonus.
        """
        try:
            skill = Skill(skill)
        except ValueError:
            logger.warning(f"Unknown skill {skill!r}")
            return 0
        mod = self.ability_mod(snapshot, SKILL_ABILITIES[skill])
        if not self.is_proficient(snapshot, skill):
            return mod
        bonus = proficiency_bonus(snapshot.level)
        if skill.value in snapshot.expertise:
            bonus *= 2
        return mod + bonus

    def passive_perception(self, snapshot: CharacterSnapshot) -> int:
        return 10 + self.skill_bonus(snapshot, Skill.PERCEPTION)

    def saving_throw_bonus(self, snapshot: CharacterSnapshot, ability: Union[Ability, str]) -> int:
        """Ability modifier, plus proficiency if the class grants the save, plus auras."""
        key = _ability_key(ability)
        bonus = self.ability_mod(snapshot, key)
        strategy = self.strategy_for(snapshot)
        if strategy is None:
            return bonus
        if key in {a.value for a in strategy.saving_throw_proficiencies()}:
            bonus += proficiency_bonus(snapshot.level)
        aura = strategy.aura_save_bonus()
        if aura is not NOT_APPLICABLE:
            bonus += aura
        return bonus

    def initiative_bonus(self, snapshot: CharacterSnapshot) -> int:
        """DEX modifier plus feat initiative bonuses (Alert)."""
        bonus = self.ability_mod(snapshot, Ability.DEX)
        for feat in self._feat_definitions(snapshot):
            if feat.mechanic_type == MechanicType.INITIATIVE_BONUS:
                value = feat.mechanics.get("value", 0)
                bonus += proficiency_bonus(snapshot.level) if value == "proficiency_bonus" else int(value)
        return bonus

    # =========================================================================
    # WEAPONS
    # =========================================================================

    def attack_ability_modifier(self, snapshot: CharacterSnapshot, weapon: Optional[Item]) -> int:
        """STR for melee, DEX for ranged, the better of the two for finesse."""
        str_mod = self.ability_mod(snapshot, Ability.STR)
        dex_mod = self.ability_mod(snapshot, Ability.DEX)
        if weapon is None:
            return str_mod
        if weapon.has_property("finesse"):
            return max(str_mod, dex_mod)
        if weapon.has_property("ranged"):
            return dex_mod
        return str_mod

    def weapon_attack_bonus(self, snapshot: CharacterSnapshot) -> int:
        weapon = snapshot.equipped(ItemSlot.MAIN_HAND)
        return self.attack_ability_modifier(snapshot, weapon) + proficiency_bonus(snapshot.level)

    def melee_damage_expression(self, snapshot: CharacterSnapshot) -> str:
        """
        Main-hand damage as a dice expression.

        Versatile weapons toggled two-handed use their two-handed dice.
        Unarmed strikes deal 1 + STR mod unless the class (martial arts) or
        a feat (Tavern Brawler) supplies an unarmed die.
        """
        weapon = snapshot.equipped(ItemSlot.MAIN_HAND)
        if weapon is not None and weapon.is_weapon and weapon.damage_dice:
            dice = weapon.damage_dice
            if snapshot.main_hand_two_handed and weapon.is_versatile:
                dice = weapon.versatile_dice
            return format_damage(dice, self.attack_ability_modifier(snapshot, weapon))

        str_mod = self.ability_mod(snapshot, Ability.STR)
        strategy = self.strategy_for(snapshot)
        if strategy is not None:
            class_die = strategy.unarmed_damage_die()
            if class_die is not NOT_APPLICABLE:
                dex_mod = self.ability_mod(snapshot, Ability.DEX)
                return format_damage(class_die, max(str_mod, dex_mod))
        for feat in self._feat_definitions(snapshot):
            if feat.mechanic_type == MechanicType.UNARMED_UPGRADE:
                return format_damage(feat.mechanics.get("damage_dice", "1d4"), str_mod)
        return str(1 + str_mod)

    def carried_weight(self, snapshot: CharacterSnapshot) -> float:
        equipped = sum(item.weight for item in snapshot.equipment.values() if item)
        carried = sum(stack.item.weight * stack.quantity for stack in snapshot.inventory)
        return equipped + carried

    # =========================================================================
    # HELPERS
    # =========================================================================

    def strategy_for(self, snapshot: CharacterSnapshot) -> Optional["ClassStrategy"]:
        """Build the class strategy, or None when the class does not resolve."""
        from rpg_rules.classes.dispatch import build_strategy

        try:
            return build_strategy(snapshot, self.dataset, self)
        except MissingReferenceError as e:
            logger.warning(f"No class rules for {snapshot.name}: {e}")
            return None

    def _feat_definitions(self, snapshot: CharacterSnapshot) -> list:
        definitions = []
        for key in snapshot.feats:
            definition = self.dataset.get_feature(key)
            if definition is None:
                logger.warning(f"Unknown feat {key!r} on {snapshot.name}; ignoring")
                continue
            definitions.append(definition)
        return definitions

    def summary(self, snapshot: CharacterSnapshot) -> dict[str, Any]:
        """Every derived number a character sheet shows."""
        return {
            "abilities": {a.value: self.effective_score(snapshot, a) for a in Ability},
            "modifiers": self.ability_modifiers(snapshot),
            "proficiency_bonus": proficiency_bonus(snapshot.level),
            "armor_class": self.armor_class(snapshot),
            "hit_points": self.hit_points(snapshot),
            "initiative": self.initiative_bonus(snapshot),
            "passive_perception": self.passive_perception(snapshot),
            "melee_damage": self.melee_damage_expression(snapshot),
            "saving_throws": {a.value: self.saving_throw_bonus(snapshot, a) for a in Ability},
            "skills": {s.value: self.skill_bonus(snapshot, s) for s in Skill},
        }
