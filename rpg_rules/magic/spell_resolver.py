"""
Spell resolution engine.

Resolves a spell's damage effects against a list of targets:

1. Scale the dice: cantrips by the caster's character level, leveled spells
   by extra dice per slot level above the spell's own.
2. Land the effect on each target separately: a spell attack roll against
   AC (natural 20 doubles the dice, natural 1 misses), a saving throw
   against the caster's spell save DC, or automatically.
3. Roll damage per target and apply the save outcome (half or none).
4. Add the caster's class bonus hooks once per target, and only to damage
   that is still above 0.

Healing, condition and utility effects are reported as unresolved.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, TYPE_CHECKING

from rpg_rules.data_models import NOT_APPLICABLE, CharacterSnapshot, DiceFormula, DiceRoller
from rpg_rules.errors import MissingReferenceError
from rpg_rules.magic.spell_data import ResolutionType, SaveOutcome, ScalingType, SpellData, SpellEffect
from rpg_rules.stats.stat_calculator import proficiency_bonus

if TYPE_CHECKING:
    from rpg_rules.classes.class_strategy import ClassStrategy
    from rpg_rules.content_loader.rules_dataset import RulesDataset
    from rpg_rules.stats.stat_calculator import StatCalculator

logger = logging.getLogger(__name__)

MAX_SLOT_LEVEL = 9


# =============================================================================
# RESULT DATACLASSES
# =============================================================================


@dataclass
class SpellTarget:
    """A creature a spell is aimed at."""
    target_id: str
    armor_class: int = 10
    save_bonuses: dict[str, int] = field(default_factory=dict)
    creature_type: str = "humanoid"

    def save_bonus(self, ability: Optional[str]) -> int:
        if ability is None:
            return 0
        return self.save_bonuses.get(ability, 0)


@dataclass
class TargetResolution:
    """How one damage effect landed on one target."""
    target_id: str
    effect_index: int
    damage_type: Optional[str]
    damage_dice: str
    hit: bool = True
    critical: bool = False
    saved: Optional[bool] = None
    attack_roll: Optional[int] = None
    save_roll: Optional[int] = None
    damage_rolled: int = 0
    bonuses: list[tuple[str, int]] = field(default_factory=list)
    damage: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_id": self.target_id,
            "effect_index": self.effect_index,
            "damage_type": self.damage_type,
            "damage_dice": self.damage_dice,
            "hit": self.hit,
            "critical": self.critical,
            "saved": self.saved,
            "attack_roll": self.attack_roll,
            "save_roll": self.save_roll,
            "damage_rolled": self.damage_rolled,
            "bonuses": [list(b) for b in self.bonuses],
            "damage": self.damage,
        }


@dataclass
class SpellCastResult:
    """Result of attempting to cast a spell."""
    success: bool
    spell_key: str
    spell_name: str = ""
    cast_level: int = 0
    reason: str = ""
    resolutions: list[TargetResolution] = field(default_factory=list)
    unresolved_effects: list[str] = field(default_factory=list)

    @property
    def damage_by_target(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for resolution in self.resolutions:
            totals[resolution.target_id] = totals.get(resolution.target_id, 0) + resolution.damage
        return totals

    def total_damage(self, target_id: str) -> int:
        return self.damage_by_target.get(target_id, 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "spell_key": self.spell_key,
            "spell_name": self.spell_name,
            "cast_level": self.cast_level,
            "reason": self.reason,
            "resolutions": [r.to_dict() for r in self.resolutions],
            "unresolved_effects": list(self.unresolved_effects),
        }


# =============================================================================
# ENGINE
# =============================================================================


class SpellResolutionEngine:
    """
    Resolves spell effects for a caster against targets.

    Stateless apart from the read-only dataset: the caster's strategy is
    built from the snapshot on every cast.
    """

    def __init__(
        self,
        dataset: Optional["RulesDataset"] = None,
        calculator: Optional["StatCalculator"] = None,
    ):
        if dataset is None:
            from rpg_rules.content_loader.rules_dataset import get_rules_dataset

            dataset = get_rules_dataset()
        self.dataset = dataset
        self.calculator = calculator

    def scaled_dice(self, spell: SpellData, effect: SpellEffect, character_level: int, cast_level: int) -> str:
        """
        Damage dice after scaling.

        Args:
            spell: The spell being cast
            effect: The effect whose dice to scale
            character_level: Caster's level (cantrip breakpoints)
            cast_level: Slot level used (0 for cantrips)
        """
        dice = effect.dice
        scaling = effect.scaling
        if scaling is None:
            return dice
        if scaling.scaling_type == ScalingType.CANTRIP:
            return scaling.dice_for_character_level(dice, character_level)
        if scaling.scaling_type == ScalingType.PER_SLOT_LEVEL and scaling.increase_dice:
            levels_above = max(0, cast_level - spell.level)
            if levels_above == 0:
                return dice
            increase = DiceFormula.parse(scaling.increase_dice)
            scaled = DiceFormula.parse(dice).with_additional_dice(increase.num_dice * levels_above)
            logger.debug(f"Upcasting {spell.name} (+{levels_above} levels): {dice} -> {scaled}")
            return str(scaled)
        return dice

    def cast(
        self,
        snapshot: CharacterSnapshot,
        spell_key: str,
        targets: list[SpellTarget],
        cast_level: Optional[int] = None,
    ) -> SpellCastResult:
        """
        Resolve a spell against targets.

        Args:
            snapshot: The caster
            spell_key: Spell to cast
            targets: Creatures affected; each gets its own rolls
            cast_level: Slot level (defaults to the spell's level)

        Returns:
            SpellCastResult; unsuccessful with a reason for an unknown spell
            or a slot below the spell's level
        """
        spell = self.dataset.get_spell(spell_key)
        if spell is None:
            logger.warning(f"Cannot cast unknown spell {spell_key!r}")
            return SpellCastResult(success=False, spell_key=spell_key, reason=f"Unknown spell: {spell_key}")

        level = spell.level if cast_level is None else cast_level
        if spell.is_cantrip:
            level = 0
        elif level < spell.level:
            return SpellCastResult(
                success=False,
                spell_key=spell.key,
                spell_name=spell.name,
                cast_level=level,
                reason=f"{spell.name} needs a level {spell.level} slot; level {level} given",
            )
        elif level > MAX_SLOT_LEVEL:
            return SpellCastResult(
                success=False,
                spell_key=spell.key,
                spell_name=spell.name,
                cast_level=level,
                reason=f"No spell slots above level {MAX_SLOT_LEVEL}",
            )

        strategy = self._strategy(snapshot)
        result = SpellCastResult(success=True, spell_key=spell.key, spell_name=spell.name, cast_level=level)
        applied: dict[str, set[str]] = {t.target_id: set() for t in targets}

        for index, effect in enumerate(spell.effects):
            if not effect.is_damage:
                result.unresolved_effects.append(effect.effect_type.value)
                continue
            dice = self.scaled_dice(spell, effect, snapshot.level, level)
            for target in targets:
                resolution = self._resolve_target(snapshot, spell, effect, index, dice, target, strategy)
                if resolution.damage > 0 and strategy is not None:
                    self._apply_bonuses(resolution, spell, effect, strategy, applied[target.target_id])
                result.resolutions.append(resolution)

        logger.info(
            f"{snapshot.name} casts {spell.name} at level {level}: "
            f"{result.damage_by_target or 'no damage'}"
        )
        return result

    def _strategy(self, snapshot: CharacterSnapshot) -> Optional["ClassStrategy"]:
        from rpg_rules.classes.dispatch import build_strategy

        try:
            return build_strategy(snapshot, self.dataset, self.calculator)
        except MissingReferenceError as e:
            logger.warning(f"Casting without class rules for {snapshot.name}: {e}")
            return None

    def _attack_bonus(self, snapshot: CharacterSnapshot, strategy: Optional["ClassStrategy"]) -> int:
        if strategy is not None:
            bonus = strategy.spell_attack_bonus()
            if bonus is not NOT_APPLICABLE:
                return bonus
        return proficiency_bonus(snapshot.level)

    def _save_dc(self, snapshot: CharacterSnapshot, strategy: Optional["ClassStrategy"]) -> int:
        if strategy is not None:
            dc = strategy.spell_save_dc()
            if dc is not NOT_APPLICABLE:
                return dc
        return 8 + proficiency_bonus(snapshot.level)

    def _resolve_target(
        self,
        snapshot: CharacterSnapshot,
        spell: SpellData,
        effect: SpellEffect,
        index: int,
        dice: str,
        target: SpellTarget,
        strategy: Optional["ClassStrategy"],
    ) -> TargetResolution:
        resolution = TargetResolution(
            target_id=target.target_id,
            effect_index=index,
            damage_type=effect.damage_type,
            damage_dice=dice,
        )
        formula = DiceFormula.parse(dice)

        if effect.resolution == ResolutionType.ATTACK:
            roll = DiceRoller.roll_d20(f"{spell.name} attack vs {target.target_id}")
            natural = roll.natural
            total = natural + self._attack_bonus(snapshot, strategy)
            resolution.attack_roll = total
            if natural == 1:
                resolution.hit = False
            elif natural == 20:
                resolution.critical = True
            else:
                resolution.hit = total >= target.armor_class
            if not resolution.hit:
                return resolution
            if resolution.critical:
                formula = formula.with_additional_dice(formula.num_dice)

        elif effect.resolution == ResolutionType.SAVE:
            roll = DiceRoller.roll_d20(f"{target.target_id} {effect.save_ability or ''} save vs {spell.name}")
            total = roll.total + target.save_bonus(effect.save_ability)
            resolution.save_roll = total
            resolution.saved = total >= self._save_dc(snapshot, strategy)
            if resolution.saved and effect.on_save == SaveOutcome.NONE:
                return resolution

        damage = DiceRoller.roll_formula(formula, f"{spell.name} damage to {target.target_id}").total
        resolution.damage_rolled = max(0, damage)
        if resolution.saved:
            damage //= 2
        resolution.damage = max(0, damage)
        return resolution

    def _apply_bonuses(
        self,
        resolution: TargetResolution,
        spell: SpellData,
        effect: SpellEffect,
        strategy: "ClassStrategy",
        applied: set[str],
    ) -> None:
        """Add each class bonus at most once per target across the spell's effects."""
        for source, amount in strategy.spell_damage_bonuses(spell, effect.damage_type):
            if source in applied:
                continue
            applied.add(source)
            resolution.bonuses.append((source, amount))
            resolution.damage = max(0, resolution.damage + amount)
