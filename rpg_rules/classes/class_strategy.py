"""
The per-class rules contract.

A ClassStrategy is built fresh from a snapshot for each query and holds
nothing that outlives that snapshot. Every capability has a neutral default
here: capability queries return NOT_APPLICABLE, additive damage hooks return
nothing, critical range is 20 and attacks per action is 1. Concrete classes
override only what they change.

Subclass-gated hooks test for feature keys in the snapshot, never for the
subclass key itself, so subclasses sharing a mechanic (Divine Strike) share
one code path.
"""

import logging
from typing import Any, Optional, Union, TYPE_CHECKING

from rpg_rules.classes.class_data import ClassDefinition, SpellProgression
from rpg_rules.data_models import (
    NOT_APPLICABLE,
    Ability,
    CharacterSnapshot,
    RechargeRule,
    RestType,
    SpellQuantityModel,
)
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.resources.resource_pool import ResourcePool
from rpg_rules.stats.stat_calculator import StatCalculator, proficiency_bonus

if TYPE_CHECKING:
    from rpg_rules.content_loader.rules_dataset import RulesDataset
    from rpg_rules.magic.spell_data import SpellData

logger = logging.getLogger(__name__)


class ClassStrategy:
    """
    Base implementation of the class rules contract.

    Attributes:
        snapshot: The character this strategy answers for
        definition: The class definition from the rules dataset
        dataset: Read-only rules dataset
        signature_resource: Key of the pool returned by resource_pool()
    """

    signature_resource: Optional[str] = None

    def __init__(
        self,
        snapshot: CharacterSnapshot,
        definition: ClassDefinition,
        dataset: "RulesDataset",
        calculator: Optional[StatCalculator] = None,
    ):
        self.snapshot = snapshot
        self.definition = definition
        self.dataset = dataset
        self.calculator = calculator or StatCalculator(dataset)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.snapshot.name!r}, level={self.level})"

    # =========================================================================
    # HELPERS
    # =========================================================================

    @property
    def level(self) -> int:
        return self.snapshot.level

    @property
    def proficiency_bonus(self) -> int:
        return proficiency_bonus(self.level)

    def has_feature(self, key: FeatureKey) -> bool:
        return self.snapshot.has_feature(key)

    def modifier(self, ability: Union[Ability, str]) -> int:
        return self.calculator.ability_mod(self.snapshot, ability)

    def _pool(
        self,
        key: str,
        maximum: int,
        recharge_rule: RechargeRule,
        die: Optional[str] = None,
        slot_level: Optional[int] = None,
    ) -> ResourcePool:
        """
        Current pool for a key against a freshly computed max.

        A pool new to the snapshot starts full; an existing pool keeps its
        current value, clamped to the new max.
        """
        existing = self.snapshot.resources.get(key)
        if existing is None:
            return ResourcePool.full(key, maximum, recharge_rule, die, slot_level)
        return existing.with_max(maximum, die=die, slot_level=slot_level, recharge_rule=recharge_rule)

    # =========================================================================
    # SAVING THROWS
    # =========================================================================

    def saving_throw_proficiencies(self) -> tuple[Ability, Ability]:
        return self.definition.saving_throws

    def aura_save_bonus(self) -> Any:
        """Bonus this character adds to its own saving throws."""
        return NOT_APPLICABLE

    # =========================================================================
    # SPELLCASTING
    # =========================================================================

    def spell_progression(self) -> Optional[SpellProgression]:
        """Class casting, or subclass casting once its feature is acquired."""
        if self.definition.spellcasting is not None:
            return self.definition.spellcasting
        subclass = self.definition.get_subclass(self.snapshot.subclass_key)
        if subclass is None or subclass.spellcasting is None:
            return None
        gate = subclass.spellcasting_feature
        if gate is not None and not self.has_feature(gate):
            return None
        return subclass.spellcasting

    def is_spellcaster(self) -> bool:
        progression = self.spell_progression()
        if progression is None:
            return False
        return progression.max_spell_level(self.level) > 0 or progression.cantrips_known(self.level) > 0

    def spellcasting_ability(self) -> Any:
        if not self.is_spellcaster():
            return NOT_APPLICABLE
        return self.spell_progression().ability

    def spell_save_dc(self) -> Any:
        """8 + proficiency bonus + spellcasting modifier."""
        ability = self.spellcasting_ability()
        if ability is NOT_APPLICABLE:
            return NOT_APPLICABLE
        return 8 + self.proficiency_bonus + self.modifier(ability)

    def spell_attack_bonus(self) -> Any:
        """Proficiency bonus + spellcasting modifier."""
        ability = self.spellcasting_ability()
        if ability is NOT_APPLICABLE:
            return NOT_APPLICABLE
        return self.proficiency_bonus + self.modifier(ability)

    def spell_quantity_model(self) -> Any:
        progression = self.spell_progression()
        if progression is None:
            return NOT_APPLICABLE
        return progression.quantity_model

    def cantrips_known_count(self, level: Optional[int] = None) -> int:
        progression = self.spell_progression()
        if progression is None:
            return 0
        return progression.cantrips_known(level or self.level)

    def spells_known_count(self, level: Optional[int] = None) -> Any:
        """Known-spells table lookup; not applicable to prepared casters."""
        progression = self.spell_progression()
        if progression is None or progression.quantity_model != SpellQuantityModel.KNOWN:
            return NOT_APPLICABLE
        return progression.spells_known_at(level or self.level)

    def prepared_spells_count(self) -> Any:
        """max(1, spellcasting mod + level) for prepared and spellbook casters."""
        progression = self.spell_progression()
        if progression is None or progression.quantity_model == SpellQuantityModel.KNOWN:
            return NOT_APPLICABLE
        if not self.is_spellcaster():
            return NOT_APPLICABLE
        return max(1, self.modifier(progression.ability) + self.level)

    def max_spell_level(self, level: Optional[int] = None) -> int:
        progression = self.spell_progression()
        if progression is None:
            return 0
        return progression.max_spell_level(level or self.level)

    def spell_slots(self, level: Optional[int] = None) -> dict[int, int]:
        progression = self.spell_progression()
        if progression is None:
            return {}
        return progression.spell_slots(level or self.level)

    def allows_spell_swap(self) -> bool:
        progression = self.spell_progression()
        return bool(progression and progression.swap_on_level_up and self.snapshot.spells_known)

    def new_cantrips_at(self, target_level: int) -> int:
        progression = self.spell_progression()
        if progression is None:
            return 0
        return max(0, progression.cantrips_known(target_level) - progression.cantrips_known(target_level - 1))

    def new_spells_at(self, target_level: int) -> int:
        """Leveled spells learned on reaching target_level."""
        progression = self.spell_progression()
        if progression is None:
            return 0
        if progression.quantity_model == SpellQuantityModel.KNOWN:
            return max(0, progression.spells_known_at(target_level) - progression.spells_known_at(target_level - 1))
        if progression.quantity_model == SpellQuantityModel.SPELLBOOK:
            return progression.spellbook_per_level
        return 0

    # =========================================================================
    # RESOURCES
    # =========================================================================

    def resource_pools(self) -> dict[str, ResourcePool]:
        """Every pool the class has at the snapshot's level."""
        return {}

    def resource_pool(self) -> Any:
        """The class's signature pool."""
        if self.signature_resource is None:
            return NOT_APPLICABLE
        return self.resource_pools().get(self.signature_resource, NOT_APPLICABLE)

    def on_short_rest(self) -> dict[str, ResourcePool]:
        return {key: pool.apply_rest(RestType.SHORT) for key, pool in self.resource_pools().items()}

    def on_long_rest(self) -> dict[str, ResourcePool]:
        return {key: pool.apply_rest(RestType.LONG) for key, pool in self.resource_pools().items()}

    # =========================================================================
    # FEATURE HOOKS
    # =========================================================================

    def rage_damage_bonus(self) -> Any:
        return NOT_APPLICABLE

    def sneak_attack_dice(self) -> Any:
        return NOT_APPLICABLE

    def divine_smite_dice(self, slot_level: int, target_type: str = "humanoid") -> Any:
        return NOT_APPLICABLE

    def elemental_affinity_bonus(self, spell: "SpellData", damage_type: Optional[str] = None) -> Any:
        return NOT_APPLICABLE

    def metamagic_cost(self, metamagic: FeatureKey, spell: Optional["SpellData"] = None) -> Any:
        return NOT_APPLICABLE

    def empowered_evocation_bonus(self, spell: "SpellData") -> Any:
        return NOT_APPLICABLE

    def unarmored_defense(self) -> Any:
        return NOT_APPLICABLE

    def unarmed_damage_die(self) -> Any:
        return NOT_APPLICABLE

    def flat_hp_bonus_per_level(self) -> Any:
        return NOT_APPLICABLE

    def critical_hit_range(self) -> int:
        """Lowest natural d20 roll that scores a critical hit."""
        return 20

    def extra_attack_count(self) -> int:
        """Attacks made with the Attack action."""
        if self.has_feature(FeatureKey.EXTRA_ATTACK) or self.has_feature(FeatureKey.VALOR_EXTRA_ATTACK):
            return 2
        return 1

    def spell_damage_bonuses(
        self, spell: "SpellData", damage_type: Optional[str] = None
    ) -> list[tuple[str, int]]:
        """Flat bonuses added once to a spell's damage against one target."""
        return []

    def describe(self) -> dict[str, Any]:
        """Capabilities summary for presentation."""
        pool = self.resource_pool()
        return {
            "class": self.definition.class_key,
            "level": self.level,
            "saving_throws": [a.value for a in self.saving_throw_proficiencies()],
            "spellcaster": self.is_spellcaster(),
            "spell_save_dc": self.spell_save_dc(),
            "spell_attack_bonus": self.spell_attack_bonus(),
            "resource": str(pool) if pool is not NOT_APPLICABLE else None,
            "attacks": self.extra_attack_count(),
            "critical_range": self.critical_hit_range(),
        }
