"""
Depletable, rest-rechargeable class resources.

Rage uses, ki, sorcery points, pact slots, superiority dice, arcane ward hit
points and the like all share one value type. Pools are frozen: spending or
resting returns a new pool.
"""

from dataclasses import dataclass, replace
from typing import Any, Optional
import logging

from rpg_rules.data_models import RechargeRule, RestType

logger = logging.getLogger(__name__)

# Max value that marks a pool as unlimited (Barbarian rage at 20)
UNLIMITED_USES = 999


@dataclass(frozen=True)
class SpendResult:
    """Outcome of spending from a pool; a failed spend leaves the pool untouched."""
    pool: Optional["ResourcePool"]
    success: bool
    amount: int = 0
    message: str = ""


@dataclass(frozen=True)
class ResourcePool:
    """
    A counter with 0 <= current <= max.

    Attributes:
        key: Resource identifier, e.g. "ki" or "pact_slots"
        current: Uses remaining
        max: Uses available after the matching rest
        recharge_rule: Which rests refill the pool
        die: Die associated with each use, if any (superiority dice, inspiration)
        slot_level: Spell level of the slots in the pool (pact magic only)
    """
    key: str
    current: int
    max: int
    recharge_rule: RechargeRule
    die: Optional[str] = None
    slot_level: Optional[int] = None

    def __post_init__(self):
        if self.max < 0:
            raise ValueError(f"Pool {self.key} cannot have a negative max ({self.max})")
        clamped = min(max(self.current, 0), self.max)
        if clamped != self.current:
            object.__setattr__(self, "current", clamped)

    @classmethod
    def full(
        cls,
        key: str,
        maximum: int,
        recharge_rule: RechargeRule,
        die: Optional[str] = None,
        slot_level: Optional[int] = None,
    ) -> "ResourcePool":
        """A pool starting at its max."""
        return cls(key, maximum, maximum, recharge_rule, die, slot_level)

    @property
    def is_unlimited(self) -> bool:
        return self.max >= UNLIMITED_USES

    @property
    def is_empty(self) -> bool:
        return self.current == 0 and not self.is_unlimited

    def recharges_on(self, kind: RestType) -> bool:
        """Whether a rest of this kind refills the pool."""
        if self.recharge_rule == RechargeRule.BOTH:
            return True
        return self.recharge_rule.value == kind.value

    def spend(self, amount: int = 1) -> SpendResult:
        """
        Spend uses from the pool.

        Args:
            amount: Uses to spend (must be positive)

        Returns:
            SpendResult; on insufficient uses the original pool is returned
            unchanged with success=False

        Raises:
            ValueError: If amount is not positive
        """
        if amount < 1:
            raise ValueError(f"Spend amount must be positive, got {amount}")
        if self.is_unlimited:
            return SpendResult(pool=self, success=True, amount=amount)
        if amount > self.current:
            message = f"Insufficient {self.key}: need {amount}, have {self.current}"
            logger.debug(message)
            return SpendResult(pool=self, success=False, amount=0, message=message)
        return SpendResult(
            pool=replace(self, current=self.current - amount),
            success=True,
            amount=amount,
        )

    def apply_rest(self, kind: RestType) -> "ResourcePool":
        """Refill to max if the rest matches the recharge rule; otherwise no-op."""
        if self.recharges_on(kind):
            return replace(self, current=self.max)
        return self

    def restore(self) -> "ResourcePool":
        """Refill unconditionally (used when another rule grants a full recovery)."""
        return replace(self, current=self.max)

    def with_max(
        self,
        new_max: int,
        die: Optional[str] = None,
        slot_level: Optional[int] = None,
        recharge_rule: Optional[RechargeRule] = None,
    ) -> "ResourcePool":
        """
        Recompute the pool against a new max.

        The current value is clamped but never raised, except that a pool
        becoming unlimited is filled.
        """
        current = self.current
        if new_max >= UNLIMITED_USES:
            current = new_max
        return ResourcePool(
            key=self.key,
            current=min(current, new_max),
            max=new_max,
            recharge_rule=recharge_rule or self.recharge_rule,
            die=die if die is not None else self.die,
            slot_level=slot_level if slot_level is not None else self.slot_level,
        )

    def __str__(self) -> str:
        if self.is_unlimited:
            return f"{self.key}: unlimited"
        suffix = f" ({self.die})" if self.die else ""
        return f"{self.key}: {self.current}/{self.max}{suffix}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "current": self.current,
            "max": self.max,
            "recharge_rule": self.recharge_rule.value,
            "die": self.die,
            "slot_level": self.slot_level,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResourcePool":
        return cls(
            key=data["key"],
            current=data.get("current", 0),
            max=data.get("max", 0),
            recharge_rule=RechargeRule(data.get("recharge_rule", RechargeRule.LONG_REST.value)),
            die=data.get("die"),
            slot_level=data.get("slot_level"),
        )
