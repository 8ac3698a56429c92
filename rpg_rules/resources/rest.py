"""
Rest and resource transforms.

Pools are always rebuilt from the class strategy before a rest or a spend,
so their max values follow the current level and features. A pool new to
the snapshot appears full; an existing pool keeps its current value.
"""

import logging
from typing import Optional, TYPE_CHECKING

from rpg_rules.data_models import CharacterSnapshot, RestType
from rpg_rules.errors import MissingReferenceError
from rpg_rules.observability.run_log import get_run_log
from rpg_rules.resources.resource_pool import ResourcePool, SpendResult

if TYPE_CHECKING:
    from rpg_rules.classes.class_strategy import ClassStrategy
    from rpg_rules.content_loader.rules_dataset import RulesDataset

logger = logging.getLogger(__name__)


def _strategy(snapshot: CharacterSnapshot, dataset: Optional["RulesDataset"]) -> Optional["ClassStrategy"]:
    from rpg_rules.classes.dispatch import build_strategy

    try:
        return build_strategy(snapshot, dataset)
    except MissingReferenceError as e:
        logger.warning(f"No class rules for {snapshot.name}; keeping stored pools: {e}")
        return None


def recompute_resources(
    snapshot: CharacterSnapshot,
    dataset: Optional["RulesDataset"] = None,
) -> CharacterSnapshot:
    """Rebuild every class pool against the snapshot's level and features."""
    strategy = _strategy(snapshot, dataset)
    if strategy is None:
        return snapshot
    return snapshot.evolve(resources=strategy.resource_pools())


def _rest(
    snapshot: CharacterSnapshot,
    kind: RestType,
    dataset: Optional["RulesDataset"],
) -> dict[str, ResourcePool]:
    strategy = _strategy(snapshot, dataset)
    if strategy is None:
        return {key: pool.apply_rest(kind) for key, pool in snapshot.resources.items()}
    if kind == RestType.SHORT:
        return strategy.on_short_rest()
    return strategy.on_long_rest()


def short_rest(
    snapshot: CharacterSnapshot,
    dataset: Optional["RulesDataset"] = None,
) -> CharacterSnapshot:
    """Refill pools that recharge on a short rest."""
    pools = _rest(snapshot, RestType.SHORT, dataset)
    get_run_log().log_transform(
        "short_rest",
        snapshot.character_id,
        {"resources": {key: str(pool) for key, pool in pools.items()}},
    )
    return snapshot.evolve(resources=pools)


def long_rest(
    snapshot: CharacterSnapshot,
    dataset: Optional["RulesDataset"] = None,
) -> CharacterSnapshot:
    """Refill pools that recharge on a long rest and restore hit points."""
    pools = _rest(snapshot, RestType.LONG, dataset)
    get_run_log().log_transform(
        "long_rest",
        snapshot.character_id,
        {
            "resources": {key: str(pool) for key, pool in pools.items()},
            "hp_restored": snapshot.hp_max - snapshot.hp_current,
        },
    )
    return snapshot.evolve(resources=pools, hp_current=snapshot.hp_max)


def spend_resource(
    snapshot: CharacterSnapshot,
    key: str,
    amount: int = 1,
    dataset: Optional["RulesDataset"] = None,
) -> tuple[CharacterSnapshot, SpendResult]:
    """
    Spend uses from one pool.

    Args:
        snapshot: Character spending
        key: Pool key, e.g. "ki"
        amount: Uses to spend

    Returns:
        (new snapshot, SpendResult). An insufficient or unknown pool returns
        the input snapshot with success=False; nothing is partially spent.
    """
    refreshed = recompute_resources(snapshot, dataset)
    pool = refreshed.resources.get(key)
    if pool is None:
        message = f"{snapshot.name} has no {key} pool"
        logger.debug(message)
        return snapshot, SpendResult(pool=None, success=False, message=message)

    result = pool.spend(amount)
    if not result.success:
        return snapshot, result

    resources = dict(refreshed.resources)
    resources[key] = result.pool
    get_run_log().log_transform(
        "spend_resource",
        snapshot.character_id,
        {"resource": key, "amount": amount, "remaining": result.pool.current},
    )
    return refreshed.evolve(resources=resources), result
