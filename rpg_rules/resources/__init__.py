"""Class resource pools (rage, ki, sorcery points, pact slots, ...) and rest transforms."""

from rpg_rules.resources.resource_pool import (
    UNLIMITED_USES,
    ResourcePool,
    SpendResult,
)
from rpg_rules.resources.rest import (
    long_rest,
    recompute_resources,
    short_rest,
    spend_resource,
)

__all__ = [
    "UNLIMITED_USES",
    "ResourcePool",
    "SpendResult",
    "long_rest",
    "recompute_resources",
    "short_rest",
    "spend_resource",
]
