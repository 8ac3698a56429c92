"""
Registry of feature definitions keyed by FeatureKey.

Populated by the RulesDataset from class/subclass feature lists and the feat
list; the first definition registered for a shared key (e.g. Extra Attack)
wins.
"""

import logging
from typing import Optional, Union

from rpg_rules.features.feature_data import FeatureDefinition, FeatureType
from rpg_rules.features.feature_keys import FeatureKey

logger = logging.getLogger(__name__)


def to_feature_key(key: Union[FeatureKey, str]) -> Optional[FeatureKey]:
    """Resolve a plain string to its FeatureKey member, or None."""
    if isinstance(key, FeatureKey):
        return key
    try:
        return FeatureKey(key)
    except ValueError:
        return None


class FeatureRegistry:
    """Lookup table of every feature the dataset defines."""

    def __init__(self) -> None:
        self._features: dict[FeatureKey, FeatureDefinition] = {}

    def register(self, definition: FeatureDefinition) -> None:
        """Register a feature definition; duplicates keep the first entry."""
        if definition.key in self._features:
            return
        self._features[definition.key] = definition

    def get(self, key: Union[FeatureKey, str]) -> Optional[FeatureDefinition]:
        """Get a definition by typed or plain key."""
        typed = to_feature_key(key)
        if typed is None:
            return None
        return self._features.get(typed)

    def get_all(self) -> list[FeatureDefinition]:
        return list(self._features.values())

    def get_feats(self) -> list[FeatureDefinition]:
        return [f for f in self._features.values() if f.feature_type == FeatureType.FEAT]

    def __contains__(self, key: object) -> bool:
        typed = to_feature_key(key) if isinstance(key, str) else None
        return typed is not None and typed in self._features

    def __len__(self) -> int:
        return len(self._features)

    def validate(self) -> list[str]:
        """Return one message per FeatureKey member that has no definition."""
        missing = [key.value for key in FeatureKey if key not in self._features]
        return [f"Feature key has no definition: {key}" for key in missing]
