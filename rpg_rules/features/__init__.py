"""Features: typed identifiers, definitions, feats and the registry."""

from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.features.feature_data import FeatureDefinition, FeatureType, MechanicType
from rpg_rules.features.feats import FEAT_DEFINITIONS
from rpg_rules.features.feature_registry import FeatureRegistry, to_feature_key

__all__ = [
    "FeatureKey",
    "FeatureDefinition",
    "FeatureType",
    "MechanicType",
    "FEAT_DEFINITIONS",
    "FeatureRegistry",
    "to_feature_key",
]
