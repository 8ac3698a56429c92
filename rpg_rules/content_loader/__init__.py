"""
Content loading for the rules engine.

This module provides:
- RulesDataset: Read-only aggregate of classes, races, backgrounds, features,
  items and spells, validated at load time
- get_rules_dataset / reset_rules_dataset: Global dataset accessor
"""

from rpg_rules.content_loader.rules_dataset import (
    DatasetStats,
    DatasetValidationError,
    MissingReferenceError,
    RulesDataset,
    get_rules_dataset,
    reset_rules_dataset,
)

__all__ = [
    "DatasetStats",
    "DatasetValidationError",
    "MissingReferenceError",
    "RulesDataset",
    "get_rules_dataset",
    "reset_rules_dataset",
]
