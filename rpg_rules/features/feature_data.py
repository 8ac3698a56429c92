"""
Feature definitions: a named grant plus a mechanics payload.

The payload's "type" selects how the engine reads it (see MechanicType);
features without mechanics are descriptive only, or are read by a class
strategy hook that checks for the key's presence.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from rpg_rules.features.feature_keys import FeatureKey


class FeatureType(str, Enum):
    """Where a feature comes from and how it is acquired."""
    CLASS_FEATURE = "class_feature"
    SUBCLASS_SELECTION = "subclass_selection"     # Marks the level a subclass is chosen
    ABILITY_SCORE_IMPROVEMENT = "ability_score_improvement"
    SUBCLASS_FEATURE = "subclass_feature"
    FEAT = "feat"
    METAMAGIC = "metamagic"
    INVOCATION = "invocation"


class MechanicType(str, Enum):
    """Recognized mechanics payload types."""
    HP_BONUS_PER_LEVEL = "hp_bonus_per_level"
    INITIATIVE_BONUS = "initiative_bonus"
    MAGIC_INITIATE = "magic_initiate"
    SKILL_CHOICE = "skill_choice"
    UNARMED_UPGRADE = "unarmed_upgrade"
    METAMAGIC = "metamagic"
    INVOCATION = "invocation"
    DIVINE_STRIKE = "divine_strike"


@dataclass(frozen=True)
class FeatureDefinition:
    """
    A feature as stored in the rules dataset.

    Attributes:
        key: Typed identifier
        name: Display name
        feature_type: Acquisition category
        mechanics: Payload keyed by "type" (see MechanicType)
        description: Rules text summary
        min_level: Lowest character level at which a feat may be taken
    """
    key: FeatureKey
    name: str
    feature_type: FeatureType = FeatureType.CLASS_FEATURE
    mechanics: dict[str, Any] = field(default_factory=dict)
    description: str = ""
    min_level: int = 1

    @property
    def mechanic_type(self) -> Optional[MechanicType]:
        raw = self.mechanics.get("type")
        if raw is None:
            return None
        try:
            return MechanicType(raw)
        except ValueError:
            return None

    @property
    def is_feat(self) -> bool:
        return self.feature_type == FeatureType.FEAT

    def required_sub_choices(self) -> list[str]:
        """Names of the sub-choices a player must fill when taking this feature."""
        mechanic = self.mechanic_type
        if mechanic == MechanicType.MAGIC_INITIATE:
            cantrips = self.mechanics.get("cantrips", 2)
            spells = self.mechanics.get("spells", 1)
            return (
                ["spell_list"]
                + [f"cantrip_{i}" for i in range(1, cantrips + 1)]
                + [f"spell_{i}" for i in range(1, spells + 1)]
            )
        if mechanic == MechanicType.SKILL_CHOICE:
            return [f"skill_{i}" for i in range(1, self.mechanics.get("count", 1) + 1)]
        return []
