"""
Experience points and level thresholds.

Experience only ever grows. Granting XP runs level-up detection afterwards,
so crossing a threshold attaches a PendingLevelUp in the same transform.
"""

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING
import logging

from rpg_rules.data_models import CharacterSnapshot
from rpg_rules.observability.run_log import get_run_log

if TYPE_CHECKING:
    from rpg_rules.content_loader.rules_dataset import RulesDataset

logger = logging.getLogger(__name__)

MAX_LEVEL = 20

# XP needed to reach each level: index 0 is level 1
LEVEL_XP_TABLE: tuple[int, ...] = (
    0,
    300,
    900,
    2700,
    6500,
    14000,
    23000,
    34000,
    48000,
    64000,
    85000,
    100000,
    120000,
    140000,
    165000,
    195000,
    225000,
    265000,
    305000,
    355000,
)


def xp_threshold(level: int) -> Optional[int]:
    """
    Total experience needed to reach a level.

    Args:
        level: Character level (1-20)

    Returns:
        XP threshold, or None above the level cap

    Raises:
        ValueError: If level is below 1
    """
    if level < 1:
        raise ValueError(f"Level must be at least 1, got {level}")
    if level > MAX_LEVEL:
        return None
    return LEVEL_XP_TABLE[level - 1]


def level_for_xp(experience: int) -> int:
    """Highest level whose threshold the experience meets."""
    level = 1
    for index, threshold in enumerate(LEVEL_XP_TABLE):
        if experience >= threshold:
            level = index + 1
    return level


def xp_to_next_level(snapshot: CharacterSnapshot) -> Optional[int]:
    """XP still needed for the next level (None at the cap)."""
    threshold = xp_threshold(snapshot.level + 1)
    if threshold is None:
        return None
    return max(0, threshold - snapshot.experience)


# =============================================================================
# RESULT DATACLASSES
# =============================================================================


@dataclass
class XPAwardResult:
    """Result of an XP award to a party."""
    total_xp: int
    xp_per_character: int = 0
    recipients: list[str] = field(default_factory=list)     # Character IDs
    level_ups: list[str] = field(default_factory=list)      # Characters with a pending level-up


# =============================================================================
# XP GRANTS
# =============================================================================


def grant_experience(
    snapshot: CharacterSnapshot,
    amount: int,
    dataset: Optional["RulesDataset"] = None,
    max_level: int = MAX_LEVEL,
) -> CharacterSnapshot:
    """
    Add experience and detect a level-up.

    Args:
        snapshot: Character receiving XP
        amount: XP to add; zero or negative amounts change nothing
        max_level: No level-up is detected at or beyond this level

    Returns:
        New snapshot, with a PendingLevelUp attached when a threshold is crossed
    """
    from rpg_rules.advancement.pending import detect_level_up

    if amount <= 0:
        logger.debug(f"Ignoring non-positive XP grant of {amount} to {snapshot.name}")
        return snapshot

    updated = snapshot.evolve(experience=snapshot.experience + amount)
    get_run_log().log_transform(
        "grant_experience",
        snapshot.character_id,
        {"amount": amount, "experience": updated.experience},
    )
    logger.info(f"{snapshot.name} gains {amount} XP ({updated.experience} total)")
    return detect_level_up(updated, dataset, max_level)


def grant_experience_to_party(
    party: list[CharacterSnapshot],
    total: int,
    dataset: Optional["RulesDataset"] = None,
    max_level: int = MAX_LEVEL,
) -> tuple[list[CharacterSnapshot], XPAwardResult]:
    """
    Split an XP award evenly across a party.

    Each member gets floor(total / party size); the remainder is lost.

    Returns:
        (updated party in the same order, award summary)
    """
    result = XPAwardResult(total_xp=total)
    if not party or total <= 0:
        return list(party), result

    share = total // len(party)
    result.xp_per_character = share
    updated = []
    for member in party:
        granted = grant_experience(member, share, dataset, max_level)
        result.recipients.append(member.character_id)
        if granted.pending_level_up is not None and member.pending_level_up is None:
            result.level_ups.append(member.character_id)
        updated.append(granted)
    return updated, result
