"""
Level-up detection and the PendingLevelUp it attaches.

A PendingLevelUp lists every decision the next level needs (hit points,
an ability score improvement, a subclass, spells, eldritch invocations, a
mystic arcanum, weapon masteries) so the wizard can compile its steps from
it up front.
"""

import logging
from typing import Optional, TYPE_CHECKING

from rpg_rules.advancement.xp_manager import MAX_LEVEL, xp_threshold
from rpg_rules.classes.class_data import ClassDefinition, SpellProgression, SubclassDefinition
from rpg_rules.data_models import Ability, CharacterSnapshot, PendingLevelUp, SpellQuantityModel
from rpg_rules.features.feature_data import FeatureType
from rpg_rules.observability.run_log import get_run_log
from rpg_rules.stats.stat_calculator import StatCalculator

if TYPE_CHECKING:
    from rpg_rules.content_loader.rules_dataset import RulesDataset

logger = logging.getLogger(__name__)

# Hit die assumed when the class does not resolve
FALLBACK_HIT_DIE = 8


def _dataset(dataset: Optional["RulesDataset"]) -> "RulesDataset":
    if dataset is None:
        from rpg_rules.content_loader.rules_dataset import get_rules_dataset

        dataset = get_rules_dataset()
    return dataset


def hp_roll_formula(die_size: int, con_modifier: int) -> str:
    """Display formula for one level's hit points, e.g. '1d10+2'."""
    if con_modifier > 0:
        return f"1d{die_size}+{con_modifier}"
    if con_modifier < 0:
        return f"1d{die_size}-{abs(con_modifier)}"
    return f"1d{die_size}"


def subclass_casting_level(subclass: SubclassDefinition) -> Optional[int]:
    """Level at which a subclass's spellcasting switches on (None if it has none)."""
    if subclass.spellcasting is None:
        return None
    if subclass.spellcasting_feature is None:
        return 1
    for feature in subclass.features:
        if feature.key == subclass.spellcasting_feature:
            return feature.level
    return None


def active_progression(
    definition: ClassDefinition,
    subclass_key: Optional[str],
    level: int,
) -> Optional[SpellProgression]:
    """
    The spell progression in force at a level.

    Class casting always wins; otherwise the subclass's casting once the
    level reaches its gating feature.
    """
    if definition.spellcasting is not None:
        return definition.spellcasting
    subclass = definition.get_subclass(subclass_key)
    if subclass is None:
        return None
    starts = subclass_casting_level(subclass)
    if starts is None or level < starts:
        return None
    return subclass.spellcasting


def spell_deltas(progression: Optional[SpellProgression], target_level: int) -> tuple[int, int]:
    """(new cantrips, new leveled spells) gained on reaching target_level."""
    if progression is None:
        return 0, 0
    cantrips = max(0, progression.cantrips_known(target_level) - progression.cantrips_known(target_level - 1))
    if progression.quantity_model == SpellQuantityModel.KNOWN:
        spells = max(0, progression.spells_known_at(target_level) - progression.spells_known_at(target_level - 1))
    elif progression.quantity_model == SpellQuantityModel.SPELLBOOK:
        spells = progression.spellbook_per_level
    else:
        spells = 0
    return cantrips, spells


def known_invocations(snapshot: CharacterSnapshot, definition: Optional[ClassDefinition]) -> list[str]:
    """Invocation keys among the snapshot's features, in acquisition order."""
    if definition is None:
        return []
    return [key for key in snapshot.features if definition.get_invocation(key) is not None]


def build_pending_level_up(
    snapshot: CharacterSnapshot,
    dataset: Optional["RulesDataset"] = None,
) -> PendingLevelUp:
    """
    Work out the decisions needed to reach the next level.

    An unresolvable class grants nothing beyond hit points; it never fails.
    """
    dataset = _dataset(dataset)
    target = snapshot.level + 1
    calculator = StatCalculator(dataset)
    con = calculator.ability_mod(snapshot, Ability.CON)

    definition = dataset.get_class(snapshot.class_key)
    if definition is None:
        logger.warning(f"Unknown class {snapshot.class_key!r} for {snapshot.name}; level {target} grants nothing")
        return PendingLevelUp(
            target_level=target,
            hit_die=FALLBACK_HIT_DIE,
            hp_roll_formula=hp_roll_formula(FALLBACK_HIT_DIE, con),
        )

    class_features = definition.features_at_level(target)
    subclass = definition.get_subclass(snapshot.subclass_key)
    subclass_features = subclass.features_at_level(target) if subclass else []

    asi = any(f.feature_type == FeatureType.ABILITY_SCORE_IMPROVEMENT for f in class_features)
    subclass_choice = snapshot.subclass_key is None and any(
        f.feature_type == FeatureType.SUBCLASS_SELECTION for f in class_features
    )

    progression = active_progression(definition, snapshot.subclass_key, target)
    new_cantrips, new_spells = spell_deltas(progression, target)
    max_spell_level = progression.max_spell_level(target) if progression else 0
    swap = bool(progression and progression.swap_on_level_up and snapshot.spells_known)

    subclass_spell_counts: dict[str, tuple[int, int]] = {}
    if subclass_choice and definition.spellcasting is None:
        for option in definition.subclasses:
            option_progression = active_progression(definition, option.subclass_key, target)
            counts = spell_deltas(option_progression, target)
            if any(counts):
                subclass_spell_counts[option.subclass_key] = counts
                max_spell_level = max(max_spell_level, option_progression.max_spell_level(target))

    mastery_total = definition.weapon_mastery_count(target)
    new_masteries = max(0, mastery_total - definition.weapon_mastery_count(target - 1))

    invocations = known_invocations(snapshot, definition)
    invocation_total = definition.invocations_known(target)

    return PendingLevelUp(
        target_level=target,
        hit_die=definition.hit_die.size,
        hp_roll_formula=hp_roll_formula(definition.hit_die.size, con),
        ability_score_improvement=asi,
        subclass_choice=subclass_choice,
        new_cantrips=new_cantrips,
        new_spells=new_spells,
        spell_swap_allowed=swap,
        max_spell_level=max_spell_level,
        subclass_spell_counts=subclass_spell_counts,
        new_weapon_masteries=new_masteries,
        weapon_mastery_total=mastery_total,
        new_invocations=max(0, invocation_total - len(invocations)),
        invocation_total=invocation_total,
        invocation_swap_allowed=bool(invocations),
        mystic_arcanum_level=definition.mystic_arcanum_levels.get(target, 0),
        features_gained=tuple(f.key.value for f in class_features + subclass_features),
    )


def detect_level_up(
    snapshot: CharacterSnapshot,
    dataset: Optional["RulesDataset"] = None,
    max_level: int = MAX_LEVEL,
) -> CharacterSnapshot:
    """
    Attach a PendingLevelUp when experience meets the next threshold.

    Returns the snapshot unchanged when a level-up is already pending, the
    character is at max_level, or the threshold is not yet met. Only one
    level is pending at a time; the next is detected after commit.
    """
    if snapshot.pending_level_up is not None or snapshot.level >= min(max_level, MAX_LEVEL):
        return snapshot
    threshold = xp_threshold(snapshot.level + 1)
    if threshold is None or snapshot.experience < threshold:
        return snapshot

    pending = build_pending_level_up(snapshot, dataset)
    get_run_log().log_transform(
        "level_up_detected",
        snapshot.character_id,
        {"target_level": pending.target_level, "experience": snapshot.experience},
    )
    logger.info(f"{snapshot.name} can advance to level {pending.target_level}")
    return snapshot.evolve(pending_level_up=pending)
