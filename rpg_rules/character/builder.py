"""
Character finalization.

CharacterBuilder turns the selections of a character-creation flow into a
complete level-1 CharacterSnapshot: class features and the background feat
granted, hit points computed, resource pools full, starting equipment
carried and weapon masteries filled.
"""

import logging
from typing import Any, Optional, Union, TYPE_CHECKING

from rpg_rules.advancement.pending import detect_level_up
from rpg_rules.advancement.validators import validate_feat_sub_choices
from rpg_rules.data_models import (
    Ability,
    CharacterSnapshot,
    ItemSlot,
    ItemType,
    Skill,
    SpellQuantityModel,
)
from rpg_rules.errors import InvalidChoiceError
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.items.equipment import add_to_inventory, equip_item
from rpg_rules.observability.run_log import get_run_log
from rpg_rules.resources.rest import recompute_resources
from rpg_rules.stats.stat_calculator import StatCalculator

if TYPE_CHECKING:
    from rpg_rules.classes.class_data import ClassDefinition
    from rpg_rules.content_loader.rules_dataset import RulesDataset

logger = logging.getLogger(__name__)

MIN_ABILITY_SCORE = 3
MAX_ABILITY_SCORE = 20
EXPERTISE_AT_FIRST_LEVEL = 2


class CharacterBuilder:
    """
    Builds validated level-1 characters.

    Every problem found is collected and raised together as one
    InvalidChoiceError; unknown class, race or background keys raise
    MissingReferenceError.
    """

    def __init__(
        self,
        dataset: Optional["RulesDataset"] = None,
        calculator: Optional[StatCalculator] = None,
    ):
        if dataset is None:
            from rpg_rules.content_loader.rules_dataset import get_rules_dataset

            dataset = get_rules_dataset()
        self.dataset = dataset
        self.calculator = calculator or StatCalculator(dataset)

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def _check_abilities(self, abilities: dict[str, int], errors: list[str]) -> None:
        valid = {a.value for a in Ability}
        for ability, score in abilities.items():
            if ability not in valid:
                errors.append(f"Unknown ability {ability!r}")
            elif not isinstance(score, int) or not MIN_ABILITY_SCORE <= score <= MAX_ABILITY_SCORE:
                errors.append(f"{ability} score must be {MIN_ABILITY_SCORE}-{MAX_ABILITY_SCORE}, got {score!r}")

    def _check_bonus_choices(self, race, bonus_choices: dict[str, int], errors: list[str]) -> None:
        valid = {a.value for a in Ability}
        used = set()
        for ability, index in bonus_choices.items():
            if ability not in valid:
                errors.append(f"Unknown ability {ability!r} in racial bonus choices")
            elif not 0 <= index < len(race.floating_bonuses):
                errors.append(f"{race.name} has no floating bonus #{index}")
            elif index in used:
                errors.append(f"Floating bonus #{index} assigned twice")
            used.add(index)

    def _check_skills(
        self,
        definition: "ClassDefinition",
        skill_choices: tuple[str, ...],
        expertise: tuple[str, ...],
        errors: list[str],
    ) -> None:
        options = {s.value for s in definition.skill_options}
        if len(skill_choices) > definition.skill_choice_count:
            errors.append(f"{definition.name} chooses {definition.skill_choice_count} skills, got {len(skill_choices)}")
        if len(set(skill_choices)) != len(skill_choices):
            errors.append("A skill was chosen more than once")
        for skill in skill_choices:
            if skill not in options:
                errors.append(f"{skill!r} is not a {definition.name} skill option")

        if not expertise:
            return
        has_expertise = any(f.key == FeatureKey.EXPERTISE for f in definition.features_at_level(1))
        if not has_expertise:
            errors.append(f"{definition.name} has no expertise at level 1")
            return
        if len(expertise) > EXPERTISE_AT_FIRST_LEVEL:
            errors.append(f"At most {EXPERTISE_AT_FIRST_LEVEL} expertise choices at level 1")
        valid_skills = {s.value for s in Skill}
        for skill in expertise:
            if skill not in valid_skills:
                errors.append(f"Unknown skill {skill!r}")
            elif skill not in skill_choices:
                errors.append(f"Expertise in {skill} requires proficiency from a class skill choice")

    def _check_spells(
        self,
        definition: "ClassDefinition",
        cantrips: tuple[str, ...],
        spells: tuple[str, ...],
        spellbook: tuple[str, ...],
        errors: list[str],
    ) -> None:
        progression = definition.spellcasting
        if progression is None:
            if cantrips or spells or spellbook:
                errors.append(f"{definition.name} does not cast spells at level 1")
            return

        max_level = progression.max_spell_level(1)
        if len(cantrips) > progression.cantrips_known(1):
            errors.append(f"At most {progression.cantrips_known(1)} cantrips at level 1")
        if progression.quantity_model == SpellQuantityModel.KNOWN and len(spells) > progression.spells_known_at(1):
            errors.append(f"At most {progression.spells_known_at(1)} spells known at level 1")
        if progression.quantity_model == SpellQuantityModel.SPELLBOOK:
            if len(spellbook) > progression.spellbook_at_first_level:
                errors.append(f"A new spellbook holds at most {progression.spellbook_at_first_level} spells")
            for key in spells:
                if key not in spellbook:
                    errors.append(f"Prepared spell {key!r} is not in the spellbook")
        elif spellbook:
            errors.append(f"{definition.name} does not keep a spellbook")

        for key in cantrips:
            spell = self.dataset.get_spell(key)
            if spell is None or not spell.is_cantrip or not spell.available_to(progression.spell_list):
                errors.append(f"{key!r} is not a {progression.spell_list} cantrip")
        for key in set(spells) | set(spellbook):
            spell = self.dataset.get_spell(key)
            if spell is None or spell.is_cantrip or not spell.available_to(progression.spell_list):
                errors.append(f"{key!r} is not a {progression.spell_list} spell")
            elif spell.level > max_level:
                errors.append(f"{spell.name} is above spell level {max_level}")

    def _check_masteries(self, definition: "ClassDefinition", masteries: tuple[str, ...], errors: list[str]) -> None:
        allowed = definition.weapon_mastery_count(1)
        if len(masteries) > allowed:
            errors.append(f"{definition.name} knows {allowed} weapon masteries at level 1, got {len(masteries)}")
        for key in masteries:
            item = self.dataset.get_item(key)
            if item is None or item.item_type != ItemType.WEAPON or not item.mastery:
                errors.append(f"{key!r} is not a weapon with a mastery property")

    # =========================================================================
    # BUILD
    # =========================================================================

    def _starting_masteries(self, definition: "ClassDefinition", snapshot: CharacterSnapshot) -> tuple[str, ...]:
        """Masteries for carried weapons, up to the class's level-1 count."""
        allowed = definition.weapon_mastery_count(1)
        carried = [item for item in snapshot.equipment.values() if item is not None]
        carried.extend(stack.item for stack in snapshot.inventory)
        picks: list[str] = []
        for item in carried:
            if len(picks) >= allowed:
                break
            if item.is_weapon and item.mastery and item.item_key not in picks:
                picks.append(item.item_key)
        return tuple(picks)

    def build(
        self,
        name: str,
        class_key: str,
        race_key: str,
        abilities: dict[str, int],
        subrace_key: Optional[str] = None,
        background_key: Optional[str] = None,
        bonus_choices: Optional[dict[str, int]] = None,
        skill_choices: tuple[str, ...] = (),
        expertise: tuple[str, ...] = (),
        feat_choices: Optional[dict[str, Any]] = None,
        cantrips: tuple[str, ...] = (),
        spells: tuple[str, ...] = (),
        spellbook: tuple[str, ...] = (),
        weapon_masteries: Optional[tuple[str, ...]] = None,
        starting_items: Optional[list[Union[str, tuple[str, int]]]] = None,
        equip: Optional[dict[str, str]] = None,
        experience: int = 0,
    ) -> CharacterSnapshot:
        """
        Finalize a new level-1 character.

        Args:
            name: Character name
            class_key, race_key: Required identifiers
            abilities: Base scores, ability value -> score (3-20)
            subrace_key, background_key: Optional identifiers
            bonus_choices: ability -> index into the race's floating bonuses
            skill_choices: Class skill proficiencies
            expertise: Skills with doubled proficiency (classes with expertise at level 1)
            feat_choices: Sub-choices for the background feat
            cantrips, spells, spellbook: Starting spells. spells are known
                spells for known casters and prepared spells otherwise.
            weapon_masteries: Weapon keys; when omitted, filled from the
                carried weapons
            starting_items: Item keys, or (key, quantity) pairs
            equip: slot -> item key, equipped from the starting items
            experience: Starting XP; a level-up is detected at once

        Raises:
            MissingReferenceError: Unknown class, race, background or item
            InvalidChoiceError: Every other problem, collected
        """
        definition = self.dataset.require_class(class_key)
        race = self.dataset.require_race(race_key)
        background = self.dataset.require_background(background_key) if background_key else None

        errors: list[str] = []
        if subrace_key and race.get_subrace(subrace_key) is None:
            errors.append(f"{race.name} has no subrace {subrace_key!r}")
        self._check_abilities(abilities, errors)
        self._check_bonus_choices(race, bonus_choices or {}, errors)
        self._check_skills(definition, tuple(skill_choices), tuple(expertise), errors)
        self._check_spells(definition, tuple(cantrips), tuple(spells), tuple(spellbook), errors)
        if weapon_masteries is not None:
            self._check_masteries(definition, tuple(weapon_masteries), errors)

        feats: tuple[str, ...] = ()
        all_feat_choices: dict[str, dict[str, Any]] = {}
        if background is not None and background.feat is not None:
            feat = self.dataset.require_feature(background.feat)
            feats = (feat.key.value,)
            if feat.required_sub_choices():
                errors.extend(validate_feat_sub_choices(feat, feat_choices or {}, self.dataset))
                all_feat_choices[feat.key.value] = dict(feat_choices or {})
        elif feat_choices:
            errors.append("Feat choices given without a feat-granting background")

        if errors:
            raise InvalidChoiceError(errors)

        progression = definition.spellcasting
        known_model = progression is not None and progression.quantity_model == SpellQuantityModel.KNOWN

        snapshot = CharacterSnapshot(
            name=name,
            class_key=definition.class_key,
            race_key=race.race_key,
            abilities=dict(abilities),
            experience=experience,
            subrace_key=subrace_key,
            bonus_choices=dict(bonus_choices or {}),
            background_key=background_key,
            cantrips_known=tuple(cantrips),
            spells_known=tuple(spells) if known_model else (),
            spells_prepared=() if known_model else tuple(spells),
            spellbook=tuple(spellbook),
            features=tuple(f.key.value for f in definition.features_at_level(1)),
            feats=feats,
            feat_choices=all_feat_choices,
            skill_choices=tuple(skill_choices),
            expertise=tuple(expertise),
        )

        for entry in starting_items or []:
            key, quantity = (entry, 1) if isinstance(entry, str) else entry
            snapshot = add_to_inventory(snapshot, self.dataset.require_item(key), quantity)
        for slot, item_key in (equip or {}).items():
            index = next(
                (i for i, stack in enumerate(snapshot.inventory) if stack.item.item_key == item_key),
                None,
            )
            if index is None:
                raise InvalidChoiceError([f"Cannot equip {item_key!r}: not among the starting items"])
            snapshot = equip_item(snapshot, index, ItemSlot(slot))

        masteries = (
            tuple(weapon_masteries)
            if weapon_masteries is not None
            else self._starting_masteries(definition, snapshot)
        )
        hp = self.calculator.initial_hit_points(snapshot)
        snapshot = snapshot.evolve(weapon_masteries=masteries, hp_max=hp, hp_current=hp)
        snapshot = recompute_resources(snapshot, self.dataset)

        get_run_log().log_transform(
            "create_character",
            snapshot.character_id,
            {
                "class": definition.class_key,
                "race": race.race_key,
                "background": background_key,
                "hp_max": hp,
            },
        )
        logger.info(f"Created {name}: level 1 {race.name} {definition.name} with {hp} HP")
        return detect_level_up(snapshot, self.dataset)
