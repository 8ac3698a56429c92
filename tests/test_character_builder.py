"""
Unit tests for character creation.

Tests CharacterBuilder from rpg_rules/character/builder.py.
"""

import pytest

from rpg_rules.errors import InvalidChoiceError, MissingReferenceError
from rpg_rules.observability.run_log import get_run_log


BASE_SCORES = {"str": 15, "dex": 14, "con": 14, "int": 10, "wis": 12, "cha": 8}


def build_errors(builder, *args, **kwargs):
    """Build and return the collected InvalidChoiceError messages."""
    with pytest.raises(InvalidChoiceError) as exc_info:
        builder.build(*args, **kwargs)
    return exc_info.value.errors


class TestFinishedCharacters:
    """Tests for the snapshots the builder produces."""

    def test_fighter(self, fighter):
        assert fighter.level == 1
        assert fighter.experience == 0
        assert fighter.hp_max == 12
        assert fighter.hp_current == 12
        assert fighter.features == ("fighting_style", "second_wind", "weapon_mastery")
        assert fighter.feats == ("savage_attacker",)
        assert fighter.pending_level_up is None

    def test_equipment_moves_out_of_inventory(self, fighter):
        assert fighter.inventory == ()
        assert fighter.equipped("main_hand").item_key == "longsword"
        assert fighter.equipped("off_hand").item_key == "shield"
        assert fighter.equipped("armor").item_key == "chain_mail"

    def test_masteries_filled_from_carried_weapons(self, fighter, rogue):
        """Test that omitted masteries come from the weapons carried."""
        assert fighter.weapon_masteries == ("longsword",)
        assert rogue.weapon_masteries == ("dagger",)

    def test_spare_items_stay_in_inventory(self, rogue):
        assert [stack.item.item_key for stack in rogue.inventory] == ["dagger"]

    def test_resource_pools_start_full(self, fighter):
        pool = fighter.resources["second_wind"]
        assert pool.current == pool.max == 1

    def test_wizard_spells(self, wizard):
        """Test that a spellbook caster's spells are prepared, not known."""
        assert wizard.cantrips_known == ("fire_bolt", "mage_hand", "light")
        assert wizard.spells_prepared == ("magic_missile", "shield")
        assert wizard.spells_known == ()
        assert len(wizard.spellbook) == 6
        assert wizard.feats == ("magic_initiate",)
        assert wizard.feat_choices["magic_initiate"]["spell_list"] == "cleric"

    def test_known_caster_spells(self, builder):
        sorcerer = builder.build(
            "Vex",
            "sorcerer",
            "tiefling",
            BASE_SCORES,
            skill_choices=("arcana", "deception"),
            cantrips=("fire_bolt", "light"),
            spells=("magic_missile", "shield"),
        )
        assert sorcerer.spells_known == ("magic_missile", "shield")
        assert sorcerer.spells_prepared == ()

    def test_explicit_masteries(self, builder):
        fighter = builder.build(
            "Tomas", "fighter", "human", BASE_SCORES, weapon_masteries=("greatsword", "longbow")
        )
        assert fighter.weapon_masteries == ("greatsword", "longbow")

    def test_creation_is_logged(self, fighter):
        transforms = get_run_log().get_transforms(fighter.character_id)
        assert transforms[-1].transform == "create_character"
        assert transforms[-1].details["hp_max"] == 12

    def test_starting_experience_detects_level_up(self, builder):
        """Test that enough starting XP attaches a pending level-up at once."""
        fighter = builder.build("Vet", "fighter", "human", BASE_SCORES, experience=300)
        assert fighter.level == 1
        assert fighter.pending_level_up.target_level == 2


class TestRejectedSelections:
    """Tests for selections the builder refuses."""

    def test_ability_out_of_range(self, builder):
        scores = dict(BASE_SCORES, str=2)
        errors = build_errors(builder, "X", "fighter", "human", scores)
        assert errors == ["str score must be 3-20, got 2"]

    def test_unknown_subrace(self, builder):
        errors = build_errors(builder, "X", "fighter", "elf", BASE_SCORES, subrace_key="sky_elf")
        assert errors == ["Elf has no subrace 'sky_elf'"]

    def test_floating_bonus_index(self, builder):
        errors = build_errors(builder, "X", "fighter", "half_elf", BASE_SCORES, bonus_choices={"dex": 5})
        assert errors == ["Half-Elf has no floating bonus #5"]

    def test_too_many_skills(self, builder):
        errors = build_errors(
            builder, "X", "fighter", "human", BASE_SCORES,
            skill_choices=("athletics", "perception", "survival"),
        )
        assert errors == ["Fighter chooses 2 skills, got 3"]

    def test_skill_not_on_class_list(self, builder):
        errors = build_errors(builder, "X", "fighter", "human", BASE_SCORES, skill_choices=("arcana",))
        assert errors == ["'arcana' is not a Fighter skill option"]

    def test_expertise_without_the_feature(self, builder):
        errors = build_errors(
            builder, "X", "fighter", "human", BASE_SCORES,
            skill_choices=("athletics",), expertise=("athletics",),
        )
        assert errors == ["Fighter has no expertise at level 1"]

    def test_expertise_needs_class_proficiency(self, builder):
        """Test that expertise must target a skill chosen from the class list."""
        errors = build_errors(
            builder, "X", "rogue", "human", BASE_SCORES,
            skill_choices=("acrobatics", "perception", "sleight_of_hand", "stealth"),
            expertise=("deception",),
        )
        assert errors == ["Expertise in deception requires proficiency from a class skill choice"]

    def test_non_caster_spells(self, builder):
        errors = build_errors(builder, "X", "fighter", "human", BASE_SCORES, cantrips=("fire_bolt",))
        assert errors == ["Fighter does not cast spells at level 1"]

    def test_prepared_spell_outside_spellbook(self, builder):
        errors = build_errors(
            builder, "X", "wizard", "human", BASE_SCORES,
            spellbook=("magic_missile",), spells=("sleep",),
        )
        assert errors == ["Prepared spell 'sleep' is not in the spellbook"]

    def test_background_feat_choices_required(self, builder):
        """Test that Magic Initiate from the sage background needs its picks."""
        errors = build_errors(builder, "X", "wizard", "human", BASE_SCORES, background_key="sage")
        assert len(errors) == 1
        assert errors[0].startswith("Magic Initiate requires choices for: spell_list")

    def test_feat_choices_without_feat(self, builder):
        errors = build_errors(
            builder, "X", "fighter", "human", BASE_SCORES, feat_choices={"spell_list": "wizard"}
        )
        assert errors == ["Feat choices given without a feat-granting background"]

    def test_too_many_masteries(self, builder):
        errors = build_errors(
            builder, "X", "fighter", "human", BASE_SCORES,
            weapon_masteries=("longsword", "dagger", "mace", "club"),
        )
        assert errors == ["Fighter knows 3 weapon masteries at level 1, got 4"]

    def test_mastery_needs_a_mastery_weapon(self, builder):
        errors = build_errors(builder, "X", "fighter", "human", BASE_SCORES, weapon_masteries=("shield",))
        assert errors == ["'shield' is not a weapon with a mastery property"]

    def test_errors_are_collected(self, builder):
        """Test that every problem is reported in one exception."""
        scores = dict(BASE_SCORES, str=2)
        errors = build_errors(builder, "X", "fighter", "human", scores, cantrips=("fire_bolt",))
        assert len(errors) == 2

    def test_equip_requires_starting_item(self, builder):
        errors = build_errors(builder, "X", "fighter", "human", BASE_SCORES, equip={"main_hand": "longsword"})
        assert errors == ["Cannot equip 'longsword': not among the starting items"]

    def test_invalid_choice_error_is_value_error(self, builder):
        with pytest.raises(ValueError):
            builder.build("X", "fighter", "human", dict(BASE_SCORES, str=30))


class TestMissingReferences:
    """Tests for unknown identifiers."""

    @pytest.mark.parametrize(
        "class_key,race_key,background_key,missing",
        [
            ("artificer", "human", None, "artificer"),
            ("fighter", "warforged", None, "warforged"),
            ("fighter", "human", "pirate", "pirate"),
        ],
    )
    def test_unknown_keys(self, builder, class_key, race_key, background_key, missing):
        with pytest.raises(MissingReferenceError) as exc_info:
            builder.build("X", class_key, race_key, BASE_SCORES, background_key=background_key)
        assert exc_info.value.key == missing

    def test_unknown_starting_item(self, builder):
        with pytest.raises(MissingReferenceError) as exc_info:
            builder.build("X", "fighter", "human", BASE_SCORES, starting_items=["vorpal_spoon"])
        assert exc_info.value.kind == "item"
