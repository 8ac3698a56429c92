"""
Unit tests for shared data structures.

Tests Item, HpRoll, PendingLevelUp, CharacterSnapshot and the
NOT_APPLICABLE sentinel from rpg_rules/data_models.py.
"""

import dataclasses
import json
import pickle

import pytest

from rpg_rules.data_models import (
    NOT_APPLICABLE,
    CharacterSnapshot,
    HpRoll,
    Item,
    ItemSlot,
    ItemType,
    PendingLevelUp,
    RechargeRule,
)
from rpg_rules.resources import ResourcePool


class TestNotApplicable:
    """Tests for the NOT_APPLICABLE sentinel."""

    def test_is_falsy(self):
        """Test that the sentinel reads as false."""
        assert not NOT_APPLICABLE

    def test_distinct_from_zero_and_none(self):
        """Test that the sentinel is neither 0 nor None."""
        assert NOT_APPLICABLE is not None
        assert NOT_APPLICABLE != 0

    def test_singleton_survives_pickle(self):
        """Test that unpickling gives back the same sentinel."""
        assert pickle.loads(pickle.dumps(NOT_APPLICABLE)) is NOT_APPLICABLE

    def test_repr(self):
        assert repr(NOT_APPLICABLE) == "NOT_APPLICABLE"


class TestItem:
    """Tests for Item."""

    def test_light_weapon_fits_either_hand(self):
        """Test that light weapons may go in the off hand."""
        dagger = Item("dagger", "Dagger", ItemType.WEAPON, damage_dice="1d4", properties=("finesse", "light"))
        assert dagger.compatible_slots() == (ItemSlot.MAIN_HAND, ItemSlot.OFF_HAND)

    def test_heavy_weapon_main_hand_only(self):
        """Test that a non-light weapon fits only the main hand."""
        sword = Item("greatsword", "Greatsword", ItemType.WEAPON, damage_dice="2d6", properties=("two-handed",))
        assert sword.compatible_slots() == (ItemSlot.MAIN_HAND,)
        assert sword.is_two_handed

    def test_shield_and_armor_slots(self):
        """Test slot compatibility of shields and armor."""
        assert Item("shield", "Shield", ItemType.SHIELD).compatible_slots() == (ItemSlot.OFF_HAND,)
        assert Item("plate", "Plate", ItemType.ARMOR).compatible_slots() == (ItemSlot.ARMOR,)

    def test_accessory_uses_its_slot_tag(self):
        """Test that accessories fit the slot they declare."""
        ring = Item("ring", "Ring", ItemType.ACCESSORY, slot=ItemSlot.RING)
        assert ring.compatible_slots() == (ItemSlot.RING,)
        assert Item("rope", "Rope").compatible_slots() == ()

    def test_versatile_needs_two_handed_dice(self):
        """Test that the versatile tag alone is not enough."""
        tagged = Item("odd", "Odd", ItemType.WEAPON, damage_dice="1d6", properties=("versatile",))
        assert not tagged.is_versatile
        real = Item(
            "longsword", "Longsword", ItemType.WEAPON,
            damage_dice="1d8", versatile_dice="1d10", properties=("versatile",),
        )
        assert real.is_versatile

    def test_dict_round_trip(self):
        """Test that an item survives to_dict/from_dict."""
        item = Item(
            "longsword", "Longsword", ItemType.WEAPON, weight=3.0,
            damage_dice="1d8", versatile_dice="1d10", damage_type="slashing",
            mastery="sap", properties=("versatile",),
        )
        assert Item.from_dict(item.to_dict()) == item


class TestHpRoll:
    """Tests for HpRoll."""

    def test_total_adds_con(self):
        roll = HpRoll(die_size=10, dice=(6,), con_modifier=2)
        assert roll.total == 8
        assert roll.hp_gained == 8

    def test_minimum_one_per_level(self):
        """Test that a level never grants less than 1 before flat bonuses."""
        roll = HpRoll(die_size=6, dice=(1,), con_modifier=-3, flat_bonus=1)
        assert roll.total == 1
        assert roll.hp_gained == 2

    def test_frozen(self):
        """Test that a roll cannot be changed after it is made."""
        roll = HpRoll(die_size=8, dice=(4,))
        with pytest.raises(dataclasses.FrozenInstanceError):
            roll.con_modifier = 5


class TestPendingLevelUp:
    """Tests for PendingLevelUp."""

    def test_spell_step_from_subclass_counts(self):
        """Test that subclass casting alone creates a spell step."""
        pending = PendingLevelUp(
            target_level=3, hit_die=10, hp_roll_formula="1d10+2",
            subclass_choice=True, subclass_spell_counts={"eldritch_knight": (2, 3)},
        )
        assert pending.has_spell_step
        assert pending.spell_counts_for("eldritch_knight") == (2, 3)
        assert pending.spell_counts_for("champion") == (0, 0)
        assert pending.spell_counts_for(None) == (0, 0)

    def test_no_spell_step(self):
        pending = PendingLevelUp(target_level=2, hit_die=10, hp_roll_formula="1d10+2")
        assert not pending.has_spell_step
        assert not pending.has_invocation_step

    def test_dict_round_trip(self):
        """Test that tuples in subclass counts survive serialization."""
        pending = PendingLevelUp(
            target_level=3, hit_die=10, hp_roll_formula="1d10+2",
            subclass_spell_counts={"eldritch_knight": (2, 3)},
            new_invocations=1,
            invocation_swap_allowed=True,
            mystic_arcanum_level=6,
            features_gained=("martial_archetype",),
        )
        restored = PendingLevelUp.from_dict(json.loads(json.dumps(pending.to_dict())))
        assert restored == pending


class TestCharacterSnapshot:
    """Tests for CharacterSnapshot."""

    def test_rejects_out_of_range_level(self, make_snapshot):
        """Test that levels outside 1-20 are refused."""
        with pytest.raises(ValueError):
            make_snapshot(level=0)
        with pytest.raises(ValueError):
            make_snapshot(level=21)

    def test_rejects_negative_experience(self, make_snapshot):
        with pytest.raises(ValueError):
            make_snapshot(experience=-1)

    def test_ability_score_default(self):
        """Test that a missing ability reads as 10."""
        snapshot = CharacterSnapshot("X", "fighter", "human", {"str": 15})
        assert snapshot.ability_score("str") == 15
        assert snapshot.ability_score("wis") == 10

    def test_has_feature_checks_feats(self, make_snapshot):
        """Test that feats count as acquired features."""
        snapshot = make_snapshot(features=("second_wind",), feats=("tough",))
        assert snapshot.has_feature("second_wind")
        assert snapshot.has_feature("tough")
        assert not snapshot.has_feature("rage")

    def test_evolve_leaves_original(self, make_snapshot):
        """Test that evolve returns a new value and keeps the old one."""
        snapshot = make_snapshot()
        changed = snapshot.evolve(experience=300)
        assert changed.experience == 300
        assert snapshot.experience == 0
        assert changed.character_id == snapshot.character_id

    def test_all_spells(self, make_snapshot):
        snapshot = make_snapshot(
            "wizard",
            cantrips_known=("fire_bolt",),
            spellbook=("shield", "sleep"),
            spells_prepared=("shield",),
        )
        assert snapshot.all_spells() == {"fire_bolt", "shield", "sleep"}

    def test_all_spells_include_mystic_arcanum(self, make_snapshot):
        snapshot = make_snapshot("warlock", spells_known=("hex",), mystic_arcanum=("eyebite",))
        assert snapshot.all_spells() == {"hex", "eyebite"}
        assert CharacterSnapshot.from_dict(snapshot.to_dict()).mystic_arcanum == ("eyebite",)

    def test_json_round_trip(self, fighter):
        """Test that a full character survives JSON serialization."""
        data = json.loads(json.dumps(fighter.to_dict()))
        restored = CharacterSnapshot.from_dict(data)
        assert restored == fighter

    def test_resources_round_trip(self, make_snapshot):
        snapshot = make_snapshot(
            resources={"rage": ResourcePool("rage", 1, 3, RechargeRule.BOTH)},
        )
        restored = CharacterSnapshot.from_dict(snapshot.to_dict())
        assert restored.resources["rage"].current == 1
        assert restored.resources["rage"].max == 3
