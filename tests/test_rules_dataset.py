"""
Unit tests for the rules dataset, races and backgrounds.

Tests RulesDataset from rpg_rules/content_loader/rules_dataset.py, the
race manager and RaceDefinition from rpg_rules/races/.
"""

import json

import pytest

from rpg_rules.content_loader import (
    DatasetValidationError,
    RulesDataset,
    get_rules_dataset,
    reset_rules_dataset,
)
from rpg_rules.errors import MissingReferenceError
from rpg_rules.features.feature_data import FeatureType
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.races.race_manager import get_race_manager


def write_spells(directory, entries):
    (directory / "spells.json").write_text(json.dumps({"items": entries}), encoding="utf-8")


class TestRulesDataset:
    """Tests for the bundled rules dataset."""

    def test_bundled_content_validates(self, dataset):
        """Test that the shipped content has no broken references."""
        assert dataset.validate() == []

    def test_stats(self, dataset):
        stats = dataset.stats()
        assert stats.classes == 12
        assert stats.races == 9
        assert stats.backgrounds == 8
        assert stats.feats == 9
        assert stats.items > 0
        assert stats.spells > 0

    def test_get_returns_none_for_unknown(self, dataset):
        assert dataset.get_class("artificer") is None
        assert dataset.get_race("warforged") is None
        assert dataset.get_item("vorpal_spoon") is None
        assert dataset.get_spell("wish_lite") is None
        assert dataset.get_feature("not_a_feature") is None
        assert dataset.get_feature(None) is None

    @pytest.mark.parametrize(
        "method,key",
        [
            ("require_class", "artificer"),
            ("require_race", "warforged"),
            ("require_background", "pirate"),
            ("require_item", "vorpal_spoon"),
            ("require_spell", "wish_lite"),
            ("require_feature", "not_a_feature"),
        ],
    )
    def test_require_raises_missing_reference(self, dataset, method, key):
        """Test that require_* lookups raise for unknown keys."""
        with pytest.raises(MissingReferenceError) as exc_info:
            getattr(dataset, method)(key)
        assert exc_info.value.key == key
        assert key in str(exc_info.value)

    def test_missing_reference_is_key_error(self, dataset):
        with pytest.raises(KeyError):
            dataset.require_class("artificer")

    def test_lookups_are_case_insensitive(self, dataset):
        assert dataset.get_class("Fighter").class_key == "fighter"
        assert dataset.get_race("ELF").race_key == "elf"

    def test_features_typed_and_plain(self, dataset):
        """Test that features resolve by FeatureKey or plain string."""
        assert dataset.get_feature(FeatureKey.RAGE) is dataset.get_feature("rage")

    def test_invocations_registered(self, dataset):
        """Test that selectable invocations resolve like any other feature."""
        witch_sight = dataset.get_feature("invocation_witch_sight")
        assert witch_sight.feature_type == FeatureType.INVOCATION
        assert dataset.get_feature("invocation_agonizing_blast").mechanics["requires_spell"] == "eldritch_blast"

    def test_warlock_arcanum_spells(self, dataset):
        for spell_level in (6, 7, 8, 9):
            assert dataset.spells_for_class("warlock", max_level=spell_level, min_level=spell_level)

    def test_feats(self, dataset):
        keys = {feat.key.value for feat in dataset.feats()}
        assert {"alert", "tough", "magic_initiate", "skilled", "great_weapon_master"} <= keys
        assert "rage" not in keys

    def test_spells_for_class_bounds(self, dataset):
        """Test filtering a spell list by level."""
        cantrips = dataset.spells_for_class("wizard", max_level=0)
        assert cantrips
        assert all(spell.is_cantrip for spell in cantrips)
        leveled = {s.key for s in dataset.spells_for_class("wizard", max_level=1, min_level=1)}
        assert "magic_missile" in leveled
        assert "fire_bolt" not in leveled
        assert "fireball" not in leveled


class TestDatasetLoading:
    """Tests for loading content from an override directory."""

    def test_unknown_class_in_spell_fails_strict(self, tmp_path):
        """Test that a spell naming an unknown class list fails the load."""
        write_spells(tmp_path, [
            {"key": "bone_dart", "level": 0, "school": "necromancy", "classes": ["necromancer"]},
        ])
        with pytest.raises(DatasetValidationError) as exc_info:
            RulesDataset(tmp_path)
        assert any("necromancer" in error for error in exc_info.value.errors)

    def test_lenient_mode_loads_anyway(self, tmp_path):
        write_spells(tmp_path, [
            {"key": "bone_dart", "level": 0, "school": "necromancy", "classes": ["necromancer"]},
        ])
        dataset = RulesDataset(tmp_path, strict=False)
        assert dataset.get_spell("bone_dart") is not None

    def test_malformed_spell_skipped(self, tmp_path):
        """Test that one bad entry does not hide the others."""
        write_spells(tmp_path, [
            {"key": "broken", "level": 12, "school": "evocation"},
            {"key": "spark", "level": 0, "school": "evocation", "classes": ["wizard"]},
        ])
        dataset = RulesDataset(tmp_path)
        assert dataset.get_spell("broken") is None
        assert dataset.get_spell("spark") is not None

    def test_missing_files_give_empty_catalogs(self, tmp_path):
        dataset = RulesDataset(tmp_path)
        assert dataset.stats().items == 0
        assert dataset.stats().spells == 0
        assert dataset.stats().classes == 12

    def test_global_dataset_is_shared(self):
        assert get_rules_dataset() is get_rules_dataset()

    def test_reset_drops_global_dataset(self):
        first = get_rules_dataset()
        reset_rules_dataset()
        assert get_rules_dataset() is not first

    def test_new_content_dir_reloads(self, tmp_path):
        write_spells(tmp_path, [])
        default = get_rules_dataset()
        custom = get_rules_dataset(tmp_path)
        assert custom is not default
        assert custom.content_dir == tmp_path


class TestRaces:
    """Tests for race and background definitions."""

    def test_subrace_lookup(self):
        dwarf = get_race_manager().get("dwarf")
        assert dwarf.get_subrace("hill_dwarf").ability_bonuses == {"wis": 1}
        assert dwarf.get_subrace("sky_dwarf") is None
        assert dwarf.speed == 25

    def test_all_traits_include_subrace(self):
        trait_keys = {t.trait_key for t in get_race_manager().get("dwarf").all_traits("hill_dwarf")}
        assert {"darkvision", "dwarven_resilience", "dwarven_toughness"} <= trait_keys

    def test_get_trait(self):
        manager = get_race_manager()
        assert manager.get_trait("elf", "keen_senses") is not None
        assert manager.get_trait("dwarf", "dwarven_toughness") is None
        assert manager.get_trait("dwarf", "dwarven_toughness", "hill_dwarf") is not None

    def test_background_feats(self, dataset):
        assert dataset.require_background("folk_hero").feat == FeatureKey.TOUGH
        assert dataset.require_background("criminal").feat == FeatureKey.ALERT


class TestBonusChoicesFromAmounts:
    """Tests for converting flat racial bonus maps into floating indices."""

    def test_half_elf_floating_bonuses(self, dataset):
        """Test that +1/+1 choices map to the two floating bonuses."""
        half_elf = dataset.require_race("half_elf")
        choices, unmatched = half_elf.bonus_choices_from_amounts({"cha": 2, "dex": 1, "con": 1})
        assert choices == {"dex": 0, "con": 1}
        assert unmatched == {}

    def test_fixed_bonus_is_not_a_choice(self, dataset):
        """Test that amounts covered by fixed bonuses are dropped."""
        elf = dataset.require_race("elf")
        choices, unmatched = elf.bonus_choices_from_amounts({"dex": 2, "int": 1}, "high_elf")
        assert choices == {}
        assert unmatched == {}

    def test_unmatched_remainder(self, dataset):
        """Test that a remainder with no floating bonus is reported."""
        half_elf = dataset.require_race("half_elf")
        choices, unmatched = half_elf.bonus_choices_from_amounts({"str": 2})
        assert choices == {}
        assert unmatched == {"str": 2}

    def test_each_floating_bonus_used_once(self, dataset):
        half_elf = dataset.require_race("half_elf")
        choices, unmatched = half_elf.bonus_choices_from_amounts({"str": 1, "dex": 1, "con": 1})
        assert choices == {"str": 0, "dex": 1}
        assert unmatched == {"con": 1}
