"""
Unit tests for the RulesEngine facade and its configuration.

Tests rpg_rules/main.py.
"""

import json
from pathlib import Path

import pytest

from rpg_rules.advancement import InvalidTransitionError, LevelUpStep, LevelUpWizard
from rpg_rules.content_loader import get_rules_dataset
from rpg_rules.data_models import CharacterSnapshot, DiceRoller
from rpg_rules.errors import MissingReferenceError
from rpg_rules.main import LEGACY_BONUS_KEY, RulesConfig, RulesEngine
from rpg_rules.magic import SpellTarget
from rpg_rules.observability.run_log import get_run_log


BASE_SCORES = {"str": 15, "dex": 14, "con": 14, "int": 10, "wis": 12, "cha": 8}


@pytest.fixture
def engine():
    return RulesEngine()


class TestRulesConfig:
    """Tests for configuration checks."""

    def test_defaults(self):
        config = RulesConfig()
        assert config.content_dir is None
        assert config.max_level == 20

    def test_content_dir_becomes_path(self):
        assert RulesConfig(content_dir="/tmp/content").content_dir == Path("/tmp/content")

    @pytest.mark.parametrize("max_level", [0, 21])
    def test_level_cap_range(self, max_level):
        with pytest.raises(ValueError):
            RulesConfig(max_level=max_level)


class TestEngineSetup:
    """Tests for wiring the subsystems together."""

    def test_uses_global_dataset(self, engine):
        assert engine.dataset is get_rules_dataset()

    def test_content_dir_override(self, tmp_path):
        engine = RulesEngine(RulesConfig(content_dir=tmp_path))
        assert engine.dataset.content_dir == tmp_path
        assert engine.dataset is not get_rules_dataset()

    def test_dice_seed(self):
        RulesEngine(RulesConfig(dice_seed=7))
        first = DiceRoller.roll("4d6").rolls
        DiceRoller.set_seed(7)
        assert DiceRoller.roll("4d6").rolls == first

    def test_run_log(self, engine):
        assert engine.run_log is get_run_log()

    def test_calculator_is_shared(self, fighter):
        """Test that the configured calculator reaches every subsystem."""
        engine = RulesEngine(RulesConfig(default_shield_bonus=3))
        assert engine.calculator.default_shield_bonus == 3
        assert engine.strategy(fighter).calculator is engine.calculator
        assert engine.progression.calculator is engine.calculator
        assert engine.spells.calculator is engine.calculator
        assert engine.builder.calculator is engine.calculator
        flow = engine.start_level_up(engine.grant_experience(fighter, 300))
        assert flow.calculator is engine.calculator
        assert flow.max_level == 20

    def test_repr(self, engine):
        assert repr(engine) == "RulesEngine(content_dir=None, max_level=20)"


class TestEngineQueries:
    """Tests for queries and transforms routed through the engine."""

    def test_create_and_summarize(self, engine):
        fighter = engine.create_character(
            "Bruna",
            "fighter",
            "human",
            BASE_SCORES,
            starting_items=["chain_mail"],
            equip={"armor": "chain_mail"},
        )
        summary = engine.summary(fighter)
        assert summary["armor_class"] == 16
        assert summary["class"]["class"] == "fighter"
        assert summary["class"]["attacks"] == 1
        assert engine.hit_points(fighter) == 12
        assert engine.skill_bonus(fighter, "athletics") == 3
        assert engine.saving_throw_bonus(fighter, "str") == 5
        assert engine.initiative_bonus(fighter) == 2

    def test_resources_and_rests(self, engine, fighter):
        spent, result = engine.spend_resource(fighter, "second_wind")
        assert result.success
        assert spent.resources["second_wind"].current == 0
        rested = engine.short_rest(spent)
        assert rested.resources["second_wind"].current == 1

    def test_failed_spend_returns_input(self, engine, fighter):
        unchanged, result = engine.spend_resource(fighter, "ki")
        assert not result.success
        assert unchanged is fighter

    def test_long_rest_restores_hit_points(self, engine, fighter):
        rested = engine.long_rest(fighter.evolve(hp_current=3))
        assert rested.hp_current == fighter.hp_max

    def test_equipment(self, engine, wizard):
        carrying = engine.add_item(wizard, "dagger")
        armed = engine.equip(carrying, 0, "main_hand")
        assert armed.equipped("main_hand").item_key == "dagger"
        assert engine.unequip(armed, "main_hand").equipped("main_hand") is None

    def test_cast_spell(self, engine, wizard):
        result = engine.cast_spell(wizard, "hold_person", [SpellTarget("ogre")])
        assert result.success
        assert result.unresolved_effects == ["condition"]

    def test_summary_for_unknown_class(self, engine, fighter):
        """Test that the summary degrades instead of failing on an unknown class."""
        stranger = fighter.evolve(class_key="artificer")
        summary = engine.summary(stranger)
        assert summary["class"] is None
        assert summary["armor_class"] == engine.armor_class(stranger)
        with pytest.raises(MissingReferenceError):
            engine.strategy(stranger)

    def test_start_level_up(self, engine, fighter):
        granted = engine.grant_experience(fighter, 300)
        flow = engine.start_level_up(granted)
        assert isinstance(flow, LevelUpWizard)
        assert flow.current_step == LevelUpStep.ROLL_HP


class TestLevelCap:
    """Tests for the configured level cap."""

    def test_cap_drops_pending_level_up(self, fighter):
        engine = RulesEngine(RulesConfig(max_level=1))
        granted = engine.grant_experience(fighter, 300)
        assert granted.experience == 300
        assert granted.pending_level_up is None

    def test_cap_on_creation(self):
        engine = RulesEngine(RulesConfig(max_level=1))
        fighter = engine.create_character("Vet", "fighter", "human", BASE_SCORES, experience=300)
        assert fighter.pending_level_up is None

    def test_below_cap_unchanged(self, fighter):
        engine = RulesEngine(RulesConfig(max_level=2))
        assert engine.grant_experience(fighter, 300).pending_level_up.target_level == 2

    def test_level_up_all_stops_at_cap(self, fighter, seeded_dice):
        """Test that chained level-ups end at the configured cap."""
        engine = RulesEngine(RulesConfig(max_level=2))

        def choose(wizard):
            wizard.roll_hp()
            assert wizard.advance()

        advanced = engine.level_up_all(engine.grant_experience(fighter, 900), choose)
        assert advanced.level == 2
        assert advanced.pending_level_up is None

    def test_start_level_up_beyond_cap(self, engine, fighter):
        granted = engine.grant_experience(fighter, 300)
        capped = RulesEngine(RulesConfig(max_level=1))
        with pytest.raises(InvalidTransitionError):
            capped.start_level_up(granted)

    def test_party_grant_capped(self, fighter, wizard):
        engine = RulesEngine(RulesConfig(max_level=1))
        party, result = engine.grant_party_experience([fighter, wizard], 600)
        assert all(member.pending_level_up is None for member in party)
        assert result.xp_per_character == 300


class TestSerialization:
    """Tests for saving and loading snapshots."""

    def test_json_round_trip(self, engine, fighter):
        restored = engine.load_snapshot_json(engine.save_snapshot_json(fighter))
        assert restored == fighter

    def test_pending_level_up_survives(self, engine, fighter):
        granted = engine.grant_experience(fighter, 300)
        restored = engine.load_snapshot(engine.save_snapshot(granted))
        assert restored.pending_level_up == granted.pending_level_up

    def test_legacy_bonus_map_converted(self, engine, make_snapshot):
        """Test that an ability -> amount racial bonus map becomes floating indices."""
        data = make_snapshot(race_key="half_elf").to_dict()
        data[LEGACY_BONUS_KEY] = {"cha": 2, "dex": 1, "con": 1}
        restored = engine.load_snapshot(data)
        assert restored.bonus_choices == {"dex": 0, "con": 1}
        assert engine.calculator.effective_score(restored, "dex") == 15

    def test_existing_bonus_choices_win(self, engine, make_snapshot):
        data = make_snapshot(race_key="half_elf", bonus_choices={"str": 0, "wis": 1}).to_dict()
        data[LEGACY_BONUS_KEY] = {"cha": 2, "dex": 1, "con": 1}
        assert engine.load_snapshot(data).bonus_choices == {"str": 0, "wis": 1}

    def test_legacy_map_for_unknown_race(self, engine, make_snapshot):
        data = make_snapshot(race_key="warforged").to_dict()
        data[LEGACY_BONUS_KEY] = {"con": 2}
        restored = engine.load_snapshot(data)
        assert isinstance(restored, CharacterSnapshot)
        assert restored.bonus_choices == {}


class TestObservability:
    """Tests for reading and clearing the logs through the engine."""

    def test_run_log_text(self, engine, fighter):
        engine.grant_experience(fighter, 50)
        text = engine.run_log_text()
        assert text.startswith("=== Run Log ===")
        assert "TRANSFORM grant_experience" in text
        assert "TRANSFORM grant_experience" in engine.run_log_text(max_events=1)

    def test_run_log_summary(self, engine, fighter):
        before = engine.run_log_summary()["transforms"]
        engine.grant_experience(fighter, 50)
        assert engine.run_log_summary()["transforms"] == before + 1

    def test_export_run_log(self, engine, fighter):
        engine.grant_experience(fighter, 50)
        data = json.loads(engine.export_run_log())
        assert data["events"][-1]["transform"] == "grant_experience"
        assert data["events"][-1]["details"] == {"amount": 50, "experience": 50}

    def test_clear_logs(self, engine, seeded_dice):
        seeded_dice.roll("1d20", "check")
        engine.clear_logs()
        assert engine.run_log.get_event_count() == 0
        assert DiceRoller.get_roll_log() == []
