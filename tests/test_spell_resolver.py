"""
Unit tests for spell resolution.

Tests SpellResolutionEngine from rpg_rules/magic/spell_resolver.py. Dice are
fixed through the fixed_dice fixture: every d20 shows fixed_dice.d20 and
every damage die shows fixed_dice.die.
"""

import pytest

from rpg_rules.data_models import DiceResult, DiceRoller
from rpg_rules.magic import SpellResolutionEngine, SpellTarget


class FixedDice:
    """Deterministic stand-ins for DiceRoller.roll_d20 and roll_formula."""

    def __init__(self):
        self.d20 = 10
        self.die = 3

    def roll_d20(self, reason=""):
        return DiceResult("1d20", [self.d20], 0, self.d20, reason)

    def roll_formula(self, formula, reason=""):
        rolls = [min(self.die, formula.die_size)] * formula.num_dice
        return DiceResult(str(formula), rolls, formula.modifier, sum(rolls) + formula.modifier, reason)


@pytest.fixture
def fixed_dice(monkeypatch):
    dice = FixedDice()
    monkeypatch.setattr(DiceRoller, "roll_d20", staticmethod(dice.roll_d20))
    monkeypatch.setattr(DiceRoller, "roll_formula", staticmethod(dice.roll_formula))
    return dice


@pytest.fixture
def engine(dataset):
    return SpellResolutionEngine(dataset)


def goblin(armor_class=15, **save_bonuses):
    return SpellTarget("goblin", armor_class=armor_class, save_bonuses=save_bonuses)


class TestScaling:
    """Tests for damage dice scaling."""

    @pytest.mark.parametrize("level,dice", [(1, "1d10"), (4, "1d10"), (5, "2d10"), (11, "3d10"), (17, "4d10")])
    def test_cantrip_scaling(self, engine, dataset, level, dice):
        fire_bolt = dataset.require_spell("fire_bolt")
        assert engine.scaled_dice(fire_bolt, fire_bolt.effects[0], level, 0) == dice

    def test_upcast_adds_dice(self, engine, dataset):
        """Test that each slot level above the spell's adds increase dice."""
        fireball = dataset.require_spell("fireball")
        assert engine.scaled_dice(fireball, fireball.effects[0], 9, 3) == "8d6"
        assert engine.scaled_dice(fireball, fireball.effects[0], 9, 5) == "10d6"

    def test_upcast_keeps_modifier(self, engine, dataset):
        missile = dataset.require_spell("magic_missile")
        assert engine.scaled_dice(missile, missile.effects[0], 3, 2) == "4d4+3"

    def test_unscaled_effect(self, engine, dataset):
        ice_storm = dataset.require_spell("ice_storm")
        assert engine.scaled_dice(ice_storm, ice_storm.effects[1], 9, 6) == "4d6"


class TestRejectedCasts:
    """Tests for casts that fail before any roll."""

    def test_unknown_spell(self, engine, wizard):
        result = engine.cast(wizard, "wish_lite", [goblin()])
        assert not result.success
        assert result.reason == "Unknown spell: wish_lite"

    def test_slot_below_spell_level(self, engine, wizard):
        result = engine.cast(wizard, "fireball", [goblin()], cast_level=2)
        assert not result.success
        assert result.reason == "Fireball needs a level 3 slot; level 2 given"

    def test_slot_above_nine(self, engine, wizard):
        result = engine.cast(wizard, "fireball", [goblin()], cast_level=10)
        assert not result.success
        assert result.cast_level == 10


class TestAttackSpells:
    """Tests for spell attack rolls (wizard attack bonus +5)."""

    def test_hit(self, engine, wizard, fixed_dice):
        result = engine.cast(wizard, "fire_bolt", [goblin(armor_class=15)])
        resolution = result.resolutions[0]
        assert result.success
        assert result.cast_level == 0
        assert resolution.attack_roll == 15
        assert resolution.hit
        assert resolution.damage == 3

    def test_miss(self, engine, wizard, fixed_dice):
        fixed_dice.d20 = 9
        resolution = engine.cast(wizard, "fire_bolt", [goblin(armor_class=15)]).resolutions[0]
        assert not resolution.hit
        assert resolution.damage == 0

    def test_natural_one_always_misses(self, engine, wizard, fixed_dice):
        fixed_dice.d20 = 1
        resolution = engine.cast(wizard, "fire_bolt", [goblin(armor_class=1)]).resolutions[0]
        assert not resolution.hit
        assert not resolution.critical

    def test_natural_twenty_doubles_dice(self, engine, wizard, fixed_dice):
        """Test that a critical rolls twice the dice but reports the base dice."""
        fixed_dice.d20 = 20
        resolution = engine.cast(wizard, "fire_bolt", [goblin(armor_class=30)]).resolutions[0]
        assert resolution.critical
        assert resolution.hit
        assert resolution.damage_dice == "1d10"
        assert resolution.damage == 6

    def test_cast_level_ignored_for_cantrips(self, engine, wizard, fixed_dice):
        assert engine.cast(wizard, "fire_bolt", [goblin()], cast_level=3).cast_level == 0


class TestSaveSpells:
    """Tests for saving throws (wizard spell save DC 13)."""

    def test_failed_save_full_damage(self, engine, wizard, fixed_dice):
        resolution = engine.cast(wizard, "burning_hands", [goblin(dex=2)]).resolutions[0]
        assert resolution.save_roll == 12
        assert resolution.saved is False
        assert resolution.damage == 9

    def test_save_halves_damage(self, engine, wizard, fixed_dice):
        """Test that meeting the DC halves the damage, rounding down."""
        resolution = engine.cast(wizard, "burning_hands", [goblin(dex=3)]).resolutions[0]
        assert resolution.saved is True
        assert resolution.damage_rolled == 9
        assert resolution.damage == 4

    def test_save_negates_damage(self, engine, wizard, fixed_dice):
        resolution = engine.cast(wizard, "toll_the_dead", [goblin(wis=3)]).resolutions[0]
        assert resolution.saved is True
        assert resolution.damage == 0
        assert resolution.damage_rolled == 0

    def test_caster_without_class_rules(self, engine, make_snapshot, fixed_dice):
        """Test that an unknown class falls back to 8 + proficiency."""
        caster = make_snapshot("artificer")
        resolution = engine.cast(caster, "burning_hands", [goblin()]).resolutions[0]
        assert resolution.saved is True


class TestAutomaticAndMultipleTargets:
    """Tests for automatic effects and several targets."""

    def test_magic_missile(self, engine, wizard, fixed_dice):
        result = engine.cast(wizard, "magic_missile", [goblin()])
        assert result.resolutions[0].damage == 12
        upcast = engine.cast(wizard, "magic_missile", [goblin()], cast_level=2)
        assert upcast.resolutions[0].damage_dice == "4d4+3"
        assert upcast.total_damage("goblin") == 15

    def test_each_target_resolved_separately(self, engine, wizard, fixed_dice):
        targets = [SpellTarget("orc", save_bonuses={"dex": 0}), SpellTarget("rogue", save_bonuses={"dex": 5})]
        result = engine.cast(wizard, "burning_hands", targets)
        assert result.damage_by_target == {"orc": 9, "rogue": 4}

    def test_non_damage_effects_unresolved(self, engine, wizard, fixed_dice):
        result = engine.cast(wizard, "hold_person", [goblin()])
        assert result.success
        assert result.resolutions == []
        assert result.unresolved_effects == ["condition"]

    def test_to_dict(self, engine, wizard, fixed_dice):
        data = engine.cast(wizard, "magic_missile", [goblin()]).to_dict()
        assert data["spell_name"] == "Magic Missile"
        assert data["resolutions"][0]["damage"] == 12


class TestDamageBonuses:
    """Tests for class damage bonuses."""

    def test_elemental_affinity(self, engine, make_snapshot, fixed_dice):
        sorcerer = make_snapshot(
            "sorcerer", level=6, features=("elemental_affinity",), draconic_ancestry="fire"
        )
        resolution = engine.cast(sorcerer, "fireball", [goblin()]).resolutions[0]
        assert resolution.bonuses == [("elemental_affinity", 2)]
        assert resolution.damage == 26

    def test_bonus_once_per_target(self, engine, make_snapshot, fixed_dice):
        """Test that a two-effect spell adds Empowered Evocation once."""
        wizard = make_snapshot("wizard", level=10, features=("empowered_evocation",))
        result = engine.cast(wizard, "ice_storm", [goblin()])
        first, second = result.resolutions
        assert first.damage == 8
        assert second.bonuses == []
        assert second.damage == 12
        assert result.total_damage("goblin") == 20

    def test_no_bonus_on_a_miss(self, engine, make_snapshot, fixed_dice):
        fixed_dice.d20 = 1
        warlock = make_snapshot("warlock", level=5, features=("invocation_agonizing_blast",))
        resolution = engine.cast(warlock, "eldritch_blast", [goblin()]).resolutions[0]
        assert resolution.bonuses == []
        assert resolution.damage == 0

    def test_agonizing_blast(self, engine, make_snapshot, fixed_dice):
        warlock = make_snapshot("warlock", level=5, features=("invocation_agonizing_blast",))
        resolution = engine.cast(warlock, "eldritch_blast", [goblin(armor_class=10)]).resolutions[0]
        assert resolution.damage_dice == "2d10"
        assert resolution.damage == 10
