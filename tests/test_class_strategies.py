"""
Unit tests for the per-class rules strategies.

Tests build_strategy from rpg_rules/classes/dispatch.py and the strategy
subclasses in rpg_rules/classes/. Hand-built snapshots use the human
default scores, so every ability modifier is +2.
"""

import pytest

from rpg_rules.classes import STRATEGY_CLASSES, CharacterClass, build_strategy
from rpg_rules.data_models import NOT_APPLICABLE, RechargeRule
from rpg_rules.errors import MissingReferenceError
from rpg_rules.features.feature_keys import FeatureKey
from rpg_rules.resources import UNLIMITED_USES, ResourcePool


@pytest.fixture
def strategy_for(make_snapshot, dataset):
    """Build a strategy for a hand-built snapshot."""

    def _build(class_key, level=1, **overrides):
        return build_strategy(make_snapshot(class_key, level=level, **overrides), dataset)

    return _build


class TestDispatch:
    """Tests for strategy dispatch."""

    def test_every_class_has_a_strategy(self):
        assert set(STRATEGY_CLASSES) == set(CharacterClass)

    def test_builds_matching_strategy(self, strategy_for):
        strategy = strategy_for("warlock")
        assert type(strategy) is STRATEGY_CLASSES[CharacterClass.WARLOCK]
        assert repr(strategy) == "WarlockStrategy('Test', level=1)"

    def test_unknown_class(self, make_snapshot):
        with pytest.raises(MissingReferenceError):
            build_strategy(make_snapshot("artificer"))

    def test_neutral_defaults(self, strategy_for):
        """Test that hooks a class does not override are not applicable."""
        rogue = strategy_for("rogue")
        assert rogue.rage_damage_bonus() is NOT_APPLICABLE
        assert rogue.divine_smite_dice(1) is NOT_APPLICABLE
        assert rogue.unarmored_defense() is NOT_APPLICABLE
        assert rogue.spell_save_dc() is NOT_APPLICABLE
        assert rogue.resource_pool() is NOT_APPLICABLE
        assert rogue.critical_hit_range() == 20
        assert rogue.cantrips_known_count() == 0

    def test_describe(self, strategy_for):
        summary = strategy_for("fighter").describe()
        assert summary["class"] == "fighter"
        assert summary["saving_throws"] == ["str", "con"]
        assert summary["spellcaster"] is False
        assert summary["resource"] is None
        assert summary["attacks"] == 1
        assert summary["critical_range"] == 20


class TestFighter:
    """Tests for the fighter strategy."""

    def test_pools_by_level(self, strategy_for):
        assert set(strategy_for("fighter").resource_pools()) == {"second_wind"}
        assert set(strategy_for("fighter", level=2).resource_pools()) == {"second_wind", "action_surge"}
        pools = strategy_for("fighter", level=17).resource_pools()
        assert pools["action_surge"].max == 2
        assert pools["indomitable"].max == 3
        assert pools["indomitable"].recharge_rule == RechargeRule.LONG_REST

    def test_superiority_dice(self, strategy_for):
        """Test that Battle Masters get superiority dice that grow."""
        strategy = strategy_for("fighter", level=3, features=("battle_master_combat_superiority",))
        pool = strategy.resource_pool()
        assert (pool.max, pool.die) == (4, "d8")
        improved = strategy_for(
            "fighter",
            level=10,
            features=("battle_master_combat_superiority", "battle_master_improved_combat_superiority"),
        )
        assert (improved.resource_pool().max, improved.resource_pool().die) == (5, "d10")
        assert improved.describe()["superiority_die"] == "d10"

    def test_critical_range(self, strategy_for):
        assert strategy_for("fighter", level=3, features=("champion_improved_critical",)).critical_hit_range() == 19
        superior = strategy_for(
            "fighter", level=15, features=("champion_improved_critical", "champion_superior_critical")
        )
        assert superior.critical_hit_range() == 18

    @pytest.mark.parametrize("level,attacks", [(1, 1), (4, 1), (5, 2), (11, 3), (20, 4)])
    def test_extra_attacks(self, strategy_for, level, attacks):
        assert strategy_for("fighter", level=level).extra_attack_count() == attacks

    def test_second_wind_healing(self, strategy_for):
        assert strategy_for("fighter", level=3).second_wind_healing() == "1d10+3"

    def test_eldritch_knight_casting_gated_by_feature(self, strategy_for):
        """Test that subclass casting switches on with its feature."""
        without = strategy_for("fighter", level=3, subclass_key="eldritch_knight")
        assert not without.is_spellcaster()
        knight = strategy_for(
            "fighter",
            level=3,
            subclass_key="eldritch_knight",
            features=("eldritch_knight_spellcasting",),
        )
        assert knight.is_spellcaster()
        assert knight.spell_save_dc() == 12
        assert knight.spell_slots() == {1: 2}
        assert knight.spells_known_count() == 3
        assert knight.cantrips_known_count() == 2


class TestBarbarian:
    """Tests for the barbarian strategy."""

    @pytest.mark.parametrize("level,uses", [(1, 2), (3, 3), (6, 4), (12, 5), (17, 6)])
    def test_rage_uses(self, strategy_for, level, uses):
        assert strategy_for("barbarian", level=level).resource_pool().max == uses

    def test_unlimited_rage_at_twenty(self, strategy_for):
        assert strategy_for("barbarian", level=20).resource_pool().max == UNLIMITED_USES

    @pytest.mark.parametrize("level,bonus", [(1, 2), (8, 2), (9, 3), (16, 4)])
    def test_rage_damage(self, strategy_for, level, bonus):
        assert strategy_for("barbarian", level=level).rage_damage_bonus() == bonus

    def test_unarmored_defense(self, strategy_for):
        assert strategy_for("barbarian").unarmored_defense() == 14

    def test_brutal_critical(self, strategy_for):
        assert strategy_for("barbarian").brutal_critical_dice() == 0
        assert strategy_for("barbarian", level=13).brutal_critical_dice() == 2

    def test_divine_fury(self, strategy_for):
        assert strategy_for("barbarian", level=6).divine_fury_damage() is NOT_APPLICABLE
        zealot = strategy_for("barbarian", level=6, features=("zealot_divine_fury",))
        assert zealot.divine_fury_damage() == "1d6+3"

    def test_extra_attack_feature(self, strategy_for):
        assert strategy_for("barbarian", level=5, features=("extra_attack",)).extra_attack_count() == 2


class TestMonk:
    """Tests for the monk strategy."""

    def test_ki_from_level_two(self, strategy_for):
        assert strategy_for("monk").resource_pool() is NOT_APPLICABLE
        assert strategy_for("monk", level=5).resource_pool().max == 5

    @pytest.mark.parametrize("level,die", [(1, "1d4"), (5, "1d6"), (11, "1d8"), (17, "1d10")])
    def test_martial_arts_die(self, strategy_for, level, die):
        assert strategy_for("monk", level=level).unarmed_damage_die() == die

    def test_ki_pool(self, strategy_for):
        """Test that Ki exists from level 1 and holds nothing until level 2."""
        assert strategy_for("monk").resource_pool().max == 0
        pool = strategy_for("monk", level=6).resource_pool()
        assert pool.max == 6
        assert pool.recharge_rule == RechargeRule.BOTH

    def test_ki_save_dc(self, strategy_for):
        assert strategy_for("monk").ki_save_dc() == 12

    def test_ki_costs(self, strategy_for):
        """Test that techniques need Ki, and feature techniques their feature."""
        assert strategy_for("monk", level=2).ki_ability_cost("patient_defense") is None
        monk = strategy_for("monk", level=2, features=("ki",))
        assert monk.ki_ability_cost("patient_defense") == 1
        assert monk.ki_ability_cost("stunning_strike") is None
        assert monk.ki_ability_cost("teleport") is None
        stunning = strategy_for("monk", level=5, features=("ki", "stunning_strike"))
        assert stunning.ki_ability_cost("stunning_strike") == 1


class TestRogue:
    """Tests for the rogue strategy."""

    @pytest.mark.parametrize("level,dice", [(1, "1d6"), (2, "1d6"), (3, "2d6"), (11, "6d6"), (20, "10d6")])
    def test_sneak_attack(self, strategy_for, level, dice):
        assert strategy_for("rogue", level=level).sneak_attack_dice() == dice

    def test_stroke_of_luck(self, strategy_for):
        assert strategy_for("rogue", level=20).resource_pools() == {}
        lucky = strategy_for("rogue", level=20, features=("stroke_of_luck",))
        assert lucky.resource_pools()["stroke_of_luck"].max == 1


class TestSorcerer:
    """Tests for the sorcerer strategy."""

    def test_sorcery_points(self, strategy_for):
        empty = strategy_for("sorcerer").resource_pool()
        assert empty.max == 0
        assert empty.is_empty
        pool = strategy_for("sorcerer", level=2).resource_pool()
        assert pool.max == 2
        assert pool.recharge_rule == RechargeRule.LONG_REST

    def test_known_caster(self, strategy_for):
        sorcerer = strategy_for("sorcerer")
        assert sorcerer.spells_known_count() == 2
        assert sorcerer.prepared_spells_count() is NOT_APPLICABLE
        assert sorcerer.spell_save_dc() == 12
        assert sorcerer.spell_attack_bonus() == 4

    def test_draconic_resilience(self, strategy_for):
        assert strategy_for("sorcerer").unarmored_defense() is NOT_APPLICABLE
        dragon = strategy_for("sorcerer", features=("draconic_resilience",))
        assert dragon.unarmored_defense() == 15
        assert dragon.flat_hp_bonus_per_level() == 1

    def test_elemental_affinity(self, strategy_for, dataset):
        """Test that CHA is added only for the ancestry's damage type."""
        fireball = dataset.require_spell("fireball")
        sorcerer = strategy_for(
            "sorcerer", level=6, features=("elemental_affinity",), draconic_ancestry="fire"
        )
        assert sorcerer.elemental_affinity_bonus(fireball) == 2
        assert sorcerer.elemental_affinity_bonus(dataset.require_spell("lightning_bolt")) is NOT_APPLICABLE
        assert sorcerer.spell_damage_bonuses(fireball) == [("elemental_affinity", 2)]

    def test_elemental_affinity_needs_ancestry(self, strategy_for, dataset):
        sorcerer = strategy_for("sorcerer", level=6, features=("elemental_affinity",))
        assert sorcerer.elemental_affinity_bonus(dataset.require_spell("fireball")) is NOT_APPLICABLE

    def test_metamagic_cost(self, strategy_for, dataset):
        """Test flat costs, twinned by spell level, and unknown options."""
        sorcerer = strategy_for(
            "sorcerer",
            level=3,
            features=("metamagic_quickened_spell", "metamagic_twinned_spell"),
        )
        assert sorcerer.metamagic_cost(FeatureKey.METAMAGIC_QUICKENED_SPELL) == 2
        assert sorcerer.metamagic_cost(FeatureKey.METAMAGIC_TWINNED_SPELL, dataset.require_spell("fireball")) == 3
        assert sorcerer.metamagic_cost(FeatureKey.METAMAGIC_TWINNED_SPELL, dataset.require_spell("fire_bolt")) == 1
        assert sorcerer.metamagic_cost(FeatureKey.METAMAGIC_HEIGHTENED_SPELL) is NOT_APPLICABLE
        assert sorcerer.metamagic_cost("not_metamagic") is NOT_APPLICABLE
        assert sorcerer.describe()["metamagic"] == ["metamagic_quickened_spell", "metamagic_twinned_spell"]


class TestWarlock:
    """Tests for the warlock strategy."""

    @pytest.mark.parametrize("level,count,slot_level", [(1, 1, 1), (2, 2, 1), (5, 2, 3), (11, 3, 5), (17, 4, 5)])
    def test_pact_slots(self, strategy_for, level, count, slot_level):
        pool = strategy_for("warlock", level=level).resource_pool()
        assert (pool.max, pool.slot_level) == (count, slot_level)
        assert pool.recharge_rule == RechargeRule.SHORT_REST

    def test_long_rest_restores_pact_slots(self, make_snapshot, dataset):
        snapshot = make_snapshot(
            "warlock",
            level=2,
            resources={"pact_slots": ResourcePool("pact_slots", 0, 2, RechargeRule.SHORT_REST, slot_level=1)},
        )
        assert build_strategy(snapshot, dataset).on_long_rest()["pact_slots"].current == 2

    def test_armor_of_shadows(self, strategy_for):
        assert strategy_for("warlock", level=2).unarmored_defense() is NOT_APPLICABLE
        shadowed = strategy_for("warlock", level=2, features=("invocation_armor_of_shadows",))
        assert shadowed.unarmored_defense() == 15

    def test_agonizing_blast(self, strategy_for, dataset):
        """Test that CHA is added per eldritch blast beam."""
        warlock = strategy_for("warlock", level=5, features=("invocation_agonizing_blast",))
        assert warlock.eldritch_blast_beams() == 2
        blast = dataset.require_spell("eldritch_blast")
        assert warlock.spell_damage_bonuses(blast) == [("invocation_agonizing_blast", 4)]
        assert warlock.spell_damage_bonuses(dataset.require_spell("hellish_rebuke")) == []

    def test_dark_ones_blessing(self, strategy_for):
        fiend = strategy_for("warlock", level=3, features=("fiend_dark_ones_blessing",))
        assert fiend.dark_ones_blessing_temp_hp() == 5
        assert strategy_for("warlock", level=3).dark_ones_blessing_temp_hp() is NOT_APPLICABLE

    def test_describe(self, strategy_for):
        summary = strategy_for("warlock", level=5, features=("invocation_agonizing_blast",)).describe()
        assert summary["pact_slot_level"] == 3
        assert summary["invocations"] == ["invocation_agonizing_blast"]
        assert summary["mystic_arcanum"] == []

    def test_mystic_arcanum_pools(self, strategy_for):
        """Test one long-rest use per arcanum level unlocked."""
        assert not any(key.startswith("mystic_arcanum") for key in strategy_for("warlock", level=10).resource_pools())
        pools = strategy_for("warlock", level=13).resource_pools()
        assert [pools[key].slot_level for key in ("mystic_arcanum_6", "mystic_arcanum_7")] == [6, 7]
        assert pools["mystic_arcanum_7"].recharge_rule == RechargeRule.LONG_REST
        assert "mystic_arcanum_8" not in pools


class TestWizard:
    """Tests for the wizard strategy."""

    def test_arcane_recovery(self, strategy_for):
        wizard = strategy_for("wizard", level=5)
        pool = wizard.resource_pool()
        assert (pool.key, pool.max) == ("arcane_recovery", 1)
        assert wizard.arcane_recovery_slot_levels() == 3

    def test_arcane_ward(self, strategy_for):
        ward = strategy_for("wizard", level=6, features=("arcane_ward",)).resource_pools()["arcane_ward"]
        assert ward.max == 14

    def test_spellbook_progression(self, strategy_for):
        wizard = strategy_for("wizard")
        assert wizard.prepared_spells_count() == 3
        assert wizard.spells_known_count() is NOT_APPLICABLE
        assert wizard.new_spells_at(2) == 2
        assert wizard.new_cantrips_at(4) == 1
        assert wizard.new_cantrips_at(2) == 0
        assert wizard.spell_slots(3) == {1: 4, 2: 2}
        assert wizard.max_spell_level(5) == 3
        assert not wizard.allows_spell_swap()

    def test_empowered_evocation(self, strategy_for, dataset):
        wizard = strategy_for("wizard", level=10, features=("empowered_evocation",))
        assert wizard.empowered_evocation_bonus(dataset.require_spell("fireball")) == 2
        assert wizard.empowered_evocation_bonus(dataset.require_spell("sleep")) is NOT_APPLICABLE
        assert wizard.spell_damage_bonuses(dataset.require_spell("fireball")) == [("empowered_evocation", 2)]


class TestPaladin:
    """Tests for the paladin strategy."""

    def test_no_casting_at_level_one(self, strategy_for):
        paladin = strategy_for("paladin")
        assert not paladin.is_spellcaster()
        assert paladin.prepared_spells_count() is NOT_APPLICABLE

    def test_prepared_spells(self, strategy_for):
        paladin = strategy_for("paladin", level=2)
        assert paladin.prepared_spells_count() == 4
        assert paladin.spell_save_dc() == 12

    def test_prepared_spells_use_full_level(self, strategy_for):
        """Test that paladins prepare CHA modifier + level like other prepared casters."""
        assert strategy_for("paladin", level=5).prepared_spells_count() == 7
        assert strategy_for("paladin", level=5, abilities={"cha": 8}).prepared_spells_count() == 4

    def test_pools(self, strategy_for):
        pools = strategy_for("paladin", level=3).resource_pools()
        assert pools["lay_on_hands"].max == 15
        assert pools["divine_sense"].max == 3

    @pytest.mark.parametrize(
        "slot,target,dice",
        [
            (1, "humanoid", "2d8"),
            (4, "humanoid", "5d8"),
            (5, "humanoid", "5d8"),
            (1, "fiend", "3d8"),
            (4, "undead", "6d8"),
            (9, "undead", "6d8"),
        ],
    )
    def test_divine_smite(self, strategy_for, slot, target, dice):
        assert strategy_for("paladin", level=5).divine_smite_dice(slot, target) == dice

    def test_smite_needs_a_slot(self, strategy_for):
        assert strategy_for("paladin", level=5).divine_smite_dice(0) is NOT_APPLICABLE

    def test_aura_of_protection(self, strategy_for):
        assert strategy_for("paladin", level=5).aura_save_bonus() is NOT_APPLICABLE
        assert strategy_for("paladin", level=6).aura_save_bonus() == 2
        assert strategy_for("paladin", level=6).aura_range() == 10
        assert strategy_for("paladin", level=18).aura_range() == 30

    def test_aura_minimum_one(self, strategy_for):
        low_cha = {"str": 14, "dex": 14, "con": 14, "int": 14, "wis": 14, "cha": 7}
        assert strategy_for("paladin", level=6, abilities=low_cha).aura_save_bonus() == 1


class TestCleric:
    """Tests for the cleric strategy."""

    @pytest.mark.parametrize("level,uses", [(2, 1), (6, 2), (18, 3)])
    def test_channel_divinity(self, strategy_for, level, uses):
        assert strategy_for("cleric", level=level).resource_pool().max == uses

    def test_no_channel_divinity_at_one(self, strategy_for):
        assert strategy_for("cleric").resource_pool() is NOT_APPLICABLE

    def test_divine_strike(self, strategy_for):
        assert strategy_for("cleric", level=8).divine_strike_damage() is NOT_APPLICABLE
        life = strategy_for("cleric", level=8, features=("divine_strike_life",))
        assert life.divine_strike_damage() == {"dice": "1d8", "damage_type": "radiant"}
        war = strategy_for("cleric", level=14, features=("divine_strike_war",))
        assert war.divine_strike_damage() == {"dice": "2d8", "damage_type": "weapon"}

    def test_disciple_of_life(self, strategy_for, dataset):
        cure = dataset.require_spell("cure_wounds")
        assert strategy_for("cleric", level=3).healing_bonus(cure) == 0
        assert strategy_for("cleric", level=3, features=("disciple_of_life",)).healing_bonus(cure) == 3

    def test_potent_spellcasting(self, strategy_for, dataset):
        cleric = strategy_for("cleric", level=8, features=("potent_spellcasting",))
        assert cleric.spell_damage_bonuses(dataset.require_spell("sacred_flame")) == [("potent_spellcasting", 2)]
        assert cleric.spell_damage_bonuses(dataset.require_spell("guiding_bolt")) == []


class TestOtherClasses:
    """Tests for bard, druid and ranger."""

    def test_bardic_inspiration(self, strategy_for):
        bard = strategy_for("bard")
        pool = bard.resource_pool()
        assert (pool.max, pool.die, pool.recharge_rule) == (2, "d6", RechargeRule.LONG_REST)
        font = strategy_for("bard", level=5, features=("font_of_inspiration",)).resource_pool()
        assert (font.die, font.recharge_rule) == ("d8", RechargeRule.BOTH)

    def test_magical_secrets(self, strategy_for):
        bard = strategy_for("bard", level=10)
        assert bard.magical_secrets_picks() == 2
        assert bard.magical_secrets_picks(6) == 0
        lore = strategy_for("bard", level=6, features=("lore_additional_magical_secrets",))
        assert lore.magical_secrets_picks() == 2

    def test_wild_shape(self, strategy_for):
        assert strategy_for("druid").resource_pools() == {}
        assert strategy_for("druid", level=2).resource_pool().max == 2
        assert strategy_for("druid", level=20, features=("archdruid",)).resource_pool().is_unlimited

    @pytest.mark.parametrize("level,limit", [(2, 0.25), (4, 0.5), (8, 1)])
    def test_wild_shape_cr(self, strategy_for, level, limit):
        assert strategy_for("druid", level=level).wild_shape_cr_limit() == limit

    def test_moon_druid_cr(self, strategy_for):
        moon = strategy_for("druid", level=6, features=("moon_circle_forms",))
        assert moon.wild_shape_cr_limit() == 2

    def test_ranger_hooks(self, strategy_for):
        assert strategy_for("ranger", level=3).hunter_prey_damage() is NOT_APPLICABLE
        hunter = strategy_for("ranger", level=3, features=("hunter_colossus_slayer",))
        assert hunter.hunter_prey_damage() == "1d8"
        assert hunter.hunter_prey_damage(target_wounded=False) is NOT_APPLICABLE
        assert strategy_for("ranger", level=20, features=("foe_slayer",)).foe_slayer_bonus() == 2
