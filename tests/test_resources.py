"""
Unit tests for resource pools and rests.

Tests ResourcePool from rpg_rules/resources/resource_pool.py and the rest
transforms from rpg_rules/resources/rest.py.
"""

import pytest

from rpg_rules.data_models import RechargeRule, RestType
from rpg_rules.observability import get_run_log
from rpg_rules.resources import (
    UNLIMITED_USES,
    ResourcePool,
    long_rest,
    recompute_resources,
    short_rest,
    spend_resource,
)


class TestResourcePool:
    """Tests for ResourcePool."""

    def test_current_is_clamped(self):
        """Test that current is held between 0 and max."""
        assert ResourcePool("ki", 9, 5, RechargeRule.BOTH).current == 5
        assert ResourcePool("ki", -2, 5, RechargeRule.BOTH).current == 0

    def test_negative_max_rejected(self):
        with pytest.raises(ValueError):
            ResourcePool("ki", 0, -1, RechargeRule.BOTH)

    def test_spend(self):
        pool = ResourcePool.full("ki", 4, RechargeRule.BOTH)
        result = pool.spend(3)
        assert result.success
        assert result.pool.current == 1
        assert pool.current == 4

    def test_insufficient_spend_leaves_pool(self):
        """Test that overspending fails without a partial spend."""
        pool = ResourcePool("ki", 1, 4, RechargeRule.BOTH)
        result = pool.spend(2)
        assert not result.success
        assert result.pool is pool
        assert result.message == "Insufficient ki: need 2, have 1"

    def test_spend_requires_positive_amount(self):
        pool = ResourcePool.full("ki", 4, RechargeRule.BOTH)
        with pytest.raises(ValueError):
            pool.spend(0)

    def test_unlimited_pool(self):
        """Test that an unlimited pool never runs out."""
        pool = ResourcePool.full("rage", UNLIMITED_USES, RechargeRule.BOTH)
        assert pool.is_unlimited
        assert not pool.is_empty
        assert pool.spend(50).success
        assert str(pool) == "rage: unlimited"

    @pytest.mark.parametrize(
        "rule,kind,refills",
        [
            (RechargeRule.SHORT_REST, RestType.SHORT, True),
            (RechargeRule.SHORT_REST, RestType.LONG, False),
            (RechargeRule.LONG_REST, RestType.SHORT, False),
            (RechargeRule.LONG_REST, RestType.LONG, True),
            (RechargeRule.BOTH, RestType.SHORT, True),
            (RechargeRule.BOTH, RestType.LONG, True),
        ],
    )
    def test_apply_rest(self, rule, kind, refills):
        """Test which rests refill which pools."""
        pool = ResourcePool("x", 0, 3, rule)
        assert pool.apply_rest(kind).current == (3 if refills else 0)

    def test_with_max_keeps_current(self):
        """Test that a larger max does not refill the pool."""
        pool = ResourcePool("ki", 2, 4, RechargeRule.BOTH).with_max(5)
        assert pool.current == 2
        assert pool.max == 5

    def test_with_max_clamps(self):
        pool = ResourcePool("ki", 4, 4, RechargeRule.BOTH).with_max(3)
        assert pool.current == 3

    def test_str_with_die(self):
        pool = ResourcePool.full("superiority_dice", 4, RechargeRule.BOTH, die="d8")
        assert str(pool) == "superiority_dice: 4/4 (d8)"


class TestRests:
    """Tests for rest and spend transforms."""

    def test_recompute_creates_full_pools(self, make_snapshot):
        """Test that pools new to a snapshot start full."""
        snapshot = recompute_resources(make_snapshot("barbarian", level=3))
        rage = snapshot.resources["rage"]
        assert (rage.current, rage.max) == (3, 3)

    def test_recompute_keeps_spent_uses(self, make_snapshot):
        """Test that recomputing never refills a spent pool."""
        snapshot = recompute_resources(make_snapshot("barbarian", level=2))
        snapshot, _ = spend_resource(snapshot, "rage")
        leveled = recompute_resources(snapshot.evolve(level=3))
        assert leveled.resources["rage"].current == 1
        assert leveled.resources["rage"].max == 3

    def test_spend_resource(self, fighter):
        snapshot, result = spend_resource(fighter, "second_wind")
        assert result.success
        assert snapshot.resources["second_wind"].current == 0
        assert fighter.resources["second_wind"].current == 1
        transforms = get_run_log().get_transforms(fighter.character_id)
        assert transforms[-1].transform == "spend_resource"

    def test_spend_empty_pool(self, fighter):
        """Test that an exhausted pool returns the input snapshot."""
        spent, _ = spend_resource(fighter, "second_wind")
        again, result = spend_resource(spent, "second_wind")
        assert not result.success
        assert again is spent

    def test_spend_unknown_pool(self, fighter):
        snapshot, result = spend_resource(fighter, "ki")
        assert snapshot is fighter
        assert not result.success
        assert result.pool is None
        assert "has no ki pool" in result.message

    def test_short_rest_refills_short_pools(self, make_snapshot):
        """Test that a short rest refills pact slots but not sorcery points."""
        warlock = recompute_resources(make_snapshot("warlock", level=2))
        warlock, _ = spend_resource(warlock, "pact_slots", 2)
        assert short_rest(warlock).resources["pact_slots"].current == 2

        sorcerer = recompute_resources(make_snapshot("sorcerer", level=2))
        sorcerer, _ = spend_resource(sorcerer, "sorcery_points", 2)
        assert short_rest(sorcerer).resources["sorcery_points"].current == 0

    def test_long_rest_restores_everything(self, make_snapshot):
        """Test that a long rest refills pools and hit points."""
        sorcerer = recompute_resources(make_snapshot("sorcerer", level=2, hp_max=14, hp_current=3))
        sorcerer, _ = spend_resource(sorcerer, "sorcery_points", 2)
        rested = long_rest(sorcerer)
        assert rested.resources["sorcery_points"].current == 2
        assert rested.hp_current == 14

    def test_warlock_long_rest_refills_pact_slots(self, make_snapshot):
        """Test that a long rest also refills short-rest pact slots."""
        warlock = recompute_resources(make_snapshot("warlock", level=2))
        warlock, _ = spend_resource(warlock, "pact_slots", 2)
        assert long_rest(warlock).resources["pact_slots"].current == 2

    def test_unknown_class_keeps_stored_pools(self, make_snapshot):
        """Test that rests still work on a snapshot with no class rules."""
        snapshot = make_snapshot(
            "artificer",
            resources={"infusions": ResourcePool("infusions", 0, 2, RechargeRule.LONG_REST)},
        )
        assert recompute_resources(snapshot) is snapshot
        assert long_rest(snapshot).resources["infusions"].current == 2
        assert short_rest(snapshot).resources["infusions"].current == 0
