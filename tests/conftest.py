"""
Pytest fixtures for the rpg_rules test suite.

Provides reusable fixtures for dice, the rules dataset, and finished
characters of several classes built through the CharacterBuilder.
"""

import pytest

from rpg_rules.character import CharacterBuilder
from rpg_rules.classes.class_manager import reset_class_manager
from rpg_rules.content_loader.rules_dataset import get_rules_dataset, reset_rules_dataset
from rpg_rules.data_models import CharacterSnapshot, DiceRoller, HpRoll
from rpg_rules.observability.run_log import reset_run_log
from rpg_rules.races.race_manager import reset_race_manager
from rpg_rules.stats import StatCalculator


# =============================================================================
# ISOLATION
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_singletons():
    """Give every test its own dataset, managers and run log."""
    reset_rules_dataset()
    reset_class_manager()
    reset_race_manager()
    reset_run_log()
    DiceRoller.clear_roll_log()
    yield
    reset_rules_dataset()
    reset_class_manager()
    reset_race_manager()
    DiceRoller.clear_roll_log()


# =============================================================================
# DICE FIXTURES
# =============================================================================


@pytest.fixture
def seeded_dice():
    """Provide a seeded DiceRoller for reproducible tests."""
    DiceRoller.clear_roll_log()
    DiceRoller.set_seed(42)
    yield DiceRoller()
    DiceRoller.clear_roll_log()


# =============================================================================
# RULES FIXTURES
# =============================================================================


@pytest.fixture
def dataset():
    """The bundled rules dataset."""
    return get_rules_dataset()


@pytest.fixture
def calculator(dataset):
    return StatCalculator(dataset)


@pytest.fixture
def builder(dataset):
    return CharacterBuilder(dataset)


def hp_roll(die_size: int, value: int, con_modifier: int = 0, flat_bonus: int = 0) -> HpRoll:
    """A fixed hit-point roll."""
    return HpRoll(die_size=die_size, dice=(value,), con_modifier=con_modifier, flat_bonus=flat_bonus)


# =============================================================================
# CHARACTER FIXTURES
# =============================================================================


@pytest.fixture
def fighter(builder):
    """
    Level 1 human fighter (soldier) in chain mail with longsword and shield.

    Effective scores: STR 16, DEX 15, CON 15, INT 11, WIS 13, CHA 9.
    """
    return builder.build(
        "Bruna",
        "fighter",
        "human",
        {"str": 15, "dex": 14, "con": 14, "int": 10, "wis": 12, "cha": 8},
        background_key="soldier",
        skill_choices=("perception", "survival"),
        starting_items=["longsword", "shield", "chain_mail"],
        equip={"main_hand": "longsword", "off_hand": "shield", "armor": "chain_mail"},
    )


@pytest.fixture
def wizard(builder):
    """
    Level 1 high elf wizard (sage).

    Effective scores: STR 8, DEX 16, CON 14, INT 16, WIS 12, CHA 10.
    """
    return builder.build(
        "Ilsa",
        "wizard",
        "elf",
        {"str": 8, "dex": 14, "con": 14, "int": 15, "wis": 12, "cha": 10},
        subrace_key="high_elf",
        background_key="sage",
        skill_choices=("insight", "investigation"),
        feat_choices={
            "spell_list": "cleric",
            "cantrip_1": "sacred_flame",
            "cantrip_2": "guidance",
            "spell_1": "cure_wounds",
        },
        cantrips=("fire_bolt", "mage_hand", "light"),
        spellbook=("magic_missile", "shield", "mage_armor", "sleep", "burning_hands", "detect_magic"),
        spells=("magic_missile", "shield"),
    )


@pytest.fixture
def rogue(builder):
    """
    Level 1 lightfoot halfling rogue (criminal) with two daggers.

    Effective scores: STR 8, DEX 17, CON 12, INT 13, WIS 10, CHA 15.
    """
    return builder.build(
        "Pip",
        "rogue",
        "halfling",
        {"str": 8, "dex": 15, "con": 12, "int": 13, "wis": 10, "cha": 14},
        subrace_key="lightfoot",
        background_key="criminal",
        skill_choices=("acrobatics", "perception", "sleight_of_hand", "stealth"),
        expertise=("stealth", "perception"),
        starting_items=[("dagger", 2), "leather_armor"],
        equip={"main_hand": "dagger", "armor": "leather_armor"},
    )


@pytest.fixture
def make_snapshot():
    """Factory for hand-built snapshots at any level."""

    def _make(class_key: str = "fighter", race_key: str = "human", **overrides) -> CharacterSnapshot:
        fields = {
            "name": "Test",
            "class_key": class_key,
            "race_key": race_key,
            "abilities": {"str": 14, "dex": 14, "con": 14, "int": 14, "wis": 14, "cha": 14},
            "hp_max": 10,
            "hp_current": 10,
        }
        fields.update(overrides)
        return CharacterSnapshot(**fields)

    return _make
