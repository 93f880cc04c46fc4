"""
Tests for natural rolls, roll tiers and chance checks.
"""

import pytest

from encounter.core.constants import RollTier
from encounter.core.dice import (
    RollProvider,
    ScriptedRollProvider,
    chance_succeeds,
    classify_roll,
    crit_threshold,
)
from encounter.core.error_handling import CombatInvariantError


@pytest.mark.parametrize(
    "nat, tier",
    [
        (1, RollTier.FAIL),
        (2, RollTier.MISS),
        (4, RollTier.MISS),
        (5, RollTier.LOW),
        (9, RollTier.LOW),
        (10, RollTier.MID),
        (14, RollTier.MID),
        (15, RollTier.HIGH),
        (19, RollTier.HIGH),
        (20, RollTier.CRIT),
    ],
)
def test_tier_bands(nat, tier):
    """Each natural roll falls into its band when the actor has no crit chance."""
    assert classify_roll(nat).tier == tier


def test_tiers_never_get_worse_as_the_roll_rises():
    """Test that tiers are monotonic in the natural roll."""
    order = list(RollTier)
    tiers = [order.index(classify_roll(nat, 10).tier) for nat in range(1, 21)]
    assert tiers == sorted(tiers)


def test_crit_threshold_drops_with_crit_chance():
    """Test the crit threshold for several crit chances."""
    assert crit_threshold(0) == 20
    assert crit_threshold(5) == 19
    assert crit_threshold(12) == 18
    assert crit_threshold(25) == 15
    assert crit_threshold(100) == 15


def test_crit_chance_widens_the_crit_band():
    assert classify_roll(19, crit_chance=5).tier == RollTier.CRIT
    assert classify_roll(19, crit_chance=0).tier == RollTier.HIGH


def test_natural_one_is_always_a_failure():
    """Test that no crit chance turns a 1 into a hit."""
    assert classify_roll(1, crit_chance=100).is_fumble


def test_outcome_multipliers():
    """Test damage and heal multipliers per tier."""
    assert classify_roll(3).damage_multiplier == 0.0
    assert classify_roll(3).heal_multiplier == 0.5
    assert classify_roll(7).damage_multiplier == 0.75
    assert classify_roll(12).damage_multiplier == 1.0
    assert classify_roll(17).damage_multiplier == 1.25
    assert classify_roll(20).damage_multiplier == 1.75
    assert not classify_roll(4).hit
    assert classify_roll(5).hit


def test_describe():
    assert classify_roll(17).describe() == "rolled 17 (high)"


@pytest.mark.parametrize("nat", [0, 21, -3])
def test_out_of_range_roll_raises(nat):
    """Test that rolls outside 1 to 20 are invariant violations."""
    with pytest.raises(CombatInvariantError):
        classify_roll(nat)


def test_chance_succeeds():
    """Every point of the roll is worth five percent."""
    assert chance_succeeds(11, 50)
    assert not chance_succeeds(10, 50)
    assert chance_succeeds(1, 100)
    assert not chance_succeeds(20, 0)
    assert chance_succeeds(20, 5)


def test_scripted_provider_replays_then_falls_back():
    """Test scripted rolls followed by the fallback."""
    rolls = ScriptedRollProvider([3, 17], fallback=12)
    assert [rolls.natural_roll() for _ in range(4)] == [3, 17, 12, 12]
    assert rolls.consumed == [3, 17, 12, 12]


def test_scripted_provider_push():
    rolls = ScriptedRollProvider([])
    rolls.push(8, 9)
    assert rolls.natural_roll() == 8
    assert rolls.natural_roll() == 9


def test_scripted_provider_rejects_invalid_rolls():
    with pytest.raises(CombatInvariantError):
        ScriptedRollProvider([25])


def test_seeded_provider_is_reproducible():
    """Test that two providers with the same seed agree."""
    first = RollProvider(seed=42)
    second = RollProvider(seed=42)
    draws = [first.natural_roll() for _ in range(20)]
    assert draws == [second.natural_roll() for _ in range(20)]
    assert all(1 <= nat <= 20 for nat in draws)
