"""
Tests for the status effect ledger.
"""

import pytest

from encounter.core.constants import EffectType, StatType
from encounter.effects.effect_ledger import (
    add_effect,
    apply_guard,
    consume_stun,
    has_guard,
    is_stunned,
    stat_modifier,
    tick_effects,
)
from encounter.effects.timed_effect import TimedEffect


@pytest.fixture
def stun():
    return TimedEffect(effect_type=EffectType.STUN, turns_remaining=1, magnitude=1)


@pytest.fixture
def bleed():
    return TimedEffect(effect_type=EffectType.DOT, turns_remaining=2, stat=StatType.HEALTH, magnitude=3)


@pytest.fixture
def guard():
    return TimedEffect(effect_type=EffectType.GUARD, turns_remaining=2, magnitude=40)


def test_add_effect_appends_new_kinds(stun, bleed):
    """Test adding an effect kind that is not active yet."""
    effects = add_effect([stun], bleed)
    assert effects == [stun, bleed]


def test_add_effect_does_not_touch_the_input(stun, bleed):
    """Test that adding returns a new list."""
    effects = [stun]
    add_effect(effects, bleed)
    assert effects == [stun]


def test_add_effect_refreshes_instead_of_stacking(bleed):
    """Test that the same kind refreshes to the longer duration."""
    stronger = TimedEffect(effect_type=EffectType.DOT, turns_remaining=1, stat=StatType.HEALTH, magnitude=5)
    effects = add_effect([bleed], stronger)
    assert len(effects) == 1
    assert effects[0].turns_remaining == 2
    assert effects[0].magnitude == 5


def test_add_effect_keeps_the_stronger_debuff():
    """Test that magnitudes merge by absolute value."""
    weak = TimedEffect(effect_type=EffectType.DEBUFF, turns_remaining=2, stat=StatType.DAMAGE, magnitude=-3)
    strong = TimedEffect(effect_type=EffectType.DEBUFF, turns_remaining=1, stat=StatType.DAMAGE, magnitude=-5)
    effects = add_effect([weak], strong)
    assert effects[0].magnitude == -5
    assert stat_modifier(effects, StatType.DAMAGE) == -5


def test_add_effect_ignores_expired_effects(stun):
    spent = TimedEffect(effect_type=EffectType.DOT, turns_remaining=0, magnitude=3)
    assert add_effect([stun], spent) == [stun]


def test_tick_deals_dot_damage_and_counts_down(bleed):
    """Test damage over time and the countdown on tick."""
    report = tick_effects([bleed])
    assert report.dot_damage == 3
    assert report.effects[0].turns_remaining == 1
    assert report.expired == []

    report = tick_effects(report.effects)
    assert report.dot_damage == 3
    assert report.effects == []
    assert len(report.expired) == 1


def test_tick_leaves_stuns_alone(stun, guard):
    """Test that stuns only expire when consumed."""
    report = tick_effects([stun, guard])
    assert is_stunned(report.effects)
    assert report.effects[0].turns_remaining == 1
    assert report.effects[1].turns_remaining == 1


def test_consume_stun(stun):
    """Test consuming a single stunned turn."""
    long_stun = stun.model_copy(update={"turns_remaining": 2})
    assert consume_stun([stun]) == []
    assert consume_stun([long_stun])[0].turns_remaining == 1


def test_consume_stun_keeps_other_effects(stun, bleed):
    assert consume_stun([stun, bleed]) == [bleed]


def test_stat_modifier_sums_buffs_and_debuffs():
    """Test the net modifier of buffs and debuffs on one stat."""
    effects = [
        TimedEffect(effect_type=EffectType.BUFF, turns_remaining=2, stat=StatType.ARMOR, magnitude=15),
        TimedEffect(effect_type=EffectType.DEBUFF, turns_remaining=2, stat=StatType.ARMOR, magnitude=-10),
        TimedEffect(effect_type=EffectType.DEBUFF, turns_remaining=2, stat=StatType.DAMAGE, magnitude=4),
    ]
    assert stat_modifier(effects, StatType.ARMOR) == 5
    assert stat_modifier(effects, StatType.DAMAGE) == -4
    assert stat_modifier(effects, StatType.STAMINA) == 0


def test_guard_reduces_damage(guard):
    assert has_guard([guard])
    assert apply_guard(10, [guard]) == 6
    assert apply_guard(1, [guard]) == 1
    assert apply_guard(10, []) == 10
    assert apply_guard(0, [guard]) == 0
