"""
Tests for the companion arbiter: automatic turns and manual orders.
"""

import pytest

from encounter.combat.combat_manager import initialize_combat, run_until_player_or_pause
from encounter.combat.companions import (
    control_mode,
    needs_manual_decision,
    run_auto_companion_turn,
    set_companion_control,
    supply_companion_action,
)
from encounter.combat.turn_sequencer import advance_turn
from encounter.core.constants import ControlMode, EffectType, RejectionReason
from encounter.core.dice import ScriptedRollProvider
from encounter.core.error_handling import CombatInvariantError
from encounter.effects.timed_effect import TimedEffect


@pytest.fixture
def manual_state(player_stats, enemy_factory, ally_factory):
    state = initialize_combat([enemy_factory()], player_stats, allies=[ally_factory(auto=False)], now=0.0)
    return advance_turn(state)


@pytest.fixture
def awaiting(manual_state):
    return run_until_player_or_pause(manual_state, ScriptedRollProvider([]))


def test_control_mode(manual_state):
    assert manual_state.current_turn_actor == "lydia"
    assert control_mode(manual_state, "lydia") == ControlMode.MANUAL
    assert needs_manual_decision(manual_state, "lydia")


def test_control_mode_of_a_hostile_raises(manual_state):
    """Test that hostiles have no control mode."""
    with pytest.raises(CombatInvariantError):
        control_mode(manual_state, "bandit")


def test_stunned_companions_are_not_awaited(manual_state):
    """Test that stunned companions lose their turn without a pause."""
    manual_state.allies[0].active_effects = [TimedEffect(effect_type=EffectType.STUN, turns_remaining=1)]
    assert not needs_manual_decision(manual_state, "lydia")


def test_manual_companion_pauses_the_encounter(awaiting):
    assert awaiting.awaiting_companion == "lydia"
    assert awaiting.current_turn_actor == "lydia"


def test_supplied_orders_resolve_and_advance(awaiting):
    """Test that a supplied order resolves and closes the companion's turn."""
    outcome = supply_companion_action(awaiting, "lydia", "basic_attack", "bandit", natural_roll=10)
    assert not outcome.rejected
    assert outcome.state.enemies[0].current_health == 42
    assert outcome.state.awaiting_companion is None
    assert outcome.state.current_turn_actor == "bandit"


def test_orders_for_the_wrong_companion(awaiting):
    """Test orders for a companion that is not awaited."""
    outcome = supply_companion_action(awaiting, "someone", "basic_attack", "bandit", natural_roll=10)
    assert outcome.reason == RejectionReason.NOT_AWAITING
    assert outcome.state is awaiting


def test_rejected_orders_keep_the_encounter_waiting(awaiting):
    """Test that an invalid order leaves the companion awaited."""
    outcome = supply_companion_action(awaiting, "lydia", "basic_attack", "lydia", natural_roll=10)
    assert outcome.reason == RejectionReason.INVALID_TARGET
    assert outcome.state.awaiting_companion == "lydia"


def test_switching_to_auto_releases_the_wait(awaiting):
    """Test switching the awaited companion to automatic control."""
    state = set_companion_control(awaiting, "lydia", ControlMode.AUTO)
    assert state.awaiting_companion is None
    assert control_mode(state, "lydia") == ControlMode.AUTO
    assert awaiting.awaiting_companion == "lydia"


def test_auto_turn_acts_and_advances(manual_state):
    state = set_companion_control(manual_state, "lydia", ControlMode.AUTO)
    outcome = run_auto_companion_turn(state, "lydia", ScriptedRollProvider([10]))
    assert outcome.log_entry.actor == "lydia"
    assert outcome.state.enemies[0].current_health == 42
    assert outcome.state.current_turn_actor == "bandit"
