"""
Tests for the turn sequencer.
"""

import pytest

from encounter.combat.combat_manager import initialize_combat
from encounter.combat.resolver import resolve_player_action
from encounter.combat.summons import conjure
from encounter.combat.turn_sequencer import advance_turn, apply_turn_regen
from encounter.core.constants import PLAYER_ID, ActionType, CombatResult, EffectType, StatType
from encounter.core.dice import classify_roll
from encounter.core.error_handling import CombatInvariantError
from encounter.effects.timed_effect import EffectSpec, TimedEffect


def _bleed(turns=2, magnitude=3):
    return TimedEffect(effect_type=EffectType.DOT, turns_remaining=turns, stat=StatType.HEALTH, magnitude=magnitude)


def test_advance_moves_to_the_next_actor(state):
    """Test that advancing resets the slots and moves on."""
    new = advance_turn(state)
    assert new.current_turn_actor == "bandit"
    assert new.turn == 1
    assert state.current_turn_actor == PLAYER_ID


def test_returning_to_the_player_starts_a_new_turn(state):
    """Test that a full cycle increments the turn counter."""
    state = state.model_copy(update={"player_main_action_used": True, "player_bonus_action_used": True})
    new = advance_turn(advance_turn(state))
    assert new.current_turn_actor == PLAYER_ID
    assert new.turn == 2
    assert not new.player_main_action_used
    assert not new.player_bonus_action_used


def test_dead_actors_are_skipped(player_stats, enemy_factory):
    """Test that dead actors never get a turn."""
    state = initialize_combat(
        [enemy_factory("a", "A"), enemy_factory("b", "B")], player_stats, now=0.0
    )
    state.enemies[0].current_health = 0
    assert advance_turn(state).current_turn_actor == "b"


def test_cycle_closes_once_per_player_landing(player_stats, enemy_factory, ally_factory):
    """Test the turn counter and the current actor across many advances."""
    state = initialize_combat(
        [enemy_factory("a", "A"), enemy_factory("b", "B")], player_stats, allies=[ally_factory()], now=0.0
    )
    state = resolve_player_action(state, ActionType.ABILITY, "conjure_wolf", natural_roll=10).state
    imp = EffectSpec(type=EffectType.SUMMON, name="Imp", base_health=20, base_damage=4, duration=1, arrival_delay=2)
    conjure(state, imp, classify_roll(10), PLAYER_ID)
    state.enemies[0].current_health = 0

    landings = 0
    for _ in range(60):
        previous = state.turn
        state = advance_turn(state)
        assert state.active
        assert state.current_turn_actor in state.turn_order
        assert state.is_alive(state.current_turn_actor)
        if state.current_turn_actor == PLAYER_ID:
            landings += 1
            assert state.turn == previous + 1
        else:
            assert state.turn == previous
    assert state.turn == 1 + landings
    assert not any(a.is_alive for a in state.allies if a.is_summon)


def test_finished_combat_is_not_advanced(state):
    state.active = False
    assert advance_turn(state) is state


def test_broken_turn_order_raises(state):
    """Test that an empty turn order is an invariant violation."""
    state.turn_order = []
    with pytest.raises(CombatInvariantError):
        advance_turn(state)


def test_unknown_actor_in_turn_order_raises(state):
    state.turn_order.append("ghost")
    with pytest.raises(CombatInvariantError):
        advance_turn(state)


def test_player_cooldowns_tick_once_per_turn(state):
    """Test that player cooldowns only tick on the player's turn."""
    state.ability_cooldowns = {"firebolt": 2, "mend": 1}
    state = advance_turn(advance_turn(state))
    assert state.ability_cooldowns == {"firebolt": 1}
    state = advance_turn(advance_turn(state))
    assert state.ability_cooldowns == {}


def test_enemy_cooldowns_tick_on_their_turn(state):
    state.enemies[0].cooldowns = {"slash": 1}
    assert advance_turn(state).enemies[0].cooldowns == {}


def test_dot_hits_the_player_at_turn_start(state):
    """Test damage over time on the player."""
    state.player_active_effects = [_bleed()]
    state = advance_turn(advance_turn(state))
    assert state.player.current_health == 97
    assert state.player_active_effects[0].turns_remaining == 1
    assert state.combat_log[-1].action == "dot"


def test_dot_can_end_the_encounter(state):
    """Test that damage over time can end the encounter."""
    state.enemies[0].current_health = 2
    state.enemies[0].active_effects = [_bleed(magnitude=5)]
    new = advance_turn(state, now=30.0)
    assert not new.active
    assert new.result == CombatResult.VICTORY
    assert new.combat_elapsed_sec == 30.0
    assert new.loot_pending


def test_regeneration_when_the_cycle_returns(state):
    """Test regeneration at the start of the player's turn."""
    state.player = state.player.model_copy(
        update={"current_health": 50, "current_stamina": 99, "regen_health_per_sec": 1.0, "regen_stamina_per_sec": 1.0}
    )
    state = advance_turn(advance_turn(state, seconds_per_turn=4), seconds_per_turn=4)
    assert state.player.current_health == 54
    assert state.player.current_stamina == 100
    assert any(entry.action == "regen" for entry in state.combat_log)


def test_apply_turn_regen(state):
    state.player = state.player.model_copy(update={"current_magicka": 10, "regen_magicka_per_sec": 2.5})
    state.enemies[0].current_health = 40
    state.enemies[0].regen_health_per_sec = 1.0
    new = apply_turn_regen(state, seconds_per_turn=4)
    assert new.player.current_magicka == 20
    assert new.enemies[0].current_health == 44
    assert state.player.current_magicka == 10
