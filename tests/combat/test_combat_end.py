"""
Tests for end-of-combat evaluation and the encounter summary.
"""

import pytest

from encounter.combat.combat_end import check_combat_end, summarize_encounter
from encounter.combat.state import PendingSummon
from encounter.core.constants import HUNGER_PER_MINUTE, CombatResult


def test_running_encounter_is_returned_as_is(state):
    """Test that an ongoing encounter is not copied."""
    assert check_combat_end(state) is state


def test_defeat(state):
    """Test that a fallen player ends the encounter in defeat."""
    state.player.current_health = 0
    new = check_combat_end(state, now=60.0)
    assert not new.active
    assert new.result == CombatResult.DEFEAT
    assert new.combat_log[-1].action == "defeat"
    assert state.active


def test_victory_clears_pending_summons(state, ally_factory):
    """Test that victory drops conjurations still on their way."""
    state.enemies[0].current_health = 0
    state.pending_summons.append(
        PendingSummon(companion_id="summon_imp_1", player_turns_remaining=1, actor=ally_factory("summon_imp_1", "Imp"))
    )
    new = check_combat_end(state, now=60.0)
    assert new.result == CombatResult.VICTORY
    assert new.pending_summons == []
    assert new.loot_pending


def test_elapsed_time_and_survival_needs(state):
    """Test elapsed time and hunger accrued over two minutes."""
    state.enemies[0].current_health = 0
    new = check_combat_end(state, now=120.0)
    assert new.combat_elapsed_sec == 120.0
    assert new.survival_delta.hunger == pytest.approx(2 * HUNGER_PER_MINUTE)


def test_finished_encounter_is_frozen(state):
    """Test that a finished encounter is never re-evaluated."""
    state.enemies[0].current_health = 0
    over = check_combat_end(state, now=10.0)
    over.player.current_health = 0
    assert check_combat_end(over, now=20.0) is over


def test_summary(state):
    state.player.current_health = 0
    summary = summarize_encounter(check_combat_end(state, now=30.0))
    assert summary.result == CombatResult.DEFEAT
    assert summary.current_health == 0
    assert summary.current_magicka == 100
    assert summary.combat_elapsed_sec == 30.0
    assert summary.rewards.xp == 0
    assert not summary.loot_pending
