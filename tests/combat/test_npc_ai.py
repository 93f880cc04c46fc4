"""
Tests for hostile and companion decision making.
"""

import pytest

from encounter.actions.ability import Ability
from encounter.combat.combat_manager import initialize_combat
from encounter.combat.npc_ai import choose_default_action, choose_hostile_action, is_usable
from encounter.core.constants import PLAYER_ID, AbilityType, Behavior


@pytest.fixture
def cleave():
    return Ability(id="cleave", name="Cleave", type=AbilityType.MELEE, damage=18, cost=10)


@pytest.fixture
def jab():
    return Ability(id="jab", name="Jab", type=AbilityType.MELEE, damage=6, cost=2)


@pytest.fixture
def dark_mending():
    return Ability(id="dark_mending", name="Dark Mending", type=AbilityType.MAGIC, heal=15, cost=5)


def test_default_policy_picks_the_first_usable_ability(state):
    """Test the default policy on a fresh encounter."""
    selection = choose_default_action(state, PLAYER_ID)
    assert selection.ability.id == "slash"
    assert selection.target_id == "bandit"


def test_default_policy_skips_unaffordable_abilities(state):
    """Test that abilities the actor cannot pay for are skipped."""
    state.player.current_stamina = 0
    selection = choose_default_action(state, PLAYER_ID)
    assert selection.ability.id == "firebolt"


def test_companion_heals_the_most_wounded_friend(player_stats, enemy_factory, ally_factory, mend):
    """Test that companions only heal a wounded friend."""
    healer = ally_factory(abilities=[mend])
    state = initialize_combat([enemy_factory()], player_stats, allies=[healer], now=0.0)
    assert choose_default_action(state, "lydia").ability.id == "basic_attack"

    state.player.current_health = 30
    selection = choose_default_action(state, "lydia")
    assert selection.ability.id == "mend"
    assert selection.target_id == PLAYER_ID


def test_summons_need_a_cap(state, conjure_wolf):
    assert not is_usable(state, PLAYER_ID, conjure_wolf)
    assert is_usable(state, PLAYER_ID, conjure_wolf, summon_cap=1)


def test_cooldowns_block_abilities(state, slash):
    state.ability_cooldowns = {"slash": 1}
    assert not is_usable(state, PLAYER_ID, slash)


def test_aggressive_hostile_prefers_damage(state, cleave, jab):
    """Test that aggressive hostiles pick their hardest hitting ability."""
    state.enemies[0].abilities = [jab, cleave]
    assert choose_hostile_action(state, "bandit").ability.id == "cleave"


def test_defensive_hostile_prefers_cheap_abilities(state, cleave, jab):
    """Test that defensive hostiles pick their cheapest ability."""
    state.enemies[0].abilities = [cleave, jab]
    state.enemies[0].behavior = Behavior.DEFENSIVE
    assert choose_hostile_action(state, "bandit").ability.id == "jab"


def test_hostile_avoids_repeating_itself(state, cleave, jab):
    """Test that the last used ability is avoided when there is a choice."""
    state.enemies[0].abilities = [jab, cleave]
    state.enemies[0].last_ability_id = "cleave"
    assert choose_hostile_action(state, "bandit").ability.id == "jab"


def test_hostile_falls_back_to_a_basic_attack(state):
    selection = choose_hostile_action(state, "bandit")
    assert selection.ability.id == "basic_attack"
    assert selection.target_id == PLAYER_ID


def test_aggressive_hostile_targets_the_most_wounded(player_stats, enemy_factory, ally_factory):
    """Test target selection by behavior."""
    state = initialize_combat(
        [enemy_factory()], player_stats, allies=[ally_factory(current_health=10)], now=0.0
    )
    assert choose_hostile_action(state, "bandit").target_id == "lydia"
    state.enemies[0].behavior = Behavior.TACTICAL
    assert choose_hostile_action(state, "bandit").target_id == PLAYER_ID


def test_support_hostile_heals_a_wounded_friend(player_stats, enemy_factory, cleave, dark_mending):
    """Test that support hostiles heal an ally below half health."""
    priest = enemy_factory("priest", "Priest", behavior=Behavior.SUPPORT, abilities=[cleave, dark_mending])
    brute = enemy_factory("brute", "Brute", current_health=10)
    state = initialize_combat([priest, brute], player_stats, now=0.0)
    selection = choose_hostile_action(state, "priest")
    assert selection.ability.id == "dark_mending"
    assert selection.target_id == "brute"


def test_hostiles_do_not_heal_healthy_friends(state, dark_mending):
    state.enemies[0].abilities = [dark_mending]
    assert choose_hostile_action(state, "bandit").ability.id == "basic_attack"
