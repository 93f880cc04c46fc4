"""
Tests for the two-phase loot finalizer.
"""

import random

import pytest

from encounter.actors.combat_actor import CompanionMeta, LootEntry
from encounter.combat.combat_end import check_combat_end
from encounter.combat.combat_manager import initialize_combat
from encounter.combat.loot import compute_enemy_xp, finalize_loot, populate_pending_loot
from encounter.items.item import InventoryItem


@pytest.fixture
def pelt():
    return InventoryItem(id="wolf_pelt", name="Wolf Pelt", type="misc")


@pytest.fixture
def won(player_stats, enemy_factory, pelt):
    wolf = enemy_factory(
        "wolf",
        "Wolf",
        loot=[
            LootEntry(item=pelt, drop_chance=100),
            LootEntry(item=InventoryItem(id="fang", name="Fang", type="misc"), drop_chance=0),
        ],
    )
    state = initialize_combat([wolf], player_stats, now=0.0)
    state.enemies[0].current_health = 0
    return check_combat_end(state, now=10.0)


def test_compute_enemy_xp(enemy_factory):
    """Test experience derived from level and damage."""
    assert compute_enemy_xp(enemy_factory(damage=10).model_copy(update={"level": 3})) == 35
    assert compute_enemy_xp(enemy_factory(damage=0)) == 10


def test_populate_requires_a_victory(state):
    assert populate_pending_loot(state) is state


def test_victory_rolls_the_candidates(won):
    """Test that victory rolls drops, gold and experience once."""
    state = won
    assert state.loot_pending
    assert state.pending_rewards.xp == 20
    assert state.pending_rewards.gold == 10
    assert [i.id for i in state.pending_rewards.items] == ["wolf_pelt"]
    assert state.pending_loot[0].enemy_name == "Wolf"
    assert state.combat_log[-1].action == "loot_phase"
    assert populate_pending_loot(state) is state


def test_summons_grant_nothing(player_stats, enemy_factory):
    """Test that defeated summons carry no rewards."""
    state = initialize_combat([enemy_factory()], player_stats, now=0.0)
    state.enemies[0].current_health = 0
    state.enemies.append(
        enemy_factory(
            "summon_thrall_1",
            "Thrall",
            current_health=0,
            xp_reward=50,
            companion_meta=CompanionMeta(is_summon=True),
        )
    )
    state = check_combat_end(state, now=10.0, rng=random.Random(1))
    assert state.loot_pending
    assert state.pending_rewards.xp == 20


def test_finalize_grants_selected_items(won, pelt):
    """Test that only selected candidates are granted and stacked."""
    state = populate_pending_loot(won, random.Random(1))
    inventory = [InventoryItem(id="old_pelt", character_id="hero", name="Wolf Pelt", type="misc")]
    result = finalize_loot(state, ["wolf_pelt", "bogus"], inventory, "hero")
    assert result.granted_xp == 20
    assert result.granted_gold == 10
    assert [i.id for i in result.granted_items] == ["wolf_pelt"]
    assert result.updated_inventory[0].quantity == 2
    assert not result.state.loot_pending
    assert result.state.pending_rewards is None
    assert result.state.pending_loot == []
    assert result.state.rewards.gold == 10
    assert inventory[0].quantity == 1


def test_skipping_the_selection_keeps_gold_and_xp(won):
    """Test that an empty selection still grants gold and experience."""
    state = populate_pending_loot(won, random.Random(1))
    result = finalize_loot(state, None, [], "hero")
    assert result.granted_items == []
    assert result.updated_inventory == []
    assert result.state.rewards.xp == 20


def test_finalize_without_loot_phase_grants_nothing(state):
    result = finalize_loot(state, ["wolf_pelt"], [], "hero")
    assert result.state is state
    assert result.granted_xp == 0
    assert result.granted_items == []


def test_finalize_is_a_function_of_its_inputs(won):
    """Test that finalizing the same pre-commit state twice grants the same totals."""
    state = populate_pending_loot(won, random.Random(1))
    first = finalize_loot(state, None, [], "hero")
    second = finalize_loot(state, None, [], "hero")
    assert (first.granted_xp, first.granted_gold) == (second.granted_xp, second.granted_gold)
    assert state.loot_pending
