"""
Tests for the console rendering helpers and menus.
"""

import random

import pytest

from encounter.actors.combat_actor import LootEntry
from encounter.combat.combat_end import check_combat_end
from encounter.combat.combat_manager import initialize_combat
from encounter.combat.state import LogEntry
from encounter.core.constants import ActionType, RollTier
from encounter.core.content import DEFAULT_DATA_DIR, ContentRepository
from encounter.items.item import InventoryItem
from encounter.main import build_demo_character
from encounter.ui import cli_interface
from encounter.ui.cli_interface import (
    PlayerInterface,
    format_log_entry,
    render_combat_status,
    render_loot,
)


@pytest.fixture
def answers(monkeypatch):
    """Feeds scripted answers to the menus."""
    queue = []
    monkeypatch.setattr(cli_interface, "_prompt", lambda message: queue.pop(0))
    return queue


@pytest.fixture
def looted(player_stats, enemy_factory):
    wolf = enemy_factory(
        "wolf",
        "Wolf",
        loot=[
            LootEntry(item=InventoryItem(id="wolf_pelt", name="Wolf Pelt", type="misc"), drop_chance=100),
            LootEntry(item=InventoryItem(id="fang", name="Fang", type="misc"), drop_chance=100),
        ],
    )
    state = initialize_combat([wolf], player_stats, now=0.0)
    state.enemies[0].current_health = 0
    return check_combat_end(state, now=5.0, rng=random.Random(1))


def test_render_combat_status(state):
    """Test the status table of a fresh encounter."""
    table = render_combat_status(state)
    assert table.title == "Turn 1"
    assert table.row_count == 2
    assert "Magicka 100/100" in table.caption


def test_format_log_entry():
    plain = LogEntry(turn=1, actor="system", action="regen", narrative="You feel better.")
    assert format_log_entry(plain) == "You feel better."
    rolled = LogEntry(
        turn=1, actor="player", action="Slash", narrative="You slash.", nat=15, roll_tier=RollTier.HIGH
    )
    assert format_log_entry(rolled) == "[green]🎲 15[/] You slash."


def test_render_loot(looted):
    table = render_loot(looted)
    assert table.row_count == 2
    assert table.caption == "10 gold, 20 experience"


def test_digit_and_alpha_choices():
    assert PlayerInterface.get_digit_choice(" 3 ") == 3
    assert PlayerInterface.get_digit_choice("x") == -1
    assert PlayerInterface.get_alpha_choice("B") == 1
    assert PlayerInterface.get_alpha_choice("ab") == -1
    assert PlayerInterface.get_alpha_choice(None) == -1


def test_sort_actions(state):
    """Test menu order by slot, category and name."""
    names = [a.name for a in PlayerInterface.sort_actions(state.player.abilities)]
    assert names == ["Bash", "Firebolt", "Nova", "Slash", "Mend", "Conjure Wolf"]


def test_choose_end_turn(state, answers):
    answers.append("a")
    choice = PlayerInterface().choose_action(state, [])
    assert choice.action_type == ActionType.END_TURN


def test_choose_ability_and_target(state, answers):
    answers.extend(["1", "1"])
    choice = PlayerInterface().choose_action(state, [])
    assert choice.action_type == ActionType.ABILITY
    assert choice.ability_id == "bash"
    assert choice.target_id == "bandit"


def test_invalid_answers_ask_again(state, answers):
    """Test that unreadable answers repeat the menu."""
    answers.extend(["zz", "42", "a"])
    assert PlayerInterface().choose_action(state, []).action_type == ActionType.END_TURN
    assert answers == []


def test_flee_is_hidden_once_the_main_action_is_spent(state, answers):
    """Test that the menu stops offering flee after the main action."""
    answers.append("c")
    assert PlayerInterface().choose_action(state, []).action_type == ActionType.FLEE
    state.player_main_action_used = True
    answers.extend(["c", "a"])
    assert PlayerInterface().choose_action(state, []).action_type == ActionType.END_TURN
    assert answers == []


@pytest.mark.parametrize(
    "answer, expected",
    [
        ("", None),
        ("a", ["wolf_pelt", "fang"]),
        ("2", ["fang"]),
        ("1, 9, x", ["wolf_pelt"]),
    ],
)
def test_choose_loot(looted, answers, answer, expected):
    answers.append(answer)
    assert PlayerInterface().choose_loot(looted) == expected


def test_demo_character():
    character, inventory = build_demo_character(ContentRepository(DEFAULT_DATA_DIR))
    assert character.name == "Dovahkiin"
    assert "firebolt" in [a.id for a in character.abilities]
    assert any(i.equipped for i in inventory)
