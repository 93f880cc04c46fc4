"""
Tests for player stat derivation and perk lookups.
"""

import pytest

from encounter.actors.character import Character, Perk, Skill, Vitals
from encounter.actors.perks import get_combat_perk_bonus, get_perk_rank
from encounter.actors.player_stats import (
    BASE_CRIT_CHANCE,
    UNARMED_DAMAGE,
    calculate_player_combat_stats,
)
from encounter.items.item import InventoryItem


@pytest.fixture
def character():
    return Character(
        id="hero",
        name="Hero",
        level=4,
        health=120,
        magicka=80,
        stamina=90,
        skills=[
            Skill(name="One-Handed", level=40),
            Skill(name="Light Armor", level=20),
            Skill(name="Sneak", level=30),
            Skill(name="Alteration", level=25),
        ],
        perks=[Perk(id="juggernaut", rank=1), Perk(id="twin_souls", rank=2)],
    )


@pytest.fixture
def gear():
    return [
        InventoryItem(id="sword", name="Steel Sword", type="weapon", slot="weapon", damage=10, equipped=True),
        InventoryItem(id="shield", name="Iron Shield", type="apparel", slot="offhand", armor=10, equipped=True),
        InventoryItem(id="cuirass", name="Leather Cuirass", type="apparel", slot="chest", armor=20, equipped=True),
        InventoryItem(id="axe", name="War Axe", type="weapon", slot="weapon", damage=30),
    ]


def test_perk_lookups(character):
    assert get_perk_rank(character, "twin_souls") == 2
    assert get_perk_rank(character, "armsman") == 0
    assert get_perk_rank(None, "twin_souls") == 0
    assert get_combat_perk_bonus(character, "armor") == 20.0
    assert get_combat_perk_bonus(character, "unknown") == 0.0


def test_stats_from_equipment(character, gear):
    """Test stats derived from equipped gear, skills and perks."""
    stats = calculate_player_combat_stats(character, gear)
    # 30 raw armor, +10% from Light Armor 20, +20% from juggernaut.
    assert stats.armor == 39
    # The unequipped axe is ignored; One-Handed 40 adds 20%.
    assert stats.weapon_damage == 12
    assert stats.dodge_chance == 9
    assert stats.magic_resist == 5
    assert stats.crit_chance == BASE_CRIT_CHANCE
    assert stats.max_health == 120
    assert stats.current_health == 120


def test_unarmed(character):
    stats = calculate_player_combat_stats(character, [])
    assert stats.weapon_damage == UNARMED_DAMAGE
    assert stats.armor == 0


def test_weapon_abilities_come_first(character, gear, slash):
    """Test that the weapon attack leads the ability list."""
    character = character.model_copy(update={"abilities": [slash]})
    stats = calculate_player_combat_stats(character, gear)
    assert [a.id for a in stats.abilities] == ["strike", "power_attack", "slash"]
    assert stats.abilities[0].damage == 6


def test_recomputation_keeps_current_vitals(character, gear):
    """Test that recomputing keeps the current vitals."""
    stats = calculate_player_combat_stats(character, gear)
    hurt = stats.model_copy(update={"current_health": 40, "current_magicka": 10})
    recomputed = calculate_player_combat_stats(character, gear[2:], previous=hurt)
    assert recomputed.current_health == 40
    assert recomputed.current_magicka == 10
    assert recomputed.weapon_damage == UNARMED_DAMAGE


def test_stored_vitals_are_clamped(character):
    character = character.model_copy(
        update={"current_vitals": Vitals(current_health=500, current_magicka=-5, current_stamina=30)}
    )
    stats = calculate_player_combat_stats(character, [])
    assert stats.current_health == 120
    assert stats.current_magicka == 0
    assert stats.current_stamina == 30
