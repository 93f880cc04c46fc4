"""
Tests for consumable restoration values and inventory merging.
"""

import pytest

from encounter.items.item import InventoryItem, merge_into_inventory
from encounter.items.restoration import get_item_restoration_values


@pytest.mark.parametrize(
    "name, subtype, expected",
    [
        ("Potion of Minor Healing", "health", {"health": 25}),
        ("Potion of Plentiful Magicka", "magicka", {"magicka": 75}),
        ("Potion of Stamina", None, {"stamina": 50}),
        ("Potion of Ultimate Healing", "health", {"health": 150}),
    ],
)
def test_potion_strength(name, subtype, expected):
    """Test restoration by potion strength keyword."""
    potion = InventoryItem(id="p", name=name, type="potion", subtype=subtype)
    values = get_item_restoration_values(potion)
    assert values.model_dump(include=set(expected)) == expected


def test_explicit_values_win():
    """Test that authored values override the name lookup."""
    stew = InventoryItem(id="stew", name="Venison Stew", type="food", restores={"health": 30, "stamina": 20})
    values = get_item_restoration_values(stew)
    assert values.health == 30
    assert values.stamina == 20
    assert values.hunger == 0


def test_food_and_drink_defaults():
    bread = get_item_restoration_values(InventoryItem(id="bread", name="Bread", type="food"))
    ale = get_item_restoration_values(InventoryItem(id="ale", name="Ale", type="drink"))
    assert (bread.health, bread.hunger) == (15, 20)
    assert (ale.stamina, ale.thirst) == (10, 20)


def test_non_consumables_restore_nothing():
    """Test that gear restores nothing."""
    pelt = InventoryItem(id="pelt", name="Wolf Pelt", type="misc")
    assert get_item_restoration_values(pelt).is_empty
    assert not pelt.is_consumable


def test_merge_stacks_by_name():
    inventory = [InventoryItem(id="bread", character_id="hero", name="Bread", type="food", quantity=2)]
    loot = [
        InventoryItem(id="bread_drop", name="Bread", type="food"),
        InventoryItem(id="pelt", name="Wolf Pelt", type="misc"),
    ]
    merged = merge_into_inventory(inventory, loot, "hero")
    assert [(i.name, i.quantity) for i in merged] == [("Bread", 3), ("Wolf Pelt", 1)]
    assert merged[1].character_id == "hero"
    assert inventory[0].quantity == 2
