"""
Items module for the encounter engine.

Inventory item shapes and the restoration lookup for consumables.
"""

from .item import InventoryItem, merge_into_inventory
from .restoration import RestorationValues, get_item_restoration_values

__all__ = [
    "InventoryItem",
    "merge_into_inventory",
    "RestorationValues",
    "get_item_restoration_values",
]
