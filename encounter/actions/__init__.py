"""
Actions module for the encounter engine.

Contains ability definitions and the two-slot action economy rules.
"""

from .ability import Ability, basic_attack, infer_action_class, infer_category
from .action_economy import (
    action_class_for,
    is_slot_exempt,
    mark_used,
    should_advance,
    slot_available,
)

__all__ = [
    # Import from ability.py
    "Ability",
    "basic_attack",
    "infer_action_class",
    "infer_category",
    # Import from action_economy.py
    "action_class_for",
    "is_slot_exempt",
    "mark_used",
    "should_advance",
    "slot_available",
]
