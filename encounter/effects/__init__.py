"""
Effects module for the encounter engine.

Holds the effect definitions carried by abilities and the ledger that tracks
timed effects on actors.
"""

from .effect_ledger import (
    TickReport,
    add_effect,
    apply_guard,
    consume_stun,
    has_guard,
    is_stunned,
    stat_modifier,
    tick_effects,
)
from .timed_effect import EffectSpec, TimedEffect

__all__ = [
    # Import from timed_effect.py
    "EffectSpec",
    "TimedEffect",
    # Import from effect_ledger.py
    "TickReport",
    "add_effect",
    "apply_guard",
    "consume_stun",
    "has_guard",
    "is_stunned",
    "stat_modifier",
    "tick_effects",
]
