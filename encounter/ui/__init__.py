"""
User interface module for the encounter engine.

Console menus for the player's decisions and rich renderers for the
encounter state and log.
"""

from .cli_interface import (
    PlayerChoice,
    PlayerInterface,
    format_log_entry,
    render_combat_status,
    render_loot,
)

__all__ = [
    # Import from cli_interface.py
    "PlayerChoice",
    "PlayerInterface",
    "format_log_entry",
    "render_combat_status",
    "render_loot",
]
