"""
Turn-based encounter engine.

Resolves fights between the player, companions, summons and hostiles from
natural d20 rolls, and hands the outcome back to the surrounding game.
"""

__version__ = "0.1.0"
