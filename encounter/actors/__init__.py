"""
Actors module for the encounter engine.

Combat actors (hostiles, companions, summons), the character shapes read at
the engine boundary, perk lookups and the player's derived combat stats.
"""

from .character import Character, Perk, Skill, Vitals
from .combat_actor import CombatActor, CompanionMeta, LootEntry
from .enemy_template import EnemyTemplate
from .perks import get_combat_perk_bonus, get_perk_rank
from .player_stats import PlayerCombatStats, calculate_player_combat_stats

__all__ = [
    # Import from character.py
    "Character",
    "Perk",
    "Skill",
    "Vitals",
    # Import from combat_actor.py
    "CombatActor",
    "CompanionMeta",
    "LootEntry",
    # Import from enemy_template.py
    "EnemyTemplate",
    # Import from perks.py
    "get_combat_perk_bonus",
    "get_perk_rank",
    # Import from player_stats.py
    "PlayerCombatStats",
    "calculate_player_combat_stats",
]
