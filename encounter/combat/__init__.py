"""
Combat module for the encounter engine.

The combat state, the action resolver with its damage math, the turn
sequencer, summons, the hostile and companion AI, end-of-combat evaluation,
loot, enemy generation and the driver that ties them together.
"""

from .bestiary import create_enemy_from_template, generate_enemy_group
from .combat_end import EncounterSummary, check_combat_end, summarize_encounter
from .combat_manager import (
    CombatManager,
    encounter_status,
    initialize_combat,
    perform_player_action,
    run_hostile_turn,
    run_until_player_or_pause,
)
from .companions import (
    control_mode,
    needs_manual_decision,
    run_auto_companion_turn,
    set_companion_control,
    supply_companion_action,
)
from .loot import LootResult, compute_enemy_xp, finalize_loot, populate_pending_loot
from .npc_ai import AbilitySelection, choose_default_action, choose_hostile_action
from .resolver import (
    ActionOutcome,
    ResolutionContext,
    resolve_companion_action,
    resolve_hostile_action,
    resolve_player_action,
)
from .state import (
    AoeEntry,
    AoeSummary,
    CombatState,
    LogEntry,
    LootDrop,
    PendingSummon,
    Rewards,
    SurvivalDelta,
)
from .summons import active_summon_count, allowed_summons
from .turn_sequencer import advance_turn, apply_turn_regen

__all__ = [
    # Import from bestiary.py
    "create_enemy_from_template",
    "generate_enemy_group",
    # Import from combat_end.py
    "EncounterSummary",
    "check_combat_end",
    "summarize_encounter",
    # Import from combat_manager.py
    "CombatManager",
    "encounter_status",
    "initialize_combat",
    "perform_player_action",
    "run_hostile_turn",
    "run_until_player_or_pause",
    # Import from companions.py
    "control_mode",
    "needs_manual_decision",
    "run_auto_companion_turn",
    "set_companion_control",
    "supply_companion_action",
    # Import from loot.py
    "LootResult",
    "compute_enemy_xp",
    "finalize_loot",
    "populate_pending_loot",
    # Import from npc_ai.py
    "AbilitySelection",
    "choose_default_action",
    "choose_hostile_action",
    # Import from resolver.py
    "ActionOutcome",
    "ResolutionContext",
    "resolve_companion_action",
    "resolve_hostile_action",
    "resolve_player_action",
    # Import from state.py
    "AoeEntry",
    "AoeSummary",
    "CombatState",
    "LogEntry",
    "LootDrop",
    "PendingSummon",
    "Rewards",
    "SurvivalDelta",
    # Import from summons.py
    "active_summon_count",
    "allowed_summons",
    # Import from turn_sequencer.py
    "advance_turn",
    "apply_turn_regen",
]
