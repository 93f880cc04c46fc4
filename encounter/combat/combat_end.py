"""
End-of-Combat Evaluator.

Decides victory and defeat after every resolved step, freezes the state when
the encounter is over, and builds the summary handed back to the caller.
"""

import random
import time

from catchery import log_debug
from pydantic import BaseModel, Field

from encounter.actors.player_stats import PlayerCombatStats
from encounter.core.constants import (
    FATIGUE_PER_MINUTE,
    HUNGER_PER_MINUTE,
    THIRST_PER_MINUTE,
    CombatResult,
)

from .loot import populate_pending_loot
from .state import CombatState, Rewards, SurvivalDelta
from .summons import cleanup_summons


class EncounterSummary(BaseModel):
    """What the encounter hands back to the world layer once it ends."""

    result: CombatResult
    current_health: int
    current_magicka: int
    current_stamina: int
    combat_elapsed_sec: float = Field(description="Seconds of combat; callers convert to world minutes.")
    rewards: Rewards
    survival_delta: SurvivalDelta
    loot_pending: bool


def finish_combat(
    state: CombatState,
    result: CombatResult,
    narrative: str,
    now: float | None = None,
) -> None:
    """
    Freezes a working copy of the state with the given result.

    Sets the elapsed time, accrues survival needs for the time spent and
    drops summons that can no longer arrive.
    """
    state.active = False
    state.result = result
    state.awaiting_companion = None
    current = time.time() if now is None else now
    state.combat_elapsed_sec = max(0.0, current - state.combat_start_time)
    minutes = state.combat_elapsed_sec / 60
    state.survival_delta = SurvivalDelta(
        hunger=state.survival_delta.hunger + minutes * HUNGER_PER_MINUTE,
        thirst=state.survival_delta.thirst + minutes * THIRST_PER_MINUTE,
        fatigue=state.survival_delta.fatigue + minutes * FATIGUE_PER_MINUTE,
    )
    cleanup_summons(state)
    state.log("system", result.value, narrative)
    log_debug("Combat finished", {"result": result, "turn": state.turn})


def check_combat_end(
    state: CombatState,
    player_stats: PlayerCombatStats | None = None,
    now: float | None = None,
    rng: random.Random | None = None,
) -> CombatState:
    """
    Ends the encounter on defeat or victory.

    A victory also opens the loot phase.

    Args:
        state (CombatState): The current state.
        player_stats (PlayerCombatStats | None): Player vitals to judge by;
            defaults to the stats held in the state.
        now (float | None): Clock value for the elapsed time.
        rng (random.Random | None): Source for item drop rolls on a victory.

    Returns:
        CombatState: The new state, or the input itself when nothing ended or
        combat was already over.

    """
    if not state.active:
        return state
    player = player_stats or state.player
    if player.current_health <= 0:
        new = state.copy_state()
        new.player.current_health = 0
        finish_combat(new, CombatResult.DEFEAT, "You have been defeated...", now)
        return new
    if all(not enemy.is_alive for enemy in state.enemies):
        new = state.copy_state()
        finish_combat(new, CombatResult.VICTORY, "Victory! All enemies have been defeated.", now)
        return populate_pending_loot(new, rng)
    return state


def summarize_encounter(state: CombatState) -> EncounterSummary:
    """Builds the hand-back bundle for a finished (or running) encounter."""
    return EncounterSummary(
        result=state.result,
        current_health=state.player.current_health,
        current_magicka=state.player.current_magicka,
        current_stamina=state.player.current_stamina,
        combat_elapsed_sec=state.combat_elapsed_sec,
        rewards=state.rewards,
        survival_delta=state.survival_delta,
        loot_pending=state.loot_pending,
    )
