"""
Companion Arbiter.

Decides how a companion's turn is taken. Auto-controlled companions act on
their own through the default policy; manually controlled ones pause the
encounter until the player supplies their action.
"""

from catchery import log_debug

from encounter.actors.combat_actor import CombatActor, CompanionMeta
from encounter.core.constants import CharacterType, ControlMode, RejectionReason
from encounter.core.dice import RollProvider
from encounter.core.error_handling import raise_invariant
from encounter.effects.effect_ledger import is_stunned

from .combat_end import check_combat_end
from .npc_ai import choose_default_action
from .resolver import ActionOutcome, ResolutionContext, reject, resolve_companion_action
from .state import CombatState
from .summons import allowed_summons
from .turn_sequencer import advance_turn


def _companion(state: CombatState, companion_id: str) -> CombatActor:
    if state.side_of(companion_id) != CharacterType.ALLY:
        raise_invariant("actor is not a companion", {"actor_id": companion_id})
    return state.actor(companion_id)


def control_mode(state: CombatState, companion_id: str) -> ControlMode:
    """Returns how a companion's turns are decided."""
    meta = _companion(state, companion_id).companion_meta
    return meta.control_mode if meta is not None else ControlMode.AUTO


def set_companion_control(state: CombatState, companion_id: str, mode: ControlMode) -> CombatState:
    """
    Switches a companion between automatic and manual control.

    Switching the companion the encounter is waiting on to automatic clears
    the wait, so the driver picks its turn up on the next step.

    Args:
        state (CombatState): The current state.
        companion_id (str): The companion.
        mode (ControlMode): The new control mode.

    Returns:
        CombatState: The new state.

    """
    _companion(state, companion_id)
    new = state.copy_state()
    companion = new.actor(companion_id)
    if companion.companion_meta is None:
        companion.companion_meta = CompanionMeta()
    companion.companion_meta.auto_control = mode == ControlMode.AUTO
    if mode == ControlMode.AUTO and new.awaiting_companion == companion_id:
        new.awaiting_companion = None
    log_debug("Companion control changed", {"companion": companion_id, "mode": mode})
    return new


def needs_manual_decision(state: CombatState, companion_id: str) -> bool:
    """True when the companion's turn must wait for the player."""
    companion = _companion(state, companion_id)
    return (
        companion.is_alive
        and control_mode(state, companion_id) == ControlMode.MANUAL
        and not is_stunned(companion.active_effects)
    )


def _close_turn(state: CombatState, ctx: ResolutionContext, rolls: RollProvider | None) -> CombatState:
    rng = rolls.rng if rolls is not None else None
    state = check_combat_end(state, now=ctx.now, rng=rng)
    return advance_turn(state, ctx.seconds_per_turn, ctx.now, rng)


def run_auto_companion_turn(
    state: CombatState,
    companion_id: str,
    rolls: RollProvider | None = None,
    ctx: ResolutionContext | None = None,
) -> ActionOutcome:
    """
    Plays an automatic companion's turn and passes the turn on.

    The turn advances even when the chosen action is rejected, so a
    companion with nothing useful to do never stalls the encounter.

    Args:
        state (CombatState): A state whose current actor is the companion.
        companion_id (str): The companion.
        rolls (RollProvider | None): Roll source.
        ctx (ResolutionContext | None): Character and lookups.

    Returns:
        ActionOutcome: The resolution, with the state already advanced.

    """
    ctx = ctx or ResolutionContext()
    _companion(state, companion_id)
    selection = choose_default_action(
        state, companion_id, summon_cap=allowed_summons(ctx.character, ctx.perk_rank)
    )
    outcome = resolve_companion_action(
        state, companion_id, selection.ability.id, selection.target_id, ctx=ctx, rolls=rolls
    )
    return outcome.model_copy(update={"state": _close_turn(outcome.state, ctx, rolls)})


def supply_companion_action(
    state: CombatState,
    companion_id: str,
    ability_id: str,
    target_id: str | None = None,
    natural_roll: int | None = None,
    rolls: RollProvider | None = None,
    ctx: ResolutionContext | None = None,
) -> ActionOutcome:
    """
    Resolves the action the player picked for a manual companion.

    Args:
        state (CombatState): A state awaiting this companion.
        companion_id (str): The companion.
        ability_id (str): The chosen ability.
        target_id (str | None): The chosen target.
        natural_roll (int | None): A pre-drawn natural roll.
        rolls (RollProvider | None): Roll source when no roll is given.
        ctx (ResolutionContext | None): Character and lookups.

    Returns:
        ActionOutcome: The resolution with the turn advanced. A rejected
        action leaves the state untouched and still awaiting the companion.

    """
    ctx = ctx or ResolutionContext()
    if state.awaiting_companion != companion_id:
        return reject(
            state,
            RejectionReason.NOT_AWAITING,
            "That companion is not waiting for orders.",
            {"companion": companion_id, "awaiting": state.awaiting_companion},
        )
    outcome = resolve_companion_action(
        state, companion_id, ability_id, target_id, natural_roll, ctx, rolls
    )
    if outcome.rejected:
        return outcome
    resolved = outcome.state
    resolved.awaiting_companion = None
    return outcome.model_copy(update={"state": _close_turn(resolved, ctx, rolls)})
