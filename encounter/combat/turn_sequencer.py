"""
Turn Sequencer.

Owns the cycle through `turn_order`. Advancing skips dead actors, and every
landing runs that actor's start-of-turn bookkeeping: effect ticks and
cooldowns for everyone, plus the per-round work (turn counter, action flags,
regeneration, summon lifecycle) when the cycle returns to the player.
"""

import random
from math import floor

from catchery import log_debug

from encounter.core.constants import DEFAULT_SECONDS_PER_TURN, PLAYER_ID
from encounter.core.error_handling import raise_invariant
from encounter.effects.effect_ledger import tick_effects

from .combat_end import check_combat_end
from .state import CombatState
from .summons import apply_summon_decay, materialize_pending_summons


def validate_turn_order(state: CombatState) -> None:
    """
    Checks the structural invariants of the turn order.

    Raises:
        CombatInvariantError: If the order is empty, holds an unknown id, or
            does not contain the current actor.

    """
    if not state.turn_order:
        raise_invariant("turn order is empty")
    for actor_id in state.turn_order:
        if not state.has_actor(actor_id):
            raise_invariant("turn order holds an unknown actor id", {"actor_id": actor_id})
    if state.current_turn_actor not in state.turn_order:
        raise_invariant(
            "current turn actor is not in the turn order",
            {"actor_id": state.current_turn_actor},
        )


def _tick_down(cooldowns: dict[str, int]) -> dict[str, int]:
    return {key: turns - 1 for key, turns in cooldowns.items() if turns > 1}


def _restore(current: int, maximum: int, amount: int) -> tuple[int, int]:
    new_value = min(maximum, current + max(0, amount))
    return new_value, max(0, new_value - current)


def _regen(state: CombatState, seconds_per_turn: int) -> None:
    player = state.player
    if player.is_alive:
        player.current_health, health = _restore(
            player.current_health,
            player.max_health,
            floor(player.regen_health_per_sec * seconds_per_turn),
        )
        player.current_magicka, magicka = _restore(
            player.current_magicka,
            player.max_magicka,
            floor(player.regen_magicka_per_sec * seconds_per_turn),
        )
        player.current_stamina, stamina = _restore(
            player.current_stamina,
            player.max_stamina,
            floor(player.regen_stamina_per_sec * seconds_per_turn),
        )
        restored = [
            f"{amount} {label}"
            for amount, label in ((health, "health"), (magicka, "magicka"), (stamina, "stamina"))
            if amount > 0
        ]
        if restored:
            state.log(PLAYER_ID, "regen", f"You recover {', '.join(restored)}.")
    for enemy in state.living_enemies():
        enemy.heal(floor(enemy.regen_health_per_sec * seconds_per_turn))


def apply_turn_regen(
    state: CombatState, seconds_per_turn: int = DEFAULT_SECONDS_PER_TURN
) -> CombatState:
    """
    Restores a slice of the player's pools and regenerating hostiles' health.

    Args:
        state (CombatState): The current state.
        seconds_per_turn (int): Seconds of regeneration to apply.

    Returns:
        CombatState: The new state; unchanged when combat is over.

    """
    if not state.active:
        return state
    new = state.copy_state()
    _regen(new, seconds_per_turn)
    return new


def _begin_player_turn(state: CombatState, seconds_per_turn: int) -> None:
    state.turn += 1
    state.player_main_action_used = False
    state.player_bonus_action_used = False
    state.ability_cooldowns = _tick_down(state.ability_cooldowns)
    report = tick_effects(state.player_active_effects)
    state.player_active_effects = report.effects
    if report.dot_damage:
        dealt = state.apply_damage(PLAYER_ID, report.dot_damage)
        state.log(PLAYER_ID, "dot", f"You suffer {dealt} damage over time.", damage=dealt)
    for effect in report.expired:
        log_debug("Effect expired", {"actor": PLAYER_ID, "effect": effect.effect_type})
    apply_summon_decay(state)
    materialize_pending_summons(state)
    _regen(state, seconds_per_turn)


def _begin_actor_turn(state: CombatState, actor_id: str) -> None:
    actor = state.actor(actor_id)
    actor.cooldowns = _tick_down(actor.cooldowns)
    report = tick_effects(actor.active_effects)
    actor.active_effects = report.effects
    if report.dot_damage:
        dealt = actor.take_damage(report.dot_damage)
        narrative = f"{actor.name} suffers {dealt} damage over time."
        if not actor.is_alive:
            narrative += f" {actor.name} is defeated!"
        state.log(actor_id, "dot", narrative, damage=dealt)


def advance_turn(
    state: CombatState,
    seconds_per_turn: int = DEFAULT_SECONDS_PER_TURN,
    now: float | None = None,
    rng: random.Random | None = None,
) -> CombatState:
    """
    Moves the turn to the next living actor in the cycle.

    Args:
        state (CombatState): The current state.
        seconds_per_turn (int): Regeneration seconds applied when the cycle
            returns to the player.
        now (float | None): Clock value used if a start-of-turn effect ends
            the encounter.
        rng (random.Random | None): Source for loot rolls in that case.

    Returns:
        CombatState: The new state; the input itself when combat is over.

    Raises:
        CombatInvariantError: If the turn order is broken or holds no living
            actor.

    """
    if not state.active:
        return state
    new = state.copy_state()
    validate_turn_order(new)
    order = new.turn_order
    start = order.index(new.current_turn_actor)
    for step in range(1, len(order) + 1):
        candidate = order[(start + step) % len(order)]
        if not new.is_alive(candidate):
            continue
        new.current_turn_actor = candidate
        new.awaiting_companion = None
        if candidate == PLAYER_ID:
            _begin_player_turn(new, seconds_per_turn)
        else:
            _begin_actor_turn(new, candidate)
        new = check_combat_end(new, now=now, rng=rng)
        if not new.active or new.is_alive(candidate):
            log_debug("Turn advanced", {"actor": candidate, "turn": new.turn})
            return new
    raise_invariant("turn order holds no living actor", {"turn_order": order})
