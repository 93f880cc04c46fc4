"""
Summon Governor.

Caps how many conjured companions may exist at once, counting both live
summons and those still pending arrival, and runs the summon lifecycle:
arrival after a countdown, a limited lifetime, then decay until the summon
fades away.
"""

from collections.abc import Callable
from math import floor

from catchery import log_debug

from encounter.actors.character import Character
from encounter.actors.combat_actor import CombatActor, CompanionMeta
from encounter.actors.perks import get_perk_rank
from encounter.core.constants import PERK_TWIN_SOULS, CharacterType, EffectType, RollTier
from encounter.core.dice import RollOutcome
from encounter.effects.effect_ledger import add_effect
from encounter.effects.timed_effect import EffectSpec, TimedEffect

from .state import CombatState, PendingSummon

# Lifetime in player turns when a summon spec does not set one.
DEFAULT_SUMMON_LIFETIME = 3

# Hostile conjurers are never allowed more than this many summons.
HOSTILE_SUMMON_CAP = 1


def active_summon_count(state: CombatState) -> int:
    """Living summons on either side plus summons still pending arrival."""
    living = sum(
        1 for actor in [*state.allies, *state.enemies] if actor.is_summon and actor.is_alive
    )
    return living + len(state.pending_summons)


def allowed_summons(
    character: Character | None,
    perk_rank: Callable[[Character | None, str], int] = get_perk_rank,
) -> int:
    """Base cap of one summon, plus one per rank of the twin souls perk."""
    return 1 + perk_rank(character, PERK_TWIN_SOULS)


def summon_cap_reached(state: CombatState, allowed: int) -> bool:
    return active_summon_count(state) >= allowed


def _next_summon_id(state: CombatState, spec: EffectSpec) -> str:
    state.summon_counter += 1
    slug = (spec.name or "summon").lower().replace(" ", "_")
    return f"summon_{slug}_{state.summon_counter}"


def build_summon(
    state: CombatState,
    spec: EffectSpec,
    outcome: RollOutcome,
    summoner_id: str,
    side: CharacterType,
) -> CombatActor:
    """
    Creates the companion described by a summon spec, scaled by the roll.

    Args:
        state (CombatState): The state being built; its summon counter is
            advanced.
        spec (EffectSpec): The summon effect.
        outcome (RollOutcome): The conjuration roll.
        summoner_id (str): Id of the conjurer.
        side (CharacterType): ALLY or ENEMY.

    Returns:
        CombatActor: The new summon.

    """
    scale = outcome.heal_multiplier
    health = max(1, floor(spec.base_health * scale))
    lifetime = spec.duration or DEFAULT_SUMMON_LIFETIME
    if outcome.tier in (RollTier.HIGH, RollTier.CRIT):
        lifetime += 1
    return CombatActor(
        id=_next_summon_id(state, spec),
        name=spec.name or "Summoned Familiar",
        side=side,
        level=state.player.level if side == CharacterType.ALLY else 1,
        current_health=health,
        max_health=health,
        damage=max(1, floor(spec.base_damage * scale)),
        companion_meta=CompanionMeta(
            is_summon=True,
            auto_control=True,
            player_turns_remaining=lifetime,
            summoner_id=summoner_id,
        ),
    )


def _join(state: CombatState, actor: CombatActor) -> None:
    if actor.side == CharacterType.ENEMY:
        state.enemies.append(actor)
    else:
        state.allies.append(actor)
    if actor.id not in state.turn_order:
        state.turn_order.append(actor.id)


def conjure(
    state: CombatState,
    spec: EffectSpec,
    outcome: RollOutcome,
    summoner_id: str,
) -> str:
    """
    Spawns or queues a summon on the summoner's side.

    The state is modified in place; callers pass a working copy.

    Returns:
        str: A narrative fragment describing the result.

    """
    if outcome.is_fumble:
        return "the conjuration fails"
    side = CharacterType.ALLY if state.is_player_side(summoner_id) else CharacterType.ENEMY
    summon = build_summon(state, spec, outcome, summoner_id, side)
    log_debug(
        "Conjured summon",
        {"summoner": summoner_id, "summon": summon.id, "health": summon.max_health},
    )
    if spec.arrival_delay > 0:
        state.pending_summons.append(
            PendingSummon(
                companion_id=summon.id,
                player_turns_remaining=spec.arrival_delay,
                actor=summon,
            )
        )
        return f"{summon.name} will arrive in {spec.arrival_delay} turn(s)"
    _join(state, summon)
    return f"{summon.name} appears ({summon.current_health} HP)"


def materialize_pending_summons(state: CombatState) -> None:
    """Counts pending summons down one player turn and brings in the ready ones."""
    still_pending: list[PendingSummon] = []
    for pending in state.pending_summons:
        remaining = pending.player_turns_remaining - 1
        if remaining > 0:
            still_pending.append(pending.model_copy(update={"player_turns_remaining": remaining}))
            continue
        _join(state, pending.actor)
        state.log("system", "summon_arrives", f"{pending.actor.name} answers the call!")
    state.pending_summons = still_pending


def apply_summon_decay(state: CombatState) -> None:
    """
    Runs one player turn of the summon lifecycle.

    Decaying summons lose half their health (rounded down, so they
    eventually reach zero). The others spend one turn of lifetime and start
    decaying when it runs out.
    """
    for actor in [*state.allies, *state.enemies]:
        if not actor.is_summon or not actor.is_alive:
            continue
        meta = actor.companion_meta
        if meta.decay_active:
            actor.current_health = floor(actor.current_health / 2)
            if not actor.is_alive:
                state.log("system", "summon_fades", f"{actor.name} fades away.")
                continue
        elif meta.player_turns_remaining is not None:
            meta.player_turns_remaining = max(0, meta.player_turns_remaining - 1)
            if meta.player_turns_remaining == 0:
                meta.decay_active = True
                state.log("system", "summon_decay", f"{actor.name} begins to fade.")
        if meta.decay_active:
            actor.active_effects = add_effect(
                actor.active_effects,
                TimedEffect(
                    effect_type=EffectType.SUMMON_DECAY,
                    turns_remaining=2,
                    source_id=meta.summoner_id,
                ),
            )


def cleanup_summons(state: CombatState) -> None:
    """Drops summons that can no longer arrive once the encounter is over."""
    state.pending_summons = []
