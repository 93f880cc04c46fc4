"""
Status Effect Ledger.

Pure helpers over an actor's list of TimedEffect entries. Non-stun effects
tick at the start of their owner's turn; a stun is consumed when the stunned
turn itself is resolved, so each owner turn decrements every effect exactly
once.
"""

from math import floor

from pydantic import BaseModel, Field

from encounter.core.constants import GUARD_DAMAGE_REDUCTION, EffectType, StatType
from encounter.effects.timed_effect import TimedEffect


class TickReport(BaseModel):
    """What happened when an actor's effects ticked."""

    effects: list[TimedEffect] = Field(
        default_factory=list,
        description="The effects still active after the tick.",
    )
    expired: list[TimedEffect] = Field(
        default_factory=list,
        description="The effects removed by the tick.",
    )
    dot_damage: int = Field(
        default=0,
        description="Damage dealt by damage-over-time effects this tick.",
    )


def is_stunned(effects: list[TimedEffect]) -> bool:
    """Returns True when a stun with turns left is present."""
    return any(
        e.effect_type == EffectType.STUN and e.turns_remaining > 0 for e in effects
    )


def has_guard(effects: list[TimedEffect]) -> bool:
    """Returns True when a guard with turns left is present."""
    return any(
        e.effect_type == EffectType.GUARD and e.turns_remaining > 0 for e in effects
    )


def add_effect(effects: list[TimedEffect], effect: TimedEffect) -> list[TimedEffect]:
    """
    Adds an effect, refreshing an existing one of the same kind.

    Effects of the same type on the same stat do not stack: the longer
    duration and the stronger magnitude are kept.

    Args:
        effects (list[TimedEffect]): The current effects.
        effect (TimedEffect): The effect to add.

    Returns:
        list[TimedEffect]: A new list holding the result.

    """
    if effect.turns_remaining <= 0:
        return list(effects)
    result: list[TimedEffect] = []
    merged = False
    for existing in effects:
        if (
            not merged
            and existing.effect_type == effect.effect_type
            and existing.stat == effect.stat
        ):
            result.append(
                existing.model_copy(
                    update={
                        "turns_remaining": max(
                            existing.turns_remaining, effect.turns_remaining
                        ),
                        "magnitude": max(existing.magnitude, effect.magnitude, key=abs),
                        "source_id": effect.source_id or existing.source_id,
                    }
                )
            )
            merged = True
        else:
            result.append(existing)
    if not merged:
        result.append(effect)
    return result


def tick_effects(effects: list[TimedEffect]) -> TickReport:
    """
    Ticks every non-stun effect once, at the start of its owner's turn.

    Damage-over-time effects deal their magnitude before decrementing.

    Args:
        effects (list[TimedEffect]): The owner's effects.

    Returns:
        TickReport: Remaining effects, expired effects and DoT damage.

    """
    report = TickReport()
    for effect in effects:
        if effect.effect_type == EffectType.STUN:
            report.effects.append(effect)
            continue
        if effect.effect_type == EffectType.DOT:
            report.dot_damage += max(0, effect.magnitude)
        remaining = effect.turns_remaining - 1
        if remaining > 0:
            report.effects.append(effect.model_copy(update={"turns_remaining": remaining}))
        else:
            report.expired.append(effect)
    return report


def consume_stun(effects: list[TimedEffect]) -> list[TimedEffect]:
    """Decrements every stun by one, dropping those that reach zero."""
    result: list[TimedEffect] = []
    for effect in effects:
        if effect.effect_type != EffectType.STUN:
            result.append(effect)
        elif effect.turns_remaining > 1:
            result.append(
                effect.model_copy(update={"turns_remaining": effect.turns_remaining - 1})
            )
    return result


def stat_modifier(effects: list[TimedEffect], stat: StatType) -> int:
    """Returns the net buff/debuff modifier applied to a stat."""
    total = 0
    for effect in effects:
        if effect.stat != stat:
            continue
        if effect.effect_type == EffectType.BUFF:
            total += effect.magnitude
        elif effect.effect_type == EffectType.DEBUFF:
            total -= abs(effect.magnitude)
    return total


def apply_guard(damage: int, effects: list[TimedEffect]) -> int:
    """Reduces incoming damage by the guard fraction when guarding."""
    if damage <= 0 or not has_guard(effects):
        return damage
    return max(1, floor(damage * (1 - GUARD_DAMAGE_REDUCTION)))
