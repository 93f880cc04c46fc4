"""
Decision making for actors the player does not control.

Hostiles pick abilities according to their behavior; auto-controlled
companions (and the player, when auto combat is on) use the simpler default
policy: the first usable ability, aimed at the first living opponent or at the
most wounded friend for restorative abilities.
"""

from pydantic import BaseModel, Field

from encounter.actions.ability import Ability, basic_attack
from encounter.core.constants import PLAYER_ID, ActionCategory, Behavior, EffectType

from .state import CombatState
from .summons import HOSTILE_SUMMON_CAP, summon_cap_reached

# Hostiles only heal once a friend drops below this health ratio.
HEAL_THRESHOLD = 0.5


class AbilitySelection(BaseModel):
    """
    Represents a selected ability along with its target and score.
    """

    ability: Ability = Field(
        description="The ability being considered.",
    )
    target_id: str | None = Field(
        default=None,
        description="The selected target, None for area and summon abilities.",
    )
    score: float = Field(
        default=0.0,
        description="Score of the selection (higher is better).",
    )


def _hp_ratio(state: CombatState, actor_id: str) -> float:
    """
    Helper function to calculate the health ratio of any actor.

    Args:
        state (CombatState): The current state.
        actor_id (str): The actor to inspect.

    Returns:
        float: Current over maximum health.

    """
    return state.health_of(actor_id) / state.max_health_of(actor_id)


def _most_wounded(state: CombatState, ids: list[str]) -> str | None:
    if not ids:
        return None
    return min(ids, key=lambda actor_id: _hp_ratio(state, actor_id))


def _power(ability: Ability) -> int:
    return ability.damage + sum(e.value for e in ability.effects if e.type != EffectType.SUMMON)


# ===== USABILITY =====


def _pools(state: CombatState, actor_id: str) -> tuple[int | None, int | None]:
    if actor_id == PLAYER_ID:
        return state.player.current_magicka, state.player.current_stamina
    actor = state.actor(actor_id)
    return actor.current_magicka, actor.current_stamina


def is_usable(state: CombatState, actor_id: str, ability: Ability, summon_cap: int | None = None) -> bool:
    """
    Checks whether an ability can be used right now without being rejected.

    Args:
        state (CombatState): The current state.
        actor_id (str): The actor considering the ability.
        ability (Ability): The ability.
        summon_cap (int | None): Summon cap to respect; summon abilities are
            skipped when it is reached.

    Returns:
        bool: True when the cooldown, resources, summon cap and targets allow it.

    """
    cooldowns = state.ability_cooldowns if actor_id == PLAYER_ID else state.actor(actor_id).cooldowns
    if cooldowns.get(ability.id, 0) > 0:
        return False
    magicka, stamina = _pools(state, actor_id)
    pool = magicka if ability.type.uses_magicka else stamina
    if ability.cost > 0 and pool is not None and pool < ability.cost:
        return False
    if ability.is_summon:
        return summon_cap is not None and not summon_cap_reached(state, summon_cap)
    if ability.is_aoe:
        return bool(state.opponent_ids(actor_id) or state.friendly_ids(actor_id))
    if ability.targets_friendly:
        return bool(state.friendly_ids(actor_id))
    return bool(state.opponent_ids(actor_id))


def usable_abilities(state: CombatState, actor_id: str, summon_cap: int | None = None) -> list[Ability]:
    """Returns the actor's abilities that can be used right now, in authored order."""
    abilities = state.player.abilities if actor_id == PLAYER_ID else state.actor(actor_id).abilities
    return [a for a in abilities if is_usable(state, actor_id, a, summon_cap)]


def _default_target(state: CombatState, actor_id: str, ability: Ability) -> str | None:
    if not ability.needs_target:
        return None
    if ability.targets_friendly:
        return _most_wounded(state, state.friendly_ids(actor_id))
    opponents = state.opponent_ids(actor_id)
    return opponents[0] if opponents else None


# ===== COMPANION / DEFAULT POLICY =====


def choose_default_action(
    state: CombatState, actor_id: str, summon_cap: int | None = None
) -> AbilitySelection:
    """
    Picks the first usable ability and a default target for it.

    Restorative abilities are passed over while every friend is at full
    health. Falls back to a basic attack built from the actor's damage.

    Args:
        state (CombatState): The current state.
        actor_id (str): The companion (or player) to decide for.
        summon_cap (int | None): Summon cap to respect.

    Returns:
        AbilitySelection: The chosen ability and target.

    """
    for ability in usable_abilities(state, actor_id, summon_cap):
        if ability.category == ActionCategory.HEALING and all(
            _hp_ratio(state, f) >= 1.0 for f in state.friendly_ids(actor_id)
        ):
            continue
        return AbilitySelection(ability=ability, target_id=_default_target(state, actor_id, ability))
    damage = state.player.weapon_damage if actor_id == PLAYER_ID else state.actor(actor_id).damage
    fallback = basic_attack(damage)
    opponents = state.opponent_ids(actor_id)
    return AbilitySelection(ability=fallback, target_id=opponents[0] if opponents else None)


# ===== HOSTILE POLICY =====


def _score(ability: Ability, behavior: Behavior | None) -> float:
    if behavior in (Behavior.AGGRESSIVE, Behavior.BERSERKER):
        return float(_power(ability))
    if behavior == Behavior.DEFENSIVE:
        return -float(ability.cost)
    if behavior == Behavior.TACTICAL:
        return len(ability.effects) * 100.0 + _power(ability)
    return 0.0


def _hostile_target(state: CombatState, enemy_id: str, ability: Ability) -> str | None:
    if not ability.needs_target:
        return None
    if ability.targets_friendly:
        return _most_wounded(state, state.friendly_ids(enemy_id))
    opponents = state.opponent_ids(enemy_id)
    if not opponents:
        return None
    behavior = state.actor(enemy_id).behavior
    if behavior in (Behavior.AGGRESSIVE, Behavior.BERSERKER):
        return _most_wounded(state, opponents)
    return PLAYER_ID if PLAYER_ID in opponents else opponents[0]


def choose_hostile_action(state: CombatState, enemy_id: str) -> AbilitySelection:
    """
    Picks a hostile's ability and target according to its behavior.

    Aggressive and berserker hostiles favour raw damage, defensive ones the
    cheapest option, tactical ones abilities with effects, and support ones
    heal a wounded friend when they can. The ability used last turn is
    avoided while an alternative exists. With nothing usable, the hostile
    falls back to a basic attack.

    Args:
        state (CombatState): The current state.
        enemy_id (str): The hostile to decide for.

    Returns:
        AbilitySelection: The chosen ability and target.

    """
    enemy = state.actor(enemy_id)
    wounded = any(_hp_ratio(state, f) < HEAL_THRESHOLD for f in state.friendly_ids(enemy_id))
    candidates = [
        a
        for a in usable_abilities(state, enemy_id, HOSTILE_SUMMON_CAP)
        if a.category != ActionCategory.HEALING or wounded
    ]
    if enemy.behavior == Behavior.SUPPORT and wounded:
        healers = [a for a in candidates if a.category == ActionCategory.HEALING]
        if healers:
            candidates = healers
    if len(candidates) > 1 and enemy.last_ability_id is not None:
        fresh = [a for a in candidates if a.id != enemy.last_ability_id]
        candidates = fresh or candidates

    if not candidates:
        fallback = basic_attack(enemy.damage)
        return AbilitySelection(ability=fallback, target_id=_hostile_target(state, enemy_id, fallback))

    # max() keeps the first of equal scores, so ties follow authored order.
    best = max(candidates, key=lambda a: _score(a, enemy.behavior))
    return AbilitySelection(
        ability=best,
        target_id=_hostile_target(state, enemy_id, best),
        score=_score(best, enemy.behavior),
    )
