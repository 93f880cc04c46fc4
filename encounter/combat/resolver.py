"""
Action Resolver.

Turns a decision (who acts, what they do, at whom) plus a natural roll into a
new CombatState, a narrative and a log entry. Player, companion and hostile
decisions all flow through `resolve`; the three public entry points only
differ in which actors they accept.

User-correctable problems (wrong target, spent cooldown, missing resources,
summon cap) are returned as rejected outcomes carrying the untouched input
state. The natural roll is only drawn once an action has passed every check,
so a rejected action never consumes one.
"""

from collections.abc import Callable

from catchery import log_debug, log_warning
from pydantic import BaseModel, ConfigDict, Field

from encounter.actions.ability import Ability, basic_attack
from encounter.actions.action_economy import action_class_for
from encounter.actors.character import Character
from encounter.actors.perks import get_combat_perk_bonus, get_perk_rank
from encounter.core.constants import (
    DEFAULT_SECONDS_PER_TURN,
    GUARD_DAMAGE_REDUCTION,
    MAX_GUARD_TURNS,
    PERK_TACTICAL_GUARD,
    PLAYER_ID,
    ActionClass,
    ActionType,
    CharacterType,
    CombatResult,
    EffectType,
    RejectionReason,
    StatType,
)
from encounter.core.dice import (
    RollOutcome,
    RollProvider,
    chance_succeeds,
    classify_roll,
    validate_nat,
)
from encounter.core.error_handling import raise_invariant
from encounter.effects.effect_ledger import add_effect, consume_stun, is_stunned, stat_modifier
from encounter.effects.timed_effect import TimedEffect
from encounter.items.item import InventoryItem
from encounter.items.restoration import RestorationValues, get_item_restoration_values

from .combat_end import finish_combat
from .damage import DamageResult, compute_damage, compute_healing, damage_perk_key
from .state import AoeEntry, AoeSummary, CombatState, LogEntry
from .summons import HOSTILE_SUMMON_CAP, active_summon_count, allowed_summons, conjure

# Base flee chance before the player's dodge is added.
BASE_FLEE_CHANCE = 50

# A hostile hit is dodged when nat * 5 <= DODGE_WINDOW + dodge chance.
DODGE_WINDOW = 20


class ResolutionContext(BaseModel):
    """External collaborators and inputs a resolution may need."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    character: Character | None = Field(
        default=None,
        description="The controlled character, for perk lookups.",
    )
    inventory: list[InventoryItem] = Field(
        default_factory=list,
        description="Items available for item actions.",
    )
    perk_rank: Callable[[Character | None, str], int] = Field(
        default=get_perk_rank,
        description="Perk rank lookup.",
    )
    perk_bonus: Callable[[Character | None, str], float] = Field(
        default=get_combat_perk_bonus,
        description="Combat perk bonus lookup, in percent.",
    )
    restoration: Callable[[InventoryItem], RestorationValues] = Field(
        default=get_item_restoration_values,
        description="Item restoration lookup.",
    )
    now: float | None = Field(
        default=None,
        description="Clock value used when the action ends the encounter.",
    )
    seconds_per_turn: int = Field(
        default=DEFAULT_SECONDS_PER_TURN,
        ge=0,
        description="Regeneration seconds applied when the cycle returns to the player.",
    )


class ActionOutcome(BaseModel):
    """Everything a resolution produced."""

    state: CombatState = Field(description="The resulting state.")
    narrative: str = Field(description="Human readable result.")
    consumed_action: ActionClass | None = Field(
        default=None,
        description="Economy slot spent; None when rejected.",
    )
    rejected: bool = Field(default=False, description="Whether the action was refused.")
    reason: RejectionReason | None = Field(default=None, description="Why it was refused.")
    used_item: InventoryItem | None = Field(
        default=None,
        description="The consumed item with its quantity already reduced.",
    )
    aoe_summary: AoeSummary | None = Field(default=None, description="Per-target area results.")
    stunned: bool = Field(default=False, description="Whether the actor lost the turn to a stun.")
    fled: bool = Field(default=False, description="Whether a flee succeeded.")
    log_entry: LogEntry | None = Field(default=None, description="The entry appended, if any.")


def reject(
    state: CombatState,
    reason: RejectionReason,
    narrative: str,
    context: dict | None = None,
) -> ActionOutcome:
    """Builds a rejected outcome that leaves the state untouched."""
    log_warning(f"Action rejected: {narrative}", {"reason": reason, **(context or {})})
    return ActionOutcome(state=state, narrative=narrative, rejected=True, reason=reason)


class _RollSource:
    """Draws the natural roll lazily, only once an action is committed."""

    def __init__(self, natural_roll: int | None, rolls: RollProvider | None) -> None:
        self._nat = natural_roll
        self._rolls = rolls

    def draw(self) -> int:
        if self._nat is None:
            provider = self._rolls if self._rolls is not None else RollProvider()
            self._nat = provider.natural_roll()
        return validate_nat(self._nat)


# ===== HELPERS =====


def _subject(state: CombatState, actor_id: str) -> str:
    return "You" if actor_id == PLAYER_ID else state.name_of(actor_id)


def _target_name(state: CombatState, target_id: str, actor_id: str) -> str:
    if target_id == PLAYER_ID:
        return "yourself" if actor_id == PLAYER_ID else "you"
    if target_id == actor_id:
        return "itself"
    return state.name_of(target_id)


def _abilities_of(state: CombatState, actor_id: str) -> list[Ability]:
    if actor_id == PLAYER_ID:
        return [*state.player.abilities, basic_attack(state.player.weapon_damage)]
    actor = state.actor(actor_id)
    return [*actor.abilities, basic_attack(actor.damage)]


def _find_ability(state: CombatState, actor_id: str, ability_id: str | None) -> Ability | None:
    for ability in _abilities_of(state, actor_id):
        if ability.id == ability_id:
            return ability
    return None


def _cooldowns(state: CombatState, actor_id: str) -> dict[str, int]:
    if actor_id == PLAYER_ID:
        return state.ability_cooldowns
    return state.actor(actor_id).cooldowns


def _resource_shortfall(state: CombatState, actor_id: str, ability: Ability) -> RejectionReason | None:
    if ability.cost <= 0:
        return None
    if actor_id == PLAYER_ID:
        pools = (state.player.current_magicka, state.player.current_stamina)
    else:
        actor = state.actor(actor_id)
        pools = (actor.current_magicka, actor.current_stamina)
    if ability.type.uses_magicka:
        if pools[0] is not None and pools[0] < ability.cost:
            return RejectionReason.INSUFFICIENT_MAGICKA
    elif pools[1] is not None and pools[1] < ability.cost:
        return RejectionReason.INSUFFICIENT_STAMINA
    return None


def _spend(state: CombatState, actor_id: str, ability: Ability) -> None:
    if ability.cooldown > 0:
        _cooldowns(state, actor_id)[ability.id] = ability.cooldown
    if ability.cost <= 0:
        return
    owner = state.player if actor_id == PLAYER_ID else state.actor(actor_id)
    if ability.type.uses_magicka:
        if owner.current_magicka is not None:
            owner.current_magicka = max(0, owner.current_magicka - ability.cost)
    elif owner.current_stamina is not None:
        owner.current_stamina = max(0, owner.current_stamina - ability.cost)


def _crit_chance(state: CombatState, actor_id: str) -> int:
    if actor_id == PLAYER_ID:
        return state.player.crit_chance
    return state.actor(actor_id).crit_chance


def _perk_bonus(ctx: ResolutionContext, actor_id: str, key: str) -> float:
    # Perks belong to the controlled character only.
    if actor_id != PLAYER_ID:
        return 0.0
    return ctx.perk_bonus(ctx.character, key)


def _roll_note(outcome: RollOutcome) -> str:
    return "critical failure" if outcome.is_fumble else "miss"


def _validate_target(
    state: CombatState, actor_id: str, ability: Ability, target_id: str | None
) -> str | None:
    """Returns the resolved target id, or None when the target is illegal."""
    if ability.targets_friendly:
        target_id = target_id or actor_id
        return target_id if target_id in state.friendly_ids(actor_id) else None
    if target_id is None or not state.has_actor(target_id):
        return None
    return target_id if target_id in state.opponent_ids(actor_id) else None


# ===== EFFECT APPLICATION =====


def _timed(effect_type: EffectType, spec_duration: int, actor_id: str, ability: Ability, **fields) -> TimedEffect:
    return TimedEffect(
        effect_type=effect_type,
        turns_remaining=max(1, spec_duration),
        source_id=actor_id,
        name=ability.name,
        **fields,
    )


def _apply_rider_effects(
    state: CombatState,
    actor_id: str,
    target_id: str,
    ability: Ability,
    outcome: RollOutcome,
) -> list[str]:
    """Applies the secondary effects of a landed offensive ability."""
    notes: list[str] = []
    target_name = _target_name(state, target_id, actor_id)
    for spec in ability.effects:
        if spec.type in (EffectType.STUN, EffectType.DOT, EffectType.DEBUFF):
            if not state.is_alive(target_id) or not chance_succeeds(outcome.nat, spec.chance):
                continue
            state.set_effects(
                target_id,
                add_effect(
                    state.effects_of(target_id),
                    _timed(spec.type, spec.duration, actor_id, ability, stat=spec.stat, magnitude=spec.value),
                ),
            )
            if spec.type == EffectType.STUN:
                notes.append(f"{target_name.capitalize()} {'are' if target_id == PLAYER_ID else 'is'} stunned!")
            elif spec.type == EffectType.DOT:
                notes.append(f"{target_name.capitalize()} {'are' if target_id == PLAYER_ID else 'is'} afflicted.")
            else:
                notes.append(f"{target_name.capitalize()} {'are' if target_id == PLAYER_ID else 'is'} weakened.")
        elif spec.type == EffectType.HEAL and spec.value > 0:
            healed = state.apply_heal(actor_id, spec.value)
            if healed:
                notes.append(f"{_subject(state, actor_id)} drain{'' if actor_id == PLAYER_ID else 's'} {healed} health.")
        elif spec.type == EffectType.BUFF and spec.duration > 0:
            state.set_effects(
                actor_id,
                add_effect(
                    state.effects_of(actor_id),
                    _timed(EffectType.BUFF, spec.duration, actor_id, ability, stat=spec.stat, magnitude=spec.value),
                ),
            )
    return notes


def _hit(
    state: CombatState,
    ctx: ResolutionContext,
    actor_id: str,
    target_id: str,
    ability: Ability,
    outcome: RollOutcome,
) -> DamageResult:
    """Computes and applies the damage of one landed hit."""
    attacker = state.player if actor_id == PLAYER_ID else state.actor(actor_id)
    target_effects = state.effects_of(target_id)
    if target_id == PLAYER_ID:
        resistances: list[str] = []
        magic_resist = state.player.magic_resist
    else:
        resistances = state.actor(target_id).resistances
        magic_resist = 0
    result = compute_damage(
        ability,
        outcome,
        level=attacker.level,
        weapon_damage=state.player.weapon_damage if actor_id == PLAYER_ID else 0,
        perk_bonus=_perk_bonus(ctx, actor_id, damage_perk_key(ability.type)),
        damage_modifier=stat_modifier(state.effects_of(actor_id), StatType.DAMAGE),
        hostile=state.side_of(actor_id) == CharacterType.ENEMY,
        target_armor=max(0, state.armor_of(target_id) + stat_modifier(target_effects, StatType.ARMOR)),
        target_resistances=resistances,
        target_effects=target_effects,
        target_magic_resist=magic_resist,
    )
    applied = state.apply_damage(target_id, result.amount)
    return result.model_copy(update={"amount": applied})


# ===== ABILITY RESOLUTION =====


def _resolve_offensive(
    state: CombatState,
    ctx: ResolutionContext,
    actor_id: str,
    ability: Ability,
    target_id: str,
    outcome: RollOutcome,
) -> tuple[str, dict]:
    is_player = actor_id == PLAYER_ID
    subject = _subject(state, actor_id)
    target = _target_name(state, target_id, actor_id)
    fields: dict = {"target": target_id, "damage": 0}
    if not outcome.hit:
        if is_player:
            return (
                f"You roll {outcome.nat} ({_roll_note(outcome)}) and your "
                f"{ability.name} fails to connect.",
                fields,
            )
        return (
            f"{subject} rolls {outcome.nat} ({_roll_note(outcome)}) and "
            f"{ability.name} misses {target}.",
            fields,
        )
    if (
        target_id == PLAYER_ID
        and state.side_of(actor_id) == CharacterType.ENEMY
        and outcome.nat * 5 <= DODGE_WINDOW + state.player.dodge_chance
    ):
        return f"You dodge {subject}'s {ability.name}!", fields
    if ability.damage <= 0:
        # Pure debuffs and stuns land their effects without a damage roll.
        notes = _apply_rider_effects(state, actor_id, target_id, ability, outcome)
        narrative = f"{subject} {'use' if is_player else 'uses'} {ability.name} on {target}."
        return " ".join([narrative, *notes]), fields

    result = _hit(state, ctx, actor_id, target_id, ability, outcome)
    fields["damage"] = result.amount
    narrative = (
        f"{subject} {'use' if is_player else 'uses'} {ability.name} on {target} and "
        f"{'deal' if is_player else 'deals'} {result.amount} damage to the {result.hit_location}!"
    )
    if outcome.is_crit:
        narrative = f"CRITICAL HIT! {narrative}"
    if result.guarded:
        narrative += " The guard absorbs part of the blow."
    if not state.is_alive(target_id):
        narrative += (
            " You fall!" if target_id == PLAYER_ID else f" {state.name_of(target_id)} is defeated!"
        )
    notes = _apply_rider_effects(state, actor_id, target_id, ability, outcome)
    return " ".join([narrative, *notes]), fields


def _resolve_support(
    state: CombatState,
    ctx: ResolutionContext,
    actor_id: str,
    ability: Ability,
    target_id: str,
    outcome: RollOutcome,
) -> tuple[str, dict]:
    is_player = actor_id == PLAYER_ID
    subject = _subject(state, actor_id)
    fields: dict = {"target": target_id, "healing": 0}
    if outcome.is_fumble:
        return (
            f"{subject} {'roll' if is_player else 'rolls'} {outcome.nat} (critical failure) "
            f"and {ability.name} fizzles.",
            fields,
        )
    base_heal = ability.heal + sum(e.value for e in ability.effects_of(EffectType.HEAL))
    parts = [f"{subject} {'use' if is_player else 'uses'} {ability.name} on {_target_name(state, target_id, actor_id)}"]
    if base_heal > 0:
        amount = compute_healing(base_heal, outcome, _perk_bonus(ctx, actor_id, "heal_power"))
        fields["healing"] = state.apply_heal(target_id, amount)
        parts.append(f"restoring {fields['healing']} health")
    buffs = ability.effects_of(EffectType.BUFF)
    for spec in buffs:
        state.set_effects(
            target_id,
            add_effect(
                state.effects_of(target_id),
                _timed(EffectType.BUFF, spec.duration, actor_id, ability, stat=spec.stat, magnitude=spec.value),
            ),
        )
    if buffs:
        parts.append(
            "granting " + ", ".join(
                f"+{spec.value} {spec.stat.value if spec.stat else 'power'}" for spec in buffs
            )
        )
    return ", ".join(parts) + ".", fields


def _resolve_aoe(
    state: CombatState,
    ctx: ResolutionContext,
    actor_id: str,
    ability: Ability,
    outcome: RollOutcome,
) -> tuple[str, dict, AoeSummary]:
    is_player = actor_id == PLAYER_ID
    summary = AoeSummary()
    damage_base = ability.damage + sum(e.value for e in ability.effects_of(EffectType.AOE_DAMAGE))
    heal_base = ability.heal + sum(e.value for e in ability.effects_of(EffectType.AOE_HEAL))

    if damage_base > 0 and outcome.hit:
        strike = ability.model_copy(update={"damage": damage_base})
        for target_id in state.opponent_ids(actor_id):
            result = _hit(state, ctx, actor_id, target_id, strike, outcome)
            summary.damaged.append(
                AoeEntry(id=target_id, name=state.name_of(target_id), amount=result.amount)
            )
            _apply_rider_effects(state, actor_id, target_id, ability, outcome)
    if heal_base > 0 and not outcome.is_fumble:
        amount = compute_healing(heal_base, outcome, _perk_bonus(ctx, actor_id, "heal_power"))
        for friend_id in state.friendly_ids(actor_id):
            healed = state.apply_heal(friend_id, amount)
            summary.healed.append(AoeEntry(id=friend_id, name=state.name_of(friend_id), amount=healed))

    narrative = f"{_subject(state, actor_id)} {'unleash' if is_player else 'unleashes'} {ability.name}!"
    if summary.damaged:
        narrative += " It hits " + ", ".join(f"{e.name} ({e.amount})" for e in summary.damaged) + "."
        defeated = [e.name for e in summary.damaged if not state.is_alive(e.id)]
        if defeated:
            narrative += f" Defeated: {', '.join(defeated)}."
    if summary.healed:
        narrative += " It restores " + ", ".join(f"{e.name} ({e.amount})" for e in summary.healed) + "."
    if not summary.damaged and not summary.healed:
        narrative += f" The roll of {outcome.nat} ({_roll_note(outcome)}) lets it fizzle out."
    fields = {
        "damage": sum(e.amount for e in summary.damaged),
        "healing": sum(e.amount for e in summary.healed),
    }
    return narrative, fields, summary


def _resolve_summon(state: CombatState, actor_id: str, ability: Ability, outcome: RollOutcome) -> str:
    subject = _subject(state, actor_id)
    if outcome.is_fumble:
        return (
            f"{subject} {'roll' if actor_id == PLAYER_ID else 'rolls'} {outcome.nat} "
            f"(critical failure) and the conjuration fails."
        )
    parts = [conjure(state, spec, outcome, actor_id) for spec in ability.effects_of(EffectType.SUMMON)]
    return f"{subject} {'cast' if actor_id == PLAYER_ID else 'casts'} {ability.name}: {'; '.join(parts)}."


def _resolve_ability(
    state: CombatState,
    actor_id: str,
    ability_id: str | None,
    target_id: str | None,
    rolls: _RollSource,
    ctx: ResolutionContext,
) -> ActionOutcome:
    subject = _subject(state, actor_id)
    context = {"actor": actor_id, "ability": ability_id, "target": target_id}
    ability = _find_ability(state, actor_id, ability_id)
    if ability is None:
        return reject(state, RejectionReason.UNKNOWN_ABILITY, f"{subject} cannot use that ability.", context)

    remaining = _cooldowns(state, actor_id).get(ability.id, 0)
    if remaining > 0:
        return reject(
            state,
            RejectionReason.ON_COOLDOWN,
            f"{ability.name} is on cooldown for {remaining} more turn(s).",
            context,
        )

    shortfall = _resource_shortfall(state, actor_id, ability)
    if shortfall is not None:
        pool = "magicka" if shortfall == RejectionReason.INSUFFICIENT_MAGICKA else "stamina"
        return reject(state, shortfall, f"Not enough {pool} for {ability.name}!", context)

    resolved_target: str | None = None
    if ability.needs_target:
        resolved_target = _validate_target(state, actor_id, ability, target_id)
        if resolved_target is None:
            shown = state.name_of(target_id) if target_id and state.has_actor(target_id) else "that"
            return reject(
                state,
                RejectionReason.INVALID_TARGET,
                f"Invalid target: {ability.name} cannot target {shown}.",
                context,
            )

    if ability.is_summon:
        if state.is_player_side(actor_id):
            allowed = allowed_summons(ctx.character, ctx.perk_rank)
        else:
            allowed = HOSTILE_SUMMON_CAP
        wanted = max(1, len(ability.effects_of(EffectType.SUMMON)))
        if active_summon_count(state) + wanted > allowed:
            return reject(
                state,
                RejectionReason.SUMMON_CAP,
                "You have already summoned the maximum number of companions."
                if actor_id == PLAYER_ID
                else f"{subject} cannot conjure more companions.",
                context,
            )

    nat = rolls.draw()
    outcome = classify_roll(nat, _crit_chance(state, actor_id))
    new = state.copy_state()
    _spend(new, actor_id, ability)
    if actor_id != PLAYER_ID:
        new.actor(actor_id).last_ability_id = ability.id

    summary: AoeSummary | None = None
    fields: dict = {}
    if ability.is_summon:
        narrative = _resolve_summon(new, actor_id, ability, outcome)
    elif ability.is_aoe:
        narrative, fields, summary = _resolve_aoe(new, ctx, actor_id, ability, outcome)
    elif ability.targets_friendly:
        narrative, fields = _resolve_support(new, ctx, actor_id, ability, resolved_target, outcome)
    else:
        narrative, fields = _resolve_offensive(new, ctx, actor_id, ability, resolved_target, outcome)

    entry = new.log(
        actor_id,
        ability.name,
        narrative,
        nat=nat,
        is_crit=outcome.is_crit,
        roll_tier=outcome.tier,
        **fields,
    )
    log_debug("Resolved ability", {**context, "nat": nat, "tier": outcome.tier})
    return ActionOutcome(
        state=new,
        narrative=narrative,
        consumed_action=ability.action_class,
        aoe_summary=summary,
        log_entry=entry,
    )


# ===== PLAYER-ONLY ACTIONS =====


def _resolve_item(
    state: CombatState, item_id: str | None, rolls: _RollSource, ctx: ResolutionContext
) -> ActionOutcome:
    item = next((i for i in ctx.inventory if i.id == item_id), None)
    if item is None or item.quantity <= 0 or not item.is_consumable:
        return reject(state, RejectionReason.NO_EFFECT, "You cannot use that item.", {"item": item_id})
    values = ctx.restoration(item)
    player = state.player
    gains = {
        "health": min(values.health, player.max_health - player.current_health),
        "magicka": min(values.magicka, player.max_magicka - player.current_magicka),
        "stamina": min(values.stamina, player.max_stamina - player.current_stamina),
    }
    if not any(gains.values()) and not values.hunger and not values.thirst:
        return reject(
            state, RejectionReason.NO_EFFECT, f"{item.name} would have no effect.", {"item": item_id}
        )

    nat = rolls.draw()
    new = state.copy_state()
    new.player.current_health += gains["health"]
    new.player.current_magicka += gains["magicka"]
    new.player.current_stamina += gains["stamina"]
    new.survival_delta.hunger -= values.hunger
    new.survival_delta.thirst -= values.thirst

    restored = [f"{amount} {vital}" for vital, amount in gains.items() if amount > 0]
    if values.hunger:
        restored.append("hunger")
    if values.thirst:
        restored.append("thirst")
    narrative = f"You use {item.name}, restoring {', '.join(restored)}."
    entry = new.log(PLAYER_ID, item.name, narrative, nat=nat, healing=gains["health"] or None)
    return ActionOutcome(
        state=new,
        narrative=narrative,
        consumed_action=ActionClass.BONUS,
        used_item=item.model_copy(update={"quantity": item.quantity - 1}),
        log_entry=entry,
    )


def _resolve_defend(state: CombatState, rolls: _RollSource, ctx: ResolutionContext) -> ActionOutcome:
    if state.player_guard_used:
        return reject(
            state, RejectionReason.GUARD_USED, "You have already used Tactical Guard this combat."
        )
    turns = min(MAX_GUARD_TURNS, 1 + ctx.perk_rank(ctx.character, PERK_TACTICAL_GUARD))
    nat = rolls.draw()
    new = state.copy_state()
    new.player_guard_used = True
    new.player_active_effects = add_effect(
        new.player_active_effects,
        TimedEffect(
            effect_type=EffectType.GUARD,
            turns_remaining=turns,
            magnitude=round(GUARD_DAMAGE_REDUCTION * 100),
            source_id=PLAYER_ID,
            name="Tactical Guard",
        ),
    )
    narrative = (
        "You take a defensive stance with Tactical Guard, reducing incoming damage "
        f"by {round(GUARD_DAMAGE_REDUCTION * 100)}% for {turns} turn(s)."
    )
    entry = new.log(PLAYER_ID, "defend", narrative, nat=nat)
    return ActionOutcome(
        state=new, narrative=narrative, consumed_action=ActionClass.BONUS, log_entry=entry
    )


def _resolve_flee(state: CombatState, rolls: _RollSource, ctx: ResolutionContext) -> ActionOutcome:
    if not state.flee_allowed:
        return reject(state, RejectionReason.FLEE_DISALLOWED, "You cannot flee from this fight!")
    nat = rolls.draw()
    chance = BASE_FLEE_CHANCE + state.player.dodge_chance
    new = state.copy_state()
    if chance_succeeds(nat, chance):
        narrative = f"You roll {nat} and escape from combat!"
        entry = new.log(PLAYER_ID, "flee", narrative, nat=nat)
        finish_combat(new, CombatResult.FLED, "You fled the battle.", ctx.now)
        return ActionOutcome(
            state=new,
            narrative=narrative,
            consumed_action=ActionClass.MAIN,
            fled=True,
            log_entry=entry,
        )
    narrative = f"You roll {nat} and fail to escape!"
    entry = new.log(PLAYER_ID, "flee", narrative, nat=nat)
    return ActionOutcome(
        state=new, narrative=narrative, consumed_action=ActionClass.MAIN, log_entry=entry
    )


def _resolve_surrender(state: CombatState, rolls: _RollSource, ctx: ResolutionContext) -> ActionOutcome:
    if not state.surrender_allowed:
        return reject(
            state, RejectionReason.SURRENDER_DISALLOWED, "These enemies will not accept a surrender."
        )
    nat = rolls.draw()
    new = state.copy_state()
    narrative = "You lay down your arms and surrender."
    entry = new.log(PLAYER_ID, "surrender", narrative, nat=nat)
    finish_combat(new, CombatResult.SURRENDERED, "The enemies accept your surrender.", ctx.now)
    return ActionOutcome(
        state=new, narrative=narrative, consumed_action=ActionClass.MAIN, log_entry=entry
    )


def _resolve_stunned(state: CombatState, actor_id: str, action_class: ActionClass) -> ActionOutcome:
    new = state.copy_state()
    new.set_effects(actor_id, consume_stun(new.effects_of(actor_id)))
    if actor_id == PLAYER_ID:
        narrative = "You are stunned and cannot act!"
    else:
        narrative = f"{new.name_of(actor_id)} is stunned and cannot act!"
    entry = new.log(actor_id, "stunned", narrative)
    return ActionOutcome(
        state=new,
        narrative=narrative,
        consumed_action=action_class,
        stunned=True,
        log_entry=entry,
    )


# ===== ENTRY POINTS =====


def resolve(
    state: CombatState,
    actor_id: str,
    action_type: ActionType,
    ability_id: str | None = None,
    target_id: str | None = None,
    natural_roll: int | None = None,
    ctx: ResolutionContext | None = None,
    rolls: RollProvider | None = None,
    item_id: str | None = None,
) -> ActionOutcome:
    """
    Resolves one action for any actor.

    Args:
        state (CombatState): The current state; never modified.
        actor_id (str): Who acts.
        action_type (ActionType): What they do.
        ability_id (str | None): The ability, for ability actions.
        target_id (str | None): The target, for single-target abilities.
        natural_roll (int | None): A pre-drawn natural roll. When omitted,
            one is drawn from `rolls` once the action passes its checks.
        ctx (ResolutionContext | None): Character, inventory and lookups.
        rolls (RollProvider | None): Roll source used when no roll is given.
        item_id (str | None): The item, for item actions.

    Returns:
        ActionOutcome: The new state, narrative and bookkeeping. Rejected
        outcomes carry the input state unchanged.

    Raises:
        CombatInvariantError: If the actor is unknown or the roll is out of
            range.

    """
    ctx = ctx or ResolutionContext()
    if not state.active:
        return reject(state, RejectionReason.COMBAT_OVER, "The battle is already over.")
    if not state.has_actor(actor_id):
        raise_invariant("acting actor is unknown", {"actor_id": actor_id})
    if not state.is_alive(actor_id):
        return reject(
            state, RejectionReason.NOT_YOUR_TURN, f"{state.name_of(actor_id)} cannot act.", {"actor": actor_id}
        )

    ability = _find_ability(state, actor_id, ability_id) if action_type == ActionType.ABILITY else None
    if is_stunned(state.effects_of(actor_id)):
        return _resolve_stunned(state, actor_id, action_class_for(action_type, ability))

    source = _RollSource(natural_roll, rolls)
    if action_type == ActionType.ABILITY:
        return _resolve_ability(state, actor_id, ability_id, target_id, source, ctx)
    if action_type == ActionType.END_TURN:
        return ActionOutcome(state=state, narrative="", consumed_action=ActionClass.MAIN)
    if action_type == ActionType.SKIP:
        new = state.copy_state()
        narrative = f"{_subject(new, actor_id)} {'hold' if actor_id == PLAYER_ID else 'holds'} position."
        entry = new.log(actor_id, "skip", narrative)
        return ActionOutcome(
            state=new, narrative=narrative, consumed_action=ActionClass.MAIN, log_entry=entry
        )
    if actor_id != PLAYER_ID:
        return reject(
            state, RejectionReason.UNKNOWN_ABILITY, f"{state.name_of(actor_id)} cannot do that.", {"actor": actor_id}
        )
    if action_type == ActionType.ITEM:
        return _resolve_item(state, item_id, source, ctx)
    if action_type == ActionType.DEFEND:
        return _resolve_defend(state, source, ctx)
    if action_type == ActionType.FLEE:
        return _resolve_flee(state, source, ctx)
    return _resolve_surrender(state, source, ctx)


def resolve_player_action(
    state: CombatState,
    action_type: ActionType,
    ability_id: str | None = None,
    target_id: str | None = None,
    natural_roll: int | None = None,
    ctx: ResolutionContext | None = None,
    rolls: RollProvider | None = None,
    item_id: str | None = None,
) -> ActionOutcome:
    """Resolves an action chosen by the player."""
    return resolve(
        state, PLAYER_ID, action_type, ability_id, target_id, natural_roll, ctx, rolls, item_id
    )


def resolve_companion_action(
    state: CombatState,
    companion_id: str,
    ability_id: str | None,
    target_id: str | None = None,
    natural_roll: int | None = None,
    ctx: ResolutionContext | None = None,
    rolls: RollProvider | None = None,
) -> ActionOutcome:
    """Resolves an ability chosen for a companion, by the arbiter or the player."""
    if state.side_of(companion_id) != CharacterType.ALLY:
        raise_invariant("actor is not a companion", {"actor_id": companion_id})
    return resolve(
        state, companion_id, ActionType.ABILITY, ability_id, target_id, natural_roll, ctx, rolls
    )


def resolve_hostile_action(
    state: CombatState,
    enemy_id: str,
    ability_id: str | None,
    target_id: str | None = None,
    natural_roll: int | None = None,
    ctx: ResolutionContext | None = None,
    rolls: RollProvider | None = None,
) -> ActionOutcome:
    """Resolves an ability chosen by the hostile AI."""
    if state.side_of(enemy_id) != CharacterType.ENEMY:
        raise_invariant("actor is not a hostile", {"actor_id": enemy_id})
    return resolve(
        state, enemy_id, ActionType.ABILITY, ability_id, target_id, natural_roll, ctx, rolls
    )
