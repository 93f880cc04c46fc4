"""
Encounter driver.

The functions here glue the engine together: they set an encounter up, apply
the action economy around player actions, and pump hostile and companion
turns until the player has to decide something. `CombatManager` wraps them
for embeddings that prefer an object holding the current state, the roll
source and a narrative hook.
"""

import random
import time
from collections.abc import Callable, Iterable

from catchery import log_debug

from encounter.actions.action_economy import (
    action_class_for,
    is_slot_exempt,
    mark_used,
    should_advance,
    slot_available,
)
from encounter.actors.combat_actor import CombatActor, CompanionMeta
from encounter.actors.player_stats import PlayerCombatStats
from encounter.core.config import EngineConfig
from encounter.core.constants import (
    PLAYER_ID,
    ActionType,
    CharacterType,
    ControlMode,
    EncounterStatus,
    RejectionReason,
)
from encounter.core.dice import RollProvider
from encounter.core.error_handling import ERROR_HANDLER, ErrorSeverity, raise_invariant
from encounter.effects.effect_ledger import is_stunned
from encounter.items.item import InventoryItem

from .combat_end import EncounterSummary, check_combat_end, summarize_encounter
from .companions import (
    needs_manual_decision,
    run_auto_companion_turn,
    set_companion_control,
    supply_companion_action,
)
from .loot import LootResult, compute_enemy_xp, finalize_loot
from .npc_ai import choose_default_action, choose_hostile_action
from .resolver import (
    ActionOutcome,
    ResolutionContext,
    reject,
    resolve_hostile_action,
    resolve_player_action,
)
from .state import CombatState, LogEntry
from .summons import allowed_summons
from .turn_sequencer import advance_turn, validate_turn_order

# Upper bound on AI turns resolved by a single pump of the driver.
MAX_AI_STEPS = 500


# ===== SETUP =====


def initialize_combat(
    enemies: Iterable[CombatActor],
    player_stats: PlayerCombatStats,
    allies: Iterable[CombatActor] = (),
    ambush: bool = False,
    flee_allowed: bool = True,
    surrender_allowed: bool = False,
    now: float | None = None,
    rng: random.Random | None = None,
    location: str | None = None,
) -> CombatState:
    """
    Builds the opening state of an encounter.

    Hostiles without authored rewards get a derived experience value and a
    rolled gold purse. Companions without bookkeeping default to automatic
    control.

    Args:
        enemies (Iterable[CombatActor]): The hostiles; at least one.
        player_stats (PlayerCombatStats): The player's combat numbers.
        allies (Iterable[CombatActor]): Companions fighting alongside.
        ambush (bool): When set, the hostiles act first.
        flee_allowed (bool): Whether the player may flee.
        surrender_allowed (bool): Whether the hostiles accept a surrender.
        now (float | None): Clock value of the start of combat.
        rng (random.Random | None): Source for reward rolls.
        location (str | None): Where the fight happens.

    Returns:
        CombatState: The encounter, with the first actor's turn pending.

    Raises:
        CombatInvariantError: If there is no hostile or ids collide.

    """
    rng = rng or random.Random()
    hostiles = []
    for enemy in enemies:
        enemy = enemy.model_copy(deep=True, update={"side": CharacterType.ENEMY})
        if enemy.xp_reward is None:
            enemy.xp_reward = compute_enemy_xp(enemy)
        if enemy.gold_reward is None:
            enemy.gold_reward = rng.randint(enemy.level * 5, enemy.level * 12)
        hostiles.append(enemy)
    companions = []
    for ally in allies:
        ally = ally.model_copy(deep=True, update={"side": CharacterType.ALLY})
        if ally.companion_meta is None:
            ally.companion_meta = CompanionMeta()
        companions.append(ally)

    if not hostiles:
        raise_invariant("an encounter needs at least one hostile")
    ids = [PLAYER_ID, *(a.id for a in companions), *(e.id for e in hostiles)]
    if len(set(ids)) != len(ids):
        raise_invariant("actor ids must be unique", {"ids": ids})

    if ambush:
        order = [*(e.id for e in hostiles), PLAYER_ID, *(a.id for a in companions)]
        opening = f"You've been ambushed by {', '.join(e.name for e in hostiles)}!"
    else:
        order = [PLAYER_ID, *(a.id for a in companions), *(e.id for e in hostiles)]
        opening = f"Combat begins against {', '.join(e.name for e in hostiles)}."

    state = CombatState(
        turn_order=order,
        turn=0 if ambush else 1,
        current_turn_actor=order[0],
        enemies=hostiles,
        allies=companions,
        player=player_stats.model_copy(deep=True),
        flee_allowed=flee_allowed,
        surrender_allowed=surrender_allowed,
        ambush=ambush,
        location=location,
        combat_start_time=time.time() if now is None else now,
    )
    validate_turn_order(state)
    state.combat_log.append(
        LogEntry(turn=0, actor="system", action="combat_start", narrative=opening)
    )
    log_debug("Combat initialized", {"turn_order": order, "ambush": ambush})
    return state


def encounter_status(state: CombatState) -> EncounterStatus:
    """Reports what the encounter is waiting for."""
    if not state.active:
        return EncounterStatus.COMBAT_OVER
    if state.awaiting_companion is not None:
        return EncounterStatus.AWAITING_COMPANION
    return EncounterStatus.PLAYER_TURN


def _loot_rng(rolls: RollProvider | None) -> random.Random | None:
    return rolls.rng if rolls is not None else None


def _settle(state: CombatState, ctx: ResolutionContext, rolls: RollProvider | None) -> CombatState:
    """Ends the encounter if it is decided; a victory opens the loot phase."""
    return check_combat_end(state, now=ctx.now, rng=_loot_rng(rolls))


def _advance(state: CombatState, ctx: ResolutionContext, rolls: RollProvider | None) -> CombatState:
    return advance_turn(state, ctx.seconds_per_turn, ctx.now, _loot_rng(rolls))


# ===== PLAYER =====


def perform_player_action(
    state: CombatState,
    action_type: ActionType,
    ability_id: str | None = None,
    target_id: str | None = None,
    item_id: str | None = None,
    natural_roll: int | None = None,
    rolls: RollProvider | None = None,
    ctx: ResolutionContext | None = None,
) -> ActionOutcome:
    """
    Resolves a player action inside the action economy.

    A stunned player loses the turn whatever was asked. Otherwise the slot
    the action needs must still be free. Flee takes the main action whether or
    not it succeeds; skip, end turn and surrender ignore the slots. The turn
    passes on once both slots are spent, after a successful flee, or after
    skip, end turn and surrender.

    Args:
        state (CombatState): The current state.
        action_type (ActionType): What the player does.
        ability_id (str | None): The ability, for ability actions.
        target_id (str | None): The target, for single-target abilities.
        item_id (str | None): The item, for item actions.
        natural_roll (int | None): A pre-drawn natural roll.
        rolls (RollProvider | None): Roll source when no roll is given.
        ctx (ResolutionContext | None): Character, inventory and lookups.

    Returns:
        ActionOutcome: The resolution; its state has been advanced when the
        player's turn is over.

    """
    ctx = ctx or ResolutionContext()
    if not state.active:
        return reject(state, RejectionReason.COMBAT_OVER, "The battle is already over.")
    if state.current_turn_actor != PLAYER_ID:
        return reject(
            state,
            RejectionReason.NOT_YOUR_TURN,
            "It is not your turn.",
            {"current": state.current_turn_actor},
        )

    if is_stunned(state.player_active_effects):
        outcome = resolve_player_action(state, ActionType.SKIP, ctx=ctx, rolls=rolls)
        new = _settle(outcome.state, ctx, rolls)
        return outcome.model_copy(update={"state": _advance(new, ctx, rolls)})

    ability = next((a for a in state.player.abilities if a.id == ability_id), None)
    action_class = action_class_for(action_type, ability)
    exempt = is_slot_exempt(action_type)
    if not exempt and not slot_available(
        state.player_main_action_used, state.player_bonus_action_used, action_class
    ):
        return reject(
            state,
            RejectionReason.SLOT_USED,
            f"You have already used your {action_class.value} action this turn.",
            {"action": action_type},
        )

    outcome = resolve_player_action(
        state, action_type, ability_id, target_id, natural_roll, ctx, rolls, item_id
    )
    if outcome.rejected:
        return outcome

    new = outcome.state
    if not exempt:
        new.player_main_action_used, new.player_bonus_action_used = mark_used(
            new.player_main_action_used, new.player_bonus_action_used, action_class
        )
    new = _settle(new, ctx, rolls)
    if should_advance(
        action_type, new.player_main_action_used, new.player_bonus_action_used, outcome.fled
    ):
        new = _advance(new, ctx, rolls)
    return outcome.model_copy(update={"state": new})


# ===== AI TURNS =====


def run_hostile_turn(
    state: CombatState,
    enemy_id: str,
    rolls: RollProvider | None = None,
    ctx: ResolutionContext | None = None,
) -> ActionOutcome:
    """Lets the hostile AI act for one enemy and passes the turn on."""
    ctx = ctx or ResolutionContext()
    selection = choose_hostile_action(state, enemy_id)
    outcome = resolve_hostile_action(
        state, enemy_id, selection.ability.id, selection.target_id, ctx=ctx, rolls=rolls
    )
    new = _settle(outcome.state, ctx, rolls)
    return outcome.model_copy(update={"state": _advance(new, ctx, rolls)})


def run_until_player_or_pause(
    state: CombatState,
    rolls: RollProvider | None = None,
    ctx: ResolutionContext | None = None,
    on_step: Callable[[ActionOutcome], None] | None = None,
) -> CombatState:
    """
    Resolves hostile and automatic companion turns.

    Stops when the player's turn arrives, when a manually controlled
    companion has to be given orders, or when combat ends.

    Args:
        state (CombatState): The current state.
        rolls (RollProvider | None): Roll source.
        ctx (ResolutionContext | None): Character and lookups.
        on_step (Callable[[ActionOutcome], None] | None): Called after each
            resolved AI turn.

    Returns:
        CombatState: The state at the pause point.

    Raises:
        CombatInvariantError: If the encounter does not reach a pause point.

    """
    ctx = ctx or ResolutionContext()
    for _ in range(MAX_AI_STEPS):
        state = _settle(state, ctx, rolls)
        if not state.active or state.awaiting_companion is not None:
            return state
        actor_id = state.current_turn_actor
        if actor_id == PLAYER_ID:
            return state
        if state.side_of(actor_id) == CharacterType.ENEMY:
            outcome = run_hostile_turn(state, actor_id, rolls, ctx)
        elif needs_manual_decision(state, actor_id):
            state = state.copy_state()
            state.awaiting_companion = actor_id
            log_debug("Awaiting companion orders", {"companion": actor_id})
            return state
        else:
            outcome = run_auto_companion_turn(state, actor_id, rolls, ctx)
        state = outcome.state
        if on_step is not None:
            on_step(outcome)
    raise_invariant("encounter did not reach a pause point", {"turn": state.turn})


# ===== MANAGER =====


class CombatManager:
    """
    Holds a running encounter for an embedding.

    Every step replaces `state` with the new state and hands the log entries
    it produced to `on_narrative`. Errors raised by the hook are logged and
    never interrupt the encounter.
    """

    def __init__(
        self,
        state: CombatState,
        config: EngineConfig | None = None,
        ctx: ResolutionContext | None = None,
        rolls: RollProvider | None = None,
        on_narrative: Callable[[LogEntry], None] | None = None,
    ):
        """
        Initialize the CombatManager.

        Args:
            state (CombatState): The encounter to drive.
            config (EngineConfig | None): Engine configuration.
            ctx (ResolutionContext | None): Character, inventory and lookups.
                Built from the configuration when omitted.
            rolls (RollProvider | None): Roll source, seeded from the
                configuration when omitted.
            on_narrative (Callable[[LogEntry], None] | None): Receives each
                new log entry.

        """
        self.config: EngineConfig = config or EngineConfig()
        self.rolls: RollProvider = rolls or RollProvider(seed=self.config.random_seed)
        self.ctx: ResolutionContext = ctx or ResolutionContext(
            seconds_per_turn=self.config.seconds_per_turn
        )
        self.on_narrative = on_narrative
        self.state: CombatState = state
        self._published = 0
        self._publish()

    @classmethod
    def start(
        cls,
        enemies: Iterable[CombatActor],
        player_stats: PlayerCombatStats,
        allies: Iterable[CombatActor] = (),
        ambush: bool = False,
        config: EngineConfig | None = None,
        ctx: ResolutionContext | None = None,
        rolls: RollProvider | None = None,
        on_narrative: Callable[[LogEntry], None] | None = None,
        **options,
    ) -> "CombatManager":
        """Sets up an encounter and plays until the player first has to act."""
        config = config or EngineConfig()
        rolls = rolls or RollProvider(seed=config.random_seed)
        state = initialize_combat(
            enemies,
            player_stats,
            allies,
            ambush=ambush,
            now=ctx.now if ctx is not None else None,
            rng=rolls.rng,
            **options,
        )
        manager = cls(state, config=config, ctx=ctx, rolls=rolls, on_narrative=on_narrative)
        manager.drive()
        return manager

    # ===== NARRATIVE =====

    def _publish(self) -> None:
        new_entries = self.state.combat_log[self._published :]
        self._published = len(self.state.combat_log)
        if self.on_narrative is None:
            return
        for entry in new_entries:
            ERROR_HANDLER.safe_execute(
                lambda entry=entry: self.on_narrative(entry),
                None,
                "Narrative hook failed",
                ErrorSeverity.LOW,
                {"action": entry.action, "turn": entry.turn},
            )

    def _commit(self, state: CombatState) -> None:
        self.state = state
        self._publish()

    # ===== STEPS =====

    def status(self) -> EncounterStatus:
        return encounter_status(self.state)

    def drive(self) -> EncounterStatus:
        """
        Pumps AI turns until the player must decide or combat ends.

        A stunned player's turn is consumed along the way.
        """
        while True:
            self._commit(run_until_player_or_pause(self.state, self.rolls, self.ctx))
            if (
                self.state.active
                and self.state.awaiting_companion is None
                and self.state.current_turn_actor == PLAYER_ID
                and is_stunned(self.state.player_active_effects)
            ):
                outcome = perform_player_action(
                    self.state, ActionType.SKIP, rolls=self.rolls, ctx=self.ctx
                )
                self._commit(outcome.state)
                continue
            return self.status()

    def player_action(
        self,
        action_type: ActionType,
        ability_id: str | None = None,
        target_id: str | None = None,
        item_id: str | None = None,
        natural_roll: int | None = None,
    ) -> ActionOutcome:
        """Performs a player action, then lets the AI play if the turn passed."""
        outcome = perform_player_action(
            self.state,
            action_type,
            ability_id,
            target_id,
            item_id,
            natural_roll,
            self.rolls,
            self.ctx,
        )
        self._commit(outcome.state)
        if not outcome.rejected and outcome.used_item is not None:
            self.ctx.inventory = [
                outcome.used_item if item.id == outcome.used_item.id else item
                for item in self.ctx.inventory
            ]
        if not outcome.rejected:
            self.drive()
        return outcome

    def auto_player_turn(self) -> list[ActionOutcome]:
        """
        Plays the player's turn with the default policy, for auto combat.

        Returns:
            list[ActionOutcome]: The actions taken, ending with the one that
            passed the turn.

        """
        outcomes: list[ActionOutcome] = []
        if self.status() != EncounterStatus.PLAYER_TURN:
            return outcomes
        selection = choose_default_action(
            self.state,
            PLAYER_ID,
            summon_cap=allowed_summons(self.ctx.character, self.ctx.perk_rank),
        )
        turn = self.state.turn
        outcome = self.player_action(
            ActionType.ABILITY, selection.ability.id, selection.target_id
        )
        outcomes.append(outcome)
        if (
            self.status() == EncounterStatus.PLAYER_TURN
            and self.state.current_turn_actor == PLAYER_ID
            and self.state.turn == turn
        ):
            outcomes.append(self.player_action(ActionType.END_TURN))
        return outcomes

    def companion_action(
        self,
        companion_id: str,
        ability_id: str,
        target_id: str | None = None,
        natural_roll: int | None = None,
    ) -> ActionOutcome:
        """Supplies the orders of the companion the encounter is waiting on."""
        outcome = supply_companion_action(
            self.state, companion_id, ability_id, target_id, natural_roll, self.rolls, self.ctx
        )
        self._commit(outcome.state)
        if not outcome.rejected:
            self.drive()
        return outcome

    def set_companion_control(self, companion_id: str, mode: ControlMode) -> EncounterStatus:
        """Switches a companion's control mode and resumes play if it was awaited."""
        self._commit(set_companion_control(self.state, companion_id, mode))
        return self.drive()

    # ===== WRAP-UP =====

    def finalize_loot(
        self,
        selected_items: list[str] | None,
        current_inventory: list[InventoryItem],
        character_id: str,
    ) -> LootResult:
        """Commits the loot phase and keeps the closed state."""
        result = finalize_loot(self.state, selected_items, current_inventory, character_id)
        self._commit(result.state)
        return result

    def summary(self) -> EncounterSummary:
        return summarize_encounter(self.state)
