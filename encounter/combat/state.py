"""
Combat state.

CombatState is the single aggregate every engine operation reads and returns.
Operations never modify the state they receive: they work on a deep copy and
hand it back. The accessors below hide the difference between the player
(backed by PlayerCombatStats) and every other actor (CombatActor).
"""

from pydantic import BaseModel, Field

from encounter.actors.combat_actor import CombatActor
from encounter.actors.player_stats import PlayerCombatStats
from encounter.core.constants import PLAYER_ID, CharacterType, CombatResult, RollTier
from encounter.core.error_handling import raise_invariant
from encounter.effects.timed_effect import TimedEffect
from encounter.items.item import InventoryItem


class LogEntry(BaseModel):
    """One line of the combat log."""

    turn: int = Field(description="Turn the entry was written in.")
    actor: str = Field(description="Id of the acting actor, or 'system'.")
    action: str = Field(description="Short action key, e.g. an ability name or 'regen'.")
    narrative: str = Field(description="Human readable description.")
    target: str | None = Field(default=None, description="Id of the main target.")
    damage: int | None = Field(default=None, description="Damage dealt.")
    healing: int | None = Field(default=None, description="Healing done.")
    nat: int | None = Field(default=None, description="Natural roll used.")
    is_crit: bool | None = Field(default=None, description="Whether the roll was a critical.")
    roll_tier: RollTier | None = Field(default=None, description="Tier of the natural roll.")


class PendingSummon(BaseModel):
    """A conjured companion that has not arrived yet."""

    companion_id: str = Field(description="Id the companion will have.")
    player_turns_remaining: int = Field(
        ge=0,
        description="Player turns before the companion materializes.",
    )
    actor: CombatActor = Field(description="The companion to instantiate.")


class AoeEntry(BaseModel):
    """Per-target result of an area ability."""

    id: str
    name: str
    amount: int


class AoeSummary(BaseModel):
    """Individual outcomes of an area ability."""

    damaged: list[AoeEntry] = Field(default_factory=list)
    healed: list[AoeEntry] = Field(default_factory=list)


class Rewards(BaseModel):
    """Experience, gold and items from an encounter."""

    xp: int = Field(default=0, ge=0)
    gold: int = Field(default=0, ge=0)
    items: list[InventoryItem] = Field(default_factory=list)


class LootDrop(BaseModel):
    """Items dropped by one defeated hostile."""

    enemy_id: str
    enemy_name: str
    items: list[InventoryItem] = Field(default_factory=list)


class SurvivalDelta(BaseModel):
    """Change in survival needs. Positive values mean the need grew."""

    hunger: float = 0.0
    thirst: float = 0.0
    fatigue: float = 0.0


class CombatState(BaseModel):
    """The full state of an encounter."""

    active: bool = Field(default=True, description="False once the encounter has ended.")
    result: CombatResult = Field(default=CombatResult.NONE, description="How the encounter ended.")
    turn: int = Field(default=1, ge=0, description="Full cycles back to the player.")
    turn_order: list[str] = Field(description="Fixed cycle of actor ids.")
    current_turn_actor: str = Field(description="Id of the actor whose turn it is.")
    enemies: list[CombatActor] = Field(default_factory=list)
    allies: list[CombatActor] = Field(default_factory=list)
    player: PlayerCombatStats = Field(description="The player's combat stats and vitals.")
    player_main_action_used: bool = False
    player_bonus_action_used: bool = False
    player_active_effects: list[TimedEffect] = Field(default_factory=list)
    player_guard_used: bool = Field(default=False, description="Defend is once per encounter.")
    ability_cooldowns: dict[str, int] = Field(
        default_factory=dict,
        description="Player ability id to turns remaining on cooldown.",
    )
    pending_summons: list[PendingSummon] = Field(default_factory=list)
    summon_counter: int = Field(default=0, description="Source of unique summon ids.")
    awaiting_companion: str | None = Field(
        default=None,
        description="Id of the manual companion whose decision is awaited.",
    )
    combat_log: list[LogEntry] = Field(default_factory=list)
    rewards: Rewards = Field(default_factory=Rewards, description="Committed rewards.")
    pending_rewards: Rewards | None = Field(default=None, description="Candidate rewards under review.")
    pending_loot: list[LootDrop] = Field(default_factory=list)
    loot_pending: bool = False
    combat_start_time: float = 0.0
    combat_elapsed_sec: float = 0.0
    survival_delta: SurvivalDelta = Field(default_factory=SurvivalDelta)
    flee_allowed: bool = True
    surrender_allowed: bool = False
    ambush: bool = False
    location: str | None = None

    # ===== LOOKUP =====

    def find_actor(self, actor_id: str) -> CombatActor | None:
        """Returns the ally or enemy with the given id, if any."""
        for actor in self.allies:
            if actor.id == actor_id:
                return actor
        for actor in self.enemies:
            if actor.id == actor_id:
                return actor
        return None

    def actor(self, actor_id: str) -> CombatActor:
        """Returns the ally or enemy with the given id, raising if unknown."""
        found = self.find_actor(actor_id)
        if found is None:
            raise_invariant("unknown actor id", {"actor_id": actor_id})
        return found

    def has_actor(self, actor_id: str) -> bool:
        return actor_id == PLAYER_ID or self.find_actor(actor_id) is not None

    def side_of(self, actor_id: str) -> CharacterType:
        if actor_id == PLAYER_ID:
            return CharacterType.PLAYER
        return self.actor(actor_id).side

    def name_of(self, actor_id: str) -> str:
        if actor_id == PLAYER_ID:
            return self.player.name
        return self.actor(actor_id).name

    def is_alive(self, actor_id: str) -> bool:
        if actor_id == PLAYER_ID:
            return self.player.current_health > 0
        return self.actor(actor_id).is_alive

    def health_of(self, actor_id: str) -> int:
        if actor_id == PLAYER_ID:
            return self.player.current_health
        return self.actor(actor_id).current_health

    def max_health_of(self, actor_id: str) -> int:
        if actor_id == PLAYER_ID:
            return self.player.max_health
        return self.actor(actor_id).max_health

    def armor_of(self, actor_id: str) -> int:
        if actor_id == PLAYER_ID:
            return self.player.armor
        return self.actor(actor_id).armor

    def effects_of(self, actor_id: str) -> list[TimedEffect]:
        if actor_id == PLAYER_ID:
            return self.player_active_effects
        return self.actor(actor_id).active_effects

    def set_effects(self, actor_id: str, effects: list[TimedEffect]) -> None:
        if actor_id == PLAYER_ID:
            self.player_active_effects = effects
        else:
            self.actor(actor_id).active_effects = effects

    # ===== SIDES =====

    def is_player_side(self, actor_id: str) -> bool:
        return self.side_of(actor_id) in (CharacterType.PLAYER, CharacterType.ALLY)

    def living_enemies(self) -> list[CombatActor]:
        return [e for e in self.enemies if e.is_alive]

    def living_allies(self) -> list[CombatActor]:
        return [a for a in self.allies if a.is_alive]

    def friendly_ids(self, actor_id: str) -> list[str]:
        """Living ids on the same side as the actor, player first."""
        if self.is_player_side(actor_id):
            ids = [PLAYER_ID] if self.is_alive(PLAYER_ID) else []
            return ids + [a.id for a in self.living_allies()]
        return [e.id for e in self.living_enemies()]

    def opponent_ids(self, actor_id: str) -> list[str]:
        """Living ids on the opposing side of the actor, player first."""
        if self.is_player_side(actor_id):
            return [e.id for e in self.living_enemies()]
        ids = [PLAYER_ID] if self.is_alive(PLAYER_ID) else []
        return ids + [a.id for a in self.living_allies()]

    # ===== VITALS =====

    def apply_damage(self, actor_id: str, amount: int) -> int:
        """Removes health from any actor and returns the amount applied."""
        if actor_id == PLAYER_ID:
            applied = max(0, min(amount, self.player.current_health))
            self.player.current_health -= applied
            return applied
        return self.actor(actor_id).take_damage(amount)

    def apply_heal(self, actor_id: str, amount: int) -> int:
        """Restores health to any living actor and returns the amount healed."""
        if actor_id == PLAYER_ID:
            if self.player.current_health <= 0:
                return 0
            applied = max(
                0, min(amount, self.player.max_health - self.player.current_health)
            )
            self.player.current_health += applied
            return applied
        return self.actor(actor_id).heal(amount)

    # ===== LOG =====

    def log(self, actor: str, action: str, narrative: str, **fields) -> LogEntry:
        """Appends a log entry for the current turn and returns it."""
        entry = LogEntry(
            turn=self.turn, actor=actor, action=action, narrative=narrative, **fields
        )
        self.combat_log.append(entry)
        return entry

    def copy_state(self) -> "CombatState":
        """Deep copy used by every state transition."""
        return self.model_copy(deep=True)
