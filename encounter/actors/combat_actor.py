"""
Combat actors.

Hostiles, companions and summons share one shape. The player is not a
CombatActor: its numbers come from PlayerCombatStats, which are derived from
the character and equipment.
"""

from pydantic import BaseModel, Field

from encounter.actions.ability import Ability
from encounter.core.constants import Behavior, CharacterType, ControlMode
from encounter.effects.timed_effect import TimedEffect
from encounter.items.item import InventoryItem


class CompanionMeta(BaseModel):
    """Companion bookkeeping for allies and conjured actors."""

    is_summon: bool = Field(
        default=False,
        description="Whether the actor was conjured and counts against the summon cap.",
    )
    auto_control: bool = Field(
        default=True,
        description="Whether the engine picks this companion's actions.",
    )
    decay_active: bool = Field(
        default=False,
        description="Whether the summon is fading and loses half its health each player turn.",
    )
    player_turns_remaining: int | None = Field(
        default=None,
        description="Player turns before a summon starts to decay. None for permanent companions.",
    )
    summoner_id: str | None = Field(
        default=None,
        description="Id of the actor that conjured this summon.",
    )

    @property
    def control_mode(self) -> ControlMode:
        return ControlMode.AUTO if self.auto_control else ControlMode.MANUAL


class LootEntry(BaseModel):
    """An item a hostile may drop when defeated."""

    item: InventoryItem = Field(
        description="The item dropped.",
    )
    drop_chance: int = Field(
        default=100,
        ge=0,
        le=100,
        description="Percent chance the item drops.",
    )


class CombatActor(BaseModel):
    """A hostile, companion or summon taking part in an encounter."""

    id: str = Field(
        description="Unique identifier within the encounter.",
    )
    name: str = Field(
        description="Display name.",
    )
    side: CharacterType = Field(
        default=CharacterType.ENEMY,
        description="ENEMY for hostiles, ALLY for companions and summons.",
    )
    level: int = Field(
        default=1,
        ge=1,
        description="Actor level.",
    )
    current_health: int = Field(
        description="Current health, clamped to [0, max_health].",
    )
    max_health: int = Field(
        gt=0,
        description="Maximum health.",
    )
    current_magicka: int | None = Field(
        default=None,
        description="Current magicka. None means the actor ignores magicka costs.",
    )
    max_magicka: int | None = Field(
        default=None,
        description="Maximum magicka.",
    )
    current_stamina: int | None = Field(
        default=None,
        description="Current stamina. None means the actor ignores stamina costs.",
    )
    max_stamina: int | None = Field(
        default=None,
        description="Maximum stamina.",
    )
    armor: int = Field(
        default=0,
        ge=0,
        description="Armor rating.",
    )
    damage: int = Field(
        default=0,
        ge=0,
        description="Base damage, used by the fallback attack.",
    )
    crit_chance: int = Field(
        default=0,
        ge=0,
        description="Critical chance in percent.",
    )
    abilities: list[Ability] = Field(
        default_factory=list,
        description="Abilities the actor can use.",
    )
    active_effects: list[TimedEffect] = Field(
        default_factory=list,
        description="Timed effects currently on the actor.",
    )
    cooldowns: dict[str, int] = Field(
        default_factory=dict,
        description="Ability id to turns remaining on cooldown.",
    )
    behavior: Behavior | None = Field(
        default=None,
        description="Hostile AI behavior.",
    )
    resistances: list[str] = Field(
        default_factory=list,
        description="Damage kinds the actor resists, e.g. 'magic'.",
    )
    regen_health_per_sec: float = Field(
        default=0.0,
        ge=0,
        description="Health regenerated per second of combat.",
    )
    xp_reward: int | None = Field(
        default=None,
        description="Experience granted on defeat. Filled in at encounter start.",
    )
    gold_reward: int | None = Field(
        default=None,
        description="Gold granted on defeat. Filled in at encounter start.",
    )
    loot: list[LootEntry] = Field(
        default_factory=list,
        description="Possible drops.",
    )
    is_boss: bool = Field(
        default=False,
        description="Whether this is a boss.",
    )
    companion_meta: CompanionMeta | None = Field(
        default=None,
        description="Companion bookkeeping; set for allies and summons.",
    )
    last_ability_id: str | None = Field(
        default=None,
        description="Id of the ability used on the actor's previous turn.",
    )

    def model_post_init(self, __context) -> None:
        self.current_health = max(0, min(self.current_health, self.max_health))

    # ===== STATUS =====

    @property
    def is_alive(self) -> bool:
        return self.current_health > 0

    @property
    def is_summon(self) -> bool:
        return self.companion_meta is not None and self.companion_meta.is_summon

    # ===== MUTATION =====

    def take_damage(self, amount: int) -> int:
        """
        Removes health, clamped at zero.

        Args:
            amount (int): Damage to apply.

        Returns:
            int: Damage actually applied.

        """
        applied = max(0, min(amount, self.current_health))
        self.current_health -= applied
        return applied

    def heal(self, amount: int) -> int:
        """Restores health up to the maximum and returns the amount healed."""
        if not self.is_alive:
            return 0
        applied = max(0, min(amount, self.max_health - self.current_health))
        self.current_health += applied
        return applied
