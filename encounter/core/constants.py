"""
Constants and enumerations for the encounter engine.

Defines the actor sides, action slots and action types, ability and effect
classifications, combat results and roll tiers used throughout the engine,
together with a handful of numeric tuning constants.
"""

from enum import Enum

# The id every encounter uses for the controlled character.
PLAYER_ID = "player"

# Fraction of incoming damage absorbed by an active guard.
GUARD_DAMAGE_REDUCTION = 0.40

# Longest guard a single defend can grant, in turns.
MAX_GUARD_TURNS = 3

# Seconds of regeneration granted every time the cycle returns to the player.
DEFAULT_SECONDS_PER_TURN = 4

# Perk keys consulted by the engine.
PERK_TWIN_SOULS = "twin_souls"
PERK_TACTICAL_GUARD = "tactical_guard_mastery"

# Survival drain per elapsed combat minute.
HUNGER_PER_MINUTE = 1 / 180
THIRST_PER_MINUTE = 1 / 120
FATIGUE_PER_MINUTE = 1 / 90


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().replace("_", " ").capitalize()


class CharacterType(NiceEnum):
    """Defines which side of the encounter an actor fights on."""

    PLAYER = "player"
    ENEMY = "enemy"
    ALLY = "ally"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this character type."""
        return {
            CharacterType.PLAYER: "👤",
            CharacterType.ENEMY: "👹",
            CharacterType.ALLY: "🤝",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this character type."""
        return {
            CharacterType.PLAYER: "bold blue",
            CharacterType.ENEMY: "bold red",
            CharacterType.ALLY: "bold green",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return self.colorize(self.display_name)

    def colorize(self, message: str) -> str:
        """Applies character type color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class ActionClass(NiceEnum):
    """Defines the economy slot an action occupies during the player's turn."""

    MAIN = "main"
    BONUS = "bonus"

    @property
    def color(self) -> str:
        """Returns the color string associated with this action class."""
        return {
            ActionClass.MAIN: "bold yellow",
            ActionClass.BONUS: "bold green",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return self.colorize(self.display_name)

    def colorize(self, message: str) -> str:
        """Applies action class color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class ActionType(NiceEnum):
    """Defines what the acting party asks the engine to do."""

    ABILITY = "ability"
    ITEM = "item"
    DEFEND = "defend"
    FLEE = "flee"
    SURRENDER = "surrender"
    SKIP = "skip"
    END_TURN = "end_turn"


class AbilityType(NiceEnum):
    """Defines the delivery of an ability, which also selects its resource."""

    MELEE = "melee"
    RANGED = "ranged"
    MAGIC = "magic"
    AEO = "aeo"
    SHOUT = "shout"

    @property
    def uses_magicka(self) -> bool:
        return self in (AbilityType.MAGIC, AbilityType.AEO)


class ActionCategory(NiceEnum):
    """Authored purpose of an ability, used for targeting and slot rules."""

    OFFENSIVE = "offensive"
    HEALING = "healing"
    BUFF = "buff"
    DEBUFF = "debuff"
    SUMMON = "summon"

    @property
    def is_friendly(self) -> bool:
        """True for categories that may only target the actor's own side."""
        return self in (
            ActionCategory.HEALING,
            ActionCategory.BUFF,
            ActionCategory.SUMMON,
        )

    @property
    def color(self) -> str:
        """Returns the color string associated with this action category."""
        return {
            ActionCategory.OFFENSIVE: "bold red",
            ActionCategory.HEALING: "bold green",
            ActionCategory.BUFF: "bold cyan",
            ActionCategory.DEBUFF: "bold magenta",
            ActionCategory.SUMMON: "bold blue",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return self.colorize(self.display_name)

    def colorize(self, message: str) -> str:
        """Applies action category color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class EffectType(NiceEnum):
    """Defines the kinds of ability effects and timed status effects."""

    HEAL = "heal"
    BUFF = "buff"
    DEBUFF = "debuff"
    SUMMON = "summon"
    AOE_DAMAGE = "aoe_damage"
    AOE_HEAL = "aoe_heal"
    DOT = "dot"
    STUN = "stun"
    GUARD = "guard"
    SUMMON_DECAY = "summon_decay"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this effect type."""
        return {
            EffectType.HEAL: "💚",
            EffectType.BUFF: "🛡️",
            EffectType.DEBUFF: "☠️",
            EffectType.SUMMON: "👻",
            EffectType.AOE_DAMAGE: "💥",
            EffectType.AOE_HEAL: "✨",
            EffectType.DOT: "🔥",
            EffectType.STUN: "💫",
            EffectType.GUARD: "🛡",
            EffectType.SUMMON_DECAY: "⌛",
        }.get(self, "❔")


class StatType(NiceEnum):
    """Defines the stats a buff or debuff may modify."""

    HEALTH = "health"
    MAGICKA = "magicka"
    STAMINA = "stamina"
    ARMOR = "armor"
    DAMAGE = "damage"


class Behavior(NiceEnum):
    """Defines how a hostile chooses its abilities."""

    AGGRESSIVE = "aggressive"
    BERSERKER = "berserker"
    DEFENSIVE = "defensive"
    TACTICAL = "tactical"
    SUPPORT = "support"


class ControlMode(NiceEnum):
    """Defines who supplies a companion's decisions."""

    AUTO = "auto"
    MANUAL = "manual"


class CombatResult(NiceEnum):
    """Defines how an encounter ended."""

    NONE = "none"
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"
    SURRENDERED = "surrendered"

    @property
    def color(self) -> str:
        return {
            CombatResult.VICTORY: "bold green",
            CombatResult.DEFEAT: "bold red",
            CombatResult.FLED: "bold yellow",
            CombatResult.SURRENDERED: "bold magenta",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return f"[{self.color}]{self.display_name}[/]"


class RollTier(NiceEnum):
    """Quality band of a natural roll, ordered from worst to best."""

    FAIL = "fail"
    MISS = "miss"
    LOW = "low"
    MID = "mid"
    HIGH = "high"
    CRIT = "crit"


class EncounterStatus(NiceEnum):
    """What the driver is waiting for after a pump."""

    PLAYER_TURN = "player_turn"
    AWAITING_COMPANION = "awaiting_companion"
    COMBAT_OVER = "combat_over"


class RejectionReason(NiceEnum):
    """User-correctable reasons an action is refused without mutating state."""

    COMBAT_OVER = "combat_over"
    NOT_YOUR_TURN = "not_your_turn"
    SLOT_USED = "slot_used"
    UNKNOWN_ABILITY = "unknown_ability"
    ON_COOLDOWN = "on_cooldown"
    INSUFFICIENT_MAGICKA = "insufficient_magicka"
    INSUFFICIENT_STAMINA = "insufficient_stamina"
    INVALID_TARGET = "invalid_target"
    SUMMON_CAP = "summon_cap"
    FLEE_DISALLOWED = "flee_disallowed"
    SURRENDER_DISALLOWED = "surrender_disallowed"
    GUARD_USED = "guard_used"
    NO_EFFECT = "no_effect"
    NOT_AWAITING = "not_awaiting"
