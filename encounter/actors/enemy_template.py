"""
Enemy templates: the authored baseline that enemy generation varies.
"""

from pydantic import BaseModel, Field

from encounter.actions.ability import Ability
from encounter.core.constants import Behavior

from .combat_actor import LootEntry


class EnemyTemplate(BaseModel):
    """A kind of hostile, as loaded from the content files."""

    id: str = Field(
        description="Template identifier, e.g. 'bandit'.",
    )
    name: str = Field(
        description="Base display name.",
    )
    kind: str = Field(
        default="humanoid",
        description="Creature family: humanoid, beast, undead...",
    )
    level: int = Field(
        default=1,
        ge=1,
        description="Base level.",
    )
    health: int = Field(
        gt=0,
        description="Base maximum health.",
    )
    armor: int = Field(
        default=0,
        ge=0,
        description="Base armor rating.",
    )
    damage: int = Field(
        default=1,
        ge=0,
        description="Base damage.",
    )
    crit_chance: int = Field(
        default=0,
        ge=0,
        description="Critical chance in percent.",
    )
    behaviors: list[Behavior] = Field(
        default_factory=lambda: [Behavior.AGGRESSIVE],
        description="Behaviors a generated enemy may be given.",
    )
    abilities: list[Ability] = Field(
        default_factory=list,
        description="Abilities a generated enemy may be given.",
    )
    resistances: list[str] = Field(
        default_factory=list,
        description="Damage kinds the enemy resists.",
    )
    name_prefixes: list[str] = Field(
        default_factory=list,
        description="Prefixes used to give generated enemies distinct names.",
    )
    regen_health_per_sec: float = Field(
        default=0.0,
        ge=0,
        description="Health regenerated per second of combat.",
    )
    xp: int = Field(
        default=0,
        ge=0,
        description="Base experience reward; 0 lets encounter setup derive it.",
    )
    gold: int = Field(
        default=0,
        ge=0,
        description="Base gold reward; 0 lets encounter setup roll it.",
    )
    loot: list[LootEntry] = Field(
        default_factory=list,
        description="Possible drops.",
    )
    is_boss: bool = Field(
        default=False,
        description="Whether every enemy from this template is a boss.",
    )
