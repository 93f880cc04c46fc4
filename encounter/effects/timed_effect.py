"""
Effect definitions.

`EffectSpec` is the immutable recipe attached to an ability. `TimedEffect`
is what lands on an actor and counts down in the Status Effect Ledger.
"""

from pydantic import BaseModel, ConfigDict, Field

from encounter.core.constants import EffectType, StatType


class EffectSpec(BaseModel):
    """
    One effect carried by an ability definition.

    Summon specs additionally describe the conjured companion through
    `name`, `base_health` and `base_damage`, and use `duration` as the
    summon's lifetime in player turns.
    """

    model_config = ConfigDict(frozen=True)

    type: EffectType = Field(
        description="The kind of effect.",
    )
    value: int = Field(
        default=0,
        description="Magnitude: healing, damage per tick or stat modifier.",
    )
    stat: StatType | None = Field(
        default=None,
        description="The stat a buff or debuff modifies.",
    )
    duration: int = Field(
        default=0,
        ge=0,
        description="Turns the effect lasts once applied. 0 means instant.",
    )
    chance: int = Field(
        default=100,
        ge=0,
        le=100,
        description="Percent chance the effect lands on a successful hit.",
    )
    name: str | None = Field(
        default=None,
        description="Name of the summoned companion.",
    )
    base_health: int = Field(
        default=0,
        ge=0,
        description="Health of the summoned companion before roll scaling.",
    )
    base_damage: int = Field(
        default=0,
        ge=0,
        description="Damage of the summoned companion before roll scaling.",
    )
    arrival_delay: int = Field(
        default=0,
        ge=0,
        description="Player turns before a summon materializes. 0 is immediate.",
    )


class TimedEffect(BaseModel):
    """An effect currently active on an actor."""

    effect_type: EffectType = Field(
        description="The kind of effect.",
    )
    turns_remaining: int = Field(
        ge=0,
        description="Owner turns left before the effect is removed.",
    )
    stat: StatType | None = Field(
        default=None,
        description="The stat the effect modifies, if any.",
    )
    magnitude: int = Field(
        default=0,
        description="Strength of the effect.",
    )
    source_id: str | None = Field(
        default=None,
        description="Id of the actor that applied the effect.",
    )
    name: str | None = Field(
        default=None,
        description="Display name, e.g. the ability that caused it.",
    )

    @property
    def label(self) -> str:
        base = self.name or self.effect_type.display_name
        return f"{self.effect_type.emoji} {base} ({self.turns_remaining})"
