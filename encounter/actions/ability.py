"""
Ability definitions.

An ability is immutable. Its category (what it is for) and its action class
(which economy slot it uses) are authored fields; when a definition leaves
them out they are derived once, at construction, from the ability's own
fields and never re-derived at call sites.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from encounter.core.constants import (
    AbilityType,
    ActionCategory,
    ActionClass,
    EffectType,
)
from encounter.effects.timed_effect import EffectSpec

# Effect types that point at the actor's own side.
FRIENDLY_EFFECTS = {EffectType.HEAL, EffectType.BUFF, EffectType.AOE_HEAL}
# Effect types that point at the opposing side.
HOSTILE_EFFECTS = {
    EffectType.AOE_DAMAGE,
    EffectType.DOT,
    EffectType.STUN,
    EffectType.DEBUFF,
}


def infer_category(
    damage: int, heal: int, effects: list[EffectSpec]
) -> ActionCategory:
    """
    Derives an ability's category from its immutable fields.

    Args:
        damage (int): Base damage.
        heal (int): Base healing.
        effects (list[EffectSpec]): The ability's effects.

    Returns:
        ActionCategory: The derived category.

    """
    kinds = {e.type for e in effects}
    if EffectType.SUMMON in kinds:
        return ActionCategory.SUMMON
    if damage > 0 or kinds & HOSTILE_EFFECTS:
        if damage <= 0 and kinds <= {EffectType.DEBUFF}:
            return ActionCategory.DEBUFF
        return ActionCategory.OFFENSIVE
    if heal > 0 or EffectType.HEAL in kinds or EffectType.AOE_HEAL in kinds:
        return ActionCategory.HEALING
    if EffectType.BUFF in kinds:
        return ActionCategory.BUFF
    return ActionCategory.OFFENSIVE


def infer_action_class(category: ActionCategory) -> ActionClass:
    """Conjuration and restorative or supportive abilities are bonus actions."""
    if category in (ActionCategory.SUMMON, ActionCategory.HEALING, ActionCategory.BUFF):
        return ActionClass.BONUS
    return ActionClass.MAIN


class Ability(BaseModel):
    """An authored ability usable by the player, a companion or a hostile."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        description="Unique identifier of the ability.",
    )
    name: str = Field(
        description="Display name of the ability.",
    )
    type: AbilityType = Field(
        description="Delivery of the ability; selects the resource spent.",
    )
    damage: int = Field(
        default=0,
        ge=0,
        description="Base damage before roll, armor and buffs.",
    )
    cost: int = Field(
        default=0,
        ge=0,
        description="Magicka (magic, aeo) or stamina (melee, ranged, shout) spent.",
    )
    heal: int = Field(
        default=0,
        ge=0,
        description="Base healing before roll scaling.",
    )
    effects: list[EffectSpec] = Field(
        default_factory=list,
        description="Effects applied on resolution.",
    )
    cooldown: int = Field(
        default=0,
        ge=0,
        description="Turns the ability is unavailable after use.",
    )
    category: ActionCategory = Field(
        default=None,  # type: ignore[assignment]
        description="Authored purpose; derived from the fields when omitted.",
    )
    action_class: ActionClass = Field(
        default=None,  # type: ignore[assignment]
        description="Economy slot; derived from the category when omitted.",
    )
    description: str = Field(
        default="",
        description="Flavour text.",
    )

    @model_validator(mode="before")
    @classmethod
    def _derive_tags(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("category") is None:
            effects = [
                e if isinstance(e, EffectSpec) else EffectSpec.model_validate(e)
                for e in data.get("effects") or []
            ]
            data["category"] = infer_category(
                int(data.get("damage") or 0), int(data.get("heal") or 0), effects
            )
        if data.get("action_class") is None:
            data["action_class"] = infer_action_class(ActionCategory(data["category"]))
        return data

    # ===== EFFECT QUERIES =====

    def effects_of(self, effect_type: EffectType) -> list[EffectSpec]:
        """Returns the effects of the given type."""
        return [e for e in self.effects if e.type == effect_type]

    def has_effect(self, effect_type: EffectType) -> bool:
        return any(e.type == effect_type for e in self.effects)

    @property
    def is_aoe(self) -> bool:
        """True for abilities that hit a whole side instead of one target."""
        return (
            self.type == AbilityType.AEO
            or self.has_effect(EffectType.AOE_DAMAGE)
            or self.has_effect(EffectType.AOE_HEAL)
        )

    @property
    def is_summon(self) -> bool:
        return self.category == ActionCategory.SUMMON

    @property
    def needs_target(self) -> bool:
        return not (self.is_aoe or self.is_summon)

    @property
    def targets_friendly(self) -> bool:
        return self.category.is_friendly


def basic_attack(damage: int, name: str = "Attack") -> Ability:
    """
    Builds the fallback attack used when an actor has nothing better.

    Args:
        damage (int): The actor's base damage.
        name (str): Display name. Defaults to "Attack".

    Returns:
        Ability: A free melee attack.

    """
    return Ability(
        id="basic_attack",
        name=name,
        type=AbilityType.MELEE,
        damage=max(1, damage),
        category=ActionCategory.OFFENSIVE,
        action_class=ActionClass.MAIN,
        description="A plain strike.",
    )
