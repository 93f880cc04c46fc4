"""
Roll-dependent damage and healing math.

All magnitudes flow from a RollOutcome: the tier multiplier scales the base
amount, a crit adds a further bonus, and armor, magic resistance and guard
are applied to the target side. Every function is deterministic for a given
roll and input, and a higher roll never yields less.
"""

from math import floor

from pydantic import BaseModel, Field

from encounter.actions.ability import Ability
from encounter.core.constants import AbilityType
from encounter.core.dice import CRIT_EXTRA_MULTIPLIER, RollOutcome
from encounter.effects.effect_ledger import apply_guard
from encounter.effects.timed_effect import TimedEffect

HIT_LOCATIONS = ("torso", "arm", "leg", "head")

# Additional multiplier on hostile crits.
HOSTILE_CRIT_MULTIPLIER = 1.25

# Fraction of damage magic-resistant targets take from magic.
MAGIC_RESIST_FACTOR = 0.5

# Cap on percentage magic resistance.
MAX_MAGIC_RESIST = 75


class DamageResult(BaseModel):
    """Breakdown of one damage computation."""

    amount: int = Field(default=0, description="Damage to apply to the target.")
    raw: int = Field(default=0, description="Damage before target-side reductions.")
    hit_location: str = Field(default="torso", description="Where the blow landed.")
    guarded: bool = Field(default=False, description="Whether a guard reduced the damage.")


def hit_location(nat: int) -> str:
    """Returns the body part struck for a natural roll."""
    return HIT_LOCATIONS[nat % len(HIT_LOCATIONS)]


def armor_reduction(armor: int) -> float:
    """Fraction of damage absorbed by armor; approaches but never reaches 1."""
    if armor <= 0:
        return 0.0
    return armor / (armor + 100)


def damage_perk_key(ability_type: AbilityType) -> str:
    """Returns the combat perk key that boosts an ability's damage."""
    if ability_type == AbilityType.RANGED:
        return "ranged_damage"
    if ability_type.uses_magicka:
        return "magic_damage"
    return "melee_damage"


def raw_damage(
    ability: Ability,
    outcome: RollOutcome,
    level: int = 1,
    weapon_damage: int = 0,
    perk_bonus: float = 0.0,
    damage_modifier: int = 0,
    hostile: bool = False,
) -> int:
    """
    Computes outgoing damage before the target's defences.

    Args:
        ability (Ability): The ability used.
        outcome (RollOutcome): The classified natural roll.
        level (int): Attacker level; adds a fifth of a point per level.
        weapon_damage (int): Weapon damage, half of which is added to melee
            and ranged abilities.
        perk_bonus (float): Percent bonus from perks.
        damage_modifier (int): Net damage buff or debuff.
        hostile (bool): Whether the attacker is a hostile; their crits hit
            harder.

    Returns:
        int: Damage before armor, resistance and guard. Zero on a miss.

    """
    if not outcome.hit:
        return 0
    weapon_bonus = (
        weapon_damage // 2
        if ability.type in (AbilityType.MELEE, AbilityType.RANGED)
        else 0
    )
    base = max(1, ability.damage + weapon_bonus + floor(level * 0.2))
    amount = base * outcome.damage_multiplier
    if outcome.is_crit:
        amount *= CRIT_EXTRA_MULTIPLIER
        if hostile:
            amount *= HOSTILE_CRIT_MULTIPLIER
    amount *= 1 + perk_bonus / 100
    return max(1, floor(amount) + damage_modifier)


def mitigate_damage(
    raw: int,
    ability_type: AbilityType,
    armor: int,
    resistances: list[str],
    target_effects: list[TimedEffect],
    magic_resist: int = 0,
) -> tuple[int, bool]:
    """
    Applies the target's armor, magic resistance and guard.

    Returns:
        tuple[int, bool]: The final damage, at least 1 for any hit, and
        whether a guard reduced it.

    """
    if raw <= 0:
        return 0, False
    amount = floor(raw * (1 - armor_reduction(armor)))
    if ability_type.uses_magicka and "magic" in resistances:
        amount = floor(amount * MAGIC_RESIST_FACTOR)
    if ability_type.uses_magicka and magic_resist > 0:
        amount = floor(amount * (1 - min(magic_resist, MAX_MAGIC_RESIST) / 100))
    amount = max(1, amount)
    guarded = apply_guard(amount, target_effects)
    return guarded, guarded != amount


def compute_damage(
    ability: Ability,
    outcome: RollOutcome,
    *,
    level: int = 1,
    weapon_damage: int = 0,
    perk_bonus: float = 0.0,
    damage_modifier: int = 0,
    hostile: bool = False,
    target_armor: int = 0,
    target_resistances: list[str] | None = None,
    target_effects: list[TimedEffect] | None = None,
    target_magic_resist: int = 0,
) -> DamageResult:
    """Computes the full damage breakdown of one hit."""
    raw = raw_damage(
        ability,
        outcome,
        level=level,
        weapon_damage=weapon_damage,
        perk_bonus=perk_bonus,
        damage_modifier=damage_modifier,
        hostile=hostile,
    )
    amount, guarded = mitigate_damage(
        raw,
        ability.type,
        target_armor,
        target_resistances or [],
        target_effects or [],
        target_magic_resist,
    )
    return DamageResult(
        amount=amount,
        raw=raw,
        hit_location=hit_location(outcome.nat),
        guarded=guarded,
    )


def compute_healing(base_heal: int, outcome: RollOutcome, perk_bonus: float = 0.0) -> int:
    """
    Scales a heal by the roll tier and perk bonus.

    Args:
        base_heal (int): The ability's base healing.
        outcome (RollOutcome): The classified natural roll.
        perk_bonus (float): Percent bonus from perks.

    Returns:
        int: The healing amount; zero on a critical failure.

    """
    if base_heal <= 0:
        return 0
    return floor(base_heal * outcome.heal_multiplier * (1 + perk_bonus / 100))
