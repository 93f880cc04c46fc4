"""
Natural rolls and roll tiers.

A natural roll is a uniform integer in [1, 20] drawn once per resolved
action. Everything roll-dependent in the engine goes through `classify_roll`
so the outcome curve is defined in one place and stays monotonic: a higher
roll never produces a worse tier.
"""

import random
from collections import deque
from collections.abc import Iterable

from pydantic import BaseModel, Field

from encounter.core.constants import RollTier
from encounter.core.error_handling import raise_invariant

NAT_MIN = 1
NAT_MAX = 20

DAMAGE_MULTIPLIERS: dict[RollTier, float] = {
    RollTier.FAIL: 0.0,
    RollTier.MISS: 0.0,
    RollTier.LOW: 0.75,
    RollTier.MID: 1.0,
    RollTier.HIGH: 1.25,
    RollTier.CRIT: 1.75,
}

HEAL_MULTIPLIERS: dict[RollTier, float] = {
    RollTier.FAIL: 0.0,
    RollTier.MISS: 0.5,
    RollTier.LOW: 0.75,
    RollTier.MID: 1.0,
    RollTier.HIGH: 1.25,
    RollTier.CRIT: 1.5,
}

# Extra multiplier applied on top of the crit tier.
CRIT_EXTRA_MULTIPLIER = 1.15


class RollOutcome(BaseModel):
    """The classification of a single natural roll."""

    nat: int = Field(
        description="The natural roll, between 1 and 20.",
    )
    tier: RollTier = Field(
        description="The quality band of the roll.",
    )

    @property
    def hit(self) -> bool:
        return self.tier not in (RollTier.FAIL, RollTier.MISS)

    @property
    def is_crit(self) -> bool:
        return self.tier == RollTier.CRIT

    @property
    def is_fumble(self) -> bool:
        return self.tier == RollTier.FAIL

    @property
    def damage_multiplier(self) -> float:
        return DAMAGE_MULTIPLIERS[self.tier]

    @property
    def heal_multiplier(self) -> float:
        return HEAL_MULTIPLIERS[self.tier]

    def describe(self) -> str:
        """Short text used in narratives, e.g. 'rolled 17 (high)'."""
        return f"rolled {self.nat} ({self.tier.display_name.lower()})"


def crit_threshold(crit_chance: float = 0) -> int:
    """
    Returns the lowest natural roll that counts as a critical hit.

    Each 5 points of crit chance lowers the threshold by one, never below 15.

    Args:
        crit_chance (float): The actor's critical chance, in percent.

    Returns:
        int: The crit threshold.

    """
    return max(15, NAT_MAX - int(max(0, crit_chance)) // 5)


def validate_nat(nat: int) -> int:
    """Ensures a natural roll lies in [1, 20]."""
    if not isinstance(nat, int) or not NAT_MIN <= nat <= NAT_MAX:
        raise_invariant("natural roll out of range", {"nat": nat})
    return nat


def classify_roll(nat: int, crit_chance: float = 0) -> RollOutcome:
    """
    Maps a natural roll to its tier.

    Args:
        nat (int): The natural roll.
        crit_chance (float): The actor's critical chance, in percent.

    Returns:
        RollOutcome: The classified roll.

    """
    validate_nat(nat)
    if nat == NAT_MIN:
        tier = RollTier.FAIL
    elif nat >= crit_threshold(crit_chance):
        tier = RollTier.CRIT
    elif nat <= 4:
        tier = RollTier.MISS
    elif nat <= 9:
        tier = RollTier.LOW
    elif nat <= 14:
        tier = RollTier.MID
    else:
        tier = RollTier.HIGH
    return RollOutcome(nat=nat, tier=tier)


def chance_succeeds(nat: int, chance: float) -> bool:
    """
    Resolves a percentage chance against a natural roll.

    Each point of the roll is worth 5%, so a 100% chance succeeds on any roll
    and a 50% chance needs at least 11.

    Args:
        nat (int): The natural roll.
        chance (float): The chance of success, in percent.

    Returns:
        bool: True when the roll meets the chance.

    """
    return nat * 5 >= 105 - chance


class RollProvider:
    """Produces natural rolls from a random source."""

    def __init__(self, rng: random.Random | None = None, seed: int | None = None) -> None:
        self._rng = rng if rng is not None else random.Random(seed)

    @property
    def rng(self) -> random.Random:
        """The underlying random source, shared with reward rolls."""
        return self._rng

    def natural_roll(self) -> int:
        """Returns a uniformly distributed integer in [1, 20]."""
        return self._rng.randint(NAT_MIN, NAT_MAX)


class ScriptedRollProvider(RollProvider):
    """
    Replays a fixed sequence of natural rolls.

    Useful for replays and deterministic tests. Once the script is exhausted
    the fallback value is returned.
    """

    def __init__(self, rolls: Iterable[int], fallback: int = 10, seed: int | None = 0) -> None:
        super().__init__(seed=seed)
        self._rolls: deque[int] = deque(validate_nat(r) for r in rolls)
        self._fallback = validate_nat(fallback)
        self.consumed: list[int] = []

    def push(self, *rolls: int) -> None:
        """Appends rolls to the end of the script."""
        self._rolls.extend(validate_nat(r) for r in rolls)

    def natural_roll(self) -> int:
        nat = self._rolls.popleft() if self._rolls else self._fallback
        self.consumed.append(nat)
        return nat
