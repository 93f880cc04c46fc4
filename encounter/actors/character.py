"""
Character shapes consumed at the engine boundary.

Progression, equipment and persistence are owned by the caller; the engine
only reads these fields to derive combat stats and perk bonuses.
"""

from pydantic import BaseModel, Field

from encounter.actions.ability import Ability


class Skill(BaseModel):
    """A trained skill and its level."""

    name: str = Field(description="Skill name, e.g. 'One-Handed'.")
    level: int = Field(default=15, ge=0, description="Skill level.")


class Perk(BaseModel):
    """An unlocked perk and its rank."""

    id: str = Field(description="Perk key, e.g. 'twin_souls'.")
    rank: int = Field(default=1, ge=0, description="Unlocked rank.")


class Vitals(BaseModel):
    """Current health, magicka and stamina carried between encounters."""

    current_health: int
    current_magicka: int
    current_stamina: int


class Character(BaseModel):
    """The controlled character as stored by the progression system."""

    id: str = Field(
        description="Unique identifier of the character.",
    )
    name: str = Field(
        description="Display name.",
    )
    level: int = Field(
        default=1,
        ge=1,
        description="Character level.",
    )
    health: int = Field(
        default=100,
        gt=0,
        description="Base maximum health.",
    )
    magicka: int = Field(
        default=100,
        ge=0,
        description="Base maximum magicka.",
    )
    stamina: int = Field(
        default=100,
        ge=0,
        description="Base maximum stamina.",
    )
    skills: list[Skill] = Field(
        default_factory=list,
        description="Trained skills.",
    )
    perks: list[Perk] = Field(
        default_factory=list,
        description="Unlocked perks.",
    )
    abilities: list[Ability] = Field(
        default_factory=list,
        description="Known spells, shouts and techniques.",
    )
    current_vitals: Vitals | None = Field(
        default=None,
        description="Vitals carried over from outside combat.",
    )

    def skill_level(self, name: str, default: int = 15) -> int:
        """Returns the level of a skill, or the default when untrained."""
        for skill in self.skills:
            if skill.name.lower() == name.lower():
                return skill.level
        return default
