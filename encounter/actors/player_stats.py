"""
Player combat stats.

PlayerCombatStats are derived from the character and the equipped items and
can be recomputed at any time. Recomputation keeps the current vitals: an
equipment change mid-fight never restores health, magicka or stamina.
"""

from math import floor

from pydantic import BaseModel, Field

from encounter.actions.ability import Ability
from encounter.actors.character import Character
from encounter.actors.perks import get_combat_perk_bonus
from encounter.core.constants import AbilityType, ActionCategory, ActionClass
from encounter.items.item import InventoryItem

UNARMED_DAMAGE = 10
BASE_CRIT_CHANCE = 5
BASE_REGEN_PER_SEC = 0.25

WEAPON_SKILLS = ("One-Handed", "Two-Handed", "Archery")
ARMOR_SKILLS = ("Light Armor", "Heavy Armor")


class PlayerCombatStats(BaseModel):
    """Combat numbers for the controlled character."""

    name: str = Field(default="You", description="Display name of the player.")
    level: int = Field(default=1, ge=1, description="Character level.")
    max_health: int = Field(gt=0, description="Maximum health.")
    current_health: int = Field(description="Current health.")
    max_magicka: int = Field(default=0, ge=0, description="Maximum magicka.")
    current_magicka: int = Field(default=0, description="Current magicka.")
    max_stamina: int = Field(default=0, ge=0, description="Maximum stamina.")
    current_stamina: int = Field(default=0, description="Current stamina.")
    armor: int = Field(default=0, ge=0, description="Total armor rating.")
    weapon_damage: int = Field(default=UNARMED_DAMAGE, ge=0, description="Weapon damage.")
    crit_chance: int = Field(default=BASE_CRIT_CHANCE, ge=0, description="Critical chance, percent.")
    dodge_chance: int = Field(default=0, ge=0, description="Dodge chance, percent.")
    magic_resist: int = Field(default=0, ge=0, description="Magic resistance, percent.")
    regen_health_per_sec: float = Field(default=BASE_REGEN_PER_SEC, ge=0)
    regen_magicka_per_sec: float = Field(default=BASE_REGEN_PER_SEC, ge=0)
    regen_stamina_per_sec: float = Field(default=BASE_REGEN_PER_SEC, ge=0)
    abilities: list[Ability] = Field(
        default_factory=list,
        description="Abilities available to the player.",
    )

    def model_post_init(self, __context) -> None:
        self.current_health = max(0, min(self.current_health, self.max_health))
        self.current_magicka = max(0, min(self.current_magicka, self.max_magicka))
        self.current_stamina = max(0, min(self.current_stamina, self.max_stamina))

    @property
    def is_alive(self) -> bool:
        return self.current_health > 0


def _weapon_abilities(weapon_damage: int) -> list[Ability]:
    return [
        Ability(
            id="strike",
            name="Strike",
            type=AbilityType.MELEE,
            damage=max(1, weapon_damage // 2),
            cost=5,
            category=ActionCategory.OFFENSIVE,
            action_class=ActionClass.MAIN,
            description="A standard attack with the equipped weapon.",
        ),
        Ability(
            id="power_attack",
            name="Power Attack",
            type=AbilityType.MELEE,
            damage=max(1, weapon_damage),
            cost=20,
            cooldown=2,
            category=ActionCategory.OFFENSIVE,
            action_class=ActionClass.MAIN,
            description="A heavy, slow blow.",
        ),
    ]


def calculate_player_combat_stats(
    character: Character,
    inventory: list[InventoryItem],
    previous: PlayerCombatStats | None = None,
) -> PlayerCombatStats:
    """
    Derives the player's combat stats from the character and equipment.

    Args:
        character (Character): The controlled character.
        inventory (list[InventoryItem]): The character's items; only the
            equipped ones count.
        previous (PlayerCombatStats | None): Stats in effect before this
            recomputation. Their current vitals are kept, clamped to the new
            maxima. Without them the character's stored vitals are used, and
            without those the pools start full.

    Returns:
        PlayerCombatStats: The derived stats.

    """
    equipped = [item for item in inventory if item.equipped]

    armor_skill = max(character.skill_level(s) for s in ARMOR_SKILLS)
    raw_armor = sum(item.armor for item in equipped)
    armor = floor(raw_armor * (1 + armor_skill * 0.5 / 100))
    armor = floor(armor * (1 + get_combat_perk_bonus(character, "armor") / 100))

    # Shields always sit in the offhand and never count as the weapon.
    weapons = [
        item
        for item in equipped
        if item.type == "weapon" and item.slot != "offhand" and not item.is_shield
    ]
    weapon_skill = max(character.skill_level(s) for s in WEAPON_SKILLS)
    if weapons:
        base_weapon = max(item.damage for item in weapons)
        weapon_damage = floor(base_weapon * (1 + weapon_skill * 0.5 / 100))
    else:
        weapon_damage = UNARMED_DAMAGE

    dodge = floor(character.skill_level("Sneak") * 0.3)
    magic_resist = floor(character.skill_level("Alteration") * 0.2)

    abilities = _weapon_abilities(weapon_damage)
    known = {a.id for a in abilities}
    abilities.extend(a for a in character.abilities if a.id not in known)

    if previous is not None:
        vitals = (
            previous.current_health,
            previous.current_magicka,
            previous.current_stamina,
        )
    elif character.current_vitals is not None:
        vitals = (
            character.current_vitals.current_health,
            character.current_vitals.current_magicka,
            character.current_vitals.current_stamina,
        )
    else:
        vitals = (character.health, character.magicka, character.stamina)

    return PlayerCombatStats(
        name=character.name,
        level=character.level,
        max_health=character.health,
        current_health=vitals[0],
        max_magicka=character.magicka,
        current_magicka=vitals[1],
        max_stamina=character.stamina,
        current_stamina=vitals[2],
        armor=armor,
        weapon_damage=weapon_damage,
        crit_chance=BASE_CRIT_CHANCE,
        dodge_chance=dodge,
        magic_resist=magic_resist,
        abilities=abilities,
    )
