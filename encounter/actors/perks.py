"""
Perk lookups.

Default providers for the two perk queries the engine makes. Embeddings with
their own progression system can pass replacements through ResolutionContext.
"""

from encounter.actors.character import Character

# Combat bonus key -> (perk id, percent per rank).
COMBAT_PERK_BONUSES: dict[str, tuple[str, float]] = {
    "melee_damage": ("armsman", 20.0),
    "ranged_damage": ("overdraw", 20.0),
    "magic_damage": ("augmented_destruction", 25.0),
    "heal_power": ("regeneration", 25.0),
    "armor": ("juggernaut", 20.0),
}


def get_perk_rank(character: Character | None, perk_key: str) -> int:
    """
    Returns the rank the character holds in a perk.

    Args:
        character (Character | None): The character, or None outside a
            character context (always rank 0).
        perk_key (str): The perk id.

    Returns:
        int: The rank, 0 when the perk is not unlocked.

    """
    if character is None:
        return 0
    return max((p.rank for p in character.perks if p.id == perk_key), default=0)


def get_combat_perk_bonus(character: Character | None, perk_key: str) -> float:
    """Returns the percent bonus a combat perk key grants, 0 when unknown."""
    entry = COMBAT_PERK_BONUSES.get(perk_key)
    if entry is None:
        return 0.0
    perk_id, per_rank = entry
    return get_perk_rank(character, perk_id) * per_rank
