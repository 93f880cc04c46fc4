"""
Restoration values for consumables.

Explicit `restores` values on an item win. Otherwise potions are read from
their subtype and name strength ("minor", "plentiful", ...) and food or drink
falls back to a small heal plus hunger or thirst relief.
"""

from pydantic import BaseModel, Field

from encounter.items.item import InventoryItem

POTION_STRENGTHS: list[tuple[str, int]] = [
    ("ultimate", 150),
    ("extreme", 125),
    ("vigorous", 100),
    ("plentiful", 75),
    ("major", 75),
    ("minor", 25),
]
DEFAULT_POTION_STRENGTH = 50

VITALS = ("health", "magicka", "stamina")


class RestorationValues(BaseModel):
    """Amounts a consumable restores. Zero means untouched."""

    health: int = Field(default=0, ge=0)
    magicka: int = Field(default=0, ge=0)
    stamina: int = Field(default=0, ge=0)
    hunger: int = Field(default=0, ge=0)
    thirst: int = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        return not any(
            (self.health, self.magicka, self.stamina, self.hunger, self.thirst)
        )


def _potion_strength(name: str) -> int:
    lowered = name.lower()
    for word, amount in POTION_STRENGTHS:
        if word in lowered:
            return amount
    return DEFAULT_POTION_STRENGTH


def get_item_restoration_values(item: InventoryItem) -> RestorationValues:
    """
    Looks up what a consumable restores.

    Args:
        item (InventoryItem): The item to inspect.

    Returns:
        RestorationValues: The restoration amounts, all zero for items that
        restore nothing.

    """
    if item.restores:
        return RestorationValues.model_validate(
            {k: v for k, v in item.restores.items() if k in RestorationValues.model_fields}
        )
    if item.type == "potion":
        amount = _potion_strength(item.name)
        vital = item.subtype if item.subtype in VITALS else None
        if vital is None:
            vital = next((v for v in VITALS if v in item.name.lower()), None)
        if vital is None:
            return RestorationValues()
        return RestorationValues.model_validate({vital: amount})
    if item.type == "food":
        return RestorationValues(health=15, hunger=20)
    if item.type == "drink":
        return RestorationValues(health=10, stamina=10, thirst=20)
    return RestorationValues()
