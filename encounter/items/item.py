"""
Inventory items as seen by the encounter engine.

Inventory management lives outside the engine; this is the shape the engine
reads when computing player stats, using consumables and granting loot.
"""

from pydantic import BaseModel, Field

# Item types the engine recognises.
CONSUMABLE_TYPES = {"potion", "food", "drink"}
EQUIPMENT_TYPES = {"weapon", "apparel", "armor"}


class InventoryItem(BaseModel):
    """A stack of items owned by a character."""

    id: str = Field(
        description="Unique identifier of the stack.",
    )
    character_id: str = Field(
        default="",
        description="Owner of the stack.",
    )
    name: str = Field(
        description="Display name.",
    )
    type: str = Field(
        default="misc",
        description="Item type: weapon, apparel, potion, food, drink, misc...",
    )
    subtype: str | None = Field(
        default=None,
        description="Finer classification, e.g. 'health' for a potion.",
    )
    quantity: int = Field(
        default=1,
        ge=0,
        description="Number of items in the stack.",
    )
    equipped: bool = Field(
        default=False,
        description="Whether the item is worn or wielded.",
    )
    slot: str | None = Field(
        default=None,
        description="Equipment slot: weapon, offhand, head, chest, hands, feet...",
    )
    damage: int = Field(
        default=0,
        ge=0,
        description="Weapon damage.",
    )
    armor: int = Field(
        default=0,
        ge=0,
        description="Armor rating.",
    )
    weapon_skill: str | None = Field(
        default=None,
        description="Skill governing the weapon, e.g. 'One-Handed'.",
    )
    armor_skill: str | None = Field(
        default=None,
        description="Skill governing the armor, e.g. 'Light Armor'.",
    )
    restores: dict[str, int] = Field(
        default_factory=dict,
        description="Explicit restoration values keyed by vital.",
    )
    value: int = Field(
        default=0,
        ge=0,
        description="Gold value.",
    )

    @property
    def is_consumable(self) -> bool:
        return self.type in CONSUMABLE_TYPES

    @property
    def is_shield(self) -> bool:
        return self.type == "apparel" and (
            self.subtype == "shield" or "shield" in self.name.lower()
        )


def merge_into_inventory(
    inventory: list[InventoryItem], items: list[InventoryItem], character_id: str
) -> list[InventoryItem]:
    """
    Adds items to an inventory, stacking onto existing entries by name.

    Args:
        inventory (list[InventoryItem]): The current inventory, not modified.
        items (list[InventoryItem]): Items to add.
        character_id (str): Owner assigned to new stacks.

    Returns:
        list[InventoryItem]: The updated inventory.

    """
    result = [item.model_copy() for item in inventory]
    for item in items:
        if item.quantity <= 0:
            continue
        for index, existing in enumerate(result):
            if existing.name == item.name and existing.type == item.type:
                result[index] = existing.model_copy(
                    update={"quantity": existing.quantity + item.quantity}
                )
                break
        else:
            result.append(item.model_copy(update={"character_id": character_id}))
    return result
