"""
Loot Finalizer.

Rewards are settled in two phases so the player can review them. After a
victory, `populate_pending_loot` rolls the candidate bundle from the defeated
hostiles without touching any inventory. `finalize_loot` then commits the
gold, experience and whichever items were picked, and closes the loot phase.
"""

import random

from catchery import log_debug, log_warning
from pydantic import BaseModel, Field

from encounter.actors.combat_actor import CombatActor
from encounter.core.constants import CombatResult
from encounter.items.item import InventoryItem, merge_into_inventory

from .state import CombatState, LootDrop, Rewards


class LootResult(BaseModel):
    """The outcome of committing the loot phase."""

    state: CombatState = Field(description="The encounter with the loot phase closed.")
    updated_inventory: list[InventoryItem] = Field(description="The inventory with granted items merged in.")
    granted_xp: int = Field(default=0, description="Experience granted.")
    granted_gold: int = Field(default=0, description="Gold granted.")
    granted_items: list[InventoryItem] = Field(default_factory=list, description="Items granted.")


def compute_enemy_xp(enemy: CombatActor) -> int:
    """Default experience for a hostile without an authored reward."""
    return max(5, enemy.level * 10 + enemy.damage // 2)


def _roll_drops(enemy: CombatActor, rng: random.Random) -> list[InventoryItem]:
    drops: list[InventoryItem] = []
    for entry in enemy.loot:
        if entry.drop_chance >= 100 or rng.randint(1, 100) <= entry.drop_chance:
            drops.append(entry.item.model_copy())
    return drops


def populate_pending_loot(state: CombatState, rng: random.Random | None = None) -> CombatState:
    """
    Computes the candidate rewards of a won encounter.

    Summons grant nothing. Calling this again once candidates exist returns
    the state unchanged.

    Args:
        state (CombatState): A state whose result is victory.
        rng (random.Random | None): Source for item drop rolls.

    Returns:
        CombatState: The state with `pending_rewards`, `pending_loot` and
        `loot_pending` set.

    """
    if state.result != CombatResult.VICTORY or state.pending_rewards is not None:
        return state
    rng = rng or random.Random()
    new = state.copy_state()
    xp = 0
    gold = 0
    items: list[InventoryItem] = []
    for enemy in new.enemies:
        if enemy.is_summon or enemy.is_alive:
            continue
        xp += enemy.xp_reward if enemy.xp_reward is not None else compute_enemy_xp(enemy)
        gold += enemy.gold_reward or 0
        drops = _roll_drops(enemy, rng)
        if drops:
            new.pending_loot.append(LootDrop(enemy_id=enemy.id, enemy_name=enemy.name, items=drops))
            items.extend(drops)
    new.pending_rewards = Rewards(xp=xp, gold=gold, items=items)
    new.loot_pending = True
    new.log(
        "system",
        "loot_phase",
        f"You gain {xp} experience and find {gold} gold and {len(items)} item(s).",
    )
    log_debug("Loot populated", {"xp": xp, "gold": gold, "items": len(items)})
    return new


def finalize_loot(
    state: CombatState,
    selected_items: list[str] | None,
    current_inventory: list[InventoryItem],
    character_id: str,
) -> LootResult:
    """
    Commits the rewards of the loot phase.

    Args:
        state (CombatState): A state in the loot phase.
        selected_items (list[str] | None): Ids of the candidate items the
            player keeps. None means the player skipped the selection: gold
            and experience are still granted, items are not.
        current_inventory (list[InventoryItem]): The inventory to merge into;
            not modified.
        character_id (str): Owner assigned to new inventory stacks.

    Returns:
        LootResult: The closed state, the new inventory and the grants. When
        the loot phase is not open nothing is granted.

    """
    if not state.loot_pending or state.pending_rewards is None:
        log_warning("Loot is not pending; nothing to finalize", {"result": state.result})
        return LootResult(state=state, updated_inventory=[i.model_copy() for i in current_inventory])

    candidate = state.pending_rewards
    if selected_items is None:
        granted: list[InventoryItem] = []
    else:
        wanted = set(selected_items)
        granted = [item for item in candidate.items if item.id in wanted]
        unknown = wanted - {item.id for item in candidate.items}
        if unknown:
            log_warning("Ignoring items that are not part of the loot", {"items": sorted(unknown)})

    inventory = merge_into_inventory(current_inventory, granted, character_id)
    new = state.copy_state()
    new.rewards = Rewards(xp=candidate.xp, gold=candidate.gold, items=granted)
    new.loot_pending = False
    new.pending_rewards = None
    new.pending_loot = []
    new.log(
        "system",
        "loot_commit",
        f"You collect {candidate.gold} gold, {candidate.xp} experience and {len(granted)} item(s).",
    )
    return LootResult(
        state=new,
        updated_inventory=inventory,
        granted_xp=candidate.xp,
        granted_gold=candidate.gold,
        granted_items=granted,
    )
