"""
User interface module for the encounter engine.

Provides console menus for the player's decisions and pure helpers that
render the encounter as rich tables and markup strings. The engine never
imports this module; embeddings drive both.
"""

from typing import Any

from prompt_toolkit import ANSI, PromptSession
from pydantic import BaseModel, Field
from rich.table import Table

from encounter.actions.ability import Ability
from encounter.combat.npc_ai import is_usable
from encounter.combat.state import CombatState, LogEntry
from encounter.core.constants import (
    PLAYER_ID,
    ActionCategory,
    ActionClass,
    ActionType,
    CharacterType,
    RollTier,
)
from encounter.core.utils import ccapture, make_bar
from encounter.items.item import InventoryItem

# Created on first prompt so importing the module never touches the terminal.
_session: PromptSession | None = None


def _prompt(message: str) -> str:
    global _session
    if _session is None:
        _session = PromptSession(erase_when_done=True)
    return _session.prompt(ANSI(message))


class PlayerChoice(BaseModel):
    """A decision taken through the menus."""

    action_type: ActionType = Field(
        description="What the player wants to do.",
    )
    ability_id: str | None = Field(
        default=None,
        description="The chosen ability, for ability actions.",
    )
    target_id: str | None = Field(
        default=None,
        description="The chosen target, for single-target abilities.",
    )
    item_id: str | None = Field(
        default=None,
        description="The chosen item, for item actions.",
    )


# ===== RENDERING =====

_TIER_STYLE = {
    RollTier.FAIL: "bold red",
    RollTier.MISS: "red",
    RollTier.LOW: "yellow",
    RollTier.MID: "white",
    RollTier.HIGH: "green",
    RollTier.CRIT: "bold green",
}


def _status_row(table: Table, side: CharacterType, name: str, current: int, maximum: int, effects: list) -> None:
    table.add_row(
        side.emoji,
        side.colorize(name),
        f"{make_bar(current, maximum, color='red' if side == CharacterType.ENEMY else 'green')} "
        f"{current:>3}/{maximum:<3}",
        " ".join(f"{e.effect_type.emoji}{e.turns_remaining}" for e in effects),
    )


def render_combat_status(state: CombatState) -> Table:
    """
    Builds a table with every living combatant's health and effects.

    Args:
        state (CombatState): The encounter to show.

    Returns:
        Table: The status table.

    """
    table = Table(title=f"Turn {state.turn}", pad_edge=False)
    table.add_column("", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Health", justify="right")
    table.add_column("Effects")
    player = state.player
    _status_row(
        table,
        CharacterType.PLAYER,
        player.name,
        player.current_health,
        player.max_health,
        state.player_active_effects,
    )
    for actor in [*state.living_allies(), *state.living_enemies()]:
        _status_row(
            table, actor.side, actor.name, actor.current_health, actor.max_health, actor.active_effects
        )
    table.caption = (
        f"Magicka {player.current_magicka}/{player.max_magicka}  "
        f"Stamina {player.current_stamina}/{player.max_stamina}"
    )
    return table


def format_log_entry(entry: LogEntry) -> str:
    """Formats a log entry as rich markup, tagging rolled entries with their roll."""
    if entry.nat is None:
        return entry.narrative
    style = _TIER_STYLE.get(entry.roll_tier, "white") if entry.roll_tier else "white"
    return f"[{style}]🎲 {entry.nat:>2}[/] {entry.narrative}"


def render_loot(state: CombatState) -> Table:
    """Builds the loot review table of a won encounter."""
    table = Table(title="Loot", pad_edge=False)
    table.add_column("#", style="cyan")
    table.add_column("Item", style="bold")
    table.add_column("Qty", justify="right")
    table.add_column("From")
    index = 1
    for drop in state.pending_loot:
        for item in drop.items:
            table.add_row(str(index), item.name, str(item.quantity), drop.enemy_name)
            index += 1
    rewards = state.pending_rewards
    if rewards is not None:
        table.caption = f"{rewards.gold} gold, {rewards.xp} experience"
    return table


# ===== MENUS =====


class PlayerInterface:
    """
    Command-line interface for the player's decisions.

    Menus are rich tables answered through prompt_toolkit, with numeric
    shortcuts for entries and alphabetic ones for submenus.
    """

    def choose_action(self, state: CombatState, inventory: list[InventoryItem]) -> PlayerChoice:
        """
        Asks for the player's next action.

        Args:
            state (CombatState): The encounter.
            inventory (list[InventoryItem]): Items available for item actions.

        Returns:
            PlayerChoice: The decision, including any target or item.

        """
        while True:
            abilities = self.sort_actions(
                [a for a in state.player.abilities if self._slot_free(state, a.action_class)]
            )
            submenus = ["End turn"]
            if any(i.is_consumable and i.quantity > 0 for i in inventory):
                submenus.append("Use item")
            if not state.player_guard_used and not state.player_bonus_action_used:
                submenus.append("Defend")
            if state.flee_allowed and not state.player_main_action_used:
                submenus.append("Flee")
            if state.surrender_allowed:
                submenus.append("Surrender")

            table = Table(title="Actions", pad_edge=False)
            table.add_column("#", style="cyan")
            table.add_column("Name", style="bold")
            table.add_column("Type", style="magenta")
            table.add_column("Category", style="blue")
            table.add_column("Cost", justify="right")
            for i, ability in enumerate(abilities, 1):
                name = ability.name if is_usable(state, PLAYER_ID, ability, summon_cap=99) else f"[dim]{ability.name}[/]"
                table.add_row(
                    str(i),
                    name,
                    ability.action_class.colored_name,
                    ability.category.colored_name,
                    str(ability.cost),
                )
            table.add_row()
            for i, submenu in enumerate(submenus):
                table.add_row(chr(97 + i), submenu, "", "", "")

            answer = _prompt("\n" + ccapture(table) + "\nAction > ")
            index = self.get_digit_choice(answer) - 1
            if 0 <= index < len(abilities):
                ability = abilities[index]
                if not ability.needs_target:
                    return PlayerChoice(action_type=ActionType.ABILITY, ability_id=ability.id)
                target = self.choose_target(state, ability, PLAYER_ID)
                if target is not None:
                    return PlayerChoice(
                        action_type=ActionType.ABILITY, ability_id=ability.id, target_id=target
                    )
                continue
            index = self.get_alpha_choice(answer)
            if not 0 <= index < len(submenus):
                continue
            submenu = submenus[index]
            if submenu == "Use item":
                item = self.choose_item(inventory)
                if item is not None:
                    return PlayerChoice(action_type=ActionType.ITEM, item_id=item.id)
                continue
            return PlayerChoice(
                action_type={
                    "End turn": ActionType.END_TURN,
                    "Defend": ActionType.DEFEND,
                    "Flee": ActionType.FLEE,
                    "Surrender": ActionType.SURRENDER,
                }[submenu]
            )

    def choose_companion_action(self, state: CombatState, companion_id: str) -> PlayerChoice:
        """Asks for the orders of a manually controlled companion."""
        companion = state.actor(companion_id)
        abilities = self.sort_actions(list(companion.abilities))
        table = Table(title=f"Orders for {companion.name}", pad_edge=False)
        table.add_column("#", style="cyan")
        table.add_column("Name", style="bold")
        table.add_column("Category", style="blue")
        for i, ability in enumerate(abilities, 1):
            table.add_row(str(i), ability.name, ability.category.colored_name)
        table.add_row()
        table.add_row("a", "Attack", "")
        while True:
            answer = _prompt("\n" + ccapture(table) + "\nOrder > ")
            if self.get_alpha_choice(answer) == 0:
                target = self.choose_target(state, None, companion_id)
                if target is not None:
                    return PlayerChoice(
                        action_type=ActionType.ABILITY, ability_id="basic_attack", target_id=target
                    )
                continue
            index = self.get_digit_choice(answer) - 1
            if not 0 <= index < len(abilities):
                continue
            ability = abilities[index]
            if not ability.needs_target:
                return PlayerChoice(action_type=ActionType.ABILITY, ability_id=ability.id)
            target = self.choose_target(state, ability, companion_id)
            if target is not None:
                return PlayerChoice(action_type=ActionType.ABILITY, ability_id=ability.id, target_id=target)

    def choose_target(self, state: CombatState, ability: Ability | None, actor_id: str) -> str | None:
        """
        Asks for the target of a single-target ability.

        Args:
            state (CombatState): The encounter.
            ability (Ability | None): The ability; None means a basic attack.
            actor_id (str): Who acts.

        Returns:
            str | None: The chosen actor id, or None to go back.

        """
        friendly = ability is not None and ability.targets_friendly
        targets = state.friendly_ids(actor_id) if friendly else state.opponent_ids(actor_id)
        if not targets:
            return None
        table = Table(title="Targets", pad_edge=False)
        table.add_column("#", style="cyan", no_wrap=True)
        table.add_column("Name", style="bold")
        table.add_column("HP", justify="right")
        table.add_column("Armor", justify="right")
        for i, target_id in enumerate(targets, 1):
            table.add_row(
                str(i),
                state.name_of(target_id),
                f"{state.health_of(target_id):>3}/{state.max_health_of(target_id):<3}",
                str(state.armor_of(target_id)),
            )
        table.add_row()
        table.add_row("q", "Back", "", "")
        while True:
            answer = _prompt("\n" + ccapture(table) + "\nTarget > ")
            index = self.get_digit_choice(answer) - 1
            if 0 <= index < len(targets):
                return targets[index]
            if isinstance(answer, str) and answer.lower() == "q":
                return None

    def choose_item(self, inventory: list[InventoryItem]) -> InventoryItem | None:
        """Asks which consumable to use; None to go back."""
        items = sorted(
            (i for i in inventory if i.is_consumable and i.quantity > 0),
            key=lambda i: i.name.lower(),
        )
        if not items:
            return None
        table = Table(title="Items", pad_edge=False)
        table.add_column("#", style="cyan")
        table.add_column("Name", style="bold")
        table.add_column("Qty", justify="right")
        for i, item in enumerate(items, 1):
            table.add_row(str(i), item.name, str(item.quantity))
        table.add_row()
        table.add_row("q", "Back", "")
        while True:
            answer = _prompt("\n" + ccapture(table) + "\nItem > ")
            index = self.get_digit_choice(answer) - 1
            if 0 <= index < len(items):
                return items[index]
            if isinstance(answer, str) and answer.lower() == "q":
                return None

    def choose_loot(self, state: CombatState) -> list[str] | None:
        """
        Lets the player pick the items to keep from the loot review.

        Returns:
            list[str] | None: Ids of the kept items, or None to leave them all.

        """
        items = [item for drop in state.pending_loot for item in drop.items]
        answer = _prompt(
            "\n" + ccapture(render_loot(state)) + "\nKeep (e.g. 1,3 or 'a' for all, empty for none) > "
        )
        if not answer.strip():
            return None
        if answer.strip().lower() == "a":
            return [item.id for item in items]
        chosen = []
        for part in answer.split(","):
            part = part.strip()
            if part.isdigit() and 1 <= int(part) <= len(items):
                chosen.append(items[int(part) - 1].id)
        return chosen

    @staticmethod
    def _slot_free(state: CombatState, action_class: ActionClass) -> bool:
        if action_class == ActionClass.MAIN:
            return not state.player_main_action_used
        return not state.player_bonus_action_used

    @staticmethod
    def sort_actions(actions: list[Ability]) -> list[Ability]:
        """
        Sort abilities by slot, category, and name for consistent display.

        Args:
            actions (list[Ability]): The abilities to sort.

        Returns:
            list[Ability]: The sorted list.

        """
        type_priority = {
            ActionClass.MAIN: 0,
            ActionClass.BONUS: 1,
        }
        category_priority = {
            ActionCategory.OFFENSIVE: 0,
            ActionCategory.DEBUFF: 1,
            ActionCategory.HEALING: 2,
            ActionCategory.BUFF: 3,
            ActionCategory.SUMMON: 4,
        }
        return sorted(
            actions,
            key=lambda action: (
                type_priority.get(action.action_class, 99),
                category_priority.get(action.category, 99),
                action.name.lower(),
            ),
        )

    @staticmethod
    def get_digit_choice(answer: str) -> int:
        """
        Convert a digit string input to its integer value.

        Args:
            answer (str): User input string to parse.

        Returns:
            int: The integer value, or -1 if invalid input.

        """
        if isinstance(answer, str) and answer.strip().isdigit():
            return int(answer.strip())
        return -1

    @staticmethod
    def get_alpha_choice(answer: Any) -> int:
        """
        Convert a single alphabetic character to its index position.

        Maps 'a' or 'A' to 0, 'b' or 'B' to 1, etc. Case-insensitive.

        Args:
            answer (Any): User input to parse.

        Returns:
            int: The index position (0-25 for a-z), or -1 if invalid input.

        """
        if isinstance(answer, str) and len(answer) == 1 and answer.isalpha():
            return ord(answer.lower()) - ord("a")
        return -1
