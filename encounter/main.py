"""
Demo entry point for the encounter engine.

Builds a character with a small kit, generates a band of hostiles from the
packaged content, and plays the encounter in the console: through the menus,
or with the default policy when `auto_combat` is set in the configuration
(see `ENCOUNTER_CONFIG`).
"""

import random
import time

from rich.table import Table

from encounter.actions.ability import Ability
from encounter.actors.character import Character, Perk, Skill
from encounter.actors.combat_actor import CombatActor, CompanionMeta
from encounter.actors.player_stats import calculate_player_combat_stats
from encounter.combat.bestiary import generate_enemy_group
from encounter.combat.combat_manager import CombatManager
from encounter.combat.resolver import ResolutionContext
from encounter.core.config import load_config
from encounter.core.constants import CharacterType, ControlMode, EncounterStatus
from encounter.core.content import ContentRepository
from encounter.core.logging import setup_logging
from encounter.core.utils import cprint, crule
from encounter.items.item import InventoryItem
from encounter.ui.cli_interface import PlayerInterface, format_log_entry, render_combat_status


def build_demo_character(repo: ContentRepository) -> tuple[Character, list[InventoryItem]]:
    """Returns the demo character and its inventory."""
    spells = [
        Ability(
            id="firebolt",
            name="Firebolt",
            type="magic",
            damage=18,
            cost=20,
            description="A bolt of fire.",
        ),
        Ability(
            id="healing_hands",
            name="Healing Hands",
            type="magic",
            heal=25,
            cost=25,
            cooldown=2,
            description="Mends the wounds of an ally.",
        ),
        Ability(
            id="conjure_familiar",
            name="Conjure Familiar",
            type="magic",
            cost=40,
            cooldown=4,
            effects=[
                {"type": "summon", "name": "Familiar", "base_health": 30, "base_damage": 8, "duration": 3}
            ],
            description="Calls a spectral wolf to your side.",
        ),
    ]
    frost_nova = repo.get_ability("frost_nova")
    if frost_nova is not None:
        spells.append(frost_nova)
    character = Character(
        id="dovahkiin",
        name="Dovahkiin",
        level=6,
        health=120,
        magicka=110,
        stamina=100,
        skills=[
            Skill(name="One-Handed", level=30),
            Skill(name="Light Armor", level=25),
            Skill(name="Destruction", level=28),
            Skill(name="Sneak", level=20),
            Skill(name="Alteration", level=20),
        ],
        perks=[Perk(id="armsman", rank=1), Perk(id="tactical_guard_mastery", rank=1)],
        abilities=spells,
    )
    inventory = [
        InventoryItem(
            id="steel_sword",
            character_id=character.id,
            name="Steel Sword",
            type="weapon",
            slot="weapon",
            damage=12,
            weapon_skill="One-Handed",
            equipped=True,
        ),
        InventoryItem(
            id="leather_armor",
            character_id=character.id,
            name="Leather Armor",
            type="apparel",
            slot="chest",
            armor=20,
            armor_skill="Light Armor",
            equipped=True,
        ),
        InventoryItem(
            id="potion_of_healing",
            character_id=character.id,
            name="Potion of Healing",
            type="potion",
            subtype="health",
            quantity=2,
        ),
        InventoryItem(id="bread", character_id=character.id, name="Bread", type="food"),
    ]
    return character, inventory


def build_demo_companion() -> CombatActor:
    return CombatActor(
        id="lydia",
        name="Lydia",
        side=CharacterType.ALLY,
        level=5,
        current_health=90,
        max_health=90,
        armor=30,
        damage=11,
        abilities=[
            Ability(
                id="shield_bash",
                name="Shield Bash",
                type="melee",
                damage=8,
                cooldown=2,
                effects=[{"type": "stun", "value": 1, "duration": 1, "chance": 25}],
            ),
        ],
        companion_meta=CompanionMeta(auto_control=False),
    )


def print_summary(manager: CombatManager) -> None:
    summary = manager.summary()
    table = Table(title="Encounter Summary", pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Result", summary.result.colored_name)
    table.add_row("Health", str(summary.current_health))
    table.add_row("Magicka", str(summary.current_magicka))
    table.add_row("Stamina", str(summary.current_stamina))
    table.add_row("Elapsed", f"{summary.combat_elapsed_sec:.1f}s")
    table.add_row("Experience", str(summary.rewards.xp))
    table.add_row("Gold", str(summary.rewards.gold))
    table.add_row("Items", ", ".join(i.name for i in summary.rewards.items) or "-")
    cprint(table)


def main() -> None:
    config = load_config()
    setup_logging(config.log_level)

    crule("Encounter Demo", style="bold green")
    repo = ContentRepository()
    character, inventory = build_demo_character(repo)
    stats = calculate_player_combat_stats(character, inventory)
    enemies = generate_enemy_group("bandit", 2, rng=random.Random(config.random_seed))

    ui = PlayerInterface()
    ctx = ResolutionContext(
        character=character,
        inventory=inventory,
        seconds_per_turn=config.seconds_per_turn,
    )
    manager = CombatManager.start(
        enemies,
        stats,
        allies=[build_demo_companion()],
        config=config,
        ctx=ctx,
        on_narrative=lambda entry: cprint(format_log_entry(entry)),
    )

    while manager.status() != EncounterStatus.COMBAT_OVER:
        state = manager.state
        cprint(render_combat_status(state))
        if manager.status() == EncounterStatus.AWAITING_COMPANION:
            if config.auto_combat:
                manager.set_companion_control(state.awaiting_companion, ControlMode.AUTO)
                continue
            choice = ui.choose_companion_action(state, state.awaiting_companion)
            outcome = manager.companion_action(
                state.awaiting_companion, choice.ability_id, choice.target_id
            )
        elif config.auto_combat:
            outcome = manager.auto_player_turn()[-1]
            time.sleep(config.presentation_delay())
        else:
            choice = ui.choose_action(state, manager.ctx.inventory)
            outcome = manager.player_action(
                choice.action_type, choice.ability_id, choice.target_id, choice.item_id
            )
        if outcome.rejected:
            cprint(f"[bold red]{outcome.narrative}[/]")

    if manager.state.loot_pending:
        if config.show_loot_on_end and not config.auto_combat:
            selected = ui.choose_loot(manager.state)
        else:
            selected = [item.id for drop in manager.state.pending_loot for item in drop.items]
        manager.finalize_loot(selected, manager.ctx.inventory, character.id)

    crule("Combat Over", style="bold green")
    print_summary(manager)


if __name__ == "__main__":
    main()
