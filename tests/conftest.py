"""
Shared builders for the encounter engine tests.

The player is built without regeneration and with no crit chance, so a
natural 20 is the only critical roll and vitals only move when an action
moves them.
"""

import pytest

from encounter.actions.ability import Ability
from encounter.actors.combat_actor import CombatActor, CompanionMeta
from encounter.actors.player_stats import PlayerCombatStats
from encounter.combat.combat_manager import initialize_combat
from encounter.core.constants import AbilityType, Behavior, CharacterType


def make_enemy(enemy_id="bandit", name="Bandit", health=50, damage=6, **fields):
    return CombatActor(
        id=enemy_id,
        name=name,
        side=CharacterType.ENEMY,
        current_health=fields.pop("current_health", health),
        max_health=health,
        damage=damage,
        behavior=fields.pop("behavior", Behavior.AGGRESSIVE),
        xp_reward=fields.pop("xp_reward", 20),
        gold_reward=fields.pop("gold_reward", 10),
        **fields,
    )


def make_ally(ally_id="lydia", name="Lydia", health=60, damage=8, auto=True, **fields):
    return CombatActor(
        id=ally_id,
        name=name,
        side=CharacterType.ALLY,
        current_health=fields.pop("current_health", health),
        max_health=health,
        damage=damage,
        companion_meta=CompanionMeta(auto_control=auto),
        **fields,
    )


@pytest.fixture
def slash():
    return Ability(id="slash", name="Slash", type=AbilityType.MELEE, damage=10, cost=5)


@pytest.fixture
def firebolt():
    return Ability(id="firebolt", name="Firebolt", type=AbilityType.MAGIC, damage=20, cost=20, cooldown=2)


@pytest.fixture
def mend():
    return Ability(id="mend", name="Mend", type=AbilityType.MAGIC, heal=20, cost=10)


@pytest.fixture
def conjure_wolf():
    return Ability(
        id="conjure_wolf",
        name="Conjure Wolf",
        type=AbilityType.MAGIC,
        cost=10,
        effects=[{"type": "summon", "name": "Spirit Wolf", "base_health": 20, "base_damage": 5, "duration": 2}],
    )


@pytest.fixture
def bash():
    return Ability(
        id="bash",
        name="Bash",
        type=AbilityType.MELEE,
        damage=5,
        effects=[{"type": "stun", "value": 1, "duration": 1, "chance": 100}],
    )


@pytest.fixture
def nova():
    return Ability(id="nova", name="Nova", type=AbilityType.AEO, damage=10, cost=10)


@pytest.fixture
def player_stats(slash, firebolt, mend, conjure_wolf, bash, nova):
    return PlayerCombatStats(
        name="Hero",
        level=5,
        max_health=100,
        current_health=100,
        max_magicka=100,
        current_magicka=100,
        max_stamina=100,
        current_stamina=100,
        weapon_damage=10,
        crit_chance=0,
        dodge_chance=0,
        regen_health_per_sec=0,
        regen_magicka_per_sec=0,
        regen_stamina_per_sec=0,
        abilities=[slash, firebolt, mend, conjure_wolf, bash, nova],
    )


@pytest.fixture
def enemy():
    return make_enemy()


@pytest.fixture
def state(player_stats, enemy):
    return initialize_combat([enemy], player_stats, now=0.0)


@pytest.fixture
def enemy_factory():
    return make_enemy


@pytest.fixture
def ally_factory():
    return make_ally
