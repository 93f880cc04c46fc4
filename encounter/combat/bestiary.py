"""
Enemy generation.

Builds hostiles from enemy templates with a distinct name, a level close to
the template's, stats that vary by up to 15%, and a random subset of the
template's abilities, so two bandits rarely play the same.
"""

import random
from math import floor

from catchery import log_debug

from encounter.actions.ability import Ability
from encounter.actors.combat_actor import CombatActor, LootEntry
from encounter.actors.enemy_template import EnemyTemplate
from encounter.core.constants import CharacterType
from encounter.core.content import ContentRepository

DEFAULT_NAME_PREFIXES = ("Grim", "Savage", "Cunning", "Scarred", "Feral", "Wretched")

# Maximum relative deviation of generated stats from the scaled template.
STAT_VARIANCE = 0.15

ELITE_STAT_MULTIPLIER = 1.5
ELITE_ABILITY_MULTIPLIER = 1.2


def _vary(value: float, variance: float, rng: random.Random) -> int:
    return round(value * rng.uniform(1 - variance, 1 + variance))


def _level_scale(level: int, base_level: int) -> float:
    return max(0.1, 1 + (level - base_level) * 0.1)


def _pick_abilities(
    template: EnemyTemplate, scale: float, elite: bool, rng: random.Random
) -> list[Ability]:
    pool = template.abilities
    if not pool:
        return []
    count = rng.randint(min(2, len(pool)), min(4, len(pool)))
    boost = ELITE_ABILITY_MULTIPLIER if elite else 1.0
    picked = []
    for ability in rng.sample(pool, count):
        if ability.damage > 0:
            ability = ability.model_copy(
                update={"damage": max(1, floor(ability.damage * scale * boost))}
            )
        picked.append(ability)
    return picked


def create_enemy_from_template(
    template: EnemyTemplate,
    level_modifier: int = 0,
    rng: random.Random | None = None,
    elite: bool = False,
    enemy_id: str | None = None,
) -> CombatActor:
    """
    Generates one hostile from a template.

    Args:
        template (EnemyTemplate): The template to vary.
        level_modifier (int): Shift applied to the template level before the
            random spread of -1 to +2 levels.
        rng (random.Random | None): Random source.
        elite (bool): Elites get half again the health, armor and damage,
            harder hitting abilities, double rewards and boss status.
        enemy_id (str | None): Identifier to use; random when omitted.

    Returns:
        CombatActor: A hostile at full health.

    """
    rng = rng or random.Random()
    base_level = template.level + level_modifier
    level = max(1, rng.randint(base_level - 1, base_level + 2))
    scale = _level_scale(level, template.level)
    multiplier = ELITE_STAT_MULTIPLIER if elite else 1.0

    health = floor(max(10, _vary(template.health * scale, STAT_VARIANCE, rng)) * multiplier)
    armor = floor(max(0, _vary(template.armor * scale, STAT_VARIANCE, rng)) * multiplier)
    damage = floor(max(5, _vary(template.damage * scale, STAT_VARIANCE, rng)) * multiplier)
    abilities = _pick_abilities(template, scale, elite, rng)

    prefix = rng.choice(template.name_prefixes or DEFAULT_NAME_PREFIXES)
    name = f"{prefix} {template.name}"
    if elite:
        name += " (Elite)"

    casts = template.kind == "undead" or any(a.type.uses_magicka for a in abilities)
    magicka = 50 + level * 5 if casts else None
    stamina = 50 + level * 3

    reward_boost = 2 if elite else 1
    xp = floor(_vary(template.xp * scale, 0.2, rng) * reward_boost) if template.xp else None
    gold = floor(_vary(template.gold * scale, 0.3, rng) * (2.5 if elite else 1)) if template.gold else None

    loot = [
        LootEntry(
            item=entry.item.model_copy(),
            drop_chance=max(0, min(100, entry.drop_chance + rng.randint(-10, 15))),
        )
        for entry in template.loot
    ]

    enemy = CombatActor(
        id=enemy_id or f"{template.id}_{rng.randrange(16**6):06x}",
        name=name,
        side=CharacterType.ENEMY,
        level=level,
        current_health=health,
        max_health=health,
        current_magicka=magicka,
        max_magicka=magicka,
        current_stamina=stamina,
        max_stamina=stamina,
        armor=armor,
        damage=damage,
        crit_chance=template.crit_chance,
        abilities=abilities,
        behavior=rng.choice(template.behaviors) if template.behaviors else None,
        resistances=list(template.resistances),
        regen_health_per_sec=template.regen_health_per_sec,
        xp_reward=xp,
        gold_reward=gold,
        loot=loot,
        is_boss=template.is_boss or elite,
    )
    log_debug("Generated enemy", {"template": template.id, "name": enemy.name, "level": level})
    return enemy


def generate_enemy_group(
    template: EnemyTemplate | str,
    count: int,
    level_modifier: int = 0,
    rng: random.Random | None = None,
    include_elite: bool = False,
    level_variance: int = 2,
) -> list[CombatActor]:
    """
    Generates a group of hostiles from a single template.

    Names are kept distinct where the prefixes allow it, and ids are
    numbered after the template (`bandit_1`, `bandit_2`, ...).

    Args:
        template (EnemyTemplate | str): The template, or its id in the
            content repository.
        count (int): Number of hostiles.
        level_modifier (int): Level shift for the whole group.
        rng (random.Random | None): Random source.
        include_elite (bool): Whether the first member is an elite.
        level_variance (int): Per-member level spread around the modifier.

    Returns:
        list[CombatActor]: The generated hostiles.

    Raises:
        ValueError: If the template id is unknown.

    """
    if isinstance(template, str):
        found = ContentRepository().get_enemy_template(template)
        if found is None:
            raise ValueError(f"Unknown enemy template: {template}")
        template = found
    rng = rng or random.Random()
    used_names: set[str] = set()
    group: list[CombatActor] = []
    for index in range(count):
        modifier = level_modifier + rng.randint(-level_variance, level_variance)
        for _ in range(10):
            enemy = create_enemy_from_template(
                template,
                level_modifier=modifier,
                rng=rng,
                elite=include_elite and index == 0,
                enemy_id=f"{template.id}_{index + 1}",
            )
            if enemy.name not in used_names:
                break
        used_names.add(enemy.name)
        group.append(enemy)
    return group
