"""
Tests for enemy generation from templates.
"""

import random

import pytest

from encounter.core.constants import CharacterType
from encounter.core.content import DEFAULT_DATA_DIR, ContentRepository
from encounter.combat.bestiary import create_enemy_from_template, generate_enemy_group


@pytest.fixture
def repo():
    return ContentRepository(DEFAULT_DATA_DIR)


@pytest.fixture
def bandit(repo):
    return repo.get_enemy_template("bandit")


@pytest.mark.parametrize("seed", range(10))
def test_generated_enemy_stays_close_to_its_template(bandit, seed):
    """Test level, health and ability spread of generated enemies."""
    enemy = create_enemy_from_template(bandit, rng=random.Random(seed))
    assert enemy.side == CharacterType.ENEMY
    assert bandit.level - 1 <= enemy.level <= bandit.level + 2
    assert enemy.current_health == enemy.max_health >= 10
    assert 2 <= len(enemy.abilities) <= 4
    template_ids = {a.id for a in bandit.abilities}
    assert {a.id for a in enemy.abilities} <= template_ids
    assert enemy.name.endswith("Bandit")
    assert all(0 <= entry.drop_chance <= 100 for entry in enemy.loot)


def test_elite_enemies(bandit):
    enemy = create_enemy_from_template(bandit, rng=random.Random(3), elite=True, enemy_id="boss")
    assert enemy.id == "boss"
    assert enemy.name.endswith("(Elite)")
    assert enemy.is_boss


def test_undead_get_magicka(repo):
    enemy = create_enemy_from_template(repo.get_enemy_template("skeleton"), rng=random.Random(1))
    assert enemy.max_magicka is not None
    assert enemy.resistances == ["frost", "poison"]


def test_group_ids_and_names(repo):
    group = generate_enemy_group("bandit", 3, rng=random.Random(5))
    assert [e.id for e in group] == ["bandit_1", "bandit_2", "bandit_3"]
    assert len({e.name for e in group}) == 3


def test_groups_are_reproducible(repo):
    """Test that a seeded group generates identically."""
    first = generate_enemy_group("wolf", 2, rng=random.Random(11))
    second = generate_enemy_group("wolf", 2, rng=random.Random(11))
    assert first == second


def test_group_with_an_elite_leader(repo):
    group = generate_enemy_group("wolf", 2, rng=random.Random(2), include_elite=True)
    assert group[0].is_boss
    assert not group[1].is_boss


def test_unknown_template(repo):
    with pytest.raises(ValueError):
        generate_enemy_group("dragon", 1)
