"""
Tests for the content repository and the packaged data files.
"""

import json

import pytest

from encounter.actions.ability import Ability
from encounter.core.constants import ActionCategory, ActionClass
from encounter.core.content import DEFAULT_DATA_DIR, ContentRepository


@pytest.fixture
def repo():
    return ContentRepository(DEFAULT_DATA_DIR)


@pytest.fixture
def restore_repo():
    yield
    ContentRepository(DEFAULT_DATA_DIR)


def _write(path, name, data):
    (path / name).write_text(json.dumps(data), encoding="utf-8")


def test_repository_is_a_singleton(repo):
    assert ContentRepository() is repo


def test_packaged_abilities_load(repo):
    slash = repo.get_ability("slash")
    assert slash is not None
    assert slash.category == ActionCategory.OFFENSIVE
    assert slash.action_class == ActionClass.MAIN
    assert repo.get_ability("no_such_ability") is None


def test_packaged_categories_are_derived(repo):
    """Test categories of packaged abilities without authored tags."""
    assert repo.get_ability("howl").category == ActionCategory.DEBUFF
    assert repo.get_ability("shield_wall").category == ActionCategory.BUFF
    assert repo.get_ability("dark_mending").category == ActionCategory.HEALING
    assert repo.get_ability("raise_dead").category == ActionCategory.SUMMON
    assert repo.get_ability("raise_dead").action_class == ActionClass.BONUS


def test_enemy_templates_resolve_their_abilities(repo):
    """Test that templates reference abilities from the catalogue."""
    bandit = repo.get_enemy_template("bandit")
    assert bandit is not None
    assert bandit.abilities
    assert all(isinstance(a, Ability) for a in bandit.abilities)
    for template in repo.enemies.values():
        for ability in template.abilities:
            assert repo.get_ability(ability.id) == ability


def test_unknown_ability_in_template_is_refused(tmp_path, restore_repo):
    """Test that a template naming a missing ability fails to load."""
    _write(tmp_path, "abilities.json", [{"id": "claw", "name": "Claw", "type": "melee", "damage": 4}])
    _write(tmp_path, "enemies.json", [{"id": "rat", "name": "Rat", "health": 5, "abilities": ["bite"]}])
    with pytest.raises(ValueError):
        ContentRepository(tmp_path)


def test_duplicate_ability_is_refused(tmp_path, restore_repo):
    """Test that duplicate ability ids fail to load."""
    claw = {"id": "claw", "name": "Claw", "type": "melee", "damage": 4}
    _write(tmp_path, "abilities.json", [claw, claw])
    _write(tmp_path, "enemies.json", [{"id": "rat", "name": "Rat", "health": 5}])
    with pytest.raises(ValueError):
        ContentRepository(tmp_path)


def test_missing_file_is_refused(tmp_path, restore_repo):
    _write(tmp_path, "abilities.json", [{"id": "claw", "name": "Claw", "type": "melee", "damage": 4}])
    with pytest.raises(ValueError):
        ContentRepository(tmp_path)


def test_custom_data_directory(tmp_path, restore_repo):
    """Test loading content from another directory."""
    _write(tmp_path, "abilities.json", [{"id": "claw", "name": "Claw", "type": "melee", "damage": 4}])
    _write(tmp_path, "enemies.json", [{"id": "rat", "name": "Rat", "health": 5, "abilities": ["claw"]}])
    repo = ContentRepository(tmp_path)
    assert list(repo.enemies) == ["rat"]
    assert repo.get_enemy_template("rat").abilities[0].id == "claw"
