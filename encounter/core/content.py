import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from catchery import log_warning

from encounter.actions.ability import Ability
from encounter.actors.enemy_template import EnemyTemplate

from .utils import Singleton, cprint

# The data directory shipped with the package.
DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class ContentRepository(metaclass=Singleton):
    """
    One-stop registry for the abilities and enemy templates loaded from disk.
    """

    abilities: dict[str, Ability]
    enemies: dict[str, EnemyTemplate]

    def __init__(self, data_dir: Path | None = None) -> None:
        """
        Initialize the ContentRepository.

        Args:
            data_dir (Path | None):
                The directory containing data files to load. The packaged
                data is used on first use when omitted.

        """
        if data_dir:
            self.reload(data_dir)
            self.loaded = True
        elif not hasattr(self, "loaded"):
            self.reload(DEFAULT_DATA_DIR)
            self.loaded = True

    def reload(self, root: Path) -> None:
        """
        (Re)load all JSON assets from disk.

        Args:
            root (Path):
                The directory containing data files to load.
        """
        # Abilities first, enemy templates reference them by id.
        self.abilities = _load_json_file(
            root / "abilities.json",
            self._load_abilities,
            "abilities",
        )
        self.enemies = _load_json_file(
            root / "enemies.json",
            self._load_enemy_templates,
            "enemy templates",
        )

    def _get_from_collection(self, collection_name: str, item_name: str) -> Any | None:
        """
        Generic helper to get an entry from any collection.

        Args:
            collection_name (str):
                Name of the collection attribute (e.g., 'abilities').
            item_name (str):
                Id of the entry to retrieve.

        Returns:
            Any | None:
                The entry if found, None otherwise.
        """
        collection = getattr(self, collection_name, None)
        if not collection:
            log_warning(
                f"Collection '{collection_name}' not found in ContentRepository.",
                {"collection_name": collection_name, "item_name": item_name},
            )
            return None
        return collection.get(item_name)

    def get_ability(self, ability_id: str) -> Ability | None:
        """Get an ability by id, or None if not found."""
        return self._get_from_collection("abilities", ability_id)

    def get_enemy_template(self, template_id: str) -> EnemyTemplate | None:
        """Get an enemy template by id, or None if not found."""
        return self._get_from_collection("enemies", template_id)

    @staticmethod
    def _load_abilities(data: list[dict]) -> dict[str, Ability]:
        """
        Load abilities from JSON data.

        Args:
            data (list[dict]): List of ability data dictionaries.

        Returns:
            dict[str, Ability]: Dictionary mapping ability ids to Ability objects.

        Raises:
            ValueError: If duplicate ability ids are found.
        """
        abilities: dict[str, Ability] = {}
        for ability_data in data:
            ability = Ability(**ability_data)
            if ability.id in abilities:
                raise ValueError(f"Duplicate ability id: {ability.id}")
            abilities[ability.id] = ability
        return abilities

    def _load_enemy_templates(self, data: list[dict]) -> dict[str, EnemyTemplate]:
        """
        Load enemy templates from JSON data, resolving their ability ids.

        Args:
            data (list[dict]): List of enemy template data dictionaries.

        Returns:
            dict[str, EnemyTemplate]: Dictionary mapping template ids to templates.

        Raises:
            ValueError: If a template is duplicated or names an unknown ability.
        """
        templates: dict[str, EnemyTemplate] = {}
        for template_data in data:
            ability_ids = template_data.get("abilities", [])
            missing = [a for a in ability_ids if a not in self.abilities]
            if missing:
                raise ValueError(
                    f"Enemy template '{template_data.get('id')}' references unknown abilities: {missing}"
                )
            template = EnemyTemplate(
                **{**template_data, "abilities": [self.abilities[a] for a in ability_ids]}
            )
            if template.id in templates:
                raise ValueError(f"Duplicate enemy template id: {template.id}")
            templates[template.id] = template
        return templates


def _load_json_file(
    filepath: Path,
    loader_func: Callable[[list[dict]], dict[str, Any]],
    description: str,
) -> dict[str, Any]:
    """Helper to load and validate JSON files"""
    try:
        cprint(
            f"  Loading {description} using {loader_func.__name__}...",
            style="bold green",
        )
        # Validate file path
        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        if not filepath.is_file():
            raise ValueError(f"Not a file: {filepath}")
        # Load and validate JSON
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        if not data:
            raise ValueError(f"Empty data list in {filepath}")
        if not isinstance(data, list):
            raise ValueError(f"Expected list in {filepath}, got {type(data).__name__}")
        return loader_func(data)
    except (json.JSONDecodeError, FileNotFoundError, ValueError) as e:
        raise ValueError(f"File {filepath} raised an error: {e}") from e
