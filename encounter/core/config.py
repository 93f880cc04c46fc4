"""
Engine configuration.

Session and presentation preferences are passed into the engine explicitly
at construction time instead of living in globals. Only `seconds_per_turn`
and `random_seed` influence rules; the rest is read by embeddings such as the
CLI demo.
"""

import json
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from encounter.core.constants import DEFAULT_SECONDS_PER_TURN

# Environment variable that points at a JSON configuration file.
CONFIG_ENV_VAR = "ENCOUNTER_CONFIG"


class EngineConfig(BaseModel):
    """Configuration for a CombatManager and the embeddings driving it."""

    model_config = ConfigDict(extra="forbid")

    auto_combat: bool = Field(
        default=False,
        description="Let the hostile AI pick the player's actions.",
    )
    speed_multiplier: float = Field(
        default=1.0,
        gt=0,
        description="Divides presentation delays. Never read by rules.",
    )
    show_loot_on_end: bool = Field(
        default=True,
        description="Show the loot review screen before committing rewards.",
    )
    seconds_per_turn: int = Field(
        default=DEFAULT_SECONDS_PER_TURN,
        ge=0,
        description="Seconds of regeneration applied per player turn.",
    )
    turn_delay_sec: float = Field(
        default=0.0,
        ge=0,
        description="Presentation pause between AI turns, in seconds.",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for the roll provider and reward rolls.",
    )
    log_level: str = Field(
        default="INFO",
        description="Level passed to setup_logging by embeddings.",
    )

    def presentation_delay(self) -> float:
        """Returns the pause between AI turns, scaled by the speed multiplier."""
        return self.turn_delay_sec / self.speed_multiplier


def load_config(path: Path | str | None = None) -> EngineConfig:
    """
    Loads an EngineConfig from a JSON file.

    Args:
        path (Path | str | None): The file to load. When omitted, the
            ENCOUNTER_CONFIG environment variable is consulted, and defaults
            are returned if it is not set either.

    Returns:
        EngineConfig: The loaded configuration.

    Raises:
        ValueError: If the file is missing, malformed or holds unknown keys.

    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
        if not path:
            return EngineConfig()
    filepath = Path(path)
    if not filepath.is_file():
        raise ValueError(f"Configuration file not found: {filepath}")
    try:
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        return EngineConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"File {filepath} raised an error: {e}") from e
