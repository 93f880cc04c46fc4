"""
Core module for the encounter engine.

Constants and enums, the natural roll curve, configuration, logging, error
handling and console helpers. The content repository lives in
`encounter.core.content` and is imported from there, since it loads actors
and abilities that themselves depend on this module.
"""

from .config import EngineConfig, load_config
from .constants import (
    PLAYER_ID,
    AbilityType,
    ActionCategory,
    ActionClass,
    ActionType,
    Behavior,
    CharacterType,
    CombatResult,
    ControlMode,
    EffectType,
    EncounterStatus,
    RejectionReason,
    RollTier,
    StatType,
)
from .dice import (
    RollOutcome,
    RollProvider,
    ScriptedRollProvider,
    chance_succeeds,
    classify_roll,
    crit_threshold,
)
from .error_handling import (
    ERROR_HANDLER,
    CombatInvariantError,
    EncounterError,
    ErrorHandler,
    ErrorSeverity,
    raise_invariant,
)
from .logging import get_logger, setup_logging
from .utils import Singleton, ccapture, cprint, crule, make_bar

__all__ = [
    # Import from config.py
    "EngineConfig",
    "load_config",
    # Import from constants.py
    "PLAYER_ID",
    "AbilityType",
    "ActionCategory",
    "ActionClass",
    "ActionType",
    "Behavior",
    "CharacterType",
    "CombatResult",
    "ControlMode",
    "EffectType",
    "EncounterStatus",
    "RejectionReason",
    "RollTier",
    "StatType",
    # Import from dice.py
    "RollOutcome",
    "RollProvider",
    "ScriptedRollProvider",
    "chance_succeeds",
    "classify_roll",
    "crit_threshold",
    # Import from error_handling.py
    "ERROR_HANDLER",
    "CombatInvariantError",
    "EncounterError",
    "ErrorHandler",
    "ErrorSeverity",
    "raise_invariant",
    # Import from logging.py
    "get_logger",
    "setup_logging",
    # Import from utils.py
    "Singleton",
    "ccapture",
    "cprint",
    "crule",
    "make_bar",
]
