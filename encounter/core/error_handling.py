"""
Centralized error handling for the encounter engine.

Player mistakes are never raised: the resolver reports them as rejected
outcomes. What remains here is the fatal tier (broken encounter construction)
and a small handler used to keep presentation hooks from breaking a
resolution step.
"""

import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, NoReturn, Optional, TypeVar

from catchery import log_error

from .logging import get_logger

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Enumeration of error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EncounterError(Exception):
    """Base class for errors raised by the encounter engine."""


class CombatInvariantError(EncounterError):
    """
    Raised when the combat state breaks one of its structural invariants,
    such as an empty turn order or an actor id that matches nobody. These
    indicate a construction bug upstream, never a player action.
    """

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


def raise_invariant(message: str, context: Optional[dict[str, Any]] = None) -> NoReturn:
    """
    Logs and raises a CombatInvariantError.

    Args:
        message (str): What went wrong.
        context (dict[str, Any] | None): Identifiers useful for debugging.

    Raises:
        CombatInvariantError: Always.

    """
    log_error(f"Combat invariant violated: {message}", context or {})
    raise CombatInvariantError(message, context)


@dataclass
class EncounterIssue:
    """A handled error with its severity and context."""

    message: str
    severity: ErrorSeverity
    context: dict[str, Any]
    exception: Optional[Exception] = None


class ErrorHandler:
    """Records and logs errors raised by optional collaborators."""

    def __init__(self) -> None:
        self.logger = get_logger("encounter.errors")
        self.error_history: list[EncounterIssue] = []

    def handle(
        self,
        message: str,
        severity: ErrorSeverity,
        context: Optional[dict[str, Any]] = None,
        exception: Optional[Exception] = None,
    ) -> None:
        """Handle an error based on its severity."""
        issue = EncounterIssue(
            message=message,
            severity=severity,
            context=context or {},
            exception=exception,
        )
        self.error_history.append(issue)

        # Prefix context keys to avoid clashing with LogRecord attributes.
        safe_context = {f"ctx_{key}": value for key, value in issue.context.items()}

        if issue.severity == ErrorSeverity.CRITICAL:
            self.logger.critical(f"CRITICAL: {issue.message}", extra=safe_context)
            if issue.exception:
                self.logger.critical(
                    "".join(traceback.format_exception(issue.exception))
                )
        elif issue.severity == ErrorSeverity.HIGH:
            self.logger.error(f"ERROR: {issue.message}", extra=safe_context)
        elif issue.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(f"WARNING: {issue.message}", extra=safe_context)
        else:
            self.logger.info(f"INFO: {issue.message}", extra=safe_context)

    def safe_execute(
        self,
        operation: Callable[[], T],
        default: T,
        error_message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[dict] = None,
    ) -> T:
        """Run an operation, logging and recording any exception it raises."""
        try:
            return operation()
        except Exception as e:
            self.handle(
                f"{error_message}: {e}",
                severity,
                context,
                e,
            )
            return default


# Global error handler instance
ERROR_HANDLER = ErrorHandler()
