"""
turnkit.errors — Custom exception classes
==========================================

Defines the exception hierarchy raised by the registry and the engine.
Each exception stores its full context for structured logging.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence
import json


class TurnKitError(Exception):
    """Base exception for all turnkit errors."""

    error_type = "TURNKIT_ERROR"

    def context(self) -> Dict[str, Any]:
        return {}

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type=self.error_type,
            message=str(self),
            context=self.context(),
            details=None,
        )


class ConfigurationError(TurnKitError):
    """Raised when engine or settings input is invalid. No engine is produced."""

    error_type = "CONFIGURATION_ERROR"

    def __init__(self, validation_errors: Sequence[str]):
        self.validation_errors = list(validation_errors)
        super().__init__(
            f"Invalid configuration: {'; '.join(self.validation_errors)}"
        )

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type=self.error_type,
            message="Invalid configuration",
            context={},
            details=self.validation_errors,
        )


class InvalidInputError(TurnKitError, ValueError):
    """Base for rejected player or move input. Also a ValueError."""

    error_type = "INVALID_INPUT"
    subject = "input"

    def __init__(self, validation_errors: Sequence[str]):
        self.validation_errors = list(validation_errors)
        super().__init__(
            f"Invalid {self.subject}: {'; '.join(self.validation_errors)}"
        )

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type=self.error_type,
            message=f"Invalid {self.subject}",
            context={},
            details=self.validation_errors,
        )


class InvalidPlayerError(InvalidInputError):
    """Raised when player data cannot be turned into a Player."""

    error_type = "INVALID_PLAYER"
    subject = "player"


class InvalidMoveError(InvalidInputError):
    """Raised when make_move is given fields a Move does not accept."""

    error_type = "INVALID_MOVE"
    subject = "move"


class InvalidStateError(TurnKitError):
    """Raised when an operation is called in a state that forbids it."""

    error_type = "INVALID_STATE"

    def __init__(self, operation: str, state: str, expected: Optional[Sequence[str]] = None):
        self.operation = operation
        self.state = state
        self.expected = list(expected or [])
        if self.expected:
            msg = (f"Cannot {operation}: game is '{state}', "
                   f"expected {' or '.join(repr(s) for s in self.expected)}")
        else:
            msg = f"Cannot {operation}: game is '{state}'"
        super().__init__(msg)

    def context(self) -> Dict[str, Any]:
        return {"operation": self.operation, "state": self.state,
                "expected": self.expected}


class DuplicateIdError(TurnKitError):
    """Raised when a player id is already present in a registry."""

    error_type = "DUPLICATE_ID"

    def __init__(self, player_id: str):
        self.player_id = player_id
        super().__init__(f"Player with id {player_id!r} already exists")

    def context(self) -> Dict[str, Any]:
        return {"player_id": self.player_id}


class CallbackError(TurnKitError):
    """Raised when on_turn_change or on_game_over raises."""

    error_type = "CALLBACK_FAILURE"

    def __init__(self, callback_name: str, player_id: Optional[str], original: BaseException):
        self.callback_name = callback_name
        self.player_id = player_id
        self.original = original
        super().__init__(
            f"Callback '{callback_name}' raised {type(original).__name__}: {original}"
        )

    def context(self) -> Dict[str, Any]:
        return {"callback_name": self.callback_name, "player_id": self.player_id,
                "original": repr(self.original)}


def _format_error_block(
    error_type: str,
    message: str,
    context: Dict[str, Any],
    details: Optional[List[str]],
) -> str:
    """Format a structured error block for log output."""
    from datetime import datetime, timezone

    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    lines = [
        "",
        "=" * 64,
        " TURNKIT ERROR",
        "=" * 64,
        f" Timestamp:    {timestamp}",
        f" Error Type:   {error_type}",
        f" Message:      {message}",
    ]

    if context:
        lines.append("")
        lines.append(" ── CONTEXT " + "─" * 52)
        lines.append(_indent_json(context))

    if details:
        lines.append("")
        lines.append(" ── DETAILS " + "─" * 52)
        for item in details:
            lines.append(f" • {item}")

    lines.append("")
    lines.append("=" * 64)
    lines.append("")

    return "\n".join(lines)


def _indent_json(data: Dict[str, Any], indent: int = 2) -> str:
    """Format JSON with indentation for error logs."""
    try:
        formatted = json.dumps(data, indent=indent, default=str)
        return "\n".join(" " + line for line in formatted.split("\n"))
    except (TypeError, ValueError):
        return f" {repr(data)}"
