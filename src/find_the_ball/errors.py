# Area: Shared
"""
find_the_ball.errors — Custom exception classes
================================================

Defines the exception hierarchy for the round engine and the
position oracle. Oracle errors store full context for structured
logging.
"""

from __future__ import annotations
from typing import Any, Dict, Optional
import json


class FindTheBallError(Exception):
    """Base exception for all find_the_ball errors."""
    pass


# ── Oracle errors ────────────────────────────────────────────


class OracleError(FindTheBallError):
    """Raised when the position oracle cannot supply a usable position.

    The round that requested the position is aborted. Callers may start
    a new round to try again.
    """

    error_type = "ORACLE_ERROR"
    retryable = True

    def __init__(
        self,
        detail: str,
        round_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ):
        self.detail = detail
        self.round_id = round_id
        self.payload = payload or {}
        super().__init__(detail)

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type=self.error_type,
            round_id=self.round_id,
            detail=self.detail,
            payload=self.payload,
        )


class OracleUnavailable(OracleError):
    """Raised when the oracle cannot be reached or answers with a non-2xx status."""

    error_type = "ORACLE_UNAVAILABLE"

    def __init__(
        self,
        detail: str,
        round_id: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.status_code = status_code
        payload = {"status_code": status_code} if status_code is not None else None
        super().__init__(detail, round_id=round_id, payload=payload)


class OracleResponseInvalid(OracleError):
    """Raised when the oracle answered but the body is not a usable position."""

    error_type = "ORACLE_RESPONSE_INVALID"

    def __init__(
        self,
        detail: str,
        round_id: Optional[str] = None,
        body: Any = None,
    ):
        self.body = body
        super().__init__(detail, round_id=round_id, payload={"body": body})


# ── Usage errors ─────────────────────────────────────────────


class InvalidGuessRange(FindTheBallError):
    """Raised when a guess is not a cup index on the board.

    The round is not consumed; the same round accepts another guess.
    """

    def __init__(self, guess: Any, board_size: int):
        self.guess = guess
        self.board_size = board_size
        super().__init__(
            f"Guess {guess!r} is outside the board (valid: 0..{board_size - 1})"
        )


class NoActiveRound(FindTheBallError):
    """Raised when a guess or cancel arrives with no round able to take it."""

    def __init__(self, action: str, phase: Any = None, message: Optional[str] = None):
        self.action = action
        self.phase = phase
        phase_name = getattr(phase, "value", phase)
        super().__init__(
            message or f"Cannot {action}: no active round (phase={phase_name})"
        )


class GuessNotAllowed(NoActiveRound):
    """Raised when a guess arrives before the ball has been concealed."""

    def __init__(self, phase: Any):
        phase_name = getattr(phase, "value", phase)
        super().__init__(
            "submit guess",
            phase=phase,
            message=f"Guessing is not open yet (phase={phase_name})",
        )


# ── Internal errors ──────────────────────────────────────────


class StaleTransition(FindTheBallError):
    """An async event arrived for a round that is no longer current.

    Raised and caught inside the engine; never reaches callers.
    """

    def __init__(
        self,
        trigger: str,
        round_id: str,
        current_round_id: Optional[str],
    ):
        self.trigger = trigger
        self.round_id = round_id
        self.current_round_id = current_round_id
        super().__init__(
            f"Stale {trigger} for round {round_id} (current: {current_round_id})"
        )


class InvalidPhaseTransition(FindTheBallError, ValueError):
    """Raised by the state machine for an event the current phase does not accept."""
    pass


class ConfigFileError(FindTheBallError):
    """The JSON config file cannot be read or is not a JSON object."""

    def __init__(self, path: str, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"Config file {path}: {detail}")


def _format_error_block(
    error_type: str,
    round_id: Optional[str],
    detail: str,
    payload: Dict[str, Any],
) -> str:
    """Format a structured error block for the log."""
    from datetime import datetime, timezone

    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    lines = [
        "",
        "=" * 64,
        " ORACLE ERROR — ROUND ABORTED",
        "=" * 64,
        f" Timestamp:    {timestamp}",
        f" Error Type:   {error_type}",
        f" Round:        {round_id or '-'}",
        f" Detail:       {detail}",
    ]

    if payload:
        lines.append("")
        lines.append(" ── RESPONSE " + "─" * 51)
        lines.append(_indent_json(payload))

    lines.append("")
    lines.append("=" * 64)
    lines.append("")

    return "\n".join(lines)


def _indent_json(data: Dict[str, Any], indent: int = 2) -> str:
    """Format JSON with indentation for error logs."""
    formatted = json.dumps(data, indent=indent, default=str)
    return "\n".join(" " + line for line in formatted.split("\n"))
