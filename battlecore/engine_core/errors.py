"""
Errors - Exception types raised inside the engine.

Action handlers raise ActionRejected; the reducer converts it into a
rejected ActionResult so no exception ever escapes submit_action.
"""

from __future__ import annotations
from enum import Enum


class RejectCode(str, Enum):
    """Why an action had no effect."""
    BATTLE_OVER = "BATTLE_OVER"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    NOT_ENOUGH_ENERGY = "NOT_ENOUGH_ENERGY"
    UNKNOWN_REFERENCE = "UNKNOWN_REFERENCE"
    FIELD_FULL = "FIELD_FULL"
    INVALID_TARGET = "INVALID_TARGET"
    ALREADY_DEFENDING = "ALREADY_DEFENDING"
    INVALID_ACTION = "INVALID_ACTION"
    HANDLER_ERROR = "HANDLER_ERROR"


class BattleError(Exception):
    """Base class for battle engine errors."""


class ActionRejected(BattleError):
    """An action failed validation and must leave the state untouched."""

    def __init__(self, message: str, code: RejectCode = RejectCode.INVALID_ACTION):
        super().__init__(message)
        self.message = message
        self.code = code


class SessionNotFound(BattleError):
    """No battle session exists under the given id."""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id
