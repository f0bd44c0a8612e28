"""
Session Module - Manages in-memory battle sessions.

A session represents one battle:
- Created when the player starts a battle
- Holds the authoritative BattleState and the opponent's planner
- Runs opponent turns automatically after the player ends a turn
- Dropped when ended or when idle past the TTL
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import GameLoop, LoopState, OpponentTurn, TurnResult, run_opponent_turn

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
    "LoopState",
    "OpponentTurn",
    "TurnResult",
    "run_opponent_turn",
]
