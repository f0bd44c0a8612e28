"""
Session Manager - Creates and manages battle sessions.

LIFECYCLE:
1. Caller builds decks (or asks the content generator for them)
2. start_battle creates the authoritative BattleState
3. The manager wraps it in a Session with the opponent's planner
4. During the battle:
   - The player submits actions through the GameLoop
   - After the player's END_TURN the planner plays the opponent turn
5. Battle ends -> session is GAME_OVER until ended or cleaned up

PERSISTENCE RULES:
- Sessions live in memory only
- One authoritative BattleState per session
- Stale sessions are dropped after BATTLECORE_SESSION_TTL seconds
"""

from __future__ import annotations
import logging
import os
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..bots import BotPolicy, OpponentPlanner
from ..engine_core.errors import SessionNotFound
from ..engine_core.state import BattleState, SideId

logger = logging.getLogger(__name__)


DEFAULT_SESSION_TTL = 3600


def session_ttl() -> int:
    """Seconds an idle session is kept (BATTLECORE_SESSION_TTL)."""
    return int(os.getenv("BATTLECORE_SESSION_TTL", str(DEFAULT_SESSION_TTL)))


class SessionState(Enum):
    """State of a battle session."""
    CREATED = "created"  # Battle built, no action yet
    PLAYER_TURN = "player_turn"  # Waiting for player actions
    OPPONENT_TURN = "opponent_turn"  # Planner is playing
    GAME_OVER = "game_over"  # Battle won or lost
    ABANDONED = "abandoned"  # Ended before a winner


@dataclass
class Session:
    """
    A battle session.

    Contains:
    - The current authoritative BattleState
    - The policy that plays the opponent side
    - Timestamps for stale cleanup

    The session is discarded when the battle is ended.
    """
    session_id: str
    battle: BattleState
    created_at: float
    planner: BotPolicy = field(default_factory=OpponentPlanner)

    state: SessionState = SessionState.CREATED
    last_activity: float = 0.0

    # Free-form, e.g. the requested difficulty
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.last_activity:
            self.last_activity = self.created_at

    def is_active(self) -> bool:
        """Check if session is still being played."""
        return self.state in {
            SessionState.CREATED,
            SessionState.PLAYER_TURN,
            SessionState.OPPONENT_TURN,
        }

    def is_player_turn(self) -> bool:
        return not self.battle.is_terminal and self.battle.active_side == SideId.PLAYER

    def touch(self) -> None:
        self.last_activity = time.time()

    def sync_state(self) -> None:
        """Derive the session state from the battle."""
        if self.state == SessionState.ABANDONED:
            return
        if self.battle.is_terminal:
            self.state = SessionState.GAME_OVER
        elif self.battle.active_side == SideId.PLAYER:
            self.state = SessionState.PLAYER_TURN
        else:
            self.state = SessionState.OPPONENT_TURN


class SessionManager:
    """
    In-memory registry of battle sessions keyed by uuid.

    Sessions are created around battles that start_battle already
    built, and dropped when ended or idle past ttl_seconds. Nothing
    survives a restart.
    """

    def __init__(self, ttl_seconds: int | None = None):
        self._sessions: dict[str, Session] = {}
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else session_ttl()

    def create_session(
        self,
        battle: BattleState,
        planner: BotPolicy | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Session:
        """
        Create a new session around a started battle.

        Args:
            battle: State returned by start_battle
            planner: Policy for the opponent side (tier planner by default)
            metadata: Free-form data kept with the session

        Returns:
            New Session
        """
        session_id = str(uuid.uuid4())
        session = Session(
            session_id=session_id,
            battle=battle,
            created_at=time.time(),
            planner=planner or OpponentPlanner(seed=battle.seed),
            metadata=metadata or {},
        )
        if battle.is_terminal:
            session.state = SessionState.GAME_OVER

        self._sessions[session_id] = session
        logger.info("Session %s created (difficulty %s)", session_id, battle.profile.name)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Session for an ID, or None."""
        return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> Session:
        """Get a session by ID or raise SessionNotFound."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def end_session(self, session_id: str, reason: str = "completed") -> Session | None:
        """
        End a session and remove it from memory.

        A session that had not reached GAME_OVER is marked ABANDONED.
        """
        session = self._sessions.pop(session_id, None)
        if session:
            if session.state != SessionState.GAME_OVER:
                session.state = SessionState.ABANDONED
            logger.info("Session %s ended (%s)", session_id, reason)
        return session

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def list_active_sessions(self) -> list[str]:
        """IDs of sessions that have not reached GAME_OVER or ABANDONED."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int | None = None) -> list[str]:
        """
        Drop sessions idle for longer than max_age (the TTL by default).

        Returns the removed session IDs.
        """
        max_age = self.ttl_seconds if max_age_seconds is None else max_age_seconds
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.last_activity > max_age
        ]

        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return to_remove
