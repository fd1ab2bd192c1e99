"""
Session Manager - Creates and tracks independent games.

LIFECYCLE:
1. Driver creates a session (fresh seed, explicit seed, or snapshot)
2. During play the driver acts on session.game
3. Game ends → session stays readable until ended or cleaned up
4. Driver can replay: new session with the same seed

PERSISTENCE RULES:
- Sessions are in-memory only
- The only durable contract is the seed (and the optional snapshot
  record, which the driver stores wherever it likes)
- No two sessions share a Game
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import os
import time
import uuid

from ..engine_core import Game

logger = logging.getLogger(__name__)

SESSION_TTL = int(os.getenv("SCOUNDREL_SESSION_TTL", "3600"))


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Game in progress
    FINISHED = "finished"  # Game won or lost, still readable
    ABANDONED = "abandoned"  # Ended by the driver


@dataclass
class Session:
    """
    One game owned by one driver.

    Contains the Game and a little metadata.
    """
    session_id: str
    game: Game
    created_at: float
    last_active_at: float = 0.0
    ended: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def state(self) -> SessionState:
        if self.ended:
            return SessionState.ABANDONED
        if self.game.state.game_over:
            return SessionState.FINISHED
        return SessionState.ACTIVE

    def is_active(self) -> bool:
        """Check if the game can still be played."""
        return self.state == SessionState.ACTIVE

    def touch(self) -> None:
        self.last_active_at = time.time()


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions from seeds or snapshots
    - Track sessions
    - Clean up idle sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create_session(self, seed: int | None = None, auto_draw: bool = True) -> Session:
        """
        Create a new game session.

        Args:
            seed: Dungeon seed (random if omitted, recorded either way)
            auto_draw: Draw the first room immediately

        Returns:
            New Session
        """
        game = Game(seed=seed)
        if auto_draw:
            game.draw_room()
        return self._register(game)

    def restore_session(self, snapshot: Any) -> Session:
        """
        Create a session from a saved snapshot.

        Raises SnapshotError if the snapshot is malformed.
        """
        game = Game.restore(snapshot)
        session = self._register(game)
        session.metadata["restored"] = True
        return session

    def replay_session(self, session_id: str) -> Session | None:
        """New session over the same dungeon as an existing one."""
        session = self.get_session(session_id)
        if not session:
            return None
        replay = self.create_session(seed=session.game.state.seed)
        replay.metadata["replay_of"] = session_id
        return replay

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID. Any lookup counts as activity."""
        session = self._sessions.get(session_id)
        if session:
            session.touch()
        return session

    def end_session(self, session_id: str) -> bool:
        """
        End a session and forget it.

        Returns False if the session did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        session.ended = True
        logger.info(f"Ended session {session_id}")
        return True

    def list_sessions(self) -> list[str]:
        """List IDs of all tracked sessions."""
        return list(self._sessions)

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions whose game is still in progress."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = SESSION_TTL) -> list[str]:
        """
        End sessions nobody has used for max_age, finished or not.

        Returns the IDs that were removed.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.last_active_at > max_age_seconds
        ]

        for session_id in to_remove:
            self.end_session(session_id)

        return to_remove

    def _register(self, game: Game) -> Session:
        session = Session(
            session_id=str(uuid.uuid4()),
            game=game,
            created_at=time.time(),
        )
        session.last_active_at = session.created_at
        self._sessions[session.session_id] = session
        logger.info(f"Created session {session.session_id} (seed {game.state.seed})")
        return session
