"""
Session Module - Manages in-memory game sessions.

A session represents one play-through of the dungeon:
- Created when a driver starts, restores or replays a game
- Holds the Game
- Forgotten when ended

Sessions are EPHEMERAL; the seed is the only thing needed to replay one.
"""

from .manager import SessionManager, Session, SessionState

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
]
