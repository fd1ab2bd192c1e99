"""
API Module - HTTP interface to the engine.

A front end:
1. Starts a game (optionally with a seed)
2. Selects and faces rooms, or avoids them
3. Reads state, advisory checks and the event log
4. Saves snapshots and restores or replays games

All state is session-scoped and in-memory.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    # Responses
    ActionResponse,
    EndGameResponse,
    ErrorResponse,
    EventLogResponse,
    GameListResponse,
    GameStateResponse,
    HealthResponse,
    ResolveCheckResponse,
    # Shared
    CardInfo,
    LogEntryInfo,
    RoomCardInfo,
    WeaponInfo,
    # Enums
    ErrorCode,
    GameStatus,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    # Responses
    "ActionResponse",
    "EndGameResponse",
    "ErrorResponse",
    "EventLogResponse",
    "GameListResponse",
    "GameStateResponse",
    "HealthResponse",
    "ResolveCheckResponse",
    # Shared
    "CardInfo",
    "LogEntryInfo",
    "RoomCardInfo",
    "WeaponInfo",
    # Enums
    "ErrorCode",
    "GameStatus",
    # Service
    "APIService",
    "create_app",
]
