"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a front end and the engine.
Snapshots reuse engine_core.GameSnapshot directly.

Error Codes:
- GAME_NOT_FOUND: Game ID does not exist or was ended
- INVALID_ACTION: Move not allowed in the current state
- GAME_OVER: Game has ended; only replay/reset is possible
- INVALID_SNAPSHOT: Snapshot record failed validation
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class GameStatus(str, Enum):
    """Game status values."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"


class ErrorCode(str, Enum):
    """Structured error codes."""
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    INVALID_ACTION = "INVALID_ACTION"
    GAME_OVER = "GAME_OVER"
    INVALID_SNAPSHOT = "INVALID_SNAPSHOT"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card information for display."""
    suit: str
    rank: str
    value: int
    type: str = Field(description="monster, weapon or potion")
    label: str = Field(description="Short label, e.g. ♠10")


class RoomCardInfo(BaseModel):
    """A face-up room card with its selection and advisory state."""
    index: int
    card: CardInfo
    selected: bool = False
    selection_order: Optional[int] = Field(None, description="1-based order of selection")
    can_resolve: bool = True
    reason: Optional[str] = None
    force_bare_handed: bool = False


class WeaponInfo(BaseModel):
    """The equipped weapon."""
    card: CardInfo
    value: int
    last_defeated: Optional[int] = Field(None, description="Caps which monsters it can fight")
    defeated_monsters: list[CardInfo] = Field(default_factory=list)


class LogEntryInfo(BaseModel):
    """An event log entry."""
    message: str
    type: str = Field(description="info, turn, success, warning, danger")
    timestamp: int


# =============================================================================
# Requests
# =============================================================================

class CreateGameRequest(BaseModel):
    """Request to start a new game."""
    seed: Optional[int] = Field(None, description="Dungeon seed; random if omitted")
    auto_draw: bool = Field(True, description="Draw the first room immediately")


# =============================================================================
# Responses
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Complete game state for display."""
    game_id: str
    status: GameStatus
    seed: int
    health: int
    max_health: int
    turn: int
    deck_count: int
    discard_count: int
    room: list[RoomCardInfo] = Field(default_factory=list)
    weapon: Optional[WeaponInfo] = None
    can_avoid: bool = True
    has_carried_card: bool = False
    selected_cards: list[int] = Field(default_factory=list)
    game_over: bool = False
    game_won: bool = False
    defeating_card: Optional[CardInfo] = None
    score: int = 0
    legal_actions: list[str] = Field(default_factory=list)
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """Result of a move."""
    game_id: str
    success: bool
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    events: list[LogEntryInfo] = Field(default_factory=list)
    game_state: GameStateResponse
    api_version: str = "v1"


class ResolveCheckResponse(BaseModel):
    """Advisory check for resolving one room card now."""
    game_id: str
    index: int
    card: CardInfo
    can_resolve: bool
    reason: Optional[str] = None
    force_bare_handed: bool = False


class EventLogResponse(BaseModel):
    """The game's event log."""
    game_id: str
    entries: list[LogEntryInfo]
    count: int


class GameListResponse(BaseModel):
    """Response listing tracked games."""
    games: list[str]
    count: int


class EndGameResponse(BaseModel):
    """Response after ending a game session."""
    success: bool
    game_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
