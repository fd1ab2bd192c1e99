"""
FastAPI Application - REST API for Scoundrel front ends.

Endpoints:
    POST   /api/v1/games                       Start a game
    GET    /api/v1/games                       List games
    POST   /api/v1/games/restore               Restore a game from a snapshot
    GET    /api/v1/games/{id}                  Get game state
    DELETE /api/v1/games/{id}                  End a game
    POST   /api/v1/games/{id}/draw             Draw a room
    POST   /api/v1/games/{id}/avoid            Avoid the room
    POST   /api/v1/games/{id}/select/{index}   Toggle card selection
    POST   /api/v1/games/{id}/face             Face the room
    POST   /api/v1/games/{id}/replay           New game with the same seed
    GET    /api/v1/games/{id}/check/{index}    Advisory resolve check
    GET    /api/v1/games/{id}/log              Event log
    GET    /api/v1/games/{id}/snapshot         Snapshot record

Refused moves are not HTTP errors: they return 200 with success=false
and an error_code, alongside the unchanged game state.
"""

from typing import Annotated, Any, Optional, Union
import logging
import os

from fastapi import Body, FastAPI, Path
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..engine_core import GameSnapshot
from .service import APIService
from .schemas import (
    ActionResponse,
    CreateGameRequest,
    EndGameResponse,
    ErrorCode,
    ErrorResponse,
    EventLogResponse,
    GameListResponse,
    GameStateResponse,
    HealthResponse,
    ResolveCheckResponse,
)

logger = logging.getLogger(__name__)

# Environment configuration
SCOUNDREL_ENV = os.getenv("SCOUNDREL_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

ERROR_STATUS = {
    ErrorCode.GAME_NOT_FOUND: 404,
    ErrorCode.INVALID_SNAPSHOT: 422,
    ErrorCode.VALIDATION_ERROR: 422,
}


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Scoundrel Engine API",
        description="""
Single-player dungeon card game engine.

## Turn flow

1. `POST /games` starts a game and draws the first room
2. Either `POST /avoid` the room, or `POST /select/{index}` three cards
   and `POST /face`
3. Repeat until `status` is `won` or `lost`

## Error Codes

| Code | Description |
|------|-------------|
| `GAME_NOT_FOUND` | Game does not exist |
| `INVALID_ACTION` | Move not allowed now |
| `GAME_OVER` | Game already ended |
| `INVALID_SNAPSHOT` | Snapshot failed validation |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()
    logger.info(f"Created Scoundrel API ({SCOUNDREL_ENV})")

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Turn an ErrorResponse into a JSON response with a matching status."""
        return JSONResponse(
            status_code=ERROR_STATUS.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    def respond(response: Any):
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameStateResponse,
        tags=["Games"],
        summary="Start a new game",
    )
    async def create_game(
        request: Annotated[Optional[CreateGameRequest], Body()] = None,
    ) -> GameStateResponse:
        """
        Start a new game.

        Pass a `seed` to replay a known dungeon; omit it for a random one.
        The seed is reported back either way.
        """
        return api_service.create_game(request or CreateGameRequest())

    @app.get(
        "/api/v1/games",
        response_model=GameListResponse,
        tags=["Games"],
        summary="List games",
    )
    async def list_games() -> GameListResponse:
        return api_service.list_games()

    @app.post(
        "/api/v1/games/restore",
        response_model=GameStateResponse,
        responses={422: {"model": ErrorResponse}},
        tags=["Persistence"],
        summary="Restore a game from a snapshot",
    )
    async def restore_game(
        snapshot: Annotated[dict[str, Any], Body(description="Record from GET /snapshot")],
    ) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.restore_game(snapshot))

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get game state",
    )
    async def get_game(game_id: str) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.get_game(game_id))

    @app.delete(
        "/api/v1/games/{game_id}",
        response_model=EndGameResponse,
        tags=["Games"],
        summary="End a game",
    )
    async def end_game(game_id: str) -> EndGameResponse:
        """End a game and release it."""
        return api_service.end_game(game_id)

    @app.post(
        "/api/v1/games/{game_id}/replay",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Start a new game over the same dungeon",
    )
    async def replay_game(game_id: str) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.replay_game(game_id))

    # =========================================================================
    # Move Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games/{game_id}/draw",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Moves"],
        summary="Draw a room",
    )
    async def draw_room(game_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.draw_room(game_id))

    @app.post(
        "/api/v1/games/{game_id}/avoid",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Moves"],
        summary="Avoid the current room",
    )
    async def avoid_room(game_id: str) -> Union[ActionResponse, JSONResponse]:
        """Send the room to the bottom of the deck. Not allowed twice in a row."""
        return respond(api_service.avoid_room(game_id))

    @app.post(
        "/api/v1/games/{game_id}/select/{index}",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Moves"],
        summary="Toggle selection of a room card",
    )
    async def select_card(
        game_id: str,
        index: Annotated[int, Path(description="Room position (0-3)")],
    ) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.select_card(game_id, index))

    @app.post(
        "/api/v1/games/{game_id}/face",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Moves"],
        summary="Face the room with the 3 selected cards",
    )
    async def face_room(game_id: str) -> Union[ActionResponse, JSONResponse]:
        """Resolve the selected cards in selection order; the 4th is carried."""
        return respond(api_service.face_room(game_id))

    # =========================================================================
    # Query Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/games/{game_id}/check/{index}",
        response_model=ResolveCheckResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Queries"],
        summary="Advisory check before resolving a room card",
    )
    async def check_card(game_id: str, index: int) -> Union[ResolveCheckResponse, JSONResponse]:
        return respond(api_service.check_card(game_id, index))

    @app.get(
        "/api/v1/games/{game_id}/log",
        response_model=EventLogResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Queries"],
        summary="Get the event log",
    )
    async def get_log(game_id: str) -> Union[EventLogResponse, JSONResponse]:
        return respond(api_service.get_log(game_id))

    @app.get(
        "/api/v1/games/{game_id}/snapshot",
        response_model=GameSnapshot,
        responses={404: {"model": ErrorResponse}},
        tags=["Persistence"],
        summary="Get a snapshot record of the game",
    )
    async def get_snapshot(game_id: str) -> Union[GameSnapshot, JSONResponse]:
        return respond(api_service.get_snapshot(game_id))

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service="scoundrel-engine",
            version=__version__,
        )

    return app


# For running directly: uvicorn scoundrel.api.app:app
app = create_app()
