"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine actions
2. Manages sessions
3. Formats responses for front ends

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging

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
from ..engine_core import (
    Action,
    Card,
    GameSnapshot,
    LogEntry,
    SnapshotError,
    apply_action,
    legal_actions,
)
from ..session import Session, SessionManager

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        state = service.create_game(CreateGameRequest(seed=42))
        service.select_card(state.game_id, 0)
        service.select_card(state.game_id, 1)
        service.select_card(state.game_id, 2)
        result = service.face_room(state.game_id)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # =========================================================================
    # Game lifecycle
    # =========================================================================

    def create_game(self, request: CreateGameRequest) -> GameStateResponse:
        """Start a new game."""
        session = self.session_manager.create_session(
            seed=request.seed,
            auto_draw=request.auto_draw,
        )
        return self._state_response(session)

    def get_game(self, game_id: str) -> GameStateResponse | ErrorResponse:
        session = self.session_manager.get_session(game_id)
        if not session:
            return self._not_found(game_id)
        return self._state_response(session)

    def end_game(self, game_id: str) -> EndGameResponse:
        success = self.session_manager.end_session(game_id)
        return EndGameResponse(success=success, game_id=game_id)

    def list_games(self) -> GameListResponse:
        games = self.session_manager.list_sessions()
        return GameListResponse(games=games, count=len(games))

    def replay_game(self, game_id: str) -> GameStateResponse | ErrorResponse:
        """Start a new game over the same dungeon."""
        session = self.session_manager.replay_session(game_id)
        if not session:
            return self._not_found(game_id)
        return self._state_response(session)

    # =========================================================================
    # Moves
    # =========================================================================

    def apply(self, game_id: str, action: Action) -> ActionResponse | ErrorResponse:
        """Apply any action and report what happened."""
        session = self.session_manager.get_session(game_id)
        if not session:
            return self._not_found(game_id)

        result = apply_action(session.game, action)
        return ActionResponse(
            game_id=game_id,
            success=result.success,
            error=result.error,
            error_code=ErrorCode(result.error_code) if result.error_code else None,
            events=[self._log_entry_info(e) for e in result.events],
            game_state=self._state_response(session),
        )

    def draw_room(self, game_id: str) -> ActionResponse | ErrorResponse:
        return self.apply(game_id, Action.draw())

    def avoid_room(self, game_id: str) -> ActionResponse | ErrorResponse:
        return self.apply(game_id, Action.avoid())

    def select_card(self, game_id: str, index: int) -> ActionResponse | ErrorResponse:
        return self.apply(game_id, Action.select(index))

    def face_room(self, game_id: str) -> ActionResponse | ErrorResponse:
        return self.apply(game_id, Action.face())

    # =========================================================================
    # Queries
    # =========================================================================

    def check_card(self, game_id: str, index: int) -> ResolveCheckResponse | ErrorResponse:
        """Advisory check for a room card."""
        session = self.session_manager.get_session(game_id)
        if not session:
            return self._not_found(game_id)

        room = session.game.state.room
        if not 0 <= index < len(room):
            return ErrorResponse(
                error=f"No card at index {index}",
                error_code=ErrorCode.INVALID_ACTION,
                details={"room_size": len(room)},
            )

        card = room[index]
        check = session.game.can_resolve_card(card)
        return ResolveCheckResponse(
            game_id=game_id,
            index=index,
            card=self._card_info(card),
            can_resolve=check.can_resolve,
            reason=check.reason,
            force_bare_handed=check.force_bare_handed,
        )

    def get_log(self, game_id: str) -> EventLogResponse | ErrorResponse:
        session = self.session_manager.get_session(game_id)
        if not session:
            return self._not_found(game_id)
        entries = [self._log_entry_info(e) for e in session.game.state.event_log]
        return EventLogResponse(game_id=game_id, entries=entries, count=len(entries))

    # =========================================================================
    # Persistence
    # =========================================================================

    def get_snapshot(self, game_id: str) -> GameSnapshot | ErrorResponse:
        session = self.session_manager.get_session(game_id)
        if not session:
            return self._not_found(game_id)
        return session.game.snapshot()

    def restore_game(self, data: Any) -> GameStateResponse | ErrorResponse:
        """Create a game from a snapshot record."""
        try:
            session = self.session_manager.restore_session(data)
        except SnapshotError as e:
            logger.warning(f"Rejected snapshot: {e}")
            return ErrorResponse(
                error="Snapshot failed validation",
                error_code=ErrorCode.INVALID_SNAPSHOT,
                details={"errors": e.errors},
            )
        return self._state_response(session)

    # =========================================================================
    # Conversion helpers
    # =========================================================================

    def _state_response(self, session: Session) -> GameStateResponse:
        game = session.game
        s = game.state

        room = []
        for index, card in enumerate(s.room):
            check = game.can_resolve_card(card)
            room.append(RoomCardInfo(
                index=index,
                card=self._card_info(card),
                selected=index in s.selected_cards,
                selection_order=(
                    s.selected_cards.index(index) + 1 if index in s.selected_cards else None
                ),
                can_resolve=check.can_resolve,
                reason=check.reason,
                force_bare_handed=check.force_bare_handed,
            ))

        weapon = None
        if s.weapon:
            weapon = WeaponInfo(
                card=self._card_info(s.weapon.card),
                value=s.weapon.value,
                last_defeated=s.weapon.last_defeated,
                defeated_monsters=[self._card_info(c) for c in s.weapon.defeated_monsters],
            )

        return GameStateResponse(
            game_id=session.session_id,
            status=GameStatus(s.phase.value),
            seed=s.seed,
            health=s.health,
            max_health=s.max_health,
            turn=s.turn,
            deck_count=len(s.deck),
            discard_count=len(s.discard),
            room=room,
            weapon=weapon,
            can_avoid=s.can_avoid,
            has_carried_card=s.has_carried_card,
            selected_cards=list(s.selected_cards),
            game_over=s.game_over,
            game_won=s.game_won,
            defeating_card=self._card_info(s.defeating_card) if s.defeating_card else None,
            score=game.get_score(),
            legal_actions=[a.describe() for a in legal_actions(game)],
        )

    @staticmethod
    def _card_info(card: Card) -> CardInfo:
        return CardInfo(
            suit=card.suit.value,
            rank=card.rank,
            value=card.value,
            type=card.type.value,
            label=card.label,
        )

    @staticmethod
    def _log_entry_info(entry: LogEntry) -> LogEntryInfo:
        return LogEntryInfo(message=entry.message, type=entry.type.value, timestamp=entry.timestamp)

    @staticmethod
    def _not_found(game_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Game {game_id} not found",
            error_code=ErrorCode.GAME_NOT_FOUND,
        )
