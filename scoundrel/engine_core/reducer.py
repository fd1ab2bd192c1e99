"""
Reducer - Applies actions to a game.

Every driver goes through apply_action() so that refusals come back in
one shape: an ActionResult with a reason and an error code, never an
exception.

Error codes:
- GAME_OVER: the game has ended; only RESET is accepted
- INVALID_ACTION: the move is not allowed in the current state
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from .action import Action, ActionType, ActionResult
from .game import Game
from .state import GamePhase, CARDS_TO_FACE, ROOM_SIZE

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Applies actions to one Game.

    Holds no state of its own; everything lives on the Game.
    """
    game: Game

    def apply(self, action: Action) -> ActionResult:
        """
        Apply an action to the game.

        Returns ActionResult with the log entries it produced, or the
        reason it was refused.
        """
        validation_error = self._validate_action(action)
        if validation_error:
            error, code = validation_error
            logger.debug(f"Refused {action.describe()}: {error}")
            return ActionResult.failure(error, error_code=code)

        handler = self._get_handler(action.action_type)
        log_start = len(self.game.state.event_log)
        handler(action)

        return ActionResult.ok(events=self.game.state.event_log.since(log_start))

    def _validate_action(self, action: Action) -> tuple[str, str] | None:
        """
        Check that an action is legal in the current state.

        Returns (message, error code) if invalid, None if valid.
        """
        s = self.game.state

        if action.action_type == ActionType.RESET:
            return None

        if s.game_over:
            return "Game is over - no actions allowed", "GAME_OVER"

        if action.action_type == ActionType.DRAW_ROOM:
            if s.phase != GamePhase.NOT_STARTED:
                return "Room already drawn - avoid or face it", "INVALID_ACTION"

        if action.action_type == ActionType.AVOID_ROOM:
            if not s.can_avoid:
                return "Cannot avoid two rooms in a row", "INVALID_ACTION"
            if len(s.room) != ROOM_SIZE:
                return f"Can only avoid a full room ({len(s.room)} cards)", "INVALID_ACTION"

        if action.action_type == ActionType.SELECT_CARD:
            if action.index is None or not 0 <= action.index < len(s.room):
                return f"No card at index {action.index}", "INVALID_ACTION"

        if action.action_type == ActionType.FACE_ROOM:
            if len(s.selected_cards) != CARDS_TO_FACE:
                return (
                    f"Select exactly {CARDS_TO_FACE} cards to face the room "
                    f"({len(s.selected_cards)} selected)",
                    "INVALID_ACTION",
                )

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.RESET: self._handle_reset,
            ActionType.DRAW_ROOM: self._handle_draw,
            ActionType.AVOID_ROOM: self._handle_avoid,
            ActionType.SELECT_CARD: self._handle_select,
            ActionType.FACE_ROOM: self._handle_face,
        }
        if action_type not in handlers:
            raise ValueError(f"No handler for action type: {action_type}")
        return handlers[action_type]

    def _handle_reset(self, action: Action) -> None:
        self.game.reset(action.seed)

    def _handle_draw(self, action: Action) -> None:
        # False here can also mean the deck ran dry, which is a win, not a refusal
        self.game.draw_room()

    def _handle_avoid(self, action: Action) -> None:
        self.game.avoid_room()

    def _handle_select(self, action: Action) -> None:
        self.game.select_card(action.index)

    def _handle_face(self, action: Action) -> None:
        self.game.face_room()


def apply_action(game: Game, action: Action) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    return Reducer(game=game).apply(action)
