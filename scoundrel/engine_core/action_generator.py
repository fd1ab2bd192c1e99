"""
Action Generator - Enumerates the legal actions of a game.

Used by:
1. The CLI and API to show available moves
2. Validation (is this action in legal_actions?)
3. Simple bots and fuzz tests
"""

from __future__ import annotations

from .action import Action, ActionType
from .game import Game
from .state import GamePhase, CARDS_TO_FACE, ROOM_SIZE


def legal_actions(game: Game) -> list[Action]:
    """
    Generate every action that would be accepted right now.

    Terminal games only accept a reset with the same seed (a replay).
    """
    s = game.state

    if s.phase in (GamePhase.WON, GamePhase.LOST):
        return [Action.reset(s.seed)]

    if s.phase == GamePhase.NOT_STARTED:
        return [Action.draw()]

    actions: list[Action] = []

    if s.can_avoid and len(s.room) == ROOM_SIZE:
        actions.append(Action.avoid())

    # Selecting toggles: selected cards can always be deselected,
    # unselected ones only while there is room in the selection
    for index in range(len(s.room)):
        if index in s.selected_cards or len(s.selected_cards) < CARDS_TO_FACE:
            actions.append(Action.select(index))

    if len(s.selected_cards) == CARDS_TO_FACE:
        actions.append(Action.face())

    return actions


def is_legal(game: Game, action: Action) -> bool:
    """Check if a specific action is legal."""
    for a in legal_actions(game):
        if a.action_type != action.action_type:
            continue
        if a.action_type == ActionType.SELECT_CARD and a.index != action.index:
            continue
        return True
    return False
