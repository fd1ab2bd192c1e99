"""
Action System - Actions and results.

Actions give every driver (CLI, API, tests, bots) one vocabulary for
talking to the Game. Each maps onto one Game operation.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .state import LogEntry


class ActionType(Enum):
    """Types of actions in the system."""
    RESET = "reset"
    DRAW_ROOM = "draw_room"
    AVOID_ROOM = "avoid_room"
    SELECT_CARD = "select_card"
    FACE_ROOM = "face_room"


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to a game.

    index is used by SELECT_CARD, seed by RESET.
    """
    action_type: ActionType
    index: int | None = None
    seed: int | None = None

    @classmethod
    def reset(cls, seed: int | None = None) -> Action:
        return cls(action_type=ActionType.RESET, seed=seed)

    @classmethod
    def draw(cls) -> Action:
        return cls(action_type=ActionType.DRAW_ROOM)

    @classmethod
    def avoid(cls) -> Action:
        return cls(action_type=ActionType.AVOID_ROOM)

    @classmethod
    def select(cls, index: int) -> Action:
        return cls(action_type=ActionType.SELECT_CARD, index=index)

    @classmethod
    def face(cls) -> Action:
        return cls(action_type=ActionType.FACE_ROOM)

    def describe(self) -> str:
        if self.action_type == ActionType.SELECT_CARD:
            return f"select card {self.index}"
        if self.action_type == ActionType.RESET and self.seed is not None:
            return f"reset with seed {self.seed}"
        return self.action_type.value.replace("_", " ")


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action succeeded
    - Errors (if refused)
    - Event log entries written while it ran (for UI updates)
    """
    success: bool
    error: str | None = None
    error_code: str | None = None
    events: list[LogEntry] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def ok(cls, events: list[LogEntry] | None = None) -> ActionResult:
        return cls(success=True, events=events or [])
