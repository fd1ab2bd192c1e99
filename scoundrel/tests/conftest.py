"""
Pytest fixtures for Scoundrel tests.
"""

import pytest

from ..engine_core.game import Game
from .factories import rigged_state


@pytest.fixture
def new_game() -> Game:
    """A seeded game before the first room is drawn."""
    return Game(seed=42)


@pytest.fixture
def seeded_game() -> Game:
    """A seeded game with its first room drawn."""
    game = Game(seed=42)
    game.draw_room()
    return game


@pytest.fixture
def rigged_game():
    """Factory for games with hand-placed cards."""
    def _build(room, **kwargs) -> Game:
        return Game(state=rigged_state(room, **kwargs))
    return _build


@pytest.fixture
def select():
    """Select room indices in the given order."""
    def _select(game: Game, *indices: int) -> None:
        for index in indices:
            assert game.select_card(index)
    return _select
