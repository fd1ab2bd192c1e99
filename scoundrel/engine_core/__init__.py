"""
Engine Core - Deterministic Scoundrel rules.

The engine is the runtime that:
1. Builds and shuffles the 44-card dungeon
2. Manages GameState through the Game state machine
3. Resolves weapons, potions and monsters
4. Scores finished games
5. Saves and restores validated snapshots
"""

from .cards import Card, CardType, Suit, RANKS, card_type, create_deck, make_card
from .shuffle import Shuffler, shuffle, new_seed
from .state import GameState, GamePhase, EventType, EventLog, LogEntry, Weapon
from .game import Game, ResolveCheck
from .snapshot import GameSnapshot, SnapshotError
from .action import Action, ActionType, ActionResult
from .reducer import Reducer, apply_action
from .action_generator import legal_actions, is_legal

__all__ = [
    "Card",
    "CardType",
    "Suit",
    "RANKS",
    "card_type",
    "create_deck",
    "make_card",
    "Shuffler",
    "shuffle",
    "new_seed",
    "GameState",
    "GamePhase",
    "EventType",
    "EventLog",
    "LogEntry",
    "Weapon",
    "Game",
    "ResolveCheck",
    "GameSnapshot",
    "SnapshotError",
    "Action",
    "ActionType",
    "ActionResult",
    "Reducer",
    "apply_action",
    "legal_actions",
    "is_legal",
]
