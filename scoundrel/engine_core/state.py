"""
Game State - Plain container for everything one run of the dungeon holds.

Design principles:
- Mutable: the Game mutates it in place, one operation at a time
- Serializable: every field maps onto GameSnapshot
- Passive: no rules live here, only data and derived views
"""

from __future__ import annotations
from dataclasses import dataclass, field
from copy import deepcopy
from enum import Enum
import time

from .cards import Card, CardType, card_type

MAX_HEALTH = 20
ROOM_SIZE = 4
CARDS_TO_FACE = 3


class GamePhase(Enum):
    """High-level game phases, derived from the state fields."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"


class EventType(Enum):
    """Category tag for event log entries."""
    INFO = "info"
    TURN = "turn"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class LogEntry:
    """One narrated state transition."""
    message: str
    type: EventType = EventType.INFO
    timestamp: int = 0  # epoch milliseconds


@dataclass
class EventLog:
    """
    Append-only record of state transitions.

    Consumed by the presentation layer; the engine never reads it back.
    """
    entries: list[LogEntry] = field(default_factory=list)

    def append(self, message: str, event_type: EventType = EventType.INFO) -> LogEntry:
        entry = LogEntry(
            message=message,
            type=event_type,
            timestamp=int(time.time() * 1000),
        )
        self.entries.append(entry)
        return entry

    def since(self, index: int) -> list[LogEntry]:
        """Entries appended after the first `index` entries."""
        return self.entries[index:]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)


@dataclass
class Weapon:
    """
    The equipped weapon.

    last_defeated is None until the first kill; after that only monsters
    with value <= last_defeated can be fought with it.
    """
    card: Card
    last_defeated: int | None = None
    defeated_monsters: list[Card] = field(default_factory=list)

    @property
    def value(self) -> int:
        return self.card.value

    def can_fight(self, monster: Card) -> bool:
        return self.last_defeated is None or monster.value <= self.last_defeated


@dataclass
class GameState:
    """
    Complete state of one game at a point in time.

    The Game owns the only reference; drivers read it and act through
    the Game's operations.
    """
    seed: int = 0

    health: int = MAX_HEALTH
    max_health: int = MAX_HEALTH
    turn: int = 0

    # Zones
    deck: list[Card] = field(default_factory=list)
    discard: list[Card] = field(default_factory=list)
    room: list[Card] = field(default_factory=list)
    weapon: Weapon | None = None
    carried_card: Card | None = None

    # Per-room flags
    can_avoid: bool = True
    potion_used_this_turn: bool = False
    selected_cards: list[int] = field(default_factory=list)  # room indices, selection order

    # Terminal state
    game_over: bool = False
    game_won: bool = False
    defeating_card: Card | None = None
    final_score: int | None = None

    event_log: EventLog = field(default_factory=EventLog)

    @property
    def phase(self) -> GamePhase:
        if self.game_over:
            return GamePhase.WON if self.game_won else GamePhase.LOST
        if self.turn == 0:
            return GamePhase.NOT_STARTED
        return GamePhase.IN_PROGRESS

    @property
    def has_carried_card(self) -> bool:
        return self.carried_card is not None

    def remaining_monsters(self) -> list[Card]:
        """Monsters still in the deck and the room."""
        return [
            c for c in [*self.deck, *self.room]
            if card_type(c) == CardType.MONSTER
        ]

    def all_cards(self) -> list[Card]:
        """Every card the state still accounts for, in zone order."""
        cards = [*self.deck, *self.discard, *self.room]
        if self.weapon:
            cards.append(self.weapon.card)
            cards.extend(self.weapon.defeated_monsters)
        if self.carried_card:
            cards.append(self.carried_card)
        return cards

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)
