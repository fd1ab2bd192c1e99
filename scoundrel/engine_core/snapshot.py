"""
Snapshot - Typed save/restore records for a GameState.

A snapshot is the only way state enters the engine from outside. Records
are validated before a GameState is rebuilt, so a malformed save fails
loudly with SnapshotError instead of producing a half-initialized game.

Only the seed is needed to replay a dungeon from scratch with
Game(seed=...). A snapshot restores a game mid-run, so its zones must hold
exactly the 44 dungeon cards.
"""

from collections import Counter
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from .cards import (
    Card,
    CardType,
    RANKS,
    DECK_SIZE,
    MAX_NUMERIC_VALUE,
    Suit,
    card_type,
    create_deck,
)
from .state import (
    EventLog,
    EventType,
    GameState,
    LogEntry,
    Weapon,
    CARDS_TO_FACE,
    MAX_HEALTH,
    ROOM_SIZE,
)

SNAPSHOT_VERSION = 1


class SnapshotError(ValueError):
    """Raised when a snapshot record cannot be turned back into a game."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Invalid snapshot with {len(errors)} error(s): {'; '.join(errors)}")


# =============================================================================
# Records
# =============================================================================

class CardRecord(BaseModel):
    """A card as stored in a snapshot."""
    suit: Suit
    rank: str
    value: int

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_rank(self):
        if self.rank not in RANKS:
            raise ValueError(f"unknown rank {self.rank!r}")
        if RANKS[self.rank] != self.value:
            raise ValueError(f"rank {self.rank} has value {RANKS[self.rank]}, not {self.value}")
        if self.suit not in (Suit.CLUBS, Suit.SPADES) and self.value > MAX_NUMERIC_VALUE:
            raise ValueError(f"{self.suit.value} cards stop at {MAX_NUMERIC_VALUE}")
        return self

    @classmethod
    def from_card(cls, card: Card) -> "CardRecord":
        return cls(suit=card.suit, rank=card.rank, value=card.value)

    def to_card(self) -> Card:
        return Card(suit=self.suit, rank=self.rank, value=self.value)


class WeaponRecord(BaseModel):
    """The equipped weapon and its kill history."""
    card: CardRecord
    last_defeated: Optional[int] = Field(None, ge=2, le=14)
    defeated_monsters: list[CardRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_types(self):
        if card_type(self.card.to_card()) != CardType.WEAPON:
            raise ValueError("weapon card must be a diamond")
        for monster in self.defeated_monsters:
            if card_type(monster.to_card()) != CardType.MONSTER:
                raise ValueError("defeated_monsters may only hold monsters")
        if self.defeated_monsters and self.last_defeated != self.defeated_monsters[-1].value:
            raise ValueError("last_defeated must match the most recent defeated monster")
        return self


class LogEntryRecord(BaseModel):
    """An event log entry."""
    message: str
    type: EventType = EventType.INFO
    timestamp: int = 0


class GameSnapshot(BaseModel):
    """Complete, serializable game state."""
    version: int = SNAPSHOT_VERSION
    seed: int

    health: int = Field(MAX_HEALTH, ge=0)
    max_health: int = Field(MAX_HEALTH, ge=1)
    turn: int = Field(0, ge=0)

    deck: list[CardRecord] = Field(default_factory=list)
    discard: list[CardRecord] = Field(default_factory=list)
    room: list[CardRecord] = Field(default_factory=list, max_length=ROOM_SIZE)
    weapon: Optional[WeaponRecord] = None
    carried_card: Optional[CardRecord] = None

    can_avoid: bool = True
    potion_used_this_turn: bool = False
    selected_cards: list[int] = Field(default_factory=list, max_length=CARDS_TO_FACE)

    game_over: bool = False
    game_won: bool = False
    defeating_card: Optional[CardRecord] = None
    final_score: Optional[int] = None

    event_log: list[LogEntryRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_consistency(self):
        if self.version != SNAPSHOT_VERSION:
            raise ValueError(f"unsupported snapshot version {self.version}")
        if self.health > self.max_health:
            raise ValueError("health exceeds max_health")
        if len(set(self.selected_cards)) != len(self.selected_cards):
            raise ValueError("selected_cards contains duplicates")
        for index in self.selected_cards:
            if not 0 <= index < len(self.room):
                raise ValueError(f"selected index {index} is outside the room")
        if self.game_won and not self.game_over:
            raise ValueError("game_won requires game_over")
        self._check_cards()
        return self

    def _check_cards(self):
        """Every zone together must hold exactly the dungeon cards."""
        held = [*self.deck, *self.discard, *self.room]
        if self.weapon:
            held += [self.weapon.card, *self.weapon.defeated_monsters]
        if self.carried_card:
            held.append(self.carried_card)

        found = Counter((c.suit, c.rank) for c in held)
        expected = Counter((c.suit, c.rank) for c in create_deck())
        if found != expected:
            missing = sum((expected - found).values())
            extra = sum((found - expected).values())
            raise ValueError(
                f"cards must be the {DECK_SIZE}-card dungeon "
                f"({missing} missing, {extra} duplicated or extra)"
            )


# =============================================================================
# Conversion
# =============================================================================

def snapshot_from_state(state: GameState) -> GameSnapshot:
    """Capture a GameState as a GameSnapshot."""
    weapon = None
    if state.weapon:
        weapon = WeaponRecord(
            card=CardRecord.from_card(state.weapon.card),
            last_defeated=state.weapon.last_defeated,
            defeated_monsters=[CardRecord.from_card(c) for c in state.weapon.defeated_monsters],
        )

    return GameSnapshot(
        seed=state.seed,
        health=state.health,
        max_health=state.max_health,
        turn=state.turn,
        deck=[CardRecord.from_card(c) for c in state.deck],
        discard=[CardRecord.from_card(c) for c in state.discard],
        room=[CardRecord.from_card(c) for c in state.room],
        weapon=weapon,
        carried_card=CardRecord.from_card(state.carried_card) if state.carried_card else None,
        can_avoid=state.can_avoid,
        potion_used_this_turn=state.potion_used_this_turn,
        selected_cards=list(state.selected_cards),
        game_over=state.game_over,
        game_won=state.game_won,
        defeating_card=CardRecord.from_card(state.defeating_card) if state.defeating_card else None,
        final_score=state.final_score,
        event_log=[
            LogEntryRecord(message=e.message, type=e.type, timestamp=e.timestamp)
            for e in state.event_log
        ],
    )


def state_from_snapshot(data: Any) -> GameState:
    """
    Validate a snapshot and rebuild the GameState it describes.

    Accepts a GameSnapshot or anything GameSnapshot.model_validate accepts.
    """
    if isinstance(data, GameSnapshot):
        snapshot = data
    else:
        try:
            snapshot = GameSnapshot.model_validate(data)
        except ValidationError as e:
            raise SnapshotError([
                f"{'.'.join(str(p) for p in err['loc']) or 'snapshot'}: {err['msg']}"
                for err in e.errors()
            ]) from e

    weapon = None
    if snapshot.weapon:
        weapon = Weapon(
            card=snapshot.weapon.card.to_card(),
            last_defeated=snapshot.weapon.last_defeated,
            defeated_monsters=[c.to_card() for c in snapshot.weapon.defeated_monsters],
        )

    return GameState(
        seed=snapshot.seed,
        health=snapshot.health,
        max_health=snapshot.max_health,
        turn=snapshot.turn,
        deck=[c.to_card() for c in snapshot.deck],
        discard=[c.to_card() for c in snapshot.discard],
        room=[c.to_card() for c in snapshot.room],
        weapon=weapon,
        carried_card=snapshot.carried_card.to_card() if snapshot.carried_card else None,
        can_avoid=snapshot.can_avoid,
        potion_used_this_turn=snapshot.potion_used_this_turn,
        selected_cards=list(snapshot.selected_cards),
        game_over=snapshot.game_over,
        game_won=snapshot.game_won,
        defeating_card=snapshot.defeating_card.to_card() if snapshot.defeating_card else None,
        final_score=snapshot.final_score,
        event_log=EventLog(entries=[
            LogEntry(message=e.message, type=e.type, timestamp=e.timestamp)
            for e in snapshot.event_log
        ]),
    )
