"""
Cards - Card values, the derived card type, and the dungeon deck.

The dungeon is a standard deck with jokers, red face cards and red aces
removed:
- Clubs and spades 2..A are monsters (value 2-14)
- Diamonds 2..10 are weapons
- Hearts 2..10 are potions
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class Suit(Enum):
    """Card suits."""
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    @property
    def symbol(self) -> str:
        return SUIT_SYMBOLS[self]


SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}


class CardType(Enum):
    """What a card does when resolved. Derived from the suit, never stored."""
    MONSTER = "monster"
    WEAPON = "weapon"
    POTION = "potion"


# Rank label -> numeric value, in construction order
RANKS: dict[str, int] = {
    "2": 2, "3": 3, "4": 4, "5": 5, "6": 6, "7": 7, "8": 8, "9": 9, "10": 10,
    "J": 11, "Q": 12, "K": 13, "A": 14,
}

MONSTER_SUITS = (Suit.CLUBS, Suit.SPADES)
MAX_NUMERIC_VALUE = 10  # weapons and potions stop at 10
DECK_SIZE = 44


@dataclass(frozen=True)
class Card:
    """
    An immutable card.

    Value equality is kept for convenience (the dungeon never holds two
    cards with the same suit and rank), but the engine locates cards in
    the room by position or identity, never by value.
    """
    suit: Suit
    rank: str
    value: int

    @property
    def type(self) -> CardType:
        return card_type(self)

    @property
    def label(self) -> str:
        """Short display label, e.g. '♠10'."""
        return f"{self.suit.symbol}{self.rank}"

    def __str__(self) -> str:
        return self.label


def card_type(card: Card) -> CardType:
    """Single source of truth for the type of a card."""
    if card.suit in MONSTER_SUITS:
        return CardType.MONSTER
    if card.suit == Suit.DIAMONDS:
        return CardType.WEAPON
    return CardType.POTION


def make_card(suit: Suit, rank: str) -> Card:
    """Build a card from suit and rank label."""
    if rank not in RANKS:
        raise ValueError(f"Unknown rank: {rank!r}")
    return Card(suit=suit, rank=rank, value=RANKS[rank])


def create_deck() -> list[Card]:
    """
    Create the 44-card dungeon in construction order.

    Order: clubs 2..A, spades 2..A, diamonds 2..10, hearts 2..10.
    The order is fixed so that a seeded shuffle is reproducible.
    """
    deck: list[Card] = []

    for suit in MONSTER_SUITS:
        for rank in RANKS:
            deck.append(make_card(suit, rank))

    for suit in (Suit.DIAMONDS, Suit.HEARTS):
        for rank, value in RANKS.items():
            if value <= MAX_NUMERIC_VALUE:
                deck.append(make_card(suit, rank))

    return deck
