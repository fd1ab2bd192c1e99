"""
Game - The Scoundrel state machine.

The Game is the single point of state mutation. Drivers (CLI, API,
tests) call its operations; foreseeable misuse returns False instead of
raising.

Turn structure:
1. draw_room() fills the room to 4 cards (carried card first)
2. The player either avoids the room (all 4 to the bottom of the deck)
   or selects 3 cards and faces the room
3. Facing resolves the 3 cards in selection order; the 4th is carried
4. The game is won when the deck runs dry before a room fills,
   and lost when health reaches 0
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any
import logging

from .cards import Card, CardType, card_type, create_deck
from .shuffle import new_seed, shuffle
from .state import (
    GameState,
    GamePhase,
    EventType,
    LogEntry,
    Weapon,
    MAX_HEALTH,
    ROOM_SIZE,
    CARDS_TO_FACE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveCheck:
    """
    Advisory answer to "what happens if this card is resolved now?".

    Never blocks resolution; it only lets a UI warn ahead of time.
    """
    can_resolve: bool
    reason: str | None = None
    force_bare_handed: bool = False


class Game:
    """
    One game of Scoundrel.

    Usage:
        game = Game(seed=42)
        game.draw_room()
        for index in (0, 2, 3):
            game.select_card(index)
        game.face_room()
    """

    def __init__(self, seed: int | None = None, state: GameState | None = None):
        if state is not None:
            self.state = state
        else:
            self.reset(seed)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def reset(self, seed: int | None = None) -> None:
        """(Re)start the game. The seed is recorded even when randomized."""
        seed = seed if seed is not None else new_seed()
        self.state = GameState(
            seed=seed,
            health=MAX_HEALTH,
            max_health=MAX_HEALTH,
            deck=shuffle(create_deck(), seed),
        )
        self._log("Game started! Good luck, Scoundrel.", EventType.INFO)
        logger.debug(f"Reset game with seed {seed}")

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    # =========================================================================
    # Room operations
    # =========================================================================

    def draw_room(self) -> bool:
        """
        Fill a fresh room to 4 cards.

        Returns False if the game is over, if the current room has not been
        avoided or faced yet, or if the deck ran dry before the room filled
        (which wins the game).
        """
        s = self.state
        if s.game_over or s.room:
            return False

        s.potion_used_this_turn = False
        s.selected_cards = []

        if s.carried_card is not None:
            s.room.append(s.carried_card)
            self._log(f"Carried {s.carried_card.label} to new room", EventType.INFO)
            s.carried_card = None

        while len(s.room) < ROOM_SIZE and s.deck:
            s.room.append(s.deck.pop(0))

        s.turn += 1

        if len(s.room) < ROOM_SIZE and not s.deck:
            self.end_game(won=True)
            return False

        self._log(f"Turn {s.turn}: Entered new room with {len(s.room)} cards", EventType.TURN)
        logger.debug(f"Turn {s.turn}: room {[c.label for c in s.room]}, deck {len(s.deck)}")
        return True

    def avoid_room(self) -> bool:
        """Send the whole room to the bottom of the deck and draw a new one."""
        s = self.state
        if not s.can_avoid or s.game_over or len(s.room) != ROOM_SIZE:
            return False

        s.deck.extend(s.room)
        s.room = []
        s.can_avoid = False
        s.carried_card = None

        self._log("Avoided the room! All cards moved to bottom of deck.", EventType.WARNING)

        self.draw_room()
        return True

    def select_card(self, index: int) -> bool:
        """
        Toggle selection of a room card.

        Selection is capped at 3; a 4th selection is ignored without
        failing. Order of selection is the order of resolution.
        """
        s = self.state
        if s.game_over or not 0 <= index < len(s.room):
            return False

        if index in s.selected_cards:
            s.selected_cards.remove(index)
        elif len(s.selected_cards) < CARDS_TO_FACE:
            s.selected_cards.append(index)

        return True

    def face_room(self) -> bool:
        """Resolve the 3 selected cards in selection order and carry the 4th."""
        s = self.state
        if len(s.selected_cards) != CARDS_TO_FACE or s.game_over:
            return False

        layout = list(s.room)
        selected = list(s.selected_cards)

        # The unselected card is carried and never counts toward a loss score
        unselected = [i for i in range(len(layout)) if i not in selected]
        if unselected:
            s.carried_card = layout[unselected[0]]
            self._take_from_room(s.carried_card)

        for index in selected:
            card = layout[index]
            self._take_from_room(card)
            self.resolve(card)
            if s.game_over:
                break

        s.can_avoid = True
        s.selected_cards = []

        if not s.game_over:
            self.draw_room()

        return True

    # =========================================================================
    # Card resolution
    # =========================================================================

    def can_resolve_card(self, card: Card) -> ResolveCheck:
        s = self.state
        kind = card_type(card)

        if kind == CardType.POTION and s.potion_used_this_turn:
            return ResolveCheck(can_resolve=False, reason="Only one potion per room")

        if kind == CardType.MONSTER and s.weapon and not s.weapon.can_fight(card):
            return ResolveCheck(
                can_resolve=True,
                reason=f"Monster too strong for weapon ({card.value} > {s.weapon.last_defeated})",
                force_bare_handed=True,
            )

        return ResolveCheck(can_resolve=True)

    def resolve(self, card: Card) -> None:
        """Resolve one card according to its type."""
        handlers = {
            CardType.WEAPON: self.resolve_weapon,
            CardType.POTION: self.resolve_potion,
            CardType.MONSTER: self.resolve_monster,
        }
        handlers[card_type(card)](card)

    def resolve_weapon(self, card: Card) -> None:
        """Equip a weapon. The previous weapon and its kills are discarded."""
        s = self.state
        if s.weapon:
            old = s.weapon
            s.discard.append(old.card)
            s.discard.extend(old.defeated_monsters)
            self._log(
                f"Discarded old weapon {old.card.label} with "
                f"{len(old.defeated_monsters)} defeated monsters",
                EventType.INFO,
            )

        s.weapon = Weapon(card=card)
        self._log(f"Equipped weapon {card.label} (value {card.value})", EventType.SUCCESS)

    def resolve_potion(self, card: Card) -> None:
        """Heal, unless a potion was already used in this room."""
        s = self.state
        if s.potion_used_this_turn:
            s.discard.append(card)
            self._log(f"{card.label} discarded - only one potion per room", EventType.WARNING)
            return

        old_health = s.health
        s.health = min(s.max_health, s.health + card.value)
        healed = s.health - old_health

        s.potion_used_this_turn = True
        s.discard.append(card)

        self._log(
            f"Used potion {card.label} - healed {healed} HP ({old_health} → {s.health})",
            EventType.SUCCESS,
        )

    def resolve_monster(self, card: Card) -> None:
        """
        Fight a monster.

        Example: with ♦7, last defeated 9:
          - ♠8: 8-7=1 damage, stacked on weapon (last defeated -> 8)
          - ♣6: 0 damage, stacked on weapon (last defeated -> 6)
          - ♠10: 10 > 6, fought bare-handed for 10 damage
        """
        s = self.state
        damage = card.value
        weapon = s.weapon

        if weapon and weapon.can_fight(card):
            damage = max(0, card.value - weapon.value)
            weapon.defeated_monsters.append(card)
            weapon.last_defeated = card.value
            self._log(
                f"Fought {card.label} ({card.value}) with {weapon.card.label} - took "
                f"{damage} damage, defeated monster (last: {weapon.last_defeated})",
                EventType.SUCCESS if damage == 0 else EventType.WARNING,
            )
        elif weapon:
            s.discard.append(card)
            self._log(
                f"{card.label} ({card.value}) too strong for weapon (last defeated: "
                f"{weapon.last_defeated}) - fought bare-handed, took {damage} damage!",
                EventType.DANGER,
            )
        else:
            s.discard.append(card)
            self._log(
                f"Fought {card.label} ({card.value}) bare-handed - took {damage} damage!",
                EventType.DANGER,
            )

        if damage > 0:
            s.health -= damage
            if s.health <= 0:
                s.health = 0
                s.defeating_card = card
                self.end_game(won=False)

    # =========================================================================
    # Scoring
    # =========================================================================

    def end_game(self, won: bool) -> None:
        """Mark the game finished and freeze the score."""
        s = self.state
        s.game_over = True
        s.game_won = won

        if won:
            s.final_score = max(0, s.health)
            self._log(
                f"Victory! You cleared the dungeon with {s.health} HP remaining. "
                f"Score: {s.final_score}",
                EventType.SUCCESS,
            )
        else:
            remaining = s.remaining_monsters()
            s.final_score = -sum(c.value for c in remaining)
            self._log(
                f"Defeated! Health: {s.health}. Score: {s.final_score} "
                f"({len(remaining)} monsters remaining)",
                EventType.DANGER,
            )

        logger.info(f"Game {s.seed} over on turn {s.turn}: won={won}, score={s.final_score}")

    def get_score(self) -> int:
        """0 while in progress, otherwise the score frozen at game end."""
        s = self.state
        if not s.game_over:
            return 0
        if s.final_score is None:
            # Terminal state restored from a snapshot without a frozen score
            return s.health if s.game_won else -sum(c.value for c in s.remaining_monsters())
        return s.final_score

    # =========================================================================
    # Persistence
    # =========================================================================

    def snapshot(self):
        """Typed, serializable record of the full state."""
        from .snapshot import snapshot_from_state
        return snapshot_from_state(self.state)

    @classmethod
    def restore(cls, data: Any) -> Game:
        """
        Rebuild a game from a GameSnapshot or a plain mapping.

        Raises SnapshotError if the record is malformed.
        """
        from .snapshot import state_from_snapshot
        return cls(state=state_from_snapshot(data))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _take_from_room(self, card: Card) -> None:
        """Remove this exact card object from the room."""
        room = self.state.room
        for i, c in enumerate(room):
            if c is card:
                del room[i]
                return

    def _log(self, message: str, event_type: EventType) -> LogEntry:
        return self.state.event_log.append(message, event_type)
