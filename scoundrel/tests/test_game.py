"""
Tests for the Game state machine.

Tests:
- Reset and drawing rooms
- Avoid and selection rules
- Weapon, potion and monster resolution
- Facing rooms and the carried card
- Scoring
- Card conservation over whole games
"""

from collections import Counter

import pytest

from ..engine_core.cards import CardType, Suit, create_deck
from ..engine_core.game import Game
from ..engine_core.state import EventType, GamePhase, Weapon
from ..engine_core.action_generator import legal_actions
from ..engine_core.reducer import apply_action
from ..engine_core.action import ActionType
from .factories import clubs, diamonds, hearts, spades


class TestReset:
    """Tests for reset()."""

    def test_fresh_state(self, new_game):
        s = new_game.state
        assert s.health == 20
        assert s.max_health == 20
        assert s.turn == 0
        assert len(s.deck) == 44
        assert s.discard == []
        assert s.room == []
        assert s.weapon is None
        assert s.can_avoid
        assert s.carried_card is None
        assert s.selected_cards == []
        assert not s.game_over
        assert not s.game_won
        assert s.defeating_card is None
        assert new_game.phase == GamePhase.NOT_STARTED

    def test_start_log_entry(self, new_game):
        entries = list(new_game.state.event_log)
        assert len(entries) == 1
        assert entries[0].type == EventType.INFO
        assert entries[0].timestamp > 0

    def test_seed_recorded(self, new_game):
        assert new_game.state.seed == 42

    def test_random_seed_recorded(self):
        game = Game()
        assert isinstance(game.state.seed, int)
        replay = Game(seed=game.state.seed)
        assert replay.state.deck == game.state.deck

    def test_same_seed_same_dungeon(self):
        first, second = Game(), Game()
        first.reset(42)
        second.reset(42)
        assert first.state.deck == second.state.deck

        first.draw_room()
        second.draw_room()
        assert first.state.room == second.state.room

    def test_reset_clears_progress(self, seeded_game, select):
        select(seeded_game, 0, 1, 2)
        seeded_game.face_room()
        seeded_game.reset(7)
        assert seeded_game.state.turn == 0
        assert seeded_game.state.seed == 7
        assert len(seeded_game.state.deck) == 44
        assert len(seeded_game.state.event_log) == 1


class TestDrawRoom:
    """Tests for draw_room()."""

    def test_draws_four_from_front(self, new_game):
        top_four = new_game.state.deck[:4]
        assert new_game.draw_room()
        assert new_game.state.room == top_four
        assert len(new_game.state.deck) == 40
        assert new_game.state.turn == 1
        assert new_game.phase == GamePhase.IN_PROGRESS

    def test_turn_log_entry(self, new_game):
        new_game.draw_room()
        last = new_game.state.event_log.entries[-1]
        assert last.type == EventType.TURN
        assert "Turn 1" in last.message
        assert "4 cards" in last.message

    def test_carried_card_comes_first(self, rigged_game):
        carried = hearts(4)
        game = rigged_game([], deck=[clubs(2), clubs(3), clubs(4), clubs(5)])
        game.state.carried_card = carried

        assert game.draw_room()
        assert game.state.room == [carried, clubs(2), clubs(3), clubs(4)]
        assert game.state.carried_card is None
        assert game.state.deck == [clubs(5)]

    def test_resets_per_room_flags(self, rigged_game):
        game = rigged_game([], deck=[clubs(2), clubs(3), clubs(4), clubs(5)])
        game.state.potion_used_this_turn = True
        game.state.selected_cards = [0]

        game.draw_room()
        assert not game.state.potion_used_this_turn
        assert game.state.selected_cards == []

    def test_short_room_wins(self, rigged_game):
        game = rigged_game([], deck=[clubs(2), hearts(3)], health=12, turn=9)

        assert not game.draw_room()
        assert game.state.game_over
        assert game.state.game_won
        assert game.state.turn == 10
        assert game.state.room == [clubs(2), hearts(3)]
        assert game.get_score() == 12

    def test_exactly_four_left_keeps_playing(self, rigged_game):
        game = rigged_game([], deck=[clubs(2), clubs(3), clubs(4), clubs(5)])
        assert game.draw_room()
        assert not game.state.game_over
        assert game.state.deck == []

    def test_occupied_room_not_redrawn(self, seeded_game):
        room = list(seeded_game.state.room)
        assert not seeded_game.draw_room()
        assert seeded_game.state.room == room
        assert len(seeded_game.state.deck) == 40
        assert seeded_game.state.turn == 1

    def test_no_op_after_game_over(self, rigged_game):
        game = rigged_game([], deck=[clubs(2)])
        game.draw_room()
        turn = game.state.turn
        assert not game.draw_room()
        assert game.state.turn == turn


class TestAvoidRoom:
    """Tests for avoid_room()."""

    def test_room_goes_to_bottom_in_order(self, seeded_game):
        room = list(seeded_game.state.room)
        next_four = seeded_game.state.deck[:4]

        assert seeded_game.avoid_room()
        assert seeded_game.state.deck[-4:] == room
        assert seeded_game.state.room == next_four
        assert len(seeded_game.state.deck) == 40
        assert not seeded_game.state.can_avoid
        assert seeded_game.state.turn == 2

    def test_logs_warning(self, seeded_game):
        seeded_game.avoid_room()
        types = [e.type for e in seeded_game.state.event_log]
        assert EventType.WARNING in types

    def test_cannot_avoid_twice_in_a_row(self, seeded_game):
        assert seeded_game.avoid_room()
        before = seeded_game.snapshot()

        assert not seeded_game.avoid_room()
        assert seeded_game.snapshot() == before

    def test_facing_restores_avoid(self, seeded_game, select):
        seeded_game.avoid_room()
        select(seeded_game, 0, 1, 2)
        seeded_game.face_room()
        if not seeded_game.state.game_over:
            assert seeded_game.state.can_avoid
            assert seeded_game.avoid_room()

    def test_needs_full_room(self, rigged_game):
        game = rigged_game([clubs(2), clubs(3), clubs(4)])
        assert not game.avoid_room()

    def test_not_after_game_over(self, rigged_game):
        game = rigged_game([clubs(2), clubs(3), clubs(4), clubs(5)])
        game.state.game_over = True
        assert not game.avoid_room()

    def test_carried_card_becomes_part_of_avoided_room(self, rigged_game, select):
        """The carried card rejoins the room, so avoiding sends it to the deck."""
        deck = [clubs(n) for n in range(2, 10)]
        game = rigged_game([hearts(2), hearts(3), hearts(4), diamonds(5)], deck=deck)
        select(game, 0, 1, 2)
        game.face_room()
        assert game.state.room[0] == diamonds(5)

        assert game.avoid_room()
        assert game.state.carried_card is None
        assert diamonds(5) in game.state.deck


class TestSelectCard:
    """Tests for select_card()."""

    def test_select_and_deselect(self, seeded_game):
        assert seeded_game.select_card(2)
        assert seeded_game.state.selected_cards == [2]
        assert seeded_game.select_card(2)
        assert seeded_game.state.selected_cards == []

    def test_keeps_selection_order(self, seeded_game, select):
        select(seeded_game, 3, 0, 2)
        assert seeded_game.state.selected_cards == [3, 0, 2]

    def test_fourth_selection_ignored(self, seeded_game, select):
        select(seeded_game, 0, 1, 2)
        assert seeded_game.select_card(3)
        assert seeded_game.state.selected_cards == [0, 1, 2]

    def test_deselect_middle(self, seeded_game, select):
        select(seeded_game, 0, 1, 2, 1)
        assert seeded_game.state.selected_cards == [0, 2]

    @pytest.mark.parametrize("index", [4, 10, -1])
    def test_invalid_index(self, seeded_game, index):
        assert not seeded_game.select_card(index)
        assert seeded_game.state.selected_cards == []

    def test_empty_room(self, new_game):
        assert not new_game.select_card(0)

    def test_not_after_game_over(self, seeded_game):
        seeded_game.state.game_over = True
        assert not seeded_game.select_card(0)


class TestCanResolveCard:
    """Tests for the advisory can_resolve_card()."""

    def test_plain_cards(self, rigged_game):
        game = rigged_game([])
        for card in (clubs(9), diamonds(5), hearts(3)):
            check = game.can_resolve_card(card)
            assert check.can_resolve
            assert check.reason is None
            assert not check.force_bare_handed

    def test_second_potion(self, rigged_game):
        game = rigged_game([])
        game.state.potion_used_this_turn = True
        check = game.can_resolve_card(hearts(6))
        assert not check.can_resolve
        assert check.reason == "Only one potion per room"

    def test_monster_too_strong_for_weapon(self, rigged_game):
        weapon = Weapon(card=diamonds(7), last_defeated=9, defeated_monsters=[spades(9)])
        game = rigged_game([], weapon=weapon)
        check = game.can_resolve_card(spades(10))
        assert check.can_resolve
        assert check.force_bare_handed
        assert "10 > 9" in check.reason

    def test_fresh_weapon_fights_anything(self, rigged_game):
        game = rigged_game([], weapon=Weapon(card=diamonds(2)))
        assert not game.can_resolve_card(spades("A")).force_bare_handed

    def test_does_not_mutate(self, rigged_game):
        game = rigged_game([], weapon=Weapon(card=diamonds(7), last_defeated=3))
        before = game.state.clone()
        game.can_resolve_card(clubs(8))
        game.can_resolve_card(hearts(8))
        assert game.state == before


class TestResolveWeapon:
    """Tests for resolve_weapon()."""

    def test_equip(self, rigged_game):
        game = rigged_game([])
        game.resolve_weapon(diamonds(6))
        weapon = game.state.weapon
        assert weapon.card == diamonds(6)
        assert weapon.value == 6
        assert weapon.last_defeated is None
        assert weapon.defeated_monsters == []

    def test_switch_forfeits_history(self, rigged_game):
        kills = [spades(9), clubs(7), clubs(3)]
        old = Weapon(card=diamonds(5), last_defeated=3, defeated_monsters=list(kills))
        game = rigged_game([], weapon=old)

        game.resolve_weapon(diamonds(8))

        assert game.state.discard == [diamonds(5), *kills]
        assert game.state.weapon.card == diamonds(8)
        assert game.state.weapon.last_defeated is None
        assert game.state.weapon.defeated_monsters == []
        assert any("3 defeated monsters" in e.message for e in game.state.event_log)


class TestResolvePotion:
    """Tests for resolve_potion()."""

    def test_heals(self, rigged_game):
        game = rigged_game([], health=10)
        game.resolve_potion(hearts(7))
        assert game.state.health == 17
        assert game.state.potion_used_this_turn
        assert game.state.discard == [hearts(7)]

    def test_clamped_to_max(self, rigged_game):
        game = rigged_game([], health=18)
        game.resolve_potion(hearts(9))
        assert game.state.health == 20
        assert "healed 2 HP" in game.state.event_log.entries[-1].message

    def test_second_potion_wasted(self, rigged_game):
        game = rigged_game([], health=5)
        game.resolve_potion(hearts(4))
        game.resolve_potion(hearts(10))
        assert game.state.health == 9
        assert game.state.discard == [hearts(4), hearts(10)]
        assert game.state.event_log.entries[-1].type == EventType.WARNING


class TestResolveMonster:
    """Tests for resolve_monster()."""

    def test_bare_handed(self, rigged_game):
        game = rigged_game([])
        game.resolve_monster(clubs(8))
        assert game.state.health == 12
        assert game.state.discard == [clubs(8)]
        assert game.state.event_log.entries[-1].type == EventType.DANGER

    def test_weapon_absorbs_damage(self, rigged_game):
        game = rigged_game([], weapon=Weapon(card=diamonds(7)))
        game.resolve_monster(clubs(5))
        assert game.state.health == 20
        assert game.state.weapon.defeated_monsters == [clubs(5)]
        assert game.state.weapon.last_defeated == 5
        assert game.state.discard == []

    def test_weapon_residual_damage(self, rigged_game):
        game = rigged_game([], weapon=Weapon(card=diamonds(3)))
        game.resolve_monster(spades("Q"))
        assert game.state.health == 11
        assert game.state.weapon.defeated_monsters == [spades("Q")]
        assert game.state.weapon.last_defeated == 12

    def test_weapon_monotonicity(self, rigged_game):
        weapon = Weapon(card=diamonds(7))
        game = rigged_game([], weapon=weapon)

        game.resolve_monster(spades(9))
        assert game.state.health == 18
        assert weapon.last_defeated == 9

        # 10 > 9: bare-handed, weapon untouched
        game.resolve_monster(spades(10))
        assert game.state.health == 8
        assert weapon.last_defeated == 9
        assert weapon.defeated_monsters == [spades(9)]
        assert game.state.discard == [spades(10)]

        # 8 <= 9: weapon used
        game.resolve_monster(clubs(8))
        assert game.state.health == 7
        assert weapon.last_defeated == 8
        assert weapon.defeated_monsters == [spades(9), clubs(8)]

    def test_equal_value_allowed(self, rigged_game):
        weapon = Weapon(card=diamonds(4), last_defeated=6, defeated_monsters=[clubs(6)])
        game = rigged_game([], weapon=weapon)
        game.resolve_monster(spades(6))
        assert weapon.defeated_monsters == [clubs(6), spades(6)]
        assert game.state.health == 18

    def test_lethal_monster(self, rigged_game):
        game = rigged_game([], health=5, deck=[clubs(6), spades(8), hearts(2)])
        game.resolve_monster(spades("K"))

        assert game.state.game_over
        assert not game.state.game_won
        assert game.state.health == 0
        assert game.state.defeating_card == spades("K")
        assert game.phase == GamePhase.LOST
        assert game.get_score() == -14

    def test_exact_lethal(self, rigged_game):
        game = rigged_game([], health=7)
        game.resolve_monster(clubs(7))
        assert game.state.game_over
        assert game.state.health == 0


class TestFaceRoom:
    """Tests for face_room()."""

    DECK = [clubs(2), clubs(3), clubs(4), clubs(5), clubs(6), clubs(7), clubs(8), clubs(9)]

    def test_requires_three_selected(self, seeded_game, select):
        assert not seeded_game.face_room()
        select(seeded_game, 0, 1)
        assert not seeded_game.face_room()
        assert seeded_game.state.selected_cards == [0, 1]

    def test_not_after_game_over(self, seeded_game, select):
        select(seeded_game, 0, 1, 2)
        seeded_game.state.game_over = True
        assert not seeded_game.face_room()

    def test_carried_card_propagation(self, rigged_game, select):
        room = [clubs(2), hearts(3), diamonds(4), spades(5)]
        game = rigged_game(room, deck=self.DECK)
        select(game, 0, 2, 3)

        assert game.face_room()
        assert game.state.room[0] is room[1]
        assert game.state.room[1:] == self.DECK[:3]
        assert game.state.carried_card is None
        assert game.state.turn == 2
        assert game.state.can_avoid

    def test_resolves_in_selection_order(self, rigged_game, select):
        """Equip first, then fight: the weapon helps."""
        game = rigged_game([clubs(9), diamonds(8), hearts(2), spades(3)], deck=self.DECK)
        select(game, 1, 0, 3)
        game.face_room()

        assert game.state.health == 19
        assert game.state.weapon.defeated_monsters == [clubs(9), spades(3)]
        assert game.state.weapon.last_defeated == 3
        assert game.state.room[0] == hearts(2)

    def test_fight_before_equip_is_bare_handed(self, rigged_game, select):
        game = rigged_game([clubs(9), diamonds(8), hearts(2), spades(3)], deck=self.DECK)
        select(game, 0, 1, 3)
        game.face_room()

        assert game.state.health == 11
        assert game.state.discard == [clubs(9)]
        assert game.state.weapon.defeated_monsters == [spades(3)]

    def test_one_potion_per_room(self, rigged_game, select):
        game = rigged_game([hearts(5), hearts(7), clubs(2), diamonds(3)], health=10, deck=self.DECK)
        select(game, 0, 1, 3)
        game.face_room()

        assert game.state.health == 15
        assert game.state.discard == [hearts(5), hearts(7)]

    def test_potion_order_follows_selection(self, rigged_game, select):
        game = rigged_game([hearts(5), hearts(7), clubs(2), diamonds(3)], health=10, deck=self.DECK)
        select(game, 1, 0, 3)
        game.face_room()

        assert game.state.health == 17

    def test_potion_limit_resets_next_room(self, rigged_game, select):
        deck = [hearts(6), clubs(2), spades(2), clubs(4)]
        game = rigged_game([hearts(2), clubs(5), diamonds(3), clubs(6)], health=10, deck=deck)
        select(game, 0, 1, 2)
        game.face_room()
        assert not game.state.potion_used_this_turn

        # room is now [♣6, ♥6, ♣2, ♠2]
        assert game.state.room[1] == hearts(6)
        select(game, 1, 2, 3)
        game.face_room()
        assert game.state.health == 13

    def test_stops_when_player_dies(self, rigged_game, select):
        game = rigged_game([spades(10), hearts(9), diamonds(2), clubs(3)], health=5, deck=self.DECK)
        select(game, 0, 1, 2)

        assert game.face_room()
        assert game.state.game_over
        assert game.state.health == 0
        assert game.state.discard == [spades(10)]
        assert game.state.weapon is None
        assert game.state.carried_card == clubs(3)
        assert game.state.room == [hearts(9), diamonds(2)]
        assert game.state.turn == 1

    def test_each_card_leaves_room_when_resolved(self, rigged_game, select):
        """Loss score only sees selected cards not yet resolved."""
        game = rigged_game([spades(2), clubs("A"), clubs(3), clubs(4)], health=10, deck=[])
        select(game, 0, 1, 2)
        game.face_room()

        # ♠2 resolved, ♣A kills; ♣3 unresolved, ♣4 carried
        assert game.state.game_over
        assert game.state.room == [clubs(3)]
        assert game.state.carried_card == clubs(4)
        assert game.get_score() == -3


class TestScoring:
    """Tests for end_game() and get_score()."""

    def test_in_progress_score(self, seeded_game):
        assert seeded_game.get_score() == 0

    def test_win_score_is_health(self, rigged_game, select):
        game = rigged_game([diamonds(5), clubs(3), spades(4), hearts(9)], health=15, deck=[])
        select(game, 0, 2, 1)
        game.face_room()

        assert game.state.game_over
        assert game.state.game_won
        assert game.state.health == 15
        assert game.get_score() == 15
        assert game.phase == GamePhase.WON
        assert game.state.event_log.entries[-1].type == EventType.SUCCESS

    def test_loss_score_counts_deck_and_unresolved_room(self, rigged_game, select):
        room = [spades(10), clubs(8), hearts(2), diamonds(4)]
        game = rigged_game(room, health=3, deck=[clubs(6), hearts(5)])
        select(game, 0, 2, 3)
        game.face_room()

        assert game.state.game_over
        assert not game.state.game_won
        assert game.state.defeating_card == spades(10)
        assert game.get_score() == -6

    def test_loss_score_skips_carried_card(self, rigged_game, select):
        """The unselected monster is carried, not scored."""
        room = [spades(10), clubs(8), hearts(2), diamonds(4)]
        game = rigged_game(room, health=3, deck=[clubs(6), hearts(5)])
        select(game, 0, 2, 3)
        game.face_room()

        assert game.state.carried_card == clubs(8)
        assert clubs(8) not in game.state.room
        frozen = game.get_score()
        game.state.final_score = None
        assert game.get_score() == frozen == -6

    def test_loss_score_ignores_resolved_monsters(self, rigged_game):
        weapon = Weapon(card=diamonds(2), last_defeated=9, defeated_monsters=[clubs(9)])
        game = rigged_game([], health=3, weapon=weapon, discard=[spades("A")], deck=[clubs(5)])
        game.resolve_monster(spades(10))
        assert game.get_score() == -5

    def test_score_frozen_after_end(self, rigged_game):
        game = rigged_game([], health=12, deck=[])
        game.end_game(won=True)
        game.state.health = 3
        assert game.get_score() == 12


class TestConservation:
    """Every card stays accounted for until the game ends."""

    @pytest.mark.parametrize("seed", [1, 2, 3, 42, 1234])
    def test_cards_conserved_through_play(self, seed):
        game = Game(seed=seed)
        original = Counter(create_deck())
        step = 0

        while not game.state.game_over and step < 500:
            assert Counter(game.state.all_cards()) == original
            # Deterministic but varied policy that never deselects
            actions = [
                a for a in legal_actions(game)
                if not (a.action_type == ActionType.SELECT_CARD
                        and a.index in game.state.selected_cards)
            ]
            action = actions[(seed + step) % len(actions)]
            apply_action(game, action)
            step += 1

        assert game.state.game_over

    def test_deck_types_after_reset(self):
        for seed in (5, 6, 7):
            deck = Game(seed=seed).state.deck
            counts = Counter(c.type for c in deck)
            assert counts == {CardType.MONSTER: 26, CardType.WEAPON: 9, CardType.POTION: 9}


def resolve_by_hand(cards, health=20, max_health=20):
    """Straightforward rules model used to cross-check the engine."""
    weapon, last, stack, discard = None, None, [], []
    potion_used = False
    for card in cards:
        if card.suit == Suit.DIAMONDS:
            if weapon:
                discard += [weapon, *stack]
            weapon, last, stack = card, None, []
        elif card.suit == Suit.HEARTS:
            if not potion_used:
                health = min(max_health, health + card.value)
                potion_used = True
            discard.append(card)
        else:
            if weapon and (last is None or card.value <= last):
                damage = max(0, card.value - weapon.value)
                stack.append(card)
                last = card.value
            else:
                damage = card.value
                discard.append(card)
            health -= damage
            if health <= 0:
                return 0, weapon, last, stack, discard, True
    return health, weapon, last, stack, discard, False


class TestEndToEnd:
    """Seed 1: draw, select the first three cards, face."""

    def test_seed_one_first_room(self):
        game = Game()
        game.reset(1)
        game.draw_room()
        room = list(game.state.room)

        replay = Game(seed=1)
        replay.draw_room()
        assert replay.state.room == room
        assert len(room) == 4

        health, weapon, last, stack, discard, dead = resolve_by_hand(room[:3])

        for index in (0, 1, 2):
            game.select_card(index)
        assert game.face_room()

        s = game.state
        assert s.health == health
        assert s.discard == discard
        assert s.game_over == dead
        if weapon is None:
            assert s.weapon is None
        else:
            assert s.weapon.card == weapon
            assert s.weapon.last_defeated == last
            assert s.weapon.defeated_monsters == stack
        if not dead:
            assert s.turn == 2
            assert s.room[0] is room[3]
            assert s.room[1:] == replay.state.deck[:3]
