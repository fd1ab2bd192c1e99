"""
Scoundrel CLI - Command-line interface for the engine.

Usage:
    scoundrel play [--seed N]          Play in the terminal
    scoundrel peek --seed N            Show the first room of a dungeon
    scoundrel serve [--host --port]    Run the HTTP API
"""

import argparse
import logging
import os
import sys

from .engine_core import Action, ActionType, Game, apply_action, legal_actions

logger = logging.getLogger(__name__)

LOG_LEVEL = os.getenv("SCOUNDREL_LOG_LEVEL", "WARNING")

HELP_TEXT = """Commands:
  1-4   toggle selection of a room card
  f     face the room (3 cards selected)
  a     avoid the room
  l     show the event log
  q     quit"""


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Scoundrel - single-player dungeon card game",
        prog="scoundrel",
    )
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Python logging level")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument("--seed", type=int, default=None, help="Dungeon seed")

    peek_parser = subparsers.add_parser("peek", help="Show the first room of a dungeon")
    peek_parser.add_argument("--seed", type=int, required=True, help="Dungeon seed")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command == "play":
        cmd_play(args)
    elif args.command == "peek":
        cmd_peek(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def parse_command(text: str):
    """
    Turn one line of player input into an Action.

    Returns an Action, one of "help", "log", "quit", or None if the input
    is not understood. Card numbers are 1-based on screen.
    """
    text = text.strip().lower()
    if text in ("q", "quit", "exit"):
        return "quit"
    if text in ("h", "help", "?"):
        return "help"
    if text in ("l", "log"):
        return "log"
    if text in ("f", "face"):
        return Action.face()
    if text in ("a", "avoid"):
        return Action.avoid()
    if text.isdigit():
        return Action.select(int(text) - 1)
    return None


def render(game: Game) -> str:
    """Plain-text view of the game."""
    s = game.state
    lines = [
        f"Turn {s.turn} | HP {s.health}/{s.max_health} | Deck {len(s.deck)} | "
        f"Discard {len(s.discard)}",
    ]

    if s.weapon:
        last = s.weapon.last_defeated if s.weapon.last_defeated is not None else "-"
        stack = " ".join(c.label for c in s.weapon.defeated_monsters) or "none"
        lines.append(f"Weapon {s.weapon.card.label} (last defeated: {last}; kills: {stack})")
    else:
        lines.append("Weapon: bare hands")

    for index, card in enumerate(s.room):
        marker = f"[{s.selected_cards.index(index) + 1}]" if index in s.selected_cards else "[ ]"
        check = game.can_resolve_card(card)
        note = f"  ! {check.reason}" if check.reason else ""
        lines.append(f"  {index + 1}. {marker} {card.label:<4} {card.type.value}{note}")

    if s.game_over:
        outcome = "VICTORY" if s.game_won else "DEFEAT"
        lines.append(f"{outcome} - score {game.get_score()}")
        if s.defeating_card:
            lines.append(f"Slain by {s.defeating_card.label}")
    else:
        options = ", ".join(a.describe() for a in legal_actions(game)
                            if a.action_type != ActionType.SELECT_CARD)
        lines.append(f"Can also: {options or 'select cards'}")

    return "\n".join(lines)


def cmd_play(args):
    """Interactive terminal game."""
    game = Game(seed=args.seed)
    game.draw_room()

    print(f"Dungeon seed: {game.state.seed}")
    print(HELP_TEXT)

    while not game.state.game_over:
        print()
        print(render(game))
        try:
            text = input("> ")
        except EOFError:
            break

        command = parse_command(text)
        if command == "quit":
            break
        if command == "help" or command is None:
            print(HELP_TEXT)
            continue
        if command == "log":
            for entry in game.state.event_log:
                print(f"  [{entry.type.value}] {entry.message}")
            continue

        result = apply_action(game, command)
        if not result.success:
            print(f"Can't do that: {result.error}")
            continue
        for entry in result.events:
            print(f"  {entry.message}")

    print()
    print(render(game))
    print(f"Replay this dungeon with: scoundrel play --seed {game.state.seed}")


def cmd_peek(args):
    """Print the first room of a seeded dungeon."""
    game = Game(seed=args.seed)
    game.draw_room()
    print(f"Seed {args.seed}: " + " ".join(c.label for c in game.state.room))


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    logger.info(f"Serving Scoundrel API on {args.host}:{args.port}")
    uvicorn.run("scoundrel.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
