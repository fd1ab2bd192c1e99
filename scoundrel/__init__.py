"""
Scoundrel - Single-player dungeon card game engine

A deterministic, seedable rules engine for the Scoundrel solitaire game.
The engine provides:
- Deck construction and seeded shuffling
- Room, weapon, potion and monster resolution
- Win/loss scoring
- Validated snapshots for exact replay
"""

__version__ = "0.1.0"
