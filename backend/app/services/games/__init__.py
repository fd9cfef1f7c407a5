"""Game domain services: decks, players, rounds and timers.

This package contains the in-memory party engine that HTTP routes and
socket handlers call into, keeping transport concerns separated from core
game mechanics.
"""

from .engine import GameEngine
from .errors import ActionResult, GameError
from .parties import PartyManager

__all__ = ['GameEngine', 'ActionResult', 'GameError', 'PartyManager']
