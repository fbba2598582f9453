"""
Christmas Tree - Pick numbers off a triangular tree.

Key mechanics:
- Everyone in the lobby readies up, a short countdown starts the round
- Players take turns picking a cell whose two supports are already cleared
- Numbers score their value; gifts score 3, feed their neighbours and grant another turn
- The round ends when the tree is bare, then resets after a short pause

This module contains:
- Tree geometry (bounds, pickability, gift neighbours)
- Transition functions and the registry that wires them up
"""

from .grid import is_valid_location, is_pickable, is_cleared, pickable_cells, gift_neighbours
from .rules import (
    create_registry,
    handle_tick,
    handle_joiner,
    handle_leaver,
    handle_ready,
    handle_pick,
    START_DELAY,
)

__all__ = [
    "is_valid_location",
    "is_pickable",
    "is_cleared",
    "pickable_cells",
    "gift_neighbours",
    "create_registry",
    "handle_tick",
    "handle_joiner",
    "handle_leaver",
    "handle_ready",
    "handle_pick",
    "START_DELAY",
]
