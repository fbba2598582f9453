"""
Tree Grid - Geometry of the triangular tree.

Row `y` (row 0 is the apex) holds `y + 1` cells, so a cell is addressed by
column `x` with 0 <= x <= y. A cell rests on two supports in the row above:
upper-left (x - 1, y - 1) and upper-right (x, y - 1).
"""

from __future__ import annotations
from typing import Iterator

from ...engine_core.state import GIFT, Cell, Tree


def is_valid_location(tree_height: int, x: int, y: int) -> bool:
    """True if (x, y) lies inside a tree with `tree_height` rows."""
    return 0 <= x <= y < tree_height


def is_pickable(tree: Tree, x: int, y: int) -> bool:
    """
    True if both supports of (x, y) are cleared.

    The apex is always pickable. A support outside the triangle
    (x == 0 on the left, x == y on the right) counts as cleared.
    """
    if y == 0:
        return True
    left_clear = x == 0 or tree[y - 1][x - 1] is None
    right_clear = x == y or tree[y - 1][x] is None
    return left_clear and right_clear


def is_gift(cell: Cell) -> bool:
    return cell == GIFT


def is_numeric(cell: Cell) -> bool:
    return isinstance(cell, int) and not isinstance(cell, bool)


def gift_neighbours(x: int, y: int) -> list[tuple[int, int]]:
    """Cells a gift spreads to: left, right, above, above-left."""
    return [(x - 1, y), (x + 1, y), (x, y - 1), (x - 1, y - 1)]


def cells(tree: Tree) -> Iterator[tuple[int, int, Cell]]:
    """Yield (x, y, cell) for every cell, row by row."""
    for y, row in enumerate(tree):
        for x, cell in enumerate(row):
            yield x, y, cell


def is_cleared(tree: Tree) -> bool:
    """True once every cell of the tree is empty."""
    return all(cell is None for _, _, cell in cells(tree))


def pickable_cells(tree: Tree) -> list[tuple[int, int]]:
    """Non-empty cells that can be picked right now."""
    return [
        (x, y) for x, y, cell in cells(tree)
        if cell is not None and is_pickable(tree, x, y)
    ]
