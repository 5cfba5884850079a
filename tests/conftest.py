"""
Shared test fixtures for the tiling engine tests.
"""
import pytest

from tri_solver.board import Board, BoardShape
from tri_solver.pieces import DEFAULT_CATALOG, REFERENCE_SOLUTION, PieceCatalog, make_piece
from tri_solver.placement import place


def parity_rows(rows, cols):
    """A fully active rectangle: every cell marked with its grid orientation."""
    return [[1 if (r + c) % 2 == 0 else -1 for c in range(cols)] for r in range(rows)]


@pytest.fixture
def open_board():
    """A 5x5 board with every cell active."""
    return Board.create(BoardShape.from_rows(parity_rows(5, 5)))


@pytest.fixture
def default_board():
    """The empty 55-triangle board."""
    return Board.create()


@pytest.fixture
def single():
    """A one-triangle piece."""
    return make_piece("U", [[1]])


@pytest.fixture
def domino_catalog():
    """One piece made of an up and a down triangle side by side."""
    return PieceCatalog([make_piece("T2", [[1, -1]])])


@pytest.fixture
def place_reference():
    """Place the reference tiling on a board, leaving out some pieces."""
    def _place(board, skip=()):
        for placed in REFERENCE_SOLUTION:
            if placed.name in skip:
                continue
            place(DEFAULT_CATALOG[placed.name], placed.rotation, placed.row, placed.col, board)
        return board
    return _place


@pytest.fixture
def nearly_solved(default_board, place_reference):
    """Default board with all pieces except H, I and J in place (17 empty cells)."""
    return place_reference(default_board, skip={"H", "I", "J"})
