"""
Placement oracle: legality checks and the board mutators built on them.

A placement anchors a shape's local origin (0, 0) on a board cell. It is legal
when every triangle of the shape lands on an active, empty cell whose grid
orientation matches the triangle's. Out-of-bounds anchors are simply illegal.
"""

import logging
from collections.abc import Iterator

from .board import Board, BoardShape, PlacedPiece
from .config import SNAP_SEARCH_RADIUS
from .exceptions import InvariantViolation
from .geometry import orientation
from .pieces import PieceCatalog, PieceDefinition, Shape, shape_cells

logger = logging.getLogger(__name__)


def can_place(shape: Shape, row: int, col: int, board: Board) -> bool:
    """Check if a shape fits with its origin at (row, col). Pure, no side effects."""
    board_shape = board.shape
    grid = board.grid
    for i, shape_row in enumerate(shape):
        for j, value in enumerate(shape_row):
            if value == 0:
                continue
            r = row + i
            c = col + j
            if not board_shape.in_bounds(r, c):
                return False  # Outside board
            if board_shape.cells[r][c] == 0:
                return False  # Not part of the puzzle
            if grid[r][c] is not None:
                return False  # Already occupied
            if orientation(r, c) != value:
                return False  # Orientation mismatch
    return True


def can_place_piece(piece: PieceDefinition, rotation: int, row: int, col: int, board: Board) -> bool:
    """can_place for a catalog piece in a given rotation."""
    return can_place(piece.shape(rotation), row, col, board)


def placement_cells(shape: Shape, row: int, col: int) -> list[tuple[int, int]]:
    """Absolute board cells a shape covers when anchored at (row, col)."""
    return [(row + i, col + j) for i, j in shape_cells(shape)]


def place(piece: PieceDefinition, rotation: int, row: int, col: int, board: Board) -> PlacedPiece:
    """Place a piece on the board (mutates). Call can_place first!"""
    for r, c in placement_cells(piece.shape(rotation), row, col):
        board.set_cell(r, c, piece.name)
    placed = PlacedPiece(piece.name, row, col, rotation)
    board.placements[piece.name] = placed
    return placed


def remove(piece: PieceDefinition, row: int, col: int, board: Board) -> PlacedPiece:
    """Take a piece back off the board; exact inverse of place().

    The rotation comes from the board's placement record, which must match the
    given anchor.
    """
    placed = board.placements.get(piece.name)
    if placed is None or (placed.row, placed.col) != (row, col):
        raise InvariantViolation(
            f"Piece {piece.name!r} is not placed at ({row}, {col}): {placed}"
        )
    for r, c in placement_cells(piece.shape(placed.rotation), row, col):
        if board.grid[r][c] != piece.name:
            raise InvariantViolation(
                f"Cell ({r}, {c}) holds {board.grid[r][c]!r}, expected {piece.name!r}"
            )
        board.clear_cell(r, c)
    del board.placements[piece.name]
    return placed


def remove_at(row: int, col: int, board: Board, catalog: PieceCatalog) -> PlacedPiece | None:
    """Remove whichever piece covers (row, col). Returns its record, or None."""
    placed = board.piece_at(row, col)
    if placed is None:
        return None
    return remove(catalog[placed.name], placed.row, placed.col, board)


def anchor_range(shape: Shape, board_shape: BoardShape) -> Iterator[tuple[int, int]]:
    """All anchors, row-major, for which the shape's box overlaps the board.

    Anchors can be negative: a normalized shape may start with a blank column.
    """
    height = len(shape)
    width = len(shape[0])
    for row in range(1 - height, board_shape.rows):
        for col in range(1 - width, board_shape.cols):
            yield (row, col)


def legal_placements(piece: PieceDefinition, board: Board) -> Iterator[tuple[int, int, int]]:
    """Yield (rotation, row, col) for every legal placement, duplicates skipped."""
    for rotation in piece.search_rotations:
        shape = piece.shape(rotation)
        for row, col in anchor_range(shape, board.shape):
            if can_place(shape, row, col, board):
                yield (rotation, row, col)


def count_legal_placements(piece: PieceDefinition, board: Board) -> int:
    return sum(1 for _ in legal_placements(piece, board))


def ring_offsets(distance: int) -> list[tuple[int, int]]:
    """Offsets on the perimeter of the square ring at a given distance.

    Order: top row left->right, bottom row left->right, then left column
    top->bottom and right column top->bottom without the corners.
    "Top" is the ring's first row index (smallest row offset).
    """
    if distance == 0:
        return [(0, 0)]
    d = distance
    offsets = [(-d, k) for k in range(-d, d + 1)]
    offsets += [(d, k) for k in range(-d, d + 1)]
    offsets += [(k, -d) for k in range(-d + 1, d)]
    offsets += [(k, d) for k in range(-d + 1, d)]
    return offsets


def find_nearest_legal_placement(
    piece: PieceDefinition,
    rotation: int,
    ideal_row: int,
    ideal_col: int,
    board: Board,
    search_radius: int = SNAP_SEARCH_RADIUS,
) -> tuple[int, int] | None:
    """Snap a dropped piece to the closest legal anchor.

    Tries the ideal anchor, then square rings of growing distance up to
    search_radius. Returns (row, col) or None when nothing in range fits.
    """
    shape = piece.shape(rotation)
    for distance in range(search_radius + 1):
        for dr, dc in ring_offsets(distance):
            row = ideal_row + dr
            col = ideal_col + dc
            if can_place(shape, row, col, board):
                if distance:
                    logger.debug(
                        "Snapped %s from (%d, %d) to (%d, %d)",
                        piece.name, ideal_row, ideal_col, row, col,
                    )
                return (row, col)
    return None
