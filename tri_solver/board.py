"""
Board model.

A BoardShape says which cells of the rectangular array belong to the puzzle.
A Board layers mutable occupancy on top of it: every active cell is either
empty (None) or holds the name of the piece covering it.

Rows are listed bottom row first (row 0 is the bottom, see geometry).
"""

from dataclasses import dataclass, field

from .exceptions import InvalidShape, InvariantViolation
from .geometry import orientation


@dataclass(frozen=True)
class BoardShape:
    """Immutable puzzle outline: 0 = not part of the puzzle, +1/-1 = active."""
    cells: tuple[tuple[int, ...], ...]

    @classmethod
    def from_rows(cls, rows) -> "BoardShape":
        """Build and validate a shape from nested rows of 0 / +1 / -1.

        Active values must agree with the grid parity: orientation is not
        something a board layout gets to choose.
        """
        cells = tuple(tuple(int(v) for v in row) for row in rows)
        if not cells or not cells[0]:
            raise InvalidShape("Board shape must have at least one row and column")
        width = len(cells[0])
        for r, row in enumerate(cells):
            if len(row) != width:
                raise InvalidShape(f"Row {r} has {len(row)} cells, expected {width}")
            for c, value in enumerate(row):
                if value == 0:
                    continue
                if value not in (1, -1):
                    raise InvalidShape(f"Cell ({r}, {c}) has invalid value {value}")
                if value != orientation(r, c):
                    raise InvalidShape(
                        f"Cell ({r}, {c}) is marked {value:+d} but the grid requires "
                        f"{orientation(r, c):+d}"
                    )
        return cls(cells)

    @property
    def rows(self) -> int:
        return len(self.cells)

    @property
    def cols(self) -> int:
        return len(self.cells[0])

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def is_active(self, row: int, col: int) -> bool:
        return self.in_bounds(row, col) and self.cells[row][col] != 0

    def orientation(self, row: int, col: int) -> int:
        """Required parity of a cell; derived from (row, col), never stored."""
        return orientation(row, col)

    def active_cells(self) -> list[tuple[int, int]]:
        """All active cells in row-major order."""
        return [
            (r, c)
            for r in range(self.rows)
            for c in range(self.cols)
            if self.cells[r][c] != 0
        ]

    @property
    def active_count(self) -> int:
        return sum(1 for row in self.cells for v in row if v != 0)


# The standard 7x11 board, 55 triangles.
DEFAULT_BOARD_SHAPE = BoardShape.from_rows([
    [0, 0, 0, 0, 1, -1, 1, 0, 0, 0, 0],
    [0, 0, 0, 1, -1, 1, -1, 1, 0, 0, 0],
    [0, 0, 1, -1, 1, -1, 1, -1, 1, 0, 0],
    [0, 1, -1, 1, -1, 1, -1, 1, -1, 1, 0],
    [1, -1, 1, -1, 1, -1, 1, -1, 1, -1, 1],
    [-1, 1, -1, 1, -1, 1, -1, 1, -1, 1, -1],
    [0, -1, 1, -1, 1, -1, 1, -1, 1, -1, 0],
])


@dataclass(frozen=True)
class PlacedPiece:
    """A piece on the board: name, anchor cell and rotation used."""
    name: str
    row: int
    col: int
    rotation: int


@dataclass
class Board:
    """The mutable puzzle board."""
    shape: BoardShape                        # Board structure (shared, immutable)
    grid: list[list[str | None]]             # Piece name per cell, None = empty
    placements: dict[str, PlacedPiece] = field(default_factory=dict)

    @classmethod
    def create(cls, shape: BoardShape = DEFAULT_BOARD_SHAPE) -> "Board":
        """Create an empty board for a shape."""
        grid = [[None] * shape.cols for _ in range(shape.rows)]
        return cls(shape=shape, grid=grid, placements={})

    @property
    def rows(self) -> int:
        return self.shape.rows

    @property
    def cols(self) -> int:
        return self.shape.cols

    def copy(self) -> "Board":
        """Copy for speculative work - shares shape, copies occupancy."""
        return Board(
            shape=self.shape,
            grid=[row.copy() for row in self.grid],
            placements=self.placements.copy(),
        )

    def reset(self) -> None:
        """Clear every piece from the board (mutates)."""
        for row in self.grid:
            for c in range(len(row)):
                row[c] = None
        self.placements.clear()

    def occupant(self, row: int, col: int) -> str | None:
        """Name of the piece on a cell, None if empty, inactive or off-board."""
        if not self.shape.in_bounds(row, col):
            return None
        return self.grid[row][col]

    def is_empty(self, row: int, col: int) -> bool:
        """True for an active cell no piece covers."""
        return self.shape.is_active(row, col) and self.grid[row][col] is None

    def set_cell(self, row: int, col: int, name: str) -> None:
        if not self.shape.is_active(row, col):
            raise InvariantViolation(f"Cannot occupy inactive cell ({row}, {col})")
        self.grid[row][col] = name

    def clear_cell(self, row: int, col: int) -> None:
        if not self.shape.is_active(row, col):
            raise InvariantViolation(f"Cannot clear inactive cell ({row}, {col})")
        self.grid[row][col] = None

    def empty_cells(self) -> list[tuple[int, int]]:
        """Get all unoccupied active cells, row-major."""
        return [(r, c) for r, c in self.shape.active_cells() if self.grid[r][c] is None]

    def empty_count(self) -> int:
        return len(self.empty_cells())

    def is_solved(self) -> bool:
        """True if every active cell is covered."""
        return all(self.grid[r][c] is not None for r, c in self.shape.active_cells())

    def placed_names(self) -> list[str]:
        """Names of the pieces currently on the board, in placement order."""
        return list(self.placements)

    def piece_at(self, row: int, col: int) -> PlacedPiece | None:
        """The placement covering a cell, if any."""
        name = self.occupant(row, col)
        if name is None:
            return None
        return self.placements.get(name)

    def snapshot(self) -> tuple:
        """Hashable copy of the occupancy, for round-trip comparisons."""
        return tuple(tuple(row) for row in self.grid)
