"""
Puzzle piece definitions.

A shape is a small array over the piece's bounding box: 0 = no triangle,
+1 = up triangle, -1 = down triangle. Values follow the same parity rule as the
board, in the shape's own frame: cell (i, j) holds +1 iff (i + j) is even.
That is what lets a placement check orientation by comparing against the
board's global parity once an anchor is chosen.

Each piece is stored once per rotation (0, 60, ..., 300 degrees). Rotations
that reproduce an earlier rotation's shape are recorded as duplicates so the
solver can skip them.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from .board import PlacedPiece
from .exceptions import InvalidShape, UnknownPiece
from .geometry import TrianglePos

Shape = tuple[tuple[int, ...], ...]

ROTATIONS = (0, 60, 120, 180, 240, 300)


def shape_cells(shape: Shape) -> Iterator[tuple[int, int]]:
    """Yield (i, j) of every triangle of a shape, row-major."""
    for i, row in enumerate(shape):
        for j, value in enumerate(row):
            if value != 0:
                yield (i, j)


def triangle_count(shape: Shape) -> int:
    return sum(1 for _ in shape_cells(shape))


def shape_anchor(shape: Shape) -> tuple[int, int]:
    """First triangle of a shape in row-major order.

    Hosts use it to turn "the triangle the user grabbed" into an anchor offset.
    """
    for cell in shape_cells(shape):
        return cell
    return (0, 0)


def validate_shape(shape: Shape) -> None:
    """Raise InvalidShape unless the shape is a well-formed piece."""
    if not shape or not shape[0]:
        raise InvalidShape("Shape must have at least one row and column")
    width = len(shape[0])
    for i, row in enumerate(shape):
        if len(row) != width:
            raise InvalidShape(f"Shape row {i} has {len(row)} cells, expected {width}")
        for j, value in enumerate(row):
            if value not in (-1, 0, 1):
                raise InvalidShape(f"Shape cell ({i}, {j}) has invalid value {value}")
            if value != 0 and value != TrianglePos(i, j).orientation:
                raise InvalidShape(
                    f"Shape cell ({i}, {j}) is {value:+d} but its parity requires "
                    f"{TrianglePos(i, j).orientation:+d}"
                )
    if triangle_count(shape) == 0:
        raise InvalidShape("Shape has no triangles")


def shape_from_triangles(triangles: Iterable[TrianglePos]) -> Shape:
    """Pack triangle positions into a normalized shape array.

    The local origin is the bottom-left corner of the bounding box, moved one
    column left when needed so that the origin itself is an up cell. Shapes
    of the same triangles under any parity-preserving translation come out
    identical.
    """
    triangles = list(triangles)
    min_row = min(t.row for t in triangles)
    min_col = min(t.col for t in triangles)
    if (min_row + min_col) % 2 != 0:
        min_col -= 1
    height = max(t.row for t in triangles) - min_row + 1
    width = max(t.col for t in triangles) - min_col + 1

    grid = [[0] * width for _ in range(height)]
    for t in triangles:
        grid[t.row - min_row][t.col - min_col] = t.orientation
    return tuple(tuple(row) for row in grid)


def normalize_shape(shape: Shape) -> Shape:
    """Drop blank margins (keeping the origin on an up cell)."""
    return shape_from_triangles(TrianglePos(i, j) for i, j in shape_cells(shape))


def rotate_shape(shape: Shape) -> Shape:
    """Rotate a shape by 60 degrees and normalize it."""
    rotated = (TrianglePos(i, j).rotate_60() for i, j in shape_cells(shape))
    return shape_from_triangles(rotated)


@dataclass(frozen=True)
class PieceDefinition:
    """A catalog piece: one shape per rotation, plus solver metadata."""
    name: str
    color: str                              # Cosmetic only
    shapes: tuple[Shape, ...]               # Indexed by rotation // 60
    triangle_count: int
    duplicate_rotations: frozenset[int]

    def shape(self, rotation: int) -> Shape:
        if rotation not in ROTATIONS:
            raise ValueError(f"Rotation must be one of {ROTATIONS}, got {rotation}")
        return self.shapes[rotation // 60]

    @property
    def shape_by_rotation(self) -> dict[int, Shape]:
        return {rotation: self.shapes[rotation // 60] for rotation in ROTATIONS}

    @property
    def search_rotations(self) -> tuple[int, ...]:
        """Rotations worth trying during search (duplicates skipped)."""
        return tuple(r for r in ROTATIONS if r not in self.duplicate_rotations)

    @staticmethod
    def next_rotation(rotation: int) -> int:
        return (rotation + 60) % 360


def make_piece(name: str, base_shape, color: str = "#cccccc") -> PieceDefinition:
    """Build a piece from its rotation-0 shape.

    The other five rotations are derived geometrically; a rotation is marked
    duplicate when it reproduces the shape of an earlier rotation.
    """
    base = tuple(tuple(int(v) for v in row) for row in base_shape)
    validate_shape(base)
    base = normalize_shape(base)

    shapes = [base]
    for _ in ROTATIONS[1:]:
        shapes.append(rotate_shape(shapes[-1]))

    duplicates = frozenset(
        rotation
        for index, rotation in enumerate(ROTATIONS)
        if shapes[index] in shapes[:index]
    )
    return PieceDefinition(
        name=name,
        color=color,
        shapes=tuple(shapes),
        triangle_count=triangle_count(base),
        duplicate_rotations=duplicates,
    )


class PieceCatalog(Mapping):
    """Read-only, ordered name -> PieceDefinition mapping."""

    def __init__(self, pieces: Iterable[PieceDefinition]):
        self._pieces: dict[str, PieceDefinition] = {}
        for piece in pieces:
            if piece.name in self._pieces:
                raise ValueError(f"Duplicate piece name {piece.name!r}")
            self._pieces[piece.name] = piece

    def __getitem__(self, name: str) -> PieceDefinition:
        try:
            return self._pieces[name]
        except KeyError:
            raise UnknownPiece(name) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._pieces)

    def __len__(self) -> int:
        return len(self._pieces)

    def __repr__(self) -> str:
        return f"PieceCatalog({list(self._pieces)})"

    @property
    def names(self) -> list[str]:
        return list(self._pieces)

    def total_triangles(self, names: Iterable[str] | None = None) -> int:
        """Sum of triangle counts (all pieces when names is None)."""
        if names is None:
            names = self._pieces
        return sum(self[name].triangle_count for name in names)


# Pieces of the default board, shown at rotation 0. Together they cover all
# 55 triangles of DEFAULT_BOARD_SHAPE (see REFERENCE_SOLUTION).

TRIFORCE = make_piece("A", [
    [1, -1, 1],
    [0, 1, 0],
], color="#7a2d9e")

HOOK_LEFT = make_piece("B", [
    [0, 0, 1, -1],
    [0, 1, -1, 1],
], color="#00a0de")

HOOK_RIGHT = make_piece("C", [
    [0, -1, 1, 0],
    [0, 1, -1, 1],
], color="#ee68a7")

ZIGZAG = make_piece("D", [
    [0, -1, 0],
    [0, 1, -1],
    [0, 0, 1],
], color="#ffc100")

STEP_LEFT = make_piece("E", [
    [0, 0, 1, -1, 1],
    [0, 1, -1, 1, 0],
], color="#de241b")

STEP_RIGHT = make_piece("F", [
    [1, -1, 1, 0],
    [0, 1, -1, 1],
], color="#006c43")

CROSS = make_piece("G", [
    [0, -1, 0],
    [-1, 1, -1],
    [0, 0, 1],
], color="#ff8717")

BAR_LEFT = make_piece("H", [
    [0, -1, 1, -1, 0],
    [0, 0, -1, 1, -1],
], color="#8bd100")

BAR_RIGHT = make_piece("I", [
    [0, -1, 1, -1],
    [-1, 1, -1, 0],
], color="#8a5e3c")

FLAG = make_piece("J", [
    [1, -1, 0, 0],
    [0, 1, -1, 1],
], color="#00325b")

TRAPEZOID_3 = make_piece("K", [
    [0, -1],
    [-1, 1],
], color="#b0b0b0")

ALL_PIECES = [
    TRIFORCE,
    HOOK_LEFT,
    HOOK_RIGHT,
    ZIGZAG,
    STEP_LEFT,
    STEP_RIGHT,
    CROSS,
    BAR_LEFT,
    BAR_RIGHT,
    FLAG,
    TRAPEZOID_3,
]

DEFAULT_CATALOG = PieceCatalog(ALL_PIECES)

# One known tiling of DEFAULT_BOARD_SHAPE, every piece at rotation 0.
REFERENCE_SOLUTION = (
    PlacedPiece("A", 0, 4, 0),
    PlacedPiece("B", 1, 1, 0),
    PlacedPiece("C", 1, 5, 0),
    PlacedPiece("D", 2, 4, 0),
    PlacedPiece("E", 3, -1, 0),
    PlacedPiece("F", 3, 7, 0),
    PlacedPiece("G", 3, 3, 0),
    PlacedPiece("H", 5, -1, 0),
    PlacedPiece("I", 5, 7, 0),
    PlacedPiece("J", 5, 3, 0),
    PlacedPiece("K", 4, 6, 0),
)
