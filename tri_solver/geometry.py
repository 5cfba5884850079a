"""
Triangular grid geometry.

Coordinate system:
- (row, col) address a cell of a rectangular array of triangles
- row increases UPWARD (row 0 is the bottom row), col increases to the right
- a cell points up (△) iff (row + col) % 2 == 0, down (▽) otherwise

Adjacency:
- All triangles have left (col-1) and right (col+1) neighbors
- △ (up) has a bottom neighbor at (row-1, col), sharing its flat base
- ▽ (down) has a top neighbor at (row+1, col), sharing its flat top

Orientation is a pure function of the position. Nothing in the package stores
it as separate state.
"""

from dataclasses import dataclass

UP = 1
DOWN = -1


def orientation(row: int, col: int) -> int:
    """+1 for an up triangle, -1 for a down triangle."""
    return UP if (row + col) % 2 == 0 else DOWN


def points_up(row: int, col: int) -> bool:
    return (row + col) % 2 == 0


def vertical_neighbor(row: int, col: int) -> tuple[int, int]:
    """The cell sharing the horizontal edge (below for △, above for ▽)."""
    if points_up(row, col):
        return (row - 1, col)
    return (row + 1, col)


def neighbors(row: int, col: int) -> tuple[tuple[int, int], ...]:
    """Left, right and vertical neighbor. Bounds are the caller's problem."""
    return ((row, col - 1), (row, col + 1), vertical_neighbor(row, col))


@dataclass(frozen=True)
class TrianglePos:
    """A position in the triangular grid. T(row, col)."""
    row: int
    col: int

    @property
    def points_up(self) -> bool:
        return points_up(self.row, self.col)

    @property
    def orientation(self) -> int:
        return orientation(self.row, self.col)

    def left(self) -> "TrianglePos":
        """Left neighbor (opposite orientation)."""
        return TrianglePos(self.row, self.col - 1)

    def right(self) -> "TrianglePos":
        """Right neighbor (opposite orientation)."""
        return TrianglePos(self.row, self.col + 1)

    def vertical(self) -> "TrianglePos":
        """Vertical neighbor (bottom if up, top if down)."""
        return TrianglePos(*vertical_neighbor(self.row, self.col))

    def _to_vertices(self) -> list[tuple[int, int]]:
        """Get the 3 vertex coordinates of this triangle.

        Vertices live on a skewed lattice with basis e1 = (1, 0) and
        e2 = (1/2, sqrt(3)/2). Accounts for grid skewing:
        vx = (col - row) // 2 for up, vx = (col - row + 1) // 2 for down.
        """
        if self.points_up:
            vx = (self.col - self.row) // 2
            vy = self.row
            return [(vx, vy), (vx + 1, vy), (vx, vy + 1)]
        else:
            vx = (self.col - self.row + 1) // 2
            vy = self.row
            return [(vx, vy), (vx - 1, vy + 1), (vx, vy + 1)]

    @staticmethod
    def _rotate_vertex_60(i: int, j: int) -> tuple[int, int]:
        """Rotate a lattice vertex by 60°: i*e1 + j*e2 -> -j*e1 + (i + j)*e2."""
        return (-j, i + j)

    @classmethod
    def _from_vertices(cls, verts: list[tuple[int, int]]) -> "TrianglePos":
        """Reconstruct a TrianglePos from its 3 vertices.

        col = vx*2 + vy for up, col = vx*2 + vy - 1 for down.
        """
        vs = sorted(verts, key=lambda v: (v[1], v[0]))
        vx, vy = vs[0]
        if vs[0][1] == vs[1][1]:  # Two vertices on the lowest line = up triangle
            return cls(row=vy, col=vx * 2 + vy)
        else:  # Down triangle - single vertex at the bottom
            return cls(row=vy, col=vx * 2 + vy - 1)

    def rotate_60(self) -> "TrianglePos":
        """Rotate this position 60° around the lattice origin.

        Note: This flips the triangle orientation (up <-> down).
        """
        rotated = [self._rotate_vertex_60(i, j) for i, j in self._to_vertices()]
        return self._from_vertices(rotated)
