"""
Region analysis: connected components of empty cells and a cheap
fillability test used to prune the search.
"""

from collections import deque
from collections.abc import Collection, Iterable

from .board import Board
from .geometry import neighbors
from .pieces import PieceCatalog

Region = frozenset[tuple[int, int]]


def connected_empty_regions(board: Board) -> list[Region]:
    """Flood-fill the empty active cells into edge-connected regions.

    Regions come out in row-major order of their first cell and partition
    the set of empty cells.
    """
    visited: set[tuple[int, int]] = set()
    regions: list[Region] = []

    for start in board.empty_cells():
        if start in visited:
            continue

        region = set()
        queue = deque([start])
        visited.add(start)

        while queue:
            cell = queue.popleft()
            region.add(cell)

            for n in neighbors(*cell):
                if n in visited or not board.is_empty(*n):
                    continue
                visited.add(n)
                queue.append(n)
        regions.append(frozenset(region))

    return regions


def region_fillable(region: Collection, remaining_names: Iterable[str], catalog: PieceCatalog) -> bool:
    """Necessary (not sufficient) condition for filling a region.

    An empty region is trivially fillable; otherwise at least one remaining
    piece must be no larger than the region. Never rejects a region that a
    real tiling could fill.
    """
    size = len(region)
    if size == 0:
        return True
    return any(catalog[name].triangle_count <= size for name in remaining_names)


def first_unfillable_region(regions: Iterable[Region], remaining_names, catalog: PieceCatalog) -> Region | None:
    """The first region that region_fillable rejects, None if all pass."""
    remaining_names = list(remaining_names)
    for region in regions:
        if not region_fillable(region, remaining_names, catalog):
            return region
    return None
