"""
Backtracking solver.

Strategy:
- Count the legal placements of every remaining piece (duplicate rotations
  skipped) and expand the most constrained piece first
- Try its placements rotation by rotation, anchors in row-major order
- After each placement, flood-fill the empty cells and drop the branch if a
  region is smaller than every remaining piece
- Undo every placement on the way back out, whatever the reason for leaving

The search is a plain synchronous recursion. Pause and cancel arrive through a
SolverControl token that is checked on every recursion entry and before each
candidate placement; every `yield_every` iterations the solver also releases
the GIL and reports progress. Run it on a worker thread (see worker.py) to
keep a host responsive.
"""

import argparse
import logging
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from .board import Board, PlacedPiece
from .config import PAUSE_POLL_SECONDS, YIELD_EVERY
from .exceptions import InvariantViolation
from .pieces import DEFAULT_CATALOG, REFERENCE_SOLUTION, PieceCatalog, PieceDefinition
from .placement import can_place, legal_placements, place, remove
from .regions import Region, connected_empty_regions, first_unfillable_region
from .viz import format_board

logger = logging.getLogger(__name__)


class SolverStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    SOLVED = "solved"
    EXHAUSTED = "exhausted"    # Search finished, no tiling exists from this state
    CANCELLED = "cancelled"    # Stopped on request; says nothing about solvability
    FAILED = "failed"          # An exception ended the run

    @property
    def finished(self) -> bool:
        return self in (SolverStatus.SOLVED, SolverStatus.EXHAUSTED,
                        SolverStatus.CANCELLED, SolverStatus.FAILED)


class SolverControl:
    """Run-state token shared between a solver and whoever drives it.

    pause(), resume() and cancel() may be called from any thread. Cancel is
    final: a cancelled token stays cancelled.
    """

    def __init__(self, poll_seconds: float = PAUSE_POLL_SECONDS):
        self._cond = threading.Condition()
        self._paused = False
        self._cancelled = False
        self.poll_seconds = poll_seconds

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def pause(self) -> None:
        with self._cond:
            self._paused = True
            self._cond.notify_all()

    def resume(self) -> None:
        with self._cond:
            self._paused = False
            self._cond.notify_all()

    def cancel(self) -> None:
        with self._cond:
            self._cancelled = True
            self._cond.notify_all()

    def wait_while_paused(self) -> bool:
        """Block while paused. Returns False if the run was cancelled."""
        with self._cond:
            while self._paused and not self._cancelled:
                self._cond.wait(timeout=self.poll_seconds)
            return not self._cancelled


@dataclass(frozen=True)
class SolverProgress:
    """Snapshot handed to on_progress callbacks."""
    iterations: int
    elapsed: float
    placed: tuple[PlacedPiece, ...]
    remaining: tuple[str, ...]

    @property
    def depth(self) -> int:
        return len(self.placed)


@dataclass
class SolveResult:
    status: SolverStatus
    iterations: int = 0
    elapsed: float = 0.0
    placements: list[PlacedPiece] = field(default_factory=list)

    @property
    def solved(self) -> bool:
        return self.status is SolverStatus.SOLVED


class Solver:
    """Backtracking search over one board.

    The solver mutates the board it is given. On success the board is left
    solved; on exhaustion or cancellation every piece it placed has been
    removed again.
    """

    def __init__(
        self,
        catalog: PieceCatalog = DEFAULT_CATALOG,
        control: SolverControl | None = None,
        yield_every: int = YIELD_EVERY,
        on_progress: Callable[[SolverProgress], None] | None = None,
    ):
        if yield_every < 1:
            raise ValueError(f"yield_every must be >= 1, got {yield_every}")
        self.catalog = catalog
        self.control = control if control is not None else SolverControl()
        self.yield_every = yield_every
        self.on_progress = on_progress
        self.status = SolverStatus.IDLE
        self.iterations = 0
        self._board: Board | None = None
        self._placed: list[PlacedPiece] = []
        self._started = 0.0

    # --- public API -----------------------------------------------------

    def solve(self, unplaced_names: Iterable[str], board: Board) -> bool:
        """True iff the board's empty cells were exactly covered by the pieces."""
        return self.run(unplaced_names, board).solved

    def run(self, unplaced_names: Iterable[str], board: Board) -> SolveResult:
        """Search for a tiling and report how the search ended.

        Raises InvariantViolation on broken bookkeeping; that is never
        reported as "no solution". Any exception leaves the status FAILED.
        """
        if self.status in (SolverStatus.RUNNING, SolverStatus.PAUSED):
            raise RuntimeError("Solver is already running")
        names = list(unplaced_names)
        self.check_names(names, board)

        self.status = SolverStatus.RUNNING
        self.iterations = 0
        self._board = board
        self._placed = []
        self._started = time.perf_counter()

        empty = board.empty_count()
        area = self.catalog.total_triangles(names)
        logger.info(
            "Solving %d pieces (%d triangles) on %d empty cells",
            len(names), area, empty,
        )

        try:
            if area != empty:
                logger.info("Piece area %d != empty area %d, no exact cover", area, empty)
                solved = False
            else:
                solved = self._search(names)
            if solved and not board.is_solved():
                raise InvariantViolation(
                    f"Search reported success with {board.empty_count()} empty cells left"
                )
        except InvariantViolation as exc:
            self.status = SolverStatus.FAILED
            logger.error("Solver invariant violated: %s", exc)
            raise
        except Exception:
            self.status = SolverStatus.FAILED
            logger.exception("Solver failed")
            raise
        finally:
            self._board = None

        if solved:
            self.status = SolverStatus.SOLVED
        elif self.control.cancelled:
            self.status = SolverStatus.CANCELLED
        else:
            self.status = SolverStatus.EXHAUSTED

        result = SolveResult(
            status=self.status,
            iterations=self.iterations,
            elapsed=time.perf_counter() - self._started,
            placements=list(self._placed),
        )
        logger.info(
            "Solver %s after %d iterations (%.3fs)",
            result.status.value, result.iterations, result.elapsed,
        )
        if result.solved:
            logger.debug("Solved board:\n%s", format_board(board))
        return result

    def progress(self, remaining: Iterable[str] = ()) -> SolverProgress:
        return SolverProgress(
            iterations=self.iterations,
            elapsed=time.perf_counter() - self._started if self._started else 0.0,
            placed=tuple(self._placed),
            remaining=tuple(remaining),
        )

    def check_names(self, names: list[str], board: Board) -> None:
        """Reject duplicate, unknown or already placed piece names."""
        if len(set(names)) != len(names):
            raise ValueError(f"Piece names must be unique: {names}")
        for name in names:
            self.catalog[name]  # UnknownPiece for names outside the catalog
            if name in board.placements:
                raise ValueError(f"Piece {name!r} is already on the board")

    # --- search ---------------------------------------------------------

    def _search(self, remaining: list[str]) -> bool:
        board = self._board

        self._tick(remaining)
        if not self._checkpoint():
            return False

        if not remaining:
            regions = connected_empty_regions(board)
            self._check_partition(regions)
            return not regions

        # Most constrained piece first
        options = {
            name: list(legal_placements(self.catalog[name], board))
            for name in remaining
        }
        order = sorted(remaining, key=lambda name: len(options[name]))
        chosen = order[0]
        if not options[chosen]:
            logger.debug("Dead end: %s has no legal placement", chosen)
            return False

        piece = self.catalog[chosen]
        rest = order[1:]
        for rotation, row, col in options[chosen]:
            if not self._checkpoint():
                return False
            if self._try(piece, rotation, row, col, rest):
                return True
        return False

    def _try(self, piece: PieceDefinition, rotation: int, row: int, col: int, rest: list[str]) -> bool:
        """Place one candidate, recurse, and undo unless the board got solved."""
        board = self._board
        if not can_place(piece.shape(rotation), row, col, board):
            raise InvariantViolation(
                f"Placement {piece.name}@{rotation} ({row}, {col}) stopped being legal "
                "after backtracking"
            )

        before = board.snapshot()
        self._placed.append(place(piece, rotation, row, col, board))
        solved = False
        try:
            regions = connected_empty_regions(board)
            self._check_partition(regions)
            dead = first_unfillable_region(regions, rest, self.catalog)
            if dead is not None:
                logger.debug(
                    "Pruned %s@%d (%d, %d): region of %d cells cannot be filled",
                    piece.name, rotation, row, col, len(dead),
                )
                return False
            solved = self._search(rest)
            return solved
        finally:
            if not solved:
                remove(piece, row, col, board)
                self._placed.pop()
                if board.snapshot() != before:
                    raise InvariantViolation(
                        f"Removing {piece.name}@{rotation} ({row}, {col}) did not "
                        "restore the board"
                    )

    def _check_partition(self, regions: list[Region]) -> None:
        seen: set[tuple[int, int]] = set()
        for region in regions:
            if seen & region:
                raise InvariantViolation("Empty regions overlap")
            seen |= region
        if seen != set(self._board.empty_cells()):
            raise InvariantViolation(
                f"Regions cover {len(seen)} cells, board has {self._board.empty_count()} empty"
            )

    def _tick(self, remaining: list[str]) -> None:
        self.iterations += 1
        if self.iterations % self.yield_every:
            return
        logger.debug(
            "Solver iteration %d, depth %d, %d pieces left",
            self.iterations, len(self._placed), len(remaining),
        )
        time.sleep(0)  # Let other threads (the host) run
        if self.on_progress is not None:
            self.on_progress(self.progress(remaining))

    def _checkpoint(self) -> bool:
        """Honor pause/cancel. False means unwind now."""
        control = self.control
        if control.cancelled:
            return False
        if control.paused:
            self.status = SolverStatus.PAUSED
            logger.info("Solver paused at iteration %d", self.iterations)
            if not control.wait_while_paused():
                return False
            self.status = SolverStatus.RUNNING
            logger.info("Solver resumed")
        return True


def unplaced_pieces(board: Board, catalog: PieceCatalog = DEFAULT_CATALOG) -> list[str]:
    """Catalog pieces not on the board yet, in catalog order."""
    return [name for name in catalog if name not in board.placements]


def solve_puzzle(
    board: Board,
    catalog: PieceCatalog = DEFAULT_CATALOG,
    unplaced: Iterable[str] | None = None,
    **solver_kwargs,
) -> SolveResult:
    """
    Main entry point. Completes a (possibly partially filled) board.

    Pieces already on the board are kept; by default every other catalog
    piece is used.
    """
    if unplaced is None:
        unplaced = unplaced_pieces(board, catalog)
    return Solver(catalog, **solver_kwargs).run(unplaced, board)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Solve the default triangle puzzle")
    parser.add_argument("--preplace", type=int, default=0,
                        help="place the first N pieces of the reference solution first")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    board = Board.create()
    for placed in REFERENCE_SOLUTION[:args.preplace]:
        place(DEFAULT_CATALOG[placed.name], placed.rotation, placed.row, placed.col, board)

    result = solve_puzzle(board)
    if result.solved:
        print(f"\nSolution found after {result.iterations} iterations!")
    else:
        print(f"\nNo solution ({result.status.value}) after {result.iterations} iterations")
    print(format_board(board))
