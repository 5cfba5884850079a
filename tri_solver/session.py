"""
Interactive puzzle session.

Keeps the bookkeeping an interactive front end needs on top of the engine:
the board, the undo history, the rotation currently selected for each piece
in hand, and the background solver. Hand edits are refused while a solver is
active.
"""

import logging
import threading

from .board import DEFAULT_BOARD_SHAPE, Board, BoardShape, PlacedPiece
from .config import SNAP_SEARCH_RADIUS, YIELD_EVERY
from .exceptions import SessionBusy
from .pieces import DEFAULT_CATALOG, PieceCatalog
from .placement import find_nearest_legal_placement, place, remove, remove_at
from .solver import SolverStatus, unplaced_pieces
from .worker import SolverWorker

logger = logging.getLogger(__name__)

# How long reset() waits for a cancelled solver to unwind
CANCEL_JOIN_SECONDS = 5.0


class PuzzleSession:
    def __init__(
        self,
        board_shape: BoardShape = DEFAULT_BOARD_SHAPE,
        catalog: PieceCatalog = DEFAULT_CATALOG,
        snap_radius: int = SNAP_SEARCH_RADIUS,
    ):
        self.catalog = catalog
        self.board = Board.create(board_shape)
        self.snap_radius = snap_radius
        self.history: list[PlacedPiece] = []
        self.rotations: dict[str, int] = {name: 0 for name in catalog}
        self.worker: SolverWorker | None = None
        self._absorbed = False
        self._lock = threading.RLock()

    # --- solver state ---------------------------------------------------

    @property
    def busy(self) -> bool:
        return self.worker is not None and self.worker.running

    @property
    def solver_status(self) -> SolverStatus:
        with self._lock:
            self._sync_solver()
            return self.worker.status if self.worker is not None else SolverStatus.IDLE

    def _sync_solver(self) -> None:
        """Take over the placements of a solver that finished successfully."""
        worker = self.worker
        if worker is None or worker.running or self._absorbed:
            return
        if worker.join(0) and worker.result is not None:
            self._absorbed = True
            if worker.result.solved:
                self.history.extend(worker.result.placements)
                for placed in worker.result.placements:
                    self.rotations[placed.name] = placed.rotation

    def _ensure_idle(self) -> None:
        self._sync_solver()
        if self.busy:
            raise SessionBusy("The solver is running; pause or cancel it first")

    def start_solver(self, yield_every: int = YIELD_EVERY) -> SolverWorker:
        """Complete the board in the background with the pieces still in hand."""
        with self._lock:
            self._ensure_idle()
            worker = SolverWorker(
                self.board,
                unplaced_pieces(self.board, self.catalog),
                self.catalog,
                yield_every=yield_every,
            )
            worker.start()
            self.worker = worker
            self._absorbed = False
            return worker

    def pause_solver(self) -> bool:
        with self._lock:
            if not self.busy:
                return False
            self.worker.pause()
            return True

    def resume_solver(self) -> bool:
        with self._lock:
            if not self.busy:
                return False
            self.worker.resume()
            return True

    def cancel_solver(self) -> bool:
        with self._lock:
            if not self.busy:
                return False
            self.worker.cancel()
            return True

    def wait_for_solver(self, timeout: float | None = None) -> SolverStatus:
        """Block until the background solver ends (or timeout)."""
        worker = self.worker
        if worker is not None:
            worker.join(timeout)
        return self.solver_status

    # --- hand edits -----------------------------------------------------

    def rotate(self, name: str) -> int:
        """Turn a piece in hand by 60 degrees. Returns the new rotation."""
        with self._lock:
            piece = self.catalog[name]
            if name in self.board.placements:
                raise ValueError(f"Piece {name!r} is on the board and cannot be rotated")
            self.rotations[name] = piece.next_rotation(self.rotations[name])
            return self.rotations[name]

    def drop(self, name: str, row: int, col: int, grab: tuple[int, int] = (0, 0)) -> PlacedPiece | None:
        """Drop a piece near (row, col) and snap it to the nearest legal spot.

        `grab` is the shape cell the user is holding; the anchor is the drop
        cell minus that offset. Returns the placement, or None when nothing
        within the snap radius fits.
        """
        with self._lock:
            self._ensure_idle()
            piece = self.catalog[name]
            if name in self.board.placements:
                raise ValueError(f"Piece {name!r} is already on the board")
            rotation = self.rotations[name]
            target = find_nearest_legal_placement(
                piece, rotation, row - grab[0], col - grab[1], self.board,
                search_radius=self.snap_radius,
            )
            if target is None:
                logger.info("No room for %s near (%d, %d)", name, row, col)
                return None
            placed = place(piece, rotation, target[0], target[1], self.board)
            self.history.append(placed)
            return placed

    def undo(self) -> PlacedPiece | None:
        """Take back the most recent placement."""
        with self._lock:
            self._ensure_idle()
            if not self.history:
                return None
            last = self.history.pop()
            remove(self.catalog[last.name], last.row, last.col, self.board)
            return last

    def lift(self, row: int, col: int) -> PlacedPiece | None:
        """Pick up whichever piece covers (row, col), wherever it is in history."""
        with self._lock:
            self._ensure_idle()
            placed = remove_at(row, col, self.board, self.catalog)
            if placed is None:
                return None
            if placed in self.history:
                self.history.remove(placed)
            self.rotations[placed.name] = placed.rotation
            return placed

    def reset(self) -> None:
        """Cancel any solver and clear the board, history and rotations."""
        with self._lock:
            if self.busy:
                self.worker.cancel()
                if not self.worker.join(CANCEL_JOIN_SECONDS):
                    raise SessionBusy("Solver did not stop after cancel")
            self.worker = None
            self._absorbed = False
            self.board.reset()
            self.history.clear()
            self.rotations = {name: 0 for name in self.catalog}
            logger.info("Session reset")

    # --- queries --------------------------------------------------------

    def is_solved(self) -> bool:
        with self._lock:
            self._sync_solver()
            return self.board.is_solved()

    def unplaced_names(self) -> list[str]:
        with self._lock:
            self._sync_solver()
            return unplaced_pieces(self.board, self.catalog)
