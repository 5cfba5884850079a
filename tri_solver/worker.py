"""
Background solving.

A SolverWorker owns one Solver running on a dedicated thread. Commands go in
through start()/pause()/resume()/cancel(); progress and the final outcome come
back as SolverEvent messages on the `events` queue, so the host never has to
share flags with the search.
"""

import logging
import queue
import threading
from collections.abc import Iterable
from dataclasses import dataclass

from .board import Board
from .config import EVENT_QUEUE_SIZE, YIELD_EVERY
from .pieces import DEFAULT_CATALOG, PieceCatalog
from .solver import Solver, SolverControl, SolverProgress, SolverStatus, SolveResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverEvent:
    kind: str                               # "progress" or "finished"
    status: SolverStatus
    progress: SolverProgress | None = None
    result: SolveResult | None = None
    error: Exception | None = None


class SolverWorker:
    """Runs one search on a background thread."""

    def __init__(
        self,
        board: Board,
        unplaced_names: Iterable[str],
        catalog: PieceCatalog = DEFAULT_CATALOG,
        yield_every: int = YIELD_EVERY,
        max_events: int = EVENT_QUEUE_SIZE,
    ):
        if max_events < 1:
            raise ValueError(f"max_events must be >= 1, got {max_events}")
        self.board = board
        self.unplaced_names = list(unplaced_names)
        self.control = SolverControl()
        self.solver = Solver(
            catalog,
            control=self.control,
            yield_every=yield_every,
            on_progress=self._report,
        )
        self.events: queue.Queue[SolverEvent] = queue.Queue(maxsize=max_events)
        self.result: SolveResult | None = None
        self.error: Exception | None = None
        self._thread: threading.Thread | None = None

    @property
    def status(self) -> SolverStatus:
        if self.error is not None and not self.solver.status.finished:
            return SolverStatus.FAILED
        return self.solver.status

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Validate the request and start searching in the background."""
        if self._thread is not None:
            raise RuntimeError("Worker already started")
        # Bad requests fail here, in the caller's thread
        self.solver.check_names(self.unplaced_names, self.board)
        self._thread = threading.Thread(target=self._run, name="tri-solver", daemon=True)
        self._thread.start()
        logger.info("Solver worker started for %s", self.unplaced_names)

    def pause(self) -> None:
        self.control.pause()

    def resume(self) -> None:
        self.control.resume()

    def cancel(self) -> None:
        self.control.cancel()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the search to end. True if it has ended."""
        if self._thread is None:
            return False
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _post(self, event: SolverEvent) -> None:
        """Queue an event, dropping the oldest one when nobody keeps up."""
        while True:
            try:
                self.events.put_nowait(event)
                return
            except queue.Full:
                try:
                    self.events.get_nowait()
                except queue.Empty:
                    pass

    def _report(self, progress: SolverProgress) -> None:
        self._post(SolverEvent("progress", self.solver.status, progress=progress))

    def _run(self) -> None:
        try:
            self.result = self.solver.run(self.unplaced_names, self.board)
        except Exception as exc:
            self.error = exc
            logger.exception("Solver worker failed")
        finally:
            self._post(SolverEvent(
                "finished", self.status, result=self.result, error=self.error,
            ))
