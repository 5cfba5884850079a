"""Tests for the background solver worker."""
import pytest

from tri_solver.exceptions import UnknownPiece
from tri_solver.solver import SolverStatus
from tri_solver.worker import SolverWorker


def drain(events):
    items = []
    while not events.empty():
        items.append(events.get_nowait())
    return items


def test_worker_solves_in_background(nearly_solved):
    worker = SolverWorker(nearly_solved, ["H", "I", "J"], yield_every=1)
    worker.start()
    assert worker.join(10)
    assert worker.status is SolverStatus.SOLVED
    assert worker.result.solved
    assert nearly_solved.is_solved()

    events = drain(worker.events)
    assert events[-1].kind == "finished"
    assert events[-1].status is SolverStatus.SOLVED
    assert events[-1].result is worker.result
    assert any(e.kind == "progress" for e in events[:-1])


def test_paused_worker_can_be_cancelled(nearly_solved):
    before = nearly_solved.snapshot()
    worker = SolverWorker(nearly_solved, ["H", "I", "J"])
    worker.pause()
    worker.start()
    assert not worker.join(0.2)
    assert worker.running
    assert worker.status is SolverStatus.PAUSED

    worker.cancel()
    assert worker.join(5)
    assert worker.status is SolverStatus.CANCELLED
    assert nearly_solved.snapshot() == before


def test_paused_worker_resumes(nearly_solved):
    worker = SolverWorker(nearly_solved, ["H", "I", "J"])
    worker.pause()
    worker.start()
    assert not worker.join(0.2)
    worker.resume()
    assert worker.join(10)
    assert worker.status is SolverStatus.SOLVED


def test_bad_request_fails_in_caller(default_board):
    worker = SolverWorker(default_board, ["Z"])
    with pytest.raises(UnknownPiece):
        worker.start()
    assert not worker.running
    assert worker.status is SolverStatus.IDLE


def test_cannot_start_twice(nearly_solved):
    worker = SolverWorker(nearly_solved, ["H", "I", "J"])
    worker.start()
    with pytest.raises(RuntimeError):
        worker.start()
    worker.join(10)


def test_join_before_start(default_board):
    assert not SolverWorker(default_board, ["A"]).join(0)


def test_event_queue_stays_bounded(nearly_solved):
    worker = SolverWorker(nearly_solved, ["H", "I", "J"], yield_every=1, max_events=3)
    worker.start()
    assert worker.join(10)
    assert worker.solver.iterations > 3

    events = drain(worker.events)
    assert len(events) <= 3
    assert events[-1].kind == "finished"
    assert events[-1].status is SolverStatus.SOLVED


def test_event_queue_size_must_be_positive(default_board):
    with pytest.raises(ValueError):
        SolverWorker(default_board, ["A"], max_events=0)
