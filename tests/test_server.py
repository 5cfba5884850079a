"""Tests for the FastAPI host."""
import time

import pytest
from fastapi.testclient import TestClient

from app.server import board_response, create_app
from tri_solver.pieces import REFERENCE_SOLUTION
from tri_solver.session import PuzzleSession


@pytest.fixture
def client():
    return TestClient(create_app(PuzzleSession()))


def drop(client, name, row, col, **extra):
    return client.post("/api/drop", json={"name": name, "row": row, "col": col, **extra})


def wait_finished(client, timeout=10.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        status = client.get("/api/solve").json()
        if status["status"] not in ("running", "paused"):
            return status
        time.sleep(0.05)
    raise AssertionError("solver did not finish")


class TestBoardEndpoints:

    def test_get_board(self, client):
        response = client.get("/api/board")
        assert response.status_code == 200
        body = response.json()
        assert body["rows"] == 7
        assert body["cols"] == 11
        assert body["solved"] is False
        assert body["placements"] == []
        assert body["grid"][0][4] is None

    def test_get_pieces(self, client):
        pieces = client.get("/api/pieces").json()
        assert [p["name"] for p in pieces] == list("ABCDEFGHIJK")
        assert pieces[0]["triangle_count"] == 4
        assert pieces[0]["rotation"] == 0
        assert pieces[0]["shape"] == [[1, -1, 1], [0, 1, 0]]
        assert pieces[0]["anchor"] == [0, 0]
        assert pieces[1]["anchor"] == [0, 2]

    def test_rotate(self, client):
        response = client.post("/api/pieces/A/rotate")
        assert response.status_code == 200
        assert response.json()["rotation"] == 60

    def test_rotate_unknown_piece(self, client):
        assert client.post("/api/pieces/Z/rotate").status_code == 404

    def test_drop(self, client):
        response = drop(client, "A", 0, 4)
        assert response.status_code == 200
        assert response.json() == {"name": "A", "row": 0, "col": 4, "rotation": 0}
        board = client.get("/api/board").json()
        assert board["grid"][1][5] == "A"
        assert board["history"] == ["A"]

    def test_drop_with_grab(self, client):
        response = drop(client, "A", 1, 5, grab_row=1, grab_col=1)
        assert response.json()["col"] == 4

    def test_drop_nowhere(self, client):
        response = drop(client, "A", 20, 20)
        assert response.status_code == 422
        assert "No legal position" in response.json()["detail"]

    def test_drop_unknown_piece(self, client):
        assert drop(client, "Z", 0, 4).status_code == 404

    def test_undo(self, client):
        assert client.post("/api/undo").status_code == 422
        drop(client, "A", 0, 4)
        response = client.post("/api/undo")
        assert response.status_code == 200
        assert response.json()["name"] == "A"

    def test_lift(self, client):
        assert client.post("/api/lift", json={"row": 0, "col": 4}).status_code == 422
        drop(client, "A", 0, 4)
        response = client.post("/api/lift", json={"row": 0, "col": 5})
        assert response.status_code == 200
        assert response.json()["name"] == "A"

    def test_reset(self, client):
        drop(client, "A", 0, 4)
        board = client.post("/api/reset").json()
        assert board["placements"] == []
        assert board["history"] == []


class TestSolveEndpoints:

    def test_status_when_idle(self, client):
        assert client.get("/api/solve").json()["status"] == "idle"

    def test_solve_nearly_solved_board(self, client):
        for placed in REFERENCE_SOLUTION:
            if placed.name not in ("H", "I", "J"):
                assert drop(client, placed.name, placed.row, placed.col).status_code == 200
        response = client.post("/api/solve")
        assert response.status_code == 200
        status = wait_finished(client)
        assert status["status"] == "solved"
        assert {p["name"] for p in status["placed"]} == {"H", "I", "J"}
        assert client.get("/api/board").json()["solved"] is True

    def test_busy_while_solving(self, client):
        client.post("/api/solve")
        client.post("/api/solve/pause")
        assert drop(client, "A", 0, 4).status_code == 409
        assert client.post("/api/solve").status_code == 409
        assert client.post("/api/solve/cancel").status_code == 200
        assert wait_finished(client)["status"] == "cancelled"
        assert drop(client, "A", 0, 4).status_code == 200

    def test_solve_rejects_bad_cadence(self, client):
        response = client.post("/api/solve", json={"yield_every": 0})
        assert response.status_code == 422
        assert client.get("/api/solve").json()["status"] == "idle"

    def test_solve_with_cadence(self, client):
        response = client.post("/api/solve", json={"yield_every": 1})
        assert response.status_code == 200
        client.post("/api/solve/cancel")
        wait_finished(client)

    def test_board_readable_while_solving(self):
        session = PuzzleSession()
        client = TestClient(create_app(session))
        session.start_solver(yield_every=1)
        try:
            for _ in range(500):
                assert board_response(session).rows == 7
            for _ in range(20):
                assert client.get("/api/board").status_code == 200
        finally:
            session.cancel_solver()
            session.wait_for_solver(5)
