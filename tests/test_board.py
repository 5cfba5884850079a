"""Tests for the board model."""
import pytest

from tri_solver.board import DEFAULT_BOARD_SHAPE, Board, BoardShape, PlacedPiece
from tri_solver.exceptions import InvalidShape, InvariantViolation


class TestBoardShape:

    def test_default_board_dimensions(self):
        assert DEFAULT_BOARD_SHAPE.rows == 7
        assert DEFAULT_BOARD_SHAPE.cols == 11
        assert DEFAULT_BOARD_SHAPE.active_count == 55

    def test_active_cells_row_major(self):
        cells = DEFAULT_BOARD_SHAPE.active_cells()
        assert cells[:3] == [(0, 4), (0, 5), (0, 6)]
        assert cells == sorted(cells)
        assert len(cells) == 55

    def test_orientation_is_derived(self):
        for r, c in DEFAULT_BOARD_SHAPE.active_cells():
            assert DEFAULT_BOARD_SHAPE.cells[r][c] == DEFAULT_BOARD_SHAPE.orientation(r, c)

    def test_in_bounds_and_active(self):
        assert DEFAULT_BOARD_SHAPE.in_bounds(0, 0)
        assert not DEFAULT_BOARD_SHAPE.is_active(0, 0)
        assert DEFAULT_BOARD_SHAPE.is_active(0, 4)
        assert not DEFAULT_BOARD_SHAPE.in_bounds(-1, 4)
        assert not DEFAULT_BOARD_SHAPE.is_active(7, 4)

    def test_rejects_wrong_parity(self):
        with pytest.raises(InvalidShape):
            BoardShape.from_rows([[-1]])

    def test_rejects_ragged_rows(self):
        with pytest.raises(InvalidShape):
            BoardShape.from_rows([[1, -1], [-1]])

    def test_rejects_bad_values(self):
        with pytest.raises(ValueError):
            BoardShape.from_rows([[2]])

    def test_rejects_empty(self):
        with pytest.raises(InvalidShape):
            BoardShape.from_rows([])


class TestBoard:

    def test_create_is_empty(self, default_board):
        assert default_board.empty_count() == 55
        assert not default_board.is_solved()
        assert default_board.placements == {}

    def test_set_and_clear_cell(self, default_board):
        default_board.set_cell(0, 4, "A")
        assert default_board.occupant(0, 4) == "A"
        assert not default_board.is_empty(0, 4)
        assert default_board.empty_count() == 54
        default_board.clear_cell(0, 4)
        assert default_board.is_empty(0, 4)

    def test_inactive_cell_cannot_be_occupied(self, default_board):
        with pytest.raises(InvariantViolation):
            default_board.set_cell(0, 0, "A")
        with pytest.raises(InvariantViolation):
            default_board.clear_cell(0, 0)

    def test_occupant_off_board(self, default_board):
        assert default_board.occupant(-1, -1) is None
        assert not default_board.is_empty(-1, -1)

    def test_copy_is_independent(self, default_board):
        clone = default_board.copy()
        clone.set_cell(0, 4, "A")
        clone.placements["A"] = PlacedPiece("A", 0, 4, 0)
        assert default_board.is_empty(0, 4)
        assert default_board.placements == {}
        assert clone.shape is default_board.shape

    def test_reset(self, nearly_solved):
        nearly_solved.reset()
        assert nearly_solved.empty_count() == 55
        assert nearly_solved.placements == {}

    def test_piece_at(self, nearly_solved):
        placed = nearly_solved.piece_at(0, 4)
        assert placed == PlacedPiece("A", 0, 4, 0)
        assert nearly_solved.piece_at(5, 0) is None

    def test_snapshot_tracks_occupancy(self, default_board):
        before = default_board.snapshot()
        default_board.set_cell(0, 4, "A")
        assert default_board.snapshot() != before
        default_board.clear_cell(0, 4)
        assert default_board.snapshot() == before
