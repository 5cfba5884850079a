"""Tests for text rendering."""
from tri_solver.board import Board, BoardShape
from tri_solver.placement import place
from tri_solver.viz import display_board, format_board


def test_empty_cells_show_orientation():
    board = Board.create(BoardShape.from_rows([[1, -1]]))
    assert format_board(board) == "r0:  △  ▽"


def test_top_row_printed_first(default_board):
    lines = format_board(default_board).splitlines()
    assert len(lines) == 7
    assert lines[0].startswith("r6:")
    assert lines[-1].startswith("r0:")


def test_inactive_cells_are_blank():
    board = Board.create(BoardShape.from_rows([[1, 0, 1]]))
    assert format_board(board) == "r0:  △     △"


def test_piece_names(domino_catalog):
    board = Board.create(BoardShape.from_rows([[1, -1]]))
    place(domino_catalog["T2"], 0, 0, 0, board)
    assert format_board(board) == "r0: T2 T2"


def test_display_board(nearly_solved, capsys):
    display_board(nearly_solved)
    out = capsys.readouterr().out
    assert "Empty cells: 17" in out
    assert "Pieces placed: 8" in out
