"""
Text rendering of a board, for logs and the command line.
"""

from .board import Board


def format_board(board: Board) -> str:
    """
    Render the board as a grid of two-character cells.
    Shows piece names, △/▽ for empty cells and blanks outside the puzzle.
    Row numbers increase upward, so the top row is printed first.
    """
    lines = []
    for row in range(board.rows - 1, -1, -1):
        row_str = []
        for col in range(board.cols):
            if not board.shape.is_active(row, col):
                row_str.append("  ")
                continue
            name = board.grid[row][col]
            if name is None:
                # Orientation is determined by (row + col) % 2 == 0
                row_str.append(" △" if (row + col) % 2 == 0 else " ▽")
            else:
                # Show first 2 chars of piece name
                row_str.append(f"{name[:2]:>2}")
        lines.append(f"r{row}: {' '.join(row_str)}".rstrip())
    return "\n".join(lines)


def display_board(board: Board) -> None:
    """Print the board with a small summary."""
    print(format_board(board))
    print(f"Active cells: {board.shape.active_count}")
    print(f"Empty cells: {board.empty_count()}")
    print(f"Pieces placed: {len(board.placements)}")
