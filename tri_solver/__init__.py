"""
tri_solver - triangular board tiling puzzle engine

Core components:
- BoardShape / Board: the puzzle outline and its occupancy
- PieceDefinition / PieceCatalog: pieces with their six rotations
- placement: legality oracle, place/remove, drop-to-grid snapping
- Solver / solve_puzzle: cancellable backtracking search
- SolverWorker / PuzzleSession: background solving and interactive editing
"""

from .board import DEFAULT_BOARD_SHAPE, Board, BoardShape, PlacedPiece
from .exceptions import InvalidShape, InvariantViolation, SessionBusy, TriSolverError, UnknownPiece
from .geometry import TrianglePos, neighbors, orientation
from .pieces import ALL_PIECES, DEFAULT_CATALOG, REFERENCE_SOLUTION, PieceCatalog, PieceDefinition, make_piece
from .placement import can_place, find_nearest_legal_placement, place, remove, remove_at
from .regions import connected_empty_regions, region_fillable
from .session import PuzzleSession
from .solver import Solver, SolverControl, SolverStatus, SolveResult, solve_puzzle, unplaced_pieces
from .viz import display_board, format_board
from .worker import SolverWorker
