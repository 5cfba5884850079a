"""
Exception types raised by the tiling engine.

Illegal placements are not exceptions: the placement oracle answers them with
False and the solver moves on to the next branch.
"""


class TriSolverError(Exception):
    """Base class for every error raised by tri_solver."""


class InvariantViolation(TriSolverError):
    """Internal bookkeeping broke (programming error, not "no solution")."""


class InvalidShape(TriSolverError, ValueError):
    """A board or piece shape does not follow the triangle parity rules."""


class UnknownPiece(TriSolverError, KeyError):
    """A piece name that is not in the catalog."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown piece {self.name!r}"


class SessionBusy(TriSolverError, RuntimeError):
    """The board cannot be changed by hand while the solver is active."""
