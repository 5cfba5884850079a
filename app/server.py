"""
Triangle puzzle - FastAPI backend server

Exposes one interactive PuzzleSession over HTTP: hand edits (rotate, drop,
lift, undo, reset) and control of the background solver.
"""

import logging

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from tri_solver import PlacedPiece, PuzzleSession, SessionBusy, UnknownPiece, format_board
from tri_solver.pieces import shape_anchor

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api")


# Request/Response models
class PlacementModel(BaseModel):
    name: str
    row: int
    col: int
    rotation: int

    @classmethod
    def from_placed(cls, placed: PlacedPiece) -> "PlacementModel":
        return cls(name=placed.name, row=placed.row, col=placed.col, rotation=placed.rotation)


class BoardResponse(BaseModel):
    rows: int
    cols: int
    cells: list[list[int]]                  # 0 = outside the puzzle, +1 up, -1 down
    grid: list[list[str | None]]            # Piece name per cell, None = empty
    placements: list[PlacementModel]
    history: list[str]                      # Undo order, oldest first
    solved: bool
    text: str


class PieceInfo(BaseModel):
    name: str
    color: str
    triangle_count: int
    rotation: int                           # Rotation selected in hand
    placed: bool
    shape: list[list[int]]                  # Shape at that rotation
    anchor: list[int]                       # First triangle of that shape, a default grab cell


class DropRequest(BaseModel):
    name: str
    row: int
    col: int
    grab_row: int = 0                       # Shape cell the user is holding
    grab_col: int = 0


class LiftRequest(BaseModel):
    row: int
    col: int


class SolveRequest(BaseModel):
    yield_every: int | None = Field(default=None, ge=1)


class SolverStatusResponse(BaseModel):
    status: str
    iterations: int = 0
    elapsed: float = 0.0
    placed: list[PlacementModel] = []
    error: str | None = None


def get_session(request: Request) -> PuzzleSession:
    return request.app.state.session


def board_response(session: PuzzleSession) -> BoardResponse:
    board = session.board
    # The solver thread adds and removes entries while it runs
    placements = list(board.placements.values())
    return BoardResponse(
        rows=board.rows,
        cols=board.cols,
        cells=[list(row) for row in board.shape.cells],
        grid=[list(row) for row in board.grid],
        placements=[PlacementModel.from_placed(p) for p in placements],
        history=[p.name for p in session.history],
        solved=session.is_solved(),
        text=format_board(board),
    )


def piece_info(session: PuzzleSession, name: str) -> PieceInfo:
    piece = session.catalog[name]
    rotation = session.rotations[name]
    shape = piece.shape(rotation)
    return PieceInfo(
        name=name,
        color=piece.color,
        triangle_count=piece.triangle_count,
        rotation=rotation,
        placed=name in session.board.placements,
        shape=[list(row) for row in shape],
        anchor=list(shape_anchor(shape)),
    )


def solver_response(session: PuzzleSession) -> SolverStatusResponse:
    status = session.solver_status
    worker = session.worker
    if worker is None:
        return SolverStatusResponse(status=status.value)
    if worker.result is not None:
        return SolverStatusResponse(
            status=status.value,
            iterations=worker.result.iterations,
            elapsed=worker.result.elapsed,
            placed=[PlacementModel.from_placed(p) for p in worker.result.placements],
        )
    progress = worker.solver.progress()
    return SolverStatusResponse(
        status=status.value,
        iterations=progress.iterations,
        elapsed=progress.elapsed,
        placed=[PlacementModel.from_placed(p) for p in progress.placed],
        error=str(worker.error) if worker.error is not None else None,
    )


# === Board ===

@api_router.get("/board", response_model=BoardResponse)
def get_board(session: PuzzleSession = Depends(get_session)):
    """Current board, placements and undo history."""
    return board_response(session)


@api_router.get("/pieces", response_model=list[PieceInfo])
def get_pieces(session: PuzzleSession = Depends(get_session)):
    """Every catalog piece with its selected rotation."""
    return [piece_info(session, name) for name in session.catalog]


@api_router.post("/pieces/{name}/rotate", response_model=PieceInfo)
def rotate_piece(name: str, session: PuzzleSession = Depends(get_session)):
    """Turn a piece in hand by 60 degrees."""
    try:
        session.rotate(name)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return piece_info(session, name)


@api_router.post("/drop", response_model=PlacementModel)
def drop_piece(request: DropRequest, session: PuzzleSession = Depends(get_session)):
    """Drop a piece near a cell; it snaps to the nearest legal anchor."""
    try:
        placed = session.drop(request.name, request.row, request.col,
                              grab=(request.grab_row, request.grab_col))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if placed is None:
        raise HTTPException(
            status_code=422,
            detail=f"No legal position for {request.name} near ({request.row}, {request.col})",
        )
    return PlacementModel.from_placed(placed)


@api_router.post("/lift", response_model=PlacementModel)
def lift_piece(request: LiftRequest, session: PuzzleSession = Depends(get_session)):
    """Pick up the piece covering a cell."""
    placed = session.lift(request.row, request.col)
    if placed is None:
        raise HTTPException(status_code=422, detail=f"No piece at ({request.row}, {request.col})")
    return PlacementModel.from_placed(placed)


@api_router.post("/undo", response_model=PlacementModel)
def undo(session: PuzzleSession = Depends(get_session)):
    """Take back the most recent placement."""
    placed = session.undo()
    if placed is None:
        raise HTTPException(status_code=422, detail="Nothing to undo")
    return PlacementModel.from_placed(placed)


@api_router.post("/reset", response_model=BoardResponse)
def reset(session: PuzzleSession = Depends(get_session)):
    """Cancel the solver and clear the board."""
    session.reset()
    return board_response(session)


# === Solver ===

@api_router.post("/solve", response_model=SolverStatusResponse)
def start_solve(request: SolveRequest | None = None, session: PuzzleSession = Depends(get_session)):
    """Complete the board in the background with the pieces still in hand."""
    if request is not None and request.yield_every is not None:
        session.start_solver(yield_every=request.yield_every)
    else:
        session.start_solver()
    return solver_response(session)


@api_router.get("/solve", response_model=SolverStatusResponse)
def solve_status(session: PuzzleSession = Depends(get_session)):
    return solver_response(session)


@api_router.post("/solve/pause", response_model=SolverStatusResponse)
def pause_solve(session: PuzzleSession = Depends(get_session)):
    session.pause_solver()
    return solver_response(session)


@api_router.post("/solve/resume", response_model=SolverStatusResponse)
def resume_solve(session: PuzzleSession = Depends(get_session)):
    session.resume_solver()
    return solver_response(session)


@api_router.post("/solve/cancel", response_model=SolverStatusResponse)
def cancel_solve(session: PuzzleSession = Depends(get_session)):
    session.cancel_solver()
    return solver_response(session)


async def unknown_piece_handler(request: Request, exc: UnknownPiece):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def session_busy_handler(request: Request, exc: SessionBusy):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


def create_app(session: PuzzleSession | None = None) -> FastAPI:
    """Build the API around a session (a fresh default one if not given)."""
    app = FastAPI(title="Triangle Puzzle")
    app.state.session = session if session is not None else PuzzleSession()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(UnknownPiece, unknown_piece_handler)
    app.add_exception_handler(SessionBusy, session_busy_handler)
    app.include_router(api_router)
    return app


app = create_app()

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting triangle puzzle server at http://localhost:8000")
    uvicorn.run(app, host="0.0.0.0", port=8000)
