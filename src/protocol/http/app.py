from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ConfigDict, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from ...engine.board import STARTPOS_FEN
from ...engine.game import Game, GameState
from ...engine.move import square_to_str
from ...engine.perft import perft as perft_nodes
from ...engine.pieces import PieceKind, Side
from .session import InMemorySessionStore, Session


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="FEN string; start position if omitted")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_square: str = Field(..., alias="from", description="Origin square, e.g. e2")
    to: str = Field(..., description="Destination square, e.g. e4")
    auto_promote: bool = Field(default=True, description="Promote without a separate call")
    promotion: Optional[str] = Field(default=None, pattern="^[pnbrqkPNBRQK]$")


class PromoteRequest(BaseModel):
    piece: str = Field(..., pattern="^[pnbrqkPNBRQK]$", description="Piece letter, e.g. q")


class PerftRequest(BaseModel):
    fen: str = Field(default=STARTPOS_FEN)
    depth: int = Field(default=1, ge=0, le=3)


class Status(BaseModel):
    state: str
    winner: Optional[str]
    reason: Optional[str]


class GameStateResponse(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    status: Status
    in_check: bool
    legal_moves: Dict[str, List[str]]
    pending_promotion: Optional[str]
    captures: Dict[str, List[str]]
    last_move: Optional[str]
    move_history: List[str]


class MoveResponse(BaseModel):
    accepted: bool
    state: GameStateResponse


class SquareMovesResponse(BaseModel):
    square: str
    moves: List[str]


def create_app() -> FastAPI:
    app = FastAPI(title="Chess Rules API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=logging.INFO)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        fen = req.fen if req is not None else None
        game = _load_game(fen) if fen is not None else Game.new()
        game_id = store.create(game)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"status": "deleted"}

    @app.get("/api/games/{game_id}/state", response_model=GameStateResponse)
    async def get_state(game_id: str) -> GameStateResponse:
        session = _require_session(store, game_id)
        with session.lock:
            return _state_response(game_id, session.game)

    @app.post("/api/games/{game_id}/position", response_model=GameStateResponse)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameStateResponse:
        _require_session(store, game_id)
        store.replace_game(game_id, _load_game(req.fen))
        session = _require_session(store, game_id)
        with session.lock:
            return _state_response(game_id, session.game)

    @app.post("/api/games/{game_id}/move", response_model=MoveResponse)
    async def make_move(game_id: str, req: MoveRequest) -> MoveResponse:
        session = _require_session(store, game_id)
        with session.lock:
            game = session.game
            promotion = PieceKind(req.promotion.lower()) if req.promotion else None
            try:
                accepted = game.apply_move(
                    req.from_square, req.to, auto_promote=req.auto_promote, promotion=promotion
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return MoveResponse(accepted=accepted, state=_state_response(game_id, game))

    @app.post("/api/games/{game_id}/promote", response_model=GameStateResponse)
    async def promote(game_id: str, req: PromoteRequest) -> GameStateResponse:
        session = _require_session(store, game_id)
        with session.lock:
            try:
                session.game.promote(req.piece)
            except ValueError as e:
                raise HTTPException(status_code=409, detail=str(e))
            return _state_response(game_id, session.game)

    @app.post("/api/games/{game_id}/undo", response_model=GameStateResponse)
    async def undo(game_id: str) -> GameStateResponse:
        session = _require_session(store, game_id)
        with session.lock:
            try:
                session.game.undo_move()
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return _state_response(game_id, session.game)

    @app.get("/api/games/{game_id}/moves/{square}", response_model=SquareMovesResponse)
    async def square_moves(game_id: str, square: str) -> SquareMovesResponse:
        session = _require_session(store, game_id)
        with session.lock:
            try:
                dests = session.game.legal_moves(square)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
        return SquareMovesResponse(square=square, moves=sorted(square_to_str(d) for d in dests))

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, int]:
        game = _load_game(req.fen)
        nodes = perft_nodes(game.board, req.depth)
        return {"nodes": nodes, "depth": req.depth}

    return app


def _load_game(fen: str) -> Game:
    try:
        return Game.from_fen(fen)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"invalid FEN: {e}")


def _require_session(store: InMemorySessionStore, game_id: str) -> Session:
    session = store.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="game not found")
    return session


def _status(state: GameState) -> Status:
    return Status(
        state=state.kind.value,
        winner=state.winner.value if state.winner is not None else None,
        reason=state.reason.value if state.reason is not None else None,
    )


def _state_response(game_id: str, game: Game) -> GameStateResponse:
    board = game.board
    legal = {
        square_to_str(fr): sorted(square_to_str(to) for to in dests)
        for fr, dests in game.all_legal_moves().items()
        if dests
    }
    history = game.move_history_uci()
    return GameStateResponse(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=game.side_to_move.value,
        status=_status(game.state()),
        in_check=game.in_check(),
        legal_moves=legal,
        pending_promotion=(
            square_to_str(board.pending_promotion) if board.pending_promotion else None
        ),
        captures={side.value: [p.symbol for p in game.captures(side)] for side in Side},
        last_move=history[-1] if history else None,
        move_history=history,
    )


# Default app for non-factory servers
app = create_app()
