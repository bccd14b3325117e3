from __future__ import annotations

import logging
from typing import Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    notation_error_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import GameSession, InMemorySessionStore, fen_tag
from ...engine.board import Board
from ...engine.errors import NotationError
from ...engine.game import GameState
from ...engine.movegen import generate_moves, moves_from
from ...engine.piece import Color
from ...engine.square import Square
from ...notation.pgn import build_pgn
from ...notation.replay import replay_game
from ...notation.san import move_to_san, parse_san


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="FEN or piece-placement field")
    side_to_move: Literal["w", "b"] = Field(default="w", description="Side to move first")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str
    side_to_move: str


class MoveRequest(BaseModel):
    san: str = Field(..., min_length=1, description="SAN move, e.g. Nf3 or exd5")


class PgnRequest(BaseModel):
    pgn: str = Field(..., description="PGN text of a single game")


class PgnResponse(BaseModel):
    pgn: str


class MoveModel(BaseModel):
    uci: str
    san: str
    from_square: str
    to_square: str
    flag: str


class ReplayErrorModel(BaseModel):
    ply: int
    token: str
    code: str
    message: str


class GameStateModel(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    pieces: Dict[str, str]
    ply: int
    move_history: List[str]
    last_move: Optional[str]
    result: Optional[str]
    tags: Dict[str, str]
    error: Optional[ReplayErrorModel] = None


def create_app(
    store: Optional[InMemorySessionStore] = None, log_level: int = logging.INFO
) -> FastAPI:
    app = FastAPI(title="sanboard API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=log_level)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(NotationError, notation_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    # Sessions live as long as this app instance
    sessions = store if store is not None else InMemorySessionStore()
    app.state.sessions = sessions

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        req = req or CreateGameRequest()
        side = Color.parse(req.side_to_move)
        if req.fen:
            # Explicit client input is validated rather than silently replaced
            state = GameState(board=Board.from_fen(req.fen), side_to_move=side)
            session = GameSession.new(state)
            session.tags = {"FEN": fen_tag(state, req.fen), "SetUp": "1"}
        else:
            session = GameSession.new(GameState.new(side_to_move=side))
        game_id = sessions.create(session)
        logger.info("created game", extra={"game_id": game_id})
        return CreateGameResponse(
            game_id=game_id, fen=session.state.to_fen(), side_to_move=side.value
        )

    @app.get("/api/games/{game_id}/state", response_model=GameStateModel)
    async def get_state(game_id: str) -> GameStateModel:
        return _state_model(game_id, _require_session(sessions, game_id))

    @app.get("/api/games/{game_id}/moves", response_model=List[MoveModel])
    async def list_moves(game_id: str, square: Optional[str] = None) -> List[MoveModel]:
        session = _require_session(sessions, game_id)
        state = session.state
        if square is None:
            moves = generate_moves(state.board, state.side_to_move)
        else:
            origin = Square.try_parse(square.strip().lower())
            if origin is None:
                raise HTTPException(status_code=400, detail=f"invalid square: {square!r}")
            piece = state.board.piece_at(origin)
            if piece is None or piece.color is not state.side_to_move:
                moves = []
            else:
                moves = moves_from(state.board, origin)
        return [
            MoveModel(
                uci=m.to_uci(),
                san=move_to_san(m, state.board),
                from_square=m.from_sq.name,
                to_square=m.to_sq.name,
                flag=m.flag.value,
            )
            for m in moves
        ]

    @app.post("/api/games/{game_id}/move", response_model=GameStateModel)
    async def make_move(game_id: str, req: MoveRequest) -> GameStateModel:
        session = _require_session(sessions, game_id)
        state = session.state
        move = parse_san(req.san, state.board, state.side_to_move)
        san = move_to_san(move, state.board)
        session.push(san, move, state.apply_move(move))
        # A played move invalidates any imported result
        session.result = None
        return _state_model(game_id, session)

    @app.post("/api/games/{game_id}/undo", response_model=GameStateModel)
    async def undo(game_id: str) -> GameStateModel:
        session = _require_session(sessions, game_id)
        try:
            session.pop()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _state_model(game_id, session)

    @app.post("/api/games/{game_id}/pgn", response_model=GameStateModel)
    async def load_pgn(game_id: str, req: PgnRequest) -> GameStateModel:
        _require_session(sessions, game_id)
        replay = replay_game(req.pgn)
        session = GameSession.from_replay(replay)
        sessions.set(game_id, session)
        model = _state_model(game_id, session)
        if replay.error is not None:
            model.error = ReplayErrorModel(
                ply=replay.error.ply,
                token=replay.error.token,
                code=replay.error.code,
                message=replay.error.message,
            )
        return model

    @app.get("/api/games/{game_id}/pgn", response_model=PgnResponse)
    async def export_pgn(game_id: str) -> PgnResponse:
        session = _require_session(sessions, game_id)
        return PgnResponse(pgn=build_pgn(session.to_parsed_game(), numbered=True))

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        if not sessions.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"status": "deleted"}

    return app


def _require_session(store: InMemorySessionStore, game_id: str) -> GameSession:
    session = store.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="game not found")
    return session


def _state_model(game_id: str, session: GameSession) -> GameStateModel:
    state = session.state
    return GameStateModel(
        game_id=game_id,
        fen=state.to_fen(),
        side_to_move=state.side_to_move.value,
        pieces={sq.name: piece.fen_char for sq, piece in state.board.pieces()},
        ply=session.ply,
        move_history=list(session.sans),
        last_move=session.moves[-1].to_uci() if session.moves else None,
        result=session.result,
        tags=dict(session.tags),
    )
