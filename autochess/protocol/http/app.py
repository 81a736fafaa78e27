from __future__ import annotations

import logging
import random
import threading
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore
from ...config import MAX_DEPTH, EngineConfig
from ...engine.board import Color
from ...engine.game import Game
from ...engine.perft import perft as perft_nodes
from ...eval import center_control, evaluate, material
from ...render import describe_move, render_board
from ...search.service import SearchService


logger = logging.getLogger(__name__)

MAX_PERFT_DEPTH = 4


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="Start position; standard if omitted")
    depth: Optional[int] = Field(default=None, ge=0, le=MAX_DEPTH)
    seed: Optional[int] = Field(default=None, description="Seed for tie-break randomness")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class GameState(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    legal_moves: list[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    draw: bool
    result: str
    reason: str
    last_move: Optional[str]
    move_history: list[str]
    diagram: str


class StepResponse(BaseModel):
    move: Optional[str]
    description: Optional[str]
    state: GameState


class EvaluationResponse(BaseModel):
    white: int
    black: int
    material: int
    center_white: int
    center_black: int


class PerftRequest(BaseModel):
    fen: str = Field(..., description="FEN string")
    depth: int = Field(default=1, ge=0, le=MAX_PERFT_DEPTH)


def create_app(config: Optional[EngineConfig] = None) -> FastAPI:
    cfg = config or EngineConfig.from_env()
    app = FastAPI(title="autochess", version="0.1.0")

    logging.basicConfig(level=cfg.log_level)

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    app.state.store = store

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        req = req or CreateGameRequest()
        depth = req.depth if req.depth is not None else cfg.depth
        seed = req.seed if req.seed is not None else cfg.seed
        search = SearchService(random.Random(seed)) if seed is not None else SearchService()
        try:
            if req.fen:
                game = Game.from_fen(req.fen, search=search, depth=depth)
            else:
                game = Game.new(search=search, depth=depth)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        game.draw_plies = cfg.draw_plies
        game_id = store.create(game)
        logger.info("game created", extra={"game_id": game_id, "depth": depth})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    # Handlers that touch a game are plain def: FastAPI runs them in the
    # threadpool, so waiting on the per-game lock or searching does not block
    # the event loop.
    @app.get("/api/games/{game_id}/state", response_model=GameState)
    def get_state(game_id: str) -> GameState:
        game = _require_game(store, game_id)
        with _game_lock(store, game_id):
            return _state(game_id, game)

    @app.post("/api/games/{game_id}/step", response_model=StepResponse)
    def step(game_id: str) -> StepResponse:
        game = _require_game(store, game_id)
        with _game_lock(store, game_id):
            if game.is_over():
                raise HTTPException(status_code=409, detail="game is over")
            before = game.board
            move = game.step()
            description = describe_move(before, move) if move is not None else None
            return StepResponse(
                move=move.to_str() if move is not None else None,
                description=description,
                state=_state(game_id, game),
            )

    @app.get("/api/games/{game_id}/evaluate", response_model=EvaluationResponse)
    def evaluate_game(game_id: str) -> EvaluationResponse:
        game = _require_game(store, game_id)
        with _game_lock(store, game_id):
            board = game.board
        return EvaluationResponse(
            white=evaluate(board, Color.WHITE),
            black=evaluate(board, Color.BLACK),
            material=material(board, Color.WHITE),
            center_white=center_control(board, Color.WHITE),
            center_black=center_control(board, Color.BLACK),
        )

    @app.delete("/api/games/{game_id}", status_code=204)
    async def delete_game(game_id: str) -> Response:
        _require_game(store, game_id)
        store.delete(game_id)
        return Response(status_code=204)

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, int]:
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return {"nodes": perft_nodes(game.board, game.side_to_move, req.depth)}

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _game_lock(store: InMemorySessionStore, game_id: str) -> threading.Lock:
    try:
        return store.lock_for(game_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="game not found")


def _state(game_id: str, game: Game) -> GameState:
    history = game.move_history()
    outcome = game.outcome()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=game.side_to_move.value,
        legal_moves=[m.to_str() for m in game.legal_moves()],
        in_check=game.in_check(),
        checkmate=game.checkmate(),
        stalemate=game.stalemate(),
        draw=game.is_draw(),
        result=outcome.result,
        reason=outcome.reason,
        last_move=history[-1] if history else None,
        move_history=history,
        diagram=render_board(game.board),
    )
