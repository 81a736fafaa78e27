from __future__ import annotations

import argparse
import logging
import random
import sys
from dataclasses import replace
from typing import List, Optional

import uvicorn

from autochess.config import MAX_DEPTH, EngineConfig
from autochess.engine.board import Board, Color
from autochess.engine.game import Game
from autochess.engine.move import Move
from autochess.render import describe_move, render_board
from autochess.search.service import SearchService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="autochess", description="Engine-vs-engine chess")
    sub = parser.add_subparsers(dest="command", required=True)

    play = sub.add_parser("play", help="Play one self-play game in the terminal")
    play.add_argument("--depth", type=int, default=None, help=f"Lookahead plies (0..{MAX_DEPTH})")
    play.add_argument("--seed", type=int, default=None, help="Seed for tie-break randomness")
    play.add_argument("--max-plies", type=int, default=None, help="Stop after this many half-moves")
    play.add_argument("--fen", type=str, default=None, help="Start position (default: standard)")
    play.add_argument("--quiet", action="store_true", help="Only print the moves and the result")

    serve = sub.add_parser("serve", help="Start the HTTP inspection API")
    serve.add_argument("--host", type=str, default=None)
    serve.add_argument("--port", type=int, default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = EngineConfig.from_env()
    except ValueError as e:
        parser.error(str(e))

    if args.command == "serve":
        cfg = replace(
            cfg,
            host=args.host if args.host is not None else cfg.host,
            port=args.port if args.port is not None else cfg.port,
        )
        uvicorn.run(
            "autochess.protocol.http.app:create_app",
            factory=True,
            host=cfg.host,
            port=cfg.port,
            log_level=cfg.log_level.lower(),
        )
        return 0

    if args.depth is not None:
        if not 0 <= args.depth <= MAX_DEPTH:
            parser.error(f"--depth must be between 0 and {MAX_DEPTH}")
        cfg = replace(cfg, depth=args.depth)
    if args.seed is not None:
        cfg = replace(cfg, seed=args.seed)
    logging.basicConfig(level=cfg.log_level if not args.quiet else logging.WARNING)

    search = SearchService(random.Random(cfg.seed)) if cfg.seed is not None else SearchService()
    try:
        if args.fen:
            game = Game.from_fen(args.fen, search=search, depth=cfg.depth)
        else:
            game = Game.new(search=search, depth=cfg.depth)
    except ValueError as e:
        parser.error(f"invalid FEN: {e}")
    game.draw_plies = cfg.draw_plies

    out = sys.stdout
    if not args.quiet:
        print(render_board(game.board), file=out)

    def on_move(before: Board, move: Move) -> None:
        mover = before.square_at(*divmod(move.source, 8))
        indent = "      " if mover is not None and mover.color is Color.BLACK else ""
        print(indent + describe_move(before, move), file=out)
        if not args.quiet:
            print(render_board(game.board), file=out)

    outcome = game.play(max_plies=args.max_plies, on_move=on_move)
    print(f"Game over: {outcome.result} ({outcome.reason})", file=out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
