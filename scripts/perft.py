#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import time
import os
import sys

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo root (which contains `autochess/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from autochess.engine.board import STARTPOS_FEN
from autochess.engine.game import Game
from autochess.engine.perft import divide, perft


def main() -> None:
    parser = argparse.ArgumentParser(description="Run perft on a given FEN and depth")
    parser.add_argument(
        "--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)"
    )
    parser.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    parser.add_argument("--divide", action="store_true", help="Print counts per root move")
    args = parser.parse_args()

    try:
        game = Game.from_fen(args.fen)
    except ValueError as e:
        parser.error(f"invalid FEN: {e}")
    start = time.perf_counter()
    if args.divide:
        counts = divide(game.board, game.side_to_move, args.depth)
        for mv in sorted(counts):
            print(f"{mv}: {counts[mv]}")
        nodes = sum(counts.values())
    else:
        nodes = perft(game.board, game.side_to_move, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
