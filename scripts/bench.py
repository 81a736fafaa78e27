#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import json
import os
import random
import sys
from dataclasses import dataclass
from typing import Any, Dict, List

# Ensure repo root (which contains `autochess/`) is importable when running directly
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from autochess.engine.game import Game
from autochess.search.service import SearchService


@dataclass
class BenchItem:
    id: str
    fen: str


DEFAULT_POSITIONS = [
    BenchItem("startpos", "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"),
    BenchItem("open-center", "r1bqkbnr/pppp1ppp/2n5/4p3/3PP3/5N2/PPP2PPP/RNBQKB1R b KQkq d3 0 3"),
    BenchItem("castling", "r3k2r/pppq1ppp/2npbn2/2b1p3/2B1P3/2NPBN2/PPPQ1PPP/R3K2R w KQkq - 0 8"),
    BenchItem("endgame", "8/5k2/3p4/1p1Pp2p/pP2Pp1P/P4P1K/8/8 b - - 0 1"),
]


def bench_position(svc: SearchService, item: BenchItem, depth: int) -> Dict[str, Any]:
    game = Game.from_fen(item.fen)
    res = svc.search(game.board, game.side_to_move, depth)
    nps = int(res.nodes * 1000 / max(1, res.time_ms))
    return {
        "id": item.id,
        "fen": item.fen,
        "depth": res.depth,
        "best_move": res.best_move.to_str() if res.best_move else None,
        "score": res.score,
        "candidates": res.candidates,
        "nodes": res.nodes,
        "time_ms": res.time_ms,
        "nps": nps,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Time the search over a few fixed positions")
    parser.add_argument("--depth", type=int, default=1, help="Lookahead depth (default: 1)")
    parser.add_argument("--seed", type=int, default=0, help="Tie-break seed (default: 0)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    args = parser.parse_args()

    svc = SearchService(random.Random(args.seed))
    results: List[Dict[str, Any]] = []
    for idx, item in enumerate(DEFAULT_POSITIONS, start=1):
        sys.stderr.write(f"[{idx}/{len(DEFAULT_POSITIONS)}] {item.id}: running...\n")
        results.append(bench_position(svc, item, args.depth))
    print(json.dumps({"results": results}, indent=2 if args.pretty else None))


if __name__ == "__main__":
    main()
