from __future__ import annotations

from typing import Dict

from .board import Board, Color
from .legal import iter_legal


def perft(board: Board, color: Color, depth: int) -> int:
    """Compute perft node count for ``board`` with ``color`` to move.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    nodes = 0
    for _, child in iter_legal(board, color):
        nodes += 1 if depth == 1 else perft(child, color.opponent, depth - 1)
    return nodes


def divide(board: Board, color: Color, depth: int) -> Dict[str, int]:
    """Per-root-move perft counts keyed by ``Move.to_str()``, for debugging."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for m, child in iter_legal(board, color):
        key = m.to_str()
        out[key] = out.get(key, 0) + perft(child, color.opponent, depth - 1)
    return out
