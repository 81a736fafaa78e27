from __future__ import annotations

from typing import Dict, Optional

from .board import Board, Color
from .move import pack
from .movegen import generate_unchecked_moves


def is_attacked(board: Board, row: int, col: int, by: Color) -> bool:
    """Return True if any unchecked move of ``by`` lands on ``(row, col)``.

    For an occupied square this is the usual notion of attack. On an empty
    square a pawn push counts and a pawn diagonal does not, so callers that
    care about empty squares place a piece there first.
    """
    target = pack(row, col)
    return any(m.dest == target for m in generate_unchecked_moves(board, by))


def is_in_check(board: Board, color: Color) -> bool:
    """Return True if ``color``'s king is attacked by the opponent."""
    row, col = divmod(board.find_king(color), 8)
    return is_attacked(board, row, col, color.opponent)


def attack_map(board: Board, by: Color) -> Dict[int, int]:
    """Map each destination square of ``by`` to the number of its attackers."""
    sources: Dict[int, set] = {}
    for m in generate_unchecked_moves(board, by):
        sources.setdefault(m.dest, set()).add(m.source)
    return {sq: len(srcs) for sq, srcs in sources.items()}


def count_attackers(board: Board, row: int, col: int, by: Optional[Color] = None) -> int:
    """Count distinct pieces attacking ``(row, col)``.

    Args:
        board (Board): Position to inspect.
        row (int): Target row.
        col (int): Target column.
        by (Optional[Color]): Only count this color's pieces; both colors
            when ``None``.

    Returns:
        int: Number of pieces that have the square among their destinations.
    """
    target = pack(row, col)
    colors = (by,) if by is not None else (Color.WHITE, Color.BLACK)
    return sum(attack_map(board, color).get(target, 0) for color in colors)
