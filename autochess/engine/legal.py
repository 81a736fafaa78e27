"""Checked move generation: castling and the king-safety filter.

The unchecked generator in :mod:`autochess.engine.movegen` feeds the check
detector; everything here sits on top of both, so castling legality can ask
"am I in check?" without any chance of recursing back into itself.
"""

from __future__ import annotations

from typing import Iterator, List, Tuple

from .apply import apply_move
from .attacks import is_in_check
from .board import Board, Color, Flag, Kind
from .move import Move, pack
from .movegen import generate_unchecked_moves


CASTLING_FLAGS = frozenset({Flag.CANNOT_CASTLE, Flag.CASTLING})


def castling_moves(board: Board, color: Color) -> List[Move]:
    """Return the castling moves currently permitted to ``color``.

    A side may castle toward a rook when neither king nor rook has lost
    eligibility, the king is not in check, every square between them is
    empty and the square the king crosses is not attacked. Whether the
    landing square is safe is left to the king-safety filter.
    """
    row = color.home_row
    king = board.square_at(row, 4)
    if (
        king is None
        or king.kind is not Kind.KING
        or king.color is not color
        or king.has(Flag.CANNOT_CASTLE)
    ):
        return []
    if is_in_check(board, color):
        return []

    out: List[Move] = []
    for step, rook_col in ((1, 7), (-1, 0)):
        rook = board.square_at(row, rook_col)
        if (
            rook is None
            or rook.kind is not Kind.ROOK
            or rook.color is not color
            or rook.has(Flag.CANNOT_CASTLE)
        ):
            continue
        lo, hi = sorted((4, rook_col))
        if any(not board.is_empty(row, c) for c in range(lo + 1, hi)):
            continue
        crossing = 4 + step
        probe = board.with_square(row, 4, None).with_square(row, crossing, king)
        if is_in_check(probe, color):
            continue
        out.append(Move(pack(row, 4), pack(row, 4 + 2 * step), CASTLING_FLAGS))
    return out


def generate_pseudo_legal_moves(board: Board, color: Color) -> List[Move]:
    """Return all pseudo-legal moves of ``color``, castling included.

    Moves that leave the mover's own king in check are still present.
    """
    return generate_unchecked_moves(board, color) + castling_moves(board, color)


def captures_king(board: Board, move: Move) -> bool:
    target = board.square_at(*divmod(move.dest, 8))
    return target is not None and target.kind is Kind.KING


def iter_legal(board: Board, color: Color) -> Iterator[Tuple[Move, Board]]:
    """Yield ``(move, resulting_board)`` for each legal move of ``color``."""
    for m in generate_pseudo_legal_moves(board, color):
        if captures_king(board, m):
            # Only reachable from a position where the opponent is already in
            # check on our move; such a capture is never offered.
            continue
        child = apply_move(board, m)
        if not is_in_check(child, color):
            yield m, child


def generate_legal_moves(board: Board, color: Color) -> List[Move]:
    """Return the moves of ``color`` that do not leave its king in check."""
    return [m for m, _ in iter_legal(board, color)]


def has_legal_move(board: Board, color: Color) -> bool:
    return next(iter_legal(board, color), None) is not None
