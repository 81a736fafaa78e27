"""Pseudo-legal move generation per piece.

Nothing here consults the check detector, so the check detector can call
into it freely. Castling, which does need check tests, lives in
:mod:`autochess.engine.legal`.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .board import Board, Color, Flag, Kind, Piece, in_bounds
from .move import Move, pack


KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)
BISHOP_DIRS: Tuple[Tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_DIRS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
KING_OFFSETS: Tuple[Tuple[int, int], ...] = BISHOP_DIRS + ROOK_DIRS


def piece_destinations(board: Board, row: int, col: int) -> List[Move]:
    """Return pseudo-legal moves for the piece standing on ``(row, col)``."""
    piece = board.square_at(row, col)
    if piece is None:
        return []
    return destinations_as(board, piece, row, col)


def destinations_as(board: Board, piece: Piece, row: int, col: int) -> List[Move]:
    """Return pseudo-legal moves from ``(row, col)`` as if ``piece`` stood there.

    The occupant of the square is ignored, which lets the queen reuse the
    bishop and rook rules. Castling is never produced here.
    """
    kind = piece.kind
    if kind is Kind.PAWN:
        return _pawn_moves(board, piece, row, col)
    if kind is Kind.KNIGHT:
        return _step_moves(board, piece, row, col, KNIGHT_OFFSETS)
    if kind is Kind.BISHOP:
        return _ray_moves(board, piece, row, col, BISHOP_DIRS)
    if kind is Kind.ROOK:
        return _ray_moves(board, piece, row, col, ROOK_DIRS, Flag.CANNOT_CASTLE)
    if kind is Kind.QUEEN:
        as_bishop = Piece(Kind.BISHOP, piece.color)
        as_rook = Piece(Kind.ROOK, piece.color)
        return destinations_as(board, as_bishop, row, col) + destinations_as(
            board, as_rook, row, col
        )
    if kind is Kind.KING:
        return _step_moves(board, piece, row, col, KING_OFFSETS, Flag.CANNOT_CASTLE)
    raise AssertionError(f"unknown piece kind: {kind!r}")


def generate_unchecked_moves(board: Board, color: Color) -> List[Move]:
    """Return every pseudo-legal move of ``color`` except castling.

    This is the attack generator used by the check detector. Castling can
    never capture, so leaving it out changes no attack set.
    """
    moves: List[Move] = []
    for sq, _ in board.pieces(color):
        row, col = divmod(sq, 8)
        moves.extend(piece_destinations(board, row, col))
    return moves


# --- Per-piece rules ---
def _pawn_moves(board: Board, piece: Piece, row: int, col: int) -> List[Move]:
    color = piece.color
    fwd = color.forward
    src = pack(row, col)
    out: List[Move] = []

    def add(to_row: int, to_col: int, *flags: Flag) -> None:
        out.append(Move(src, pack(to_row, to_col), frozenset(flags)))
        if to_row == color.last_row:
            # Queen is the unflagged default; the duplicate under-promotes.
            out.append(Move(src, pack(to_row, to_col), frozenset(flags + (Flag.PROMOTE_KNIGHT,))))

    one = row + fwd
    if not in_bounds(one, col):
        return out
    if board.is_empty(one, col):
        add(one, col)
        two = one + fwd
        if row == color.pawn_row and board.is_empty(two, col):
            add(two, col, Flag.EN_PASSANT)

    for dc in (-1, 1):
        c = col + dc
        if not in_bounds(one, c):
            continue
        if board.is_enemy(piece, one, c):
            add(one, c)
        elif board.is_empty(one, c) and _en_passant_victim(board, piece, row, c) is not None:
            add(one, c, Flag.EN_PASSANT_CAPTURE)
    return out


def _en_passant_victim(board: Board, piece: Piece, row: int, col: int) -> Optional[Piece]:
    target = board.square_at(row, col)
    if (
        target is not None
        and target.kind is Kind.PAWN
        and target.color is not piece.color
        and target.has(Flag.EN_PASSANT)
    ):
        return target
    return None


def _step_moves(
    board: Board,
    piece: Piece,
    row: int,
    col: int,
    offsets: Iterable[Tuple[int, int]],
    *flags: Flag,
) -> List[Move]:
    src = pack(row, col)
    out: List[Move] = []
    for dr, dc in offsets:
        r, c = row + dr, col + dc
        if board.is_valid(piece, r, c):
            out.append(Move(src, pack(r, c), frozenset(flags)))
    return out


def _ray_moves(
    board: Board,
    piece: Piece,
    row: int,
    col: int,
    dirs: Iterable[Tuple[int, int]],
    *flags: Flag,
) -> List[Move]:
    src = pack(row, col)
    out: List[Move] = []
    for dr, dc in dirs:
        r, c = row + dr, col + dc
        while board.is_valid(piece, r, c):
            out.append(Move(src, pack(r, c), frozenset(flags)))
            if not board.is_empty(r, c):
                break
            r += dr
            c += dc
    return out
