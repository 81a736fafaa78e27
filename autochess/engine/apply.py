from __future__ import annotations

from typing import List, Optional

from .board import PIECE_FLAGS, Board, Flag, Kind, Piece
from .move import Move, unpack


def apply_move(board: Board, move: Move) -> Board:
    """Return a new Board with ``move`` applied; ``board`` is left untouched.

    Handles captures, en passant removal, promotion (queen by default, knight
    when flagged), the rook half of castling and flag bookkeeping. The move is
    trusted to come from the generator: no legality test happens here.

    Raises:
        AssertionError: If the source square is empty or the move would
            capture a king. Both mean the generator produced a bad move.
    """
    src_row, src_col = unpack(move.source)
    dst_row, dst_col = unpack(move.dest)
    mover = board.square_at(src_row, src_col)
    assert mover is not None, f"no piece on source square {move.source}"
    target = board.square_at(dst_row, dst_col)
    assert target is None or target.kind is not Kind.KING, "a king must never be captured"

    grid: List[List[Optional[Piece]]] = [list(r) for r in board.grid]
    grid[src_row][src_col] = None

    if move.has(Flag.EN_PASSANT_CAPTURE):
        victim = grid[src_row][dst_col]
        assert (
            victim is not None and victim.kind is Kind.PAWN and victim.color is not mover.color
        ), "en passant capture without a pawn to take"
        grid[src_row][dst_col] = None

    # Only piece-level flags survive the move; EN_PASSANT is reset unless the
    # move itself is a double advance.
    kept = (mover.flags & {Flag.CANNOT_CASTLE}) | (move.flags & PIECE_FLAGS)
    placed = Piece(mover.kind, mover.color, frozenset(kept))
    if mover.kind is Kind.PAWN and dst_row == mover.color.last_row:
        kind = Kind.KNIGHT if move.has(Flag.PROMOTE_KNIGHT) else Kind.QUEEN
        placed = Piece(kind, mover.color)
    grid[dst_row][dst_col] = placed

    if move.has(Flag.CASTLING):
        step = 1 if dst_col > src_col else -1
        rook_col = 7 if step > 0 else 0
        rook = grid[src_row][rook_col]
        assert rook is not None and rook.kind is Kind.ROOK, "castling without a rook"
        grid[src_row][rook_col] = None
        grid[src_row][dst_col - step] = rook.with_flags(Flag.CANNOT_CASTLE)

    # The en passant window of this side's earlier double advance has closed.
    for r in range(8):
        for c in range(8):
            p = grid[r][c]
            if (
                p is not None
                and p.color is mover.color
                and p.has(Flag.EN_PASSANT)
                and (r, c) != (dst_row, dst_col)
            ):
                grid[r][c] = p.discard(Flag.EN_PASSANT)

    return Board(tuple(tuple(r) for r in grid))
