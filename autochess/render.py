"""Plain-text presentation of boards and moves.

No rules logic lives here; everything is derived from the engine's public
functions.
"""

from __future__ import annotations

from typing import List

from autochess.engine.apply import apply_move
from autochess.engine.attacks import is_in_check
from autochess.engine.board import Board, Flag, Kind
from autochess.engine.move import Move, square_to_str


FILES = "ABCDEFGH"


def render_board(board: Board) -> str:
    """Return a diagram with rank numbers, file letters and ``.`` for empty squares."""
    header = "   " + "  ".join(FILES)
    lines: List[str] = [header]
    for row in range(8):
        rank = str(8 - row)
        cells = []
        for col in range(8):
            p = board.square_at(row, col)
            cells.append(p.symbol if p is not None else ".")
        lines.append(f"{rank}  " + "  ".join(cells) + f"  {rank}")
    lines.append(header)
    return "\n".join(lines)


def describe_move(board: Board, move: Move) -> str:
    """Describe ``move`` as played from ``board``.

    Examples: ``E2-E4``, ``E4xD5``, ``E5xD6 ep``, ``A7-A8=N``, ``O-O``, with
    `` ch`` appended when the move gives check.
    """
    mover = board.square_at(*divmod(move.source, 8))
    assert mover is not None, f"no piece on source square {move.source}"
    if move.has(Flag.CASTLING):
        text = "O-O" if move.dest % 8 > move.source % 8 else "O-O-O"
    else:
        target = board.square_at(*divmod(move.dest, 8))
        capture = target is not None or move.has(Flag.EN_PASSANT_CAPTURE)
        text = (
            square_to_str(move.source).upper()
            + ("x" if capture else "-")
            + square_to_str(move.dest).upper()
        )
        if mover.kind is Kind.PAWN and move.dest // 8 == mover.color.last_row:
            text += "=N" if move.has(Flag.PROMOTE_KNIGHT) else "=Q"
        if move.has(Flag.EN_PASSANT_CAPTURE):
            text += " ep"
    if is_in_check(apply_move(board, move), mover.color.opponent):
        text += " ch"
    return text
