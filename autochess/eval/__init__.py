"""Evaluation heuristics.

Pure, deterministic, and side-effect free.
"""

from __future__ import annotations

from typing import Dict, Final, Tuple

from autochess.engine.attacks import attack_map
from autochess.engine.board import Board, Color, Kind
from autochess.engine.move import str_to_square


# Material values in centipawns
P_VAL: Final = 100
N_VAL: Final = 300
B_VAL: Final = 300
R_VAL: Final = 500
Q_VAL: Final = 900

# Both kings are always on the board, so the king adds nothing to material.
PIECE_VALUES: Final[Dict[Kind, int]] = {
    Kind.PAWN: P_VAL,
    Kind.KNIGHT: N_VAL,
    Kind.BISHOP: B_VAL,
    Kind.ROOK: R_VAL,
    Kind.QUEEN: Q_VAL,
    Kind.KING: 0,
}

# Per attacked center square; four of them together stay below a pawn.
CENTER_BONUS: Final = 10
CENTER_SQUARES: Final[Tuple[int, ...]] = tuple(str_to_square(s) for s in ("d4", "e4", "d5", "e5"))


def material(board: Board, color: Color) -> int:
    """Signed material balance in centipawns from ``color``'s side."""
    score = 0
    for _, p in board.pieces():
        value = PIECE_VALUES[p.kind]
        score += value if p.color is color else -value
    return score


def center_control(board: Board, color: Color) -> int:
    """Number of the four center squares ``color`` attacks."""
    attacked = attack_map(board, color)
    return sum(1 for sq in CENTER_SQUARES if attacked.get(sq, 0) > 0)


def evaluate(board: Board, color: Color) -> int:
    """Return a centipawn score for ``board`` from ``color``'s perspective.

    Material dominates; center control only separates positions whose
    material is equal.
    """
    return material(board, color) + CENTER_BONUS * center_control(board, color)
