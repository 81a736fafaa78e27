from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Tuple


class Flag(Enum):
    """Transient markers attached to a piece or to a move destination.

    A piece on the board may carry CANNOT_CASTLE and EN_PASSANT only. The
    remaining flags exist on move destinations and are consumed when the
    move is applied.
    """

    CANNOT_CASTLE = "cannot_castle"
    EN_PASSANT = "en_passant"
    CASTLING = "castling"
    EN_PASSANT_CAPTURE = "en_passant_capture"
    PROMOTE_KNIGHT = "promote_knight"


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    Attributes:
        source (int): Packed origin square (``row * 8 + col``).
        dest (int): Packed destination square.
        flags (FrozenSet[Flag]): Destination flags consumed when the move is
            applied (castling, en passant, promotion and castling-rights
            bookkeeping).
    """

    source: int
    dest: int
    flags: FrozenSet[Flag] = field(default_factory=frozenset)

    def has(self, flag: Flag) -> bool:
        return flag in self.flags

    def to_str(self) -> str:
        """Return the move as origin and destination names, e.g. ``"e2e4"``.

        Knight promotions get an ``n`` suffix; queen promotion is unmarked.
        """
        suffix = "n" if Flag.PROMOTE_KNIGHT in self.flags else ""
        return square_to_str(self.source) + square_to_str(self.dest) + suffix


def pack(row: int, col: int) -> int:
    """Pack a row and column into a square index."""
    assert 0 <= row < 8 and 0 <= col < 8, f"square out of range: ({row}, {col})"
    return row * 8 + col


def unpack(square: int) -> Tuple[int, int]:
    """Unpack a square index into ``(row, col)``."""
    assert 0 <= square < 64, f"square index out of range: {square}"
    return divmod(square, 8)


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a packed square index.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        int: Packed index; rank 8 maps to row 0, the a-file to column 0.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    col = ord(s[0]) - ord("a")
    row = 8 - int(s[1])
    return row * 8 + col


def square_to_str(idx: int) -> str:
    """Convert a packed square index into algebraic notation.

    Raises:
        ValueError: If ``idx`` is outside the valid square range.
    """
    if idx < 0 or idx > 63:
        raise ValueError(f"invalid square index: {idx}")
    row, col = divmod(idx, 8)
    return chr(ord("a") + col) + str(8 - row)
