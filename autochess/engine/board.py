from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import FrozenSet, Iterator, Optional, Tuple

from .move import Flag, pack, square_to_str, str_to_square


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


class Color(Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def forward(self) -> int:
        """Row delta of a pawn advance (row 0 is Black's back rank)."""
        return -1 if self is Color.WHITE else 1

    @property
    def home_row(self) -> int:
        return 7 if self is Color.WHITE else 0

    @property
    def pawn_row(self) -> int:
        return 6 if self is Color.WHITE else 1

    @property
    def last_row(self) -> int:
        return 0 if self is Color.WHITE else 7


class Kind(IntEnum):
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6


PIECE_FLAGS: FrozenSet[Flag] = frozenset({Flag.CANNOT_CASTLE, Flag.EN_PASSANT})

KIND_TO_CHAR = {
    Kind.PAWN: "p",
    Kind.KNIGHT: "n",
    Kind.BISHOP: "b",
    Kind.ROOK: "r",
    Kind.QUEEN: "q",
    Kind.KING: "k",
}
CHAR_TO_KIND = {v: k for k, v in KIND_TO_CHAR.items()}


@dataclass(frozen=True)
class Piece:
    """Occupant of a square: piece kind, color and the flags it carries."""

    kind: Kind
    color: Color
    flags: FrozenSet[Flag] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        assert self.flags <= PIECE_FLAGS, f"invalid piece flags: {set(self.flags)}"

    @property
    def symbol(self) -> str:
        ch = KIND_TO_CHAR[self.kind]
        return ch.upper() if self.color is Color.WHITE else ch

    def has(self, flag: Flag) -> bool:
        return flag in self.flags

    def without_flags(self) -> "Piece":
        if not self.flags:
            return self
        return replace(self, flags=frozenset())

    def with_flags(self, *flags: Flag) -> "Piece":
        return replace(self, flags=self.flags | frozenset(flags))

    def discard(self, flag: Flag) -> "Piece":
        if flag not in self.flags:
            return self
        return replace(self, flags=self.flags - {flag})

    @classmethod
    def from_symbol(cls, ch: str) -> "Piece":
        kind = CHAR_TO_KIND.get(ch.lower())
        if kind is None:
            raise ValueError(f"invalid piece symbol: {ch!r}")
        color = Color.WHITE if ch.isupper() else Color.BLACK
        return cls(kind, color)


Grid = Tuple[Tuple[Optional[Piece], ...], ...]

_BACK_RANK = (
    Kind.ROOK,
    Kind.KNIGHT,
    Kind.BISHOP,
    Kind.QUEEN,
    Kind.KING,
    Kind.BISHOP,
    Kind.KNIGHT,
    Kind.ROOK,
)


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < 8 and 0 <= col < 8


@dataclass(frozen=True)
class Board:
    """Immutable 8x8 board of pieces.

    Notes:
    - Row 0 is Black's back rank (rank 8), row 7 is White's (rank 1).
    - Column 0 is the a-file.
    - The board holds no side to move and no counters; those belong to the
      driver playing the game.
    """

    grid: Grid

    def __post_init__(self) -> None:
        assert len(self.grid) == 8 and all(len(r) == 8 for r in self.grid), "board must be 8x8"

    # --- Construction ---
    @classmethod
    def empty(cls) -> "Board":
        return cls(tuple(tuple(None for _ in range(8)) for _ in range(8)))

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board set up in the standard starting position."""
        rows = []
        for r in range(8):
            if r == 0:
                rows.append(tuple(Piece(k, Color.BLACK) for k in _BACK_RANK))
            elif r == 1:
                rows.append(tuple(Piece(Kind.PAWN, Color.BLACK) for _ in range(8)))
            elif r == 6:
                rows.append(tuple(Piece(Kind.PAWN, Color.WHITE) for _ in range(8)))
            elif r == 7:
                rows.append(tuple(Piece(k, Color.WHITE) for k in _BACK_RANK))
            else:
                rows.append(tuple(None for _ in range(8)))
        return cls(tuple(rows))

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth-Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string. Only the placement field is required;
                castling rights and en passant target are honored when given,
                side to move and counters are accepted and ignored.

        Returns:
            Board: Board with castling rights expressed as CANNOT_CASTLE flags
                and the en passant target expressed as an EN_PASSANT pawn.

        Raises:
            ValueError: If the placement, castling or en passant fields are
                malformed, or a side does not have exactly one king.
        """
        if not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.split()
        if not parts:
            raise ValueError("FEN must be a non-empty string")
        placement = parts[0]
        stm = parts[1] if len(parts) > 1 else "w"
        castling = parts[2] if len(parts) > 2 else "-"
        ep = parts[3] if len(parts) > 3 else "-"
        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        grid: list[list[Optional[Piece]]] = [[None for _ in range(8)] for _ in range(8)]
        for row, rank in enumerate(ranks):
            col = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    col += n
                else:
                    if col >= 8:
                        raise ValueError("too many squares in FEN rank")
                    grid[row][col] = Piece.from_symbol(ch)
                    col += 1
            if col != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")

        if castling != "-" and any(ch not in "KQkq" for ch in castling):
            raise ValueError("invalid castling rights")
        rights = set() if castling == "-" else set(castling)

        for color in Color:
            kings = [
                (r, c)
                for r in range(8)
                for c in range(8)
                if grid[r][c] is not None
                and grid[r][c].kind is Kind.KING
                and grid[r][c].color is color
            ]
            if len(kings) != 1:
                raise ValueError(f"FEN must contain exactly one {color.name.lower()} king")
            # Every king and rook is ineligible unless a matching right keeps it.
            home = color.home_row
            king_side = "K" if color is Color.WHITE else "k"
            queen_side = "Q" if color is Color.WHITE else "q"
            for r in range(8):
                for c in range(8):
                    p = grid[r][c]
                    if p is None or p.color is not color or p.kind not in (Kind.KING, Kind.ROOK):
                        continue
                    eligible = False
                    if r == home and p.kind is Kind.KING and c == 4:
                        eligible = king_side in rights or queen_side in rights
                    elif r == home and p.kind is Kind.ROOK and c == 7:
                        eligible = king_side in rights
                    elif r == home and p.kind is Kind.ROOK and c == 0:
                        eligible = queen_side in rights
                    if not eligible:
                        grid[r][c] = p.with_flags(Flag.CANNOT_CASTLE)

        if ep != "-":
            try:
                ep_sq = str_to_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            ep_row, ep_col = divmod(ep_sq, 8)
            # The target is the square jumped over; the pawn sits one row further.
            if ep_row == 5:
                pawn_row, pawn_color = 4, Color.WHITE
            elif ep_row == 2:
                pawn_row, pawn_color = 3, Color.BLACK
            else:
                raise ValueError("invalid en passant square rank")
            pawn = grid[pawn_row][ep_col]
            if pawn is None or pawn.kind is not Kind.PAWN or pawn.color is not pawn_color:
                raise ValueError("en passant square without a capturable pawn")
            grid[pawn_row][ep_col] = pawn.with_flags(Flag.EN_PASSANT)

        return cls(tuple(tuple(r) for r in grid))

    def to_fen(self) -> str:
        """Serialize placement, castling rights and en passant target.

        Returns:
            str: The first, third and fourth FEN fields joined by spaces.
        """
        ranks_str = []
        for row in self.grid:
            run = 0
            out = []
            for p in row:
                if p is None:
                    run += 1
                    continue
                if run:
                    out.append(str(run))
                    run = 0
                out.append(p.symbol)
            if run:
                out.append(str(run))
            ranks_str.append("".join(out))

        rights = ""
        for color, king_side, queen_side in ((Color.WHITE, "K", "Q"), (Color.BLACK, "k", "q")):
            home = color.home_row
            king = self.grid[home][4]
            if not _eligible(king, Kind.KING, color):
                continue
            if _eligible(self.grid[home][7], Kind.ROOK, color):
                rights += king_side
            if _eligible(self.grid[home][0], Kind.ROOK, color):
                rights += queen_side

        ep = "-"
        for sq, p in self.pieces():
            if p.kind is Kind.PAWN and p.has(Flag.EN_PASSANT):
                row, col = divmod(sq, 8)
                ep = square_to_str(pack(row - p.color.forward, col))
                break
        return f"{'/'.join(ranks_str)} {rights or '-'} {ep}"

    # --- Square queries ---
    def square_at(self, row: int, col: int) -> Optional[Piece]:
        """Return the occupant of a square including its flags."""
        assert in_bounds(row, col), f"square out of range: ({row}, {col})"
        return self.grid[row][col]

    def piece_at(self, row: int, col: int) -> Optional[Piece]:
        """Return the occupant of a square with its flags stripped."""
        p = self.square_at(row, col)
        return p.without_flags() if p is not None else None

    def is_empty(self, row: int, col: int) -> bool:
        return self.square_at(row, col) is None

    def is_enemy(self, piece: Piece, row: int, col: int) -> bool:
        target = self.square_at(row, col)
        return target is not None and target.color is not piece.color

    def is_destination(self, piece: Piece, row: int, col: int) -> bool:
        """Empty or enemy-occupied, ignoring bounds and check."""
        return self.is_empty(row, col) or self.is_enemy(piece, row, col)

    def is_valid(self, piece: Piece, row: int, col: int) -> bool:
        """In bounds and a destination for ``piece``."""
        return in_bounds(row, col) and self.is_destination(piece, row, col)

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[int, Piece]]:
        """Yield ``(packed_square, piece)`` for occupied squares in row order."""
        for r, row in enumerate(self.grid):
            for c, p in enumerate(row):
                if p is not None and (color is None or p.color is color):
                    yield pack(r, c), p

    def find_king(self, color: Color) -> int:
        for sq, p in self.pieces(color):
            if p.kind is Kind.KING:
                return sq
        raise AssertionError(f"no {color.name.lower()} king on board")

    # --- Copy helpers ---
    def with_square(self, row: int, col: int, piece: Optional[Piece]) -> "Board":
        """Return a copy with one square replaced."""
        assert in_bounds(row, col), f"square out of range: ({row}, {col})"
        rows = list(self.grid)
        cells = list(rows[row])
        cells[col] = piece
        rows[row] = tuple(cells)
        return Board(tuple(rows))


def _eligible(p: Optional[Piece], kind: Kind, color: Color) -> bool:
    return p is not None and p.kind is kind and p.color is color and not p.has(Flag.CANNOT_CASTLE)
