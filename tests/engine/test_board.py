from __future__ import annotations

import pytest

from autochess.engine.board import STARTPOS_FEN, Board, Color, Flag, Kind, Piece, in_bounds
from autochess.engine.move import pack, square_to_str, str_to_square, unpack


def test_pack_unpack_round_trip_every_square() -> None:
    for row in range(8):
        for col in range(8):
            assert unpack(pack(row, col)) == (row, col)


def test_square_names_follow_board_orientation() -> None:
    # Row 0 is rank 8, column 0 is the a-file
    assert str_to_square("a8") == 0
    assert str_to_square("h1") == 63
    assert str_to_square("e2") == pack(6, 4)
    assert square_to_str(pack(4, 3)) == "d4"
    with pytest.raises(ValueError):
        str_to_square("i9")


def test_startpos_layout() -> None:
    b = Board.startpos()
    assert b.piece_at(7, 4) == Piece(Kind.KING, Color.WHITE)
    assert b.piece_at(0, 4) == Piece(Kind.KING, Color.BLACK)
    assert b.piece_at(7, 3) == Piece(Kind.QUEEN, Color.WHITE)
    assert b.piece_at(1, 0) == Piece(Kind.PAWN, Color.BLACK)
    assert all(b.is_empty(r, c) for r in range(2, 6) for c in range(8))
    assert b == Board.from_fen(STARTPOS_FEN)


def test_piece_at_strips_flags_and_square_at_keeps_them() -> None:
    b = Board.from_fen("4k3/8/8/3Pp3/8/8/8/4K3 w - e6 0 1")
    e5 = unpack(str_to_square("e5"))
    assert b.square_at(*e5).has(Flag.EN_PASSANT)
    assert b.piece_at(*e5) == Piece(Kind.PAWN, Color.BLACK)


def test_enemy_and_destination_tests() -> None:
    b = Board.startpos()
    white_knight = Piece(Kind.KNIGHT, Color.WHITE)
    assert b.is_enemy(white_knight, 0, 0)
    assert not b.is_enemy(white_knight, 7, 0)
    assert not b.is_enemy(white_knight, 4, 4)
    assert b.is_destination(white_knight, 4, 4)
    assert b.is_destination(white_knight, 1, 3)
    assert not b.is_destination(white_knight, 6, 3)
    assert not b.is_valid(white_knight, 8, 0)


def test_bounds_and_out_of_range_reads_fail_loudly() -> None:
    assert in_bounds(0, 7)
    assert not in_bounds(-1, 0)
    assert not in_bounds(0, 8)
    with pytest.raises(AssertionError):
        Board.startpos().square_at(-1, 0)
    with pytest.raises(AssertionError):
        pack(8, 0)


def test_piece_rejects_destination_only_flags() -> None:
    with pytest.raises(AssertionError):
        Piece(Kind.KING, Color.WHITE, frozenset({Flag.CASTLING}))


def test_with_square_returns_copy() -> None:
    b = Board.startpos()
    b2 = b.with_square(6, 4, None)
    assert b2.is_empty(6, 4)
    assert not b.is_empty(6, 4)


def test_fen_castling_rights_become_flags() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w Kq - 0 1")
    assert not b.square_at(7, 4).has(Flag.CANNOT_CASTLE)
    assert not b.square_at(7, 7).has(Flag.CANNOT_CASTLE)
    assert b.square_at(7, 0).has(Flag.CANNOT_CASTLE)
    assert not b.square_at(0, 4).has(Flag.CANNOT_CASTLE)
    assert b.square_at(0, 7).has(Flag.CANNOT_CASTLE)
    assert not b.square_at(0, 0).has(Flag.CANNOT_CASTLE)
    assert b.to_fen() == "r3k2r/8/8/8/8/8/8/R3K2R Kq -"


def test_fen_round_trip_with_en_passant() -> None:
    fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR KQkq e3"
    b = Board.from_fen(fen.replace(" KQkq", " b KQkq") + " 0 1")
    assert b.to_fen() == fen


@pytest.mark.parametrize(
    "fen",
    [
        "",
        "   ",
        "\t\n",
        "8/8/8/8/8/8/8 w - - 0 1",
        "rnbqkbnr/pppppppp/9/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNX w KQkq - 0 1",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR x KQkq - 0 1",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkz - 0 1",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq e4 0 1",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQ1BNR w kq - 0 1",
    ],
)
def test_from_fen_rejects_malformed_input(fen: str) -> None:
    with pytest.raises(ValueError):
        Board.from_fen(fen)
