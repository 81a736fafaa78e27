from __future__ import annotations

import pytest

from autochess.engine.apply import apply_move
from autochess.engine.board import Board, Color, Flag, Kind, Piece
from autochess.engine.legal import generate_legal_moves
from autochess.engine.move import Move, str_to_square, unpack


def _find(board: Board, color: Color, name: str) -> Move:
    return next(m for m in generate_legal_moves(board, color) if m.to_str() == name)


def _at(b: Board, name: str):
    return b.square_at(*unpack(str_to_square(name)))


def test_apply_returns_new_board_and_leaves_input_untouched() -> None:
    b = Board.startpos()
    after = apply_move(b, _find(b, Color.WHITE, "e2e4"))
    assert after is not b
    assert b == Board.startpos()
    assert _at(b, "e2") == Piece(Kind.PAWN, Color.WHITE)
    assert _at(after, "e2") is None
    assert _at(after, "e4").kind is Kind.PAWN


def test_double_advance_marks_pawn_en_passant() -> None:
    b = Board.startpos()
    after = apply_move(b, _find(b, Color.WHITE, "d2d4"))
    assert _at(after, "d4").has(Flag.EN_PASSANT)
    after = apply_move(after, _find(after, Color.BLACK, "g8f6"))
    # Black's move does not close White's window; White's next move does
    assert _at(after, "d4").has(Flag.EN_PASSANT)
    after = apply_move(after, _find(after, Color.WHITE, "b1c3"))
    assert not _at(after, "d4").has(Flag.EN_PASSANT)


def test_capture_replaces_target() -> None:
    b = Board.from_fen("4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1")
    after = apply_move(b, _find(b, Color.WHITE, "e4d5"))
    assert _at(after, "d5") == Piece(Kind.PAWN, Color.WHITE)
    assert sum(1 for _ in after.pieces(Color.BLACK)) == 1


def test_moved_rook_keeps_cannot_castle() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/8/R3K3 w Q - 0 1")
    assert not _at(b, "a1").has(Flag.CANNOT_CASTLE)
    after = apply_move(b, _find(b, Color.WHITE, "a1a4"))
    assert _at(after, "a4").has(Flag.CANNOT_CASTLE)


def test_king_capture_is_an_assertion() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/8/4K2R w - - 0 1")
    with pytest.raises(AssertionError):
        apply_move(b, Move(str_to_square("e1"), str_to_square("e8")))


def test_empty_source_is_an_assertion() -> None:
    with pytest.raises(AssertionError):
        apply_move(Board.startpos(), Move(str_to_square("e4"), str_to_square("e5")))
