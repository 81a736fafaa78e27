from __future__ import annotations

import pytest

from autochess.engine.board import Board, Color
from autochess.engine.legal import generate_legal_moves
from autochess.render import describe_move, render_board


def test_render_startpos() -> None:
    lines = render_board(Board.startpos()).splitlines()
    assert len(lines) == 10
    assert lines[0] == "   A  B  C  D  E  F  G  H"
    assert lines[-1] == lines[0]
    assert lines[1] == "8  r  n  b  q  k  b  n  r  8"
    assert lines[4] == "5  .  .  .  .  .  .  .  .  5"
    assert lines[8] == "1  R  N  B  Q  K  B  N  R  1"


@pytest.mark.parametrize(
    "fen,color,name,expected",
    [
        ("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1", Color.WHITE, "e2e4", "E2-E4"),
        ("4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1", Color.WHITE, "e4d5", "E4xD5"),
        ("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1", Color.WHITE, "e1g1", "O-O"),
        ("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1", Color.BLACK, "e8c8", "O-O-O"),
        (
            "rnbqkbnr/pppp1ppp/8/4p3/6P1/5P2/PPPPP2P/RNBQKBNR b KQkq g3 0 2",
            Color.BLACK,
            "d8h4",
            "D8-H4 ch",
        ),
        ("4k3/8/8/3Pp3/8/8/8/4K3 w - e6 0 1", Color.WHITE, "d5e6", "D5xE6 ep"),
        ("k7/4P3/8/8/8/8/8/4K3 w - - 0 1", Color.WHITE, "e7e8", "E7-E8=Q ch"),
        ("k7/4P3/8/8/8/8/8/4K3 w - - 0 1", Color.WHITE, "e7e8n", "E7-E8=N"),
    ],
)
def test_describe_move(fen: str, color: Color, name: str, expected: str) -> None:
    board = Board.from_fen(fen)
    move = next(m for m in generate_legal_moves(board, color) if m.to_str() == name)
    assert describe_move(board, move) == expected
