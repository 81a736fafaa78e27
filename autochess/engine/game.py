from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from autochess.config import DEFAULT_DEPTH, DEFAULT_DRAW_PLIES
from autochess.search.service import SearchService

from .apply import apply_move
from .attacks import is_in_check
from .board import Board, Color, Flag, Kind
from .legal import generate_legal_moves, has_legal_move
from .move import Move


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    result: str  # "1-0", "0-1", "1/2-1/2" or "*"
    reason: str


@dataclass
class Game:
    """Self-play driver around an immutable board.

    Responsibility: track side to move and counters, let the engine pick
    moves for both sides, and decide when the game is over.
    """

    board: Board
    side_to_move: Color = Color.WHITE
    search: SearchService = field(default_factory=SearchService)
    depth: int = DEFAULT_DEPTH
    draw_plies: int = DEFAULT_DRAW_PLIES
    quiet_plies: int = 0  # half-moves since the last pawn move or capture
    fullmove_number: int = 1
    move_stack: List[Move] = field(default_factory=list)

    @classmethod
    def new(cls, search: Optional[SearchService] = None, depth: int = DEFAULT_DEPTH) -> "Game":
        return cls(board=Board.startpos(), search=search or SearchService(), depth=depth)

    @classmethod
    def from_fen(
        cls, fen: str, search: Optional[SearchService] = None, depth: int = DEFAULT_DEPTH
    ) -> "Game":
        """Load a game from FEN, honoring side to move and both counters.

        Raises:
            ValueError: If the FEN is malformed.
        """
        board = Board.from_fen(fen)
        parts = fen.split()
        side = Color(parts[1]) if len(parts) > 1 else Color.WHITE
        try:
            quiet = int(parts[4]) if len(parts) > 4 else 0
            fullmove = int(parts[5]) if len(parts) > 5 else 1
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if quiet < 0 or fullmove <= 0:
            raise ValueError("invalid move counters in FEN")
        return cls(
            board=board,
            side_to_move=side,
            search=search or SearchService(),
            depth=depth,
            quiet_plies=quiet,
            fullmove_number=fullmove,
        )

    def to_fen(self) -> str:
        placement, rights, ep = self.board.to_fen().split()
        stm = self.side_to_move.value
        return f"{placement} {stm} {rights} {ep} {self.quiet_plies} {self.fullmove_number}"

    def legal_moves(self) -> List[Move]:
        return generate_legal_moves(self.board, self.side_to_move)

    def step(self) -> Optional[Move]:
        """Let the engine play one move for the side to move.

        Returns:
            Optional[Move]: The move played, or None when the game is over.
        """
        if self.is_over():
            return None
        move = self.search.choose_move(self.board, self.side_to_move, self.depth)
        if move is None:
            return None
        self._push(move)
        return move

    def play(
        self,
        max_plies: Optional[int] = None,
        on_move: Optional[Callable[[Board, Move], None]] = None,
    ) -> Outcome:
        """Play engine moves for both sides until the game ends.

        Args:
            max_plies (Optional[int]): Stop after this many half-moves.
            on_move (Optional[Callable]): Called with the board before each
                move and the move itself.

        Returns:
            Outcome: Final result; ``"*"`` when stopped by ``max_plies``.
        """
        plies = 0
        while max_plies is None or plies < max_plies:
            before = self.board
            move = self.step()
            if move is None:
                break
            if on_move is not None:
                on_move(before, move)
            plies += 1
        outcome = self.outcome()
        logger.info("game over", extra={"result": outcome.result, "reason": outcome.reason})
        return outcome

    def play_move(self, move: Move) -> None:
        """Play a specific move for the side to move.

        Raises:
            ValueError: If ``move`` is not legal here.
        """
        if move not in self.legal_moves():
            raise ValueError("illegal move")
        self._push(move)

    def _push(self, move: Move) -> None:
        src = self.board.square_at(*divmod(move.source, 8))
        target = self.board.square_at(*divmod(move.dest, 8))
        assert src is not None and src.color is self.side_to_move
        resets = (
            src.kind is Kind.PAWN or target is not None or move.has(Flag.EN_PASSANT_CAPTURE)
        )
        mover = self.side_to_move
        board = apply_move(self.board, move)
        # Board and side to move change together; counters follow.
        self.board, self.side_to_move = board, mover.opponent
        self.move_stack.append(move)
        self.quiet_plies = 0 if resets else self.quiet_plies + 1
        if mover is Color.BLACK:
            self.fullmove_number += 1
        logger.info(
            "move",
            extra={"side": mover.value, "move": move.to_str(), "ply": len(self.move_stack)},
        )

    # --- State flags ---
    def in_check(self) -> bool:
        return is_in_check(self.board, self.side_to_move)

    def checkmate(self) -> bool:
        return (not has_legal_move(self.board, self.side_to_move)) and self.in_check()

    def stalemate(self) -> bool:
        return (not has_legal_move(self.board, self.side_to_move)) and (not self.in_check())

    def is_draw(self) -> bool:
        # No-progress rule or stalemate
        return self.quiet_plies >= self.draw_plies or self.stalemate()

    def is_over(self) -> bool:
        return self.quiet_plies >= self.draw_plies or not has_legal_move(
            self.board, self.side_to_move
        )

    def outcome(self) -> Outcome:
        if not has_legal_move(self.board, self.side_to_move):
            if self.in_check():
                winner = self.side_to_move.opponent
                return Outcome("1-0" if winner is Color.WHITE else "0-1", "checkmate")
            return Outcome("1/2-1/2", "stalemate")
        if self.quiet_plies >= self.draw_plies:
            return Outcome("1/2-1/2", f"{self.draw_plies // 2}-move rule")
        return Outcome("*", "in progress")

    def move_history(self) -> List[str]:
        return [m.to_str() for m in self.move_stack]
