from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, TypeVar

from autochess.config import DEFAULT_DEPTH
from autochess.engine.apply import apply_move
from autochess.engine.attacks import is_in_check
from autochess.engine.board import Board, Color
from autochess.engine.legal import captures_king, generate_pseudo_legal_moves, has_legal_move
from autochess.engine.move import Move
from autochess.eval import evaluate


logger = logging.getLogger(__name__)

T = TypeVar("T")

MATE_SCORE = 1_000_000
# Below mate, above any material swing.
STALEMATE_SCORE = 100_000
# Candidates left at this value leave the mover in check and are discarded.
ILLEGAL_SCORE = -10_000_000


class Chooser(Protocol):
    def choice(self, seq: Sequence[T]) -> T: ...


@dataclass(frozen=True)
class ScoredMove:
    move: Move
    score: int


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: Optional[int]
    candidates: int
    nodes: int
    depth: int
    time_ms: int


@dataclass
class _Stats:
    nodes: int = 0


class SearchService:
    """Fixed-depth lookahead search that plays for either color.

    Each root candidate is followed by a rollout: the opponent's reply is
    picked by the same search one ply shallower, then our answer to it, and
    so on while depth remains. The final position is scored from the root
    mover's side, with fixed scores for checkmate and stalemate. Ties between
    the best candidates are broken by ``rng.choice``.

    No pruning and no caching: cost grows as the legal move count raised to
    the depth, so keep depth small.
    """

    def __init__(self, rng: Optional[Chooser] = None) -> None:
        self.rng: Chooser = rng if rng is not None else random.Random()

    def search(self, board: Board, color: Color, depth: int = DEFAULT_DEPTH) -> SearchResult:
        if depth < 0:
            raise ValueError("depth must be >= 0")
        start = time.perf_counter()
        stats = _Stats()
        scored = self.score_moves(board, color, depth, stats)
        legal = [s for s in scored if s.score > ILLEGAL_SCORE]
        chosen = self._select(legal)
        time_ms = int((time.perf_counter() - start) * 1000)
        logger.debug(
            "search",
            extra={
                "color": color.value,
                "depth": depth,
                "candidates": len(legal),
                "nodes": stats.nodes,
                "time_ms": time_ms,
            },
        )
        return SearchResult(
            best_move=chosen.move if chosen else None,
            score=chosen.score if chosen else None,
            candidates=len(legal),
            nodes=stats.nodes,
            depth=depth,
            time_ms=time_ms,
        )

    def choose_move(
        self, board: Board, color: Color, depth: int = DEFAULT_DEPTH
    ) -> Optional[Move]:
        """Return the move ``color`` should play, or None when it has none.

        None means checkmate or stalemate; ask ``is_in_check`` to tell which.
        """
        return self.search(board, color, depth).best_move

    def score_moves(
        self,
        board: Board,
        color: Color,
        depth: int,
        stats: Optional[_Stats] = None,
    ) -> List[ScoredMove]:
        """Score every pseudo-legal move of ``color``.

        Moves that leave ``color`` in check come back with ``ILLEGAL_SCORE``.
        """
        if stats is None:
            stats = _Stats()
        out: List[ScoredMove] = []
        for m in generate_pseudo_legal_moves(board, color):
            if captures_king(board, m):
                out.append(ScoredMove(m, ILLEGAL_SCORE))
                continue
            child = apply_move(board, m)
            stats.nodes += 1
            if is_in_check(child, color):
                out.append(ScoredMove(m, ILLEGAL_SCORE))
                continue
            out.append(ScoredMove(m, self._rollout(child, color, depth, stats)))
        return out

    # --- Internals ---
    def _choose(self, board: Board, color: Color, depth: int, stats: _Stats) -> Optional[Move]:
        scored = self.score_moves(board, color, depth, stats)
        chosen = self._select([s for s in scored if s.score > ILLEGAL_SCORE])
        return chosen.move if chosen else None

    def _rollout(self, board: Board, mover: Color, depth: int, stats: _Stats) -> int:
        side = mover.opponent
        remaining = depth
        stuck = False
        while remaining > 0:
            reply = self._choose(board, side, remaining - 1, stats)
            if reply is None:
                stuck = True
                break
            board = apply_move(board, reply)
            stats.nodes += 1
            side = side.opponent
            remaining -= 1
        if not stuck:
            stuck = not has_legal_move(board, side)
        if stuck:
            return self._terminal_score(board, side, mover)
        return evaluate(board, mover)

    @staticmethod
    def _terminal_score(board: Board, stuck: Color, mover: Color) -> int:
        # Mating the opponent is the best outcome; stalemating it throws the
        # game away, while being stalemated ourselves rescues it.
        sign = 1 if stuck is not mover else -1
        if is_in_check(board, stuck):
            return sign * MATE_SCORE
        return -sign * STALEMATE_SCORE

    def _select(self, legal: List[ScoredMove]) -> Optional[ScoredMove]:
        if not legal:
            return None
        top = max(s.score for s in legal)
        return self.rng.choice([s for s in legal if s.score == top])
