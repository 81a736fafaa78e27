from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from ...engine.game import Game


@dataclass
class _Session:
    game: Game
    # Held while the engine plays a move so two steps never interleave.
    lock: threading.Lock = field(default_factory=threading.Lock)


class InMemorySessionStore:
    """Self-play games kept in process memory, keyed by a random ``game_id``.

    All bookkeeping goes through one store-wide lock; engine work on a game
    is serialized separately through :meth:`lock_for`.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, _Session] = {}

    def create(self, game: Optional[Game] = None) -> str:
        """Register ``game`` (a fresh game when omitted) and return its id."""
        gid = str(uuid.uuid4())
        with self._lock:
            self._sessions[gid] = _Session(game if game is not None else Game.new())
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            session = self._sessions.get(game_id)
        return session.game if session is not None else None

    def lock_for(self, game_id: str) -> threading.Lock:
        """Return the per-game lock.

        Raises:
            KeyError: If ``game_id`` is unknown.
        """
        with self._lock:
            return self._sessions[game_id].lock

    def delete(self, game_id: str) -> None:
        with self._lock:
            self._sessions.pop(game_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
