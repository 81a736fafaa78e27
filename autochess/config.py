from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional


# Lookahead plies after the root move; 2 gives a 3-ply horizon.
DEFAULT_DEPTH = 2
MAX_DEPTH = 4
# 75-move rule: 150 half-moves without a pawn move or capture.
DEFAULT_DRAW_PLIES = 150


@dataclass(frozen=True)
class EngineConfig:
    depth: int = DEFAULT_DEPTH
    seed: Optional[int] = None
    draw_plies: int = DEFAULT_DRAW_PLIES
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    def __post_init__(self) -> None:
        if not 0 <= self.depth <= MAX_DEPTH:
            raise ValueError(f"depth must be between 0 and {MAX_DEPTH}")
        if self.draw_plies < 1:
            raise ValueError("draw_plies must be >= 1")
        if not 1 <= self.port <= 65535:
            raise ValueError("port must be between 1 and 65535")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Build a config from ``AUTOCHESS_*`` environment variables.

        Raises:
            ValueError: If a numeric variable does not parse or is out of range.
        """
        env = os.environ if env is None else env
        cfg = cls()
        updates = {}
        if "AUTOCHESS_DEPTH" in env:
            updates["depth"] = _int(env, "AUTOCHESS_DEPTH")
        if "AUTOCHESS_SEED" in env:
            updates["seed"] = _int(env, "AUTOCHESS_SEED")
        if "AUTOCHESS_LOG_LEVEL" in env:
            updates["log_level"] = env["AUTOCHESS_LOG_LEVEL"].upper()
        if "AUTOCHESS_HOST" in env:
            updates["host"] = env["AUTOCHESS_HOST"]
        if "AUTOCHESS_PORT" in env:
            updates["port"] = _int(env, "AUTOCHESS_PORT")
        return replace(cfg, **updates) if updates else cfg


def _int(env: Mapping[str, str], name: str) -> int:
    try:
        return int(env[name])
    except ValueError as e:
        raise ValueError(f"{name} must be an integer") from e
