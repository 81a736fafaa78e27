from __future__ import annotations

import random

import pytest

from autochess.config import EngineConfig
from autochess.search.service import SearchService


@pytest.fixture
def seeded_search() -> SearchService:
    return SearchService(random.Random(0))


@pytest.fixture
def fast_config() -> EngineConfig:
    # Depth 0 keeps engine steps in API/CLI tests well under a second.
    return EngineConfig(depth=0, seed=1)
