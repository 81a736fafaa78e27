from __future__ import annotations

import threading

import pytest
from fastapi.testclient import TestClient

from autochess.config import EngineConfig
from autochess.engine.board import STARTPOS_FEN
from autochess.engine.game import Game
from autochess.protocol.http.app import create_app
from autochess.protocol.http.session import InMemorySessionStore


FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"


def _client(cfg: EngineConfig) -> TestClient:
    return TestClient(create_app(cfg))


def test_create_game_and_get_state(fast_config: EngineConfig) -> None:
    client = _client(fast_config)
    r = client.post("/api/games")
    assert r.status_code == 200
    body = r.json()
    game_id = body["game_id"]
    assert isinstance(game_id, str) and game_id
    assert body["fen"] == STARTPOS_FEN

    r2 = client.get(f"/api/games/{game_id}/state")
    assert r2.status_code == 200
    state = r2.json()
    assert state["game_id"] == game_id
    assert state["side_to_move"] == "w"
    assert len(state["legal_moves"]) == 20
    assert state["result"] == "*"
    assert state["last_move"] is None
    assert state["diagram"].splitlines()[1].startswith("8  r  n  b  q  k")


def test_get_state_unknown_id_404(fast_config: EngineConfig) -> None:
    r = _client(fast_config).get("/api/games/does-not-exist/state")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "not_found"


@pytest.mark.parametrize("fen", ["not a fen", "   "])
def test_create_game_with_invalid_fen_400(fast_config: EngineConfig, fen: str) -> None:
    client = _client(fast_config)
    r = client.post("/api/games", json={"fen": fen})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"
    assert client.post("/api/perft", json={"fen": fen, "depth": 1}).status_code == 400


def test_delete_game(fast_config: EngineConfig) -> None:
    client = _client(fast_config)
    game_id = client.post("/api/games").json()["game_id"]
    assert client.delete(f"/api/games/{game_id}").status_code == 204
    assert client.get(f"/api/games/{game_id}/state").status_code == 404
    assert client.delete(f"/api/games/{game_id}").status_code == 404


def test_store_create_get_delete() -> None:
    store = InMemorySessionStore()
    gid = store.create(Game.new())
    assert len(store) == 1
    assert store.get(gid) is not None
    assert store.lock_for(gid) is store.lock_for(gid)
    store.delete(gid)
    assert store.get(gid) is None
    assert len(store) == 0


def test_step_and_game_over(fast_config: EngineConfig) -> None:
    client = _client(fast_config)
    game_id = client.post("/api/games", json={"seed": 4}).json()["game_id"]

    r = client.post(f"/api/games/{game_id}/step")
    assert r.status_code == 200
    body = r.json()
    assert body["move"]
    assert body["description"]
    assert body["state"]["side_to_move"] == "b"
    assert body["state"]["last_move"] == body["move"]
    assert body["state"]["move_history"] == [body["move"]]

    over = client.post("/api/games", json={"fen": FOOLS_MATE}).json()["game_id"]
    state = client.get(f"/api/games/{over}/state").json()
    assert state["checkmate"] and state["result"] == "0-1"
    r = client.post(f"/api/games/{over}/step")
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "conflict"


def test_evaluate_startpos(fast_config: EngineConfig) -> None:
    client = _client(fast_config)
    game_id = client.post("/api/games").json()["game_id"]
    r = client.get(f"/api/games/{game_id}/evaluate")
    assert r.status_code == 200
    assert r.json() == {
        "white": 20,
        "black": 20,
        "material": 0,
        "center_white": 2,
        "center_black": 2,
    }


def test_perft_endpoint(fast_config: EngineConfig) -> None:
    client = _client(fast_config)
    r = client.post("/api/perft", json={"fen": STARTPOS_FEN, "depth": 2})
    assert r.status_code == 200
    assert r.json() == {"nodes": 400}

    assert client.post("/api/perft", json={"fen": "bogus", "depth": 1}).status_code == 400
    assert client.post("/api/perft", json={"fen": STARTPOS_FEN, "depth": 9}).status_code == 422


def test_state_reads_stay_consistent_while_stepping(fast_config: EngineConfig) -> None:
    app = create_app(fast_config)
    reader = TestClient(app)
    game_id = reader.post("/api/games", json={"seed": 7}).json()["game_id"]
    done = threading.Event()
    step_codes: list[int] = []

    def stepper() -> None:
        writer = TestClient(app)
        try:
            for _ in range(30):
                code = writer.post(f"/api/games/{game_id}/step").status_code
                step_codes.append(code)
                if code != 200:
                    break
        finally:
            done.set()

    t = threading.Thread(target=stepper)
    t.start()
    mismatches = []
    while not done.is_set():
        state = reader.get(f"/api/games/{game_id}/state").json()
        expected = "w" if len(state["move_history"]) % 2 == 0 else "b"
        if state["side_to_move"] != expected or state["fen"].split()[1] != expected:
            mismatches.append((len(state["move_history"]), state["side_to_move"], state["fen"]))
    t.join()

    assert mismatches == []
    assert step_codes and step_codes[0] == 200
    assert set(step_codes) <= {200, 409}
