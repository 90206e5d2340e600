"""API route and WebSocket tests."""

import pytest
from fastapi.testclient import TestClient

from api import game_store
from api.main import app
from game.rules import Phase


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def _create(client) -> str:
    r = client.post("/games")
    assert r.status_code == 200
    return r.json()["game_id"]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_create_and_get_game(client):
    gid = _create(client)
    assert len(gid) == 6
    assert gid in client.get("/games").json()
    r = client.get(f"/games/{gid}")
    assert r.status_code == 200
    assert r.json() == {"game_id": gid, "phase": "lobby", "day": 0, "players": 0, "winner": None}


def test_get_game_404(client):
    r = client.get("/games/nonexistent-id")
    assert r.status_code == 404


def test_ws_unknown_game(client):
    with client.websocket_connect("/ws/NOPE00?name=Alice") as ws:
        msg = ws.receive_json()
        assert msg == {"type": "error", "message": "Game not found"}


def test_ws_join_and_ready(client):
    gid = _create(client)
    with client.websocket_connect(f"/ws/{gid}?name=Alice") as ws:
        assert ws.receive_json() == {"type": "host_status", "is_host": True}
        lobby = ws.receive_json()
        assert lobby["type"] == "lobby_state"
        assert [p["name"] for p in lobby["players"]] == ["Alice"]
        assert lobby["host_id"] == lobby["players"][0]["id"]
        assert lobby["can_start"] is False

        ws.send_json({"type": "set_ready", "ready": True})
        lobby = ws.receive_json()
        assert lobby["players"][0]["ready"] is True

        assert client.get(f"/games/{gid}").json()["players"] == 1


def test_ws_duplicate_name_rejected(client):
    gid = _create(client)
    with client.websocket_connect(f"/ws/{gid}?name=Alice") as first:
        first.receive_json()
        first.receive_json()
        with client.websocket_connect(f"/ws/{gid}?name=Alice") as second:
            msg = second.receive_json()
            assert msg["type"] == "error"
            assert "taken" in msg["message"]


def test_ws_malformed_and_rejected_messages(client):
    gid = _create(client)
    with client.websocket_connect(f"/ws/{gid}?name=Alice") as ws:
        ws.receive_json()
        ws.receive_json()
        ws.send_text("not json")
        assert ws.receive_json() == {"type": "notice", "reason": "Malformed message"}
        ws.send_json({"type": "vote", "target_id": "someone"})
        notice = ws.receive_json()
        assert notice["type"] == "notice"
        assert "day" in notice["reason"]


def test_ws_disconnect_removes_player(client):
    gid = _create(client)
    with client.websocket_connect(f"/ws/{gid}?name=Alice") as ws:
        ws.receive_json()
        ws.receive_json()
        with client.websocket_connect(f"/ws/{gid}?name=Bob") as other:
            other.receive_json()
            other.receive_json()
            ws.receive_json()  # lobby_state with Bob
        lobby = ws.receive_json()
        assert [p["name"] for p in lobby["players"]] == ["Alice"]
        assert game_store.get(gid).phase == Phase.LOBBY
    # last player gone: the game is dropped from the registry
    assert game_store.get(gid) is None
    assert client.get(f"/games/{gid}").status_code == 404
