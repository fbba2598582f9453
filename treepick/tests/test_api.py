"""
Tests for the FastAPI transport.

The heartbeat interval is set far beyond test duration so that the clock
only moves when a test says so.
"""

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from .. import __version__
from ..api.app import LINK_REJECTED_CLOSE_CODE, create_app, create_game_server
from ..engine_core.state import Phase, initial_state
from ..engine_core.system import System
from ..games.tree import create_registry
from ..session import GameServer, SnapshotStore
from .conftest import make_playing_state


@pytest.fixture
def game_server() -> GameServer:
    return GameServer(System(create_registry()))


@pytest.fixture
def client(game_server):
    app = create_app(server=game_server, tick_interval=3600)
    with TestClient(app) as client:
        yield client


def connect(client, username):
    return client.websocket_connect(f"/ws/{username}")


class TestCreateGameServer:
    """Tests for create_game_server()."""

    def test_restores_snapshot(self, tmp_path):
        path = tmp_path / "room.json"
        state = make_playing_state(["alice", "bob"], turn="bob")
        state.time = 30
        SnapshotStore(path).save(state)

        server = create_game_server(snapshot_file=str(path), snapshot_every=5)

        restored = server.get_state()
        assert restored == state
        assert restored.phase == Phase.PLAYING
        assert server.time == 30
        assert server.system.seq == 0
        assert server.snapshot_every == 5

    def test_missing_snapshot_starts_fresh(self, tmp_path):
        server = create_game_server(snapshot_file=str(tmp_path / "room.json"))

        assert server.get_state() == initial_state()
        assert server.snapshot_store is not None

    def test_corrupt_snapshot_starts_fresh(self, tmp_path):
        path = tmp_path / "room.json"
        path.write_text("{broken", encoding="utf-8")

        server = create_game_server(snapshot_file=str(path))

        assert server.get_state() == initial_state()


class TestHttp:
    """Tests for the HTTP endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "treepick"
        assert data["version"] == __version__

    def test_state(self, client):
        response = client.get("/api/v1/state")

        assert response.status_code == 200
        data = response.json()
        assert data["seq"] == 0
        assert data["state"]["phase"] == "lobby"
        assert len(data["state"]["tree"]) == 15

    def test_users_empty(self, client):
        response = client.get("/api/v1/users")

        assert response.json() == {"users": [], "count": 0}

    def test_heartbeat_is_wired(self, client):
        assert client.app.state.heartbeat.running


class TestWebSocket:
    """Tests for the session channel."""

    def test_sync_then_joiner(self, client):
        with connect(client, "alice") as ws:
            sync = ws.receive_json()
            joiner = ws.receive_json()

        assert sync["type"] == "sync"
        assert sync["state"]["lobby"] == {}
        assert joiner["type"] == "action"
        assert joiner["kind"] == "joiner"
        assert joiner["payload"] == "alice"

    def test_action_echo(self, client):
        with connect(client, "alice") as ws:
            ws.receive_json()
            ws.receive_json()

            ws.send_json({"type": "action", "kind": "ready", "payload": True, "action_id": "r1"})
            echo = ws.receive_json()

        assert echo["kind"] == "ready"
        assert echo["dispatcher"] == "alice"
        assert echo["payload"] is True
        assert echo["action_id"] == "r1"
        assert echo["seq"] == 2

    def test_bad_payload_rejected(self, client):
        with connect(client, "alice") as ws:
            ws.receive_json()
            ws.receive_json()

            ws.send_json({"type": "action", "kind": "pick", "payload": {"x": -1, "y": 0}, "action_id": "p1"})
            message = ws.receive_json()

        assert message["type"] == "rejected"
        assert message["action_id"] == "p1"

    def test_invalid_frame(self, client):
        with connect(client, "alice") as ws:
            ws.receive_json()
            ws.receive_json()

            ws.send_text("not json")
            message = ws.receive_json()

        assert message["type"] == "error"
        assert message["message"].startswith("Invalid frame")

    def test_ping(self, client):
        with connect(client, "alice") as ws:
            ws.receive_json()
            ws.receive_json()

            ws.send_json({"type": "ping"})

            assert ws.receive_json() == {"type": "pong"}

    def test_invalid_username_closes(self, client):
        with connect(client, "ab") as ws:
            message = ws.receive_json()
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()

        assert message == {"type": "error", "message": "invalid username"}
        assert exc_info.value.code == LINK_REJECTED_CLOSE_CODE

    def test_second_session_same_name_refused(self, client):
        with connect(client, "alice") as ws:
            ws.receive_json()
            ws.receive_json()

            with connect(client, "alice") as other:
                message = other.receive_json()

        assert message == {"type": "error", "message": "username already linked"}

    def test_two_sessions_see_each_other(self, client):
        with connect(client, "alice") as alice:
            alice.receive_json()
            alice.receive_json()

            with connect(client, "bob") as bob:
                sync = bob.receive_json()
                bob.receive_json()
                joined = alice.receive_json()

                bob.send_json({"type": "action", "kind": "ready", "payload": True})
                seen_by_alice = alice.receive_json()

        assert list(sync["state"]["lobby"]) == ["alice"]
        assert joined["payload"] == "bob"
        assert seen_by_alice["dispatcher"] == "bob"
        assert seen_by_alice["kind"] == "ready"

    def test_disconnect_unlinks(self, client, game_server):
        with connect(client, "alice") as ws:
            ws.receive_json()
            ws.receive_json()

        assert game_server.users == {"alice": False}
        response = client.get("/api/v1/users")
        assert response.json() == {
            "users": [{"username": "alice", "is_linked": False}],
            "count": 1,
        }

    def test_leave(self, client, game_server):
        with connect(client, "alice") as ws:
            ws.receive_json()
            ws.receive_json()

            ws.send_json({"type": "leave"})
            leaver = ws.receive_json()
            with pytest.raises(WebSocketDisconnect):
                ws.receive_json()

        assert leaver["kind"] == "leaver"
        assert leaver["payload"] == "alice"
        assert game_server.users == {}
        assert game_server.get_state().lobby == {}
