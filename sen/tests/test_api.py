"""
Tests for the HTTP and WebSocket API.

Uses FastAPI's TestClient against an app with its own room manager.
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..config import Settings
from ..session import RoomManager

ROOM = {
    "room_id": "room-1",
    "players": [
        {"player_id": "alice", "display_name": "Alice"},
        {"player_id": "bob", "display_name": "Bob"},
    ],
    "seed": 5,
}


def act(client, player_id, **action):
    return client.post(
        "/api/v1/rooms/room-1/actions",
        json={"player_id": player_id, "action": action},
    )


@pytest.fixture
def manager():
    return RoomManager(settings=Settings())


@pytest.fixture
def client(manager):
    app = create_app(manager=manager, settings=Settings())
    with TestClient(app) as client:
        yield client


@pytest.fixture
def room(client):
    response = client.post("/api/v1/rooms", json=ROOM)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def playing(client, room):
    assert act(client, "alice", type="acknowledge_initial_peek").status_code == 200
    assert act(client, "bob", type="acknowledge_initial_peek").status_code == 200


class TestRooms:
    """Tests for room creation and lookup."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_create_room(self, room):
        assert room["room_id"] == "room-1"
        assert room["version"] == 1
        assert room["phase"] == "initial_peek"
        assert room["player_ids"] == ["alice", "bob"]
        assert room["target_score"] == 100

    def test_create_twice(self, client, room):
        response = client.post("/api/v1/rooms", json=ROOM)
        assert response.status_code == 409
        assert response.json()["error_code"] == "ROOM_EXISTS"

    def test_too_few_players(self, client):
        body = dict(ROOM, players=ROOM["players"][:1])
        response = client.post("/api/v1/rooms", json=body)
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REQUEST"

    def test_bad_target_score(self, client):
        response = client.post("/api/v1/rooms", json=dict(ROOM, target_score=0))
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REQUEST"

    def test_get_room(self, client, room):
        response = client.get("/api/v1/rooms/room-1")
        assert response.status_code == 200
        assert response.json()["version"] == 1

    def test_missing_room(self, client):
        response = client.get("/api/v1/rooms/nowhere")
        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "ROOM_NOT_FOUND"
        assert body["details"] == {"room_id": "nowhere"}


class TestViews:
    """Tests for the per-player view endpoint."""

    def test_own_peek_slots(self, client, room):
        view = client.get("/api/v1/rooms/room-1/view", params={"player_id": "alice"}).json()
        slots = view["my_slots"]
        assert [slot["card"]["face_up"] for slot in slots] == [True, False, False, True]
        assert slots[0]["card"]["definition"]["crow_value"] in range(10)
        assert slots[1]["card"]["definition"] is None
        assert slots[1]["card"]["instance_id"] is None

    def test_opponent_slots_hidden(self, client, manager, room):
        response = client.get("/api/v1/rooms/room-1/view", params={"player_id": "alice"})
        bob = next(p for p in response.json()["players"] if p["player_id"] == "bob")
        assert not any(slot["card"]["face_up"] for slot in bob["slots"])

        hidden = [c.instance_id for c in manager.load("room-1").get_player("bob").cards()]
        assert not any(instance_id in response.text for instance_id in hidden)

    def test_view_requires_player(self, client, room):
        response = client.get("/api/v1/rooms/room-1/view")
        assert response.status_code == 400

    def test_view_missing_room(self, client):
        response = client.get("/api/v1/rooms/nowhere/view", params={"player_id": "alice"})
        assert response.status_code == 404


class TestActions:
    """Tests for action submission."""

    def test_accepted(self, client, room):
        response = act(client, "alice", type="acknowledge_initial_peek")
        assert response.status_code == 200
        body = response.json()
        assert body["accepted"]
        assert body["version"] == 2
        assert body["view"]["viewer_id"] == "alice"
        assert body["view"]["has_seen_initial_cards"]

    def test_rejected(self, client, room):
        response = act(client, "bob", type="draw_from_deck")
        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "ACTION_REJECTED"
        assert body["details"] == {"reason": "wrong_phase", "version": 1}

    def test_rejected_leaves_version(self, client, room):
        act(client, "bob", type="draw_from_deck")
        assert client.get("/api/v1/rooms/room-1").json()["version"] == 1

    def test_unknown_action_type(self, client, room):
        response = act(client, "alice", type="fly_away")
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REQUEST"

    def test_missing_action_field(self, client, room):
        response = act(client, "alice", type="replace_dream_slot")
        assert response.status_code == 400

    def test_action_in_missing_room(self, client):
        response = act(client, "alice", type="draw_from_deck")
        assert response.status_code == 404

    def test_turn(self, client, playing):
        response = act(client, "alice", type="draw_from_deck")
        assert response.status_code == 200
        view = response.json()["view"]
        assert view["turn_phase"] == "action"
        assert view["drawn_card"]["face_up"]

        response = act(client, "alice", type="replace_dream_slot", slot_index=2)
        assert response.status_code == 200
        assert response.json()["view"]["active_player_id"] == "bob"

    def test_out_of_range_slot(self, client, playing):
        act(client, "alice", type="draw_from_deck")
        response = act(client, "alice", type="replace_dream_slot", slot_index=7)
        assert response.status_code == 409
        assert response.json()["details"]["reason"] == "out_of_range"


class TestLegalActions:
    """Tests for the legal-actions endpoint."""

    def test_during_peek(self, client, room):
        response = client.get("/api/v1/rooms/room-1/legal-actions", params={"player_id": "alice"})
        assert response.status_code == 200
        assert response.json()["actions"] == [{"type": "acknowledge_initial_peek"}]

    def test_turn_start(self, client, playing):
        response = client.get("/api/v1/rooms/room-1/legal-actions", params={"player_id": "alice"})
        types = [a["type"] for a in response.json()["actions"]]
        assert types == ["draw_from_deck", "draw_from_discard", "declare_wake_up"]

        response = client.get("/api/v1/rooms/room-1/legal-actions", params={"player_id": "bob"})
        assert response.json()["actions"] == []


class TestRounds:
    """Tests for dealing the next round."""

    def test_mid_round(self, client, playing):
        response = client.post("/api/v1/rooms/room-1/rounds")
        assert response.status_code == 409
        assert response.json()["error_code"] == "ROUND_NOT_OVER"

    def test_after_wake_up(self, client, playing):
        response = act(client, "alice", type="declare_wake_up")
        assert response.json()["view"]["phase"] == "scoring"

        response = client.post("/api/v1/rooms/room-1/rounds")
        assert response.status_code == 200
        body = response.json()
        assert body["round_number"] == 2
        assert body["phase"] == "initial_peek"

    def test_missing_room(self, client):
        assert client.post("/api/v1/rooms/nowhere/rounds").status_code == 404


class TestWebSocket:
    """Tests for the view feed."""

    def test_initial_view(self, client, room):
        with client.websocket_connect("/api/v1/rooms/room-1/ws?player_id=alice") as ws:
            message = ws.receive_json()
            assert message["type"] == "state_update"
            assert message["payload"]["viewer_id"] == "alice"
            assert message["payload"]["version"] == 1

            ws.send_text('{"type": "ping"}')
            assert ws.receive_json() == {"type": "pong"}

            ws.send_text("not json")
            assert ws.receive_json()["type"] == "error"

    def test_missing_room(self, client):
        with client.websocket_connect("/api/v1/rooms/nowhere/ws?player_id=alice") as ws:
            assert ws.receive_json()["type"] == "error"

    def test_non_object_message(self, client, manager, room):
        with client.websocket_connect("/api/v1/rooms/room-1/ws?player_id=alice") as ws:
            ws.receive_json()
            ws.send_text("[1, 2]")
            assert ws.receive_json()["type"] == "error"

            ws.send_text('{"type": "ping"}')
            assert ws.receive_json() == {"type": "pong"}

        assert manager.load("room-1").get_player("alice").connected is False


class TestSeeds:
    """Tests for client-chosen seeds outside development."""

    @pytest.fixture
    def production_client(self):
        settings = Settings(env="production")
        app = create_app(manager=RoomManager(settings=settings), settings=settings)
        with TestClient(app) as client:
            yield client

    def test_seed_rejected_in_production(self, production_client):
        response = production_client.post("/api/v1/rooms", json=ROOM)
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REQUEST"
        assert response.json()["details"] == {"field": "seed"}
        assert production_client.get("/api/v1/rooms/room-1").status_code == 404

    def test_unseeded_room_in_production(self, production_client):
        body = {k: v for k, v in ROOM.items() if k != "seed"}
        assert production_client.post("/api/v1/rooms", json=body).status_code == 201

    def test_seed_accepted_in_development(self, room):
        assert room["version"] == 1
