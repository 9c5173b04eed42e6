"""
HTTP and WebSocket route tests
"""
import pytest
from fastapi.testclient import TestClient

from pairchat.main import create_app
from pairchat.services import StoreError


@pytest.fixture
def client(settings):
    """Client with the app lifespan running"""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


def create_user(client, username):
    response = client.post("/users", json={"username": username})
    assert response.status_code == 201
    return response.json()


def test_root_and_health(client):
    assert client.get("/").status_code == 200

    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["services"]["database"] == "up"
    assert data["services"]["redis"] == "disabled"
    assert "X-Trace-ID" in response.headers


def test_create_and_list_users(client):
    alice = create_user(client, "alice")
    create_user(client, "bob")

    assert client.get(f"/users/{alice['id']}").json()["username"] == "alice"
    assert [u["username"] for u in client.get("/users").json()] == ["alice", "bob"]


def test_create_user_requires_username(client):
    response = client.post("/users", json={"username": "  "})
    assert response.status_code == 400
    assert response.json()["error"] == "bad_request"


def test_get_unknown_user(client):
    assert client.get("/users/ghost").status_code == 404


def test_send_and_read_history(client):
    alice = create_user(client, "alice")
    bob = create_user(client, "bob")

    first = client.post("/messages/send", json={
        "sender_id": alice["id"], "receiver_id": bob["id"], "text": "hi"
    })
    second = client.post("/messages/send", json={
        "sender_id": bob["id"], "receiver_id": alice["id"], "text": "yo"
    })
    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["text"] == "hi"

    history = client.get(f"/messages/conversation/{bob['id']}/{alice['id']}").json()
    assert [m["text"] for m in history["messages"]] == ["hi", "yo"]
    assert history["count"] == 2

    by_key = client.get(f"/messages/rooms/{history['room_key']}").json()
    assert [m["id"] for m in by_key["messages"]] == [first.json()["id"], second.json()["id"]]

    rooms = client.get(f"/users/{alice['id']}/rooms").json()
    assert [room["room_key"] for room in rooms] == [history["room_key"]]
    assert sorted(rooms[0]["participant_ids"]) == sorted([alice["id"], bob["id"]])


def test_error_kinds_are_distinct(client):
    alice = create_user(client, "alice")
    bob = create_user(client, "bob")

    missing = client.post("/messages/send", json={"sender_id": alice["id"], "text": "hi"})
    assert missing.status_code == 400
    assert missing.json()["error"] == "bad_request"

    unknown = client.post("/messages/send", json={
        "sender_id": "ghost", "receiver_id": bob["id"], "text": "hi"
    })
    assert unknown.status_code == 404
    assert unknown.json()["error"] == "not_found"

    empty = client.post("/messages/send", json={
        "sender_id": alice["id"], "receiver_id": bob["id"], "text": ""
    })
    assert empty.status_code == 422
    assert empty.json()["error"] == "validation_error"

    no_room = client.get("/messages/rooms/nobody_here")
    assert no_room.status_code == 404

    ambiguous = client.post("/messages/send", json={
        "sender_id": "a_b", "receiver_id": bob["id"], "text": "hi"
    })
    assert ambiguous.status_code == 400
    assert ambiguous.json()["error"] == "bad_request"
    assert client.get(f"/messages/conversation/a_b/{bob['id']}").status_code == 400


def test_partial_failure_response_and_reconcile(client, monkeypatch):
    alice = create_user(client, "alice")
    bob = create_user(client, "bob")
    rooms = client.app.state.context.rooms

    async def broken_append(room_key, message_id):
        raise StoreError("connection lost")

    monkeypatch.setattr(rooms, "append_message", broken_append)
    response = client.post("/messages/send", json={
        "sender_id": alice["id"], "receiver_id": bob["id"], "text": "orphan"
    })
    monkeypatch.undo()

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "partial_failure"
    assert body["message"]["text"] == "orphan"

    assert client.post("/messages/reconcile").json() == {"linked": 0}
    assert client.post("/messages/reconcile?grace_seconds=0").json() == {"linked": 1}
    history = client.get(f"/messages/rooms/{body['room_key']}").json()
    assert [m["id"] for m in history["messages"]] == [body["message"]["id"]]


def test_websocket_receives_new_messages(client):
    alice = create_user(client, "alice")
    bob = create_user(client, "bob")

    with client.websocket_connect("/ws") as websocket:
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json()["type"] == "pong"

        sent = client.post("/messages/send", json={
            "sender_id": alice["id"], "receiver_id": bob["id"], "text": "live"
        }).json()

        frame = websocket.receive_json()
        assert frame["event"] == "newMessage"
        assert frame["data"]["id"] == sent["id"]
        assert frame["data"]["text"] == "live"
