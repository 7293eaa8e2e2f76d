import pytest
from sqlalchemy.exc import OperationalError
from starlette.websockets import WebSocketDisconnect

from planitech.features.access.services import ProjectAccessService
from planitech.realtime.notifier import Notifier
from planitech.realtime.registry import (
    Connection,
    ConnectionRegistry,
    ConnectionState,
    ConnectionStateError,
)


# -----------------------------
# Registry / notifier (sans websocket)
# -----------------------------

class Inbox(list):
    """Fonction `deliver` qui garde les messages reçus."""

    def __call__(self, message):
        self.append(message)


def connected(notifier, user_id):
    inbox = Inbox()
    connection = Connection(inbox)
    connection.authenticate(user_id=user_id, username=f"user{user_id}")
    notifier.connect(connection)
    return connection, inbox


@pytest.fixture
def notifier():
    return Notifier(ConnectionRegistry())


def test_publish_reaches_room_subscribers_except_sender(notifier):
    alice, alice_inbox = connected(notifier, 1)
    bob, bob_inbox = connected(notifier, 2)
    notifier.subscribe(alice, 5)
    notifier.subscribe(bob, 5)

    delivered = notifier.publish(5, "task-updated", {"id": 3}, sender=alice)

    assert delivered == 1
    assert alice_inbox == []
    assert bob_inbox == [{"event": "task-updated", "data": {"id": 3}}]


def test_connection_without_join_never_receives_project_events(notifier):
    tech, tech_inbox = connected(notifier, 1)
    other, _ = connected(notifier, 2)
    notifier.subscribe(other, 5)

    notifier.publish(5, "project-updated", {"action": "updated"})
    notifier.publish(5, "task-updated", {"action": "created"})

    assert tech_inbox == []
    assert tech.state is ConnectionState.AUTHENTICATED


def test_rooms_are_isolated(notifier):
    a, a_inbox = connected(notifier, 1)
    notifier.subscribe(a, 1)
    assert notifier.publish(2, "project-updated", {}) == 0
    assert a_inbox == []


def test_state_machine_transitions(notifier):
    connection = Connection(Inbox())
    assert connection.state is ConnectionState.CONNECTING
    with pytest.raises(ConnectionStateError):
        connection.mark_subscribed(1)

    connection.authenticate(user_id=1, username="tom")
    with pytest.raises(ConnectionStateError):
        connection.authenticate(user_id=1, username="tom")

    notifier.connect(connection)
    notifier.subscribe(connection, 1)
    notifier.subscribe(connection, 2)
    assert connection.state is ConnectionState.SUBSCRIBED
    assert connection.projects == {1, 2}

    notifier.disconnect(connection)
    assert connection.state is ConnectionState.DISCONNECTED
    with pytest.raises(ConnectionStateError):
        connection.send({"event": "x", "data": None})
    with pytest.raises(ConnectionStateError):
        notifier.subscribe(connection, 3)


def test_disconnected_connection_is_removed_from_rooms(notifier):
    a, a_inbox = connected(notifier, 1)
    notifier.subscribe(a, 9)
    notifier.disconnect(a)
    assert notifier.publish(9, "task-updated", {}) == 0
    assert a_inbox == []


def test_publish_never_raises_on_failing_delivery(notifier):
    def broken(message):
        raise RuntimeError("socket gone")

    bad = Connection(broken)
    bad.authenticate(user_id=1, username="a")
    notifier.connect(bad)
    notifier.subscribe(bad, 4)
    good, good_inbox = connected(notifier, 2)
    notifier.subscribe(good, 4)

    assert notifier.publish(4, "project-updated", {"x": 1}) == 1
    assert len(good_inbox) == 1


def test_closed_registry_drops_connections_and_refuses_new_ones(notifier):
    a, _ = connected(notifier, 1)
    notifier.registry.close()
    assert a.state is ConnectionState.DISCONNECTED
    assert len(notifier.registry) == 0
    with pytest.raises(ConnectionStateError):
        connected(notifier, 2)


# -----------------------------
# Websocket /api/v1/realtime
# -----------------------------

def test_handshake_without_token_is_rejected(client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/api/v1/realtime"):
            pass
    assert exc.value.code == 1008


def test_handshake_with_invalid_token_is_rejected(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/api/v1/realtime?token=garbage"):
            pass


def test_join_then_receive_rest_mutation(client, users, headers, token_of, project):
    with client.websocket_connect(f"/api/v1/realtime?token={token_of(users['tech'])}") as ws:
        ws.send_json({"event": "join-project", "data": {"projectId": project["id"]}})
        assert ws.receive_json() == {"event": "joined-project", "data": {"projectId": project["id"]}}

        response = client.put(
            f"/api/v1/projects/{project['id']}",
            json={"status": "on_hold"},
            headers=headers(users["member"]),
        )
        assert response.status_code == 200

        message = ws.receive_json()
        assert message["event"] == "project-updated"
        assert message["data"]["action"] == "updated"
        assert message["data"]["project"]["status"] == "on_hold"


def test_bearer_header_is_accepted(client, users, token_of, project):
    auth = {"Authorization": f"Bearer {token_of(users['support'])}"}
    with client.websocket_connect("/api/v1/realtime", headers=auth) as ws:
        ws.send_json({"event": "join-project", "data": project["id"]})
        assert ws.receive_json()["event"] == "joined-project"


def test_join_requires_project_access(client, users, token_of, project):
    with client.websocket_connect(f"/api/v1/realtime?token={token_of(users['outsider'])}") as ws:
        ws.send_json({"event": "join-project", "data": {"projectId": project["id"]}})
        assert ws.receive_json() == {"event": "error", "data": {"error": "Access denied to this project"}}

        ws.send_json({"event": "join-project", "data": {"projectId": 9999}})
        assert ws.receive_json() == {"event": "error", "data": {"error": "Project not found"}}


def test_client_updates_are_relayed_to_other_subscribers(client, users, token_of, project):
    pid = project["id"]
    with client.websocket_connect(f"/api/v1/realtime?token={token_of(users['member'])}") as sender, \
            client.websocket_connect(f"/api/v1/realtime?token={token_of(users['lead'])}") as receiver:
        for ws in (sender, receiver):
            ws.send_json({"event": "join-project", "data": {"projectId": pid}})
            assert ws.receive_json()["event"] == "joined-project"

        sender.send_json({"event": "task-update", "data": {"projectId": pid, "taskId": 1}})
        assert receiver.receive_json() == {"event": "task-updated", "data": {"projectId": pid, "taskId": 1}}

        sender.send_json({"event": "cursor-move", "data": {"projectId": pid, "x": 4, "y": 2}})
        assert receiver.receive_json() == {
            "event": "cursor-moved",
            "data": {"userId": users["member"].id, "projectId": pid, "x": 4, "y": 2},
        }


def test_relay_requires_join(client, users, token_of, project):
    with client.websocket_connect(f"/api/v1/realtime?token={token_of(users['member'])}") as ws:
        ws.send_json({"event": "project-update", "data": {"projectId": project["id"]}})
        assert ws.receive_json()["event"] == "error"

        ws.send_text("{not json")
        assert ws.receive_json() == {"event": "error", "data": {"error": "Invalid JSON message"}}

        ws.send_json({"event": "dance", "data": None})
        assert ws.receive_json() == {"event": "error", "data": {"error": "Unknown event: dance"}}


def test_database_error_is_reported_without_closing_socket(client, users, token_of, project, monkeypatch):
    calls = []
    original = ProjectAccessService.resolve

    def flaky_resolve(self, user, project_id):
        calls.append(project_id)
        if len(calls) == 1:
            raise OperationalError("SELECT projects", {}, Exception("database is locked"))
        return original(self, user, project_id)

    monkeypatch.setattr(ProjectAccessService, "resolve", flaky_resolve)
    with client.websocket_connect(f"/api/v1/realtime?token={token_of(users['lead'])}") as ws:
        ws.send_json({"event": "join-project", "data": {"projectId": project["id"]}})
        assert ws.receive_json() == {"event": "error", "data": {"error": "Internal Server Error"}}

        ws.send_json({"event": "join-project", "data": {"projectId": project["id"]}})
        assert ws.receive_json() == {"event": "joined-project", "data": {"projectId": project["id"]}}
    assert calls == [project["id"], project["id"]]
