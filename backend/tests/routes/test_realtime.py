"""Socket protocol tests against the ``/ws`` endpoint."""

from datetime import timedelta
import time

from fastapi import WebSocketDisconnect
import pytest

from app.core.config import settings
from app.core.exceptions import ServiceException
from app.models.presence import UserPresence
from app.routes.realtime import chat_socket
from app.services.conversation_service import ConversationService
from app.services.messaging.connection_manager import connection_manager
from tests.helpers.auth import auth_headers, token_for


def _create_conversation(client, user, other) -> str:
    response = client.post(
        "/api/v1/conversations/create",
        json={"otherUserId": other.id},
        headers=auth_headers(user),
    )
    return response.json()["conversation"]["id"]


def _connect(client, user):
    return client.websocket_connect(f"/ws?token={token_for(user)}")


def _presence(client, viewer, user) -> str:
    response = client.get(f"/api/v1/presence/{user.id}", headers=auth_headers(viewer))
    return response.json()["status"]


def _wait_for_presence(client, viewer, user, expected: str, timeout: float = 5.0) -> str:
    # The offline write finishes on a worker thread after the socket closes
    deadline = time.monotonic() + timeout
    status = _presence(client, viewer, user)
    while status != expected and time.monotonic() < deadline:
        time.sleep(0.05)
        status = _presence(client, viewer, user)
    return status


class TestHandshake:
    def test_missing_token_closes_with_policy_violation(self, client):
        with client.websocket_connect("/ws") as ws:
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()
        assert exc.value.code == 1008
        assert exc.value.reason == "Token required"

    def test_bad_token_closes_with_policy_violation(self, client):
        with client.websocket_connect("/ws?token=garbage") as ws:
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()
        assert exc.value.code == 1008
        assert exc.value.reason == "Authentication failed"

    def test_expired_token_rejected(self, client, alice):
        token = token_for(alice, expires_delta=timedelta(minutes=-5))
        with client.websocket_connect(f"/ws?token={token}") as ws:
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()
        assert exc.value.code == 1008

    def test_connected_frame_and_presence(self, client, alice, bob):
        with _connect(client, alice) as ws:
            assert ws.receive_json() == {"type": "connected", "userId": alice.id}
            assert _presence(client, bob, alice) == "online"

        assert _wait_for_presence(client, bob, alice, "offline") == "offline"


class TestFrames:
    def test_invalid_json(self, client, alice):
        with _connect(client, alice) as ws:
            ws.receive_json()
            ws.send_text("{not json")
            assert ws.receive_json() == {"type": "error", "message": "Invalid message format"}

    def test_unknown_frame_type(self, client, alice):
        with _connect(client, alice) as ws:
            ws.receive_json()
            ws.send_json({"type": "shout", "conversationId": "x"})
            assert ws.receive_json()["message"] == "Invalid message format"

    def test_outsider_subscribe_rejected_but_connection_survives(self, client, alice, bob, carol):
        conversation_id = _create_conversation(client, alice, bob)

        with _connect(client, carol) as ws:
            ws.receive_json()
            ws.send_json({"type": "subscribe", "conversationId": conversation_id})
            error = ws.receive_json()
            assert error["type"] == "error"
            assert "Not a participant" in error["message"]

            ws.send_text("{not json")
            assert ws.receive_json()["type"] == "error"

    def test_typing_requires_subscription(self, client, alice, bob):
        conversation_id = _create_conversation(client, alice, bob)

        with _connect(client, alice) as ws:
            ws.receive_json()
            ws.send_json({"type": "typing_start", "conversationId": conversation_id})
            assert ws.receive_json() == {
                "type": "error",
                "message": "Not subscribed to this conversation",
            }


class TestDelivery:
    def test_http_send_reaches_subscribed_socket(self, client, alice, bob):
        conversation_id = _create_conversation(client, alice, bob)

        with _connect(client, bob) as ws:
            assert ws.receive_json()["type"] == "connected"
            ws.send_json({"type": "subscribe", "conversationId": conversation_id})
            assert ws.receive_json() == {"type": "subscribed", "conversationId": conversation_id}

            response = client.post(
                "/api/v1/messages/send",
                json={"conversationId": conversation_id, "content": "hello"},
                headers=auth_headers(alice),
            )
            assert response.status_code == 200

            frame = ws.receive_json()
            assert frame["type"] == "new_message"
            assert frame["conversationId"] == conversation_id
            assert frame["message"]["content"] == "hello"
            assert frame["message"]["senderId"] == alice.id
            assert frame["message"]["id"] == response.json()["id"]

        unread = client.get("/api/v1/messages/unread/count", headers=auth_headers(bob))
        assert unread.json()["count"] == 1
        client.post(f"/api/v1/messages/{conversation_id}/read", headers=auth_headers(bob))
        unread = client.get("/api/v1/messages/unread/count", headers=auth_headers(bob))
        assert unread.json()["count"] == 0
        unread = client.get("/api/v1/messages/unread/count", headers=auth_headers(alice))
        assert unread.json()["count"] == 0

    def test_socket_send_echoes_to_both_participants(self, client, alice, bob):
        conversation_id = _create_conversation(client, alice, bob)

        with _connect(client, alice) as ws_a, _connect(client, bob) as ws_b:
            for ws in (ws_a, ws_b):
                ws.receive_json()
                ws.send_json({"type": "subscribe", "conversationId": conversation_id})
                ws.receive_json()

            ws_a.send_json(
                {"type": "message", "conversationId": conversation_id, "content": "  hi bob "}
            )

            for ws in (ws_a, ws_b):
                frame = ws.receive_json()
                assert frame["type"] == "new_message"
                assert frame["message"]["content"] == "hi bob"

        history = client.get(f"/api/v1/messages/{conversation_id}", headers=auth_headers(bob))
        assert [m["content"] for m in history.json()["messages"]] == ["hi bob"]

    def test_socket_send_validation_error(self, client, alice, bob):
        conversation_id = _create_conversation(client, alice, bob)

        with _connect(client, alice) as ws:
            ws.receive_json()
            ws.send_json({"type": "message", "conversationId": conversation_id, "content": ""})
            assert ws.receive_json() == {"type": "error", "message": "Message content required"}

    def test_typing_is_not_echoed_to_sender(self, client, alice, bob):
        conversation_id = _create_conversation(client, alice, bob)

        with _connect(client, alice) as ws_a, _connect(client, bob) as ws_b:
            for ws in (ws_a, ws_b):
                ws.receive_json()
                ws.send_json({"type": "subscribe", "conversationId": conversation_id})
                ws.receive_json()

            ws_a.send_json({"type": "typing_start", "conversationId": conversation_id})
            assert ws_b.receive_json() == {
                "type": "typing_start",
                "conversationId": conversation_id,
                "userId": alice.id,
            }

            # The sender's next frame is the reply to its own subscribe, not its typing.
            ws_a.send_json({"type": "subscribe", "conversationId": conversation_id})
            assert ws_a.receive_json()["type"] == "subscribed"

    def test_reactions_and_read_receipts_fan_out(self, client, alice, bob):
        conversation_id = _create_conversation(client, alice, bob)
        message = client.post(
            "/api/v1/messages/send",
            json={"conversationId": conversation_id, "content": "Lift is fixed"},
            headers=auth_headers(alice),
        ).json()

        with _connect(client, alice) as ws_a, _connect(client, bob) as ws_b:
            for ws in (ws_a, ws_b):
                ws.receive_json()
                ws.send_json({"type": "subscribe", "conversationId": conversation_id})
                ws.receive_json()

            ws_b.send_json(
                {
                    "type": "reaction_added",
                    "conversationId": conversation_id,
                    "messageId": message["id"],
                    "emoji": "👍",
                }
            )
            for ws in (ws_a, ws_b):
                frame = ws.receive_json()
                assert frame["type"] == "reaction_added"
                assert frame["messageId"] == message["id"]
                assert frame["emoji"] == "👍"

            ws_b.send_json(
                {
                    "type": "message_read",
                    "conversationId": conversation_id,
                    "lastReadMessageId": message["id"],
                }
            )
            frame = ws_a.receive_json()
            assert frame["type"] == "message_read"
            assert frame["userId"] == bob.id
            assert frame["lastReadMessageId"] == message["id"]


class TestPresenceRefcount:
    def test_last_writer_wins_by_default(self, client, alice, bob):
        with _connect(client, alice) as first:
            first.receive_json()
            with _connect(client, alice) as second:
                second.receive_json()
            assert _wait_for_presence(client, bob, alice, "offline") == "offline"

    def test_refcount_keeps_user_online(self, client, monkeypatch, alice, bob):
        monkeypatch.setattr(settings, "presence_refcount_enabled", True)

        with _connect(client, alice) as first:
            first.receive_json()
            with _connect(client, alice) as second:
                second.receive_json()
            assert connection_manager.connection_count(alice.id) == 1
            assert _presence(client, bob, alice) == "online"

        assert _wait_for_presence(client, bob, alice, "offline") == "offline"


class DroppingSocket:
    """A client that vanishes right after the handshake is accepted."""

    def __init__(self, token: str) -> None:
        self.query_params = {"token": token}

    async def accept(self) -> None:
        return None

    async def send_json(self, data) -> None:
        raise WebSocketDisconnect(code=1006)

    async def receive_text(self) -> str:
        raise WebSocketDisconnect(code=1006)

    async def close(self, code: int = 1000, reason=None) -> None:
        return None


class TestDroppedClient:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("refcount", [False, True])
    async def test_drop_before_connected_frame_cleans_up(
        self, db, monkeypatch, alice, refcount
    ):
        monkeypatch.setattr(settings, "presence_refcount_enabled", refcount)

        await chat_socket(DroppingSocket(token_for(alice)))

        assert connection_manager.connection_count(alice.id) == 0
        assert connection_manager.connection_count() == 0
        db.expire_all()
        presence = db.get(UserPresence, alice.id)
        assert presence is not None
        assert presence.status == "offline"


class TestServerErrors:
    def test_internal_failure_detail_is_not_sent(self, client, monkeypatch, alice, bob):
        conversation_id = _create_conversation(client, alice, bob)

        def failing_check(self, conversation_id, user_id):
            raise ServiceException("Database operation failed: (sqlite3.OperationalError) SELECT")

        monkeypatch.setattr(ConversationService, "require_participant", failing_check)

        with _connect(client, alice) as ws:
            ws.receive_json()
            ws.send_json({"type": "subscribe", "conversationId": conversation_id})
            assert ws.receive_json() == {"type": "error", "message": "An error occurred"}
