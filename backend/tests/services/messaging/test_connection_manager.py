from typing import Any, Dict, List

import pytest

from app.services.messaging.connection_manager import ClientConnection, ConnectionManager


class FakeSocket:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: List[Dict[str, Any]] = []

    async def send_json(self, data: Dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


def _connect(manager: ConnectionManager, user_id: str, fail: bool = False) -> ClientConnection:
    connection = ClientConnection(websocket=FakeSocket(fail=fail), user_id=user_id)
    manager.register(connection)
    return connection


@pytest.fixture
def manager() -> ConnectionManager:
    return ConnectionManager()


def test_register_and_unregister_counts(manager):
    first = _connect(manager, "u1")
    second = _connect(manager, "u1")
    _connect(manager, "u2")

    assert manager.connection_count() == 3
    assert manager.connection_count("u1") == 2

    assert manager.unregister(first) == 1
    assert manager.unregister(first) == 1
    assert manager.unregister(second) == 0
    assert manager.connection_count("u1") == 0
    assert manager.connection_count() == 1


def test_subscribe_replaces_topic(manager):
    connection = _connect(manager, "u1")

    manager.subscribe(connection, "conv-a")
    manager.subscribe(connection, "conv-b")

    assert connection.conversation_id == "conv-b"
    assert manager.topic_connections("conv-a") == []
    assert manager.topic_connections("conv-b") == [connection]


def test_unregister_drops_topic_binding(manager):
    connection = _connect(manager, "u1")
    manager.subscribe(connection, "conv-a")

    manager.unregister(connection)

    assert manager.topic_connections("conv-a") == []


@pytest.mark.asyncio
async def test_broadcast_reaches_only_topic_members(manager):
    sender = _connect(manager, "u1")
    reader = _connect(manager, "u2")
    elsewhere = _connect(manager, "u3")
    manager.subscribe(sender, "conv-a")
    manager.subscribe(reader, "conv-a")
    manager.subscribe(elsewhere, "conv-b")

    delivered = await manager.broadcast_to_topic("conv-a", {"type": "typing_start"}, exclude=sender)

    assert delivered == 1
    assert reader.websocket.sent == [{"type": "typing_start"}]
    assert sender.websocket.sent == []
    assert elsewhere.websocket.sent == []


@pytest.mark.asyncio
async def test_failed_send_drops_connection(manager):
    healthy = _connect(manager, "u1")
    broken = _connect(manager, "u2", fail=True)
    manager.subscribe(healthy, "conv-a")
    manager.subscribe(broken, "conv-a")

    delivered = await manager.broadcast_to_topic("conv-a", {"type": "new_message"})

    assert delivered == 1
    assert healthy.websocket.sent == [{"type": "new_message"}]
    assert manager.topic_connections("conv-a") == [healthy]
    assert manager.connection_count("u2") == 0
