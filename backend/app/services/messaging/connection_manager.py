# backend/app/services/messaging/connection_manager.py
"""
In-process registry of open socket connections.

Architecture:
- Each connection is bound to one user at connect time and to at most one
  conversation topic at a time (``subscribe`` replaces the previous topic)
- Fan-out looks up ``topic -> connections`` directly instead of scanning
  every open connection
- A per-user connection count backs the optional presence reference count

State is process-local and lost on restart; clients re-subscribe after
reconnecting. The lock guards only the in-memory maps and is never held
while a frame is being sent.
"""

from dataclasses import dataclass, field
import logging
import threading
from typing import Any, Dict, List, Optional, Set

from fastapi import WebSocket
import ulid

from app.monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ClientConnection:
    """One open socket bound to an authenticated user."""

    websocket: WebSocket
    user_id: str
    connection_id: str = field(default_factory=lambda: str(ulid.ULID()))
    conversation_id: Optional[str] = None


class ConnectionManager:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._connections: Set[ClientConnection] = set()
        self._topics: Dict[str, Set[ClientConnection]] = {}
        self._user_counts: Dict[str, int] = {}

    def register(self, connection: ClientConnection) -> int:
        """Track a new connection. Returns the user's open connection count."""
        with self._lock:
            self._connections.add(connection)
            count = self._user_counts.get(connection.user_id, 0) + 1
            self._user_counts[connection.user_id] = count
        prometheus_metrics.ws_connection_opened()
        logger.debug(
            "Socket registered",
            extra={"user_id": connection.user_id, "connection_id": connection.connection_id},
        )
        return count

    def unregister(self, connection: ClientConnection) -> int:
        """
        Forget a connection and its topic binding.

        Returns the user's remaining open connection count. Unregistering an
        unknown connection is a no-op.
        """
        with self._lock:
            if connection not in self._connections:
                return self._user_counts.get(connection.user_id, 0)
            self._connections.discard(connection)
            self._unbind(connection)
            remaining = self._user_counts.get(connection.user_id, 1) - 1
            if remaining > 0:
                self._user_counts[connection.user_id] = remaining
            else:
                self._user_counts.pop(connection.user_id, None)
                remaining = 0
        prometheus_metrics.ws_connection_closed()
        logger.debug(
            "Socket unregistered",
            extra={"user_id": connection.user_id, "connection_id": connection.connection_id},
        )
        return remaining

    def subscribe(self, connection: ClientConnection, conversation_id: str) -> None:
        """Bind the connection to a conversation topic. Participancy is checked by the caller."""
        with self._lock:
            self._unbind(connection)
            connection.conversation_id = conversation_id
            self._topics.setdefault(conversation_id, set()).add(connection)

    def _unbind(self, connection: ClientConnection) -> None:
        topic = connection.conversation_id
        if topic is None:
            return
        members = self._topics.get(topic)
        if members is not None:
            members.discard(connection)
            if not members:
                del self._topics[topic]
        connection.conversation_id = None

    def topic_connections(self, conversation_id: str) -> List[ClientConnection]:
        with self._lock:
            return list(self._topics.get(conversation_id, ()))

    def connection_count(self, user_id: Optional[str] = None) -> int:
        with self._lock:
            if user_id is None:
                return len(self._connections)
            return self._user_counts.get(user_id, 0)

    async def broadcast_to_topic(
        self,
        conversation_id: str,
        frame: Dict[str, Any],
        exclude: Optional[ClientConnection] = None,
    ) -> int:
        """
        Send ``frame`` to every connection subscribed to ``conversation_id``.

        A failed send drops that connection from the registry and does not
        stop delivery to the others. Returns the number of successful sends.
        """
        delivered = 0
        for connection in self.topic_connections(conversation_id):
            if connection is exclude:
                continue
            try:
                await connection.websocket.send_json(frame)
                delivered += 1
            except Exception as exc:
                logger.warning(
                    f"Dropping socket after failed send: {exc}",
                    extra={
                        "user_id": connection.user_id,
                        "connection_id": connection.connection_id,
                        "conversation_id": conversation_id,
                    },
                )
                self.unregister(connection)
        return delivered

    def reset(self) -> None:
        """Forget every connection (used on shutdown and in tests)."""
        with self._lock:
            self._connections.clear()
            self._topics.clear()
            self._user_counts.clear()


connection_manager = ConnectionManager()
