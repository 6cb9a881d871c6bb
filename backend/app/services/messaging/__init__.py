# backend/app/services/messaging/__init__.py
"""
Messaging services package.

Architecture:
- ConnectionManager keeps the process-local topic -> connections map
- ChatSocketHandler implements the per-connection frame protocol
- deliver_chat_message is the shared persist-then-fan-out path used by both
  the HTTP send endpoint and the socket ``message`` frame
"""

from app.services.messaging.chat_delivery import deliver_chat_message
from app.services.messaging.connection_manager import (
    ClientConnection,
    ConnectionManager,
    connection_manager,
)
from app.services.messaging.events import EventType, build_event
from app.services.messaging.socket_handler import ChatSocketHandler

__all__ = [
    "ChatSocketHandler",
    "ClientConnection",
    "ConnectionManager",
    "EventType",
    "build_event",
    "connection_manager",
    "deliver_chat_message",
]
