# backend/app/schemas/message_requests.py
"""
Request schemas for the message/chat system.
"""

from typing import Optional

from pydantic import Field

from ._strict_base import StrictRequestModel


class AttachmentRequest(StrictRequestModel):
    """Reference to a file uploaded elsewhere."""

    url: str = Field(..., min_length=1)
    name: Optional[str] = None
    mime_type: Optional[str] = None


class SendMessageRequest(StrictRequestModel):
    """
    Request to send a message.

    Content length and emptiness are checked by the service so HTTP and the
    socket share the same error messages.
    """

    conversation_id: str = Field(..., min_length=1)
    content: Optional[str] = None
    attachment: Optional[AttachmentRequest] = None


class AddReactionRequest(StrictRequestModel):
    emoji: str


class ReadReceiptRequest(StrictRequestModel):
    last_read_message_id: Optional[str] = None
