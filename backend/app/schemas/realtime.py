# backend/app/schemas/realtime.py
"""
Inbound socket frames.

Every frame carries a ``type`` discriminator; anything that does not parse
into one of these models is answered with an error frame.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import Field, TypeAdapter

from ._strict_base import StrictRequestModel


class _Frame(StrictRequestModel):
    # Clients may send extra keys (client-side ids, timestamps); ignore them.
    model_config = {**StrictRequestModel.model_config, "extra": "ignore"}


class SubscribeFrame(_Frame):
    type: Literal["subscribe"]
    conversation_id: str = Field(..., min_length=1)


class ChatMessageFrame(_Frame):
    type: Literal["message"]
    conversation_id: str = Field(..., min_length=1)
    content: Optional[str] = None


class TypingFrame(_Frame):
    type: Literal["typing_start", "typing_stop"]
    conversation_id: str = Field(..., min_length=1)


class ReactionFrame(_Frame):
    type: Literal["reaction_added", "reaction_removed"]
    message_id: str = Field(..., min_length=1)
    conversation_id: str = Field(..., min_length=1)
    emoji: str


class MessageReadFrame(_Frame):
    type: Literal["message_read"]
    conversation_id: str = Field(..., min_length=1)
    last_read_message_id: Optional[str] = None


InboundFrame = Annotated[
    Union[SubscribeFrame, ChatMessageFrame, TypingFrame, ReactionFrame, MessageReadFrame],
    Field(discriminator="type"),
]

inbound_frame_adapter: TypeAdapter[InboundFrame] = TypeAdapter(InboundFrame)
