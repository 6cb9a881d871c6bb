# backend/app/schemas/presence.py
"""Schemas for presence endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel
from .conversation import UserSummary


class PresenceResponse(StrictModel):
    user_id: str
    status: str
    last_seen_at: Optional[datetime] = None


class UpdatePresenceRequest(StrictRequestModel):
    status: str = Field(..., description="online or offline")


class OnlineUserResponse(StrictModel):
    """An online resident with their public profile."""

    user: UserSummary
    status: str
    last_seen_at: Optional[datetime] = None


class OnlineUsersResponse(StrictModel):
    users: List[OnlineUserResponse]
