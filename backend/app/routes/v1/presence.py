# backend/app/routes/v1/presence.py
"""
Presence routes - API v1

Endpoints:
    GET /online             - Online residents, excluding the caller
    POST /status            - Set the caller's status (online/offline)
    GET /{user_id}          - A single user's presence
"""

import logging

from fastapi import APIRouter, Depends

from ...api.dependencies.auth import get_current_user_id
from ...api.dependencies.services import get_presence_service
from ...models.presence import UserPresence
from ...schemas.conversation import UserSummary
from ...schemas.presence import (
    OnlineUserResponse,
    OnlineUsersResponse,
    PresenceResponse,
    UpdatePresenceRequest,
)
from ...services.presence_service import PresenceService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["presence-v1"])


@router.get("/online", response_model=OnlineUsersResponse)
def get_online_users(
    user_id: str = Depends(get_current_user_id),
    service: PresenceService = Depends(get_presence_service),
) -> OnlineUsersResponse:
    online = service.get_online_users(exclude_user_id=user_id)
    return OnlineUsersResponse(
        users=[
            OnlineUserResponse(
                user=UserSummary.model_validate(entry.user),
                status=entry.presence.status,
                last_seen_at=entry.presence.last_seen_at,
            )
            for entry in online
        ]
    )


@router.post("/status", response_model=PresenceResponse)
def update_status(
    request: UpdatePresenceRequest,
    user_id: str = Depends(get_current_user_id),
    service: PresenceService = Depends(get_presence_service),
) -> PresenceResponse:
    presence = service.update_user_presence(user_id, request.status)
    return PresenceResponse.model_validate(presence)


@router.get("/{target_user_id}", response_model=PresenceResponse)
def get_user_presence(
    target_user_id: str,
    user_id: str = Depends(get_current_user_id),
    service: PresenceService = Depends(get_presence_service),
) -> PresenceResponse:
    """Users that never connected report ``offline`` with no last-seen time."""
    presence: UserPresence | None = service.get_user_presence(target_user_id)
    if presence is None:
        return PresenceResponse(user_id=target_user_id, status="offline", last_seen_at=None)
    return PresenceResponse.model_validate(presence)
