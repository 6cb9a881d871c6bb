# backend/app/routes/v1/notification_preferences.py
"""
Notification preference and category interest routes - API v1.

Mounted under /api/v1/notifications:
    GET /preferences        - Every configured (category, subcategory) with effective values
    PUT /preferences        - Upsert one preference
    GET /interests          - The caller's category interests (optional ?categoryType=)
    POST /interests         - Register an interest (idempotent)
    DELETE /interests       - Remove an interest
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies.auth import get_current_user_id
from ...api.dependencies.services import get_notification_preference_service
from ...schemas.notification_preferences import (
    CategoryInterestListResponse,
    CategoryInterestRequest,
    CategoryInterestResponse,
    PreferenceListResponse,
    PreferenceResponse,
    RemoveInterestResponse,
    UpdatePreferenceRequest,
)
from ...services.notification_preference_service import NotificationPreferenceService

router = APIRouter(tags=["notification-preferences-v1"])


@router.get("/preferences", response_model=PreferenceListResponse)
def get_preferences(
    user_id: str = Depends(get_current_user_id),
    service: NotificationPreferenceService = Depends(get_notification_preference_service),
) -> PreferenceListResponse:
    """Get all notification preferences for the current user."""
    return PreferenceListResponse(
        preferences=[
            PreferenceResponse.model_validate(pref)
            for pref in service.get_notification_preferences(user_id)
        ]
    )


@router.put("/preferences", response_model=PreferenceResponse)
def update_preference(
    request: UpdatePreferenceRequest,
    user_id: str = Depends(get_current_user_id),
    service: NotificationPreferenceService = Depends(get_notification_preference_service),
) -> PreferenceResponse:
    """Update a single preference."""
    row = service.set_notification_preference(
        user_id,
        request.category,
        request.subcategory,
        in_app_enabled=request.in_app_enabled,
        email_enabled=request.email_enabled,
        email_frequency=request.email_frequency,
    )
    return PreferenceResponse.model_validate(row)


@router.get("/interests", response_model=CategoryInterestListResponse)
def list_interests(
    category_type: Optional[str] = Query(None, alias="categoryType"),
    user_id: str = Depends(get_current_user_id),
    service: NotificationPreferenceService = Depends(get_notification_preference_service),
) -> CategoryInterestListResponse:
    interests = service.get_user_category_interests(user_id, category_type)
    return CategoryInterestListResponse(
        interests=[CategoryInterestResponse.model_validate(i) for i in interests]
    )


@router.post("/interests", response_model=CategoryInterestResponse)
def add_interest(
    request: CategoryInterestRequest,
    user_id: str = Depends(get_current_user_id),
    service: NotificationPreferenceService = Depends(get_notification_preference_service),
) -> CategoryInterestResponse:
    interest = service.add_category_interest(
        user_id, request.category_type, request.category_value
    )
    return CategoryInterestResponse.model_validate(interest)


@router.delete("/interests", response_model=RemoveInterestResponse)
def remove_interest(
    category_type: str = Query(..., alias="categoryType"),
    category_value: str = Query(..., alias="categoryValue"),
    user_id: str = Depends(get_current_user_id),
    service: NotificationPreferenceService = Depends(get_notification_preference_service),
) -> RemoveInterestResponse:
    removed = service.remove_category_interest(user_id, category_type, category_value)
    return RemoveInterestResponse(removed=removed)
