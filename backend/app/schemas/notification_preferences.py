# backend/app/schemas/notification_preferences.py
"""Schemas for notification preference and category interest endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class PreferenceResponse(StrictModel):
    """Effective preference for one (category, subcategory) pair."""

    category: str
    subcategory: str
    in_app_enabled: bool
    email_enabled: bool
    email_frequency: str
    is_default: bool = False


class PreferenceListResponse(StrictModel):
    preferences: List[PreferenceResponse]


class UpdatePreferenceRequest(StrictRequestModel):
    """
    Upsert a single preference.

    Omitted email fields keep their stored value (or the default for a new row).
    """

    category: str = Field(..., min_length=1)
    subcategory: str = Field(..., min_length=1)
    in_app_enabled: bool
    email_enabled: Optional[bool] = None
    email_frequency: Optional[str] = None


class CategoryInterestRequest(StrictRequestModel):
    category_type: str = Field(..., min_length=1, max_length=50)
    category_value: str = Field(..., min_length=1, max_length=100)


class CategoryInterestResponse(StrictModel):
    id: str
    category_type: str
    category_value: str
    created_at: datetime


class CategoryInterestListResponse(StrictModel):
    interests: List[CategoryInterestResponse]


class RemoveInterestResponse(StrictModel):
    success: bool = True
    removed: int = Field(..., ge=0)
