"""Bearer token helpers for tests."""

from datetime import timedelta
from typing import Dict, Optional

from app.auth import create_access_token
from app.models.user import User


def token_for(user: User, expires_delta: Optional[timedelta] = None) -> str:
    return create_access_token(user.id, expires_delta=expires_delta)


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token_for(user)}"}
