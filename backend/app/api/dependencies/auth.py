# backend/app/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

HTTP callers present ``Authorization: Bearer <jwt>``. The socket path reads
the same token from the ``token`` query parameter instead (see
``app.routes.realtime``), since browsers cannot set headers on a WebSocket
handshake.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ...auth import verify_token
from ...core.exceptions import ForbiddenException, NotFoundException
from ...models.user import User
from ...repositories.factory import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Verify the bearer token and return the caller's user id (401 otherwise)."""
    token = credentials.credentials if credentials else None
    return verify_token(token).user_id


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    user = RepositoryFactory.create_user_repository(db).get_by_id(user_id)
    if user is None:
        raise NotFoundException("User not found", code="user_not_found")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Allow only administrators through."""
    if not user.is_admin:
        logger.warning("Non-admin attempted admin action", extra={"user_id": user.id})
        raise ForbiddenException("Admin access required", code="admin_required")
    return user
