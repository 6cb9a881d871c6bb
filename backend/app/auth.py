"""
Bearer token verification.

Tokens are issued by the identity service; this core only verifies them.
The ``sub`` claim carries the user id. ``create_access_token`` exists for
local development and tests.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

import jwt
from jwt import PyJWTError

from .core.config import settings
from .core.exceptions import InvalidCredentialException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifiedIdentity:
    user_id: str
    claims: Dict[str, Any]


def _secret_value(secret_obj: Any) -> str:
    getter = getattr(secret_obj, "get_secret_value", None)
    if callable(getter):
        return cast(str, getter())
    return cast(str, secret_obj)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a JWT access token (signature and expiry)."""
    payload_raw = jwt.decode(
        token,
        _secret_value(settings.secret_key),
        algorithms=[settings.algorithm],
        options={"verify_aud": False, "require": ["sub", "exp"]},
    )
    return cast(Dict[str, Any], payload_raw)


def verify_token(token: Optional[str]) -> VerifiedIdentity:
    """
    Verify a bearer credential.

    Raises:
        InvalidCredentialException: missing, malformed, expired, or badly signed
    """
    if not token:
        raise InvalidCredentialException("Token required")
    try:
        claims = decode_access_token(token)
    except PyJWTError as e:
        logger.info(f"Token verification failed: {e}")
        raise InvalidCredentialException() from e

    user_id = claims.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise InvalidCredentialException()
    return VerifiedIdentity(user_id=user_id, claims=claims)


def create_access_token(
    user_id: str,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: Stored in the ``sub`` claim
        expires_delta: Optional expiration time delta
        extra_claims: Additional claims to embed

    Returns:
        str: The encoded JWT token
    """
    to_encode: Dict[str, Any] = dict(extra_claims or {})
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"sub": user_id, "exp": expire})
    return cast(
        str,
        jwt.encode(to_encode, _secret_value(settings.secret_key), algorithm=settings.algorithm),
    )
