# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the SocietyHub messaging core.

Services raise these; the HTTP layer converts them with
``to_http_exception()`` and the socket handler turns them into in-band
error frames. Callers branch on the exception type, never on the message.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when input fails business validation (empty content, bad enum...)."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedException(DomainException):
    """Raised when the caller is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def to_http_exception(self) -> HTTPException:
        exc = super().to_http_exception()
        exc.headers = {"WWW-Authenticate": "Bearer"}
        return exc


class InvalidCredentialException(UnauthorizedException):
    """Raised when a bearer credential is missing, malformed, expired or forged."""

    def __init__(self, message: str = "Authentication failed", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class NotParticipantException(ForbiddenException):
    """Raised when a user acts on a conversation they are not part of."""

    def __init__(
        self,
        message: str = "Unauthorized: Not a participant of this conversation",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details,
            },
        )


class RepositoryException(Exception):
    """Raised when repository operations fail."""


class RepositoryConflictException(RepositoryException):
    """Raised when a write violates a uniqueness constraint."""
