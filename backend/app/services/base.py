# backend/app/services/base.py
"""
Base Service Pattern for SocietyHub

Provides common functionality for all service classes:
- Transaction management
- Logging
- Performance monitoring (Prometheus)
"""

import asyncio
from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Generator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


class BaseService:
    """
    Base class for all service layer components.

    Holds the request/task scoped session and a class-named logger.
    """

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """
        Context manager for database transactions.

        Usage:
            with self.transaction():
                self.db.add(entity)
                # commit is handled automatically
        """
        try:
            yield self.db
            self.db.commit()
            self.logger.debug("Transaction committed successfully")
        except SQLAlchemyError as e:
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {str(e)}")
        except Exception as e:
            self.logger.error(f"Unexpected error in transaction: {str(e)}")
            self.db.rollback()
            raise

    def _finish_measurement(
        self, operation_name: str, started: float, error_type: Optional[str]
    ) -> None:
        elapsed = time.time() - started
        if elapsed > SLOW_OPERATION_SECONDS:
            self.logger.warning(
                f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
            )
        try:
            prometheus_metrics.record_service_operation(
                service=self.__class__.__name__,
                operation=operation_name,
                duration=elapsed,
                status="error" if error_type else "success",
                error_type=error_type,
            )
        except Exception:
            # Metrics must never break the operation
            logger.debug("Failed to record service metric", exc_info=True)

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator to measure operation performance.

        Usage:
            @BaseService.measure_operation("send_message")
            def send_message(self, ...):
                ...

        Works for both plain and ``async def`` methods.
        """

        def decorator(func: F) -> F:
            if asyncio.iscoroutinefunction(func):

                @wraps(func)
                async def async_wrapper(self: "BaseService", *args: Any, **kwargs: Any) -> Any:
                    started = time.time()
                    error_type: Optional[str] = None
                    try:
                        return await func(self, *args, **kwargs)
                    except Exception as e:
                        error_type = type(e).__name__
                        raise
                    finally:
                        self._finish_measurement(operation_name, started, error_type)

                return cast(F, async_wrapper)

            @wraps(func)
            def wrapper(self: "BaseService", *args: Any, **kwargs: Any) -> Any:
                started = time.time()
                error_type: Optional[str] = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    self._finish_measurement(operation_name, started, error_type)

            return cast(F, wrapper)

        return decorator
