"""
Base Service Layer Implementation

Foundation for all catalog services. Provides:

- the error taxonomy (re-exported from ``catalog.utils.error_handling``)
- scoped units of work: ``unit_of_work`` for single-entity operations and
  ``transaction_boundary`` for multi-step workflows. Both begin a transaction,
  commit on success, roll back on any failure and always release the session.
- shared precondition helpers and operation logging

Failure translation inside a unit of work:

- ``ServiceError`` (including validation and business-rule failures raised by
  the service itself) is re-raised unchanged after rollback
- a database constraint violation (``IntegrityError``) is wrapped with code
  ``conflict``: the data clashes with a stored row, not a server fault
- anything else (SQLAlchemy errors, gateway ``StorageError``) is wrapped:
  ``ServiceError`` with code ``storage_error`` for single-entity operations,
  ``TransactionError`` for workflows, with the cause attached

Wrapped messages never repeat the driver error, which carries the SQL
statement and its parameters; the cause stays on ``original_error``.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Type

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from ..utils.database import ConnectionProvider, TransactionManager
from ..utils.error_handling import ErrorKind, ServiceError, TransactionError, ValidationError
from ..utils.logging import LogCategory, get_logger

# Largest surrogate key a BIGINT column can hold
MAX_ID = 2 ** 63 - 1


def _driver_message(error: Exception) -> str:
    """Driver error text without the SQL statement and bound parameters."""
    if isinstance(error, DBAPIError) and error.orig is not None:
        return str(error.orig)
    return str(error)


class BaseService:
    """
    Base class for catalog services.

    Services are stateless apart from their injected collaborators, so one
    instance can serve every caller; each operation acquires its own unit of
    work and never shares it.

    Args:
        provider: Connection provider sessions are opened from
    """

    def __init__(self, provider: ConnectionProvider):
        self.provider = provider
        self.logger = get_logger(self.__class__.__module__, service=self.__class__.__name__)

    @contextmanager
    def unit_of_work(self, operation: str) -> Iterator[Session]:
        """Scoped session for a single-entity operation."""
        with self._scoped(operation, ServiceError, "storage_error") as session:
            yield session

    @contextmanager
    def transaction_boundary(self, operation: str) -> Iterator[Session]:
        """Scoped session for a multi-step workflow; storage failures become TransactionError."""
        with self._scoped(operation, TransactionError, "transaction_error") as session:
            yield session

    @contextmanager
    def _scoped(self, operation: str, failure: Type[ServiceError], code: str) -> Iterator[Session]:
        manager = TransactionManager(self.provider)
        try:
            session = manager.begin()
            yield session
            manager.commit()
        except ServiceError as e:
            manager.rollback()
            self.logger.info(
                "Operation rejected",
                category=LogCategory.BUSINESS,
                operation=operation,
                kind=e.kind.value,
                code=e.code,
                reason=e.message,
            )
            raise
        except IntegrityError as e:
            manager.rollback()
            self.logger.warning(
                "Operation violated a storage constraint, unit of work rolled back",
                category=LogCategory.BUSINESS,
                operation=operation,
                error=_driver_message(e),
                error_type=type(e).__name__,
            )
            raise failure(
                f"Failed to {operation}: the data conflicts with an existing entry.",
                original_error=e,
                code="conflict",
            ) from e
        except Exception as e:
            manager.rollback()
            self.logger.error(
                "Operation failed, unit of work rolled back",
                category=LogCategory.APPLICATION,
                operation=operation,
                error=_driver_message(e),
                error_type=type(e).__name__,
            )
            raise failure(f"Failed to {operation}.", original_error=e, code=code) from e
        finally:
            manager.close()

    @staticmethod
    def require_id(value: Optional[int], label: str) -> int:
        """Reject a null, non-positive or out-of-range surrogate key."""
        if value is None:
            raise ServiceError(f"{label} ID cannot be null.", code="invalid_id")
        if value <= 0:
            raise ServiceError(f"{label} ID must be a positive value.", code="invalid_id")
        if value > MAX_ID:
            raise ServiceError(f"{label} ID is out of range.", code="invalid_id")
        return value

    def log_service_operation(self, operation: str, data: Optional[Dict[str, Any]] = None,
                              level: str = "info") -> None:
        log_method = getattr(self.logger, level, self.logger.info)
        log_method(operation, category=LogCategory.AUDIT, **(data or {}))


__all__ = [
    "BaseService",
    "ErrorKind",
    "ServiceError",
    "ValidationError",
    "TransactionError",
]
