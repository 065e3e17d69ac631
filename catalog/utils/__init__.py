"""
Cross-cutting utilities: structured logging, error taxonomy and database
session/transaction management.
"""

from .database import ConnectionProvider, TransactionManager
from .error_handling import ErrorKind, ServiceError, TransactionError, ValidationError
from .logging import LogCategory, configure_logging, get_logger

__all__ = [
    "ConnectionProvider",
    "TransactionManager",
    "ErrorKind",
    "ServiceError",
    "TransactionError",
    "ValidationError",
    "LogCategory",
    "configure_logging",
    "get_logger",
]
