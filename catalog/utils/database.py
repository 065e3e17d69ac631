"""
Database Session and Transaction Utilities

This module provides the two infrastructure pieces every catalog write goes
through:

- ``ConnectionProvider``: wraps a SQLAlchemy engine and session factory. It is
  constructed explicitly (from the Flask-SQLAlchemy engine or a URL) and
  injected into services; there is no process-wide connection factory.
- ``TransactionManager``: a single unit of work. ``begin`` opens a session with
  an explicit transaction, ``commit`` finalizes it, ``rollback`` undoes it on a
  best-effort basis, and ``close`` releases the connection back to the pool.
  Used as a context manager it guarantees ``close`` on every exit path.

Sessions are created with ``autoflush=False`` and ``expire_on_commit=False``:
gateways flush explicitly when they need a generated key, and entities mapped
out of a session stay readable after it closes.
"""

from typing import Any, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .error_handling import TransactionError
from .logging import LogCategory, get_logger

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


class ConnectionProvider:
    """
    Hands out sessions bound to one engine.

    Args:
        engine: SQLAlchemy engine the sessions connect through
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(
            bind=engine,
            autoflush=False,
            expire_on_commit=False,
        )

        if engine.dialect.name == "sqlite":
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)

        logger.debug(
            "Connection provider initialized",
            category=LogCategory.INFRASTRUCTURE,
            dialect=engine.dialect.name,
        )

    @classmethod
    def from_url(cls, database_url: str, **engine_options: Any) -> "ConnectionProvider":
        """Create a provider with its own engine, outside any Flask application."""
        return cls(create_engine(database_url, **engine_options))

    def open_session(self) -> Session:
        return self._session_factory()

    def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(
                "Database health check failed",
                category=LogCategory.INFRASTRUCTURE,
                error=str(e),
            )
            return False

    def dispose(self) -> None:
        self.engine.dispose()


class TransactionManager:
    """
    One unit of work over a single session.

    Typical use::

        manager = TransactionManager(provider)
        with manager as session:
            gateway.insert(entity, session)
            ...
            manager.commit()

    Leaving the block without committing discards the writes;
    leaving it through an exception rolls back first. ``close`` runs on every
    exit path.
    """

    def __init__(self, provider: ConnectionProvider):
        self.provider = provider
        self._session: Optional[Session] = None

    @property
    def session(self) -> Session:
        """The active unit-of-work handle."""
        if self._session is None:
            raise TransactionError("No active transaction", code="invalid_state")
        return self._session

    @property
    def active(self) -> bool:
        return self._session is not None

    def begin(self) -> Session:
        """
        Open a session and start an explicit transaction.

        Nothing is committed implicitly; writes become durable only through
        ``commit``.

        Raises:
            TransactionError: if this manager already holds a transaction
        """
        if self._session is not None:
            raise TransactionError("Transaction already in progress", code="invalid_state")

        session = self.provider.open_session()
        try:
            session.begin()
        except Exception:
            session.close()
            raise

        self._session = session
        logger.debug("Transaction started", category=LogCategory.INFRASTRUCTURE)
        return session

    def commit(self) -> None:
        self.session.commit()
        logger.debug("Transaction committed", category=LogCategory.INFRASTRUCTURE)

    def rollback(self) -> None:
        """Undo uncommitted writes. Failures are logged, never raised."""
        if self._session is None:
            return
        try:
            self._session.rollback()
            logger.debug("Transaction rolled back", category=LogCategory.INFRASTRUCTURE)
        except Exception as e:
            logger.error(
                "Rollback failed",
                category=LogCategory.INFRASTRUCTURE,
                error=str(e),
            )

    def close(self) -> None:
        """
        End any open transaction and return the connection to the pool.

        The session reverts to its default state (no transaction in progress).
        Failures are logged, never raised.
        """
        if self._session is None:
            return
        try:
            self._session.close()
        except Exception as e:
            logger.critical(
                "Session close failed",
                category=LogCategory.INFRASTRUCTURE,
                error=str(e),
            )
        finally:
            self._session = None

    def __enter__(self) -> Session:
        return self.begin()

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        try:
            if exc_type is not None:
                self.rollback()
        finally:
            self.close()
        return False


__all__ = ["ConnectionProvider", "TransactionManager"]
