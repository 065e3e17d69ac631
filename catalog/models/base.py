"""
Base declarations shared by all catalog ORM tables.

Provides the Flask-SQLAlchemy instance and the soft-delete column mixin used by
every table. Primary keys are surrogate keys assigned by the database; the
``deleted`` flag is the logical-deletion marker and only ever moves from
False to True.
"""

from sqlalchemy import BigInteger, Boolean, Integer, false
from sqlalchemy.orm import Mapped, mapped_column
from flask_sqlalchemy import SQLAlchemy


# Initialized against the Flask application in the application factory
db = SQLAlchemy()

# BIGINT keys on PostgreSQL/MySQL; SQLite only autoincrements INTEGER keys
SurrogateKey = BigInteger().with_variant(Integer(), "sqlite")


class SoftDeleteMixin:
    """
    Columns common to every catalog table.

    - ``id``: auto-incrementing surrogate primary key, never supplied by callers
    - ``deleted``: logical deletion flag, rows are never physically removed
    """

    id: Mapped[int] = mapped_column(
        SurrogateKey,
        primary_key=True,
        autoincrement=True,
        comment="Storage-assigned surrogate key",
    )

    deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        index=True,
        comment="Soft deletion flag; rows are never physically removed",
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id}, deleted={self.deleted})>"


__all__ = ["db", "SoftDeleteMixin", "SurrogateKey"]
