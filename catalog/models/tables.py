"""
Flask-SQLAlchemy tables for the library catalog.

Two tables mirror the catalog schema:

- ``books``: the primary catalogued item
- ``bibliographic_records``: optional cataloguing data, linked one-to-one to a
  book through ``book_id``

Uniqueness of ``book_id`` and ``isbn`` is enforced only among live rows
(``deleted = false``) through partial unique indexes. A soft-deleted record
keeps its ``book_id`` for history without blocking a new live link.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import SoftDeleteMixin, SurrogateKey, db


class BookModel(SoftDeleteMixin, db.Model):
    """Row representation of a catalogued book."""

    __tablename__ = "books"

    title: Mapped[str] = mapped_column(String(150), nullable=False)
    author: Mapped[str] = mapped_column(String(120), nullable=False)
    publisher: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    publication_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class BibliographicRecordModel(SoftDeleteMixin, db.Model):
    """Row representation of a bibliographic record."""

    __tablename__ = "bibliographic_records"

    isbn: Mapped[Optional[str]] = mapped_column(String(17), nullable=True)
    dewey_class: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    shelf_location: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    language: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    book_id: Mapped[Optional[int]] = mapped_column(
        SurrogateKey,
        ForeignKey("books.id", name="fk_record_book", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=True,
        comment="One-to-one reference to the owning book",
    )

    __table_args__ = (
        # At most one live record per book
        Index(
            "uq_bibliographic_records_live_book",
            "book_id",
            unique=True,
            sqlite_where=text("deleted = 0"),
            postgresql_where=text("NOT deleted"),
        ),
        Index(
            "uq_bibliographic_records_live_isbn",
            "isbn",
            unique=True,
            sqlite_where=text("deleted = 0"),
            postgresql_where=text("NOT deleted"),
        ),
    )


__all__ = ["BookModel", "BibliographicRecordModel"]
