"""
Catalog domain entities.

Plain dataclasses passed between callers, services and persistence gateways.
They carry no persistence behaviour: gateways map them to and from the ORM
tables in ``catalog.models.tables`` inside an explicit unit of work, so a
caller's instance is never bound to a database session.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(kw_only=True)
class Entity:
    """Surrogate key and soft-delete marker shared by every catalog entity."""

    id: Optional[int] = None
    deleted: bool = False


@dataclass(kw_only=True)
class BibliographicRecord(Entity):
    """
    Cataloguing data attached to at most one book.

    ``book_id`` is the one-to-one foreign reference. Once set it only changes
    through the record move workflow; ordinary updates must carry the stored
    value unchanged.
    """

    isbn: Optional[str] = None
    dewey_class: Optional[str] = None
    shelf_location: Optional[str] = None
    language: Optional[str] = None
    book_id: Optional[int] = None


@dataclass(kw_only=True)
class Book(Entity):
    """
    A catalogued book.

    ``record`` is a read-only view of the live bibliographic record linked to
    this book. Gateways populate it on lookup and ignore it on writes.
    """

    title: Optional[str]
    author: Optional[str]
    publisher: Optional[str] = None
    publication_year: Optional[int] = None
    record: Optional[BibliographicRecord] = field(default=None, compare=False, repr=False)


__all__ = ["Entity", "Book", "BibliographicRecord"]
