"""
Persistence gateway contracts.

Every gateway method takes the unit-of-work session explicitly; gateways never
open, commit or close sessions themselves. Transaction boundaries belong to the
service layer.

Find and list operations hide soft-deleted rows unless ``include_deleted`` is
requested. Writes that match no live row raise ``StorageError``.
"""

from typing import List, Optional, Protocol

from sqlalchemy.orm import Session

from ..models.entities import BibliographicRecord, Book


class StorageError(Exception):
    """A gateway write could not be applied to the backing store."""


class BookGateway(Protocol):
    """Contract for book persistence."""

    def insert(self, book: Book, session: Session) -> int: ...

    def find_by_id(self, book_id: int, session: Session,
                   include_deleted: bool = False) -> Optional[Book]: ...

    def list_all(self, session: Session) -> List[Book]: ...

    def update(self, book: Book, session: Session) -> None: ...

    def soft_delete(self, book_id: int, session: Session) -> None: ...


class BibliographicRecordGateway(Protocol):
    """Contract for bibliographic record persistence."""

    def insert(self, record: BibliographicRecord, session: Session) -> int: ...

    def find_by_id(self, record_id: int, session: Session,
                   include_deleted: bool = False) -> Optional[BibliographicRecord]: ...

    def find_by_book_id(self, book_id: int, session: Session) -> Optional[BibliographicRecord]: ...

    def find_by_isbn(self, isbn: str, session: Session) -> Optional[BibliographicRecord]: ...

    def list_all(self, session: Session) -> List[BibliographicRecord]: ...

    def update(self, record: BibliographicRecord, session: Session) -> None: ...

    def update_linked_book(self, record_id: int, book_id: int, session: Session) -> None: ...

    def soft_delete(self, record_id: int, session: Session) -> None: ...


__all__ = ["StorageError", "BookGateway", "BibliographicRecordGateway"]
