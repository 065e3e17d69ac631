"""
Bibliographic Record Service Implementation

Single-entity service for bibliographic records. Besides the usual create,
update, soft-delete and lookups it guards the one-to-one link to a book:

- a record is always created unlinked (``book_id`` must be None)
- an ordinary update may not change ``book_id``; moving a linked record is
  the job of ``LibraryTransactionService.move_record_to_book``
- ``assign_to_book`` performs the first-time link of an unlinked record to a
  book that does not already own a live record
- an ISBN belongs to at most one live record; a clash is a ``conflict``
"""

from typing import List, Optional

from injector import inject, singleton
from sqlalchemy.orm import Session

from ..models.entities import BibliographicRecord
from ..repositories.base import BibliographicRecordGateway, BookGateway
from ..utils.database import ConnectionProvider
from .base import BaseService, ServiceError
from .validation import validate_record


@singleton
class BibliographicRecordService(BaseService):
    """Create, update, soft-delete, look up and first-time link bibliographic records."""

    @inject
    def __init__(self, provider: ConnectionProvider, records: BibliographicRecordGateway,
                 books: BookGateway):
        super().__init__(provider)
        self.records = records
        self.books = books

    def create(self, record: BibliographicRecord) -> BibliographicRecord:
        validate_record(record)
        if record.id is not None:
            raise ServiceError(
                "New bibliographic records cannot have a predefined ID.", code="invalid_id"
            )
        if record.book_id is not None:
            raise ServiceError(
                "bookId must not be manually assigned when creating a bibliographic record.",
                code="invalid_state",
            )

        record.deleted = False
        with self.unit_of_work("create bibliographic record") as session:
            self._require_unique_isbn(record.isbn, None, session)
            new_id = self.records.insert(record, session)

        record.id = new_id
        self.log_service_operation("Bibliographic record created", {"record_id": new_id})
        return record

    def update(self, record: BibliographicRecord) -> BibliographicRecord:
        """
        Update a record's cataloguing fields.

        Raises:
            ServiceError: unknown or deleted record, ``book_id`` differs
                from the stored link, or the ISBN belongs to another live record
        """
        validate_record(record)
        record_id = self.require_id(record.id, "BibliographicRecord")

        with self.unit_of_work("update bibliographic record") as session:
            existing = self.records.find_by_id(record_id, session, include_deleted=True)
            if existing is None:
                raise ServiceError(
                    f"Cannot update: BibliographicRecord with ID {record_id} does not exist.",
                    code="not_found",
                )
            if existing.deleted:
                raise ServiceError(
                    f"Cannot update: BibliographicRecord with ID {record_id} is deleted.",
                    code="already_deleted",
                )
            if record.book_id != existing.book_id:
                raise ServiceError(
                    "Reassigning this bibliographic record to a different book is not permitted.",
                    code="invalid_state",
                )
            self._require_unique_isbn(record.isbn, record_id, session)
            self.records.update(record, session)

        record.deleted = False
        self.log_service_operation("Bibliographic record updated", {"record_id": record_id})
        return record

    def soft_delete(self, record_id: Optional[int]) -> None:
        record_id = self.require_id(record_id, "BibliographicRecord")

        with self.unit_of_work("delete bibliographic record") as session:
            existing = self.records.find_by_id(record_id, session, include_deleted=True)
            if existing is None:
                raise ServiceError(
                    f"Cannot delete: BibliographicRecord with ID {record_id} does not exist.",
                    code="not_found",
                )
            if existing.deleted:
                raise ServiceError(
                    f"Cannot delete: BibliographicRecord with ID {record_id} is already deleted.",
                    code="already_deleted",
                )
            self.records.soft_delete(record_id, session)

        self.log_service_operation("Bibliographic record deleted", {"record_id": record_id})

    def find_by_id(self, record_id: Optional[int]) -> Optional[BibliographicRecord]:
        record_id = self.require_id(record_id, "BibliographicRecord")
        with self.unit_of_work("retrieve bibliographic record") as session:
            return self.records.find_by_id(record_id, session)

    def list_all(self) -> List[BibliographicRecord]:
        with self.unit_of_work("list bibliographic records") as session:
            return self.records.list_all(session)

    def assign_to_book(self, record_id: Optional[int], book_id: Optional[int]) -> BibliographicRecord:
        """
        Link an unlinked record to a book for the first time.

        Raises:
            ServiceError: unknown record or book, record already linked, or
                the book already owns a live record
        """
        record_id = self.require_id(record_id, "BibliographicRecord")
        book_id = self.require_id(book_id, "Book")

        with self.unit_of_work("assign bibliographic record to book") as session:
            record = self.records.find_by_id(record_id, session)
            if record is None:
                raise ServiceError(
                    f"BibliographicRecord with ID {record_id} does not exist.", code="not_found"
                )
            if self.books.find_by_id(book_id, session) is None:
                raise ServiceError(f"Book with ID {book_id} does not exist.", code="not_found")
            if record.book_id is not None:
                raise ServiceError(
                    f"Record is already assigned to Book ID {record.book_id}; "
                    "use the move workflow to relink it.",
                    code="conflict",
                )
            if self.records.find_by_book_id(book_id, session) is not None:
                raise ServiceError(
                    f"Book with ID {book_id} already has a bibliographic record.",
                    code="conflict",
                )
            self.records.update_linked_book(record_id, book_id, session)

        record.book_id = book_id
        self.log_service_operation(
            "Bibliographic record assigned", {"record_id": record_id, "book_id": book_id}
        )
        return record

    def _require_unique_isbn(self, isbn: Optional[str], record_id: Optional[int],
                             session: Session) -> None:
        """Refuse an ISBN already held by another live record."""
        if isbn is None:
            return
        holder = self.records.find_by_isbn(isbn, session)
        if holder is not None and holder.id != record_id:
            raise ServiceError(
                f"ISBN {isbn} is already catalogued by BibliographicRecord ID {holder.id}.",
                code="conflict",
            )
