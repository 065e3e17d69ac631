"""
Library Transaction Service

Multi-step workflows spanning a book and its bibliographic record. Each
workflow runs inside one ``transaction_boundary``: every step shares the same
session, the transaction commits only when all steps succeed, and any failure
rolls back everything written so far.

Workflows:

- ``create_book_with_record``: insert a book and its record, linked, or neither
- ``delete_book_and_record``: cascade soft delete of a book and its live record
- ``move_record_to_book``: first-time assignment or relinking of a record
"""

from typing import Optional, Tuple

from injector import inject, singleton

from ..models.entities import BibliographicRecord, Book
from ..repositories.base import BibliographicRecordGateway, BookGateway
from ..utils.database import ConnectionProvider
from .base import BaseService, ServiceError, TransactionError
from .validation import validate_book, validate_record


@singleton
class LibraryTransactionService(BaseService):
    """
    Orchestrates book/record workflows atomically.

    Preconditions and field validation are checked before the transaction
    starts; business failures detected inside the transaction surface as
    ``ServiceError``, storage failures as ``TransactionError``.
    """

    @inject
    def __init__(self, provider: ConnectionProvider, books: BookGateway,
                 records: BibliographicRecordGateway):
        super().__init__(provider)
        self.books = books
        self.records = records

    def create_book_with_record(self, book: Book,
                                record: BibliographicRecord) -> Tuple[Book, BibliographicRecord]:
        """
        Insert a new book and a new record linked to it in one transaction.

        On success both entities carry their new ids and ``record.book_id`` is
        the book's id. On failure nothing is stored and both entities are
        returned to their unsaved state.

        Raises:
            ValidationError: invalid field values on either entity
            ServiceError: missing entity, preset id or preset link
            TransactionError: a storage step failed and the transaction was rolled back;
                code ``conflict`` when a stored row already holds the ISBN
        """
        if book is None or record is None:
            raise ServiceError("Book and BibliographicRecord must not be null.", code="invalid_state")
        if book.id is not None or record.id is not None:
            raise ServiceError(
                "New Book and BibliographicRecord must not have IDs set.", code="invalid_id"
            )
        if record.book_id is not None:
            raise ServiceError(
                "BibliographicRecord must not be linked before the Book is created.",
                code="invalid_state",
            )
        validate_book(book)
        validate_record(record)

        try:
            with self.transaction_boundary("create book with bibliographic record") as session:
                book_id = self.books.insert(book, session)
                if book_id is None:
                    raise TransactionError("Creating Book failed, no ID obtained.")
                book.id = book_id
                book.deleted = False

                record.book_id = book_id
                record_id = self.records.insert(record, session)
                if record_id is None:
                    raise TransactionError("Creating BibliographicRecord failed, no ID obtained.")
                record.id = record_id
                record.deleted = False
        except ServiceError:
            book.id = None
            record.id = None
            record.book_id = None
            book.record = None
            raise

        book.record = record
        self.log_service_operation(
            "Book and bibliographic record created", {"book_id": book.id, "record_id": record.id}
        )
        return book, record

    def delete_book_and_record(self, book_id: Optional[int]) -> None:
        """
        Soft-delete a book and, when present, its live bibliographic record.

        The record keeps its ``book_id`` so the link stays visible in history.

        Raises:
            ServiceError: invalid id, or no live book with this id
            TransactionError: a storage step failed and the transaction was rolled back
        """
        book_id = self.require_id(book_id, "Book")

        with self.transaction_boundary("delete book and bibliographic record") as session:
            book = self.books.find_by_id(book_id, session)
            if book is None:
                raise ServiceError(f"Book with ID {book_id} does not exist.", code="not_found")

            record = self.records.find_by_book_id(book_id, session)
            self.books.soft_delete(book_id, session)
            if record is not None:
                self.records.soft_delete(record.id, session)

        self.log_service_operation(
            "Book and bibliographic record deleted",
            {"book_id": book_id, "record_id": record.id if record is not None else None},
        )

    def move_record_to_book(self, record_id: Optional[int],
                            book_id: Optional[int]) -> BibliographicRecord:
        """
        Link a record to a book, either for the first time or by moving it
        away from its current book.

        Raises:
            ServiceError: invalid ids, unknown record or book, the record is
                already linked to this book, or the book already owns another
                live record
            TransactionError: a storage step failed and the transaction was rolled back
        """
        record_id = self.require_id(record_id, "BibliographicRecord")
        book_id = self.require_id(book_id, "Book")

        with self.transaction_boundary("move bibliographic record") as session:
            record = self.records.find_by_id(record_id, session)
            if record is None:
                raise ServiceError(
                    f"BibliographicRecord with ID {record_id} does not exist.", code="not_found"
                )
            if self.books.find_by_id(book_id, session) is None:
                raise ServiceError(f"Book with ID {book_id} does not exist.", code="not_found")

            previous_book_id = record.book_id
            if previous_book_id == book_id:
                raise ServiceError(
                    f"Record is already assigned to Book ID {book_id}.", code="conflict"
                )

            occupant = self.records.find_by_book_id(book_id, session)
            if occupant is not None and occupant.id != record_id:
                raise ServiceError(
                    f"Book with ID {book_id} already has bibliographic record {occupant.id}.",
                    code="conflict",
                )

            self.records.update_linked_book(record_id, book_id, session)

        record.book_id = book_id
        if previous_book_id is None:
            self.log_service_operation(
                "Bibliographic record assigned", {"record_id": record_id, "book_id": book_id}
            )
        else:
            self.log_service_operation(
                "Bibliographic record moved",
                {"record_id": record_id, "from_book_id": previous_book_id, "book_id": book_id},
            )
        return record
