"""
Book Service Implementation

Single-entity service for books. Validates input, checks existence and
soft-delete state, and forwards to the book gateway inside its own unit of
work.

Soft-deleting a book through this service affects the book only: a linked
bibliographic record stays linked to the deleted book. Callers that want the
record retired too use ``LibraryTransactionService.delete_book_and_record``.
"""

from typing import List, Optional

from injector import inject, singleton

from ..models.entities import Book
from ..repositories.base import BookGateway
from ..utils.database import ConnectionProvider
from .base import BaseService, ServiceError
from .validation import validate_book


@singleton
class BookService(BaseService):
    """Create, update, soft-delete and look up books."""

    @inject
    def __init__(self, provider: ConnectionProvider, books: BookGateway):
        super().__init__(provider)
        self.books = books

    def create(self, book: Book) -> Book:
        """
        Persist a new book and populate its storage-assigned id.

        Raises:
            ValidationError: invalid field values
            ServiceError: the book already carries an id, or storage failed
        """
        validate_book(book)
        if book.id is not None:
            raise ServiceError("New books cannot have a predefined ID.", code="invalid_id")

        book.deleted = False
        with self.unit_of_work("create book") as session:
            new_id = self.books.insert(book, session)

        book.id = new_id
        self.log_service_operation("Book created", {"book_id": new_id})
        return book

    def update(self, book: Book) -> Book:
        validate_book(book)
        book_id = self.require_id(book.id, "Book")

        with self.unit_of_work("update book") as session:
            existing = self.books.find_by_id(book_id, session, include_deleted=True)
            if existing is None:
                raise ServiceError(
                    f"Cannot update: Book with ID {book_id} does not exist.", code="not_found"
                )
            if existing.deleted:
                raise ServiceError(
                    f"Cannot update: Book with ID {book_id} is deleted.", code="already_deleted"
                )
            self.books.update(book, session)

        book.deleted = False
        self.log_service_operation("Book updated", {"book_id": book_id})
        return book

    def soft_delete(self, book_id: Optional[int]) -> None:
        """
        Logically delete a book. Deleting an already deleted book is an error,
        not a no-op.
        """
        book_id = self.require_id(book_id, "Book")

        with self.unit_of_work("delete book") as session:
            existing = self.books.find_by_id(book_id, session, include_deleted=True)
            if existing is None:
                raise ServiceError(
                    f"Cannot delete: Book with ID {book_id} does not exist.", code="not_found"
                )
            if existing.deleted:
                raise ServiceError(
                    f"Cannot delete: Book with ID {book_id} is already deleted.",
                    code="already_deleted",
                )
            self.books.soft_delete(book_id, session)

        self.log_service_operation("Book deleted", {"book_id": book_id})

    def find_by_id(self, book_id: Optional[int]) -> Optional[Book]:
        """Return the live book with this id, or None."""
        book_id = self.require_id(book_id, "Book")
        with self.unit_of_work("retrieve book") as session:
            return self.books.find_by_id(book_id, session)

    def list_all(self) -> List[Book]:
        with self.unit_of_work("list books") as session:
            return self.books.list_all(session)
