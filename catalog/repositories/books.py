"""SQLAlchemy persistence gateway for books."""

from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..models.entities import Book
from ..models.tables import BibliographicRecordModel, BookModel
from .base import StorageError
from .records import record_from_row


def book_from_row(row: BookModel) -> Book:
    return Book(
        id=row.id,
        deleted=row.deleted,
        title=row.title,
        author=row.author,
        publisher=row.publisher,
        publication_year=row.publication_year,
    )


class SqlBookGateway:
    """Reads and writes ``books`` rows through the caller's session."""

    def insert(self, book: Book, session: Session) -> int:
        row = BookModel(
            deleted=False,
            title=book.title,
            author=book.author,
            publisher=book.publisher,
            publication_year=book.publication_year,
        )
        session.add(row)
        # Flush so the database assigns the surrogate key
        session.flush()
        return row.id

    def find_by_id(self, book_id: int, session: Session,
                   include_deleted: bool = False) -> Optional[Book]:
        row = session.get(BookModel, book_id)
        if row is None or (row.deleted and not include_deleted):
            return None

        book = book_from_row(row)
        linked = session.scalars(
            select(BibliographicRecordModel).where(
                BibliographicRecordModel.book_id == book_id,
                BibliographicRecordModel.deleted.is_(False),
            )
        ).first()
        if linked is not None:
            book.record = record_from_row(linked)
        return book

    def list_all(self, session: Session) -> List[Book]:
        rows = session.scalars(
            select(BookModel).where(BookModel.deleted.is_(False)).order_by(BookModel.id)
        ).all()
        return [book_from_row(row) for row in rows]

    def update(self, book: Book, session: Session) -> None:
        result = session.execute(
            update(BookModel)
            .where(BookModel.id == book.id, BookModel.deleted.is_(False))
            .values(
                title=book.title,
                author=book.author,
                publisher=book.publisher,
                publication_year=book.publication_year,
            )
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            raise StorageError(f"No live book row with id {book.id}")

    def soft_delete(self, book_id: int, session: Session) -> None:
        result = session.execute(
            update(BookModel)
            .where(BookModel.id == book_id, BookModel.deleted.is_(False))
            .values(deleted=True)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            raise StorageError(f"No live book row with id {book_id}")
