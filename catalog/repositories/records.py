"""SQLAlchemy persistence gateway for bibliographic records."""

from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..models.entities import BibliographicRecord
from ..models.tables import BibliographicRecordModel
from .base import StorageError


def record_from_row(row: BibliographicRecordModel) -> BibliographicRecord:
    return BibliographicRecord(
        id=row.id,
        deleted=row.deleted,
        isbn=row.isbn,
        dewey_class=row.dewey_class,
        shelf_location=row.shelf_location,
        language=row.language,
        book_id=row.book_id,
    )


class SqlBibliographicRecordGateway:
    """
    Reads and writes ``bibliographic_records`` rows through the caller's session.

    ``update`` never touches ``book_id``; the link only changes through
    ``update_linked_book``.
    """

    def insert(self, record: BibliographicRecord, session: Session) -> int:
        row = BibliographicRecordModel(
            deleted=False,
            isbn=record.isbn,
            dewey_class=record.dewey_class,
            shelf_location=record.shelf_location,
            language=record.language,
            book_id=record.book_id,
        )
        session.add(row)
        session.flush()
        return row.id

    def find_by_id(self, record_id: int, session: Session,
                   include_deleted: bool = False) -> Optional[BibliographicRecord]:
        row = session.get(BibliographicRecordModel, record_id)
        if row is None or (row.deleted and not include_deleted):
            return None
        return record_from_row(row)

    def find_by_book_id(self, book_id: int, session: Session) -> Optional[BibliographicRecord]:
        row = session.scalars(
            select(BibliographicRecordModel).where(
                BibliographicRecordModel.book_id == book_id,
                BibliographicRecordModel.deleted.is_(False),
            )
        ).first()
        return record_from_row(row) if row is not None else None

    def find_by_isbn(self, isbn: str, session: Session) -> Optional[BibliographicRecord]:
        row = session.scalars(
            select(BibliographicRecordModel).where(
                BibliographicRecordModel.isbn == isbn,
                BibliographicRecordModel.deleted.is_(False),
            )
        ).first()
        return record_from_row(row) if row is not None else None

    def list_all(self, session: Session) -> List[BibliographicRecord]:
        rows = session.scalars(
            select(BibliographicRecordModel)
            .where(BibliographicRecordModel.deleted.is_(False))
            .order_by(BibliographicRecordModel.id)
        ).all()
        return [record_from_row(row) for row in rows]

    def update(self, record: BibliographicRecord, session: Session) -> None:
        self._write(
            record.id,
            session,
            isbn=record.isbn,
            dewey_class=record.dewey_class,
            shelf_location=record.shelf_location,
            language=record.language,
        )

    def update_linked_book(self, record_id: int, book_id: int, session: Session) -> None:
        self._write(record_id, session, book_id=book_id)

    def soft_delete(self, record_id: int, session: Session) -> None:
        self._write(record_id, session, deleted=True)

    def _write(self, record_id: int, session: Session, **values) -> None:
        result = session.execute(
            update(BibliographicRecordModel)
            .where(
                BibliographicRecordModel.id == record_id,
                BibliographicRecordModel.deleted.is_(False),
            )
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            raise StorageError(f"No live bibliographic record row with id {record_id}")
