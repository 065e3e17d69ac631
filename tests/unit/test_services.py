"""
Unit tests for the service layer with mocked gateways and sessions.

No database is involved: the connection provider hands out a MagicMock
session, so commit/rollback/close behaviour of each unit of work can be
asserted directly.
"""

from unittest.mock import MagicMock

import pytest
from flask import Flask
from sqlalchemy.exc import IntegrityError, OperationalError

from catalog.models.entities import BibliographicRecord, Book
from catalog.repositories import (
    BibliographicRecordGateway,
    BookGateway,
    SqlBibliographicRecordGateway,
    SqlBookGateway,
    StorageError,
)
from catalog.services import (
    BibliographicRecordService,
    BookService,
    LibraryTransactionService,
    configure_services,
    create_injector,
    get_service,
)
from catalog.utils.database import ConnectionProvider
from catalog.utils.error_handling import ErrorKind, ServiceError, TransactionError, ValidationError


@pytest.fixture
def session():
    return MagicMock(name="session")


@pytest.fixture
def provider(session):
    provider = MagicMock(spec=ConnectionProvider)
    provider.open_session.return_value = session
    return provider


@pytest.fixture
def books():
    return MagicMock(spec=SqlBookGateway)


@pytest.fixture
def records():
    records = MagicMock(spec=SqlBibliographicRecordGateway)
    records.find_by_isbn.return_value = None
    return records


@pytest.fixture
def book_service(provider, books):
    return BookService(provider, books)


@pytest.fixture
def record_service(provider, records, books):
    return BibliographicRecordService(provider, records, books)


@pytest.fixture
def library_service(provider, books, records):
    return LibraryTransactionService(provider, books, records)


def dune():
    return Book(title="Dune", author="Herbert", publication_year=1965)


class TestBookService:

    def test_create_assigns_id_and_commits(self, book_service, books, session):
        books.insert.return_value = 1
        book = book_service.create(Book(title="Moby Dick", author="Melville", publication_year=1851))

        assert book.id == 1
        assert book.deleted is False
        session.commit.assert_called_once_with()
        session.close.assert_called_once_with()

    def test_create_with_preset_id_rejected_before_storage(self, book_service, books, provider):
        book = dune()
        book.id = 7
        with pytest.raises(ServiceError) as exc_info:
            book_service.create(book)
        assert exc_info.value.code == "invalid_id"
        books.insert.assert_not_called()
        provider.open_session.assert_not_called()

    def test_create_invalid_book_never_reaches_storage(self, book_service, books):
        with pytest.raises(ValidationError):
            book_service.create(Book(title="", author="Nobody"))
        books.insert.assert_not_called()

    def test_storage_failure_wrapped_with_cause(self, book_service, books, session):
        cause = OperationalError("INSERT", {}, Exception("disk I/O error"))
        books.insert.side_effect = cause

        book = dune()
        with pytest.raises(ServiceError) as exc_info:
            book_service.create(book)

        assert exc_info.value.code == "storage_error"
        assert exc_info.value.kind is ErrorKind.SERVICE
        assert exc_info.value.original_error is cause
        assert book.id is None
        session.rollback.assert_called_once_with()
        session.commit.assert_not_called()
        session.close.assert_called_once_with()

    def test_constraint_violation_reported_as_conflict(self, book_service, books, session):
        cause = IntegrityError(
            "INSERT INTO books (title) VALUES (?)", ("Dune",), Exception("UNIQUE constraint failed")
        )
        books.insert.side_effect = cause

        with pytest.raises(ServiceError) as exc_info:
            book_service.create(dune())

        assert exc_info.value.code == "conflict"
        assert exc_info.value.original_error is cause
        assert "INSERT" not in exc_info.value.message
        assert "Dune" not in exc_info.value.message
        session.rollback.assert_called_once_with()

    def test_update_unknown_book(self, book_service, books, session):
        books.find_by_id.return_value = None
        book = dune()
        book.id = 4
        with pytest.raises(ServiceError) as exc_info:
            book_service.update(book)
        assert exc_info.value.code == "not_found"
        books.update.assert_not_called()
        session.rollback.assert_called_once_with()

    def test_update_deleted_book(self, book_service, books):
        stored = dune()
        stored.id, stored.deleted = 4, True
        books.find_by_id.return_value = stored
        book = dune()
        book.id = 4
        with pytest.raises(ServiceError) as exc_info:
            book_service.update(book)
        assert exc_info.value.code == "already_deleted"

    def test_update_without_id(self, book_service):
        with pytest.raises(ServiceError, match="Book ID cannot be null"):
            book_service.update(dune())

    def test_soft_delete_twice_rejected(self, book_service, books):
        stored = dune()
        stored.id, stored.deleted = 3, True
        books.find_by_id.return_value = stored
        with pytest.raises(ServiceError, match="already deleted"):
            book_service.soft_delete(3)
        books.soft_delete.assert_not_called()

    @pytest.mark.parametrize("book_id", [None, 0, -5, 2 ** 63])
    def test_find_by_id_rejects_invalid_ids(self, book_service, book_id):
        with pytest.raises(ServiceError) as exc_info:
            book_service.find_by_id(book_id)
        assert exc_info.value.code == "invalid_id"

    def test_find_by_id_returns_none_for_unknown(self, book_service, books):
        books.find_by_id.return_value = None
        assert book_service.find_by_id(99) is None


class TestBibliographicRecordService:

    def test_create_rejects_preset_book_id(self, record_service, records):
        with pytest.raises(ServiceError) as exc_info:
            record_service.create(BibliographicRecord(isbn="9780441013593", book_id=2))
        assert exc_info.value.code == "invalid_state"
        records.insert.assert_not_called()

    def test_create_refuses_isbn_of_live_record(self, record_service, records, session):
        records.find_by_isbn.return_value = BibliographicRecord(id=4, isbn="9780441013593")

        with pytest.raises(ServiceError) as exc_info:
            record_service.create(BibliographicRecord(isbn="9780441013593"))

        assert exc_info.value.code == "conflict"
        assert "ID 4" in exc_info.value.message
        records.insert.assert_not_called()
        session.rollback.assert_called_once_with()

    def test_update_refuses_isbn_of_other_record(self, record_service, records):
        records.find_by_id.return_value = BibliographicRecord(id=5, isbn="111")
        records.find_by_isbn.return_value = BibliographicRecord(id=6, isbn="222")

        with pytest.raises(ServiceError) as exc_info:
            record_service.update(BibliographicRecord(id=5, isbn="222"))

        assert exc_info.value.code == "conflict"
        records.update.assert_not_called()

    def test_update_may_keep_own_isbn(self, record_service, records):
        records.find_by_id.return_value = BibliographicRecord(id=5, isbn="111")
        records.find_by_isbn.return_value = BibliographicRecord(id=5, isbn="111")

        record_service.update(BibliographicRecord(id=5, isbn="111", language="English"))

        records.update.assert_called_once()

    def test_update_refuses_relink(self, record_service, records, session):
        records.find_by_id.return_value = BibliographicRecord(id=5, isbn="111", book_id=1)

        with pytest.raises(ServiceError, match="not permitted"):
            record_service.update(BibliographicRecord(id=5, isbn="111", book_id=2))

        records.update.assert_not_called()
        session.commit.assert_not_called()

    def test_update_refuses_unlink(self, record_service, records):
        records.find_by_id.return_value = BibliographicRecord(id=5, book_id=1)
        with pytest.raises(ServiceError):
            record_service.update(BibliographicRecord(id=5, book_id=None))

    def test_update_keeping_link_succeeds(self, record_service, records, session):
        records.find_by_id.return_value = BibliographicRecord(id=5, isbn="111", book_id=1)
        record = record_service.update(BibliographicRecord(id=5, isbn="222", book_id=1))
        assert record.isbn == "222"
        records.update.assert_called_once()
        session.commit.assert_called_once_with()

    def test_assign_refuses_linked_record(self, record_service, records, books):
        records.find_by_id.return_value = BibliographicRecord(id=5, book_id=1)
        books.find_by_id.return_value = Book(id=2, title="T", author="A")
        with pytest.raises(ServiceError) as exc_info:
            record_service.assign_to_book(5, 2)
        assert exc_info.value.code == "conflict"
        records.update_linked_book.assert_not_called()

    def test_assign_refuses_book_with_live_record(self, record_service, records, books):
        records.find_by_id.return_value = BibliographicRecord(id=5)
        records.find_by_book_id.return_value = BibliographicRecord(id=6, book_id=2)
        books.find_by_id.return_value = Book(id=2, title="T", author="A")
        with pytest.raises(ServiceError, match="already has a bibliographic record"):
            record_service.assign_to_book(5, 2)
        records.update_linked_book.assert_not_called()

    def test_assign_links_unlinked_record(self, record_service, records, books, session):
        records.find_by_id.return_value = BibliographicRecord(id=5)
        records.find_by_book_id.return_value = None
        books.find_by_id.return_value = Book(id=2, title="T", author="A")

        record = record_service.assign_to_book(5, 2)

        assert record.book_id == 2
        records.update_linked_book.assert_called_once_with(5, 2, session)


class TestLibraryTransactionService:

    def test_create_both_links_record_to_new_book(self, library_service, books, records, session):
        books.insert.return_value = 10
        records.insert.return_value = 20

        book, record = library_service.create_book_with_record(
            dune(), BibliographicRecord(isbn="9780441013593")
        )

        assert (book.id, record.id, record.book_id) == (10, 20, 10)
        assert book.record is record
        inserted_record = records.insert.call_args.args[0]
        assert inserted_record.book_id == 10
        session.commit.assert_called_once_with()

    def test_missing_record_id_rolls_back_and_resets_entities(self, library_service, books,
                                                              records, session):
        books.insert.return_value = 10
        records.insert.return_value = None
        book, record = dune(), BibliographicRecord(isbn="9780441013593")

        with pytest.raises(TransactionError, match="no ID obtained"):
            library_service.create_book_with_record(book, record)

        assert book.id is None
        assert record.id is None
        assert record.book_id is None
        session.rollback.assert_called_once_with()
        session.commit.assert_not_called()
        session.close.assert_called_once_with()

    def test_storage_failure_becomes_transaction_error(self, library_service, books, records):
        cause = IntegrityError("INSERT", {}, Exception("duplicate isbn"))
        books.insert.return_value = 10
        records.insert.side_effect = cause

        with pytest.raises(TransactionError) as exc_info:
            library_service.create_book_with_record(dune(), BibliographicRecord(isbn="1"))

        assert exc_info.value.kind is ErrorKind.TRANSACTION
        assert exc_info.value.original_error is cause
        assert exc_info.value.code == "conflict"

    @pytest.mark.parametrize("book, record", [
        (None, BibliographicRecord()),
        (Book(title="T", author="A"), None),
        (Book(id=1, title="T", author="A"), BibliographicRecord()),
        (Book(title="T", author="A"), BibliographicRecord(id=1)),
        (Book(title="T", author="A"), BibliographicRecord(book_id=1)),
    ])
    def test_create_both_preconditions(self, library_service, provider, book, record):
        with pytest.raises(ServiceError):
            library_service.create_book_with_record(book, record)
        provider.open_session.assert_not_called()

    def test_delete_cascades_to_live_record(self, library_service, books, records, session):
        books.find_by_id.return_value = Book(id=3, title="T", author="A")
        records.find_by_book_id.return_value = BibliographicRecord(id=8, book_id=3)

        library_service.delete_book_and_record(3)

        books.soft_delete.assert_called_once_with(3, session)
        records.soft_delete.assert_called_once_with(8, session)
        session.commit.assert_called_once_with()

    def test_delete_book_without_record(self, library_service, books, records):
        books.find_by_id.return_value = Book(id=3, title="T", author="A")
        records.find_by_book_id.return_value = None

        library_service.delete_book_and_record(3)

        records.soft_delete.assert_not_called()

    def test_delete_unknown_book(self, library_service, books, session):
        books.find_by_id.return_value = None
        with pytest.raises(ServiceError) as exc_info:
            library_service.delete_book_and_record(3)
        assert exc_info.value.code == "not_found"
        books.soft_delete.assert_not_called()
        session.rollback.assert_called_once_with()

    def test_move_to_current_book_is_rejected(self, library_service, books, records):
        records.find_by_id.return_value = BibliographicRecord(id=5, book_id=9)
        books.find_by_id.return_value = Book(id=9, title="T", author="A")

        with pytest.raises(ServiceError, match="already assigned to Book ID 9"):
            library_service.move_record_to_book(5, 9)
        records.update_linked_book.assert_not_called()

    def test_move_to_occupied_book_is_rejected(self, library_service, books, records):
        records.find_by_id.return_value = BibliographicRecord(id=5, book_id=1)
        records.find_by_book_id.return_value = BibliographicRecord(id=6, book_id=9)
        books.find_by_id.return_value = Book(id=9, title="T", author="A")

        with pytest.raises(ServiceError) as exc_info:
            library_service.move_record_to_book(5, 9)
        assert exc_info.value.code == "conflict"
        records.update_linked_book.assert_not_called()

    def test_move_relinks_record(self, library_service, books, records, session):
        records.find_by_id.return_value = BibliographicRecord(id=5, book_id=1)
        records.find_by_book_id.return_value = None
        books.find_by_id.return_value = Book(id=9, title="T", author="A")

        record = library_service.move_record_to_book(5, 9)

        assert record.book_id == 9
        records.update_linked_book.assert_called_once_with(5, 9, session)

    def test_move_wraps_gateway_failure(self, library_service, books, records, session):
        records.find_by_id.return_value = BibliographicRecord(id=5)
        records.find_by_book_id.return_value = None
        books.find_by_id.return_value = Book(id=9, title="T", author="A")
        records.update_linked_book.side_effect = StorageError("no live row")

        with pytest.raises(TransactionError):
            library_service.move_record_to_book(5, 9)
        session.rollback.assert_called_once_with()


class TestServiceWiring:

    def test_injector_binds_sql_gateways_and_singletons(self, provider):
        injector = create_injector(provider)

        service = injector.get(LibraryTransactionService)

        assert service is injector.get(LibraryTransactionService)
        assert service.provider is provider
        assert isinstance(service.books, SqlBookGateway)
        assert isinstance(service.records, SqlBibliographicRecordGateway)
        assert injector.get(BookGateway) is injector.get(BookGateway)
        assert isinstance(injector.get(BibliographicRecordGateway), SqlBibliographicRecordGateway)

    def test_get_service_resolves_connection_provider(self, provider):
        app = Flask(__name__)
        configure_services(app, provider)

        assert get_service(ConnectionProvider, app) is provider
        assert isinstance(get_service(BookService, app), BookService)

    def test_get_service_requires_configured_app(self):
        with pytest.raises(RuntimeError, match="not configured"):
            get_service(BookService, Flask(__name__))
