"""
Pytest configuration and shared fixtures for the catalog test suite.

Every test gets its own Flask application bound to a fresh SQLite database
file under ``tmp_path``, so tests never share state. Services are resolved
from the application's injector exactly as the API resolves them.
"""

import pytest
from flask import Flask
from injector import Injector

from catalog.app import create_app
from catalog.services import BibliographicRecordService, BookService, LibraryTransactionService
from catalog.utils.database import ConnectionProvider

from tests.factories import BibliographicRecordFactory, BookFactory


def pytest_collection_modifyitems(config, items):
    """Mark tests by directory: ``unit`` or ``integration``."""
    for item in items:
        path = str(item.fspath)
        if "/integration/" in path:
            item.add_marker(pytest.mark.integration)
        elif "/unit/" in path:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def app(tmp_path) -> Flask:
    database_url = f"sqlite:///{tmp_path / 'catalog.db'}"
    app = create_app("testing", {"SQLALCHEMY_DATABASE_URI": database_url})
    yield app
    app.extensions["catalog_injector"].get(ConnectionProvider).dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def injector(app) -> Injector:
    return app.extensions["catalog_injector"]


@pytest.fixture
def provider(injector) -> ConnectionProvider:
    return injector.get(ConnectionProvider)


@pytest.fixture
def book_service(injector) -> BookService:
    return injector.get(BookService)


@pytest.fixture
def record_service(injector) -> BibliographicRecordService:
    return injector.get(BibliographicRecordService)


@pytest.fixture
def library_service(injector) -> LibraryTransactionService:
    return injector.get(LibraryTransactionService)


@pytest.fixture
def book_factory():
    return BookFactory


@pytest.fixture
def record_factory():
    return BibliographicRecordFactory


@pytest.fixture
def saved_book(book_service):
    return book_service.create(BookFactory())


@pytest.fixture
def saved_record(record_service):
    return record_service.create(BibliographicRecordFactory())
