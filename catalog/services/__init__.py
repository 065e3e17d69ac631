"""
Services Package Initialization

Business logic layer of the catalog: single-entity services for books and
bibliographic records, and the transaction service for workflows spanning
both. Services are wired with ``injector``; the connection provider and the
persistence gateways are bound once per application and handed to every
service through its constructor.

Example:
    ```python
    from catalog.services import BookService, create_injector
    from catalog.utils.database import ConnectionProvider

    injector = create_injector(ConnectionProvider.from_url("sqlite:///catalog.db"))
    books = injector.get(BookService)
    ```
"""

from typing import Optional, Type, TypeVar

from flask import Flask, current_app
from injector import Binder, Injector, Module, singleton

from ..repositories import (
    BibliographicRecordGateway,
    BookGateway,
    SqlBibliographicRecordGateway,
    SqlBookGateway,
)
from ..utils.database import ConnectionProvider
from ..utils.logging import get_logger
from .base import BaseService, ErrorKind, ServiceError, TransactionError, ValidationError
from .book_service import BookService
from .library_transactions import LibraryTransactionService
from .record_service import BibliographicRecordService

logger = get_logger(__name__)

ServiceType = TypeVar("ServiceType")

INJECTOR_EXTENSION_KEY = "catalog_injector"


class CatalogModule(Module):
    """
    Dependency bindings for the service layer.

    Args:
        provider: Connection provider shared by every service
    """

    def __init__(self, provider: ConnectionProvider):
        self.provider = provider

    def configure(self, binder: Binder) -> None:
        binder.bind(ConnectionProvider, to=self.provider)
        binder.bind(BookGateway, to=SqlBookGateway, scope=singleton)
        binder.bind(BibliographicRecordGateway, to=SqlBibliographicRecordGateway, scope=singleton)

        binder.bind(BookService, to=BookService, scope=singleton)
        binder.bind(BibliographicRecordService, to=BibliographicRecordService, scope=singleton)
        binder.bind(LibraryTransactionService, to=LibraryTransactionService, scope=singleton)


def create_injector(provider: ConnectionProvider, *modules: Module) -> Injector:
    """Build an injector for the catalog; extra modules can override bindings."""
    return Injector([CatalogModule(provider), *modules])


def configure_services(app: Flask, provider: ConnectionProvider) -> Injector:
    """Attach a service injector to the Flask application."""
    injector = create_injector(provider)
    app.extensions[INJECTOR_EXTENSION_KEY] = injector
    logger.info("Service layer configured", services=[
        BookService.__name__,
        BibliographicRecordService.__name__,
        LibraryTransactionService.__name__,
    ])
    return injector


def get_service(service_class: Type[ServiceType], app: Optional[Flask] = None) -> ServiceType:
    """
    Retrieve a service from the application's injector.

    Args:
        service_class: Service or bound collaborator (such as ``ConnectionProvider``) to resolve
        app: Flask application; defaults to ``current_app``

    Raises:
        RuntimeError: the application has no configured service layer
    """
    app = app or current_app
    injector = app.extensions.get(INJECTOR_EXTENSION_KEY)
    if injector is None:
        raise RuntimeError("Service layer is not configured for this application")
    return injector.get(service_class)


__all__ = [
    "BaseService",
    "BookService",
    "BibliographicRecordService",
    "LibraryTransactionService",
    "CatalogModule",
    "create_injector",
    "configure_services",
    "get_service",
    "ErrorKind",
    "ServiceError",
    "ValidationError",
    "TransactionError",
]
