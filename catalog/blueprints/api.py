"""
Catalog REST API blueprint.

A thin JSON front end over the service layer, built with Flask-RESTX
resources and marshmallow schemas. Schemas only shape payloads into entities
and entities back into JSON; every business rule lives in the services, so the
API performs no validation or persistence of its own.

Endpoints (all under ``/api/v1``):

- ``/books``, ``/books/<id>``: book CRUD with soft delete
- ``/books/<id>/cascade``: soft delete a book together with its record
- ``/records``, ``/records/<id>``: bibliographic record CRUD with soft delete
- ``/records/<id>/assign``: first-time link of a record to a book
- ``/records/<id>/move``: assign or relink a record to a book
- ``/catalog-entries``: create a book and its record atomically
"""

from typing import Any, Dict

from flask import Blueprint, request
from flask_restx import Api, Resource
from marshmallow import EXCLUDE, Schema, fields, post_load
from marshmallow import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException

from ..models.entities import BibliographicRecord, Book
from ..services import (
    BibliographicRecordService,
    BookService,
    LibraryTransactionService,
    ServiceError,
    get_service,
)
from ..utils.error_handling import http_error_response, payload_error, service_error_response
from ..utils.logging import get_logger

logger = get_logger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api/v1")

api = Api(
    api_bp,
    version="1.0",
    title="Library Catalog API",
    description="Books and their bibliographic records",
    doc="/docs/",
)

books_ns = api.namespace("books", description="Book operations")
records_ns = api.namespace("records", description="Bibliographic record operations")
entries_ns = api.namespace(
    "catalog-entries", description="Atomic book and bibliographic record workflows"
)


# =============================================================================
# MARSHMALLOW SCHEMAS
# =============================================================================

class RecordSchema(Schema):
    """Bibliographic record payload; loads into a ``BibliographicRecord``."""

    class Meta:
        unknown = EXCLUDE

    id = fields.Integer(dump_only=True)
    deleted = fields.Boolean(dump_only=True)
    isbn = fields.String(allow_none=True, load_default=None)
    dewey_class = fields.String(allow_none=True, load_default=None)
    shelf_location = fields.String(allow_none=True, load_default=None)
    language = fields.String(allow_none=True, load_default=None)
    book_id = fields.Integer(allow_none=True, load_default=None)

    @post_load
    def make_record(self, data: Dict[str, Any], **kwargs) -> BibliographicRecord:
        return BibliographicRecord(**data)


class BookSchema(Schema):
    """Book payload; loads into a ``Book``. The linked record is dump-only."""

    class Meta:
        unknown = EXCLUDE

    id = fields.Integer(dump_only=True)
    deleted = fields.Boolean(dump_only=True)
    title = fields.String(allow_none=True, load_default=None)
    author = fields.String(allow_none=True, load_default=None)
    publisher = fields.String(allow_none=True, load_default=None)
    publication_year = fields.Integer(allow_none=True, load_default=None)
    record = fields.Nested(RecordSchema, dump_only=True, allow_none=True)

    @post_load
    def make_book(self, data: Dict[str, Any], **kwargs) -> Book:
        return Book(**data)


class BookReferenceSchema(Schema):
    """Target book of an assign or move request."""

    class Meta:
        unknown = EXCLUDE

    book_id = fields.Integer(required=True)


class CatalogEntrySchema(Schema):
    """A new book and its bibliographic record, created together."""

    class Meta:
        unknown = EXCLUDE

    book = fields.Nested(BookSchema, required=True)
    record = fields.Nested(RecordSchema, required=True)


book_schema = BookSchema()
books_schema = BookSchema(many=True)
record_schema = RecordSchema()
records_schema = RecordSchema(many=True)
book_reference_schema = BookReferenceSchema()
catalog_entry_schema = CatalogEntrySchema()


def load_payload(schema: Schema) -> Any:
    """Deserialize the JSON request body, raising a catalog ValidationError on bad shape."""
    try:
        return schema.load(request.get_json(silent=True) or {})
    except SchemaValidationError as e:
        raise payload_error(e) from e


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@api.errorhandler(ServiceError)
def handle_service_error(error: ServiceError):
    return service_error_response(error)


@api.errorhandler(HTTPException)
def handle_http_error(error: HTTPException):
    return http_error_response(error)


# =============================================================================
# BOOKS
# =============================================================================

@books_ns.route("")
class BookList(Resource):
    """
    - GET /api/v1/books: list live books
    - POST /api/v1/books: create a book
    """

    def get(self):
        return {"books": books_schema.dump(get_service(BookService).list_all())}, 200

    def post(self):
        book = get_service(BookService).create(load_payload(book_schema))
        logger.info("Book created via API", book_id=book.id)
        return {"book": book_schema.dump(book)}, 201


@books_ns.route("/<int:book_id>")
class BookDetail(Resource):

    def get(self, book_id: int):
        book = get_service(BookService).find_by_id(book_id)
        if book is None:
            raise ServiceError(f"Book with ID {book_id} was not found.", code="not_found")
        return {"book": book_schema.dump(book)}, 200

    def put(self, book_id: int):
        """Replace a book's descriptive fields."""
        book = load_payload(book_schema)
        book.id = book_id
        book = get_service(BookService).update(book)
        return {"book": book_schema.dump(book)}, 200

    def delete(self, book_id: int):
        """Soft delete the book only; a linked record stays linked."""
        get_service(BookService).soft_delete(book_id)
        return {"id": book_id, "deleted": True}, 200


@books_ns.route("/<int:book_id>/cascade")
class BookCascade(Resource):

    def delete(self, book_id: int):
        """Soft delete the book and its live bibliographic record in one transaction."""
        get_service(LibraryTransactionService).delete_book_and_record(book_id)
        return {"id": book_id, "deleted": True, "cascade": True}, 200


# =============================================================================
# BIBLIOGRAPHIC RECORDS
# =============================================================================

@records_ns.route("")
class RecordList(Resource):

    def get(self):
        records = get_service(BibliographicRecordService).list_all()
        return {"records": records_schema.dump(records)}, 200

    def post(self):
        record = get_service(BibliographicRecordService).create(load_payload(record_schema))
        logger.info("Bibliographic record created via API", record_id=record.id)
        return {"record": record_schema.dump(record)}, 201


@records_ns.route("/<int:record_id>")
class RecordDetail(Resource):

    def get(self, record_id: int):
        record = get_service(BibliographicRecordService).find_by_id(record_id)
        if record is None:
            raise ServiceError(
                f"BibliographicRecord with ID {record_id} was not found.", code="not_found"
            )
        return {"record": record_schema.dump(record)}, 200

    def put(self, record_id: int):
        """
        Replace a record's cataloguing fields. ``book_id`` must repeat the
        stored link; relinking goes through ``/move``.
        """
        record = load_payload(record_schema)
        record.id = record_id
        record = get_service(BibliographicRecordService).update(record)
        return {"record": record_schema.dump(record)}, 200

    def delete(self, record_id: int):
        get_service(BibliographicRecordService).soft_delete(record_id)
        return {"id": record_id, "deleted": True}, 200


@records_ns.route("/<int:record_id>/assign")
class RecordAssignment(Resource):

    def post(self, record_id: int):
        target = load_payload(book_reference_schema)
        record = get_service(BibliographicRecordService).assign_to_book(record_id, target["book_id"])
        return {"record": record_schema.dump(record)}, 200


@records_ns.route("/<int:record_id>/move")
class RecordMove(Resource):

    def post(self, record_id: int):
        target = load_payload(book_reference_schema)
        record = get_service(LibraryTransactionService).move_record_to_book(
            record_id, target["book_id"]
        )
        return {"record": record_schema.dump(record)}, 200


# =============================================================================
# CATALOG ENTRIES
# =============================================================================

@entries_ns.route("")
class CatalogEntries(Resource):

    def post(self):
        """Create a book and its bibliographic record, both or neither."""
        entry = load_payload(catalog_entry_schema)
        book, record = get_service(LibraryTransactionService).create_book_with_record(
            entry["book"], entry["record"]
        )
        return {
            "book": book_schema.dump(book),
            "record": record_schema.dump(record),
        }, 201


__all__ = ["api_bp", "api"]
