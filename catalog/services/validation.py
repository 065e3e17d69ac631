"""
Entity validation rules.

Pure functions run before any create or update reaches storage. They never
touch the database and have no side effects; a violation raises
``ValidationError`` naming the offending field.
"""

from datetime import date
from typing import Optional

from ..models.entities import BibliographicRecord, Book
from ..utils.error_handling import ValidationError

TITLE_MAX_LENGTH = 150
AUTHOR_MAX_LENGTH = 120
PUBLISHER_MAX_LENGTH = 100

ISBN_MAX_LENGTH = 17
DEWEY_CLASS_MAX_LENGTH = 20
SHELF_LOCATION_MAX_LENGTH = 50
LANGUAGE_MAX_LENGTH = 30


def _require_text(value: Optional[str], field: str, label: str, max_length: int) -> None:
    if value is None or not value.strip():
        raise ValidationError(f"{label} is required.", field=field)
    _check_length(value, field, label, max_length)


def _check_length(value: Optional[str], field: str, label: str, max_length: int) -> None:
    if value is not None and len(value) > max_length:
        raise ValidationError(f"{label} exceeds maximum length ({max_length}).", field=field)


def validate_book(book: Optional[Book], current_year: Optional[int] = None) -> None:
    """
    Check a book's fields.

    Args:
        book: Book to validate
        current_year: Upper bound for the publication year; defaults to the
            current calendar year

    Raises:
        ValidationError: on the first violated rule
    """
    if book is None:
        raise ValidationError("Book cannot be null.")

    _require_text(book.title, "title", "Title", TITLE_MAX_LENGTH)
    _require_text(book.author, "author", "Author", AUTHOR_MAX_LENGTH)
    _check_length(book.publisher, "publisher", "Publisher", PUBLISHER_MAX_LENGTH)

    if book.publication_year is not None:
        if current_year is None:
            current_year = date.today().year
        if book.publication_year < 0:
            raise ValidationError("Publication year cannot be negative.", field="publication_year")
        if book.publication_year > current_year:
            raise ValidationError(
                f"Publication year cannot exceed {current_year}.", field="publication_year"
            )


def validate_record(record: Optional[BibliographicRecord]) -> None:
    """
    Check a bibliographic record's fields. All fields are optional; an ISBN,
    when present, must not be blank.

    Raises:
        ValidationError: on the first violated rule
    """
    if record is None:
        raise ValidationError("BibliographicRecord cannot be null.")

    if record.isbn is not None and not record.isbn.strip():
        raise ValidationError("ISBN cannot be blank.", field="isbn")
    _check_length(record.isbn, "isbn", "ISBN", ISBN_MAX_LENGTH)
    _check_length(record.dewey_class, "dewey_class", "Dewey class", DEWEY_CLASS_MAX_LENGTH)
    _check_length(record.shelf_location, "shelf_location", "Shelf location", SHELF_LOCATION_MAX_LENGTH)
    _check_length(record.language, "language", "Language", LANGUAGE_MAX_LENGTH)


__all__ = [
    "validate_book",
    "validate_record",
    "TITLE_MAX_LENGTH",
    "AUTHOR_MAX_LENGTH",
    "PUBLISHER_MAX_LENGTH",
    "ISBN_MAX_LENGTH",
    "DEWEY_CLASS_MAX_LENGTH",
    "SHELF_LOCATION_MAX_LENGTH",
    "LANGUAGE_MAX_LENGTH",
]
