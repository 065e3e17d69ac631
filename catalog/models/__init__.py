"""
Catalog Models Package

Dataclass entities used across the service layer, and the Flask-SQLAlchemy
tables the persistence gateways map them to.

Database Models:
- BookModel: catalogued books (table ``books``)
- BibliographicRecordModel: one-to-one cataloguing data (table ``bibliographic_records``)
"""

from .base import SoftDeleteMixin, db
from .entities import BibliographicRecord, Book, Entity
from .tables import BibliographicRecordModel, BookModel

__all__ = [
    "db",
    "SoftDeleteMixin",
    "Entity",
    "Book",
    "BibliographicRecord",
    "BookModel",
    "BibliographicRecordModel",
    "get_all_models",
]

# Registration order follows foreign key dependencies
MODELS = [
    BookModel,
    BibliographicRecordModel,
]


def get_all_models():
    """Return all ORM tables in dependency order, for schema creation and migrations."""
    return MODELS
