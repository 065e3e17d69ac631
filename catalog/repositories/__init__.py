"""
Persistence gateways: single-entity CRUD and soft delete addressed by
surrogate key, parameterized by an externally supplied session.
"""

from .base import BibliographicRecordGateway, BookGateway, StorageError
from .books import SqlBookGateway
from .records import SqlBibliographicRecordGateway

__all__ = [
    "StorageError",
    "BookGateway",
    "BibliographicRecordGateway",
    "SqlBookGateway",
    "SqlBibliographicRecordGateway",
]
