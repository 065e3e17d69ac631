"""
Library Catalog Package

Flask application package for the library catalog: books, their optional
bibliographic records, and the transactional workflows that keep the
one-to-one link between the two consistent under soft deletion.

Package Components:
- models: dataclass entities and Flask-SQLAlchemy tables
- repositories: SQLAlchemy persistence gateways addressed by surrogate key
- services: validation, single-entity services and the relationship workflows
- blueprints: thin JSON API over the service layer
- utils: database session/transaction management and structured logging
"""

__version__ = "1.0.0"
__description__ = "Library catalog with soft-delete and one-to-one relationship integrity"

__all__ = [
    "__version__",
    "__description__",
]
