"""
Flask Application Factory

Builds the catalog application:

- configuration class selection (``catalog.config``) with optional overrides
- structlog logging
- Flask-SQLAlchemy and Flask-Migrate against the configured database
- the injector-backed service layer, sharing one ``ConnectionProvider`` built
  on the Flask-SQLAlchemy engine
- JSON error handlers, blueprints and the ``init-db`` CLI command

Example:
    # Development server
    flask --app catalog.app run

    # Schema creation
    flask --app catalog.app init-db
"""

from typing import Any, Mapping, Optional, Type, Union

import click
from flask import Flask
from flask_migrate import Migrate

from .blueprints import register_blueprints
from .config import LOADED_ENV_FILES, Config, get_config
from .models import db
from .services import configure_services
from .utils.database import ConnectionProvider
from .utils.error_handling import init_error_handling
from .utils.logging import LogCategory, get_logger, init_logging

logger = get_logger(__name__)

migrate = Migrate()


def register_commands(app: Flask) -> None:

    @app.cli.command("init-db")
    def init_db_command():
        """Create all catalog tables that do not exist yet."""
        db.create_all()
        logger.info("Database schema created", category=LogCategory.INFRASTRUCTURE)
        click.echo("Initialized the catalog database.")


def create_app(config_name: Optional[Union[str, Type[Config]]] = None,
               overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Environment name ('development', 'testing', 'production')
            or a configuration class; defaults to ``CATALOG_ENV``
        overrides: Configuration values applied on top of the class

    Returns:
        Flask: Configured application instance
    """
    app = Flask(__name__)

    config_class = config_name if isinstance(config_name, type) else get_config(config_name)
    app.config.from_object(config_class)
    if overrides:
        app.config.update(overrides)
    config_class.init_app(app)

    init_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)

    with app.app_context():
        # Built before any connection is opened so SQLite connections get foreign keys
        provider = ConnectionProvider(db.engine)
        if app.config.get("CATALOG_CREATE_SCHEMA"):
            db.create_all()

    configure_services(app, provider)
    init_error_handling(app)
    register_blueprints(app)
    register_commands(app)

    logger.info(
        "Catalog application created",
        category=LogCategory.APPLICATION,
        config=config_class.__name__,
        env_files=LOADED_ENV_FILES,
        testing=app.testing,
    )
    return app


__all__ = ["create_app"]
