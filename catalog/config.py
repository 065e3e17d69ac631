"""
Flask Configuration Management

Environment-specific configuration classes for development, testing and
production. Values come from environment variables; ``.env`` files are loaded
with python-dotenv when this module is imported so the class attributes below
already see them.

Environment Variables:
    CATALOG_ENV: configuration name (development, testing, production)
    DATABASE_URL: SQLAlchemy database URL
    LOG_LEVEL: logging level (DEBUG, INFO, WARNING, ERROR)
    LOG_JSON: render logs as JSON when "true"
    CATALOG_CREATE_SCHEMA: create missing tables at startup when "true"
"""

import os
from pathlib import Path
from typing import List, Optional, Type

from dotenv import load_dotenv


def load_environment_variables() -> List[str]:
    """
    Load ``.env`` files without overriding variables already set.

    Search order: ``.env``, ``.env.{CATALOG_ENV}``, ``.env.local``.

    Returns:
        List of files that were loaded
    """
    catalog_env = os.environ.get("CATALOG_ENV", "development")
    loaded = []
    for env_file in (".env", f".env.{catalog_env}", ".env.local"):
        if Path(env_file).exists():
            load_dotenv(env_file, override=False)
            loaded.append(env_file)
    return loaded


LOADED_ENV_FILES = load_environment_variables()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class Config:
    """Settings shared by every environment."""

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or "sqlite:///catalog.db"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_RECORD_QUERIES = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_JSON = _env_flag("LOG_JSON")

    # Create tables on startup instead of running migrations
    CATALOG_CREATE_SCHEMA = _env_flag("CATALOG_CREATE_SCHEMA")

    # Flask-RESTX: keep error bodies to the catalog's {"error": {...}} shape
    ERROR_INCLUDE_MESSAGE = False
    RESTX_ERROR_404_HELP = False
    RESTX_MASK_SWAGGER = False

    @staticmethod
    def init_app(app):
        """Hook for environment-specific initialization."""


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")
    CATALOG_CREATE_SCHEMA = _env_flag("CATALOG_CREATE_SCHEMA", "true")


class TestingConfig(Config):
    """
    Isolated configuration for the test suite. The suite points
    ``SQLALCHEMY_DATABASE_URI`` at a per-test SQLite file.
    """

    TESTING = True
    DEBUG = False

    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL") or "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}

    CATALOG_CREATE_SCHEMA = True

    # Reduce log noise during testing
    LOG_LEVEL = "WARNING"
    LOG_JSON = False


class ProductionConfig(Config):
    DEBUG = False
    TESTING = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_JSON = _env_flag("LOG_JSON", "true")

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "pool_size": int(os.environ.get("SQLALCHEMY_POOL_SIZE", "10")),
        "max_overflow": int(os.environ.get("SQLALCHEMY_MAX_OVERFLOW", "20")),
    }

    @staticmethod
    def init_app(app):
        if not os.environ.get("DATABASE_URL"):
            raise RuntimeError("Production DATABASE_URL must be set")


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(config_name: Optional[str] = None) -> Type[Config]:
    """
    Get the configuration class for an environment name.

    Falls back to ``CATALOG_ENV`` and then to development.
    """
    if config_name is None:
        config_name = os.environ.get("CATALOG_ENV", "default")
    return config.get(config_name, DevelopmentConfig)


__all__ = [
    "Config",
    "DevelopmentConfig",
    "TestingConfig",
    "ProductionConfig",
    "get_config",
    "load_environment_variables",
]
