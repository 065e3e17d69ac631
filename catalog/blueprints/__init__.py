"""
Flask Blueprint Package Initialization

Registers the catalog's blueprints with the application factory:

- api_bp: RESTful catalog endpoints under ``/api/v1``
- health_bp: database connectivity check under ``/api/v1/health``
"""

from typing import List

from flask import Blueprint, Flask

from ..utils.logging import LogCategory, get_logger
from .api import api_bp
from .health import health_bp

logger = get_logger(__name__)

BLUEPRINTS: List[Blueprint] = [health_bp, api_bp]


def register_blueprints(app: Flask) -> None:
    for blueprint in BLUEPRINTS:
        app.register_blueprint(blueprint)
        logger.debug(
            "Registered blueprint",
            category=LogCategory.APPLICATION,
            blueprint=blueprint.name,
            url_prefix=blueprint.url_prefix,
        )


__all__ = ["register_blueprints", "api_bp", "health_bp"]
