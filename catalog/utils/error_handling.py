"""
Error taxonomy and Flask error handler registration.

Every public catalog operation either succeeds or raises a single
``ServiceError``. The ``kind`` attribute discriminates the three failure
families callers care about:

- ``VALIDATION``: caller-supplied data broke a field or business rule; nothing
  was written and the caller can correct the input
- ``SERVICE``: a precondition failed (not found, already deleted, illegal id,
  forbidden relink) or a single-entity storage call failed
- ``TRANSACTION``: a multi-step workflow failed after it started writing; the
  unit of work was rolled back before the error surfaced

``ValidationError`` and ``TransactionError`` derive from ``ServiceError`` so a
caller that only wants one failure channel can catch ``ServiceError``.
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify
from marshmallow import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException

from .logging import LogCategory, get_logger

logger = get_logger(__name__)


class ErrorKind(str, Enum):
    """Failure families surfaced by the service layer."""
    VALIDATION = "validation"
    SERVICE = "service"
    TRANSACTION = "transaction"


class ServiceError(Exception):
    """
    Base exception for all service layer failures.

    Args:
        message: Human-readable description of the failure
        original_error: The underlying exception, if this wraps one
        code: Machine-readable failure code (``not_found``, ``conflict``, ...)
    """

    kind: ErrorKind = ErrorKind.SERVICE
    default_code: str = "service_error"

    def __init__(self, message: str, original_error: Optional[BaseException] = None,
                 code: Optional[str] = None):
        self.message = message
        self.original_error = original_error
        self.code = code or self.default_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
        }


class ValidationError(ServiceError):
    """Caller-supplied entity data violates a field or business rule."""

    kind = ErrorKind.VALIDATION
    default_code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None,
                 original_error: Optional[BaseException] = None, code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, original_error=original_error, code=code)
        self.field = field
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        if self.details:
            data["fields"] = self.details
        return data


class TransactionError(ServiceError):
    """A multi-step workflow failed and its unit of work was rolled back."""

    kind = ErrorKind.TRANSACTION
    default_code = "transaction_error"


# HTTP status per failure code for the JSON API
STATUS_BY_CODE = {
    "validation_error": 400,
    "invalid_payload": 400,
    "invalid_id": 400,
    "not_found": 404,
    "already_deleted": 409,
    "invalid_state": 409,
    "conflict": 409,
    "storage_error": 500,
    "transaction_error": 500,
    "service_error": 500,
}


def status_for(error: ServiceError) -> int:
    return STATUS_BY_CODE.get(error.code, 500)


def payload_error(error: SchemaValidationError) -> ValidationError:
    """Translate a marshmallow schema failure into a catalog ``ValidationError``."""
    return ValidationError(
        "Request payload is malformed.",
        code="invalid_payload",
        details=error.normalized_messages(),
        original_error=error,
    )


def service_error_response(error: ServiceError) -> Tuple[Dict[str, Any], int]:
    """Log a service failure and build its JSON body and status."""
    status = status_for(error)
    log = logger.error if status >= 500 else logger.info
    log(
        "Service operation failed",
        category=LogCategory.APPLICATION,
        kind=error.kind.value,
        code=error.code,
        error=error.message,
        cause=type(error.original_error).__name__ if error.original_error else None,
    )
    return {"error": error.to_dict()}, status


def http_error_response(error: HTTPException) -> Tuple[Dict[str, Any], int]:
    payload = {
        "kind": "http",
        "code": (error.name or "error").lower().replace(" ", "_"),
        "message": error.description,
    }
    return {"error": payload}, error.code or 500


def init_error_handling(app: Flask) -> None:
    """Register JSON error handlers for service, payload and HTTP errors."""

    @app.errorhandler(ServiceError)
    def handle_service_error(error: ServiceError):
        body, status = service_error_response(error)
        return jsonify(body), status

    @app.errorhandler(SchemaValidationError)
    def handle_payload_error(error: SchemaValidationError):
        body, status = service_error_response(payload_error(error))
        return jsonify(body), status

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        body, status = http_error_response(error)
        return jsonify(body), status


__all__ = [
    "ErrorKind",
    "ServiceError",
    "ValidationError",
    "TransactionError",
    "STATUS_BY_CODE",
    "status_for",
    "payload_error",
    "service_error_response",
    "http_error_response",
    "init_error_handling",
]
