from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    TokenExpired,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first.
_STATUS_BY_ERROR = (
    (TokenExpired, 410),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        status = status_for(error)
        body = {"message": str(error), "error": type(error).__name__}
        if isinstance(error, TokenExpired) and error.token is not None:
            body["qrcode"] = error.token.to_dict()
        if status == 500:
            logger.error("Unmapped domain error: %s", error)
            body = {"message": "An unexpected error occurred."}
        return jsonify(body), status

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return jsonify({"message": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.exception("Unhandled error")
        return jsonify({"message": "An unexpected error occurred."}), 500
