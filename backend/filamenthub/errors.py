"""Domain exceptions, global HTTP error handling and JSON response helpers."""
from __future__ import annotations

from typing import Any

from flask import Flask, jsonify
from loguru import logger
from pydantic import ValidationError


class FilamentHubError(Exception):
    status_code = 400
    error = "bad_request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.error.replace("_", " "))
        self.message = message or self.error.replace("_", " ")


class UnauthorizedError(FilamentHubError):
    status_code = 401
    error = "unauthorized"


class ForbiddenError(FilamentHubError):
    status_code = 403
    error = "forbidden"


class NotFoundError(FilamentHubError):
    status_code = 404
    error = "not_found"


class ConflictError(FilamentHubError):
    status_code = 409
    error = "conflict"


class FileTooLargeError(FilamentHubError):
    status_code = 413
    error = "file_too_large"


class InvalidUploadError(FilamentHubError):
    status_code = 422
    error = "unprocessable_entity"


def error_body(error: str, message: str, status: int):
    return jsonify({"error": error, "message": message}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(FilamentHubError)
    def domain_error(err: FilamentHubError):
        return error_body(err.error, err.message, err.status_code)

    @app.errorhandler(ValidationError)
    def validation_error(err: ValidationError):
        return error_body("unprocessable_entity", str(err), 422)

    @app.errorhandler(400)
    def bad_request(err: Exception):  # type: ignore[override]
        return error_body("bad_request", str(err), 400)

    @app.errorhandler(404)
    def not_found(err: Exception):  # type: ignore[override]
        return error_body("not_found", str(err), 404)

    @app.errorhandler(405)
    def method_not_allowed(err: Exception):  # type: ignore[override]
        return error_body("method_not_allowed", str(err), 405)

    @app.errorhandler(413)
    def too_large(err: Exception):  # type: ignore[override]
        return error_body("file_too_large", str(err), 413)

    @app.errorhandler(500)
    def internal(err: Exception):  # type: ignore[override]
        logger.opt(exception=err).error("unhandled error")
        return error_body("internal_server_error", "unexpected error", 500)


def ok(data: Any, status: int = 200):
    return jsonify({"data": data}), status
