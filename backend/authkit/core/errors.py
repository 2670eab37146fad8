"""Centralized JSON (RFC 7807) error handling for the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from authkit.core.logger import ensure_request_id
from authkit.services._shared.errors import (
    ConfigInvalid,
    EmailAlreadyExists,
    HashingFailure,
    InvalidEmailOrPassword,
    InvalidToken,
    NotFoundError,
    OperationTimeout,
    ServiceError,
    StoreFailure,
    TokenExpired,
    TokenNotFound,
    TokenRevoked,
)

log = logging.getLogger(__name__)

# Each service error kind maps to exactly one (status, code).
SERVICE_ERROR_STATUS: dict[type[ServiceError], tuple[int, str]] = {
    EmailAlreadyExists: (HTTPStatus.CONFLICT, "email_already_exists"),
    InvalidEmailOrPassword: (HTTPStatus.UNAUTHORIZED, "invalid_email_or_password"),
    TokenNotFound: (HTTPStatus.UNAUTHORIZED, "token_not_found"),
    TokenRevoked: (HTTPStatus.UNAUTHORIZED, "token_revoked"),
    TokenExpired: (HTTPStatus.UNAUTHORIZED, "token_expired"),
    InvalidToken: (HTTPStatus.UNAUTHORIZED, "invalid_token"),
    NotFoundError: (HTTPStatus.NOT_FOUND, "not_found"),
    OperationTimeout: (HTTPStatus.GATEWAY_TIMEOUT, "operation_timeout"),
    StoreFailure: (HTTPStatus.SERVICE_UNAVAILABLE, "store_failure"),
    HashingFailure: (HTTPStatus.INTERNAL_SERVER_ERROR, "hashing_failure"),
    ConfigInvalid: (HTTPStatus.INTERNAL_SERVER_ERROR, "config_invalid"),
}

# 5xx details are not shown to clients.
_PUBLIC_5XX_MESSAGE = {
    "store_failure": "Service temporarily unavailable",
    "hashing_failure": "Unexpected error",
    "config_invalid": "Unexpected error",
}


def status_for(exc: ServiceError) -> tuple[int, str]:
    """Return ``(status, code)`` for a service error, walking its MRO."""
    for cls in type(exc).__mro__:
        if cls in SERVICE_ERROR_STATUS:
            return SERVICE_ERROR_STATUS[cls]
    return HTTPStatus.BAD_REQUEST, "bad_request"


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        413: "payload_too_large",
        415: "unsupported_media_type",
        422: "unprocessable_entity",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
        504: "gateway_timeout",
    }
    return mapping.get(status_code, "error")


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details dict.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": message,
        "instance": request.path if has_request_context() else None,
        "code": code,
    }
    if details:
        problem["details"] = details
    problem["request_id"] = ensure_request_id()
    return problem


def _problem_response(problem: dict[str, Any]) -> Response:
    """Return a Flask response with ``application/problem+json`` media type."""
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp


class APIError(Exception):
    """
    Represent a JSON-serializable API error raised by the transport layer.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier, typically snake_case.
    details : dict[str, Any] | None, optional
        Optional structured payload included in the response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return _as_problem(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


class Unauthorized(APIError):
    """401 when the bearer credential is missing or malformed."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code="unauthorized")


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees RFC 7807 responses for all handled errors.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        problem = err.to_problem()
        level = log.error if err.status_code >= 500 else log.warning
        level(
            "APIError: code=%s status=%s msg=%s request_id=%s",
            err.code,
            err.status_code,
            err.message,
            problem.get("request_id"),
        )
        return _problem_response(problem), err.status_code

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        status, code = status_for(err)
        message = _PUBLIC_5XX_MESSAGE.get(code, str(err))
        problem = _as_problem(status=status, code=code, message=message)
        if status >= 500:
            log.error(
                "ServiceError: code=%s status=%s request_id=%s",
                code,
                status,
                problem.get("request_id"),
                exc_info=err,
            )
        else:
            log.warning(
                "ServiceError: code=%s status=%s request_id=%s",
                code,
                status,
                problem.get("request_id"),
            )
        return _problem_response(problem), status

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        problem = _as_problem(status=status, code=error_code, message=message)
        level = log.error if status >= 500 else log.warning
        level(
            "HTTPException: code=%s status=%s detail=%s request_id=%s",
            error_code,
            status,
            message,
            problem.get("request_id"),
        )
        return _problem_response(problem), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        problem = _as_problem(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.messages},
        )
        log.warning("ValidationError: request_id=%s", problem.get("request_id"))
        return _problem_response(problem), HTTPStatus.UNPROCESSABLE_ENTITY

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        problem = _as_problem(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="Unexpected error",
        )
        log.error(
            "Unhandled exception: request_id=%s",
            problem.get("request_id"),
            exc_info=True,
        )
        return _problem_response(problem), HTTPStatus.INTERNAL_SERVER_ERROR
