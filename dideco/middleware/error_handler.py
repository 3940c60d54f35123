# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware with problem-details JSON responses.
Provides centralized error handling and formatting for the Flask application.
"""

from flask import Flask, request
from werkzeug.exceptions import HTTPException
from typing import Any, Dict, List, Optional, Tuple
from opentelemetry import trace
import logging
import traceback

from ..domain.exceptions import DomainException, ValidationError

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

PROBLEM_BASE_URL = "https://dideco.municipalidad.cl/problems"

ERROR_TITLES = {
    "bad-request": "Bad Request",
    "authentication-required": "Authentication Required",
    "insufficient-permissions": "Insufficient Permissions",
    "resource-not-found": "Resource Not Found",
    "method-not-allowed": "Method Not Allowed",
    "resource-conflict": "Resource Conflict",
    "validation-error": "Validation Error",
    "internal-server-error": "Internal Server Error",
    "application-error": "Application Error"
}

STATUS_TYPES = {
    400: "bad-request",
    401: "authentication-required",
    403: "insufficient-permissions",
    404: "resource-not-found",
    405: "method-not-allowed",
    409: "resource-conflict",
    422: "validation-error"
}


def build_problem(
    error_type: str,
    status: int,
    detail: str,
    instance: str,
    errors: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """Problem-details body (RFC 7807 shape)."""
    problem = {
        "type": f"{PROBLEM_BASE_URL}/{error_type}",
        "title": ERROR_TITLES.get(error_type, "Error"),
        "status": status,
        "detail": detail,
        "instance": instance
    }
    if errors:
        problem["errors"] = errors
    return problem


class ErrorHandlerMiddleware:
    """Centralized error handling middleware."""

    def __init__(self, app: Flask):
        self.app = app
        self.register_error_handlers()

    def register_error_handlers(self):
        """Register error handlers with Flask application."""

        @self.app.errorhandler(DomainException)
        def handle_domain_exception(error):
            return self.handle_domain_error(error)

        @self.app.errorhandler(HTTPException)
        def handle_http_exception(error):
            if error.code and error.code >= 500:
                return self.handle_server_error(error)
            return self.handle_client_error(error)

        # Handle generic exceptions
        @self.app.errorhandler(Exception)
        def handle_generic_exception(error):
            return self.handle_unexpected_error(error)

    def handle_domain_error(self, error: DomainException) -> Tuple[Dict[str, Any], int]:
        """
        Handle domain exceptions raised by table and ledger operations.

        Args:
            error: Domain exception

        Returns:
            Tuple of (error response dict, status code)
        """
        with tracer.start_as_current_span("error_handler.domain_exception") as span:
            span.set_attributes({
                "error.type": error.error_type,
                "error.status": error.status_code,
                "http.method": request.method,
                "http.path": request.path
            })

            logger.warning(
                f"Domain exception: {error.error_type}",
                extra={
                    "error_type": error.error_type,
                    "status_code": error.status_code,
                    "detail": error.message,
                    "path": request.path,
                    "method": request.method
                }
            )

            errors = error.validation_errors if isinstance(error, ValidationError) else None
            return build_problem(
                error.error_type,
                error.status_code,
                error.message,
                request.path,
                errors
            ), error.status_code

    def handle_client_error(self, error: HTTPException) -> Tuple[Dict[str, Any], int]:
        """Handle client errors (4xx status codes)."""
        error_type = STATUS_TYPES.get(error.code, "bad-request")
        detail = str(error.description) if error.description else ERROR_TITLES[error_type]

        logger.warning(
            f"Client error: {ERROR_TITLES[error_type]}",
            extra={
                "error_type": error_type,
                "status_code": error.code,
                "detail": detail,
                "path": request.path,
                "method": request.method
            }
        )

        return build_problem(error_type, error.code, detail, request.path), error.code

    def handle_server_error(self, error: HTTPException) -> Tuple[Dict[str, Any], int]:
        """Handle server errors (5xx status codes)."""
        logger.error(
            "Server error",
            extra={
                "status_code": error.code,
                "path": request.path,
                "method": request.method
            },
            exc_info=True
        )

        detail = str(error.description) if error.description else "Internal Server Error"
        if self.app.config.get('ENVIRONMENT') == 'production':
            detail = "An internal server error occurred"

        return build_problem("internal-server-error", error.code, detail, request.path), error.code

    def handle_unexpected_error(self, error: Exception) -> Tuple[Dict[str, Any], int]:
        """
        Handle unexpected exceptions not caught by specific handlers.

        Args:
            error: Unexpected exception

        Returns:
            Tuple of (error response dict, status code)
        """
        with tracer.start_as_current_span("error_handler.unexpected_error") as span:
            span.set_attributes({
                "error.type": "unexpected-error",
                "error.class": error.__class__.__name__,
                "http.method": request.method,
                "http.path": request.path
            })
            span.record_exception(error)

            logger.error(
                f"Unexpected error: {error.__class__.__name__}",
                extra={
                    "error_class": error.__class__.__name__,
                    "error_message": str(error),
                    "path": request.path,
                    "method": request.method,
                    "traceback": traceback.format_exc()
                },
                exc_info=True
            )

            # Don't expose internal error details
            detail = "An unexpected error occurred"
            if self.app.config.get('ENVIRONMENT') != 'production':
                detail = f"{error.__class__.__name__}: {str(error)}"

            return build_problem("internal-server-error", 500, detail, request.path), 500
