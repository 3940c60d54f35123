# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Domain exceptions.

Each carries the HTTP status and problem type the error handler answers with.
"""

from typing import Any, Dict, List, Optional


class DomainException(Exception):
    """Base class for aid ledger exceptions."""

    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class DuplicateKeyError(DomainException):
    """A row with the same key already exists."""

    def __init__(self, table: str, key: Any):
        super().__init__(f"{table} with key '{key}' already exists", 409, "resource-conflict")
        self.table = table
        self.key = key


class NotFoundError(DomainException):
    """No row with the given key."""

    def __init__(self, table: str, key: Any):
        super().__init__(f"{table} with key '{key}' not found", 404, "resource-not-found")
        self.table = table
        self.key = key


class ValidationError(DomainException):
    """A required input is missing or invalid; raised before any mutation."""

    def __init__(self, message: str, validation_errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message, 422, "validation-error")
        self.validation_errors = validation_errors or []


class AuthenticationError(DomainException):
    """Credentials did not match an active system user."""

    def __init__(self, message: str = "Credenciales inválidas o usuario inactivo"):
        super().__init__(message, 401, "authentication-required")
