# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request validation middleware using Pydantic models.
Provides automatic request body validation and error formatting.
"""

from functools import wraps
from flask import request
from typing import Type, Callable, Dict, Any, List
from pydantic import BaseModel, ValidationError
from opentelemetry import trace
import logging

from ..domain.tables import format_validation_errors
from .error_handler import build_problem

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class ValidationMiddleware:
    """Middleware for request validation using Pydantic models."""

    def format_validation_errors(self, validation_error: ValidationError) -> List[Dict[str, Any]]:
        """
        Format Pydantic validation errors for API response.

        Args:
            validation_error: Pydantic ValidationError

        Returns:
            List of formatted error dictionaries
        """
        return format_validation_errors(validation_error, include_input=True)

    def validate_json_body(self, model_class: Type[BaseModel]) -> Callable:
        """
        Decorator to validate JSON request body against Pydantic model.

        The validated model is passed to the route as its first argument.

        Args:
            model_class: Pydantic model class for validation

        Returns:
            Decorator function
        """
        def decorator(f: Callable) -> Callable:
            @wraps(f)
            def decorated_function(*args, **kwargs):
                with tracer.start_as_current_span("validation.validate_json_body") as span:
                    span.set_attributes({
                        "validation.model": model_class.__name__,
                        "http.method": request.method,
                        "http.path": request.path
                    })

                    json_data = request.get_json(silent=True)
                    if not isinstance(json_data, dict):
                        span.set_attribute("validation.result", "invalid_json")
                        return build_problem(
                            "bad-request",
                            400,
                            "Request body must be a JSON object",
                            request.path
                        ), 400

                    try:
                        validated_data = model_class.model_validate(json_data)
                    except ValidationError as e:
                        span.set_attribute("validation.result", "validation_error")
                        validation_errors = self.format_validation_errors(e)

                        logger.warning(
                            "Request validation failed",
                            extra={
                                "model": model_class.__name__,
                                "path": request.path,
                                "method": request.method,
                                "errors": validation_errors
                            }
                        )

                        return build_problem(
                            "validation-error",
                            422,
                            f"Request validation failed for {model_class.__name__}",
                            request.path,
                            validation_errors
                        ), 422

                    span.set_attribute("validation.result", "success")
                    return f(validated_data, *args, **kwargs)

            return decorated_function
        return decorator


validation_middleware = ValidationMiddleware()


def validate_json(model_class: Type[BaseModel]) -> Callable:
    """
    Convenience decorator for JSON body validation.

    Args:
        model_class: Pydantic model class

    Returns:
        Decorator function
    """
    return validation_middleware.validate_json_body(model_class)
