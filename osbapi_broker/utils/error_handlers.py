"""Error handling utilities for API responses."""

import logging
import time
import uuid
from typing import Dict, Any, Tuple

from flask import Flask, request, jsonify, g
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from osbapi_broker.exceptions import (
    ErrorCode, ServiceBrokerException, ServiceBrokerInvalidOriginatingIdentityException,
    ServiceBrokerOperationInProgressException
)
from osbapi_broker.models.base import ErrorMessage, OperationInProgressMessage, REQUEST_IDENTITY_HEADER

logger = logging.getLogger(__name__)

INTERNAL_ERROR_DESCRIPTION = "An unexpected error occurred while processing the request"


class ErrorResponseFormatter:
    """Maps exceptions to OSBAPI response bodies and status codes."""

    @staticmethod
    def format_osb_error(error: Exception) -> Tuple[Dict[str, Any], int]:
        """Format error for Open Service Broker API compliance.

        Returns:
            Tuple of (response_dict, http_status_code)
        """
        if isinstance(error, ServiceBrokerOperationInProgressException) and error.operation_body:
            return OperationInProgressMessage(operation=error.operation).to_dict(), error.http_status

        if isinstance(error, ServiceBrokerException):
            return error.to_dict(), error.http_status

        if isinstance(error, ValidationError):
            return ErrorMessage(
                error=ErrorCode.UNPROCESSABLE_ENTITY.value,
                description=ErrorResponseFormatter.describe_validation_error(error)
            ).to_dict(), 422

        if isinstance(error, HTTPException):
            return ErrorMessage(
                error=error.name.replace(' ', ''),
                description=error.description
            ).to_dict(), error.code or 500

        return ErrorMessage(
            error=ErrorCode.INTERNAL_ERROR.value,
            description=INTERNAL_ERROR_DESCRIPTION
        ).to_dict(), 500

    @staticmethod
    def describe_validation_error(error: ValidationError) -> str:
        """Describe a request body validation failure by field name."""
        errors = error.errors()
        fields = ['.'.join(str(part) for part in e['loc']) or 'body' for e in errors]
        if all(e['type'] == 'missing' for e in errors):
            return f"Missing required fields: {', '.join(fields)}"
        return f"Invalid fields in request body: {', '.join(fields)}"


def register_error_handlers(app: Flask):
    """Register global error handlers for Flask app.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(ServiceBrokerInvalidOriginatingIdentityException)
    def handle_invalid_originating_identity(error: ServiceBrokerInvalidOriginatingIdentityException):
        """Handle malformed originating identity headers."""
        logger.error(f"Unprocessable request received: {error}")
        body, status = ErrorResponseFormatter.format_osb_error(error)
        return jsonify(body), status

    @app.errorhandler(ServiceBrokerException)
    def handle_service_broker_error(error: ServiceBrokerException):
        """Handle broker exceptions."""
        logger.debug(f"Service broker error: {error}")
        body, status = ErrorResponseFormatter.format_osb_error(error)
        return jsonify(body), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """Handle malformed request bodies."""
        logger.error(f"Unprocessable request received: {error}")
        body, status = ErrorResponseFormatter.format_osb_error(error)
        return jsonify(body), status

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        """Handle routing errors such as 404 and 405."""
        body, status = ErrorResponseFormatter.format_osb_error(error)
        return jsonify(body), status

    @app.errorhandler(Exception)
    def handle_generic_error(error: Exception):
        """Handle unexpected errors."""
        logger.error(f"Unexpected error: {error}", exc_info=True)
        body, status = ErrorResponseFormatter.format_osb_error(error)
        return jsonify(body), status


class RequestContextLogger:
    """Middleware logging one line per request."""

    def __init__(self, app: Flask = None):
        """Initialize the middleware.

        Args:
            app: Flask application instance
        """
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask):
        """Initialize the middleware with the app."""

        @app.before_request
        def before_request():
            """Add request ID and start time."""
            g.request_id = str(uuid.uuid4())
            g.start_time = time.monotonic()

        @app.after_request
        def after_request(response):
            """Log request completion."""
            if 'start_time' in g:
                duration = time.monotonic() - g.start_time

                logger.info(
                    f"{request.method} {request.path} -> {response.status_code} "
                    f"({duration:.3f}s)",
                    extra={
                        'request_id': g.get('request_id'),
                        'request_identity': request.headers.get(REQUEST_IDENTITY_HEADER),
                        'method': request.method,
                        'path': request.path,
                        'status_code': response.status_code,
                        'duration_seconds': duration
                    }
                )

            return response
