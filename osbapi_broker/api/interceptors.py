"""Request interceptors applied to every broker endpoint."""

import logging
from typing import Optional

from flask import Flask, request

from osbapi_broker.exceptions import (
    ServiceBrokerApiVersionException, ServiceBrokerApiVersionMissingException
)
from osbapi_broker.models.base import API_VERSION_HEADER, REQUEST_IDENTITY_HEADER

logger = logging.getLogger(__name__)

ANY_VERSION = "*"


class ApiVersionInterceptor:
    """Rejects requests whose ``X-Broker-Api-Version`` does not match the broker's.

    No check is made when the broker version is None or ``*``.
    """

    def __init__(self, broker_api_version: Optional[str] = None, app: Flask = None):
        self.broker_api_version = broker_api_version
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask):

        @app.before_request
        def check_api_version():
            self.check(request.headers.get(API_VERSION_HEADER))

    def check(self, provided_version: Optional[str]) -> None:
        """Raise if ``provided_version`` is not acceptable."""
        if self.broker_api_version is None or self.broker_api_version == ANY_VERSION:
            return
        if provided_version is None:
            raise ServiceBrokerApiVersionMissingException(self.broker_api_version)
        if provided_version != self.broker_api_version:
            logger.debug(f"Rejecting request with broker API version {provided_version}")
            raise ServiceBrokerApiVersionException(self.broker_api_version, provided_version)


class RequestIdentityInterceptor:
    """Echoes ``X-Broker-API-Request-Identity`` back on the response."""

    def __init__(self, app: Flask = None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask):

        @app.after_request
        def echo_request_identity(response):
            request_identity = request.headers.get(REQUEST_IDENTITY_HEADER)
            if request_identity:
                response.headers[REQUEST_IDENTITY_HEADER] = request_identity
            return response
