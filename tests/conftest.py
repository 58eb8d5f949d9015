"""Pytest configuration and fixtures."""

import base64
import json

import pytest
import yaml
from unittest.mock import AsyncMock

from osbapi_broker.config import APIConfig
from osbapi_broker.models.catalog import Catalog
from osbapi_broker.services.base import ServiceInstanceBindingService, ServiceInstanceService


CATALOG_DATA = {
    "services": [
        {
            "id": "db-service",
            "name": "database",
            "description": "Managed database",
            "bindable": True,
            "plan_updateable": True,
            "tags": ["sql"],
            "plans": [
                {
                    "id": "small",
                    "name": "small",
                    "description": "Small database",
                    "free": True,
                    "maintenance_info": {"version": "1.0.0"}
                },
                {
                    "id": "large",
                    "name": "large",
                    "description": "Large database",
                    "free": False,
                    "bindable": False,
                    "plan_updateable": False
                }
            ]
        },
        {
            "id": "cache-service",
            "name": "cache",
            "description": "In-memory cache",
            "plans": [
                {"id": "cache-basic", "name": "basic", "description": "Basic cache"}
            ]
        }
    ]
}


def encode_identity(platform: str, properties) -> str:
    """Build an originating identity header value."""
    encoded = base64.b64encode(json.dumps(properties).encode('utf-8')).decode('ascii')
    return f"{platform} {encoded}"


@pytest.fixture
def catalog():
    """Catalog with two services."""
    return Catalog.model_validate(CATALOG_DATA)


@pytest.fixture
def mock_instance_service():
    """Mock service instance service."""
    return AsyncMock(spec=ServiceInstanceService)


@pytest.fixture
def mock_binding_service():
    """Mock service binding service."""
    return AsyncMock(spec=ServiceInstanceBindingService)


@pytest.fixture
def api_config():
    """API configuration without version checks or CORS."""
    return APIConfig(debug=True, enable_cors=False, broker_api_version=None)


@pytest.fixture
def catalog_file(tmp_path):
    """Catalog written as a YAML file under a ``catalog`` key."""
    path = tmp_path / "catalog.yml"
    path.write_text(yaml.safe_dump({"catalog": CATALOG_DATA}))
    return path
