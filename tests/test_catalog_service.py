"""Tests for catalog loading and lookup."""

import json

import pytest
from pydantic import ValidationError

from conftest import CATALOG_DATA
from osbapi_broker.services.catalog import StaticCatalogService, load_catalog


class TestLoadCatalog:
    """Test reading catalog files."""

    def test_load_yaml_with_catalog_key(self, catalog_file):
        """Test a YAML file with a top-level catalog key."""
        catalog = load_catalog(catalog_file)

        assert [service.id for service in catalog.services] == ['db-service', 'cache-service']
        assert catalog.find_service_definition('db-service').find_plan('small').free is True

    def test_load_bare_json(self, tmp_path):
        """Test a JSON file holding the catalog itself."""
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(CATALOG_DATA))

        catalog = load_catalog(str(path))

        assert len(catalog.services) == 2

    def test_non_mapping_rejected(self, tmp_path):
        """Test a file that is not a mapping."""
        path = tmp_path / "catalog.yml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            load_catalog(path)

    def test_missing_services_rejected(self, tmp_path):
        """Test a mapping without services."""
        path = tmp_path / "catalog.yml"
        path.write_text("catalog:\n  name: nothing\n")

        with pytest.raises(ValueError, match="no 'services' list"):
            load_catalog(path)

    def test_duplicate_ids_rejected(self, tmp_path):
        """Test catalog validation runs on load."""
        services = CATALOG_DATA['services']
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"services": [services[0], services[0]]}))

        with pytest.raises(ValidationError):
            load_catalog(path)


class TestStaticCatalogService:
    """Test the fixed catalog service."""

    @pytest.mark.asyncio
    async def test_lookups(self, catalog):
        """Test the catalog and its services are returned."""
        service = StaticCatalogService(catalog)

        assert await service.get_catalog() is catalog
        assert (await service.get_service_definition('cache-service')).name == 'cache'
        assert await service.get_service_definition('missing') is None
        assert await service.get_service_definition(None) is None
