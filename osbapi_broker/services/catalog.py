"""Catalog lookup services."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import yaml

from osbapi_broker.models.catalog import Catalog, ServiceDefinition

logger = logging.getLogger(__name__)


class CatalogService(ABC):
    """Source of the broker's service catalog."""

    @abstractmethod
    async def get_catalog(self) -> Catalog:
        """Return the catalog served at ``/v2/catalog``."""
        pass

    @abstractmethod
    async def get_service_definition(self, service_id: Optional[str]) -> Optional[ServiceDefinition]:
        """Return the service definition with the given ID, or None."""
        pass


class StaticCatalogService(CatalogService):
    """Catalog service backed by a fixed catalog."""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    async def get_catalog(self) -> Catalog:
        return self.catalog

    async def get_service_definition(self, service_id: Optional[str]) -> Optional[ServiceDefinition]:
        return self.catalog.find_service_definition(service_id)


def load_catalog(path: Union[str, Path]) -> Catalog:
    """Load a catalog from a YAML or JSON file.

    The file either holds a top-level ``catalog`` mapping or the catalog itself,
    i.e. a mapping with a ``services`` list.

    Raises:
        ValueError: if the file does not describe a catalog
        pydantic.ValidationError: if the catalog content is invalid
    """
    path = Path(path)
    with open(path, 'r') as f:
        if path.suffix == '.json':
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Catalog file {path} must contain a mapping")
    if 'catalog' in data:
        data = data['catalog']
    if not isinstance(data, dict) or 'services' not in data:
        raise ValueError(f"Catalog file {path} has no 'services' list")

    catalog = Catalog.model_validate(data)
    logger.info(f"Loaded catalog with {len(catalog.services)} services from {path}")
    return catalog
