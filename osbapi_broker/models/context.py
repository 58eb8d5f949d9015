"""Platform context carried on requests.

A context is a ``platform`` discriminant plus an open bag of properties. On the
wire it is a flat JSON object::

    {"platform": "cloudfoundry", "organization_guid": "...", "space_guid": "..."}

Platform-specific fields are read with the helper functions at the bottom of
this module, which return None for contexts of another platform.
"""

from enum import Enum
from typing import Dict, Any, Optional

from pydantic import BaseModel, Field, model_serializer, model_validator


CLOUD_FOUNDRY_PLATFORM = "cloudfoundry"
KUBERNETES_PLATFORM = "kubernetes"


class ContextKind(str, Enum):
    """Kind of platform a context was sent by."""
    CLOUD_FOUNDRY = CLOUD_FOUNDRY_PLATFORM
    KUBERNETES = KUBERNETES_PLATFORM
    GENERIC = "generic"


class Context(BaseModel):
    """Platform-tagged map of properties.

    Validation always reads the flat wire form, so a platform property named
    ``properties`` stays a property. Build contexts in code with :meth:`of`.
    """
    platform: Optional[str] = None
    properties: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode='before')
    @classmethod
    def split_platform(cls, data):
        """Split the flat wire form into ``platform`` and ``properties``."""
        if not isinstance(data, dict):
            return data
        properties = dict(data)
        platform = properties.pop('platform', None)
        return {'platform': platform, 'properties': properties}

    @classmethod
    def of(cls, platform: Optional[str], properties: Optional[Dict[str, Any]] = None) -> 'Context':
        """Build a context from a platform and its properties."""
        return cls.model_validate({**(properties or {}), 'platform': platform})

    @model_serializer
    def serialize(self) -> Dict[str, Any]:
        data = dict(self.properties)
        if self.platform is not None:
            data['platform'] = self.platform
        return data

    @property
    def kind(self) -> ContextKind:
        """Platform kind selected by the ``platform`` value."""
        if self.platform == CLOUD_FOUNDRY_PLATFORM:
            return ContextKind.CLOUD_FOUNDRY
        if self.platform == KUBERNETES_PLATFORM:
            return ContextKind.KUBERNETES
        return ContextKind.GENERIC

    def get_property(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)


def _platform_property(context: Optional[Context], kind: ContextKind, *keys: str) -> Optional[Any]:
    if context is None or context.kind is not kind:
        return None
    for key in keys:
        if key in context.properties:
            return context.properties[key]
    return None


def organization_guid(context: Optional[Context]) -> Optional[str]:
    """Cloud Foundry organization GUID."""
    return _platform_property(context, ContextKind.CLOUD_FOUNDRY, 'organization_guid', 'organizationGuid')


def organization_name(context: Optional[Context]) -> Optional[str]:
    """Cloud Foundry organization name."""
    return _platform_property(context, ContextKind.CLOUD_FOUNDRY, 'organization_name', 'organizationName')


def space_guid(context: Optional[Context]) -> Optional[str]:
    """Cloud Foundry space GUID."""
    return _platform_property(context, ContextKind.CLOUD_FOUNDRY, 'space_guid', 'spaceGuid')


def space_name(context: Optional[Context]) -> Optional[str]:
    """Cloud Foundry space name."""
    return _platform_property(context, ContextKind.CLOUD_FOUNDRY, 'space_name', 'spaceName')


def instance_name(context: Optional[Context]) -> Optional[str]:
    """Instance name given by a Cloud Foundry or Kubernetes platform."""
    return (_platform_property(context, ContextKind.CLOUD_FOUNDRY, 'instance_name', 'instanceName')
            or _platform_property(context, ContextKind.KUBERNETES, 'instance_name', 'instanceName'))


def namespace(context: Optional[Context]) -> Optional[str]:
    """Kubernetes namespace."""
    return _platform_property(context, ContextKind.KUBERNETES, 'namespace')


def cluster_id(context: Optional[Context]) -> Optional[str]:
    """Kubernetes cluster ID."""
    return _platform_property(context, ContextKind.KUBERNETES, 'clusterid', 'cluster_id')
