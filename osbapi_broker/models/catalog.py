"""Catalog data models served at ``/v2/catalog``."""

import re
from enum import Enum
from typing import Dict, Any, Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


SEMANTIC_VERSION_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(-(0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(\.(0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*)?"
    r"(\+[0-9a-zA-Z-]+(\.[0-9a-zA-Z-]+)*)?$"
)


class CatalogModel(BaseModel):
    """Base for immutable catalog objects."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to OSBAPI JSON, omitting unset optional fields."""
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


class ServiceDefinitionRequires(str, Enum):
    """Permissions a service can require from the platform."""
    SYSLOG_DRAIN = "syslog_drain"
    ROUTE_FORWARDING = "route_forwarding"
    VOLUME_MOUNT = "volume_mount"


class MaintenanceInfo(CatalogModel):
    """Maintenance information of a plan."""
    version: str = Field(..., description="Semantic version 2.0 of the plan's maintenance level")
    description: Optional[str] = None

    @field_validator('version')
    @classmethod
    def validate_version(cls, v):
        """Validate the semantic version."""
        if not SEMANTIC_VERSION_PATTERN.match(v):
            raise ValueError("Version provided should comply to semantic version v2 specification")
        return v


class DashboardClient(CatalogModel):
    """OAuth client used by a service dashboard."""
    id: str = Field(..., description="OAuth client ID")
    secret: Optional[str] = None
    redirect_uri: Optional[str] = None


class MethodSchema(CatalogModel):
    """JSON schema for the parameters of one method."""
    parameters: Dict[str, Any] = Field(default_factory=dict)


class ServiceInstanceSchema(CatalogModel):
    """Schemas for service instance create and update."""
    create: Optional[MethodSchema] = None
    update: Optional[MethodSchema] = None


class ServiceBindingSchema(CatalogModel):
    """Schemas for service binding create."""
    create: Optional[MethodSchema] = None


class Schemas(CatalogModel):
    """Schemas supported by a plan."""
    service_instance: Optional[ServiceInstanceSchema] = None
    service_binding: Optional[ServiceBindingSchema] = None


class Plan(CatalogModel):
    """Service plan definition.

    ``free``, ``bindable`` and ``plan_updateable`` are tri-state: ``None`` means
    the value is inherited from the service definition (or the OSBAPI default),
    which is not the same as ``False``.
    """
    id: str = Field(..., description="Unique identifier for the service plan")
    name: str = Field(..., description="Human-readable name for the service plan")
    description: str = Field(..., description="Description of the service plan")
    metadata: Optional[Dict[str, Any]] = None
    schemas: Optional[Schemas] = None
    free: Optional[bool] = None
    bindable: Optional[bool] = None
    plan_updateable: Optional[bool] = None
    maximum_polling_duration: Optional[int] = Field(default=None, ge=0,
                                                    description="Polling limit in seconds")
    maintenance_info: Optional[MaintenanceInfo] = None


class ServiceDefinition(CatalogModel):
    """Service offering in the catalog."""
    id: str = Field(..., description="Unique identifier for the service")
    name: str = Field(..., description="Name of the service")
    description: str = Field(..., description="Description of the service")
    bindable: bool = False
    plan_updateable: Optional[bool] = None
    instances_retrievable: Optional[bool] = None
    bindings_retrievable: Optional[bool] = None
    allow_context_updates: Optional[bool] = None
    plans: List[Plan] = Field(..., min_length=1, description="Plans of the service")
    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None
    requires: Optional[List[ServiceDefinitionRequires]] = None
    dashboard_client: Optional[DashboardClient] = None

    @field_validator('requires')
    @classmethod
    def validate_requires(cls, v):
        """Drop duplicate permissions while keeping their order."""
        if v is None:
            return v
        return list(dict.fromkeys(v))

    @model_validator(mode='after')
    def validate_unique_plan_ids(self):
        """Reject plans sharing an ID."""
        seen = set()
        for plan in self.plans:
            if plan.id in seen:
                raise ValueError(f"duplicate plan id '{plan.id}' in service '{self.id}'")
            seen.add(plan.id)
        return self

    def find_plan(self, plan_id: Optional[str]) -> Optional[Plan]:
        """Return the plan with the given ID, or None."""
        if plan_id is None:
            return None
        for plan in self.plans:
            if plan.id == plan_id:
                return plan
        return None

    def is_plan_bindable(self, plan: Plan) -> bool:
        """Whether bindings can be created for a plan of this service."""
        if plan.bindable is not None:
            return plan.bindable
        return self.bindable

    def is_plan_updateable(self, plan: Plan) -> bool:
        """Whether instances of a plan of this service can change plans."""
        if plan.plan_updateable is not None:
            return plan.plan_updateable
        return bool(self.plan_updateable)


class Catalog(CatalogModel):
    """Service catalog response."""
    services: List[ServiceDefinition] = Field(default_factory=list, description="List of available services")

    @model_validator(mode='after')
    def validate_unique_service_ids(self):
        """Reject services sharing an ID."""
        seen = set()
        for service in self.services:
            if service.id in seen:
                raise ValueError(f"duplicate service definition id '{service.id}'")
            seen.add(service.id)
        return self

    def find_service_definition(self, service_definition_id: Optional[str]) -> Optional[ServiceDefinition]:
        """Return the service definition with the given ID, or None."""
        for service in self.services:
            if service.id == service_definition_id:
                return service
        return None
