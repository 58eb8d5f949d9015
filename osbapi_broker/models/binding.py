"""Service instance binding request and response models."""

from enum import Enum
from typing import Dict, Any, Optional, List

from pydantic import BaseModel, ConfigDict, Field

from osbapi_broker.models.base import (
    AsyncServiceBrokerRequest, AsyncServiceBrokerResponse, OperationState,
    ParameterizedRequestMixin, ServiceBrokerRequest, ServiceBrokerResponse
)
from osbapi_broker.models.catalog import Plan, ServiceDefinition
from osbapi_broker.models.context import Context


class BindResource(BaseModel):
    """Resource a binding is created for.

    Keys other than ``app_guid`` and ``route`` are kept and exposed through
    ``properties``.
    """

    model_config = ConfigDict(extra='allow')

    app_guid: Optional[str] = None
    route: Optional[str] = None

    @property
    def properties(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class CreateServiceInstanceBindingRequest(ParameterizedRequestMixin, AsyncServiceBrokerRequest):
    """Service binding request."""
    service_definition_id: str = Field(..., alias='service_id', min_length=1)
    plan_id: str = Field(..., min_length=1)
    app_guid: Optional[str] = None
    bind_resource: Optional[BindResource] = None
    context: Optional[Context] = None
    parameters: Optional[Dict[str, Any]] = None

    service_instance_id: Optional[str] = Field(default=None, exclude=True)
    binding_id: Optional[str] = Field(default=None, exclude=True)
    service_definition: Optional[ServiceDefinition] = Field(default=None, exclude=True)
    plan: Optional[Plan] = Field(default=None, exclude=True)


class GetServiceInstanceBindingRequest(ServiceBrokerRequest):
    """Request to fetch a service binding."""
    service_instance_id: Optional[str] = None
    binding_id: Optional[str] = None
    service_definition_id: Optional[str] = None
    plan_id: Optional[str] = None
    service_definition: Optional[ServiceDefinition] = Field(default=None, exclude=True)
    plan: Optional[Plan] = Field(default=None, exclude=True)


class DeleteServiceInstanceBindingRequest(AsyncServiceBrokerRequest):
    """Service unbinding request."""
    service_instance_id: Optional[str] = None
    binding_id: Optional[str] = None
    service_definition_id: Optional[str] = None
    plan_id: Optional[str] = None
    service_definition: Optional[ServiceDefinition] = Field(default=None, exclude=True)
    plan: Optional[Plan] = Field(default=None, exclude=True)


class GetLastServiceBindingOperationRequest(ServiceBrokerRequest):
    """Request for the state of the last asynchronous binding operation."""
    service_instance_id: Optional[str] = None
    binding_id: Optional[str] = None
    service_definition_id: Optional[str] = None
    plan_id: Optional[str] = None
    operation: Optional[str] = None


class BindingMetadata(BaseModel):
    """Expiry information of binding credentials."""
    expires_at: Optional[str] = None
    renew_before: Optional[str] = None


class VolumeMountMode(str, Enum):
    READ_ONLY = "r"
    READ_WRITE = "rw"


class SharedVolumeDevice(BaseModel):
    """Volume device shared between application instances."""
    volume_id: str
    mount_config: Optional[Dict[str, Any]] = None


class VolumeMount(BaseModel):
    """Volume the platform mounts into the bound application."""
    driver: str
    container_dir: str
    mode: VolumeMountMode
    device_type: str = "shared"
    device: SharedVolumeDevice


class EndpointProtocol(str, Enum):
    TCP = "tcp"
    UDP = "udp"
    ALL = "all"


class Endpoint(BaseModel):
    """Network endpoint the bound application connects to."""
    host: str
    ports: List[str] = Field(..., min_length=1)
    protocol: EndpointProtocol = EndpointProtocol.TCP


class CreateServiceInstanceBindingResponse(AsyncServiceBrokerResponse):
    """Service binding response.

    ``binding_existed`` tells the controller that an identical binding was
    already created, which is answered with 200 instead of 201.
    """
    binding_existed: bool = Field(default=False, exclude=True)
    metadata: Optional[BindingMetadata] = None


class CreateServiceInstanceAppBindingResponse(CreateServiceInstanceBindingResponse):
    """Binding response for an application binding."""
    credentials: Optional[Dict[str, Any]] = None
    syslog_drain_url: Optional[str] = None
    volume_mounts: Optional[List[VolumeMount]] = None
    endpoints: Optional[List[Endpoint]] = None


class CreateServiceInstanceRouteBindingResponse(CreateServiceInstanceBindingResponse):
    """Binding response for a route binding."""
    route_service_url: Optional[str] = None


class GetServiceInstanceBindingResponse(ServiceBrokerResponse):
    """Service binding fetch response."""
    parameters: Optional[Dict[str, Any]] = None
    metadata: Optional[BindingMetadata] = None


class GetServiceInstanceAppBindingResponse(GetServiceInstanceBindingResponse):
    credentials: Optional[Dict[str, Any]] = None
    syslog_drain_url: Optional[str] = None
    volume_mounts: Optional[List[VolumeMount]] = None
    endpoints: Optional[List[Endpoint]] = None


class GetServiceInstanceRouteBindingResponse(GetServiceInstanceBindingResponse):
    route_service_url: Optional[str] = None


class DeleteServiceInstanceBindingResponse(AsyncServiceBrokerResponse):
    """Service unbinding response."""


class GetLastServiceBindingOperationResponse(ServiceBrokerResponse):
    """Last binding operation status response."""
    state: OperationState = Field(..., description="State of the operation")
    description: Optional[str] = None
    delete_operation: bool = Field(default=False, exclude=True)
