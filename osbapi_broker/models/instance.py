"""Service instance request and response models."""

from typing import Dict, Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from osbapi_broker.models.base import (
    AsyncServiceBrokerRequest, AsyncServiceBrokerResponse, OperationState,
    ParameterizedRequestMixin, ServiceBrokerRequest, ServiceBrokerResponse
)
from osbapi_broker.models.catalog import MaintenanceInfo, Plan, ServiceDefinition
from osbapi_broker.models.context import Context


class CreateServiceInstanceRequest(ParameterizedRequestMixin, AsyncServiceBrokerRequest):
    """Service instance provisioning request."""
    service_definition_id: str = Field(..., alias='service_id', min_length=1)
    plan_id: str = Field(..., min_length=1)
    organization_guid: Optional[str] = None
    space_guid: Optional[str] = None
    context: Optional[Context] = None
    parameters: Optional[Dict[str, Any]] = None
    maintenance_info: Optional[MaintenanceInfo] = None

    service_instance_id: Optional[str] = Field(default=None, exclude=True)
    service_definition: Optional[ServiceDefinition] = Field(default=None, exclude=True)
    plan: Optional[Plan] = Field(default=None, exclude=True)


class GetServiceInstanceRequest(ServiceBrokerRequest):
    """Request to fetch a service instance."""
    service_instance_id: Optional[str] = None
    service_definition_id: Optional[str] = None
    plan_id: Optional[str] = None
    service_definition: Optional[ServiceDefinition] = Field(default=None, exclude=True)
    plan: Optional[Plan] = Field(default=None, exclude=True)


class PreviousValues(BaseModel):
    """Values of the instance before an update."""

    model_config = ConfigDict(populate_by_name=True)

    service_definition_id: Optional[str] = Field(default=None, alias='service_id')
    plan_id: Optional[str] = None
    organization_id: Optional[str] = None
    space_id: Optional[str] = None
    maintenance_info: Optional[MaintenanceInfo] = None


class UpdateServiceInstanceRequest(ParameterizedRequestMixin, AsyncServiceBrokerRequest):
    """Service instance update request."""
    service_definition_id: str = Field(..., alias='service_id', min_length=1)
    plan_id: Optional[str] = None
    context: Optional[Context] = None
    parameters: Optional[Dict[str, Any]] = None
    previous_values: Optional[PreviousValues] = None
    maintenance_info: Optional[MaintenanceInfo] = None

    service_instance_id: Optional[str] = Field(default=None, exclude=True)
    service_definition: Optional[ServiceDefinition] = Field(default=None, exclude=True)
    plan: Optional[Plan] = Field(default=None, exclude=True)


class DeleteServiceInstanceRequest(AsyncServiceBrokerRequest):
    """Service instance deprovisioning request."""
    service_instance_id: Optional[str] = None
    service_definition_id: Optional[str] = None
    plan_id: Optional[str] = None
    service_definition: Optional[ServiceDefinition] = Field(default=None, exclude=True)
    plan: Optional[Plan] = Field(default=None, exclude=True)


class GetLastServiceOperationRequest(ServiceBrokerRequest):
    """Request for the state of the last asynchronous instance operation."""
    service_instance_id: Optional[str] = None
    service_definition_id: Optional[str] = None
    plan_id: Optional[str] = None
    operation: Optional[str] = None


class ServiceInstanceMetadata(BaseModel):
    """Labels and attributes reported for a service instance."""
    labels: Dict[str, Any] = Field(default_factory=dict)
    attributes: Dict[str, Any] = Field(default_factory=dict)


class CreateServiceInstanceResponse(AsyncServiceBrokerResponse):
    """Service instance provisioning response.

    ``instance_existed`` tells the controller that an identical instance was
    already provisioned, which is answered with 200 instead of 201.
    """
    dashboard_url: Optional[str] = None
    instance_existed: bool = Field(default=False, exclude=True)
    metadata: Optional[ServiceInstanceMetadata] = None


class UpdateServiceInstanceResponse(AsyncServiceBrokerResponse):
    """Service instance update response."""
    dashboard_url: Optional[str] = None
    metadata: Optional[ServiceInstanceMetadata] = None


class DeleteServiceInstanceResponse(AsyncServiceBrokerResponse):
    """Service instance deprovisioning response."""


class GetServiceInstanceResponse(ServiceBrokerResponse):
    """Service instance fetch response."""
    service_definition_id: Optional[str] = Field(default=None, alias='service_id')
    plan_id: Optional[str] = None
    dashboard_url: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    maintenance_info: Optional[MaintenanceInfo] = None
    metadata: Optional[ServiceInstanceMetadata] = None


class GetLastServiceOperationResponse(ServiceBrokerResponse):
    """Last operation status response."""
    state: OperationState = Field(..., description="State of the operation")
    description: Optional[str] = None
    delete_operation: bool = Field(default=False, exclude=True)
    instance_usable: Optional[bool] = None
    update_repeatable: Optional[bool] = None
