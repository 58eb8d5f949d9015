"""Controllers translating platform requests into service calls.

Controllers do not depend on the web framework. The Flask routes in
``osbapi_broker.api.service_broker`` extract path, query, header and body
values, hand them to a controller method and serialize the returned
``ControllerResponse``. Exceptions that are not part of a method's status
mapping propagate to the error handlers.
"""

import base64
import json
import logging
from dataclasses import dataclass
from typing import Dict, Any, NamedTuple, Optional

from osbapi_broker.exceptions import (
    ServiceBrokerInvalidOriginatingIdentityException,
    ServiceDefinitionDoesNotExistException,
    ServiceDefinitionPlanDoesNotExistException,
    ServiceInstanceBindingDoesNotExistException,
    ServiceInstanceDoesNotExistException
)
from osbapi_broker.models.base import OperationState, ServiceBrokerRequest
from osbapi_broker.models.binding import (
    CreateServiceInstanceBindingRequest, CreateServiceInstanceBindingResponse,
    DeleteServiceInstanceBindingRequest, GetLastServiceBindingOperationRequest,
    GetServiceInstanceBindingRequest
)
from osbapi_broker.models.catalog import Plan, ServiceDefinition
from osbapi_broker.models.context import Context
from osbapi_broker.models.instance import (
    CreateServiceInstanceRequest, CreateServiceInstanceResponse,
    DeleteServiceInstanceRequest, GetLastServiceOperationRequest,
    GetServiceInstanceRequest, UpdateServiceInstanceRequest
)
from osbapi_broker.services.base import ServiceInstanceBindingService, ServiceInstanceService
from osbapi_broker.services.catalog import CatalogService

logger = logging.getLogger(__name__)


class ControllerResponse(NamedTuple):
    """JSON body and HTTP status returned by a controller method."""
    body: Dict[str, Any]
    status: int


@dataclass
class RequestEnvelope:
    """Values taken from the path prefix and headers of a request."""
    platform_instance_id: Optional[str] = None
    api_info_location: Optional[str] = None
    originating_identity: Optional[str] = None
    request_identity: Optional[str] = None


class BaseController:
    """Catalog lookups and request preparation shared by all controllers."""

    def __init__(self, catalog_service: CatalogService):
        self.catalog_service = catalog_service

    async def get_service_definition(self, service_definition_id: Optional[str]) -> Optional[ServiceDefinition]:
        return await self.catalog_service.get_service_definition(service_definition_id)

    async def get_required_service_definition(self, service_definition_id: Optional[str]) -> ServiceDefinition:
        """Look up a service definition.

        Raises:
            ServiceDefinitionDoesNotExistException: if the catalog has no such service
        """
        service_definition = await self.get_service_definition(service_definition_id)
        if service_definition is None:
            raise ServiceDefinitionDoesNotExistException(service_definition_id)
        return service_definition

    def get_plan(self, service_definition: Optional[ServiceDefinition], plan_id: Optional[str]) -> Optional[Plan]:
        if service_definition is None:
            return None
        return service_definition.find_plan(plan_id)

    def get_required_plan(self, service_definition: ServiceDefinition, plan_id: Optional[str]) -> Plan:
        """Look up a plan of a service definition.

        Raises:
            ServiceDefinitionPlanDoesNotExistException: if the service has no such plan
        """
        plan = self.get_plan(service_definition, plan_id)
        if plan is None:
            raise ServiceDefinitionPlanDoesNotExistException(plan_id)
        return plan

    def parse_originating_identity(self, header_value: Optional[str]) -> Optional[Context]:
        """Parse an ``X-Broker-API-Originating-Identity`` header.

        The value is ``<platform> <base64-encoded JSON object>``.

        Raises:
            ServiceBrokerInvalidOriginatingIdentityException: if the value is malformed
        """
        if header_value is None:
            return None

        parts = header_value.split(" ", 1)
        if len(parts) != 2 or not parts[0]:
            raise ServiceBrokerInvalidOriginatingIdentityException(
                "Expected platform and properties values in header")
        platform, encoded_properties = parts

        try:
            decoded = base64.b64decode(encoded_properties, validate=True).decode('utf-8')
            properties = json.loads(decoded)
        except (ValueError, RecursionError) as e:
            raise ServiceBrokerInvalidOriginatingIdentityException(
                f"Error decoding JSON properties from header value {header_value}", cause=e) from e

        if not isinstance(properties, dict):
            raise ServiceBrokerInvalidOriginatingIdentityException(
                f"Expected a JSON object in header value {header_value}")

        return Context.of(platform, properties)

    def apply_envelope(self, request: ServiceBrokerRequest, envelope: Optional[RequestEnvelope]) -> None:
        """Copy envelope values onto a request, parsing the originating identity."""
        if envelope is None:
            return
        request.platform_instance_id = envelope.platform_instance_id
        request.api_info_location = envelope.api_info_location
        request.originating_identity = self.parse_originating_identity(envelope.originating_identity)
        request.request_identity = envelope.request_identity


class CatalogController(BaseController):
    """Serves the service catalog."""

    async def get_catalog(self) -> ControllerResponse:
        catalog = await self.catalog_service.get_catalog()
        return ControllerResponse(catalog.to_dict(), 200)


class ServiceInstanceController(BaseController):
    """Provisioning endpoints."""

    def __init__(self, catalog_service: CatalogService, service: ServiceInstanceService):
        super().__init__(catalog_service)
        self.service = service

    async def create_service_instance(
        self,
        service_instance_id: str,
        request: CreateServiceInstanceRequest,
        accepts_incomplete: bool = False,
        envelope: Optional[RequestEnvelope] = None
    ) -> ControllerResponse:
        service_definition = await self.get_required_service_definition(request.service_definition_id)
        plan = self.get_required_plan(service_definition, request.plan_id)

        request.service_instance_id = service_instance_id
        request.service_definition = service_definition
        request.plan = plan
        request.async_accepted = accepts_incomplete
        self.apply_envelope(request, envelope)

        logger.debug(f"Creating a service instance: request={request!r}")
        response = await self.service.create_service_instance(request)
        logger.debug(f"Creating a service instance succeeded: "
                     f"serviceInstanceId={service_instance_id}, response={response!r}")

        return ControllerResponse(response.to_dict(), self._create_status(response))

    @staticmethod
    def _create_status(response: CreateServiceInstanceResponse) -> int:
        if response.is_async:
            return 202
        if response.instance_existed:
            return 200
        return 201

    async def get_service_instance(
        self,
        service_instance_id: str,
        service_definition_id: Optional[str] = None,
        plan_id: Optional[str] = None,
        envelope: Optional[RequestEnvelope] = None
    ) -> ControllerResponse:
        service_definition = await self.get_service_definition(service_definition_id)
        request = GetServiceInstanceRequest(
            service_instance_id=service_instance_id,
            service_definition_id=service_definition_id,
            plan_id=plan_id,
            service_definition=service_definition,
            plan=self.get_plan(service_definition, plan_id)
        )
        self.apply_envelope(request, envelope)

        logger.debug(f"Getting a service instance: request={request!r}")
        try:
            response = await self.service.get_service_instance(request)
        except ServiceInstanceDoesNotExistException as e:
            logger.debug(f"Service instance does not exist: {e}")
            return ControllerResponse({}, 404)
        logger.debug(f"Getting a service instance succeeded: "
                     f"serviceInstanceId={service_instance_id}, response={response!r}")

        return ControllerResponse(response.to_dict(), 200)

    async def get_last_operation(
        self,
        service_instance_id: str,
        service_definition_id: Optional[str] = None,
        plan_id: Optional[str] = None,
        operation: Optional[str] = None,
        envelope: Optional[RequestEnvelope] = None
    ) -> ControllerResponse:
        request = GetLastServiceOperationRequest(
            service_instance_id=service_instance_id,
            service_definition_id=service_definition_id,
            plan_id=plan_id,
            operation=operation
        )
        self.apply_envelope(request, envelope)

        logger.debug(f"Getting service instance status: request={request!r}")
        try:
            response = await self.service.get_last_operation(request)
        except ServiceInstanceDoesNotExistException as e:
            logger.debug(f"Service instance does not exist: {e}")
            return ControllerResponse(e.to_dict(), 400)
        logger.debug(f"Getting service instance status succeeded: "
                     f"serviceInstanceId={service_instance_id}, response={response!r}")

        is_successful_delete = response.state == OperationState.SUCCEEDED and response.delete_operation
        return ControllerResponse(response.to_dict(), 410 if is_successful_delete else 200)

    async def update_service_instance(
        self,
        service_instance_id: str,
        request: UpdateServiceInstanceRequest,
        accepts_incomplete: bool = False,
        envelope: Optional[RequestEnvelope] = None
    ) -> ControllerResponse:
        service_definition = await self.get_required_service_definition(request.service_definition_id)

        request.service_instance_id = service_instance_id
        request.service_definition = service_definition
        request.plan = self.get_plan(service_definition, request.plan_id)
        request.async_accepted = accepts_incomplete
        self.apply_envelope(request, envelope)

        logger.debug(f"Updating a service instance: request={request!r}")
        response = await self.service.update_service_instance(request)
        logger.debug(f"Updating a service instance succeeded: "
                     f"serviceInstanceId={service_instance_id}, response={response!r}")

        return ControllerResponse(response.to_dict(), 202 if response.is_async else 200)

    async def delete_service_instance(
        self,
        service_instance_id: str,
        service_definition_id: Optional[str],
        plan_id: Optional[str],
        accepts_incomplete: bool = False,
        envelope: Optional[RequestEnvelope] = None
    ) -> ControllerResponse:
        service_definition = await self.get_required_service_definition(service_definition_id)
        plan = self.get_required_plan(service_definition, plan_id)

        request = DeleteServiceInstanceRequest(
            service_instance_id=service_instance_id,
            service_definition_id=service_definition_id,
            plan_id=plan_id,
            service_definition=service_definition,
            plan=plan,
            async_accepted=accepts_incomplete
        )
        self.apply_envelope(request, envelope)

        logger.debug(f"Deleting a service instance: request={request!r}")
        try:
            response = await self.service.delete_service_instance(request)
        except ServiceInstanceDoesNotExistException as e:
            logger.debug(f"Service instance does not exist: {e}")
            return ControllerResponse({}, 410)
        logger.debug(f"Deleting a service instance succeeded: "
                     f"serviceInstanceId={service_instance_id}, response={response!r}")

        return ControllerResponse(response.to_dict(), 202 if response.is_async else 200)


class ServiceInstanceBindingController(BaseController):
    """Binding endpoints."""

    def __init__(self, catalog_service: CatalogService, service: ServiceInstanceBindingService):
        super().__init__(catalog_service)
        self.service = service

    async def create_service_instance_binding(
        self,
        service_instance_id: str,
        binding_id: str,
        request: CreateServiceInstanceBindingRequest,
        accepts_incomplete: bool = False,
        envelope: Optional[RequestEnvelope] = None
    ) -> ControllerResponse:
        service_definition = await self.get_required_service_definition(request.service_definition_id)
        plan = self.get_required_plan(service_definition, request.plan_id)

        request.service_instance_id = service_instance_id
        request.binding_id = binding_id
        request.service_definition = service_definition
        request.plan = plan
        request.async_accepted = accepts_incomplete
        self.apply_envelope(request, envelope)

        logger.debug(f"Creating a service instance binding: request={request!r}")
        response = await self.service.create_service_instance_binding(request)
        logger.debug(f"Creating a service instance binding succeeded: "
                     f"serviceInstanceId={service_instance_id}, bindingId={binding_id}, response={response!r}")

        return ControllerResponse(response.to_dict(), self._create_status(response))

    @staticmethod
    def _create_status(response: CreateServiceInstanceBindingResponse) -> int:
        if response.is_async:
            return 202
        if response.binding_existed:
            return 200
        return 201

    async def get_service_instance_binding(
        self,
        service_instance_id: str,
        binding_id: str,
        service_definition_id: Optional[str] = None,
        plan_id: Optional[str] = None,
        envelope: Optional[RequestEnvelope] = None
    ) -> ControllerResponse:
        service_definition = await self.get_service_definition(service_definition_id)
        request = GetServiceInstanceBindingRequest(
            service_instance_id=service_instance_id,
            binding_id=binding_id,
            service_definition_id=service_definition_id,
            plan_id=plan_id,
            service_definition=service_definition,
            plan=self.get_plan(service_definition, plan_id)
        )
        self.apply_envelope(request, envelope)

        logger.debug(f"Getting a service instance binding: request={request!r}")
        try:
            response = await self.service.get_service_instance_binding(request)
        except (ServiceInstanceDoesNotExistException, ServiceInstanceBindingDoesNotExistException) as e:
            logger.debug(f"Service instance or binding does not exist: {e}")
            return ControllerResponse({}, 404)
        logger.debug(f"Getting a service instance binding succeeded: bindingId={binding_id}")

        return ControllerResponse(response.to_dict(), 200)

    async def get_last_operation(
        self,
        service_instance_id: str,
        binding_id: str,
        service_definition_id: Optional[str] = None,
        plan_id: Optional[str] = None,
        operation: Optional[str] = None,
        envelope: Optional[RequestEnvelope] = None
    ) -> ControllerResponse:
        request = GetLastServiceBindingOperationRequest(
            service_instance_id=service_instance_id,
            binding_id=binding_id,
            service_definition_id=service_definition_id,
            plan_id=plan_id,
            operation=operation
        )
        self.apply_envelope(request, envelope)

        logger.debug(f"Getting service instance binding status: request={request!r}")
        try:
            response = await self.service.get_last_operation(request)
        except (ServiceInstanceDoesNotExistException, ServiceInstanceBindingDoesNotExistException) as e:
            logger.debug(f"Service instance or binding does not exist: {e}")
            return ControllerResponse(e.to_dict(), 400)
        logger.debug(f"Getting service instance binding status succeeded: "
                     f"bindingId={binding_id}, response={response!r}")

        is_successful_delete = response.state == OperationState.SUCCEEDED and response.delete_operation
        return ControllerResponse(response.to_dict(), 410 if is_successful_delete else 200)

    async def delete_service_instance_binding(
        self,
        service_instance_id: str,
        binding_id: str,
        service_definition_id: Optional[str],
        plan_id: Optional[str],
        accepts_incomplete: bool = False,
        envelope: Optional[RequestEnvelope] = None
    ) -> ControllerResponse:
        service_definition = await self.get_required_service_definition(service_definition_id)
        plan = self.get_required_plan(service_definition, plan_id)

        request = DeleteServiceInstanceBindingRequest(
            service_instance_id=service_instance_id,
            binding_id=binding_id,
            service_definition_id=service_definition_id,
            plan_id=plan_id,
            service_definition=service_definition,
            plan=plan,
            async_accepted=accepts_incomplete
        )
        self.apply_envelope(request, envelope)

        logger.debug(f"Deleting a service instance binding: request={request!r}")
        try:
            response = await self.service.delete_service_instance_binding(request)
        except ServiceInstanceBindingDoesNotExistException as e:
            logger.debug(f"Service instance binding does not exist: {e}")
            return ControllerResponse({}, 410)
        logger.debug(f"Deleting a service instance binding succeeded: "
                     f"bindingId={binding_id}, response={response!r}")

        return ControllerResponse(response.to_dict(), 202 if response.is_async else 200)
