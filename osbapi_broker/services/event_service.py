"""Domain service wrappers running event flows around each operation."""

import logging
from typing import Any, Awaitable, Callable, Optional

from osbapi_broker.services.base import ServiceInstanceBindingService, ServiceInstanceService
from osbapi_broker.services.events import EventFlowRegistries, EventFlowRegistry

logger = logging.getLogger(__name__)


async def run_with_flows(
    registry: EventFlowRegistry,
    request: Any,
    operation: Callable[[Any], Awaitable[Any]]
) -> Any:
    """Run ``operation`` surrounded by the flows of ``registry``.

    Initialization flows run first, then the operation, then the completion
    flows. A failure in any of these steps skips the steps after it, runs the
    error flows and re-raises the failure.
    """
    try:
        await registry.run_initialization_flows(request)
        response = await operation(request)
        await registry.run_completion_flows(request, response)
    except Exception as e:
        logger.debug(f"{registry.name} failed, running error flows: {e!r}")
        await registry.run_error_flows(request, e)
        raise
    return response


class ServiceInstanceEventService(ServiceInstanceService):
    """Service instance service decorated with event flows."""

    def __init__(self, service: ServiceInstanceService, registries: Optional[EventFlowRegistries] = None):
        self.service = service
        self.registries = registries or EventFlowRegistries()

    async def create_service_instance(self, request):
        return await run_with_flows(
            self.registries.create_instance, request, self.service.create_service_instance)

    async def get_service_instance(self, request):
        return await self.service.get_service_instance(request)

    async def get_last_operation(self, request):
        return await run_with_flows(
            self.registries.async_operation, request, self.service.get_last_operation)

    async def update_service_instance(self, request):
        return await run_with_flows(
            self.registries.update_instance, request, self.service.update_service_instance)

    async def delete_service_instance(self, request):
        return await run_with_flows(
            self.registries.delete_instance, request, self.service.delete_service_instance)


class ServiceInstanceBindingEventService(ServiceInstanceBindingService):
    """Service binding service decorated with event flows."""

    def __init__(self, service: ServiceInstanceBindingService, registries: Optional[EventFlowRegistries] = None):
        self.service = service
        self.registries = registries or EventFlowRegistries()

    async def create_service_instance_binding(self, request):
        return await run_with_flows(
            self.registries.create_instance_binding, request, self.service.create_service_instance_binding)

    async def get_service_instance_binding(self, request):
        return await self.service.get_service_instance_binding(request)

    async def get_last_operation(self, request):
        return await run_with_flows(
            self.registries.async_operation_binding, request, self.service.get_last_operation)

    async def delete_service_instance_binding(self, request):
        return await run_with_flows(
            self.registries.delete_instance_binding, request, self.service.delete_service_instance_binding)
