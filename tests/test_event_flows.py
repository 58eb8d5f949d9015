"""Tests for event flow registries and event services."""

import pytest
from unittest.mock import AsyncMock, Mock

from osbapi_broker.exceptions import ServiceInstanceDoesNotExistException
from osbapi_broker.models.base import OperationState
from osbapi_broker.models.binding import (
    CreateServiceInstanceBindingRequest, CreateServiceInstanceBindingResponse,
    DeleteServiceInstanceBindingRequest, DeleteServiceInstanceBindingResponse
)
from osbapi_broker.models.instance import (
    CreateServiceInstanceRequest, CreateServiceInstanceResponse, GetLastServiceOperationRequest,
    GetLastServiceOperationResponse, GetServiceInstanceRequest, GetServiceInstanceResponse
)
from osbapi_broker.services.base import ServiceInstanceBindingService, ServiceInstanceService
from osbapi_broker.services.event_service import (
    ServiceInstanceBindingEventService, ServiceInstanceEventService
)
from osbapi_broker.services.events import EventFlowRegistries, EventFlowRegistry


def create_request():
    return CreateServiceInstanceRequest(service_id="db-service", plan_id="small")


class TestEventFlowRegistry:
    """Test the flow registry."""

    def test_registration_returns_flow(self):
        """Test registration methods can be used as decorators."""
        registry = EventFlowRegistry()

        @registry.add_initialization_flow
        def flow(request):
            pass

        assert registry.initialization_flows == [flow]
        assert "initialization=1" in repr(registry)

    @pytest.mark.asyncio
    async def test_sync_and_async_flows(self):
        """Test plain functions and coroutine functions are both run."""
        calls = []
        registry = EventFlowRegistry()

        def sync_flow(request, response):
            calls.append(('sync', request, response))

        async def async_flow(request, response):
            calls.append(('async', request, response))

        registry.add_completion_flow(sync_flow)
        registry.add_completion_flow(async_flow)

        await registry.run_completion_flows("req", "resp")

        assert calls == [('sync', 'req', 'resp'), ('async', 'req', 'resp')]

    def test_registries_are_separate(self):
        """Test every operation gets its own registry."""
        registries = EventFlowRegistries()

        registries.create_instance.add_initialization_flow(Mock())

        assert registries.create_instance.name == "create_instance"
        assert registries.async_operation_binding.name == "async_operation_binding"
        assert registries.delete_instance.initialization_flows == []


class TestServiceInstanceEventService:
    """Test flows run around instance operations."""

    @pytest.fixture
    def service(self):
        """Mock domain service."""
        service = AsyncMock(spec=ServiceInstanceService)
        service.create_service_instance.return_value = CreateServiceInstanceResponse()
        return service

    @pytest.fixture
    def registries(self):
        return EventFlowRegistries()

    @pytest.fixture
    def event_service(self, service, registries):
        return ServiceInstanceEventService(service, registries)

    @pytest.mark.asyncio
    async def test_flow_ordering(self, event_service, registries, service):
        """Test flows run in registration order around the operation with the same request."""
        calls = []
        request = create_request()

        async def first(req):
            calls.append(('first', req))

        def second(req):
            calls.append(('second', req))

        async def completion(req, resp):
            calls.append(('completion', req))

        async def operation(req):
            calls.append(('operation', req))
            return CreateServiceInstanceResponse(dashboard_url="https://d")

        service.create_service_instance.side_effect = operation
        registries.create_instance.add_initialization_flow(first)
        registries.create_instance.add_initialization_flow(second)
        registries.create_instance.add_completion_flow(completion)

        response = await event_service.create_service_instance(request)

        assert response.dashboard_url == "https://d"
        assert [name for name, _ in calls] == ['first', 'second', 'operation', 'completion']
        assert all(req is request for _, req in calls)

    @pytest.mark.asyncio
    async def test_initialization_failure_short_circuits(self, event_service, registries, service):
        """Test a failing initialization flow skips later flows and the operation."""
        error = RuntimeError("init failed")
        later_flow = Mock()
        error_flow_a = Mock()
        error_flow_b = AsyncMock()
        completion_flow = Mock()

        registries.create_instance.add_initialization_flow(Mock(side_effect=error))
        registries.create_instance.add_initialization_flow(later_flow)
        registries.create_instance.add_completion_flow(completion_flow)
        registries.create_instance.add_error_flow(error_flow_a)
        registries.create_instance.add_error_flow(error_flow_b)

        request = create_request()
        with pytest.raises(RuntimeError) as exc_info:
            await event_service.create_service_instance(request)

        assert exc_info.value is error
        later_flow.assert_not_called()
        completion_flow.assert_not_called()
        assert service.create_service_instance.await_count == 0
        error_flow_a.assert_called_once_with(request, error)
        error_flow_b.assert_awaited_once_with(request, error)

    @pytest.mark.asyncio
    async def test_operation_failure_runs_error_flows(self, event_service, registries, service):
        """Test a failing operation runs error flows and is re-raised unchanged."""
        error = ServiceInstanceDoesNotExistException("instance-1")
        service.create_service_instance.side_effect = error
        completion_flow = Mock()
        error_flow = Mock()
        registries.create_instance.add_completion_flow(completion_flow)
        registries.create_instance.add_error_flow(error_flow)

        with pytest.raises(ServiceInstanceDoesNotExistException) as exc_info:
            await event_service.create_service_instance(create_request())

        assert exc_info.value is error
        completion_flow.assert_not_called()
        error_flow.assert_called_once()

    @pytest.mark.asyncio
    async def test_completion_failure_fails_operation(self, event_service, registries, service):
        """Test a failing completion flow turns the operation into a failure."""
        error = RuntimeError("completion failed")
        error_flow = Mock()
        registries.create_instance.add_completion_flow(Mock(side_effect=error))
        registries.create_instance.add_error_flow(error_flow)

        request = create_request()
        with pytest.raises(RuntimeError) as exc_info:
            await event_service.create_service_instance(request)

        assert exc_info.value is error
        service.create_service_instance.assert_awaited_once_with(request)
        error_flow.assert_called_once_with(request, error)

    @pytest.mark.asyncio
    async def test_error_flow_failure_replaces_error(self, event_service, registries, service):
        """Test a failing error flow stops the other error flows and propagates."""
        original = RuntimeError("operation failed")
        secondary = ValueError("error flow failed")
        service.create_service_instance.side_effect = original
        later_error_flow = Mock()
        registries.create_instance.add_error_flow(Mock(side_effect=secondary))
        registries.create_instance.add_error_flow(later_error_flow)

        with pytest.raises(ValueError) as exc_info:
            await event_service.create_service_instance(create_request())

        assert exc_info.value is secondary
        assert exc_info.value.__context__ is original
        later_error_flow.assert_not_called()

    @pytest.mark.asyncio
    async def test_last_operation_flows(self, event_service, registries, service):
        """Test last operation uses the async operation registry."""
        response = GetLastServiceOperationResponse(state=OperationState.SUCCEEDED)
        service.get_last_operation.return_value = response
        completion_flow = Mock()
        registries.async_operation.add_completion_flow(completion_flow)

        request = GetLastServiceOperationRequest(service_instance_id="instance-1")
        result = await event_service.get_last_operation(request)

        assert result is response
        completion_flow.assert_called_once_with(request, response)

    @pytest.mark.asyncio
    async def test_get_passes_through(self, event_service, registries, service):
        """Test fetching an instance runs no flows."""
        service.get_service_instance.return_value = GetServiceInstanceResponse(plan_id="small")
        for registry in (registries.create_instance, registries.async_operation):
            registry.add_initialization_flow(Mock(side_effect=AssertionError("flow must not run")))

        result = await event_service.get_service_instance(GetServiceInstanceRequest(service_instance_id="i"))

        assert result.plan_id == "small"

    @pytest.mark.asyncio
    async def test_default_registries(self, service):
        """Test the event service works without registered flows."""
        event_service = ServiceInstanceEventService(service)

        response = await event_service.create_service_instance(create_request())

        assert response == CreateServiceInstanceResponse()


class TestServiceInstanceBindingEventService:
    """Test flows run around binding operations."""

    @pytest.mark.asyncio
    async def test_binding_flows(self):
        """Test create and delete use their own registries."""
        service = AsyncMock(spec=ServiceInstanceBindingService)
        service.create_service_instance_binding.return_value = CreateServiceInstanceBindingResponse()
        service.delete_service_instance_binding.return_value = DeleteServiceInstanceBindingResponse()
        registries = EventFlowRegistries()
        create_flow = Mock()
        delete_flow = Mock()
        registries.create_instance_binding.add_initialization_flow(create_flow)
        registries.delete_instance_binding.add_initialization_flow(delete_flow)
        event_service = ServiceInstanceBindingEventService(service, registries)

        create = CreateServiceInstanceBindingRequest(service_id="s", plan_id="p")
        await event_service.create_service_instance_binding(create)
        create_flow.assert_called_once_with(create)
        delete_flow.assert_not_called()

        delete = DeleteServiceInstanceBindingRequest(binding_id="b")
        await event_service.delete_service_instance_binding(delete)
        delete_flow.assert_called_once_with(delete)

    @pytest.mark.asyncio
    async def test_unsupported_operation(self):
        """Test the default binding implementation is not implemented."""
        class Broker(ServiceInstanceBindingService):
            pass

        event_service = ServiceInstanceBindingEventService(Broker())

        with pytest.raises(NotImplementedError) as exc_info:
            await event_service.create_service_instance_binding(
                CreateServiceInstanceBindingRequest(service_id="s", plan_id="p"))

        assert "does not support creating service bindings" in str(exc_info.value)
