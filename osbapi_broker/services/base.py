"""Abstract base classes for the broker author's domain services."""

from abc import ABC, abstractmethod

from osbapi_broker.models.binding import (
    CreateServiceInstanceBindingRequest, CreateServiceInstanceBindingResponse,
    DeleteServiceInstanceBindingRequest, DeleteServiceInstanceBindingResponse,
    GetLastServiceBindingOperationRequest, GetLastServiceBindingOperationResponse,
    GetServiceInstanceBindingRequest, GetServiceInstanceBindingResponse
)
from osbapi_broker.models.instance import (
    CreateServiceInstanceRequest, CreateServiceInstanceResponse,
    DeleteServiceInstanceRequest, DeleteServiceInstanceResponse,
    GetLastServiceOperationRequest, GetLastServiceOperationResponse,
    GetServiceInstanceRequest, GetServiceInstanceResponse,
    UpdateServiceInstanceRequest, UpdateServiceInstanceResponse
)


class ServiceInstanceService(ABC):
    """Provisioning operations implemented by a broker.

    Create and delete are required. The remaining operations raise
    ``NotImplementedError`` unless overridden, which is reported to the
    platform as an internal error.
    """

    @abstractmethod
    async def create_service_instance(self, request: CreateServiceInstanceRequest) -> CreateServiceInstanceResponse:
        """Provision a service instance."""
        pass

    @abstractmethod
    async def delete_service_instance(self, request: DeleteServiceInstanceRequest) -> DeleteServiceInstanceResponse:
        """Deprovision a service instance."""
        pass

    async def get_service_instance(self, request: GetServiceInstanceRequest) -> GetServiceInstanceResponse:
        raise NotImplementedError(
            "This service broker does not support retrieving service instances. "
            "The service broker should set 'instances_retrievable:false' in the service catalog, "
            "or provide an implementation of the fetch instance API."
        )

    async def get_last_operation(self, request: GetLastServiceOperationRequest) -> GetLastServiceOperationResponse:
        raise NotImplementedError(
            "This service broker does not support getting the status of an asynchronous operation. "
            "If the service broker returns '202 Accepted' in response to a provision, update, or deprovision "
            "request, it must also provide an implementation of the get last operation API."
        )

    async def update_service_instance(self, request: UpdateServiceInstanceRequest) -> UpdateServiceInstanceResponse:
        raise NotImplementedError(
            "This service broker does not support updating service instances. "
            "The service broker should set 'plan_updateable:false' in the service catalog, "
            "or provide an implementation of the update instance API."
        )


class ServiceInstanceBindingService(ABC):
    """Binding operations implemented by a broker."""

    async def create_service_instance_binding(
        self, request: CreateServiceInstanceBindingRequest
    ) -> CreateServiceInstanceBindingResponse:
        raise NotImplementedError("This service broker does not support creating service bindings.")

    async def get_service_instance_binding(
        self, request: GetServiceInstanceBindingRequest
    ) -> GetServiceInstanceBindingResponse:
        raise NotImplementedError(
            "This service broker does not support retrieving service bindings. "
            "The service broker should set 'bindings_retrievable:false' in the service catalog, "
            "or provide an implementation of the fetch binding API."
        )

    async def get_last_operation(
        self, request: GetLastServiceBindingOperationRequest
    ) -> GetLastServiceBindingOperationResponse:
        raise NotImplementedError(
            "This service broker does not support getting the status of an asynchronous binding operation."
        )

    async def delete_service_instance_binding(
        self, request: DeleteServiceInstanceBindingRequest
    ) -> DeleteServiceInstanceBindingResponse:
        raise NotImplementedError("This service broker does not support deleting service bindings.")


class NonBindableServiceInstanceBindingService(ServiceInstanceBindingService):
    """Binding service for brokers whose services are all non-bindable."""

    NON_BINDABLE_MESSAGE = (
        "This service broker does not support bindable services. "
        "The service broker should set 'bindable: false' in the service catalog for all service offerings, "
        "or provide an implementation of the binding API."
    )

    async def create_service_instance_binding(self, request):
        raise NotImplementedError(self.NON_BINDABLE_MESSAGE)

    async def delete_service_instance_binding(self, request):
        raise NotImplementedError(self.NON_BINDABLE_MESSAGE)
