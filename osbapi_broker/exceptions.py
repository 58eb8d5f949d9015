"""Exception classes for the Open Service Broker API."""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in the ``error`` field."""

    # General errors
    SERVICE_BROKER_ERROR = "ServiceBrokerError"
    INTERNAL_ERROR = "InternalError"
    UNPROCESSABLE_ENTITY = "UnprocessableEntity"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    API_VERSION_MISMATCH = "ApiVersionMismatch"

    # Catalog errors
    SERVICE_DEFINITION_DOES_NOT_EXIST = "ServiceDefinitionDoesNotExist"
    PLAN_DOES_NOT_EXIST = "ServiceDefinitionPlanDoesNotExist"

    # Service instance errors
    INSTANCE_DOES_NOT_EXIST = "ServiceInstanceDoesNotExist"
    INSTANCE_EXISTS = "ServiceInstanceExists"
    UPDATE_NOT_SUPPORTED = "ServiceInstanceUpdateNotSupported"

    # Service binding errors
    BINDING_DOES_NOT_EXIST = "ServiceInstanceBindingDoesNotExist"
    BINDING_EXISTS = "ServiceInstanceBindingExists"

    # Request errors
    INVALID_PARAMETERS = "InvalidParameters"
    INVALID_ORIGINATING_IDENTITY = "InvalidOriginatingIdentity"
    OPERATION_IN_PROGRESS = "OperationInProgress"

    # Codes defined by the OSBAPI specification
    ASYNC_REQUIRED = "AsyncRequired"
    CONCURRENCY_ERROR = "ConcurrencyError"
    REQUIRES_APP = "RequiresApp"
    MAINTENANCE_INFO_CONFLICT = "MaintenanceInfoConflict"


class ServiceBrokerException(Exception):
    """Base exception class for service broker failures.

    Every subclass carries a default HTTP status and error code. The error code
    can be overridden per instance, which lets a broker return its own codes
    while keeping the status mapping of the exception type.
    """

    http_status: int = 500
    default_error_code: ErrorCode = ErrorCode.SERVICE_BROKER_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        instance_usable: Optional[bool] = None,
        update_repeatable: Optional[bool] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message, returned as ``description``
            error_code: Error code overriding the type's default code
            instance_usable: Whether the instance is still usable after a failed operation
            update_repeatable: Whether a failed update can be repeated
            cause: The underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code.value
        self.instance_usable = instance_usable
        self.update_repeatable = update_repeatable
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to an OSBAPI error body."""
        result = {
            'error': self.error_code,
            'description': self.message
        }

        if self.instance_usable is not None:
            result['instance_usable'] = self.instance_usable
        if self.update_repeatable is not None:
            result['update_repeatable'] = self.update_repeatable

        return result

    def __str__(self) -> str:
        base_str = f"{self.error_code}: {self.message}"

        if self.cause:
            base_str += f" [caused by: {self.cause}]"

        return base_str


class ServiceBrokerApiVersionException(ServiceBrokerException):
    """Exception for a request sent with an unsupported broker API version."""

    http_status = 412
    default_error_code = ErrorCode.API_VERSION_MISMATCH

    def __init__(self, expected_version: str, provided_version: Optional[str], error_code: Optional[str] = None):
        super().__init__(
            message=(
                "The provided service broker API version is not supported: "
                f"expected version={expected_version}, provided version={provided_version}"
            ),
            error_code=error_code
        )
        self.expected_version = expected_version
        self.provided_version = provided_version


class ServiceBrokerApiVersionMissingException(ServiceBrokerApiVersionException):
    """Exception for a request without a broker API version header."""

    def __init__(self, expected_version: str, error_code: Optional[str] = None):
        super().__init__(expected_version, None, error_code=error_code)


class ServiceDefinitionDoesNotExistException(ServiceBrokerException):
    """Exception for an unknown ``service_id``."""

    http_status = 400
    default_error_code = ErrorCode.SERVICE_DEFINITION_DOES_NOT_EXIST

    def __init__(self, service_definition_id: Optional[str], error_code: Optional[str] = None):
        super().__init__(
            message=f"Service definition does not exist: id={service_definition_id}",
            error_code=error_code
        )
        self.service_definition_id = service_definition_id


class ServiceDefinitionPlanDoesNotExistException(ServiceBrokerException):
    """Exception for an unknown ``plan_id``."""

    http_status = 400
    default_error_code = ErrorCode.PLAN_DOES_NOT_EXIST

    def __init__(self, plan_id: Optional[str], error_code: Optional[str] = None):
        super().__init__(
            message=f"Service Definition Plan does not exist: id={plan_id}",
            error_code=error_code
        )
        self.plan_id = plan_id


class ServiceInstanceDoesNotExistException(ServiceBrokerException):
    """Exception for when a service instance is not found."""

    http_status = 422
    default_error_code = ErrorCode.INSTANCE_DOES_NOT_EXIST

    def __init__(self, service_instance_id: str, error_code: Optional[str] = None):
        super().__init__(
            message=f"Service instance does not exist: id={service_instance_id}",
            error_code=error_code
        )
        self.service_instance_id = service_instance_id


class ServiceInstanceExistsException(ServiceBrokerException):
    """Exception for a create request conflicting with an existing instance."""

    http_status = 409
    default_error_code = ErrorCode.INSTANCE_EXISTS

    def __init__(self, service_instance_id: str, service_definition_id: str, error_code: Optional[str] = None):
        super().__init__(
            message=(
                "Service instance with the given ID already exists: "
                f"serviceInstanceId={service_instance_id}, serviceDefinitionId={service_definition_id}"
            ),
            error_code=error_code
        )
        self.service_instance_id = service_instance_id
        self.service_definition_id = service_definition_id


class ServiceInstanceBindingExistsException(ServiceBrokerException):
    """Exception for a create request conflicting with an existing binding."""

    http_status = 409
    default_error_code = ErrorCode.BINDING_EXISTS

    def __init__(self, service_instance_id: str, binding_id: str, error_code: Optional[str] = None):
        super().__init__(
            message=(
                "Service instance binding already exists: "
                f"serviceInstanceId={service_instance_id}, bindingId={binding_id}"
            ),
            error_code=error_code
        )
        self.service_instance_id = service_instance_id
        self.binding_id = binding_id


class ServiceInstanceBindingDoesNotExistException(ServiceBrokerException):
    """Exception for when a service binding is not found."""

    http_status = 422
    default_error_code = ErrorCode.BINDING_DOES_NOT_EXIST

    def __init__(self, binding_id: str, error_code: Optional[str] = None):
        super().__init__(
            message=f"Service binding does not exist: id={binding_id}",
            error_code=error_code
        )
        self.binding_id = binding_id


class ServiceInstanceUpdateNotSupportedException(ServiceBrokerException):
    """Exception for an update the broker cannot perform."""

    http_status = 422
    default_error_code = ErrorCode.UPDATE_NOT_SUPPORTED

    def __init__(self, message: str, error_code: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(
            message=f"Service instance update not supported: {message}",
            error_code=error_code,
            cause=cause
        )


class ServiceBrokerAsyncRequiredException(ServiceBrokerException):
    """Exception telling the platform to retry with ``accepts_incomplete=true``."""

    http_status = 422
    default_error_code = ErrorCode.ASYNC_REQUIRED

    def __init__(
        self,
        message: str = "This service plan requires client support for asynchronous service operations.",
        error_code: Optional[str] = None
    ):
        super().__init__(message=message, error_code=error_code)


class ServiceBrokerMaintenanceInfoConflictException(ServiceBrokerException):
    """Exception for a request carrying a stale ``maintenance_info.version``."""

    http_status = 422
    default_error_code = ErrorCode.MAINTENANCE_INFO_CONFLICT

    def __init__(self, message: Optional[str] = None, error_code: Optional[str] = None):
        if message is None:
            message = "The maintenance information for the requested Service Plan has changed."
        else:
            message = f"Service broker maintenance info conflict: {message}"
        super().__init__(message=message, error_code=error_code)


class ServiceBrokerInvalidParametersException(ServiceBrokerException):
    """Exception for malformed ``parameters`` in a request."""

    http_status = 400
    default_error_code = ErrorCode.INVALID_PARAMETERS

    def __init__(self, message: Optional[str] = None, error_code: Optional[str] = None, cause: Optional[Exception] = None):
        prefix = "Service broker parameters are invalid"
        super().__init__(
            message=f"{prefix}: {message}" if message else prefix,
            error_code=error_code,
            cause=cause
        )


class ServiceBrokerInvalidOriginatingIdentityException(ServiceBrokerException):
    """Exception for a malformed originating identity header."""

    http_status = 422
    default_error_code = ErrorCode.INVALID_ORIGINATING_IDENTITY

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(
            message=f"Service broker originating identity parameters are invalid: {message}",
            cause=cause
        )


class ServiceBrokerOperationInProgressException(ServiceBrokerException):
    """Exception for a request hitting a resource with an operation in flight.

    Subclasses with ``operation_body`` set are answered with an
    ``{"operation": ...}`` body instead of an error body.
    """

    http_status = 404
    default_error_code = ErrorCode.OPERATION_IN_PROGRESS
    operation_body = False
    message_prefix = "Service broker operation is in progress for the requested service instance or binding"

    def __init__(self, operation: Optional[str] = None, error_code: Optional[str] = None):
        message = self.message_prefix
        if operation is not None:
            message += f": operation={operation}"
        super().__init__(message=message, error_code=error_code)
        self.operation = operation


class ServiceBrokerCreateOperationInProgressException(ServiceBrokerOperationInProgressException):
    """Exception for a duplicate create while an async create is in flight."""

    http_status = 202
    operation_body = True
    message_prefix = "Service broker create operation is in progress for the requested service instance or binding"


class ServiceBrokerUpdateOperationInProgressException(ServiceBrokerOperationInProgressException):
    """Exception for a duplicate update while an async update is in flight."""

    http_status = 202
    operation_body = True
    message_prefix = "Service broker update operation is in progress for the requested service instance"


class ServiceBrokerDeleteOperationInProgressException(ServiceBrokerOperationInProgressException):
    """Exception for a duplicate delete while an async delete is in flight."""

    http_status = 202
    operation_body = True
    message_prefix = "Service broker delete operation is in progress for the requested service instance or binding"


class ServiceBrokerConcurrencyException(ServiceBrokerException):
    """Exception for a conflicting concurrent mutation detected by the domain service."""

    http_status = 422
    default_error_code = ErrorCode.CONCURRENCY_ERROR

    def __init__(
        self,
        message: str = "Another operation for this service instance is in progress.",
        error_code: Optional[str] = None
    ):
        super().__init__(message=message, error_code=error_code)


class ServiceBrokerBindingRequiresAppException(ServiceBrokerException):
    """Exception for a binding request lacking a required application reference."""

    http_status = 422
    default_error_code = ErrorCode.REQUIRES_APP

    def __init__(
        self,
        message: str = "This service supports generation of credentials through binding an application only.",
        cause: Optional[Exception] = None
    ):
        super().__init__(message=message, cause=cause)


class ServiceBrokerUnavailableException(ServiceBrokerException):
    """Exception for a broker that is temporarily unable to serve requests."""

    http_status = 503
    default_error_code = ErrorCode.SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Service broker is unavailable", error_code: Optional[str] = None):
        super().__init__(message=message, error_code=error_code)
