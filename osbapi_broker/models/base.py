"""Base request and response models shared by instances and bindings."""

from enum import Enum
from typing import Dict, Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from osbapi_broker.exceptions import ServiceBrokerInvalidParametersException
from osbapi_broker.models.context import Context


API_VERSION_HEADER = "X-Broker-Api-Version"
API_INFO_LOCATION_HEADER = "X-Api-Info-Location"
ORIGINATING_IDENTITY_HEADER = "X-Broker-API-Originating-Identity"
REQUEST_IDENTITY_HEADER = "X-Broker-API-Request-Identity"

ASYNC_REQUEST_PARAMETER = "accepts_incomplete"
SERVICE_ID_PARAMETER = "service_id"
PLAN_ID_PARAMETER = "plan_id"
OPERATION_PARAMETER = "operation"

MAX_OPERATION_LENGTH = 10_000

T = TypeVar('T', bound=BaseModel)


class OperationState(str, Enum):
    """States of an asynchronous operation."""
    IN_PROGRESS = "in progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ServiceBrokerRequest(BaseModel):
    """Fields common to every request.

    The envelope fields come from headers and path segments, so they are never
    part of the serialized body.
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    platform_instance_id: Optional[str] = Field(default=None, exclude=True)
    api_info_location: Optional[str] = Field(default=None, exclude=True)
    originating_identity: Optional[Context] = Field(default=None, exclude=True)
    request_identity: Optional[str] = Field(default=None, exclude=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


class AsyncServiceBrokerRequest(ServiceBrokerRequest):
    """Request for an operation the broker may complete asynchronously."""
    async_accepted: bool = Field(default=False, exclude=True)


class ParameterizedRequestMixin:
    """Decoding of the open ``parameters`` map into a typed model."""

    def parameters_as(self, model_cls: Type[T]) -> T:
        """Validate the request parameters against ``model_cls``.

        Raises:
            ServiceBrokerInvalidParametersException: if the parameters do not fit the model
        """
        try:
            return model_cls.model_validate(self.parameters or {})
        except ValidationError as e:
            raise ServiceBrokerInvalidParametersException(str(e), cause=e) from e


class ServiceBrokerResponse(BaseModel):
    """Base for response bodies."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


class AsyncServiceBrokerResponse(ServiceBrokerResponse):
    """Response of an operation that may complete asynchronously."""

    is_async: bool = Field(default=False, exclude=True)
    operation: Optional[str] = None

    @field_validator('operation')
    @classmethod
    def validate_operation_length(cls, v):
        """Validate the operation length."""
        if v is not None and len(v) > MAX_OPERATION_LENGTH:
            raise ValueError(f"operation must not exceed {MAX_OPERATION_LENGTH} characters")
        return v


class ErrorMessage(BaseModel):
    """Error response body."""
    error: Optional[str] = None
    description: Optional[str] = None
    instance_usable: Optional[bool] = None
    update_repeatable: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class OperationInProgressMessage(BaseModel):
    """Body returned for a duplicate request while an operation is in flight."""
    operation: Optional[str] = None

    @field_validator('operation')
    @classmethod
    def validate_operation_length(cls, v):
        """Validate the operation length."""
        if v is not None and len(v) > MAX_OPERATION_LENGTH:
            raise ValueError(f"operation must not exceed {MAX_OPERATION_LENGTH} characters")
        return v

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
