"""Event flow registries.

An event flow is a callable a broker author registers to run around one
lifecycle operation:

* initialization flows are called with ``(request)`` before the operation,
* completion flows with ``(request, response)`` after it succeeded,
* error flows with ``(request, error)`` after any of the above failed.

Flows may be plain functions or coroutine functions. Flows run in
registration order. Registration must be finished before the broker starts
serving requests.
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List

logger = logging.getLogger(__name__)


async def _call_flow(flow: Callable, *args: Any) -> None:
    result = flow(*args)
    if inspect.isawaitable(result):
        await result


class EventFlowRegistry:
    """Ordered initialization, completion and error flows for one operation."""

    def __init__(self, name: str = "operation"):
        self.name = name
        self.initialization_flows: List[Callable] = []
        self.completion_flows: List[Callable] = []
        self.error_flows: List[Callable] = []

    def add_initialization_flow(self, flow: Callable) -> Callable:
        """Register a flow run before the operation.

        Returns the flow, so this can be used as a decorator.
        """
        self.initialization_flows.append(flow)
        return flow

    def add_completion_flow(self, flow: Callable) -> Callable:
        """Register a flow run after the operation succeeded."""
        self.completion_flows.append(flow)
        return flow

    def add_error_flow(self, flow: Callable) -> Callable:
        """Register a flow run after the operation failed."""
        self.error_flows.append(flow)
        return flow

    async def run_initialization_flows(self, request: Any) -> None:
        for flow in self.initialization_flows:
            await _call_flow(flow, request)

    async def run_completion_flows(self, request: Any, response: Any) -> None:
        for flow in self.completion_flows:
            await _call_flow(flow, request, response)

    async def run_error_flows(self, request: Any, error: BaseException) -> None:
        """Run error flows for ``error``.

        An exception raised by an error flow stops the remaining error flows and
        propagates in place of ``error``, which stays reachable through
        ``__context__``.
        """
        for flow in self.error_flows:
            try:
                await _call_flow(flow, request, error)
            except Exception as e:
                logger.error(f"Error flow for {self.name} failed while handling {error!r}: {e}")
                raise

    def __repr__(self) -> str:
        return (f"EventFlowRegistry(name={self.name!r}, initialization={len(self.initialization_flows)}, "
                f"completion={len(self.completion_flows)}, error={len(self.error_flows)})")


@dataclass
class EventFlowRegistries:
    """Registries for every operation that supports event flows."""
    create_instance: EventFlowRegistry = field(
        default_factory=lambda: EventFlowRegistry("create_instance"))
    update_instance: EventFlowRegistry = field(
        default_factory=lambda: EventFlowRegistry("update_instance"))
    delete_instance: EventFlowRegistry = field(
        default_factory=lambda: EventFlowRegistry("delete_instance"))
    async_operation: EventFlowRegistry = field(
        default_factory=lambda: EventFlowRegistry("async_operation"))
    create_instance_binding: EventFlowRegistry = field(
        default_factory=lambda: EventFlowRegistry("create_instance_binding"))
    delete_instance_binding: EventFlowRegistry = field(
        default_factory=lambda: EventFlowRegistry("delete_instance_binding"))
    async_operation_binding: EventFlowRegistry = field(
        default_factory=lambda: EventFlowRegistry("async_operation_binding"))
