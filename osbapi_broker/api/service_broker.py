"""Open Service Broker API HTTP endpoints."""

import logging
from typing import Optional, Union
from flask import Flask, request, jsonify
from functools import wraps
import asyncio

from osbapi_broker.api.controllers import (
    CatalogController, ControllerResponse, RequestEnvelope,
    ServiceInstanceBindingController, ServiceInstanceController
)
from osbapi_broker.api.interceptors import ApiVersionInterceptor, RequestIdentityInterceptor
from osbapi_broker.config import config, APIConfig
from osbapi_broker.models.base import (
    API_INFO_LOCATION_HEADER, ASYNC_REQUEST_PARAMETER, OPERATION_PARAMETER,
    ORIGINATING_IDENTITY_HEADER, PLAN_ID_PARAMETER, REQUEST_IDENTITY_HEADER,
    SERVICE_ID_PARAMETER
)
from osbapi_broker.models.binding import CreateServiceInstanceBindingRequest
from osbapi_broker.models.catalog import Catalog
from osbapi_broker.models.instance import CreateServiceInstanceRequest, UpdateServiceInstanceRequest
from osbapi_broker.services.base import (
    NonBindableServiceInstanceBindingService, ServiceInstanceBindingService, ServiceInstanceService
)
from osbapi_broker.services.catalog import CatalogService, StaticCatalogService, load_catalog
from osbapi_broker.services.event_service import (
    ServiceInstanceBindingEventService, ServiceInstanceEventService
)
from osbapi_broker.services.events import EventFlowRegistries
from osbapi_broker.utils.error_handlers import register_error_handlers, RequestContextLogger

logger = logging.getLogger(__name__)

PLATFORM_PREFIX = '/<platform_instance_id>'


def async_route(f):
    """Decorator to handle async routes in Flask."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            return loop.run_until_complete(f(*args, **kwargs))
        finally:
            loop.close()
            asyncio.set_event_loop(None)
    return wrapper


def _envelope(platform_instance_id: Optional[str]) -> RequestEnvelope:
    return RequestEnvelope(
        platform_instance_id=platform_instance_id,
        api_info_location=request.headers.get(API_INFO_LOCATION_HEADER),
        originating_identity=request.headers.get(ORIGINATING_IDENTITY_HEADER),
        request_identity=request.headers.get(REQUEST_IDENTITY_HEADER)
    )


def _accepts_incomplete() -> bool:
    return request.args.get(ASYNC_REQUEST_PARAMETER, 'false').lower() == 'true'


def _request_body(model_cls):
    """Validate the JSON body against ``model_cls``; a missing body counts as empty."""
    data = request.get_json(silent=True)
    return model_cls.model_validate(data if data is not None else {})


def _respond(result: ControllerResponse):
    return jsonify(result.body), result.status


def create_app(
    catalog: Union[Catalog, CatalogService],
    service_instance_service: ServiceInstanceService,
    service_instance_binding_service: Optional[ServiceInstanceBindingService] = None,
    event_flow_registries: Optional[EventFlowRegistries] = None,
    api_config: Optional[APIConfig] = None
) -> Flask:
    """Create Flask application with OSB API routes.

    Args:
        catalog: The catalog, or a service looking it up
        service_instance_service: The broker's provisioning implementation
        service_instance_binding_service: The broker's binding implementation;
            brokers without bindable services can leave it out
        event_flow_registries: Flows to run around each operation
        api_config: API settings, defaults to the environment configuration
    """
    api_config = api_config or config.api
    app = Flask(__name__)

    catalog_service = catalog if isinstance(catalog, CatalogService) else StaticCatalogService(catalog)
    registries = event_flow_registries or EventFlowRegistries()
    binding_service = service_instance_binding_service or NonBindableServiceInstanceBindingService()

    catalog_controller = CatalogController(catalog_service)
    instance_controller = ServiceInstanceController(
        catalog_service, ServiceInstanceEventService(service_instance_service, registries))
    binding_controller = ServiceInstanceBindingController(
        catalog_service, ServiceInstanceBindingEventService(binding_service, registries))

    RequestContextLogger(app)
    ApiVersionInterceptor(api_config.broker_api_version, app)
    RequestIdentityInterceptor(app)
    register_error_handlers(app)

    # Configure CORS if enabled
    if api_config.enable_cors:
        from flask_cors import CORS
        CORS(app)

    @app.route('/v2/catalog', methods=['GET'])
    @app.route(PLATFORM_PREFIX + '/v2/catalog', methods=['GET'])
    @async_route
    async def get_catalog(platform_instance_id=None):
        """Get service catalog."""
        return _respond(await catalog_controller.get_catalog())

    @app.route('/v2/service_instances/<instance_id>', methods=['PUT'])
    @app.route(PLATFORM_PREFIX + '/v2/service_instances/<instance_id>', methods=['PUT'])
    @async_route
    async def create_service_instance(instance_id: str, platform_instance_id=None):
        """Provision a service instance."""
        return _respond(await instance_controller.create_service_instance(
            instance_id,
            _request_body(CreateServiceInstanceRequest),
            accepts_incomplete=_accepts_incomplete(),
            envelope=_envelope(platform_instance_id)
        ))

    @app.route('/v2/service_instances/<instance_id>', methods=['GET'])
    @app.route(PLATFORM_PREFIX + '/v2/service_instances/<instance_id>', methods=['GET'])
    @async_route
    async def get_service_instance(instance_id: str, platform_instance_id=None):
        """Fetch a service instance."""
        return _respond(await instance_controller.get_service_instance(
            instance_id,
            service_definition_id=request.args.get(SERVICE_ID_PARAMETER),
            plan_id=request.args.get(PLAN_ID_PARAMETER),
            envelope=_envelope(platform_instance_id)
        ))

    @app.route('/v2/service_instances/<instance_id>', methods=['PATCH'])
    @app.route(PLATFORM_PREFIX + '/v2/service_instances/<instance_id>', methods=['PATCH'])
    @async_route
    async def update_service_instance(instance_id: str, platform_instance_id=None):
        """Update a service instance."""
        return _respond(await instance_controller.update_service_instance(
            instance_id,
            _request_body(UpdateServiceInstanceRequest),
            accepts_incomplete=_accepts_incomplete(),
            envelope=_envelope(platform_instance_id)
        ))

    @app.route('/v2/service_instances/<instance_id>', methods=['DELETE'])
    @app.route(PLATFORM_PREFIX + '/v2/service_instances/<instance_id>', methods=['DELETE'])
    @async_route
    async def delete_service_instance(instance_id: str, platform_instance_id=None):
        """Deprovision a service instance."""
        return _respond(await instance_controller.delete_service_instance(
            instance_id,
            service_definition_id=request.args.get(SERVICE_ID_PARAMETER),
            plan_id=request.args.get(PLAN_ID_PARAMETER),
            accepts_incomplete=_accepts_incomplete(),
            envelope=_envelope(platform_instance_id)
        ))

    @app.route('/v2/service_instances/<instance_id>/last_operation', methods=['GET'])
    @app.route(PLATFORM_PREFIX + '/v2/service_instances/<instance_id>/last_operation', methods=['GET'])
    @async_route
    async def get_last_operation(instance_id: str, platform_instance_id=None):
        """Get the state of the last instance operation."""
        return _respond(await instance_controller.get_last_operation(
            instance_id,
            service_definition_id=request.args.get(SERVICE_ID_PARAMETER),
            plan_id=request.args.get(PLAN_ID_PARAMETER),
            operation=request.args.get(OPERATION_PARAMETER),
            envelope=_envelope(platform_instance_id)
        ))

    @app.route('/v2/service_instances/<instance_id>/service_bindings/<binding_id>', methods=['PUT'])
    @app.route(PLATFORM_PREFIX + '/v2/service_instances/<instance_id>/service_bindings/<binding_id>',
               methods=['PUT'])
    @async_route
    async def create_service_instance_binding(instance_id: str, binding_id: str, platform_instance_id=None):
        """Create a service binding."""
        return _respond(await binding_controller.create_service_instance_binding(
            instance_id,
            binding_id,
            _request_body(CreateServiceInstanceBindingRequest),
            accepts_incomplete=_accepts_incomplete(),
            envelope=_envelope(platform_instance_id)
        ))

    @app.route('/v2/service_instances/<instance_id>/service_bindings/<binding_id>', methods=['GET'])
    @app.route(PLATFORM_PREFIX + '/v2/service_instances/<instance_id>/service_bindings/<binding_id>',
               methods=['GET'])
    @async_route
    async def get_service_instance_binding(instance_id: str, binding_id: str, platform_instance_id=None):
        """Fetch a service binding."""
        return _respond(await binding_controller.get_service_instance_binding(
            instance_id,
            binding_id,
            service_definition_id=request.args.get(SERVICE_ID_PARAMETER),
            plan_id=request.args.get(PLAN_ID_PARAMETER),
            envelope=_envelope(platform_instance_id)
        ))

    @app.route('/v2/service_instances/<instance_id>/service_bindings/<binding_id>', methods=['DELETE'])
    @app.route(PLATFORM_PREFIX + '/v2/service_instances/<instance_id>/service_bindings/<binding_id>',
               methods=['DELETE'])
    @async_route
    async def delete_service_instance_binding(instance_id: str, binding_id: str, platform_instance_id=None):
        """Delete a service binding."""
        return _respond(await binding_controller.delete_service_instance_binding(
            instance_id,
            binding_id,
            service_definition_id=request.args.get(SERVICE_ID_PARAMETER),
            plan_id=request.args.get(PLAN_ID_PARAMETER),
            accepts_incomplete=_accepts_incomplete(),
            envelope=_envelope(platform_instance_id)
        ))

    @app.route('/v2/service_instances/<instance_id>/service_bindings/<binding_id>/last_operation',
               methods=['GET'])
    @app.route(PLATFORM_PREFIX + '/v2/service_instances/<instance_id>/service_bindings/<binding_id>/last_operation',
               methods=['GET'])
    @async_route
    async def get_binding_last_operation(instance_id: str, binding_id: str, platform_instance_id=None):
        """Get the state of the last binding operation."""
        return _respond(await binding_controller.get_last_operation(
            instance_id,
            binding_id,
            service_definition_id=request.args.get(SERVICE_ID_PARAMETER),
            plan_id=request.args.get(PLAN_ID_PARAMETER),
            operation=request.args.get(OPERATION_PARAMETER),
            envelope=_envelope(platform_instance_id)
        ))

    return app


def run_server(
    service_instance_service: ServiceInstanceService,
    service_instance_binding_service: Optional[ServiceInstanceBindingService] = None,
    event_flow_registries: Optional[EventFlowRegistries] = None,
    catalog: Union[Catalog, CatalogService, None] = None,
    api_config: Optional[APIConfig] = None
):
    """Run the Flask server.

    Without ``catalog`` the catalog is loaded from ``CATALOG_PATH``; without
    ``api_config`` the environment configuration is used. Logging is left to the
    caller, which normally calls ``setup_logging()`` first::

        setup_logging()
        run_server(MyInstanceService(), catalog=load_catalog("catalog.yml"))
    """
    api_config = api_config or config.api
    if catalog is None:
        if not config.catalog.path:
            raise ValueError("No catalog given and CATALOG_PATH is not set")
        catalog = load_catalog(config.catalog.path)

    app = create_app(
        catalog, service_instance_service, service_instance_binding_service, event_flow_registries, api_config)
    logger.info(f"Starting service broker on {api_config.host}:{api_config.port}")
    app.run(
        host=api_config.host,
        port=api_config.port,
        debug=api_config.debug
    )
