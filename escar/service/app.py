# Copyright 2026 Firefly Software Solutions Inc
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
escar REST API.

Read-only HTTP view of a registered InstanceCoordinator, used by the data
store's discovery plugin and by operators:

- GET /health: registration status of this node
- GET /v1/instances: every instance of the cluster (or tribe clusters)
- GET /v1/instances/self: this node's record
- GET /v1/role: whether this node is master-eligible

The coordinator is passed to create_app(); there is no module-level app.

Example:
    >>> coordinator = InstanceCoordinator.start(config, directory, membership)
    >>> app = create_app(coordinator)
    >>> uvicorn.run(app, host="0.0.0.0", port=8080)
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from escar import __version__
from escar.exceptions import DirectoryError, EscarError
from escar.identity.coordinator import InstanceCoordinator
from escar.identity.instance import ClusterInstance, instances_to_json
from escar.service.models import ErrorResponse, HealthResponse, RoleResponse
from escar.utils.logger import logger


def get_coordinator(request: Request) -> InstanceCoordinator:
    """Return the coordinator attached to the running app."""
    return request.app.state.coordinator


def create_app(coordinator: InstanceCoordinator) -> FastAPI:
    """
    Build the FastAPI application for a registered coordinator.

    Args:
        coordinator: A READY coordinator, as returned by
            InstanceCoordinator.start()

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="escar API",
        description="Node identity and cluster membership of the escar sidecar.",
        version=__version__,
        openapi_tags=[
            {"name": "Health", "description": "Health check endpoints"},
            {"name": "Identity", "description": "Instance records and node role"},
        ],
    )
    app.state.coordinator = coordinator

    @app.exception_handler(DirectoryError)
    async def directory_error_handler(request: Request, exc: DirectoryError):
        logger.error(f"Directory call failed: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=ErrorResponse(
                error=str(exc),
                error_code="DIRECTORY_UNAVAILABLE",
                details={"operation": exc.operation} if exc.operation else None,
            ).model_dump(),
        )

    @app.exception_handler(EscarError)
    async def escar_error_handler(request: Request, exc: EscarError):
        logger.error(f"Request failed: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error=str(exc),
                error_code="ESCAR_ERROR",
                details={"type": type(exc).__name__},
            ).model_dump(),
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    def health_check(request: Request) -> HealthResponse:
        """Report whether this node holds a registered identity."""
        coord = get_coordinator(request)
        return HealthResponse(
            status="healthy",
            version=__version__,
            app_name=coord.config.app_name,
            instance_id=coord.config.instance_id,
            state=coord.state.value,
        )

    @app.get("/v1/instances", tags=["Identity"])
    def list_instances(request: Request) -> Dict[str, Any]:
        """List every instance of the cluster, keyed instance-0, instance-1, ..."""
        return instances_to_json(get_coordinator(request).get_all_instances())

    @app.get("/v1/instances/self", response_model=ClusterInstance, tags=["Identity"])
    def get_self(request: Request) -> ClusterInstance:
        """Return this node's directory record."""
        return get_coordinator(request).get_instance()

    @app.get("/v1/role", response_model=RoleResponse, tags=["Identity"])
    def get_role(request: Request) -> RoleResponse:
        """Report whether this node may act as a master."""
        coord = get_coordinator(request)
        return RoleResponse(
            instance_id=coord.config.instance_id,
            asg=coord.config.asg_name,
            is_master=coord.is_master(),
        )

    return app
