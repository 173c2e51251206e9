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
Pydantic models for the escar REST API responses.

Instance records are served as escar.identity.instance.ClusterInstance
directly; the models here cover health, role and error bodies.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """
    Response model for the health check endpoint.

    Attributes:
        status: "healthy" once the node is registered
        version: escar version
        app_name: Cluster/application name of this node
        instance_id: Cloud instance id of this node
        state: Coordinator lifecycle state
    """

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="escar version")
    app_name: str = Field(..., description="Cluster/application name")
    instance_id: str = Field(..., description="Cloud instance id")
    state: str = Field(..., description="Coordinator lifecycle state")


class RoleResponse(BaseModel):
    """Response model for the role endpoint."""

    instance_id: str = Field(..., description="Cloud instance id")
    asg: str = Field(..., description="Autoscaling group name")
    is_master: bool = Field(..., description="Whether this node is master-eligible")


class ErrorResponse(BaseModel):
    """Error body returned when a request fails."""

    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Machine readable error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
