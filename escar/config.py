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
Node Configuration for the escar sidecar.

This module provides the read-only snapshot of a node's identity
(application, datacenter, instance id, rack, autoscaling group) and of
its deployment mode (tribe federation, dedicated master ASGs).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Tuple

from escar.exceptions import ConfigurationError

_TRUE_VALUES = ("true", "1", "yes")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in _TRUE_VALUES


def split_csv(value: str) -> Tuple[str, ...]:
    """Split a comma separated list of names or ids, dropping blanks."""
    return tuple(name.strip() for name in value.split(",") if name.strip())


@dataclass(frozen=True)
class NodeConfig:
    """Configuration snapshot for one sidecar node.

    Immutable for the lifetime of the process.

    Attributes:
        app_name: Logical cluster/application name, the directory key
        datacenter: Region the node runs in, e.g. "us-east-1"
        instance_id: Cloud-assigned instance id, e.g. "i-0abc"
        hostname: Public hostname of the node
        host_ip: Public IP of the node
        rack: Availability zone, e.g. "us-east-1a"
        asg_name: Autoscaling group the node belongs to
        tribe_mode_enabled: Whether queries span several clusters
        tribe_cluster_names: Ordered cluster names used in tribe mode
        dedicated_deployment_enabled: Whether master-eligible nodes live
            in their own ASGs
        debug_enabled: Log every directory record on listing
    """

    app_name: str
    datacenter: str
    instance_id: str
    hostname: str = ""
    host_ip: str = ""
    rack: str = ""
    asg_name: str = ""
    tribe_mode_enabled: bool = False
    tribe_cluster_names: Tuple[str, ...] = field(default_factory=tuple)
    dedicated_deployment_enabled: bool = False
    debug_enabled: bool = False

    def __post_init__(self) -> None:
        # Lists passed in by callers are frozen so the snapshot stays immutable
        object.__setattr__(self, "tribe_cluster_names", tuple(self.tribe_cluster_names))

    @property
    def cluster_member_id(self) -> str:
        """Directory key of this node: ``<datacenter>.<instance_id>``."""
        return f"{self.datacenter}.{self.instance_id}"

    @property
    def cluster_names(self) -> Tuple[str, ...]:
        """Directory names this node reads from.

        Raises:
            ConfigurationError: If tribe mode is enabled without clusters
        """
        if not self.tribe_mode_enabled:
            return (self.app_name,)
        if not self.tribe_cluster_names:
            raise ConfigurationError("One or more clusters needed for tribe mode")
        return self.tribe_cluster_names

    @classmethod
    def from_env(cls) -> "NodeConfig":
        """Create NodeConfig from environment variables.

        Environment variables:
            ESCAR_APP_NAME: Application/cluster name
            ESCAR_DC: Datacenter/region
            ESCAR_INSTANCE_ID: Cloud instance id
            ESCAR_HOSTNAME: Public hostname
            ESCAR_HOST_IP: Public IP
            ESCAR_RACK: Availability zone
            ESCAR_ASG_NAME: Autoscaling group name
            ESCAR_TRIBE_ENABLED: Enable tribe mode (true/false)
            ESCAR_TRIBE_CLUSTERS: Comma-separated tribe cluster names
            ESCAR_DEDICATED_DEPLOYMENT: ASG based dedicated masters (true/false)
            ESCAR_DEBUG: Verbose directory logging (true/false)

        Returns:
            NodeConfig with values from environment
        """
        return cls(
            app_name=os.environ.get("ESCAR_APP_NAME", "escar"),
            datacenter=os.environ.get("ESCAR_DC", ""),
            instance_id=os.environ.get("ESCAR_INSTANCE_ID", ""),
            hostname=os.environ.get("ESCAR_HOSTNAME", ""),
            host_ip=os.environ.get("ESCAR_HOST_IP", ""),
            rack=os.environ.get("ESCAR_RACK", ""),
            asg_name=os.environ.get("ESCAR_ASG_NAME", ""),
            tribe_mode_enabled=_env_flag("ESCAR_TRIBE_ENABLED"),
            tribe_cluster_names=split_csv(
                os.environ.get("ESCAR_TRIBE_CLUSTERS", "")
            ),
            dedicated_deployment_enabled=_env_flag("ESCAR_DEDICATED_DEPLOYMENT"),
            debug_enabled=_env_flag("ESCAR_DEBUG"),
        )

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.app_name:
            errors.append("app_name is required")

        if not self.datacenter:
            errors.append("datacenter is required")

        if not self.instance_id:
            errors.append("instance_id is required")

        if not self.rack:
            errors.append("rack is required")

        if not self.asg_name:
            errors.append("asg_name is required")

        if self.tribe_mode_enabled and not self.tribe_cluster_names:
            errors.append("tribe mode requires at least one cluster name")

        return errors
