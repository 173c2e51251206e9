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
Cluster instance records.

A ClusterInstance is one row of the shared instance directory: the
identity and placement of a single node of a cluster. Records are
immutable; a directory hands out new objects on every read.

This module also holds the JSON shape used when listings are handed to
other processes:

    {
        "instances": {
            "instance-0": {"host_name": ..., "id": ..., ...},
            "instance-1": {...}
        }
    }
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field


class ClusterInstance(BaseModel):
    """
    Directory record describing one cluster member.

    Attributes:
        app: Logical cluster/application name
        id: Cluster member id, ``<dc>.<instance_id>``, unique per app
        instance_id: Cloud-assigned instance id
        host_name: Public hostname
        host_ip: Public IP address
        availability_zone: Rack the instance runs in
        dc: Datacenter/region
        asg: Autoscaling group the instance belongs to
        update_time: Last write time in epoch milliseconds
        token: Reserved for data partition assignment
    """

    model_config = ConfigDict(frozen=True)

    app: str = Field(..., description="Cluster/application name")
    id: str = Field(..., description="Cluster member id (dc.instance_id)")
    instance_id: str = Field(..., description="Cloud instance id")
    host_name: str = Field(default="", description="Public hostname")
    host_ip: str = Field(default="", description="Public IP address")
    availability_zone: str = Field(default="", description="Rack/availability zone")
    dc: str = Field(default="", description="Datacenter/region")
    asg: str = Field(default="", description="Autoscaling group name")
    update_time: int = Field(default=0, description="Last update, epoch ms")
    token: Optional[str] = Field(default=None, description="Reserved partition token")

    @property
    def key(self) -> tuple:
        """Directory key of the record."""
        return (self.app, self.id)

    def __str__(self) -> str:
        return (
            f"ClusterInstance(app={self.app}, id={self.id}, "
            f"instance_id={self.instance_id}, host={self.host_name}/{self.host_ip}, "
            f"zone={self.availability_zone}, dc={self.dc}, asg={self.asg})"
        )


# Keys of the listing JSON shape
HOST_NAME = "host_name"
ID = "id"
APP_NAME = "app_name"
INSTANCE_ID = "instance_id"
AVAILABILITY_ZONE = "availability_zone"
PUBLIC_IP = "public_ip"
DC = "dc"
UPDATE_TIME = "update_time"
INSTANCES = "instances"
INSTANCE_PREFIX = "instance-"


def instance_to_dict(instance: ClusterInstance) -> Dict[str, Any]:
    """Convert a record to a listing entry."""
    return {
        HOST_NAME: instance.host_name,
        ID: instance.id,
        APP_NAME: instance.app,
        INSTANCE_ID: instance.instance_id,
        AVAILABILITY_ZONE: instance.availability_zone,
        PUBLIC_IP: instance.host_ip,
        DC: instance.dc,
        UPDATE_TIME: instance.update_time,
    }


def instances_to_json(instances: Sequence[ClusterInstance]) -> Dict[str, Any]:
    """
    Build the listing document for a sequence of records.

    Entries are keyed ``instance-<n>`` in sequence order.

    Args:
        instances: Records to include

    Returns:
        Dictionary ready for json.dumps
    """
    entries = {
        f"{INSTANCE_PREFIX}{i}": instance_to_dict(instance)
        for i, instance in enumerate(instances)
    }
    return {INSTANCES: entries}


def instances_from_json(payload: Dict[str, Any]) -> List[ClusterInstance]:
    """
    Read records back from a listing document.

    Entries are read as ``instance-0``, ``instance-1``, ... and reading
    stops at the first missing index. The listing shape carries no ASG or
    token, so those fields come back empty.

    Args:
        payload: Parsed listing document

    Returns:
        Records in index order

    Raises:
        KeyError: If the document has no "instances" key
    """
    entries = payload[INSTANCES]
    instances = []

    i = 0
    while f"{INSTANCE_PREFIX}{i}" in entries:
        entry = entries[f"{INSTANCE_PREFIX}{i}"]
        instances.append(
            ClusterInstance(
                app=entry.get(APP_NAME, ""),
                id=entry.get(ID, ""),
                instance_id=entry.get(INSTANCE_ID, ""),
                host_name=entry.get(HOST_NAME, ""),
                host_ip=entry.get(PUBLIC_IP, ""),
                availability_zone=entry.get(AVAILABILITY_ZONE, ""),
                dc=entry.get(DC, ""),
                update_time=entry.get(UPDATE_TIME) or 0,
            )
        )
        i += 1

    return instances
