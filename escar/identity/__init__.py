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
Node identity and cluster membership for escar.

This package gives each node a durable record in the shared instance
directory and answers identity and role queries:

- ClusterInstance: a directory record
- InstanceDirectory: the shared store (in-memory and SQLite backed)
- MembershipProvider: live instance ids of this node's rack
- InstanceCoordinator: startup sweep and registration, query surface
"""

from escar.identity.coordinator import CoordinatorState, InstanceCoordinator
from escar.identity.directory import InMemoryDirectory, InstanceDirectory, SQLiteDirectory
from escar.identity.instance import ClusterInstance, instances_from_json, instances_to_json
from escar.identity.membership import MembershipProvider, StaticMembership

__all__ = [
    "ClusterInstance",
    "CoordinatorState",
    "InMemoryDirectory",
    "InstanceCoordinator",
    "InstanceDirectory",
    "MembershipProvider",
    "SQLiteDirectory",
    "StaticMembership",
    "instances_from_json",
    "instances_to_json",
]
