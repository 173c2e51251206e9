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
escar - identity and membership coordination for a clustered data-store sidecar.

Each node registers a durable identity record in a shared instance
directory, sweeps records of terminated peers in its own deployment unit,
and answers "am I master-eligible" and "who else is in this cluster".
"""

__version__ = "0.1.0"
__author__ = "Firefly Software Solutions Inc"
__license__ = "Apache-2.0"

from escar.config import NodeConfig
from escar.identity import (
    ClusterInstance,
    InMemoryDirectory,
    InstanceCoordinator,
    InstanceDirectory,
    MembershipProvider,
    SQLiteDirectory,
    StaticMembership,
)
from escar.utils.retry import AttemptResult, AttemptStatus, RetryExecutor

__all__ = [
    # Identity
    "ClusterInstance",
    "InstanceCoordinator",
    # Collaborators
    "InMemoryDirectory",
    "InstanceDirectory",
    "MembershipProvider",
    "SQLiteDirectory",
    "StaticMembership",
    # Config
    "NodeConfig",
    # Retry
    "AttemptResult",
    "AttemptStatus",
    "RetryExecutor",
]
