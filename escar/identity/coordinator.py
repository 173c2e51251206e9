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
Instance Coordinator for escar.

The coordinator turns a node's configuration into a durable identity in
the shared instance directory and answers identity and role queries for
the rest of the sidecar.

Startup runs two phases, in order, each wrapped in its own RetryExecutor:

1. Dead-instance sweep: delete directory records of this node's ASG and
   rack whose instance ids the membership provider no longer reports.
   Records of other ASGs or racks are never touched.
2. Self-registration: create this node's record and cache it.

Once both phases succeed the coordinator is READY and read-only.

Example:
    >>> config = NodeConfig.from_env()
    >>> coordinator = InstanceCoordinator.start(
    ...     config, SQLiteDirectory("instances.db"), StaticMembership(["i-001"])
    ... )
    >>> coordinator.get_instance().id
    'us-east-1.i-001'
    >>> coordinator.is_master()
    True
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional, Tuple

from escar.config import NodeConfig
from escar.exceptions import CoordinatorNotReadyError, CoordinatorStateError
from escar.identity.directory import InstanceDirectory
from escar.identity.instance import ClusterInstance
from escar.identity.membership import MembershipProvider
from escar.utils.logger import logger
from escar.utils.retry import RetryExecutor


class CoordinatorState(str, Enum):
    """Lifecycle state of the coordinator."""
    INITIALIZING = "initializing"
    READY = "ready"


class InstanceCoordinator:
    """Central place to create and consume the identity of this node.

    Build it with start(), which runs the startup protocol and only returns
    a coordinator whose identity is registered.

    Attributes:
        config: Configuration snapshot of this node
        directory: Shared instance directory
        membership: Live rack membership provider
        state: Current lifecycle state
    """

    def __init__(
        self,
        config: NodeConfig,
        directory: InstanceDirectory,
        membership: MembershipProvider,
        executor_factory: Callable[[], RetryExecutor] = RetryExecutor,
    ) -> None:
        """Initialize the coordinator without touching the directory.

        Args:
            config: Node configuration
            directory: Instance directory
            membership: Membership provider
            executor_factory: Builds the RetryExecutor wrapping each phase
        """
        self.config = config
        self.directory = directory
        self.membership = membership
        self._executor_factory = executor_factory
        self._instance: Optional[ClusterInstance] = None
        self.state = CoordinatorState.INITIALIZING

    @classmethod
    def start(
        cls,
        config: NodeConfig,
        directory: InstanceDirectory,
        membership: MembershipProvider,
        executor_factory: Callable[[], RetryExecutor] = RetryExecutor,
    ) -> "InstanceCoordinator":
        """Create a coordinator and run the startup protocol.

        Returns:
            A READY coordinator

        Raises:
            Exception: Whatever ended a phase: an exhausted retry budget,
                a cancellation or a configuration error. No coordinator
                is returned in that case.
        """
        coordinator = cls(config, directory, membership, executor_factory)
        coordinator.register()
        return coordinator

    def register(self) -> ClusterInstance:
        """Run the dead-instance sweep, then register this node.

        Returns:
            The registered self record

        Raises:
            CoordinatorStateError: If the coordinator is already READY
        """
        if self.state is CoordinatorState.READY:
            raise CoordinatorStateError(
                "Instance already registered", state=self.state.value
            )

        logger.info("Deregistering dead instances")
        self._executor_factory().call(self._deregister_dead_instances)

        logger.info("Registering instance")
        instance = self._executor_factory().call(self._register_instance)

        self._instance = instance
        self.state = CoordinatorState.READY
        logger.info(f"Instance details: {instance}")
        return instance

    def _register_instance(self) -> ClusterInstance:
        config = self.config
        return self.directory.create(
            config.app_name,
            config.cluster_member_id,
            config.instance_id,
            config.hostname,
            config.host_ip,
            config.rack,
            config.datacenter,
            config.asg_name,
            None,
        )

    def _deregister_dead_instances(self) -> None:
        all_instances = self._instance_list()
        live = self.membership.live_rack_members()

        for instance in all_instances:
            # Only our own ASG and rack are in scope
            if instance.asg != self.config.asg_name:
                continue
            if instance.availability_zone != self.config.rack:
                continue
            if instance.instance_id in live:
                continue
            logger.info(f"Found dead instance: {instance.instance_id}")
            self.directory.delete(instance)

    def _instance_list(self) -> Tuple[ClusterInstance, ...]:
        instances: List[ClusterInstance] = []
        for cluster_name in self.config.cluster_names:
            instances.extend(self.directory.list_all(cluster_name))

        if self.config.debug_enabled:
            for instance in instances:
                logger.debug(str(instance))

        return tuple(instances)

    def get_instance(self) -> ClusterInstance:
        """Return this node's registered record."""
        if self._instance is None:
            raise CoordinatorNotReadyError()
        return self._instance

    def get_all_instances(self) -> Tuple[ClusterInstance, ...]:
        """List every record of this cluster, or of all tribe clusters.

        Clusters are read in configured order and concatenated; records
        appearing in several clusters are kept. Any failed listing fails
        the whole call.
        """
        return self._instance_list()

    def is_master(self) -> bool:
        """Whether this node may act as a master.

        Every node is master-eligible unless the deployment uses dedicated
        ASGs, in which case only ASGs with "master" in their name are.
        """
        return (
            not self.config.dedicated_deployment_enabled
            or "master" in self.config.asg_name.lower()
        )
