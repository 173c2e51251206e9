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
Live rack membership as reported by the cloud control plane.

The dead-instance sweep compares directory records against this view:
any record of our ASG and rack whose instance id is not live is removed.
"""

from __future__ import annotations

import threading
from typing import FrozenSet, Iterable, Protocol, runtime_checkable


@runtime_checkable
class MembershipProvider(Protocol):
    """Read-only view of the instances alive in this node's rack."""

    def live_rack_members(self) -> FrozenSet[str]:
        """Return the instance ids currently alive in this rack."""
        ...


class StaticMembership:
    """Membership backed by an explicit set of instance ids.

    Used for local deployments, where the control plane is a list handed
    in by the operator, and in tests. The set can be swapped at runtime
    with update().
    """

    def __init__(self, instance_ids: Iterable[str] = ()) -> None:
        self._members = frozenset(instance_ids)
        self._lock = threading.Lock()

    def update(self, instance_ids: Iterable[str]) -> None:
        """Replace the live set."""
        members = frozenset(instance_ids)
        with self._lock:
            self._members = members

    def live_rack_members(self) -> FrozenSet[str]:
        with self._lock:
            return self._members
