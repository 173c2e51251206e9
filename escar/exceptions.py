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

"""Custom exceptions for escar.

This module defines the exception hierarchy used throughout escar.
All exceptions inherit from EscarError for easy catching and handling.

Exception Hierarchy:
    EscarError (base)
    ├── DirectoryError - Shared instance directory failures
    ├── MembershipError - Cloud membership lookup failures
    ├── ConfigurationError - Invalid node configuration
    ├── OperationCancelledError - Cancellation of an in-flight call
    └── CoordinatorError - Instance coordinator lifecycle errors
        ├── CoordinatorStateError - Invalid lifecycle transition
        └── CoordinatorNotReadyError - Query before registration

Every exception carries a ``retryable`` flag. The retry executor uses it
to decide whether a failed attempt is worth repeating: directory and
membership failures are transient, configuration and lifecycle errors
are not.

Example:
    try:
        coordinator = InstanceCoordinator.start(config, directory, membership)
    except ConfigurationError:
        # Fix the environment, retrying will not help
        raise
    except EscarError:
        # Retry budget exhausted against the directory
        raise
"""

from __future__ import annotations

from typing import Optional


class EscarError(Exception):
    """Base exception for all escar errors.

    Attributes:
        message: Error message describing what went wrong
        retryable: Whether repeating the failed call may succeed
    """

    retryable = True

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class DirectoryError(EscarError):
    """Exception raised when a directory call fails.

    Raised by directory implementations for create, delete and listing
    failures (storage unavailable, timeouts, corrupt rows).

    Attributes:
        operation: Name of the directory operation that failed
    """

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class MembershipError(EscarError):
    """Exception raised when the live rack membership cannot be read."""
    pass


class ConfigurationError(EscarError):
    """Exception raised for invalid node configuration.

    Configuration does not change while the process runs, so these are
    never retried.

    Examples:
        - Tribe mode enabled without any cluster names
        - Missing instance id or availability zone
    """

    retryable = False


class OperationCancelledError(EscarError):
    """Exception raised to abort an in-flight retrying call.

    The retry executor re-raises it immediately without consuming the
    retry budget or sleeping.
    """

    retryable = False


class CoordinatorError(EscarError):
    """Base exception for instance coordinator errors."""

    retryable = False


class CoordinatorStateError(CoordinatorError):
    """Raised when a lifecycle transition is not allowed.

    Attributes:
        state: The state the coordinator was in
    """

    def __init__(self, message: str, state: Optional[str] = None) -> None:
        super().__init__(message)
        self.state = state


class CoordinatorNotReadyError(CoordinatorError):
    """Raised when identity is queried before registration completed."""

    def __init__(self, message: str = "Instance is not registered yet") -> None:
        super().__init__(message)
