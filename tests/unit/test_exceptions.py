# Copyright 2026 Firefly Software Solutions Inc
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for escar exceptions."""

import pytest

from escar.exceptions import (
    ConfigurationError,
    CoordinatorError,
    CoordinatorNotReadyError,
    CoordinatorStateError,
    DirectoryError,
    EscarError,
    MembershipError,
    OperationCancelledError,
)


class TestEscarError:
    """Tests for base EscarError."""

    def test_basic_error(self):
        """Test basic error creation."""
        error = EscarError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.retryable is True

    @pytest.mark.parametrize(
        "cls",
        [
            DirectoryError,
            MembershipError,
            ConfigurationError,
            OperationCancelledError,
            CoordinatorError,
        ],
    )
    def test_hierarchy(self, cls):
        """Test every error derives from EscarError."""
        assert issubclass(cls, EscarError)


class TestRetryableFlags:
    """Tests for retryable classification."""

    def test_transient_errors(self):
        """Test backend errors are retryable."""
        assert DirectoryError("down").retryable is True
        assert MembershipError("down").retryable is True

    def test_non_retryable_errors(self):
        """Test configuration and lifecycle errors are not retryable."""
        assert ConfigurationError("bad").retryable is False
        assert OperationCancelledError().retryable is False
        assert CoordinatorStateError("twice").retryable is False
        assert CoordinatorNotReadyError().retryable is False


class TestDirectoryError:
    """Tests for DirectoryError."""

    def test_with_operation(self):
        """Test the operation prefixes the message."""
        error = DirectoryError("timeout", operation="list_all")

        assert error.operation == "list_all"
        assert str(error) == "list_all: timeout"

    def test_without_operation(self):
        """Test the plain message without an operation."""
        assert str(DirectoryError("timeout")) == "timeout"


class TestCoordinatorErrors:
    """Tests for coordinator errors."""

    def test_state_error(self):
        """Test the offending state is kept."""
        error = CoordinatorStateError("already registered", state="ready")

        assert error.state == "ready"
        assert isinstance(error, CoordinatorError)

    def test_not_ready_default_message(self):
        """Test the default message."""
        assert "not registered" in str(CoordinatorNotReadyError())
