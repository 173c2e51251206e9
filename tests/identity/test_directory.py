# Copyright 2026 Firefly Software Solutions Inc
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for instance directories."""

import sqlite3
import threading

import pytest

from escar.exceptions import DirectoryError
from escar.identity.directory import (
    InMemoryDirectory,
    InstanceDirectory,
    SQLiteDirectory,
)
from escar.identity.instance import ClusterInstance


def create(directory, instance_id, app="escar", asg="escar-east-v001", token=None):
    return directory.create(
        app,
        f"us-east-1.{instance_id}",
        instance_id,
        f"{instance_id}.example.com",
        "10.0.0.1",
        "us-east-1a",
        "us-east-1",
        asg,
        token,
    )


@pytest.fixture(params=["memory", "sqlite"])
def directory(request, tmp_path):
    """Each directory implementation."""
    if request.param == "memory":
        return InMemoryDirectory()
    return SQLiteDirectory(tmp_path / "instances.db")


class TestDirectoryContract:
    """Tests shared by every directory implementation."""

    def test_satisfies_protocol(self, directory):
        """Test implementations satisfy the InstanceDirectory protocol."""
        assert isinstance(directory, InstanceDirectory)

    def test_create_returns_record(self, directory):
        """Test create returns the stored record."""
        instance = create(directory, "i-001", token="42")

        assert isinstance(instance, ClusterInstance)
        assert instance.app == "escar"
        assert instance.id == "us-east-1.i-001"
        assert instance.instance_id == "i-001"
        assert instance.host_name == "i-001.example.com"
        assert instance.host_ip == "10.0.0.1"
        assert instance.availability_zone == "us-east-1a"
        assert instance.dc == "us-east-1"
        assert instance.asg == "escar-east-v001"
        assert instance.token == "42"
        assert instance.update_time > 0

    def test_list_all_round_trip(self, directory):
        """Test listed records equal the created ones."""
        created = create(directory, "i-001")

        assert directory.list_all("escar") == [created]

    def test_list_all_filters_by_cluster(self, directory):
        """Test listings only include the requested cluster."""
        create(directory, "i-001", app="escar")
        create(directory, "i-002", app="other")

        assert [i.instance_id for i in directory.list_all("escar")] == ["i-001"]
        assert [i.instance_id for i in directory.list_all("other")] == ["i-002"]
        assert directory.list_all("missing") == []

    def test_list_all_creation_order(self, directory):
        """Test listings follow creation order."""
        for instance_id in ("i-003", "i-001", "i-002"):
            create(directory, instance_id)

        ids = [i.instance_id for i in directory.list_all("escar")]
        assert ids == ["i-003", "i-001", "i-002"]

    def test_create_existing_key_replaces(self, directory):
        """Test creating an existing key leaves a single record."""
        create(directory, "i-001", asg="old-asg")
        replaced = create(directory, "i-001", asg="new-asg")

        records = directory.list_all("escar")
        assert len(records) == 1
        assert records[0].asg == "new-asg"
        assert records[0] == replaced

    def test_create_existing_key_keeps_position(self, directory):
        """Test re-registering a record keeps its place in the listing."""
        for instance_id in ("i-001", "i-002", "i-003"):
            create(directory, instance_id)

        create(directory, "i-001", asg="new-asg")

        records = directory.list_all("escar")
        assert [i.instance_id for i in records] == ["i-001", "i-002", "i-003"]
        assert records[0].asg == "new-asg"

    def test_same_id_in_different_apps(self, directory):
        """Test keys are scoped per app."""
        create(directory, "i-001", app="a")
        create(directory, "i-001", app="b")

        assert len(directory.list_all("a")) == 1
        assert len(directory.list_all("b")) == 1

    def test_delete(self, directory):
        """Test delete removes only the given record."""
        first = create(directory, "i-001")
        create(directory, "i-002")

        directory.delete(first)

        assert [i.instance_id for i in directory.list_all("escar")] == ["i-002"]

    def test_delete_missing_is_noop(self, directory):
        """Test deleting an unknown record does not raise."""
        ghost = ClusterInstance(app="escar", id="us-east-1.i-404", instance_id="i-404")

        directory.delete(ghost)

        assert directory.list_all("escar") == []


class TestInMemoryDirectory:
    """Tests specific to InMemoryDirectory."""

    def test_len(self):
        """Test len counts records across apps."""
        directory = InMemoryDirectory()
        create(directory, "i-001", app="a")
        create(directory, "i-002", app="b")

        assert len(directory) == 2

    def test_concurrent_creates(self):
        """Test concurrent registrations are all stored."""
        directory = InMemoryDirectory()
        threads = [
            threading.Thread(target=create, args=(directory, f"i-{n:03d}"))
            for n in range(20)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(directory.list_all("escar")) == 20


class TestSQLiteDirectory:
    """Tests specific to SQLiteDirectory."""

    def test_creates_parent_directory(self, tmp_path):
        """Test the database directory is created."""
        db_path = tmp_path / "nested" / "dir" / "instances.db"

        SQLiteDirectory(db_path)

        assert db_path.exists()

    def test_records_survive_reopen(self, tmp_path):
        """Test records are durable across directory objects."""
        db_path = tmp_path / "instances.db"
        created = create(SQLiteDirectory(db_path), "i-001")

        reopened = SQLiteDirectory(db_path)

        assert reopened.list_all("escar") == [created]

    def test_sqlite_errors_wrapped(self, tmp_path):
        """Test sqlite failures surface as DirectoryError."""
        db_path = tmp_path / "instances.db"
        directory = SQLiteDirectory(db_path)
        with sqlite3.connect(str(db_path)) as conn:
            conn.execute("DROP TABLE instances")

        with pytest.raises(DirectoryError) as exc_info:
            directory.list_all("escar")

        assert exc_info.value.operation == "list_all"
        assert exc_info.value.retryable is True
