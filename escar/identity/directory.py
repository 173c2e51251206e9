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
Shared instance directory.

The directory is the durable, externally visible store of ClusterInstance
records that every node of a deployment reads and writes. Records are
keyed by (app, id); creating a record whose key already exists replaces
it, so a repeated registration never leaves two rows for one node.

Two implementations are provided:

- InMemoryDirectory: process-local, for tests and single-process setups
- SQLiteDirectory: file-backed, shared by every process on a host

Example:
    >>> directory = SQLiteDirectory("/var/lib/escar/instances.db")
    >>> directory.create("escar", "us-east-1.i-001", "i-001", "host", "10.0.0.1",
    ...                  "us-east-1a", "us-east-1", "escar-east-v001", None)
    >>> [i.instance_id for i in directory.list_all("escar")]
    ['i-001']
"""

from __future__ import annotations

import sqlite3
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol, Tuple, Union, runtime_checkable

from escar.exceptions import DirectoryError
from escar.identity.instance import ClusterInstance
from escar.utils.logger import logger


def _now_ms() -> int:
    return int(time.time() * 1000)


@runtime_checkable
class InstanceDirectory(Protocol):
    """Store of ClusterInstance records, keyed per cluster name."""

    def create(
        self,
        app: str,
        id: str,
        instance_id: str,
        host_name: str,
        host_ip: str,
        rack: str,
        dc: str,
        asg: str,
        token: Optional[str],
    ) -> ClusterInstance:
        """Create (or replace) a record and return it as stored."""
        ...

    def delete(self, instance: ClusterInstance) -> None:
        """Delete a record. Deleting a missing record is a no-op."""
        ...

    def list_all(self, cluster_name: str) -> List[ClusterInstance]:
        """List every record of a cluster."""
        ...


class InMemoryDirectory:
    """Thread-safe directory held in process memory.

    Listings come back in creation order; replacing a record keeps its
    original position.
    """

    def __init__(self) -> None:
        self._records: Dict[Tuple[str, str], ClusterInstance] = {}
        self._lock = threading.RLock()

    def create(
        self,
        app: str,
        id: str,
        instance_id: str,
        host_name: str,
        host_ip: str,
        rack: str,
        dc: str,
        asg: str,
        token: Optional[str],
    ) -> ClusterInstance:
        instance = ClusterInstance(
            app=app,
            id=id,
            instance_id=instance_id,
            host_name=host_name,
            host_ip=host_ip,
            availability_zone=rack,
            dc=dc,
            asg=asg,
            update_time=_now_ms(),
            token=token,
        )
        with self._lock:
            if instance.key in self._records:
                logger.warning(f"Instance {id} already registered for {app}, replacing")
            self._records[instance.key] = instance
        return instance

    def delete(self, instance: ClusterInstance) -> None:
        with self._lock:
            self._records.pop(instance.key, None)

    def list_all(self, cluster_name: str) -> List[ClusterInstance]:
        with self._lock:
            return [r for r in self._records.values() if r.app == cluster_name]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


_SCHEMA = """
CREATE TABLE IF NOT EXISTS instances (
    app TEXT NOT NULL,
    id TEXT NOT NULL,
    instance_id TEXT NOT NULL,
    host_name TEXT,
    host_ip TEXT,
    availability_zone TEXT,
    dc TEXT,
    asg TEXT,
    token TEXT,
    update_time INTEGER,
    PRIMARY KEY (app, id)
)
"""

_COLUMNS = (
    "app, id, instance_id, host_name, host_ip, availability_zone, "
    "dc, asg, token, update_time"
)


class SQLiteDirectory:
    """
    Directory persisted in a SQLite database file.

    A new connection is opened per operation, so one instance may be used
    from several threads and several processes may share the file.
    sqlite3 errors surface as DirectoryError and are retried by callers.

    Attributes:
        db_path: Path of the database file
        timeout: Seconds to wait on a locked database
    """

    def __init__(self, db_path: Union[str, Path], timeout: float = 5.0) -> None:
        self.db_path = Path(db_path)
        self.timeout = timeout
        self._init_db()

    def _init_db(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect("init") as conn:
            conn.execute(_SCHEMA)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_instances_app ON instances(app)"
            )

    @contextmanager
    def _connect(self, operation: str) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=self.timeout)
        except sqlite3.Error as e:
            raise DirectoryError(str(e), operation=operation) from e
        try:
            with conn:
                yield conn
        except sqlite3.Error as e:
            raise DirectoryError(str(e), operation=operation) from e
        finally:
            conn.close()

    @staticmethod
    def _row_to_instance(row: tuple) -> ClusterInstance:
        (app, id, instance_id, host_name, host_ip, zone, dc, asg, token, update_time) = row
        return ClusterInstance(
            app=app,
            id=id,
            instance_id=instance_id,
            host_name=host_name or "",
            host_ip=host_ip or "",
            availability_zone=zone or "",
            dc=dc or "",
            asg=asg or "",
            update_time=update_time or 0,
            token=token,
        )

    def create(
        self,
        app: str,
        id: str,
        instance_id: str,
        host_name: str,
        host_ip: str,
        rack: str,
        dc: str,
        asg: str,
        token: Optional[str],
    ) -> ClusterInstance:
        instance = ClusterInstance(
            app=app,
            id=id,
            instance_id=instance_id,
            host_name=host_name,
            host_ip=host_ip,
            availability_zone=rack,
            dc=dc,
            asg=asg,
            update_time=_now_ms(),
            token=token,
        )
        with self._connect("create") as conn:
            conn.execute(
                f"INSERT INTO instances ({_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(app, id) DO UPDATE SET "
                "instance_id = excluded.instance_id, "
                "host_name = excluded.host_name, "
                "host_ip = excluded.host_ip, "
                "availability_zone = excluded.availability_zone, "
                "dc = excluded.dc, "
                "asg = excluded.asg, "
                "token = excluded.token, "
                "update_time = excluded.update_time",
                (
                    instance.app,
                    instance.id,
                    instance.instance_id,
                    instance.host_name,
                    instance.host_ip,
                    instance.availability_zone,
                    instance.dc,
                    instance.asg,
                    instance.token,
                    instance.update_time,
                ),
            )
        return instance

    def delete(self, instance: ClusterInstance) -> None:
        with self._connect("delete") as conn:
            conn.execute(
                "DELETE FROM instances WHERE app = ? AND id = ?",
                (instance.app, instance.id),
            )

    def list_all(self, cluster_name: str) -> List[ClusterInstance]:
        with self._connect("list_all") as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM instances WHERE app = ? ORDER BY rowid",
                (cluster_name,),
            ).fetchall()
        return [self._row_to_instance(row) for row in rows]
