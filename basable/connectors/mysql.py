"""
MySQL Connection

Async-compatible MySQL driver using mysql-connector-python.

The underlying client is synchronous, so every backend call is executed
in a worker thread via asyncio.to_thread, on a short-lived client
connection, and bounded by the query timeout.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

import mysql.connector
from mysql.connector import Error as MySQLError

from basable.connectors.base import (
    MAX_COUNT,
    BaseConnection,
    ConnectionDetails,
    TableSummary,
    describe,
)
from basable.errors import ConnectionError, IntrospectionError
from basable.models.config import ConnectionConfig, DatabaseVariant

if TYPE_CHECKING:
    from basable.remote import RemoteConfigStore

logger = logging.getLogger(__name__)

_LOAD_TABLES_SQL = """
SELECT
    t.table_name AS name,
    t.table_rows AS row_count,
    t.create_time AS created,
    t.update_time AS updated,
    (
        SELECT COUNT(*)
        FROM information_schema.columns c
        WHERE c.table_schema = t.table_schema AND c.table_name = t.table_name
    ) AS col_count
FROM information_schema.tables t
WHERE t.table_schema = %s AND t.table_type = 'BASE TABLE'
ORDER BY t.table_name
"""

_TABLE_EXISTS_SQL = """
SELECT COUNT(*) AS matches
FROM information_schema.tables
WHERE table_schema = %s AND table_name = %s AND table_type = 'BASE TABLE'
"""


class MySQLConnection(BaseConnection):
    """MySQL driver using mysql-connector-python."""

    driver_name = "mysql"

    def __init__(
        self,
        config: ConnectionConfig,
        remote_store: RemoteConfigStore | None = None,
        timeout: int = 10,
        query_timeout: int = 30,
    ) -> None:
        super().__init__(config, remote_store=remote_store)
        self.timeout = timeout
        self.query_timeout = query_timeout
        self._server_version: str | None = None

    def validate_config(self, config: ConnectionConfig) -> None:
        if config.source_type().variant is not DatabaseVariant.MYSQL:
            raise ConnectionError(f"MySQL driver cannot open {config.source_type()} sources")
        if not config.host:
            raise ConnectionError("MySQL connection requires a host")
        if not config.database:
            raise ConnectionError("MySQL connection requires a database name")

    async def connect(self) -> None:
        """Validate connection credentials."""
        if self._connected:
            return
        try:
            self._server_version = await self._run(self._server_version_sync)
            self._connected = True
            logger.info(f"Connected to MySQL {self._server_version} at {self.config.host}")
        except MySQLError as exc:
            logger.error(f"MySQL connection failed: {exc}")
            raise ConnectionError(f"Failed to connect to MySQL: {exc}") from exc
        except Exception as exc:
            logger.error(f"MySQL connection failed: {exc}")
            raise ConnectionError(f"Connection error: {exc}") from exc

    async def details(self) -> ConnectionDetails:
        """Describe the server, re-checking that it still answers."""
        self._require_connected()
        try:
            self._server_version = await self._run(self._server_version_sync)
        except MySQLError as exc:
            logger.error(f"MySQL details failed: {exc}")
            raise ConnectionError(f"MySQL connection is no longer valid: {exc}") from exc
        except Exception as exc:
            logger.error(f"MySQL details failed: {exc}")
            raise IntrospectionError(f"Details error: {exc}") from exc
        return describe(self, server_version=self._server_version)

    async def load_tables(self) -> list[TableSummary]:
        """Summarize base tables in the configured schema."""
        self._require_connected()
        try:
            rows = await self._run(self._fetch_sync, _LOAD_TABLES_SQL, (self.config.database,))
        except MySQLError as exc:
            logger.error(f"MySQL table listing failed: {exc}")
            raise IntrospectionError(f"Failed to load tables: {exc}") from exc
        except Exception as exc:
            logger.error(f"MySQL table listing failed: {exc}")
            raise IntrospectionError(f"Table listing error: {exc}") from exc

        return [
            TableSummary(
                name=str(row["name"]),
                row_count=_count(row["row_count"]),
                col_count=_count(row["col_count"]),
                created=_timestamp(row.get("created")),
                updated=_timestamp(row.get("updated")),
            )
            for row in rows
        ]

    async def table_exists(self, name: str) -> bool:
        self._require_connected()
        try:
            rows = await self._run(
                self._fetch_sync, _TABLE_EXISTS_SQL, (self.config.database, name)
            )
        except MySQLError as exc:
            logger.error(f"MySQL table lookup failed: {exc}")
            raise IntrospectionError(f"Failed to check table {name}: {exc}") from exc
        except Exception as exc:
            logger.error(f"MySQL table lookup failed: {exc}")
            raise IntrospectionError(f"Table lookup error: {exc}") from exc
        return bool(rows and int(rows[0]["matches"]) > 0)

    async def close(self) -> None:
        """Close connection state."""
        if self._connected:
            logger.info(f"Closed MySQL connection {self.connection_id}")
        self._connected = False

    async def _run(self, func, *args):
        return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.query_timeout)

    def _connection_kwargs(self) -> dict[str, Any]:
        config = self.config
        kwargs = {
            "host": config.host,
            "port": config.port or 3306,
            "database": config.database,
            "user": config.user or "root",
            "password": config.password.get_secret_value(),
            "autocommit": True,
            "connection_timeout": self.timeout,
        }
        kwargs.update(config.options)
        return kwargs

    def _server_version_sync(self) -> str:
        conn = mysql.connector.connect(**self._connection_kwargs())
        cursor = conn.cursor()
        try:
            cursor.execute("SELECT VERSION()")
            row = cursor.fetchone()
            return str(row[0]) if row else ""
        finally:
            cursor.close()
            conn.close()

    def _fetch_sync(self, query: str, params: tuple[Any, ...]) -> list[dict[str, Any]]:
        conn = mysql.connector.connect(**self._connection_kwargs())
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(query, params)
            return cursor.fetchall()
        finally:
            cursor.close()
            conn.close()


def _count(value: Any) -> int:
    # information_schema.tables.table_rows is a BIGINT estimate
    return min(int(value or 0), MAX_COUNT)


def _timestamp(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
