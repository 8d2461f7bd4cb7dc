"""
Base Connection

Abstract base class for all backend drivers. Provides a consistent async
interface for connecting to and introspecting a data source, so the
registry never depends on a concrete backend type.

All drivers must implement:
- connect(): Reach the backend and validate credentials
- details(): Describe the backend behind the connection
- load_tables(): Summarize every visible table
- table_exists(): Check a single table name
- close(): Release backend resources
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from basable.errors import ConnectionError, RemoteStoreError, TableNotFoundError
from basable.models.config import ConnectionConfig, SourceType
from basable.models.table import TableConfig

if TYPE_CHECKING:
    from basable.remote import RemoteConfigStore

logger = logging.getLogger(__name__)

# Counts are reported as unsigned 32-bit values.
MAX_COUNT = 2**32 - 1


# ============================================================================
# Data Models
# ============================================================================


class TableSummary(BaseModel):
    """Snapshot of one table, produced fresh on every load."""

    name: str = Field(..., description="Table name")
    row_count: int = Field(..., ge=0, le=MAX_COUNT, description="Approximate row count")
    col_count: int = Field(..., ge=0, le=MAX_COUNT, description="Number of columns")
    created: str | None = Field(None, description="Creation time (ISO-8601)")
    updated: str | None = Field(None, description="Last update time (ISO-8601)")

    model_config = ConfigDict(frozen=True)


class ConnectionDetails(BaseModel):
    """Backend-identifying metadata for a live connection."""

    connection_id: str = Field(..., description="Connection identity")
    driver: str = Field(..., description="Driver name, e.g. 'mysql'")
    host: str | None = Field(None, description="Backend host")
    port: int | None = Field(None, description="Backend port")
    database: str | None = Field(None, description="Schema/catalog in use")
    user: str | None = Field(None, description="Backend user")
    server_version: str | None = Field(None, description="Backend server version")
    table_configs: dict[str, TableConfig] = Field(
        default_factory=dict, description="Table configs saved on this connection"
    )


# ============================================================================
# Base Connection
# ============================================================================


class BaseConnection(ABC):
    """
    Abstract base class for backend drivers.

    Construction validates the config for the backend; connect() reaches
    the backend. Together they either yield a usable connection or raise
    ConnectionError.

    Usage:
        class MyConnection(BaseConnection):
            driver_name = "mine"

            async def connect(self):
                # Implementation
                pass

            async def load_tables(self):
                # Implementation
                pass

            # ... implement other methods

        conn = MyConnection(config)
        await conn.connect()

        for table in await conn.load_tables():
            print(f"{table.name}: {table.row_count} rows")

        await conn.close()
    """

    driver_name: str = "base"

    def __init__(
        self,
        config: ConnectionConfig,
        remote_store: RemoteConfigStore | None = None,
    ):
        """
        Initialize connection.

        Args:
            config: How to reach the backend
            remote_store: Remote config server for non-local table configs

        Raises:
            ConnectionError: If the config is malformed for this backend
        """
        self.validate_config(config)
        self.config = config
        self.remote_store = remote_store

        self._table_configs: dict[str, TableConfig] = {}
        self._connected = False

        logger.info(f"Initialized {self.__class__.__name__} {config.connection_id}")

    def validate_config(self, config: ConnectionConfig) -> None:
        """
        Reject configs this backend cannot use.

        Override to add backend-specific checks; raise ConnectionError.
        """
        pass

    @abstractmethod
    async def connect(self) -> None:
        """
        Reach the backend and validate credentials.

        Should be idempotent.

        Raises:
            ConnectionError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def details(self) -> ConnectionDetails:
        """
        Describe the backend behind this connection.

        Raises:
            ConnectionError: If the connection is no longer valid
            IntrospectionError: If the backend cannot be queried
        """
        pass

    @abstractmethod
    async def load_tables(self) -> list[TableSummary]:
        """
        Summarize every table visible to this connection.

        Returns an empty list when the source has no tables.

        Raises:
            IntrospectionError: On backend I/O failure
        """
        pass

    @abstractmethod
    async def table_exists(self, name: str) -> bool:
        """
        Check whether a table exists. Name rules are the backend's.

        Raises:
            IntrospectionError: On backend I/O failure
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Release backend resources.

        Should be idempotent - safe to call multiple times.
        """
        pass

    async def save_table_config(
        self,
        table_name: str,
        table_config: TableConfig,
        save_local: bool = False,
    ) -> None:
        """
        Persist a table configuration.

        Args:
            table_name: Table the config belongs to
            table_config: Config to store
            save_local: Keep the config on this instance instead of the
                remote config server

        Raises:
            ValueError: If table_config names a different table
            TableNotFoundError: If the table does not exist on this connection
            RemoteStoreError: If the remote store is missing or fails
        """
        if table_config.table_name != table_name:
            raise ValueError(
                f"Config is for table {table_config.table_name!r}, not {table_name!r}"
            )

        if not await self.table_exists(table_name):
            raise TableNotFoundError(table_name)

        if save_local:
            self._table_configs[table_name] = table_config
            logger.debug(f"Saved local config for {table_name} on {self.connection_id}")
            return

        if self.remote_store is None:
            raise RemoteStoreError("Remote config store is not configured")
        await self.remote_store.save_table_config(self.connection_id, table_name, table_config)

    @property
    def connection_id(self) -> str:
        return self.config.connection_id

    @property
    def source_type(self) -> SourceType:
        return self.config.source_type()

    @property
    def table_configs(self) -> dict[str, TableConfig]:
        """Table configs saved locally on this instance."""
        return dict(self._table_configs)

    @property
    def is_connected(self) -> bool:
        """Check if connection is live."""
        return self._connected

    def _require_connected(self) -> None:
        if not self._connected:
            raise ConnectionError("Not connected. Call connect() first.")

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
        return False

    def __repr__(self) -> str:
        """String representation."""
        status = "connected" if self._connected else "disconnected"
        config = self.config
        target = f"{config.user}@{config.host}:{config.port}/{config.database}"
        return f"<{self.__class__.__name__} {target} ({status})>"


def describe(connection: BaseConnection, **extra: Any) -> ConnectionDetails:
    """Build ConnectionDetails from a connection's config and local state."""
    config = connection.config
    return ConnectionDetails(
        connection_id=connection.connection_id,
        driver=connection.driver_name,
        host=config.host,
        port=config.port,
        database=config.database,
        user=config.user,
        table_configs=connection.table_configs,
        **extra,
    )
