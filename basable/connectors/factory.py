"""Connection factory keyed by source type."""

from __future__ import annotations

from typing import TYPE_CHECKING

from basable.connectors.base import BaseConnection
from basable.connectors.mysql import MySQLConnection
from basable.errors import UnsupportedSourceError
from basable.models.config import (
    ConnectionConfig,
    DatabaseVariant,
    SourceKind,
    infer_source_type,
    resolve_source_type,
)

if TYPE_CHECKING:
    from basable.remote import RemoteConfigStore

__all__ = ["create_connector", "infer_source_type", "resolve_source_type", "supported_sources"]

_DATABASE_DRIVERS: dict[DatabaseVariant, type[BaseConnection]] = {
    DatabaseVariant.MYSQL: MySQLConnection,
}


def supported_sources() -> list[str]:
    """Source types with a driver, e.g. ['database/mysql']."""
    return [f"{SourceKind.DATABASE.value}/{variant.value}" for variant in _DATABASE_DRIVERS]


def create_connector(
    config: ConnectionConfig,
    remote_store: RemoteConfigStore | None = None,
    timeout: int = 10,
    query_timeout: int = 30,
) -> BaseConnection:
    """
    Build an unconnected driver for the config's source type.

    Raises:
        UnsupportedSourceError: If no driver handles the source type
        ConnectionError: If the config is malformed for the driver
    """
    source = config.source_type()
    if source.kind is SourceKind.DATABASE:
        driver = _DATABASE_DRIVERS.get(source.variant)
        if driver is not None:
            return driver(
                config,
                remote_store=remote_store,
                timeout=timeout,
                query_timeout=query_timeout,
            )
    raise UnsupportedSourceError(source)
