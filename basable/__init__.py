"""
Basable

Connection-management core of a multi-backend database administration
service: per-user connections behind one driver contract.
"""

from basable.errors import (
    BasableError,
    ConnectionError,
    ConnectorError,
    IntrospectionError,
    RemoteStoreError,
    SessionError,
    TableNotFoundError,
    UnsupportedSourceError,
    UserNotFoundError,
)

__version__ = "0.1.0"

__all__ = [
    "BasableError",
    "ConnectionError",
    "ConnectorError",
    "IntrospectionError",
    "RemoteStoreError",
    "SessionError",
    "TableNotFoundError",
    "UnsupportedSourceError",
    "UserNotFoundError",
]
