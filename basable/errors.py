"""
Basable Exceptions

Every failure raised by the connection core derives from BasableError so
the transport layer can map the whole family to user-facing responses.

Hierarchy:
    BasableError
    ├── ConnectorError
    │   ├── ConnectionError        backend unreachable, auth failure, bad config
    │   ├── IntrospectionError     details/load_tables/table_exists I/O faults
    │   ├── TableNotFoundError     table config saved against a missing table
    │   └── UnsupportedSourceError no driver for the requested source type
    ├── UserNotFoundError
    ├── SessionError
    └── RemoteStoreError
"""


class BasableError(Exception):
    """Base exception for all Basable errors."""

    pass


class ConnectorError(BasableError):
    """Base exception for connector errors."""

    pass


class ConnectionError(ConnectorError):
    """Error establishing or managing a backend connection."""

    pass


class IntrospectionError(ConnectorError):
    """Error reading metadata from a connected backend."""

    pass


class TableNotFoundError(ConnectorError):
    """Table does not exist on the connection."""

    def __init__(self, table_name: str):
        super().__init__(f"Table not found: {table_name}")
        self.table_name = table_name


class UnsupportedSourceError(ConnectorError):
    """No driver is available for the requested source type."""

    def __init__(self, source_type: object):
        super().__init__(f"Unsupported source type: {source_type}")
        self.source_type = source_type


class UserNotFoundError(BasableError):
    """No active user with the given id."""

    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class SessionError(BasableError):
    """Error minting or verifying a session token."""

    pass


class RemoteStoreError(BasableError):
    """Error talking to the remote configuration server."""

    pass
