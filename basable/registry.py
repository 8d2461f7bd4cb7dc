"""
Connection Registry

Process-wide directory of active users and their live connections. One
instance is created at startup and shared by every request handler.

Both maps are keyed by user id and guarded by their own lock. No lock is
held across an await, so a slow backend never blocks lookups.

Usage:
    from basable.registry import Registry

    registry = Registry.from_settings()

    session = registry.create_guest_user("203.0.113.7")
    handle = await registry.connect_user("203.0.113.7", config)

    async with handle.acquire() as conn:
        tables = await conn.load_tables()

    await registry.log_user_out("203.0.113.7")
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from basable.config import Settings, get_settings
from basable.connectors.factory import create_connector
from basable.connectors.shared import SharedConnection
from basable.errors import UserNotFoundError
from basable.models.config import ConnectionConfig
from basable.remote import RemoteConfigStore
from basable.session import JwtSession, create_jwt
from basable.users import User

logger = logging.getLogger(__name__)


class Registry:
    """Owns the active users and the user id -> shared connection map."""

    def __init__(
        self,
        remote_store: RemoteConfigStore | None = None,
        mint_session: Callable[[str], JwtSession] = create_jwt,
        connect_timeout: int = 10,
        query_timeout: int = 30,
    ) -> None:
        """
        Initialize an empty registry.

        Args:
            remote_store: Remote config server shared by users and drivers
            mint_session: Mints a session token for an identity
            connect_timeout: Seconds a driver waits to reach its backend
            query_timeout: Seconds a driver call may take before failing
        """
        self.remote_store = remote_store
        self.mint_session = mint_session
        self.connect_timeout = connect_timeout
        self.query_timeout = query_timeout

        self._users: dict[str, User] = {}
        self._connections: dict[str, SharedConnection] = {}
        self._users_lock = threading.Lock()
        self._connections_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> Registry:
        settings = settings or get_settings()
        return cls(
            remote_store=RemoteConfigStore.from_settings(settings.remote),
            connect_timeout=settings.connector.connect_timeout,
            query_timeout=settings.connector.query_timeout,
        )

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    async def create_connection(self, config: ConnectionConfig) -> SharedConnection | None:
        """
        Create a connected, shareable driver for the config's source type.

        The registry is not modified; pair with add_connection().

        Raises:
            UnsupportedSourceError: If no driver handles the source type
            ConnectionError: If the backend cannot be reached
        """
        connection = create_connector(
            config,
            remote_store=self.remote_store,
            timeout=self.connect_timeout,
            query_timeout=self.query_timeout,
        )
        await connection.connect()
        logger.info(f"Created {config.source_type()} connection {config.connection_id}")
        return SharedConnection(connection)

    def get_connection(self, user_id: str) -> SharedConnection | None:
        """Get a user's active connection."""
        with self._connections_lock:
            return self._connections.get(user_id)

    async def add_connection(self, user_id: str, conn: SharedConnection) -> None:
        """Make conn the user's active connection, closing any it replaces."""
        with self._connections_lock:
            previous = self._connections.get(user_id)
            self._connections[user_id] = conn

        if previous is not None and previous is not conn:
            logger.info(f"Replacing connection {previous.connection_id} for {user_id}")
            await previous.close()

    async def connect_user(self, user_id: str, config: ConnectionConfig) -> SharedConnection | None:
        """
        Create a connection for the config and make it the user's active one.

        Raises:
            UserNotFoundError: If the user is not active, or logs out while
                the backend is being reached
            UnsupportedSourceError: If no driver handles the source type
            ConnectionError: If the backend cannot be reached
        """
        if self.find_user(user_id) is None:
            raise UserNotFoundError(user_id)

        conn = await self.create_connection(config)
        if conn is None:
            return None

        # The user may have logged out while connect() was pending.
        if self.find_user(user_id) is None:
            logger.info(f"Discarding connection {conn.connection_id}: {user_id} logged out")
            await conn.close()
            raise UserNotFoundError(user_id)

        await self.add_connection(user_id, conn)
        return conn

    async def remove_connection(self, user_id: str) -> None:
        """Drop and close a user's connection. No-op when there is none."""
        with self._connections_lock:
            conn = self._connections.pop(user_id, None)
        if conn is not None:
            await conn.close()

    def active_connections(self) -> list[str]:
        with self._connections_lock:
            return list(self._connections)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_guest_user(self, req_ip: str) -> JwtSession:
        """
        Create a guest user keyed by the request's network address.

        Raises:
            SessionError: If the session cannot be minted
        """
        session = self.mint_session(req_ip)
        self.add_user(User(id=req_ip, is_logged=False, remote_store=self.remote_store))
        logger.info(f"Created guest user {req_ip}")
        return session

    def add_user(self, user: User) -> None:
        """Add a user to the active users, replacing one with the same id."""
        if user.remote_store is None:
            user.remote_store = self.remote_store
        with self._users_lock:
            self._users[user.id] = user

    def find_user(self, user_id: str) -> User | None:
        """Get an active user."""
        with self._users_lock:
            return self._users.get(user_id)

    async def log_user_out(self, user_id: str) -> None:
        """
        Remove a user from the active users and close their connection.

        No-op when the user is not active.
        """
        with self._users_lock:
            user = self._users.pop(user_id, None)
        if user is None:
            return
        user.logout()
        await self.remove_connection(user_id)

    async def save_config(self, config: ConnectionConfig, user_id: str) -> None:
        """
        Save a connection config to the remote server for a user.

        Raises:
            UserNotFoundError: If the user is not active
            RemoteStoreError: If the remote store is missing or fails
        """
        user = self.find_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        await user.save_config(config)

    def active_users(self) -> list[str]:
        with self._users_lock:
            return list(self._users)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close every connection and forget all users."""
        with self._connections_lock:
            connections = list(self._connections.values())
            self._connections.clear()
        with self._users_lock:
            self._users.clear()

        for conn in connections:
            await conn.close()
        if self.remote_store is not None:
            await self.remote_store.close()
        logger.info(f"Registry closed ({len(connections)} connections)")
