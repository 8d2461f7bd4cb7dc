"""Active users."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from basable.errors import RemoteStoreError
from basable.models.config import ConnectionConfig
from basable.remote import RemoteConfigStore

logger = logging.getLogger(__name__)


@dataclass
class User:
    """
    A guest or authenticated identity.

    Guests are keyed by their network address; authenticated users by
    their account id.
    """

    id: str
    is_logged: bool = False
    remote_store: RemoteConfigStore | None = field(default=None, repr=False, compare=False)

    def authenticate(self) -> None:
        self.is_logged = True

    def logout(self) -> None:
        self.is_logged = False
        logger.info(f"User {self.id} logged out")

    async def save_config(self, config: ConnectionConfig) -> None:
        """Keep a connection config on the remote server for this user."""
        if self.remote_store is None:
            raise RemoteStoreError("Remote config store is not configured")
        await self.remote_store.save_connection_config(self.id, config)
