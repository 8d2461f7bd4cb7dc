"""
Remote Config Store

HTTP client for the Basable control-plane server, which keeps table and
connection configs that outlive a single process.

Endpoints:
    PUT  /connections/{connection_id}/tables/{table_name}/config
    POST /users/{user_id}/configs
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from basable.config import RemoteSettings
from basable.errors import RemoteStoreError
from basable.models.config import ConnectionConfig
from basable.models.table import TableConfig

logger = logging.getLogger(__name__)


class RemoteConfigStore:
    """Async client for the remote configuration server."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the store client.

        Args:
            base_url: Server base URL
            api_key: Optional bearer key sent with every request
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

        logger.info(f"Remote config store initialized: {self.base_url}")

    @classmethod
    def from_settings(cls, settings: RemoteSettings) -> RemoteConfigStore | None:
        """Build a store from settings, or None when no server is configured."""
        if settings.base_url is None:
            return None
        api_key = settings.api_key.get_secret_value() if settings.api_key else None
        return cls(str(settings.base_url), api_key=api_key, timeout=settings.timeout)

    async def save_table_config(
        self, connection_id: str, table_name: str, config: TableConfig
    ) -> None:
        """Store a table config keyed by connection and table name."""
        path = f"/connections/{quote(connection_id, safe='')}/tables/{quote(table_name, safe='')}/config"
        await self._send("PUT", path, config.model_dump(mode="json"))

    async def save_connection_config(self, user_id: str, config: ConnectionConfig) -> None:
        """Store a connection config for a user. Credentials are never sent."""
        path = f"/users/{quote(user_id, safe='')}/configs"
        await self._send("POST", path, config.public_dump())

    async def close(self) -> None:
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    async def _send(self, method: str, path: str, payload: dict[str, Any]) -> None:
        try:
            response = await self.client.request(method, path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(f"Remote store rejected {method} {path}: {exc.response.status_code}")
            raise RemoteStoreError(
                f"Remote store returned {exc.response.status_code} for {method} {path}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(f"Remote store request failed: {exc}")
            raise RemoteStoreError(f"Remote store unavailable: {exc}") from exc
        logger.debug(f"Remote store {method} {path} -> {response.status_code}")
