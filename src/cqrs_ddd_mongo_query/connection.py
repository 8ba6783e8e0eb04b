"""MongoConnectionManager: Motor client lifecycle, default database, command factory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from .exceptions import MongoConnectionError
from .query_builder import MongoQueryBuilder

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClient

    from .command import MongoCommand


@dataclass(frozen=True)
class CommandSettings:
    """Logging switches handed to every command.

    Attributes:
        enable_logging: Log each command document (namespace + payload).
        enable_profiling: Add ``duration_ms`` to command log entries.
    """

    enable_logging: bool = True
    enable_profiling: bool = False


def _database_from_url(url: str) -> str | None:
    path = urlsplit(url).path.lstrip("/")
    return path or None


class MongoConnectionManager:
    """Wrap Motor client with lifecycle and health-check helpers."""

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        *,
        default_database_name: str | None = None,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 10000,
        enable_logging: bool = True,
        enable_profiling: bool = False,
        **kwargs: Any,
    ) -> None:
        self._url = url
        self._default_database_name = default_database_name or _database_from_url(url)
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._connect_timeout_ms = connect_timeout_ms
        self._kwargs = kwargs
        self._client: AsyncIOMotorClient[Any] | None = None
        self.settings = CommandSettings(
            enable_logging=enable_logging, enable_profiling=enable_profiling
        )
        self._query_builder: MongoQueryBuilder | None = None

    @property
    def default_database_name(self) -> str | None:
        """Database used when a command names none (explicit, else from the URL)."""
        return self._default_database_name

    @property
    def query_builder(self) -> MongoQueryBuilder:
        if self._query_builder is None:
            self._query_builder = MongoQueryBuilder(self._default_database_name)
        return self._query_builder

    async def connect(self) -> AsyncIOMotorClient[Any]:
        """Create and cache the Motor client. Idempotent."""
        if self._client is not None:
            return self._client
        try:
            from motor.motor_asyncio import AsyncIOMotorClient
        except ImportError as e:
            raise MongoConnectionError(
                "motor is required; install with motor>=3.4"
            ) from e
        try:
            self._client = AsyncIOMotorClient(
                self._url,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
                connectTimeoutMS=self._connect_timeout_ms,
                **self._kwargs,
            )
            return self._client
        except Exception as e:
            raise MongoConnectionError(str(e)) from e

    @property
    def client(self) -> AsyncIOMotorClient[Any]:
        """Return the Motor client; raises if not connected."""
        if self._client is None:
            raise MongoConnectionError("Not connected; call connect() first")
        return self._client

    def close(self) -> None:
        """Close the client (synchronous; Motor client.close() is sync)."""
        if self._client is not None:
            self._client.close()
            self._client = None

    async def health_check(self) -> bool:
        """Ping the server; return True if reachable."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except Exception:  # noqa: BLE001
            return False

    def create_command(self, database_name: str | None = None) -> MongoCommand:
        """Create a command bound to ``database_name`` (default database if None)."""
        from .command import MongoCommand
        from .executor import MotorCommandExecutor

        return MongoCommand(
            MotorCommandExecutor(self),
            query_builder=self.query_builder,
            database_name=database_name or self._default_database_name,
            settings=self.settings,
        )
