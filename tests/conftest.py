"""Test configuration for the MongoDB query package."""

from __future__ import annotations

from typing import Any

import pytest

from cqrs_ddd_mongo_query import (
    CommandSettings,
    MongoCommand,
    MongoConnectionManager,
    MongoQueryBuilder,
)

pytest_plugins = ["pytest_asyncio"]


class RecordingExecutor:
    """In-memory ICommandExecutor that records every call.

    ``replies`` are returned by ``execute`` in order (an Exception instance
    is raised instead); ``{"ok": 1.0}`` once they run out. Cursor commands
    consume one reply per batch.
    """

    def __init__(
        self,
        replies: list[Any] | None = None,
        rows: list[dict[str, Any]] | None = None,
        bulk_result: Any = None,
    ) -> None:
        self.replies = list(replies or [])
        self.rows = list(rows or [])
        self.bulk_result = bulk_result
        self.commands: list[tuple[str, dict[str, Any]]] = []
        self.queries: list[tuple[str, str, dict[str, Any], dict[str, Any]]] = []
        self.bulk_writes: list[tuple[str, list[Any], dict[str, Any]]] = []

    async def execute(self, database_name: str, document: dict[str, Any]) -> dict[str, Any]:
        self.commands.append((database_name, document))
        reply = self.replies.pop(0) if self.replies else {"ok": 1.0}
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def execute_cursor(
        self, database_name: str, document: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Drain a cursor reply, issuing ``getMore`` while the cursor id is non-zero."""
        reply = await self.execute(database_name, document)
        cursor = reply.get("cursor") or {}
        rows = list(cursor.get("firstBatch", []))
        while cursor.get("id"):
            reply = await self.execute(
                database_name,
                {"getMore": cursor["id"], "collection": cursor.get("ns", "")},
            )
            cursor = reply.get("cursor") or {}
            rows.extend(cursor.get("nextBatch", []))
        return rows

    async def query(
        self,
        database_name: str,
        collection_name: str,
        query_filter: dict[str, Any],
        options: dict[str, Any],
    ) -> list[dict[str, Any]]:
        self.queries.append((database_name, collection_name, query_filter, options))
        return self.rows

    async def bulk_write(
        self, namespace: str, operations: list[Any], options: dict[str, Any]
    ) -> Any:
        self.bulk_writes.append((namespace, operations, options))
        return self.bulk_result


@pytest.fixture
def query_builder() -> MongoQueryBuilder:
    return MongoQueryBuilder(default_database_name="test_db")


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def command(executor: RecordingExecutor) -> MongoCommand:
    return MongoCommand(
        executor,
        query_builder=MongoQueryBuilder(default_database_name="test_db"),
        database_name="test_db",
        settings=CommandSettings(enable_logging=True, enable_profiling=True),
    )


@pytest.fixture
def make_executor():
    """Factory for executors with canned replies."""
    return RecordingExecutor


@pytest.fixture
async def mongo_connection():
    """Create a MongoDB connection backed by mongomock-motor."""
    try:
        from mongomock_motor import AsyncMongoMockClient
    except ImportError:
        pytest.skip("mongomock-motor not installed")

    connection = MongoConnectionManager(
        "mongodb://mock:27017/test_db", enable_profiling=True
    )
    connection._client = AsyncMongoMockClient(default_database_name="test_db")
    yield connection
    connection._client = None
