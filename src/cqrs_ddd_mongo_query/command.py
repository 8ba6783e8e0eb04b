"""MongoCommand: runs composed documents through an ICommandExecutor.

Every method builds its document with :class:`MongoQueryBuilder` first, so
malformed conditions and index specs fail before anything reaches the
server.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from bson import json_util
from pymongo.errors import PyMongoError

from .batch import BatchResult, InsertOperation, WriteBatch
from .connection import CommandSettings
from .exceptions import MongoCommandError, MongoQueryError
from .query_builder import MongoQueryBuilder

if TYPE_CHECKING:
    from bson.code import Code

    from .batch import BatchOperation
    from .indexes import IndexSpecification
    from .ports import ICommandExecutor

logger = logging.getLogger(__name__)

R = TypeVar("R")

# Server error codes meaning "collection/database does not exist".
_NAMESPACE_NOT_FOUND_CODES = frozenset({26, 60})

# Options that belong to the bulk write rather than to a single operation.
_BATCH_OPTIONS = (
    "bypassDocumentValidation",
    "bypass_document_validation",
    "ordered",
    "comment",
    "writeConcern",
    "write_concern",
)


def _split_batch_options(
    options: Mapping[str, Any] | None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    operation_options = dict(options or {})
    batch_options = {
        name: operation_options.pop(name)
        for name in _BATCH_OPTIONS
        if name in operation_options
    }
    return operation_options, batch_options


class MongoCommand:
    """Executes MongoDB commands composed from portable specifications.

    Example::

        command = connection.create_command()
        total = await command.count("customers", {"status": [1, 2]})
        rows = await command.find(
            "customers",
            ["BETWEEN", "age", 18, 30],
            {"sort": {"age": SortDirection.DESC}, "limit": 10},
        )
    """

    def __init__(
        self,
        executor: ICommandExecutor,
        *,
        query_builder: MongoQueryBuilder | None = None,
        database_name: str | None = None,
        settings: CommandSettings | None = None,
    ) -> None:
        self._executor = executor
        self.query_builder = query_builder or MongoQueryBuilder(database_name)
        self.database_name = database_name or self.query_builder.default_database_name
        self._settings = settings or CommandSettings()

    def _resolve_database(self) -> str:
        if not self.database_name:
            raise MongoQueryError(
                "Database name must be set on the command or the connection"
            )
        return self.database_name

    async def _traced(
        self, namespace: str, payload: Any, call: Callable[[], Awaitable[R]]
    ) -> R:
        """Run ``call`` and log the command (and its duration when profiling)."""
        start = time.monotonic()
        try:
            return await call()
        except MongoCommandError:
            logger.warning("MongoDB command failed on %s", namespace, exc_info=True)
            raise
        except PyMongoError as e:
            logger.warning("MongoDB command failed on %s", namespace, exc_info=True)
            raise MongoCommandError(str(e), code=getattr(e, "code", None)) from e
        finally:
            if self._settings.enable_logging:
                self._log_command(namespace, payload, start)

    def _log_command(self, namespace: str, payload: Any, start: float) -> None:
        try:
            entry: dict[str, Any] = {"namespace": namespace, "document": payload}
            if self._settings.enable_profiling:
                entry["duration_ms"] = round((time.monotonic() - start) * 1000, 2)
            logger.info(json_util.dumps(entry))
        except Exception:  # noqa: BLE001
            logger.debug("Failed to emit command log entry", exc_info=True)

    # Execution primitives

    async def execute(self, document: dict[str, Any]) -> dict[str, Any]:
        """Run a command document against this command's database."""
        database_name = self._resolve_database()
        return await self._traced(
            f"{database_name}.$cmd",
            document,
            lambda: self._executor.execute(database_name, document),
        )

    async def execute_cursor(
        self, document: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Run a cursor-returning command and return every document it yields."""
        database_name = self._resolve_database()
        return await self._traced(
            f"{database_name}.$cmd",
            document,
            lambda: self._executor.execute_cursor(database_name, document),
        )

    async def execute_batch(
        self,
        collection_name: str,
        operations: WriteBatch | Iterable[BatchOperation],
        options: Mapping[str, Any] | None = None,
    ) -> BatchResult:
        """Run queued writes as one bulk write.

        Returns the ids assigned to inserted documents (keyed by operation
        position) together with the driver's result.
        """
        if isinstance(operations, WriteBatch):
            operations = operations.operations
        queued = list(operations)
        if not queued:
            raise MongoQueryError("Batch contains no operations")
        namespace = f"{self._resolve_database()}.{collection_name}"
        result = await self._traced(
            namespace,
            [operation.model_dump() for operation in queued],
            lambda: self._executor.bulk_write(namespace, queued, dict(options or {})),
        )
        inserted_ids = {
            position: operation.document["_id"]
            for position, operation in enumerate(queued)
            if isinstance(operation, InsertOperation)
        }
        return BatchResult(inserted_ids=inserted_ids, result=result)

    async def query(
        self,
        collection_name: str,
        query_filter: dict[str, Any],
        options: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Run an already translated filter as a find query."""
        database_name = self._resolve_database()
        find_options = dict(options or {})
        return await self._traced(
            f"{database_name}.{collection_name}",
            {"filter": query_filter, **find_options},
            lambda: self._executor.query(
                database_name, collection_name, query_filter, find_options
            ),
        )

    # Databases and collections

    async def drop_database(self) -> bool:
        reply = await self.execute(self.query_builder.drop_database())
        return bool(reply.get("ok", 0) > 0)

    async def create_collection(
        self, collection_name: str, options: Mapping[str, Any] | None = None
    ) -> bool:
        reply = await self.execute(
            self.query_builder.create_collection(collection_name, options)
        )
        return bool(reply.get("ok", 0) > 0)

    async def drop_collection(self, collection_name: str) -> bool:
        reply = await self.execute(self.query_builder.drop_collection(collection_name))
        return bool(reply.get("ok", 0) > 0)

    async def list_databases(
        self, condition: Any = None, options: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Return database info; ``listDatabases`` always runs against ``admin``."""
        document = self.query_builder.list_databases(condition, options)
        database_name = "admin"
        reply = await self._traced(
            f"{database_name}.$cmd",
            document,
            lambda: self._executor.execute(database_name, document),
        )
        return list(reply.get("databases") or [])

    async def list_collections(
        self, condition: Any = None, options: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        return await self.execute_cursor(
            self.query_builder.list_collections(condition, options)
        )

    # Indexes

    async def create_indexes(
        self,
        collection_name: str,
        indexes: Iterable[Mapping[str, Any] | IndexSpecification],
    ) -> bool:
        reply = await self.execute(
            self.query_builder.create_indexes(
                self.database_name, collection_name, indexes
            )
        )
        return bool(reply.get("ok", 0) > 0)

    async def drop_indexes(self, collection_name: str, indexes: str) -> dict[str, Any]:
        """Drop indexes by name; ``*`` drops all but ``_id``."""
        return await self.execute(
            self.query_builder.drop_indexes(collection_name, indexes)
        )

    async def list_indexes(
        self, collection_name: str, options: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Return index info, or ``[]`` when the collection does not exist."""
        document = self.query_builder.list_indexes(collection_name, options)
        try:
            return await self.execute_cursor(document)
        except MongoCommandError as e:
            if e.code in _NAMESPACE_NOT_FOUND_CODES:
                return []
            raise

    # Reads

    async def count(
        self,
        collection_name: str,
        condition: Any = None,
        options: Mapping[str, Any] | None = None,
    ) -> int:
        reply = await self.execute(
            self.query_builder.count(collection_name, condition, options)
        )
        return int(reply.get("n", 0))

    async def find(
        self,
        collection_name: str,
        condition: Any = None,
        options: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Translate ``condition`` and the find options, then run the query."""
        query_filter, find_options = self.query_builder.build_find(condition, options)
        return await self.query(collection_name, query_filter, find_options)

    async def find_and_modify(
        self,
        collection_name: str,
        condition: Any = None,
        update: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Return the original document, or the modified one with ``{"new": True}``."""
        reply = await self.execute(
            self.query_builder.find_and_modify(
                collection_name, condition, update, options
            )
        )
        return reply.get("value")

    async def distinct(
        self,
        collection_name: str,
        field_name: str,
        condition: Any = None,
        options: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        reply = await self.execute(
            self.query_builder.distinct(collection_name, field_name, condition, options)
        )
        values = reply.get("values")
        if not isinstance(values, list):
            raise MongoCommandError(
                f"distinct on '{collection_name}.{field_name}' returned no values"
            )
        return values

    async def map_reduce(
        self,
        collection_name: str,
        map_function: Code | str,
        reduce_function: Code | str,
        out: str | Mapping[str, Any],
        condition: Any = None,
        options: Mapping[str, Any] | None = None,
    ) -> Any:
        """Return inline ``results``, or the output collection ``result``."""
        reply = await self.execute(
            self.query_builder.map_reduce(
                collection_name, map_function, reduce_function, out, condition, options
            )
        )
        if "results" in reply:
            return reply["results"]
        return reply.get("result")

    async def explain(
        self, collection_name: str, query: Mapping[str, Any]
    ) -> dict[str, Any]:
        return await self.execute(self.query_builder.explain(collection_name, query))

    # Writes

    async def insert(
        self,
        collection_name: str,
        document: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
    ) -> Any:
        """Insert one document and return its ``_id``."""
        batch = WriteBatch().add_insert(document)
        result = await self.execute_batch(collection_name, batch, options)
        return result.inserted_ids[0]

    async def batch_insert(
        self,
        collection_name: str,
        documents: Iterable[Mapping[str, Any]],
        options: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        """Insert documents and return their ``_id`` values, in order."""
        batch = WriteBatch()
        for document in documents:
            batch.add_insert(document)
        result = await self.execute_batch(collection_name, batch, options)
        return [result.inserted_ids[position] for position in sorted(result.inserted_ids)]

    async def update(
        self,
        collection_name: str,
        condition: Any,
        document: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
    ) -> Any:
        """Update matching documents (all of them unless ``{"multi": False}``)."""
        operation_options, batch_options = _split_batch_options(options)
        batch = WriteBatch().add_update(condition, document, operation_options)
        result = await self.execute_batch(collection_name, batch, batch_options)
        return result.result

    async def delete(
        self,
        collection_name: str,
        condition: Any,
        options: Mapping[str, Any] | None = None,
    ) -> Any:
        operation_options, batch_options = _split_batch_options(options)
        batch = WriteBatch().add_delete(condition, operation_options)
        result = await self.execute_batch(collection_name, batch, batch_options)
        return result.result
