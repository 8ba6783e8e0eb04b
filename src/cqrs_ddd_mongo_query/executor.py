"""MotorCommandExecutor: ICommandExecutor on top of a Motor client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pymongo import WriteConcern
from pymongo.errors import ConfigurationError, PyMongoError

from .exceptions import MongoCommandError, MongoQueryError
from .ports import ICommandExecutor

if TYPE_CHECKING:
    from .batch import BatchOperation
    from .connection import MongoConnectionManager

# Command-style option names -> Motor keyword arguments.
_BULK_OPTIONS = {
    "ordered": "ordered",
    "bypassDocumentValidation": "bypass_document_validation",
    "bypass_document_validation": "bypass_document_validation",
    "comment": "comment",
}

_WRITE_CONCERN_OPTIONS = ("writeConcern", "write_concern")


def _split_namespace(namespace: str) -> tuple[str, str]:
    database_name, _, collection_name = namespace.partition(".")
    if not database_name or not collection_name:
        raise MongoQueryError(f"Invalid namespace '{namespace}'")
    return database_name, collection_name


def _write_concern(value: Any) -> WriteConcern:
    if isinstance(value, WriteConcern):
        return value
    try:
        return WriteConcern(**dict(value))
    except (TypeError, ValueError, ConfigurationError) as e:
        raise MongoQueryError(f"Invalid write concern {value!r}: {e}") from e


class MotorCommandExecutor(ICommandExecutor):
    """Runs command, find and bulk-write documents through Motor."""

    def __init__(self, connection: MongoConnectionManager) -> None:
        self._connection = connection

    def _database(self, database_name: str) -> Any:
        return self._connection.client.get_database(database_name)

    async def execute(
        self, database_name: str, document: dict[str, Any]
    ) -> dict[str, Any]:
        try:
            reply = await self._database(database_name).command(document)
        except PyMongoError as e:
            raise MongoCommandError(str(e), code=getattr(e, "code", None)) from e
        return dict(reply)

    async def execute_cursor(
        self, database_name: str, document: dict[str, Any]
    ) -> list[dict[str, Any]]:
        try:
            cursor = await self._database(database_name).cursor_command(document)
            return list(await cursor.to_list(length=None))
        except PyMongoError as e:
            raise MongoCommandError(str(e), code=getattr(e, "code", None)) from e

    async def query(
        self,
        database_name: str,
        collection_name: str,
        query_filter: dict[str, Any],
        options: dict[str, Any],
    ) -> list[dict[str, Any]]:
        kwargs = dict(options)
        sort = kwargs.pop("sort", None)
        if sort:
            kwargs["sort"] = list(sort.items())
        collection = self._database(database_name).get_collection(collection_name)
        try:
            cursor = collection.find(query_filter, **kwargs)
            return list(await cursor.to_list(length=None))
        except PyMongoError as e:
            raise MongoCommandError(str(e), code=getattr(e, "code", None)) from e

    async def bulk_write(
        self,
        namespace: str,
        operations: list[BatchOperation],
        options: dict[str, Any],
    ) -> Any:
        database_name, collection_name = _split_namespace(namespace)
        kwargs: dict[str, Any] = {}
        write_concern = None
        for name, value in options.items():
            if name in _WRITE_CONCERN_OPTIONS:
                write_concern = _write_concern(value)
            elif name in _BULK_OPTIONS:
                kwargs[_BULK_OPTIONS[name]] = value
            else:
                raise MongoQueryError(f"Unsupported bulk write option '{name}'")
        requests = [operation.to_request() for operation in operations]
        collection = self._database(database_name).get_collection(collection_name)
        if write_concern is not None:
            collection = collection.with_options(write_concern=write_concern)
        try:
            return await collection.bulk_write(requests, **kwargs)
        except PyMongoError as e:
            raise MongoCommandError(str(e), code=getattr(e, "code", None)) from e
