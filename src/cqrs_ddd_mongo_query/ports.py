"""ICommandExecutor: the network boundary of the query layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .batch import BatchOperation


@runtime_checkable
class ICommandExecutor(Protocol):
    """
    Runs finished documents against a server.

    Implementations own transport, sessions and read/write concerns. They
    receive documents produced by :class:`MongoQueryBuilder` and return raw
    replies, which the query layer never re-interprets beyond picking
    well-known reply fields (``n``, ``values``, ``value``...).
    ``execute_cursor`` runs a cursor-returning command (``listCollections``,
    ``listIndexes``...) and returns every document, following ``getMore``
    until the server cursor is exhausted.
    Failures must surface as :class:`MongoCommandError`.
    """

    async def execute(
        self, database_name: str, document: dict[str, Any]
    ) -> dict[str, Any]: ...

    async def execute_cursor(
        self, database_name: str, document: dict[str, Any]
    ) -> list[dict[str, Any]]: ...

    async def query(
        self,
        database_name: str,
        collection_name: str,
        query_filter: dict[str, Any],
        options: dict[str, Any],
    ) -> list[dict[str, Any]]: ...

    async def bulk_write(
        self,
        namespace: str,
        operations: list[BatchOperation],
        options: dict[str, Any],
    ) -> Any: ...
