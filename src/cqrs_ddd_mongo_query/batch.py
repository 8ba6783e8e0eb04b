"""Write batches: insert/update/delete operations for a single bulk write."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from pymongo import DeleteMany, DeleteOne, InsertOne, ReplaceOne, UpdateMany, UpdateOne

from .condition import build_condition
from .exceptions import MongoQueryError
from .operators import is_native

# Per-operation option names (command or driver spelling) -> request keywords.
_UPDATE_OPTIONS = {
    "arrayFilters": "array_filters",
    "array_filters": "array_filters",
    "collation": "collation",
    "hint": "hint",
}
_DELETE_OPTIONS = {
    "collation": "collation",
    "hint": "hint",
}


def _request_options(
    options: Mapping[str, Any], names: Mapping[str, str], kind: str
) -> dict[str, Any]:
    unknown = sorted(name for name in options if name not in names)
    if unknown:
        raise MongoQueryError(
            f"Unsupported {kind} option(s): {', '.join(unknown)}"
        )
    return {names[name]: value for name, value in options.items()}


class _Operation(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class InsertOperation(_Operation):
    type: Literal["insert"] = "insert"
    document: dict[str, Any]

    def to_request(self) -> InsertOne[Any]:
        return InsertOne(self.document)


class UpdateOperation(_Operation):
    type: Literal["update"] = "update"
    condition: dict[str, Any]
    document: dict[str, Any]
    multi: bool = True
    upsert: bool = False
    options: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_replacement(self) -> bool:
        """A single update whose document holds no update operators."""
        keys = list(self.document)
        return not self.multi and bool(keys) and not is_native(keys[0])

    def to_request(self) -> UpdateMany | UpdateOne | ReplaceOne[Any]:
        if self.multi:
            return UpdateMany(
                self.condition, self.document, upsert=self.upsert, **self.options
            )
        if self.is_replacement:
            return ReplaceOne(
                self.condition, self.document, upsert=self.upsert, **self.options
            )
        return UpdateOne(
            self.condition, self.document, upsert=self.upsert, **self.options
        )


class DeleteOperation(_Operation):
    type: Literal["delete"] = "delete"
    condition: dict[str, Any]
    multi: bool = True
    options: dict[str, Any] = Field(default_factory=dict)

    def to_request(self) -> DeleteMany | DeleteOne:
        if self.multi:
            return DeleteMany(self.condition, **self.options)
        return DeleteOne(self.condition, **self.options)


BatchOperation = Union[InsertOperation, UpdateOperation, DeleteOperation]


@dataclass
class BatchResult:
    """Outcome of a bulk write: ids of inserted documents (by position) and the driver result."""

    inserted_ids: dict[int, Any] = field(default_factory=dict)
    result: Any = None


class WriteBatch:
    """Collects write operations; conditions are translated when added.

    Example::

        batch = WriteBatch()
        batch.add_insert({"name": "John"})
        batch.add_update({"status": [1, 2]}, {"active": False})
        batch.add_delete(["<", "age", 18])
    """

    def __init__(self) -> None:
        self.operations: list[BatchOperation] = []

    def __len__(self) -> int:
        return len(self.operations)

    def add_insert(self, document: Mapping[str, Any]) -> WriteBatch:
        """Queue an insert; an ``ObjectId`` ``_id`` is assigned when missing."""
        document = dict(document)
        if document.get("_id") is None:
            document["_id"] = ObjectId()
        self.operations.append(InsertOperation(document=document))
        return self

    def add_update(
        self,
        condition: Any,
        document: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
    ) -> WriteBatch:
        """Queue an update.

        ``multi`` defaults to True and ``upsert`` to False. A multi update
        whose document does not start with an update operator is wrapped in
        ``$set``. Other options are ``arrayFilters``, ``collation`` and
        ``hint``.

        Raises:
            MongoQueryError: for any other option, or ``arrayFilters`` on a
                replacement document.
        """
        options = dict(options or {})
        multi = bool(options.pop("multi", True))
        upsert = bool(options.pop("upsert", False))
        request_options = _request_options(options, _UPDATE_OPTIONS, "update")
        update = dict(document)
        if multi and update and not is_native(next(iter(update))):
            update = {"$set": update}
        operation = UpdateOperation(
            condition=build_condition(condition),
            document=update,
            multi=multi,
            upsert=upsert,
            options=request_options,
        )
        if operation.is_replacement and "array_filters" in request_options:
            raise MongoQueryError("arrayFilters requires an update operator document")
        self.operations.append(operation)
        return self

    def add_delete(
        self, condition: Any, options: Mapping[str, Any] | None = None
    ) -> WriteBatch:
        """Queue a delete; pass ``{"limit": 1}`` (or ``{"multi": False}``) to delete one.

        ``collation`` and ``hint`` are passed on; other options raise
        :class:`MongoQueryError`.
        """
        options = dict(options or {})
        multi = bool(options.pop("multi", True))
        if options.pop("limit", 0):
            multi = False
        request_options = _request_options(options, _DELETE_OPTIONS, "delete")
        self.operations.append(
            DeleteOperation(
                condition=build_condition(condition),
                multi=multi,
                options=request_options,
            )
        )
        return self

