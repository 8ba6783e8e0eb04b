"""Index definitions: normalization, naming, compound/text/TTL/2dsphere helpers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from .exceptions import MalformedIndexSpecError
from .fields import build_sort_fields

if TYPE_CHECKING:
    from .command import MongoCommand


class IndexSpecification(BaseModel):
    """Typed index specification.

    Extra fields (``unique``, ``sparse``, ``expireAfterSeconds``, ...) are
    passed to the server verbatim.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    key: Any
    name: str | None = None
    ns: str | None = None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def generate_index_name(columns: Mapping[str, Any]) -> str:
    """Generate the index name for normalized columns: ``{"a": 1, "b": -1}`` -> ``a_1_b_-1``."""
    return "_".join(f"{column}_{order}" for column, order in columns.items())


def build_index_specs(
    database_name: str | None,
    collection_name: str,
    indexes: Iterable[Mapping[str, Any] | IndexSpecification],
    *,
    default_database_name: str | None = None,
) -> list[dict[str, Any]]:
    """Return fully specified index documents (``key``, ``ns``, ``name``, options).

    Raises:
        MalformedIndexSpecError: if a spec has no ``key``, or ``ns`` must be
            filled and no database name is known.
    """
    normalized: list[dict[str, Any]] = []
    for index in indexes:
        if isinstance(index, IndexSpecification):
            spec = index.to_document()
        else:
            spec = dict(index)
        if spec.get("key") is None:
            raise MalformedIndexSpecError('"key" is required for index specification')

        spec["key"] = build_sort_fields(spec["key"])

        if spec.get("ns") is None:
            database = database_name or default_database_name
            if not database:
                raise MalformedIndexSpecError(
                    f"Cannot build namespace for '{collection_name}': no database name"
                )
            spec["ns"] = f"{database}.{collection_name}"

        if spec.get("name") is None:
            spec["name"] = generate_index_name(spec["key"])

        normalized.append(spec)
    return normalized


async def create_compound_index(
    command: MongoCommand,
    collection: str,
    keys: list[tuple[str, int]],
    *,
    name: str | None = None,
    unique: bool = False,
) -> str:
    """Create a compound index. keys: [(field, 1|(-1)), ...]. Returns index name."""
    options = {"unique": True} if unique else {}
    return await _create_index(
        command, collection, IndexSpecification(key=keys, name=name, **options)
    )


async def create_text_index(
    command: MongoCommand,
    collection: str,
    fields: list[tuple[str, str]],
    *,
    name: str | None = None,
) -> str:
    """Create a text index. fields: [(field_name, 'text'), ...]."""
    return await _create_index(
        command, collection, IndexSpecification(key=fields, name=name)
    )


async def create_ttl_index(
    command: MongoCommand,
    collection: str,
    field: str,
    expire_after_seconds: int,
    *,
    name: str | None = None,
) -> str:
    """Create a TTL index for ephemeral data."""
    spec = IndexSpecification(
        key=[(field, 1)],
        name=name or f"ttl_{field}",
        expireAfterSeconds=expire_after_seconds,
    )
    return await _create_index(command, collection, spec)


async def create_2dsphere_index(
    command: MongoCommand,
    collection: str,
    field: str,
    *,
    name: str | None = None,
) -> str:
    """Create a 2dsphere geospatial index."""
    spec = IndexSpecification(key=[(field, "2dsphere")], name=name or f"geo_{field}")
    return await _create_index(command, collection, spec)


async def _create_index(
    command: MongoCommand, collection: str, spec: IndexSpecification
) -> str:
    document = command.query_builder.create_indexes(
        command.database_name, collection, [spec]
    )
    await command.execute(document)
    return str(document["indexes"][0]["name"])
