"""MongoQueryBuilder: composes MongoDB command documents.

Every method is a pure function of its arguments: it translates conditions
and field lists, then returns a new document for :class:`MongoCommand` (or
any other executor) to run. The command keyword always comes first, then
the translated sub-documents, then caller options.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from bson.code import Code

from .condition import build_condition
from .fields import build_select_fields, build_sort_fields
from .indexes import IndexSpecification, build_index_specs, generate_index_name


def _merge(document: dict[str, Any], options: Mapping[str, Any] | None) -> dict[str, Any]:
    if options:
        document.update(options)
    return document


def _as_code(value: Any) -> Code:
    return value if isinstance(value, Code) else Code(str(value))


def _as_count(value: Any) -> int | None:
    """Return ``value`` as a non-negative int, or None if it is not one."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


class MongoQueryBuilder:
    """Builds MongoDB command documents from portable specifications."""

    def __init__(self, default_database_name: str | None = None) -> None:
        self.default_database_name = default_database_name

    # Collections and databases

    def create_collection(
        self, collection_name: str, options: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        return _merge({"create": collection_name}, options)

    def drop_database(self) -> dict[str, Any]:
        return {"dropDatabase": 1}

    def drop_collection(self, collection_name: str) -> dict[str, Any]:
        return {"drop": collection_name}

    def list_databases(
        self, condition: Any = None, options: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        document: dict[str, Any] = {"listDatabases": 1}
        if condition:
            document["filter"] = build_condition(condition)
        return _merge(document, options)

    def list_collections(
        self, condition: Any = None, options: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        document: dict[str, Any] = {"listCollections": 1}
        if condition:
            document["filter"] = build_condition(condition)
        return _merge(document, options)

    # Indexes

    def create_indexes(
        self,
        database_name: str | None,
        collection_name: str,
        indexes: Iterable[Mapping[str, Any] | IndexSpecification],
    ) -> dict[str, Any]:
        """Generate the ``createIndexes`` command.

        Each spec needs a ``key``; ``ns`` and ``name`` are filled when absent,
        ``ns`` from ``database_name`` or the builder's default database.
        """
        return {
            "createIndexes": collection_name,
            "indexes": build_index_specs(
                database_name,
                collection_name,
                indexes,
                default_database_name=self.default_database_name,
            ),
        }

    def generate_index_name(self, columns: Mapping[str, Any]) -> str:
        return generate_index_name(columns)

    def drop_indexes(self, collection_name: str, index: str) -> dict[str, Any]:
        """Generate ``dropIndexes``; ``index`` is a name or ``*`` for all."""
        return {"dropIndexes": collection_name, "index": index}

    def list_indexes(
        self, collection_name: str, options: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        return _merge({"listIndexes": collection_name}, options)

    # Queries

    def count(
        self,
        collection_name: str,
        condition: Any = None,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        document: dict[str, Any] = {"count": collection_name}
        if condition:
            document["query"] = build_condition(condition)
        return _merge(document, options)

    def distinct(
        self,
        collection_name: str,
        field_name: str,
        condition: Any = None,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        document: dict[str, Any] = {"distinct": collection_name, "key": field_name}
        if condition:
            document["query"] = build_condition(condition)
        return _merge(document, options)

    def find_and_modify(
        self,
        collection_name: str,
        condition: Any = None,
        update: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Generate ``findAndModify``; ``sort`` and ``fields`` options are normalized."""
        document: dict[str, Any] = {"findAndModify": collection_name}
        if condition:
            document["query"] = build_condition(condition)
        if update:
            document["update"] = dict(update)
        _merge(document, options)
        if "fields" in document:
            document["fields"] = build_select_fields(document["fields"])
        if "sort" in document:
            document["sort"] = build_sort_fields(document["sort"])
        return document

    def map_reduce(
        self,
        collection_name: str,
        map_function: Code | str,
        reduce_function: Code | str,
        out: str | Mapping[str, Any],
        condition: Any = None,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Generate ``mapReduce``.

        ``map_function`` and ``reduce_function`` are JavaScript sources (or
        ``bson.Code``). ``out`` is a collection name, a parametrized output
        such as ``{"merge": "totals"}``, or ``{"inline": 1}``.
        """
        document: dict[str, Any] = {
            "mapReduce": collection_name,
            "map": _as_code(map_function),
            "reduce": _as_code(reduce_function),
            "out": out,
        }
        if condition:
            document["query"] = build_condition(condition)
        return _merge(document, options)

    def explain(self, collection_name: str, query: Mapping[str, Any]) -> dict[str, Any]:
        """Wrap a ``find`` in ``explain``, translating filter, projection and sort."""
        find: dict[str, Any] = {"find": collection_name}
        find.update(query)
        if find.get("filter") is not None:
            find["filter"] = build_condition(find["filter"])
        if find.get("projection") is not None:
            find["projection"] = build_select_fields(find["projection"])
        if find.get("sort") is not None:
            find["sort"] = build_sort_fields(find["sort"])
        return {"explain": find}

    def build_find(
        self, condition: Any = None, options: Mapping[str, Any] | None = None
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """Return ``(filter, options)`` for a ``find`` query.

        ``projection`` and ``sort`` are normalized; ``limit`` and ``skip`` are
        kept only when they are non-negative integers (or digit strings).
        """
        query_filter = build_condition(condition) if condition else {}
        find_options = dict(options or {})
        if find_options.get("projection") is not None:
            find_options["projection"] = build_select_fields(find_options["projection"])
        if find_options.get("sort") is not None:
            find_options["sort"] = build_sort_fields(find_options["sort"])
        for name in ("limit", "skip"):
            if name in find_options:
                value = _as_count(find_options[name])
                if value is None:
                    del find_options[name]
                else:
                    find_options[name] = value
        return query_filter, find_options

    # Conditions and fields

    def build_condition(self, condition: Any) -> dict[str, Any]:
        return build_condition(condition)

    def build_select_fields(self, fields: Any) -> dict[str, Any]:
        return build_select_fields(fields)

    def build_sort_fields(self, fields: Any) -> dict[str, Any]:
        return build_sort_fields(fields)
