"""MongoDB query composition for CQRS/DDD.

Translates portable conditions, sort/projection specs and index specs into
MongoDB command documents (pure, synchronous), and runs them through an
executor on Motor.
"""

from __future__ import annotations

from .batch import (
    BatchOperation,
    BatchResult,
    DeleteOperation,
    InsertOperation,
    UpdateOperation,
    WriteBatch,
)
from .command import MongoCommand
from .condition import build_condition, build_hash_condition
from .connection import CommandSettings, MongoConnectionManager
from .exceptions import (
    MalformedConditionError,
    MalformedIndexSpecError,
    MongoCommandError,
    MongoConnectionError,
    MongoPersistenceError,
    MongoQueryError,
    UnsupportedOperatorError,
)
from .executor import MotorCommandExecutor
from .fields import SortDirection, build_select_fields, build_sort_fields
from .identifiers import IdCoercion, coerce_object_id, ensure_object_id
from .indexes import (
    IndexSpecification,
    build_index_specs,
    create_2dsphere_index,
    create_compound_index,
    create_text_index,
    create_ttl_index,
    generate_index_name,
)
from .ports import ICommandExecutor
from .query_builder import MongoQueryBuilder

__all__ = [
    # Translation
    "build_condition",
    "build_hash_condition",
    "build_select_fields",
    "build_sort_fields",
    "SortDirection",
    "coerce_object_id",
    "ensure_object_id",
    "IdCoercion",
    # Indexes
    "IndexSpecification",
    "build_index_specs",
    "generate_index_name",
    "create_compound_index",
    "create_text_index",
    "create_ttl_index",
    "create_2dsphere_index",
    # Commands
    "MongoQueryBuilder",
    "MongoCommand",
    "ICommandExecutor",
    "MotorCommandExecutor",
    "MongoConnectionManager",
    "CommandSettings",
    "WriteBatch",
    "BatchOperation",
    "BatchResult",
    "InsertOperation",
    "UpdateOperation",
    "DeleteOperation",
    # Exceptions
    "MongoPersistenceError",
    "MongoConnectionError",
    "MongoCommandError",
    "MongoQueryError",
    "MalformedConditionError",
    "UnsupportedOperatorError",
    "MalformedIndexSpecError",
]
