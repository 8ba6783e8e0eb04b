"""Unit tests for WriteBatch and the batch operation models."""

from __future__ import annotations

import pytest
from bson import ObjectId
from pydantic import ValidationError
from pymongo import DeleteMany, DeleteOne, InsertOne, ReplaceOne, UpdateMany, UpdateOne

from cqrs_ddd_mongo_query.batch import (
    DeleteOperation,
    InsertOperation,
    UpdateOperation,
    WriteBatch,
)
from cqrs_ddd_mongo_query.exceptions import MongoQueryError

OID = "507f1f77bcf86cd799439011"


class TestAddInsert:
    """Tests for queued inserts."""

    def test_assigns_object_id_when_missing(self):
        batch = WriteBatch().add_insert({"name": "John"})
        operation = batch.operations[0]
        assert isinstance(operation, InsertOperation)
        assert isinstance(operation.document["_id"], ObjectId)
        assert operation.document["name"] == "John"

    def test_keeps_given_id(self):
        batch = WriteBatch().add_insert({"_id": "custom", "name": "John"})
        assert batch.operations[0].document["_id"] == "custom"

    def test_caller_document_is_not_mutated(self):
        document = {"name": "John"}
        WriteBatch().add_insert(document)
        assert document == {"name": "John"}

    def test_distinct_ids_per_insert(self):
        batch = WriteBatch().add_insert({"n": 1}).add_insert({"n": 2})
        ids = [operation.document["_id"] for operation in batch.operations]
        assert ids[0] != ids[1]
        assert len(batch) == 2


class TestAddUpdate:
    """Tests for queued updates."""

    def test_plain_document_is_wrapped_in_set(self):
        batch = WriteBatch().add_update({"status": [1, 2]}, {"active": False})
        operation = batch.operations[0]
        assert operation.condition == {"status": {"$in": [1, 2]}}
        assert operation.document == {"$set": {"active": False}}
        assert operation.multi is True
        assert operation.upsert is False

    def test_operator_document_is_kept(self):
        batch = WriteBatch().add_update({"a": 1}, {"$inc": {"n": 1}})
        assert batch.operations[0].document == {"$inc": {"n": 1}}

    def test_single_update_is_not_wrapped(self):
        batch = WriteBatch().add_update({"a": 1}, {"a": 2}, {"multi": False})
        operation = batch.operations[0]
        assert operation.document == {"a": 2}
        assert operation.multi is False

    def test_remaining_options_are_kept(self):
        batch = WriteBatch().add_update(
            {"a": 1}, {"$set": {"b": 1}}, {"upsert": True, "hint": "a_1"}
        )
        operation = batch.operations[0]
        assert operation.upsert is True
        assert operation.options == {"hint": "a_1"}

    def test_id_condition_is_coerced(self):
        batch = WriteBatch().add_update({"_id": OID}, {"$set": {"b": 1}})
        assert batch.operations[0].condition == {"_id": ObjectId(OID)}

    def test_command_option_names_are_mapped(self):
        array_filters = [{"e.qty": {"$lt": 0}}]
        batch = WriteBatch().add_update(
            {"a": 1},
            {"$set": {"items.$[e].qty": 0}},
            {"arrayFilters": array_filters, "collation": {"locale": "en"}},
        )
        operation = batch.operations[0]

        assert operation.options == {
            "array_filters": array_filters,
            "collation": {"locale": "en"},
        }
        assert operation.to_request() == UpdateMany(
            {"a": 1},
            {"$set": {"items.$[e].qty": 0}},
            upsert=False,
            collation={"locale": "en"},
            array_filters=array_filters,
        )

    def test_unknown_option_fails_when_added(self):
        batch = WriteBatch()
        with pytest.raises(MongoQueryError, match="writeConcern"):
            batch.add_update({"a": 1}, {"$set": {"b": 1}}, {"writeConcern": {"w": 1}})
        assert len(batch) == 0

    def test_array_filters_rejected_for_replacement(self):
        with pytest.raises(MongoQueryError, match="arrayFilters"):
            WriteBatch().add_update(
                {"a": 1}, {"b": 2}, {"multi": False, "arrayFilters": [{"e": 1}]}
            )


class TestAddDelete:
    """Tests for queued deletes."""

    def test_deletes_all_by_default(self):
        batch = WriteBatch().add_delete(["<", "age", 18])
        operation = batch.operations[0]
        assert operation.condition == {"age": {"$lt": 18}}
        assert operation.multi is True

    def test_limit_deletes_one(self):
        batch = WriteBatch().add_delete({"a": 1}, {"limit": 1})
        assert batch.operations[0].multi is False
        assert batch.operations[0].options == {}

    def test_zero_limit_deletes_all(self):
        batch = WriteBatch().add_delete({"a": 1}, {"limit": 0})
        assert batch.operations[0].multi is True

    def test_hint_is_passed_on(self):
        batch = WriteBatch().add_delete({"a": 1}, {"limit": 1, "hint": "a_1"})
        assert batch.operations[0].to_request() == DeleteOne({"a": 1}, hint="a_1")

    def test_unknown_option_fails_when_added(self):
        with pytest.raises(MongoQueryError, match="Unsupported delete option"):
            WriteBatch().add_delete({"a": 1}, {"justOne": True})


class TestToRequest:
    """Tests for driver request selection."""

    def test_insert(self):
        request = InsertOperation(document={"_id": 1}).to_request()
        assert request == InsertOne({"_id": 1})

    def test_multi_update(self):
        request = UpdateOperation(condition={"a": 1}, document={"$set": {"b": 2}}).to_request()
        assert isinstance(request, UpdateMany)

    def test_single_update_with_operators(self):
        request = UpdateOperation(
            condition={"a": 1}, document={"$set": {"b": 2}}, multi=False
        ).to_request()
        assert isinstance(request, UpdateOne)

    def test_single_update_with_plain_document_replaces(self):
        request = UpdateOperation(
            condition={"a": 1}, document={"b": 2}, multi=False, upsert=True
        ).to_request()
        assert request == ReplaceOne({"a": 1}, {"b": 2}, upsert=True)

    def test_delete_many_and_one(self):
        assert isinstance(DeleteOperation(condition={"a": 1}).to_request(), DeleteMany)
        assert isinstance(
            DeleteOperation(condition={"a": 1}, multi=False).to_request(), DeleteOne
        )


def test_operations_are_frozen() -> None:
    operation = DeleteOperation(condition={"a": 1})
    with pytest.raises(ValidationError):
        operation.multi = False


def test_model_dump_names_operation_type() -> None:
    batch = WriteBatch().add_delete({"a": 1}).add_update({"a": 1}, {"$set": {"b": 1}})
    assert [operation.model_dump()["type"] for operation in batch.operations] == [
        "delete",
        "update",
    ]
