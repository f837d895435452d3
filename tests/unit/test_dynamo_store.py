"""
Unit tests for the DynamoDB stores, run against mocked tables
"""
import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from formgrader.errors import DuplicateEmail, StoreError
from formgrader.schemas import Feedback
from formgrader.services.dynamo_store import (
    FORMS_OWNER_INDEX,
    USERS_ID_INDEX,
    DynamoCredentialStore,
    DynamoSubmissionStore,
    _timestamp,
)


def _client_error(code: str, operation: str = "PutItem") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def _user_item(user_id="u1", email="ada@example.com", is_master=False):
    return {
        "user_id": user_id,
        "email": email,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "password_hash": "$2b$04$hash",
        "is_master": is_master,
    }


def _form_item(form_id="f1", user_id="u1", feedback=None, submitted_at="2026-03-01T10:00:00.000000Z"):
    return {
        "form_id": form_id,
        "user_id": user_id,
        "user_full_name": "Ada Lovelace",
        "submitted_at": submitted_at,
        "form_data_json": json.dumps({"q1": [1, 2.5, "x"]}),
        "feedback": feedback,
    }


def test_timestamp_is_fixed_width_utc():
    value = datetime(2026, 3, 1, 10, 0, 0, tzinfo=timezone.utc)
    assert _timestamp(value) == "2026-03-01T10:00:00.000000Z"


class TestDynamoCredentialStore:
    @pytest.fixture
    def table(self):
        return MagicMock()

    @pytest.fixture
    def store(self, table):
        return DynamoCredentialStore(table)

    def test_create_uses_conditional_put(self, store, table):
        user = store.create("Ada", "Lovelace", "ada@example.com", "$2b$hash", True)

        kwargs = table.put_item.call_args.kwargs
        assert kwargs["ConditionExpression"] == "attribute_not_exists(email)"
        assert kwargs["Item"]["email"] == "ada@example.com"
        assert kwargs["Item"]["password_hash"] == "$2b$hash"
        assert kwargs["Item"]["is_master"] is True
        assert user.is_master is True
        assert user.password_hash is None

    def test_create_duplicate_email(self, store, table):
        table.put_item.side_effect = _client_error("ConditionalCheckFailedException")
        with pytest.raises(DuplicateEmail):
            store.create("Ada", "Lovelace", "ada@example.com", "h", False)

    def test_create_other_client_error(self, store, table):
        table.put_item.side_effect = _client_error("ProvisionedThroughputExceededException")
        with pytest.raises(StoreError):
            store.create("Ada", "Lovelace", "ada@example.com", "h", False)

    def test_create_connection_failure(self, store, table):
        table.put_item.side_effect = EndpointConnectionError(endpoint_url="http://localhost:4566")
        with pytest.raises(StoreError):
            store.create("Ada", "Lovelace", "ada@example.com", "h", False)

    def test_find_by_email(self, store, table):
        table.get_item.return_value = {"Item": _user_item()}
        assert store.find_by_email("ada@example.com").password_hash is None
        assert store.find_by_email("ada@example.com", include_hash=True).password_hash == "$2b$04$hash"
        table.get_item.assert_called_with(Key={"email": "ada@example.com"}, ConsistentRead=True)

    def test_find_by_email_missing(self, store, table):
        table.get_item.return_value = {}
        assert store.find_by_email("nobody@example.com") is None

    def test_find_by_id_queries_index(self, store, table):
        table.query.return_value = {"Items": [_user_item(user_id="u7")]}
        user = store.find_by_id("u7")
        assert user.id == "u7"
        assert table.query.call_args.kwargs["IndexName"] == USERS_ID_INDEX
        table.scan.assert_not_called()

    def test_find_by_id_missing(self, store, table):
        table.query.return_value = {"Items": []}
        table.scan.return_value = {"Items": []}
        assert store.find_by_id("u7") is None

    def test_find_by_id_index_lag_falls_back_to_consistent_scan(self, store, table):
        table.query.return_value = {"Items": []}
        table.scan.return_value = {"Items": [_user_item(user_id="u7")]}

        user = store.find_by_id("u7")

        assert user.id == "u7"
        assert user.password_hash is None
        assert table.scan.call_args.kwargs["ConsistentRead"] is True

    def test_list_non_master_paginates(self, store, table):
        table.scan.side_effect = [
            {"Items": [_user_item("u1")], "LastEvaluatedKey": {"email": "a"}},
            {"Items": [_user_item("u2", email="b@example.com")]},
        ]
        users = store.list_non_master()
        assert [u.id for u in users] == ["u1", "u2"]
        assert table.scan.call_args_list[1].kwargs["ExclusiveStartKey"] == {"email": "a"}

    def test_read_failure_becomes_store_error(self, store, table):
        table.get_item.side_effect = _client_error("InternalServerError", "GetItem")
        with pytest.raises(StoreError):
            store.find_by_email("ada@example.com")


class TestDynamoSubmissionStore:
    @pytest.fixture
    def table(self):
        return MagicMock()

    @pytest.fixture
    def store(self, table):
        return DynamoSubmissionStore(table)

    def test_create_stores_payload_as_json(self, store, table):
        payload = {"q1": [1, 2.5, "x"], "nested": {"ok": True}}
        form = store.create("u1", "Ada Lovelace", payload)

        item = table.put_item.call_args.kwargs["Item"]
        assert json.loads(item["form_data_json"]) == payload
        assert item["feedback"] is None
        assert item["submitted_at"].endswith("Z")
        assert form.payload == payload
        assert form.owner_full_name == "Ada Lovelace"

    def test_find_by_id_decodes_item(self, store, table):
        table.get_item.return_value = {"Item": _form_item(feedback={"score": "9", "bonus": None, "comments": "ok"})}
        form = store.find_by_id("f1")
        assert form.payload == {"q1": [1, 2.5, "x"]}
        assert form.feedback == Feedback(score="9", comments="ok")
        assert form.submitted_at == datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)
        table.get_item.assert_called_once_with(Key={"form_id": "f1"}, ConsistentRead=True)

    def test_find_by_id_missing(self, store, table):
        table.get_item.return_value = {}
        assert store.find_by_id("f1") is None

    def test_find_by_owner_newest_first(self, store, table):
        table.query.return_value = {"Items": [_form_item("f2"), _form_item("f1")]}
        forms = store.find_by_owner("u1")
        kwargs = table.query.call_args.kwargs
        assert kwargs["IndexName"] == FORMS_OWNER_INDEX
        assert kwargs["ScanIndexForward"] is False
        assert [f.id for f in forms] == ["f2", "f1"]

    def test_find_all_ungraded(self, store, table):
        table.scan.return_value = {"Items": [_form_item("f1")]}
        forms = store.find_all_ungraded()
        assert [f.id for f in forms] == ["f1"]
        assert "FilterExpression" in table.scan.call_args.kwargs

    def test_update_feedback(self, store, table):
        feedback = Feedback(score="8", bonus="2")
        table.update_item.return_value = {"Attributes": _form_item(feedback=feedback.model_dump())}

        form = store.update_feedback("f1", feedback)

        kwargs = table.update_item.call_args.kwargs
        assert kwargs["Key"] == {"form_id": "f1"}
        assert kwargs["ConditionExpression"] == "attribute_exists(form_id)"
        assert kwargs["ExpressionAttributeValues"] == {
            ":feedback": {"score": "8", "bonus": "2", "comments": None}
        }
        assert form.feedback == feedback

    def test_update_feedback_missing_form(self, store, table):
        table.update_item.side_effect = _client_error("ConditionalCheckFailedException", "UpdateItem")
        assert store.update_feedback("nope", Feedback(score="1")) is None

    def test_update_feedback_failure(self, store, table):
        table.update_item.side_effect = _client_error("InternalServerError", "UpdateItem")
        with pytest.raises(StoreError):
            store.update_feedback("f1", Feedback(score="1"))
