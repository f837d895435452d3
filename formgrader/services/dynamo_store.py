"""
DynamoDB-backed credential and submission stores.

Table layout:

* users: partition key ``email`` (uniqueness comes from a conditional put),
  GSI ``user_id-index`` on ``user_id``.
* forms: partition key ``form_id``, GSI ``user_id-submitted_at-index``
  (``user_id`` / ``submitted_at``) for newest-first owner listings.

The opaque form payload is stored as a JSON string so arbitrary client data
(floats included) never has to be converted to DynamoDB number types.

Primary-key reads are strongly consistent. GSI reads are eventually
consistent, so a ``user_id-index`` miss is confirmed with a consistent scan
before a user is reported missing.
"""

from __future__ import annotations

import json
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import DuplicateEmail, StoreError
from ..schemas import Feedback, FormSubmission, User

logger = logging.getLogger(__name__)

USERS_ID_INDEX = "user_id-index"
FORMS_OWNER_INDEX = "user_id-submitted_at-index"


def _timestamp(value: datetime) -> str:
    # Fixed-width so lexicographic order in the sort key matches time order.
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "Unknown")


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except ClientError as e:
        logger.error(f"DynamoDB error during {action}: {_error_code(e)} - {str(e)}")
        raise StoreError(action) from e
    except BotoCoreError as e:
        logger.error(f"DynamoDB unavailable during {action}: {type(e).__name__}: {str(e)}")
        raise StoreError(action) from e


def _scan_all(table, **kwargs) -> List[Dict[str, Any]]:
    items: List[Dict[str, Any]] = []
    response = table.scan(**kwargs)
    items.extend(response.get("Items", []))
    while "LastEvaluatedKey" in response:
        response = table.scan(ExclusiveStartKey=response["LastEvaluatedKey"], **kwargs)
        items.extend(response.get("Items", []))
    return items


def _query_all(table, **kwargs) -> List[Dict[str, Any]]:
    items: List[Dict[str, Any]] = []
    response = table.query(**kwargs)
    items.extend(response.get("Items", []))
    while "LastEvaluatedKey" in response:
        response = table.query(ExclusiveStartKey=response["LastEvaluatedKey"], **kwargs)
        items.extend(response.get("Items", []))
    return items


class DynamoCredentialStore:
    def __init__(self, table) -> None:
        self.table = table

    @staticmethod
    def _to_user(item: Dict[str, Any], include_hash: bool = False) -> User:
        return User(
            id=item["user_id"],
            first_name=item["first_name"],
            last_name=item["last_name"],
            email=item["email"],
            is_master=bool(item.get("is_master", False)),
            password_hash=item.get("password_hash") if include_hash else None,
        )

    def create(
        self, first_name: str, last_name: str, email: str, password_hash: str, is_master: bool
    ) -> User:
        item = {
            "user_id": uuid.uuid4().hex,
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "password_hash": password_hash,
            "is_master": bool(is_master),
        }
        try:
            self.table.put_item(Item=item, ConditionExpression="attribute_not_exists(email)")
        except ClientError as e:
            if _error_code(e) == "ConditionalCheckFailedException":
                raise DuplicateEmail(email) from e
            logger.error(f"DynamoDB error creating user: {_error_code(e)} - {str(e)}")
            raise StoreError("create user") from e
        except BotoCoreError as e:
            logger.error(f"DynamoDB unavailable creating user: {type(e).__name__}: {str(e)}")
            raise StoreError("create user") from e
        logger.info(f"Created user {item['user_id']} (master={item['is_master']})")
        return self._to_user(item)

    def find_by_email(self, email: str, include_hash: bool = False) -> Optional[User]:
        with _store_errors("find user by email"):
            response = self.table.get_item(Key={"email": email}, ConsistentRead=True)
        item = response.get("Item")
        return self._to_user(item, include_hash) if item else None

    def find_by_id(self, user_id: str) -> Optional[User]:
        with _store_errors("find user by id"):
            response = self.table.query(
                IndexName=USERS_ID_INDEX,
                KeyConditionExpression=Key("user_id").eq(user_id),
                Limit=1,
            )
            items = response.get("Items", [])
            if not items:
                # Index may lag a just-registered user.
                items = _scan_all(
                    self.table,
                    FilterExpression=Attr("user_id").eq(user_id),
                    ConsistentRead=True,
                )
        return self._to_user(items[0]) if items else None

    def list_non_master(self) -> List[User]:
        with _store_errors("list non-master users"):
            items = _scan_all(self.table, FilterExpression=Attr("is_master").eq(False))
        return [self._to_user(item) for item in items]


class DynamoSubmissionStore:
    def __init__(self, table) -> None:
        self.table = table

    @staticmethod
    def _to_submission(item: Dict[str, Any]) -> FormSubmission:
        feedback = item.get("feedback")
        return FormSubmission(
            id=item["form_id"],
            owner_id=item["user_id"],
            owner_full_name=item["user_full_name"],
            submitted_at=item["submitted_at"],
            payload=json.loads(item["form_data_json"]),
            feedback=Feedback(**feedback) if feedback is not None else None,
        )

    def create(
        self,
        owner_id: str,
        owner_name: str,
        payload: Any,
        submitted_at: Optional[datetime] = None,
    ) -> FormSubmission:
        item = {
            "form_id": uuid.uuid4().hex,
            "user_id": owner_id,
            "user_full_name": owner_name,
            "submitted_at": _timestamp(submitted_at or datetime.now(timezone.utc)),
            "form_data_json": json.dumps(payload),
            "feedback": None,
        }
        with _store_errors("create form"):
            self.table.put_item(Item=item)
        return self._to_submission(item)

    def find_by_id(self, form_id: str) -> Optional[FormSubmission]:
        with _store_errors("find form"):
            response = self.table.get_item(Key={"form_id": form_id}, ConsistentRead=True)
        item = response.get("Item")
        return self._to_submission(item) if item else None

    def find_by_owner(self, owner_id: str) -> List[FormSubmission]:
        with _store_errors("list forms by owner"):
            items = _query_all(
                self.table,
                IndexName=FORMS_OWNER_INDEX,
                KeyConditionExpression=Key("user_id").eq(owner_id),
                ScanIndexForward=False,
            )
        return [self._to_submission(item) for item in items]

    def find_all_ungraded(self) -> List[FormSubmission]:
        with _store_errors("list ungraded forms"):
            items = _scan_all(
                self.table,
                FilterExpression=Attr("feedback").not_exists() | Attr("feedback").attribute_type("NULL"),
            )
        return [self._to_submission(item) for item in items]

    def update_feedback(self, form_id: str, feedback: Feedback) -> Optional[FormSubmission]:
        try:
            response = self.table.update_item(
                Key={"form_id": form_id},
                UpdateExpression="SET feedback = :feedback",
                ConditionExpression="attribute_exists(form_id)",
                ExpressionAttributeValues={":feedback": feedback.model_dump()},
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if _error_code(e) == "ConditionalCheckFailedException":
                return None
            logger.error(f"DynamoDB error updating feedback: {_error_code(e)} - {str(e)}")
            raise StoreError("update feedback") from e
        except BotoCoreError as e:
            logger.error(f"DynamoDB unavailable updating feedback: {type(e).__name__}: {str(e)}")
            raise StoreError("update feedback") from e
        return self._to_submission(response["Attributes"])
