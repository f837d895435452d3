"""
Storage abstraction for users and form submissions.

Two backends implement the same protocols: DynamoDB for deployments and an
in-memory store for local development and tests.  ``build_stores`` picks one
from ``Settings.storage_backend``.  Every method is a single-document
operation; infrastructure faults are raised as ``StoreError``.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol, Tuple

from ..config import Settings
from ..schemas import Feedback, FormSubmission, User

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def create(
        self, first_name: str, last_name: str, email: str, password_hash: str, is_master: bool
    ) -> User:
        """Persist a new user.

        Raises:
            DuplicateEmail: if a user with ``email`` already exists.
        """
        ...

    def find_by_email(self, email: str, include_hash: bool = False) -> Optional[User]:
        ...

    def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    def list_non_master(self) -> List[User]:
        ...


class SubmissionStore(Protocol):
    def create(self, owner_id: str, owner_name: str, payload: Any) -> FormSubmission:
        ...

    def find_by_id(self, form_id: str) -> Optional[FormSubmission]:
        ...

    def find_by_owner(self, owner_id: str) -> List[FormSubmission]:
        """Return the owner's submissions, newest first."""
        ...

    def find_all_ungraded(self) -> List[FormSubmission]:
        ...

    def update_feedback(self, form_id: str, feedback: Feedback) -> Optional[FormSubmission]:
        """Replace feedback wholesale; ``None`` when ``form_id`` does not exist."""
        ...


def build_stores(settings: Settings) -> Tuple[CredentialStore, SubmissionStore]:
    if settings.storage_backend == "memory":
        from .memory_store import InMemoryCredentialStore, InMemorySubmissionStore

        logger.info("Using in-memory storage backend")
        return InMemoryCredentialStore(), InMemorySubmissionStore()

    from ..aws_clients import dynamodb_resource
    from .dynamo_store import DynamoCredentialStore, DynamoSubmissionStore

    dynamodb = dynamodb_resource(settings.aws_region, settings.aws_endpoint_url)
    logger.info(
        f"Using DynamoDB storage backend (users={settings.users_table}, forms={settings.forms_table})"
    )
    return (
        DynamoCredentialStore(dynamodb.Table(settings.users_table)),
        DynamoSubmissionStore(dynamodb.Table(settings.forms_table)),
    )
