from __future__ import annotations

import copy
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..errors import DuplicateEmail
from ..schemas import Feedback, FormSubmission, User


class InMemoryCredentialStore:
    """Process-local user store keyed by id, with an email index."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: Dict[str, User] = {}
        self._ids_by_email: Dict[str, str] = {}

    def create(
        self, first_name: str, last_name: str, email: str, password_hash: str, is_master: bool
    ) -> User:
        with self._lock:
            if email in self._ids_by_email:
                raise DuplicateEmail(email)
            user = User(
                id=uuid.uuid4().hex,
                first_name=first_name,
                last_name=last_name,
                email=email,
                is_master=is_master,
                password_hash=password_hash,
            )
            self._users[user.id] = user
            self._ids_by_email[email] = user.id
            return self._public(user)

    def find_by_email(self, email: str, include_hash: bool = False) -> Optional[User]:
        with self._lock:
            user_id = self._ids_by_email.get(email)
            if user_id is None:
                return None
            user = self._users[user_id]
            return user.model_copy() if include_hash else self._public(user)

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return self._public(user) if user else None

    def list_non_master(self) -> List[User]:
        with self._lock:
            return [self._public(u) for u in self._users.values() if not u.is_master]

    @staticmethod
    def _public(user: User) -> User:
        return user.model_copy(update={"password_hash": None})


class InMemorySubmissionStore:
    """Process-local submission store; returns copies so callers cannot mutate state."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._forms: Dict[str, FormSubmission] = {}

    def create(
        self,
        owner_id: str,
        owner_name: str,
        payload: Any,
        submitted_at: Optional[datetime] = None,
    ) -> FormSubmission:
        with self._lock:
            form = FormSubmission(
                id=uuid.uuid4().hex,
                owner_id=owner_id,
                owner_full_name=owner_name,
                submitted_at=submitted_at or datetime.now(timezone.utc),
                payload=copy.deepcopy(payload),
                feedback=None,
            )
            self._forms[form.id] = form
            return form.model_copy(deep=True)

    def find_by_id(self, form_id: str) -> Optional[FormSubmission]:
        with self._lock:
            form = self._forms.get(form_id)
            return form.model_copy(deep=True) if form else None

    def find_by_owner(self, owner_id: str) -> List[FormSubmission]:
        with self._lock:
            owned = [f for f in self._forms.values() if f.owner_id == owner_id]
            owned.sort(key=lambda f: f.submitted_at, reverse=True)
            return [f.model_copy(deep=True) for f in owned]

    def find_all_ungraded(self) -> List[FormSubmission]:
        with self._lock:
            return [f.model_copy(deep=True) for f in self._forms.values() if f.feedback is None]

    def update_feedback(self, form_id: str, feedback: Feedback) -> Optional[FormSubmission]:
        with self._lock:
            form = self._forms.get(form_id)
            if form is None:
                return None
            updated = form.model_copy(update={"feedback": feedback.model_copy()}, deep=True)
            self._forms[form_id] = updated
            return updated.model_copy(deep=True)
