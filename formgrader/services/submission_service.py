from __future__ import annotations

import logging
from typing import Any, List

from ..errors import NotFound, StoreError, UnexpectedFailure
from ..schemas import Feedback, FormSubmission, ReviewableUser
from . import access_control
from .auth_service import AuthClaims
from .storage_service import CredentialStore, SubmissionStore

logger = logging.getLogger(__name__)


class SubmissionService:
    """Form submission, review and grading flows."""

    def __init__(self, users: CredentialStore, forms: SubmissionStore) -> None:
        self.users = users
        self.forms = forms

    def create(self, claims: AuthClaims, payload: Any) -> FormSubmission:
        access_control.check_submission_create(claims).enforce()
        try:
            caller = self.users.find_by_id(claims.user_id)
            if caller is None:
                raise NotFound("User not found")
            owner_id, owner_name = access_control.submission_owner(caller)
            return self.forms.create(owner_id, owner_name, payload)
        except StoreError as exc:
            logger.error(f"Form creation failed for user_id={claims.user_id}: {exc}")
            raise UnexpectedFailure() from exc

    def list_own(self, claims: AuthClaims) -> List[FormSubmission]:
        access_control.check_own_listing(claims).enforce()
        try:
            return self.forms.find_by_owner(claims.user_id)
        except StoreError as exc:
            logger.error(f"Listing own forms failed for user_id={claims.user_id}: {exc}")
            raise UnexpectedFailure() from exc

    def list_for_user(self, claims: AuthClaims, user_id: str) -> List[FormSubmission]:
        access_control.check_user_listing(claims, user_id).enforce()
        logger.info(f"Master {claims.user_id} listed forms of user_id={user_id}")
        try:
            return self.forms.find_by_owner(user_id)
        except StoreError as exc:
            logger.error(f"Listing forms failed for user_id={user_id}: {exc}")
            raise UnexpectedFailure() from exc

    def get(self, claims: AuthClaims, form_id: str) -> FormSubmission:
        try:
            form = self.forms.find_by_id(form_id)
        except StoreError as exc:
            logger.error(f"Form lookup failed for form_id={form_id}: {exc}")
            raise UnexpectedFailure() from exc
        access_control.check_submission_read(claims, form).enforce()
        return form

    def grade(self, claims: AuthClaims, form_id: str, feedback: Feedback) -> FormSubmission:
        access_control.check_feedback_update(claims).enforce()
        try:
            form = self.forms.update_feedback(form_id, feedback)
        except StoreError as exc:
            logger.error(f"Feedback update failed for form_id={form_id}: {exc}")
            raise UnexpectedFailure() from exc
        if form is None:
            raise NotFound()
        logger.info(f"Master {claims.user_id} graded form_id={form_id}")
        return form

    def reviewable_users(self, claims: AuthClaims) -> List[ReviewableUser]:
        access_control.check_reviewer_listing(claims).enforce()
        try:
            users = self.users.list_non_master()
            ungraded = self.forms.find_all_ungraded()
        except StoreError as exc:
            logger.error(f"Reviewable user listing failed: {exc}")
            raise UnexpectedFailure() from exc
        return access_control.count_ungraded(users, ungraded)
