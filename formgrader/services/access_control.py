"""
Access control for users and form submissions.

Every check here is a pure function of the caller's verified claims, the
target resource's owner and the binary master flag.  There is no role
hierarchy and no per-resource ACL: a submission is either owned by the
caller or not, and the caller is either a master or not.

Checks return a ``Decision``; ``Decision.enforce()`` raises the reason class
on deny so route handlers stay one line per check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Type

from ..config import Settings
from ..errors import FormGraderError, Forbidden, NotAuthorized, NotFound
from ..schemas import FormSubmission, ReviewableUser, User
from .auth_service import AuthClaims


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[Type[FormGraderError]] = None

    def enforce(self) -> None:
        if not self.allowed:
            raise (self.reason or Forbidden)()


ALLOW = Decision(True)


def deny(reason: Type[FormGraderError]) -> Decision:
    return Decision(False, reason)


# --- Registration -------------------------------------------------------------


def grants_master(email: str, settings: Settings) -> bool:
    """Master flag for a newly registered identity.

    The only place the flag is ever set to true.
    """
    return settings.master_email is not None and email == settings.master_email


# --- Identity / own submissions -------------------------------------------------


def check_profile_read(claims: AuthClaims) -> Decision:
    return ALLOW


def check_submission_create(claims: AuthClaims) -> Decision:
    return ALLOW


def check_own_listing(claims: AuthClaims) -> Decision:
    return ALLOW


def submission_owner(caller: User) -> tuple[str, str]:
    """Owner reference and name snapshot for a new submission by ``caller``."""
    return caller.id, caller.full_name


# --- Privileged review ------------------------------------------------------------


def check_user_listing(claims: AuthClaims, target_user_id: str) -> Decision:
    # No ownership exception: the target user cannot use this path either.
    return ALLOW if claims.is_master else deny(Forbidden)


def check_submission_read(claims: AuthClaims, submission: Optional[FormSubmission]) -> Decision:
    if submission is None:
        return deny(NotFound)
    if submission.owner_id == claims.user_id or claims.is_master:
        return ALLOW
    return deny(NotAuthorized)


def check_feedback_update(claims: AuthClaims) -> Decision:
    # Owners can never grade their own submissions.
    return ALLOW if claims.is_master else deny(Forbidden)


def check_reviewer_listing(claims: AuthClaims) -> Decision:
    return ALLOW if claims.is_master else deny(Forbidden)


def count_ungraded(
    users: Iterable[User], ungraded: Iterable[FormSubmission]
) -> List[ReviewableUser]:
    """Annotate each non-master user with their number of ungraded submissions."""
    counts: Dict[str, int] = {}
    for form in ungraded:
        if not form.is_graded:
            counts[form.owner_id] = counts.get(form.owner_id, 0) + 1

    return [
        ReviewableUser(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            is_master=user.is_master,
            ungraded_count=counts.get(user.id, 0),
        )
        for user in users
        if not user.is_master
    ]
