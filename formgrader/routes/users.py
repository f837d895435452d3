from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from ..schemas import ReviewableUser
from ..services.auth_service import AuthClaims
from ..services.submission_service import SubmissionService
from .deps import error_responses, get_submission_service, require_auth

router = APIRouter(tags=["users"], responses=error_responses(401, 403))


@router.get(
    "/",
    response_model=List[ReviewableUser],
    summary="Non-master users with their ungraded submission counts (master only)",
)
def list_reviewable_users(
    claims: AuthClaims = Depends(require_auth),
    forms: SubmissionService = Depends(get_submission_service),
) -> List[ReviewableUser]:
    return forms.reviewable_users(claims)
