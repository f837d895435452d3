from __future__ import annotations

from typing import List

from fastapi import APIRouter, Body, Depends, Path

from ..schemas import Feedback, FormCreateRequest, FormSubmission
from ..services.auth_service import AuthClaims
from ..services.submission_service import SubmissionService
from .deps import error_responses, get_submission_service, require_auth

router = APIRouter(tags=["forms"], responses=error_responses(401))


@router.post("/", response_model=FormSubmission, summary="Submit a form")
def create_form(
    payload: FormCreateRequest = Body(...),
    claims: AuthClaims = Depends(require_auth),
    forms: SubmissionService = Depends(get_submission_service),
) -> FormSubmission:
    return forms.create(claims, payload.payload)


@router.get("/", response_model=List[FormSubmission], summary="Caller's submissions, newest first")
def list_my_forms(
    claims: AuthClaims = Depends(require_auth),
    forms: SubmissionService = Depends(get_submission_service),
) -> List[FormSubmission]:
    return forms.list_own(claims)


# Declared before "/{form_id}" so "user" is never read as a form id.
@router.get(
    "/user/{user_id}",
    response_model=List[FormSubmission],
    summary="A user's submissions (master only)",
    responses=error_responses(403),
)
def list_user_forms(
    user_id: str = Path(..., description="Owner whose submissions to list."),
    claims: AuthClaims = Depends(require_auth),
    forms: SubmissionService = Depends(get_submission_service),
) -> List[FormSubmission]:
    return forms.list_for_user(claims, user_id)


@router.get(
    "/{form_id}",
    response_model=FormSubmission,
    summary="Read one submission",
    responses=error_responses(404),
)
def get_form(
    form_id: str = Path(...),
    claims: AuthClaims = Depends(require_auth),
    forms: SubmissionService = Depends(get_submission_service),
) -> FormSubmission:
    return forms.get(claims, form_id)


@router.put(
    "/{form_id}/feedback",
    response_model=FormSubmission,
    summary="Attach or overwrite feedback (master only)",
    responses=error_responses(403, 404),
)
def put_feedback(
    form_id: str = Path(...),
    feedback: Feedback = Body(...),
    claims: AuthClaims = Depends(require_auth),
    forms: SubmissionService = Depends(get_submission_service),
) -> FormSubmission:
    return forms.grade(claims, form_id, feedback)
