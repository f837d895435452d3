from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from ..schemas import LoginRequest, RegisterRequest, TokenResponse, User
from ..services.account_service import AccountService
from ..services.auth_service import AuthClaims
from .deps import error_responses, get_account_service, require_auth

router = APIRouter(tags=["auth"], responses=error_responses())


@router.post("/register", response_model=TokenResponse, summary="Register a new user")
def register(
    payload: RegisterRequest = Body(...),
    accounts: AccountService = Depends(get_account_service),
) -> TokenResponse:
    return TokenResponse(token=accounts.register(payload))


@router.post("/login", response_model=TokenResponse, summary="Exchange credentials for a token")
def login(
    payload: LoginRequest = Body(...),
    accounts: AccountService = Depends(get_account_service),
) -> TokenResponse:
    return TokenResponse(token=accounts.login(payload))


@router.get(
    "/",
    response_model=User,
    summary="Current user's profile",
    responses=error_responses(401, 404),
)
def me(
    claims: AuthClaims = Depends(require_auth),
    accounts: AccountService = Depends(get_account_service),
) -> User:
    return accounts.profile(claims)
