"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

from fastapi import Request

from ..errors import InvalidToken, Unauthenticated
from ..middleware.jwt_auth import INVALID_TOKEN_MSG, MISSING_TOKEN_MSG
from ..schemas import MessageResponse
from ..services.account_service import AccountService
from ..services.auth_service import AuthClaims
from ..services.submission_service import SubmissionService
from ..utils.auth import get_authorization_header, parse_authorization_token


def error_responses(*status_codes: int) -> dict:
    """OpenAPI ``responses`` entries for the ``{"msg": ...}`` error body."""
    return {code: {"model": MessageResponse} for code in (400, 500) + status_codes}


def require_auth(request: Request) -> AuthClaims:
    """
    Return the caller's verified claims.

    ``JWTAuthMiddleware`` normally attaches them; when a router is mounted
    without the middleware the token is verified here instead.
    """
    claims = getattr(request.state, "auth", None)
    if claims is not None:
        return claims

    try:
        token = parse_authorization_token(get_authorization_header(request.headers))
    except ValueError as exc:
        raise Unauthenticated(MISSING_TOKEN_MSG) from exc
    try:
        claims = request.app.state.tokens.verify(token)
    except InvalidToken as exc:
        raise Unauthenticated(INVALID_TOKEN_MSG) from exc
    request.state.auth = claims
    return claims


def get_account_service(request: Request) -> AccountService:
    return request.app.state.accounts


def get_submission_service(request: Request) -> SubmissionService:
    return request.app.state.submissions
