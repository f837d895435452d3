"""
JWT enforcement middleware.

Responsibilities:
  * Let the public endpoints through (health, docs, register, login).
  * Read the token from ``Authorization`` (Bearer or bare) or ``x-auth-token``.
  * Verify it with the application's ``TokenService`` and attach the
    resulting ``AuthClaims`` to ``request.state.auth``.
  * Return ``401 {"msg": ...}`` for missing, malformed, badly signed or
    expired tokens without saying which.

Per-route authorization (ownership, master-only operations) happens in the
service layer, not here.
"""

from __future__ import annotations

from typing import Iterable
from urllib.parse import unquote

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse

from ..errors import InvalidToken
from ..services.auth_service import TokenService
from ..utils.auth import get_authorization_header, parse_authorization_token

# Each entry is an exact path, or a prefix when it ends with a slash.
DEFAULT_EXEMPT: tuple[str, ...] = (
    "/health",
    "/docs",
    "/docs/",
    "/redoc",
    "/openapi.json",
    "/api/auth/register",
    "/api/auth/login",
)

MISSING_TOKEN_MSG = "No token, authorization denied"
INVALID_TOKEN_MSG = "Token is not valid"


def _is_exempt(path: str, exempt: Iterable[str]) -> bool:
    for p in exempt:
        if p.endswith("/") and path.startswith(p):
            return True
        if path == p:
            return True
    return False


class JWTAuthMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        token_service: TokenService,
        exempt_paths: Iterable[str] = DEFAULT_EXEMPT,
    ) -> None:
        super().__init__(app)
        self.token_service = token_service
        self.exempt_paths = tuple(exempt_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        # Prefix-safe path normalization (handles /prod/... base paths)
        raw_path = unquote(request.scope.get("path", "") or request.url.path)
        root_prefix = request.scope.get("root_path", "") or request.headers.get(
            "X-Forwarded-Prefix", ""
        )
        path = (
            raw_path[len(root_prefix) :]
            if root_prefix and raw_path.startswith(root_prefix)
            else raw_path
        )

        if request.method == "OPTIONS" or _is_exempt(path, self.exempt_paths):
            return await call_next(request)

        try:
            token = parse_authorization_token(get_authorization_header(request.headers))
        except ValueError:
            return JSONResponse({"msg": MISSING_TOKEN_MSG}, status_code=401)

        try:
            claims = self.token_service.verify(token)
        except InvalidToken:
            return JSONResponse({"msg": INVALID_TOKEN_MSG}, status_code=401)

        request.state.auth = claims
        return await call_next(request)
