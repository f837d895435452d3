"""
Application factory.

``create_app`` wires configuration, stores, services, routers, middleware
and exception handlers.  Stores can be injected (tests use the in-memory
backend); otherwise they are built from ``Settings.storage_backend``.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .errors import BadRequest, FormGraderError
from .middleware.jwt_auth import JWTAuthMiddleware
from .middleware.request_logging import LoggingMiddleware
from .routes import auth, forms, system, users
from .services.account_service import AccountService
from .services.auth_service import TokenService
from .services.storage_service import CredentialStore, SubmissionStore, build_stores
from .services.submission_service import SubmissionService

logger = logging.getLogger(__name__)


async def formgrader_error_handler(request: Request, exc: FormGraderError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.msg}")
    return JSONResponse({"msg": exc.msg}, status_code=exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    logger.info(f"Rejected request body for {request.method} {request.url.path}: {details}")
    error = BadRequest(f"Invalid request: {details}")
    return JSONResponse({"msg": error.msg}, status_code=error.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse({"msg": "Server error"}, status_code=500)


def create_app(
    settings: Optional[Settings] = None,
    users_store: Optional[CredentialStore] = None,
    forms_store: Optional[SubmissionStore] = None,
) -> FastAPI:
    settings = settings or load_settings()
    if users_store is None or forms_store is None:
        built_users, built_forms = build_stores(settings)
        users_store = users_store or built_users
        forms_store = forms_store or built_forms

    tokens = TokenService.from_settings(settings)

    app = FastAPI(title="Form Grader", version="1.0.0")
    app.state.settings = settings
    app.state.tokens = tokens
    app.state.accounts = AccountService(settings, users_store, tokens)
    app.state.submissions = SubmissionService(users_store, forms_store)

    app.include_router(system.router)
    app.include_router(auth.router, prefix="/api/auth")
    app.include_router(users.router, prefix="/api/users")
    app.include_router(forms.router, prefix="/api/forms")

    app.add_exception_handler(FormGraderError, formgrader_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Added last runs first: CORS, then logging, then JWT.
    app.add_middleware(JWTAuthMiddleware, token_service=tokens)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app
