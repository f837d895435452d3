"""
Exception taxonomy for the form grading service.

API-facing errors derive from ``FormGraderError`` and carry the HTTP status
and the client-safe message; the exception handlers registered in
``formgrader.app`` render them as ``{"msg": ...}``.  Store-level errors
(``DuplicateEmail``, ``StoreError``) never reach the client directly: the
service layer translates them first.
"""

from __future__ import annotations


class FormGraderError(Exception):
    status_code: int = 500
    default_msg: str = "Server error"

    def __init__(self, msg: str | None = None) -> None:
        self.msg = msg or self.default_msg
        super().__init__(self.msg)


class ValidationConflict(FormGraderError):
    status_code = 400
    default_msg = "User already exists"


class InvalidCredentials(FormGraderError):
    status_code = 400
    default_msg = "Invalid credentials"


class BadRequest(FormGraderError):
    status_code = 400
    default_msg = "Invalid request body"


class Unauthenticated(FormGraderError):
    status_code = 401
    default_msg = "Token is not valid"


class NotAuthorized(FormGraderError):
    status_code = 401
    default_msg = "Not authorized"


class Forbidden(FormGraderError):
    status_code = 403
    default_msg = "Access denied"


class NotFound(FormGraderError):
    status_code = 404
    default_msg = "Form not found"


class UnexpectedFailure(FormGraderError):
    status_code = 500
    default_msg = "Server error"


# --- Store / token level ------------------------------------------------------


class InvalidToken(Exception):
    """Token is malformed, badly signed, expired or missing claims."""


class DuplicateEmail(Exception):
    """A user with the same email already exists."""


class StoreError(Exception):
    """The backing store failed; details are logged, never returned."""
