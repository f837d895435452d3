from __future__ import annotations

import logging

from ..config import Settings
from ..errors import (
    DuplicateEmail,
    InvalidCredentials,
    NotFound,
    StoreError,
    UnexpectedFailure,
    ValidationConflict,
)
from ..schemas import LoginRequest, RegisterRequest, User
from . import access_control
from .auth_service import AuthClaims, TokenService, hash_password, verify_password
from .storage_service import CredentialStore

logger = logging.getLogger(__name__)


class AccountService:
    """Registration, login and self-profile reads."""

    def __init__(self, settings: Settings, users: CredentialStore, tokens: TokenService) -> None:
        self.settings = settings
        self.users = users
        self.tokens = tokens

    def _issue_for(self, user: User) -> str:
        return self.tokens.issue(AuthClaims(user_id=user.id, is_master=user.is_master))

    def register(self, payload: RegisterRequest) -> str:
        try:
            if self.users.find_by_email(payload.email) is not None:
                raise ValidationConflict()
            user = self.users.create(
                first_name=payload.first_name,
                last_name=payload.last_name,
                email=payload.email,
                password_hash=hash_password(payload.password, self.settings.bcrypt_rounds),
                is_master=access_control.grants_master(payload.email, self.settings),
            )
        except DuplicateEmail as exc:
            # Lost a race with a concurrent registration for the same email.
            raise ValidationConflict() from exc
        except StoreError as exc:
            logger.error(f"Registration failed: {exc}")
            raise UnexpectedFailure() from exc

        if user.is_master:
            logger.info(f"Master account registered: user_id={user.id}")
        return self._issue_for(user)

    def login(self, payload: LoginRequest) -> str:
        try:
            user = self.users.find_by_email(payload.email, include_hash=True)
        except StoreError as exc:
            logger.error(f"Login lookup failed: {exc}")
            raise UnexpectedFailure() from exc

        # Same outcome for unknown email and wrong password.
        if user is None or not verify_password(payload.password, user.password_hash):
            raise InvalidCredentials()
        return self._issue_for(user)

    def profile(self, claims: AuthClaims) -> User:
        access_control.check_profile_read(claims).enforce()
        try:
            user = self.users.find_by_id(claims.user_id)
        except StoreError as exc:
            logger.error(f"Profile lookup failed: {exc}")
            raise UnexpectedFailure() from exc
        if user is None:
            raise NotFound("User not found")
        return user
