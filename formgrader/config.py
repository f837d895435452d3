"""
Process configuration.

``load_settings()`` reads the environment once at startup and returns an
immutable ``Settings``; the application factory injects it into the token
service, the access-control checks and the stores.  Nothing else in the
package reads configuration from the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .utils.jwt_secret import get_jwt_secret

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("dynamodb", "memory")


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    master_email: Optional[str] = None
    jwt_algorithm: str = "HS256"
    token_expires_seconds: int = 3600
    bcrypt_rounds: int = 10
    storage_backend: str = "dynamodb"
    users_table: str = "formgrader-users"
    forms_table: str = "formgrader-forms"
    aws_region: str = "us-east-1"
    aws_endpoint_url: Optional[str] = None
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))
    log_level: str = "INFO"
    cloudwatch_log_group: Optional[str] = None
    port: int = 5000
    is_production: bool = False

    def __post_init__(self) -> None:
        if self.jwt_algorithm != "HS256":
            raise ValueError("Only HS256 token signing is supported.")
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown STORAGE_BACKEND '{self.storage_backend}'. "
                f"Expected one of: {', '.join(STORAGE_BACKENDS)}"
            )


def _int_env(name: str, default: int, minimum: int, maximum: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except (ValueError, TypeError) as e:
        logger.warning(f"Invalid {name} value: {raw!r}. Error: {e}. Using default: {default}")
        return default
    if value < minimum or value > maximum:
        logger.warning(
            f"{name} value {value} outside [{minimum}, {maximum}]. Using default: {default}"
        )
        return default
    return value


def _csv_env(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def load_settings() -> Settings:
    """Build ``Settings`` from the process environment."""
    is_production = os.getenv("PYTHON_ENV", "development").lower() == "production"

    master_email = (os.getenv("MASTER_EMAIL") or "").strip() or None
    if master_email is None:
        if is_production:
            raise RuntimeError("MASTER_EMAIL must be configured in production")
        logger.warning("MASTER_EMAIL is not set; no account can become a master.")

    return Settings(
        jwt_secret=get_jwt_secret(is_production=is_production),
        master_email=master_email,
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        token_expires_seconds=_int_env("TOKEN_EXPIRES_SECONDS", 3600, 60, 86400),
        bcrypt_rounds=_int_env("BCRYPT_ROUNDS", 10, 4, 16),
        storage_backend=os.getenv("STORAGE_BACKEND", "dynamodb").lower(),
        users_table=os.getenv("DDB_TABLE_USERS", "formgrader-users"),
        forms_table=os.getenv("DDB_TABLE_FORMS", "formgrader-forms"),
        aws_region=os.getenv("AWS_REGION", "us-east-1"),
        aws_endpoint_url=os.getenv("AWS_ENDPOINT_URL") or None,
        cors_origins=_csv_env("CORS_ORIGINS", ("*",)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cloudwatch_log_group=os.getenv("CLOUDWATCH_LOG_GROUP") or None,
        port=_int_env("PORT", 5000, 1, 65535),
        is_production=is_production,
    )
