"""
Resolve the token-signing secret.

Development: ``JWT_SECRET`` from the environment wins, then AWS Secrets
Manager, then a generated temporary secret (with a warning).
Production: ``JWT_SECRET`` or Secrets Manager only; anything else is a
startup error.
"""

from __future__ import annotations

import json
import logging
import os
import secrets
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..aws_clients import secretsmanager_client

logger = logging.getLogger(__name__)

_JWT_SECRET_CACHE: Optional[str] = None


def _from_secrets_manager(secret_name: str) -> str:
    response = secretsmanager_client().get_secret_value(SecretId=secret_name)
    secret_string = response.get("SecretString")
    if not secret_string:
        raise ValueError("SecretString is empty")
    secret_data = json.loads(secret_string)
    jwt_secret = secret_data.get("jwt_secret")
    if not jwt_secret:
        raise ValueError("jwt_secret field not found in secret")
    return jwt_secret


def get_jwt_secret(is_production: bool = False) -> str:
    """
    Return the signing secret, caching it for the life of the process.

    Raises:
        RuntimeError: in production when no secret can be resolved.
    """
    global _JWT_SECRET_CACHE

    if _JWT_SECRET_CACHE is not None:
        return _JWT_SECRET_CACHE

    env_secret = os.getenv("JWT_SECRET")
    if env_secret:
        logger.info("Using JWT_SECRET from environment variable")
        _JWT_SECRET_CACHE = env_secret
        return env_secret

    secret_name = os.getenv("JWT_SECRET_NAME")
    if secret_name:
        try:
            jwt_secret = _from_secrets_manager(secret_name)
            logger.info(f"Retrieved JWT secret from Secrets Manager: {secret_name}")
            _JWT_SECRET_CACHE = jwt_secret
            return jwt_secret
        except (ClientError, BotoCoreError, json.JSONDecodeError, ValueError) as e:
            if is_production:
                error_msg = (
                    f"Error retrieving JWT secret '{secret_name}' from Secrets Manager: {e}. "
                    "This is required in production."
                )
                logger.error(error_msg)
                raise RuntimeError(error_msg) from e
            logger.warning(
                f"Error retrieving JWT secret '{secret_name}' from Secrets Manager: {e}. "
                "Falling back to a generated secret (development mode)."
            )

    if is_production:
        error_msg = "No JWT secret configured. Set JWT_SECRET or JWT_SECRET_NAME."
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    logger.warning(
        "No JWT secret found. Generated a temporary secret for local development; "
        "tokens will not survive a restart."
    )
    _JWT_SECRET_CACHE = secrets.token_urlsafe(32)
    return _JWT_SECRET_CACHE


def clear_jwt_secret_cache() -> None:
    """Clear the cached secret. Useful for testing or secret rotation."""
    global _JWT_SECRET_CACHE
    _JWT_SECRET_CACHE = None
