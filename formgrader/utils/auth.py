from __future__ import annotations

from typing import Mapping, Optional


def get_authorization_header(headers: Optional[Mapping[str, str]]) -> Optional[str]:
    """
    Return the first available token-carrying header value.

    Favors the standard ``Authorization`` header but falls back to the legacy
    ``x-auth-token`` header used by older clients.
    """
    if headers is None:
        return None
    return (
        headers.get("authorization")
        or headers.get("Authorization")
        or headers.get("x-auth-token")
        or headers.get("X-Auth-Token")
    )


def parse_authorization_token(header_value: Optional[str]) -> str:
    """
    Extract the token from a header value.

    Accepts both ``Bearer <token>`` and raw token formats.

    Raises:
        ValueError: When the header is missing or the token component is empty.
    """
    if not header_value:
        raise ValueError("Authorization header missing")

    raw = header_value.strip()
    if not raw:
        raise ValueError("Authorization header empty")

    # "Bearer " with nothing after it strips down to the bare scheme.
    if raw.lower() == "bearer":
        raise ValueError("Authorization token missing")

    if raw.lower().startswith("bearer "):
        token = raw.split(" ", 1)[1].strip()
    else:
        token = raw

    if not token:
        raise ValueError("Authorization token missing")

    return token
