"""
Access token verification.

Tokens are issued by the hosted identity platform; this service only verifies
them. create_access_token exists for local development and tests.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import jwt

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "HS256"


def create_access_token(
    data: dict[str, Any],
    secret: str,
    algorithm: str = DEFAULT_ALGORITHM,
    expires_delta: timedelta | None = None,
    now_utc: datetime | None = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode in the token
        secret: Signing secret
        algorithm: JWT algorithm
        expires_delta: Optional custom expiration delta
        now_utc: Current UTC time (for testing/determinism). Defaults to datetime.now(UTC).
    """
    to_encode = data.copy()
    current_time = now_utc if now_utc is not None else datetime.now(UTC)
    to_encode["exp"] = current_time + (expires_delta or timedelta(minutes=15))
    encoded_jwt: str = jwt.encode(to_encode, secret, algorithm=algorithm)
    return encoded_jwt


def decode_access_token(
    token: str, secret: str, algorithm: str = DEFAULT_ALGORITHM
) -> dict[str, Any] | None:
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
        return cast(dict[str, Any], payload)
    except jwt.JWTError as e:
        logger.info("Rejected access token: %s", e)
        return None
