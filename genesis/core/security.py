"""Bearer token verification backed by PyJWT."""

from datetime import datetime, timedelta, timezone
import logging
from typing import Optional

import jwt

from genesis.models.exceptions import AuthenticationError


logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Token is not valid"


def issue_token(
    user_id: str,
    secret: str,
    algorithm: str = "HS256",
    ttl_minutes: Optional[int] = 60,
) -> str:
    """Encode a `{"user": {"id": ...}}` token for `user_id`."""
    payload = {"user": {"id": user_id}, "iat": datetime.now(timezone.utc)}
    if ttl_minutes:
        payload["exp"] = datetime.now(timezone.utc) + timedelta(minutes=ttl_minutes)
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> str:
    """Verify `token` and return the user id it carries.

    Raises:
        AuthenticationError: If the token is malformed, expired or has no user id.
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token.")
        raise AuthenticationError(INVALID_TOKEN_MESSAGE)
    except jwt.InvalidTokenError:
        logger.info("Rejected invalid token.")
        raise AuthenticationError(INVALID_TOKEN_MESSAGE)

    user = payload.get("user")
    user_id = user.get("id") if isinstance(user, dict) else None
    if not user_id:
        raise AuthenticationError(INVALID_TOKEN_MESSAGE)
    return str(user_id)
