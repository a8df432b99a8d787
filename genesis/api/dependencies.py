"""FastAPI dependencies resolving the authenticated user from a bearer token."""

import logging
from typing import Callable, Optional

from fastapi import Header, HTTPException, status

from genesis.core.config import AppSettings
from genesis.core.security import INVALID_TOKEN_MESSAGE, decode_token
from genesis.models.exceptions import AuthenticationError, ModelNotFoundError
from genesis.models.users import UserModel
from genesis.services.profile_service import ProfileService


logger = logging.getLogger(__name__)

MISSING_TOKEN_MESSAGE = "No token, authorization denied"


def _extract_token(x_auth_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
    """Prefer `x-auth-token`; fall back to `Authorization: Bearer <token>`."""
    if x_auth_token and x_auth_token.strip():
        return x_auth_token.strip()
    if authorization:
        scheme, _, credentials = authorization.strip().partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return None


def build_current_user_dependency(
    settings: AppSettings,
    profile_service: ProfileService,
) -> Callable[..., UserModel]:
    """Return a dependency that yields the `UserModel` behind the request token."""

    def current_user(
        x_auth_token: Optional[str] = Header(default=None),
        authorization: Optional[str] = Header(default=None),
    ) -> UserModel:
        token = _extract_token(x_auth_token, authorization)
        if token is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=MISSING_TOKEN_MESSAGE)
        try:
            user_id = decode_token(token, settings.jwt_secret, settings.jwt_algorithm)
            return profile_service.get_user(user_id)
        except (AuthenticationError, ModelNotFoundError):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_TOKEN_MESSAGE)
        except Exception:
            logger.exception("Token verification failed unexpectedly.")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_TOKEN_MESSAGE)

    return current_user
