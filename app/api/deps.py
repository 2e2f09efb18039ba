import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.security import decode_access_token
from app.models.user import User
from app.repositories.user import UserRepository
from app.utils.exceptions import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

# Bearer header is optional: the access token cookie takes priority
bearer_scheme = HTTPBearer(auto_error=False)


def extract_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    token = request.cookies.get(settings.ACCESS_TOKEN_COOKIE_NAME)
    if token:
        return token
    if credentials and credentials.scheme.lower() == "bearer" and credentials.credentials:
        return credentials.credentials
    return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the access token on the request to a user.

    The token is read from the access token cookie, falling back to an
    ``Authorization: Bearer`` header. The returned user is the only source
    of the acting identity for the endpoint.

    Raises:
        AuthenticationError: no token, invalid token or unknown user (401)
        ConfigurationError: access token secret not configured (500)
    """
    token = extract_access_token(request, credentials)
    if not token:
        raise AuthenticationError("Unauthorized - No token provided")

    user_id = decode_access_token(token)

    user = await UserRepository(db).get_by_id(user_id)
    if not user:
        logger.warning("Token for unknown user %s", user_id)
        raise AuthenticationError("Unauthorized - User not found")

    return user


async def get_current_user_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user, but None when there is no valid session"""
    try:
        return await get_current_user(request, credentials, db)
    except AuthenticationError:
        return None
    except ConfigurationError:
        logger.error("Cannot resolve optional session: access token secret is not configured")
        return None
