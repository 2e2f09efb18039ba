import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from jose.exceptions import JOSEError
from passlib.context import CryptContext

from app.core.config import settings
from app.utils.exceptions import ConfigurationError, InvalidTokenError, TokenGenerationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def _truncate(password: str) -> str:
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_BYTES:
        return password_bytes[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore")
    return password


def get_password_hash(password: str) -> str:
    return pwd_context.hash(_truncate(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(_truncate(plain_password), hashed_password)


def _sign(user_id: int, secret: Optional[str], expires_delta: timedelta, extra_claims: Optional[dict] = None) -> str:
    if not secret:
        logger.error("Token signing secret is not configured")
        raise ConfigurationError()

    expire = datetime.now(timezone.utc) + expires_delta
    try:
        claims = {"sub": str(user_id), "exp": expire}
        claims.update(extra_claims or {})
        return jwt.encode(claims, secret, algorithm=settings.JWT_ALGORITHM)
    except JOSEError as exc:
        logger.error("Token signing failed for user %s: %s", user_id, exc)
        raise TokenGenerationError() from exc


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a short-lived access token for the user"""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _sign(user_id, settings.ACCESS_TOKEN_SECRET, expires_delta)


def create_refresh_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a long-lived refresh token for the user"""
    if expires_delta is None:
        expires_delta = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    # jti keeps two refresh tokens issued in the same second distinct
    return _sign(user_id, settings.REFRESH_TOKEN_SECRET, expires_delta, {"jti": secrets.token_hex(8)})


def decode_access_token(token: str) -> int:
    """Verify an access token and return the user id it carries"""
    if not settings.ACCESS_TOKEN_SECRET:
        logger.error("ACCESS_TOKEN_SECRET is not configured")
        raise ConfigurationError()

    try:
        payload = jwt.decode(token, settings.ACCESS_TOKEN_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JOSEError as exc:
        logger.debug("Access token rejected: %s", exc)
        raise InvalidTokenError() from exc

    sub = payload.get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError):
        raise InvalidTokenError()
