# guidebook/auth.py
"""
Password hashing and JWT access tokens.

Tokens carry the user id in ``sub`` as a string, plus ``iat`` and ``exp``.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
import jwt
from jwt import PyJWTError
from passlib.context import CryptContext

from .core.config import Settings, get_app_settings, settings
from .core.constants import MAX_DB_INT
from .core.exceptions import UnauthorizedException

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Valid bcrypt hash compared against when the email is unknown, so that login
# timing does not reveal which emails are registered.
DUMMY_HASH_FOR_TIMING_ATTACK = "$2b$12$LQv3c1yqBWVHxkd0LHAkCOYz6TtxMQJqhN8/X4.V4ferVKnNaOuJi"

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login", auto_error=False)


def _secret_value(secret_obj: Any) -> str:
    getter = getattr(secret_obj, "get_secret_value", None)
    if callable(getter):
        return cast(str, getter())
    return cast(str, secret_obj)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Returns:
        bool: True if password matches, False otherwise (including malformed hashes)
    """
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except ValueError as e:
        logger.error(f"Error verifying password: {str(e)}")
        return False


def get_password_hash(password: str) -> str:
    return str(pwd_context.hash(password))


def create_access_token(
    user_id: int,
    expires_delta: Optional[timedelta] = None,
    *,
    config: Optional[Settings] = None,
) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: Id stored in the ``sub`` claim
        expires_delta: Optional expiration time delta (defaults to settings)
        config: Settings holding the signing key (defaults to the global ones)
    """
    config = config or settings
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=config.access_token_expire_minutes))
    to_encode: Dict[str, Any] = {"sub": str(user_id), "iat": now, "exp": expire}

    encoded_jwt = cast(
        str,
        jwt.encode(to_encode, _secret_value(config.secret_key), algorithm=config.algorithm),
    )
    logger.debug(f"Created access token for user: {user_id}")
    return encoded_jwt


def decode_access_token(token: str, config: Optional[Settings] = None) -> Dict[str, Any]:
    config = config or settings
    payload = jwt.decode(
        token,
        _secret_value(config.secret_key),
        algorithms=[config.algorithm],
    )
    return cast(Dict[str, Any], payload)


def get_current_user_id(
    token: Optional[str] = Depends(oauth2_scheme_optional),
    config: Settings = Depends(get_app_settings),
) -> int:
    """
    Dependency returning the authenticated user's id from the Bearer token.

    Raises:
        UnauthorizedException: If the token is missing, expired or malformed
    """
    if not token:
        raise UnauthorizedException("Not authenticated", code="NOT_AUTHENTICATED")

    try:
        payload = decode_access_token(token, config)
    except PyJWTError as e:
        logger.info(f"JWT validation error: {str(e)}")
        raise UnauthorizedException(
            "Could not validate credentials", code="INVALID_TOKEN"
        ) from e

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject.isdigit() or int(subject) > MAX_DB_INT:
        logger.warning("Token payload missing usable 'sub' field")
        raise UnauthorizedException("Could not validate credentials", code="INVALID_TOKEN")
    return int(subject)
