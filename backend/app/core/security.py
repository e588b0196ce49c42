"""
Session access.

Sessions are issued by the e-mail sign-in provider as signed JWT bearer
tokens whose ``sub`` claim is the user id. This module only reads them.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from loguru import logger
from passlib.context import CryptContext

from app.core.config import settings
from app.core.exceptions import UnauthenticatedError

bearer_scheme = HTTPBearer(auto_error=False)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class Session:
    """Authenticated caller."""

    user_id: int


def create_access_token(user_id: int, expires_minutes: int | None = None) -> str:
    """
    Sign a session token for ``user_id``.

    The sign-in provider uses the same secret; the backend calls this only
    for tooling and tests.
    """
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.jwt_access_token_expire_minutes
    )
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_session(token: str | None) -> Session | None:
    """Return the session carried by ``token``, or None if absent or invalid."""
    if not token:
        return None

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        logger.warning(f"Rejected session token: {e}")
        return None

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    return Session(user_id=int(subject))


def get_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Session | None:
    """FastAPI dependency: the current session, or None for anonymous callers."""
    return decode_session(credentials.credentials if credentials else None)


def require_session(session: Session | None) -> Session:
    """Return ``session`` or raise the unauthenticated fault."""
    if session is None:
        raise UnauthenticatedError()
    return session


def hash_password(password: str) -> str:
    return pwd_context.hash(password)
