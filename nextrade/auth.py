import logging
import time
from typing import NamedTuple, Optional

import jwt
from fastapi import Depends, Header
from passlib.context import CryptContext

from .config import Settings, get_settings
from .errors import InvalidToken, Unauthorized
from .models import Role

logger = logging.getLogger(__name__)

# Use pbkdf2_sha256 as default to avoid bcrypt 72-byte limitation in some envs
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

ALGORITHM = "HS256"


class Principal(NamedTuple):
    """Caller identity carried by a verified token."""
    user_id: int
    role: Role


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_access_token(user_id: int, role: Role, settings: Settings, expires_delta: Optional[int] = None) -> str:
    now = int(time.time())
    exp = now + (expires_delta or settings.token_ttl_seconds)
    payload = {"sub": str(user_id), "role": Role(role).value, "iat": now, "exp": exp}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Principal:
    """Verify signature and expiry, then turn the claims into a Principal.

    Pure function of the token and the signing key: the user record is not
    re-read, so a role change only shows up after the next login.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[ALGORITHM],
            options={"require": ["sub", "role", "exp"]},
        )
    except jwt.PyJWTError as e:
        logger.info("token rejected", extra={"reason": type(e).__name__})
        raise InvalidToken() from e
    try:
        return Principal(user_id=int(payload["sub"]), role=Role(payload["role"]))
    except (TypeError, ValueError) as e:
        raise InvalidToken() from e


def bearer_token(authorization: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise Unauthorized()
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthorized()
    return token


def get_current_principal(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> Principal:
    return decode_access_token(bearer_token(authorization), settings)
