from datetime import datetime, timedelta, UTC
from typing import Optional

from fastapi import Depends, Header
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from tasktimer import config
from tasktimer.database import get_db
from tasktimer.errors import Unauthorized
from tasktimer.models.user import User

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str):
    """Hash a password after validating bcrypt's 72-byte limit.

    Raises ValueError if the UTF-8 encoding of the password exceeds 72 bytes.
    """
    if isinstance(password, str):
        b = password.encode("utf-8")
        if len(b) > 72:
            # make the failure explicit and consistent
            raise ValueError("password too long: must be at most 72 bytes when UTF-8 encoded")
    return pwd_context.hash(password)


def verify_password(plain, hashed):
    """Verify a plaintext password against a hash.

    If verification raises a ValueError (for example plain >72 bytes), return False
    to allow the caller to respond with an authentication failure instead of an error.
    """
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


def create_token(user: User) -> str:
    # read expiry at call-time so tests (and runtime overrides) that modify
    # tasktimer.config.ACCESS_TOKEN_EXPIRE_MINUTES take effect immediately
    expire = datetime.now(UTC) + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    data = {
        "sub": str(user.id),
        "username": user.username,
        "email": user.email,
        "exp": int(expire.timestamp()),  # JWT spec uses Unix timestamp
    }
    return jwt.encode(data, config.SECRET_KEY, algorithm=config.ALGORITHM)


def _extract_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer ...`` header."""
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
    return None


def decode_token(token: str) -> int:
    """Return the user id carried by a token, raising Unauthorized otherwise."""
    try:
        # jwt.decode validates exp automatically
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except ExpiredSignatureError:
        raise Unauthorized("Token has expired")
    except JWTError:
        raise Unauthorized("Invalid token")
    sub = payload.get("sub")
    if not sub:
        raise Unauthorized("Invalid token: missing user")
    try:
        return int(sub)
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token: malformed user")


def get_current_user(authorization: Optional[str] = Header(None), db: Session = Depends(get_db)) -> User:
    """Resolve the caller from the bearer token.

    The user is re-loaded from the database on every request; the claims in
    the token are never trusted for ownership decisions.
    """
    tok = _extract_token(authorization)
    if not tok:
        raise Unauthorized("Missing token")
    user = db.get(User, decode_token(tok))
    if user is None:
        raise Unauthorized("Invalid token: unknown user")
    return user
