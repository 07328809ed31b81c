"""
Auth service: password hashing and JWT creation/verification.
Uses bcrypt directly (no passlib) to avoid passlib/bcrypt version conflicts.
Tokens carry the user id and canonical role; decode distinguishes expired from invalid tokens.
"""
import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import AuthenticationError
from app.models.types import Role, normalize_role
from app.models.user import User
from app import metrics

logger = logging.getLogger(__name__)

# Bcrypt limit is 72 bytes; use 71 so we never exceed
BCRYPT_MAX_BYTES = 71


def _truncate_to_bytes(s: str, max_bytes: int = BCRYPT_MAX_BYTES) -> bytes:
    """Truncate string to at most max_bytes UTF-8; return bytes for bcrypt."""
    if not s:
        return b""
    encoded = s.encode("utf-8")
    if len(encoded) <= max_bytes:
        return encoded
    return encoded[:max_bytes]


def hash_password(password: str) -> str:
    """Hash password for storage. Raises ValueError if password is None."""
    if password is None:
        raise ValueError("password is required")
    raw = _truncate_to_bytes(password)
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(raw, salt)
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    raw = _truncate_to_bytes(plain)
    try:
        return bcrypt.checkpw(raw, hashed.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def create_access_token(user_id: int, role: str) -> str:
    canonical = normalize_role(role) or Role.SUB_ADMIN
    now = datetime.now(timezone.utc)
    expire = now + timedelta(hours=settings.jwt_expire_hours)
    # JWT exp must be numeric (Unix timestamp), not datetime
    payload = {
        "sub": str(user_id),
        "role": canonical.value,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Return the token payload or raise AuthenticationError ("Token expired" / "Invalid token")."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except JWTError:
        raise AuthenticationError("Invalid token")
    if not str(payload.get("sub") or "").isdigit():
        raise AuthenticationError("Invalid token")
    return payload


def authenticate(db: Session, email: str, password: str) -> User:
    """Check credentials; stamp last_login. Raises AuthenticationError on any failure."""
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user or not verify_password(password, user.password_hash):
        metrics.increment("login_failures_total")
        logger.warning("Login failed for %s", email)
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        metrics.increment("login_failures_total")
        logger.warning("Login refused for deactivated account user_id=%s", user.id)
        raise AuthenticationError("Account is deactivated")
    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return user
