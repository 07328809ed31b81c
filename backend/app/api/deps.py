"""
Shared dependencies: resolve the caller from the Bearer token.
get_current_user requires a token; get_optional_actor lets public routes run without one
(but still rejects a token that is present and bad).
"""
import logging
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import AuthenticationError
from app.models.user import User
from app.services.auth import decode_access_token
from app.services.policy import Actor

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)


def bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str | None:
    token = (getattr(credentials, "credentials", None) or "").strip() if credentials else ""
    return token or None


def user_from_token(token: str, db: Session) -> User:
    payload = decode_access_token(token)
    user = db.get(User, int(payload["sub"]))
    if not user or not user.is_active:
        logger.debug("Auth failed: user %s missing or inactive", payload.get("sub"))
        raise AuthenticationError("Invalid or inactive user")
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Require valid Bearer token; return active User or 401."""
    token = bearer_token(credentials)
    if not token:
        logger.debug("Auth failed: no Bearer token in request")
        raise AuthenticationError("Access token required")
    return user_from_token(token, db)


def get_current_actor(user: User = Depends(get_current_user)) -> Actor:
    return Actor.from_user(user)


def get_optional_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> Actor | None:
    """Actor for a Bearer token if one is sent; None for anonymous (public) requests."""
    token = bearer_token(credentials)
    if not token:
        return None
    return Actor.from_user(user_from_token(token, db))
