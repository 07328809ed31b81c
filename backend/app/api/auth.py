"""
Auth routes: login (JWT), verify-token, current user profile, logout.
"""
import logging
from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.auth import LoginRequest, LoginData, TokenInfo, ProfileUpdateRequest
from app.schemas.common import ApiResponse
from app.schemas.user import UserData, UserResponse
from app.services.auth import authenticate, create_access_token, decode_access_token
from app.services.users import update_profile
from app.api.deps import get_current_user, security, bearer_token, user_from_token
from app.errors import AuthenticationError

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=ApiResponse[LoginData])
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Login with email/password; returns JWT and the user."""
    user = authenticate(db, str(data.email), data.password)
    token = create_access_token(user.id, user.role)
    logger.info("Login user_id=%s", user.id)
    return ApiResponse(
        message="Login successful",
        data=LoginData(token=token, user=UserResponse.model_validate(user)),
    )


@router.post("/verify-token", response_model=ApiResponse[TokenInfo])
def verify_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
):
    """Validate the Bearer token; echo the user it belongs to."""
    token = bearer_token(credentials)
    if not token:
        raise AuthenticationError("Access token required")
    payload = decode_access_token(token)
    user = user_from_token(token, db)
    return ApiResponse(
        message="Token is valid",
        data=TokenInfo(user=UserResponse.model_validate(user), exp=payload.get("exp")),
    )


@router.get("/me", response_model=ApiResponse[UserData])
def me(current_user: User = Depends(get_current_user)):
    """Return current user with affiliation."""
    return ApiResponse(data=UserData(user=UserResponse.model_validate(current_user)))


@router.put("/me", response_model=ApiResponse[UserData])
def update_me(
    data: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update own profile (names, designation, phone, password)."""
    user = update_profile(db, current_user, data)
    return ApiResponse(message="Profile updated successfully", data=UserData(user=UserResponse.model_validate(user)))


@router.post("/logout", response_model=ApiResponse[None])
def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy."""
    return ApiResponse(message="Logout successful")
