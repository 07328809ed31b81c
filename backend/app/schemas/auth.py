"""
Auth request/response schemas.
"""
from pydantic import BaseModel, EmailStr, field_validator

from app.schemas.user import UserResponse, validate_password_strength


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes (bcrypt limit)")
        return v


class LoginData(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse


class TokenInfo(BaseModel):
    """verify-token echo: the resolved user plus the token's expiry."""
    user: UserResponse
    exp: int | None = None


class ProfileUpdateRequest(BaseModel):
    """Own-profile update. Role, affiliation and status are managed by super_admin only."""
    first_name: str | None = None
    last_name: str | None = None
    designation: str | None = None
    phone: str | None = None
    password: str | None = None

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str | None) -> str | None:
        return None if v is None else validate_password_strength(v)
