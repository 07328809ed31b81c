"""
User management schemas (super_admin). Role accepts legacy names and is normalized on input.
"""
import re
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.types import Role, normalize_role
from app.schemas.common import BodySummary, Pagination

_PHONE_RE = re.compile(r"^\+?[0-9]{10,15}$")


def validate_password_strength(v: str) -> str:
    if len(v) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if len(v.encode("utf-8")) > 72:
        raise ValueError("Password must be at most 72 bytes (bcrypt limit)")
    if not re.search(r"[A-Za-z]", v) or not re.search(r"[0-9]", v):
        raise ValueError("Password must contain at least one letter and one number")
    return v


def _role(v) -> Role:
    role = normalize_role(v)
    if role is None:
        raise ValueError("Role must be one of super_admin, admin, sub_admin")
    return role


def _phone(v: str | None) -> str | None:
    if v is None or v == "":
        return None
    if not _PHONE_RE.match(v):
        raise ValueError("Phone number must be 10 to 15 digits")
    return v


class UserCreateRequest(BaseModel):
    email: EmailStr
    password: str
    role: Role = Role.SUB_ADMIN
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    designation: str | None = Field(None, max_length=255)
    phone: str | None = None
    university_body_id: int | None = Field(None, ge=1)

    @field_validator("role", mode="before")
    @classmethod
    def role_canonical(cls, v):
        return _role(v)

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return validate_password_strength(v)

    @field_validator("phone")
    @classmethod
    def phone_format(cls, v):
        return _phone(v)


class UserUpdateRequest(BaseModel):
    email: EmailStr | None = None
    password: str | None = None
    role: Role | None = None
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    designation: str | None = Field(None, max_length=255)
    phone: str | None = None
    university_body_id: int | None = Field(None, ge=1)
    is_active: bool | None = None

    @field_validator("role", mode="before")
    @classmethod
    def role_canonical(cls, v):
        return None if v is None else _role(v)

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str | None) -> str | None:
        return None if v is None else validate_password_strength(v)

    @field_validator("phone")
    @classmethod
    def phone_format(cls, v):
        return _phone(v)


class UserResponse(BaseModel):
    id: int
    email: str
    role: str
    first_name: str | None = None
    last_name: str | None = None
    designation: str | None = None
    phone: str | None = None
    university_body_id: int | None = None
    university_body: BodySummary | None = None
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True

    @field_validator("role", mode="before")
    @classmethod
    def role_canonical(cls, v):
        role = normalize_role(v)
        return role.value if role else str(v)


class UserData(BaseModel):
    user: UserResponse


class UserListData(BaseModel):
    users: list[UserResponse]
    pagination: Pagination
