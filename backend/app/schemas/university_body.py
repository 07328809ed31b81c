"""
University body schemas. Public responses omit the admin's contact details.
"""
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.types import BodyType
from app.schemas.common import Pagination, UserSummary


def _name(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("Name is required")
    return v


class UniversityBodyCreateRequest(BaseModel):
    name: str = Field(..., max_length=255)
    type: BodyType = BodyType.OTHER
    description: str | None = None
    admin_id: int | None = Field(None, ge=1)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        return _name(v)


class UniversityBodyUpdateRequest(BaseModel):
    name: str | None = Field(None, max_length=255)
    type: BodyType | None = None
    description: str | None = None
    admin_id: int | None = Field(None, ge=1)
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str | None) -> str | None:
        return None if v is None else _name(v)


class UniversityBodyPublicResponse(BaseModel):
    id: int
    name: str
    type: str
    description: str | None = None
    is_active: bool
    admin: UserSummary | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class AdminContact(UserSummary):
    email: str


class UniversityBodyResponse(UniversityBodyPublicResponse):
    """Full record returned to super_admin after writes."""
    admin_id: int | None = None
    admin: AdminContact | None = None
    updated_at: datetime | None = None


class UniversityBodyData(BaseModel):
    university_body: UniversityBodyResponse


class UniversityBodyPublicData(BaseModel):
    university_body: UniversityBodyPublicResponse


class UniversityBodyListData(BaseModel):
    university_bodies: list[UniversityBodyPublicResponse]
    pagination: Pagination


class UniversityBodyTypesData(BaseModel):
    types: list[str]
