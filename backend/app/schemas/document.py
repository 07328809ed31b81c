"""
Document request/response schemas and the command objects consumed by the document and approval services.
"""
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import BodySummary, Pagination, UserSummary


def _title(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("Title is required")
    if len(v) > 255:
        raise ValueError("Title must be between 1 and 255 characters")
    return v


def _description(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    if len(v) > 1000:
        raise ValueError("Description must not exceed 1000 characters")
    return v or None


class UploadDocumentCommand(BaseModel):
    """Metadata half of an upload; file bytes travel alongside."""
    title: str
    description: str | None = None
    university_body_id: int | None = Field(None, ge=1)
    is_public: bool = True

    @field_validator("title", mode="before")
    @classmethod
    def title_required(cls, v):
        return _title(v)

    @field_validator("description", mode="before")
    @classmethod
    def description_length(cls, v):
        return _description(v)


class UpdateDocumentCommand(BaseModel):
    """Partial update; fields left unset are unchanged. university_body_id may be set to null explicitly."""
    title: str | None = None
    description: str | None = None
    university_body_id: int | None = Field(None, ge=1)
    is_public: bool | None = None

    @field_validator("title", mode="before")
    @classmethod
    def title_required(cls, v):
        return None if v is None else _title(v)

    @field_validator("description", mode="before")
    @classmethod
    def description_length(cls, v):
        return _description(v)


class ApproveDocumentCommand(BaseModel):
    document_id: int


class RejectDocumentCommand(BaseModel):
    document_id: int
    reason: str | None = None


class RejectRequest(BaseModel):
    reason: str | None = None


class DocumentResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    file_name: str
    mime_type: str
    file_size: int
    uploaded_by_id: int
    uploaded_by: UserSummary | None = None
    university_body_id: int | None = None
    university_body: BodySummary | None = None
    is_public: bool
    approval_status: str
    approved_by_id: int | None = None
    approved_at: datetime | None = None
    requested_at: datetime | None = None
    rejection_reason: str | None = None
    download_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class DocumentData(BaseModel):
    document: DocumentResponse


class DocumentListData(BaseModel):
    documents: list[DocumentResponse]
    pagination: Pagination
