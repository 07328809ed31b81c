"""
Documents API: one handler set for every role; the resolved actor (or None for public access)
decides what each call may see or change. Upload, list, pending queue, get, update, delete,
download/preview, approve, reject.
"""
import logging
from typing import Literal
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import ValidationError
from app.models.types import ApprovalStatus
from app.schemas.common import ApiResponse, Pagination, page_bounds
from app.schemas.document import (
    ApproveDocumentCommand,
    DocumentData,
    DocumentListData,
    DocumentResponse,
    RejectDocumentCommand,
    RejectRequest,
    UpdateDocumentCommand,
    UploadDocumentCommand,
)
from app.api.deps import get_current_actor, get_optional_actor
from app.services import approval
from app.services import documents as document_service
from app.services.policy import Actor

router = APIRouter(prefix="/documents", tags=["documents"])
logger = logging.getLogger(__name__)


def _doc_data(doc) -> DocumentData:
    return DocumentData(document=DocumentResponse.model_validate(doc))


def _content_disposition(kind: str, file_name: str) -> str:
    """ASCII fallback plus RFC 5987 filename* so non-ASCII names survive."""
    fallback = "".join(c if 32 <= ord(c) < 127 and c not in '"\\' else "_" for c in file_name) or "download"
    return f"{kind}; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name)}"


@router.post("", response_model=ApiResponse[DocumentData], status_code=status.HTTP_201_CREATED)
def upload_document(
    title: str | None = Form(None),
    description: str | None = Form(None),
    university_body_id: int | None = Form(None),
    is_public: bool | None = Form(None),
    file: UploadFile | None = File(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Upload a document (multipart). admin/super_admin uploads are approved at once; sub_admin uploads wait for approval."""
    command = UploadDocumentCommand(
        title=title,
        description=description,
        university_body_id=university_body_id,
        is_public=True if is_public is None else is_public,
    )
    if file is None or not (file.filename or "").strip():
        raise ValidationError("File is required")
    contents = file.file.read()
    doc = document_service.upload_document(db, actor, command, file.filename, contents, file.content_type)
    message = (
        "Document uploaded and approved successfully"
        if doc.approval_status == ApprovalStatus.APPROVED.value
        else "Document uploaded successfully. Pending approval from your university body admin."
    )
    return ApiResponse(message=message, data=_doc_data(doc))


@router.get("", response_model=ApiResponse[DocumentListData])
def list_documents(
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    university_body_id: int | None = None,
    approval_status: ApprovalStatus | None = None,
    only_mine: bool = False,
    sort_by: Literal["title", "created_at", "download_count"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    actor: Actor | None = Depends(get_optional_actor),
    db: Session = Depends(get_db),
):
    """List documents visible to the caller; anonymous callers get approved public documents."""
    page, limit, _ = page_bounds(page, limit)
    items, total = document_service.list_documents(
        db,
        actor,
        page=page,
        limit=limit,
        search=search,
        university_body_id=university_body_id,
        approval_status=approval_status,
        only_mine=only_mine,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ApiResponse(
        data=DocumentListData(
            documents=[DocumentResponse.model_validate(d) for d in items],
            pagination=Pagination.build(page, limit, total),
        )
    )


@router.get("/pending", response_model=ApiResponse[DocumentListData])
def list_pending_documents(
    page: int = 1,
    limit: int = 10,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Approval queue for admins (own body) and super_admin (all bodies)."""
    page, limit, _ = page_bounds(page, limit)
    items, total = document_service.list_pending(db, actor, page=page, limit=limit)
    return ApiResponse(
        data=DocumentListData(
            documents=[DocumentResponse.model_validate(d) for d in items],
            pagination=Pagination.build(page, limit, total),
        )
    )


@router.get("/{document_id}", response_model=ApiResponse[DocumentData])
def get_document(
    document_id: int,
    actor: Actor | None = Depends(get_optional_actor),
    db: Session = Depends(get_db),
):
    doc = document_service.get_document(db, actor, document_id)
    return ApiResponse(data=_doc_data(doc))


@router.put("/{document_id}", response_model=ApiResponse[DocumentData])
def update_document(
    document_id: int,
    data: UpdateDocumentCommand,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Update title, description, university body or visibility."""
    doc = document_service.update_document(db, actor, document_id, data)
    return ApiResponse(message="Document updated successfully", data=_doc_data(doc))


@router.delete("/{document_id}", response_model=ApiResponse[None])
def delete_document(
    document_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    document_service.delete_document(db, actor, document_id)
    return ApiResponse(message="Document deleted successfully")


@router.get("/{document_id}/download")
def download_document(
    document_id: int,
    actor: Actor | None = Depends(get_optional_actor),
    db: Session = Depends(get_db),
):
    """Stream the file as an attachment and count the download."""
    doc, data = document_service.read_file(db, actor, document_id, count_download=True)
    return Response(
        content=data,
        media_type=doc.mime_type,
        headers={"Content-Disposition": _content_disposition("attachment", doc.file_name)},
    )


@router.get("/{document_id}/preview")
def preview_document(
    document_id: int,
    actor: Actor | None = Depends(get_optional_actor),
    db: Session = Depends(get_db),
):
    """Serve the file inline (browser viewer); not counted as a download."""
    doc, data = document_service.read_file(db, actor, document_id, count_download=False)
    return Response(
        content=data,
        media_type=doc.mime_type,
        headers={"Content-Disposition": _content_disposition("inline", doc.file_name)},
    )


@router.post("/{document_id}/approve", response_model=ApiResponse[DocumentData])
def approve_document(
    document_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    doc = approval.approve(db, ApproveDocumentCommand(document_id=document_id), actor)
    return ApiResponse(message="Document approved successfully", data=_doc_data(doc))


@router.post("/{document_id}/reject", response_model=ApiResponse[DocumentData])
def reject_document(
    document_id: int,
    data: RejectRequest | None = None,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Reject a pending document; a non-empty reason is required."""
    command = RejectDocumentCommand(document_id=document_id, reason=data.reason if data else None)
    doc = approval.reject(db, command, actor)
    return ApiResponse(message="Document rejected", data=_doc_data(doc))
