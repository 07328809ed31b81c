"""
Document store: upload (with auto-approval for admin-level uploaders), scoped listing,
single-document reads, update, delete and counted downloads.

Every read goes through visibility.visibility_clause, so a document the actor may not see
is indistinguishable from a missing one (404).
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.config import settings
from app.errors import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from app.models.document import Document, DocumentFile
from app.models.types import ApprovalStatus, Role
from app.models.university_body import UniversityBody
from app.schemas.common import contains_pattern
from app.schemas.document import UpdateDocumentCommand, UploadDocumentCommand
from app.services import policy
from app.services.policy import Actor
from app.services.validation import check_upload
from app.services.visibility import visibility_clause
from app import metrics

logger = logging.getLogger(__name__)

DOCUMENT_NOT_FOUND = "Document not found"

SORT_COLUMNS = {
    "title": Document.title,
    "created_at": Document.created_at,
    "download_count": Document.download_count,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _with_relations(q):
    return q.options(joinedload(Document.uploaded_by), joinedload(Document.university_body))


def _resolve_upload_body(db: Session, actor: Actor, requested_body_id: int | None) -> int | None:
    """Default admin/sub_admin uploads to their own body; validate any explicit body."""
    body_id = requested_body_id
    if body_id is None and not actor.is_super_admin:
        body_id = actor.university_body_id
        if body_id is None:
            raise ValidationError("You must be associated with a university body to upload documents")
    if body_id is not None and db.get(UniversityBody, body_id) is None:
        raise ValidationError("University body not found")
    if not policy.can_upload_to(actor, body_id):
        raise AuthorizationError("You can only upload documents to your own university body")
    return body_id


def upload_document(
    db: Session,
    actor: Actor | None,
    command: UploadDocumentCommand,
    file_name: str | None,
    contents: bytes,
    mime_type: str | None = None,
) -> Document:
    """Create a document. admin/super_admin uploads are approved immediately; sub_admin uploads are pending."""
    if actor is None:
        raise AuthenticationError("Access token required")
    stored_mime = check_upload(file_name, contents, mime_type)
    body_id = _resolve_upload_body(db, actor, command.university_body_id)

    now = _utcnow()
    doc = Document(
        title=command.title,
        description=command.description,
        file_name=file_name.strip(),
        mime_type=stored_mime,
        file_size=len(contents),
        uploaded_by_id=actor.id,
        university_body_id=body_id,
        is_public=command.is_public,
        download_count=0,
    )
    if actor.is_admin_level:
        doc.approval_status = ApprovalStatus.APPROVED.value
        doc.approved_by_id = actor.id
        doc.approved_at = now
    else:
        doc.approval_status = ApprovalStatus.PENDING.value
        doc.requested_at = now
    doc.file = DocumentFile(data=contents)
    try:
        db.add(doc)
        db.commit()
    except IntegrityError:
        # the target body was deleted after it was resolved
        db.rollback()
        logger.warning("Upload rejected for user_id=%s: body_id=%s no longer exists", actor.id, body_id)
        raise ValidationError("University body not found")
    except SQLAlchemyError:
        # metadata and bytes are one unit of work; nothing is left behind
        db.rollback()
        logger.exception("Upload failed for user_id=%s file=%s", actor.id, file_name)
        raise
    metrics.increment("documents_uploaded_total")
    logger.info(
        "Document uploaded id=%s by user_id=%s body_id=%s status=%s",
        doc.id, actor.id, body_id, doc.approval_status,
    )
    return get_document(db, actor, doc.id)


def list_documents(
    db: Session,
    actor: Actor | None,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    university_body_id: int | None = None,
    approval_status: ApprovalStatus | None = None,
    only_mine: bool = False,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> tuple[list[Document], int]:
    """Visible documents for `actor` after filters; returns (page items, total). `page`/`limit` already clamped."""
    q = db.query(Document).filter(visibility_clause(actor, only_mine=only_mine))
    if search and search.strip():
        like = contains_pattern(search.strip())
        q = q.filter(
            or_(Document.title.ilike(like, escape="\\"), Document.description.ilike(like, escape="\\"))
        )
    if university_body_id is not None:
        q = q.filter(Document.university_body_id == university_body_id)
    if approval_status is not None:
        q = q.filter(Document.approval_status == approval_status.value)
    total = q.with_entities(func.count(Document.id)).scalar() or 0
    column = SORT_COLUMNS.get(sort_by, Document.created_at)
    ordering = column.asc() if (sort_order or "").lower() == "asc" else column.desc()
    items = (
        _with_relations(q)
        .order_by(ordering, Document.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def list_pending(db: Session, actor: Actor | None, page: int = 1, limit: int = 10) -> tuple[list[Document], int]:
    """Approval queue: pending documents the actor may review (own body; all for super_admin)."""
    if actor is None:
        raise AuthenticationError("Access token required")
    if not actor.is_admin_level:
        raise AuthorizationError("Only admins can review pending documents")
    if actor.role is Role.ADMIN and actor.university_body_id is None:
        raise ValidationError("Admin must be associated with a university body to approve documents")
    q = db.query(Document).filter(Document.approval_status == ApprovalStatus.PENDING.value)
    if not actor.is_super_admin:
        q = q.filter(Document.university_body_id == actor.university_body_id)
    total = q.with_entities(func.count(Document.id)).scalar() or 0
    items = (
        _with_relations(q)
        .order_by(Document.requested_at.asc(), Document.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def get_document(db: Session, actor: Actor | None, document_id: int) -> Document:
    doc = (
        _with_relations(db.query(Document))
        .filter(Document.id == document_id, visibility_clause(actor))
        .first()
    )
    if doc is None:
        raise NotFoundError(DOCUMENT_NOT_FOUND)
    return doc


def _get_for_write(db: Session, actor: Actor | None, document_id: int) -> Document:
    if actor is None:
        raise AuthenticationError("Access token required")
    doc = get_document(db, actor, document_id)
    if not policy.can_modify_document(actor, doc):
        raise AuthorizationError("You can only modify your own documents")
    return doc


def update_document(db: Session, actor: Actor | None, document_id: int, command: UpdateDocumentCommand) -> Document:
    doc = _get_for_write(db, actor, document_id)
    if doc.approval_status == ApprovalStatus.APPROVED.value and not policy.within_edit_window(
        actor, doc.created_at, settings.owner_edit_window_hours
    ):
        raise AuthorizationError(
            f"Cannot update document after {settings.owner_edit_window_hours} hours of approval"
        )
    fields = command.model_fields_set
    if "title" in fields and command.title is not None:
        doc.title = command.title
    if "description" in fields:
        doc.description = command.description
    if "is_public" in fields and command.is_public is not None:
        doc.is_public = command.is_public
    if "university_body_id" in fields and command.university_body_id != doc.university_body_id:
        new_body = command.university_body_id
        if new_body is not None and db.get(UniversityBody, new_body) is None:
            raise ValidationError("University body not found")
        if not actor.is_super_admin and new_body != actor.university_body_id:
            raise AuthorizationError("You can only assign documents to your own university body")
        doc.university_body_id = new_body
    db.commit()
    logger.info("Document updated id=%s by user_id=%s fields=%s", doc.id, actor.id, sorted(fields))
    return get_document(db, actor, doc.id)


def delete_document(db: Session, actor: Actor | None, document_id: int) -> None:
    doc = _get_for_write(db, actor, document_id)
    if not policy.within_edit_window(actor, doc.created_at, settings.owner_edit_window_hours):
        raise AuthorizationError(
            f"Cannot delete document after {settings.owner_edit_window_hours} hours of upload"
        )
    db.delete(doc)
    db.commit()
    logger.info("Document deleted id=%s by user_id=%s", document_id, actor.id)


def read_file(db: Session, actor: Actor | None, document_id: int, count_download: bool = True) -> tuple[Document, bytes]:
    """Return (document, bytes) for a visible document; atomically bump download_count when counting."""
    doc = get_document(db, actor, document_id)
    stored = db.get(DocumentFile, doc.id)
    if stored is None:
        raise NotFoundError("Document file not found")
    if count_download:
        db.execute(
            update(Document)
            .where(Document.id == doc.id)
            # keep updated_at: a download is not an edit
            .values(download_count=Document.download_count + 1, updated_at=Document.updated_at)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    return doc, stored.data
