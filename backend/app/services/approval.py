"""
Approval workflow: pending -> approved | pending -> rejected, exactly once.

Both transitions are a compare-and-set UPDATE guarded by approval_status = 'pending', so when
two reviewers race, the second sees zero rows updated and gets InvalidStateError instead of
overwriting the first decision.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.errors import AuthenticationError, AuthorizationError, InvalidStateError, NotFoundError, ValidationError
from app.models.document import Document
from app.models.types import ApprovalStatus
from app.schemas.document import ApproveDocumentCommand, RejectDocumentCommand
from app.services import documents as document_service
from app.services import policy
from app.services.policy import Actor
from app import metrics

logger = logging.getLogger(__name__)

NOT_PENDING = "Document is not pending approval"


def _load_reviewable(db: Session, actor: Actor | None, document_id: int) -> Document:
    if actor is None:
        raise AuthenticationError("Access token required")
    # role gate first: a sub_admin learns nothing about which ids exist
    if not actor.is_admin_level:
        raise AuthorizationError("Only admins can approve or reject documents")
    doc = db.get(Document, document_id)
    if doc is None or not policy.can_review_document(actor, doc):
        raise NotFoundError(document_service.DOCUMENT_NOT_FOUND)
    if doc.approval_status != ApprovalStatus.PENDING.value:
        raise InvalidStateError(NOT_PENDING)
    return doc


def _transition(db: Session, doc: Document, values: dict) -> None:
    result = db.execute(
        update(Document)
        .where(Document.id == doc.id, Document.approval_status == ApprovalStatus.PENDING.value)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise InvalidStateError(NOT_PENDING)
    db.commit()


def approve(db: Session, command: ApproveDocumentCommand, actor: Actor | None) -> Document:
    doc = _load_reviewable(db, actor, command.document_id)
    _transition(
        db,
        doc,
        {
            "approval_status": ApprovalStatus.APPROVED.value,
            "approved_by_id": actor.id,
            "approved_at": datetime.now(timezone.utc),
            "rejection_reason": None,
        },
    )
    metrics.increment("documents_approved_total")
    logger.info("Document approved id=%s by user_id=%s", doc.id, actor.id)
    return document_service.get_document(db, actor, doc.id)


def reject(db: Session, command: RejectDocumentCommand, actor: Actor | None) -> Document:
    doc = _load_reviewable(db, actor, command.document_id)
    reason = (command.reason or "").strip()
    if not reason:
        raise ValidationError("Rejection reason is required")
    _transition(
        db,
        doc,
        {
            "approval_status": ApprovalStatus.REJECTED.value,
            "approved_by_id": actor.id,
            "approved_at": datetime.now(timezone.utc),
            "rejection_reason": reason,
        },
    )
    metrics.increment("documents_rejected_total")
    logger.info("Document rejected id=%s by user_id=%s", doc.id, actor.id)
    return document_service.get_document(db, actor, doc.id)
