"""
Document visibility as a SQL predicate. Mirrors policy.can_read_document so listings,
counts and single-document reads agree. Applied before any filter, sort or pagination.
"""
from sqlalchemy import and_, false, or_, true
from sqlalchemy.sql.elements import ColumnElement

from app.models.document import Document
from app.models.types import ApprovalStatus, Role
from app.services.policy import Actor


def public_clause() -> ColumnElement[bool]:
    return and_(Document.is_public.is_(True), Document.approval_status == ApprovalStatus.APPROVED.value)


def _own_body(actor: Actor) -> ColumnElement[bool]:
    if actor.university_body_id is None:
        return false()
    return Document.university_body_id == actor.university_body_id


def visibility_clause(actor: Actor | None, only_mine: bool = False) -> ColumnElement[bool]:
    """WHERE clause selecting the documents `actor` may see. `only_mine` narrows to own uploads."""
    if actor is None:
        return public_clause()
    mine = Document.uploaded_by_id == actor.id
    if only_mine:
        return mine
    if actor.role is Role.SUPER_ADMIN:
        return true()
    if actor.role is Role.ADMIN:
        return or_(mine, _own_body(actor))
    return or_(mine, and_(_own_body(actor), Document.approval_status == ApprovalStatus.APPROVED.value))
