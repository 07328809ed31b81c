"""
University body registry. Reads are public; writes are super_admin only.
"""
import logging

from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.document import Document
from app.models.types import ADMIN_LEVEL_ROLES, BodyType, normalize_role
from app.models.university_body import UniversityBody
from app.models.user import User
from app.schemas.common import contains_pattern
from app.schemas.university_body import UniversityBodyCreateRequest, UniversityBodyUpdateRequest
from app.services import policy
from app.services.policy import Action, Actor

logger = logging.getLogger(__name__)

BODY_NOT_FOUND = "University body not found"
DUPLICATE_NAME = "University body with this name already exists"


def list_bodies(
    db: Session,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    body_type: BodyType | None = None,
    is_active: bool | None = True,
) -> tuple[list[UniversityBody], int]:
    q = db.query(UniversityBody)
    if search and search.strip():
        like = contains_pattern(search.strip())
        q = q.filter(
            or_(UniversityBody.name.ilike(like, escape="\\"), UniversityBody.description.ilike(like, escape="\\"))
        )
    if body_type is not None:
        q = q.filter(UniversityBody.type == body_type.value)
    if is_active is not None:
        q = q.filter(UniversityBody.is_active.is_(is_active))
    total = q.with_entities(func.count(UniversityBody.id)).scalar() or 0
    items = (
        q.options(joinedload(UniversityBody.admin))
        .order_by(UniversityBody.name.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def get_body(db: Session, body_id: int) -> UniversityBody:
    body = db.get(UniversityBody, body_id)
    if body is None:
        raise NotFoundError(BODY_NOT_FOUND)
    return body


def _check_admin(db: Session, admin_id: int | None) -> None:
    if admin_id is None:
        return
    user = db.get(User, admin_id)
    if user is None:
        raise ValidationError("Admin not found")
    if normalize_role(user.role) not in ADMIN_LEVEL_ROLES:
        raise ValidationError("Selected user must be an admin or super admin")


def _check_unique_name(db: Session, name: str, exclude_id: int | None = None) -> None:
    q = db.query(UniversityBody.id).filter(func.lower(UniversityBody.name) == name.lower())
    if exclude_id is not None:
        q = q.filter(UniversityBody.id != exclude_id)
    if q.first() is not None:
        raise ConflictError(DUPLICATE_NAME)


def _commit_unique(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent create of the same name
        db.rollback()
        raise ConflictError(DUPLICATE_NAME)


def create_body(db: Session, actor: Actor | None, data: UniversityBodyCreateRequest) -> UniversityBody:
    policy.require(actor, Action.CREATE, UniversityBody, "Access denied. Super Admin required.")
    _check_unique_name(db, data.name)
    _check_admin(db, data.admin_id)
    body = UniversityBody(
        name=data.name,
        type=data.type.value,
        description=data.description,
        admin_id=data.admin_id,
        is_active=data.is_active,
    )
    db.add(body)
    _commit_unique(db)
    db.refresh(body)
    logger.info("University body created id=%s name=%r by user_id=%s", body.id, body.name, actor.id)
    return body


def update_body(db: Session, actor: Actor | None, body_id: int, data: UniversityBodyUpdateRequest) -> UniversityBody:
    policy.require(actor, Action.UPDATE, UniversityBody, "Access denied. Super Admin required.")
    body = get_body(db, body_id)
    fields = data.model_fields_set
    if data.name is not None and data.name != body.name:
        _check_unique_name(db, data.name, exclude_id=body.id)
        body.name = data.name
    if data.type is not None:
        body.type = data.type.value
    if "description" in fields:
        body.description = data.description
    if "admin_id" in fields:
        _check_admin(db, data.admin_id)
        body.admin_id = data.admin_id
    if data.is_active is not None:
        body.is_active = data.is_active
    _commit_unique(db)
    db.refresh(body)
    return body


def delete_body(db: Session, actor: Actor | None, body_id: int) -> None:
    """Delete a body; documents and members keep existing with their reference nulled, in one transaction."""
    policy.require(actor, Action.DELETE, UniversityBody, "Access denied. Super Admin required.")
    body = get_body(db, body_id)
    detached_docs = db.execute(
        update(Document)
        .where(Document.university_body_id == body.id)
        .values(university_body_id=None)
        .execution_options(synchronize_session=False)
    ).rowcount
    db.execute(
        update(User)
        .where(User.university_body_id == body.id)
        .values(university_body_id=None)
        .execution_options(synchronize_session=False)
    )
    db.delete(body)
    db.commit()
    logger.info("University body deleted id=%s by user_id=%s (documents detached=%s)", body_id, actor.id, detached_docs)
