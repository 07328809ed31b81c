"""
User management (super_admin) and own-profile updates.
Self-destructive actions are rejected before any write.
"""
import logging

from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.config import settings
from app.errors import ConflictError, NotFoundError, SelfModificationError, ValidationError
from app.models.document import Document
from app.models.types import Role, normalize_role
from app.models.university_body import UniversityBody
from app.models.user import User
from app.schemas.common import contains_pattern
from app.schemas.auth import ProfileUpdateRequest
from app.schemas.user import UserCreateRequest, UserUpdateRequest
from app.services import policy
from app.services.auth import hash_password
from app.services.policy import Action, Actor

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"
DUPLICATE_EMAIL = "Email already exists"
SUPER_ADMIN_REQUIRED = "Access denied. Super Admin required."


def _require_super_admin(actor: Actor | None) -> None:
    policy.require(actor, Action.READ, User, SUPER_ADMIN_REQUIRED)


def _email_taken(db: Session, email: str, exclude_id: int | None = None) -> bool:
    q = db.query(User.id).filter(func.lower(User.email) == email.lower())
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.first() is not None


def _body_for_role(db: Session, role: Role, body_id: int | None) -> int | None:
    """Affiliation only applies to admin/sub_admin; validate that the body exists."""
    if role is Role.SUPER_ADMIN:
        return None
    if body_id is not None and db.get(UniversityBody, body_id) is None:
        raise ValidationError("University body not found")
    return body_id


def _commit_unique(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_EMAIL)


def list_users(
    db: Session,
    actor: Actor | None,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    role: Role | None = None,
    university_body_id: int | None = None,
    is_active: bool | None = None,
) -> tuple[list[User], int]:
    _require_super_admin(actor)
    q = db.query(User)
    if search and search.strip():
        like = contains_pattern(search.strip())
        q = q.filter(
            or_(
                User.email.ilike(like, escape="\\"),
                User.first_name.ilike(like, escape="\\"),
                User.last_name.ilike(like, escape="\\"),
            )
        )
    if role is not None:
        q = q.filter(User.role == role.value)
    if university_body_id is not None:
        q = q.filter(User.university_body_id == university_body_id)
    if is_active is not None:
        q = q.filter(User.is_active.is_(is_active))
    total = q.with_entities(func.count(User.id)).scalar() or 0
    items = (
        q.options(joinedload(User.university_body))
        .order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def get_user(db: Session, actor: Actor | None, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        # only super_admin may learn whether other ids exist
        if actor is not None and (actor.is_super_admin or actor.id == user_id):
            raise NotFoundError(USER_NOT_FOUND)
        _require_super_admin(actor)
    policy.require(actor, Action.READ, user, SUPER_ADMIN_REQUIRED)
    return user


def create_user(db: Session, actor: Actor | None, data: UserCreateRequest) -> User:
    policy.require(actor, Action.CREATE, User, SUPER_ADMIN_REQUIRED)
    email = str(data.email).lower()
    if _email_taken(db, email):
        raise ConflictError(DUPLICATE_EMAIL)
    user = User(
        email=email,
        password_hash=hash_password(data.password),
        role=data.role.value,
        first_name=data.first_name,
        last_name=data.last_name,
        designation=data.designation,
        phone=data.phone,
        university_body_id=_body_for_role(db, data.role, data.university_body_id),
        is_active=True,
    )
    db.add(user)
    _commit_unique(db)
    db.refresh(user)
    logger.info("User created id=%s role=%s by user_id=%s", user.id, user.role, actor.id)
    return user


def update_user(db: Session, actor: Actor | None, user_id: int, data: UserUpdateRequest) -> User:
    _require_super_admin(actor)
    user = get_user(db, actor, user_id)
    fields = data.model_fields_set
    current_role = normalize_role(user.role) or Role.SUB_ADMIN
    if data.role is not None and data.role is not current_role and user.id == actor.id:
        raise SelfModificationError("Cannot change your own role")
    if data.is_active is not None and data.is_active != user.is_active:
        policy.forbid_self_modification(actor, user.id, Action.TOGGLE_STATUS)
    if data.email is not None:
        email = str(data.email).lower()
        if email != user.email and _email_taken(db, email, exclude_id=user.id):
            raise ConflictError(DUPLICATE_EMAIL)
        user.email = email
    if data.password is not None:
        user.password_hash = hash_password(data.password)
    for name in ("first_name", "last_name", "designation", "phone"):
        if name in fields:
            setattr(user, name, getattr(data, name))
    role = data.role or current_role
    user.role = role.value
    if "university_body_id" in fields:
        user.university_body_id = _body_for_role(db, role, data.university_body_id)
    elif role is Role.SUPER_ADMIN:
        user.university_body_id = None
    if data.is_active is not None:
        user.is_active = data.is_active
    _commit_unique(db)
    db.refresh(user)
    return user


def toggle_status(db: Session, actor: Actor | None, user_id: int) -> User:
    _require_super_admin(actor)
    user = get_user(db, actor, user_id)
    policy.forbid_self_modification(actor, user.id, Action.TOGGLE_STATUS)
    user.is_active = not user.is_active
    db.commit()
    db.refresh(user)
    logger.info("User id=%s %s by user_id=%s", user.id, "activated" if user.is_active else "deactivated", actor.id)
    return user


def delete_user(db: Session, actor: Actor | None, user_id: int) -> None:
    """Hard delete, allowed only while no document references the user; otherwise deactivate instead."""
    _require_super_admin(actor)
    user = get_user(db, actor, user_id)
    policy.forbid_self_modification(actor, user.id, Action.DELETE)
    referenced = (
        db.query(Document.id)
        .filter(or_(Document.uploaded_by_id == user.id, Document.approved_by_id == user.id))
        .first()
    )
    if referenced is not None:
        raise ConflictError(
            "User has uploaded or reviewed documents; deactivate the account instead", status_code=409
        )
    db.execute(
        update(UniversityBody)
        .where(UniversityBody.admin_id == user.id)
        .values(admin_id=None)
        .execution_options(synchronize_session=False)
    )
    db.delete(user)
    db.commit()
    logger.info("User deleted id=%s by user_id=%s", user_id, actor.id)


def update_profile(db: Session, user: User, data: ProfileUpdateRequest) -> User:
    """Own-profile edit: names, designation, phone, password."""
    fields = data.model_fields_set
    for name in ("first_name", "last_name", "designation", "phone"):
        if name in fields:
            setattr(user, name, getattr(data, name))
    if data.password is not None:
        user.password_hash = hash_password(data.password)
    db.commit()
    db.refresh(user)
    return user


def ensure_initial_super_admin(db: Session) -> User | None:
    """Create the configured bootstrap super_admin when no super_admin exists yet."""
    email = (settings.initial_super_admin_email or "").strip().lower()
    password = settings.initial_super_admin_password or ""
    if not email or not password:
        return None
    if db.query(User.id).filter(User.role == Role.SUPER_ADMIN.value).first() is not None:
        return None
    if _email_taken(db, email):
        logger.warning("Bootstrap super_admin skipped: %s already exists with another role", email)
        return None
    user = User(
        email=email,
        password_hash=hash_password(password),
        role=Role.SUPER_ADMIN.value,
        first_name="System",
        last_name="Administrator",
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Bootstrap super_admin created: %s", email)
    return user
