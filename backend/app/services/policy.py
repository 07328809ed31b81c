"""
Authorization policy: pure functions of (actor, action, resource) -> allowed.

Role rules:
  super_admin  everything, except deleting or deactivating its own account.
  admin        documents of its own university body (create, read any status, update, delete,
               approve, reject); its own profile. No user or body management.
  sub_admin    creates pending documents for its body; reads its own uploads and approved
               documents of its body; updates/deletes its own uploads. No approvals.
  public       approved public documents; university body listings.

Callers pass actor=None for unauthenticated requests.
"""
import enum
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from app.errors import AuthorizationError, SelfModificationError
from app.models.document import Document
from app.models.types import ADMIN_LEVEL_ROLES, ApprovalStatus, Role, normalize_role
from app.models.university_body import UniversityBody
from app.models.user import User


class Action(str, enum.Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"
    REJECT = "reject"
    TOGGLE_STATUS = "toggle_status"


@dataclass(frozen=True)
class Actor:
    """Authenticated caller: id, canonical role and affiliation."""

    id: int
    role: Role
    university_body_id: int | None = None

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        role = normalize_role(user.role) or Role.SUB_ADMIN
        body_id = None if role is Role.SUPER_ADMIN else user.university_body_id
        return cls(id=user.id, role=role, university_body_id=body_id)

    @property
    def is_super_admin(self) -> bool:
        return self.role is Role.SUPER_ADMIN

    @property
    def is_admin_level(self) -> bool:
        return self.role in ADMIN_LEVEL_ROLES


def _in_own_body(actor: Actor, body_id: int | None) -> bool:
    return actor.university_body_id is not None and actor.university_body_id == body_id


def can_read_document(actor: Actor | None, doc: Document) -> bool:
    approved = doc.approval_status == ApprovalStatus.APPROVED.value
    if actor is None:
        return approved and bool(doc.is_public)
    if actor.is_super_admin:
        return True
    if actor.role is Role.ADMIN:
        return _in_own_body(actor, doc.university_body_id) or doc.uploaded_by_id == actor.id
    return doc.uploaded_by_id == actor.id or (approved and _in_own_body(actor, doc.university_body_id))


def can_review_document(actor: Actor | None, doc: Document) -> bool:
    """Approve/reject authority (independent of the document's current state)."""
    if actor is None or not actor.is_admin_level:
        return False
    return actor.is_super_admin or _in_own_body(actor, doc.university_body_id)


def can_modify_document(actor: Actor | None, doc: Document) -> bool:
    """Update/delete: super_admin, the uploader, or an admin of the document's body."""
    if actor is None:
        return False
    if actor.is_super_admin or doc.uploaded_by_id == actor.id:
        return True
    return actor.role is Role.ADMIN and _in_own_body(actor, doc.university_body_id)


def can_upload_to(actor: Actor | None, body_id: int | None) -> bool:
    if actor is None:
        return False
    if actor.is_super_admin:
        return True
    return body_id is not None and _in_own_body(actor, body_id)


def within_edit_window(actor: Actor, created_at: datetime | None, window_hours: int) -> bool:
    """Non-super_admin edits are limited to `window_hours` after creation (0 = unlimited)."""
    if actor.is_super_admin or window_hours <= 0 or created_at is None:
        return True
    created = created_at if created_at.tzinfo else created_at.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc) - created <= timedelta(hours=window_hours)


def can_manage_user(actor: Actor | None, action: Action, target: User) -> bool:
    if actor is None:
        return False
    if actor.is_super_admin:
        return True
    # everyone else: own profile only, read/update
    return target.id == actor.id and action in (Action.READ, Action.UPDATE)


def can_manage_body(actor: Actor | None, action: Action) -> bool:
    if action is Action.READ:
        return True
    return actor is not None and actor.is_super_admin


def is_allowed(actor: Actor | None, action: Action, resource) -> bool:
    """Dispatch on resource type. `resource` is a Document, User, UniversityBody or the class itself for creates."""
    if resource is Document or isinstance(resource, Document):
        if action is Action.CREATE:
            return actor is not None
        if not isinstance(resource, Document):
            return False
        if action is Action.READ:
            return can_read_document(actor, resource)
        if action in (Action.APPROVE, Action.REJECT):
            return can_review_document(actor, resource)
        if action in (Action.UPDATE, Action.DELETE):
            return can_modify_document(actor, resource)
        return False
    if resource is UniversityBody or isinstance(resource, UniversityBody):
        return can_manage_body(actor, action)
    if resource is User:
        return actor is not None and actor.is_super_admin
    if isinstance(resource, User):
        return can_manage_user(actor, action, resource)
    return False


def require(actor: Actor | None, action: Action, resource, message: str = "Insufficient permissions") -> None:
    if not is_allowed(actor, action, resource):
        raise AuthorizationError(message)


def forbid_self_modification(actor: Actor, target_id: int, action: Action) -> None:
    """Raise SelfModificationError when an account targets itself destructively."""
    if actor.id != target_id:
        return
    if action is Action.DELETE:
        raise SelfModificationError("Cannot delete your own account")
    if action is Action.TOGGLE_STATUS:
        raise SelfModificationError("Cannot modify your own status")
