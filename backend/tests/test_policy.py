"""Authorization policy and role normalization (no database)."""
from datetime import datetime, timedelta, timezone

import pytest

from app.errors import SelfModificationError
from app.models.document import Document
from app.models.types import Role, normalize_role
from app.models.university_body import UniversityBody
from app.models.user import User
from app.services import policy
from app.services.policy import Action, Actor

SUPER = Actor(id=1, role=Role.SUPER_ADMIN)
ADMIN_A = Actor(id=2, role=Role.ADMIN, university_body_id=10)
SUB_A = Actor(id=3, role=Role.SUB_ADMIN, university_body_id=10)
ADMIN_B = Actor(id=4, role=Role.ADMIN, university_body_id=20)


def _doc(uploader=3, body=10, status="approved", is_public=True):
    return Document(uploaded_by_id=uploader, university_body_id=body, approval_status=status, is_public=is_public)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("super_admin", Role.SUPER_ADMIN),
        ("admin", Role.ADMIN),
        ("sub_admin", Role.SUB_ADMIN),
        ("director", Role.ADMIN),
        ("board_director", Role.ADMIN),
        ("Committee_Director", Role.ADMIN),
        ("faculty", None),
        (None, None),
    ],
)
def test_normalize_role(raw, expected):
    assert normalize_role(raw) is expected


def test_actor_from_legacy_user_is_admin():
    user = User(id=7, email="d@coep.ac.in", role="board_director", university_body_id=10)
    actor = Actor.from_user(user)
    assert actor.role is Role.ADMIN
    assert actor.is_admin_level
    assert actor.university_body_id == 10


def test_super_admin_has_no_affiliation():
    user = User(id=1, email="root@coep.ac.in", role="super_admin", university_body_id=10)
    assert Actor.from_user(user).university_body_id is None


def test_public_reads_only_approved_public():
    assert policy.can_read_document(None, _doc())
    assert not policy.can_read_document(None, _doc(status="pending"))
    assert not policy.can_read_document(None, _doc(is_public=False))


def test_admin_reads_own_body_any_status_but_not_other_bodies():
    assert policy.can_read_document(ADMIN_A, _doc(status="pending"))
    assert policy.can_read_document(ADMIN_A, _doc(status="rejected"))
    assert not policy.can_read_document(ADMIN_B, _doc(status="pending"))


def test_sub_admin_reads_own_uploads_and_approved_body_documents():
    assert policy.can_read_document(SUB_A, _doc(uploader=3, status="pending"))
    assert policy.can_read_document(SUB_A, _doc(uploader=99, status="approved"))
    assert not policy.can_read_document(SUB_A, _doc(uploader=99, status="pending"))


def test_review_rights():
    pending = _doc(status="pending")
    assert policy.is_allowed(SUPER, Action.APPROVE, pending)
    assert policy.is_allowed(ADMIN_A, Action.APPROVE, pending)
    assert not policy.is_allowed(ADMIN_B, Action.REJECT, pending)
    assert not policy.is_allowed(SUB_A, Action.APPROVE, pending)
    assert not policy.is_allowed(None, Action.APPROVE, pending)


def test_modify_rights():
    doc = _doc(uploader=3)
    assert policy.can_modify_document(SUB_A, doc)
    assert policy.can_modify_document(ADMIN_A, doc)
    assert policy.can_modify_document(SUPER, doc)
    assert not policy.can_modify_document(ADMIN_B, doc)
    assert not policy.can_modify_document(Actor(id=5, role=Role.SUB_ADMIN, university_body_id=10), doc)


def test_upload_scope():
    assert policy.can_upload_to(SUPER, None)
    assert policy.can_upload_to(ADMIN_A, 10)
    assert not policy.can_upload_to(ADMIN_A, 20)
    assert not policy.can_upload_to(SUB_A, None)


def test_body_and_user_management_is_super_admin_only():
    assert policy.is_allowed(None, Action.READ, UniversityBody)
    assert policy.is_allowed(SUPER, Action.CREATE, UniversityBody)
    assert not policy.is_allowed(ADMIN_A, Action.DELETE, UniversityBody)
    assert policy.is_allowed(SUPER, Action.CREATE, User)
    assert not policy.is_allowed(ADMIN_A, Action.CREATE, User)
    me = User(id=2, email="a@coep.ac.in", role="admin")
    assert policy.is_allowed(ADMIN_A, Action.UPDATE, me)
    assert not policy.is_allowed(ADMIN_A, Action.DELETE, me)


def test_edit_window():
    now = datetime.now(timezone.utc)
    assert policy.within_edit_window(SUB_A, now - timedelta(hours=1), 24)
    assert not policy.within_edit_window(SUB_A, now - timedelta(hours=25), 24)
    # naive timestamps (SQLite) are treated as UTC
    assert not policy.within_edit_window(ADMIN_A, (now - timedelta(hours=30)).replace(tzinfo=None), 24)
    assert policy.within_edit_window(SUPER, now - timedelta(days=30), 24)
    assert policy.within_edit_window(SUB_A, now - timedelta(days=30), 0)


def test_forbid_self_modification():
    with pytest.raises(SelfModificationError, match="Cannot delete your own account"):
        policy.forbid_self_modification(SUPER, SUPER.id, Action.DELETE)
    with pytest.raises(SelfModificationError, match="Cannot modify your own status"):
        policy.forbid_self_modification(SUPER, SUPER.id, Action.TOGGLE_STATUS)
    policy.forbid_self_modification(SUPER, 42, Action.DELETE)
