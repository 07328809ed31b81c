"""Approval workflow: pending queue, approve, reject, and single-transition guarantees."""
import pytest

from app.errors import InvalidStateError
from app.models.document import Document
from app.schemas.document import ApproveDocumentCommand
from app.services import approval
from app.services.policy import Actor


def test_pending_queue_is_scoped_to_own_body(
    client, make_document, exam_board, council, exam_sub_admin, council_admin, exam_admin, super_admin, auth
):
    make_document(exam_sub_admin, exam_board, title="First", status="pending")
    make_document(exam_sub_admin, exam_board, title="Second", status="pending")
    make_document(council_admin, council, title="Council Item", status="pending")
    make_document(exam_admin, exam_board, title="Already Approved")

    r = client.get("/documents/pending", headers=auth(exam_admin))
    assert r.status_code == 200
    assert [d["title"] for d in r.json()["data"]["documents"]] == ["First", "Second"]

    r = client.get("/documents/pending", headers=auth(super_admin))
    assert r.json()["data"]["pagination"]["total_items"] == 3


def test_pending_queue_forbidden_for_sub_admin(client, exam_sub_admin, auth):
    r = client.get("/documents/pending", headers=auth(exam_sub_admin))
    assert r.status_code == 403


def test_admin_approves_pending_document(client, make_document, exam_board, exam_sub_admin, exam_admin, auth):
    doc = make_document(exam_sub_admin, exam_board, title="Exam Rules", status="pending")
    r = client.post(f"/documents/{doc.id}/approve", headers=auth(exam_admin))
    assert r.status_code == 200
    assert r.json()["message"] == "Document approved successfully"
    approved = r.json()["data"]["document"]
    assert approved["approval_status"] == "approved"
    assert approved["approved_by_id"] == exam_admin.id
    assert approved["approved_at"] is not None
    assert approved["rejection_reason"] is None

    public = client.get("/documents").json()["data"]["documents"]
    assert [d["id"] for d in public] == [doc.id]


def test_second_approval_is_invalid_state(client, make_document, exam_board, exam_sub_admin, exam_admin, auth):
    doc = make_document(exam_sub_admin, exam_board, status="pending")
    assert client.post(f"/documents/{doc.id}/approve", headers=auth(exam_admin)).status_code == 200
    r = client.post(f"/documents/{doc.id}/approve", headers=auth(exam_admin))
    assert r.status_code == 400
    assert r.json()["message"] == "Document is not pending approval"
    r = client.post(f"/documents/{doc.id}/reject", headers=auth(exam_admin), json={"reason": "Too late"})
    assert r.status_code == 400


def test_reject_requires_reason(client, make_document, exam_board, exam_sub_admin, exam_admin, auth):
    doc = make_document(exam_sub_admin, exam_board, status="pending")
    r = client.post(f"/documents/{doc.id}/reject", headers=auth(exam_admin), json={"reason": "   "})
    assert r.status_code == 400
    assert r.json()["message"] == "Rejection reason is required"
    r = client.post(f"/documents/{doc.id}/reject", headers=auth(exam_admin))
    assert r.status_code == 400


def test_reject_without_reason_checks_role_and_state_first(
    client, make_document, exam_board, exam_sub_admin, exam_admin, auth
):
    pending = make_document(exam_sub_admin, exam_board, title="Draft", status="pending")
    r = client.post(f"/documents/{pending.id}/reject", headers=auth(exam_sub_admin))
    assert r.status_code == 403

    approved = make_document(exam_admin, exam_board, title="Exam Rules")
    r = client.post(f"/documents/{approved.id}/reject", headers=auth(exam_admin))
    assert r.status_code == 400
    assert r.json()["message"] == "Document is not pending approval"


def test_reject_stores_reason_and_stays_private(
    client, make_document, exam_board, exam_sub_admin, exam_admin, auth
):
    doc = make_document(exam_sub_admin, exam_board, status="pending")
    r = client.post(
        f"/documents/{doc.id}/reject", headers=auth(exam_admin), json={"reason": "Missing signature page"}
    )
    assert r.status_code == 200
    rejected = r.json()["data"]["document"]
    assert rejected["approval_status"] == "rejected"
    assert rejected["rejection_reason"] == "Missing signature page"
    assert rejected["approved_by_id"] == exam_admin.id

    assert client.get(f"/documents/{doc.id}").status_code == 404
    mine = client.get("/documents", headers=auth(exam_sub_admin), params={"only_mine": "true"}).json()
    assert mine["data"]["documents"][0]["rejection_reason"] == "Missing signature page"


def test_sub_admin_cannot_approve(client, make_document, exam_board, exam_sub_admin, auth):
    doc = make_document(exam_sub_admin, exam_board, status="pending")
    r = client.post(f"/documents/{doc.id}/approve", headers=auth(exam_sub_admin))
    assert r.status_code == 403


def test_other_body_admin_sees_not_found(client, make_document, exam_board, exam_sub_admin, council_admin, auth):
    doc = make_document(exam_sub_admin, exam_board, status="pending")
    r = client.post(f"/documents/{doc.id}/approve", headers=auth(council_admin))
    assert r.status_code == 404
    r = client.post(f"/documents/{doc.id}/reject", headers=auth(council_admin), json={"reason": "No"})
    assert r.status_code == 404


def test_approve_requires_token(client, make_document, exam_board, exam_sub_admin):
    doc = make_document(exam_sub_admin, exam_board, status="pending")
    assert client.post(f"/documents/{doc.id}/approve").status_code == 401


def test_super_admin_approves_any_body(client, make_document, council, council_admin, make_user, super_admin, auth):
    clerk = make_user("clerk.council@coep.ac.in", role="sub_admin", body=council)
    doc = make_document(clerk, council, status="pending")
    r = client.post(f"/documents/{doc.id}/approve", headers=auth(super_admin))
    assert r.status_code == 200
    assert r.json()["data"]["document"]["approved_by_id"] == super_admin.id


def test_racing_reviewer_loses(db, make_document, exam_board, exam_sub_admin, exam_admin, super_admin):
    """Both reviewers load the pending row; only the first compare-and-set wins."""
    doc = make_document(exam_sub_admin, exam_board, status="pending")
    stale = db.get(Document, doc.id)
    approval.approve(db, ApproveDocumentCommand(document_id=doc.id), Actor.from_user(exam_admin))
    with pytest.raises(InvalidStateError):
        approval._transition(db, stale, {"approval_status": "rejected", "rejection_reason": "late"})
    db.expire_all()
    assert db.get(Document, doc.id).approval_status == "approved"
