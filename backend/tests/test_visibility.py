"""Visibility predicate: listings and single reads agree with the read policy."""
from app.models.document import Document
from app.services import policy
from app.services.policy import Actor
from app.services.visibility import visibility_clause


def _visible_ids(db, actor, only_mine=False):
    return {d.id for d in db.query(Document).filter(visibility_clause(actor, only_mine=only_mine)).all()}


def test_clause_matches_policy_for_every_actor(
    db, make_document, exam_board, council, super_admin, exam_admin, exam_sub_admin, council_admin
):
    docs = [
        make_document(exam_sub_admin, exam_board, title="Pending A", status="pending"),
        make_document(exam_admin, exam_board, title="Approved A"),
        make_document(exam_admin, exam_board, title="Private A", is_public=False),
        make_document(council_admin, council, title="Approved B"),
        make_document(council_admin, council, title="Rejected B", status="rejected"),
        make_document(super_admin, None, title="Unaffiliated"),
    ]
    actors = [None] + [Actor.from_user(u) for u in (super_admin, exam_admin, exam_sub_admin, council_admin)]
    for actor in actors:
        expected = {d.id for d in docs if policy.can_read_document(actor, d)}
        assert _visible_ids(db, actor) == expected


def test_public_sees_only_approved_public(db, make_document, exam_board, exam_admin, exam_sub_admin):
    approved = make_document(exam_admin, exam_board, title="Exam Rules")
    make_document(exam_sub_admin, exam_board, title="Draft", status="pending")
    make_document(exam_admin, exam_board, title="Internal", is_public=False)
    assert _visible_ids(db, None) == {approved.id}


def test_only_mine_narrows_to_own_uploads(db, make_document, exam_board, exam_admin, exam_sub_admin):
    mine = make_document(exam_sub_admin, exam_board, title="Mine", status="pending")
    make_document(exam_admin, exam_board, title="Theirs")
    assert _visible_ids(db, Actor.from_user(exam_sub_admin), only_mine=True) == {mine.id}
    assert _visible_ids(db, Actor.from_user(exam_admin), only_mine=True) != {mine.id}
