"""
Shared fixtures: a throwaway SQLite database, a TestClient, and factories for bodies, users,
documents and Bearer headers. Environment is set before the app is imported so settings pick it up.
"""
import os
import tempfile
from datetime import datetime, timezone

import pytest

_DB_DIR = tempfile.mkdtemp(prefix="portal-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["OWNER_EDIT_WINDOW_HOURS"] = "24"
os.environ["INITIAL_SUPER_ADMIN_EMAIL"] = ""
os.environ["INITIAL_SUPER_ADMIN_PASSWORD"] = ""
os.environ["ENV"] = "test"

from fastapi.testclient import TestClient  # noqa: E402

from app.database import Base, SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models.document import Document, DocumentFile  # noqa: E402
from app.models.university_body import UniversityBody  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services.auth import create_access_token, hash_password  # noqa: E402
from helpers import PDF_BYTES  # noqa: E402

DEFAULT_PASSWORD = "Password1"


@pytest.fixture(autouse=True)
def _schema():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal(expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_body(db):
    def _make(name="Board of Examinations", type="Board", description=None, is_active=True, admin_id=None):
        body = UniversityBody(name=name, type=type, description=description, is_active=is_active, admin_id=admin_id)
        db.add(body)
        db.commit()
        return body

    return _make


@pytest.fixture
def make_user(db):
    def _make(email, role="sub_admin", body=None, password=DEFAULT_PASSWORD, is_active=True, first_name=None):
        user = User(
            email=email.lower(),
            password_hash=hash_password(password),
            role=role,
            university_body_id=body.id if body is not None else None,
            is_active=is_active,
            first_name=first_name,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_document(db):
    def _make(uploader, body=None, title="Circular", status="approved", is_public=True, data=PDF_BYTES, **extra):
        now = datetime.now(timezone.utc)
        doc = Document(
            title=title,
            file_name=f"{title.lower().replace(' ', '_')}.pdf",
            mime_type="application/pdf",
            file_size=len(data),
            uploaded_by_id=uploader.id,
            university_body_id=body.id if body is not None else None,
            is_public=is_public,
            approval_status=status,
            download_count=0,
            **extra,
        )
        if status == "approved":
            doc.approved_by_id = extra.get("approved_by_id", uploader.id)
            doc.approved_at = now
        elif status == "rejected":
            doc.approved_by_id = extra.get("approved_by_id", uploader.id)
            doc.approved_at = now
            doc.rejection_reason = extra.get("rejection_reason", "Incomplete")
        else:
            doc.requested_at = now
        doc.file = DocumentFile(data=data)
        db.add(doc)
        db.commit()
        return doc

    return _make


def auth_header(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def auth():
    return auth_header


@pytest.fixture
def exam_board(make_body):
    return make_body("Board of Examinations", "Board")


@pytest.fixture
def council(make_body):
    return make_body("Academic Council", "Council")


@pytest.fixture
def super_admin(make_user):
    return make_user("root@coep.ac.in", role="super_admin", first_name="Root")


@pytest.fixture
def exam_admin(make_user, exam_board):
    return make_user("admin.examinations@coep.ac.in", role="admin", body=exam_board, password="admin123")


@pytest.fixture
def exam_sub_admin(make_user, exam_board):
    return make_user("clerk.examinations@coep.ac.in", role="sub_admin", body=exam_board)


@pytest.fixture
def council_admin(make_user, council):
    return make_user("admin.council@coep.ac.in", role="admin", body=council)
