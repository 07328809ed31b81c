"""
SQLAlchemy models. Import here so Alembic and app can use them.
"""
from app.models.user import User
from app.models.university_body import UniversityBody
from app.models.document import Document, DocumentFile

__all__ = ["User", "UniversityBody", "Document", "DocumentFile"]
