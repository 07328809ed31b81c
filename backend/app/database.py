"""
SQLAlchemy engine and session. Supports PostgreSQL and SQLite (for local runs and tests).
Sync usage; one session per request via get_db.
"""
import logging
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from app.config import settings

logger = logging.getLogger(__name__)

_is_sqlite = "sqlite" in settings.database_url
_connect_args = {"check_same_thread": False} if _is_sqlite else {}
engine = create_engine(
    settings.database_url,
    pool_pre_ping=not _is_sqlite,
    connect_args=_connect_args,
    echo=False,  # Set True for SQL logging during development
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


if _is_sqlite:
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # SQLite ignores ON DELETE SET NULL / RESTRICT unless enabled per connection
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_sqlite_db():
    """When using SQLite: create tables. Call once at app startup; PostgreSQL uses Alembic."""
    if not _is_sqlite:
        return
    # Import all models so they register with Base before create_all
    from app.models import user, university_body, document  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.debug("SQLite schema ensured at %s", settings.database_url)


def get_db():
    """Dependency: yield a DB session, close after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
