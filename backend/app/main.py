"""
FastAPI application entrypoint.
Run with: uvicorn app.main:app --reload --port 8000

Routes are mounted at root (no /api/v1 prefix).
  - Auth:  POST /auth/login, POST /auth/verify-token, GET|PUT /auth/me, POST /auth/logout
  - Documents: GET|POST /documents, GET /documents/pending, GET|PUT|DELETE /documents/{id},
    GET /documents/{id}/download, GET /documents/{id}/preview,
    POST /documents/{id}/approve, POST /documents/{id}/reject
  - University bodies: GET|POST /university-bodies, GET /university-bodies/types,
    GET|PUT|DELETE /university-bodies/{id}
  - Users: GET|POST /users, GET|PUT|DELETE /users/{id}, PUT /users/{id}/toggle-status
  - Health: GET /health, GET /health/db

Every JSON response uses the envelope {success, message?, data?, errors?}.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import metrics
from app.config import settings
from app.errors import AuthenticationError, PortalError
from app.api.auth import router as auth_router
from app.api.documents import router as documents_router
from app.api.university_bodies import router as university_bodies_router
from app.api.users import router as users_router

logger = logging.getLogger("app.main")

app = FastAPI(
    title="University Document Portal API",
    description="Document management for university bodies: uploads, approvals, public library.",
    version="1.0.0",
)

_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins if _origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(documents_router)
app.include_router(university_bodies_router)
app.include_router(users_router)


def _envelope(status_code: int, message: str, errors: list | None = None, headers: dict | None = None) -> JSONResponse:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _field_errors(errors) -> list[dict]:
    """Flatten pydantic error entries to [{field, message}]; drop the request-part prefix."""
    out = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "form")]
        out.append({"field": ".".join(loc) or None, "message": err.get("msg", "Invalid value")})
    return out


@app.exception_handler(PortalError)
def portal_error_handler(request: Request, exc: PortalError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _envelope(exc.status_code, exc.message, exc.errors, headers)


@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    return _envelope(400, "Validation failed", _field_errors(exc.errors()))


@app.exception_handler(PydanticValidationError)
def model_validation_handler(request: Request, exc: PydanticValidationError):
    return _envelope(400, "Validation failed", _field_errors(exc.errors()))


@app.exception_handler(StarletteHTTPException)
def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "Route not found"
    return _envelope(exc.status_code, message, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if settings.debug else "Internal server error"
    return _envelope(500, message)


@app.on_event("startup")
def startup():
    """Init SQLite DB and bootstrap the first super_admin. Fail fast if production uses default SECRET_KEY."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if (getattr(settings, "env", "") or "").strip().lower() == "production":
        if (getattr(settings, "secret_key", "") or "").strip() == "change-me-in-production":
            logger.critical("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
            raise RuntimeError("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
    from app.database import SessionLocal, init_sqlite_db
    from app.services.users import ensure_initial_super_admin

    init_sqlite_db()
    db = SessionLocal()
    try:
        ensure_initial_super_admin(db)
    finally:
        db.close()
    logger.info("Upload limit %s bytes; allowed extensions: %s", settings.max_upload_bytes, settings.allowed_upload_extensions)


@app.get("/health")
def health():
    """Health check (JSON) with process-local counters."""
    return {"success": True, "message": "University Document Portal API", "data": {"metrics": metrics.snapshot()}}


@app.get("/health/db")
def health_db():
    """Database connectivity check."""
    from app.database import engine

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        return _envelope(503, "Database unavailable")
    return {"success": True, "message": "Database connection OK"}
