"""
Application configuration from environment variables.
Loads .env from the backend directory so settings are found regardless of cwd.
"""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_UPLOAD_EXTENSIONS = "pdf,doc,docx,xls,xlsx,ppt,pptx,txt,csv,jpg,jpeg,png"

# .env next to backend/ (parent of app/); loaded explicitly so values are set even when run from repo root
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_ENV_FILE = _BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    from dotenv import load_dotenv
    load_dotenv(_ENV_FILE, override=False)
else:
    # Fallback: try backend/.env relative to cwd (e.g. when running from repo root)
    import os
    _cwd_env = Path(os.getcwd()) / "backend" / ".env"
    if _cwd_env.exists():
        from dotenv import load_dotenv
        load_dotenv(_cwd_env, override=False)


class Settings(BaseSettings):
    """Load and validate config from env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database: sqlite for local runs and tests, postgresql for production
    database_url: str = "sqlite:///./portal_dev.db"

    # Environment: set ENV=production in production; used to enforce SECRET_KEY.
    env: str = ""

    # JWT. In production (ENV=production), SECRET_KEY must be set.
    secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24

    # Uploads: bytes are stored in the database, so keep the cap modest.
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_upload_extensions: str = _DEFAULT_UPLOAD_EXTENSIONS
    # Non-super_admin uploaders may edit approved / delete any document only within this window. 0 disables.
    owner_edit_window_hours: int = 24

    # Bootstrap account created at startup when no super_admin exists. Empty disables.
    initial_super_admin_email: str = ""
    initial_super_admin_password: str = ""

    # CORS: comma-separated origins
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    debug: bool = False

    @field_validator("allowed_upload_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            return _DEFAULT_UPLOAD_EXTENSIONS
        return ",".join(e.strip().lower().lstrip(".") for e in v.split(",") if e.strip())

    @property
    def upload_extensions(self) -> frozenset[str]:
        """Allowed file extensions (lowercase, no dot)."""
        return frozenset(e for e in self.allowed_upload_extensions.split(",") if e)


settings = Settings()
