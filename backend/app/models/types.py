"""
Enumerated column values shared by models, schemas and services.
Stored as plain strings (CHECK constraints) so the schema works on SQLite and PostgreSQL.
"""
import enum


class Role(str, enum.Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    SUB_ADMIN = "sub_admin"


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class BodyType(str, enum.Enum):
    BOARD = "Board"
    COMMITTEE = "Committee"
    COUNCIL = "Council"
    DEPARTMENT = "Department"
    OFFICE = "Office"
    OTHER = "Other"


# Role names written by older deployments; all of them meant body-level admin.
LEGACY_ROLE_ALIASES = {
    "director": Role.ADMIN,
    "board_director": Role.ADMIN,
    "committee_director": Role.ADMIN,
}

ADMIN_LEVEL_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN})


def normalize_role(value: "str | Role | None") -> Role | None:
    """Map a stored or submitted role name to a canonical Role; None if unknown."""
    if value is None:
        return None
    if isinstance(value, Role):
        return value
    key = str(value).strip().lower()
    if key in LEGACY_ROLE_ALIASES:
        return LEGACY_ROLE_ALIASES[key]
    try:
        return Role(key)
    except ValueError:
        return None


def check_values(enum_cls) -> str:
    """Comma-separated quoted values for a CHECK constraint."""
    return ", ".join(f"'{m.value}'" for m in enum_cls)
