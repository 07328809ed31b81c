"""Initial schema: users, university bodies, documents, document files.

Revision ID: 001
Revises:
Create Date: Initial

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Older deployments stored these role names; 002 folds them into 'admin'.
_ROLES_WITH_LEGACY = "'super_admin', 'admin', 'sub_admin', 'director', 'board_director', 'committee_director'"


def upgrade() -> None:
    op.create_table(
        "university_bodies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="Other"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("admin_id", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "type IN ('Board', 'Committee', 'Council', 'Department', 'Office', 'Other')",
            name="university_bodies_type_check",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_university_bodies_name", "university_bodies", ["name"], unique=True)
    op.create_index("ix_university_bodies_type", "university_bodies", ["type"], unique=False)
    op.create_index("ix_university_bodies_admin_id", "university_bodies", ["admin_id"], unique=False)
    op.create_index("ix_university_bodies_is_active", "university_bodies", ["is_active"], unique=False)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(30), nullable=False, server_default="sub_admin"),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("designation", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("university_body_id", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(f"role IN ({_ROLES_WITH_LEGACY})", name="users_role_check"),
        sa.ForeignKeyConstraint(["university_body_id"], ["university_bodies.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_university_body_id", "users", ["university_body_id"], unique=False)

    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("uploaded_by_id", sa.Integer(), nullable=False),
        sa.Column("university_body_id", sa.Integer(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("approval_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("approved_by_id", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("download_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "approval_status IN ('pending', 'approved', 'rejected')", name="documents_approval_status_check"
        ),
        sa.CheckConstraint(
            "(approval_status = 'rejected') = (rejection_reason IS NOT NULL AND rejection_reason <> '')",
            name="documents_rejection_reason_check",
        ),
        sa.CheckConstraint(
            "approval_status <> 'approved' OR (approved_by_id IS NOT NULL AND approved_at IS NOT NULL)",
            name="documents_approver_check",
        ),
        sa.CheckConstraint("download_count >= 0", name="documents_download_count_check"),
        sa.ForeignKeyConstraint(["uploaded_by_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["approved_by_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["university_body_id"], ["university_bodies.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_documents_title", "documents", ["title"], unique=False)
    op.create_index("ix_documents_uploaded_by_id", "documents", ["uploaded_by_id"], unique=False)
    op.create_index("ix_documents_university_body_id", "documents", ["university_body_id"], unique=False)
    op.create_index("ix_documents_approval_status", "documents", ["approval_status"], unique=False)
    op.create_index("ix_documents_created_at", "documents", ["created_at"], unique=False)

    op.create_table(
        "document_files",
        sa.Column("document_id", sa.Integer(), nullable=False),
        sa.Column("data", sa.LargeBinary(), nullable=False),
        sa.ForeignKeyConstraint(["document_id"], ["documents.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("document_id"),
    )


def downgrade() -> None:
    op.drop_table("document_files")
    op.drop_index("ix_documents_created_at", table_name="documents")
    op.drop_index("ix_documents_approval_status", table_name="documents")
    op.drop_index("ix_documents_university_body_id", table_name="documents")
    op.drop_index("ix_documents_uploaded_by_id", table_name="documents")
    op.drop_index("ix_documents_title", table_name="documents")
    op.drop_table("documents")
    op.drop_index("ix_users_university_body_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_university_bodies_is_active", table_name="university_bodies")
    op.drop_index("ix_university_bodies_admin_id", table_name="university_bodies")
    op.drop_index("ix_university_bodies_type", table_name="university_bodies")
    op.drop_index("ix_university_bodies_name", table_name="university_bodies")
    op.drop_table("university_bodies")
