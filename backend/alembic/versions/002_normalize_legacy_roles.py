"""Fold legacy director roles into admin and restrict users.role to canonical values.

Revision ID: 002
Revises: 001
Create Date: Legacy roles

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_LEGACY = ("director", "board_director", "committee_director")


def upgrade() -> None:
    op.execute(
        sa.text("UPDATE users SET role = 'admin' WHERE role IN :legacy").bindparams(
            sa.bindparam("legacy", value=list(_LEGACY), expanding=True)
        )
    )
    with op.batch_alter_table("users") as batch_op:
        batch_op.drop_constraint("users_role_check", type_="check")
        batch_op.create_check_constraint("users_role_check", "role IN ('super_admin', 'admin', 'sub_admin')")


def downgrade() -> None:
    # Legacy names are not restored; only the wider constraint is.
    with op.batch_alter_table("users") as batch_op:
        batch_op.drop_constraint("users_role_check", type_="check")
        batch_op.create_check_constraint(
            "users_role_check",
            "role IN ('super_admin', 'admin', 'sub_admin', 'director', 'board_director', 'committee_director')",
        )
