"""Create usuarios and expedientes tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the user directory table and the case records table.
How:   Portable column types only (runs on PostgreSQL and SQLite).
       The unique index on (creator_id, lower(number)) enforces one case
       number per creator, ignoring case. See gestor_expedientes/models/
       for column documentation.

Rollback: downgrade() drops both tables (all case data is lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "usuarios",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "username",
            sa.String(100),
            nullable=False,
            comment="Login name; unique and used as the authentication key",
        ),
        sa.Column(
            "role",
            sa.String(30),
            nullable=False,
            server_default=sa.text("'USER'"),
            comment="Role name, compared case-insensitively (ADMIN or USER)",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )

    op.create_table(
        "expedientes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "number",
            sa.String(100),
            nullable=False,
            comment="Case number, unique per creator (case-insensitive)",
        ),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "date",
            sa.Date(),
            nullable=False,
            comment="Case date; the listing shows the most recent first",
        ),
        sa.Column(
            "physical_location",
            sa.String(255),
            nullable=False,
            comment="Where the physical file is kept (shelf, room, office)",
        ),
        sa.Column(
            "storage_bin",
            sa.String(100),
            nullable=False,
            comment="Storage bin (bodega) holding the physical file",
        ),
        sa.Column("observations", sa.Text(), nullable=False),
        sa.Column(
            "creator_id",
            sa.Integer(),
            nullable=True,
            comment="User who created this case",
        ),
        sa.ForeignKeyConstraint(["creator_id"], ["usuarios.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index(
        "uq_expedientes_creator_number",
        "expedientes",
        ["creator_id", sa.text("lower(number)")],
        unique=True,
    )
    op.create_index(
        "idx_expedientes_creator_date",
        "expedientes",
        ["creator_id", sa.text("date DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_expedientes_creator_date", table_name="expedientes")
    op.drop_index("uq_expedientes_creator_number", table_name="expedientes")
    op.drop_table("expedientes")
    op.drop_table("usuarios")
