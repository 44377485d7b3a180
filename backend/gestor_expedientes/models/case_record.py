"""
Gestor de Expedientes Backend: CaseRecord SQLAlchemy Model
===========================================================

What:  ORM model representing the `expedientes` table.
How:   Inherits from DeclarativeBase; Alembic reads this for migrations.
Who:   Used by SqlAlchemyCaseStore for queries and writes.

Table Design:
    - Integer primary key: case ids are numeric in every URL and form
    - number: free text, unique per creator (case-insensitive), not globally
    - date: calendar date of the case, drives "most recent" ordering
    - creator_id: nullable FK; rows imported without an owner stay readable
      and show "N/A" as creator

    Unique index on (creator_id, lower(number)):
        Enforces the per-creator numbering rule in the database itself, so
        two concurrent creates for the same number cannot both commit.
"""

from datetime import date as date_type
from typing import Optional

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gestor_expedientes.database import Base
from gestor_expedientes.models.user import User


class CaseRecord(Base):
    """
    A case file ("expediente") tracked by the court office.

    Lifecycle:
        1. Created by an authenticated user (creator always set)
        2. Mutable fields overwritten by update; creator never changes
        3. Removed by delete-by-id (no soft delete, no versioning)

    Query Patterns:
        - Listing for a user: WHERE creator_id = :id
          → Uses idx_expedientes_creator_date
        - Prefix search: WHERE lower(number) LIKE lower(:prefix) || '%'
        - Duplicate check: join usuarios, WHERE lower(number) = ... AND lower(username) = ...
    """

    __tablename__ = "expedientes"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    number: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Case number, unique per creator (case-insensitive)",
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    date: Mapped[date_type] = mapped_column(
        Date,
        nullable=False,
        comment="Case date; the listing shows the most recent first",
    )

    physical_location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        comment="Where the physical file is kept (shelf, room, office)",
    )

    storage_bin: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="",
        comment="Storage bin (bodega) holding the physical file",
    )

    observations: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    # ── Ownership ─────────────────────────────────────────────────────────
    # Nullable: absent ownership is a legitimate state for legacy rows.
    # lazy="joined": the creator's username is read on every summary, and
    # async sessions cannot lazy-load on attribute access.
    creator_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("usuarios.id", ondelete="SET NULL"),
        nullable=True,
        comment="User who created this case",
    )

    creator: Mapped[Optional[User]] = relationship(User, lazy="joined")

    def __repr__(self) -> str:
        return (
            f"<CaseRecord(id={self.id}, number='{self.number}', "
            f"creator_id={self.creator_id})>"
        )


Index(
    "uq_expedientes_creator_number",
    CaseRecord.creator_id,
    func.lower(CaseRecord.number),
    unique=True,
)
Index(
    "idx_expedientes_creator_date",
    CaseRecord.creator_id,
    CaseRecord.date.desc(),
)
