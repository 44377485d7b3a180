"""
Gestor de Expedientes Backend: User SQLAlchemy Model
=====================================================

What:  ORM model for the `usuarios` table and the closed Role enumeration.
Who:   Read by SqlAlchemyUserDirectory; referenced by CaseRecord.creator.

Users are provisioned outside this service (the gateway that authenticates
them owns their lifecycle). This service only resolves them read-only.
"""

import logging
from enum import Enum

from sqlalchemy import Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from gestor_expedientes.database import Base

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """
    Roles understood by the access-scoping rules.

    The stored column is free text; it is resolved into this enumeration once,
    when the actor is loaded, so the rest of the code never compares strings.
    """

    ADMIN = "ADMIN"
    USER = "USER"

    @classmethod
    def from_value(cls, value: str | None) -> "Role":
        """Case-insensitive lookup. Anything that is not the admin role is USER."""
        normalized = (value or "").strip().upper()
        if normalized == cls.ADMIN.value:
            return cls.ADMIN
        if normalized != cls.USER.value:
            logger.debug("Unrecognized role %r treated as %s", value, cls.USER.value)
        return cls.USER


class User(Base):
    """
    An account that can create and look up case records.

    Query Patterns:
        - Resolve principal: SELECT ... WHERE username = :username
          → Uses the unique index on username
    """

    __tablename__ = "usuarios"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    # Authentication key forwarded by the gateway in the principal header
    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Login name; unique and used as the authentication key",
    )

    role: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default=Role.USER.value,
        server_default=text("'USER'"),
        comment="Role name, compared case-insensitively (ADMIN or USER)",
    )

    @property
    def resolved_role(self) -> Role:
        return Role.from_value(self.role)

    @property
    def is_admin(self) -> bool:
        return self.resolved_role is Role.ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
