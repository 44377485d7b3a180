"""
Gestor de Expedientes Backend: SQLAlchemy User Directory
=========================================================

What:  Resolves principal usernames to User rows.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gestor_expedientes.exceptions import DatabaseError
from gestor_expedientes.models.user import User
from gestor_expedientes.repositories.base import UserDirectory

logger = logging.getLogger(__name__)


class SqlAlchemyUserDirectory(UserDirectory):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_username(self, username: str) -> Optional[User]:
        """
        Exact username match.

        Query plan:
            SELECT * FROM usuarios WHERE username = :username
            → Uses the unique index on username
        """
        try:
            result = await self.db.execute(
                select(User).where(User.username == username)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error resolving user %s: %s", username, str(e))
            raise DatabaseError(
                message="Could not resolve the current user. Please try again.",
                context={"username": username},
            )
