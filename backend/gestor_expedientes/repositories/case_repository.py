"""
Gestor de Expedientes Backend: SQLAlchemy Case Store
=====================================================

What:  CaseStore implementation over an async SQLAlchemy session.
How:   Each method is a single SELECT/INSERT/UPDATE/DELETE round trip.
       Writes are flushed, not committed; get_db_session commits at the
       end of the request.

Error translation:
    - Violation of uq_expedientes_creator_number → DuplicateCaseNumberError
    - Any other SQLAlchemy failure → DatabaseError (details logged only)
"""

import logging
from typing import List, Optional

from sqlalchemy import String, delete, func, literal, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gestor_expedientes.exceptions import DatabaseError, DuplicateCaseNumberError
from gestor_expedientes.models.case_record import CaseRecord
from gestor_expedientes.models.user import User
from gestor_expedientes.repositories.base import CaseStore

logger = logging.getLogger(__name__)

UNIQUE_NUMBER_INDEX = "uq_expedientes_creator_number"
LIKE_ESCAPE = "/"


class SqlAlchemyCaseStore(CaseStore):
    """Case records stored in the `expedientes` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _fetch_all(self, query, operation: str) -> List[CaseRecord]:
        try:
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error in %s: %s", operation, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve case records. Please try again.",
                context={"operation": operation, "error_type": type(e).__name__},
            )

    async def find_all(self) -> List[CaseRecord]:
        return await self._fetch_all(
            select(CaseRecord).order_by(CaseRecord.id),
            "find_all",
        )

    async def find_by_id(self, case_id: int) -> Optional[CaseRecord]:
        try:
            result = await self.db.execute(
                select(CaseRecord).where(CaseRecord.id == case_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching case %s: %s", case_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the case. Please try again.",
                context={"case_id": case_id},
            )

    async def find_by_creator(self, creator: User) -> List[CaseRecord]:
        return await self._fetch_all(
            select(CaseRecord)
            .where(CaseRecord.creator_id == creator.id)
            .order_by(CaseRecord.id),
            "find_by_creator",
        )

    async def find_by_number_prefix(self, prefix: str) -> List[CaseRecord]:
        """
        Case-insensitive prefix match. '%' and '_' in the prefix are literal.

        Both sides go through the database's lower() so they fold the same
        way. SQLite's lower() only folds ASCII letters, so "Ñ" and "ñ" are
        still different there; PostgreSQL folds them.
        """
        escaped = (
            prefix.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
            .replace("%", LIKE_ESCAPE + "%")
            .replace("_", LIKE_ESCAPE + "_")
        )
        pattern = func.lower(literal(escaped, String), type_=String) + "%"
        return await self._fetch_all(
            select(CaseRecord)
            .where(func.lower(CaseRecord.number).like(pattern, escape=LIKE_ESCAPE))
            .order_by(CaseRecord.id),
            "find_by_number_prefix",
        )

    async def find_by_number_and_creator_username(
        self, number: str, username: str
    ) -> List[CaseRecord]:
        return await self._fetch_all(
            select(CaseRecord)
            .join(User, CaseRecord.creator_id == User.id)
            .where(
                func.lower(CaseRecord.number) == func.lower(literal(number, String)),
                func.lower(User.username) == func.lower(literal(username, String)),
            )
            .order_by(CaseRecord.id),
            "find_by_number_and_creator_username",
        )

    async def save(self, record: CaseRecord) -> CaseRecord:
        # Captured up front: a rollback expires every loaded attribute
        number = record.number
        creator_id = record.creator.id if record.creator is not None else record.creator_id
        try:
            self.db.add(record)
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            if UNIQUE_NUMBER_INDEX in str(e.orig):
                logger.info(
                    "Unique index rejected case number %r for creator %s",
                    number, creator_id,
                )
                raise DuplicateCaseNumberError(number=number, creator_id=creator_id)
            logger.error("Integrity error saving case %r: %s", number, str(e))
            raise DatabaseError(
                message="Could not save the case. Please try again.",
                context={"number": number, "error_type": type(e).__name__},
            )
        except SQLAlchemyError as e:
            logger.error("Database error saving case %r: %s", number, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the case. Please try again.",
                context={"number": number, "error_type": type(e).__name__},
            )
        return record

    async def delete_by_id(self, case_id: int) -> None:
        try:
            result = await self.db.execute(
                delete(CaseRecord).where(CaseRecord.id == case_id)
            )
        except SQLAlchemyError as e:
            logger.error("Database error deleting case %s: %s", case_id, str(e))
            raise DatabaseError(
                message="Could not delete the case. Please try again.",
                context={"case_id": case_id},
            )
        if result.rowcount == 0:
            logger.debug("Delete of case %s matched no rows", case_id)
