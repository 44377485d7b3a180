"""
Gestor de Expedientes Backend: Persistence Interfaces
======================================================

What:  Abstract contracts for the case store and the user directory.
How:   CaseService receives implementations in its constructor and never
       touches a session or query directly.

Implementations:
    - SqlAlchemyCaseStore / SqlAlchemyUserDirectory (production)
    - In-memory fakes in the test suite
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from gestor_expedientes.models.case_record import CaseRecord
from gestor_expedientes.models.user import User


class CaseStore(ABC):
    """
    Key-addressed persistence for case records.

    Contract:
        - Lookups return ORM CaseRecord instances with `creator` loaded
        - "Store-native order" for find_all/find_by_number_prefix is ascending id
        - save() inserts new records and persists changes to existing ones,
          raising DuplicateCaseNumberError when the per-creator uniqueness
          constraint is violated
        - delete_by_id() on a missing id is a no-op
    """

    @abstractmethod
    async def find_all(self) -> List[CaseRecord]:
        ...

    @abstractmethod
    async def find_by_id(self, case_id: int) -> Optional[CaseRecord]:
        ...

    @abstractmethod
    async def find_by_creator(self, creator: User) -> List[CaseRecord]:
        ...

    @abstractmethod
    async def find_by_number_prefix(self, prefix: str) -> List[CaseRecord]:
        """
        Records whose number starts with `prefix`, ignoring case.

        The prefix is matched literally: LIKE wildcards in it (`%`, `_`)
        carry no special meaning.
        """
        ...

    @abstractmethod
    async def find_by_number_and_creator_username(
        self, number: str, username: str
    ) -> List[CaseRecord]:
        """Records with exactly this number created by this user, both ignoring case."""
        ...

    @abstractmethod
    async def save(self, record: CaseRecord) -> CaseRecord:
        """
        Persist a new or modified record.

        Returns:
            The saved record, with its id assigned.

        Raises:
            DuplicateCaseNumberError: The creator already owns another record
                with this number.
        """
        ...

    @abstractmethod
    async def delete_by_id(self, case_id: int) -> None:
        ...


class UserDirectory(ABC):
    """Read-only resolution of authenticated principals to user records."""

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[User]:
        ...
