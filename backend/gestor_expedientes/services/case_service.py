"""
Gestor de Expedientes Backend: Case Service (Access-Scoped Case Directory)
===========================================================================

What:  Decides which case records an authenticated actor may see, applies
       search filtering, enforces the per-creator uniqueness of case
       numbers, and orchestrates create/update/delete against the store.
How:   Resolves the principal through a UserDirectory, branches on the
       actor's role, and queries/mutates through a CaseStore.
Who:   Built per request by the route dependencies; driven by in-memory
       stores in the unit tests.

Two failure channels:
    1. Hard failures (exceptions): unknown actor in list/search, unknown
       case id in get/update. The global handlers answer 404.
    2. Rejections (return values): duplicate case number, unknown actor in
       create/update. create() and update() return the message to show the
       user, or None on success.

Visibility Rules:
    ┌───────────┬────────────────────────────┬─────────────────────────────┐
    │ Role      │ list                       │ search                      │
    ├───────────┼────────────────────────────┼─────────────────────────────┤
    │ ADMIN     │ every record, id order     │ every prefix match          │
    │ USER      │ own records, newest first, │ own prefix matches only     │
    │           │ at most `listing_limit`    │                             │
    └───────────┴────────────────────────────┴─────────────────────────────┘

    Update and delete are not scoped by owner.
"""

import logging
from typing import List, Optional

from gestor_expedientes.config import settings
from gestor_expedientes.exceptions import (
    ActorNotFoundError,
    DuplicateCaseNumberError,
    NotFoundError,
)
from gestor_expedientes.models.case_record import CaseRecord
from gestor_expedientes.models.user import User
from gestor_expedientes.repositories.base import CaseStore, UserDirectory
from gestor_expedientes.schemas.case import CaseInput, CaseSummary

logger = logging.getLogger(__name__)

# ── Rejection Messages ────────────────────────────────────────────────────
USER_NOT_FOUND_MESSAGE = "Usuario no encontrado."
DUPLICATE_ON_CREATE_MESSAGE = "Ya existe un expediente con ese número creado por usted."
DUPLICATE_ON_UPDATE_MESSAGE = "Ya tiene otro expediente con ese número."

NO_CREATOR_LABEL = "N/A"


def to_summary(record: CaseRecord) -> CaseSummary:
    """Maps a stored record to its listing view."""
    creator_username = (
        record.creator.username if record.creator is not None else NO_CREATOR_LABEL
    )
    return CaseSummary(
        id=record.id,
        number=record.number,
        description=record.description,
        date=record.date,
        physical_location=record.physical_location,
        creator_username=creator_username,
        storage_bin=record.storage_bin,
        observations=record.observations,
    )


def to_input(record: CaseRecord) -> CaseInput:
    """
    Projects the editable fields of a record, leaving out id and creator.

    Stored values are returned as they are; input validation only applies
    to what clients send.
    """
    return CaseInput.model_construct(
        number=record.number,
        description=record.description,
        date=record.date,
        physical_location=record.physical_location,
        storage_bin=record.storage_bin,
        observations=record.observations,
    )


def _apply_input(record: CaseRecord, data: CaseInput) -> None:
    record.number = data.number
    record.description = data.description
    record.date = data.date
    record.physical_location = data.physical_location
    record.storage_bin = data.storage_bin
    record.observations = data.observations


def _is_owned_by(record: CaseRecord, actor: User) -> bool:
    return record.creator is not None and record.creator.id == actor.id


class CaseService:
    """
    Access-scoped operations on case records.

    Args:
        cases: Store holding the case records
        users: Directory resolving principals to users
        listing_limit: Maximum records a non-admin sees in list_for_actor
    """

    def __init__(
        self,
        cases: CaseStore,
        users: UserDirectory,
        listing_limit: Optional[int] = None,
    ):
        self.cases = cases
        self.users = users
        self.listing_limit = (
            listing_limit if listing_limit is not None else settings.user_listing_limit
        )

    async def _require_actor(self, principal: str) -> User:
        actor = await self.users.find_by_username(principal)
        if actor is None:
            logger.warning("Principal %r does not match any user", principal)
            raise ActorNotFoundError(username=principal)
        return actor

    async def _require_case(self, case_id: int) -> CaseRecord:
        record = await self.cases.find_by_id(case_id)
        if record is None:
            raise NotFoundError(resource="case", resource_id=str(case_id))
        return record

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_for_actor(self, principal: str) -> List[CaseSummary]:
        """
        Cases visible to the actor in the main listing.

        Admins get every record in store order. Anyone else gets their own
        records, most recent date first, truncated to `listing_limit`.
        Records sharing a date keep their store order.

        Raises:
            ActorNotFoundError: The principal matches no user.
        """
        actor = await self._require_actor(principal)

        if actor.is_admin:
            records = await self.cases.find_all()
        else:
            owned = await self.cases.find_by_creator(actor)
            records = sorted(owned, key=lambda r: r.date, reverse=True)[: self.listing_limit]

        logger.debug(
            "Listing %d cases for %s (role=%s)",
            len(records), actor.username, actor.resolved_role.value,
        )
        return [to_summary(r) for r in records]

    async def search_by_number_prefix(self, prefix: str, principal: str) -> List[CaseSummary]:
        """
        Cases whose number starts with `prefix` (case-insensitive).

        Non-admins only see matches they created; records without a
        creator never match for them.

        Raises:
            ActorNotFoundError: The principal matches no user.
        """
        actor = await self._require_actor(principal)
        matches = await self.cases.find_by_number_prefix(prefix)

        if not actor.is_admin:
            matches = [r for r in matches if _is_owned_by(r, actor)]

        return [to_summary(r) for r in matches]

    async def get_by_id(self, case_id: int) -> CaseInput:
        """
        The editable fields of a case, as a form would be pre-filled.

        Raises:
            NotFoundError: No case with this id.
        """
        record = await self._require_case(case_id)
        return to_input(record)

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create(self, data: CaseInput, principal: str) -> Optional[str]:
        """
        Creates a case owned by the actor.

        Returns:
            None on success, otherwise the rejection message:
            - USER_NOT_FOUND_MESSAGE when the principal matches no user
            - DUPLICATE_ON_CREATE_MESSAGE when the actor already has a case
              with this number (case-insensitive)
        """
        actor = await self.users.find_by_username(principal)
        if actor is None:
            logger.warning("Create rejected: principal %r does not match any user", principal)
            return USER_NOT_FOUND_MESSAGE

        existing = await self.cases.find_by_number_and_creator_username(
            data.number, actor.username
        )
        if existing:
            logger.info("Create rejected: %s already has case %r", actor.username, data.number)
            return DUPLICATE_ON_CREATE_MESSAGE

        record = CaseRecord(creator=actor)
        _apply_input(record, data)
        try:
            saved = await self.cases.save(record)
        except DuplicateCaseNumberError:
            return DUPLICATE_ON_CREATE_MESSAGE

        logger.info("Case %s (%r) created by %s", saved.id, saved.number, actor.username)
        return None

    async def update(self, case_id: int, data: CaseInput, principal: str) -> Optional[str]:
        """
        Overwrites the editable fields of a case.

        The creator is never reassigned, whoever performs the update. The
        duplicate check only looks at the acting user's own cases, and the
        case being updated is excluded so keeping its number is allowed.

        Returns:
            None on success, USER_NOT_FOUND_MESSAGE or DUPLICATE_ON_UPDATE_MESSAGE.

        Raises:
            NotFoundError: No case with this id (checked before the actor).
        """
        record = await self._require_case(case_id)

        actor = await self.users.find_by_username(principal)
        if actor is None:
            logger.warning("Update rejected: principal %r does not match any user", principal)
            return USER_NOT_FOUND_MESSAGE

        clashes = [
            r
            for r in await self.cases.find_by_number_and_creator_username(
                data.number, actor.username
            )
            if r.id != case_id
        ]
        if clashes:
            logger.info(
                "Update of case %s rejected: %s already has case %r",
                case_id, actor.username, data.number,
            )
            return DUPLICATE_ON_UPDATE_MESSAGE

        _apply_input(record, data)
        try:
            await self.cases.save(record)
        except DuplicateCaseNumberError:
            return DUPLICATE_ON_UPDATE_MESSAGE

        logger.info("Case %s updated by %s", case_id, actor.username)
        return None

    async def delete(self, case_id: int) -> None:
        """Deletes a case by id. Unknown ids are a no-op."""
        await self.cases.delete_by_id(case_id)
        logger.info("Case %s deleted", case_id)
