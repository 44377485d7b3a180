"""
Gestor de Expedientes Backend: Request Dependencies
====================================================

What:  FastAPI dependencies resolving the principal and building the
       CaseService for a request.
How:   The repositories share the request's database session, so every
       operation runs in the single transaction managed by get_db_session.

Identity:
    Authentication happens upstream. The gateway forwards the authenticated
    username in the principal header (settings.principal_header, default
    X-Username); this service trusts it and resolves it to a user record.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from gestor_expedientes.config import settings
from gestor_expedientes.database import get_db_session
from gestor_expedientes.exceptions import AuthenticationRequiredError
from gestor_expedientes.repositories import (
    CaseStore,
    SqlAlchemyCaseStore,
    SqlAlchemyUserDirectory,
    UserDirectory,
)
from gestor_expedientes.services.case_service import CaseService


async def get_principal(request: Request) -> str:
    """
    Username of the authenticated caller.

    Raises:
        AuthenticationRequiredError: The principal header is missing or blank (→ 401).
    """
    principal = request.headers.get(settings.principal_header, "").strip()
    if not principal:
        raise AuthenticationRequiredError(header=settings.principal_header)
    return principal


async def get_case_store(db: AsyncSession = Depends(get_db_session)) -> CaseStore:
    return SqlAlchemyCaseStore(db)


async def get_user_directory(db: AsyncSession = Depends(get_db_session)) -> UserDirectory:
    return SqlAlchemyUserDirectory(db)


async def get_case_service(
    cases: CaseStore = Depends(get_case_store),
    users: UserDirectory = Depends(get_user_directory),
) -> CaseService:
    return CaseService(cases=cases, users=users)
