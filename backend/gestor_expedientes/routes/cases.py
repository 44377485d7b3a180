"""
Gestor de Expedientes Backend: Case Route Handlers
===================================================

What:  HTTP surface of the CaseService.
How:   Resolves the principal and the service through dependencies,
       delegates, and turns rejection messages into 400 responses.

Route Inventory:
    GET    /api/cases                 list_for_actor
    GET    /api/cases/search?number=  search_by_number_prefix
    POST   /api/cases                 create
    GET    /api/cases/{id}            get_by_id
    PUT    /api/cases/{id}            update
    DELETE /api/cases/{id}            delete
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from gestor_expedientes.dependencies import get_case_service, get_principal
from gestor_expedientes.exceptions import ValidationError
from gestor_expedientes.schemas.case import (
    CaseInput,
    CaseSummary,
    ErrorResponse,
    MutationResponse,
)
from gestor_expedientes.services.case_service import CaseService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cases", tags=["Cases"])


def _raise_if_rejected(rejection: str | None) -> None:
    if rejection is not None:
        raise ValidationError(message=rejection, field="number")


@router.get(
    "",
    response_model=List[CaseSummary],
    responses={
        401: {"description": "Missing principal header", "model": ErrorResponse},
        404: {"description": "Principal does not match any user", "model": ErrorResponse},
    },
    summary="List the cases visible to the caller",
    description=(
        "Administrators receive every case. Other users receive their own most "
        "recent cases, newest first."
    ),
)
async def list_cases(
    principal: str = Depends(get_principal),
    service: CaseService = Depends(get_case_service),
) -> List[CaseSummary]:
    return await service.list_for_actor(principal)


@router.get(
    "/search",
    response_model=List[CaseSummary],
    responses={
        401: {"description": "Missing principal header", "model": ErrorResponse},
        404: {"description": "Principal does not match any user", "model": ErrorResponse},
    },
    summary="Search cases by number prefix",
)
async def search_cases(
    number: str = Query(
        default="",
        max_length=100,
        description="Case number prefix, matched case-insensitively",
    ),
    principal: str = Depends(get_principal),
    service: CaseService = Depends(get_case_service),
) -> List[CaseSummary]:
    return await service.search_by_number_prefix(number, principal)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=MutationResponse,
    responses={
        400: {"description": "Duplicate case number or unknown user", "model": ErrorResponse},
        401: {"description": "Missing principal header", "model": ErrorResponse},
    },
    summary="Create a case owned by the caller",
)
async def create_case(
    payload: CaseInput,
    principal: str = Depends(get_principal),
    service: CaseService = Depends(get_case_service),
) -> MutationResponse:
    _raise_if_rejected(await service.create(payload, principal))
    return MutationResponse(message="Expediente creado.")


@router.get(
    "/{case_id}",
    # Stored records are echoed as they are, without re-running input validation
    response_model=None,
    responses={
        200: {"description": "Editable fields of the case", "model": CaseInput},
        404: {"description": "Case not found", "model": ErrorResponse},
    },
    summary="Get the editable fields of a case",
)
async def get_case(
    case_id: int,
    service: CaseService = Depends(get_case_service),
) -> CaseInput:
    return await service.get_by_id(case_id)


@router.put(
    "/{case_id}",
    response_model=MutationResponse,
    responses={
        400: {"description": "Duplicate case number or unknown user", "model": ErrorResponse},
        401: {"description": "Missing principal header", "model": ErrorResponse},
        404: {"description": "Case not found", "model": ErrorResponse},
    },
    summary="Update a case",
)
async def update_case(
    case_id: int,
    payload: CaseInput,
    principal: str = Depends(get_principal),
    service: CaseService = Depends(get_case_service),
) -> MutationResponse:
    _raise_if_rejected(await service.update(case_id, payload, principal))
    return MutationResponse(message="Expediente actualizado.")


@router.delete(
    "/{case_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a case",
    description="Deleting an id that does not exist is not an error.",
)
async def delete_case(
    case_id: int,
    service: CaseService = Depends(get_case_service),
) -> Response:
    await service.delete(case_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
