"""
Gestor de Expedientes Backend: Pydantic Request/Response Schemas
=================================================================

What:  Pydantic models defining the API contract.
How:   FastAPI validates request bodies against these models, serializes
       responses with them, and generates OpenAPI docs from them.

Schemas are separate from the SQLAlchemy models: CaseInput deliberately has
no id and no creator, so a client can never set either.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CaseInput(BaseModel):
    """
    The editable fields of a case record.

    Used as the body of create/update and as the projection returned when a
    case is opened for editing (GET /api/cases/{id}).
    """
    number: str = Field(min_length=1, max_length=100, description="Case number")
    description: str = Field(description="What the case is about")
    date: datetime.date = Field(description="Case date (ISO 8601, YYYY-MM-DD)")
    physical_location: str = Field(max_length=255, description="Where the physical file is kept")
    storage_bin: str = Field(max_length=100, description="Storage bin (bodega)")
    observations: str = Field(default="", description="Free-text observations")

    @field_validator("number")
    @classmethod
    def strip_number(cls, v: str) -> str:
        """Case numbers are compared verbatim; surrounding blanks are never meaningful."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("number must not be blank")
        return stripped


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CaseSummary(BaseModel):
    """
    What:  A case as shown in listings and search results.
    Who:   Returned by GET /api/cases and GET /api/cases/search.

    creator_username is "N/A" for records without an owner.
    """
    id: int = Field(description="Case identifier")
    number: str
    description: str
    date: datetime.date
    physical_location: str
    creator_username: str = Field(description="Username of the creator, or 'N/A'")
    storage_bin: str
    observations: str


class MutationResponse(BaseModel):
    """Acknowledgement returned by create and update."""
    message: str = Field(description="Human-readable confirmation")


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Ya tiene otro expediente con ese número.",
            "details": {"field": "number"},
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
