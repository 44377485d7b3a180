"""
Gestor de Expedientes Backend: Custom Exception Hierarchy
==========================================================

What:  Application-specific exceptions for hard failures.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by repositories, services and route dependencies.

Exception Hierarchy:
    GestorExpedientesError (base)
    ├── ValidationError              → 400 Bad Request
    ├── AuthenticationRequiredError  → 401 Unauthorized
    ├── NotFoundError                → 404 Not Found
    │   └── ActorNotFoundError       → 404 Not Found
    ├── DuplicateCaseNumberError     → caught by CaseService, never reaches HTTP
    └── DatabaseError                → 500 Internal Server Error

Business-rule rejections (duplicate case number, unknown actor on
create/update) are NOT exceptions at the service boundary: CaseService
returns them as message values and the routes turn them into
ValidationError responses.
"""

from typing import Any, Dict, Optional


class GestorExpedientesError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(GestorExpedientesError):
    """
    Raised when a request cannot be honoured as sent and the client can fix it.

    Used for business-rule rejections such as a duplicate case number.

    Example response:
        {
            "error": "validation_error",
            "message": "Ya existe un expediente con ese número creado por usted.",
            "details": {"field": "number"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationRequiredError(GestorExpedientesError):
    """Raised when the request carries no principal header."""

    def __init__(
        self,
        header: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["header"] = header
        super().__init__(
            message=f"Authentication required: missing '{header}' header",
            context=ctx,
        )
        self.header = header


class NotFoundError(GestorExpedientesError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; the service layer converts
    that None into this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ActorNotFoundError(NotFoundError):
    """
    Raised when the authenticated principal has no matching user record.

    Only list and search raise this; create and update report the same
    situation as a rejection message instead.
    """

    def __init__(
        self,
        username: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(resource="user", resource_id=username, context=context)
        self.username = username


class DuplicateCaseNumberError(GestorExpedientesError):
    """
    Raised by a CaseStore when saving would give one creator two cases
    with the same number.

    This is the storage-level counterpart of the pre-check in CaseService:
    two concurrent requests can both pass the pre-check, and the unique
    index then rejects the second write.
    """

    def __init__(
        self,
        number: str,
        creator_id: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["number"] = number
        if creator_id is not None:
            ctx["creator_id"] = creator_id
        super().__init__(
            message=f"Case number '{number}' already exists for this creator",
            context=ctx,
        )
        self.number = number
        self.creator_id = creator_id


class DatabaseError(GestorExpedientesError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
