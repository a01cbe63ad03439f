"""
Ecoleta Backend — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the error kinds the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) turn them into
       JSON error responses with the right HTTP status code.
Who:   Raised by services and routes; caught by the global handlers.

Exception Hierarchy:
    EcoletaError (base)
    ├── ValidationError    → 400 Bad Request (aggregated field errors)
    ├── NotFoundError      → 400 Bad Request (the API has always answered
    │                               "Location not found" with 400, clients
    │                               depend on it)
    ├── FileStorageError   → 500 Internal Server Error
    └── DatabaseError      → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional


class EcoletaError(Exception):
    """
    Base exception for all Ecoleta application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where the
                  handler chooses to)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(EcoletaError):
    """
    Raised when client input fails validation.

    Field problems are collected into ``errors`` so the client sees every
    violation at once, in the same shape FastAPI body validation produces:

        {
            "error": "validation_error",
            "message": "Validation failed",
            "details": {"errors": [{"field": "uf", "message": "..."}]}
        }
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        collected = list(errors or [])
        if field and not collected:
            collected.append({"field": field, "message": message})
        if collected:
            ctx["errors"] = collected
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = collected


class NotFoundError(EcoletaError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; the service layer converts
    that None into this exception so routes stay free of status-code logic.
    Message format is "<Resource> not found", e.g. "Location not found".
    """

    status_code = 400
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class FileStorageError(EcoletaError):
    """
    Raised when writing or reading an uploaded file fails.

    Disk full, permission denied, upload directory not writable. The client
    gets a generic message; the OS error and path are logged only.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(EcoletaError):
    """
    Raised when a database operation fails unexpectedly.

    Covers failed transactions (constraint violations, lost connections).
    The transaction has already been rolled back when this is raised.
    The response message is always generic; SQL and constraint names are
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
