"""
Repair Shop Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the different failure classes.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the right status code.
Who:   Raised by the validation layer and services; caught by global handlers.

Exception Hierarchy:
    RepairShopError (base)
    ├── ValidationError     → 400 Bad Request (field rules, file checks)
    ├── ConflictError       → 400 Bad Request (email/username/phone taken)
    ├── NotFoundError       → 404 Not Found
    ├── FileStorageError    → 500 Internal Server Error
    └── DatabaseError       → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional


class RepairShopError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; returned only where the
                  handler says so)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RepairShopError):
    """
    Raised when client input fails validation.

    Carries the ordered list of violations, one ``{"field", "message"}`` pair
    per failed rule. A single-field error (e.g. an uploaded file of the wrong
    type) can be raised with ``field=`` and becomes a one-item list.

    HTTP: 400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Validation failed",
            "errors": [
                {"field": "firstName", "message": "First name is mandatory"},
                {"field": "email", "message": "Invalid email format"}
            ],
            "request_id": "1a2b3c4d"
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[List[Dict[str, str]]] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.field = field
        self.errors = list(errors or [])
        if field and not self.errors:
            self.errors.append({"field": field, "message": message})


class ConflictError(RepairShopError):
    """
    Raised when a natural key is already taken by a stored row.

    When:    Email, username or phone number collides with existing data.
    HTTP:    400 Bad Request (the original API contract; not 409)
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        if value is not None:
            ctx["value"] = value
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(RepairShopError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into
    this exception so routes never check for None themselves.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)


class FileStorageError(RepairShopError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(RepairShopError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, constraint violation, deadlock, etc.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the driver error
    is kept in ``context`` and logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
