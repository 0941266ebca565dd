"""
TripDesk Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions, one per failure kind.
How:   Each exception carries a client-safe message and an optional context
       dict. Handlers registered in main.py turn them into a status code and
       a `{"message": ...}` body; context is logged, never returned.

Exception Hierarchy:
    TripDeskError (base)
    ├── ValidationError              → 400 Bad Request
    ├── AuthError                    → 401 Unauthorized
    │   ├── UnauthorizedError        (no valid session on a gated route)
    │   └── InvalidCredentialsError  (login rejected)
    ├── NotFoundError                → 404 Not Found
    ├── PasswordHashError            → 500 Internal Server Error
    └── DatabaseError                → 500 Internal Server Error
        └── DuplicateUsernameError   (unique violation on admins.username)
"""

from typing import Any, Dict, Optional


class TripDeskError(Exception):
    """
    Base exception for all TripDesk application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TripDeskError):
    """
    Raised when client input fails validation.

    Always raised before any storage access. The message is the first
    failing rule's message and is returned to the client verbatim.
    """

    status_code = 400

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


class AuthError(TripDeskError):
    """
    Raised for missing/invalid sessions or credentials.

    The message never depends on the root cause: an unknown username and a
    wrong password produce the same response.
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedError(AuthError):
    """No valid admin session is attached to the request."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Unauthorized", context=context)


class InvalidCredentialsError(AuthError):
    """Username/password pair rejected by login."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid credentials.", context=context)


class NotFoundError(TripDeskError):
    """
    Raised when an operation addresses a nonexistent registration.

    Derived from an empty lookup or a zero affected-row count; storage
    exceptions never become a NotFoundError.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message="Not found.", context=ctx)


class PasswordHashError(TripDeskError):
    """The hashing primitive failed (for example a malformed stored hash)."""

    def __init__(
        self,
        message: str = "Login failed.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(TripDeskError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. Driver errors,
        SQL text and constraint names stay in `context` and the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicateUsernameError(DatabaseError):
    """insert_admin hit the unique constraint on admins.username."""

    def __init__(self, username: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["username"] = username
        super().__init__(message="Admin username already exists.", context=ctx)
        self.username = username
