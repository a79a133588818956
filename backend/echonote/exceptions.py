"""
EchoNote Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions, one per error category the API exposes.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers registered in main.py turn them into JSON
       ``{"error": message, "code": ..., "request_id": ...}`` responses.
Who:   Raised by services and the auth gate; caught by the global handlers.

Exception Hierarchy:
    EchoNoteError (base)                → 500
    ├── ValidationError                 → 400 Bad Request
    │   ├── ConflictError               → 400 (duplicate email)
    │   └── InvalidCredentialsError     → 400 (unknown email / wrong password)
    ├── AuthenticationError             → 401 Unauthorized (no bearer token)
    ├── InvalidTokenError               → 403 Forbidden (bad or expired token)
    ├── NotFoundError                   → 404 Not Found (also ownership mismatch)
    ├── DatabaseError                   → 500 Internal Server Error
    ├── AIGenerationError               → 500 Internal Server Error
    └── AIServiceUnavailableError       → 503 Service Unavailable
"""

from typing import Any, Dict, Optional


class EchoNoteError(Exception):
    """
    Base exception for all EchoNote application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(EchoNoteError):
    """
    Raised when client input fails validation.

    Covers business-rule checks that Pydantic cannot express (blank titles,
    oversized uploads, wrong content type). Schema-level failures detected by
    FastAPI are also answered with 400, see main.py.
    """

    status_code = 400
    code = "validation_error"

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


class ConflictError(ValidationError):
    """Raised on signup when the email is already registered."""

    code = "conflict"

    def __init__(self, message: str = "Email already exists", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, field="email", context=context)


class InvalidCredentialsError(ValidationError):
    """Raised on login for an unknown email or a password mismatch."""

    code = "invalid_credentials"

    def __init__(self, message: str = "Invalid credentials", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class AuthenticationError(EchoNoteError):
    """
    Raised when a protected route is called without a bearer token.

    Also used on routes that re-resolve the user record (dashboard), both
    for a bad or expired token and for a user that no longer exists.
    """

    status_code = 401
    code = "unauthenticated"

    def __init__(self, message: str = "No token", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class InvalidTokenError(EchoNoteError):
    """
    Raised when a bearer token is present but fails verification.

    Distinct from AuthenticationError so clients can tell "log in first"
    apart from "your session is no longer valid".
    """

    status_code = 403
    code = "invalid_token"

    def __init__(self, message: str = "Invalid token", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class NotFoundError(EchoNoteError):
    """
    Raised when a requested resource does not exist.

    Notes owned by another user are reported through this error too, with
    the same message, so a caller cannot probe for other users' note ids.
    """

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(EchoNoteError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the context
    (operation, original exception type) is logged server-side only.
    """

    status_code = 500
    code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AIGenerationError(EchoNoteError):
    """Raised when the generative model call fails for any reason."""

    status_code = 500
    code = "ai_generation_failed"

    def __init__(
        self,
        message: str = "AI generation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AIServiceUnavailableError(EchoNoteError):
    """Raised when no AI provider credential is configured."""

    status_code = 503
    code = "ai_service_unavailable"

    def __init__(
        self,
        message: str = "AI service is not configured",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
