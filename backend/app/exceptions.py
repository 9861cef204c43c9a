"""
ProgressLog Backend — Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions for the few error kinds the API knows.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return JSON error responses with the matching HTTP status code.
Who:   Raised by services and built from FastAPI request validation
       errors; caught by global handlers.

Exception Hierarchy:
    ProgressLogError (base)      → 500 Internal Server Error
    ├── ValidationError          → 400 Bad Request
    └── DatabaseError            → 500 Internal Server Error

Error body shape (all handlers):
    {
        "error": "<human readable message>",
        "code": "validation_error" | "database_error" | "internal_error",
        "request_id": "a1b2c3d4"
    }

Update, delete and like never raise for a missing id; the API has no
not-found kind.
"""

from typing import Any, Dict, List, Optional, Sequence


class ProgressLogError(Exception):
    """
    Base exception for all ProgressLog application errors.

    Attributes:
        message:  Error description returned in the API response
        context:  Additional debug info (logged, not returned)
    """

    code = "internal_error"
    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ProgressLogError):
    """
    Raised when client input cannot be turned into a record payload.

    HTTP: 400 Bad Request

    Example response:
        {
            "error": "score: Input should be a valid integer",
            "code": "validation_error",
            "details": {"errors": [...]}
        }
    """

    code = "validation_error"
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

    @classmethod
    def from_errors(cls, errors: Sequence[Dict[str, Any]]) -> "ValidationError":
        """
        Build one ValidationError from FastAPI's request validation errors.

        The message joins "field: reason" pairs; details keep loc/msg/type of
        each error, dropping `input` and `ctx`, which may not be JSON-safe.
        """
        details: List[Dict[str, Any]] = []
        parts: List[str] = []
        for err in errors:
            loc = [str(p) for p in err.get("loc", ()) if p != "body"]
            field = ".".join(loc)
            msg = err.get("msg", "invalid value")
            parts.append(f"{field}: {msg}" if field else msg)
            details.append({"loc": loc, "msg": msg, "type": err.get("type", "")})

        first_field = ".".join(details[0]["loc"]) if details else None
        return cls(
            message="; ".join(parts) or "Validation failed",
            field=first_field or None,
            context={"errors": details},
        )


class DatabaseError(ProgressLogError):
    """
    Raised when a database statement fails.

    HTTP: 500 Internal Server Error

    The message is the driver's own error text, passed through unchanged so
    operators can read it straight from the response body.
    """

    code = "database_error"
    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

    @classmethod
    def wrap(cls, exc: BaseException, operation: str) -> "DatabaseError":
        """Build a DatabaseError from a driver exception, keeping its message."""
        # SQLAlchemy DBAPIError exposes the driver exception as `.orig`
        original = getattr(exc, "orig", None) or exc
        return cls(
            message=str(original),
            context={"operation": operation, "error_type": type(exc).__name__},
        )
