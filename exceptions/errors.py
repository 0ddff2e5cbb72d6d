"""
Custom exception classes for the application.

Field-scoped problems (missing label, negative inventory, duplicate keys)
are reported as ValidationIssue results, not raised. Exceptions here cover
action-level failures: a generation that would exceed the cap, a malformed
attribute type, an unknown session or index.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "VARIANT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class DuplicateError(ConflictError):
    """Duplicate resource (409)."""

    def __init__(
        self,
        resource: str,
        field: str,
        value: str
    ):
        super().__init__(
            code=f"{resource.upper()}_{field.upper()}_EXISTS",
            message=f"{resource} with this {field} already exists",
            details={field: value}
        )


# ===================
# ATTRIBUTE TYPE ERRORS
# ===================

class InvalidAttributeTypeError(ValidationError):
    """Attribute type definition is malformed."""

    def __init__(self, reason: str, name: Optional[str] = None):
        super().__init__(
            code="ATTRIBUTE_TYPE_INVALID",
            message=reason,
            details={"name": name}
        )


class AttributeTypeExistsError(DuplicateError):
    """Attribute type name already declared (case-insensitive)."""

    def __init__(self, name: str):
        super().__init__(
            resource="Attribute type",
            field="name",
            value=name
        )
        self.code = "ATTRIBUTE_TYPE_EXISTS"


class AttributeTypeNotFoundError(NotFoundError):
    """No attribute type at the given position."""

    def __init__(self, index: int):
        super().__init__(
            resource="Attribute type",
            identifier=str(index),
            code="ATTRIBUTE_TYPE_NOT_FOUND"
        )


# ===================
# VARIANT ERRORS
# ===================

class VariantNotFoundError(NotFoundError):
    """No variant at the given position."""

    def __init__(self, index: int):
        super().__init__(
            resource="Variant",
            identifier=str(index),
            code="VARIANT_NOT_FOUND"
        )


class GenerationLimitExceededError(ValidationError):
    """Requested combination count is above the configured cap."""

    def __init__(self, requested: int, cap: int):
        super().__init__(
            code="GENERATION_LIMIT_EXCEEDED",
            message=f"Generating {requested} variants exceeds the limit of {cap}",
            details={"requested": requested, "cap": cap}
        )
        self.requested = requested
        self.cap = cap


class VariantSubmissionBlockedError(ValidationError):
    """Submission refused because the draft has validation issues."""

    def __init__(self, issues: list[dict], duplicate_keys: Optional[list[str]] = None):
        super().__init__(
            code="VARIANT_SUBMISSION_BLOCKED",
            message=f"Submission blocked by {len(issues)} validation issues",
            details={"issues": issues, "duplicate_keys": duplicate_keys or []}
        )


# ===================
# SESSION ERRORS
# ===================

class DraftSessionNotFoundError(NotFoundError):
    """Editing session unknown or expired."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Draft session",
            identifier=session_id,
            code="DRAFT_SESSION_NOT_FOUND"
        )
