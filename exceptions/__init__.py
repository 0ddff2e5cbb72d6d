"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DuplicateError,

    # Attribute types
    InvalidAttributeTypeError,
    AttributeTypeExistsError,
    AttributeTypeNotFoundError,

    # Variants
    VariantNotFoundError,
    GenerationLimitExceededError,
    VariantSubmissionBlockedError,

    # Sessions
    DraftSessionNotFoundError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DuplicateError",

    # Attribute types
    "InvalidAttributeTypeError",
    "AttributeTypeExistsError",
    "AttributeTypeNotFoundError",

    # Variants
    "VariantNotFoundError",
    "GenerationLimitExceededError",
    "VariantSubmissionBlockedError",

    # Sessions
    "DraftSessionNotFoundError",
]
