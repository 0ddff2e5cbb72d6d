"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.variant import (
    ATTRIBUTE_FIELD_PREFIX,
    AttributeType,
    DuplicateReport,
    PriceRow,
    ProductDraft,
    ValidationIssue,
    ValidationReport,
    VariantField,
    VariantOrigin,
    VariantRecord,
    VariantSubmission,
    parse_attribute_values,
    repeated_attribute_type_name,
)
from models.variant_draft import (
    AttributeTypeCreate,
    BasePriceResponse,
    BasePriceUpdate,
    CommitLabelResponse,
    DraftSessionCreate,
    DraftSessionResponse,
    FieldUpdateResponse,
    GenerateResponse,
    SubmissionResponse,
    VariantFieldUpdate,
)

__all__ = [
    # Base
    "BaseSchema",

    # Variant
    "ATTRIBUTE_FIELD_PREFIX",
    "AttributeType",
    "DuplicateReport",
    "PriceRow",
    "ProductDraft",
    "ValidationIssue",
    "ValidationReport",
    "VariantField",
    "VariantOrigin",
    "VariantRecord",
    "VariantSubmission",
    "parse_attribute_values",
    "repeated_attribute_type_name",

    # Variant draft API
    "AttributeTypeCreate",
    "BasePriceResponse",
    "BasePriceUpdate",
    "CommitLabelResponse",
    "DraftSessionCreate",
    "DraftSessionResponse",
    "FieldUpdateResponse",
    "GenerateResponse",
    "SubmissionResponse",
    "VariantFieldUpdate",
]
