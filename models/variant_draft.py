"""
Request and response schemas for the variant editing API.
"""

from decimal import Decimal
from typing import Any, Union

from pydantic import Field

from models.base import BaseSchema
from utils.price_utils import MAX_AMOUNT
from models.variant import (
    AttributeType,
    DuplicateReport,
    PriceRow,
    ProductDraft,
    ValidationIssue,
    VariantSubmission,
)


class DraftSessionCreate(BaseSchema):
    """
    Open an editing session.

    Pass the stored product's attribute types and variants to edit an
    existing product; omit them to start blank.
    """

    base_price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        le=MAX_AMOUNT,
        description="Product base price"
    )
    attribute_types: list[AttributeType] = Field(
        default_factory=list,
        description="Stored attribute types"
    )
    variants: list[VariantSubmission] = Field(
        default_factory=list,
        description="Stored variants with absolute prices"
    )


class AttributeTypeCreate(BaseSchema):
    """Add an attribute type. Values may be a list or "S, M, L"."""

    name: str = Field(..., description="Attribute name", examples=["size"])
    values: Union[list[str], str] = Field(..., description="Allowed values")


class BasePriceUpdate(BaseSchema):
    """Change the base price."""

    base_price: Decimal = Field(..., ge=0, le=MAX_AMOUNT, description="New base price")


class VariantFieldUpdate(BaseSchema):
    """Edit one field of one variant."""

    field: str = Field(
        ...,
        min_length=1,
        description="price_adjustment, inventory, sku, label, or attributes.<type>",
        examples=["inventory", "attributes.size"]
    )
    value: Any = Field(None, description="New value as entered")


class DraftSessionResponse(BaseSchema):
    """Full editor state."""

    session_id: str
    draft: ProductDraft
    prices: list[PriceRow]
    duplicates: DuplicateReport


class FieldUpdateResponse(BaseSchema):
    """Result of a single-field edit."""

    issues: list[ValidationIssue]
    variant_label: str
    variant_id: str = ""


class CommitLabelResponse(BaseSchema):
    """Result of committing a label (blur)."""

    variant_id: str
    assigned: bool


class GenerateResponse(BaseSchema):
    """Result of a full regeneration."""

    count: int
    prices: list[PriceRow]


class BasePriceResponse(BaseSchema):
    """Result of a base price change."""

    rebased: bool
    prices: list[PriceRow]


class SubmissionResponse(BaseSchema):
    """Payload for the product API."""

    base_price: Decimal
    variants: list[VariantSubmission]
