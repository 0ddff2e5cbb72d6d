"""
Variant editing schemas: attribute types, variant records, the draft that
owns them, and the payload emitted on submission.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from pydantic import Field, field_validator, model_validator

from models.base import BaseSchema
from utils.price_utils import MAX_AMOUNT


class VariantOrigin(str, Enum):
    """How a variant record came to exist."""
    GENERATED = "generated"  # Full regeneration from attribute types
    MANUAL = "manual"        # "Add variant" button


class VariantField(str, Enum):
    """Scalar fields that can be edited one at a time."""
    PRICE_ADJUSTMENT = "price_adjustment"
    INVENTORY = "inventory"
    SKU = "sku"
    LABEL = "label"


# Attribute edits are addressed as "attributes.<type name>"
ATTRIBUTE_FIELD_PREFIX = "attributes."


def parse_attribute_values(raw: Union[str, list[str]]) -> list[str]:
    """
    Split comma-separated input into trimmed, non-empty values.

    "S, M, ,L" → ["S", "M", "L"]
    """
    parts = raw.split(",") if isinstance(raw, str) else raw
    return [part.strip() for part in parts if part and part.strip()]


class AttributeType(BaseSchema):
    """
    A named axis of variation (e.g. size) with its ordered allowed values.

    Names are stored lower-case so uniqueness is case-insensitive.
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Attribute name",
        examples=["size", "color"]
    )
    values: list[str] = Field(
        ...,
        min_length=1,
        description="Allowed values, in display order",
        examples=[["S", "M", "L"]]
    )

    @field_validator("name")
    @classmethod
    def name_lowercase(cls, v: str) -> str:
        """Name must be lower-case and trimmed."""
        return v.strip().lower()

    @field_validator("values", mode="before")
    @classmethod
    def split_values(cls, v: Any) -> Any:
        """Accept "S, M, L" as well as a list."""
        if isinstance(v, (str, list)):
            return parse_attribute_values(v)
        return v

    @field_validator("values")
    @classmethod
    def values_unique(cls, v: list[str]) -> list[str]:
        """Values must be unique within the type (case-insensitive)."""
        seen = set()
        for value in v:
            key = value.casefold()
            if key in seen:
                raise ValueError(f"Duplicate value '{value}'")
            seen.add(key)
        return v


def repeated_attribute_type_name(attribute_types: list[AttributeType]) -> Optional[str]:
    """First type name that appears twice, or None."""
    seen = set()
    for attribute_type in attribute_types:
        if attribute_type.name in seen:
            return attribute_type.name
        seen.add(attribute_type.name)
    return None


class VariantRecord(BaseSchema):
    """
    One sellable option as edited in the form.

    price_adjustment is relative to the draft's base price; the absolute
    price only exists in the submission payload.
    """

    variant_id: str = Field(
        default="",
        description="Stable identifier, empty until assigned"
    )
    label: str = Field(
        default="",
        description="Display label, derived from attributes when present"
    )
    price_adjustment: Decimal = Field(
        default=Decimal("0"),
        description="Signed offset from the base price"
    )
    inventory: int = Field(
        default=0,
        description="Units on hand (must be >= 0 to submit)"
    )
    sku: str = Field(
        default="",
        description="Optional SKU"
    )
    attributes: Optional[dict[str, str]] = Field(
        default=None,
        description="Attribute name → value, only in attribute-driven mode"
    )
    origin: VariantOrigin = Field(
        default=VariantOrigin.MANUAL,
        description="Generated from attribute types or added manually"
    )


class ProductDraft(BaseSchema):
    """
    The in-memory product being edited.

    Owned by a single editing session.
    """

    base_price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        le=MAX_AMOUNT,
        description="Product base price"
    )
    attribute_types: list[AttributeType] = Field(
        default_factory=list,
        description="Variation axes, in declaration order"
    )
    variants: list[VariantRecord] = Field(
        default_factory=list,
        description="Variant records, in display order"
    )

    @model_validator(mode="after")
    def attribute_type_names_unique(self) -> "ProductDraft":
        """Type names must be unique (stored lower-case, so case-insensitive)."""
        repeated = repeated_attribute_type_name(self.attribute_types)
        if repeated is not None:
            raise ValueError(f"Attribute type '{repeated}' is declared more than once")
        return self

    @property
    def attribute_driven(self) -> bool:
        """Variants are keyed by attribute tuple rather than label."""
        return len(self.attribute_types) > 0


class VariantSubmission(BaseSchema):
    """
    Variant as sent to the product API.

    Absolute price, required ID, no price_adjustment.
    """

    variant_id: str = Field(..., min_length=1, description="Variant identifier")
    label: str = Field(..., description="Display label")
    price: Decimal = Field(
        ...,
        ge=-MAX_AMOUNT,
        le=MAX_AMOUNT,
        description="Absolute price, rounded to cents"
    )
    inventory: int = Field(..., description="Units on hand")
    sku: str = Field(default="", description="SKU, empty when none")
    attributes: Optional[dict[str, str]] = Field(
        default=None,
        description="Attribute name → value"
    )


# ===================
# VALIDATION RESULTS
# ===================

class ValidationIssue(BaseSchema):
    """A field-scoped problem attached to one variant."""

    index: int = Field(..., description="Variant position")
    field: str = Field(..., description="Offending field, e.g. label or attributes.size")
    code: str = Field(..., description="Machine-readable code")
    message: str = Field(..., description="Message shown beneath the input")


class DuplicateReport(BaseSchema):
    """Duplicate keys across the variant collection."""

    duplicate_keys: list[str] = Field(default_factory=list)
    indices: set[int] = Field(default_factory=set)
    groups: dict[str, list[int]] = Field(default_factory=dict)

    @property
    def has_duplicates(self) -> bool:
        return len(self.duplicate_keys) > 0


class ValidationReport(BaseSchema):
    """Everything that blocks submission."""

    issues: list[ValidationIssue] = Field(default_factory=list)
    duplicates: DuplicateReport = Field(default_factory=DuplicateReport)

    @property
    def is_valid(self) -> bool:
        return not self.issues


class PriceRow(BaseSchema):
    """Displayed price for one variant."""

    index: int
    label: str
    price_adjustment: Decimal
    price: Decimal
    adjustment_display: str = ""
