"""
Test data factories.

Uses factory pattern to generate consistent test data.
"""

from decimal import Decimal
from typing import Optional

from models.variant import (
    AttributeType,
    ProductDraft,
    VariantOrigin,
    VariantRecord,
    VariantSubmission,
)


class AttributeTypeFactory:
    """
    Factory for AttributeType.

    Usage:
        size = AttributeTypeFactory.create()
        color = AttributeTypeFactory.create(name="color", values=["Red", "Blue"])
        wide = AttributeTypeFactory.create(cardinality=7)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        name: Optional[str] = None,
        values: Optional[list[str]] = None,
        cardinality: int = 3
    ) -> AttributeType:
        counter = cls._next_counter()
        return AttributeType(
            name=name or f"attribute{counter}",
            values=values or [f"v{counter}-{i}" for i in range(cardinality)],
        )


class VariantFactory:
    """
    Factory for VariantRecord.

    Usage:
        variant = VariantFactory.create(label="Large")
        generated = VariantFactory.create_generated({"size": "S"})
        variants = VariantFactory.create_batch(5)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        label: Optional[str] = None,
        variant_id: str = "",
        price_adjustment: Decimal = Decimal("0"),
        inventory: int = 0,
        sku: str = "",
        attributes: Optional[dict] = None,
        origin: VariantOrigin = VariantOrigin.MANUAL
    ) -> VariantRecord:
        counter = cls._next_counter()
        return VariantRecord(
            variant_id=variant_id,
            label=f"Variant {counter}" if label is None else label,
            price_adjustment=price_adjustment,
            inventory=inventory,
            sku=sku,
            attributes=attributes,
            origin=origin,
        )

    @classmethod
    def create_generated(cls, attributes: dict, label: str = "", **overrides) -> VariantRecord:
        return cls.create(
            label=label,
            attributes=attributes,
            origin=VariantOrigin.GENERATED,
            **overrides,
        )

    @classmethod
    def create_batch(cls, count: int, **overrides) -> list[VariantRecord]:
        return [cls.create(**overrides) for _ in range(count)]


class SubmissionFactory:
    """Factory for stored VariantSubmission payloads."""

    @classmethod
    def create(
        cls,
        variant_id: str = "stored-id",
        label: str = "Large",
        price: Decimal = Decimal("120"),
        inventory: int = 5,
        sku: str = "SKU-L",
        attributes: Optional[dict] = None
    ) -> VariantSubmission:
        return VariantSubmission(
            variant_id=variant_id,
            label=label,
            price=price,
            inventory=inventory,
            sku=sku,
            attributes=attributes,
        )


def manual_draft(*labels: str, base_price: Decimal = Decimal("100")) -> ProductDraft:
    """Draft in manual mode with one variant per label."""
    return ProductDraft(
        base_price=base_price,
        variants=[VariantFactory.create(label=label) for label in labels],
    )
