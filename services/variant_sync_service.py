"""
Variant synchronizer: the operations that change a draft's variants.

Every operation takes the ProductDraft it works on; the service itself
holds no draft state. Attribute mutations are followed by a synchronous
label reconciliation pass.

Field edits never raise for bad input. They return ValidationIssue
results; values that cannot be stored (not a number, not a declared
attribute value) are rejected and the record is left unchanged. Values
that can be stored but block submission (empty label, negative inventory)
are applied and reported.

Regeneration is destructive: it discards every existing variant,
including IDs, SKUs and inventory of variants whose attribute tuple is
unchanged.
"""

from decimal import InvalidOperation
from typing import Any, Iterable, Optional, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from exceptions import (
    AttributeTypeExistsError,
    AttributeTypeNotFoundError,
    InvalidAttributeTypeError,
    VariantNotFoundError,
)
from models.variant import (
    ATTRIBUTE_FIELD_PREFIX,
    AttributeType,
    ProductDraft,
    ValidationIssue,
    ValidationReport,
    VariantField,
    VariantOrigin,
    VariantRecord,
    VariantSubmission,
)
from services.combination_service import generate_combinations
from services.label_service import derive_label, reconcile_labels
from services.price_service import adjustment_from_price, displayed_price
from services.uniqueness_service import find_duplicates
from services.variant_id_service import generate_variant_id, generate_variant_ids
from utils.price_utils import Money, to_decimal
from utils.text_utils import normalize_label

logger = structlog.get_logger(__name__)


def _issue(index: int, field: str, code: str, message: str) -> ValidationIssue:
    return ValidationIssue(index=index, field=field, code=code, message=message)


def _parse_inventory(value: Any) -> Optional[int]:
    """Whole number from form input, or None if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


class VariantSynchronizer:
    """
    Variant collection business logic.

    Handles attribute types, regeneration, manual variants, single-field
    edits, ID assignment and the submission transform.
    """

    # ===================
    # LOOKUPS
    # ===================

    @staticmethod
    def _get_variant(draft: ProductDraft, index: int) -> VariantRecord:
        if index < 0 or index >= len(draft.variants):
            raise VariantNotFoundError(index)
        return draft.variants[index]

    # ===================
    # ATTRIBUTE TYPES
    # ===================

    def add_attribute_type(
        self,
        draft: ProductDraft,
        name: str,
        values: Union[str, list[str]]
    ) -> AttributeType:
        """
        Declare a new attribute type.

        Args:
            draft: Draft to update
            name: Type name, stored lower-case
            values: Allowed values, list or comma-separated string

        Returns:
            The stored AttributeType

        Raises:
            InvalidAttributeTypeError: Empty name, no values, or duplicate values
            AttributeTypeExistsError: Name already declared
        """
        try:
            attribute_type = AttributeType(name=name, values=values)
        except PydanticValidationError as e:
            first = e.errors()[0]
            raise InvalidAttributeTypeError(first["msg"], name=name)

        if any(t.name == attribute_type.name for t in draft.attribute_types):
            raise AttributeTypeExistsError(attribute_type.name)

        draft.attribute_types.append(attribute_type)

        # Existing variants join attribute-driven mode with nothing selected
        for variant in draft.variants:
            if variant.attributes is None:
                variant.attributes = {}

        reconcile_labels(draft)

        logger.info(
            "attribute_type_added",
            name=attribute_type.name,
            value_count=len(attribute_type.values),
        )
        return attribute_type

    def remove_attribute_type(self, draft: ProductDraft, index: int) -> AttributeType:
        """
        Remove an attribute type and its key from every variant.

        Raises:
            AttributeTypeNotFoundError: If index is out of range
        """
        if index < 0 or index >= len(draft.attribute_types):
            raise AttributeTypeNotFoundError(index)

        removed = draft.attribute_types.pop(index)

        for variant in draft.variants:
            if variant.attributes is None:
                continue
            if draft.attribute_driven:
                variant.attributes = {
                    name: value
                    for name, value in variant.attributes.items()
                    if name != removed.name
                }
            else:
                variant.attributes = None

        reconcile_labels(draft)

        logger.info("attribute_type_removed", name=removed.name)
        return removed

    # ===================
    # COLLECTION
    # ===================

    def regenerate(self, draft: ProductDraft, cap: Optional[int] = None) -> int:
        """
        Replace all variants with one fresh record per combination.

        Nothing is changed if generation fails.

        Returns:
            Number of variants generated

        Raises:
            GenerationLimitExceededError: If the combination count exceeds the cap
        """
        combinations = generate_combinations(draft.attribute_types, cap=cap)
        discarded = len(draft.variants)

        draft.variants = [
            VariantRecord(
                label=derive_label(attributes, draft.attribute_types),
                attributes=attributes,
                origin=VariantOrigin.GENERATED,
            )
            for attributes in combinations
        ]

        logger.info(
            "variants_regenerated",
            count=len(draft.variants),
            discarded=discarded,
        )
        return len(draft.variants)

    def add_manual(self, draft: ProductDraft) -> int:
        """
        Append a blank variant.

        The ID stays empty until a label is committed.

        Returns:
            Index of the new variant
        """
        variant = VariantRecord(
            attributes={} if draft.attribute_driven else None,
            origin=VariantOrigin.MANUAL,
        )
        draft.variants.append(variant)
        return len(draft.variants) - 1

    def remove(self, draft: ProductDraft, index: int) -> VariantRecord:
        """
        Delete a variant.

        Raises:
            VariantNotFoundError: If index is out of range
        """
        self._get_variant(draft, index)
        removed = draft.variants.pop(index)
        logger.debug("variant_removed", index=index, variant_id=removed.variant_id)
        return removed

    # ===================
    # FIELD EDITS
    # ===================

    def update_field(
        self,
        draft: ProductDraft,
        index: int,
        field: str,
        value: Any
    ) -> list[ValidationIssue]:
        """
        Change one field of one variant.

        Args:
            draft: Draft to update
            index: Variant position
            field: price_adjustment, inventory, sku, label, or attributes.<type>
            value: New value as entered

        Returns:
            Issues for this field (empty if the value is fine)

        Raises:
            VariantNotFoundError: If index is out of range
        """
        if isinstance(field, VariantField):
            field = field.value
        variant = self._get_variant(draft, index)

        if field.startswith(ATTRIBUTE_FIELD_PREFIX):
            return self._update_attribute(
                draft, index, variant, field[len(ATTRIBUTE_FIELD_PREFIX):], value
            )

        if field == VariantField.PRICE_ADJUSTMENT.value:
            try:
                variant.price_adjustment = to_decimal(0 if value is None else value)
            except (InvalidOperation, TypeError):
                return [_issue(index, field, "INVALID_NUMBER", "Price adjustment must be a number")]
            return []

        if field == VariantField.INVENTORY.value:
            inventory = _parse_inventory(0 if value is None else value)
            if inventory is None:
                return [_issue(index, field, "INVALID_INTEGER", "Inventory must be a whole number")]
            variant.inventory = inventory
            if inventory < 0:
                return [_issue(index, field, "NEGATIVE_INVENTORY", "Inventory cannot be negative")]
            return []

        if field == VariantField.SKU.value:
            variant.sku = "" if value is None else str(value)
            return []

        if field == VariantField.LABEL.value:
            if variant.attributes:
                return [_issue(index, field, "LABEL_READ_ONLY", "Label is generated from attributes")]
            variant.label = "" if value is None else str(value)
            if normalize_label(variant.label) is None:
                return [_issue(index, field, "LABEL_REQUIRED", "Variant label is required")]
            return []

        return [_issue(index, field, "UNKNOWN_FIELD", f"Unknown variant field '{field}'")]

    def _update_attribute(
        self,
        draft: ProductDraft,
        index: int,
        variant: VariantRecord,
        name: str,
        value: Any
    ) -> list[ValidationIssue]:
        field = f"{ATTRIBUTE_FIELD_PREFIX}{name}"
        attribute_type = next((t for t in draft.attribute_types if t.name == name.lower()), None)
        if attribute_type is None:
            return [_issue(index, field, "UNKNOWN_ATTRIBUTE", f"Unknown attribute '{name}'")]

        selected = "" if value is None else str(value).strip()
        attributes = dict(variant.attributes or {})

        if not selected:
            attributes.pop(attribute_type.name, None)
        elif variant.origin == VariantOrigin.GENERATED and selected not in attribute_type.values:
            return [_issue(
                index,
                field,
                "INVALID_ATTRIBUTE_VALUE",
                f"'{selected}' is not a declared {attribute_type.name}",
            )]
        else:
            attributes[attribute_type.name] = selected

        variant.attributes = attributes
        reconcile_labels(draft)
        return []

    def commit_label(self, draft: ProductDraft, index: int) -> Optional[str]:
        """
        Label field lost focus: assign an ID if the variant has none.

        Runs at most once per variant. Later label edits keep the first ID.

        Returns:
            The newly assigned ID, or None if nothing was assigned
        """
        variant = self._get_variant(draft, index)
        label = variant.label.strip()

        if variant.variant_id or not label:
            return None

        variant.variant_id = generate_variant_id(label)
        logger.info("variant_id_assigned", index=index, variant_id=variant.variant_id)
        return variant.variant_id

    # ===================
    # VALIDATION
    # ===================

    def validate(self, draft: ProductDraft) -> ValidationReport:
        """
        Collect everything that blocks submission.

        Checks the current collection, not the debounced snapshot.
        """
        issues: list[ValidationIssue] = []

        for index, variant in enumerate(draft.variants):
            if normalize_label(variant.label) is None:
                issues.append(_issue(index, "label", "LABEL_REQUIRED", "Variant label is required"))
            if variant.inventory < 0:
                issues.append(_issue(index, "inventory", "NEGATIVE_INVENTORY", "Inventory cannot be negative"))

        duplicates = find_duplicates(draft.variants, draft.attribute_types)
        if draft.attribute_driven:
            field, message = "attributes", "Attribute combination must be unique"
        else:
            field, message = "label", "Variant labels must be unique"
        for index in sorted(duplicates.indices):
            issues.append(_issue(index, field, "DUPLICATE_VARIANT", message))

        return ValidationReport(issues=issues, duplicates=duplicates)

    # ===================
    # SUBMISSION
    # ===================

    def assign_missing_ids(self, draft: ProductDraft) -> int:
        """Give every variant without an ID one, distinct from existing IDs."""
        missing = [i for i, v in enumerate(draft.variants) if not v.variant_id]
        if not missing:
            return 0

        reserved = [v.variant_id for v in draft.variants if v.variant_id]
        generated = generate_variant_ids(
            (draft.variants[i].label for i in missing),
            reserved=reserved,
        )
        for position, index in enumerate(missing):
            draft.variants[index].variant_id = generated[position]

        logger.info("variant_ids_assigned_for_submission", count=len(missing))
        return len(missing)

    def transform_for_submission(
        self,
        draft: ProductDraft,
        base_price: Optional[Money] = None
    ) -> list[VariantSubmission]:
        """
        Build the payload for the product API.

        Absolute price = round_to_cents(base_price + price_adjustment);
        price_adjustment itself is not emitted. Missing IDs are generated
        and stored on the draft, so calling this twice yields the same
        output.

        Args:
            draft: Draft to transform
            base_price: Defaults to draft.base_price

        Returns:
            One VariantSubmission per variant, in order
        """
        base = draft.base_price if base_price is None else to_decimal(base_price)
        self.assign_missing_ids(draft)

        return [
            VariantSubmission(
                variant_id=variant.variant_id,
                label=variant.label,
                price=displayed_price(base, variant.price_adjustment),
                inventory=variant.inventory,
                sku=variant.sku,
                attributes=dict(variant.attributes) if variant.attributes else None,
            )
            for variant in draft.variants
        ]

    def load_from_submission(
        self,
        draft: ProductDraft,
        submissions: Iterable[VariantSubmission],
        base_price: Optional[Money] = None
    ) -> int:
        """
        Replace the draft's variants with stored ones for editing.

        Absolute prices become deltas from the base price.

        Returns:
            Number of variants loaded
        """
        base = draft.base_price if base_price is None else to_decimal(base_price)
        variants = []

        for submission in submissions:
            attributes = dict(submission.attributes) if submission.attributes else None
            if draft.attribute_driven and attributes is None:
                attributes = {}
            variants.append(VariantRecord(
                variant_id=submission.variant_id,
                label=submission.label,
                price_adjustment=adjustment_from_price(submission.price, base),
                inventory=submission.inventory,
                sku=submission.sku,
                attributes=attributes,
                origin=VariantOrigin.GENERATED if attributes else VariantOrigin.MANUAL,
            ))

        draft.variants = variants
        reconcile_labels(draft)

        logger.info("variants_loaded", count=len(variants))
        return len(variants)


# Singleton instance
_variant_sync_service: Optional[VariantSynchronizer] = None


def get_variant_sync_service() -> VariantSynchronizer:
    """Get or create VariantSynchronizer instance."""
    global _variant_sync_service
    if _variant_sync_service is None:
        _variant_sync_service = VariantSynchronizer()
    return _variant_sync_service
