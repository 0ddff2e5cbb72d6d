"""
Unit tests for the variant synchronizer.

Tests attribute type management, regeneration, manual variants, field
edits, ID assignment and the submission transform.
"""

import re
import pytest
from decimal import Decimal

from exceptions import (
    AttributeTypeExistsError,
    AttributeTypeNotFoundError,
    GenerationLimitExceededError,
    InvalidAttributeTypeError,
    VariantNotFoundError,
)
from models.variant import AttributeType, ProductDraft, VariantField, VariantOrigin
from services.variant_sync_service import VariantSynchronizer, get_variant_sync_service
from tests.factories import SubmissionFactory, VariantFactory, manual_draft


def _codes(issues):
    return [issue.code for issue in issues]


# ===================
# ATTRIBUTE TYPE TESTS
# ===================

class TestAddAttributeType:
    """Tests for add_attribute_type."""

    def test_name_lowercased_and_values_split(self, synchronizer, empty_draft):
        attribute_type = synchronizer.add_attribute_type(empty_draft, "  Size ", "S, M, ,L")

        assert attribute_type.name == "size"
        assert attribute_type.values == ["S", "M", "L"]
        assert empty_draft.attribute_types == [attribute_type]

    def test_duplicate_name_rejected(self, synchronizer, empty_draft):
        synchronizer.add_attribute_type(empty_draft, "size", ["S"])

        with pytest.raises(AttributeTypeExistsError) as exc_info:
            synchronizer.add_attribute_type(empty_draft, "SIZE", ["M"])

        assert exc_info.value.code == "ATTRIBUTE_TYPE_EXISTS"
        assert len(empty_draft.attribute_types) == 1

    @pytest.mark.parametrize("name,values", [
        ("", ["S"]),
        ("   ", ["S"]),
        ("size", []),
        ("size", " , "),
        ("size", ["S", "s"]),
    ])
    def test_malformed_type_rejected(self, synchronizer, empty_draft, name, values):
        with pytest.raises(InvalidAttributeTypeError) as exc_info:
            synchronizer.add_attribute_type(empty_draft, name, values)

        assert exc_info.value.code == "ATTRIBUTE_TYPE_INVALID"
        assert empty_draft.attribute_types == []

    def test_existing_manual_variants_join_attribute_mode(self, synchronizer):
        draft = manual_draft("Large")

        synchronizer.add_attribute_type(draft, "size", ["S", "M"])

        assert draft.variants[0].attributes == {}
        assert draft.variants[0].label == "Large"


class TestRemoveAttributeType:
    """Tests for remove_attribute_type."""

    def test_key_removed_and_labels_reconciled(self, synchronizer, generated_draft):
        removed = synchronizer.remove_attribute_type(generated_draft, 1)

        assert removed.name == "color"
        assert [v.attributes for v in generated_draft.variants] == [
            {"size": "S"}, {"size": "S"}, {"size": "M"}, {"size": "M"},
        ]
        assert [v.label for v in generated_draft.variants] == ["S", "S", "M", "M"]

    def test_removing_last_type_returns_to_manual_mode(self, synchronizer, generated_draft):
        synchronizer.remove_attribute_type(generated_draft, 1)
        synchronizer.remove_attribute_type(generated_draft, 0)

        assert not generated_draft.attribute_driven
        assert all(v.attributes is None for v in generated_draft.variants)

    def test_out_of_range(self, synchronizer, generated_draft):
        with pytest.raises(AttributeTypeNotFoundError):
            synchronizer.remove_attribute_type(generated_draft, 5)


# ===================
# REGENERATION TESTS
# ===================

class TestRegenerate:
    """Tests for regenerate."""

    def test_one_record_per_combination(self, synchronizer, generated_draft):
        variants = generated_draft.variants

        assert [v.label for v in variants] == ["S / Red", "S / Blue", "M / Red", "M / Blue"]
        assert variants[0].attributes == {"size": "S", "color": "Red"}
        assert all(v.variant_id == "" for v in variants)
        assert all(v.price_adjustment == 0 for v in variants)
        assert all(v.inventory == 0 and v.sku == "" for v in variants)
        assert all(v.origin == VariantOrigin.GENERATED for v in variants)

    def test_existing_variants_discarded(self, synchronizer, size_color_types):
        draft = ProductDraft(
            attribute_types=size_color_types,
            variants=[VariantFactory.create_generated(
                {"size": "S", "color": "Red"}, variant_id="keep-me", inventory=9
            )],
        )

        count = synchronizer.regenerate(draft)

        assert count == 4
        assert all(v.variant_id != "keep-me" for v in draft.variants)
        assert draft.variants[0].inventory == 0

    def test_limit_leaves_variants_unchanged(self, synchronizer, oversized_types):
        draft = manual_draft("Keep", "Me")
        draft.attribute_types = oversized_types
        before = [v.model_dump() for v in draft.variants]

        with pytest.raises(GenerationLimitExceededError):
            synchronizer.regenerate(draft, cap=100)

        assert [v.model_dump() for v in draft.variants] == before

    def test_values_with_delimiters_stay_distinct(self, synchronizer):
        """"a:b" and "a_b" generate two variants that are not duplicates."""
        draft = ProductDraft(attribute_types=[AttributeType(name="size", values=["a:b", "a_b"])])

        synchronizer.regenerate(draft)

        assert [v.label for v in draft.variants] == ["a:b", "a_b"]
        assert synchronizer.validate(draft).is_valid

    def test_no_types_clears_variants(self, synchronizer):
        draft = manual_draft("A", "B")

        assert synchronizer.regenerate(draft) == 0
        assert draft.variants == []


# ===================
# MANUAL VARIANT TESTS
# ===================

class TestManualVariants:
    """Tests for add_manual and remove."""

    def test_add_manual_in_manual_mode(self, synchronizer, empty_draft):
        index = synchronizer.add_manual(empty_draft)

        variant = empty_draft.variants[index]
        assert index == 0
        assert variant.attributes is None
        assert variant.variant_id == ""
        assert variant.origin == VariantOrigin.MANUAL

    def test_add_manual_in_attribute_mode(self, synchronizer, generated_draft):
        index = synchronizer.add_manual(generated_draft)

        assert index == 4
        assert generated_draft.variants[index].attributes == {}

    def test_remove(self, synchronizer):
        draft = manual_draft("A", "B", "C")

        removed = synchronizer.remove(draft, 1)

        assert removed.label == "B"
        assert [v.label for v in draft.variants] == ["A", "C"]

    @pytest.mark.parametrize("index", [3, -1])
    def test_remove_out_of_range(self, synchronizer, index):
        with pytest.raises(VariantNotFoundError):
            synchronizer.remove(manual_draft("A", "B", "C"), index)


# ===================
# FIELD EDIT TESTS
# ===================

class TestUpdateField:
    """Tests for update_field."""

    def test_price_adjustment(self, synchronizer):
        draft = manual_draft("A")

        issues = synchronizer.update_field(draft, 0, "price_adjustment", "12.5")

        assert issues == []
        assert draft.variants[0].price_adjustment == Decimal("12.5")

    def test_price_adjustment_not_a_number(self, synchronizer):
        draft = manual_draft("A")

        issues = synchronizer.update_field(draft, 0, "price_adjustment", "abc")

        assert _codes(issues) == ["INVALID_NUMBER"]
        assert draft.variants[0].price_adjustment == Decimal("0")

    def test_price_adjustment_out_of_range(self, synchronizer):
        draft = manual_draft("A")

        issues = synchronizer.update_field(draft, 0, "price_adjustment", "1e1000000000")

        assert _codes(issues) == ["INVALID_NUMBER"]
        assert draft.variants[0].price_adjustment == Decimal("0")

    def test_negative_inventory_applied_and_reported(self, synchronizer):
        draft = manual_draft("A")

        issues = synchronizer.update_field(draft, 0, "inventory", "-3")

        assert _codes(issues) == ["NEGATIVE_INVENTORY"]
        assert issues[0].message == "Inventory cannot be negative"
        assert draft.variants[0].inventory == -3

    def test_fractional_inventory_rejected(self, synchronizer):
        draft = manual_draft("A")

        issues = synchronizer.update_field(draft, 0, "inventory", "2.5")

        assert _codes(issues) == ["INVALID_INTEGER"]
        assert draft.variants[0].inventory == 0

    def test_whole_float_inventory_accepted(self, synchronizer):
        draft = manual_draft("A")

        assert synchronizer.update_field(draft, 0, VariantField.INVENTORY, 4.0) == []
        assert draft.variants[0].inventory == 4

    def test_sku(self, synchronizer):
        draft = manual_draft("A")

        synchronizer.update_field(draft, 0, "sku", "SKU-1")

        assert draft.variants[0].sku == "SKU-1"

    def test_manual_label(self, synchronizer):
        draft = manual_draft("A")

        assert synchronizer.update_field(draft, 0, "label", "Large") == []
        assert draft.variants[0].label == "Large"

    def test_empty_label_applied_and_reported(self, synchronizer):
        draft = manual_draft("A")

        issues = synchronizer.update_field(draft, 0, "label", "  ")

        assert _codes(issues) == ["LABEL_REQUIRED"]
        assert issues[0].message == "Variant label is required"

    def test_generated_label_read_only(self, synchronizer, generated_draft):
        issues = synchronizer.update_field(generated_draft, 0, "label", "Custom")

        assert _codes(issues) == ["LABEL_READ_ONLY"]
        assert generated_draft.variants[0].label == "S / Red"

    def test_attribute_edit_reconciles_label(self, synchronizer, generated_draft):
        issues = synchronizer.update_field(generated_draft, 0, "attributes.size", "M")

        assert issues == []
        assert generated_draft.variants[0].attributes == {"size": "M", "color": "Red"}
        assert generated_draft.variants[0].label == "M / Red"

    def test_undeclared_value_rejected_for_generated(self, synchronizer, generated_draft):
        issues = synchronizer.update_field(generated_draft, 0, "attributes.size", "XL")

        assert _codes(issues) == ["INVALID_ATTRIBUTE_VALUE"]
        assert generated_draft.variants[0].attributes["size"] == "S"

    def test_manual_variant_accepts_any_value(self, synchronizer, generated_draft):
        index = synchronizer.add_manual(generated_draft)

        issues = synchronizer.update_field(generated_draft, index, "attributes.size", "XXL")

        assert issues == []
        assert generated_draft.variants[index].label == "XXL"

    def test_empty_value_clears_attribute(self, synchronizer, generated_draft):
        synchronizer.update_field(generated_draft, 0, "attributes.color", "")

        assert generated_draft.variants[0].attributes == {"size": "S"}
        assert generated_draft.variants[0].label == "S"

    def test_unknown_attribute(self, synchronizer, generated_draft):
        issues = synchronizer.update_field(generated_draft, 0, "attributes.material", "Wool")

        assert _codes(issues) == ["UNKNOWN_ATTRIBUTE"]

    def test_unknown_field(self, synchronizer):
        assert _codes(synchronizer.update_field(manual_draft("A"), 0, "weight", 3)) == ["UNKNOWN_FIELD"]

    def test_other_variants_untouched(self, synchronizer, generated_draft):
        before = [v.model_dump() for v in generated_draft.variants[1:]]

        synchronizer.update_field(generated_draft, 0, "price_adjustment", 5)

        assert [v.model_dump() for v in generated_draft.variants[1:]] == before

    def test_out_of_range_raises(self, synchronizer):
        with pytest.raises(VariantNotFoundError):
            synchronizer.update_field(manual_draft("A"), 1, "sku", "X")


# ===================
# COMMIT LABEL TESTS
# ===================

class TestCommitLabel:
    """Tests for commit_label."""

    def test_assigns_id_once(self, synchronizer):
        draft = manual_draft("Small")

        variant_id = synchronizer.commit_label(draft, 0)

        assert re.fullmatch(r"small-[A-Za-z0-9_-]{6}", variant_id)
        assert draft.variants[0].variant_id == variant_id

    def test_id_stable_after_relabel(self, synchronizer):
        draft = manual_draft("Small")
        first = synchronizer.commit_label(draft, 0)

        synchronizer.update_field(draft, 0, "label", "Large")
        assert synchronizer.commit_label(draft, 0) is None

        assert draft.variants[0].variant_id == first

    def test_empty_label_assigns_nothing(self, synchronizer):
        draft = manual_draft("   ")

        assert synchronizer.commit_label(draft, 0) is None
        assert draft.variants[0].variant_id == ""


# ===================
# VALIDATE TESTS
# ===================

class TestValidate:
    """Tests for validate."""

    def test_generated_draft_is_valid(self, synchronizer, generated_draft):
        assert synchronizer.validate(generated_draft).is_valid

    def test_blocking_issues_collected(self, synchronizer):
        draft = manual_draft("Large", " large ", "")
        draft.variants[0].inventory = -1

        report = synchronizer.validate(draft)

        assert not report.is_valid
        assert ("inventory", "NEGATIVE_INVENTORY") in [(i.field, i.code) for i in report.issues]
        assert [i.index for i in report.issues if i.code == "LABEL_REQUIRED"] == [2]
        duplicates = [i for i in report.issues if i.code == "DUPLICATE_VARIANT"]
        assert [i.index for i in duplicates] == [0, 1]
        assert duplicates[0].message == "Variant labels must be unique"

    def test_attribute_duplicates_on_attributes_field(self, synchronizer, generated_draft):
        synchronizer.update_field(generated_draft, 1, "attributes.color", "Red")

        report = synchronizer.validate(generated_draft)

        assert {(i.index, i.field) for i in report.issues} == {(0, "attributes"), (1, "attributes")}


# ===================
# SUBMISSION TESTS
# ===================

class TestTransformForSubmission:
    """Tests for transform_for_submission."""

    def test_absolute_prices(self, synchronizer):
        draft = manual_draft("A", "B")
        draft.variants[0].price_adjustment = Decimal("10")
        draft.variants[1].price_adjustment = Decimal("-0.005")  # 99.995

        payload = synchronizer.transform_for_submission(draft)

        assert [p.price for p in payload] == [Decimal("110.00"), Decimal("100.00")]
        assert "price_adjustment" not in payload[0].model_dump()

    def test_base_price_override(self, synchronizer):
        draft = manual_draft("A")

        payload = synchronizer.transform_for_submission(draft, base_price="150")

        assert payload[0].price == Decimal("150.00")

    def test_missing_ids_generated_and_stored(self, synchronizer):
        draft = manual_draft("Same", "Same", "")

        payload = synchronizer.transform_for_submission(draft)

        ids = [p.variant_id for p in payload]
        assert all(ids)
        assert len(set(ids)) == 3
        assert [v.variant_id for v in draft.variants] == ids

    def test_idempotent(self, synchronizer, generated_draft):
        first = synchronizer.transform_for_submission(generated_draft)
        second = synchronizer.transform_for_submission(generated_draft)

        assert first == second

    def test_existing_ids_kept(self, synchronizer):
        draft = ProductDraft(variants=[VariantFactory.create(label="A", variant_id="a-123456")])

        assert synchronizer.transform_for_submission(draft)[0].variant_id == "a-123456"

    def test_attributes_only_when_present(self, synchronizer, generated_draft):
        generated_draft.variants.append(VariantFactory.create(label="Custom", attributes={}))

        payload = synchronizer.transform_for_submission(generated_draft)

        assert payload[0].attributes == {"size": "S", "color": "Red"}
        assert payload[4].attributes is None

    def test_does_not_validate(self, synchronizer):
        draft = manual_draft("Large", "large")
        draft.variants[0].inventory = -5

        payload = synchronizer.transform_for_submission(draft)

        assert payload[0].inventory == -5


class TestLoadFromSubmission:
    """Tests for load_from_submission."""

    def test_prices_become_deltas(self, synchronizer, empty_draft):
        count = synchronizer.load_from_submission(empty_draft, [SubmissionFactory.create(price=Decimal("120"))])

        variant = empty_draft.variants[0]
        assert count == 1
        assert variant.price_adjustment == Decimal("20.00")
        assert variant.variant_id == "stored-id"
        assert variant.origin == VariantOrigin.MANUAL

    def test_attribute_variants_relabelled(self, synchronizer, size_color_types):
        draft = ProductDraft(base_price=100, attribute_types=size_color_types)
        stored = SubmissionFactory.create(label="stale", attributes={"size": "M", "color": "Blue"})

        synchronizer.load_from_submission(draft, [stored])

        assert draft.variants[0].label == "M / Blue"
        assert draft.variants[0].origin == VariantOrigin.GENERATED

    def test_round_trip(self, synchronizer, generated_draft):
        synchronizer.update_field(generated_draft, 2, "price_adjustment", "7.25")
        payload = synchronizer.transform_for_submission(generated_draft)

        reloaded = ProductDraft(base_price=100, attribute_types=generated_draft.attribute_types)
        synchronizer.load_from_submission(reloaded, payload)

        assert reloaded.variants[2].price_adjustment == Decimal("7.25")
        assert [v.variant_id for v in reloaded.variants] == [p.variant_id for p in payload]


class TestSingleton:

    def test_get_variant_sync_service_returns_same_instance(self):
        assert get_variant_sync_service() is get_variant_sync_service()
        assert isinstance(get_variant_sync_service(), VariantSynchronizer)
