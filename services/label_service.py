"""
Label deriver: turns a variant's attribute map into its display label.

Labels of attribute-driven variants are never typed by the user. They are
recomputed by reconcile_labels() after every attribute mutation, so a
label always reflects the current attributes and attribute type order.
"""

from typing import Optional

import structlog

from config import settings
from models.variant import AttributeType, ProductDraft

logger = structlog.get_logger(__name__)

DEFAULT_LABEL = "Default"
_KEY_SEPARATOR = "|"
_PAIR_SEPARATOR = ":"
_ESCAPE = "\\"


def _ordered_values(
    attributes: dict[str, str],
    attribute_types: Optional[list[AttributeType]]
) -> list[tuple[str, str]]:
    """(name, value) pairs in type order, or alphabetical without types."""
    if attribute_types:
        pairs = [(t.name, attributes.get(t.name)) for t in attribute_types]
    else:
        pairs = sorted(attributes.items())
    return [(name, value) for name, value in pairs if value]


def derive_label(
    attributes: Optional[dict[str, str]],
    attribute_types: Optional[list[AttributeType]] = None,
    separator: Optional[str] = None
) -> str:
    """
    Join attribute values into a label.

    {"size": "S", "color": "Red"} with types [size, color] → "S / Red"

    Args:
        attributes: Attribute name → selected value
        attribute_types: Declared types; their order drives the label
        separator: Defaults to settings.variant_label_separator

    Returns:
        Label string, "Default" when no values are selected
    """
    if not attributes:
        return DEFAULT_LABEL

    separator = settings.variant_label_separator if separator is None else separator
    parts = [value for _, value in _ordered_values(attributes, attribute_types)]
    return separator.join(parts) if parts else DEFAULT_LABEL


def variant_key(
    attributes: dict[str, str],
    attribute_types: Optional[list[AttributeType]] = None
) -> str:
    """
    Uniqueness key for an attribute tuple.

    {"size": "S", "color": "Red"} → "size:S|color:Red"

    Backslashes and delimiters inside names and values are backslash-escaped
    ("a:b" → "a\\:b"); distinct tuples never share a key.
    """
    def escape(text: str) -> str:
        return (
            text.replace(_ESCAPE, _ESCAPE * 2)
            .replace(_PAIR_SEPARATOR, _ESCAPE + _PAIR_SEPARATOR)
            .replace(_KEY_SEPARATOR, _ESCAPE + _KEY_SEPARATOR)
        )

    return _KEY_SEPARATOR.join(
        f"{escape(name)}{_PAIR_SEPARATOR}{escape(value)}"
        for name, value in _ordered_values(attributes, attribute_types)
    )


def reconcile_labels(draft: ProductDraft) -> int:
    """
    Recompute labels of attribute-driven variants.

    Manual variants (no attribute map) keep their typed label.

    Args:
        draft: Draft to update in place

    Returns:
        Number of labels that changed
    """
    changed = 0
    for variant in draft.variants:
        if not variant.attributes:
            continue
        label = derive_label(variant.attributes, draft.attribute_types)
        if variant.label != label:
            variant.label = label
            changed += 1

    if changed:
        logger.debug("variant_labels_reconciled", changed=changed)
    return changed
