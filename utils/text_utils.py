"""
Text utilities for variant labels.

Used for duplicate-label comparison and identifier slugs.
"""

import re
import unicodedata
from typing import Optional

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def normalize_label(label: Optional[str]) -> Optional[str]:
    """
    Normalize a variant label for uniqueness comparison.

    - "  Large " → "large"
    - "LARGE" → "large"
    - "   " → None

    Args:
        label: User-entered label (may be None)

    Returns:
        Trimmed, case-folded label, or None if empty
    """
    if not label:
        return None

    label = label.strip()

    if not label:
        return None

    return label.casefold()


def strip_accents(text: str) -> str:
    """
    Remove accent marks, keeping base characters.

    "Café Crème" → "Cafe Creme"
    """
    # NFD decomposition separates base chars from accents
    normalized = unicodedata.normalize('NFD', text)

    # Remove accent marks (combining characters in Unicode category 'Mn')
    return ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )


def slugify(text: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Build a URL-safe slug from a label.

    - "Extra Large" → "extra-large"
    - "Size: L/XL (Special)" → "size-lxl-special"
    - "!!!" → ""

    Args:
        text: Source text
        max_length: Truncate the slug to this many characters

    Returns:
        Lowercase slug of [a-z0-9-], possibly empty
    """
    if not text:
        return ""

    slug = strip_accents(text).strip().lower()
    slug = _NON_SLUG_CHARS.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug).strip("-")

    if max_length is not None and len(slug) > max_length:
        # Cut may land on a separator
        slug = slug[:max_length].rstrip("-")

    return slug
