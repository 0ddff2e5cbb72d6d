"""
Variant identifier generator.

IDs look like "extra-large-x7Gq_2": a slug of the label plus a random salt.
The salt keeps two variants with the same label apart; there is no global
collision check, so uniqueness across sessions is not guaranteed.

An ID is assigned once, the first time a non-empty label is committed, and
never regenerated. Renaming a variant afterwards leaves its ID pointing at
the old label.
"""

import secrets
import string
from typing import Iterable, Optional

from config import settings
from utils.text_utils import slugify

SALT_ALPHABET = string.ascii_letters + string.digits + "_-"


def _salt(length: int) -> str:
    return "".join(secrets.choice(SALT_ALPHABET) for _ in range(length))


def generate_variant_id(
    label: Optional[str],
    slug_max_length: Optional[int] = None,
    salt_length: Optional[int] = None
) -> str:
    """
    Generate an identifier from a variant label.

    Examples:
        "Small" → "small-aB3_x9"
        "Size: L/XL (Special)" → "size-lxl-special-Qw12-z"
        "" → "Qw12-z"

    Args:
        label: Variant label
        slug_max_length: Defaults to settings.variant_id_slug_max_length
        salt_length: Defaults to settings.variant_id_salt_length

    Returns:
        "<slug>-<salt>", or just "<salt>" when the label has no slug characters
    """
    if slug_max_length is None:
        slug_max_length = settings.variant_id_slug_max_length
    if salt_length is None:
        salt_length = settings.variant_id_salt_length

    slug = slugify(label, max_length=slug_max_length)
    salt = _salt(salt_length)
    return f"{slug}-{salt}" if slug else salt


def generate_variant_ids(
    labels: Iterable[Optional[str]],
    reserved: Iterable[str] = ()
) -> dict[int, str]:
    """
    Generate identifiers for a batch of labels.

    Guarantees the returned IDs are distinct from each other, and from
    any reserved IDs, even when labels repeat.

    Args:
        labels: Labels in variant order
        reserved: IDs already taken by other variants

    Returns:
        Map of position → generated ID
    """
    ids: dict[int, str] = {}
    used: set[str] = set(reserved)

    for index, label in enumerate(labels):
        variant_id = generate_variant_id(label)
        counter = 1
        while variant_id in used:
            # Salt collision within the batch
            counter += 1
            variant_id = f"{generate_variant_id(label)}-{counter}"
        used.add(variant_id)
        ids[index] = variant_id

    return ids
