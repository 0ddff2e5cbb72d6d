"""
Combination generator: expands attribute types into their cartesian product.

Order is nested-loop order: the first attribute type varies slowest, the
last varies fastest. [size: S, M] × [color: Red, Blue] gives
S/Red, S/Blue, M/Red, M/Blue.
"""

from itertools import product
from math import prod
from typing import Optional

import structlog

from config import settings
from exceptions import GenerationLimitExceededError
from models.variant import AttributeType

logger = structlog.get_logger(__name__)


def count_combinations(attribute_types: list[AttributeType]) -> int:
    """
    Number of combinations a full generation would produce.

    Zero attribute types means manual mode, not one empty combination.
    """
    if not attribute_types:
        return 0
    return prod(len(attribute_type.values) for attribute_type in attribute_types)


def generate_combinations(
    attribute_types: list[AttributeType],
    cap: Optional[int] = None
) -> list[dict[str, str]]:
    """
    Build every attribute combination.

    The count is checked before anything is materialized, so an oversized
    request costs nothing and returns nothing.

    Args:
        attribute_types: Variation axes in declaration order
        cap: Maximum combinations allowed (defaults to settings)

    Returns:
        List of {type name: value} maps in nested-loop order

    Raises:
        GenerationLimitExceededError: If the count exceeds the cap
    """
    cap = settings.variant_combination_cap if cap is None else cap
    total = count_combinations(attribute_types)

    if total > cap:
        logger.warning(
            "generation_limit_exceeded",
            requested=total,
            cap=cap,
            cardinalities=[len(t.values) for t in attribute_types],
        )
        raise GenerationLimitExceededError(requested=total, cap=cap)

    if total == 0:
        return []

    names = [attribute_type.name for attribute_type in attribute_types]
    combinations = [
        dict(zip(names, values))
        for values in product(*(t.values for t in attribute_types))
    ]

    logger.debug("combinations_generated", count=len(combinations))
    return combinations
