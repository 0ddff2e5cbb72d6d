"""
Business logic services.

Each service handles one part of variant editing.
"""

from services.combination_service import count_combinations, generate_combinations
from services.label_service import derive_label, reconcile_labels, variant_key
from services.variant_id_service import generate_variant_id, generate_variant_ids
from services.uniqueness_service import (
    DebouncedTask,
    UniquenessValidator,
    find_duplicates,
    validate_unique_label,
)
from services.price_service import PriceReconciler, displayed_price, rebase_adjustment
from services.variant_sync_service import VariantSynchronizer, get_variant_sync_service
from services.draft_session_service import (
    DraftSessionService,
    VariantDraftSession,
    get_draft_session_service,
)

__all__ = [
    "count_combinations",
    "generate_combinations",
    "derive_label",
    "reconcile_labels",
    "variant_key",
    "generate_variant_id",
    "generate_variant_ids",
    "DebouncedTask",
    "UniquenessValidator",
    "find_duplicates",
    "validate_unique_label",
    "PriceReconciler",
    "displayed_price",
    "rebase_adjustment",
    "VariantSynchronizer",
    "get_variant_sync_service",
    "DraftSessionService",
    "VariantDraftSession",
    "get_draft_session_service",
]
