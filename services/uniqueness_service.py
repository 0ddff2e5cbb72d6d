"""
Uniqueness validator: flags variants that share a key.

Keys:
- attribute-driven mode: the attribute tuple, in attribute type order
- manual mode: the trimmed, case-folded label

Evaluation runs against a debounced snapshot of the variant collection so
that typing in a label field does not re-check the whole collection on
every keystroke. Each edit re-arms a DebouncedTask; the draft is copied
only when a quiet window elapses.
"""

import time
from typing import Callable, Optional

import structlog

from config import settings
from models.variant import AttributeType, DuplicateReport, ProductDraft, VariantRecord
from services.label_service import variant_key
from utils.text_utils import normalize_label

logger = structlog.get_logger(__name__)

LABEL_NOT_UNIQUE = "Label must be unique"


class DebouncedTask:
    """
    A cancellable task that fires once its input has been quiet for `delay`.

    Scheduling supersedes whatever was pending. The task is pulled rather
    than pushed: callers invoke run_pending() before reading derived state,
    and the clock is injectable so tests control time.
    """

    def __init__(self, delay: float, clock: Callable[[], float] = time.monotonic):
        self.delay = delay
        self._clock = clock
        self._callback: Optional[Callable[[], None]] = None
        self._due_at: Optional[float] = None
        self._closed = False

    @property
    def pending(self) -> bool:
        return self._callback is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def schedule(self, callback: Callable[[], None]) -> bool:
        """
        Arm the task, replacing any pending callback.

        Returns:
            False if the task has been closed
        """
        if self._closed:
            logger.debug("debounced_task_closed_schedule_ignored")
            return False
        self._callback = callback
        self._due_at = self._clock() + self.delay
        return True

    def run_pending(self) -> bool:
        """Fire the pending callback if its window has elapsed."""
        if self._callback is None or self._clock() < self._due_at:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Fire the pending callback now."""
        callback = self._callback
        if callback is None:
            return False
        self.cancel()
        callback()
        return True

    def cancel(self) -> None:
        self._callback = None
        self._due_at = None

    def close(self) -> None:
        """Cancel and refuse further scheduling (teardown)."""
        self.cancel()
        self._closed = True


def uniqueness_key(
    variant: VariantRecord,
    attribute_types: list[AttributeType]
) -> Optional[str]:
    """
    Key used for duplicate detection, or None if the variant is not comparable.

    Variants with no selected attributes (attribute mode) or an empty label
    (manual mode) are left to the required-field checks.
    """
    if attribute_types:
        if not variant.attributes:
            return None
        return variant_key(variant.attributes, attribute_types) or None
    return normalize_label(variant.label)


def find_duplicates(
    variants: list[VariantRecord],
    attribute_types: Optional[list[AttributeType]] = None
) -> DuplicateReport:
    """
    Find every group of variants sharing a key.

    Both the first occurrence and later ones are reported.

    Args:
        variants: Variant collection
        attribute_types: Declared types; non-empty means attribute-driven mode

    Returns:
        DuplicateReport with keys in first-seen order, all participating
        indices, and key → indices groups
    """
    attribute_types = attribute_types or []
    seen: dict[str, list[int]] = {}

    for index, variant in enumerate(variants):
        key = uniqueness_key(variant, attribute_types)
        if key is None:
            continue
        seen.setdefault(key, []).append(index)

    groups = {key: indices for key, indices in seen.items() if len(indices) > 1}

    return DuplicateReport(
        duplicate_keys=list(groups),
        indices={index for indices in groups.values() for index in indices},
        groups=groups,
    )


def validate_unique_label(
    variants: list[VariantRecord],
    index: int,
    value: Optional[str]
) -> Optional[str]:
    """
    Check a candidate label against every other variant.

    Empty values pass; "label is required" is a separate check.

    Returns:
        None if unique, otherwise the error message
    """
    candidate = normalize_label(value)
    if candidate is None:
        return None

    for other_index, variant in enumerate(variants):
        if other_index == index:
            continue
        if normalize_label(variant.label) == candidate:
            return LABEL_NOT_UNIQUE
    return None


class UniquenessValidator:
    """
    Debounced duplicate detection over one draft.

    observe() after every edit; get_duplicates() and validate_unique_label()
    read a copy of the draft taken once the window after the last edit has
    elapsed.
    """

    def __init__(
        self,
        delay: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        if delay is None:
            delay = settings.uniqueness_debounce_seconds
        self._task = DebouncedTask(delay, clock)
        self._variants: list[VariantRecord] = []
        self._attribute_types: list[AttributeType] = []

    def _snapshot(self, draft: ProductDraft) -> tuple[list[VariantRecord], list[AttributeType]]:
        return (
            [variant.model_copy(deep=True) for variant in draft.variants],
            [attribute_type.model_copy(deep=True) for attribute_type in draft.attribute_types],
        )

    def _apply(self, variants: list[VariantRecord], attribute_types: list[AttributeType]) -> None:
        self._variants = variants
        self._attribute_types = attribute_types

    def prime(self, draft: ProductDraft) -> None:
        """Take the initial snapshot immediately (on load)."""
        self._task.cancel()
        self._apply(*self._snapshot(draft))

    def observe(self, draft: ProductDraft) -> None:
        """
        Record an edit; the snapshot refreshes after the quiet window.

        The draft is copied when the window elapses, not per edit, so it
        reflects the draft as of that moment.
        """
        self._task.schedule(lambda: self._apply(*self._snapshot(draft)))

    def settle(self) -> None:
        """Apply a window that has already elapsed; call before mutating the draft."""
        self._task.run_pending()

    @property
    def pending(self) -> bool:
        return self._task.pending

    def get_duplicates(self) -> DuplicateReport:
        """Duplicate report for the debounced snapshot."""
        self._task.run_pending()
        report = find_duplicates(self._variants, self._attribute_types)
        if report.has_duplicates:
            logger.info(
                "duplicate_variants_detected",
                keys=report.duplicate_keys,
                count=len(report.indices),
            )
        return report

    def validate_unique_label(self, index: int, value: Optional[str]) -> Optional[str]:
        """Per-field label check against the debounced snapshot."""
        self._task.run_pending()
        return validate_unique_label(self._variants, index, value)

    def flush(self) -> None:
        """Apply any pending snapshot now."""
        self._task.flush()

    def close(self) -> None:
        """Cancel the pending snapshot; later edits are ignored."""
        self._task.close()
