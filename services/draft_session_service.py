"""
Variant editing sessions.

A VariantDraftSession owns one ProductDraft and is the surface the form
layer talks to: it runs the synchronizer, keeps prices reconciled with the
base price, and feeds every edit to the debounced uniqueness validator.

DraftSessionService keeps sessions in process memory with a TTL. There is
no persistence; an expired session is closed and forgotten.
"""

import time
import uuid
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Optional, Union

import structlog

from config import settings
from exceptions import (
    AttributeTypeExistsError,
    DraftSessionNotFoundError,
    ValidationError,
    VariantSubmissionBlockedError,
)
from models.variant import (
    AttributeType,
    DuplicateReport,
    PriceRow,
    ProductDraft,
    ValidationIssue,
    ValidationReport,
    VariantField,
    VariantRecord,
    VariantSubmission,
    repeated_attribute_type_name,
)
from services.price_service import PriceReconciler, price_rows
from services.uniqueness_service import UniquenessValidator
from services.variant_sync_service import VariantSynchronizer, get_variant_sync_service
from utils.price_utils import Money, to_decimal

logger = structlog.get_logger(__name__)


def _parse_base_price(base_price: Money) -> Decimal:
    """Base price from form input; raises ValidationError(INVALID_BASE_PRICE)."""
    try:
        value = to_decimal(base_price)
    except (InvalidOperation, TypeError):
        raise ValidationError("Base price must be a number", code="INVALID_BASE_PRICE",
                              details={"provided": str(base_price)})
    if value < 0:
        raise ValidationError("Base price cannot be negative", code="INVALID_BASE_PRICE",
                              details={"provided": str(base_price)})
    return value


class VariantDraftSession:
    """
    One product's variant editor.

    All operations are synchronous. Attribute mutations reconcile labels
    before returning; duplicate detection trails edits by the debounce
    window.
    """

    def __init__(
        self,
        draft: Optional[ProductDraft] = None,
        synchronizer: Optional[VariantSynchronizer] = None,
        debounce_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.draft = draft if draft is not None else ProductDraft()
        self._sync = synchronizer or get_variant_sync_service()
        self._prices = PriceReconciler(self.draft.base_price)
        self._uniqueness = UniquenessValidator(delay=debounce_seconds, clock=clock)
        self._uniqueness.prime(self.draft)
        self._closed = False

    @classmethod
    def from_submission(
        cls,
        base_price: Money,
        attribute_types: Iterable[AttributeType] = (),
        variants: Iterable[VariantSubmission] = (),
        **kwargs: Any
    ) -> "VariantDraftSession":
        """
        Open an existing product for editing.

        Stored absolute prices are turned back into deltas.

        Raises:
            AttributeTypeExistsError: If two stored types share a name
            ValidationError: If the base price is not a valid amount
        """
        attribute_types = list(attribute_types)
        repeated = repeated_attribute_type_name(attribute_types)
        if repeated is not None:
            raise AttributeTypeExistsError(repeated)

        draft = ProductDraft(
            base_price=_parse_base_price(base_price),
            attribute_types=attribute_types,
        )
        synchronizer = kwargs.get("synchronizer") or get_variant_sync_service()
        synchronizer.load_from_submission(draft, variants)
        return cls(draft=draft, **kwargs)

    @property
    def closed(self) -> bool:
        return self._closed

    def _editing(self) -> None:
        self._uniqueness.settle()

    def _changed(self) -> None:
        self._uniqueness.observe(self.draft)

    # ===================
    # ATTRIBUTE TYPES
    # ===================

    def add_attribute_type(self, name: str, values: Union[str, list[str]]) -> AttributeType:
        self._editing()
        attribute_type = self._sync.add_attribute_type(self.draft, name, values)
        self._changed()
        return attribute_type

    def remove_attribute_type(self, index: int) -> AttributeType:
        self._editing()
        removed = self._sync.remove_attribute_type(self.draft, index)
        self._changed()
        return removed

    # ===================
    # VARIANTS
    # ===================

    def generate_variants_from_types(self, cap: Optional[int] = None) -> int:
        """
        Full regeneration. Existing variants are discarded.

        Raises:
            GenerationLimitExceededError: Variants are left untouched
        """
        self._editing()
        count = self._sync.regenerate(self.draft, cap=cap)
        self._changed()
        return count

    def add_variant_manually(self) -> int:
        self._editing()
        index = self._sync.add_manual(self.draft)
        self._changed()
        return index

    def remove_variant(self, index: int) -> VariantRecord:
        self._editing()
        removed = self._sync.remove(self.draft, index)
        self._changed()
        return removed

    def update_variant_field(self, index: int, field: str, value: Any) -> list[ValidationIssue]:
        """
        Edit one field of one variant.

        Label edits are also checked against the other variants' labels
        (debounced snapshot).
        """
        if isinstance(field, VariantField):
            field = field.value

        self._editing()
        issues = self._sync.update_field(self.draft, index, field, value)

        if field == VariantField.LABEL.value and not issues:
            message = self._uniqueness.validate_unique_label(index, self.draft.variants[index].label)
            if message:
                issues.append(ValidationIssue(
                    index=index,
                    field=field,
                    code="DUPLICATE_LABEL",
                    message=message,
                ))

        self._changed()
        return issues

    def commit_label(self, index: int) -> Optional[str]:
        """Label field blurred; assigns the variant ID if it has none."""
        return self._sync.commit_label(self.draft, index)

    # ===================
    # PRICING
    # ===================

    def set_base_price(self, base_price: Money) -> bool:
        """
        Change the base price, rebasing deltas so displayed prices hold.

        Returns:
            True if deltas were rebased

        Raises:
            ValidationError: If the price is not a number or is negative
        """
        new_base = _parse_base_price(base_price)

        self._editing()
        self.draft.base_price = new_base
        rebased = self._prices.observe(new_base, self.draft.variants)
        if rebased:
            self._changed()
        return rebased

    def price_rows(self) -> list[PriceRow]:
        return price_rows(self.draft)

    # ===================
    # VALIDATION
    # ===================

    def get_duplicates(self) -> DuplicateReport:
        """Duplicate keys and indices, as of the last quiet window."""
        return self._uniqueness.get_duplicates()

    def validate_unique_label(self, index: int, value: Optional[str]) -> Optional[str]:
        return self._uniqueness.validate_unique_label(index, value)

    def validate(self) -> ValidationReport:
        """Blocking issues against the current (not debounced) state."""
        return self._sync.validate(self.draft)

    # ===================
    # SUBMISSION
    # ===================

    def transform_for_submission(self, base_price: Optional[Money] = None) -> list[VariantSubmission]:
        return self._sync.transform_for_submission(self.draft, base_price)

    def submit(self, base_price: Optional[Money] = None) -> list[VariantSubmission]:
        """
        Validate, then transform.

        Raises:
            VariantSubmissionBlockedError: If any variant has a blocking issue
        """
        report = self.validate()
        if not report.is_valid:
            logger.warning(
                "variant_submission_blocked",
                issue_count=len(report.issues),
                duplicate_keys=report.duplicates.duplicate_keys,
            )
            raise VariantSubmissionBlockedError(
                issues=[issue.model_dump() for issue in report.issues],
                duplicate_keys=report.duplicates.duplicate_keys,
            )
        return self.transform_for_submission(base_price)

    def close(self) -> None:
        """Teardown: cancel the pending uniqueness evaluation."""
        self._uniqueness.close()
        self._closed = True


class DraftSessionService:
    """
    In-memory store of editing sessions.

    Single process only; sessions are lost on restart.
    """

    def __init__(self, ttl_minutes: Optional[int] = None):
        self.ttl = timedelta(minutes=ttl_minutes or settings.draft_session_ttl_minutes)
        self._sessions: dict[str, tuple[datetime, VariantDraftSession]] = {}

    def create(
        self,
        base_price: Money = Decimal("0"),
        attribute_types: Iterable[AttributeType] = (),
        variants: Iterable[VariantSubmission] = ()
    ) -> tuple[str, VariantDraftSession]:
        """
        Open a new session, optionally pre-loaded with a stored product.

        Returns:
            (session_id, session)
        """
        self._cleanup_expired()

        session = VariantDraftSession.from_submission(base_price, attribute_types, variants)
        session_id = str(uuid.uuid4())
        self._sessions[session_id] = (datetime.now() + self.ttl, session)

        logger.info(
            "draft_session_created",
            session_id=session_id,
            variant_count=len(session.draft.variants),
        )
        return session_id, session

    def get(self, session_id: str) -> VariantDraftSession:
        """
        Fetch a live session and extend its expiry.

        Raises:
            DraftSessionNotFoundError: Unknown or expired
        """
        entry = self._sessions.get(session_id)
        if entry is None:
            raise DraftSessionNotFoundError(session_id)

        expires_at, session = entry
        if datetime.now() > expires_at:
            self.delete(session_id)
            raise DraftSessionNotFoundError(session_id)

        self._sessions[session_id] = (datetime.now() + self.ttl, session)
        return session

    def delete(self, session_id: str) -> bool:
        """Close and forget a session. Returns False if it did not exist."""
        entry = self._sessions.pop(session_id, None)
        if entry is None:
            return False
        entry[1].close()
        logger.info("draft_session_closed", session_id=session_id)
        return True

    def count(self) -> int:
        return len(self._sessions)

    def close_all(self) -> int:
        """Close every session (shutdown). Returns how many were open."""
        session_ids = list(self._sessions)
        for session_id in session_ids:
            self.delete(session_id)
        return len(session_ids)

    def _cleanup_expired(self) -> None:
        """Close and remove all expired sessions."""
        now = datetime.now()
        expired = [k for k, (exp, _) in self._sessions.items() if now > exp]
        for k in expired:
            self.delete(k)


# Singleton instance
_draft_session_service: Optional[DraftSessionService] = None


def get_draft_session_service() -> DraftSessionService:
    """Get or create DraftSessionService instance."""
    global _draft_session_service
    if _draft_session_service is None:
        _draft_session_service = DraftSessionService()
    return _draft_session_service
