"""
Variant editing API routes.

Thin layer over in-memory editing sessions. Field-level problems come back
as `issues` in 200 responses; only action-level failures (unknown session
or index, generation over the cap, blocked submission) are errors.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response
import structlog

from exceptions import AppError, DraftSessionNotFoundError
from models.variant import AttributeType, DuplicateReport
from models.variant_draft import (
    AttributeTypeCreate,
    BasePriceResponse,
    BasePriceUpdate,
    CommitLabelResponse,
    DraftSessionCreate,
    DraftSessionResponse,
    FieldUpdateResponse,
    GenerateResponse,
    SubmissionResponse,
    VariantFieldUpdate,
)
from services.draft_session_service import VariantDraftSession, get_draft_session_service

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def _state(session_id: str, session: VariantDraftSession) -> DraftSessionResponse:
    return DraftSessionResponse(
        session_id=session_id,
        draft=session.draft,
        prices=session.price_rows(),
        duplicates=session.get_duplicates(),
    )


# ===================
# SESSIONS
# ===================

@router.post("", response_model=DraftSessionResponse, status_code=201)
async def create_draft_session(body: DraftSessionCreate):
    """
    Open an editing session.

    Returns:
        Initial editor state with its session_id
    """
    try:
        service = get_draft_session_service()
        session_id, session = service.create(
            base_price=body.base_price,
            attribute_types=body.attribute_types,
            variants=body.variants,
        )
        return _state(session_id, session)
    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}", response_model=DraftSessionResponse)
async def get_draft_session(session_id: str):
    """
    Current editor state.

    Raises:
        404: Session unknown or expired
    """
    try:
        session = get_draft_session_service().get(session_id)
        return _state(session_id, session)
    except Exception as e:
        return handle_error(e)


@router.delete("/{session_id}", status_code=204)
async def close_draft_session(session_id: str):
    """Close a session and cancel pending validation."""
    if not get_draft_session_service().delete(session_id):
        return handle_error(DraftSessionNotFoundError(session_id))
    return Response(status_code=204)


# ===================
# PRICING
# ===================

@router.put("/{session_id}/base-price", response_model=BasePriceResponse)
async def set_base_price(session_id: str, body: BasePriceUpdate):
    """
    Change the base price.

    Variant deltas are rebased so displayed prices stay the same.
    """
    try:
        session = get_draft_session_service().get(session_id)
        rebased = session.set_base_price(body.base_price)
        return BasePriceResponse(rebased=rebased, prices=session.price_rows())
    except Exception as e:
        return handle_error(e)


# ===================
# ATTRIBUTE TYPES
# ===================

@router.post("/{session_id}/attribute-types", response_model=AttributeType, status_code=201)
async def add_attribute_type(session_id: str, body: AttributeTypeCreate):
    """
    Declare an attribute type.

    Raises:
        409: Name already declared
        422: Empty name, no values, or duplicate values
    """
    try:
        session = get_draft_session_service().get(session_id)
        return session.add_attribute_type(body.name, body.values)
    except Exception as e:
        return handle_error(e)


@router.delete("/{session_id}/attribute-types/{index}", response_model=AttributeType)
async def remove_attribute_type(session_id: str, index: int):
    """Remove an attribute type; variant labels are re-derived."""
    try:
        session = get_draft_session_service().get(session_id)
        return session.remove_attribute_type(index)
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/generate", response_model=GenerateResponse)
async def generate_variants(session_id: str):
    """
    Replace all variants with the cartesian product of attribute types.

    Raises:
        422: GENERATION_LIMIT_EXCEEDED, variants left untouched
    """
    try:
        session = get_draft_session_service().get(session_id)
        count = session.generate_variants_from_types()
        return GenerateResponse(count=count, prices=session.price_rows())
    except Exception as e:
        return handle_error(e)


# ===================
# VARIANTS
# ===================

@router.post("/{session_id}/variants", response_model=DraftSessionResponse, status_code=201)
async def add_variant(session_id: str):
    """Append a blank variant."""
    try:
        session = get_draft_session_service().get(session_id)
        session.add_variant_manually()
        return _state(session_id, session)
    except Exception as e:
        return handle_error(e)


@router.delete("/{session_id}/variants/{index}", response_model=DraftSessionResponse)
async def remove_variant(session_id: str, index: int):
    """Delete a variant."""
    try:
        session = get_draft_session_service().get(session_id)
        session.remove_variant(index)
        return _state(session_id, session)
    except Exception as e:
        return handle_error(e)


@router.patch("/{session_id}/variants/{index}", response_model=FieldUpdateResponse)
async def update_variant_field(session_id: str, index: int, body: VariantFieldUpdate):
    """
    Edit one field of one variant.

    Returns:
        Field issues (empty when the value is fine) and the resulting label
    """
    try:
        session = get_draft_session_service().get(session_id)
        issues = session.update_variant_field(index, body.field, body.value)
        variant = session.draft.variants[index]
        return FieldUpdateResponse(
            issues=issues,
            variant_label=variant.label,
            variant_id=variant.variant_id,
        )
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/variants/{index}/commit-label", response_model=CommitLabelResponse)
async def commit_label(session_id: str, index: int):
    """Label field blurred: assign the variant ID if it has none."""
    try:
        session = get_draft_session_service().get(session_id)
        assigned = session.commit_label(index)
        return CommitLabelResponse(
            variant_id=session.draft.variants[index].variant_id,
            assigned=assigned is not None,
        )
    except Exception as e:
        return handle_error(e)


# ===================
# VALIDATION & SUBMISSION
# ===================

@router.get("/{session_id}/duplicates", response_model=DuplicateReport)
async def get_duplicates(session_id: str):
    """Duplicate keys and indices (debounced)."""
    try:
        session = get_draft_session_service().get(session_id)
        return session.get_duplicates()
    except Exception as e:
        return handle_error(e)


@router.post(
    "/{session_id}/submission",
    response_model=SubmissionResponse,
    response_model_exclude_none=True,
)
async def build_submission(session_id: str):
    """
    Validate the draft and emit the absolute-priced variant payload.

    Raises:
        422: VARIANT_SUBMISSION_BLOCKED with per-field issues
    """
    try:
        session = get_draft_session_service().get(session_id)
        variants = session.submit()
        return SubmissionResponse(base_price=session.draft.base_price, variants=variants)
    except Exception as e:
        return handle_error(e)
