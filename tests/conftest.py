"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest
from unittest.mock import patch

from models.variant import AttributeType, ProductDraft
from services.draft_session_service import DraftSessionService, VariantDraftSession
from services.variant_sync_service import VariantSynchronizer


# ===================
# CLOCK
# ===================

class FakeClock:
    """Manually advanced monotonic clock for debounce tests."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ===================
# DOMAIN FIXTURES
# ===================

@pytest.fixture
def size_color_types() -> list:
    """[size: S, M] × [color: Red, Blue]"""
    return [
        AttributeType(name="size", values=["S", "M"]),
        AttributeType(name="color", values=["Red", "Blue"]),
    ]


@pytest.fixture
def oversized_types() -> list:
    """6 × 7 × 3 = 126 combinations."""
    return [
        AttributeType(name="size", values=[f"s{i}" for i in range(6)]),
        AttributeType(name="color", values=[f"c{i}" for i in range(7)]),
        AttributeType(name="material", values=[f"m{i}" for i in range(3)]),
    ]


@pytest.fixture
def synchronizer() -> VariantSynchronizer:
    return VariantSynchronizer()


@pytest.fixture
def empty_draft() -> ProductDraft:
    return ProductDraft(base_price=100)


@pytest.fixture
def generated_draft(size_color_types, synchronizer) -> ProductDraft:
    """Draft with base price 100 and the four size × color variants."""
    draft = ProductDraft(base_price=100, attribute_types=size_color_types)
    synchronizer.regenerate(draft)
    return draft


@pytest.fixture
def session(clock) -> VariantDraftSession:
    """
    Blank editing session on a fake clock with a 300ms debounce.

    Usage:
        def test_something(session, clock):
            session.add_variant_manually()
            clock.advance(0.3)
            session.get_duplicates()
    """
    editor = VariantDraftSession(
        draft=ProductDraft(base_price=100),
        debounce_seconds=0.3,
        clock=clock,
    )
    yield editor
    editor.close()


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def session_service() -> DraftSessionService:
    return DraftSessionService(ttl_minutes=30)


@pytest.fixture
def test_client(session_service):
    """
    FastAPI test client with a fresh session store and no debounce delay.

    Usage:
        def test_endpoint(test_client):
            response = test_client.post("/api/variant-drafts", json={})
            assert response.status_code == 201
    """
    from fastapi.testclient import TestClient
    from config import settings
    from main import app

    with patch("routes.variant_drafts.get_draft_session_service", return_value=session_service):
        with patch.object(settings, "uniqueness_debounce_ms", 0):
            yield TestClient(app)
