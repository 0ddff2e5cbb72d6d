"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.variant_drafts import router as variant_drafts_router

__all__ = [
    "variant_drafts_router",
]
