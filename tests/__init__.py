"""
Test suite for the variant matrix service.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_variant_sync_service.py -v
"""
