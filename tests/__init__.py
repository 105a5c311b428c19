"""
Test suite for the catalog reconciliation API.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_catalog_service.py -v
"""
