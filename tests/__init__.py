"""
Test suite for the Liquor Price Book Scanner.

Run all tests: pytest
Run with coverage: pytest --cov=. --cov-report=html
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_session_service.py -v
"""
