"""Coach Digital Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - memory/: Extractor (gate, fields, extractor), notes store, processor
  - messaging/: Conversation log, phone helpers, verification codes
- integration/: API tests through the FastAPI test client

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/memory/

    # With coverage
    pytest --cov=coach --cov-report=term-missing
"""
