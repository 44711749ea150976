# HashLedger Test Suite
"""
Test suite including:
- Unit tests (hash primitives, codec, chain engine)
- Integration tests (session, config, demo)
- Security tests (tampering scenarios)

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
