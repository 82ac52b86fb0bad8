"""
Test Suite for the auto manufacturer risk report

Includes:
- Unit tests for return and statistics calculations
- Mocked provider tests (no live network calls)
- Pipeline tests with synthetic price histories
- Report rendering tests
"""
