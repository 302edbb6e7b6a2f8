# pairguard Test Suite
"""
Test suite including:
- Unit tests per component
- End-to-end pairing and sealing scenarios
- Security tests (tampering, invalid keys, secret leakage)

Run with: pytest
"""
