"""
Warranty Ledger Test Suite
==========================

- tests/unit/             - shared auth and logging helpers
- tests/services/ledger/  - ledger components, engine, storage and HTTP API

Run tests:
    pytest
    pytest tests/services/ledger
"""
