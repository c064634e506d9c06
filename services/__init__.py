"""
Warranty Ledger Services
========================

Services:
- ledger: Product authenticity, ownership and warranty lifecycle ledger
"""

__all__ = [
    "ledger",
]
