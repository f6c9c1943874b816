"""
Receipt Engine - Source Package

A proportional-distribution ledger. Value deposited over time is split
among a changing set of weighted members, and each member redeems its
share exactly once.

DESIGN PRINCIPLES:
1. Integer arithmetic only - no floats anywhere near balances
2. Deposits are O(1) regardless of member count
3. A call commits completely or not at all
4. Every step must be auditable
5. Storage and transfers are swappable collaborators
"""

__version__ = "0.2.0"
__author__ = "Receipt Engine Team"

CONTRACT_NAME = "receipt-engine"
