"""Services Layer — IO around the pure core: ledger gate, admin monitor, sentinel.

Invariants:
    - Services talk to persistence only through EconomyRepository
    - Rules are never re-implemented here; services call core/ and record outcomes

Design Decisions:
    - One service per concern for locality (ADR: ExMA no god objects)
"""
