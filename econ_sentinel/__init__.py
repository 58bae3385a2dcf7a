"""Economic-Integrity Service — ledger gate, sanity rules and economy sentinel.

Invariants:
    - Package root contains no executable code beyond the version constant

Design Decisions:
    - Explicit imports only, no star exports (ADR: ExMA no convention-over-config)
"""

__version__ = "1.0.0"
