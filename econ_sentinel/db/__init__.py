"""Database Infrastructure — SQLAlchemy Base shared by every economy table.

Invariants:
    - Single async engine per process (initialized via init_db in infrastructure/database.py)
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL (ADR: native async, no thread pool overhead)
"""
