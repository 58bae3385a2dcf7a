"""Root conftest — shared test configuration."""

import os

# Ensure tests never pick up a real database or signing key
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("LEDGER_SIGNING_KEY", "test-signing-key")
