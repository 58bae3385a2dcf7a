"""Ledger Operation — the per-mutation record and its audit signature.

Invariants:
    - A LedgerOperation is created and consumed inside a single LedgerCore.apply call
    - canonical() is the exact byte string that gets signed; field order is fixed
    - sign_operation is deterministic for a given (operation, key)

Design Decisions:
    - HMAC-SHA256 with a server-side key instead of an unkeyed checksum: an unkeyed
      hash can be recomputed by anyone who edits a log line, a keyed MAC cannot
      without the key (ADR: tamper-evidence for the audit trail)
    - The signature is still NOT an authorization control: it proves a log line was
      emitted by a holder of the key, nothing about whether the mutation was allowed
"""

import hashlib
import hmac
import secrets
import time
from dataclasses import dataclass

from econ_sentinel.core.domain_types import LedgerKind

SECURE_ID_HASH_LENGTH = 12


@dataclass(frozen=True)
class LedgerOperation:
    user_id: str
    kind: LedgerKind
    delta: int
    source: str
    timestamp_ms: int
    nonce: str

    def canonical(self) -> str:
        return (
            f"{self.user_id}:{self.kind.value}:{self.delta}:"
            f"{self.source}:{self.timestamp_ms}:{self.nonce}"
        )


def sign_operation(operation: LedgerOperation, key: str) -> str:
    return hmac.new(
        key.encode("utf-8"),
        operation.canonical().encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(operation: LedgerOperation, key: str, signature: str) -> bool:
    return hmac.compare_digest(sign_operation(operation, key), signature)


def generate_nonce() -> str:
    return secrets.token_hex(16)


def generate_secure_id(prefix: str, context: str) -> str:
    """Mint a ticket-style identifier: PREFIX-HEXHASH. Not a balance-safety control."""
    raw = f"{prefix}:{context}:{time.time_ns()}:{secrets.token_hex(8)}"
    digest = hashlib.sha256(raw.encode("utf-8")).hexdigest()
    return f"{prefix}-{digest[:SECURE_ID_HASH_LENGTH].upper()}"
