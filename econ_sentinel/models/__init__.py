"""ORM Models — SQLAlchemy declarative models for the economy collections.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every table is keyed by an opaque string id

Design Decisions:
    - One file per entity for locality (ADR: ExMA max 3-4 files to understand a feature)
    - All models imported here so Base.metadata is complete before create_all / alembic
"""

from econ_sentinel.models.user import User  # noqa: F401
from econ_sentinel.models.transaction import Transaction  # noqa: F401
from econ_sentinel.models.mission import Mission  # noqa: F401
from econ_sentinel.models.mission_submission import MissionSubmission  # noqa: F401
from econ_sentinel.models.store_item import StoreItem  # noqa: F401
from econ_sentinel.models.redeemed_item import RedeemedItem  # noqa: F401
from econ_sentinel.models.queue_entry import QueueEntry  # noqa: F401
from econ_sentinel.models.admin_audit_log import AdminAuditLog  # noqa: F401
