"""AdminAuditLog ORM — logging table for every admin action the monitor evaluates.

Invariants:
    - Every evaluated action (allowed or blocked) is logged
    - blocked is True iff a high-severity rule failed

Design Decisions:
    - Logging table, not enforcement: blocking happens in the monitor, this only records it
    - JSON columns for payload/results: action payloads differ per action kind
"""

from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from econ_sentinel.db.base import Base, new_id


class AdminAuditLog(Base):
    """Admin action audit entry."""
    __tablename__ = "admin_audit_log"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    action_name: Mapped[str] = mapped_column(String(50), nullable=False)
    payload: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    validation_result: Mapped[list | None] = mapped_column(JSON, nullable=True)
    blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
