"""Economy schema — users, ledger transactions, missions, store, queue, admin audit log.

Revision ID: 001_economy
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_economy"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False, server_default=""),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("plan", sa.String(40), nullable=False, server_default="Free Flow"),
        sa.Column("coins", sa.Integer, nullable=False, server_default="0"),
        sa.Column("xp", sa.Integer, nullable=False, server_default="0"),
        sa.Column("level", sa.Integer, nullable=False, server_default="1"),
        sa.Column("monthly_missions_completed", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_missions_completed", sa.Integer, nullable=False, server_default="0"),
        sa.Column("weekly_check_in_streak", sa.Integer, nullable=False, server_default="0"),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("source", sa.String(80), nullable=False, server_default=""),
        sa.Column("signature", sa.String(64), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])

    op.create_table(
        "missions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False, server_default=""),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("xp", sa.Integer, nullable=False, server_default="0"),
        sa.Column("coins", sa.Integer, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "mission_submissions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("mission_id", sa.String(64), sa.ForeignKey("missions.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("reward_xp", sa.Integer, nullable=True),
        sa.Column("reward_coins", sa.Integer, nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_mission_submissions_user_id", "mission_submissions", ["user_id"])

    op.create_table(
        "store_items",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("price", sa.Integer, nullable=False, server_default="0"),
        sa.Column("rarity", sa.String(20), nullable=True),
    )

    op.create_table(
        "redeemed_items",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("item_id", sa.String(64), nullable=False),
        sa.Column("item_name", sa.String(120), nullable=False),
        sa.Column("item_price", sa.Integer, nullable=False),
        sa.Column("coins_before", sa.Integer, nullable=False),
        sa.Column("coins_after", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="completed"),
        sa.Column("redeemed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_redeemed_items_user_id", "redeemed_items", ["user_id"])

    op.create_table(
        "queue_entries",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("item_id", sa.String(64), nullable=False),
        sa.Column("item_name", sa.String(120), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("priority", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_queue_entries_user_id", "queue_entries", ["user_id"])

    op.create_table(
        "admin_audit_log",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("action_name", sa.String(50), nullable=False),
        sa.Column("payload", sa.JSON, nullable=True),
        sa.Column("validation_result", sa.JSON, nullable=True),
        sa.Column("blocked", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("admin_audit_log")
    op.drop_index("ix_queue_entries_user_id", "queue_entries")
    op.drop_table("queue_entries")
    op.drop_index("ix_redeemed_items_user_id", "redeemed_items")
    op.drop_table("redeemed_items")
    op.drop_table("store_items")
    op.drop_index("ix_mission_submissions_user_id", "mission_submissions")
    op.drop_table("mission_submissions")
    op.drop_table("missions")
    op.drop_index("ix_transactions_user_id", "transactions")
    op.drop_table("transactions")
    op.drop_table("users")
