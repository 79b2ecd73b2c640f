"""Create sos_events, volunteers and volunteer_responses tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "sos_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sos_events_owner_id"), "sos_events", ["owner_id"], unique=False)
    op.create_index(op.f("ix_sos_events_status"), "sos_events", ["status"], unique=False)

    op.create_table(
        "volunteers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("max_range_meters", sa.Float(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    )

    op.create_table(
        "volunteer_responses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sos_event_id", sa.Integer(), nullable=False),
        sa.Column("volunteer_id", sa.String(64), nullable=False),
        sa.Column("decision", sa.String(20), nullable=False),
        sa.Column("estimated_arrival", sa.String(100), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["sos_event_id"], ["sos_events.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_volunteer_responses_sos_event_id"), "volunteer_responses", ["sos_event_id"], unique=False)
    op.create_index(op.f("ix_volunteer_responses_volunteer_id"), "volunteer_responses", ["volunteer_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_volunteer_responses_volunteer_id"), table_name="volunteer_responses")
    op.drop_index(op.f("ix_volunteer_responses_sos_event_id"), table_name="volunteer_responses")
    op.drop_table("volunteer_responses")
    op.drop_table("volunteers")
    op.drop_index(op.f("ix_sos_events_status"), table_name="sos_events")
    op.drop_index(op.f("ix_sos_events_owner_id"), table_name="sos_events")
    op.drop_table("sos_events")
