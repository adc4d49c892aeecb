"""initial_marketplace_schema

Revision ID: 3f1c9a7d2b64
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c9a7d2b64"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema - jobs, dispatches, assignments, monitoring, payments."""

    op.create_table(
        "jobs",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("scope", sa.Text(), nullable=True),
        sa.Column("job_poster_user_id", sa.UUID(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False, server_default="DRAFT"),
        sa.Column(
            "routing_status", sa.String(32), nullable=False, server_default="UNROUTED"
        ),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status_before_dispute", sa.String(32), nullable=True),
        # Money, integer cents
        sa.Column("labor_total_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "materials_total_cents", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column(
            "transaction_fee_cents", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column(
            "contractor_payout_cents", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column(
            "router_earnings_cents", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("broker_fee_cents", sa.Integer(), nullable=False, server_default="0"),
        # Ownership
        sa.Column("claimed_by_user_id", sa.UUID(), nullable=True),
        sa.Column("contractor_user_id", sa.UUID(), nullable=True),
        sa.Column("admin_routed_by_id", sa.UUID(), nullable=True),
        # Timing
        sa.Column("posted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("routing_due_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("first_routed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("routed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("contractor_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("customer_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("router_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("escrow_locked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_captured_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "estimated_completion_date", sa.DateTime(timezone=True), nullable=True
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("labor_total_cents >= 0", name="ck_jobs_labor_non_negative"),
        sa.CheckConstraint(
            "materials_total_cents >= 0", name="ck_jobs_materials_non_negative"
        ),
    )
    op.create_index("ix_jobs_job_poster_user_id", "jobs", ["job_poster_user_id"])
    op.create_index("ix_jobs_status", "jobs", ["status"])
    op.create_index("ix_jobs_routing_status", "jobs", ["routing_status"])
    op.create_index("ix_jobs_claimed_by_user_id", "jobs", ["claimed_by_user_id"])
    op.create_index("ix_jobs_contractor_user_id", "jobs", ["contractor_user_id"])
    op.create_index("ix_jobs_posted_at", "jobs", ["posted_at"])
    op.create_index(
        "idx_jobs_routing_queue", "jobs", ["routing_status", "status", "archived"]
    )
    op.create_index(
        "uq_jobs_router_single_unrouted_claim",
        "jobs",
        ["claimed_by_user_id"],
        unique=True,
        postgresql_where=sa.text(
            "routing_status = 'UNROUTED' AND claimed_by_user_id IS NOT NULL "
            "AND archived = false"
        ),
    )

    op.create_table(
        "job_dispatches",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("job_id", sa.UUID(), nullable=False),
        sa.Column("contractor_id", sa.UUID(), nullable=False),
        sa.Column("router_user_id", sa.UUID(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="PENDING"),
        sa.Column("token_hash", sa.String(64), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["job_id"], ["jobs.id"]),
        sa.UniqueConstraint("token_hash"),
    )
    op.create_index("ix_job_dispatches_job_id", "job_dispatches", ["job_id"])
    op.create_index(
        "ix_job_dispatches_contractor_id", "job_dispatches", ["contractor_id"]
    )
    op.create_index("ix_job_dispatches_status", "job_dispatches", ["status"])
    op.create_index(
        "idx_job_dispatches_job_status", "job_dispatches", ["job_id", "status"]
    )
    op.create_index(
        "idx_job_dispatches_status_expiry", "job_dispatches", ["status", "expires_at"]
    )
    op.create_index(
        "uq_job_dispatches_single_accepted",
        "job_dispatches",
        ["job_id"],
        unique=True,
        postgresql_where=sa.text("status = 'ACCEPTED'"),
    )

    op.create_table(
        "job_assignments",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("job_id", sa.UUID(), nullable=False),
        sa.Column("contractor_id", sa.UUID(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="ASSIGNED"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["job_id"], ["jobs.id"]),
        sa.UniqueConstraint("job_id"),
    )
    op.create_index(
        "ix_job_assignments_contractor_id", "job_assignments", ["contractor_id"]
    )

    op.create_table(
        "monitoring_events",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("job_id", sa.UUID(), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=True),
        sa.Column("handled_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["job_id"], ["jobs.id"]),
        sa.UniqueConstraint("job_id", "type", name="uq_monitoring_events_job_type"),
    )
    op.create_index(
        "idx_monitoring_events_created", "monitoring_events", ["created_at", "id"]
    )
    op.create_index(
        "idx_monitoring_events_type", "monitoring_events", ["type", "handled_at"]
    )

    op.create_table(
        "job_payments",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("job_id", sa.UUID(), nullable=False),
        sa.Column("provider_intent_id", sa.String(255), nullable=False),
        sa.Column("provider_status", sa.String(64), nullable=True),
        sa.Column("client_secret", sa.String(255), nullable=True),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(8), nullable=False, server_default="usd"),
        sa.Column("idempotency_key", sa.String(64), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="PENDING"),
        sa.Column("provider_refund_id", sa.String(255), nullable=True),
        sa.Column("refund_amount_cents", sa.Integer(), nullable=True),
        sa.Column("captured_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("refunded_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["job_id"], ["jobs.id"]),
        sa.UniqueConstraint("job_id"),
    )
    op.create_index(
        "ix_job_payments_provider_intent_id", "job_payments", ["provider_intent_id"]
    )
    op.create_index("ix_job_payments_status", "job_payments", ["status"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("job_payments")
    op.drop_table("monitoring_events")
    op.drop_table("job_assignments")
    op.drop_table("job_dispatches")
    op.drop_table("jobs")
