"""add_intent_revision_to_job_payments

Revision ID: 8b2e4f61c0d9
Revises: 3f1c9a7d2b64
Create Date: 2026-10-19 10:12:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8b2e4f61c0d9"
down_revision: Union[str, Sequence[str], None] = "3f1c9a7d2b64"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Number of intents replaced on this job; part of the idempotency key
    op.add_column(
        "job_payments",
        sa.Column("intent_revision", sa.Integer(), nullable=False, server_default="0"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_column("job_payments", "intent_revision")
