"""create_service_status_logs_table

Revision ID: 8c4d2b7e51a3
Revises: 3a1f6c2e9b10
Create Date: 2026-10-19 09:31:07.204766

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "8c4d2b7e51a3"
down_revision: str | Sequence[str] | None = "3a1f6c2e9b10"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the append-only service_status_logs table."""
    op.create_table(
        "service_status_logs",
        sa.Column(
            "id",
            sa.BigInteger,
            sa.Identity(always=True),
            primary_key=True,
        ),
        sa.Column("entry_id", postgresql.UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column(
            "service_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("services.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("status_from", sa.String(20), nullable=True),
        sa.Column("status_to", sa.String(20), nullable=False),
        sa.Column("changed_by", sa.String(255), nullable=True),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column("changed_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status_to IN ('operational', 'degraded', 'partial_outage', 'major_outage')",
            name="ck_status_logs_status_to",
        ),
        sa.CheckConstraint(
            "status_from IS NULL OR status_from IN "
            "('operational', 'degraded', 'partial_outage', 'major_outage')",
            name="ck_status_logs_status_from",
        ),
    )

    # Replay order is (changed_at, id) per service
    op.create_index(
        "ix_service_status_logs_service_changed_at",
        "service_status_logs",
        ["service_id", "changed_at"],
    )

    # Reject row-level UPDATE and DELETE from any client, not only the ORM
    op.execute(
        """
        CREATE OR REPLACE FUNCTION reject_status_log_mutation()
        RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION USING MESSAGE =
                'service_status_logs is append-only (' || TG_OP || ' refused)';
        END;
        $$ LANGUAGE plpgsql;
        """
    )
    op.execute(
        """
        CREATE TRIGGER service_status_logs_append_only
            BEFORE UPDATE OR DELETE ON service_status_logs
            FOR EACH ROW
            EXECUTE FUNCTION reject_status_log_mutation();
        """
    )


def downgrade() -> None:
    """Drop service_status_logs table and its trigger."""
    op.execute(
        "DROP TRIGGER IF EXISTS service_status_logs_append_only ON service_status_logs"
    )
    op.execute("DROP FUNCTION IF EXISTS reject_status_log_mutation()")
    op.drop_index(
        "ix_service_status_logs_service_changed_at", table_name="service_status_logs"
    )
    op.drop_table("service_status_logs")
