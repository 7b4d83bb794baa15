"""SQLAlchemy models for services, incidents and the service status log.

These models map domain entities to PostgreSQL tables using SQLAlchemy ORM.
Services and incidents use UUID primary keys; the status log uses a BIGINT
identity whose value doubles as the insertion order of entries.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DDL,
    ForeignKey,
    Identity,
    Index,
    String,
    Table,
    Text,
    event,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from uptime_engine.domain.entities.status_log_entry import StatusLogImmutableError

SERVICE_STATUS_VALUES = "('operational', 'degraded', 'partial_outage', 'major_outage')"


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all SQLAlchemy models with async support."""

    pass


incident_services = Table(
    "incident_services",
    Base.metadata,
    Column(
        "incident_id",
        UUID(as_uuid=True),
        ForeignKey("incidents.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "service_id",
        UUID(as_uuid=True),
        ForeignKey("services.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class ServiceModel(Base):
    """SQLAlchemy model for the services table."""

    __tablename__ = "services"

    id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    organization_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Live status: projection of the latest status log entry
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="operational"
    )
    status_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint(
            f"status IN {SERVICE_STATUS_VALUES}",
            name="ck_services_status",
        ),
    )


class IncidentModel(Base):
    """SQLAlchemy model for the incidents table.

    ``severity`` is stored as received from the incident provider and is not
    constrained; unknown values map to operational during derivation.
    """

    __tablename__ = "incidents"

    id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    organization_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False, default="low")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="investigating"
    )
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    services: Mapped[list[ServiceModel]] = relationship(
        secondary=incident_services, lazy="selectin"
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('investigating', 'identified', 'monitoring', 'resolved')",
            name="ck_incidents_status",
        ),
    )


class ServiceStatusLogModel(Base):
    """SQLAlchemy model for the service_status_logs table.

    Append-only: the ORM refuses updates and deletes of persisted rows (see the
    mapper events below). ``id`` is an identity column used as the insertion
    order tie-breaker for entries sharing a ``changed_at``.
    """

    __tablename__ = "service_status_logs"

    id: Mapped[int] = mapped_column(
        BigInteger, Identity(always=True), primary_key=True
    )
    entry_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, unique=True, default=uuid4
    )
    service_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("services.id", ondelete="RESTRICT"),
        nullable=False,
    )
    status_from: Mapped[str | None] = mapped_column(String(20), nullable=True)
    status_to: Mapped[str] = mapped_column(String(20), nullable=False)
    changed_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    changed_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False
    )

    __table_args__ = (
        Index("ix_service_status_logs_service_changed_at", "service_id", "changed_at"),
        CheckConstraint(
            f"status_to IN {SERVICE_STATUS_VALUES}",
            name="ck_status_logs_status_to",
        ),
        CheckConstraint(
            f"status_from IS NULL OR status_from IN {SERVICE_STATUS_VALUES}",
            name="ck_status_logs_status_from",
        ),
    )


@event.listens_for(ServiceStatusLogModel, "before_update")
def _refuse_status_log_update(mapper, connection, target):
    raise StatusLogImmutableError(
        f"Status log entry {target.id} is append-only and cannot be modified"
    )


@event.listens_for(ServiceStatusLogModel, "before_delete")
def _refuse_status_log_delete(mapper, connection, target):
    raise StatusLogImmutableError(
        f"Status log entry {target.id} is append-only and cannot be deleted"
    )


# Database-level guard for clients that bypass the ORM. The migration installs
# the same trigger; create_all installs it through these DDL events.
_REJECT_STATUS_LOG_MUTATION = DDL(
    """
    CREATE OR REPLACE FUNCTION reject_status_log_mutation()
    RETURNS TRIGGER AS $$
    BEGIN
        RAISE EXCEPTION USING MESSAGE =
            'service_status_logs is append-only (' || TG_OP || ' refused)';
    END;
    $$ LANGUAGE plpgsql
    """
)
_STATUS_LOG_APPEND_ONLY_TRIGGER = DDL(
    """
    CREATE TRIGGER service_status_logs_append_only
        BEFORE UPDATE OR DELETE ON service_status_logs
        FOR EACH ROW
        EXECUTE FUNCTION reject_status_log_mutation()
    """
)

event.listen(
    ServiceStatusLogModel.__table__,
    "after_create",
    _REJECT_STATUS_LOG_MUTATION.execute_if(dialect="postgresql"),
)
event.listen(
    ServiceStatusLogModel.__table__,
    "after_create",
    _STATUS_LOG_APPEND_ONLY_TRIGGER.execute_if(dialect="postgresql"),
)
