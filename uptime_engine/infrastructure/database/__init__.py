"""Database infrastructure.

This package contains:
- SQLAlchemy models
- Repository implementations
- Database configuration and session management
"""

from uptime_engine.infrastructure.database.models import (
    Base,
    IncidentModel,
    ServiceModel,
    ServiceStatusLogModel,
)

__all__ = [
    "Base",
    "ServiceModel",
    "IncidentModel",
    "ServiceStatusLogModel",
]
