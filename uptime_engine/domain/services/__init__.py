"""Domain services - Business logic that doesn't fit in entities."""

from uptime_engine.domain.services.chart_bucketizer import ChartBucketizer
from uptime_engine.domain.services.status_derivation_service import (
    StatusDerivationService,
)
from uptime_engine.domain.services.uptime_calculator import UptimeCalculator

__all__ = [
    "StatusDerivationService",
    "UptimeCalculator",
    "ChartBucketizer",
]
