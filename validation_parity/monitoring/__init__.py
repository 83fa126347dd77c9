"""Monitoring and telemetry module for equivalence campaigns."""

from validation_parity.monitoring.comparison import (
    CampaignSummary,
    CaseComparison,
    ComparisonLogger,
    ComparisonMetricsPublisher,
    ComparisonStatus,
    finding_to_dict,
    new_run_id,
)

__all__ = [
    "CampaignSummary",
    "CaseComparison",
    "ComparisonLogger",
    "ComparisonMetricsPublisher",
    "ComparisonStatus",
    "finding_to_dict",
    "new_run_id",
]
