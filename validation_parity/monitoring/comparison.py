"""
Comparison Telemetry Module

Structured logging and CloudWatch metrics for equivalence campaigns:
- One structured log line per case verdict and per campaign summary
- Custom metrics under the validation-parity/equivalence namespace
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

import boto3


def _get_iso_timestamp() -> str:
    """Get current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ComparisonStatus(Enum):
    """Comparison status codes."""

    MATCH = "match"
    MISMATCH = "mismatch"
    ERROR = "error"


@dataclass
class CaseComparison:
    """Verdict for one case under one API version."""

    case_name: str
    api_version: str
    operation: str  # "create" or "update"
    status: ComparisonStatus = ComparisonStatus.MATCH
    authoritative_count: int = 0
    legacy_count: int = 0
    deduped_legacy_count: int = 0
    findings: List[Dict[str, Any]] = field(default_factory=list)
    error: str = ""
    duration_ms: float = 0.0
    timestamp: str = field(default_factory=_get_iso_timestamp)

    @property
    def passed(self) -> bool:
        return self.status == ComparisonStatus.MATCH

    @property
    def case_id(self) -> str:
        return f"{self.api_version}/{self.case_name}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class CampaignSummary:
    """Overall result of running a case table."""

    run_id: str
    api_group: str
    invocation_time: str = field(default_factory=_get_iso_timestamp)
    api_versions: List[str] = field(default_factory=list)
    comparisons: List[CaseComparison] = field(default_factory=list)
    processing_duration_ms: float = 0.0

    @property
    def failed(self) -> List[CaseComparison]:
        return [c for c in self.comparisons if not c.passed]

    @property
    def error_count(self) -> int:
        return sum(1 for c in self.comparisons if c.status == ComparisonStatus.ERROR)

    @property
    def total_mismatches(self) -> int:
        return sum(1 for c in self.comparisons if c.status == ComparisonStatus.MISMATCH)

    def calculate_match_percentage(self) -> float:
        """Share of comparisons that matched; 100 for an empty campaign."""
        if not self.comparisons:
            return 100.0
        matched = sum(1 for c in self.comparisons if c.passed)
        return (matched / len(self.comparisons)) * 100.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "run_id": self.run_id,
            "api_group": self.api_group,
            "invocation_time": self.invocation_time,
            "api_versions": list(self.api_versions),
            "comparisons": [c.to_dict() for c in self.comparisons],
            "total_mismatches": self.total_mismatches,
            "error_count": self.error_count,
            "match_percentage": self.calculate_match_percentage(),
            "processing_duration_ms": self.processing_duration_ms,
        }


class ComparisonMetricsPublisher:
    """
    Publishes campaign metrics to CloudWatch.

    Metrics:
    - cases_compared
    - match_percentage
    - mismatches
    - error_count
    - processing_duration_ms
    """

    NAMESPACE = "validation-parity/equivalence"

    def __init__(self, region_name: str = "us-east-1", client: Any = None):
        """
        Initialize metrics publisher.

        Args:
            region_name: AWS region for CloudWatch
            client: Preconfigured CloudWatch client (created lazily if omitted)
        """
        self.region_name = region_name
        self._client = client
        self.logger = logging.getLogger(__name__)

    @property
    def cloudwatch_client(self):
        if self._client is None:
            self._client = boto3.client("cloudwatch", region_name=self.region_name)
        return self._client

    def build_metric_data(self, summary: CampaignSummary) -> List[Dict[str, Any]]:
        timestamp = datetime.now(timezone.utc)
        dimensions = [
            {"Name": "ApiGroup", "Value": summary.api_group or "core"},
            {"Name": "ComparisonRun", "Value": summary.run_id},
        ]
        values = [
            ("cases_compared", len(summary.comparisons), "Count"),
            ("match_percentage", summary.calculate_match_percentage(), "Percent"),
            ("mismatches", summary.total_mismatches, "Count"),
            ("error_count", summary.error_count, "Count"),
            ("processing_duration_ms", summary.processing_duration_ms, "Milliseconds"),
        ]
        return [
            {
                "MetricName": name,
                "Value": value,
                "Unit": unit,
                "Timestamp": timestamp,
                "Dimensions": dimensions,
            }
            for name, value, unit in values
        ]

    def publish_campaign_summary(self, summary: CampaignSummary) -> bool:
        """
        Publish campaign summary metrics to CloudWatch.

        Transport failures are logged and swallowed: metrics never decide a
        verdict.

        Returns:
            True if every batch was published
        """
        try:
            metric_data = self.build_metric_data(summary)
            # CloudWatch accepts at most 20 metrics per request
            for i in range(0, len(metric_data), 20):
                batch = metric_data[i : i + 20]
                self.cloudwatch_client.put_metric_data(Namespace=self.NAMESPACE, MetricData=batch)
                self.logger.debug(f"Published {len(batch)} metrics to CloudWatch")

            self.logger.info(
                f"Equivalence metrics published: "
                f"match_percentage={summary.calculate_match_percentage():.1f}%, "
                f"mismatches={summary.total_mismatches}"
            )
            return True

        except Exception as e:
            self.logger.error(f"Failed to publish equivalence metrics: {e}")
            return False


class ComparisonLogger:
    """Structured logger for case verdicts and campaign summaries."""

    def __init__(self, run_id: str, api_group: str = ""):
        """
        Args:
            run_id: Unique identifier for this campaign
            api_group: API group under test
        """
        self.run_id = run_id
        self.api_group = api_group
        self.logger = logging.getLogger(__name__)

    def log_case_comparison(self, comparison: CaseComparison) -> None:
        log_entry = {
            "timestamp": _get_iso_timestamp(),
            "level": "INFO" if comparison.passed else "WARNING",
            "run_id": self.run_id,
            "api_group": self.api_group,
            "event_type": "case_comparison",
            "case_name": comparison.case_name,
            "api_version": comparison.api_version,
            "operation": comparison.operation,
            "status": comparison.status.value,
            "authoritative_count": comparison.authoritative_count,
            "legacy_count": comparison.legacy_count,
            "deduped_legacy_count": comparison.deduped_legacy_count,
            "finding_kinds": [f.get("kind") for f in comparison.findings],
        }
        if comparison.error:
            log_entry["error"] = comparison.error
        line = json.dumps(log_entry, ensure_ascii=False)
        if comparison.passed:
            self.logger.info(line)
        else:
            self.logger.warning(line)

    def log_summary(self, summary: CampaignSummary) -> None:
        log_entry = {
            "timestamp": _get_iso_timestamp(),
            "level": "INFO",
            "run_id": summary.run_id,
            "api_group": summary.api_group,
            "event_type": "campaign_summary",
            "api_versions": summary.api_versions,
            "cases_compared": len(summary.comparisons),
            "total_mismatches": summary.total_mismatches,
            "error_count": summary.error_count,
            "match_percentage": round(summary.calculate_match_percentage(), 2),
            "processing_duration_ms": round(summary.processing_duration_ms, 2),
        }
        self.logger.info(json.dumps(log_entry, ensure_ascii=False))


def finding_to_dict(finding: Any, render=str) -> Dict[str, Any]:
    """
    Serialize an equivalence finding for logs and reports.

    Args:
        finding: EquivalenceAssertionError instance
        render: Callable rendering one StructuredError
    """
    return {
        "kind": getattr(finding, "kind", "unknown"),
        "label": getattr(finding, "label", ""),
        "message": str(finding),
        "missing": [render(e) for e in getattr(finding, "missing", [])],
        "unexpected": [render(e) for e in getattr(finding, "unexpected", [])],
    }


def new_run_id(prefix: Optional[str] = None) -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    return f"{prefix}-{stamp}" if prefix else stamp
