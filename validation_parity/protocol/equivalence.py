"""
Equivalence Protocol - certify that legacy and declarative validation agree.

For each (case, API version):

1. run the validator under the gate matrix (takeover on, everything off);
2. check each run's raw errors against the case's expected errors, or
   require zero errors when none are expected;
3. deduplicate the legacy errors;
4. require the deduplicated legacy errors to match the authoritative ones;
5. hand the object to the cross-version checker.

Every finding of a case is collected before failing, so one run shows all
divergent axes at once. Findings are never retried or downgraded.
"""

import time
from typing import Any, Callable, List, Optional, Sequence, Tuple

from validation_parity.comparison.diff_reporter import DiffReporter
from validation_parity.config.settings import Settings
from validation_parity.domain.context import ALL_OFF, build_context
from validation_parity.domain.errors import ErrorList
from validation_parity.exceptions import (
    CampaignFailure,
    CaseFailure,
    EquivalenceAssertionError,
    ExpectationMismatchError,
    ImplementationDivergenceError,
    VersionDivergenceError,
)
from validation_parity.fixtures.case_table import CaseTable, EquivalenceCase, expected_list
from validation_parity.gates.feature_gate import FeatureGate
from validation_parity.gates.runner import (
    GateMatrixResult,
    GateMatrixRunner,
    stamp_resource_version,
)
from validation_parity.matching.dedup import Deduplicator
from validation_parity.matching.matcher import ErrorMatcher, MatchResult, structural_matcher
from validation_parity.monitoring.comparison import (
    CampaignSummary,
    CaseComparison,
    ComparisonLogger,
    ComparisonMetricsPublisher,
    ComparisonStatus,
    finding_to_dict,
    new_run_id,
)
from validation_parity.protocol.strategy import ValidationStrategy, VersionChecker
from validation_parity.utils.logger import configure_logging, get_logger, log_operation

logger = get_logger(__name__)

_DEFAULT = object()

LegacyStage = Callable[[ErrorList], ErrorList]


class EquivalenceProtocol:
    """
    Dual-path verification for one resource type.

    Args:
        strategy: Object exposing ``validate(ctx, obj)`` and
            ``validate_update(ctx, obj, old)``, both returning errors
        feature_gate: Gate provider the runner overrides per run
        api_group: API group placed in each request context
        api_versions: Versions exercised by ``run_table``
        version_checker: Object exposing ``verify(obj, old=None)``; skipped
            when None
        output_matcher: Expected-vs-actual equivalence
        equivalence_matcher: Legacy-vs-authoritative equivalence, also used
            for deduplication by default
        dedupe_legacy: Legacy post-processing stage; None disables it
        verify_disabled_equivalence: Also run declarative-on/takeover-off
            and require it to match the imperative run
        comparison_logger: Structured verdict logger
        reporter: Writes JSON/Markdown reports per case when set
        metrics_publisher: Publishes campaign metrics when set
    """

    def __init__(
        self,
        strategy: ValidationStrategy,
        feature_gate: FeatureGate,
        api_group: str,
        api_versions: Sequence[str] = (),
        version_checker: Optional[VersionChecker] = None,
        output_matcher: Optional[ErrorMatcher] = None,
        equivalence_matcher: Optional[ErrorMatcher] = None,
        dedupe_legacy: Any = _DEFAULT,
        verify_disabled_equivalence: bool = False,
        comparison_logger: Optional[ComparisonLogger] = None,
        reporter: Optional[DiffReporter] = None,
        metrics_publisher: Optional[ComparisonMetricsPublisher] = None,
    ):
        self.strategy = strategy
        self.api_group = api_group
        self.api_versions = list(api_versions)
        self.version_checker = version_checker
        self.output_matcher = output_matcher or structural_matcher()
        self.equivalence_matcher = equivalence_matcher or structural_matcher()
        if dedupe_legacy is _DEFAULT:
            dedupe_legacy = Deduplicator(self.equivalence_matcher)
        self.dedupe_legacy: Optional[LegacyStage] = dedupe_legacy
        self.runner = GateMatrixRunner(feature_gate, verify_disabled_equivalence)
        self.comparison_logger = comparison_logger or ComparisonLogger(new_run_id(), api_group)
        self.reporter = reporter
        self.metrics_publisher = metrics_publisher

    @classmethod
    def from_settings(
        cls,
        strategy: ValidationStrategy,
        feature_gate: FeatureGate,
        api_group: str,
        default_versions: Sequence[str],
        settings: Optional[Settings] = None,
        **kwargs: Any,
    ) -> "EquivalenceProtocol":
        """Build a protocol whose versions, reports, metrics and log level follow Settings."""
        settings = settings or Settings()
        configure_logging(settings.log_level)
        if settings.reports_enabled and "reporter" not in kwargs:
            kwargs["reporter"] = DiffReporter(settings.report_dir)
        if settings.metrics_enabled and "metrics_publisher" not in kwargs:
            kwargs["metrics_publisher"] = ComparisonMetricsPublisher(settings.metrics_region)
        kwargs.setdefault("verify_disabled_equivalence", settings.verify_disabled_equivalence)
        return cls(
            strategy,
            feature_gate,
            api_group,
            settings.resolve_api_versions(list(default_versions)),
            **kwargs,
        )

    def _entry_point(self, case: EquivalenceCase):
        if case.is_update:
            new = stamp_resource_version(case.input)
            old = stamp_resource_version(case.old)
            return (lambda ctx: self.strategy.validate_update(ctx, new, old)), new, old
        obj = case.input
        return (lambda ctx: self.strategy.validate(ctx, obj)), obj, None

    def _finding(
        self,
        error_cls: type,
        matcher: ErrorMatcher,
        result: MatchResult,
        label: str,
    ) -> EquivalenceAssertionError:
        return error_cls(
            matcher.describe(result, label),
            label=label,
            missing=result.missing,
            unexpected=result.unexpected,
        )

    def check_expectations(
        self, case: EquivalenceCase, runs: GateMatrixResult
    ) -> List[EquivalenceAssertionError]:
        findings: List[EquivalenceAssertionError] = []
        if case.expected_errors is None:
            return findings
        for state, errors in runs.runs():
            label = f"{state.label} output vs expected"
            if case.expected_errors:
                result = self.output_matcher.compare(case.expected_errors, errors)
                if not result.ok:
                    findings.append(
                        self._finding(ExpectationMismatchError, self.output_matcher, result, label)
                    )
            elif errors:
                findings.append(
                    ExpectationMismatchError(
                        f"{label}: expected no errors, but got: {errors.render()}",
                        label=label,
                        unexpected=errors,
                    )
                )
        return findings

    def check_convergence(
        self, runs: GateMatrixResult, legacy: ErrorList
    ) -> List[EquivalenceAssertionError]:
        findings: List[EquivalenceAssertionError] = []
        result = self.equivalence_matcher.compare(legacy, runs.authoritative)
        if not result.ok:
            findings.append(
                self._finding(
                    ImplementationDivergenceError,
                    self.equivalence_matcher,
                    result,
                    "imperative (deduplicated) vs declarative-takeover",
                )
            )
        if runs.intermediate is not None:
            result = self.equivalence_matcher.compare(runs.legacy, runs.intermediate)
            if not result.ok:
                findings.append(
                    self._finding(
                        ImplementationDivergenceError,
                        self.equivalence_matcher,
                        result,
                        "imperative vs declarative-shadow",
                    )
                )
        return findings

    def check_versions(self, obj: Any, old: Any) -> List[EquivalenceAssertionError]:
        if self.version_checker is None:
            return []
        try:
            self.version_checker.verify(obj, old)
        except VersionDivergenceError as e:
            return [e]
        except AssertionError as e:
            return [VersionDivergenceError(str(e), label="cross-version check")]
        return []

    def evaluate(
        self, case: EquivalenceCase, api_version: str, check_versions: bool = True
    ) -> CaseComparison:
        """
        Run every step for one case and return the verdict without raising.

        Exceptions raised by the validator itself propagate.
        """
        comparison, _ = self._evaluate(case, api_version, check_versions)
        return comparison

    def _evaluate(
        self, case: EquivalenceCase, api_version: str, check_versions: bool
    ) -> Tuple[CaseComparison, List[EquivalenceAssertionError]]:
        start = time.time()
        entry_point, obj, old = self._entry_point(case)
        context = build_context(self.api_group, api_version, ALL_OFF)

        runs = self.runner.run(entry_point, context)
        legacy = self.dedupe_legacy(runs.legacy) if self.dedupe_legacy else runs.legacy

        findings = self.check_expectations(case, runs)
        findings.extend(self.check_convergence(runs, legacy))
        if check_versions:
            findings.extend(self.check_versions(obj, old))

        comparison = CaseComparison(
            case_name=case.name,
            api_version=api_version,
            operation="update" if case.is_update else "create",
            status=ComparisonStatus.MISMATCH if findings else ComparisonStatus.MATCH,
            authoritative_count=len(runs.authoritative),
            legacy_count=len(runs.legacy),
            deduped_legacy_count=len(legacy),
            findings=[finding_to_dict(f, self.equivalence_matcher.render) for f in findings],
            duration_ms=(time.time() - start) * 1000,
        )
        self._record(comparison)
        return comparison, findings

    def _record(self, comparison: CaseComparison) -> None:
        self.comparison_logger.log_case_comparison(comparison)
        if self.reporter is not None:
            self.reporter.write_reports(comparison)

    def verify(
        self, case: EquivalenceCase, api_version: str, check_versions: bool = True
    ) -> CaseComparison:
        """
        Verify one case under one API version.

        Raises:
            CaseFailure: With every finding of the case
        """
        comparison, findings = self._evaluate(case, api_version, check_versions)
        if findings:
            raise CaseFailure(f"{api_version}/{case.name}", findings)
        return comparison

    def verify_create(self, name: str, obj: Any, expected_errors=(), api_version: str = ""):
        """
        Verify an ad-hoc create case without building a table.

        With no expected errors the input must validate cleanly; None skips
        the expectation check, as on EquivalenceCase.
        """
        case = EquivalenceCase(name, obj, expected_list(expected_errors))
        return self.verify(case, api_version or self._first_version())

    def verify_update(
        self, name: str, old: Any, update: Any, expected_errors=(), api_version: str = ""
    ):
        """Verify an ad-hoc update case; ``expected_errors`` as for verify_create."""
        case = EquivalenceCase(name, update, expected_list(expected_errors), old=old)
        return self.verify(case, api_version or self._first_version())

    def _first_version(self) -> str:
        if not self.api_versions:
            raise ValueError("No API versions configured for this protocol")
        return self.api_versions[0]

    @log_operation("run_case_table")
    def run_table(
        self, table: CaseTable, api_versions: Optional[Sequence[str]] = None
    ) -> CampaignSummary:
        """
        Run every case of a table under every API version.

        Validator exceptions are recorded as ERROR verdicts so the rest of the
        table still runs. The cross-version check runs once per case.
        """
        versions = list(api_versions or table.api_versions or self.api_versions)
        if not versions:
            raise ValueError(f"No API versions to exercise for {table.api_group}")

        summary = CampaignSummary(
            run_id=self.comparison_logger.run_id,
            api_group=table.api_group or self.api_group,
            api_versions=versions,
        )
        start = time.time()
        for case in table.all_cases():
            for index, version in enumerate(versions):
                try:
                    comparison = self.evaluate(case, version, check_versions=index == 0)
                except Exception as e:
                    logger.error(
                        f"Validation raised for case {case.name}",
                        operation="run_case_table",
                        context={"case_name": case.name, "api_version": version},
                        error=str(e),
                    )
                    comparison = CaseComparison(
                        case_name=case.name,
                        api_version=version,
                        operation="update" if case.is_update else "create",
                        status=ComparisonStatus.ERROR,
                        error=f"{type(e).__name__}: {e}",
                    )
                    self._record(comparison)
                summary.comparisons.append(comparison)

        summary.processing_duration_ms = (time.time() - start) * 1000
        self.comparison_logger.log_summary(summary)
        if self.reporter is not None:
            self.reporter.write_aggregate_summary(summary)
        if self.metrics_publisher is not None:
            self.metrics_publisher.publish_campaign_summary(summary)
        return summary

    def assert_table(
        self, table: CaseTable, api_versions: Optional[Sequence[str]] = None
    ) -> CampaignSummary:
        """
        Run a table and fail if any comparison did not match.

        Raises:
            CampaignFailure: Listing every failing case and its findings
        """
        summary = self.run_table(table, api_versions)
        if summary.failed:
            details = []
            for comparison in summary.failed:
                if comparison.error:
                    details.append(f"{comparison.case_id}: {comparison.error}")
                for finding in comparison.findings:
                    details.append(f"{comparison.case_id}: {finding['message']}")
            raise CampaignFailure([c.case_id for c in summary.failed], details)
        return summary
