"""Diff Reporter - Generate structured equivalence results and markdown summaries."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Tuple

from validation_parity.monitoring.comparison import CampaignSummary, CaseComparison

logger = logging.getLogger(__name__)

DEFAULT_RESULTS_DIR = Path("parity-results")


class DiffReporter:
    """Generate per-case equivalence artifacts (JSON + Markdown) and a summary."""

    def __init__(self, output_dir: Path | str | None = None) -> None:
        self.output_dir = Path(output_dir) if output_dir is not None else DEFAULT_RESULTS_DIR
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def safe_name(comparison: CaseComparison) -> str:
        raw = f"{comparison.operation}_{comparison.api_version}_{comparison.case_name}"
        return "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in raw)

    def generate_json_report(self, comparison: CaseComparison) -> str:
        report = {
            "metadata": {
                "case_name": comparison.case_name,
                "api_version": comparison.api_version,
                "operation": comparison.operation,
                "generated_at": datetime.now().isoformat(),
            },
            "statistics": {
                "status": comparison.status.value,
                "authoritative_count": comparison.authoritative_count,
                "legacy_count": comparison.legacy_count,
                "deduped_legacy_count": comparison.deduped_legacy_count,
                "finding_count": len(comparison.findings),
                "duration_ms": round(comparison.duration_ms, 2),
            },
            "findings": comparison.findings,
        }
        if comparison.error:
            report["error"] = comparison.error

        return json.dumps(report, indent=2, default=str)

    def generate_markdown_summary(self, comparison: CaseComparison) -> str:
        md_lines = [
            f"# Equivalence Report: {comparison.case_name}",
            f"**API Version:** {comparison.api_version}",
            f"**Operation:** {comparison.operation}",
            f"**Generated:** {datetime.now().isoformat()}",
            "",
            "## Summary",
            f"- **Status:** {comparison.status.value.upper()}",
            f"- **Authoritative errors:** {comparison.authoritative_count}",
            f"- **Legacy errors:** {comparison.legacy_count}"
            f" ({comparison.deduped_legacy_count} after dedup)",
            "",
        ]

        if comparison.error:
            md_lines.extend(["## Execution Error", "", f"`{comparison.error}`", ""])

        if comparison.findings:
            md_lines.append("## Findings")
            md_lines.append("")
            for finding in comparison.findings:
                md_lines.append(f"### {finding['kind']}: {finding['label']}")
                for rendered in finding["missing"]:
                    md_lines.append(f"- missing: `{rendered}`")
                for rendered in finding["unexpected"]:
                    md_lines.append(f"- unexpected: `{rendered}`")
                md_lines.append("")
        elif not comparison.error:
            md_lines.append("Error sets are equivalent.")

        return "\n".join(md_lines)

    def write_reports(self, comparison: CaseComparison) -> Tuple[Path, Path]:
        name = self.safe_name(comparison)
        json_path = self.output_dir / f"{name}.json"
        md_path = self.output_dir / f"{name}.md"

        json_path.write_text(self.generate_json_report(comparison), encoding="utf-8")
        md_path.write_text(self.generate_markdown_summary(comparison), encoding="utf-8")

        logger.info("Wrote equivalence reports for %s", comparison.case_id)
        logger.debug("  JSON: %s", json_path)
        logger.debug("  Markdown: %s", md_path)

        return json_path, md_path

    def generate_aggregate_summary(self, summary: CampaignSummary) -> str:
        total = len(summary.comparisons)
        passed = total - len(summary.failed)
        pass_rate = (passed / total * 100) if total else 100.0

        md_lines = [
            f"# Declarative Validation Equivalence - {summary.api_group or 'core'}",
            f"**Run:** {summary.run_id}",
            f"**Generated:** {datetime.now().isoformat()}",
            f"**API Versions:** {', '.join(summary.api_versions) or '-'}",
            "",
            "## Overall Results",
            f"- **Comparisons:** {total}",
            f"- **Passed:** {passed}",
            f"- **Mismatched:** {summary.total_mismatches}",
            f"- **Errored:** {summary.error_count}",
            f"- **Pass Rate:** {pass_rate:.1f}%",
            "",
            "## Detailed Results",
            "",
        ]

        ordered: List[CaseComparison] = sorted(
            summary.comparisons, key=lambda c: (c.operation, c.case_name, c.api_version)
        )
        for comparison in ordered:
            kinds = ", ".join(f["kind"] for f in comparison.findings) or "-"
            md_lines.append(
                f"- {comparison.status.value.upper()} **{comparison.operation}/"
                f"{comparison.case_name}** @ {comparison.api_version} (findings: {kinds})"
            )

        return "\n".join(md_lines)

    def write_aggregate_summary(self, summary: CampaignSummary) -> Path:
        summary_path = self.output_dir / "SUMMARY.md"
        summary_path.write_text(self.generate_aggregate_summary(summary), encoding="utf-8")
        (self.output_dir / "summary.json").write_text(
            json.dumps(summary.to_dict(), indent=2, default=str), encoding="utf-8"
        )
        logger.info("Wrote aggregate summary: %s", summary_path)
        return summary_path
