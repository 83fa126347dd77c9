"""
Exception hierarchy for the validation parity harness.

Two families live here:

- ``ParityError`` and its subclasses signal misuse of the harness itself
  (bad configuration, malformed case tables, unknown feature gates).
- ``EquivalenceAssertionError`` and its subclasses are verdicts. They derive
  from ``AssertionError`` so pytest reports them as test failures, and they
  carry the unmatched errors from both sides of the comparison.
"""

from typing import Any, List, Optional, Sequence


class ParityError(Exception):
    """Base exception for harness configuration and usage errors."""

    pass


class ConfigurationError(ParityError):
    """Raised when harness settings cannot be loaded or are invalid."""

    pass


class FixtureError(ParityError):
    """
    Raised when a case table cannot be loaded.

    Covers unreadable files, invalid YAML, schema violations and entries that
    reference unknown error types.
    """

    pass


class UnknownFeatureGateError(ParityError):
    """Raised when a feature gate name was never registered."""

    def __init__(self, name: str, known: Sequence[str] = ()):
        self.name = name
        self.known = list(known)
        message = f"Unknown feature gate: {name}"
        if self.known:
            message += f" (known: {', '.join(sorted(self.known))})"
        super().__init__(message)


class EquivalenceAssertionError(AssertionError):
    """
    Base class for every equivalence verdict failure.

    Attributes:
        label: Short description of the comparison that failed
        missing: Expected errors with no matching actual error
        unexpected: Actual errors with no matching expected error
    """

    kind = "equivalence"

    def __init__(
        self,
        message: str,
        label: str = "",
        missing: Optional[Sequence[Any]] = None,
        unexpected: Optional[Sequence[Any]] = None,
    ):
        super().__init__(message)
        self.label = label
        self.missing: List[Any] = list(missing or [])
        self.unexpected: List[Any] = list(unexpected or [])


class ExpectationMismatchError(EquivalenceAssertionError):
    """Actual errors diverge from the errors authored in a case table."""

    kind = "expectation"


class ImplementationDivergenceError(EquivalenceAssertionError):
    """Deduplicated legacy errors and authoritative errors disagree."""

    kind = "divergence"


class VersionDivergenceError(EquivalenceAssertionError):
    """Validation outcome differs between two API versions of one object."""

    kind = "version"


class CaseFailure(AssertionError):
    """
    All findings collected while verifying one case.

    The protocol keeps checking after the first finding so a maintainer sees
    every divergent axis at once, then raises this aggregate.
    """

    def __init__(self, case_name: str, findings: Sequence[EquivalenceAssertionError]):
        self.case_name = case_name
        self.findings = list(findings)
        lines = [f"case {case_name!r} failed with {len(self.findings)} finding(s):"]
        for finding in self.findings:
            lines.append(f"[{finding.kind}] {finding}")
        super().__init__("\n".join(lines))


class CampaignFailure(AssertionError):
    """One or more cases of a case table failed."""

    def __init__(self, failed_cases: Sequence[str], details: Sequence[str] = ()):
        self.failed_cases = list(failed_cases)
        lines = [f"{len(self.failed_cases)} case(s) failed equivalence:"]
        lines.extend(f"  - {name}" for name in self.failed_cases)
        if details:
            lines.append("")
            lines.extend(details)
        super().__init__("\n".join(lines))
