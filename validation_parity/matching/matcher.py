"""
Error Matcher - configurable equivalence between structured errors.

Two validators never agree on message wording, so comparisons are made on
selected structural axes only. An ``ErrorMatcher`` is an immutable value:
each ``by_*`` selector returns a new matcher with one more axis enabled,
which keeps matchers shareable between tests and comparable with ``==``.

    output_matcher = ErrorMatcher().by_type().by_field().by_origin()
    output_matcher.test(expected_errors, actual_errors)
"""

import re
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from validation_parity.domain.errors import (
    ErrorList,
    ErrorType,
    StructuredError,
    as_error_list,
)
from validation_parity.exceptions import ExpectationMismatchError
from validation_parity.utils.logger import get_logger, summarize_value

logger = get_logger(__name__)


@dataclass
class MatchResult:
    """Outcome of comparing an expected error list with an actual one."""

    matched: List[Tuple[StructuredError, StructuredError]] = field(default_factory=list)
    missing: ErrorList = field(default_factory=ErrorList)
    unexpected: ErrorList = field(default_factory=ErrorList)
    problems: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing and not self.unexpected and not self.problems

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class ErrorMatcher:
    """
    Equivalence predicate over two structured errors.

    Every axis left disabled is a wildcard. A matcher with no axes enabled
    matches any pair of errors, so lists compare by length only.
    """

    match_type: bool = False
    match_field: bool = False
    match_value: bool = False
    match_origin: bool = False
    detail_mode: str = ""
    origin_required_for_invalid: bool = False

    def by_type(self) -> "ErrorMatcher":
        return replace(self, match_type=True)

    def by_field(self) -> "ErrorMatcher":
        return replace(self, match_field=True)

    def by_value(self) -> "ErrorMatcher":
        return replace(self, match_value=True)

    def by_origin(self) -> "ErrorMatcher":
        return replace(self, match_origin=True)

    def by_detail_exact(self) -> "ErrorMatcher":
        return replace(self, detail_mode="exact")

    def by_detail_substring(self) -> "ErrorMatcher":
        """Expected detail must appear inside the actual detail."""
        return replace(self, detail_mode="substring")

    def by_detail_regexp(self) -> "ErrorMatcher":
        """Expected detail is a regular expression searched in the actual detail."""
        return replace(self, detail_mode="regexp")

    def require_origin_when_invalid(self) -> "ErrorMatcher":
        """Reject expected ``Invalid`` errors that do not name an origin."""
        return replace(self, origin_required_for_invalid=True)

    @property
    def axes(self) -> Tuple[str, ...]:
        enabled = []
        if self.match_type:
            enabled.append("type")
        if self.match_field:
            enabled.append("field")
        if self.match_value:
            enabled.append("value")
        if self.match_origin:
            enabled.append("origin")
        if self.detail_mode:
            enabled.append(f"detail:{self.detail_mode}")
        return tuple(enabled)

    def matches(self, expected: StructuredError, actual: StructuredError) -> bool:
        """Return True iff both errors agree on every enabled axis."""
        if self.match_type and expected.type != actual.type:
            return False
        if self.match_field and expected.field != actual.field:
            return False
        if self.match_value and expected.bad_value != actual.bad_value:
            return False
        if self.match_origin and expected.origin != actual.origin:
            return False
        if self.detail_mode == "exact" and expected.detail != actual.detail:
            return False
        if self.detail_mode == "substring" and expected.detail not in actual.detail:
            return False
        if self.detail_mode == "regexp" and not re.search(expected.detail, actual.detail):
            return False
        return True

    def render(self, err: StructuredError) -> str:
        """Render an error showing only the axes this matcher compares."""
        parts = []
        if self.match_type:
            parts.append(f"Type={err.type.label}")
        if self.match_field:
            parts.append(f"Field={err.field}")
        if self.match_value:
            parts.append(f"Value={summarize_value(err.bad_value)}")
        if self.match_origin:
            parts.append(f"Origin={err.origin}")
        if self.detail_mode:
            parts.append(f"Detail={err.detail!r}")
        if not parts:
            return "{" + err.message() + "}"
        return "{" + ", ".join(parts) + "}"

    def compare(
        self,
        expected: Optional[Iterable[StructuredError]],
        actual: Optional[Iterable[StructuredError]],
    ) -> MatchResult:
        """
        Pair expected and actual errors one-to-one.

        Uses augmenting paths (maximum bipartite matching) so the pairing is
        a bijection whenever one exists, even for non-transitive axes such
        as substring details. Candidates are tried in list order, so an
        unambiguous comparison pairs errors in the order they were reported.
        """
        want = as_error_list(expected)
        got = as_error_list(actual)
        result = MatchResult()

        if self.origin_required_for_invalid:
            for err in want:
                if err.type == ErrorType.INVALID and not err.origin:
                    result.problems.append(
                        f"expected error with type {err.type.label} must specify origin: "
                        f"{self.render(err)}"
                    )

        candidates = [[j for j, g in enumerate(got) if self.matches(w, g)] for w in want]
        owner_of: List[Optional[int]] = [None] * len(got)

        # Greedy pass first; duplicates pair off here without any search.
        unassigned = []
        for i, choices in enumerate(candidates):
            j = next((j for j in choices if owner_of[j] is None), None)
            if j is None:
                unassigned.append(i)
            else:
                owner_of[j] = i

        for i in unassigned:
            self._augment(i, candidates, owner_of)

        partner_of: List[Optional[int]] = [None] * len(want)
        for j, i in enumerate(owner_of):
            if i is not None:
                partner_of[i] = j

        for i, err in enumerate(want):
            j = partner_of[i]
            if j is None:
                result.missing.append(err)
            else:
                result.matched.append((err, got[j]))
        result.unexpected.extend(got[j] for j in range(len(got)) if owner_of[j] is None)
        return result

    @staticmethod
    def _augment(
        start: int, candidates: List[List[int]], owner_of: List[Optional[int]]
    ) -> bool:
        """
        Search for an augmenting path from expected error ``start``.

        Depth-first with an explicit stack, so long re-assignment chains do
        not hit the interpreter's recursion limit. On success every actual
        error along the path is handed to the expected error before it.
        """
        visited = [False] * len(owner_of)
        stack = [[start, 0]]
        path: List[int] = []
        while stack:
            frame = stack[-1]
            i, pos = frame
            choices = candidates[i]
            while pos < len(choices) and visited[choices[pos]]:
                pos += 1
            if pos == len(choices):
                stack.pop()
                if path:
                    path.pop()
                continue

            j = choices[pos]
            frame[1] = pos + 1
            visited[j] = True
            path.append(j)
            owner = owner_of[j]
            if owner is None:
                for (level, _), slot in zip(stack, path):
                    owner_of[slot] = level
                return True
            stack.append([owner, 0])
        return False

    def describe(self, result: MatchResult, label: str = "") -> str:
        """Human-readable mismatch report for a failed comparison."""
        header = label or "error lists differ"
        lines = [f"{header} (matching on {', '.join(self.axes) or 'nothing'}):"]
        for problem in result.problems:
            lines.append(f"  fixture problem: {problem}")
        for err in result.missing:
            lines.append(f"  missing expected error: {self.render(err)}")
        for err in result.unexpected:
            lines.append(f"  unexpected error: {self.render(err)}")
        return "\n".join(lines)

    def test(
        self,
        expected: Optional[Sequence[StructuredError]],
        actual: Optional[Sequence[StructuredError]],
        label: str = "",
    ) -> MatchResult:
        """
        Assert that ``expected`` and ``actual`` are equal as multisets.

        Raises:
            ExpectationMismatchError: When no bijection between the lists
                matches on every enabled axis, or a fixture problem was found
        """
        result = self.compare(expected, actual)
        if not result.ok:
            message = self.describe(result, label)
            logger.debug(
                "Error lists differ",
                operation="match_errors",
                context={
                    "label": label,
                    "missing": len(result.missing),
                    "unexpected": len(result.unexpected),
                },
            )
            raise ExpectationMismatchError(
                message, label=label, missing=result.missing, unexpected=result.unexpected
            )
        return result


def structural_matcher() -> ErrorMatcher:
    """Type, field and origin: the axes two implementations must agree on."""
    return ErrorMatcher().by_type().by_field().by_origin()
