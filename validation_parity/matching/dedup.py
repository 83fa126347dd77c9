"""
Legacy-side deduplication.

The imperative validators sometimes report the same logical defect from
several internal layers (object metadata checks and spec checks both
flagging one field, for instance). The declarative path reports it once, so
before comparing the two, the legacy list is collapsed to one representative
per equivalence class.

This is a post-processing stage, not part of the matcher contract: once the
matcher grows native deduplication the protocol can be built with
``dedupe_legacy=None``.
"""

from typing import Iterable, Optional

from validation_parity.domain.errors import ErrorList, StructuredError
from validation_parity.matching.matcher import ErrorMatcher
from validation_parity.utils.logger import get_logger

logger = get_logger(__name__)


def dedupe(errors: Optional[Iterable[StructuredError]], matcher: ErrorMatcher) -> ErrorList:
    """
    Keep the first error of each equivalence class, in first-seen order.

    Args:
        errors: Error list to collapse
        matcher: Equivalence relation between errors

    Returns:
        New ErrorList; the input is left untouched
    """
    kept = ErrorList()
    for err in errors or ():
        if not any(matcher.matches(existing, err) for existing in kept):
            kept.append(err)
    return kept


class Deduplicator:
    """Callable dedup stage bound to one matcher."""

    def __init__(self, matcher: ErrorMatcher):
        self.matcher = matcher

    def __call__(self, errors: Optional[Iterable[StructuredError]]) -> ErrorList:
        original = list(errors or ())
        kept = dedupe(original, self.matcher)
        if len(kept) != len(original):
            logger.debug(
                "Collapsed duplicate legacy errors",
                operation="dedupe",
                context={"before": len(original), "after": len(kept)},
            )
        return kept

    def __repr__(self) -> str:
        return f"Deduplicator(axes={self.matcher.axes})"
