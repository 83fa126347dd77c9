"""Error matching and legacy-side deduplication."""

from validation_parity.matching.dedup import Deduplicator, dedupe
from validation_parity.matching.matcher import ErrorMatcher, MatchResult, structural_matcher

__all__ = [
    "Deduplicator",
    "dedupe",
    "ErrorMatcher",
    "MatchResult",
    "structural_matcher",
]
