"""
Cross-version validation equivalence.

A resource served in several API versions must validate the same way no
matter which version a client used. ``VersionedValidationEquivalence``
round-trips an object through each version's representation, validates it
with a context naming that version, and requires every version to yield the
same error set as the first one.

Any object with ``verify(obj, old=None)`` can replace it in the protocol.
"""

from typing import Any, Dict, List, Optional, Sequence

from validation_parity.domain.context import ALL_ON, GateState, build_context
from validation_parity.domain.errors import ErrorList, as_error_list
from validation_parity.exceptions import VersionDivergenceError
from validation_parity.matching.matcher import ErrorMatcher, structural_matcher
from validation_parity.utils.logger import get_logger

logger = get_logger(__name__)


class IdentityConverter:
    """Converter for resources whose versions share one representation."""

    def to_version(self, obj: Any, version: str) -> Any:
        return obj

    def from_version(self, obj: Any, version: str) -> Any:
        return obj


class VersionedValidationEquivalence:
    """
    Verify that validation agrees across every supported API version.

    Args:
        strategy: Object exposing ``validate(ctx, obj)`` and
            ``validate_update(ctx, obj, old)``
        api_group: API group placed in each request context
        api_versions: Versions to compare; the first is the reference
        converter: Object exposing ``to_version(obj, version)`` and
            ``from_version(versioned, version)``
        matcher: Equivalence used between versions
        gates: Gate state placed in each request context
    """

    def __init__(
        self,
        strategy: Any,
        api_group: str,
        api_versions: Sequence[str],
        converter: Any = None,
        matcher: Optional[ErrorMatcher] = None,
        gates: GateState = ALL_ON,
    ):
        if not api_versions:
            raise ValueError("At least one API version is required")
        self.strategy = strategy
        self.api_group = api_group
        self.api_versions = list(api_versions)
        self.converter = converter if converter is not None else IdentityConverter()
        self.matcher = matcher if matcher is not None else structural_matcher()
        self.gates = gates

    def _round_trip(self, obj: Any, version: str) -> Any:
        return self.converter.from_version(self.converter.to_version(obj, version), version)

    def validate_in(self, obj: Any, version: str, old: Any = None) -> ErrorList:
        """Validate ``obj`` as if it had been submitted in ``version``."""
        ctx = build_context(self.api_group, version, self.gates)
        converted = self._round_trip(obj, version)
        if old is None:
            return as_error_list(self.strategy.validate(ctx, converted))
        return as_error_list(
            self.strategy.validate_update(ctx, converted, self._round_trip(old, version))
        )

    def collect(self, obj: Any, old: Any = None) -> Dict[str, ErrorList]:
        return {version: self.validate_in(obj, version, old) for version in self.api_versions}

    def verify(self, obj: Any, old: Any = None) -> Dict[str, ErrorList]:
        """
        Raise if any version's errors differ from the reference version's.

        Returns:
            Errors per version, for callers that want to inspect them

        Raises:
            VersionDivergenceError: Listing every divergent version
        """
        per_version = self.collect(obj, old)
        reference_version = self.api_versions[0]
        reference = per_version[reference_version]

        lines: List[str] = []
        missing = ErrorList()
        unexpected = ErrorList()
        for version in self.api_versions[1:]:
            result = self.matcher.compare(reference, per_version[version])
            if result.ok:
                continue
            lines.append(
                self.matcher.describe(result, f"{version} differs from {reference_version}")
            )
            missing.extend(result.missing)
            unexpected.extend(result.unexpected)

        if lines:
            logger.warning(
                "Validation differs between API versions",
                operation="verify_versions",
                context={"api_group": self.api_group, "versions": self.api_versions},
            )
            raise VersionDivergenceError(
                "\n".join(lines),
                label=f"versions of {self.api_group}",
                missing=missing,
                unexpected=unexpected,
            )
        return per_version
