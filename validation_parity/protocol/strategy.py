"""Interfaces a resource owner implements to be verified by the protocol."""

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from validation_parity.domain.context import ValidationContext
from validation_parity.domain.errors import StructuredError


@runtime_checkable
class ValidationStrategy(Protocol):
    """
    Validation entry points of one resource type.

    Both methods read gate state from ``ctx.gates`` only and return the
    errors found, in any order.
    """

    def validate(self, ctx: ValidationContext, obj: Any) -> Sequence[StructuredError]:
        ...

    def validate_update(
        self, ctx: ValidationContext, obj: Any, old: Any
    ) -> Sequence[StructuredError]:
        ...


@runtime_checkable
class VersionChecker(Protocol):
    """Cross-version equivalence check invoked once per case."""

    def verify(self, obj: Any, old: Optional[Any] = None) -> Any:
        ...
