"""
Validation context builder.

Validators receive a ``ValidationContext`` carrying the request metadata
(API group and version) and the feature-gate state in force for the call.
Gate state travels with the context so a validator never has to consult a
process-wide toggle.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from validation_parity.utils.logger import get_logger

logger = get_logger(__name__)

DECLARATIVE_VALIDATION = "DeclarativeValidation"
DECLARATIVE_VALIDATION_TAKEOVER = "DeclarativeValidationTakeover"


@dataclass(frozen=True)
class GateState:
    """The pair of gates that select which validation path is authoritative."""

    declarative_validation: bool = False
    declarative_takeover: bool = False

    @property
    def effective_takeover(self) -> bool:
        """Takeover only counts when declarative validation also runs."""
        return self.declarative_validation and self.declarative_takeover

    @property
    def label(self) -> str:
        if self.effective_takeover:
            return "declarative-takeover"
        if self.declarative_validation:
            return "declarative-shadow"
        return "imperative"

    def as_gates(self) -> Dict[str, bool]:
        return {
            DECLARATIVE_VALIDATION: self.declarative_validation,
            DECLARATIVE_VALIDATION_TAKEOVER: self.declarative_takeover,
        }

    @classmethod
    def from_gates(cls, gates: Mapping[str, bool]) -> "GateState":
        return cls(
            declarative_validation=bool(gates.get(DECLARATIVE_VALIDATION, False)),
            declarative_takeover=bool(gates.get(DECLARATIVE_VALIDATION_TAKEOVER, False)),
        )


ALL_ON = GateState(True, True)
ALL_OFF = GateState(False, False)
SHADOW = GateState(True, False)


@dataclass(frozen=True)
class RequestInfo:
    """Request-scoped metadata attached to a validation call."""

    api_group: str
    api_version: str
    resource: str = ""
    subresource: str = ""

    @property
    def group_version(self) -> str:
        if not self.api_group:
            return self.api_version
        return f"{self.api_group}/{self.api_version}"


@dataclass(frozen=True)
class ValidationContext:
    """Everything a validation entry point may read besides the object."""

    request_info: RequestInfo
    gates: GateState = ALL_OFF
    values: Mapping[str, Any] = field(default_factory=dict)

    def with_gates(self, gates: GateState) -> "ValidationContext":
        return replace(self, gates=gates)

    def with_api_version(self, api_version: str) -> "ValidationContext":
        return replace(self, request_info=replace(self.request_info, api_version=api_version))

    def with_value(self, key: str, value: Any) -> "ValidationContext":
        values = dict(self.values)
        values[key] = value
        return replace(self, values=values)


def build_context(
    api_group: str,
    api_version: str,
    gates: Optional[GateState] = None,
    resource: str = "",
    subresource: str = "",
) -> ValidationContext:
    """
    Build the context passed to validation entry points.

    Args:
        api_group: API group of the request, e.g. ``certificates.k8s.io``
        api_version: Version the request was made in, e.g. ``v1``
        gates: Gate state for the call (defaults to everything off)
        resource: Optional resource name, e.g. ``certificatesigningrequests``
        subresource: Optional subresource, e.g. ``status``

    Returns:
        Immutable ValidationContext
    """
    context = ValidationContext(
        request_info=RequestInfo(api_group, api_version, resource, subresource),
        gates=gates if gates is not None else ALL_OFF,
    )
    logger.debug(
        "Built validation context",
        operation="build_context",
        context={"group_version": context.request_info.group_version, "gates": context.gates.label},
    )
    return context
