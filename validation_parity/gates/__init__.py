"""Feature gates and the gate-matrix runner."""

from validation_parity.gates.feature_gate import DEFAULT_GATES, FeatureGate, new_default_feature_gate
from validation_parity.gates.runner import (
    RESOURCE_VERSION_MARKER,
    GateMatrixResult,
    GateMatrixRunner,
    stamp_resource_version,
)

__all__ = [
    "DEFAULT_GATES",
    "FeatureGate",
    "new_default_feature_gate",
    "RESOURCE_VERSION_MARKER",
    "GateMatrixResult",
    "GateMatrixRunner",
    "stamp_resource_version",
]
