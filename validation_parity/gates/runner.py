"""
Gate-Matrix Runner - execute one validation entry point per gate configuration.

Only two of the four gate combinations are exercised by default:

1) takeover has no effect while declarative validation is disabled, so
   {off, on} behaves like {off, off};
2) with declarative validation on but takeover off, the imperative output
   is still authoritative, so {on, off} is assumed to equal {off, off}.

Setting ``verify_disabled_equivalence`` adds a {on, off} run so the second
assumption can be checked instead of trusted.
"""

import copy
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from validation_parity.domain.context import ALL_OFF, ALL_ON, SHADOW, GateState, ValidationContext
from validation_parity.domain.errors import ErrorList, as_error_list
from validation_parity.gates.feature_gate import FeatureGate
from validation_parity.utils.logger import get_logger, log_operation

logger = get_logger(__name__)

EntryPoint = Callable[[ValidationContext], Any]

RESOURCE_VERSION_MARKER = "1"


@dataclass
class GateMatrixResult:
    """Error lists produced under each gate configuration."""

    authoritative: ErrorList
    legacy: ErrorList
    intermediate: Optional[ErrorList] = None

    def runs(self) -> List[Tuple[GateState, ErrorList]]:
        """Every run in execution order, tagged with its gate state."""
        tagged = [(ALL_ON, self.authoritative), (ALL_OFF, self.legacy)]
        if self.intermediate is not None:
            tagged.append((SHADOW, self.intermediate))
        return tagged


class GateMatrixRunner:
    """
    Run a validation entry point under each gate configuration, in sequence.

    Each run happens inside ``FeatureGate.override`` so prior gate values are
    restored afterwards no matter how the entry point exits. The gate state
    is also handed to the entry point inside the context it receives.
    """

    def __init__(self, feature_gate: FeatureGate, verify_disabled_equivalence: bool = False):
        self.feature_gate = feature_gate
        self.verify_disabled_equivalence = verify_disabled_equivalence

    def matrix(self) -> List[GateState]:
        states = [ALL_ON, ALL_OFF]
        if self.verify_disabled_equivalence:
            states.append(SHADOW)
        return states

    def run_once(
        self, entry_point: EntryPoint, context: ValidationContext, state: GateState
    ) -> ErrorList:
        """Run the entry point with ``state`` in force and return its errors."""
        with self.feature_gate.override_state(state) as current:
            errors = as_error_list(entry_point(context.with_gates(current)))
        logger.debug(
            "Gate run finished",
            operation="gate_run",
            context={
                "gates": state.label,
                "group_version": context.request_info.group_version,
                "errors": len(errors),
            },
        )
        return errors

    @log_operation("gate_matrix_run")
    def run(self, entry_point: EntryPoint, context: ValidationContext) -> GateMatrixResult:
        """
        Execute the entry point once per gate configuration.

        Args:
            entry_point: Callable taking a ValidationContext, returning errors
            context: Base context; its gate state is replaced per run

        Returns:
            GateMatrixResult with the error list of every run
        """
        outputs = {state: self.run_once(entry_point, context, state) for state in self.matrix()}
        return GateMatrixResult(
            authoritative=outputs[ALL_ON],
            legacy=outputs[ALL_OFF],
            intermediate=outputs.get(SHADOW),
        )


def stamp_resource_version(obj: Any, marker: str = RESOURCE_VERSION_MARKER) -> Any:
    """
    Return a deep copy of ``obj`` whose resource version is ``marker``.

    Update validation rejects a new object whose resource version differs
    from the old one; stamping both with the same marker keeps that check
    from drowning out the errors under test.

    Supported shapes, tried in order:
        - mapping with ``metadata.resourceVersion``
        - object with ``metadata.resource_version``
        - object with ``resource_version``

    Raises:
        TypeError: If the object has none of those shapes
    """
    stamped = copy.deepcopy(obj)
    if isinstance(stamped, dict):
        if not isinstance(stamped.get("metadata"), dict):
            stamped["metadata"] = {}
        stamped["metadata"]["resourceVersion"] = marker
        return stamped

    metadata = getattr(stamped, "metadata", None)
    if metadata is not None and hasattr(metadata, "resource_version"):
        metadata.resource_version = marker
        return stamped
    if hasattr(stamped, "resource_version"):
        stamped.resource_version = marker
        return stamped

    raise TypeError(f"Cannot set a resource version on {type(obj).__name__}")
