"""
Feature gate provider with test-scoped overrides.

A ``FeatureGate`` holds named boolean gates. Tests never flip a gate
permanently: ``override`` sets values for the duration of a ``with`` block
and restores the previous values on exit, including when the block raises.
The lock is held for the whole block, so overlapping overrides from other
threads wait rather than interleave.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Mapping, Optional

from validation_parity.domain.context import (
    DECLARATIVE_VALIDATION,
    DECLARATIVE_VALIDATION_TAKEOVER,
    GateState,
)
from validation_parity.exceptions import UnknownFeatureGateError
from validation_parity.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_GATES: Dict[str, bool] = {
    DECLARATIVE_VALIDATION: False,
    DECLARATIVE_VALIDATION_TAKEOVER: False,
}


class FeatureGate:
    """Registry of named boolean gates."""

    def __init__(self, defaults: Optional[Mapping[str, bool]] = None):
        """
        Args:
            defaults: Gate names and their initial values
                (defaults to the two declarative validation gates, both off)
        """
        self._lock = threading.RLock()
        self._defaults: Dict[str, bool] = dict(DEFAULT_GATES if defaults is None else defaults)
        self._values: Dict[str, bool] = dict(self._defaults)

    def add(self, name: str, default: bool = False) -> None:
        """Register a gate; re-registering keeps the current value."""
        with self._lock:
            self._defaults.setdefault(name, default)
            self._values.setdefault(name, default)

    def known(self) -> Dict[str, bool]:
        with self._lock:
            return dict(self._values)

    def enabled(self, name: str) -> bool:
        with self._lock:
            self._require(name)
            return self._values[name]

    def set(self, name: str, value: bool) -> None:
        """Set a gate permanently. Prefer ``override`` inside tests."""
        with self._lock:
            self._require(name)
            self._values[name] = bool(value)

    def reset(self) -> None:
        """Return every gate to its registered default."""
        with self._lock:
            self._values = dict(self._defaults)

    def snapshot(self) -> GateState:
        """Current declarative gate pair as an immutable value."""
        with self._lock:
            return GateState.from_gates(self._values)

    @contextmanager
    def override(self, values: Mapping[str, bool]) -> Iterator[GateState]:
        """
        Set gates for the duration of the block.

        Yields:
            The GateState in force inside the block

        Raises:
            UnknownFeatureGateError: If any name was never registered
        """
        with self._lock:
            for name in values:
                self._require(name)
            previous = {name: self._values[name] for name in values}
            try:
                for name, value in values.items():
                    self._values[name] = bool(value)
                logger.debug(
                    "Feature gates overridden",
                    operation="override_gates",
                    context={"gates": dict(values)},
                )
                yield GateState.from_gates(self._values)
            finally:
                self._values.update(previous)
                logger.debug(
                    "Feature gates restored",
                    operation="override_gates",
                    context={"gates": previous},
                )

    @contextmanager
    def override_state(self, state: GateState) -> Iterator[GateState]:
        """Shortcut for overriding both declarative gates from a GateState."""
        with self.override(state.as_gates()) as current:
            yield current

    def _require(self, name: str) -> None:
        if name not in self._values:
            raise UnknownFeatureGateError(name, list(self._values))


def new_default_feature_gate() -> FeatureGate:
    """Fresh gate registry with both declarative validation gates off."""
    return FeatureGate(DEFAULT_GATES)
