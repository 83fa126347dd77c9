"""
Unit tests for the feature gate provider (validation_parity/gates/feature_gate.py)

Tests covering:
- Registration, set and reset
- Scoped overrides restoring prior state, including on exceptions
- Unknown gate names
"""

import threading

import pytest

from validation_parity.domain.context import (
    ALL_ON,
    DECLARATIVE_VALIDATION,
    DECLARATIVE_VALIDATION_TAKEOVER,
    SHADOW,
    GateState,
)
from validation_parity.exceptions import UnknownFeatureGateError
from validation_parity.gates.feature_gate import DEFAULT_GATES, FeatureGate, new_default_feature_gate


class TestFeatureGateBasics:
    def test_defaults_off(self):
        gate = new_default_feature_gate()
        assert gate.known() == DEFAULT_GATES
        assert gate.snapshot() == GateState(False, False)

    def test_set_and_reset(self):
        gate = new_default_feature_gate()
        gate.set(DECLARATIVE_VALIDATION, True)
        assert gate.enabled(DECLARATIVE_VALIDATION)
        gate.reset()
        assert not gate.enabled(DECLARATIVE_VALIDATION)

    def test_add_keeps_existing_value(self):
        gate = new_default_feature_gate()
        gate.set(DECLARATIVE_VALIDATION, True)
        gate.add(DECLARATIVE_VALIDATION, False)
        assert gate.enabled(DECLARATIVE_VALIDATION)

    def test_add_new_gate(self):
        gate = FeatureGate({})
        gate.add("StrictDecoding", True)
        assert gate.enabled("StrictDecoding")

    def test_unknown_gate(self):
        gate = new_default_feature_gate()
        with pytest.raises(UnknownFeatureGateError) as exc_info:
            gate.enabled("Nope")
        assert exc_info.value.name == "Nope"
        assert DECLARATIVE_VALIDATION in str(exc_info.value)

    def test_fixture_provides_default_gate(self, feature_gate):
        assert feature_gate.snapshot() == GateState(False, False)


class TestOverride:
    def test_override_yields_state_and_restores(self):
        gate = new_default_feature_gate()
        with gate.override({DECLARATIVE_VALIDATION: True}) as state:
            assert state == SHADOW
            assert gate.enabled(DECLARATIVE_VALIDATION)
        assert gate.snapshot() == GateState(False, False)

    def test_override_restores_previous_not_defaults(self):
        gate = new_default_feature_gate()
        gate.set(DECLARATIVE_VALIDATION, True)
        with gate.override_state(ALL_ON):
            assert gate.snapshot().effective_takeover
        assert gate.snapshot() == SHADOW

    def test_override_restores_on_exception(self):
        gate = new_default_feature_gate()
        with pytest.raises(RuntimeError):
            with gate.override_state(ALL_ON):
                raise RuntimeError("validator blew up")
        assert gate.known() == DEFAULT_GATES

    def test_nested_overrides(self):
        gate = new_default_feature_gate()
        with gate.override({DECLARATIVE_VALIDATION: True}):
            with gate.override({DECLARATIVE_VALIDATION_TAKEOVER: True}) as inner:
                assert inner == ALL_ON
            assert gate.snapshot() == SHADOW
        assert gate.snapshot() == GateState(False, False)

    def test_gate_added_inside_override_survives(self):
        gate = new_default_feature_gate()
        with gate.override({DECLARATIVE_VALIDATION: True}):
            gate.add("StrictSignerNames", True)
        assert gate.enabled("StrictSignerNames")
        gate.set("StrictSignerNames", False)
        assert not gate.enabled("StrictSignerNames")
        assert not gate.enabled(DECLARATIVE_VALIDATION)

    def test_gate_set_inside_override_keeps_other_changes(self):
        gate = new_default_feature_gate()
        gate.add("StrictSignerNames", False)
        with gate.override({DECLARATIVE_VALIDATION: True}):
            gate.set("StrictSignerNames", True)
        assert gate.enabled("StrictSignerNames")
        assert gate.snapshot() == GateState(False, False)

    def test_unknown_gate_rejected_before_any_change(self):
        gate = new_default_feature_gate()
        with pytest.raises(UnknownFeatureGateError):
            with gate.override({DECLARATIVE_VALIDATION: True, "Nope": True}):
                pass
        assert not gate.enabled(DECLARATIVE_VALIDATION)

    def test_concurrent_override_waits(self):
        gate = new_default_feature_gate()
        observed = []
        entered = threading.Event()

        def other_thread():
            entered.wait()
            with gate.override({DECLARATIVE_VALIDATION: False}):
                observed.append(gate.snapshot())

        worker = threading.Thread(target=other_thread)
        worker.start()
        with gate.override_state(ALL_ON):
            entered.set()
            worker.join(timeout=0.2)
            # the worker is still blocked on the lock
            assert worker.is_alive()
            assert gate.snapshot() == ALL_ON
        worker.join(timeout=5)
        assert observed == [GateState(False, False)]
