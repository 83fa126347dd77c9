"""
Unit tests for gate state and validation contexts (validation_parity/domain/context.py)
"""

import pytest

from validation_parity.domain.context import (
    ALL_OFF,
    ALL_ON,
    DECLARATIVE_VALIDATION,
    DECLARATIVE_VALIDATION_TAKEOVER,
    SHADOW,
    GateState,
    RequestInfo,
    build_context,
)


class TestGateState:
    @pytest.mark.parametrize(
        "state,takeover,label",
        [
            (ALL_ON, True, "declarative-takeover"),
            (SHADOW, False, "declarative-shadow"),
            (ALL_OFF, False, "imperative"),
            (GateState(False, True), False, "imperative"),
        ],
    )
    def test_effective_takeover_needs_both_gates(self, state, takeover, label):
        assert state.effective_takeover is takeover
        assert state.label == label

    def test_gates_round_trip(self):
        gates = ALL_ON.as_gates()
        assert gates == {DECLARATIVE_VALIDATION: True, DECLARATIVE_VALIDATION_TAKEOVER: True}
        assert GateState.from_gates(gates) == ALL_ON

    def test_from_gates_defaults_missing_to_off(self):
        assert GateState.from_gates({DECLARATIVE_VALIDATION: True}) == SHADOW


class TestRequestInfo:
    def test_group_version(self):
        assert RequestInfo("certificates.k8s.io", "v1").group_version == "certificates.k8s.io/v1"

    def test_core_group(self):
        assert RequestInfo("", "v1").group_version == "v1"


class TestBuildContext:
    def test_defaults_to_all_off(self):
        ctx = build_context("certificates.k8s.io", "v1beta1")
        assert ctx.gates == ALL_OFF
        assert ctx.request_info.api_version == "v1beta1"

    def test_carries_gates_and_resource(self):
        ctx = build_context("certificates.k8s.io", "v1", ALL_ON, resource="csrs", subresource="status")
        assert ctx.gates == ALL_ON
        assert ctx.request_info.resource == "csrs"
        assert ctx.request_info.subresource == "status"

    def test_with_helpers_return_copies(self):
        ctx = build_context("certificates.k8s.io", "v1")
        assert ctx.with_gates(ALL_ON).gates == ALL_ON
        assert ctx.with_api_version("v1beta1").request_info.api_version == "v1beta1"
        assert ctx.with_value("user", "admin").values == {"user": "admin"}
        assert ctx.gates == ALL_OFF
        assert ctx.request_info.api_version == "v1"
        assert ctx.values == {}
