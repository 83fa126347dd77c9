"""
Unit tests for the gate-matrix runner (validation_parity/gates/runner.py)
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from validation_parity.domain.context import ALL_OFF, ALL_ON, SHADOW, build_context
from validation_parity.domain.errors import ErrorList, forbidden, required
from validation_parity.gates.feature_gate import new_default_feature_gate
from validation_parity.gates.runner import (
    GateMatrixResult,
    GateMatrixRunner,
    stamp_resource_version,
)


@pytest.fixture
def context():
    return build_context("certificates.k8s.io", "v1")


def recording_entry_point(gate, calls):
    def entry_point(ctx):
        calls.append((ctx.gates, gate.snapshot()))
        if ctx.gates.effective_takeover:
            return [required("spec.request").with_origin("declarative")]
        return [required("spec.request"), required("spec.request")]

    return entry_point


class TestGateMatrixRunner:
    def test_runs_takeover_then_imperative(self, context):
        gate = new_default_feature_gate()
        calls = []
        result = GateMatrixRunner(gate).run(recording_entry_point(gate, calls), context)

        assert [c[0] for c in calls] == [ALL_ON, ALL_OFF]
        assert result.authoritative == [required("spec.request").with_origin("declarative")]
        assert result.legacy == [required("spec.request"), required("spec.request")]
        assert result.intermediate is None

    def test_context_gates_match_provider(self, context):
        gate = new_default_feature_gate()
        calls = []
        GateMatrixRunner(gate).run(recording_entry_point(gate, calls), context)
        for ctx_gates, provider_gates in calls:
            assert ctx_gates == provider_gates

    def test_context_keeps_request_info(self, context):
        entry_point = MagicMock(return_value=None)
        GateMatrixRunner(new_default_feature_gate()).run(entry_point, context)
        for call in entry_point.call_args_list:
            assert call.args[0].request_info.group_version == "certificates.k8s.io/v1"

    def test_none_becomes_empty_list(self, context):
        result = GateMatrixRunner(new_default_feature_gate()).run(lambda ctx: None, context)
        assert isinstance(result.authoritative, ErrorList)
        assert result.legacy == []

    def test_third_run_when_verifying_disabled_equivalence(self, context):
        gate = new_default_feature_gate()
        calls = []
        runner = GateMatrixRunner(gate, verify_disabled_equivalence=True)
        result = runner.run(recording_entry_point(gate, calls), context)

        assert runner.matrix() == [ALL_ON, ALL_OFF, SHADOW]
        assert [c[0] for c in calls] == [ALL_ON, ALL_OFF, SHADOW]
        assert result.intermediate == result.legacy

    def test_gates_restored_after_run(self, context):
        gate = new_default_feature_gate()
        GateMatrixRunner(gate).run(lambda ctx: [], context)
        assert gate.snapshot() == ALL_OFF

    def test_gates_restored_when_entry_point_raises(self, context):
        gate = new_default_feature_gate()

        def explode(ctx):
            raise ValueError("decode failure")

        with pytest.raises(ValueError):
            GateMatrixRunner(gate).run(explode, context)
        assert gate.snapshot() == ALL_OFF


class TestGateMatrixResult:
    def test_runs_in_order(self):
        result = GateMatrixResult(ErrorList([forbidden("a")]), ErrorList(), ErrorList())
        assert [state for state, _ in result.runs()] == [ALL_ON, ALL_OFF, SHADOW]

    def test_runs_without_intermediate(self):
        result = GateMatrixResult(ErrorList(), ErrorList())
        assert len(result.runs()) == 2


class TestStampResourceVersion:
    def test_dict(self):
        obj = {"metadata": {"name": "csr", "resourceVersion": "42"}}
        stamped = stamp_resource_version(obj)
        assert stamped["metadata"]["resourceVersion"] == "1"
        assert obj["metadata"]["resourceVersion"] == "42"

    def test_dict_without_metadata(self):
        assert stamp_resource_version({"spec": {}}, "9")["metadata"] == {"resourceVersion": "9"}

    def test_dict_with_null_metadata(self):
        obj = {"metadata": None, "spec": {}}
        stamped = stamp_resource_version(obj)
        assert stamped["metadata"] == {"resourceVersion": "1"}
        assert stamped["spec"] == {}
        assert obj["metadata"] is None

    def test_nested_attribute(self):
        obj = SimpleNamespace(metadata=SimpleNamespace(resource_version="3"))
        stamped = stamp_resource_version(obj)
        assert stamped.metadata.resource_version == "1"
        assert obj.metadata.resource_version == "3"

    def test_flat_attribute(self):
        obj = SimpleNamespace(resource_version="3")
        assert stamp_resource_version(obj, "x").resource_version == "x"

    def test_unsupported_shape(self):
        with pytest.raises(TypeError, match="Cannot set a resource version"):
            stamp_resource_version(["not", "a", "resource"])
