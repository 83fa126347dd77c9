"""
Unit tests for case tables (validation_parity/fixtures/case_table.py)

Tests covering:
- YAML loading and schema validation with jsonschema
- Expected error decoding
- Decoder hook and failure reporting
"""

from pathlib import Path

import pytest
import yaml

from validation_parity.domain.errors import OMITTED, ErrorType, required
from validation_parity.exceptions import FixtureError
from validation_parity.fixtures.case_table import (
    CaseTable,
    EquivalenceCase,
    error_from_dict,
    load_case_table,
    parse_case_table,
)

RESOURCES_DIR = Path(__file__).resolve().parents[1] / "resources"


def minimal_document(**overrides):
    document = {
        "api_group": "certificates.k8s.io",
        "api_versions": ["v1"],
        "create": [
            {
                "name": "empty request",
                "input": {"spec": {"request": ""}},
                "expected_errors": [
                    {"type": "Required", "field": "spec.request", "origin": "required"}
                ],
            }
        ],
        "update": [{"name": "unchanged", "old": {"spec": {}}, "update": {"spec": {}}}],
    }
    document.update(overrides)
    return document


class TestErrorFromDict:
    def test_full_entry(self):
        err = error_from_dict(
            {
                "type": "Invalid",
                "field": ".spec.signerName",
                "origin": "format=k8s-signer-name",
                "detail": "bad",
                "value": "x y",
                "covered_by_declarative": True,
            }
        )
        assert err.type == ErrorType.INVALID
        assert err.field == "spec.signerName"
        assert err.bad_value == "x y"
        assert err.covered_by_declarative is True

    def test_value_defaults_to_omitted(self):
        assert error_from_dict({"type": "Required", "field": "spec"}).bad_value is OMITTED

    def test_unknown_type(self):
        with pytest.raises(FixtureError, match="Unknown error type"):
            error_from_dict({"type": "Bogus", "field": "spec"})


class TestParseCaseTable:
    def test_builds_cases(self):
        table = parse_case_table(minimal_document())
        assert table.api_group == "certificates.k8s.io"
        assert table.case_names() == ["empty request", "unchanged"]

        create = table.get("empty request")
        assert not create.is_update
        assert create.expected_errors == [required("spec.request").with_origin("required")]

        update = table.get("unchanged")
        assert update.is_update
        assert update.expected_errors == []

    def test_decoder_applied_to_inputs(self):
        table = parse_case_table(minimal_document(), decoder=lambda raw: ("decoded", raw))
        assert table.get("unchanged").old == ("decoded", {"spec": {}})
        assert table.get("empty request").input[0] == "decoded"

    def test_decoder_failure(self):
        def decoder(raw):
            raise ValueError("unknown field")

        with pytest.raises(FixtureError, match="Could not decode case 'empty request'"):
            parse_case_table(minimal_document(), decoder=decoder)

    def test_empty_document(self):
        with pytest.raises(FixtureError, match="Empty case table"):
            parse_case_table(None)

    def test_schema_violation_names_location(self):
        document = minimal_document(create=[{"name": "no input"}])
        with pytest.raises(FixtureError, match="create/0"):
            parse_case_table(document)

    def test_unknown_top_level_key(self):
        with pytest.raises(FixtureError, match="schema validation"):
            parse_case_table(minimal_document(owner="sig-auth"))

    def test_duplicate_names(self):
        document = minimal_document(
            update=[{"name": "empty request", "old": {}, "update": {}}]
        )
        with pytest.raises(FixtureError, match="Duplicate case name"):
            parse_case_table(document)


class TestLoadCaseTable:
    def test_sample_table(self):
        table = load_case_table(RESOURCES_DIR / "csr_cases.yaml")
        assert table.name == "certificatesigningrequests"
        assert table.api_versions == ["v1", "v1alpha1", "v1beta1"]
        assert len(table.create_cases) == 8
        assert len(table.update_cases) == 3
        assert table.get("malformed signer name").description

    def test_round_trip_through_file(self, tmp_path):
        path = tmp_path / "table.yaml"
        path.write_text(yaml.safe_dump(minimal_document()), encoding="utf-8")
        assert load_case_table(path).case_names() == ["empty request", "unchanged"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FixtureError, match="not found"):
            load_case_table(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("api_group: [unclosed", encoding="utf-8")
        with pytest.raises(FixtureError, match="Invalid YAML"):
            load_case_table(path)


class TestCaseTableBuilder:
    def test_add_cases_in_code(self):
        table = CaseTable("certificates.k8s.io")
        table.add_create("clean", {"spec": {}})
        table.add_update("changed", {"spec": {}}, {"spec": {"x": 1}}, [required("spec")])
        assert [c.is_update for c in table.all_cases()] == [False, True]
        assert table.get("missing") is None

    def test_none_means_convergence_only(self):
        table = CaseTable("certificates.k8s.io")
        clean = table.add_create("clean", {"spec": {}})
        converge = table.add_create("converge", {"spec": {}}, expected_errors=None)
        update = table.add_update("converge update", {"spec": {}}, {"spec": {}}, None)
        assert clean.expected_errors == []
        assert converge.expected_errors is None
        assert update.expected_errors is None

    def test_case_defaults(self):
        case = EquivalenceCase("clean", {})
        assert case.expected_errors == []
        assert case.old is None
