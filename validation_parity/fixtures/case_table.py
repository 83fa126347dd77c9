"""
Case tables - expected-error fixtures for the equivalence protocol.

A case table lists the inputs a resource owner wants checked and the errors
each input must produce. Tables are built in code or loaded from YAML:

    api_group: certificates.k8s.io
    api_versions: [v1, v1beta1]
    create:
      - name: missing request
        input: {spec: {signerName: example.com/signer}}
        expected_errors:
          - {type: Required, field: spec.request, origin: declarative}
    update:
      - name: unchanged
        old: {...}
        update: {...}
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import jsonschema
import yaml

from validation_parity.domain.errors import OMITTED, ErrorList, ErrorType, StructuredError
from validation_parity.domain.field_path import as_path_string
from validation_parity.exceptions import FixtureError
from validation_parity.utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_PATH = Path(__file__).with_name("case_table.schema.json")

Decoder = Callable[[Dict[str, Any]], Any]


def _identity(raw: Dict[str, Any]) -> Any:
    return raw


def expected_list(errors: Optional[Sequence[StructuredError]]) -> Optional[ErrorList]:
    """None stays None (skip the expectation check); anything else becomes an ErrorList."""
    return None if errors is None else ErrorList(errors)


@dataclass
class EquivalenceCase:
    """
    One input (or old/new pair) and the errors it must produce.

    ``old`` is set only for update cases. An empty ``expected_errors`` means
    the input must validate cleanly under every gate configuration; None
    skips the expected-error check and only the two paths are compared.
    """

    name: str
    input: Any
    expected_errors: Optional[ErrorList] = field(default_factory=ErrorList)
    old: Any = None
    description: str = ""

    @property
    def is_update(self) -> bool:
        return self.old is not None


@dataclass
class CaseTable:
    """
    Create and update cases for one resource type.

    ``add_create`` and ``add_update`` expect a clean input when no errors
    are given; pass ``expected_errors=None`` for a convergence-only case.
    """

    api_group: str
    api_versions: List[str] = field(default_factory=list)
    create_cases: List[EquivalenceCase] = field(default_factory=list)
    update_cases: List[EquivalenceCase] = field(default_factory=list)
    name: str = ""

    def all_cases(self) -> List[EquivalenceCase]:
        return list(self.create_cases) + list(self.update_cases)

    def case_names(self) -> List[str]:
        return [case.name for case in self.all_cases()]

    def get(self, name: str) -> Optional[EquivalenceCase]:
        for case in self.all_cases():
            if case.name == name:
                return case
        return None

    def add_create(
        self, name: str, obj: Any, expected_errors: Optional[Sequence[StructuredError]] = ()
    ) -> EquivalenceCase:
        case = EquivalenceCase(name, obj, expected_list(expected_errors))
        self.create_cases.append(case)
        return case

    def add_update(
        self,
        name: str,
        old: Any,
        update: Any,
        expected_errors: Optional[Sequence[StructuredError]] = (),
    ) -> EquivalenceCase:
        case = EquivalenceCase(name, update, expected_list(expected_errors), old=old)
        self.update_cases.append(case)
        return case


def error_from_dict(entry: Dict[str, Any]) -> StructuredError:
    """
    Build a StructuredError from a case-table entry.

    Raises:
        FixtureError: If the error type is unknown
    """
    try:
        error_type = ErrorType.parse(entry["type"])
    except ValueError as e:
        raise FixtureError(str(e)) from e

    return StructuredError(
        type=error_type,
        field=as_path_string(entry.get("field", "")),
        bad_value=entry.get("value", OMITTED),
        detail=entry.get("detail", ""),
        origin=entry.get("origin", ""),
        covered_by_declarative=bool(entry.get("covered_by_declarative", False)),
    )


def load_schema(schema_path: Union[str, Path] = SCHEMA_PATH) -> Dict[str, Any]:
    try:
        with open(schema_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise FixtureError(f"Case table schema not found: {schema_path}") from e
    except json.JSONDecodeError as e:
        raise FixtureError(f"Invalid JSON in case table schema {schema_path}: {e}") from e


def parse_case_table(
    document: Any, decoder: Decoder = _identity, source: str = "<memory>"
) -> CaseTable:
    """
    Validate a parsed document against the case table schema and build it.

    Args:
        document: Parsed YAML/JSON document
        decoder: Converts each raw input mapping to the resource object
        source: Description used in error messages

    Raises:
        FixtureError: On schema violations, unknown error types, duplicate
            case names or decoder failures
    """
    if not document:
        raise FixtureError(f"Empty case table: {source}")

    try:
        jsonschema.validate(instance=document, schema=load_schema())
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise FixtureError(
            f"Case table {source} failed schema validation at {location}: {e.message}"
        ) from e

    table = CaseTable(
        api_group=document["api_group"],
        api_versions=list(document.get("api_versions", [])),
        name=document.get("name", ""),
    )

    seen = set()
    sections = (("create", document.get("create", [])), ("update", document.get("update", [])))
    for kind, entries in sections:
        for entry in entries:
            name = entry["name"]
            if name in seen:
                raise FixtureError(f"Duplicate case name {name!r} in {source}")
            seen.add(name)

            expected = ErrorList(error_from_dict(e) for e in entry.get("expected_errors", []))
            try:
                if kind == "create":
                    case = EquivalenceCase(name, decoder(entry["input"]), expected)
                else:
                    case = EquivalenceCase(
                        name, decoder(entry["update"]), expected, old=decoder(entry["old"])
                    )
            except (TypeError, ValueError, KeyError) as e:
                raise FixtureError(f"Could not decode case {name!r} in {source}: {e}") from e

            case.description = entry.get("description", "")
            if kind == "create":
                table.create_cases.append(case)
            else:
                table.update_cases.append(case)

    logger.info(
        f"Loaded case table with {len(table.create_cases)} create and "
        f"{len(table.update_cases)} update cases",
        operation="load_case_table",
        context={"source": source, "api_group": table.api_group},
    )
    return table


def load_case_table(path: Union[str, Path], decoder: Decoder = _identity) -> CaseTable:
    """
    Load a case table from a YAML file.

    Raises:
        FixtureError: If the file is missing, is not valid YAML or fails
            validation
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except FileNotFoundError as e:
        logger.error(f"Case table not found: {path}", operation="load_case_table")
        raise FixtureError(f"Case table not found: {path}") from e
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in case table: {e}", operation="load_case_table")
        raise FixtureError(f"Invalid YAML in {path}: {e}") from e

    return parse_case_table(document, decoder, source=str(path))
