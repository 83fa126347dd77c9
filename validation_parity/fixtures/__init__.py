"""Expected-error case tables."""

from validation_parity.fixtures.case_table import (
    SCHEMA_PATH,
    CaseTable,
    EquivalenceCase,
    error_from_dict,
    load_case_table,
    parse_case_table,
)

__all__ = [
    "SCHEMA_PATH",
    "CaseTable",
    "EquivalenceCase",
    "error_from_dict",
    "load_case_table",
    "parse_case_table",
]
