"""
Differential testing harness for declarative validation.

Runs a resource's validation under the feature-gate matrix and certifies
that the legacy imperative validator and the declarative validator report
equivalent errors.
"""

from validation_parity.domain import (
    ALL_OFF,
    ALL_ON,
    SHADOW,
    ErrorList,
    ErrorType,
    FieldPath,
    GateState,
    StructuredError,
    ValidationContext,
    build_context,
)
from validation_parity.exceptions import (
    CampaignFailure,
    CaseFailure,
    EquivalenceAssertionError,
    ParityError,
)
from validation_parity.fixtures import CaseTable, EquivalenceCase, load_case_table
from validation_parity.gates import FeatureGate, GateMatrixRunner, new_default_feature_gate
from validation_parity.matching import Deduplicator, ErrorMatcher, dedupe, structural_matcher
from validation_parity.protocol import EquivalenceProtocol, VersionedValidationEquivalence

__version__ = "0.1.0"

__all__ = [
    "ALL_OFF",
    "ALL_ON",
    "SHADOW",
    "ErrorList",
    "ErrorType",
    "FieldPath",
    "GateState",
    "StructuredError",
    "ValidationContext",
    "build_context",
    "CampaignFailure",
    "CaseFailure",
    "EquivalenceAssertionError",
    "ParityError",
    "CaseTable",
    "EquivalenceCase",
    "load_case_table",
    "FeatureGate",
    "GateMatrixRunner",
    "new_default_feature_gate",
    "Deduplicator",
    "ErrorMatcher",
    "dedupe",
    "structural_matcher",
    "EquivalenceProtocol",
    "VersionedValidationEquivalence",
]
