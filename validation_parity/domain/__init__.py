"""Domain types shared by every harness component."""

from validation_parity.domain.context import (
    ALL_OFF,
    ALL_ON,
    DECLARATIVE_VALIDATION,
    DECLARATIVE_VALIDATION_TAKEOVER,
    SHADOW,
    GateState,
    RequestInfo,
    ValidationContext,
    build_context,
)
from validation_parity.domain.errors import (
    OMITTED,
    ORIGIN_DECLARATIVE,
    ORIGIN_IMPERATIVE,
    ErrorList,
    ErrorType,
    StructuredError,
    as_error_list,
    duplicate,
    forbidden,
    internal_error,
    invalid,
    not_found,
    not_supported,
    required,
    too_long,
    too_many,
    type_invalid,
)
from validation_parity.domain.field_path import FieldPath, root

__all__ = [
    "ALL_OFF",
    "ALL_ON",
    "DECLARATIVE_VALIDATION",
    "DECLARATIVE_VALIDATION_TAKEOVER",
    "SHADOW",
    "GateState",
    "RequestInfo",
    "ValidationContext",
    "build_context",
    "OMITTED",
    "ORIGIN_DECLARATIVE",
    "ORIGIN_IMPERATIVE",
    "ErrorList",
    "ErrorType",
    "StructuredError",
    "as_error_list",
    "duplicate",
    "forbidden",
    "internal_error",
    "invalid",
    "not_found",
    "not_supported",
    "required",
    "too_long",
    "too_many",
    "type_invalid",
    "FieldPath",
    "root",
]
