"""
Unit tests for structured errors (validation_parity/domain/errors.py)

Tests covering:
- ErrorType labels and parsing from case-table spellings
- StructuredError constructors and message rendering
- ErrorList helpers
"""

import pytest

from validation_parity.domain.errors import (
    OMITTED,
    ORIGIN_DECLARATIVE,
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
from validation_parity.domain.field_path import root


class TestErrorType:
    """Tests for the ErrorType enumeration."""

    def test_labels(self):
        assert ErrorType.REQUIRED.label == "Required value"
        assert ErrorType.INVALID.label == "Invalid value"
        assert ErrorType.NOT_SUPPORTED.label == "Unsupported value"

    def test_short_name(self):
        assert ErrorType.REQUIRED.short_name == "Required"
        assert ErrorType.TOO_LONG.short_name == "TooLong"
        assert ErrorType.INTERNAL.short_name == "Internal"

    @pytest.mark.parametrize(
        "spelling",
        ["FieldValueRequired", "Required", "required", "Required value", "REQUIRED"],
    )
    def test_parse_spellings(self, spelling):
        assert ErrorType.parse(spelling) is ErrorType.REQUIRED

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown error type"):
            ErrorType.parse("Missing")


class TestConstructors:
    """Tests for the error constructors."""

    def test_required(self):
        err = required(root("spec").child("request"))
        assert err.type == ErrorType.REQUIRED
        assert err.field == "spec.request"
        assert err.bad_value is OMITTED
        assert err.origin == ""

    def test_invalid_keeps_value_and_detail(self):
        err = invalid("spec.expirationSeconds", 300, "too short")
        assert err.bad_value == 300
        assert err.detail == "too short"

    def test_not_supported_lists_valid_values(self):
        err = not_supported("spec.usages[0]", "teleport", ["client auth", "server auth"])
        assert err.detail == 'supported values: "client auth", "server auth"'

    def test_too_long_detail(self):
        assert too_long("spec.signerName", "x" * 10, 5).detail == "must have at most 5 bytes"

    def test_too_many_detail(self):
        err = too_many("spec.usages", 11, 10)
        assert err.bad_value == 11
        assert err.detail == "must have at most 10 items"

    def test_internal_error_uses_exception_text(self):
        err = internal_error(None, RuntimeError("boom"))
        assert err.field == ""
        assert err.detail == "boom"

    @pytest.mark.parametrize(
        "err,expected_type",
        [
            (forbidden("spec"), ErrorType.FORBIDDEN),
            (duplicate("spec.usages[1]", "any"), ErrorType.DUPLICATE),
            (not_found("spec.signerName", "x/y"), ErrorType.NOT_FOUND),
            (type_invalid("spec.usages", 5), ErrorType.TYPE_INVALID),
        ],
    )
    def test_types(self, err, expected_type):
        assert err.type == expected_type


class TestStructuredError:
    """Tests for StructuredError behaviour."""

    def test_with_origin_returns_copy(self):
        err = required("spec.request")
        tagged = err.with_origin(ORIGIN_DECLARATIVE)
        assert tagged.origin == ORIGIN_DECLARATIVE
        assert err.origin == ""

    def test_mark_covered_by_declarative(self):
        err = required("spec.request").mark_covered_by_declarative()
        assert err.covered_by_declarative is True

    def test_frozen(self):
        err = required("spec.request")
        with pytest.raises(AttributeError):
            err.field = "spec.signerName"

    def test_message_required(self):
        assert required("spec.request").message() == "spec.request: Required value"

    def test_message_invalid_with_value_and_detail(self):
        err = invalid("spec.expirationSeconds", 300, "too short")
        assert str(err) == "spec.expirationSeconds: Invalid value: 300: too short"

    def test_message_forbidden_hides_value(self):
        err = StructuredError(ErrorType.FORBIDDEN, "spec", bad_value="x", detail="immutable")
        assert err.message() == "spec: Forbidden: immutable"


class TestErrorList:
    """Tests for ErrorList helpers."""

    def test_render_empty(self):
        assert ErrorList().render() == "<no errors>"

    def test_render_single(self):
        assert ErrorList([required("spec.request")]).render() == "spec.request: Required value"

    def test_render_many(self):
        errs = ErrorList([required("spec.request"), forbidden("spec")])
        assert errs.render() == "[spec.request: Required value, spec: Forbidden]"

    def test_with_origin(self):
        errs = ErrorList([required("a"), required("b")]).with_origin("declarative")
        assert isinstance(errs, ErrorList)
        assert {e.origin for e in errs} == {"declarative"}

    def test_mark_covered_by_declarative(self):
        errs = ErrorList([required("a")]).mark_covered_by_declarative()
        assert errs[0].covered_by_declarative

    def test_filter_type(self):
        errs = ErrorList([required("a"), forbidden("b"), invalid("c", 1)])
        filtered = errs.filter_type(ErrorType.FORBIDDEN, ErrorType.INVALID)
        assert filtered == [required("a")]

    def test_as_error_list(self):
        assert as_error_list(None) == ErrorList()
        existing = ErrorList([required("a")])
        assert as_error_list(existing) is existing
        assert isinstance(as_error_list([required("a")]), ErrorList)
