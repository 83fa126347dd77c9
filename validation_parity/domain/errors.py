"""
Structured validation errors.

A ``StructuredError`` is one validation failure: what kind of violation,
where in the object, and which validation subsystem reported it. Validators
produce them once; the harness only ever reads them.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, Union

from validation_parity.domain.field_path import FieldPath, as_path_string

ORIGIN_DECLARATIVE = "declarative"
ORIGIN_IMPERATIVE = "imperative"

PathLike = Union[FieldPath, str, None]


class ErrorType(Enum):
    """Category of a validation failure."""

    REQUIRED = "FieldValueRequired"
    INVALID = "FieldValueInvalid"
    FORBIDDEN = "FieldValueForbidden"
    DUPLICATE = "FieldValueDuplicate"
    NOT_FOUND = "FieldValueNotFound"
    NOT_SUPPORTED = "FieldValueNotSupported"
    TOO_LONG = "FieldValueTooLong"
    TOO_MANY = "FieldValueTooMany"
    TYPE_INVALID = "FieldValueTypeInvalid"
    INTERNAL = "InternalError"

    @property
    def label(self) -> str:
        """Human-readable label used in error messages."""
        return _LABELS[self]

    @property
    def short_name(self) -> str:
        """Name used in case tables, e.g. ``Required`` or ``TooLong``."""
        return self.value.replace("FieldValue", "").replace("Error", "")

    @classmethod
    def parse(cls, text: str) -> "ErrorType":
        """
        Resolve an error type from any of its spellings.

        Accepts the wire value (``FieldValueRequired``), the short name
        (``Required``), the label (``Required value``) or the member name
        (``REQUIRED``), case-insensitively.
        """
        wanted = text.strip().lower()
        for member in cls:
            spellings = {
                member.value.lower(),
                member.short_name.lower(),
                member.label.lower(),
                member.name.lower(),
            }
            if wanted in spellings:
                return member
        raise ValueError(f"Unknown error type: {text!r}")

    def __str__(self) -> str:
        return self.label


_LABELS = {
    ErrorType.REQUIRED: "Required value",
    ErrorType.INVALID: "Invalid value",
    ErrorType.FORBIDDEN: "Forbidden",
    ErrorType.DUPLICATE: "Duplicate value",
    ErrorType.NOT_FOUND: "Not found",
    ErrorType.NOT_SUPPORTED: "Unsupported value",
    ErrorType.TOO_LONG: "Too long",
    ErrorType.TOO_MANY: "Too many",
    ErrorType.TYPE_INVALID: "Invalid value",
    ErrorType.INTERNAL: "Internal error",
}

# Marker for "no bad value recorded", distinct from a recorded ``None``.
OMITTED = "<omitted>"


@dataclass(frozen=True)
class StructuredError:
    """
    One validation failure.

    Attributes:
        type: Category of the violation
        field: Rendered field path, e.g. ``spec.request``
        bad_value: Offending value, ``OMITTED`` when not reported
        detail: Free-form explanation; wording differs between validators
        origin: Tag naming the validation subsystem or rule that fired
        covered_by_declarative: Imperative error also enforced declaratively
    """

    type: ErrorType
    field: str
    bad_value: Any = OMITTED
    detail: str = ""
    origin: str = ""
    covered_by_declarative: bool = False

    def with_origin(self, origin: str) -> "StructuredError":
        return replace(self, origin=origin)

    def mark_covered_by_declarative(self) -> "StructuredError":
        return replace(self, covered_by_declarative=True)

    def message(self) -> str:
        """Render the error the way validators print it."""
        text = f"{self.field}: {self.type.label}"
        if self.bad_value is not OMITTED and self.type not in (
            ErrorType.REQUIRED,
            ErrorType.FORBIDDEN,
            ErrorType.TOO_LONG,
            ErrorType.INTERNAL,
        ):
            text += f": {self.bad_value!r}"
        if self.detail:
            text += f": {self.detail}"
        return text

    def __str__(self) -> str:
        return self.message()


class ErrorList(list):
    """
    Ordered collection of ``StructuredError``.

    Order is kept for diagnostics only; every comparison in the harness is
    order-insensitive.
    """

    def with_origin(self, origin: str) -> "ErrorList":
        return ErrorList(err.with_origin(origin) for err in self)

    def mark_covered_by_declarative(self) -> "ErrorList":
        return ErrorList(err.mark_covered_by_declarative() for err in self)

    def filter_type(self, *types: ErrorType) -> "ErrorList":
        """Drop errors whose type is one of ``types``."""
        return ErrorList(err for err in self if err.type not in types)

    def render(self) -> str:
        if not self:
            return "<no errors>"
        if len(self) == 1:
            return self[0].message()
        return "[" + ", ".join(err.message() for err in self) + "]"


def as_error_list(errors: Optional[Iterable[StructuredError]]) -> ErrorList:
    """Coerce ``None`` or any iterable of errors to an ``ErrorList``."""
    if errors is None:
        return ErrorList()
    if isinstance(errors, ErrorList):
        return errors
    return ErrorList(errors)


def required(path: PathLike, detail: str = "") -> StructuredError:
    return StructuredError(ErrorType.REQUIRED, as_path_string(path), detail=detail)


def invalid(path: PathLike, value: Any, detail: str = "") -> StructuredError:
    return StructuredError(ErrorType.INVALID, as_path_string(path), value, detail)


def forbidden(path: PathLike, detail: str = "") -> StructuredError:
    return StructuredError(ErrorType.FORBIDDEN, as_path_string(path), detail=detail)


def duplicate(path: PathLike, value: Any) -> StructuredError:
    return StructuredError(ErrorType.DUPLICATE, as_path_string(path), value)


def not_found(path: PathLike, value: Any) -> StructuredError:
    return StructuredError(ErrorType.NOT_FOUND, as_path_string(path), value)


def not_supported(
    path: PathLike, value: Any, valid_values: Optional[Sequence[str]] = None
) -> StructuredError:
    detail = ""
    if valid_values:
        detail = "supported values: " + ", ".join(f'"{v}"' for v in valid_values)
    return StructuredError(ErrorType.NOT_SUPPORTED, as_path_string(path), value, detail)


def too_long(path: PathLike, value: Any, max_length: int) -> StructuredError:
    detail = f"must have at most {max_length} bytes" if max_length >= 0 else ""
    return StructuredError(ErrorType.TOO_LONG, as_path_string(path), value, detail)


def too_many(path: PathLike, actual: int, max_items: int) -> StructuredError:
    detail = f"must have at most {max_items} items" if max_items >= 0 else ""
    return StructuredError(ErrorType.TOO_MANY, as_path_string(path), actual, detail)


def type_invalid(path: PathLike, value: Any, detail: str = "") -> StructuredError:
    return StructuredError(ErrorType.TYPE_INVALID, as_path_string(path), value, detail)


def internal_error(path: PathLike, err: Exception) -> StructuredError:
    return StructuredError(ErrorType.INTERNAL, as_path_string(path), detail=str(err))
