"""
Compiler Errors - Severity-tagged error model.

Expected data problems (missing files, bad lines, duplicate keys) are never
raised. They are collected as Error values in an ErrorSet and travel back
to the caller, who decides from the highest severity whether a module may
be included in the final container.

Error hierarchy (raised, for programming errors only):
    LangDataError (base)
    ├── InvalidDataError      (malformed raw data found deep in a loader)
    ├── FieldOverflowError    (value does not fit its fixed-width field)
    └── UnknownRawDataError   (raw data name is not registered)

Example:
    errors = ErrorSet()
    errors.add(DataCompilerError.ZERO_MODULE_DATA, "PhoneSet")
    if errors.contains(Severity.MUST_FIX):
        ...
    for error in errors:
        print(error)   # "WARNING: Skip data "PhoneSet" as the data size is zero"
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable, Iterator


class Severity(Enum):
    """Error severity, most to least severe."""

    MUST_FIX = "must_fix"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Numeric rank, higher is more severe."""
        return {
            "must_fix": 2,
            "warning": 1,
            "info": 0,
        }[self.value]

    @property
    def prefix(self) -> str:
        """Prefix used when printing an error of this severity."""
        return {
            "must_fix": "ERROR",
            "warning": "WARNING",
            "info": "INFO",
        }[self.value]


class ErrorKind(Enum):
    """Base for per-component error kinds.

    Members are declared as ``(template, severity)`` or
    ``(template, severity, concat)`` tuples. The template is rendered with
    ``str.format(*args)``; ``concat`` joins the message of a nested inner
    error.
    """

    def __init__(
        self,
        template: str,
        severity: Severity = Severity.MUST_FIX,
        concat: str = " ",
    ):
        self.template = template
        self.severity = severity
        self.concat = concat


class DataCompilerError(ErrorKind):
    """Errors reported by the build pipeline itself."""

    TOOL_NOT_FOUND = ("Tool \"{0}\" could not be found: '{1}'.", Severity.MUST_FIX)
    RAW_DATA_NOT_FOUND = ("Raw data for \"{0}\" could not be found: '{1}'.", Severity.MUST_FIX)
    ALL_DOMAIN_RAW_DATA_NOT_FOUND = (
        "All domain raw data for \"{0}\" domain could not be found.", Severity.MUST_FIX)
    PATH_NOT_INITIALIZED = (
        "Path of '{0}' for raw data could not be null or empty.", Severity.MUST_FIX)
    INVALID_MODULE_DATA = ("Invalid Module data of \"{0}\".", Severity.MUST_FIX)
    RAW_DATA_ERROR = ("Error was found in raw data: {0}.", Severity.MUST_FIX)
    NO_DOMAIN_DATA_IN_RAW_DATA = (
        "Data for \"{0}\" domain was not found in raw data: {1}.", Severity.MUST_FIX)
    DEPENDENCIES_NOT_VALID = ("Dependencies are not valid: \"{0}\".", Severity.MUST_FIX)
    SKIP_COMBINING_DATA_FOR_GUID = (
        "Skip data for guid {{{0}}} as the path not found: '{1}'.", Severity.WARNING)
    SKIP_COMBINING_DATA = ("Skip data \"{0}\" as the path not found: '{1}'", Severity.WARNING)
    ZERO_MODULE_DATA = ("Skip data \"{0}\" as the data size is zero", Severity.WARNING)
    NECESSARY_DATA_MISSING = (
        "Missing necessary Module Data \"{0}\" and automatically compiling it", Severity.WARNING)
    DOMAIN_DATA_MISSING = (
        "Could not find any data to combine in \"{0}\" domain.", Severity.MUST_FIX)
    COMBINATION_HALT = ("Unable to combine the final data file.", Severity.MUST_FIX)
    INVALID_RAW_DATA = ("There is no such raw data \"{0}\".", Severity.WARNING)
    DUPLICATE_ITEM_KEY = ("There are duplicate keys: \"{0}\".", Severity.MUST_FIX)
    INVALID_BINARY_DATA = ("There is no such binary data \"{0}\".", Severity.WARNING)
    SAVE_BINARY_FILE_FAIL = (
        "Fail to save binary data file for \"{0}\" as: {1}", Severity.WARNING)
    COMPOSITE_COMPILING_FAIL = (
        "Fail to do composite data compiling for \"{0}\" as {1}", Severity.MUST_FIX)
    COMPILING_LOG_WITH_DATA_NAME = ("Log of Compiling data \"{0}\": {1}", Severity.INFO)
    COMPILING_LOG = ("{0}", Severity.INFO)
    COMPILING_LOG_WITH_ERROR = (
        "Log of Compiling data \"{0}\" with error: {1}", Severity.MUST_FIX)
    COMPILING_LOG_WITH_WARNING = (
        "Log of Compiling data \"{0}\" with warning: {1}", Severity.WARNING)
    INVALID_GUID_STRING = (
        "Invalid Guid string {{{1}}} for data \"{0}\" : {2}", Severity.MUST_FIX)


@dataclass(frozen=True)
class Error:
    """A single reported problem.

    Attributes:
        kind: Error kind (carries the message template).
        args: Values substituted into the template.
        severity: Effective severity; defaults to the kind's severity.
        inner: Optional nested error whose message is appended.
    """

    kind: ErrorKind
    args: tuple[Any, ...] = ()
    severity: Severity | None = None
    inner: Error | None = None

    def __post_init__(self):
        if self.severity is None:
            object.__setattr__(self, "severity", self.kind.severity)
        object.__setattr__(self, "args", tuple(self.args))

    @property
    def message(self) -> str:
        """Rendered message without the severity prefix."""
        text = self.kind.template.format(*self.args)
        if self.inner is not None:
            text = f"{text}{self.kind.concat}{self.inner.message}"
        return text

    def with_severity(self, severity: Severity) -> Error:
        """Copy of this error carrying another severity."""
        return replace(self, severity=severity)

    def __str__(self) -> str:
        return f"{self.severity.prefix}: {self.message}"


class ErrorSet:
    """Ordered, append-only collection of errors.

    Merging never drops or deduplicates entries, so ``contains`` is
    monotonic: once a set holds a MUST_FIX entry, every set it is merged
    into holds one too.
    """

    def __init__(self, errors: Iterable[Error] | None = None):
        self._errors: list[Error] = list(errors or [])

    def add(
        self,
        kind: ErrorKind | Error,
        *args: Any,
        inner: Error | None = None,
    ) -> Error:
        """Append an error.

        Args:
            kind: Error kind, or a ready-made Error.
            *args: Template arguments.
            inner: Optional nested error.

        Returns:
            The appended Error.
        """
        if isinstance(kind, Error):
            error = kind
        else:
            error = Error(kind, args, inner=inner)
        self._errors.append(error)
        return error

    def merge(self, other: ErrorSet | Iterable[Error] | None) -> ErrorSet:
        """Append every error of ``other``; returns self."""
        if other is not None:
            self._errors.extend(other)
        return self

    extend = merge

    def contains(self, severity: Severity) -> bool:
        """True if any error is at least as severe as ``severity``."""
        return any(e.severity.rank >= severity.rank for e in self._errors)

    def contains_kind(self, kind: ErrorKind) -> bool:
        """True if any error has the given kind."""
        return any(e.kind is kind for e in self._errors)

    def count(self, severity: Severity) -> int:
        """Number of errors with exactly this severity."""
        return sum(1 for e in self._errors if e.severity is severity)

    @property
    def highest_severity(self) -> Severity | None:
        if not self._errors:
            return None
        return max((e.severity for e in self._errors), key=lambda s: s.rank)

    @property
    def errors(self) -> tuple[Error, ...]:
        return tuple(self._errors)

    def kinds(self) -> list[ErrorKind]:
        return [e.kind for e in self._errors]

    def with_severity(self, severity: Severity) -> ErrorSet:
        """Copy with every error re-tagged to ``severity``."""
        return ErrorSet(e.with_severity(severity) for e in self._errors)

    def downgrade(
        self,
        source: Severity = Severity.MUST_FIX,
        target: Severity = Severity.WARNING,
    ) -> ErrorSet:
        """Copy with ``source`` errors re-tagged to ``target``."""
        return ErrorSet(
            e.with_severity(target) if e.severity is source else e
            for e in self._errors
        )

    def __iter__(self) -> Iterator[Error]:
        return iter(list(self._errors))

    def __len__(self) -> int:
        return len(self._errors)

    def __repr__(self) -> str:
        return f"ErrorSet({len(self._errors)} errors)"

    def __str__(self) -> str:
        return "\n".join(str(e) for e in self._errors)


def merge_as_logs(target: ErrorSet, sub_errors: ErrorSet, data_name: str) -> None:
    """Re-tag every error of ``sub_errors`` as a compiling log entry of ``data_name``.

    The log kind follows the severity; the entry keeps the original text.
    """
    for error in sub_errors:
        if error.severity is Severity.MUST_FIX:
            target.add(DataCompilerError.COMPILING_LOG_WITH_ERROR, data_name, str(error))
        elif error.severity is Severity.WARNING:
            target.add(DataCompilerError.COMPILING_LOG_WITH_WARNING, data_name, str(error))
        else:
            target.add(DataCompilerError.COMPILING_LOG_WITH_DATA_NAME, data_name, str(error))


def merge_dependency_errors(target: ErrorSet, sub_errors: ErrorSet, data_name: str) -> None:
    """Fold a dependency's errors into ``target``.

    A failing dependency adds DEPENDENCIES_NOT_VALID for ``data_name``;
    every underlying error is then re-tagged with ``merge_as_logs``, so the
    root cause stays traceable.
    """
    if sub_errors.contains(Severity.MUST_FIX):
        target.add(DataCompilerError.DEPENDENCIES_NOT_VALID, data_name)
    merge_as_logs(target, sub_errors, data_name)


class LangDataError(Exception):
    """Base error for all language data compiler errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class InvalidDataError(LangDataError):
    """
    Raised when raw data is structurally unusable.

    Loaders raise this from deep inside parsing code; the module dispatcher
    converts it into a RAW_DATA_NOT_FOUND entry for the module being built.
    """


class FieldOverflowError(LangDataError):
    """
    Raised when a value does not fit the fixed-width field it is packed into.

    This is an invariant violation, not a data-quality warning, and always
    propagates to the caller.
    """

    def __init__(self, field_name: str, value: Any, width: str):
        super().__init__(
            f"Value {value!r} does not fit field '{field_name}' ({width})",
            {"field": field_name, "value": value, "width": width},
        )
        self.field_name = field_name
        self.value = value


class UnknownRawDataError(LangDataError, KeyError):
    """Raised when an object is injected for a raw data name that is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Unknown raw data: {name}", {"name": name})
        self.name = name
