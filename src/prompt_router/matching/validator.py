"""Field-by-field validation of plugin results.

``validate`` checks a raw plugin return value against the result schema of
one protocol version.  Each mandatory field goes through, in order:
presence (absent or ``None`` fails), primitive type, non-blank (strings
only), and membership in the allowed literal set.  ``version`` is checked
first and must equal the active literal exactly; a result written for any
other version is rejected outright rather than coerced.

Classes
-------
- ErrorCode         — MISSING, INVALID_TYPE, INVALID_VALUE
- FieldError        — one diagnostic
- ValidationResult  — verdict, diagnostics, and the typed result on success
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from prompt_router.discovery.records import PluginKind
from prompt_router.matching.results import (
    CurrentResult,
    LegacyResult,
    Priority,
    Relevance,
)
from prompt_router.protocol import LEGACY_VERSION, get_protocol


class ErrorCode(str, Enum):
    MISSING = "MISSING"
    INVALID_TYPE = "INVALID_TYPE"
    INVALID_VALUE = "INVALID_VALUE"


@dataclass(frozen=True)
class FieldError:
    """A single validation failure.

    Parameters
    ----------
    field:
        Offending field name, or ``"result"`` when the value is not a mapping.
    code:
        Failure category.
    message:
        Human-readable explanation.
    details:
        What was actually received.
    """

    field: str
    code: ErrorCode
    message: str
    details: str = ""

    def __str__(self) -> str:
        suffix = f" ({self.details})" if self.details else ""
        return f"{self.code.value} {self.field}: {self.message}{suffix}"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of ``validate``.

    ``result`` holds the typed ``LegacyResult``/``CurrentResult`` when
    ``valid`` is true and is ``None`` otherwise.
    """

    valid: bool
    errors: tuple[FieldError, ...] = ()
    result: LegacyResult | CurrentResult | None = field(default=None, compare=False)

    @property
    def primary_error(self) -> FieldError | None:
        return self.errors[0] if self.errors else None


def _type_name(value: object) -> str:
    return type(value).__name__


def _missing(name: str) -> FieldError:
    return FieldError(
        field=name,
        code=ErrorCode.MISSING,
        message=f'Matcher result must have a "{name}" field (cannot be missing or None)',
        details="Field is missing or None",
    )


def _check_string(
    raw: Mapping[str, object],
    name: str,
    allowed: tuple[str, ...],
) -> FieldError | None:
    value = raw.get(name)
    if value is None:
        return _missing(name)
    if not isinstance(value, str):
        return FieldError(
            field=name,
            code=ErrorCode.INVALID_TYPE,
            message=f'Matcher result "{name}" must be a string',
            details=f"Got type: {_type_name(value)}",
        )
    if not value.strip():
        return FieldError(
            field=name,
            code=ErrorCode.INVALID_VALUE,
            message=f'Matcher result "{name}" must be a non-empty string',
            details="Value is empty or whitespace-only",
        )
    if value not in allowed:
        return FieldError(
            field=name,
            code=ErrorCode.INVALID_VALUE,
            message=f'Matcher result "{name}" must be one of: {", ".join(allowed)}',
            details=f"Got: {value}",
        )
    return None


def _check_bool(raw: Mapping[str, object], name: str) -> FieldError | None:
    value = raw.get(name)
    if value is None:
        return _missing(name)
    if not isinstance(value, bool):
        return FieldError(
            field=name,
            code=ErrorCode.INVALID_TYPE,
            message=f'Matcher result "{name}" must be a boolean',
            details=f"Got type: {_type_name(value)}",
        )
    return None


def _check_count(raw: Mapping[str, object], name: str) -> FieldError | None:
    value = raw.get(name)
    if value is None:
        return _missing(name)
    # bool is an int subclass; True is not a count.
    if isinstance(value, bool) or not isinstance(value, int):
        return FieldError(
            field=name,
            code=ErrorCode.INVALID_TYPE,
            message=f'Matcher result "{name}" must be an integer',
            details=f"Got type: {_type_name(value)}",
        )
    if value < 0:
        return FieldError(
            field=name,
            code=ErrorCode.INVALID_VALUE,
            message=f'Matcher result "{name}" must be zero or greater',
            details=f"Got: {value}",
        )
    return None


def _check_kind(
    raw: Mapping[str, object],
    kinds: tuple[PluginKind, ...],
) -> FieldError | None:
    # ``kind`` may be omitted, but when present it must be a real value.
    if "kind" not in raw:
        return None
    return _check_string(raw, "kind", tuple(kind.value for kind in kinds))


def validate(version: str, raw: object) -> ValidationResult:
    """Validate a raw plugin result against the *version* schema.

    Parameters
    ----------
    version:
        The active protocol version; the result's ``version`` must equal it.
    raw:
        Whatever the plugin returned.

    Returns
    -------
    ValidationResult
        ``valid`` with the typed result, or the diagnostics.  The first
        entry of ``errors`` is the primary one.

    Raises
    ------
    UnsupportedProtocolError
        If *version* itself is not a known protocol.
    """
    protocol = get_protocol(version)

    if not isinstance(raw, Mapping):
        return ValidationResult(
            valid=False,
            errors=(
                FieldError(
                    field="result",
                    code=ErrorCode.INVALID_TYPE,
                    message="Matcher result must be a mapping",
                    details=f"Got type: {_type_name(raw)}",
                ),
            ),
        )

    version_error = _check_string(raw, "version", (protocol.version,))
    if version_error is not None:
        return ValidationResult(valid=False, errors=(version_error,))

    if protocol.version == LEGACY_VERSION:
        checks = [
            _check_bool(raw, "relevant"),
            _check_string(raw, "priority", tuple(p.value for p in Priority)),
            _check_string(raw, "relevance", tuple(r.value for r in Relevance)),
            _check_kind(raw, protocol.kinds),
        ]
    else:
        checks = [
            _check_count(raw, "matchCount"),
            _check_kind(raw, protocol.kinds),
        ]

    errors = tuple(error for error in checks if error is not None)
    if errors:
        return ValidationResult(valid=False, errors=errors)

    kind = PluginKind(raw["kind"]) if "kind" in raw else None
    result: LegacyResult | CurrentResult
    if protocol.version == LEGACY_VERSION:
        result = LegacyResult(
            relevant=raw["relevant"],
            priority=Priority(raw["priority"]),
            relevance=Relevance(raw["relevance"]),
            kind=kind,
        )
    else:
        result = CurrentResult(match_count=raw["matchCount"], kind=kind)
    return ValidationResult(valid=True, result=result)
