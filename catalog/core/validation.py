"""Validation & Normalization Pipeline — raw field map + rules -> values or failures.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Every field is checked; failures come back in field-declaration order
    - Within one field only the first failing rule is reported
    - Text is trimmed, then escaped, then length-checked
    - A multi-valued field always normalizes to a tuple (absent -> empty,
      scalar -> one element), blank items dropped, duplicates dropped by parsed
      value in first-seen order
    - A malformed reference is reported exactly like an unresolvable one

Design Decisions:
    - Rules are data (FieldRule), the pipeline is one function: schemas per entity
      live in entity_schemas.py and stay declarative
    - Failed fields keep their normalized text in `values` so a rejected form can be
      redisplayed with everything the user typed
"""

import html
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from catalog.core.domain_types import EntityKind, parse_entity_id

RawValue = str | Sequence[str]
RawInput = Mapping[str, RawValue]


class FieldType(str, Enum):
    TEXT = "text"
    DATE = "date"
    CHOICE = "choice"
    REFERENCE = "reference"


@dataclass(frozen=True)
class FieldRule:
    """Declarative rule set for one input field."""
    key: str                       # raw input key (also the key errors are reported under)
    attr: str                      # draft attribute the normalized value lands in
    message: str = ""              # required / invalid value message
    required: bool = True
    max_length: int | None = None
    too_long_message: str = ""
    many: bool = False
    default: object = None
    field_type: FieldType = FieldType.TEXT
    choices: type[Enum] | None = None
    references: EntityKind | None = None
    escape: bool = True


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str
    value: object = None

    def to_dict(self) -> dict:
        value = self.value
        if isinstance(value, tuple):
            value = [str(v) for v in value]
        elif value is not None and not isinstance(value, str):
            value = str(value)
        return {"field": self.field, "message": self.message, "value": value}


@dataclass(frozen=True)
class ValidationResult:
    values: dict[str, object]
    errors: tuple[FieldError, ...]

    @property
    def ok(self) -> bool:
        return not self.errors


# --- Public API ---------------------------------------------------------------

def validate(raw: RawInput, rules: Sequence[FieldRule]) -> ValidationResult:
    """Run every rule over `raw`. Pure, no IO."""
    values: dict[str, object] = {}
    errors: list[FieldError] = []
    for rule in rules:
        if rule.many:
            value, error = _validate_many(raw.get(rule.key), rule)
        else:
            value, error = _validate_scalar(raw.get(rule.key), rule)
        values[rule.attr] = value
        if error:
            errors.append(error)
    return ValidationResult(values=values, errors=tuple(errors))


def order_errors(
    rules: Sequence[FieldRule], errors: Sequence[FieldError],
) -> tuple[FieldError, ...]:
    """Stable sort of errors by the declaration order of their field."""
    position = {rule.key: i for i, rule in enumerate(rules)}
    return tuple(sorted(errors, key=lambda e: position.get(e.field, len(position))))


def coerce_many(raw: object) -> list[str]:
    """One-of-many normalization: absent -> [], scalar -> [scalar], list -> list."""
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, Sequence):
        return [str(item) for item in raw if item is not None]
    return [str(raw)]


def normalize_text(raw: object, escape: bool = True) -> str:
    """Trim surrounding whitespace, then neutralize markup."""
    text = "" if raw is None else str(raw).strip()
    return html.escape(text, quote=True) if escape else text


def parse_date(text: str) -> date | None:
    """ISO-8601 date (or date-time, truncated to its date). None if unparseable."""
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def reference_not_found_message(kind: EntityKind) -> str:
    return f"{kind.label} not found"


# --- Per-field helpers --------------------------------------------------------

def _validate_scalar(raw: object, rule: FieldRule) -> tuple[object, FieldError | None]:
    if not isinstance(raw, str) and isinstance(raw, Sequence):
        raw = raw[0] if raw else None
    text = normalize_text(raw, rule.escape)

    if not text:
        if rule.required:
            return text, FieldError(rule.key, rule.message, text)
        return rule.default, None

    if rule.max_length is not None and len(text) > rule.max_length:
        message = rule.too_long_message or (
            f"Must be at most {rule.max_length} characters."
        )
        return text, FieldError(rule.key, message, text)
    return _parse(text, rule)


def _validate_many(raw: object, rule: FieldRule) -> tuple[object, FieldError | None]:
    items = [normalize_text(item, rule.escape) for item in coerce_many(raw)]
    items = [text for text in items if text]

    if rule.required and not items:
        return (), FieldError(rule.key, rule.message, ())

    parsed = []
    for text in items:
        value, error = _parse(text, rule)
        if error:
            return tuple(items), error
        # "8B44..." and "8b44..." name the same id
        if value not in parsed:
            parsed.append(value)
    return tuple(parsed), None


def _parse(text: str, rule: FieldRule) -> tuple[object, FieldError | None]:
    if rule.field_type is FieldType.DATE:
        parsed = parse_date(text)
        if parsed is None:
            return text, FieldError(rule.key, rule.message, text)
        return parsed, None

    if rule.field_type is FieldType.CHOICE and rule.choices is not None:
        try:
            return rule.choices(text), None
        except ValueError:
            return text, FieldError(rule.key, rule.message, text)

    if rule.field_type is FieldType.REFERENCE and rule.references is not None:
        entity_id = parse_entity_id(text)
        if entity_id is None:
            return text, FieldError(
                rule.key, reference_not_found_message(rule.references), text,
            )
        return entity_id, None

    return text, None
