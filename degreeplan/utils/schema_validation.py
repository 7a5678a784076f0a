"""Validate submitted records against a declarative field schema.

A schema maps a wire field name to a :class:`FieldSpec`. Validation
returns an empty string when the record is valid, otherwise a message
with one paragraph per failing field.

Notes:
- Records may carry keys that are not in the schema; they are ignored
  and never copied by :func:`sanitize_using_schema`.
- Partial records (PATCH bodies) only have their present fields checked.
- ``None`` counts as absent.
"""

import enum
import re
from datetime import date, datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, StrictStr, TypeAdapter, ValidationError

from degreeplan.core.config import settings
from degreeplan.models.base import MAX_ROW_ID

_INT = TypeAdapter(int)
_STR = TypeAdapter(StrictStr)
_DATETIME = TypeAdapter(datetime)
_DATE = TypeAdapter(date)

# Shape only; calendar validity is left to pydantic.
_ISO_8601 = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"(T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?)?$"
)


class FieldType(str, enum.Enum):
    INTEGER = "integer"
    STRING = "string"
    TIMESTAMP = "timestamp"
    LIST = "list"


class FieldSpec(BaseModel):
    """Rule for a single field. Unset bounds are unbounded."""

    model_config = ConfigDict(frozen=True)

    type: FieldType
    required: bool = False
    min_value: Optional[int] = None
    max_value: Optional[int] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    message: str = ""


Schema = Mapping[str, FieldSpec]


def _has_property(record: Mapping[str, Any], key: str) -> bool:
    return key in record and record[key] is not None


def _within(value: int, low: Optional[int], high: Optional[int]) -> bool:
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def _is_valid_integer(value: Any, spec: FieldSpec) -> bool:
    if isinstance(value, bool):
        return False
    try:
        number = _INT.validate_python(value)
    except ValidationError:
        return False
    return _within(number, spec.min_value, spec.max_value)


def _is_valid_string(value: Any, spec: FieldSpec) -> bool:
    try:
        string = _STR.validate_python(value)
    except ValidationError:
        return False
    return _within(len(string), spec.min_length, spec.max_length)


def _is_valid_timestamp(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    match = _ISO_8601.match(value)
    if match is None:
        return False
    try:
        if match.group(1) is None:
            _DATE.validate_python(value)
        else:
            _DATETIME.validate_python(value)
    except ValidationError:
        return False
    return True


def _is_valid_list(value: Any, spec: FieldSpec) -> bool:
    if not isinstance(value, (list, tuple)):
        return False
    return _within(len(value), spec.min_length, spec.max_length)


def get_property_violation(record: Mapping[str, Any], key: str, schema: Schema) -> str:
    """Return the violation message for one schema field, or ``""``."""
    if key not in schema:
        return f'Constraint violated: Property "{key}" not in schema'
    if not _has_property(record, key):
        return f'Constraint violated: Property "{key}" not in input'

    spec = schema[key]
    value = record[key]
    if spec.type is FieldType.INTEGER:
        is_valid = _is_valid_integer(value, spec)
    elif spec.type is FieldType.STRING:
        is_valid = _is_valid_string(value, spec)
    elif spec.type is FieldType.TIMESTAMP:
        is_valid = _is_valid_timestamp(value)
    elif spec.type is FieldType.LIST:
        is_valid = _is_valid_list(value, spec)
    else:
        is_valid = False

    return "" if is_valid else spec.message


def get_schema_violations(record: Any, schema: Schema, partial: bool = False) -> str:
    """Validate ``record`` against ``schema``.

    In strict mode every required field must be present and valid. In
    partial mode only the schema fields present in the record are checked.
    """
    if not isinstance(record, Mapping):
        return "Constraint violated: Invalid input type"

    if all(key not in schema for key in record):
        return "Constraint violated: Input has no matching key with schema"

    if partial:
        keys = [key for key in record if key in schema and _has_property(record, key)]
    else:
        keys = [key for key, spec in schema.items() if spec.required]

    violations = [get_property_violation(record, key, schema) for key in keys]
    return "\n\n".join(v for v in violations if v)


def sanitize_using_schema(record: Optional[Mapping[str, Any]], schema: Schema) -> dict[str, Any]:
    """Copy the present schema fields of an already validated record."""
    sanitized: dict[str, Any] = {}
    if record:
        for key in schema:
            if _has_property(record, key):
                sanitized[key] = record[key]
    return sanitized


_NAME_MIN = settings.PLAN_NAME_MIN_LENGTH
_NAME_MAX = settings.PLAN_NAME_MAX_LENGTH
_MAX_COURSES = settings.PLAN_MAX_COURSES

_PLAN_NAME = FieldSpec(
    type=FieldType.STRING,
    required=True,
    min_length=_NAME_MIN,
    max_length=_NAME_MAX,
    message=(
        "Constraint violated: Invalid plan name\n"
        f"The plan name must be a string between {_NAME_MIN} and {_NAME_MAX} characters long."
    ),
)

_COURSES = FieldSpec(
    type=FieldType.LIST,
    required=False,
    min_length=0,
    max_length=_MAX_COURSES,
    message=(
        "Constraint violated: Invalid course list\n"
        f"Courses must be a list of at most {_MAX_COURSES} course codes."
    ),
)

PLAN_SCHEMA: dict[str, FieldSpec] = {
    "status": FieldSpec(
        type=FieldType.INTEGER,
        required=False,
        min_value=0,
        max_value=4,
        message=(
            "Constraint violated: Invalid plan status\n"
            "Plan status must be 0 (Rejected), 1 (Awaiting Student Changes), "
            "2 (Awaiting Review), 3 (Awaiting Final Review), or 4 (Accepted)."
        ),
    ),
    "planName": _PLAN_NAME,
    "studentId": FieldSpec(
        type=FieldType.INTEGER,
        required=True,
        min_value=1,
        max_value=MAX_ROW_ID,
        message=(
            "Constraint violated: Invalid user ID\n"
            "The user ID associated with this plan must be a positive integer."
        ),
    ),
    "lastUpdated": FieldSpec(
        type=FieldType.TIMESTAMP,
        required=False,
        message=(
            "Constraint violated: Invalid plan timestamp\n"
            "The plan timestamp must be in ISO 8601 format."
        ),
    ),
    "courses": _COURSES,
}

PLAN_PATCH_SCHEMA: dict[str, FieldSpec] = {
    "planId": FieldSpec(
        type=FieldType.INTEGER,
        required=True,
        min_value=1,
        max_value=MAX_ROW_ID,
        message=(
            "Constraint violated: Invalid plan ID\n"
            "The plan ID must be a positive integer."
        ),
    ),
    "planName": _PLAN_NAME.model_copy(update={"required": False}),
    "courses": _COURSES,
}
