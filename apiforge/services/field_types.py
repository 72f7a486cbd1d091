"""Field kind -> physical column type, DEFAULT literals and bound values."""

import json
from decimal import Decimal
from typing import Any, Optional, Union

from apiforge.core.exceptions import ValidationError
from apiforge.schemas.schemas import FieldType

COLUMN_TYPES = {
    FieldType.STRING: "VARCHAR(255)",
    FieldType.TEXT: "TEXT",
    FieldType.NUMBER: "DECIMAL(10,2)",
    FieldType.INTEGER: "INTEGER",
    FieldType.BOOLEAN: "BOOLEAN",
    FieldType.DATE: "TIMESTAMP",
    FieldType.JSON: "JSONB",
}

# Overrides for dialects that lack a type above.
DIALECT_COLUMN_TYPES = {
    "sqlite": {FieldType.JSON: "JSON"},
}

_QUOTED_KINDS = (FieldType.STRING, FieldType.TEXT, FieldType.DATE)


def field_kind(kind: Union[str, FieldType]) -> FieldType:
    """Coerce to the closed set of field kinds; anything else is rejected."""
    try:
        return FieldType(kind)
    except ValueError:
        allowed = ", ".join(k.value for k in FieldType)
        raise ValidationError(f"Unknown field type '{kind}'. Allowed types: {allowed}")


def column_type(kind: Union[str, FieldType], dialect: str = "postgresql") -> str:
    """Physical column type for a field kind."""
    kind = field_kind(kind)
    return DIALECT_COLUMN_TYPES.get(dialect, {}).get(kind, COLUMN_TYPES[kind])


def _sql_string(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValidationError(f"Default '{value}' is not a boolean")


def has_default(value: Any) -> bool:
    """``None`` and the empty string both mean "no DEFAULT clause"."""
    return value is not None and value != ""


def format_default(value: Any, kind: Union[str, FieldType]) -> Optional[str]:
    """Render a DEFAULT literal for DDL, or ``None`` when there is no default."""
    kind = field_kind(kind)
    if not has_default(value):
        return None
    if kind in _QUOTED_KINDS:
        return _sql_string(str(value))
    if kind == FieldType.BOOLEAN:
        return "TRUE" if _as_bool(value) else "FALSE"
    if kind == FieldType.JSON:
        return _sql_string(json.dumps(value))
    # number / integer go in raw, so they must really be numbers
    if isinstance(value, bool):
        raise ValidationError(f"Default '{value}' is not numeric")
    if kind == FieldType.INTEGER:
        if isinstance(value, int) or (isinstance(value, str) and value.lstrip("-").isdigit()):
            return str(int(value))
        raise ValidationError(f"Default '{value}' is not an integer")
    try:
        number = Decimal(str(value))
    except ArithmeticError:
        raise ValidationError(f"Default '{value}' is not numeric")
    if not number.is_finite():
        raise ValidationError(f"Default '{value}' is not numeric")
    return str(number)


def encode_value(value: Any, kind: Union[str, FieldType]) -> Any:
    """Prepare a payload value for binding as a statement parameter."""
    if value is None:
        return None
    if field_kind(kind) == FieldType.JSON:
        return json.dumps(value)
    return value


def decode_value(value: Any, kind: Union[str, FieldType]) -> Any:
    """Drivers hand JSON columns back as text on some dialects."""
    if field_kind(kind) == FieldType.JSON and isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value
