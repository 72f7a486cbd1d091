"""SQL identifier allow-list.

Model, table and column names end up inside SQL text, so they are checked
against anchored patterns and a reserved-word list when a definition is
submitted and again whenever one is turned into SQL.
"""

import re

from apiforge.core.exceptions import ValidationError

# PostgreSQL truncates identifiers beyond 63 bytes; leave room for the plural "s".
MAX_IDENTIFIER_LENGTH = 63

MODEL_NAME_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9]*$")
COLUMN_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
TABLE_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9]*s$")

# Columns every generated table owns, plus names the auth layer keeps for itself.
RESERVED_FIELD_NAMES = frozenset({"id", "created_at", "updated_at", "user", "password", "token"})

# Tables the engine itself owns; no model may map onto one.
SYSTEM_TABLE_NAMES = frozenset({"users", "model_definitions"})

SQL_RESERVED_WORDS = frozenset({
    "all", "alter", "and", "any", "as", "asc", "between", "by", "case", "cast",
    "check", "column", "constraint", "create", "cross", "current_date",
    "current_time", "current_timestamp", "current_user", "default", "delete",
    "desc", "distinct", "drop", "else", "end", "except", "exists", "false",
    "fetch", "for", "foreign", "from", "full", "grant", "group", "having", "in",
    "index", "inner", "insert", "intersect", "into", "is", "join", "key",
    "left", "like", "limit", "not", "null", "offset", "on", "or", "order",
    "outer", "primary", "references", "returning", "right", "select",
    "session_user", "set", "some", "table", "then", "to", "true", "union",
    "unique", "update", "using", "values", "when", "where", "with",
})


def validate_model_name(name: str) -> str:
    """Check a model name is PascalCase and yields a usable table name."""
    if not isinstance(name, str) or not MODEL_NAME_PATTERN.match(name):
        raise ValidationError(
            f"Model name '{name}' must be PascalCase (a capital letter followed by letters or digits)"
        )
    if len(name) + 1 > MAX_IDENTIFIER_LENGTH:
        raise ValidationError(f"Model name '{name}' is too long")
    if table_name_for(name) in SQL_RESERVED_WORDS:
        raise ValidationError(f"Model name '{name}' is a reserved SQL word")
    if table_name_for(name) in SYSTEM_TABLE_NAMES:
        raise ValidationError(f"Model name '{name}' is reserved for a system table")
    return name


def validate_column_name(name: str, what: str = "Field") -> str:
    """Check a column name against the pattern, the reserved names and SQL keywords."""
    if not isinstance(name, str) or not COLUMN_NAME_PATTERN.match(name):
        raise ValidationError(
            f"{what} name '{name}' must start with a letter or underscore and contain only letters, digits and underscores"
        )
    if len(name) > MAX_IDENTIFIER_LENGTH:
        raise ValidationError(f"{what} name '{name}' is too long")
    lowered = name.lower()
    if lowered in RESERVED_FIELD_NAMES:
        raise ValidationError(f"{what} name '{name}' is reserved")
    if lowered in SQL_RESERVED_WORDS:
        raise ValidationError(f"{what} name '{name}' is a reserved SQL word")
    return name


def validate_table_name(name: str) -> str:
    if not isinstance(name, str) or not TABLE_NAME_PATTERN.match(name) or len(name) > MAX_IDENTIFIER_LENGTH:
        raise ValidationError(f"Table name '{name}' is not a valid generated table name")
    if name in SQL_RESERVED_WORDS:
        raise ValidationError(f"Table name '{name}' is a reserved SQL word")
    if name in SYSTEM_TABLE_NAMES:
        raise ValidationError(f"Table name '{name}' belongs to a system table")
    return name


def table_name_for(model_name: str) -> str:
    """Product -> products."""
    return model_name.lower() + "s"


def quote_ident(name: str) -> str:
    """Double-quote an identifier that already passed the allow-list.

    Surrogate columns (``id``, ``created_at``, ``updated_at``) are accepted
    here even though operators may not declare them.
    """
    if not isinstance(name, str) or not COLUMN_NAME_PATTERN.match(name):
        raise ValidationError(f"Refusing to quote unsafe identifier '{name}'")
    return f'"{name}"'
