"""Query builder — parameterized CRUD statements for a model table.

Values are always bound as numbered parameters (``:p1``, ``:p2``, ...).
Table and column names come from the stored definition; they are checked
against the identifier allow-list and double-quoted before they reach SQL.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from apiforge.services.identifiers import quote_ident, validate_table_name

Owner = Optional[Tuple[str, Any]]


@dataclass
class Statement:
    sql: str
    params: Dict[str, Any] = field(default_factory=dict)


class _Params:
    """Hands out consecutive placeholder names while collecting their values."""

    def __init__(self):
        self.values: Dict[str, Any] = {}

    def bind(self, value: Any) -> str:
        name = f"p{len(self.values) + 1}"
        self.values[name] = value
        return f":{name}"


class QueryBuilder:
    """Statements against one model table."""

    def __init__(self, table_name: str):
        self.table = quote_ident(validate_table_name(table_name))

    def _where(self, params: _Params, record_id: Any = None, owner: Owner = None) -> str:
        clauses = []
        if record_id is not None:
            clauses.append(f"id = {params.bind(record_id)}")
        if owner is not None:
            column, value = owner
            clauses.append(f"{quote_ident(column)} = {params.bind(value)}")
        return f" WHERE {' AND '.join(clauses)}" if clauses else ""

    def select_all(self, owner: Owner = None) -> Statement:
        params = _Params()
        where = self._where(params, owner=owner)
        sql = f"SELECT * FROM {self.table}{where} ORDER BY created_at DESC, id DESC"
        return Statement(sql, params.values)

    def select_one(self, record_id: Any, owner: Owner = None, columns: str = "*") -> Statement:
        """Select a row by id, optionally restricted to an owner (also the guard select)."""
        params = _Params()
        where = self._where(params, record_id=record_id, owner=owner)
        return Statement(f"SELECT {columns} FROM {self.table}{where}", params.values)

    def insert(self, values: Sequence[Tuple[str, Any]]) -> Statement:
        params = _Params()
        names = ["created_at", "updated_at"]
        placeholders = ["CURRENT_TIMESTAMP", "CURRENT_TIMESTAMP"]
        for column, value in values:
            names.append(quote_ident(column))
            placeholders.append(params.bind(value))
        sql = (
            f"INSERT INTO {self.table} ({', '.join(names)}) "
            f"VALUES ({', '.join(placeholders)}) RETURNING *"
        )
        return Statement(sql, params.values)

    def update(self, record_id: Any, values: Sequence[Tuple[str, Any]]) -> Statement:
        """The id is always ``:p1``; SET values follow from ``:p2``."""
        params = _Params()
        id_placeholder = params.bind(record_id)
        assignments: List[str] = ["updated_at = CURRENT_TIMESTAMP"]
        for column, value in values:
            assignments.append(f"{quote_ident(column)} = {params.bind(value)}")
        sql = f"UPDATE {self.table} SET {', '.join(assignments)} WHERE id = {id_placeholder} RETURNING *"
        return Statement(sql, params.values)

    def delete(self, record_id: Any) -> Statement:
        params = _Params()
        where = self._where(params, record_id=record_id)
        return Statement(f"DELETE FROM {self.table}{where} RETURNING *", params.values)
