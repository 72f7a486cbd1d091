"""Table synthesizer — turns a model definition into DDL and runs it."""

import logging
from dataclasses import dataclass

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from apiforge.core.exceptions import PersistenceError
from apiforge.db.session import dialect_name
from apiforge.schemas.schemas import ModelDefinition
from apiforge.services.field_types import column_type, format_default
from apiforge.services.identifiers import (
    quote_ident,
    validate_column_name,
    validate_model_name,
    validate_table_name,
)

logger = logging.getLogger("apiforge.tables")

PRIMARY_KEY_COLUMNS = {
    "postgresql": "id SERIAL PRIMARY KEY",
    "sqlite": "id INTEGER PRIMARY KEY AUTOINCREMENT",
}

OWNER_REFERENCE = "INTEGER REFERENCES users(id)"


@dataclass
class SynthesisResult:
    table_name: str
    created: bool  # False when the table already existed before this call


class TableSynthesizer:
    """Builds ``CREATE TABLE IF NOT EXISTS`` statements for model definitions.

    The physical columns are fixed at creation; running this again for a
    changed definition leaves an existing table untouched.
    """

    @staticmethod
    def build_create_table_sql(definition: ModelDefinition, dialect: str = "postgresql") -> str:
        """Render the DDL for ``definition``.

        Every identifier is re-validated here, stored definitions are not
        assumed to be clean.
        """
        validate_model_name(definition.name)
        table_name = validate_table_name(definition.table_name)

        columns = [
            PRIMARY_KEY_COLUMNS.get(dialect, PRIMARY_KEY_COLUMNS["postgresql"]),
            "created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP",
            "updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP",
        ]
        for spec in definition.fields:
            column = f"{quote_ident(validate_column_name(spec.name))} {column_type(spec.type, dialect)}"
            if spec.required:
                column += " NOT NULL"
            default = format_default(spec.default, spec.type)
            if default is not None:
                column += f" DEFAULT {default}"
            if spec.unique:
                column += " UNIQUE"
            columns.append(column)

        if definition.owner_field:
            owner = validate_column_name(definition.owner_field, what="Owner field")
            columns.append(f"{quote_ident(owner)} {OWNER_REFERENCE}")

        body = ",\n    ".join(columns)
        return f"CREATE TABLE IF NOT EXISTS {quote_ident(table_name)} (\n    {body}\n)"

    @staticmethod
    def create_table(db: Session, definition: ModelDefinition) -> SynthesisResult:
        """Create the physical table for ``definition`` and commit.

        Raises:
            PersistenceError: If the DDL fails.
        """
        dialect = dialect_name(db)
        sql = TableSynthesizer.build_create_table_sql(definition, dialect)
        table_name = definition.table_name
        try:
            existed = inspect(db.connection()).has_table(table_name)
            db.execute(text(sql))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("DDL for %s failed: %s", table_name, e)
            raise PersistenceError(f"Failed to create table '{table_name}': {e}")

        if existed:
            logger.warning("Table %s already existed; its columns were left unchanged", table_name)
        else:
            logger.info("Created table %s (%d fields)", table_name, len(definition.fields))
        return SynthesisResult(table_name=table_name, created=not existed)

    @staticmethod
    def drop_table(db: Session, table_name: str) -> None:
        """Drop a model table if present and commit."""
        sql = f"DROP TABLE IF EXISTS {quote_ident(validate_table_name(table_name))}"
        try:
            db.execute(text(sql))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to drop table '{table_name}': {e}")
        logger.info("Dropped table %s", table_name)


table_synthesizer = TableSynthesizer()
