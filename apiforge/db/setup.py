"""Base schema creation and bulk data reset."""

import logging
from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from apiforge.core.config import settings
from apiforge.core.exceptions import NotFoundOrForbidden
from apiforge.db.base import Base
from apiforge.db.session import dialect_name
from apiforge.models import ModelDefinitionRecord, User
from apiforge.services.identifiers import quote_ident, validate_table_name

logger = logging.getLogger("apiforge.db")


def create_base_tables(bind: Engine) -> None:
    """Create ``users`` and ``model_definitions`` if missing; model tables are created on demand."""
    Base.metadata.create_all(bind=bind)


def clear_data(db: Session) -> Dict[str, Any]:
    """Empty every model table and remove all users except the admin.

    Definitions are reassigned to the admin first so they survive the user purge.
    """
    admin = db.query(User).filter(User.username == settings.ADMIN_USERNAME).first()
    if admin is None:
        raise NotFoundOrForbidden("Admin user not found")

    db.query(ModelDefinitionRecord).update({"created_by": admin.id})
    db.commit()

    cleared, failed = [], []
    for (table_name,) in db.query(ModelDefinitionRecord.table_name).all():
        table = quote_ident(validate_table_name(table_name))
        if dialect_name(db) == "postgresql":
            sql = f"TRUNCATE TABLE {table} RESTART IDENTITY"
        else:
            sql = f"DELETE FROM {table}"
        try:
            db.execute(text(sql))
            db.commit()
            cleared.append(table_name)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to clear %s: %s", table_name, e)
            failed.append(table_name)

    users_removed = db.query(User).filter(User.id != admin.id).delete()
    db.commit()
    return {"cleared_tables": cleared, "failed_tables": failed, "users_removed": users_removed}
