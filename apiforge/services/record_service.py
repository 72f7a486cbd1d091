"""Record service — the CRUD handler set shared by every defined model."""

import logging
from typing import Any, Dict, List

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from apiforge.core.exceptions import NotFoundOrForbidden, PersistenceError, ValidationError
from apiforge.services.field_types import decode_value, encode_value, has_default
from apiforge.services.model_registry import ResolvedModel
from apiforge.services.permissions import Identity, authorize, ownership_filter
from apiforge.services.query_builder import QueryBuilder, Statement

logger = logging.getLogger("apiforge.records")


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


class RecordService:
    """List/get/create/update/delete against a resolved model.

    Every operation authorizes the caller's role for the action first; rows of
    a model with an owner field are filtered to the caller unless they are Admin.
    """

    @staticmethod
    def _run(db: Session, statement: Statement, model: ResolvedModel, verb: str) -> List[Dict[str, Any]]:
        try:
            result = db.execute(text(statement.sql), statement.params)
            rows = [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to %s %s: %s", verb, model.name, e)
            raise PersistenceError(f"Failed to {verb} {model.name}: {e}")
        return rows

    @staticmethod
    def _commit(db: Session, model: ResolvedModel, verb: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to {verb} {model.name}: {e}")

    @staticmethod
    def _present(model: ResolvedModel, row: Dict[str, Any]) -> Dict[str, Any]:
        for spec in model.definition.fields:
            if spec.name in row:
                row[spec.name] = decode_value(row[spec.name], spec.type)
        return row

    @staticmethod
    def _guard(db: Session, model: ResolvedModel, record_id: int, identity: Identity, verb: str) -> None:
        """Confirm the row exists and is visible to the caller before mutating it."""
        owner = ownership_filter(model.definition.owner_field, identity)
        statement = QueryBuilder(model.table_name).select_one(record_id, owner, columns="id")
        if not RecordService._run(db, statement, model, verb):
            raise NotFoundOrForbidden(
                f"{model.name} not found or you don't have permission to {verb} it"
            )

    @staticmethod
    def list(db: Session, model: ResolvedModel, identity: Identity) -> List[Dict[str, Any]]:
        authorize(model.definition.rbac, identity.role, "read")
        owner = ownership_filter(model.definition.owner_field, identity)
        statement = QueryBuilder(model.table_name).select_all(owner)
        rows = RecordService._run(db, statement, model, "fetch")
        return [RecordService._present(model, row) for row in rows]

    @staticmethod
    def get(db: Session, model: ResolvedModel, record_id: int, identity: Identity) -> Dict[str, Any]:
        authorize(model.definition.rbac, identity.role, "read")
        owner = ownership_filter(model.definition.owner_field, identity)
        statement = QueryBuilder(model.table_name).select_one(record_id, owner)
        rows = RecordService._run(db, statement, model, "fetch")
        if not rows:
            raise NotFoundOrForbidden(f"{model.name} not found")
        return RecordService._present(model, rows[0])

    @staticmethod
    def check_required(model: ResolvedModel, data: Dict[str, Any]) -> None:
        """Raise ValidationError if a required field is missing, null or empty."""
        for spec in model.definition.fields:
            if spec.required and _is_blank(data.get(spec.name)):
                raise ValidationError(f"Field '{spec.name}' is required")

    @staticmethod
    def create(db: Session, model: ResolvedModel, data: Dict[str, Any], identity: Identity) -> Dict[str, Any]:
        """Insert a record; the owner column always gets the caller's id."""
        definition = model.definition
        RecordService.check_required(model, data)
        authorize(definition.rbac, identity.role, "create")

        values = []
        for spec in definition.fields:
            value = data.get(spec.name)
            if value is not None:
                values.append((spec.name, encode_value(value, spec.type)))
            elif has_default(spec.default):
                values.append((spec.name, encode_value(spec.default, spec.type)))
        if definition.owner_field:
            values.append((definition.owner_field, identity.id))

        statement = QueryBuilder(model.table_name).insert(values)
        rows = RecordService._run(db, statement, model, "create")
        RecordService._commit(db, model, "create")
        logger.info("Created %s %s by user %s", model.name, rows[0].get("id"), identity.id)
        return RecordService._present(model, rows[0])

    @staticmethod
    def update(
        db: Session, model: ResolvedModel, record_id: int, data: Dict[str, Any], identity: Identity
    ) -> Dict[str, Any]:
        """Partial update of the declared fields present and non-null in ``data``."""
        definition = model.definition
        authorize(definition.rbac, identity.role, "update")
        RecordService._guard(db, model, record_id, identity, "update")

        values = [
            (spec.name, encode_value(data[spec.name], spec.type))
            for spec in definition.fields
            if data.get(spec.name) is not None
        ]
        statement = QueryBuilder(model.table_name).update(record_id, values)
        rows = RecordService._run(db, statement, model, "update")
        if not rows:
            # deleted between the guard and the update
            db.rollback()
            raise NotFoundOrForbidden(f"{model.name} not found")
        RecordService._commit(db, model, "update")
        return RecordService._present(model, rows[0])

    @staticmethod
    def delete(db: Session, model: ResolvedModel, record_id: int, identity: Identity) -> Dict[str, Any]:
        authorize(model.definition.rbac, identity.role, "delete")
        RecordService._guard(db, model, record_id, identity, "delete")

        statement = QueryBuilder(model.table_name).delete(record_id)
        rows = RecordService._run(db, statement, model, "delete")
        if not rows:
            db.rollback()
            raise NotFoundOrForbidden(f"{model.name} not found")
        RecordService._commit(db, model, "delete")
        logger.info("Deleted %s %s by user %s", model.name, record_id, identity.id)
        return RecordService._present(model, rows[0])


record_service = RecordService()
