"""Schema store — persists and retrieves model definitions."""

import json
import logging
from typing import List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from apiforge.core.exceptions import DefinitionCorruption, PersistenceError, ValidationError
from apiforge.models.model_definition import ModelDefinitionRecord
from apiforge.schemas.schemas import ModelDefinition, StoredModel
from apiforge.services.file_mirror import FileMirror, file_mirror
from apiforge.services.table_synthesizer import table_synthesizer

logger = logging.getLogger("apiforge.schema_store")


def load_definition(raw: str, expected_name: Optional[str] = None) -> ModelDefinition:
    """Parse a stored definition strictly.

    Raises:
        DefinitionCorruption: If ``raw`` is not a valid definition document.
    """
    try:
        definition = ModelDefinition.model_validate(json.loads(raw))
    except (TypeError, ValueError, PydanticValidationError) as e:
        raise DefinitionCorruption(f"Stored definition is not valid: {e}")
    if expected_name is not None and definition.name != expected_name:
        raise DefinitionCorruption(
            f"Stored definition names '{definition.name}' but belongs to '{expected_name}'"
        )
    return definition


def fallback_definition(name: str) -> ModelDefinition:
    """Least-privilege stand-in: no fields, no owner, no role grants (only Admin passes)."""
    return ModelDefinition(name=name, fields=[], owner_field=None, rbac={})


def parse_definition(name: str, raw: str) -> Tuple[ModelDefinition, Optional[str]]:
    """Parse a stored definition, degrading to the fallback on corruption.

    Returns the definition and, when degraded, the reason.
    """
    try:
        return load_definition(raw, expected_name=name), None
    except DefinitionCorruption as e:
        logger.warning("Definition for %s is corrupted, serving degraded fallback: %s", name, e.message)
        return fallback_definition(name), e.message


def to_stored_model(record: ModelDefinitionRecord) -> StoredModel:
    definition, reason = parse_definition(record.name, record.definition_json)
    return StoredModel(
        id=record.id,
        name=record.name,
        table_name=record.table_name,
        definition=definition,
        created_by=record.created_by,
        created_by_username=record.creator.username if record.creator else None,
        created_at=record.created_at,
        degraded=reason is not None,
        degraded_reason=reason,
    )


def check_definitions(db: Session) -> List[dict]:
    """Report, per stored definition, whether it parses and what it declares."""
    report = []
    for record in db.query(ModelDefinitionRecord).order_by(ModelDefinitionRecord.id).all():
        entry = {"id": record.id, "name": record.name, "valid": True}
        try:
            definition = load_definition(record.definition_json, expected_name=record.name)
            entry["fields"] = len(definition.fields)
            entry["rbac"] = bool(definition.rbac)
        except DefinitionCorruption as e:
            entry["valid"] = False
            entry["error"] = e.message
        report.append(entry)
    return report


class SchemaStore:
    """Definitions live in ``model_definitions``; a JSON file per model mirrors them for audit."""

    def __init__(self, mirror: Optional[FileMirror] = None):
        self.mirror = mirror or file_mirror

    def persist(self, db: Session, definition: ModelDefinition, creator_id: Optional[int]) -> StoredModel:
        """Insert a definition row.

        Raises:
            ValidationError: If the name or table name is already taken.
            PersistenceError: On any other store failure.
        """
        record = ModelDefinitionRecord(
            name=definition.name,
            table_name=definition.table_name,
            definition_json=json.dumps(definition.to_document()),
            created_by=creator_id,
        )
        db.add(record)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ValidationError(f"Model '{definition.name}' already exists")
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to save model '{definition.name}': {e}")
        db.refresh(record)
        return to_stored_model(record)

    def write_mirror(self, definition: ModelDefinition) -> Optional[str]:
        """Best-effort mirror write; returns the file path or ``None`` if it failed."""
        try:
            return self.mirror.write(definition)
        except OSError as e:
            logger.warning("Could not write mirror for %s: %s", definition.name, e)
            return None

    @staticmethod
    def get_record(db: Session, name: str) -> Optional[ModelDefinitionRecord]:
        return db.query(ModelDefinitionRecord).filter(ModelDefinitionRecord.name == name).first()

    def get_by_name(self, db: Session, name: str) -> Optional[StoredModel]:
        record = self.get_record(db, name)
        return to_stored_model(record) if record else None

    def exists(self, db: Session, name: str, table_name: str) -> bool:
        """True when either the model name or its table name is already registered."""
        return db.query(ModelDefinitionRecord).filter(
            (ModelDefinitionRecord.name == name) | (ModelDefinitionRecord.table_name == table_name)
        ).first() is not None

    def get_all(self, db: Session) -> List[StoredModel]:
        """All definitions, newest first, with the creator's username."""
        records = (
            db.query(ModelDefinitionRecord)
            .order_by(ModelDefinitionRecord.created_at.desc(), ModelDefinitionRecord.id.desc())
            .all()
        )
        return [to_stored_model(r) for r in records]

    def remove_definition(self, db: Session, name: str) -> None:
        """Delete only the definition row."""
        try:
            db.query(ModelDefinitionRecord).filter(ModelDefinitionRecord.name == name).delete()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to remove model '{name}': {e}")

    def delete(self, db: Session, name: str) -> None:
        """Drop the physical table, remove the definition row and the mirror file."""
        record = self.get_record(db, name)
        if record is None:
            return
        table_name = record.table_name
        table_synthesizer.drop_table(db, table_name)
        self.remove_definition(db, name)
        self.mirror.remove(name)
        logger.info("Deleted model %s (table %s)", name, table_name)


schema_store = SchemaStore()
