"""Model service — create and delete operator-defined models.

Creating a model is a sequence of steps against different resources (DDL,
definition row, mirror file, registry). A failure after the table exists
undoes the earlier steps; the table is only dropped again if this call
created it. Losing the name to a concurrent creator never drops the table,
since both callers may have seen it missing before their DDL ran.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from apiforge.core.exceptions import ApiForgeError, NotFoundOrForbidden, ValidationError
from apiforge.schemas.schemas import ModelDefinitionIn, StoredModel
from apiforge.services.definition_validator import validate_definition
from apiforge.services.model_registry import ModelRegistry
from apiforge.services.permissions import Identity
from apiforge.services.schema_store import SchemaStore, schema_store
from apiforge.services.table_synthesizer import TableSynthesizer, table_synthesizer

logger = logging.getLogger("apiforge.models")


class ModelService:
    """Model lifecycle on top of the schema store, table synthesizer and registry."""

    def __init__(
        self,
        store: Optional[SchemaStore] = None,
        synthesizer: Optional[TableSynthesizer] = None,
    ):
        self.store = store or schema_store
        self.synthesizer = synthesizer or table_synthesizer

    def create_model(
        self, db: Session, registry: ModelRegistry, payload: ModelDefinitionIn, identity: Identity
    ) -> Dict[str, Any]:
        """Validate, synthesize, persist, mirror and mount a new model.

        Returns:
            {"model": StoredModel, "tableName": str, "filePath": str | None}
        """
        definition = validate_definition(payload)
        if self.store.exists(db, definition.name, definition.table_name):
            raise ValidationError("Model with this name already exists")

        synthesis = self.synthesizer.create_table(db, definition)
        try:
            stored = self.store.persist(db, definition, identity.id)
        except ValidationError:
            # another request persisted this name first; the table is theirs
            logger.warning("Model %s was created concurrently, keeping its table", definition.name)
            raise
        except ApiForgeError:
            self._compensate_table(db, synthesis.table_name, synthesis.created)
            raise

        file_path = self.store.write_mirror(definition)

        try:
            registry.register(stored)
        except Exception:
            logger.exception("Registering %s failed, rolling back its creation", stored.name)
            self.store.remove_definition(db, stored.name)
            self.store.mirror.remove(stored.name)
            self._compensate_table(db, synthesis.table_name, synthesis.created)
            raise

        logger.info("Model %s created by user %s", stored.name, identity.id)
        return {"model": stored, "tableName": synthesis.table_name, "filePath": file_path}

    def _compensate_table(self, db: Session, table_name: str, created: bool) -> None:
        if not created:
            logger.warning("Leaving table %s in place, it predates this request", table_name)
            return
        try:
            self.synthesizer.drop_table(db, table_name)
        except ApiForgeError as e:
            logger.error("Compensation failed, table %s is orphaned: %s", table_name, e.message)

    def list_models(self, db: Session) -> List[StoredModel]:
        return self.store.get_all(db)

    def get_model(self, db: Session, name: str) -> StoredModel:
        stored = self.store.get_by_name(db, name)
        if stored is None:
            raise NotFoundOrForbidden("Model not found")
        return stored

    def delete_model(self, db: Session, registry: ModelRegistry, name: str) -> None:
        """Unmount the model's routes, then drop its table and definition."""
        self.get_model(db, name)
        registry.invalidate(name)
        self.store.delete(db, name)


model_service = ModelService()
