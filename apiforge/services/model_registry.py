"""Model registry — the live dispatch table behind ``/data/{model}``.

Maps a model name to its resolved definition. One parameterized handler set
serves every model, so registering or invalidating an entry here is all it
takes to mount or unmount a model's routes.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from apiforge.core.exceptions import NotFoundOrForbidden
from apiforge.schemas.schemas import ModelDefinition, StoredModel
from apiforge.services.schema_store import SchemaStore, schema_store

logger = logging.getLogger("apiforge.registry")


@dataclass(frozen=True)
class ResolvedModel:
    name: str
    table_name: str
    definition: ModelDefinition
    degraded: bool = False
    degraded_reason: Optional[str] = None

    @classmethod
    def from_stored(cls, stored: StoredModel) -> "ResolvedModel":
        return cls(
            name=stored.name,
            table_name=stored.table_name,
            definition=stored.definition,
            degraded=stored.degraded,
            degraded_reason=stored.degraded_reason,
        )


class ModelRegistry:
    """Thread-safe name -> ResolvedModel map owned by the application."""

    def __init__(self, store: Optional[SchemaStore] = None):
        self.store = store or schema_store
        self._models: Dict[str, ResolvedModel] = {}
        self._lock = threading.RLock()

    def load(self, session_factory: Callable[[], Session]) -> int:
        """Register every stored model; returns how many were loaded."""
        db = session_factory()
        try:
            stored = self.store.get_all(db)
        finally:
            db.close()
        with self._lock:
            self._models = {}
            for model in stored:
                self.register(model)
        logger.info("Loaded %d existing models", len(stored))
        return len(stored)

    def register(self, stored: StoredModel) -> ResolvedModel:
        resolved = ResolvedModel.from_stored(stored)
        with self._lock:
            self._models[resolved.name] = resolved
        if resolved.degraded:
            logger.warning("Routes for %s mounted in degraded mode: %s", resolved.name, resolved.degraded_reason)
        else:
            logger.info("Routes mounted for %s -> /data/%s", resolved.name, resolved.name)
        return resolved

    def invalidate(self, name: str) -> bool:
        """Unmount a model; returns whether it was mounted."""
        with self._lock:
            removed = self._models.pop(name, None)
        if removed is not None:
            logger.info("Routes unmounted for %s", name)
        return removed is not None

    def get(self, name: str) -> Optional[ResolvedModel]:
        with self._lock:
            return self._models.get(name)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._models)

    def resolve(self, db: Session, name: str) -> ResolvedModel:
        """Look up a model for a request, falling back to the store on a cache miss.

        Raises:
            NotFoundOrForbidden: If no such model is defined.
        """
        resolved = self.get(name)
        if resolved is not None:
            return resolved
        stored = self.store.get_by_name(db, name)
        if stored is None:
            raise NotFoundOrForbidden(f"Model '{name}' not found")
        return self.register(stored)
