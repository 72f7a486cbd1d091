"""File mirror — best-effort JSON snapshot of each model definition for audit.

Nothing in the engine reads these files back.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

from apiforge.core.config import settings
from apiforge.schemas.schemas import ModelDefinition

logger = logging.getLogger("apiforge.mirror")


class FileMirror:
    """Writes ``<models_dir>/<Name>.json`` snapshots."""

    def __init__(self, models_dir: Optional[str] = None):
        self.models_dir = models_dir or settings.MODELS_DIR

    def path_for(self, name: str) -> str:
        return os.path.join(self.models_dir, f"{name}.json")

    def write(self, definition: ModelDefinition) -> str:
        """Write the snapshot and return its path."""
        os.makedirs(self.models_dir, exist_ok=True)
        now = datetime.now(timezone.utc).isoformat()
        document = {
            **definition.to_document(),
            "tableName": definition.table_name,
            "createdAt": now,
            "updatedAt": now,
        }
        path = self.path_for(definition.name)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2)
        return path

    def remove(self, name: str) -> bool:
        """Remove a snapshot; a missing or undeletable file is only logged."""
        path = self.path_for(name)
        try:
            os.remove(path)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Could not remove mirror %s: %s", path, e)
            return False


file_mirror = FileMirror()
