"""Model definitions API router."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from apiforge.api.deps import get_registry, ok
from apiforge.db.session import get_db
from apiforge.schemas.schemas import ModelDefinitionIn
from apiforge.services.model_registry import ModelRegistry
from apiforge.services.model_service import model_service
from apiforge.services.permissions import Identity
from apiforge.core.security import get_current_identity, require_admin, require_model_editor

logger = logging.getLogger("apiforge.models")

router = APIRouter(prefix="/models", tags=["models"])


@router.get("")
async def list_models(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """List all model definitions, newest first."""
    models = model_service.list_models(db)
    return ok([m.to_document() for m in models], total=len(models))


@router.post("", status_code=201)
async def create_model(
    body: ModelDefinitionIn,
    db: Session = Depends(get_db),
    registry: ModelRegistry = Depends(get_registry),
    identity: Identity = Depends(require_model_editor),
):
    """Create a model: its table, its stored definition and its data routes."""
    logger.info("Creating model %s (%d fields)", body.name, len(body.fields))
    result = model_service.create_model(db, registry, body, identity)
    return ok(
        result["model"].to_document(),
        message="Model created successfully",
        tableName=result["tableName"],
        filePath=result["filePath"],
    )


@router.get("/{name}")
async def get_model(
    name: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Get a model definition by name."""
    return ok(model_service.get_model(db, name).to_document())


@router.delete("/{name}")
async def delete_model(
    name: str,
    db: Session = Depends(get_db),
    registry: ModelRegistry = Depends(get_registry),
    identity: Identity = Depends(require_admin),
):
    """Delete a model, its table, its data and its routes (Admin only)."""
    model_service.delete_model(db, registry, name)
    return ok(None, message="Model deleted successfully")
