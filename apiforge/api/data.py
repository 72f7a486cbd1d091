"""Data API router — CRUD for every operator-defined model.

A single set of handlers serves all models; each request resolves its model
definition from the registry, so models appear and disappear without
touching the router.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from apiforge.api.deps import get_registry, ok
from apiforge.db.session import get_db
from apiforge.services.model_registry import ModelRegistry, ResolvedModel
from apiforge.services.permissions import Identity
from apiforge.services.record_service import record_service
from apiforge.core.security import get_current_identity

router = APIRouter(prefix="/data", tags=["data"])


def _meta(model: ResolvedModel, **extra: Any) -> Dict[str, Any]:
    if model.degraded:
        extra["degraded"] = True
    return extra


@router.get("/{model}")
async def list_records(
    model: str,
    db: Session = Depends(get_db),
    registry: ModelRegistry = Depends(get_registry),
    identity: Identity = Depends(get_current_identity),
):
    """List records, newest first."""
    resolved = registry.resolve(db, model)
    rows = record_service.list(db, resolved, identity)
    return ok(rows, **_meta(resolved, total=len(rows)))


@router.get("/{model}/{record_id}")
async def get_record(
    model: str,
    record_id: int,
    db: Session = Depends(get_db),
    registry: ModelRegistry = Depends(get_registry),
    identity: Identity = Depends(get_current_identity),
):
    """Get one record."""
    resolved = registry.resolve(db, model)
    return ok(record_service.get(db, resolved, record_id, identity), **_meta(resolved))


@router.post("/{model}", status_code=201)
async def create_record(
    model: str,
    body: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(get_db),
    registry: ModelRegistry = Depends(get_registry),
    identity: Identity = Depends(get_current_identity),
):
    """Create a record."""
    resolved = registry.resolve(db, model)
    row = record_service.create(db, resolved, body or {}, identity)
    return ok(row, **_meta(resolved, message=f"{resolved.name} created successfully"))


@router.put("/{model}/{record_id}")
async def update_record(
    model: str,
    record_id: int,
    body: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(get_db),
    registry: ModelRegistry = Depends(get_registry),
    identity: Identity = Depends(get_current_identity),
):
    """Update the given fields of a record."""
    resolved = registry.resolve(db, model)
    row = record_service.update(db, resolved, record_id, body or {}, identity)
    return ok(row, **_meta(resolved, message=f"{resolved.name} updated successfully"))


@router.delete("/{model}/{record_id}")
async def delete_record(
    model: str,
    record_id: int,
    db: Session = Depends(get_db),
    registry: ModelRegistry = Depends(get_registry),
    identity: Identity = Depends(get_current_identity),
):
    """Delete a record and return it."""
    resolved = registry.resolve(db, model)
    row = record_service.delete(db, resolved, record_id, identity)
    return ok(row, **_meta(resolved, message=f"{resolved.name} deleted successfully"))
