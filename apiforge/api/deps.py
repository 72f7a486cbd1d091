"""Shared router helpers: the registry dependency and the response envelope."""

from typing import Any, Dict

from fastapi import Request

from apiforge.services.model_registry import ModelRegistry


def get_registry(request: Request) -> ModelRegistry:
    """The application's model registry."""
    return request.app.state.registry


def ok(data: Any = None, **metadata: Any) -> Dict[str, Any]:
    """Success envelope: ``{"success": True, "data": ..., **metadata}``."""
    return {"success": True, "data": data, **metadata}


def fail(error: str, **metadata: Any) -> Dict[str, Any]:
    return {"success": False, "error": error, **metadata}
