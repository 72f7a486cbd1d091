"""Validation of operator-submitted model definitions."""

from typing import Dict, List, Optional

from apiforge.core.exceptions import ValidationError
from apiforge.schemas.schemas import CrudAction, ModelDefinition, ModelDefinitionIn
from apiforge.services.field_types import format_default
from apiforge.services.identifiers import validate_column_name, validate_model_name

WILDCARD_ACTION = "all"
ALLOWED_ACTIONS = frozenset([a.value for a in CrudAction] + [WILDCARD_ACTION])

DEFAULT_RBAC: Dict[str, List[str]] = {
    "Admin": ["create", "read", "update", "delete"],
    "Manager": ["create", "read", "update"],
    "Viewer": ["read"],
}


def effective_rbac(submitted: Optional[Dict[str, List[str]]]) -> Dict[str, List[str]]:
    """Merge submitted role grants over the defaults.

    A submitted role replaces its default entry; an empty list revokes the
    role entirely, so it is left out of the result and denied every action.
    """
    rbac = {role: list(actions) for role, actions in DEFAULT_RBAC.items()}
    for role, actions in (submitted or {}).items():
        if not isinstance(role, str) or not role.strip():
            raise ValidationError("RBAC role names must be non-empty strings")
        if not actions:
            rbac.pop(role, None)
            continue
        normalized: List[str] = []
        for action in actions:
            if action not in ALLOWED_ACTIONS:
                allowed = ", ".join(sorted(ALLOWED_ACTIONS))
                raise ValidationError(f"Unknown action '{action}' for role '{role}'. Allowed: {allowed}")
            if action not in normalized:
                normalized.append(action)
        rbac[role] = normalized
    return rbac


def validate_definition(payload: ModelDefinitionIn) -> ModelDefinition:
    """Check names, field kinds, defaults and rbac; return the definition to persist."""
    validate_model_name(payload.name)

    seen = set()
    for spec in payload.fields:
        validate_column_name(spec.name)
        key = spec.name.lower()
        if key in seen:
            raise ValidationError(f"Duplicate field name '{spec.name}'")
        seen.add(key)
        # raises on a default the column type cannot hold
        format_default(spec.default, spec.type)

    owner_field = payload.owner_field or None
    if owner_field is not None:
        validate_column_name(owner_field, what="Owner field")
        if owner_field.lower() in seen:
            raise ValidationError(f"Owner field '{owner_field}' collides with a declared field")

    return ModelDefinition(
        name=payload.name,
        fields=payload.fields,
        owner_field=owner_field,
        rbac=effective_rbac(payload.rbac),
    )
