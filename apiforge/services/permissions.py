"""Permission evaluator — role/action authorization and row ownership."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from apiforge.core.exceptions import PermissionDenied

ADMIN_ROLE = "Admin"
WILDCARD_ACTION = "all"


@dataclass(frozen=True)
class Identity:
    """Caller as vouched for by the auth layer; ``role`` is trusted verbatim."""
    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def is_allowed(rbac: Dict[str, List[str]], role: str, action: str) -> bool:
    if role == ADMIN_ROLE:
        return True
    granted = rbac.get(role) or []
    return WILDCARD_ACTION in granted or action in granted


def authorize(rbac: Dict[str, List[str]], role: str, action: str) -> None:
    """Raise PermissionDenied unless ``role`` may perform ``action``."""
    if not is_allowed(rbac, role, action):
        raise PermissionDenied(f"Access denied. You need '{action}' permission for this resource.")


def ownership_filter(owner_field: Optional[str], identity: Identity) -> Optional[Tuple[str, int]]:
    """Column/value pair restricting rows to the caller, or ``None`` when unrestricted.

    Applies to every non-Admin role, whatever the role was granted.
    """
    if not owner_field or identity.is_admin:
        return None
    return owner_field, identity.id
