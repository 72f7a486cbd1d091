"""Pydantic schemas for API request/response serialization."""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


# ---- Auth ----
class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=4)

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., min_length=4, max_length=100)
    password: str = Field(..., min_length=6)

class UserOut(BaseModel):
    id: int
    username: str
    email: str
    role: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Optional[UserOut] = None


# ---- Model definitions ----
class FieldType(str, Enum):
    STRING = "string"
    TEXT = "text"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DATE = "date"
    JSON = "json"

class CrudAction(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class FieldSpec(BaseModel):
    name: str = Field(..., min_length=1)
    type: FieldType
    required: bool = False
    unique: bool = False
    default: Optional[Any] = None


class ModelDefinitionIn(BaseModel):
    """Operator submission; ``rbac`` entries are merged over the default role grants."""
    name: str = Field(..., min_length=1)
    fields: List[FieldSpec]
    owner_field: Optional[str] = Field(None, alias="ownerField")
    rbac: Optional[Dict[str, List[str]]] = None

    class Config:
        populate_by_name = True


class ModelDefinition(BaseModel):
    """A validated definition, as persisted and served."""
    name: str
    fields: List[FieldSpec] = []
    owner_field: Optional[str] = Field(None, alias="ownerField")
    rbac: Dict[str, List[str]] = {}

    class Config:
        populate_by_name = True

    @property
    def table_name(self) -> str:
        return self.name.lower() + "s"

    def to_document(self) -> Dict[str, Any]:
        """JSON-ready form with the public camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class StoredModel(BaseModel):
    id: int
    name: str
    table_name: str
    definition: ModelDefinition
    created_by: Optional[int] = None
    created_by_username: Optional[str] = None
    created_at: Optional[datetime] = None
    degraded: bool = False
    degraded_reason: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump(mode="json", exclude={"definition"})
        doc["definition"] = self.definition.to_document()
        return doc
