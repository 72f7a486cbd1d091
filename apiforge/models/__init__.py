"""Models package — import all models so ``Base.metadata`` knows every table."""

from apiforge.models.user import User
from apiforge.models.model_definition import ModelDefinitionRecord

__all__ = ["User", "ModelDefinitionRecord"]
