"""Stored model definitions."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from apiforge.db.base import Base


class ModelDefinitionRecord(Base):
    """One operator-defined data resource and the physical table backing it.

    ``definition_json`` is kept as text and parsed on read, so a corrupted
    value degrades the model instead of breaking the listing.
    """
    __tablename__ = "model_definitions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    table_name = Column(String(100), unique=True, nullable=False)
    definition_json = Column(Text, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    creator = relationship("User", lazy="joined")
