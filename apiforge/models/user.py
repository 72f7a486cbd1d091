"""User model."""

from sqlalchemy import Column, Integer, String, DateTime, func
from apiforge.db.base import Base


class User(Base):
    """Platform user; ``role`` is the plain role name trusted by every generated route."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="Viewer")
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
